import asyncio
import logging
import signal
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db_config import engine, get_db, SessionLocal
from app.models import models
from app.routes.routes import router
from app.services.cron_service import CleanupScheduler
from app.utils.exception_handlers import register_exception_handlers
from app.middleware.request_id_middleware import RequestIDMiddleware

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

UNRETRIEVED_EXCEPTION_MESSAGES = (
    "Task exception was never retrieved",
    "Future exception was never retrieved",
)


def request_graceful_shutdown(reason: str) -> None:
    """Ask the ASGI server to run the normal shutdown path and exit with status 0."""
    logger.info(f"Received {reason}. Shutting down...")
    signal.raise_signal(signal.SIGTERM)


def handle_loop_exception(loop: asyncio.AbstractEventLoop, context: dict) -> None:
    """An exception nobody awaited is fatal; everything else gets the default handling."""
    message = context.get("message", "")
    if "exception" in context and message.startswith(UNRETRIEVED_EXCEPTION_MESSAGES):
        logger.warning(f"Unhandled Rejection: {context['exception']!r}")
        request_graceful_shutdown("unhandledRejection")
        return
    loop.default_exception_handler(context)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events"""
    models.Base.metadata.create_all(bind=engine)

    asyncio.get_running_loop().set_exception_handler(handle_loop_exception)

    cleanup_scheduler = CleanupScheduler(AsyncIOScheduler(), SessionLocal, settings.CLEANUP_INTERVAL_SECONDS)
    app.state.cleanup_scheduler = cleanup_scheduler

    if settings.VERCEL:
        logger.info("Serverless hosting detected; cleanup job not started")
    else:
        logger.info("Starting cleanup job...")
        await cleanup_scheduler.start()

    yield

    try:
        cleanup_scheduler.stop()
    except Exception as e:
        logger.warning(f"Error clearing cleanup interval: {e}")

    try:
        engine.dispose()
    except Exception as e:
        logger.warning(f"Error disconnecting database: {e}")

    logger.info("Shutdown complete")


# Create FastAPI app
app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)

# Add Request ID middleware (should be added before other middlewares)
app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register centralized exception handlers
register_exception_handlers(app)

# Include routers
app.include_router(router, prefix="/api", tags=["api"])


@app.get("/api/health")
async def health_check(request: Request, db: Session = Depends(get_db)):
    """Health check endpoint"""
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"API health check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={"status": "error", "database": "disconnected", "timestamp": timestamp}
        )

    cleanup_scheduler = getattr(request.app.state, "cleanup_scheduler", None)
    return {
        "status": "ok",
        "database": "connected",
        "version": settings.APP_VERSION,
        "timestamp": timestamp,
        "cleanup": cleanup_scheduler.status() if cleanup_scheduler else None
    }


def exit_cleanly(signum, frame) -> None:
    sys.exit(0)


def run():
    """Start the HTTP listener; serverless hosting brings its own."""
    if settings.VERCEL:
        logger.info("Serverless hosting detected; not starting HTTP listener")
        return
    # uvicorn re-raises SIGTERM against this handler once shutdown has finished
    signal.signal(signal.SIGTERM, exit_cleanly)
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT, reload=settings.is_development)


if __name__ == "__main__":
    run()
