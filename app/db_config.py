from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings


def _engine_kwargs() -> dict:
    # SQLite engines share one connection across the scheduler thread and requests
    if settings.is_sqlite:
        from sqlalchemy.pool import StaticPool
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    return {"pool_size": settings.DB_POOL_SIZE, "max_overflow": settings.DB_MAX_OVERFLOW}


engine = create_engine(settings.DATABASE_URL, **_engine_kwargs())
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
