import asyncio
import enum
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db_config import SessionLocal
from app.repositories import PasswordResetTokenRepository
from app.utils.utils import utcnow

logger = logging.getLogger(__name__)


def delete_expired_reset_tokens(
    session_factory: Callable[[], Session] = SessionLocal,
    now: Optional[datetime] = None
) -> Optional[int]:
    """
    One cleanup pass: delete every password reset token that expired before ``now``.

    Returns the number of deleted rows, or None if the store failed. Failures
    are logged and swallowed so the next tick simply tries again.
    """
    db = session_factory()
    try:
        deleted = PasswordResetTokenRepository(db).delete_expired(now or utcnow())
        logger.info(f"Deleted {deleted} expired password reset tokens.")
        return deleted
    except Exception as e:
        logger.warning(f"Failed to delete expired password reset tokens: {e}")
        return None
    finally:
        db.close()


class BaseCronJob(ABC):
    """Base class for all cron jobs"""

    # one running instance at a time; a tick that finds the previous run busy is skipped
    max_instances = 1
    coalesce = True

    def __init__(self, scheduler: AsyncIOScheduler):
        self.scheduler = scheduler
        self.job_id = self.__class__.__name__

    @abstractmethod
    async def execute(self):
        """Execute the cron job logic"""
        pass

    @abstractmethod
    def get_trigger(self):
        """Return the trigger configuration for the job"""
        pass

    def register(self):
        """Register the cron job with the scheduler"""
        trigger = self.get_trigger()
        self.scheduler.add_job(
            self.execute,
            trigger=trigger,
            id=self.job_id,
            name=self.job_id,
            replace_existing=True,
            max_instances=self.max_instances,
            coalesce=self.coalesce
        )
        logger.info(f"Registered cron job: {self.job_id}")

    def unregister(self):
        try:
            self.scheduler.remove_job(self.job_id)
            logger.info(f"Removed cron job: {self.job_id}")
        except JobLookupError:
            pass


class ExpiredResetTokenCleanupCron(BaseCronJob):
    """Purges expired password reset tokens on a fixed interval."""

    def __init__(
        self,
        scheduler: AsyncIOScheduler,
        session_factory: Callable[[], Session] = SessionLocal,
        interval_seconds: Optional[float] = None
    ):
        super().__init__(scheduler)
        self.session_factory = session_factory
        self.interval_seconds = interval_seconds or settings.CLEANUP_INTERVAL_SECONDS
        self.passes_run = 0
        self.passes_in_flight = 0
        self.last_deleted: Optional[int] = None

    def get_trigger(self):
        return IntervalTrigger(seconds=self.interval_seconds)

    async def execute(self) -> Optional[int]:
        self.passes_in_flight += 1
        try:
            # the delete is a blocking DB call; keep it off the event loop
            loop = asyncio.get_running_loop()
            deleted = await loop.run_in_executor(
                None,
                lambda: delete_expired_reset_tokens(self.session_factory)
            )
        finally:
            self.passes_in_flight -= 1
            self.passes_run += 1
        self.last_deleted = deleted
        return deleted


class SchedulerState(str, enum.Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class CleanupScheduler:
    """
    Lifecycle handle for the expired reset token cleanup.

    ``start()`` performs one pass immediately, then arms the repeating job.
    ``stop()`` removes the job; a pass already running is left to finish.
    Both calls are idempotent.
    """

    def __init__(
        self,
        scheduler: Optional[AsyncIOScheduler] = None,
        session_factory: Callable[[], Session] = SessionLocal,
        interval_seconds: Optional[float] = None
    ):
        self.scheduler = scheduler or AsyncIOScheduler()
        self.job = ExpiredResetTokenCleanupCron(self.scheduler, session_factory, interval_seconds)
        self._state = SchedulerState.STOPPED

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is SchedulerState.RUNNING

    @property
    def pass_in_flight(self) -> bool:
        return self.job.passes_in_flight > 0

    async def start(self) -> None:
        if self.is_running:
            logger.info("Cleanup job already running")
            return

        try:
            # stale tokens are purged even if the process was down past an interval
            await self.job.execute()

            self.job.register()
            if not self.scheduler.running:
                self.scheduler.start()
            self._state = SchedulerState.RUNNING
            logger.info("Started expired password reset token cleanup job.")
        except Exception as e:
            logger.warning(f"Failed to start cleanup job: {e}")

    def stop(self) -> None:
        if not self.is_running:
            return

        self.job.unregister()
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        self._state = SchedulerState.STOPPED
        logger.info("Stopped expired password reset token cleanup job.")

    def status(self) -> dict:
        return {
            "state": self._state.value,
            "interval_seconds": self.job.interval_seconds,
            "passes_run": self.job.passes_run,
            "last_deleted": self.job.last_deleted,
            "active_jobs": [job.id for job in self.scheduler.get_jobs()]
        }
