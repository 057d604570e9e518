import asyncio
import threading
from datetime import timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from app.db_config import SessionLocal
from app.models.models import PasswordResetToken
from app.services.cron_service import CleanupScheduler, SchedulerState


def token_names(db):
    db.expire_all()
    return sorted(t.token for t in db.query(PasswordResetToken).all())


def new_cleanup(interval_seconds=3600):
    return CleanupScheduler(AsyncIOScheduler(), SessionLocal, interval_seconds)


def test_start_runs_an_immediate_pass_and_arms_the_timer(db, make_reset_token):
    make_reset_token("stale", timedelta(hours=-1))
    make_reset_token("fresh", timedelta(hours=1))
    cleanup = new_cleanup()

    async def scenario():
        await cleanup.start()
        try:
            assert cleanup.state is SchedulerState.RUNNING
            assert cleanup.scheduler.get_job(cleanup.job.job_id) is not None
            assert cleanup.job.passes_run == 1
            assert cleanup.job.last_deleted == 1
        finally:
            cleanup.stop()

    asyncio.run(scenario())
    assert token_names(db) == ["fresh"]


def test_stop_before_first_tick_leaves_only_the_initial_pass(db):
    cleanup = new_cleanup(interval_seconds=3600)

    async def scenario():
        await cleanup.start()
        await asyncio.sleep(0.05)
        cleanup.stop()
        await asyncio.sleep(0.05)

    asyncio.run(scenario())

    assert cleanup.job.passes_run == 1
    assert cleanup.state is SchedulerState.STOPPED
    assert cleanup.scheduler.get_jobs() == []


def test_tick_with_nothing_expired_keeps_timer_armed(db, make_reset_token):
    make_reset_token("fresh", timedelta(hours=1))
    cleanup = new_cleanup()

    async def scenario():
        await cleanup.start()
        try:
            deleted = await cleanup.job.execute()
            assert deleted == 0
            assert cleanup.is_running
            assert cleanup.scheduler.get_job(cleanup.job.job_id) is not None
        finally:
            cleanup.stop()

    asyncio.run(scenario())
    assert cleanup.job.passes_run == 2
    assert token_names(db) == ["fresh"]


def test_timer_fires_repeatedly(db):
    cleanup = new_cleanup(interval_seconds=0.1)

    async def scenario():
        await cleanup.start()
        await asyncio.sleep(0.6)
        cleanup.stop()

    asyncio.run(scenario())

    assert cleanup.job.passes_run >= 3


def test_tick_purges_tokens_that_expired_after_start(db, make_reset_token):
    cleanup = new_cleanup()

    async def scenario():
        await cleanup.start()
        try:
            make_reset_token("late", timedelta(seconds=-1))
            assert await cleanup.job.execute() == 1
        finally:
            cleanup.stop()

    asyncio.run(scenario())
    assert token_names(db) == []


def test_start_and_stop_are_idempotent(db):
    cleanup = new_cleanup()

    async def scenario():
        await cleanup.start()
        await cleanup.start()
        assert cleanup.job.passes_run == 1
        cleanup.stop()
        cleanup.stop()

    asyncio.run(scenario())
    assert cleanup.state is SchedulerState.STOPPED


def test_stop_without_start_is_a_no_op():
    cleanup = new_cleanup()

    cleanup.stop()

    assert cleanup.state is SchedulerState.STOPPED
    assert cleanup.job.passes_run == 0


def test_overlapping_ticks_are_coalesced():
    cleanup = new_cleanup()

    cleanup.job.register()
    job = cleanup.scheduler.get_job(cleanup.job.job_id)

    assert job.max_instances == 1
    assert job.coalesce is True


def test_status_reports_state_and_last_result(db, make_reset_token):
    make_reset_token("stale", timedelta(minutes=-1))
    cleanup = new_cleanup(interval_seconds=60)

    async def scenario():
        await cleanup.start()
        try:
            return cleanup.status()
        finally:
            cleanup.stop()

    status = asyncio.run(scenario())

    assert status["state"] == "running"
    assert status["interval_seconds"] == 60
    assert status["passes_run"] == 1
    assert status["last_deleted"] == 1
    assert status["active_jobs"] == ["ExpiredResetTokenCleanupCron"]


def test_pass_in_flight_tracks_a_running_pass(db):
    entered, release = threading.Event(), threading.Event()

    def slow_session():
        entered.set()
        release.wait(5)
        return SessionLocal()

    cleanup = CleanupScheduler(AsyncIOScheduler(), slow_session, 3600)

    async def scenario():
        running = asyncio.ensure_future(cleanup.job.execute())
        while not entered.is_set():
            await asyncio.sleep(0.01)
        in_flight = cleanup.pass_in_flight
        release.set()
        await running
        return in_flight

    assert asyncio.run(scenario()) is True
    assert cleanup.pass_in_flight is False
    assert cleanup.job.passes_run == 1
