import logging
from datetime import timedelta

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db_config import SessionLocal
from app.models.models import PasswordResetToken
from app.repositories import PasswordResetTokenRepository
from app.services.cron_service import delete_expired_reset_tokens
from app.utils.utils import utcnow


def remaining_tokens(db):
    db.expire_all()
    return sorted(t.token for t in db.query(PasswordResetToken).all())


def test_pass_deletes_only_expired_tokens(db, make_reset_token, caplog):
    caplog.set_level(logging.INFO)
    make_reset_token("A", timedelta(hours=-1))
    make_reset_token("B", timedelta(hours=1))

    deleted = delete_expired_reset_tokens(SessionLocal)

    assert deleted == 1
    assert remaining_tokens(db) == ["B"]
    assert "Deleted 1 expired password reset tokens." in caplog.text


def test_second_pass_deletes_nothing(db, make_reset_token):
    make_reset_token("A", timedelta(minutes=-5))

    assert delete_expired_reset_tokens(SessionLocal) == 1
    assert delete_expired_reset_tokens(SessionLocal) == 0


def test_future_tokens_survive_repeated_passes(db, make_reset_token):
    make_reset_token("soon", timedelta(seconds=30))
    make_reset_token("later", timedelta(days=1))

    for _ in range(3):
        assert delete_expired_reset_tokens(SessionLocal) == 0

    assert remaining_tokens(db) == ["later", "soon"]


def test_expiry_boundary_is_strict(db, make_reset_token):
    record = make_reset_token("edge", timedelta(minutes=10))

    assert PasswordResetTokenRepository(db).delete_expired(record.expires_at) == 0
    assert remaining_tokens(db) == ["edge"]


def test_explicit_now_is_used(db, make_reset_token):
    make_reset_token("A", timedelta(hours=1))

    deleted = delete_expired_reset_tokens(SessionLocal, now=utcnow() + timedelta(hours=2))

    assert deleted == 1
    assert remaining_tokens(db) == []


def test_storage_failure_is_logged_not_raised(caplog):
    # no tables exist on this engine, so the DELETE fails
    broken_engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    broken_sessions = sessionmaker(bind=broken_engine)

    with caplog.at_level(logging.WARNING):
        result = delete_expired_reset_tokens(broken_sessions)

    assert result is None
    assert "Failed to delete expired password reset tokens" in caplog.text
