import os

# Settings are read once at import time, so the environment must be set first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_ENV"] = "testing"
os.environ["JWT_SECRET"] = "test-secret-key-with-enough-length-for-hs256"
os.environ.setdefault("EXPO_PUBLIC_API_URL", "http://testserver")

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from app.db_config import SessionLocal, engine
from app.models.models import Base, Budget, PasswordResetToken, User
from app.utils.utils import hash_password, utcnow


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user(db):
    user = User(username="alice", email="alice@example.com", password=hash_password("correct-horse"))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def make_reset_token(db, user):
    def _make(token: str, expires_in: timedelta) -> PasswordResetToken:
        record = PasswordResetToken(token=token, user_id=user.id, expires_at=utcnow() + expires_in)
        db.add(record)
        db.commit()
        return record
    return _make


@pytest.fixture
def budget(db, user):
    budget = Budget(user_id=user.id, name="Food", icon="coffee", amount=300, spent=0)
    db.add(budget)
    db.commit()
    db.refresh(budget)
    return budget


@pytest.fixture
def client():
    from app.main import app
    return TestClient(app)


@pytest.fixture
def auth_headers(client, user):
    response = client.post("/api/user/login", json={"email": "alice@example.com", "password": "correct-horse"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}
