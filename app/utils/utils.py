import secrets
from datetime import datetime, timezone

import bcrypt


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns without timezone are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def generate_reset_token() -> str:
    return secrets.token_urlsafe(32)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # malformed hash stored for this user
        return False


def round_amount(value: float) -> float:
    return round(float(value or 0), 2)
