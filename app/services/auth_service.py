import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.models import User
from app.repositories import UserRepository, PasswordResetTokenRepository
from app.services.jwt_service import JwtService
from app.utils.exceptions import AuthenticationError, BusinessLogicError, ConflictError
from app.utils.utils import generate_reset_token, hash_password, utcnow, verify_password

logger = logging.getLogger(__name__)


class AuthService:
    """Registration, login and the password reset flow."""

    def __init__(self, db: Session, jwt_service: Optional[JwtService] = None):
        self.db = db
        self.users = UserRepository(db)
        self.reset_tokens = PasswordResetTokenRepository(db)
        self.jwt_service = jwt_service or JwtService()

    def register(self, username: str, email: str, password: str) -> dict:
        if self.users.exists_with(email, username):
            raise ConflictError("A user with this email or username already exists")

        user = self.users.add(User(
            username=username,
            email=email.lower(),
            password=hash_password(password)
        ))
        logger.info(f"Registered user {user.id}")
        return self._session_for(user)

    def login(self, email: str, password: str) -> dict:
        user = self.users.get_by_email(email)
        if user is None or not verify_password(password, user.password):
            raise AuthenticationError("Invalid email or password")
        return self._session_for(user)

    def request_password_reset(self, email: str) -> Optional[str]:
        """
        Issue a reset token for ``email``.

        Returns the token string, or None when no such user exists. Callers
        must answer both cases the same way so emails cannot be enumerated.
        """
        user = self.users.get_by_email(email)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return None

        expires_at = utcnow() + timedelta(minutes=settings.PASSWORD_RESET_TOKEN_MINUTES)
        record = self.reset_tokens.create(user.id, generate_reset_token(), expires_at)
        logger.info(f"Issued password reset token for user {user.id}, expires at {expires_at.isoformat()}")
        return record.token

    def reset_password(self, token: str, new_password: str) -> None:
        record = self.reset_tokens.get_valid(token, utcnow())
        if record is None:
            raise BusinessLogicError("Invalid or expired password reset token")

        user = self.users.get_by_id(record.user_id)
        self.users.update_password(user, hash_password(new_password))
        # every outstanding token for the user is consumed, not just this one
        self.reset_tokens.delete_for_user(user.id)
        logger.info(f"Password reset completed for user {user.id}")

    def _session_for(self, user: User) -> dict:
        return {
            "token": self.jwt_service.create_token(user.id, user.email),
            "user": {"id": user.id, "username": user.username, "email": user.email}
        }
