"""Password Reset Token Repository Module"""

from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from app.models.models import PasswordResetToken
from app.repositories.base_repository import BaseRepository


class PasswordResetTokenRepository(BaseRepository[PasswordResetToken]):

    def __init__(self, db_session: Session):
        super().__init__(db_session, PasswordResetToken)

    def create(self, user_id: int, token: str, expires_at: datetime) -> PasswordResetToken:
        return self.add(PasswordResetToken(user_id=user_id, token=token, expires_at=expires_at))

    def get_valid(self, token: str, now: datetime) -> Optional[PasswordResetToken]:
        """Return the token only while it has not expired."""
        return self.db.query(PasswordResetToken).filter(
            PasswordResetToken.token == token,
            PasswordResetToken.expires_at >= now
        ).first()

    def delete_expired(self, now: datetime) -> int:
        """
        Delete every token whose expiry is strictly before ``now``.

        Runs as one bulk DELETE so the predicate is evaluated by the database;
        concurrent calls are safe and a repeated call deletes nothing.
        """
        try:
            deleted = (
                self.db.query(PasswordResetToken)
                .filter(PasswordResetToken.expires_at < now)
                .delete(synchronize_session=False)
            )
            self.db.commit()
            return deleted
        except Exception as e:
            self.db.rollback()
            raise e

    def delete_for_user(self, user_id: int) -> int:
        try:
            deleted = (
                self.db.query(PasswordResetToken)
                .filter(PasswordResetToken.user_id == user_id)
                .delete(synchronize_session=False)
            )
            self.db.commit()
            return deleted
        except Exception as e:
            self.db.rollback()
            raise e
