"""User Repository Module"""

from typing import Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models.models import User
from app.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository[User]):

    def __init__(self, db_session: Session):
        super().__init__(db_session, User)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.lower()).first()

    def get_first(self) -> Optional[User]:
        return self.db.query(User).order_by(User.id).first()

    def exists_with(self, email: str, username: str) -> bool:
        return self.db.query(User).filter(
            or_(User.email == email.lower(), User.username == username)
        ).first() is not None

    def update_password(self, user: User, password_hash: str) -> User:
        user.password = password_hash
        return self.update(user)
