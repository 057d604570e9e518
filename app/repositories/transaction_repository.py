"""Transaction Repository Module"""

from typing import Optional, Dict, Any
from sqlalchemy.orm import Session

from app.models.models import Transaction
from app.repositories.base_repository import BaseRepository


class TransactionRepository(BaseRepository[Transaction]):

    def __init__(self, db_session: Session):
        super().__init__(db_session, Transaction)

    def get_for_user(self, transaction_id: int, user_id: int) -> Optional[Transaction]:
        return self.db.query(Transaction).filter(
            Transaction.id == transaction_id,
            Transaction.user_id == user_id
        ).first()

    def list_for_user(self, user_id: int, limit: int, offset: int) -> Dict[str, Any]:
        return self.get_paginated(
            filters={"user_id": user_id},
            limit=limit,
            offset=offset,
            order_by=(Transaction.date.desc(), Transaction.id.desc())
        )

    def update_transaction(self, transaction: Transaction, data: dict) -> Transaction:
        for key, value in data.items():
            if hasattr(transaction, key):
                setattr(transaction, key, value)
        return self.update(transaction)

    def delete_all(self) -> int:
        try:
            deleted = self.db.query(Transaction).delete(synchronize_session=False)
            self.db.commit()
            return deleted
        except Exception as e:
            self.db.rollback()
            raise e
