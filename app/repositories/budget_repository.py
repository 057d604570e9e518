"""Budget Repository Module"""

from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.models import Budget, Transaction, TransactionType
from app.repositories.base_repository import BaseRepository
from app.utils.utils import round_amount


class BudgetRepository(BaseRepository[Budget]):

    def __init__(self, db_session: Session):
        super().__init__(db_session, Budget)

    def list_for_user(self, user_id: int) -> List[Budget]:
        return (
            self.db.query(Budget)
            .filter(Budget.user_id == user_id)
            .order_by(Budget.id)
            .all()
        )

    def get_for_user(self, budget_id: int, user_id: int) -> Optional[Budget]:
        return self.db.query(Budget).filter(
            Budget.id == budget_id,
            Budget.user_id == user_id
        ).first()

    def update_budget(self, budget: Budget, data: dict) -> Budget:
        for key, value in data.items():
            if hasattr(budget, key) and value is not None:
                setattr(budget, key, value)
        return self.update(budget)

    def recompute_spent(self, budget: Budget) -> Budget:
        """Set ``spent`` to the sum of the budget's EXPENSE transactions."""
        total = (
            self.db.query(func.coalesce(func.sum(Transaction.amount), 0))
            .filter(
                Transaction.budget_id == budget.id,
                Transaction.type == TransactionType.EXPENSE
            )
            .scalar()
        )
        budget.spent = round_amount(total)
        return self.update(budget)

    def reset_all_spent(self) -> int:
        try:
            updated = self.db.query(Budget).update({Budget.spent: 0}, synchronize_session=False)
            self.db.commit()
            return updated
        except Exception as e:
            self.db.rollback()
            raise e
