from typing import List

from sqlalchemy.orm import Session

from app.models.models import Budget
from app.models.scheme import BudgetCreate
from app.repositories import BudgetRepository
from app.utils.exceptions import NotFoundError


class BudgetService:

    def __init__(self, db: Session):
        self.db = db
        self.budgets = BudgetRepository(db)

    def list_budgets(self, user_id: int) -> List[Budget]:
        return self.budgets.list_for_user(user_id)

    def get_budget(self, budget_id: int, user_id: int) -> Budget:
        budget = self.budgets.get_for_user(budget_id, user_id)
        if budget is None:
            raise NotFoundError("Budget", str(budget_id))
        return budget

    def create_budget(self, payload: BudgetCreate, user_id: int) -> Budget:
        return self.budgets.add(Budget(
            user_id=user_id,
            name=payload.name,
            amount=payload.amount,
            icon=payload.icon,
            spent=0
        ))

    def update_budget(self, budget_id: int, data: dict, user_id: int) -> Budget:
        budget = self.get_budget(budget_id, user_id)
        return self.budgets.update_budget(budget, data)

    def delete_budget(self, budget_id: int, user_id: int) -> None:
        # transactions keep existing with budget_id set to NULL
        budget = self.get_budget(budget_id, user_id)
        for transaction in budget.transactions:
            transaction.budget_id = None
        self.budgets.delete(budget)
