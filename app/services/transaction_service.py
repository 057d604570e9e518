import logging
from typing import Any, Dict, Optional, Set

from sqlalchemy.orm import Session

from app.models.models import Transaction
from app.models.scheme import TransactionCreate
from app.repositories import BudgetRepository, TransactionRepository
from app.utils.exceptions import NotFoundError
from app.utils.utils import utcnow

logger = logging.getLogger(__name__)


class TransactionService:
    """
    CRUD for transactions.

    Budget ``spent`` is not maintained by a trigger: every write recomputes it
    for each budget the write touched.
    """

    def __init__(self, db: Session):
        self.db = db
        self.transactions = TransactionRepository(db)
        self.budgets = BudgetRepository(db)

    def list_transactions(self, user_id: int, limit: int, offset: int) -> Dict[str, Any]:
        return self.transactions.list_for_user(user_id, limit, offset)

    def get_transaction(self, transaction_id: int, user_id: int) -> Transaction:
        transaction = self.transactions.get_for_user(transaction_id, user_id)
        if transaction is None:
            raise NotFoundError("Transaction", str(transaction_id))
        return transaction

    def create_transaction(self, payload: TransactionCreate, user_id: int) -> Transaction:
        self._check_budget(payload.budget_id, user_id)

        transaction = self.transactions.add(Transaction(
            user_id=user_id,
            budget_id=payload.budget_id,
            name=payload.name,
            amount=payload.amount,
            type=payload.type,
            category=payload.category,
            icon=payload.icon,
            description=payload.description,
            date=payload.date or utcnow()
        ))
        self._recompute({payload.budget_id}, user_id)
        return transaction

    def update_transaction(self, transaction_id: int, data: dict, user_id: int) -> Transaction:
        transaction = self.get_transaction(transaction_id, user_id)
        affected = {transaction.budget_id}

        if "budget_id" in data:
            self._check_budget(data["budget_id"], user_id)
            affected.add(data["budget_id"])

        # None is only meaningful for budget_id; other fields keep their value
        changes = {k: v for k, v in data.items() if v is not None or k == "budget_id"}
        transaction = self.transactions.update_transaction(transaction, changes)
        self._recompute(affected, user_id)
        return transaction

    def delete_transaction(self, transaction_id: int, user_id: int) -> None:
        transaction = self.get_transaction(transaction_id, user_id)
        budget_id = transaction.budget_id
        self.transactions.delete(transaction)
        self._recompute({budget_id}, user_id)

    def _check_budget(self, budget_id: Optional[int], user_id: int) -> None:
        if budget_id is not None and self.budgets.get_for_user(budget_id, user_id) is None:
            raise NotFoundError("Budget", str(budget_id))

    def _recompute(self, budget_ids: Set[Optional[int]], user_id: int) -> None:
        for budget_id in budget_ids:
            if budget_id is None:
                continue
            budget = self.budgets.get_for_user(budget_id, user_id)
            if budget is not None:
                self.budgets.recompute_spent(budget)
                logger.debug(f"Recomputed spent for budget {budget_id}: {budget.spent}")
