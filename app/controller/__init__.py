from app.controller.user_controller import UserController
from app.controller.budget_controller import BudgetController
from app.controller.transaction_controller import TransactionController

__all__ = [
    "UserController",
    "BudgetController",
    "TransactionController",
]
