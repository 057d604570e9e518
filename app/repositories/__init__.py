"""
Repositories Package - Repository Pattern for data access.
"""

from app.repositories.base_repository import BaseRepository
from app.repositories.user_repository import UserRepository
from app.repositories.budget_repository import BudgetRepository
from app.repositories.transaction_repository import TransactionRepository
from app.repositories.password_reset_token_repository import PasswordResetTokenRepository

__all__ = [
    'BaseRepository',
    'UserRepository',
    'BudgetRepository',
    'TransactionRepository',
    'PasswordResetTokenRepository',
]
