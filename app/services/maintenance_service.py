"""
Maintenance Service

Bulk operations used by the maintenance scripts: seeding demo transactions
and wiping all transactions. Both leave every budget's ``spent`` consistent
with the transactions that remain.
"""

import logging
import random
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from app.constants.category_icons import SEED_CATEGORIES
from app.db_config import SessionLocal
from app.models.models import Transaction, TransactionType
from app.repositories import BudgetRepository, TransactionRepository, UserRepository
from app.utils.utils import utcnow

logger = logging.getLogger(__name__)

TRANSACTION_NAMES = [
    "Coffee", "Lunch", "Dinner", "Uber ride", "Gas", "Movie tickets",
    "Netflix subscription", "Grocery shopping", "Online shopping", "Electric bill",
    "Water bill", "Internet bill", "Doctor visit", "Pharmacy", "Books",
    "Course subscription", "Restaurant", "Fast food", "Taxi", "Bus ticket",
    "Train ticket", "Concert tickets", "Gaming", "Clothes", "Shoes", "Rent",
    "Insurance", "Gym membership", "Phone bill", "Parking",
]

SEED_COUNT = 100
SEED_DAYS_BACK = 90
MIN_AMOUNT = 5
MAX_AMOUNT = 200


class MaintenanceService:
    """
    Usage:
        with MaintenanceService() as service:
            service.seed_transactions()
    """

    def __init__(self, db: Optional[Session] = None, rng: Optional[random.Random] = None):
        self._db = db
        self._should_close_db = False

        if self._db is None:
            self._db = SessionLocal()
            self._should_close_db = True

        self.rng = rng or random.Random()
        self.users = UserRepository(self._db)
        self.budgets = BudgetRepository(self._db)
        self.transactions = TransactionRepository(self._db)

    @property
    def db(self) -> Session:
        return self._db

    def close(self) -> None:
        if self._should_close_db:
            self.db.close()

    def __enter__(self) -> "MaintenanceService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def seed_transactions(self, count: int = SEED_COUNT) -> int:
        """
        Insert ``count`` random expenses for the first user, spread over their budgets.

        Returns the number of transactions created; 0 when there is no user or
        the user has no budgets.
        """
        logger.info("Starting to seed transactions...")

        user = self.users.get_first()
        if user is None:
            logger.error("No user found in database. Please create a user first.")
            return 0
        logger.info(f"Found user: {user.username} ({user.email})")

        budgets = self.budgets.list_for_user(user.id)
        if not budgets:
            logger.error("No budgets found for this user. Please create budgets first.")
            return 0
        logger.info(f"Found {len(budgets)} budgets")

        now = utcnow()
        seeded = []
        for i in range(count):
            category = self.rng.choice(SEED_CATEGORIES)
            seeded.append(Transaction(
                user_id=user.id,
                budget_id=self.rng.choice(budgets).id,
                name=self.rng.choice(TRANSACTION_NAMES),
                amount=round(self.rng.uniform(MIN_AMOUNT, MAX_AMOUNT), 2),
                type=TransactionType.EXPENSE,
                category=category["name"],
                icon=category["icon"],
                description=f"Transaction #{i + 1}",
                date=now - timedelta(days=self.rng.randrange(SEED_DAYS_BACK))
            ))

        created = self.transactions.add_all(seeded)
        logger.info(f"Successfully created {created} transactions")

        logger.info("Updating budget spent amounts...")
        for budget in budgets:
            self.budgets.recompute_spent(budget)
        logger.info("Seeding completed successfully")
        return created

    def delete_all_transactions(self) -> int:
        logger.info("Deleting all transactions...")

        count_before = self.transactions.count()
        logger.info(f"Transactions before deletion: {count_before}")
        if count_before == 0:
            logger.info("No transactions to delete.")
            return 0

        deleted = self.transactions.delete_all()
        logger.info(f"Deleted {deleted} transactions.")

        self.budgets.reset_all_spent()
        logger.info("Reset spent amounts for all budgets to zero.")
        return deleted
