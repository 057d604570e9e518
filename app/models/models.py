import enum

from sqlalchemy import (
    Column, Integer, String, Float, Enum, Text, ForeignKey, DateTime, Index, func
)
from sqlalchemy.orm import DeclarativeBase, relationship

# ================================================================================================
# BASE CLASSES AND MIXINS
# ================================================================================================

class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models"""
    pass

class TimestampMixin:
    """Mixin class for common timestamp fields"""
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

# ================================================================================================
# ENUMS
# ================================================================================================

class TransactionType(str, enum.Enum):
    """Direction of a transaction"""
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"

# ================================================================================================
# USER MANAGEMENT MODELS
# ================================================================================================

class User(Base, TimestampMixin):
    """User model for authentication and profile management"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String, unique=True, nullable=False, index=True)

    # bcrypt hash, never the raw password
    password = Column(String, nullable=False)

    # Relationships
    budgets = relationship("Budget", back_populates="user", cascade="all, delete-orphan")
    transactions = relationship("Transaction", back_populates="user", cascade="all, delete-orphan")
    reset_tokens = relationship("PasswordResetToken", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"

class PasswordResetToken(Base):
    """Single use token issued by the forgot-password flow"""
    __tablename__ = "password_reset_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    token = Column(String(128), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # naive UTC, compared against utcnow() by the cleanup job
    expires_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="reset_tokens")

    def __repr__(self):
        return f"<PasswordResetToken(id={self.id}, user_id={self.user_id}, expires_at={self.expires_at})>"

# ================================================================================================
# BUDGETING MODELS
# ================================================================================================

class Budget(Base, TimestampMixin):
    """Spending limit for a category of transactions"""
    __tablename__ = "budgets"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(100), nullable=False)
    icon = Column(String(50), nullable=True)
    amount = Column(Float, nullable=False)
    # Sum of EXPENSE transaction amounts, refreshed by BudgetRepository.recompute_spent
    spent = Column(Float, nullable=False, default=0)

    # Relationships
    user = relationship("User", back_populates="budgets")
    transactions = relationship("Transaction", back_populates="budget")

    def __repr__(self):
        return f"<Budget(id={self.id}, name={self.name}, amount={self.amount}, spent={self.spent})>"

class Transaction(Base):
    """Single income or expense entry"""
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    budget_id = Column(Integer, ForeignKey("budgets.id", ondelete="SET NULL"), nullable=True, index=True)

    name = Column(String(100), nullable=False)
    amount = Column(Float, nullable=False)
    type = Column(Enum(TransactionType), nullable=False, default=TransactionType.EXPENSE)
    category = Column(String(50), nullable=True, index=True)
    icon = Column(String(50), nullable=True)
    description = Column(Text, nullable=True)
    date = Column(DateTime, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="transactions")
    budget = relationship("Budget", back_populates="transactions")

    __table_args__ = (
        Index("ix_transactions_user_date", "user_id", "date"),
    )

    def __repr__(self):
        return f"<Transaction(id={self.id}, amount={self.amount}, type={self.type})>"
