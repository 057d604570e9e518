from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, constr

from app.models.models import TransactionType


# ----------- USER / AUTH -----------
class RegisterRequest(BaseModel):
    username: constr(min_length=3, max_length=50)
    email: EmailStr
    password: constr(min_length=8, max_length=128)

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class ForgotPasswordRequest(BaseModel):
    email: EmailStr

class ResetPasswordRequest(BaseModel):
    token: constr(min_length=1)
    new_password: constr(min_length=8, max_length=128)

class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str

class AuthResponse(BaseModel):
    token: str
    user: UserResponse


# ----------- BUDGET -----------
class BudgetCreate(BaseModel):
    name: constr(min_length=1, max_length=100)
    amount: float = Field(gt=0)
    icon: Optional[constr(max_length=50)] = None

class BudgetUpdate(BaseModel):
    name: Optional[constr(min_length=1, max_length=100)] = None
    amount: Optional[float] = Field(default=None, gt=0)
    icon: Optional[constr(max_length=50)] = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "amount": self.amount,
            "icon": self.icon
        }

class BudgetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    icon: Optional[str] = None
    amount: float
    spent: float


# ----------- TRANSACTION -----------
class TransactionCreate(BaseModel):
    name: constr(min_length=1, max_length=100)
    amount: float = Field(gt=0)
    type: TransactionType = TransactionType.EXPENSE
    category: Optional[constr(max_length=50)] = None
    icon: Optional[constr(max_length=50)] = None
    description: Optional[str] = None
    date: Optional[datetime] = None
    budget_id: Optional[int] = None

class TransactionUpdate(BaseModel):
    name: Optional[constr(min_length=1, max_length=100)] = None
    amount: Optional[float] = Field(default=None, gt=0)
    type: Optional[TransactionType] = None
    category: Optional[constr(max_length=50)] = None
    icon: Optional[constr(max_length=50)] = None
    description: Optional[str] = None
    date: Optional[datetime] = None
    budget_id: Optional[int] = None

    def to_dict(self) -> dict:
        # only fields the caller actually sent, so budget_id can be cleared explicitly
        return self.model_dump(exclude_unset=True)

class TransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    amount: float
    type: TransactionType
    category: Optional[str] = None
    icon: Optional[str] = None
    description: Optional[str] = None
    date: datetime
    budget_id: Optional[int] = None
