from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.controller import BudgetController, TransactionController, UserController
from app.db_config import get_db
from app.middleware.auth_middleware import jwt_middleware
from app.models.scheme import (
    BudgetCreate, BudgetUpdate, ForgotPasswordRequest, LoginRequest,
    RegisterRequest, ResetPasswordRequest, TransactionCreate, TransactionUpdate
)

router = APIRouter()

# ----------- USER ROUTES -----------
@router.post("/user/register", status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    return await UserController.register(payload, db)


@router.post("/user/login")
async def login(payload: LoginRequest, db: Session = Depends(get_db)):
    return await UserController.login(payload, db)


@router.get("/user/me")
async def get_user(user=Depends(jwt_middleware), db: Session = Depends(get_db)):
    return await UserController.get_user_info(user, db)


@router.post("/user/forgot-password")
async def forgot_password(payload: ForgotPasswordRequest, db: Session = Depends(get_db)):
    return await UserController.forgot_password(payload, db)


@router.post("/user/reset-password")
async def reset_password(payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    return await UserController.reset_password(payload, db)


# ----------- BUDGET ROUTES -----------
@router.get("/budget")
async def list_budgets(user=Depends(jwt_middleware), db: Session = Depends(get_db)):
    return await BudgetController.list_budgets(user, db)


@router.post("/budget", status_code=status.HTTP_201_CREATED)
async def create_budget(payload: BudgetCreate, user=Depends(jwt_middleware), db: Session = Depends(get_db)):
    return await BudgetController.create_budget(payload, user, db)


@router.get("/budget/{budget_id}")
async def get_budget(budget_id: int, user=Depends(jwt_middleware), db: Session = Depends(get_db)):
    return await BudgetController.get_budget(budget_id, user, db)


@router.put("/budget/{budget_id}")
async def update_budget(budget_id: int, payload: BudgetUpdate, user=Depends(jwt_middleware), db: Session = Depends(get_db)):
    return await BudgetController.update_budget(budget_id, payload, user, db)


@router.delete("/budget/{budget_id}")
async def delete_budget(budget_id: int, user=Depends(jwt_middleware), db: Session = Depends(get_db)):
    return await BudgetController.delete_budget(budget_id, user, db)


# ----------- TRANSACTION ROUTES -----------
@router.post("/transaction", status_code=status.HTTP_201_CREATED)
async def create_transaction(payload: TransactionCreate, user=Depends(jwt_middleware), db: Session = Depends(get_db)):
    return await TransactionController.create_transaction(payload, user, db)


@router.get("/transaction")
async def list_transactions(user=Depends(jwt_middleware),
                            db: Session = Depends(get_db),
                            limit: int = Query(20, ge=1, le=100, description="Number of records per page"),
                            offset: int = Query(0, ge=0, description="Number of records to skip")):
    return await TransactionController.list_transactions(user, db, limit, offset)


@router.get("/transaction/{transaction_id}")
async def get_transaction(transaction_id: int, user=Depends(jwt_middleware), db: Session = Depends(get_db)):
    return await TransactionController.get_transaction(transaction_id, user, db)


@router.put("/transaction/{transaction_id}")
async def update_transaction(transaction_id: int, payload: TransactionUpdate, user=Depends(jwt_middleware), db: Session = Depends(get_db)):
    return await TransactionController.update_transaction(transaction_id, payload, user, db)


@router.delete("/transaction/{transaction_id}")
async def delete_transaction(transaction_id: int, user=Depends(jwt_middleware), db: Session = Depends(get_db)):
    return await TransactionController.delete_transaction(transaction_id, user, db)
