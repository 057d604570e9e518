from app.models.scheme import BudgetCreate, BudgetResponse, BudgetUpdate
from app.services.budget_service import BudgetService
from app.utils.exceptions import BudgetAppException, DatabaseError


class BudgetController:
    @staticmethod
    async def list_budgets(user, db):
        try:
            budgets = BudgetService(db).list_budgets(user.get("user_id"))
            return [BudgetResponse.model_validate(budget) for budget in budgets]
        except Exception as e:
            raise DatabaseError(f"Failed to retrieve budgets: {str(e)}")

    @staticmethod
    async def create_budget(payload: BudgetCreate, user, db):
        try:
            budget = BudgetService(db).create_budget(payload, user.get("user_id"))
            return BudgetResponse.model_validate(budget)
        except Exception as e:
            raise DatabaseError(f"Failed to create budget: {str(e)}")

    @staticmethod
    async def get_budget(budget_id: int, user, db):
        budget = BudgetService(db).get_budget(budget_id, user.get("user_id"))
        return BudgetResponse.model_validate(budget)

    @staticmethod
    async def update_budget(budget_id: int, payload: BudgetUpdate, user, db):
        try:
            budget = BudgetService(db).update_budget(budget_id, payload.to_dict(), user.get("user_id"))
            return BudgetResponse.model_validate(budget)
        except BudgetAppException:
            raise
        except Exception as e:
            raise DatabaseError(f"Failed to update budget: {str(e)}")

    @staticmethod
    async def delete_budget(budget_id: int, user, db):
        try:
            BudgetService(db).delete_budget(budget_id, user.get("user_id"))
            return {"success": True, "message": "Budget deleted"}
        except BudgetAppException:
            raise
        except Exception:
            raise DatabaseError("Failed to delete budget")
