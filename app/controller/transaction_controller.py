from app.models.scheme import TransactionCreate, TransactionResponse, TransactionUpdate
from app.services.transaction_service import TransactionService
from app.utils.exceptions import BudgetAppException, DatabaseError


class TransactionController:
    @staticmethod
    async def create_transaction(payload: TransactionCreate, user, db):
        try:
            transaction = TransactionService(db).create_transaction(payload, user.get("user_id"))
            return TransactionResponse.model_validate(transaction)
        except BudgetAppException:
            raise
        except Exception as e:
            raise DatabaseError(f"Failed to create transaction: {str(e)}")

    @staticmethod
    async def list_transactions(user, db, limit: int, offset: int):
        try:
            result = TransactionService(db).list_transactions(user.get("user_id"), limit, offset)
            return {
                "data": [TransactionResponse.model_validate(t) for t in result["data"]],
                "pagination": result["pagination"]
            }
        except Exception as e:
            raise DatabaseError(f"Failed to retrieve transactions: {str(e)}")

    @staticmethod
    async def get_transaction(transaction_id: int, user, db):
        transaction = TransactionService(db).get_transaction(transaction_id, user.get("user_id"))
        return TransactionResponse.model_validate(transaction)

    @staticmethod
    async def update_transaction(transaction_id: int, payload: TransactionUpdate, user, db):
        try:
            transaction = TransactionService(db).update_transaction(
                transaction_id, payload.to_dict(), user.get("user_id")
            )
            return TransactionResponse.model_validate(transaction)
        except BudgetAppException:
            raise
        except Exception as e:
            raise DatabaseError(f"Failed to update transaction: {str(e)}")

    @staticmethod
    async def delete_transaction(transaction_id: int, user, db):
        try:
            TransactionService(db).delete_transaction(transaction_id, user.get("user_id"))
            return {"success": True, "message": "Transaction deleted"}
        except BudgetAppException:
            raise
        except Exception:
            raise DatabaseError("Failed to delete transaction")
