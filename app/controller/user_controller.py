from app.models.scheme import (
    AuthResponse, ForgotPasswordRequest, LoginRequest, RegisterRequest,
    ResetPasswordRequest, UserResponse
)
from app.repositories import UserRepository
from app.services.auth_service import AuthService
from app.utils.exceptions import BudgetAppException, DatabaseError, NotFoundError

FORGOT_PASSWORD_MESSAGE = "If an account exists for this email, a reset link has been sent."


class UserController:

    @staticmethod
    async def register(payload: RegisterRequest, db):
        session = AuthService(db).register(payload.username, payload.email, payload.password)
        return AuthResponse.model_validate(session)

    @staticmethod
    async def login(payload: LoginRequest, db):
        session = AuthService(db).login(payload.email, payload.password)
        return AuthResponse.model_validate(session)

    @staticmethod
    async def get_user_info(user: dict, db):
        try:
            user_obj = UserRepository(db).get_by_id(user.get("user_id"))
            if not user_obj:
                raise NotFoundError("User", str(user.get("user_id")))

            return UserResponse.model_validate(user_obj)
        except NotFoundError:
            raise
        except Exception as e:
            raise DatabaseError(f"Failed to retrieve user info: {str(e)}")

    @staticmethod
    async def forgot_password(payload: ForgotPasswordRequest, db):
        try:
            # Delivery of the token is handled by the mail integration
            AuthService(db).request_password_reset(payload.email)
        except Exception as e:
            raise DatabaseError(f"Failed to create password reset token: {str(e)}")
        return {"success": True, "message": FORGOT_PASSWORD_MESSAGE}

    @staticmethod
    async def reset_password(payload: ResetPasswordRequest, db):
        try:
            AuthService(db).reset_password(payload.token, payload.new_password)
        except BudgetAppException:
            raise
        except Exception as e:
            raise DatabaseError(f"Failed to reset password: {str(e)}")
        return {"success": True, "message": "Password has been reset"}
