import json
from typing import Any, Dict, List, Optional

from app.client.api_client import ApiClient
from app.client.storage import AUTH_TOKEN_KEY, SESSION_KEYS, USER_DATA_KEY


class BudgetApi:
    """Endpoint wrappers used by the UI layer. Failures surface as ApiError."""

    def __init__(self, client: ApiClient):
        self.client = client
        self.storage = client.storage

    # ----------- SESSION -----------
    async def register(self, username: str, email: str, password: str) -> Dict[str, Any]:
        response = await self.client.post(
            "/api/user/register",
            json={"username": username, "email": email, "password": password}
        )
        return await self._store_session(response.json())

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        response = await self.client.post("/api/user/login", json={"email": email, "password": password})
        return await self._store_session(response.json())

    async def logout(self) -> None:
        await self.storage.multi_remove(list(SESSION_KEYS))

    async def get_stored_user(self) -> Optional[Dict[str, Any]]:
        raw = await self.storage.get_item(USER_DATA_KEY)
        return json.loads(raw) if raw else None

    async def _store_session(self, session: Dict[str, Any]) -> Dict[str, Any]:
        await self.storage.set_item(AUTH_TOKEN_KEY, session["token"])
        await self.storage.set_item(USER_DATA_KEY, json.dumps(session["user"]))
        return session["user"]

    async def current_user(self) -> Dict[str, Any]:
        return (await self.client.get("/api/user/me")).json()

    async def forgot_password(self, email: str) -> Dict[str, Any]:
        return (await self.client.post("/api/user/forgot-password", json={"email": email})).json()

    async def reset_password(self, token: str, new_password: str) -> Dict[str, Any]:
        response = await self.client.post(
            "/api/user/reset-password",
            json={"token": token, "new_password": new_password}
        )
        return response.json()

    # ----------- BUDGETS -----------
    async def list_budgets(self) -> List[Dict[str, Any]]:
        return (await self.client.get("/api/budget")).json()

    async def create_budget(self, name: str, amount: float, icon: Optional[str] = None) -> Dict[str, Any]:
        response = await self.client.post("/api/budget", json={"name": name, "amount": amount, "icon": icon})
        return response.json()

    async def update_budget(self, budget_id: int, **changes) -> Dict[str, Any]:
        return (await self.client.put(f"/api/budget/{budget_id}", json=changes)).json()

    async def delete_budget(self, budget_id: int) -> None:
        await self.client.delete(f"/api/budget/{budget_id}")

    # ----------- TRANSACTIONS -----------
    async def list_transactions(self, limit: int = 20, offset: int = 0) -> Dict[str, Any]:
        response = await self.client.get("/api/transaction", params={"limit": limit, "offset": offset})
        return response.json()

    async def create_transaction(self, **fields) -> Dict[str, Any]:
        return (await self.client.post("/api/transaction", json=fields)).json()

    async def update_transaction(self, transaction_id: int, **changes) -> Dict[str, Any]:
        return (await self.client.put(f"/api/transaction/{transaction_id}", json=changes)).json()

    async def delete_transaction(self, transaction_id: int) -> None:
        await self.client.delete(f"/api/transaction/{transaction_id}")
