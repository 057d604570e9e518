"""
Client package: the HTTP pipeline used by the mobile app to talk to the API.
"""

from app.client.api_client import ApiClient
from app.client.budget_api import BudgetApi
from app.client.errors import ApiError, DEFAULT_ERROR_MESSAGE
from app.client.storage import (
    AUTH_TOKEN_KEY, USER_DATA_KEY, CredentialStore, JsonFileStorage, MemoryStorage
)

__all__ = [
    "ApiClient",
    "BudgetApi",
    "ApiError",
    "DEFAULT_ERROR_MESSAGE",
    "AUTH_TOKEN_KEY",
    "USER_DATA_KEY",
    "CredentialStore",
    "JsonFileStorage",
    "MemoryStorage",
]
