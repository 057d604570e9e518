"""
Request pipeline stages for the API client.

Each stage may rewrite the outgoing request, observe the successful response,
and react to a normalized failure. ``ApiClient`` runs the stages in list order
for every phase.
"""

import logging
from typing import Any, List, Optional

import httpx

from app.client.errors import ApiError, DEFAULT_ERROR_MESSAGE
from app.client.storage import AUTH_TOKEN_KEY, SESSION_KEYS, CredentialStore

logger = logging.getLogger(__name__)


class PipelineStage:
    """No-op stage; subclasses override the hooks they need."""

    async def on_request(self, request: httpx.Request) -> httpx.Request:
        return request

    async def on_response(self, response: httpx.Response) -> httpx.Response:
        return response

    async def on_error(self, error: ApiError, request: httpx.Request) -> None:
        return None


class LoggingStage(PipelineStage):

    async def on_request(self, request: httpx.Request) -> httpx.Request:
        logger.info(f"API Request: {request.method.upper()} {request.url}")
        return request

    async def on_response(self, response: httpx.Response) -> httpx.Response:
        logger.info(f"API Response: {response.status_code} {response.request.url}")
        return response

    async def on_error(self, error: ApiError, request: httpx.Request) -> None:
        logger.error(f"API Error: {request.url} {error.to_dict()}")


class AuthTokenStage(PipelineStage):
    """Attach the stored bearer token. A storage failure never blocks the request."""

    def __init__(self, storage: CredentialStore):
        self.storage = storage

    async def on_request(self, request: httpx.Request) -> httpx.Request:
        try:
            token = await self.storage.get_item(AUTH_TOKEN_KEY)
        except Exception as e:
            logger.error(f"Error reading auth token from storage: {e}")
            return request

        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        return request


class SessionInvalidationStage(PipelineStage):
    """
    Drop the stored session when the server answers 401.

    Navigation to a login screen is left to the UI, which observes the storage;
    background requests must not trigger it.
    """

    def __init__(self, storage: CredentialStore):
        self.storage = storage

    async def on_error(self, error: ApiError, request: httpx.Request) -> None:
        if not error.is_unauthorized:
            return
        try:
            await self.storage.multi_remove(list(SESSION_KEYS))
        except Exception as e:
            logger.error(f"Failed to clear auth storage: {e}")


def default_stages(storage: CredentialStore) -> List[PipelineStage]:
    return [LoggingStage(), AuthTokenStage(storage), SessionInvalidationStage(storage)]


def _response_payload(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def normalize_error(
    exc: Optional[BaseException] = None,
    response: Optional[httpx.Response] = None
) -> ApiError:
    """
    Build the ApiError for a failed exchange.

    The message comes from the server payload's ``message`` field, then the
    transport error, then DEFAULT_ERROR_MESSAGE.
    """
    if response is None and isinstance(exc, httpx.HTTPStatusError):
        response = exc.response

    status = response.status_code if response is not None else None
    data = _response_payload(response) if response is not None else None

    server_message = data.get("message") if isinstance(data, dict) else None
    if exc is not None:
        transport_message = str(exc)
    elif status is not None:
        transport_message = f"Request failed with status code {status}"
    else:
        transport_message = None

    for candidate in (server_message, transport_message):
        if isinstance(candidate, str) and candidate.strip():
            message = candidate
            break
    else:
        message = DEFAULT_ERROR_MESSAGE

    return ApiError(message=message, status=status, data=data)
