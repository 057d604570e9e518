import logging
from typing import Any, Dict, Iterable, Optional

import httpx

from app.client.config import DEFAULT_HEADERS, REQUEST_TIMEOUT_SECONDS, resolve_api_base_url
from app.client.errors import ApiError
from app.client.pipeline import PipelineStage, default_stages, normalize_error
from app.client.storage import CredentialStore, MemoryStorage

logger = logging.getLogger(__name__)


class ApiClient:
    """
    HTTP client for the budget API.

    Every call goes through the configured stages and either returns a 2xx
    response or raises ApiError. Retries are left to the caller.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        storage: Optional[CredentialStore] = None,
        stages: Optional[Iterable[PipelineStage]] = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.storage = storage or MemoryStorage()
        self.stages = list(stages) if stages is not None else default_stages(self.storage)
        self._client = httpx.AsyncClient(
            base_url=base_url or resolve_api_base_url(),
            headers=DEFAULT_HEADERS,
            timeout=timeout,
            transport=transport,
            follow_redirects=True,
        )

    @property
    def base_url(self) -> str:
        return str(self._client.base_url)

    async def request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        try:
            request = self._client.build_request(method, url, json=json, params=params, headers=headers)
        except (httpx.InvalidURL, TypeError, ValueError) as exc:
            logger.error(f"API Error: {url} {exc}")
            raise normalize_error(exc=exc) from exc

        for stage in self.stages:
            request = await stage.on_request(request)

        try:
            response = await self._client.send(request)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise await self._fail(normalize_error(exc=exc), request) from exc

        if not response.is_success:
            raise await self._fail(normalize_error(response=response), request)

        for stage in self.stages:
            response = await stage.on_response(response)
        return response

    async def _fail(self, error: ApiError, request: httpx.Request) -> ApiError:
        for stage in self.stages:
            await stage.on_error(error, request)
        return error

    async def get(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("PUT", url, **kwargs)

    async def delete(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("DELETE", url, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
