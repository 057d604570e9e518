import asyncio
import logging

import httpx
import pytest

from app.client import (
    AUTH_TOKEN_KEY, USER_DATA_KEY, ApiClient, ApiError, DEFAULT_ERROR_MESSAGE, MemoryStorage
)
from app.client.pipeline import PipelineStage, normalize_error

BASE_URL = "http://api.test"


class BrokenStorage(MemoryStorage):
    """Storage whose reads and removals always fail."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.remove_attempts = 0

    async def get_item(self, key):
        raise OSError("storage unavailable")

    async def multi_remove(self, keys):
        self.remove_attempts += 1
        raise OSError("storage unavailable")


class Recorder:
    """MockTransport handler that records requests and replies with a fixed response."""

    def __init__(self, status_code=200, json=None, content=None, exc=None):
        self.requests = []
        self.status_code = status_code
        self.json = json
        self.content = content
        self.exc = exc

    def __call__(self, request):
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc(request)
        if self.json is not None:
            return httpx.Response(self.status_code, json=self.json)
        return httpx.Response(self.status_code, content=self.content or b"")


def call(handler, storage=None, method="GET", url="/api/budget", stages=None):
    storage = storage if storage is not None else MemoryStorage()

    async def run():
        async with ApiClient(BASE_URL, storage=storage, transport=httpx.MockTransport(handler), stages=stages) as client:
            return await client.request(method, url)

    return asyncio.run(run())


def call_expecting_error(handler, storage=None, **kwargs) -> ApiError:
    with pytest.raises(ApiError) as exc_info:
        call(handler, storage, **kwargs)
    return exc_info.value


# ----------- OUTGOING REQUESTS -----------
def test_stored_token_is_sent_as_bearer_header():
    handler = Recorder(json={"ok": True})

    call(handler, MemoryStorage({AUTH_TOKEN_KEY: "abc.def.ghi"}))

    assert handler.requests[0].headers["Authorization"] == "Bearer abc.def.ghi"


def test_request_without_token_is_still_sent():
    handler = Recorder(json=[])

    response = call(handler, MemoryStorage())

    assert response.status_code == 200
    assert len(handler.requests) == 1
    assert "Authorization" not in handler.requests[0].headers


def test_storage_read_failure_does_not_block_request(caplog):
    handler = Recorder(json=[])

    with caplog.at_level(logging.ERROR):
        response = call(handler, BrokenStorage())

    assert response.status_code == 200
    assert "Authorization" not in handler.requests[0].headers
    assert "Error reading auth token from storage" in caplog.text


def test_default_headers_and_timeout():
    handler = Recorder(json={})
    client = ApiClient(BASE_URL, transport=httpx.MockTransport(handler))

    async def run():
        async with client:
            await client.post("/api/transaction", json={"name": "Coffee"})

    asyncio.run(run())

    request = handler.requests[0]
    assert request.headers["Content-Type"] == "application/json"
    assert request.url == httpx.URL("http://api.test/api/transaction")
    assert client._client.timeout == httpx.Timeout(5.0)


# ----------- RESPONSES -----------
def test_successful_response_passes_through_unchanged(caplog):
    handler = Recorder(status_code=201, json={"id": 7})

    with caplog.at_level(logging.INFO):
        response = call(handler, method="POST")

    assert response.status_code == 201
    assert response.json() == {"id": 7}
    assert "API Request: POST http://api.test/api/budget" in caplog.text
    assert "API Response: 201 http://api.test/api/budget" in caplog.text


def test_server_message_takes_priority():
    handler = Recorder(status_code=404, json={"message": "Budget not found", "success": False})

    error = call_expecting_error(handler)

    assert error.message == "Budget not found"
    assert error.status == 404
    assert error.data == {"message": "Budget not found", "success": False}


def test_transport_message_used_without_server_message():
    handler = Recorder(exc=lambda request: httpx.ConnectError("Connection refused", request=request))

    error = call_expecting_error(handler)

    assert error.message == "Connection refused"
    assert error.status is None
    assert error.data is None


def test_default_message_when_nothing_else_available():
    handler = Recorder(exc=lambda request: httpx.ReadTimeout("", request=request))

    error = call_expecting_error(handler)

    assert error.message == DEFAULT_ERROR_MESSAGE == "An unexpected error occurred."
    assert error.status is None


def test_http_error_without_message_field_reports_status():
    handler = Recorder(status_code=502, content=b"Bad gateway")

    error = call_expecting_error(handler)

    assert error.message == "Request failed with status code 502"
    assert error.status == 502
    assert error.data == "Bad gateway"


def test_blank_server_message_is_ignored():
    handler = Recorder(status_code=400, json={"message": "   "})

    error = call_expecting_error(handler)

    assert error.message == "Request failed with status code 400"


# ----------- 401 HANDLING -----------
def test_unauthorized_clears_stored_session():
    storage = MemoryStorage({AUTH_TOKEN_KEY: "expired", USER_DATA_KEY: '{"id": 1}', "theme": "dark"})
    handler = Recorder(status_code=401, json={"message": "Token has expired"})

    error = call_expecting_error(handler, storage)

    assert error.status == 401
    assert error.message == "Token has expired"

    async def read():
        return (
            await storage.get_item(AUTH_TOKEN_KEY),
            await storage.get_item(USER_DATA_KEY),
            await storage.get_item("theme"),
        )

    assert asyncio.run(read()) == (None, None, "dark")


def test_unauthorized_with_broken_storage_still_raises_normalized_error(caplog):
    storage = BrokenStorage()
    handler = Recorder(status_code=401, json={"message": "Not authenticated"})

    with caplog.at_level(logging.ERROR):
        error = call_expecting_error(handler, storage)

    assert storage.remove_attempts == 1
    assert error.status == 401
    assert error.message == "Not authenticated"
    assert "Failed to clear auth storage" in caplog.text


@pytest.mark.parametrize("status_code", [400, 403, 404, 500])
def test_other_errors_leave_storage_untouched(status_code):
    storage = MemoryStorage({AUTH_TOKEN_KEY: "tok", USER_DATA_KEY: "{}"})
    handler = Recorder(status_code=status_code, json={"message": "nope"})

    call_expecting_error(handler, storage)

    assert storage._items == {AUTH_TOKEN_KEY: "tok", USER_DATA_KEY: "{}"}


def test_network_error_leaves_storage_untouched():
    storage = MemoryStorage({AUTH_TOKEN_KEY: "tok"})
    handler = Recorder(exc=lambda request: httpx.ConnectError("down", request=request))

    call_expecting_error(handler, storage)

    assert storage._items == {AUTH_TOKEN_KEY: "tok"}


# ----------- STAGE COMPOSITION -----------
def test_stages_run_in_declared_order():
    calls = []

    class Tracing(PipelineStage):
        def __init__(self, name):
            self.name = name

        async def on_request(self, request):
            calls.append(("request", self.name))
            request.headers[f"X-{self.name}"] = "1"
            return request

        async def on_response(self, response):
            calls.append(("response", self.name))
            return response

        async def on_error(self, error, request):
            calls.append(("error", self.name))

    ok = Recorder(json={})
    call(ok, stages=[Tracing("first"), Tracing("second")])
    assert calls == [("request", "first"), ("request", "second"), ("response", "first"), ("response", "second")]
    assert ok.requests[0].headers["X-first"] == "1"

    calls.clear()
    call_expecting_error(Recorder(status_code=500, json={}), stages=[Tracing("first"), Tracing("second")])
    assert calls == [("request", "first"), ("request", "second"), ("error", "first"), ("error", "second")]


def test_normalize_error_from_status_error():
    request = httpx.Request("GET", "http://api.test/x")
    response = httpx.Response(409, json={"message": "Duplicate entry found"}, request=request)
    exc = httpx.HTTPStatusError("Conflict", request=request, response=response)

    error = normalize_error(exc=exc)

    assert error.to_dict() == {
        "message": "Duplicate entry found",
        "status": 409,
        "data": {"message": "Duplicate entry found"},
    }


# ----------- REQUEST BUILD FAILURES -----------
def test_unserializable_body_raises_normalized_error():
    handler = Recorder(json={"ok": True})

    async def run():
        async with ApiClient(BASE_URL, transport=httpx.MockTransport(handler)) as client:
            return await client.post("/api/budget", json={"tags": {"a", "b"}})

    with pytest.raises(ApiError) as exc_info:
        asyncio.run(run())

    assert "not JSON serializable" in exc_info.value.message
    assert exc_info.value.status is None
    assert handler.requests == []


def test_invalid_url_raises_normalized_error():
    handler = Recorder(json={"ok": True})

    error = call_expecting_error(handler, url="/api/budget\x00")

    assert error.status is None
    assert error.message != DEFAULT_ERROR_MESSAGE
    assert handler.requests == []
