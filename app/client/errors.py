from typing import Any, Optional

DEFAULT_ERROR_MESSAGE = "An unexpected error occurred."


class ApiError(Exception):
    """
    The one failure shape API callers see.

    ``message`` is always a non-empty string. ``status`` is the HTTP status when
    the server answered, None for network failures. ``data`` is the raw server
    payload when there was one.
    """

    def __init__(self, message: str, status: Optional[int] = None, data: Any = None):
        self.message = message or DEFAULT_ERROR_MESSAGE
        self.status = status
        self.data = data
        super().__init__(self.message)

    @property
    def is_unauthorized(self) -> bool:
        return self.status == 401

    def to_dict(self) -> dict:
        return {"message": self.message, "status": self.status, "data": self.data}

    def __repr__(self):
        return f"<ApiError(status={self.status}, message={self.message!r})>"
