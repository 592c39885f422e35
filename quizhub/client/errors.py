from typing import Any, Optional


class QuizhubError(Exception):
    """Base class for client-side failures."""


class RemoteError(QuizhubError):
    """The remote API was unreachable, answered with a non-success status, or sent a malformed body."""

    def __init__(self, message: str, status: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.status = status
        self.body = body


class ValidationFailed(QuizhubError):
    pass


class NotFound(QuizhubError):
    pass


class AccessDenied(QuizhubError):
    pass
