# app/domain/errors.py
from __future__ import annotations


class CalloutError(Exception):
    """Base for every recoverable callout failure."""


class TransportFailure(CalloutError):
    """The HTTP exchange could not be completed."""


class RemoteRejection(CalloutError):
    def __init__(self, status_code: int, body: str = "") -> None:
        super().__init__(f"HTTP {status_code}: {body[:500]}")
        self.status_code = status_code
        self.body = body


class MalformedDocument(CalloutError):
    """Remote document is not shaped like a user."""


class RecordNotFound(CalloutError):
    pass
