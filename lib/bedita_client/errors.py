from __future__ import annotations

from typing import Any

TOKEN_EXPIRED_CODE = "be_token_expired"


class BEditaClientError(Exception):
    """Base client error."""


class TransportError(BEditaClientError):
    """Transport/network layer error."""


class ApiError(BEditaClientError):
    """HTTP response with status >= 400.

    ``attributes`` holds the server ``error`` object when the body carried one.
    """

    def __init__(self, status_code: int, message: str, attributes: dict[str, Any] | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.attributes = dict(attributes or {})

    @property
    def code(self) -> str:
        code = self.attributes.get("code")
        return str(code) if code else str(self.status_code)

    def is_token_expired(self) -> bool:
        return self.status_code == 401 and self.attributes.get("code") == TOKEN_EXPIRED_CODE


class PreconditionError(BEditaClientError):
    """Client used in a state that does not allow the call."""


class ProtocolError(BEditaClientError):
    """Server answered 2xx with a shape the client cannot interpret."""


class ValidationError(BEditaClientError, ValueError):
    """Caller supplied insufficient arguments."""


class ConfigurationError(BEditaClientError):
    """Base URL and path do not produce a valid URI."""


class FileError(BEditaClientError, OSError):
    """Local file could not be read for upload."""
