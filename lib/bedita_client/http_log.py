from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Protocol

import httpx

MASK = "***************"
SENSITIVE_BODY_FIELDS = ("password", "old_password", "confirm-password")
SENSITIVE_HEADERS = ("authorization", "x-api-key")
SENSITIVE_META_FIELDS = ("jwt", "renew")


class HttpLogger(Protocol):
    def log_request(self, request: httpx.Request) -> None: ...

    def log_response(self, response: httpx.Response) -> None: ...

    def close(self) -> None: ...


class NullHttpLogger:
    def log_request(self, request: httpx.Request) -> None:
        return None

    def log_response(self, response: httpx.Response) -> None:
        return None

    def close(self) -> None:
        return None


def _load_json(content: bytes) -> Any:
    try:
        return json.loads(content)
    except ValueError:
        return None


def _dump(content: bytes, data: Any) -> str:
    if data is None:
        return f"(binary, {len(content)} bytes)"
    return json.dumps(data, ensure_ascii=False)


def redact_request_body(content: bytes) -> str:
    if not content:
        return "(empty)"
    data = _load_json(content)
    if isinstance(data, dict):
        inner = data.get("data")
        attributes = inner.get("attributes") if isinstance(inner, dict) else None
        for field in SENSITIVE_BODY_FIELDS:
            if data.get(field):
                data[field] = MASK
            if isinstance(attributes, dict) and attributes.get(field):
                attributes[field] = MASK
    return _dump(content, data)


def redact_request_headers(request: httpx.Request) -> str:
    headers: dict[str, str] = {}
    for raw_key, raw_value in request.headers.raw:
        key = raw_key.decode("latin-1")
        value = raw_value.decode("latin-1")
        if key.lower() in SENSITIVE_HEADERS and value:
            value = MASK
        headers[key] = value
    return json.dumps(headers)


def redact_response_body(content: bytes) -> str:
    if not content:
        return "(empty)"
    data = _load_json(content)
    if isinstance(data, dict) and isinstance(data.get("meta"), dict):
        for field in SENSITIVE_META_FIELDS:
            if data["meta"].get(field):
                data["meta"][field] = MASK
    return _dump(content, data)


class LoggingHttpLogger:
    """Writes one INFO line per request and response, credentials masked."""

    def __init__(self, logger: logging.Logger, owned_handlers: Iterable[logging.Handler] = ()):
        self.logger = logger
        self._owned = list(owned_handlers)

    @classmethod
    def to_file(cls, log_file: str) -> "LoggingHttpLogger":
        # standalone logger: not registered in the logging tree, one per file
        logger = logging.Logger("bedita-client", level=logging.DEBUG)
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter("[%(asctime)s] %(name)s.%(levelname)s: %(message)s"))
        logger.addHandler(handler)
        return cls(logger, owned_handlers=[handler])

    def log_request(self, request: httpx.Request) -> None:
        self.logger.info(
            "Request: %s %s - Headers %s - Body %s",
            request.method,
            request.url,
            redact_request_headers(request),
            redact_request_body(request.content),
        )

    def log_response(self, response: httpx.Response) -> None:
        self.logger.info(
            "Response: %s %s - Headers %s - Body %s",
            response.status_code,
            response.reason_phrase,
            json.dumps(dict(response.headers)),
            redact_response_body(response.content),
        )

    def close(self) -> None:
        """Detach and close the handlers opened by ``to_file``."""
        while self._owned:
            handler = self._owned.pop()
            self.logger.removeHandler(handler)
            handler.close()


def close_http_logger(http_logger: HttpLogger) -> None:
    # loggers passed in by callers may predate close()
    close = getattr(http_logger, "close", None)
    if callable(close):
        close()
