from __future__ import annotations

import json
from typing import Any, Mapping

import httpx

from .config_types import ClientConfig
from .errors import TransportError
from .http_log import HttpLogger, NullHttpLogger
from .responses import api_error_for
from .tokens import TokenStore
from .uri import build_uri


def encode_body(body: Any) -> bytes:
    if body is None:
        return b""
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    return json.dumps(body, ensure_ascii=False).encode("utf-8")


class Transport:
    def __init__(
            self,
            cfg: ClientConfig,
            tokens: TokenStore,
            *,
            http_logger: HttpLogger | None = None,
            transport: httpx.BaseTransport | None = None,
    ):
        self._cfg = cfg
        self.tokens = tokens
        self.http_logger: HttpLogger = http_logger or NullHttpLogger()
        self.last_response: httpx.Response | None = None
        self._client = httpx.Client(
            timeout=cfg.timeout_s,
            follow_redirects=True,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._cfg.base_url

    def close(self) -> None:
        self._client.close()

    def build_request(
            self,
            method: str,
            path: str,
            *,
            query: Mapping[str, Any] | None = None,
            headers: Mapping[str, str | None] | None = None,
            body: Any = None,
    ) -> httpx.Request:
        url = build_uri(self._cfg.base_url, path, query)
        merged = httpx.Headers(self.tokens.headers)
        for key, value in (headers or {}).items():
            if value is None:
                merged.pop(key, None)
            else:
                merged[key] = value

        content = encode_body(body)
        if content and "content-type" not in merged:
            merged["Content-Type"] = "application/json"
        return self._client.build_request(method, url, headers=merged, content=content or None)

    def exchange(
            self,
            method: str,
            path: str,
            *,
            query: Mapping[str, Any] | None = None,
            headers: Mapping[str, str | None] | None = None,
            body: Any = None,
    ) -> httpx.Response:
        """Send one request and record the response, whatever its status."""
        request = self.build_request(method, path, query=query, headers=headers, body=body)
        self.http_logger.log_request(request)
        try:
            response = self._client.send(request)
        except httpx.RequestError as e:
            raise TransportError(str(e)) from e
        self.last_response = response
        self.http_logger.log_response(response)
        return response

    def send(
            self,
            method: str,
            path: str,
            *,
            query: Mapping[str, Any] | None = None,
            headers: Mapping[str, str | None] | None = None,
            body: Any = None,
    ) -> httpx.Response:
        response = self.exchange(method, path, query=query, headers=headers, body=body)
        error = api_error_for(response)
        if error is not None:
            raise error
        return response
