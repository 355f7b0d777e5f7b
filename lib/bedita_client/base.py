from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from .config_types import ClientConfig
from .errors import PreconditionError, ProtocolError
from .http_log import HttpLogger, LoggingHttpLogger, close_http_logger
from .responses import api_error_for, decode_body
from .tokens import TokenPair, TokenStore
from .transport import Transport

log = logging.getLogger(__name__)


def _without_authorization(headers: Mapping[str, str | None] | None) -> dict[str, str | None]:
    return {k: v for k, v in (headers or {}).items() if k.lower() != "authorization"}


class BaseClient:
    """Request/response/auth core shared by every endpoint helper.

    The client keeps the last response and the token pair on the instance:
    do not share one instance between threads without locking.
    """

    def __init__(
            self,
            base_url: str,
            api_key: str | None = None,
            tokens: TokenPair | Mapping[str, Any] | None = None,
            *,
            timeout_s: float = 15.0,
            client_version: str | None = None,
            http_logger: HttpLogger | None = None,
            transport: httpx.BaseTransport | None = None,
    ):
        self._cfg = ClientConfig(
            base_url=(base_url or "").rstrip("/"),
            api_key=api_key or None,
            timeout_s=timeout_s,
            client_version=client_version,
        )
        self._tokens = TokenStore(api_key=self._cfg.api_key, tokens=tokens, client_version=client_version)
        self._t = Transport(self._cfg, self._tokens, http_logger=http_logger, transport=transport)

    @classmethod
    def from_config(cls, cfg: ClientConfig, tokens: TokenPair | Mapping[str, Any] | None = None, **kwargs):
        return cls(
            cfg.base_url,
            cfg.api_key,
            tokens,
            timeout_s=cfg.timeout_s,
            client_version=cfg.client_version,
            **kwargs,
        )

    def close(self) -> None:
        self._t.close()
        close_http_logger(self._t.http_logger)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def config(self) -> ClientConfig:
        return self._cfg

    def get_api_base_url(self) -> str:
        return self._cfg.base_url

    # --- tokens ---
    def set_tokens(self, tokens: TokenPair | Mapping[str, Any] | None) -> None:
        self._tokens.set_tokens(tokens)

    def get_tokens(self) -> TokenPair:
        return self._tokens.get_tokens()

    def get_default_headers(self) -> dict[str, str]:
        return self._tokens.headers

    def unset_authorization(self) -> None:
        self._tokens.unset_authorization()

    # --- logging ---
    @property
    def http_logger(self) -> HttpLogger:
        return self._t.http_logger

    def init_logger(self, options: Mapping[str, Any]) -> bool:
        log_file = options.get("log_file")
        if not log_file:
            return False
        previous = self._t.http_logger
        self._t.http_logger = LoggingHttpLogger.to_file(str(log_file))
        close_http_logger(previous)
        return True

    # --- last response ---
    def get_response(self) -> httpx.Response | None:
        return self._t.last_response

    def get_status_code(self) -> int | None:
        response = self._t.last_response
        return response.status_code if response is not None else None

    def get_status_message(self) -> str | None:
        response = self._t.last_response
        return response.reason_phrase if response is not None else None

    def get_response_body(self) -> dict[str, Any] | None:
        return decode_body(self._t.last_response)

    # --- core ---
    def refresh_tokens(self) -> None:
        """Obtain a new token pair using the stored refresh token."""
        refresh_token = self._tokens.get_tokens().refresh_token
        if not refresh_token:
            raise PreconditionError("You must be logged in to renew token")

        response = self._t.send(
            "POST",
            "/auth",
            headers={"Authorization": f"Bearer {refresh_token}"},
            body={"grant_type": "refresh_token"},
        )
        body = decode_body(response) or {}
        meta = body.get("meta")
        if not isinstance(meta, dict) or not meta.get("jwt"):
            raise ProtocolError("Invalid response from server")
        self._tokens.set_tokens(TokenPair.from_meta(meta))
        log.debug("tokens renewed")

    def send_request_retry(
            self,
            method: str,
            path: str,
            query: Mapping[str, Any] | None = None,
            headers: Mapping[str, str | None] | None = None,
            body: Any = None,
    ) -> httpx.Response:
        """Send a request, refreshing tokens and retrying once on an expired token."""
        response = self._t.exchange(method, path, query=query, headers=headers, body=body)
        error = api_error_for(response)
        if error is not None and error.is_token_expired():
            log.info("%s %s: token expired, renewing and retrying", method, path)
            self.refresh_tokens()
            response = self._t.exchange(
                method,
                path,
                query=query,
                headers=_without_authorization(headers),
                body=body,
            )
            error = api_error_for(response)
        if error is not None:
            raise error
        return response

    def request(
            self,
            method: str,
            path: str,
            *,
            query: Mapping[str, Any] | None = None,
            headers: Mapping[str, str | None] | None = None,
            body: Any = None,
    ) -> httpx.Response:
        return self.send_request_retry(method, path, query, headers, body)

    def get(self, path: str, query: Mapping[str, Any] | None = None, headers: Mapping[str, str] | None = None):
        self.send_request_retry("GET", path, query, headers)
        return self.get_response_body()

    def post(self, path: str, body: Any = None, headers: Mapping[str, str] | None = None):
        self.send_request_retry("POST", path, None, headers, body)
        return self.get_response_body()

    def patch(self, path: str, body: Any = None, headers: Mapping[str, str] | None = None):
        self.send_request_retry("PATCH", path, None, headers, body)
        return self.get_response_body()

    def delete(self, path: str, body: Any = None, headers: Mapping[str, str] | None = None):
        self.send_request_retry("DELETE", path, None, headers, body)
        return self.get_response_body()
