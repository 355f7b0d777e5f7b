from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

USER_AGENT = "bedita-client/0.1.0"
ACCEPT_JSONAPI = "application/vnd.api+json"


@dataclass(frozen=True)
class TokenPair:
    access_token: str | None = None
    refresh_token: str | None = None

    @classmethod
    def from_meta(cls, meta: Mapping[str, Any] | None) -> "TokenPair":
        """Build a pair from the ``meta`` of an ``/auth`` response (``jwt``/``renew`` keys)."""
        meta = meta or {}
        access = meta.get("jwt")
        refresh = meta.get("renew")
        return cls(
            access_token=str(access) if access else None,
            refresh_token=str(refresh) if refresh else None,
        )

    def as_meta(self) -> dict[str, str]:
        data: dict[str, str] = {}
        if self.access_token:
            data["jwt"] = self.access_token
        if self.refresh_token:
            data["renew"] = self.refresh_token
        return data

    def __bool__(self) -> bool:
        return bool(self.access_token or self.refresh_token)


def coerce_tokens(tokens: TokenPair | Mapping[str, Any] | None) -> TokenPair:
    if tokens is None:
        return TokenPair()
    if isinstance(tokens, TokenPair):
        return tokens
    return TokenPair.from_meta(tokens)


class TokenStore:
    """Current token pair and the default headers derived from it.

    Headers are recomputed from scratch on every change so the two never drift.
    """

    def __init__(
            self,
            *,
            api_key: str | None = None,
            tokens: TokenPair | Mapping[str, Any] | None = None,
            client_version: str | None = None,
    ):
        self._api_key = api_key or None
        self._client_version = client_version
        self._tokens = TokenPair()
        self._headers: dict[str, str] = {}
        self.set_tokens(tokens)

    def set_tokens(self, tokens: TokenPair | Mapping[str, Any] | None) -> None:
        self._tokens = coerce_tokens(tokens)
        headers = {
            "Accept": ACCEPT_JSONAPI,
            "User-Agent": USER_AGENT,
        }
        if self._client_version:
            headers["X-Client-Version"] = self._client_version
        if self._api_key:
            headers["X-Api-Key"] = self._api_key
        if self._tokens.access_token:
            headers["Authorization"] = f"Bearer {self._tokens.access_token}"
        self._headers = headers

    def get_tokens(self) -> TokenPair:
        return self._tokens

    def clear(self) -> None:
        self.set_tokens(None)

    def unset_authorization(self) -> None:
        self._headers.pop("Authorization", None)

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._headers)
