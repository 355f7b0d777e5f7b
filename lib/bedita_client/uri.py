from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import httpx

from .errors import ConfigurationError


def is_absolute(path: str) -> bool:
    return path.startswith("http://") or path.startswith("https://")


def flatten_query(query: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten nested mappings into bracketed keys.

    ``{"filter": {"type": "documents"}}`` becomes ``{"filter[type]": "documents"}``.
    Lists are left for ``urlencode(doseq=True)``, ``None`` values are dropped.
    """
    flat: dict[str, Any] = {}
    for key, value in query.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        if value is None:
            continue
        if isinstance(value, Mapping):
            flat.update(flatten_query(value, name))
        else:
            flat[name] = value
    return flat


def _check(uri: str) -> None:
    try:
        parts = urlsplit(uri)
        httpx.URL(uri)
    except (httpx.InvalidURL, ValueError) as exc:
        raise ConfigurationError(f"Invalid request URI '{uri}': {exc}") from exc
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ConfigurationError(f"Invalid request URI '{uri}': check the API base URL")


def build_uri(base_url: str, path: str, query: Mapping[str, Any] | None = None) -> str:
    """Resolve ``path`` against ``base_url`` and merge ``query`` into it.

    Absolute ``http(s)://`` paths are used as they are. A query string already
    present in ``path`` is the base of the merge; a key given in ``query``
    replaces every value the embedded query had for it.
    """
    if not is_absolute(path):
        if not path.startswith("/"):
            path = "/" + path
        path = base_url.rstrip("/") + path

    _check(path)
    if not query:
        return path

    merged: dict[str, list[Any]] = {}
    parts = urlsplit(path)
    for key, value in parse_qsl(parts.query, keep_blank_values=True):
        merged.setdefault(key, []).append(value)
    for key, value in flatten_query(query).items():
        merged[key] = list(value) if isinstance(value, (list, tuple)) else [value]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(merged, doseq=True), parts.fragment))
