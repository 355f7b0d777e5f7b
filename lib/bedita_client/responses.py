from __future__ import annotations

import json
from typing import Any

import httpx

from .errors import ApiError


def decode_body(response: httpx.Response | None) -> dict[str, Any] | None:
    """JSON object of ``response``, or None when absent, empty, invalid or not an object."""
    if response is None:
        return None
    if not response.content:
        return None
    try:
        data = json.loads(response.content)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def api_error_for(response: httpx.Response) -> ApiError | None:
    if response.status_code < 400:
        return None

    code = str(response.status_code)
    reason = response.reason_phrase or ""
    attributes: dict[str, Any] = {}

    body = decode_body(response)
    error = body.get("error") if body else None
    if isinstance(error, dict):
        attributes = error
        if error.get("code"):
            code = str(error["code"])
        if error.get("title"):
            reason = str(error["title"])
    elif isinstance(error, str) and error:
        reason = error

    return ApiError(response.status_code, f"[{code}] {reason}".rstrip(), attributes)
