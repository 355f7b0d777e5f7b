from __future__ import annotations

import json
import logging

import httpx

from bedita_client import TokenPair
from bedita_client.http_log import (
    MASK,
    LoggingHttpLogger,
    NullHttpLogger,
    redact_request_body,
    redact_request_headers,
    redact_response_body,
)
from conftest import Scripted


def test_request_body_passwords_are_masked() -> None:
    body = {
        "username": "bedita",
        "password": "s3cret",
        "old_password": "0ld",
        "data": {"attributes": {"confirm-password": "s3cret", "title": "x"}},
    }
    cleaned = redact_request_body(json.dumps(body).encode())

    assert "s3cret" not in cleaned
    assert "0ld" not in cleaned
    data = json.loads(cleaned)
    assert data["password"] == MASK
    assert data["old_password"] == MASK
    assert data["data"]["attributes"]["confirm-password"] == MASK
    assert data["username"] == "bedita"
    assert data["data"]["attributes"]["title"] == "x"


def test_empty_and_binary_bodies() -> None:
    assert redact_request_body(b"") == "(empty)"
    assert redact_response_body(b"") == "(empty)"
    assert redact_request_body(b"\x89PNG") == "(binary, 4 bytes)"


def test_request_headers_are_masked() -> None:
    request = httpx.Request(
        "GET",
        "https://api.example.test/",
        headers={"Authorization": "Bearer jwt", "X-Api-Key": "key", "Accept": "application/json"},
    )
    headers = json.loads(redact_request_headers(request))

    assert headers["Authorization"] == MASK
    assert headers["X-Api-Key"] == MASK
    assert headers["Accept"] == "application/json"


def test_response_tokens_are_masked() -> None:
    cleaned = redact_response_body(json.dumps({"meta": {"jwt": "aaa", "renew": "bbb", "x": 1}}).encode())
    assert json.loads(cleaned) == {"meta": {"jwt": MASK, "renew": MASK, "x": 1}}


def test_null_logger_is_default(client_for) -> None:
    client = client_for(Scripted())
    assert isinstance(client.http_logger, NullHttpLogger)


def test_logging_logger_emits_info_lines(caplog) -> None:
    logger = logging.getLogger("bedita-client-test")
    http_logger = LoggingHttpLogger(logger)
    request = httpx.Request("POST", "https://api.example.test/auth", json={"password": "s3cret"})
    response = httpx.Response(200, json={"meta": {"jwt": "aaa"}}, request=request)

    with caplog.at_level(logging.INFO, logger="bedita-client-test"):
        http_logger.log_request(request)
        http_logger.log_response(response)

    assert len(caplog.records) == 2
    assert caplog.records[0].getMessage().startswith("Request: POST https://api.example.test/auth")
    assert caplog.records[1].getMessage().startswith("Response: 200 OK")
    assert "s3cret" not in caplog.text
    assert "aaa" not in caplog.text


def test_init_logger_requires_log_file(client_for) -> None:
    client = client_for(Scripted())
    assert client.init_logger({}) is False
    assert isinstance(client.http_logger, NullHttpLogger)


def test_init_logger_writes_redacted_file(client_for, tmp_path) -> None:
    log_file = tmp_path / "client.log"
    handler = Scripted(httpx.Response(200, json={"meta": {"jwt": "new-jwt", "renew": "new-renew"}}))
    client = client_for(handler, tokens=TokenPair("old-jwt", "old-renew"))

    assert client.init_logger({"log_file": str(log_file)}) is True
    client.authenticate("bedita", "plaintext-password")

    for h in client.http_logger.logger.handlers:
        h.flush()
    contents = log_file.read_text(encoding="utf-8")
    assert "Request: POST https://api.example.test/auth" in contents
    assert "Response: 200 OK" in contents
    assert "plaintext-password" not in contents
    assert "new-jwt" not in contents
    assert "api-key" not in contents
    assert MASK in contents


def test_client_close_releases_log_file(client_for, tmp_path) -> None:
    client = client_for(Scripted())
    client.init_logger({"log_file": str(tmp_path / "client.log")})
    (file_handler,) = client.http_logger.logger.handlers

    client.close()

    assert client.http_logger.logger.handlers == []
    assert file_handler.stream is None


def test_init_logger_again_closes_previous_file(client_for, tmp_path) -> None:
    client = client_for(Scripted())
    client.init_logger({"log_file": str(tmp_path / "first.log")})
    first = client.http_logger
    (first_handler,) = first.logger.handlers

    client.init_logger({"log_file": str(tmp_path / "second.log")})

    assert client.http_logger is not first
    assert first.logger.handlers == []
    assert first_handler.stream is None
    assert len(client.http_logger.logger.handlers) == 1


def test_close_leaves_caller_handlers_alone() -> None:
    logger = logging.getLogger("bedita-client-caller")
    handler = logging.NullHandler()
    logger.addHandler(handler)
    try:
        LoggingHttpLogger(logger).close()
        assert handler in logger.handlers
    finally:
        logger.removeHandler(handler)
