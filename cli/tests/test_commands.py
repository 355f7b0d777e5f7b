from __future__ import annotations

import pytest
import typer
from typer.testing import CliRunner

from bedita_client import ApiError, TokenPair
from bedita_cli import console, main
from bedita_cli.commands import auth_cmd, media_cmd, objects_cmd
from bedita_cli.config import AppConfig, AuthConfig


class _FakeClient:
    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.closed = False

    def save(self, type, data):
        self.calls.append(("save", type, dict(data)))
        return {"data": {"id": data.get("id") or "42", "type": type}}

    def get_objects(self, type, query):
        self.calls.append(("get_objects", type, query))
        return {
            "data": [{"id": "1", "type": "documents", "attributes": {"title": "Hello", "status": "on"}}],
            "meta": {"pagination": {"count": 1, "page": 1, "page_count": 1}},
        }

    def delete_object(self, id, type):
        self.calls.append(("delete_object", id, type))
        raise ApiError(404, "[404] Not Found")

    def remove(self, id):
        self.calls.append(("remove", id))

    def create_media(self, filepath, type, body):
        self.calls.append(("create_media", type, body))
        return {"data": {"id": "7", "type": type}}

    def login(self, username, password):
        self.calls.append(("login", username))
        return TokenPair("jwt", "renew")

    def close(self) -> None:
        self.closed = True


def _make_cfg() -> AppConfig:
    return AppConfig(base_url="http://example.test", auth=AuthConfig())


@pytest.fixture
def fake_client(monkeypatch) -> _FakeClient:
    client = _FakeClient()
    for module in (objects_cmd, media_cmd, auth_cmd):
        monkeypatch.setattr(module, "load_config", _make_cfg)
        monkeypatch.setattr(module, "make_client", lambda *_args, **_kwargs: client)
    for module in (objects_cmd, media_cmd):
        monkeypatch.setattr(module, "persist_tokens", lambda *_args, **_kwargs: False)
    return client


def test_help_lists_command_groups() -> None:
    result = CliRunner().invoke(main.app, ["--help"])
    assert result.exit_code == 0
    for name in ("auth", "objects", "media", "schema", "whoami"):
        assert name in result.output


def test_parse_attributes_decodes_json_values() -> None:
    attrs = objects_cmd.parse_attributes(["title=Hello", "count=3", "flags=[1, 2]", "empty="])
    assert attrs == {"title": "Hello", "count": 3, "flags": [1, 2], "empty": ""}
    with pytest.raises(typer.BadParameter):
        objects_cmd.parse_attributes(["novalue"])


def test_save_creates_object(fake_client) -> None:
    result = CliRunner().invoke(main.app, ["objects", "save", "documents", "--attr", "title=A"])

    assert result.exit_code == 0, result.output
    assert fake_client.calls == [("save", "documents", {"title": "A"})]
    assert "Created documents/42" in result.output
    assert fake_client.closed is True


def test_save_with_id_updates_object(fake_client) -> None:
    objects_cmd.save_object(type="documents", attrs=["title=B"], id="5", base_url=None, json_out=True)
    assert fake_client.calls == [("save", "documents", {"title": "B", "id": "5"})]


def test_list_passes_filters_and_paging(fake_client) -> None:
    result = CliRunner().invoke(
        main.app, ["objects", "list", "documents", "--filter", "status=on", "--page-size", "5"]
    )

    assert result.exit_code == 0, result.output
    assert fake_client.calls == [
        ("get_objects", "documents", {"page": 1, "page_size": 5, "filter[status]": "on"})
    ]
    assert "Hello" in result.output


def test_delete_error_exits_with_code_2(fake_client) -> None:
    result = CliRunner().invoke(main.app, ["objects", "delete", "9", "--type", "documents"])

    assert result.exit_code == 2
    assert "Failed to delete documents/9" in result.output
    assert fake_client.closed is True


def test_remove_requires_confirmation(fake_client, monkeypatch) -> None:
    monkeypatch.setattr(typer, "confirm", lambda *_args, **_kwargs: False)

    with pytest.raises(typer.Exit) as exc:
        objects_cmd.remove_object(id="3", yes=False, base_url=None)

    assert exc.value.exit_code == 0
    assert fake_client.calls == []


def test_remove_skips_prompt_with_yes(fake_client, monkeypatch) -> None:
    monkeypatch.setattr(typer, "confirm", lambda *_args, **_kwargs: (_ for _ in ()).throw(RuntimeError("prompted")))

    objects_cmd.remove_object(id="3", yes=True, base_url=None)

    assert fake_client.calls == [("remove", "3")]


def test_media_upload_builds_media_body(fake_client, tmp_path) -> None:
    path = tmp_path / "photo.jpg"
    path.write_bytes(b"jpeg")

    result = CliRunner().invoke(main.app, ["media", "upload", str(path)])

    assert result.exit_code == 0, result.output
    assert fake_client.calls == [
        ("create_media", "images", {"data": {"type": "images", "attributes": {"title": "photo.jpg"}}})
    ]


def test_login_saves_tokens(fake_client, monkeypatch) -> None:
    saved = []
    monkeypatch.setattr(auth_cmd, "save_config", lambda cfg: saved.append(cfg) or "/tmp/config.toml")

    result = CliRunner().invoke(main.app, ["auth", "login", "--username", "bedita", "--password", "pw"])

    assert result.exit_code == 0, result.output
    assert saved[0].auth == AuthConfig(jwt="jwt", renew="renew")
    assert fake_client.calls == [("login", "bedita")]


def test_unauthorized_failure_points_to_login(capsys) -> None:
    with pytest.raises(typer.Exit) as exc:
        console.fail_request("list documents", ApiError(401, "[401] Unauthorized"))

    assert exc.value.exit_code == 2
    out = capsys.readouterr().out
    assert "[401] Unauthorized" in out
    assert "bedita auth login" in out
