from __future__ import annotations

import json

import typer
from bedita_client import BEditaClientError

from .. import console
from ..config import load_config
from ..http import make_client, persist_tokens

app = typer.Typer(help="Objects commands.")


def parse_attributes(pairs: list[str]) -> dict:
    """Turn ``key=value`` pairs into attributes; values are parsed as JSON when possible."""
    attributes: dict = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            raise typer.BadParameter(f"expected key=value, got '{pair}'", param_hint="--attr")
        try:
            attributes[key] = json.loads(raw)
        except ValueError:
            attributes[key] = raw
    return attributes


@app.command("list")
def list_objects(
        type: str = typer.Argument("objects", help="Object type."),
        page: int = typer.Option(1, "--page", help="Page number."),
        page_size: int = typer.Option(20, "--page-size", help="Items per page."),
        filters: list[str] = typer.Option([], "--filter", help="Filter as key=value, repeatable."),
        base_url: str | None = typer.Option(None, "--base-url", help="Override base URL."),
        json_out: bool = typer.Option(False, "--json", help="Print raw JSON."),
):
    query: dict = {"page": page, "page_size": page_size}
    for key, value in parse_attributes(filters).items():
        query[f"filter[{key}]"] = value
    cfg = load_config()
    client = make_client(cfg, profile=None, base_url_override=base_url)
    try:
        data = client.get_objects(type, query) or {}
    except BEditaClientError as e:
        console.fail_request(f"list {type}", e)
    finally:
        persist_tokens(cfg, client)
        client.close()

    if json_out:
        console.print_json(data)
        return

    pagination = (data.get("meta") or {}).get("pagination") or {}
    if pagination:
        console.info(
            f"count={pagination.get('count')} page={pagination.get('page')}/{pagination.get('page_count')}"
        )

    rows = []
    for item in data.get("data") or []:
        attributes = item.get("attributes") or {}
        rows.append((item.get("id"), item.get("type"), attributes.get("title"), attributes.get("status")))
    console.print_table(type, ("id", "type", "title", "status"), rows)


@app.command("show")
def show_object(
        id: str = typer.Argument(..., help="Object id or uname."),
        type: str = typer.Option("objects", "--type", help="Object type."),
        base_url: str | None = typer.Option(None, "--base-url", help="Override base URL."),
):
    cfg = load_config()
    client = make_client(cfg, profile=None, base_url_override=base_url)
    try:
        data = client.get_object(id, type)
    except BEditaClientError as e:
        console.fail_request(f"fetch {type}/{id}", e)
    finally:
        persist_tokens(cfg, client)
        client.close()
    console.print_json(data or {})


@app.command("save")
def save_object(
        type: str = typer.Argument(..., help="Object type."),
        attrs: list[str] = typer.Option([], "--attr", help="Attribute as key=value, repeatable."),
        id: str | None = typer.Option(None, "--id", help="Update this object instead of creating one."),
        base_url: str | None = typer.Option(None, "--base-url", help="Override base URL."),
        json_out: bool = typer.Option(False, "--json", help="Print raw JSON."),
):
    attributes = parse_attributes(attrs)
    if id:
        attributes["id"] = id
    cfg = load_config()
    client = make_client(cfg, profile=None, base_url_override=base_url)
    try:
        data = client.save(type, attributes) or {}
    except BEditaClientError as e:
        console.fail_request(f"save {type}", e)
    finally:
        persist_tokens(cfg, client)
        client.close()

    if json_out:
        console.print_json(data)
        return
    saved_id = (data.get("data") or {}).get("id")
    console.ok(f"{'Updated' if id else 'Created'} {type}/{saved_id}.")


@app.command("delete", help="Move an object to the trashcan.")
def delete_object(
        id: str = typer.Argument(..., help="Object id."),
        type: str = typer.Option("objects", "--type", help="Object type."),
        base_url: str | None = typer.Option(None, "--base-url", help="Override base URL."),
):
    cfg = load_config()
    client = make_client(cfg, profile=None, base_url_override=base_url)
    try:
        client.delete_object(id, type)
    except BEditaClientError as e:
        console.fail_request(f"delete {type}/{id}", e)
    finally:
        persist_tokens(cfg, client)
        client.close()
    console.ok(f"{type}/{id} moved to trash.")


@app.command("restore", help="Restore an object from the trashcan.")
def restore_object(
        id: str = typer.Argument(..., help="Object id."),
        type: str = typer.Option("objects", "--type", help="Object type."),
        base_url: str | None = typer.Option(None, "--base-url", help="Override base URL."),
):
    cfg = load_config()
    client = make_client(cfg, profile=None, base_url_override=base_url)
    try:
        client.restore_object(id, type)
    except BEditaClientError as e:
        console.fail_request(f"restore {id}", e)
    finally:
        persist_tokens(cfg, client)
        client.close()
    console.ok(f"{type}/{id} restored.")


@app.command("remove", help="Permanently remove an object from the trashcan.")
def remove_object(
        id: str = typer.Argument(..., help="Object id."),
        yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
        base_url: str | None = typer.Option(None, "--base-url", help="Override base URL."),
):
    if not yes and not typer.confirm(f"Permanently remove object {id}?", default=False):
        raise typer.Exit(code=0)
    cfg = load_config()
    client = make_client(cfg, profile=None, base_url_override=base_url)
    try:
        client.remove(id)
    except BEditaClientError as e:
        console.fail_request(f"remove {id}", e)
    finally:
        persist_tokens(cfg, client)
        client.close()
    console.ok(f"Object {id} removed.")


def schema_impl(
        type: str = typer.Argument(..., help="Object or resource type."),
        base_url: str | None = typer.Option(None, "--base-url", help="Override base URL."),
):
    cfg = load_config()
    client = make_client(cfg, profile=None, base_url_override=base_url)
    try:
        data = client.schema(type)
    except BEditaClientError as e:
        console.fail_request(f"fetch schema of {type}", e)
    finally:
        persist_tokens(cfg, client)
        client.close()
    console.print_json(data or {})
