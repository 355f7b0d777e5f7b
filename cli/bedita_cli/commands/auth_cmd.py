from __future__ import annotations

import typer
from bedita_client import BEditaClientError

from .. import console
from ..config import load_config, save_config
from ..http import make_client, persist_tokens

app = typer.Typer(help="Auth commands.")


@app.command("login")
def login(
    username: str = typer.Option(..., "--username", prompt=True, help="Username for login."),
    password: str = typer.Option(..., "--password", prompt=True, hide_input=True, help="Password for login."),
    base_url: str | None = typer.Option(None, "--base-url", help="Override base URL."),
    profile: str | None = typer.Option(None, "--profile", help="Config profile to use."),
):
    cfg = load_config()
    client = make_client(cfg, profile=profile, base_url_override=base_url)
    try:
        tokens = client.login(username, password)
    except BEditaClientError as e:
        console.fail(f"Login failed: {e}")
    finally:
        client.close()

    cfg.auth.jwt = tokens.access_token or ""
    cfg.auth.renew = tokens.refresh_token or ""
    save_path = save_config(cfg)
    console.ok(f"Login successful. Tokens saved to {save_path}.")


@app.command("logout", help="Clear stored tokens.")
def logout():
    cfg = load_config()
    cfg.auth.jwt = ""
    cfg.auth.renew = ""
    save_path = save_config(cfg)
    console.ok(f"Tokens cleared from {save_path}.")


def whoami_impl(
    base_url: str | None = typer.Option(None, "--base-url", help="Override base URL."),
    profile: str | None = typer.Option(None, "--profile", help="Config profile to use."),
    json_out: bool = typer.Option(False, "--json", help="Print raw JSON."),
):
    cfg = load_config()
    if not cfg.auth.jwt:
        console.fail("Not logged in. Run: bedita auth login")
    client = make_client(cfg, profile=profile, base_url_override=base_url)
    try:
        data = client.auth_user() or {}
    except BEditaClientError as e:
        console.fail(f"Failed to fetch current user: {e}")
    finally:
        persist_tokens(cfg, client)
        client.close()

    if json_out:
        console.print_json(data)
        return
    user = data.get("data") if isinstance(data.get("data"), dict) else {}
    attributes = user.get("attributes") or {}
    console.ok(f"{attributes.get('username') or '-'} (id {user.get('id') or '-'})")


app.command("whoami")(whoami_impl)
