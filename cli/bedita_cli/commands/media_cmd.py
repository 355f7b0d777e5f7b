from __future__ import annotations

from pathlib import Path

import typer
from bedita_client import BEditaClientError

from .. import console
from ..config import load_config
from ..http import make_client, persist_tokens

app = typer.Typer(help="Media commands.")


@app.command("upload", help="Upload a file and create a media object for it.")
def upload(
        filepath: Path = typer.Argument(..., help="File to upload."),
        type: str = typer.Option("images", "--type", help="Media type (images, files, videos...)."),
        title: str | None = typer.Option(None, "--title", help="Media title, defaults to the file name."),
        base_url: str | None = typer.Option(None, "--base-url", help="Override base URL."),
        json_out: bool = typer.Option(False, "--json", help="Print raw JSON."),
):
    body = {"data": {"type": type, "attributes": {"title": title or filepath.name}}}
    cfg = load_config()
    client = make_client(cfg, profile=None, base_url_override=base_url)
    try:
        data = client.create_media(filepath, type, body) or {}
    except BEditaClientError as e:
        console.fail(f"Upload failed: {e}")
    finally:
        persist_tokens(cfg, client)
        client.close()

    if json_out:
        console.print_json(data)
        return
    media_id = (data.get("data") or {}).get("id")
    console.ok(f"Created {type}/{media_id} from {filepath.name}.")
