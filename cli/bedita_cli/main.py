from __future__ import annotations

import typer

from .commands import auth_cmd, media_cmd, objects_cmd
from .http import set_http_log_file
from .logging_ import setup_logging


def _build_app() -> typer.Typer:
    app = typer.Typer(
        name="bedita",
        help="BEdita API command line client",
        no_args_is_help=True,
    )

    app.add_typer(auth_cmd.app, name="auth")
    app.command("whoami")(auth_cmd.whoami_impl)
    app.add_typer(objects_cmd.app, name="objects")
    app.add_typer(media_cmd.app, name="media")
    app.command("schema")(objects_cmd.schema_impl)

    @app.callback()
    def _main(
            verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logs."),
            log_file: str | None = typer.Option(
                None,
                "--log-file",
                help="Write API requests and responses to this file (credentials masked).",
            ),
    ):
        setup_logging(verbose)
        set_http_log_file(log_file)

    return app


app = _build_app()
