"""CLI application for ddlhooks event triggers."""

import logging
from pathlib import Path

import typer
from rich.logging import RichHandler

from ddlhooks.cli.commands import dispatch
from ddlhooks.cli.commands.triggers import app as triggers_app
from ddlhooks.cli.common.context import build_context
from ddlhooks.cli.common.options import RoleOpt, SearchPathOpt, StoreOpt, VerboseOpt
from ddlhooks.cli.common.output import console

app = typer.Typer(
    help="ddlhooks - event triggers for administrative commands",
    no_args_is_help=True,
)

app.add_typer(triggers_app, name="triggers")
app.command("lookup")(dispatch.lookup)
app.command("deparse")(dispatch.deparse_cmd)
app.command("fire")(dispatch.fire)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.callback()
def _init(
    ctx: typer.Context,
    verbose: bool = VerboseOpt,
    store: Path | None = StoreOpt,
    search_path: str | None = SearchPathOpt,
    role: str | None = RoleOpt,
):
    """Load settings and open the registration store."""
    _configure_logging(verbose)
    ctx.obj = build_context(store, search_path=search_path, role=role)


if __name__ == "__main__":
    app()
