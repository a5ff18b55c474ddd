"""Process exit codes and the helpers that print a last message and exit."""

from enum import IntEnum
from typing import NoReturn

import typer

from ddlhooks.cli.common.output import out
from ddlhooks.core.errors import CatalogDriftError


class ExitCode(IntEnum):
    """Exit statuses of ddlhooks commands."""

    OK = 0
    ERROR = 1
    USAGE = 2
    DRIFT = 3
    CANCELLED = 4


def ok_exit(msg: str | None = None) -> NoReturn:
    if msg:
        out.info(msg)
    raise typer.Exit(ExitCode.OK)


def die(msg: str, code: ExitCode = ExitCode.ERROR) -> NoReturn:
    out.error(msg)
    raise typer.Exit(code)


def warn_exit(msg: str, code: ExitCode = ExitCode.OK) -> NoReturn:
    """Print a warning and exit, with status 0 unless `code` says otherwise."""
    out.warn(msg)
    raise typer.Exit(code)


def exit_from_exc(
    exc: Exception, *, message: str | None = None, code: ExitCode = ExitCode.ERROR
) -> NoReturn:
    """
    Print `message` (or the exception text) and exit, chaining `exc`.

    Catalog drift always exits with ExitCode.DRIFT whatever `code` says.
    """
    if isinstance(exc, CatalogDriftError):
        code = ExitCode.DRIFT
    out.error(message or str(exc))
    raise typer.Exit(code) from exc
