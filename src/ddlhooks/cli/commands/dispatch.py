"""Commands exercising dispatch: lookup, deparse and fire."""

from __future__ import annotations

from pathlib import Path

import typer

from ddlhooks.cli.common.context import AppContext
from ddlhooks.cli.common.exits import ExitCode, die, exit_from_exc, warn_exit
from ddlhooks.cli.common.options import (
    CommandTagOpt,
    FireEventOpt,
    NodeFileArg,
    RequiredEventOpt,
    SubKindOpt,
)
from ddlhooks.cli.common.output import out
from ddlhooks.core import nodes as n
from ddlhooks.core.adapters.callbacks import PythonCallbackRuntime
from ddlhooks.core.adapters.nodecodec import NodeDecodeError, load_node
from ddlhooks.core.classifier import classify_or_none
from ddlhooks.core.deparse import NOT_AVAILABLE, deparse
from ddlhooks.core.errors import (
    CatalogDriftError,
    CommandCancelled,
    ConfigurationError,
    DeparseError,
)
from ddlhooks.core.lifecycle import CommandLifecycle
from ddlhooks.core.taxonomy import parse_command_tag, parse_event_name


def _load_node_or_exit(path: Path) -> n.Node:
    try:
        return load_node(path)
    except (OSError, NodeDecodeError) as exc:
        exit_from_exc(exc, message=f"cannot load {path}: {exc}", code=ExitCode.USAGE)


def _sub_kind_or_exit(raw: str | None) -> n.ObjectKind | None:
    if raw is None:
        return None
    key = " ".join(raw.split()).upper()
    try:
        return n.ObjectKind(key)
    except ValueError:
        pass
    try:
        return n.ObjectKind[key.replace(" ", "_")]
    except KeyError as exc:
        exit_from_exc(exc, message=f'unknown object kind "{raw}"', code=ExitCode.USAGE)


def lookup(
    ctx: typer.Context,
    event: str = RequiredEventOpt,
    tag: str = CommandTagOpt,
):
    """
    Show which callbacks fire for an event and command tag, in order.
    """
    appctx: AppContext = ctx.obj
    try:
        parsed_event = parse_event_name(event)
        kind = parse_command_tag(tag)
        triggers = appctx.session.cache.triggers(parsed_event, kind)
    except ConfigurationError as exc:
        exit_from_exc(exc, code=ExitCode.USAGE)
    except CatalogDriftError as exc:
        exit_from_exc(exc, code=ExitCode.DRIFT)

    if not triggers:
        warn_exit(f"No event triggers fire for {kind.tag} at {parsed_event.value}")

    out.triggers_table(triggers, title=f"{parsed_event.value} / {kind.tag}")


def deparse_cmd(
    ctx: typer.Context,
    path: Path = NodeFileArg,
):
    """
    Rebuild the command text of a JSON command node.
    """
    appctx: AppContext = ctx.obj
    node = _load_node_or_exit(path)

    try:
        result = deparse(
            node,
            expressions=appctx.session.expressions,
            search_path=appctx.session.search_path,
        )
    except DeparseError as exc:
        exit_from_exc(exc, message=f"deparse failed: {exc}")

    if result is NOT_AVAILABLE:
        warn_exit(f"No deparse support for {type(node).__name__}")

    kind = classify_or_none(node)
    out.text(result.text)
    out.kv(
        {
            "tag": kind.tag if kind else "-",
            "schema": result.schema_name or "-",
            "object": result.object_name,
        }
    )


def fire(
    ctx: typer.Context,
    path: Path = NodeFileArg,
    event: list[str] = FireEventOpt,
    sub_kind: str | None = SubKindOpt,
):
    """
    Run the event lifecycle of a JSON command node and show the callbacks fired.
    """
    appctx: AppContext = ctx.obj
    node = _load_node_or_exit(path)
    runtime = PythonCallbackRuntime()
    lifecycle = CommandLifecycle(node, appctx.session, runtime, _sub_kind_or_exit(sub_kind))

    if lifecycle.kind is None:
        warn_exit(f"{type(node).__name__} does not fire event triggers")

    try:
        events = [parse_event_name(e) for e in event]
    except ConfigurationError as exc:
        exit_from_exc(exc, code=ExitCode.USAGE)

    cancelled: CommandCancelled | None = None
    try:
        if events:
            for ev in events:
                lifecycle.fire(ev)
        else:
            lifecycle.run_command(lambda: None)
    except CommandCancelled as exc:
        cancelled = exc
    except CatalogDriftError as exc:
        exit_from_exc(exc, code=ExitCode.DRIFT)
    except (LookupError, ImportError) as exc:
        exit_from_exc(exc, message=f"callback failed: {exc}")

    if runtime.invocations:
        out.payloads_table(runtime.invocations)
    else:
        out.info(f"No event triggers fired for {lifecycle.kind.tag}")

    if cancelled is not None:
        die(str(cancelled), code=ExitCode.CANCELLED)
