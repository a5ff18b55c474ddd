"""Commands for managing event triggers."""

from __future__ import annotations

import typer

from ddlhooks.cli.common.context import AppContext
from ddlhooks.cli.common.exits import ExitCode, die, exit_from_exc, ok_exit, warn_exit
from ddlhooks.cli.common.options import (
    CallbackOpt,
    ConfirmOpt,
    EventOpt,
    IfExistsOpt,
    ModeOpt,
    RequiredEventOpt,
    TagOpt,
    TimingOpt,
)
from ddlhooks.cli.common.output import out
from ddlhooks.cli.tui import select_registrations
from ddlhooks.core.errors import ConfigurationError
from ddlhooks.core.registrations import Registration
from ddlhooks.core.taxonomy import Enabled, Event, Timing, parse_event_name

app = typer.Typer(
    help="Create / list / drop / enable / disable / rename event triggers",
    no_args_is_help=True,
)

_MODES = {
    "origin": Enabled.ORIGIN_ONLY,
    "always": Enabled.ALWAYS,
    "replica": Enabled.REPLICA_ONLY,
}


def _event_or_exit(raw: str) -> Event:
    try:
        return parse_event_name(raw)
    except ConfigurationError as exc:
        exit_from_exc(exc, code=ExitCode.USAGE)


def _timing_or_exit(raw: str) -> Timing:
    key = " ".join(raw.split()).upper()
    try:
        return Timing(key)
    except ValueError as exc:
        exit_from_exc(
            exc,
            message=f'invalid timing "{raw}" (before, after, instead of)',
            code=ExitCode.USAGE,
        )


def _resolve_event(appctx: AppContext, name: str, event: str | None) -> Event:
    """Return the event of a named trigger, inferring it when unambiguous."""
    if event is not None:
        return _event_or_exit(event)
    matches = [r for r in appctx.store.all() if r.name == name]
    if not matches:
        die(f'event trigger "{name}" does not exist')
    if len(matches) > 1:
        events = ", ".join(r.event.value for r in matches)
        die(f'"{name}" exists on several events ({events}); pass --event', ExitCode.USAGE)
    return matches[0].event


@app.command()
def create(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Trigger name, unique per event"),
    event: str = RequiredEventOpt,
    callback: str = CallbackOpt,
    tag: list[str] = TagOpt,
    timing: str = TimingOpt,
):
    """
    Create an event trigger.
    """
    appctx: AppContext = ctx.obj
    try:
        created = appctx.session.create_trigger(
            name,
            _event_or_exit(event),
            callback,
            tags=tag or None,
            timing=_timing_or_exit(timing),
        )
    except ConfigurationError as exc:
        exit_from_exc(exc)

    out.success(f'Created event trigger "{created.name}" on {created.event.value}')
    out.registrations_table([created], title="Created")


@app.command("list")
def list_(
    ctx: typer.Context,
    event: str | None = EventOpt,
):
    """
    List event triggers in firing order.
    """
    appctx: AppContext = ctx.obj
    if event is not None:
        registrations = list(appctx.store.scan_by_event(_event_or_exit(event)))
    else:
        registrations = appctx.store.all()

    if not registrations:
        warn_exit("No event triggers found")

    out.registrations_table(registrations)


@app.command()
def drop(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help="Trigger name (omit to pick)"),
    event: str | None = EventOpt,
    if_exists: bool = IfExistsOpt,
    confirm: bool = ConfirmOpt,
):
    """
    Drop event triggers, interactively when no name is given.
    """
    appctx: AppContext = ctx.obj

    if name is not None:
        if event is None and if_exists and not any(
            r.name == name for r in appctx.store.all()
        ):
            ok_exit(f'event trigger "{name}" does not exist, skipping')
        targets = [(name, _resolve_event(appctx, name, event))]
    else:
        candidates: list[Registration] = (
            list(appctx.store.scan_by_event(_event_or_exit(event)))
            if event is not None
            else appctx.store.all()
        )
        if not candidates:
            warn_exit("No event triggers found")
        picked = select_registrations(candidates)
        if not picked:
            warn_exit("No event triggers selected")
        out.registrations_table(picked, title="Selected")
        if confirm and not out.confirm(f"Drop {len(picked)} event trigger(s)?"):
            ok_exit("Cancelled")
        targets = [(r.name, r.event) for r in picked]

    dropped = 0
    for trigger_name, trigger_event in targets:
        try:
            removed = appctx.session.drop_trigger(
                trigger_name, trigger_event, missing_ok=if_exists
            )
        except ConfigurationError as exc:
            exit_from_exc(exc)
        if removed:
            dropped += 1
        else:
            out.info(f'event trigger "{trigger_name}" does not exist, skipping')

    out.success(f"Dropped {dropped} event trigger(s)")


@app.command()
def enable(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Trigger name"),
    event: str | None = EventOpt,
    mode: str = ModeOpt,
):
    """
    Enable an event trigger (origin, always or replica mode).
    """
    appctx: AppContext = ctx.obj
    enabled = _MODES.get(mode.strip().lower())
    if enabled is None:
        die(f'invalid mode "{mode}" (origin, always, replica)', code=ExitCode.USAGE)

    trigger_event = _resolve_event(appctx, name, event)
    try:
        appctx.session.set_trigger_enabled(name, trigger_event, enabled)
    except ConfigurationError as exc:
        exit_from_exc(exc)
    out.success(f'Enabled event trigger "{name}" ({mode.lower()})')


@app.command()
def disable(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Trigger name"),
    event: str | None = EventOpt,
):
    """
    Disable an event trigger.
    """
    appctx: AppContext = ctx.obj
    trigger_event = _resolve_event(appctx, name, event)
    try:
        appctx.session.set_trigger_enabled(name, trigger_event, Enabled.DISABLED)
    except ConfigurationError as exc:
        exit_from_exc(exc)
    out.success(f'Disabled event trigger "{name}"')


@app.command()
def rename(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Current trigger name"),
    new_name: str = typer.Argument(..., help="New trigger name"),
    event: str | None = EventOpt,
):
    """
    Rename an event trigger. This changes its place in the firing order.
    """
    appctx: AppContext = ctx.obj
    trigger_event = _resolve_event(appctx, name, event)
    try:
        appctx.session.rename_trigger(name, trigger_event, new_name)
    except ConfigurationError as exc:
        exit_from_exc(exc)
    out.success(f'Renamed event trigger "{name}" to "{new_name}"')
