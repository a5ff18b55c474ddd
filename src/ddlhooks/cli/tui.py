"""Interactive picker used by `triggers drop` when no trigger name is given."""

from __future__ import annotations

import questionary

from ddlhooks.cli.common.tui_style import PICKER_STYLE
from ddlhooks.core.registrations import Registration
from ddlhooks.core.taxonomy import Enabled, Event, events_in_order

_NAME_COLUMN_CAP = 64


def _truncate(text: str, max_len: int) -> str:
    if max_len <= 3 or len(text) <= max_len:
        return text[:max_len]
    return f"{text[: max_len - 3]}..."


def _registration_choice_title(registration: Registration, *, name_width: int) -> str:
    """`<name>  <tags>`, padded so tags line up; disabled triggers are marked."""
    name = _truncate(registration.name, _NAME_COLUMN_CAP).ljust(name_width)
    tags = ", ".join(registration.filter) if registration.filter else "ANY"
    title = f"{name}  {tags}"
    if registration.enabled is Enabled.DISABLED:
        title += "  [disabled]"
    return title


def _grouped_choices(registrations: list[Registration]) -> list[questionary.Choice]:
    """One separator per event in firing order, triggers sorted by name below it."""
    by_event: dict[Event, list[Registration]] = {}
    for registration in registrations:
        by_event.setdefault(registration.event, []).append(registration)

    name_width = max(
        (len(_truncate(r.name, _NAME_COLUMN_CAP)) for r in registrations), default=0
    )
    choices: list[questionary.Choice] = []
    for event in events_in_order():
        group = by_event.get(event)
        if not group:
            continue
        choices.append(questionary.Separator(f"-- {event.value} --"))
        for registration in sorted(group, key=lambda r: r.name):
            choices.append(
                questionary.Choice(
                    title=_registration_choice_title(registration, name_width=name_width),
                    value=registration,
                )
            )
    return choices


def select_registrations(registrations: list[Registration]) -> list[Registration]:
    """Ask which event triggers to drop; an aborted prompt selects nothing."""
    if not registrations:
        return []
    picked = questionary.checkbox(
        "Event triggers to drop:",
        choices=_grouped_choices(registrations),
        style=PICKER_STYLE,
    ).ask()
    return picked or []
