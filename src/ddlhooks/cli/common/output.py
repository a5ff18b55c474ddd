"""Output formatting utilities for the CLI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import questionary
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

from ddlhooks.cli.common.tui_style import DROP_CONFIRM_STYLE

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
    }
)

console = Console(theme=_THEME)

_ENABLED_LABELS = {
    "A": "always",
    "O": "origin",
    "R": "replica",
    "D": "disabled",
}


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    def _q_try(self, fn, *args, **kwargs):
        """Call questionary prompts and drop unsupported kwargs on older versions."""
        try:
            return fn(*args, **kwargs)
        except TypeError:
            kwargs.pop("auto_enter", None)
            return fn(*args, **kwargs)

    def _q(self, message: str) -> str:
        return f"[ddlhooks] {message}"

    def info(self, msg: str) -> None:
        console.print(f"[title]›[/] {msg}")

    def success(self, msg: str) -> None:
        console.print(f"[ok]✓[/] {msg}")

    def warn(self, msg: str) -> None:
        console.print(f"[warn]⚠[/] {msg}")

    def error(self, msg: str) -> None:
        console.print(f"[err]✗[/] {escape(msg)}")

    def text(self, msg: str) -> None:
        """Print text verbatim, without Rich markup or highlighting."""
        console.print(msg, markup=False, highlight=False, soft_wrap=True)

    def kv(self, items: Mapping[str, Any]) -> None:
        for k, v in items.items():
            console.print(f"[meta]{k}[/]: {escape(str(v))}")

    def confirm(self, message: str, *, default: bool = False) -> bool:
        """
        Ask the user for confirmation using a standardized Questionary prompt.

        Args:
            message: Confirmation question shown to the user.
            default: Default answer if the user just presses enter.

        Returns:
            True if the user confirms, False otherwise.
        """
        console.print("[meta]Use y/n then Enter[/]")

        prompt = self._q_try(
            questionary.confirm,
            self._q(message),
            default=default,
            style=DROP_CONFIRM_STYLE,
            qmark="✦",
            auto_enter=False,
        )
        return bool(prompt.ask())

    def registrations_table(
        self, registrations: Iterable[Any], title: str = "Event triggers"
    ) -> None:
        """
        Expects objects with .name .event .enabled .timing .callback_id .filter
        (like ddlhooks.core.registrations.Registration)
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Event", style="meta", no_wrap=True)
        t.add_column("Name", style="ok", no_wrap=True)
        t.add_column("Enabled")
        t.add_column("Timing", style="meta")
        t.add_column("Callback")
        t.add_column("Tags", style="meta")

        for r in registrations:
            enabled = _ENABLED_LABELS.get(r.enabled.value, r.enabled.value)
            style = "err" if enabled == "disabled" else "ok"
            tags = ", ".join(r.filter) if r.filter else "ANY"
            t.add_row(
                r.event.value,
                escape(r.name),
                f"[{style}]{enabled}[/{style}]",
                r.timing.value,
                escape(r.callback_id),
                tags,
            )

        console.print(t)

    def triggers_table(self, triggers: Any, title: str = "Dispatch") -> None:
        """
        Render the merged firing order of an EventCommandTriggers, marking
        whether each entry comes from a wildcard or a tag filter.
        """
        any_names = {ref.name for ref in triggers.any_triggers}
        t = Table(title=title, show_lines=False)
        t.add_column("#", style="meta", no_wrap=True)
        t.add_column("Name", style="ok")
        t.add_column("Callback")
        t.add_column("Matched on", style="meta")

        for position, ref in enumerate(triggers.triggers, start=1):
            matched = "ANY" if ref.name in any_names else triggers.command.tag
            t.add_row(str(position), escape(ref.name), escape(ref.callback_id), matched)

        console.print(t)

    def payloads_table(
        self, deliveries: Iterable[tuple[str, Any]], title: str = "Callbacks fired"
    ) -> None:
        """Expects (callback_id, TriggerPayload) tuples in invocation order."""
        t = Table(title=title, show_lines=False)
        t.add_column("Event", style="meta", no_wrap=True)
        t.add_column("Callback", style="ok")
        t.add_column("Tag")
        t.add_column("Object")
        t.add_column("Command", style="meta")

        for callback_id, payload in deliveries:
            target = payload.object_name or ""
            if payload.schema_name:
                target = f"{payload.schema_name}.{target}"
            t.add_row(
                payload.event,
                escape(callback_id),
                payload.tag,
                escape(target),
                escape(payload.command_text or "-"),
            )

        console.print(t)


out = Out()
