"""Event lifecycle driver.

The host command executor builds one CommandLifecycle per administrative
command and calls `fire` at each lifecycle point (or lets `run_command`
do it). For every event the driver looks up the callbacks registered for
the command's kind, builds the payload on first need and invokes the
callbacks in order. A callback may veto the command from any before-class
event by returning a CancelSignal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Protocol, TypeVar

from ddlhooks.core import nodes as n
from ddlhooks.core.classifier import classify
from ddlhooks.core.deparse import NOT_AVAILABLE, deparse, identify_target
from ddlhooks.core.errors import CommandCancelled, DeparseError, UnsupportedCommandError
from ddlhooks.core.session import Session
from ddlhooks.core.taxonomy import CommandKind, Event, events_in_order

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CancelSignal:
    """Returned by a callback to abort the running command."""

    reason: str | None = None


@dataclass(frozen=True)
class TriggerPayload:
    """
    What a callback receives.

    Attributes:
        event: Event name, e.g. "command_start".
        tag: Command tag, e.g. "CREATE VIEW".
        schema_name: Schema of the command target, when known.
        object_name: Name of the command target, when known.
        command_text: Canonical command text, or None when it could not
                      be rebuilt.
        parsetree: The command node itself.
    """

    event: str
    tag: str
    schema_name: str | None
    object_name: str | None
    command_text: str | None
    parsetree: n.Node


class CallbackRuntime(Protocol):
    """Executes callbacks on behalf of the lifecycle driver."""

    def invoke(self, callback_id: str, payload: TriggerPayload) -> CancelSignal | None:
        ...


@dataclass(frozen=True)
class _CommandContext:
    schema_name: str | None
    object_name: str | None
    command_text: str | None


_UNCLASSIFIED = object()


class CommandLifecycle:
    """
    Drives event triggers for one command.

    The command is classified at most once and deparsed at most once,
    whatever the number of events fired. Commands without trigger support
    fire nothing.
    """

    def __init__(
        self,
        node: n.Node,
        session: Session,
        runtime: CallbackRuntime,
        sub_kind: n.ObjectKind | None = None,
    ):
        self.node = node
        self.session = session
        self.runtime = runtime
        self.sub_kind = sub_kind
        self.cancelled: CommandCancelled | None = None
        self._kind: Any = _UNCLASSIFIED
        self._context: _CommandContext | None = None

    @property
    def kind(self) -> CommandKind | None:
        """Command kind, or None when the command has no trigger support."""
        if self._kind is _UNCLASSIFIED:
            try:
                self._kind = classify(self.node, self.sub_kind)
            except UnsupportedCommandError as exc:
                logger.debug("%s", exc)
                self._kind = None
        return self._kind

    def _build_context(self) -> _CommandContext:
        search_path = self.session.search_path
        try:
            result = deparse(
                self.node,
                expressions=self.session.expressions,
                search_path=search_path,
            )
        except DeparseError as exc:
            logger.warning(
                "could not deparse %s: %s", type(self.node).__name__, exc
            )
            result = NOT_AVAILABLE

        if result is NOT_AVAILABLE:
            schema, name = identify_target(self.node, search_path)
            return _CommandContext(schema, name, None)
        return _CommandContext(result.schema_name, result.object_name, result.text)

    @property
    def context(self) -> _CommandContext:
        if self._context is None:
            self._context = self._build_context()
        return self._context

    def payload(self, event: Event) -> TriggerPayload:
        ctx = self.context
        return TriggerPayload(
            event=event.value,
            tag=self.kind.tag,
            schema_name=ctx.schema_name,
            object_name=ctx.object_name,
            command_text=ctx.command_text,
            parsetree=self.node,
        )

    def fire(self, event: Event) -> list[TriggerPayload]:
        """
        Invoke the callbacks registered for this command at `event`.

        Returns:
            The payloads delivered, one per callback invoked.

        Raises:
            CommandCancelled: If a callback returns a CancelSignal at a
                before-class event. No callback fires for this command
                afterwards.
        """
        if self.cancelled is not None:
            return []
        kind = self.kind
        if kind is None:
            return []

        callbacks = self.session.lookup(event, kind)
        if not callbacks:
            return []

        payload = self.payload(event)
        delivered: list[TriggerPayload] = []
        for callback_id in callbacks:
            delivered.append(payload)
            signal = self.runtime.invoke(callback_id, payload)
            if not isinstance(signal, CancelSignal):
                continue
            if not event.is_before:
                logger.warning(
                    "ignoring cancel from %s at %s: command already ran",
                    callback_id,
                    event.value,
                )
                continue
            self.cancelled = CommandCancelled(callback_id, signal.reason)
            logger.info("%s", self.cancelled)
            raise self.cancelled
        return delivered

    def run_command(self, action: Callable[[], T]) -> T:
        """
        Run `action` wrapped in the full event sequence: every before-class
        event in lifecycle order, the action itself, then command_end.
        """
        for event in events_in_order():
            if event.is_before:
                self.fire(event)
        result = action()
        self.fire(Event.COMMAND_END)
        return result
