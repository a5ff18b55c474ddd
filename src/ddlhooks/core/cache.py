"""Per-session dispatch cache of event triggers.

The registration catalog is not shaped for the lookup done on every
command: "which callbacks fire for this event and this command kind, in
what order". This module keeps an in-memory index keyed by
(event, command kind), built lazily from a full name-ordered scan of the
store and thrown away wholesale whenever the store changes.

Wildcard registrations are kept in a separate (event, ANY) bucket and merged
with the command specific bucket at lookup time, so that callbacks always
fire in one global alphabetical order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Sequence

from ddlhooks.core.errors import CatalogDriftError
from ddlhooks.core.registrations import Registration, RegistrationStore
from ddlhooks.core.taxonomy import (
    CommandKind,
    Event,
    ReplicationRole,
    events_in_order,
    fires_in_role,
    parse_command_tag,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TriggerRef:
    """A registration reduced to what dispatch needs: its name and callback."""

    name: str
    callback_id: str


def merge_by_name(
    first: Sequence[TriggerRef], second: Sequence[TriggerRef]
) -> list[TriggerRef]:
    """
    Merge two name-ordered sequences into one name-ordered list.

    Both inputs must already be sorted by name. Names are unique per event,
    so ties do not occur; if they did, entries of `first` would come first.
    """
    merged: list[TriggerRef] = []
    i = j = 0
    while i < len(first) and j < len(second):
        if second[j].name < first[i].name:
            merged.append(second[j])
            j += 1
        else:
            merged.append(first[i])
            i += 1
    merged.extend(first[i:])
    merged.extend(second[j:])
    return merged


@dataclass(frozen=True)
class EventCommandTriggers:
    """
    Event triggers to fire for a given event and command.

    Attributes:
        event: Event being fired.
        command: Command kind being executed.
        any_triggers: Wildcard registrations, name ordered.
        cmd_triggers: Registrations filtered on `command`, name ordered.
    """

    event: Event
    command: CommandKind
    any_triggers: tuple[TriggerRef, ...] = ()
    cmd_triggers: tuple[TriggerRef, ...] = ()

    @property
    def triggers(self) -> list[TriggerRef]:
        if not self.cmd_triggers:
            return list(self.any_triggers)
        if not self.any_triggers:
            return list(self.cmd_triggers)
        return merge_by_name(self.any_triggers, self.cmd_triggers)

    @property
    def callbacks(self) -> list[str]:
        return [t.callback_id for t in self.triggers]

    def __bool__(self) -> bool:
        return bool(self.any_triggers or self.cmd_triggers)


_Key = tuple[Event, CommandKind]


class DispatchCache:
    """
    Lazily built index from (event, command kind) to event triggers.

    The cache reads the registration store only when it has been
    invalidated (or never built) and otherwise answers from memory. It is
    meant to be owned by one session and needs no locking.
    """

    def __init__(
        self,
        store: RegistrationStore,
        role: Callable[[], ReplicationRole] | ReplicationRole = ReplicationRole.ORIGIN,
        *,
        subscribe: bool = True,
    ):
        """
        Create a dispatch cache over a registration store.

        Args:
            store: Store to build the cache from.
            role: Session replication role, or a callable returning it at
                  rebuild time.
            subscribe: Register `invalidate` with the store's change
                  notifications.
        """
        self.store = store
        self._role = role
        self._buckets: dict[_Key, list[TriggerRef]] | None = None
        self.rebuilds = 0
        self._subscribed = subscribe
        if subscribe:
            store.subscribe(self.invalidate)

    @property
    def role(self) -> ReplicationRole:
        return self._role() if callable(self._role) else self._role

    @property
    def is_valid(self) -> bool:
        return self._buckets is not None

    def invalidate(self) -> None:
        """Drop the whole cache; the next lookup rebuilds it."""
        if self._buckets is not None:
            logger.debug("event trigger cache invalidated")
        self._buckets = None

    def close(self) -> None:
        """Stop listening to store notifications and drop the cached buckets."""
        if self._subscribed:
            self.store.unsubscribe(self.invalidate)
            self._subscribed = False
        self._buckets = None

    def _add(
        self, buckets: dict[_Key, list[TriggerRef]], key: _Key, reg: Registration
    ) -> None:
        buckets.setdefault(key, []).append(TriggerRef(reg.name, reg.callback_id))

    def _resolve_tag(self, reg: Registration, tag: str) -> CommandKind:
        kind = parse_command_tag(tag, noerror=True)
        if kind is None:
            raise CatalogDriftError(
                f'event trigger "{reg.name}" on {reg.event.value} references '
                f'unrecognized command "{tag}"'
            )
        return kind

    def _build(self) -> dict[_Key, list[TriggerRef]]:
        role = self.role
        buckets: dict[_Key, list[TriggerRef]] = {}
        count = 0

        for event in events_in_order():
            # store scans are name ordered, so appending keeps buckets sorted
            for reg in self.store.scan_by_event(event):
                if not fires_in_role(reg.enabled, role):
                    continue
                count += 1
                if reg.is_wildcard:
                    self._add(buckets, (event, CommandKind.ANY), reg)
                    continue
                # distinct spellings of one tag still make a single entry
                kinds = dict.fromkeys(self._resolve_tag(reg, tag) for tag in reg.filter)
                for kind in kinds:
                    self._add(buckets, (event, kind), reg)

        self.rebuilds += 1
        logger.debug(
            "event trigger cache rebuilt: %d registrations, %d buckets (role=%s)",
            count,
            len(buckets),
            role.value,
        )
        return buckets

    def _ensure(self) -> dict[_Key, list[TriggerRef]]:
        if self._buckets is None:
            self._buckets = self._build()
        return self._buckets

    def triggers(self, event: Event, command: CommandKind) -> EventCommandTriggers:
        """Return the wildcard and command specific triggers for a key."""
        buckets = self._ensure()
        return EventCommandTriggers(
            event=event,
            command=command,
            any_triggers=tuple(buckets.get((event, CommandKind.ANY), ())),
            cmd_triggers=tuple(buckets.get((event, command), ())),
        )

    def lookup(self, event: Event, command: CommandKind) -> list[str]:
        """
        Return the callback ids to invoke for an event and command kind.

        The result is ordered by registration name across wildcard and
        command specific registrations. Empty if nothing is registered.
        """
        return self.triggers(event, command).callbacks

    def fires_for_event(self, event: Event, command: CommandKind) -> bool:
        return bool(self.triggers(event, command))

    def fires(self, command: CommandKind) -> bool:
        """True if the command fires at least one trigger at any event."""
        return any(self.fires_for_event(event, command) for event in Event)
