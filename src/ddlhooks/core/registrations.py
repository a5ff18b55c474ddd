"""Event trigger registrations and the commands that manage them.

A registration binds a callback to one event, optionally restricted to a
list of command tags. Registrations live in a RegistrationStore; the
functions in this module implement the user-facing create / drop / alter /
rename commands on top of that store and are the only place where tag
strings typed by users are validated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Iterator, Protocol

from ddlhooks.core.errors import (
    DuplicateRegistrationError,
    InsufficientPrivilegeError,
    RegistrationNotFoundError,
)
from ddlhooks.core.taxonomy import Enabled, Event, Timing, parse_command_tag

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Registration:
    """
    A persisted event trigger.

    Attributes:
        name: Trigger name, unique per event and case-sensitive.
        event: Lifecycle event the trigger fires on.
        callback_id: Reference handed to the callback runtime.
        timing: BEFORE / AFTER / INSTEAD OF.
        enabled: Firing configuration with respect to replication role.
        filter: Canonical command tags the trigger is restricted to. None
                or an empty tuple means the trigger fires on any command.
        id: Store-assigned identifier, None until inserted.
    """

    name: str
    event: Event
    callback_id: str
    timing: Timing = Timing.BEFORE
    enabled: Enabled = Enabled.ORIGIN_ONLY
    filter: tuple[str, ...] | None = None
    id: int | None = None

    @property
    def is_wildcard(self) -> bool:
        return not self.filter


class RegistrationStore(Protocol):
    """Interface for the persistent registration catalog."""

    def scan_by_event(self, event: Event) -> Iterator[Registration]:
        """Yield the registrations of an event ordered by name."""
        ...

    def scan_by_event_and_name(self, event: Event, name: str) -> Registration | None:
        """Return the registration with this name on this event, if any."""
        ...

    def insert(self, registration: Registration) -> int:
        """Persist a new registration and return its id."""
        ...

    def update_enabled(self, registration_id: int, enabled: Enabled) -> None:
        """Change the enabled-state of a registration."""
        ...

    def rename(self, registration_id: int, new_name: str) -> None:
        """Change the name of a registration."""
        ...

    def delete(self, registration_id: int) -> None:
        """Remove a registration."""
        ...

    def subscribe(self, listener: Callable[[], None]) -> None:
        """Register a listener called after every mutation."""
        ...

    def unsubscribe(self, listener: Callable[[], None]) -> None:
        """Remove a listener added with `subscribe`; unknown ones are ignored."""
        ...


PrivilegeCheck = Callable[[], bool]


def _check_privileges(is_privileged: PrivilegeCheck) -> None:
    if not is_privileged():
        raise InsufficientPrivilegeError("must be superuser to use event triggers")


def normalize_tags(tags: Iterable[str] | None) -> tuple[str, ...] | None:
    """
    Validate user supplied tags and return them in canonical form.

    Duplicates are removed while preserving the first occurrence order.
    An empty or missing list means "any command" and yields None.

    Raises:
        UnrecognizedTagError: If any tag is not part of the taxonomy.
    """
    if tags is None:
        return None
    canonical: list[str] = []
    for tag in tags:
        kind = parse_command_tag(tag)
        if kind.tag not in canonical:
            canonical.append(kind.tag)
    return tuple(canonical) or None


def _require(store: RegistrationStore, event: Event, name: str) -> Registration:
    found = store.scan_by_event_and_name(event, name)
    if found is None:
        raise RegistrationNotFoundError(f'event trigger "{name}" does not exist')
    return found


def create_registration(
    store: RegistrationStore,
    name: str,
    event: Event,
    callback_id: str,
    *,
    tags: Iterable[str] | None = None,
    timing: Timing = Timing.BEFORE,
    is_privileged: PrivilegeCheck,
) -> Registration:
    """
    Create a new event trigger.

    Args:
        store: Registration store to write to.
        name: Name of the trigger, unique for its event.
        event: Event the trigger fires on.
        callback_id: Callback reference for the callback runtime.
        tags: Optional command tags (case-insensitive) restricting the
              trigger; None or empty fires on any command.
        timing: Declared timing of the callback.
        is_privileged: Predicate telling whether the caller may manage
              event triggers.

    Returns:
        The stored Registration, with its id set.

    Raises:
        InsufficientPrivilegeError: If the caller is not privileged.
        UnrecognizedTagError: If a tag is not recognized.
        DuplicateRegistrationError: If the name is taken for this event.
    """
    _check_privileges(is_privileged)
    canonical = normalize_tags(tags)

    if store.scan_by_event_and_name(event, name) is not None:
        raise DuplicateRegistrationError(f'event trigger "{name}" already exists')

    registration = Registration(
        name=name,
        event=event,
        callback_id=callback_id,
        timing=timing,
        enabled=Enabled.ORIGIN_ONLY,
        filter=canonical,
    )
    new_id = store.insert(registration)
    logger.debug("created event trigger %s on %s (id=%s)", name, event.value, new_id)
    return replace(registration, id=new_id)


def drop_registration(
    store: RegistrationStore,
    name: str,
    event: Event,
    *,
    missing_ok: bool = False,
    is_privileged: PrivilegeCheck,
) -> bool:
    """
    Remove an event trigger.

    Returns:
        True if a registration was removed, False if it did not exist and
        missing_ok was set.
    """
    _check_privileges(is_privileged)
    found = store.scan_by_event_and_name(event, name)
    if found is None:
        if missing_ok:
            logger.info('event trigger "%s" does not exist, skipping', name)
            return False
        raise RegistrationNotFoundError(f'event trigger "{name}" does not exist')
    store.delete(found.id)
    logger.debug("dropped event trigger %s on %s", name, event.value)
    return True


def alter_registration_enabled(
    store: RegistrationStore,
    name: str,
    event: Event,
    enabled: Enabled,
    *,
    is_privileged: PrivilegeCheck,
) -> None:
    """ENABLE [ALWAYS | REPLICA] / DISABLE an event trigger."""
    _check_privileges(is_privileged)
    found = _require(store, event, name)
    store.update_enabled(found.id, enabled)


def rename_registration(
    store: RegistrationStore,
    name: str,
    event: Event,
    new_name: str,
    *,
    is_privileged: PrivilegeCheck,
) -> None:
    """
    Rename an event trigger. Renaming changes firing order, so stores
    broadcast an invalidation like for any other mutation.
    """
    _check_privileges(is_privileged)
    if store.scan_by_event_and_name(event, new_name) is not None:
        raise DuplicateRegistrationError(f'event trigger "{new_name}" already exists')
    found = _require(store, event, name)
    store.rename(found.id, new_name)
