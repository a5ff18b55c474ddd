from __future__ import annotations

from dataclasses import replace
from typing import Callable, Iterator

from ddlhooks.core.errors import RegistrationNotFoundError
from ddlhooks.core.registrations import Registration
from ddlhooks.core.taxonomy import Enabled, Event


class InMemoryRegistrationStore:
    """Registration store kept in a dict, for tests and embedding."""

    def __init__(self, registrations: list[Registration] | None = None):
        self._rows: dict[int, Registration] = {}
        self._next_id = 1
        self._listeners: list[Callable[[], None]] = []
        for registration in registrations or []:
            self.insert(registration)

    def subscribe(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def _get(self, registration_id: int) -> Registration:
        try:
            return self._rows[registration_id]
        except KeyError:
            raise RegistrationNotFoundError(
                f"no registration with id {registration_id}"
            ) from None

    def scan_by_event(self, event: Event) -> Iterator[Registration]:
        rows = [r for r in self._rows.values() if r.event is event]
        yield from sorted(rows, key=lambda r: r.name)

    def scan_by_event_and_name(self, event: Event, name: str) -> Registration | None:
        for row in self._rows.values():
            if row.event is event and row.name == name:
                return row
        return None

    def all(self) -> list[Registration]:
        return sorted(self._rows.values(), key=lambda r: (r.event.rank, r.name))

    def insert(self, registration: Registration) -> int:
        new_id = self._next_id
        self._next_id += 1
        self._rows[new_id] = replace(registration, id=new_id)
        self._notify()
        return new_id

    def update_enabled(self, registration_id: int, enabled: Enabled) -> None:
        row = self._get(registration_id)
        self._rows[registration_id] = replace(row, enabled=enabled)
        self._notify()

    def rename(self, registration_id: int, new_name: str) -> None:
        row = self._get(registration_id)
        self._rows[registration_id] = replace(row, name=new_name)
        self._notify()

    def delete(self, registration_id: int) -> None:
        self._get(registration_id)
        del self._rows[registration_id]
        self._notify()
