from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Iterator

from ddlhooks.core.errors import RegistrationNotFoundError
from ddlhooks.core.registrations import Registration
from ddlhooks.core.taxonomy import Enabled, Event, Timing

logger = logging.getLogger(__name__)


class JsonRegistrationStore:
    """
    Registration store persisted as a single JSON document.

    Every read goes back to the file so that separate processes sharing the
    file see each other's registrations. Filter tags are stored verbatim;
    validating them is the dispatch cache's job.
    """

    _FORMAT_VERSION = 1

    def __init__(self, path: Path):
        """Create a store backed by `path`; the file is created on first write."""
        self.path = Path(path)
        self._listeners: list[Callable[[], None]] = []

    def subscribe(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    @staticmethod
    def _decode(item: dict[str, Any]) -> Registration:
        tags = item.get("tags")
        return Registration(
            id=int(item["id"]),
            name=str(item["name"]),
            event=Event(item["event"]),
            callback_id=str(item["callback_id"]),
            timing=Timing(item.get("timing", Timing.BEFORE.value)),
            enabled=Enabled(item.get("enabled", Enabled.ORIGIN_ONLY.value)),
            filter=tuple(str(tag) for tag in tags) if tags else None,
        )

    @staticmethod
    def _encode(registration: Registration) -> dict[str, Any]:
        return {
            "id": registration.id,
            "name": registration.name,
            "event": registration.event.value,
            "callback_id": registration.callback_id,
            "timing": registration.timing.value,
            "enabled": registration.enabled.value,
            "tags": list(registration.filter) if registration.filter else None,
        }

    def _load(self) -> tuple[int, list[Registration]]:
        """Return (next id, registrations) read from disk."""
        if not self.path.exists():
            return 1, []
        try:
            payload = json.loads(self.path.read_text())
        except json.JSONDecodeError as exc:
            raise ValueError(f"corrupt registration store {self.path}: {exc}") from exc

        rows: list[Registration] = []
        for item in payload.get("registrations", []):
            try:
                rows.append(self._decode(item))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("skipping malformed registration %r: %s", item, exc)
                continue
        next_id = payload.get("next_id")
        if not isinstance(next_id, int):
            next_id = max((r.id for r in rows), default=0) + 1
        return next_id, rows

    def _store(self, next_id: int, rows: list[Registration]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "version": self._FORMAT_VERSION,
            "next_id": next_id,
            "registrations": [self._encode(r) for r in rows],
        }
        self.path.write_text(json.dumps(payload, indent=2))
        self._notify()

    def _update(self, registration_id: int, change: Callable[[Registration], Registration | None]) -> None:
        next_id, rows = self._load()
        for index, row in enumerate(rows):
            if row.id == registration_id:
                updated = change(row)
                if updated is None:
                    del rows[index]
                else:
                    rows[index] = updated
                self._store(next_id, rows)
                return
        raise RegistrationNotFoundError(f"no registration with id {registration_id}")

    def all(self) -> list[Registration]:
        _, rows = self._load()
        return sorted(rows, key=lambda r: (r.event.rank, r.name))

    def scan_by_event(self, event: Event) -> Iterator[Registration]:
        _, rows = self._load()
        yield from sorted((r for r in rows if r.event is event), key=lambda r: r.name)

    def scan_by_event_and_name(self, event: Event, name: str) -> Registration | None:
        _, rows = self._load()
        for row in rows:
            if row.event is event and row.name == name:
                return row
        return None

    def insert(self, registration: Registration) -> int:
        next_id, rows = self._load()
        rows.append(replace(registration, id=next_id))
        self._store(next_id + 1, rows)
        return next_id

    def update_enabled(self, registration_id: int, enabled: Enabled) -> None:
        self._update(registration_id, lambda row: replace(row, enabled=enabled))

    def rename(self, registration_id: int, new_name: str) -> None:
        self._update(registration_id, lambda row: replace(row, name=new_name))

    def delete(self, registration_id: int) -> None:
        self._update(registration_id, lambda row: None)
