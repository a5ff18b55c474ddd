"""Session context owning the dispatch cache."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from ddlhooks.core.cache import DispatchCache
from ddlhooks.core.deparse import ExpressionDeparser
from ddlhooks.core.registrations import (
    PrivilegeCheck,
    Registration,
    RegistrationStore,
    alter_registration_enabled,
    create_registration,
    drop_registration,
    rename_registration,
)
from ddlhooks.core.taxonomy import CommandKind, Enabled, Event, ReplicationRole, Timing

logger = logging.getLogger(__name__)


def _always() -> bool:
    return True


class Session:
    """
    One client session: a registration store view, its dispatch cache, and
    the session settings that influence dispatch and deparsing.

    Sessions are not shared between threads. Each one rebuilds its own
    cache lazily after the store broadcasts a change.
    """

    def __init__(
        self,
        store: RegistrationStore,
        *,
        replication_role: ReplicationRole = ReplicationRole.ORIGIN,
        search_path: Sequence[str] = ("public",),
        is_privileged: PrivilegeCheck = _always,
        expressions: ExpressionDeparser | None = None,
    ):
        self.store = store
        self._role = replication_role
        self.search_path = tuple(search_path)
        self.is_privileged = is_privileged
        self.expressions = expressions
        self.cache = DispatchCache(store, role=lambda: self._role)

    @property
    def replication_role(self) -> ReplicationRole:
        return self._role

    @replication_role.setter
    def replication_role(self, role: ReplicationRole) -> None:
        if role is not self._role:
            logger.debug("replication role %s -> %s", self._role.value, role.value)
            self._role = role
            self.cache.invalidate()

    def lookup(self, event: Event, kind: CommandKind) -> list[str]:
        return self.cache.lookup(event, kind)

    def close(self) -> None:
        self.cache.close()

    # registration commands, gated on this session's privilege predicate

    def create_trigger(
        self,
        name: str,
        event: Event,
        callback_id: str,
        *,
        tags: Iterable[str] | None = None,
        timing: Timing = Timing.BEFORE,
    ) -> Registration:
        return create_registration(
            self.store,
            name,
            event,
            callback_id,
            tags=tags,
            timing=timing,
            is_privileged=self.is_privileged,
        )

    def drop_trigger(self, name: str, event: Event, *, missing_ok: bool = False) -> bool:
        return drop_registration(
            self.store, name, event, missing_ok=missing_ok, is_privileged=self.is_privileged
        )

    def set_trigger_enabled(self, name: str, event: Event, enabled: Enabled) -> None:
        alter_registration_enabled(
            self.store, name, event, enabled, is_privileged=self.is_privileged
        )

    def rename_trigger(self, name: str, event: Event, new_name: str) -> None:
        rename_registration(
            self.store, name, event, new_name, is_privileged=self.is_privileged
        )
