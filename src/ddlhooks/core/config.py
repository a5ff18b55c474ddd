from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from ddlhooks.core.taxonomy import ReplicationRole


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings, read from DDLHOOKS_* environment variables.

    Attributes:
        store_path: JSON file holding the registration catalog.
        replication_role: Replication role of sessions built from settings.
        search_path: Schemas used to qualify unqualified relation names.
        superuser: Whether the CLI user may manage event triggers.
    """

    store_path: Path
    replication_role: ReplicationRole = ReplicationRole.ORIGIN
    search_path: tuple[str, ...] = field(default=("public",))
    superuser: bool = True

    STORE_PATH_ENV = "DDLHOOKS_STORE_PATH"
    DATA_DIR_ENV = "DDLHOOKS_DATA_DIR"
    ROLE_ENV = "DDLHOOKS_REPLICATION_ROLE"
    SEARCH_PATH_ENV = "DDLHOOKS_SEARCH_PATH"
    SUPERUSER_ENV = "DDLHOOKS_SUPERUSER"
    _STORE_FILENAME = "registrations.json"

    @classmethod
    def data_dir(cls) -> Path:
        """Return the data directory, honoring env and XDG overrides."""
        root = os.getenv(cls.DATA_DIR_ENV)
        if root:
            return Path(root)
        xdg = os.getenv("XDG_DATA_HOME")
        base = Path(xdg) if xdg else Path.home() / ".local" / "share"
        return base / "ddlhooks"

    @classmethod
    def _store_path(cls) -> Path:
        raw = os.getenv(cls.STORE_PATH_ENV)
        if raw:
            return Path(raw).expanduser()
        return cls.data_dir() / cls._STORE_FILENAME

    @classmethod
    def _replication_role(cls) -> ReplicationRole:
        raw = os.getenv(cls.ROLE_ENV, "").strip().lower()
        try:
            return ReplicationRole(raw)
        except ValueError:
            return ReplicationRole.ORIGIN

    @classmethod
    def _search_path(cls) -> tuple[str, ...]:
        raw = os.getenv(cls.SEARCH_PATH_ENV)
        if raw is None:
            return ("public",)
        return tuple(part.strip() for part in raw.split(",") if part.strip())

    @classmethod
    def _superuser(cls) -> bool:
        raw = os.getenv(cls.SUPERUSER_ENV)
        if raw is None:
            return True
        return raw.strip().lower() in {"1", "true", "yes"}

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            store_path=cls._store_path(),
            replication_role=cls._replication_role(),
            search_path=cls._search_path(),
            superuser=cls._superuser(),
        )
