"""Application context management for the CLI."""

from dataclasses import dataclass, replace
from pathlib import Path

from ddlhooks.cli.common.exits import ExitCode, die
from ddlhooks.core.adapters.jsonstore import JsonRegistrationStore
from ddlhooks.core.adapters.sourcetext import SourceTextExpressions
from ddlhooks.core.config import Settings
from ddlhooks.core.session import Session
from ddlhooks.core.taxonomy import ReplicationRole


@dataclass
class AppContext:
    """Application context holding settings, the registration store and a session."""

    settings: Settings
    store: JsonRegistrationStore
    session: Session


def _parse_search_path(raw: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def build_context(
    store_path: Path | None = None,
    *,
    search_path: str | None = None,
    role: str | None = None,
) -> AppContext:
    """Build the application context from the environment and CLI overrides.

    Args:
        store_path: Registration store file overriding DDLHOOKS_STORE_PATH.
        search_path: Comma-separated search path overriding DDLHOOKS_SEARCH_PATH.
        role: Replication role overriding DDLHOOKS_REPLICATION_ROLE.

    Returns:
        AppContext: Context with a JSON-backed store and a session on top of it.
    """
    settings = Settings.from_env()
    if store_path is not None:
        settings = replace(settings, store_path=store_path)
    if search_path is not None:
        settings = replace(settings, search_path=_parse_search_path(search_path))
    if role is not None:
        try:
            settings = replace(settings, replication_role=ReplicationRole(role.lower()))
        except ValueError:
            die(
                f'invalid replication role "{role}" (origin, replica, local)',
                code=ExitCode.USAGE,
            )

    store = JsonRegistrationStore(settings.store_path)
    session = Session(
        store,
        replication_role=settings.replication_role,
        search_path=settings.search_path,
        is_privileged=lambda: settings.superuser,
        expressions=SourceTextExpressions(),
    )
    return AppContext(settings=settings, store=store, session=session)
