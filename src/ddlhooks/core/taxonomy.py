"""Command taxonomy for event triggers.

This module defines the closed sets the rest of the system is keyed on:
the command kinds a trigger can be filtered on, the lifecycle events at
which triggers fire, and the timing / enabled-state values persisted with
each registration. Command kinds are stored by their canonical tag string,
so the values here are a compatibility surface and must not change.
"""

from __future__ import annotations

from enum import Enum

from ddlhooks.core.errors import UnrecognizedEventError, UnrecognizedTagError


class CommandKind(str, Enum):
    """
    Enumeration of administrative commands that can fire event triggers.

    The value of each member is its canonical command tag, exactly as users
    spell it in a registration filter (matched case-insensitively). ANY is
    the wildcard bucket used by registrations without a filter; it is not
    accepted as a filter tag.
    """

    ANY = "ANY"

    ALTER_AGGREGATE = "ALTER AGGREGATE"
    ALTER_CAST = "ALTER CAST"
    ALTER_COLLATION = "ALTER COLLATION"
    ALTER_CONVERSION = "ALTER CONVERSION"
    ALTER_DOMAIN = "ALTER DOMAIN"
    ALTER_EXTENSION = "ALTER EXTENSION"
    ALTER_FOREIGN_DATA_WRAPPER = "ALTER FOREIGN DATA WRAPPER"
    ALTER_FOREIGN_TABLE = "ALTER FOREIGN TABLE"
    ALTER_FUNCTION = "ALTER FUNCTION"
    ALTER_INDEX = "ALTER INDEX"
    ALTER_LANGUAGE = "ALTER LANGUAGE"
    ALTER_OPERATOR = "ALTER OPERATOR"
    ALTER_OPERATOR_CLASS = "ALTER OPERATOR CLASS"
    ALTER_OPERATOR_FAMILY = "ALTER OPERATOR FAMILY"
    ALTER_RULE = "ALTER RULE"
    ALTER_SCHEMA = "ALTER SCHEMA"
    ALTER_SEQUENCE = "ALTER SEQUENCE"
    ALTER_SERVER = "ALTER SERVER"
    ALTER_TABLE = "ALTER TABLE"
    ALTER_TEXT_SEARCH_PARSER = "ALTER TEXT SEARCH PARSER"
    ALTER_TEXT_SEARCH_CONFIGURATION = "ALTER TEXT SEARCH CONFIGURATION"
    ALTER_TEXT_SEARCH_DICTIONARY = "ALTER TEXT SEARCH DICTIONARY"
    ALTER_TEXT_SEARCH_TEMPLATE = "ALTER TEXT SEARCH TEMPLATE"
    ALTER_TRIGGER = "ALTER TRIGGER"
    ALTER_TYPE = "ALTER TYPE"
    ALTER_USER_MAPPING = "ALTER USER MAPPING"
    ALTER_VIEW = "ALTER VIEW"

    CLUSTER = "CLUSTER"
    LOAD = "LOAD"
    REINDEX = "REINDEX"
    SELECT_INTO = "SELECT INTO"
    VACUUM = "VACUUM"

    CREATE_AGGREGATE = "CREATE AGGREGATE"
    CREATE_CAST = "CREATE CAST"
    CREATE_COLLATION = "CREATE COLLATION"
    CREATE_CONVERSION = "CREATE CONVERSION"
    CREATE_DOMAIN = "CREATE DOMAIN"
    CREATE_EXTENSION = "CREATE EXTENSION"
    CREATE_FOREIGN_DATA_WRAPPER = "CREATE FOREIGN DATA WRAPPER"
    CREATE_FOREIGN_TABLE = "CREATE FOREIGN TABLE"
    CREATE_FUNCTION = "CREATE FUNCTION"
    CREATE_INDEX = "CREATE INDEX"
    CREATE_LANGUAGE = "CREATE LANGUAGE"
    CREATE_OPERATOR = "CREATE OPERATOR"
    CREATE_OPERATOR_CLASS = "CREATE OPERATOR CLASS"
    CREATE_OPERATOR_FAMILY = "CREATE OPERATOR FAMILY"
    CREATE_RULE = "CREATE RULE"
    CREATE_SCHEMA = "CREATE SCHEMA"
    CREATE_SEQUENCE = "CREATE SEQUENCE"
    CREATE_SERVER = "CREATE SERVER"
    CREATE_TABLE = "CREATE TABLE"
    CREATE_TABLE_AS = "CREATE TABLE AS"
    CREATE_TEXT_SEARCH_PARSER = "CREATE TEXT SEARCH PARSER"
    CREATE_TEXT_SEARCH_CONFIGURATION = "CREATE TEXT SEARCH CONFIGURATION"
    CREATE_TEXT_SEARCH_DICTIONARY = "CREATE TEXT SEARCH DICTIONARY"
    CREATE_TEXT_SEARCH_TEMPLATE = "CREATE TEXT SEARCH TEMPLATE"
    CREATE_TRIGGER = "CREATE TRIGGER"
    CREATE_TYPE = "CREATE TYPE"
    CREATE_USER_MAPPING = "CREATE USER MAPPING"
    CREATE_VIEW = "CREATE VIEW"

    DROP_AGGREGATE = "DROP AGGREGATE"
    DROP_CAST = "DROP CAST"
    DROP_COLLATION = "DROP COLLATION"
    DROP_CONVERSION = "DROP CONVERSION"
    DROP_DOMAIN = "DROP DOMAIN"
    DROP_EXTENSION = "DROP EXTENSION"
    DROP_FOREIGN_DATA_WRAPPER = "DROP FOREIGN DATA WRAPPER"
    DROP_FOREIGN_TABLE = "DROP FOREIGN TABLE"
    DROP_FUNCTION = "DROP FUNCTION"
    DROP_INDEX = "DROP INDEX"
    DROP_LANGUAGE = "DROP LANGUAGE"
    DROP_OPERATOR = "DROP OPERATOR"
    DROP_OPERATOR_CLASS = "DROP OPERATOR CLASS"
    DROP_OPERATOR_FAMILY = "DROP OPERATOR FAMILY"
    DROP_RULE = "DROP RULE"
    DROP_SCHEMA = "DROP SCHEMA"
    DROP_SEQUENCE = "DROP SEQUENCE"
    DROP_SERVER = "DROP SERVER"
    DROP_TABLE = "DROP TABLE"
    DROP_TEXT_SEARCH_PARSER = "DROP TEXT SEARCH PARSER"
    DROP_TEXT_SEARCH_CONFIGURATION = "DROP TEXT SEARCH CONFIGURATION"
    DROP_TEXT_SEARCH_DICTIONARY = "DROP TEXT SEARCH DICTIONARY"
    DROP_TEXT_SEARCH_TEMPLATE = "DROP TEXT SEARCH TEMPLATE"
    DROP_TRIGGER = "DROP TRIGGER"
    DROP_TYPE = "DROP TYPE"
    DROP_USER_MAPPING = "DROP USER MAPPING"
    DROP_VIEW = "DROP VIEW"

    @property
    def tag(self) -> str:
        """Return the canonical command tag string."""
        return self.value


_KINDS_BY_TAG: dict[str, CommandKind] = {
    kind.value: kind for kind in CommandKind if kind is not CommandKind.ANY
}


def parse_command_tag(tag: str, *, noerror: bool = False) -> CommandKind | None:
    """
    Resolve a command tag string to its CommandKind.

    Matching is case-insensitive and tolerant of surrounding or repeated
    whitespace ("create   table" is CREATE TABLE). ANY is never returned.

    Args:
        tag: Command tag as written by the user or read back from storage.
        noerror: When True, return None for unknown tags instead of raising.

    Raises:
        UnrecognizedTagError: If the tag is unknown and noerror is False.
    """
    key = " ".join(tag.split()).upper()
    kind = _KINDS_BY_TAG.get(key)
    if kind is None and not noerror:
        raise UnrecognizedTagError(f'unrecognized command "{tag}"')
    return kind


def command_kinds() -> list[CommandKind]:
    """Return every filterable command kind, in declaration order."""
    return list(_KINDS_BY_TAG.values())


class Event(str, Enum):
    """
    Lifecycle points at which event triggers can fire.

    Members are declared in lifecycle order; `rank` keeps the spacing used
    by the catalog so that new firing points can be slotted in between.
    """

    COMMAND_START = "command_start"
    SECURITY_CHECK = "security_check"
    CONSISTENCY_CHECK = "consistency_check"
    NAME_LOOKUP = "name_lookup"
    COMMAND_END = "command_end"

    @property
    def rank(self) -> int:
        return _EVENT_RANKS[self]

    @property
    def is_before(self) -> bool:
        """True for events that run before the command does its work."""
        return self is not Event.COMMAND_END


_EVENT_RANKS = {
    Event.COMMAND_START: 1,
    Event.SECURITY_CHECK: 100,
    Event.CONSISTENCY_CHECK: 200,
    Event.NAME_LOOKUP: 300,
    Event.COMMAND_END: 500,
}


def parse_event_name(name: str) -> Event:
    """Resolve an event name (case-insensitive) or raise UnrecognizedEventError."""
    key = name.strip().lower()
    for event in Event:
        if event.value == key:
            return event
    raise UnrecognizedEventError(f'unrecognized event "{name}"')


def events_in_order() -> list[Event]:
    """Return all events sorted by lifecycle rank."""
    return sorted(Event, key=lambda e: e.rank)


class Timing(str, Enum):
    """When a registration's callback runs relative to its event."""

    BEFORE = "BEFORE"
    AFTER = "AFTER"
    INSTEAD_OF = "INSTEAD OF"


class Enabled(str, Enum):
    """
    Firing configuration of a registration with respect to the session
    replication role. Values match the single-letter catalog codes.
    """

    ALWAYS = "A"
    ORIGIN_ONLY = "O"
    REPLICA_ONLY = "R"
    DISABLED = "D"


class ReplicationRole(str, Enum):
    """Session replication role used to filter registrations."""

    ORIGIN = "origin"
    REPLICA = "replica"
    LOCAL = "local"


def fires_in_role(enabled: Enabled, role: ReplicationRole) -> bool:
    """
    Return True if a registration with the given enabled-state fires for a
    session running with the given replication role.
    """
    if enabled is Enabled.DISABLED:
        return False
    if role is ReplicationRole.REPLICA:
        return enabled is not Enabled.ORIGIN_ONLY
    # origin and local roles behave the same
    return enabled is not Enabled.REPLICA_ONLY
