"""Error types raised by the event trigger core.

Configuration errors are surfaced to whoever issued the registration
command. Catalog drift and deparse failures abort only the current command
or deparse call. UnsupportedCommandError and CommandCancelled are control
flow signals rather than failures.
"""

from __future__ import annotations


class DdlHooksError(RuntimeError):
    """Base class for all event trigger errors."""


class ConfigurationError(DdlHooksError):
    """Raised when a registration command is invalid."""


class UnrecognizedTagError(ConfigurationError):
    """Raised when a command tag is not part of the taxonomy."""


class UnrecognizedEventError(ConfigurationError):
    """Raised when an event name is not a known lifecycle point."""


class DuplicateRegistrationError(ConfigurationError):
    """Raised when a registration name is already taken for an event."""


class RegistrationNotFoundError(ConfigurationError):
    """Raised when a named registration does not exist."""


class InsufficientPrivilegeError(ConfigurationError):
    """Raised when the caller is not allowed to manage event triggers."""


class UnsupportedCommandError(DdlHooksError):
    """Raised by the classifier for commands that carry no trigger support."""


class DeparseError(DdlHooksError):
    """Raised when a command cannot be turned back into text."""


class CatalogDriftError(DdlHooksError):
    """Raised when a stored registration no longer matches the taxonomy."""


class CommandCancelled(DdlHooksError):
    """
    Raised when a before-event callback vetoes the running command.

    Attributes:
        callback_id: Identifier of the callback that cancelled.
        reason: Reason declared by the callback, if any.
    """

    def __init__(self, callback_id: str, reason: str | None = None):
        self.callback_id = callback_id
        self.reason = reason
        if reason:
            message = f"command cancelled by event trigger {callback_id}: {reason}"
        else:
            message = f"command cancelled by event trigger {callback_id}"
        super().__init__(message)
