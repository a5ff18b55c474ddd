from __future__ import annotations

import importlib
import logging
from typing import Callable

from ddlhooks.core.lifecycle import CancelSignal, TriggerPayload

logger = logging.getLogger(__name__)

Callback = Callable[[TriggerPayload], "CancelSignal | None"]


class PythonCallbackRuntime:
    """
    Callback runtime running plain Python callables.

    A callback id is either a key of the `callables` mapping given at
    construction or an import reference of the form "package.module:function".
    Any return value other than a CancelSignal means "continue".
    """

    def __init__(self, callables: dict[str, Callback] | None = None):
        self.callables: dict[str, Callback] = dict(callables or {})
        self.invocations: list[tuple[str, TriggerPayload]] = []

    def register(self, callback_id: str, func: Callback) -> None:
        self.callables[callback_id] = func

    def resolve(self, callback_id: str) -> Callback:
        """Return the callable behind a callback id, importing it if needed."""
        func = self.callables.get(callback_id)
        if func is not None:
            return func

        module_name, sep, attr = callback_id.partition(":")
        if not sep or not module_name or not attr:
            raise LookupError(f'unknown callback "{callback_id}"')
        module = importlib.import_module(module_name)
        target = module
        for part in attr.split("."):
            target = getattr(target, part)
        if not callable(target):
            raise LookupError(f'callback "{callback_id}" is not callable')
        self.callables[callback_id] = target
        return target

    def invoke(self, callback_id: str, payload: TriggerPayload) -> CancelSignal | None:
        func = self.resolve(callback_id)
        logger.debug("invoking %s for %s at %s", callback_id, payload.tag, payload.event)
        self.invocations.append((callback_id, payload))
        result = func(payload)
        return result if isinstance(result, CancelSignal) else None
