"""Action result flags and the name-to-handler registry."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import IntFlag
from typing import Any


class ActionFlags(IntFlag):
    """What the caller should do after an action returns."""

    NONE = 0
    REDRAW = 1 << 0
    PERSIST = 1 << 1


class UnknownActionError(KeyError):
    """Raised when an action name has no registered handler."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"unknown UI action: {self.name}"


ActionHandler = Callable[[dict[str, Any]], ActionFlags]


@dataclass(frozen=True)
class ActionBinding:
    """Mapping from one action name to the handler receiving its params."""

    name: str
    handler: ActionHandler


class ActionRegistry:
    """Small action-dispatch table keyed by action name."""

    def __init__(self) -> None:
        self._handlers: dict[str, ActionHandler] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def names(self) -> list[str]:
        return sorted(self._handlers)

    def register_bindings(self, *bindings: ActionBinding) -> ActionRegistry:
        """Register bindings, overwriting existing handlers of the same name."""
        for binding in bindings:
            self._handlers[binding.name] = binding.handler
        return self

    def dispatch(self, name: str, params: dict[str, Any] | None = None) -> ActionFlags:
        handler = self._handlers.get(name)
        if handler is None:
            raise UnknownActionError(name)
        return handler(dict(params or {}))
