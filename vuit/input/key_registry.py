"""Key-combo registry primitives shared by every dispatcher context."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class KeyComboBinding:
    """Mapping from one or more key tokens to a single action callback."""

    combos: tuple[str, ...]
    handler: Callable[[], bool | None]


class KeyComboRegistry:
    """Small key-dispatch table with an optional fallback for unbound keys.

    The fallback receives the raw key token; contexts use it for printable
    characters, which are too many to register one by one.
    """

    def __init__(self, fallback: Callable[[str], bool | None] | None = None) -> None:
        self._fallback = fallback
        self._handlers: dict[str, Callable[[], bool | None]] = {}

    def register_binding(self, binding: KeyComboBinding) -> KeyComboRegistry:
        """Register one binding, overwriting existing handlers for same combos."""
        for combo in binding.combos:
            self._handlers[combo] = binding.handler
        return self

    def register_bindings(self, *bindings: KeyComboBinding) -> KeyComboRegistry:
        """Register multiple bindings and return ``self`` for fluent usage."""
        for binding in bindings:
            self.register_binding(binding)
        return self

    def bound_keys(self) -> frozenset[str]:
        return frozenset(self._handlers)

    def dispatch(self, key: str) -> bool | None:
        """Invoke the bound handler for ``key`` (or the fallback) and return its result."""
        handler = self._handlers.get(key)
        if handler is not None:
            return handler()
        if self._fallback is not None:
            return self._fallback(key)
        return None
