"""Service registry: maps a capability interface to its single implementation.

Usage::

    registry = ServiceRegistry()
    registry.register(MarketCache, cache)
    cache = registry.get(MarketCache)

A registry belongs to an ``AppContext``; there is no module-level instance.
"""

from __future__ import annotations

import threading
from typing import Any, TypeVar

T = TypeVar("T")


class ServiceRegistry:
    """Interface -> implementation map, safe to publish across threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._services: dict[type, Any] = {}

    def register(self, interface: type[T], implementation: T) -> T:
        """Register *implementation* under *interface*.

        Raises ``ValueError`` if the interface already has an implementation.
        """
        with self._lock:
            if interface in self._services:
                raise ValueError(f"Service '{interface.__name__}' is already registered.")
            self._services[interface] = implementation
        return implementation

    def get(self, interface: type[T]) -> T:
        """Return the implementation registered for *interface*.

        Raises ``KeyError`` if nothing is registered under it.
        """
        with self._lock:
            service = self._services.get(interface)
            if service is None:
                available = ", ".join(sorted(cls.__name__ for cls in self._services)) or "(none)"
                raise KeyError(
                    f"Unknown service '{interface.__name__}'. Available: {available}."
                )
            return service

    def __contains__(self, interface: object) -> bool:
        with self._lock:
            return interface in self._services
