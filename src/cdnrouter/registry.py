"""CDN provider registries.

Two variants:
- ProviderRegistry: a plain name-keyed map; every call must name a provider.
- SingleSelectionProviderRegistry: the same map plus at most one active
  provider for calls that omit a name.

Fail-closed on unknown names: lookups raise ProviderNotFoundError rather than
returning None. Mutations and active-pointer reads share one lock.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any

from cdnrouter.errors import NoActiveProviderError, ProviderNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class ProviderRegistry:
    """Name-keyed registry of CDN providers.

    Names are case-sensitive. Registering an existing name replaces the
    previous provider.
    """

    _providers: dict[str, Any] = field(default_factory=dict)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    def register(self, name: str, provider: Any) -> None:
        """Insert or replace the provider registered under ``name``.

        Args:
            name: Unique, case-sensitive provider name.
            provider: Object implementing the provider contract. Its shape is
                checked at call time, not here.
        """
        with self._lock:
            replaced = name in self._providers
            self._providers[name] = provider
        logger.info(
            "Registered CDN provider: %s (%s%s)",
            name,
            type(provider).__name__,
            ", replaced" if replaced else "",
        )

    def unregister(self, name: str) -> Any:
        """Remove the provider registered under ``name``.

        The provider itself is not touched.

        Returns:
            The removed provider.

        Raises:
            ProviderNotFoundError: If ``name`` is not registered.
        """
        with self._lock:
            if name not in self._providers:
                raise ProviderNotFoundError(name)
            provider = self._providers.pop(name)
            self._on_unregistered(name)
        logger.info("Unregistered CDN provider: %s", name)
        return provider

    def _on_unregistered(self, name: str) -> None:
        """Hook for subclasses; called with the lock held."""

    def get_by_name(self, name: str) -> Any:
        """Look up a provider by name. Fail-closed on unknown names.

        Raises:
            ProviderNotFoundError: If ``name`` is not registered.
        """
        with self._lock:
            if name not in self._providers:
                raise ProviderNotFoundError(name)
            return self._providers[name]

    def list_names(self) -> list[str]:
        """Return registered names in registration order."""
        with self._lock:
            return list(self._providers.keys())

    @property
    def provider_names(self) -> frozenset[str]:
        """Return the set of registered provider names."""
        with self._lock:
            return frozenset(self._providers.keys())

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._providers

    def __len__(self) -> int:
        with self._lock:
            return len(self._providers)


@dataclass
class SingleSelectionProviderRegistry(ProviderRegistry):
    """Provider registry with at most one active provider.

    The active selection is independent of registration: providers may be
    registered with none active.
    """

    _active_name: str | None = None

    def set_active(self, name: str) -> None:
        """Mark ``name`` as the active provider, replacing any previous one.

        Raises:
            ProviderNotFoundError: If ``name`` is not registered.
        """
        with self._lock:
            if name not in self._providers:
                raise ProviderNotFoundError(name)
            previous = self._active_name
            self._active_name = name
        logger.info("Active CDN provider: %s (previous: %s)", name, previous or "none")

    def clear_active(self) -> None:
        """Clear the active selection."""
        with self._lock:
            self._active_name = None

    def get_active(self) -> Any:
        """Return the active provider.

        Raises:
            NoActiveProviderError: If no provider is active.
        """
        with self._lock:
            if self._active_name is None:
                raise NoActiveProviderError()
            return self._providers[self._active_name]

    @property
    def active_name(self) -> str | None:
        """Name of the active provider, or None."""
        with self._lock:
            return self._active_name

    def _on_unregistered(self, name: str) -> None:
        if self._active_name == name:
            self._active_name = None
            logger.info("Cleared active CDN provider: %s was unregistered", name)
