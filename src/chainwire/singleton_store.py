from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from typing import Any

from chainwire.exceptions import AlreadyRegisteredError, CyclicDependencyError
from chainwire.identifier import Identifier

logger = logging.getLogger(__name__)

MISSING: Any = object()
"""Sentinel returned by ``SingletonStore.lookup`` for absent keys."""


class SingletonStore:
    """Store singleton instances by identifier.

    Entries are write-once and never removed. Every key gets its own
    re-entrant lock, created on demand with a double-checked lookup. Concurrent
    requests for the same key build it exactly once and every caller receives
    the same instance, while unrelated keys are built in parallel.
    """

    __slots__ = ("_instances", "_key_locks", "_key_locks_lock", "_local")

    def __init__(self) -> None:
        self._instances: dict[Identifier, Any] = {}
        self._key_locks: dict[Identifier, threading.RLock] = {}
        self._key_locks_lock = threading.Lock()
        self._local = threading.local()

    def lookup(self, key: Identifier) -> Any:
        """Return the stored instance or ``MISSING``."""
        return self._instances.get(key, MISSING)

    def get(self, key: Identifier, default: Any = None) -> Any:
        """Return the stored instance or ``default``."""
        return self._instances.get(key, default)

    def add(self, key: Identifier, instance: Any) -> None:
        """Store a ready instance.

        Args:
            key: Identifier to store the instance under.
            instance: Instance to store.

        Raises:
            AlreadyRegisteredError: If the key already has an instance or is being built.

        """
        with self._get_key_lock(key):
            if key in self._instances or key in self._building():
                raise AlreadyRegisteredError(key)
            self._instances[key] = instance

    def get_or_create(self, key: Identifier, factory: Callable[[], Any]) -> Any:
        """Return the instance for ``key``, building it with ``factory`` when absent.

        The instance is stored only when ``factory`` returns normally. Only the
        lock of ``key`` is held while ``factory`` runs.

        Args:
            key: Identifier of the singleton.
            factory: Zero-argument callable running the full construction.

        Raises:
            CyclicDependencyError: If the current thread is already building ``key``.

        """
        instance = self._instances.get(key, MISSING)
        if instance is not MISSING:
            return instance

        building = self._building()
        with self._get_key_lock(key):
            # Double-check after acquiring the lock: another thread may have won.
            instance = self._instances.get(key, MISSING)
            if instance is not MISSING:
                return instance
            if key in building:
                raise CyclicDependencyError(key, building)

            building.append(key)
            try:
                instance = factory()
            finally:
                building.remove(key)

            if key in self._instances:
                raise AlreadyRegisteredError(key)
            self._instances[key] = instance
            logger.debug("Cached singleton %s", key)
            return instance

    def _get_key_lock(self, key: Identifier) -> threading.RLock:
        """Get or create the lock guarding construction of ``key``.

        Uses double-checked locking to minimize lock contention.
        """
        if key not in self._key_locks:
            with self._key_locks_lock:
                if key not in self._key_locks:
                    self._key_locks[key] = threading.RLock()
        return self._key_locks[key]

    def _building(self) -> list[Identifier]:
        """Return the keys the current thread is building, outermost first."""
        building = getattr(self._local, "building", None)
        if building is None:
            building = self._local.building = []
        return building

    def __contains__(self, key: object) -> bool:
        return key in self._instances

    def __len__(self) -> int:
        return len(self._instances)

    def __iter__(self) -> Iterator[Identifier]:
        return iter(self._instances.copy())

    def values(self) -> list[Any]:
        """Return a snapshot of all stored instances."""
        return list(self._instances.copy().values())
