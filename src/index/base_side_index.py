# src/index/base_side_index.py - v2
"""Abstract side-index interface: a hash-of-fields key/value store."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseSideIndex(ABC):
    """Unified interface for side-index backends."""

    @abstractmethod
    def hash_set(self, name: str, field: str, value: str) -> None:
        """Store ``value`` under ``field`` of hash ``name``."""

    @abstractmethod
    def hash_get(self, name: str, field: str) -> str | None:
        """Return the stored value, or None when absent."""

    @abstractmethod
    def hash_delete(self, name: str, field: str) -> None:
        """Remove ``field`` from hash ``name``."""

    def close(self) -> None:
        """Release backend connections. No-op by default."""
