"""Shared mutable cells injected into sub-containers."""
from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Generic, Optional, TypeVar

if TYPE_CHECKING:
    from skygear.config import Configuration

T = TypeVar("T")


class SharedCell(Generic[T]):
    """A single value whose reads and writes are atomic with respect to each other."""

    def __init__(self, value: Optional[T] = None) -> None:
        self._value = value
        self._lock = threading.Lock()

    def get(self) -> Optional[T]:
        with self._lock:
            return self._value

    def set(self, value: Optional[T]) -> None:
        with self._lock:
            self._value = value


class TokenCell(SharedCell[str]):
    """Holds the current access token, or None when logged out."""


class ConfigCell(SharedCell["Configuration"]):
    """Holds the container's current Configuration."""
