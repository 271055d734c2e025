from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class RoleRef:
    """
    Detached reference to a persisted role.

    :param id: Role primary key.
    :param name: Role name.
    """

    id: int
    name: str


class PublishedOnce(Generic[T]):
    """
    Holder written at most once and read-only afterwards.

    Concurrent publishers race on a lock; the first value wins and later
    values are discarded.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: T | None = None

    def get(self) -> T | None:
        return self._value

    def publish(self, value: T) -> T:
        """Store ``value`` unless a value is already published; return the winner."""
        with self._lock:
            if self._value is None:
                self._value = value
            return self._value
