from __future__ import annotations

import threading
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class OnceCell(Generic[T]):
    """Runs a factory at most once and caches its value or its exception.

    Callers that race the first resolution block on the cell's lock and then
    observe the same outcome. A failure is never retried; the same exception
    object is raised to every caller.
    """

    __slots__ = ("_lock", "_done", "_value", "_error")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._done = False
        self._value: T | None = None
        self._error: BaseException | None = None

    @classmethod
    def resolved(cls, value: T) -> "OnceCell[T]":
        cell: OnceCell[T] = cls()
        cell._value = value
        cell._done = True
        return cell

    @property
    def is_resolved(self) -> bool:
        return self._done

    def peek(self) -> T | None:
        """Return the cached value, or None if unresolved or failed."""
        if self._done and self._error is None:
            return self._value
        return None

    def get(self, factory: Callable[[], T]) -> T:
        if not self._done:
            with self._lock:
                if not self._done:
                    try:
                        self._value = factory()
                    except Exception as exc:
                        self._error = exc
                    self._done = True
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore[return-value]
