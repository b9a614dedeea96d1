"""Thread-safe compute-once cell."""

from __future__ import annotations

import threading
from typing import Generic, TypeVar
from collections.abc import Callable

T = TypeVar("T")


class Lazy(Generic[T]):
    """Value computed by ``factory`` on first access, at most once.

    Concurrent first readers wait for the running computation and observe
    its result. A raised :class:`Exception` is stored and re-raised on every
    later access. Interpreter-level exits such as ``KeyboardInterrupt`` or
    ``SystemExit`` propagate without settling the cell, so the next read
    computes again.
    """

    def __init__(self, factory: Callable[[], T]) -> None:
        self._factory = factory
        self._lock = threading.Lock()
        self._done = False
        self._value: T | None = None
        self._error: Exception | None = None

    @property
    def is_value_created(self) -> bool:
        return self._done and self._error is None

    @property
    def value(self) -> T:
        if not self._done:
            with self._lock:
                if not self._done:
                    try:
                        self._value = self._factory()
                    except Exception as exc:
                        self._error = exc
                    self._done = True
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore[return-value]


__all__ = ["Lazy"]
