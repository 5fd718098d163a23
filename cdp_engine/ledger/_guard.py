"""Single engine-wide non-reentrant critical section.

One guard per engine, not per user: while any mutating operation is in
flight, every other mutating entry is refused. enter() is a scoped
acquisition, released on every exit path including exceptions.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import final

from cdp_engine.core.errors import ReentrancyError
from cdp_engine.core.result import Err, Ok
from cdp_engine.core.types import UtcDatetime


@final
class NonReentrantGuard:
    def __init__(self) -> None:
        self._in_flight: str | None = None

    @property
    def locked(self) -> bool:
        return self._in_flight is not None

    @contextmanager
    def enter(self, operation: str) -> Iterator[Ok[None] | Err[ReentrancyError]]:
        """Yield Ok if the section was acquired, Err if already held.

        On Err the section stays owned by the in-flight operation and
        is not released on exit.
        """
        if self._in_flight is not None:
            yield Err(ReentrancyError(
                message=f"{operation} entered while {self._in_flight} is in flight",
                code="REENTRANT_CALL",
                timestamp=UtcDatetime.now(),
                source="ledger._guard.NonReentrantGuard.enter",
                operation=operation,
                in_flight=self._in_flight,
            ))
            return
        self._in_flight = operation
        try:
            yield Ok(None)
        finally:
            self._in_flight = None
