"""Ok / Err: how every engine operation reports its outcome.

A rejected state transition is a value, not an exception. Mutating
operations return Ok(None) or Err(EngineError); queries return
Ok(value) or Err(EngineError). Callers match on the variant.

run_checks() chains validation and ledger steps, stopping at the
first Err. unwrap() is for tests and scripts that expect success.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, NoReturn, final


@final
@dataclass(frozen=True, slots=True)
class Ok[T]:
    value: T

    def map[U](self, f: Callable[[T], U]) -> Ok[U]:
        return Ok(f(self.value))

    def and_then[U, E](self, f: Callable[[T], Ok[U] | Err[E]]) -> Ok[U] | Err[E]:
        """Run the next step with this value."""
        return f(self.value)

    def map_err(self, f: Callable[[Any], Any]) -> Ok[T]:  # noqa: ARG002
        return self

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:  # noqa: ARG002
        return self.value


@final
@dataclass(frozen=True, slots=True)
class Err[E]:
    """The rejection. `error` is an EngineError for engine operations."""

    error: E

    def map(self, f: Callable[[Any], Any]) -> Err[E]:  # noqa: ARG002
        return self

    def and_then(self, f: Callable[[Any], Any]) -> Err[E]:  # noqa: ARG002
        """The next step never runs."""
        return self

    def map_err[F](self, f: Callable[[E], F]) -> Err[F]:
        return Err(f(self.error))

    def unwrap(self) -> NoReturn:
        raise RuntimeError(f"Called unwrap on Err: {self.error}")

    def unwrap_or[T](self, default: T) -> T:
        return default


type Result[T, E] = Ok[T] | Err[E]


def unwrap[T](result: Ok[T] | Err[Any]) -> T:
    """Value of an Ok, RuntimeError on Err. Tests and scripts only."""
    match result:
        case Ok(value):
            return value
        case Err(error):
            raise RuntimeError(f"unwrap on Err: {error}")
    raise TypeError(f"Expected Ok or Err, got {type(result).__name__}")


def is_ok(result: Ok[Any] | Err[Any]) -> bool:
    return isinstance(result, Ok)


def run_checks[E](*steps: Callable[[], Ok[Any] | Err[E]]) -> Ok[None] | Err[E]:
    """Call each step in order; the first Err stops the chain and is returned.

    Steps are thunks so that later ones (ledger mutations) only run once
    every earlier one (validation) has passed.
    """
    for step in steps:
        if isinstance(r := step(), Err):
            return r
    return Ok(None)
