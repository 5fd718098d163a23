"""Core types: UtcDatetime, Address, TokenAmount."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import final

from cdp_engine.core.result import Err, Ok


@final
@dataclass(frozen=True, slots=True)
class UtcDatetime:
    """Timezone-aware UTC datetime. Naive datetimes are rejected."""

    value: datetime

    def __post_init__(self) -> None:
        if self.value.tzinfo is None:
            raise TypeError("UtcDatetime requires timezone-aware datetime, got naive")

    @staticmethod
    def parse(raw: datetime) -> Ok[UtcDatetime] | Err[str]:
        """Parse a datetime, rejecting naive (no tzinfo) datetimes."""
        if raw.tzinfo is None:
            return Err("UtcDatetime requires timezone-aware datetime, got naive")
        return Ok(UtcDatetime(value=raw.astimezone(UTC)))

    @staticmethod
    def from_timestamp(seconds: int) -> UtcDatetime:
        """Oracle rounds report POSIX seconds."""
        return UtcDatetime(value=datetime.fromtimestamp(seconds, tz=UTC))

    @staticmethod
    def now() -> UtcDatetime:
        """Current UTC time."""
        return UtcDatetime(value=datetime.now(tz=UTC))


@final
@dataclass(frozen=True, slots=True)
class Address:
    """Opaque account or token identifier. The empty string is the zero address."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value:
            raise TypeError(f"Address requires non-empty string, got {self.value!r}")

    @staticmethod
    def parse(raw: str) -> Ok[Address] | Err[str]:
        if not isinstance(raw, str) or not raw:
            return Err("Address requires non-empty string")
        return Ok(Address(value=raw))

    def __str__(self) -> str:
        return self.value


@final
@dataclass(frozen=True, slots=True)
class TokenAmount:
    """Integer amount in a token's smallest unit, paired with its decimals.

    Display helper only; ledgers store bare ints.
    """

    raw: int
    decimals: int = 18

    def __post_init__(self) -> None:
        if isinstance(self.raw, bool) or not isinstance(self.raw, int):
            raise TypeError(f"TokenAmount.raw must be int, got {type(self.raw).__name__}")
        if self.raw < 0:
            raise TypeError(f"TokenAmount.raw must be >= 0, got {self.raw}")
        if self.decimals < 0:
            raise TypeError(f"TokenAmount.decimals must be >= 0, got {self.decimals}")

    @staticmethod
    def of(whole: int, decimals: int = 18) -> TokenAmount:
        """Whole units -> smallest units (to_wei for integer inputs)."""
        return TokenAmount(raw=whole * 10**decimals, decimals=decimals)

    def __str__(self) -> str:
        whole, frac = divmod(self.raw, 10**self.decimals)
        if not frac:
            return str(whole)
        return f"{whole}.{str(frac).rjust(self.decimals, '0').rstrip('0')}"
