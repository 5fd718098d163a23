"""Error value hierarchy — no engine operation raises for a business failure.

Every error is a frozen dataclass value that can be pattern-matched,
serialized, and logged. Base class EngineError, one @final subclass per
rejection kind. Subclasses add the fields off-engine tooling needs to
decide whether to adjust and resubmit (e.g. the offending health factor).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import final

from cdp_engine.core.types import UtcDatetime


@dataclass(frozen=True, slots=True)
class EngineError:
    """Base error value. NOT @final — has subclasses."""

    message: str
    code: str
    timestamp: UtcDatetime
    source: str  # "module.function" that produced this error

    def with_context(self, context: str) -> EngineError:
        """Return a copy with context prepended to message."""
        return replace(self, message=f"{context}: {self.message}")

    def to_dict(self) -> dict[str, object]:
        """Serialize to dict with stable keys."""
        return {
            "message": self.message,
            "code": self.code,
            "timestamp": self.timestamp.value.isoformat(),
            "source": self.source,
        }


@final
@dataclass(frozen=True, slots=True)
class InvalidAmountError(EngineError):
    """An amount that must be > 0 was not."""

    field: str
    amount: int

    def to_dict(self) -> dict[str, object]:
        return {**EngineError.to_dict(self), "field": self.field, "amount": str(self.amount)}


@final
@dataclass(frozen=True, slots=True)
class InvalidAddressError(EngineError):
    """Caller or target identifier is the zero address."""

    field: str

    def to_dict(self) -> dict[str, object]:
        return {**EngineError.to_dict(self), "field": self.field}


@final
@dataclass(frozen=True, slots=True)
class UnsupportedAssetError(EngineError):
    """Asset is not in the configured collateral set."""

    asset: str

    def to_dict(self) -> dict[str, object]:
        return {**EngineError.to_dict(self), "asset": self.asset}


@final
@dataclass(frozen=True, slots=True)
class ConfigMismatchError(EngineError):
    """Construction-time configuration is inconsistent."""

    expected: str
    actual: str

    def to_dict(self) -> dict[str, object]:
        return {**EngineError.to_dict(self), "expected": self.expected, "actual": self.actual}


@final
@dataclass(frozen=True, slots=True)
class TransferFailedError(EngineError):
    """An external asset transfer returned False or raised."""

    asset: str
    sender: str
    recipient: str
    amount: int

    def to_dict(self) -> dict[str, object]:
        return {
            **EngineError.to_dict(self),
            "asset": self.asset,
            "sender": self.sender,
            "recipient": self.recipient,
            "amount": str(self.amount),
        }


@final
@dataclass(frozen=True, slots=True)
class MintFailedError(EngineError):
    """The synthetic-asset ledger refused to mint."""

    amount: int

    def to_dict(self) -> dict[str, object]:
        return {**EngineError.to_dict(self), "amount": str(self.amount)}


@final
@dataclass(frozen=True, slots=True)
class InvalidPriceError(EngineError):
    """Oracle returned a non-positive answer."""

    asset: str
    answer: int

    def to_dict(self) -> dict[str, object]:
        return {**EngineError.to_dict(self), "asset": self.asset, "answer": str(self.answer)}


@final
@dataclass(frozen=True, slots=True)
class HealthFactorBrokenError(EngineError):
    """Post-mutation health factor is below the minimum."""

    user: str
    health_factor: int

    def to_dict(self) -> dict[str, object]:
        return {
            **EngineError.to_dict(self),
            "user": self.user,
            "health_factor": str(self.health_factor),
        }


@final
@dataclass(frozen=True, slots=True)
class HealthFactorOkError(EngineError):
    """Liquidation attempted against a solvent position."""

    user: str
    health_factor: int

    def to_dict(self) -> dict[str, object]:
        return {
            **EngineError.to_dict(self),
            "user": self.user,
            "health_factor": str(self.health_factor),
        }


@final
@dataclass(frozen=True, slots=True)
class HealthFactorNotImprovedError(EngineError):
    """Liquidation did not bring the target back to the minimum."""

    user: str
    starting: int
    ending: int

    def to_dict(self) -> dict[str, object]:
        return {
            **EngineError.to_dict(self),
            "user": self.user,
            "starting": str(self.starting),
            "ending": str(self.ending),
        }


@final
@dataclass(frozen=True, slots=True)
class LedgerUnderflowError(EngineError):
    """A debit would take a balance below zero."""

    key: str
    balance: int
    requested: int

    def to_dict(self) -> dict[str, object]:
        return {
            **EngineError.to_dict(self),
            "key": self.key,
            "balance": str(self.balance),
            "requested": str(self.requested),
        }


@final
@dataclass(frozen=True, slots=True)
class LedgerOverflowError(EngineError):
    """A credit would take a balance past the uint256 range."""

    key: str
    balance: int
    requested: int

    def to_dict(self) -> dict[str, object]:
        return {
            **EngineError.to_dict(self),
            "key": self.key,
            "balance": str(self.balance),
            "requested": str(self.requested),
        }


@final
@dataclass(frozen=True, slots=True)
class ReentrancyError(EngineError):
    """A mutating operation was entered while another was in flight."""

    operation: str
    in_flight: str

    def to_dict(self) -> dict[str, object]:
        return {
            **EngineError.to_dict(self),
            "operation": self.operation,
            "in_flight": self.in_flight,
        }
