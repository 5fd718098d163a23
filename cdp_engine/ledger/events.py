"""Notification values emitted by the engine.

Events are buffered while an operation runs and committed only when it
succeeds, so a rolled-back operation leaves no trace in the log.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import final

from cdp_engine.core.types import UtcDatetime
from cdp_engine.infra.config import TOPIC_COLLATERAL, TOPIC_DEBT, TOPIC_LIQUIDATIONS


@final
@dataclass(frozen=True, slots=True)
class CollateralDeposited:
    sequence: int
    timestamp: UtcDatetime
    user: str
    asset: str
    amount: int


@final
@dataclass(frozen=True, slots=True)
class CollateralRedeemed:
    """redeemed_from != redeemed_to when collateral is seized by a liquidator."""

    sequence: int
    timestamp: UtcDatetime
    redeemed_from: str
    redeemed_to: str
    asset: str
    amount: int


@final
@dataclass(frozen=True, slots=True)
class DscMinted:
    sequence: int
    timestamp: UtcDatetime
    user: str
    amount: int


@final
@dataclass(frozen=True, slots=True)
class DscBurned:
    """Debt of on_behalf_of repaid with synthetic asset pulled from dsc_from."""

    sequence: int
    timestamp: UtcDatetime
    on_behalf_of: str
    dsc_from: str
    amount: int


@final
@dataclass(frozen=True, slots=True)
class Liquidated:
    sequence: int
    timestamp: UtcDatetime
    user: str
    liquidator: str
    asset: str
    debt_covered: int
    collateral_seized: int
    bonus: int


type EngineEvent = (
    CollateralDeposited | CollateralRedeemed | DscMinted | DscBurned | Liquidated
)


def topic_for(event: EngineEvent) -> str:
    match event:
        case CollateralDeposited() | CollateralRedeemed():
            return TOPIC_COLLATERAL
        case DscMinted() | DscBurned():
            return TOPIC_DEBT
        case Liquidated():
            return TOPIC_LIQUIDATIONS
    raise TypeError(f"Not an engine event: {type(event).__name__}")


def partition_key(event: EngineEvent) -> str:
    """Key by the user whose position changed."""
    match event:
        case CollateralRedeemed(redeemed_from=user) | DscBurned(on_behalf_of=user):
            return user
        case CollateralDeposited(user=user) | DscMinted(user=user) | Liquidated(user=user):
            return user
    raise TypeError(f"Not an engine event: {type(event).__name__}")
