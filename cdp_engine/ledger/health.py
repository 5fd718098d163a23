"""Health factor: the solvency gate every state-changing operation passes.

    adjusted = collateral_usd * threshold // threshold_precision
    health   = adjusted * PRECISION // total_debt

A user without debt is maximally healthy (MAX_UINT256); the division
is never reached with a zero denominator.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import final

from cdp_engine.core.fixed_point import MAX_UINT256, mul_div
from cdp_engine.core.result import Err, Ok
from cdp_engine.infra.config import EngineConfig
from cdp_engine.ledger.positions import CollateralLedger, DebtLedger
from cdp_engine.oracle.valuation import ValuationEngine, ValuationError

logger = logging.getLogger(__name__)


@final
@dataclass(frozen=True, slots=True)
class AccountSnapshot:
    """Derived, never stored: (total debt, total collateral value in USD)."""

    total_dsc_minted: int
    collateral_value_usd: int


def calculate_health_factor(
    total_dsc_minted: int, collateral_value_usd: int, config: EngineConfig,
) -> int:
    """Pure formula. MAX_UINT256 when there is no debt."""
    if total_dsc_minted == 0:
        return MAX_UINT256
    adjusted = mul_div(
        collateral_value_usd, config.liquidation_threshold, config.liquidation_precision,
    )
    return mul_div(adjusted, config.precision, total_dsc_minted)


@final
class HealthFactorEngine:
    """Reads the live ledgers; holds no state of its own."""

    def __init__(
        self,
        collateral: CollateralLedger,
        debt: DebtLedger,
        valuation: ValuationEngine,
        assets: tuple[str, ...],
        config: EngineConfig,
    ) -> None:
        self._collateral = collateral
        self._debt = debt
        self._valuation = valuation
        self._assets = assets
        self._config = config

    def collateral_value(self, user: str) -> Ok[int] | Err[ValuationError]:
        """Sum of USD values over every supported asset the user holds."""
        total = 0
        for asset in self._assets:
            amount = self._collateral.balance_of(user, asset)
            if not amount:
                continue
            match self._valuation.to_usd(asset, amount):
                case Err() as e:
                    return e
                case Ok(usd):
                    total += usd
        return Ok(total)

    def snapshot(self, user: str) -> Ok[AccountSnapshot] | Err[ValuationError]:
        return self.collateral_value(user).map(
            lambda usd: AccountSnapshot(
                total_dsc_minted=self._debt.balance_of(user),
                collateral_value_usd=usd,
            )
        )

    def health_factor(self, user: str) -> Ok[int] | Err[ValuationError]:
        # No debt: skip the oracle reads entirely.
        if self._debt.balance_of(user) == 0:
            return Ok(MAX_UINT256)
        match self.snapshot(user):
            case Err() as e:
                return e
            case Ok(snap):
                pass
        hf = calculate_health_factor(
            snap.total_dsc_minted, snap.collateral_value_usd, self._config,
        )
        logger.debug(
            "health_factor %s debt=%s collateral_usd=%s -> %s",
            user, snap.total_dsc_minted, snap.collateral_value_usd, hf,
        )
        return Ok(hf)

    def is_healthy(self, health_factor: int) -> bool:
        return health_factor >= self._config.min_health_factor
