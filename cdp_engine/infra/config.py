"""Engine parameters and notification topic names.

No environment or file loading. Pure configuration data, validated at
construction so a bad parameter set never reaches the engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import final

from cdp_engine.core.fixed_point import PRECISION

# ---------------------------------------------------------------------------
# Topic names
# ---------------------------------------------------------------------------

TOPIC_COLLATERAL: str = "cdp.collateral"
TOPIC_DEBT: str = "cdp.debt"
TOPIC_LIQUIDATIONS: str = "cdp.liquidations"

ENGINE_TOPICS: tuple[str, ...] = (
    TOPIC_COLLATERAL,
    TOPIC_DEBT,
    TOPIC_LIQUIDATIONS,
)


# ---------------------------------------------------------------------------
# Risk parameters
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Risk parameters of a CollateralDebtEngine deployment.

    liquidation_threshold / liquidation_precision is the share of
    collateral value that counts toward solvency (50/100: 200%
    overcollateralization). liquidation_bonus / liquidation_precision
    is the liquidator's premium in seized collateral.
    """

    liquidation_threshold: int = 50
    liquidation_bonus: int = 10
    liquidation_precision: int = 100
    precision: int = PRECISION
    min_health_factor: int = PRECISION
    engine_address: str = "dsc-engine"

    def __post_init__(self) -> None:
        for name in (
            "liquidation_threshold", "liquidation_bonus",
            "liquidation_precision", "precision", "min_health_factor",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise TypeError(f"EngineConfig.{name} must be int > 0, got {value!r}")
        if self.liquidation_threshold > self.liquidation_precision:
            raise TypeError(
                "EngineConfig.liquidation_threshold must be <= liquidation_precision, "
                f"got {self.liquidation_threshold} > {self.liquidation_precision}"
            )
        if self.liquidation_bonus > self.liquidation_precision:
            raise TypeError(
                "EngineConfig.liquidation_bonus must be <= liquidation_precision, "
                f"got {self.liquidation_bonus} > {self.liquidation_precision}"
            )
        if not self.engine_address:
            raise TypeError("EngineConfig.engine_address must be non-empty")
