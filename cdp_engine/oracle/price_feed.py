"""Oracle round data — the shape of a USD price read.

A PriceRound mirrors an aggregator's latest round: a signed fixed-point
answer plus round metadata. The engine only consumes `answer`; the
rest is kept for tooling and logging.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import final

from cdp_engine.core.types import UtcDatetime

USD_FEED_DECIMALS: int = 8


@final
@dataclass(frozen=True, slots=True)
class PriceRound:
    """One oracle round. `answer` is signed; `decimals` fixed per feed."""

    round_id: int
    answer: int
    started_at: int
    updated_at: int
    answered_in_round: int

    @property
    def updated(self) -> UtcDatetime:
        return UtcDatetime.from_timestamp(self.updated_at)

    @property
    def is_positive(self) -> bool:
        return self.answer > 0
