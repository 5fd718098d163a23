"""Asset <-> USD conversion in 18-decimal working precision.

    to_usd(asset, amount)  = price * feed_scale * amount // asset_scale
    from_usd(asset, usd)   = usd * asset_scale // (price * feed_scale)

feed_scale lifts the oracle answer to 18 decimals (1e10 for 8-decimal
USD feeds). asset_scale is 10**asset_decimals. Both divisions floor, so
from_usd(to_usd(a)) <= a: conversions never overcount in the caller's
favour.

Prices are re-read from the feed on every call. A non-positive answer
is an invalid read (InvalidPriceError), never a zero valuation.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import final

from cdp_engine.core.errors import InvalidAmountError, InvalidPriceError, UnsupportedAssetError
from cdp_engine.core.fixed_point import feed_scale_factor, is_uint, mul_div, scale_factor
from cdp_engine.core.result import Err, Ok
from cdp_engine.core.types import UtcDatetime
from cdp_engine.infra.protocols import PriceFeed

logger = logging.getLogger(__name__)

type ValuationError = UnsupportedAssetError | InvalidPriceError | InvalidAmountError


def _check_quantity(name: str, value: int, fn: str) -> Ok[int] | Err[InvalidAmountError]:
    """Zero converts to zero; negatives and values beyond uint256 are rejected."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{fn}: {name} must be int, got {type(value).__name__}")
    if not is_uint(value):
        return Err(InvalidAmountError(
            message=f"{fn}: {name} must be a uint256, got {value}",
            code="INVALID_QUANTITY",
            timestamp=UtcDatetime.now(),
            source=f"oracle.valuation.ValuationEngine.{fn}",
            field=name,
            amount=value,
        ))
    return Ok(value)


@final
class ValuationEngine:
    """Prices collateral assets through their configured feeds."""

    def __init__(
        self,
        feeds: Mapping[str, PriceFeed],
        asset_decimals: Mapping[str, int],
    ) -> None:
        self._feeds: dict[str, PriceFeed] = dict(feeds)
        self._asset_scale: dict[str, int] = {
            asset: scale_factor(asset_decimals.get(asset, 18)) for asset in self._feeds
        }

    def supports(self, asset: str) -> bool:
        return asset in self._feeds

    def feed_for(self, asset: str) -> Ok[PriceFeed] | Err[UnsupportedAssetError]:
        feed = self._feeds.get(asset)
        if feed is None:
            return Err(UnsupportedAssetError(
                message=f"Asset is not an accepted collateral: {asset}",
                code="UNSUPPORTED_ASSET",
                timestamp=UtcDatetime.now(),
                source="oracle.valuation.ValuationEngine.feed_for",
                asset=asset,
            ))
        return Ok(feed)

    def _price(self, asset: str) -> Ok[tuple[int, int]] | Err[ValuationError]:
        """(answer, feed_scale) for asset, rejecting non-positive answers."""
        match self.feed_for(asset):
            case Err() as e:
                return e
            case Ok(feed):
                pass
        answer = feed.latest_round_data().answer
        if answer <= 0:
            return Err(InvalidPriceError(
                message=f"Oracle answer for {asset} must be > 0, got {answer}",
                code="INVALID_PRICE",
                timestamp=UtcDatetime.now(),
                source="oracle.valuation.ValuationEngine.price",
                asset=asset,
                answer=answer,
            ))
        return Ok((answer, feed_scale_factor(feed.decimals)))

    def to_usd(self, asset: str, amount: int) -> Ok[int] | Err[ValuationError]:
        """USD value (18 decimals) of `amount` smallest units of `asset`."""
        if isinstance(bad := _check_quantity("amount", amount, "to_usd"), Err):
            return bad
        match self._price(asset):
            case Err() as e:
                return e
            case Ok((answer, feed_scale)):
                pass
        usd = mul_div(answer * feed_scale, amount, self._asset_scale[asset])
        logger.debug("to_usd %s amount=%s price=%s -> %s", asset, amount, answer, usd)
        return Ok(usd)

    def from_usd(self, asset: str, usd_amount: int) -> Ok[int] | Err[ValuationError]:
        """Amount of `asset` worth `usd_amount` (18 decimals), floored."""
        if isinstance(bad := _check_quantity("usd_amount", usd_amount, "from_usd"), Err):
            return bad
        match self._price(asset):
            case Err() as e:
                return e
            case Ok((answer, feed_scale)):
                pass
        amount = mul_div(usd_amount, self._asset_scale[asset], answer * feed_scale)
        logger.debug("from_usd %s usd=%s price=%s -> %s", asset, usd_amount, answer, amount)
        return Ok(amount)
