"""cdp_engine.oracle — Price rounds and asset <-> USD valuation."""

from cdp_engine.oracle.price_feed import USD_FEED_DECIMALS as USD_FEED_DECIMALS
from cdp_engine.oracle.price_feed import PriceRound as PriceRound
from cdp_engine.oracle.valuation import ValuationEngine as ValuationEngine
