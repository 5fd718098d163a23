"""Tests for cdp_engine.oracle.valuation — asset <-> USD conversion."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from cdp_engine.core.errors import InvalidAmountError, InvalidPriceError, UnsupportedAssetError
from cdp_engine.core.fixed_point import MAX_UINT256
from cdp_engine.core.result import Err, Ok, unwrap
from cdp_engine.infra.memory_adapter import InMemoryPriceFeed
from cdp_engine.oracle.valuation import ValuationEngine

ETHER = 10**18


def wei_amounts(min_value: int = 1, max_value: int = 1_000_000 * ETHER) -> st.SearchStrategy[int]:
    return st.integers(min_value=min_value, max_value=max_value)


def feed_prices(min_dollars: int = 1, max_dollars: int = 100_000) -> st.SearchStrategy[int]:
    """Positive 8-decimal USD answers."""
    return st.integers(min_value=min_dollars * 10**8, max_value=max_dollars * 10**8)


def _valuation(
    answer: int = 2000 * 10**8, decimals: int = 18, feed_decimals: int = 8,
) -> tuple[ValuationEngine, InMemoryPriceFeed]:
    feed = InMemoryPriceFeed("eth-usd-feed", answer, decimals=feed_decimals)
    return ValuationEngine({"weth": feed}, {"weth": decimals}), feed


class TestToUsd:
    def test_fifteen_ether_at_2000(self) -> None:
        valuation, _ = _valuation()
        assert valuation.to_usd("weth", 15 * ETHER) == Ok(30_000 * ETHER)

    def test_one_wei(self) -> None:
        valuation, _ = _valuation()
        assert valuation.to_usd("weth", 1) == Ok(2000)

    def test_zero_amount(self) -> None:
        valuation, _ = _valuation()
        assert valuation.to_usd("weth", 0) == Ok(0)

    def test_eighteen_decimal_feed(self) -> None:
        valuation, _ = _valuation(answer=2000 * ETHER, feed_decimals=18)
        assert valuation.to_usd("weth", ETHER) == Ok(2000 * ETHER)

    def test_six_decimal_asset(self) -> None:
        valuation, _ = _valuation(answer=1 * 10**8, decimals=6)
        assert valuation.to_usd("weth", 250 * 10**6) == Ok(250 * ETHER)

    def test_reads_live_price(self) -> None:
        valuation, feed = _valuation()
        feed.update_answer(18 * 10**8)
        assert valuation.to_usd("weth", ETHER) == Ok(18 * ETHER)


class TestFromUsd:
    def test_hundred_dollars_at_2000(self) -> None:
        valuation, _ = _valuation()
        assert valuation.from_usd("weth", 100 * ETHER) == Ok(ETHER // 20)

    def test_floors(self) -> None:
        valuation, _ = _valuation(answer=18 * 10**8)
        assert valuation.from_usd("weth", 100 * ETHER) == Ok(5_555_555_555_555_555_555)

    def test_six_decimal_asset(self) -> None:
        valuation, _ = _valuation(answer=1 * 10**8, decimals=6)
        assert valuation.from_usd("weth", 250 * ETHER) == Ok(250 * 10**6)


class TestRejections:
    def test_unsupported_asset(self) -> None:
        valuation, _ = _valuation()
        result = valuation.to_usd("doge", ETHER)
        assert isinstance(result, Err)
        assert isinstance(result.error, UnsupportedAssetError)
        assert result.error.asset == "doge"

    def test_zero_price(self) -> None:
        valuation, feed = _valuation()
        feed.update_answer(0)
        result = valuation.to_usd("weth", ETHER)
        assert isinstance(result, Err)
        assert isinstance(result.error, InvalidPriceError)

    def test_negative_price(self) -> None:
        valuation, feed = _valuation()
        feed.update_answer(-1)
        result = valuation.from_usd("weth", ETHER)
        assert isinstance(result, Err)
        assert isinstance(result.error, InvalidPriceError)
        assert result.error.answer == -1

    def test_negative_amount(self) -> None:
        valuation, _ = _valuation()
        result = valuation.to_usd("weth", -1)
        assert isinstance(result, Err)
        assert isinstance(result.error, InvalidAmountError)
        assert result.error.field == "amount"

    def test_usd_beyond_uint256(self) -> None:
        valuation, _ = _valuation()
        result = valuation.from_usd("weth", MAX_UINT256 + 1)
        assert isinstance(result, Err)
        assert isinstance(result.error, InvalidAmountError)
        assert result.error.field == "usd_amount"

    def test_float_amount_raises(self) -> None:
        valuation, _ = _valuation()
        with pytest.raises(TypeError):
            valuation.to_usd("weth", 1.5)  # type: ignore[arg-type]

    def test_supports(self) -> None:
        valuation, _ = _valuation()
        assert valuation.supports("weth")
        assert not valuation.supports("wbtc")


class TestRoundTrip:
    @given(amount=wei_amounts(min_value=0), price=feed_prices())
    def test_never_overcounts(self, amount: int, price: int) -> None:
        valuation, _ = _valuation(answer=price)
        usd = unwrap(valuation.to_usd("weth", amount))
        back = unwrap(valuation.from_usd("weth", usd))
        # A price of at least $1 keeps the floor loss within one wei.
        assert amount - 1 <= back <= amount

    @given(
        usd=st.integers(min_value=0, max_value=10**30),
        price=feed_prices(),
    )
    def test_usd_round_trip_never_overcounts(self, usd: int, price: int) -> None:
        valuation, _ = _valuation(answer=price)
        amount = unwrap(valuation.from_usd("weth", usd))
        assert unwrap(valuation.to_usd("weth", amount)) <= usd
