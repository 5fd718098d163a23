"""Tests for cdp_engine.core.fixed_point — bounded integer arithmetic."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from cdp_engine.core.fixed_point import (
    MAX_UINT256,
    PRECISION,
    checked_add,
    checked_sub,
    feed_scale_factor,
    is_uint,
    mul_div,
    scale_factor,
)
from cdp_engine.core.result import Err, Ok

_uint = st.integers(min_value=0, max_value=MAX_UINT256)


class TestConstants:
    def test_precision(self) -> None:
        assert PRECISION == 10**18

    def test_eight_decimal_feed_scale(self) -> None:
        assert feed_scale_factor(8) == 10**10

    def test_eighteen_decimal_feed_scale(self) -> None:
        assert feed_scale_factor(18) == 1

    def test_feed_with_too_many_decimals(self) -> None:
        with pytest.raises(ValueError):
            feed_scale_factor(19)

    def test_negative_scale(self) -> None:
        with pytest.raises(ValueError):
            scale_factor(-1)


class TestMulDiv:
    def test_floors(self) -> None:
        assert mul_div(10, 1, 3) == 3

    def test_wide_intermediate(self) -> None:
        assert mul_div(MAX_UINT256, PRECISION, PRECISION) == MAX_UINT256

    def test_zero_denominator(self) -> None:
        with pytest.raises(ZeroDivisionError):
            mul_div(1, 1, 0)


class TestChecked:
    def test_add_at_bound(self) -> None:
        assert checked_add(MAX_UINT256 - 1, 1) == Ok(MAX_UINT256)

    def test_add_overflow(self) -> None:
        assert isinstance(checked_add(MAX_UINT256, 1), Err)

    def test_sub_to_zero(self) -> None:
        assert checked_sub(5, 5) == Ok(0)

    def test_sub_underflow(self) -> None:
        assert isinstance(checked_sub(5, 6), Err)

    @given(a=_uint, b=_uint)
    def test_add_never_leaves_range(self, a: int, b: int) -> None:
        match checked_add(a, b):
            case Ok(total):
                assert is_uint(total)
            case Err():
                assert a + b > MAX_UINT256

    @given(a=_uint, b=_uint)
    def test_sub_never_negative(self, a: int, b: int) -> None:
        match checked_sub(a, b):
            case Ok(diff):
                assert diff == a - b >= 0
            case Err():
                assert b > a


class TestIsUint:
    def test_rejects_bool(self) -> None:
        assert not is_uint(True)

    def test_rejects_negative(self) -> None:
        assert not is_uint(-1)

    def test_rejects_too_big(self) -> None:
        assert not is_uint(MAX_UINT256 + 1)

    def test_accepts_zero(self) -> None:
        assert is_uint(0)
