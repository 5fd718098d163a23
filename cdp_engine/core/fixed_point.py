"""Integer fixed-point arithmetic in the engine's 18-decimal working precision.

All amounts are Python ints in smallest units. Python ints never wrap,
so the uint256 range is enforced explicitly: checked_add/checked_sub
return Err instead of producing a value outside [0, MAX_UINT256].
Division always floors; callers rely on that rounding direction.
"""

from __future__ import annotations

from cdp_engine.core.result import Err, Ok

PRECISION_DECIMALS: int = 18
PRECISION: int = 10**PRECISION_DECIMALS
MAX_UINT256: int = 2**256 - 1


def scale_factor(decimals: int) -> int:
    """10**decimals, rejecting negative exponents."""
    if decimals < 0:
        raise ValueError(f"decimals must be >= 0, got {decimals}")
    return 10**decimals


def feed_scale_factor(feed_decimals: int) -> int:
    """Factor lifting an oracle answer to working precision (1e10 for 8-decimal feeds)."""
    if feed_decimals > PRECISION_DECIMALS:
        raise ValueError(
            f"feed decimals must be <= {PRECISION_DECIMALS}, got {feed_decimals}"
        )
    return scale_factor(PRECISION_DECIMALS - feed_decimals)


def mul_div(a: int, b: int, denominator: int) -> int:
    """floor(a * b / denominator) with an unbounded intermediate."""
    if denominator <= 0:
        raise ZeroDivisionError("mul_div denominator must be > 0")
    return (a * b) // denominator


def checked_add(a: int, b: int) -> Ok[int] | Err[str]:
    total = a + b
    if total > MAX_UINT256:
        return Err(f"overflow: {a} + {b} exceeds uint256")
    return Ok(total)


def checked_sub(a: int, b: int) -> Ok[int] | Err[str]:
    if b > a:
        return Err(f"underflow: {a} - {b} is negative")
    return Ok(a - b)


def is_uint(value: object) -> bool:
    """True for non-bool ints in [0, MAX_UINT256]."""
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and 0 <= value <= MAX_UINT256
    )
