"""Collateral and debt position ledgers.

Pure accounting, no business rules. Absent keys read as zero; a
position exists exactly when its amount is non-zero. Every credit and
debit is range-checked against [0, MAX_UINT256] and returns Err instead
of wrapping or going negative.

Ledgers are NOT dataclasses: they hold mutable state, owned by the
engine. snapshot()/restore() give the engine its rollback point.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Hashable
from typing import final

from cdp_engine.core.errors import LedgerOverflowError, LedgerUnderflowError
from cdp_engine.core.fixed_point import checked_add, checked_sub
from cdp_engine.core.result import Err, Ok
from cdp_engine.core.types import UtcDatetime


class _BalanceBook[K: Hashable]:
    """Map K -> non-negative int with checked credit/debit."""

    _source: str = "ledger.positions"

    def __init__(self) -> None:
        self._balances: defaultdict[K, int] = defaultdict(int)

    def _get(self, key: K) -> int:
        return self._balances.get(key, 0)

    def _credit(
        self, key: K, amount: int,
    ) -> Ok[int] | Err[LedgerOverflowError]:
        current = self._get(key)
        match checked_add(current, amount):
            case Err(msg):
                return Err(LedgerOverflowError(
                    message=msg, code="LEDGER_OVERFLOW",
                    timestamp=UtcDatetime.now(), source=f"{self._source}.credit",
                    key=repr(key), balance=current, requested=amount,
                ))
            case Ok(total):
                self._balances[key] = total
                return Ok(total)

    def _debit(
        self, key: K, amount: int,
    ) -> Ok[int] | Err[LedgerUnderflowError]:
        current = self._get(key)
        match checked_sub(current, amount):
            case Err(msg):
                return Err(LedgerUnderflowError(
                    message=msg, code="LEDGER_UNDERFLOW",
                    timestamp=UtcDatetime.now(), source=f"{self._source}.debit",
                    key=repr(key), balance=current, requested=amount,
                ))
            case Ok(remaining):
                if remaining:
                    self._balances[key] = remaining
                else:
                    self._balances.pop(key, None)
                return Ok(remaining)

    def snapshot(self) -> dict[K, int]:
        return dict(self._balances)

    def restore(self, snapshot: dict[K, int]) -> None:
        self._balances = defaultdict(int, snapshot)

    def __len__(self) -> int:
        """Number of non-zero positions."""
        return sum(1 for v in self._balances.values() if v)


@final
class CollateralLedger(_BalanceBook[tuple[str, str]]):
    """(user, asset) -> deposited amount in the asset's smallest unit."""

    _source = "ledger.positions.CollateralLedger"

    def balance_of(self, user: str, asset: str) -> int:
        return self._get((user, asset))

    def credit(
        self, user: str, asset: str, amount: int,
    ) -> Ok[int] | Err[LedgerOverflowError]:
        return self._credit((user, asset), amount)

    def debit(
        self, user: str, asset: str, amount: int,
    ) -> Ok[int] | Err[LedgerUnderflowError]:
        return self._debit((user, asset), amount)

    def total_deposited(self, asset: str) -> int:
        """Sum over users for one asset: what the engine should custody."""
        return sum(qty for (_, a), qty in self._balances.items() if a == asset)

    def positions(self) -> tuple[tuple[str, str, int], ...]:
        """All non-zero (user, asset, amount) positions, sorted."""
        return tuple(
            (user, asset, qty)
            for (user, asset), qty in sorted(self._balances.items())
            if qty
        )


@final
class DebtLedger(_BalanceBook[str]):
    """user -> synthetic-asset units minted and outstanding."""

    _source = "ledger.positions.DebtLedger"

    def balance_of(self, user: str) -> int:
        return self._get(user)

    def credit(self, user: str, amount: int) -> Ok[int] | Err[LedgerOverflowError]:
        return self._credit(user, amount)

    def debit(self, user: str, amount: int) -> Ok[int] | Err[LedgerUnderflowError]:
        return self._debit(user, amount)

    def total_debt(self) -> int:
        """Sum of all debt: must equal the synthetic asset's circulating supply."""
        return sum(self._balances.values())

    def debtors(self) -> tuple[str, ...]:
        return tuple(sorted(u for u, qty in self._balances.items() if qty))
