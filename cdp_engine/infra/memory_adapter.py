"""In-memory implementations of the collaborator protocols.

Test doubles and demo wiring that let the engine run without a chain.
None of them are production code.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import final

from cdp_engine.core.result import Err, Ok
from cdp_engine.oracle.price_feed import USD_FEED_DECIMALS, PriceRound

logger = logging.getLogger(__name__)


def _now_seconds() -> int:
    return int(datetime.now(tz=UTC).timestamp())


@final
class InMemoryPriceFeed:
    """Aggregator double: answer is settable, every update opens a new round."""

    def __init__(
        self,
        address: str,
        initial_answer: int,
        decimals: int = USD_FEED_DECIMALS,
    ) -> None:
        self._address = address
        self._decimals = decimals
        self._round_id = 0
        self._answer = 0
        self._updated_at = 0
        self.update_answer(initial_answer)

    @property
    def address(self) -> str:
        return self._address

    @property
    def decimals(self) -> int:
        return self._decimals

    def update_answer(self, answer: int, updated_at: int | None = None) -> None:
        self._round_id += 1
        self._answer = answer
        self._updated_at = _now_seconds() if updated_at is None else updated_at

    def latest_round_data(self) -> PriceRound:
        return PriceRound(
            round_id=self._round_id,
            answer=self._answer,
            started_at=self._updated_at,
            updated_at=self._updated_at,
            answered_in_round=self._round_id,
        )


class InMemoryToken:
    """Fungible asset ledger with balances and allowances.

    transfer/transfer_from return False instead of moving a partial amount.
    """

    def __init__(
        self, address: str, symbol: str = "", decimals: int = 18,
    ) -> None:
        self._address = address
        self.symbol = symbol or address
        self._decimals = decimals
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self._total_supply = 0

    @property
    def address(self) -> str:
        return self._address

    @property
    def decimals(self) -> int:
        return self._decimals

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        if not owner or not spender or amount < 0:
            return False
        self._allowances[(owner, spender)] = amount
        return True

    def faucet(self, to: str, amount: int) -> None:
        """Create `amount` out of thin air for `to`. Test wiring only."""
        self._credit(to, amount)

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        if not recipient or amount < 0 or self.balance_of(sender) < amount:
            return False
        self._balances[sender] = self.balance_of(sender) - amount
        self._balances[recipient] = self.balance_of(recipient) + amount
        return True

    def transfer_from(
        self, spender: str, owner: str, recipient: str, amount: int,
    ) -> bool:
        allowed = self.allowance(owner, spender)
        if allowed < amount:
            logger.debug(
                "%s: allowance %s < %s for %s -> %s",
                self.symbol, allowed, amount, owner, spender,
            )
            return False
        if not self.transfer(owner, recipient, amount):
            return False
        self._allowances[(owner, spender)] = allowed - amount
        return True

    def _credit(self, to: str, amount: int) -> None:
        self._balances[to] = self.balance_of(to) + amount
        self._total_supply += amount

    def _debit(self, account: str, amount: int) -> None:
        self._balances[account] = self.balance_of(account) - amount
        self._total_supply -= amount


class StablecoinBurnError(ValueError):
    """Raised by InMemoryStablecoin.burn on refusal."""


@final
class InMemoryStablecoin(InMemoryToken):
    """The pegged asset. Mint and burn are restricted to `owner`."""

    def __init__(self, address: str, owner: str, symbol: str = "DSC") -> None:
        super().__init__(address, symbol=symbol, decimals=18)
        self.owner = owner

    def mint(self, caller: str, to: str, amount: int) -> bool:
        if caller != self.owner:
            logger.warning("%s: mint refused for non-owner %s", self.symbol, caller)
            return False
        if not to or amount <= 0:
            return False
        self._credit(to, amount)
        return True

    def burn(self, caller: str, amount: int) -> None:
        if caller != self.owner:
            raise StablecoinBurnError(f"{self.symbol}: burn by non-owner {caller}")
        if amount <= 0:
            raise StablecoinBurnError(f"{self.symbol}: burn amount must be > 0, got {amount}")
        balance = self.balance_of(caller)
        if balance < amount:
            raise StablecoinBurnError(
                f"{self.symbol}: burn amount {amount} exceeds balance {balance}"
            )
        self._debit(caller, amount)


@final
class InMemoryEventBus:
    """In-memory event bus. Messages stored per-topic as (key, value) pairs."""

    def __init__(self) -> None:
        self._topics: dict[str, list[tuple[str, bytes]]] = {}

    def publish(self, topic: str, key: str, value: bytes) -> Ok[None] | Err[str]:
        if not topic:
            return Err("publish requires a topic")
        self._topics.setdefault(topic, []).append((key, value))
        return Ok(None)

    def get_messages(self, topic: str) -> list[tuple[str, bytes]]:
        """Test-only helper."""
        return list(self._topics.get(topic, []))

    def topic_count(self) -> int:
        """Test-only helper."""
        return len(self._topics)
