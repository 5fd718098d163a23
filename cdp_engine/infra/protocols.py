"""Collaborator protocol definitions for the collateral/debt engine.

Engine code depends on these abstractions. Concrete price feeds, asset
ledgers, and transports implement them; the engine is handed one
implementation per collaborator at construction and never names a
concrete class.

Asset ledgers follow the token convention of returning a bool from
transfers. A False return or a raised exception is a failed transfer.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from cdp_engine.core.result import Err, Ok
from cdp_engine.oracle.price_feed import PriceRound


@runtime_checkable
class PriceFeed(Protocol):
    """Read-only USD price source for one collateral asset."""

    @property
    def address(self) -> str: ...

    @property
    def decimals(self) -> int: ...

    def latest_round_data(self) -> PriceRound: ...


@runtime_checkable
class TransferableAsset(Protocol):
    """Fungible asset ledger used for collateral movement.

    Invariants:
      - transfer() moves `amount` from `sender` to `recipient`.
      - transfer_from() additionally spends `spender`'s allowance on `owner`.
      - Both return False (never a partial move) on insufficient
        balance or allowance.
    """

    @property
    def address(self) -> str: ...

    @property
    def decimals(self) -> int: ...

    def balance_of(self, account: str) -> int: ...

    def transfer(self, sender: str, recipient: str, amount: int) -> bool: ...

    def transfer_from(
        self, spender: str, owner: str, recipient: str, amount: int,
    ) -> bool: ...


@runtime_checkable
class SyntheticAssetLedger(TransferableAsset, Protocol):
    """The pegged asset. Only its owner (the engine) may mint or burn.

    mint() returns False on refusal. burn() destroys from the caller's
    own balance and raises on refusal.
    """

    def mint(self, caller: str, to: str, amount: int) -> bool: ...

    def burn(self, caller: str, amount: int) -> None: ...


@runtime_checkable
class EventBus(Protocol):
    """Append-only notification transport.

    Messages are keyed for deterministic partitioning. Values are opaque
    bytes; serialization is the publisher's responsibility.
    """

    def publish(self, topic: str, key: str, value: bytes) -> Ok[None] | Err[str]: ...
