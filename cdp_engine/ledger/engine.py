"""Collateral/debt engine: deposit, mint, redeem, burn, liquidate.

Core invariant: after every successful deposit/mint/redeem/burn, each
user with non-zero debt has health_factor >= min_health_factor.
Liquidation exists to repair positions that price moves pushed below.

Every mutating operation follows the same discipline:
  1. enter the engine-wide non-reentrant section
  2. validate, mutate the ledgers, buffer notifications, check health
  3. settle external transfers last (compensable calls first, the one
     non-compensable payout or mint at the very end)
  4. on any Err or exception: restore the ledger snapshot, compensate
     settled calls in reverse, drop buffered notifications

CollateralDebtEngine is @final but NOT a dataclass — it holds mutable state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import final

from cdp_engine.core.errors import (
    ConfigMismatchError,
    EngineError,
    HealthFactorBrokenError,
    HealthFactorNotImprovedError,
    HealthFactorOkError,
    InvalidAddressError,
    InvalidAmountError,
    MintFailedError,
    TransferFailedError,
    UnsupportedAssetError,
)
from cdp_engine.core.fixed_point import (
    MAX_UINT256,
    PRECISION_DECIMALS,
    feed_scale_factor,
    is_uint,
    mul_div,
)
from cdp_engine.core.result import Err, Ok, run_checks
from cdp_engine.core.serialization import canonical_bytes
from cdp_engine.core.types import Address, UtcDatetime
from cdp_engine.infra.config import EngineConfig
from cdp_engine.infra.protocols import (
    EventBus,
    PriceFeed,
    SyntheticAssetLedger,
    TransferableAsset,
)
from cdp_engine.ledger._guard import NonReentrantGuard
from cdp_engine.ledger.events import (
    CollateralDeposited,
    CollateralRedeemed,
    DscBurned,
    DscMinted,
    EngineEvent,
    Liquidated,
    partition_key,
    topic_for,
)
from cdp_engine.ledger.health import (
    AccountSnapshot,
    HealthFactorEngine,
    calculate_health_factor,
)
from cdp_engine.ledger.positions import CollateralLedger, DebtLedger
from cdp_engine.oracle.valuation import ValuationEngine

logger = logging.getLogger(__name__)

_SOURCE = "ledger.engine.CollateralDebtEngine"


# ---------------------------------------------------------------------------
# Atomic unit of work
# ---------------------------------------------------------------------------


@final
@dataclass(frozen=True, slots=True)
class _External:
    """One queued call on a collaborator. compensate is None for payouts."""

    description: str
    call: Callable[[], Ok[None] | Err[EngineError]]
    compensate: Callable[[], bool] | None = None


@final
@dataclass(slots=True)
class _Unit:
    """Rollback point plus everything an operation defers until settlement."""

    collateral_snapshot: dict[tuple[str, str], int]
    debt_snapshot: dict[str, int]
    events: list[EngineEvent] = field(default_factory=list)
    externals: list[_External] = field(default_factory=list)
    settled: list[_External] = field(default_factory=list)


def _invalid_amount(name: str, amount: int, fn: str) -> Err[InvalidAmountError]:
    return Err(InvalidAmountError(
        message=f"{fn}: {name} must be > 0 and fit uint256, got {amount}",
        code="NEEDS_MORE_THAN_ZERO",
        timestamp=UtcDatetime.now(),
        source=f"{_SOURCE}.{fn}",
        field=name,
        amount=amount,
    ))


def _check_amount(name: str, amount: int, fn: str) -> Ok[int] | Err[InvalidAmountError]:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise TypeError(f"{fn}: {name} must be int, got {type(amount).__name__}")
    if amount <= 0 or not is_uint(amount):
        return _invalid_amount(name, amount, fn)
    return Ok(amount)


def _check_address(name: str, value: str, fn: str) -> Ok[Address] | Err[InvalidAddressError]:
    match Address.parse(value):
        case Err(msg):
            return Err(InvalidAddressError(
                message=f"{fn}: {name}: {msg}",
                code="ZERO_ADDRESS",
                timestamp=UtcDatetime.now(),
                source=f"{_SOURCE}.{fn}",
                field=name,
            ))
        case Ok(address):
            return Ok(address)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


@final
class CollateralDebtEngine:
    """Orchestrates the collateral and debt ledgers behind the solvency gate.

    Build with CollateralDebtEngine.create(); the constructor assumes a
    validated configuration.
    """

    def __init__(
        self,
        tokens: dict[str, TransferableAsset],
        feeds: dict[str, PriceFeed],
        dsc: SyntheticAssetLedger,
        config: EngineConfig,
        event_bus: EventBus | None = None,
        clock: Callable[[], UtcDatetime] = UtcDatetime.now,
    ) -> None:
        self._tokens = tokens
        self._assets: tuple[str, ...] = tuple(tokens)
        self._dsc = dsc
        self._config = config
        self._event_bus = event_bus
        self._clock = clock
        self._collateral = CollateralLedger()
        self._debt = DebtLedger()
        self._valuation = ValuationEngine(
            feeds, {asset: token.decimals for asset, token in tokens.items()},
        )
        self._health = HealthFactorEngine(
            self._collateral, self._debt, self._valuation, self._assets, config,
        )
        self._guard = NonReentrantGuard()
        self._events: list[EngineEvent] = []

    @staticmethod
    def create(
        tokens: Sequence[TransferableAsset],
        price_feeds: Sequence[PriceFeed],
        dsc: SyntheticAssetLedger,
        *,
        config: EngineConfig | None = None,
        event_bus: EventBus | None = None,
        clock: Callable[[], UtcDatetime] = UtcDatetime.now,
    ) -> Ok[CollateralDebtEngine] | Err[ConfigMismatchError]:
        """Pair tokens[i] with price_feeds[i]. Fails before any state exists."""

        def mismatch(
            message: str, code: str, expected: str, actual: str,
        ) -> Err[ConfigMismatchError]:
            return Err(ConfigMismatchError(
                message=message,
                code=code,
                timestamp=UtcDatetime.now(),
                source=f"{_SOURCE}.create",
                expected=expected,
                actual=actual,
            ))

        if len(tokens) != len(price_feeds):
            return mismatch(
                "Token and price feed lists must have the same length",
                code="TOKEN_AND_PRICE_FEED_LENGTH_MISMATCH",
                expected=f"{len(tokens)} price feeds",
                actual=f"{len(price_feeds)} price feeds",
            )
        token_map: dict[str, TransferableAsset] = {}
        feed_map: dict[str, PriceFeed] = {}
        for token, feed in zip(tokens, price_feeds, strict=True):
            if token.address in token_map:
                return mismatch(
                    f"Collateral token listed twice: {token.address}",
                    code="DUPLICATE_COLLATERAL_TOKEN",
                    expected="distinct collateral tokens",
                    actual=token.address,
                )
            if feed.decimals > PRECISION_DECIMALS:
                return mismatch(
                    f"Price feed {feed.address} reports {feed.decimals} decimals",
                    code="FEED_DECIMALS_TOO_HIGH",
                    expected=f"<= {PRECISION_DECIMALS} decimals",
                    actual=str(feed.decimals),
                )
            token_map[token.address] = token
            feed_map[token.address] = feed
        engine = CollateralDebtEngine(
            token_map, feed_map, dsc, config or EngineConfig(), event_bus, clock,
        )
        logger.info(
            "engine %s deployed with collateral %s, dsc %s",
            engine._config.engine_address, ", ".join(token_map), dsc.address,
        )
        return Ok(engine)

    # -----------------------------------------------------------------------
    # Mutating operations
    # -----------------------------------------------------------------------

    def deposit_collateral(
        self, caller: str, asset: str, amount: int,
    ) -> Ok[None] | Err[EngineError]:
        return self._run(
            "deposit_collateral",
            lambda unit: self._deposit(unit, caller, asset, amount),
        )

    def deposit_collateral_and_mint_dsc(
        self, caller: str, asset: str, collateral_amount: int, dsc_amount: int,
    ) -> Ok[None] | Err[EngineError]:
        """Deposit then mint as one atomic operation."""

        def body(unit: _Unit) -> Ok[None] | Err[EngineError]:
            return self._deposit(unit, caller, asset, collateral_amount).and_then(
                lambda _: self._mint(unit, caller, dsc_amount)
            )

        return self._run("deposit_collateral_and_mint_dsc", body)

    def mint_dsc(self, caller: str, amount: int) -> Ok[None] | Err[EngineError]:
        return self._run("mint_dsc", lambda unit: self._mint(unit, caller, amount))

    def redeem_collateral(
        self, caller: str, asset: str, amount: int,
    ) -> Ok[None] | Err[EngineError]:
        def body(unit: _Unit) -> Ok[None] | Err[EngineError]:
            return self._redeem(unit, asset, amount, caller, caller).and_then(
                lambda _: self._require_healthy(caller)
            )

        return self._run("redeem_collateral", body)

    def redeem_collateral_for_dsc(
        self, caller: str, asset: str, collateral_amount: int, dsc_amount: int,
    ) -> Ok[None] | Err[EngineError]:
        """Burn then redeem as one atomic operation."""

        def body(unit: _Unit) -> Ok[None] | Err[EngineError]:
            return (
                self._burn(unit, dsc_amount, caller, caller)
                .and_then(lambda _: self._redeem(unit, asset, collateral_amount, caller, caller))
                .and_then(lambda _: self._require_healthy(caller))
            )

        return self._run("redeem_collateral_for_dsc", body)

    def burn_dsc(self, caller: str, amount: int) -> Ok[None] | Err[EngineError]:
        def body(unit: _Unit) -> Ok[None] | Err[EngineError]:
            # Burning cannot lower a health factor; checked anyway to catch
            # arithmetic faults.
            return self._burn(unit, amount, caller, caller).and_then(
                lambda _: self._require_healthy(caller)
            )

        return self._run("burn_dsc", body)

    def liquidate(
        self, caller: str, asset: str, user: str, debt_to_cover: int,
    ) -> Ok[None] | Err[EngineError]:
        """Repay `debt_to_cover` of `user`'s debt, seize collateral plus bonus.

        The liquidator (caller) pays with their own synthetic asset and
        receives debt_to_cover worth of `asset` plus liquidation_bonus
        percent of it. `user` must be below the minimum health factor
        before, and at or above it after.
        """
        return self._run(
            "liquidate",
            lambda unit: self._liquidate(unit, caller, asset, user, debt_to_cover),
        )

    # -----------------------------------------------------------------------
    # Read-only queries
    # -----------------------------------------------------------------------

    def get_account_information(self, user: str) -> Ok[AccountSnapshot] | Err[EngineError]:
        return self._health.snapshot(user)

    def get_account_collateral_value(self, user: str) -> Ok[int] | Err[EngineError]:
        return self._health.collateral_value(user)

    def get_health_factor(self, user: str) -> Ok[int] | Err[EngineError]:
        return self._health.health_factor(user)

    def calculate_health_factor(
        self, total_dsc_minted: int, collateral_value_usd: int,
    ) -> int:
        return calculate_health_factor(total_dsc_minted, collateral_value_usd, self._config)

    def get_usd_value(self, asset: str, amount: int) -> Ok[int] | Err[EngineError]:
        return self._valuation.to_usd(asset, amount)

    def get_token_amount_from_usd(
        self, asset: str, usd_amount: int,
    ) -> Ok[int] | Err[EngineError]:
        return self._valuation.from_usd(asset, usd_amount)

    def get_collateral_balance_of_user(self, user: str, asset: str) -> int:
        return self._collateral.balance_of(user, asset)

    def get_dsc_minted(self, user: str) -> int:
        return self._debt.balance_of(user)

    def get_collateral_tokens(self) -> tuple[str, ...]:
        return self._assets

    def get_collateral_token_price_feed(
        self, asset: str,
    ) -> Ok[str] | Err[UnsupportedAssetError]:
        return self._valuation.feed_for(asset).map(lambda feed: feed.address)

    def get_dsc(self) -> str:
        return self._dsc.address

    def get_precision(self) -> int:
        return self._config.precision

    def get_additional_feed_precision(
        self, asset: str | None = None,
    ) -> Ok[int] | Err[UnsupportedAssetError]:
        """1e10 for 8-decimal feeds; per-asset when feeds differ.

        Without an asset, the first collateral's feed is reported.
        """
        if asset is None:
            asset = self._assets[0] if self._assets else ""
        return self._valuation.feed_for(asset).map(lambda feed: feed_scale_factor(feed.decimals))

    def get_liquidation_threshold(self) -> int:
        return self._config.liquidation_threshold

    def get_liquidation_bonus(self) -> int:
        return self._config.liquidation_bonus

    def get_liquidation_precision(self) -> int:
        return self._config.liquidation_precision

    def get_min_health_factor(self) -> int:
        return self._config.min_health_factor

    @property
    def address(self) -> str:
        return self._config.engine_address

    def events(self) -> tuple[EngineEvent, ...]:
        """Committed notifications, oldest first."""
        return tuple(self._events)

    # -----------------------------------------------------------------------
    # Operation runner
    # -----------------------------------------------------------------------

    def _run(
        self,
        operation: str,
        body: Callable[[_Unit], Ok[None] | Err[EngineError]],
    ) -> Ok[None] | Err[EngineError]:
        with self._guard.enter(operation) as entered:
            if isinstance(entered, Err):
                logger.warning("%s refused: %s", operation, entered.error.message)
                return entered
            unit = _Unit(
                collateral_snapshot=self._collateral.snapshot(),
                debt_snapshot=self._debt.snapshot(),
            )
            try:
                result = body(unit).and_then(lambda _: self._settle(unit))
            except BaseException:
                logger.exception("%s aborted by exception, rolling back", operation)
                self._rollback(unit)
                raise
            if isinstance(result, Err):
                self._rollback(unit)
                logger.warning(
                    "%s rejected: %s (%s)", operation, result.error.code, result.error.message,
                )
                return result
            self._commit(unit)
            logger.info("%s committed with %d event(s)", operation, len(unit.events))
            return result

    def _settle(self, unit: _Unit) -> Ok[None] | Err[EngineError]:
        """Run queued external calls, compensable ones first."""
        ordered = (
            [e for e in unit.externals if e.compensate is not None]
            + [e for e in unit.externals if e.compensate is None]
        )
        for external in ordered:
            match external.call():
                case Err() as e:
                    return e
                case Ok():
                    unit.settled.append(external)
        return Ok(None)

    def _rollback(self, unit: _Unit) -> None:
        """Restore the ledger snapshot, then undo settled calls in reverse.

        Ledgers are restored before any compensation runs. Every
        compensation is attempted; failures raise RuntimeError together.
        """
        self._collateral.restore(unit.collateral_snapshot)
        self._debt.restore(unit.debt_snapshot)
        failed: list[str] = []
        for external in reversed(unit.settled):
            if external.compensate is None:
                continue
            try:
                ok = external.compensate()
            except Exception:  # noqa: BLE001
                logger.exception("compensation for %s raised", external.description)
                ok = False
            if not ok:
                failed.append(external.description)
        if failed:
            logger.critical("compensation failed, custody out of sync: %s", ", ".join(failed))
            raise RuntimeError(f"Compensation failed for {', '.join(failed)}")

    def _commit(self, unit: _Unit) -> None:
        self._events.extend(unit.events)
        if self._event_bus is None:
            return
        for event in unit.events:
            match canonical_bytes(event):
                case Err(msg):
                    logger.error("event %s not serializable: %s", event.sequence, msg)
                    continue
                case Ok(payload):
                    pass
            match self._event_bus.publish(topic_for(event), partition_key(event), payload):
                case Err(msg):
                    # State is committed; the in-engine log stays authoritative.
                    logger.error("publish of event %s failed: %s", event.sequence, msg)
                case Ok():
                    pass

    def _emit(self, unit: _Unit, make: Callable[[int, UtcDatetime], EngineEvent]) -> None:
        unit.events.append(make(len(self._events) + len(unit.events), self._clock()))

    # -----------------------------------------------------------------------
    # Steps: validate, mutate ledgers, queue externals
    # -----------------------------------------------------------------------

    def _require_supported(self, asset: str, fn: str) -> Ok[str] | Err[UnsupportedAssetError]:
        return self._valuation.feed_for(asset).map(lambda _: asset).map_err(
            lambda e: e.with_context(fn)
        )

    def _require_healthy(self, user: str) -> Ok[None] | Err[EngineError]:
        match self._health.health_factor(user):
            case Err() as e:
                return e
            case Ok(hf):
                pass
        if not self._health.is_healthy(hf):
            return Err(HealthFactorBrokenError(
                message=f"Health factor of {user} would drop to {hf}",
                code="BREAKS_HEALTH_FACTOR",
                timestamp=UtcDatetime.now(),
                source=f"{_SOURCE}.require_healthy",
                user=user,
                health_factor=hf,
            ))
        return Ok(None)

    def _deposit(
        self, unit: _Unit, caller: str, asset: str, amount: int,
    ) -> Ok[None] | Err[EngineError]:
        fn = "deposit_collateral"
        match run_checks(
            lambda: _check_address("caller", caller, fn),
            lambda: _check_amount("amount", amount, fn),
            lambda: self._require_supported(asset, fn),
            lambda: self._collateral.credit(caller, asset, amount),
        ):
            case Err() as e:
                return e
        self._emit(unit, lambda seq, ts: CollateralDeposited(
            sequence=seq, timestamp=ts, user=caller, asset=asset, amount=amount,
        ))
        self._queue_pull(unit, self._tokens[asset], caller, amount)
        return Ok(None)

    def _mint(self, unit: _Unit, caller: str, amount: int) -> Ok[None] | Err[EngineError]:
        fn = "mint_dsc"
        match run_checks(
            lambda: _check_address("caller", caller, fn),
            lambda: _check_amount("amount", amount, fn),
            lambda: self._debt.credit(caller, amount),
            lambda: self._require_healthy(caller),
        ):
            case Err() as e:
                return e
        self._emit(unit, lambda seq, ts: DscMinted(
            sequence=seq, timestamp=ts, user=caller, amount=amount,
        ))

        def mint() -> Ok[None] | Err[EngineError]:
            if self._dsc.mint(self.address, caller, amount):
                return Ok(None)
            return Err(MintFailedError(
                message=f"Synthetic asset refused to mint {amount} to {caller}",
                code="MINT_FAILED",
                timestamp=UtcDatetime.now(),
                source=f"{_SOURCE}.mint_dsc",
                amount=amount,
            ))

        unit.externals.append(_External(description=f"mint {amount} to {caller}", call=mint))
        return Ok(None)

    def _redeem(
        self, unit: _Unit, asset: str, amount: int, redeemed_from: str, redeemed_to: str,
    ) -> Ok[None] | Err[EngineError]:
        fn = "redeem_collateral"
        match run_checks(
            lambda: _check_address("from", redeemed_from, fn),
            lambda: _check_address("to", redeemed_to, fn),
            lambda: _check_amount("amount", amount, fn),
            lambda: self._require_supported(asset, fn),
            lambda: self._collateral.debit(redeemed_from, asset, amount),
        ):
            case Err() as e:
                return e
        self._emit(unit, lambda seq, ts: CollateralRedeemed(
            sequence=seq, timestamp=ts, redeemed_from=redeemed_from,
            redeemed_to=redeemed_to, asset=asset, amount=amount,
        ))
        self._queue_pay(unit, self._tokens[asset], redeemed_to, amount)
        return Ok(None)

    def _burn(
        self, unit: _Unit, amount: int, on_behalf_of: str, dsc_from: str,
    ) -> Ok[None] | Err[EngineError]:
        fn = "burn_dsc"
        match run_checks(
            lambda: _check_address("on_behalf_of", on_behalf_of, fn),
            lambda: _check_address("dsc_from", dsc_from, fn),
            lambda: _check_amount("amount", amount, fn),
            lambda: self._debt.debit(on_behalf_of, amount),
        ):
            case Err() as e:
                return e
        self._emit(unit, lambda seq, ts: DscBurned(
            sequence=seq, timestamp=ts, on_behalf_of=on_behalf_of,
            dsc_from=dsc_from, amount=amount,
        ))
        self._queue_pull(unit, self._dsc, dsc_from, amount)

        def burn() -> Ok[None] | Err[EngineError]:
            self._dsc.burn(self.address, amount)
            return Ok(None)

        unit.externals.append(_External(
            description=f"burn {amount}",
            call=burn,
            compensate=lambda: self._dsc.mint(self.address, self.address, amount),
        ))
        return Ok(None)

    def _liquidate(
        self, unit: _Unit, caller: str, asset: str, user: str, debt_to_cover: int,
    ) -> Ok[None] | Err[EngineError]:
        fn = "liquidate"
        match run_checks(
            lambda: _check_address("caller", caller, fn),
            lambda: _check_address("user", user, fn),
            lambda: _check_amount("debt_to_cover", debt_to_cover, fn),
            lambda: self._require_supported(asset, fn),
        ):
            case Err() as e:
                return e

        match self._health.health_factor(user):
            case Err() as e:
                return e
            case Ok(starting):
                pass
        if self._health.is_healthy(starting):
            return Err(HealthFactorOkError(
                message=f"Position of {user} is healthy ({starting}), nothing to liquidate",
                code="HEALTH_FACTOR_OK",
                timestamp=UtcDatetime.now(),
                source=f"{_SOURCE}.liquidate",
                user=user,
                health_factor=starting,
            ))

        match self._valuation.from_usd(asset, debt_to_cover):
            case Err() as e:
                return e
            case Ok(covered_amount):
                pass
        bonus = mul_div(
            covered_amount, self._config.liquidation_bonus, self._config.liquidation_precision,
        )
        seized = covered_amount + bonus

        match run_checks(
            lambda: self._redeem(unit, asset, seized, user, caller),
            lambda: self._burn(unit, debt_to_cover, user, caller),
        ):
            case Err() as e:
                return e

        match self._health.health_factor(user):
            case Err() as e:
                return e
            case Ok(ending):
                pass
        if not self._health.is_healthy(ending):
            return Err(HealthFactorNotImprovedError(
                message=(
                    f"Liquidation left {user} at health factor {ending} "
                    f"(was {starting}, minimum {self._config.min_health_factor})"
                ),
                code="HEALTH_FACTOR_NOT_IMPROVED",
                timestamp=UtcDatetime.now(),
                source=f"{_SOURCE}.liquidate",
                user=user,
                starting=starting,
                ending=ending,
            ))
        if isinstance(r := self._require_healthy(caller), Err):
            return r

        self._emit(unit, lambda seq, ts: Liquidated(
            sequence=seq, timestamp=ts, user=user, liquidator=caller, asset=asset,
            debt_covered=debt_to_cover, collateral_seized=seized, bonus=bonus,
        ))
        logger.info(
            "liquidating %s: cover %s, seize %s %s (bonus %s), hf %s -> %s",
            user, debt_to_cover, seized, asset, bonus, starting,
            "max" if ending == MAX_UINT256 else ending,
        )
        return Ok(None)

    # -----------------------------------------------------------------------
    # External transfers
    # -----------------------------------------------------------------------

    def _transfer_failed(
        self, token: TransferableAsset, sender: str, recipient: str, amount: int, detail: str,
    ) -> Err[TransferFailedError]:
        return Err(TransferFailedError(
            message=f"Transfer of {amount} {token.address} {sender} -> {recipient} failed: {detail}",
            code="TRANSFER_FAILED",
            timestamp=UtcDatetime.now(),
            source=f"{_SOURCE}.transfer",
            asset=token.address,
            sender=sender,
            recipient=recipient,
            amount=amount,
        ))

    def _queue_pull(
        self, unit: _Unit, token: TransferableAsset, owner: str, amount: int,
    ) -> None:
        """owner -> engine custody; compensated by sending it back."""
        engine = self.address

        def pull() -> Ok[None] | Err[EngineError]:
            try:
                ok = token.transfer_from(engine, owner, engine, amount)
            except Exception as exc:  # noqa: BLE001
                return self._transfer_failed(token, owner, engine, amount, repr(exc))
            if not ok:
                return self._transfer_failed(token, owner, engine, amount, "returned False")
            return Ok(None)

        unit.externals.append(_External(
            description=f"pull {amount} {token.address} from {owner}",
            call=pull,
            compensate=lambda: token.transfer(engine, owner, amount),
        ))

    def _queue_pay(
        self, unit: _Unit, token: TransferableAsset, recipient: str, amount: int,
    ) -> None:
        """engine custody -> recipient; not compensable, settled last."""
        engine = self.address

        def pay() -> Ok[None] | Err[EngineError]:
            try:
                ok = token.transfer(engine, recipient, amount)
            except Exception as exc:  # noqa: BLE001
                return self._transfer_failed(token, engine, recipient, amount, repr(exc))
            if not ok:
                return self._transfer_failed(token, engine, recipient, amount, "returned False")
            return Ok(None)

        unit.externals.append(_External(
            description=f"pay {amount} {token.address} to {recipient}",
            call=pay,
        ))
