"""Property tests: solvency, supply/debt conservation, liquidation repair.

Every example deploys a fresh engine; fixtures are function-scoped and
would leak state across hypothesis examples.
"""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from cdp_engine.core.fixed_point import MAX_UINT256, PRECISION
from cdp_engine.core.result import Err, Ok, unwrap
from cdp_engine.infra.config import EngineConfig
from cdp_engine.infra.memory_adapter import InMemoryPriceFeed, InMemoryStablecoin, InMemoryToken
from cdp_engine.ledger.engine import CollateralDebtEngine

ETHER = 10**18
ETH_USD_PRICE = 2000 * 10**8
ENGINE = "dsc-engine"
LIQUIDATOR = "liquidator"
_USERS = ("alice", "bob", "carol")


def _deploy(
    feed: InMemoryPriceFeed | None = None,
) -> tuple[CollateralDebtEngine, InMemoryToken, InMemoryStablecoin]:
    weth = InMemoryToken("weth", symbol="WETH")
    dsc = InMemoryStablecoin("dsc", owner=ENGINE)
    engine = unwrap(CollateralDebtEngine.create(
        [weth], [feed or InMemoryPriceFeed("eth-usd-feed", ETH_USD_PRICE)], dsc,
        config=EngineConfig(engine_address=ENGINE),
    ))
    for user in _USERS:
        weth.faucet(user, 1_000 * ETHER)
        weth.approve(user, ENGINE, MAX_UINT256)
        dsc.approve(user, ENGINE, MAX_UINT256)
    return engine, weth, dsc


def _state(
    engine: CollateralDebtEngine, weth: InMemoryToken, dsc: InMemoryStablecoin,
) -> tuple[object, ...]:
    return tuple(
        (
            engine.get_collateral_balance_of_user(u, "weth"),
            engine.get_dsc_minted(u),
            weth.balance_of(u),
            dsc.balance_of(u),
        )
        for u in _USERS
    ) + (weth.balance_of(ENGINE), dsc.total_supply, len(engine.events()))


_operations = st.lists(
    st.tuples(
        st.sampled_from(("deposit", "mint", "redeem", "burn", "redeem_for_dsc")),
        st.sampled_from(_USERS),
        st.integers(min_value=0, max_value=20_000 * ETHER),
        st.integers(min_value=0, max_value=20_000 * ETHER),
    ),
    max_size=25,
)


def _apply(
    engine: CollateralDebtEngine, op: str, user: str, a: int, b: int,
) -> Ok[None] | Err[object]:
    match op:
        case "deposit":
            return engine.deposit_collateral(user, "weth", a)
        case "mint":
            return engine.mint_dsc(user, b)
        case "redeem":
            return engine.redeem_collateral(user, "weth", a)
        case "burn":
            return engine.burn_dsc(user, b)
        case _:
            return engine.redeem_collateral_for_dsc(user, "weth", a, b)


class TestSolvency:
    @given(ops=_operations)
    def test_every_debtor_healthy_after_any_sequence(
        self, ops: list[tuple[str, str, int, int]],
    ) -> None:
        engine, weth, dsc = _deploy()
        for op, user, a, b in ops:
            before = _state(engine, weth, dsc)
            result = _apply(engine, op, user, a, b)
            if isinstance(result, Err):
                assert _state(engine, weth, dsc) == before
            for u in _USERS:
                assert unwrap(engine.get_health_factor(u)) >= PRECISION

    @given(ops=_operations)
    def test_supply_equals_debt(self, ops: list[tuple[str, str, int, int]]) -> None:
        engine, weth, dsc = _deploy()
        for op, user, a, b in ops:
            _apply(engine, op, user, a, b)
            assert dsc.total_supply == sum(engine.get_dsc_minted(u) for u in _USERS)
            assert weth.balance_of(ENGINE) == sum(
                engine.get_collateral_balance_of_user(u, "weth") for u in _USERS
            )


class TestDebtConservation:
    @given(
        minted=st.integers(min_value=1, max_value=10_000 * ETHER),
        burned=st.integers(min_value=1, max_value=20_000 * ETHER),
    )
    def test_burn_reduces_debt_exactly_or_rejects(self, minted: int, burned: int) -> None:
        engine, _, _ = _deploy()
        unwrap(engine.deposit_collateral_and_mint_dsc("alice", "weth", 10 * ETHER, minted))
        match engine.burn_dsc("alice", burned):
            case Ok():
                assert engine.get_dsc_minted("alice") == minted - burned
            case Err():
                assert burned > minted
                assert engine.get_dsc_minted("alice") == minted


class TestLiquidationRepair:
    @given(
        minted=st.integers(min_value=ETHER, max_value=10_000 * ETHER),
        price=st.integers(min_value=10**8, max_value=1_999 * 10**8),
        cover=st.integers(min_value=1, max_value=10_000 * ETHER),
    )
    def test_success_leaves_target_healthy(self, minted: int, price: int, cover: int) -> None:
        feed = InMemoryPriceFeed("eth-usd-feed", ETH_USD_PRICE)
        engine, _, dsc = _deploy(feed)
        unwrap(engine.deposit_collateral_and_mint_dsc("alice", "weth", 10 * ETHER, minted))
        dsc.mint(ENGINE, LIQUIDATOR, 10_000 * ETHER)
        dsc.approve(LIQUIDATOR, ENGINE, MAX_UINT256)
        feed.update_answer(price)
        starting = unwrap(engine.get_health_factor("alice"))
        debt_before = engine.get_dsc_minted("alice")

        match engine.liquidate(LIQUIDATOR, "weth", "alice", cover):
            case Ok():
                ending = unwrap(engine.get_health_factor("alice"))
                assert starting < PRECISION <= ending
                assert engine.get_dsc_minted("alice") == debt_before - cover
            case Err():
                assert engine.get_dsc_minted("alice") == debt_before
