"""Hypothesis profiles and deployment fixtures.

The default deployment mirrors a two-collateral setup: WETH priced at
$2000 and WBTC at $1000 through 8-decimal USD feeds, with the engine
as sole owner of the synthetic asset.
"""

from __future__ import annotations

import pytest
from hypothesis import HealthCheck, settings

from cdp_engine.core.result import unwrap
from cdp_engine.infra.config import EngineConfig
from cdp_engine.infra.memory_adapter import (
    InMemoryEventBus,
    InMemoryPriceFeed,
    InMemoryStablecoin,
    InMemoryToken,
)
from cdp_engine.ledger.engine import CollateralDebtEngine

# ---------------------------------------------------------------------------
# Hypothesis global settings
# ---------------------------------------------------------------------------

settings.register_profile(
    "ci",
    max_examples=200,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
    deadline=None,
)
settings.register_profile(
    "dev",
    max_examples=50,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
    deadline=None,
)
settings.load_profile("dev")

ETHER = 10**18
ETH_USD_PRICE = 2000 * 10**8
BTC_USD_PRICE = 1000 * 10**8
ENGINE = "dsc-engine"
USER = "user"
LIQUIDATOR = "liquidator"
COLLATERAL_AMOUNT = 10 * ETHER
AMOUNT_TO_MINT = 100 * ETHER
COLLATERAL_TO_COVER = 20 * ETHER
STARTING_BALANCE = 10 * ETHER


# ===================================================================
# DEPLOYMENT FIXTURES
# ===================================================================


@pytest.fixture
def weth() -> InMemoryToken:
    token = InMemoryToken("weth", symbol="WETH")
    token.faucet(USER, STARTING_BALANCE)
    return token


@pytest.fixture
def wbtc() -> InMemoryToken:
    token = InMemoryToken("wbtc", symbol="WBTC")
    token.faucet(USER, STARTING_BALANCE)
    return token


@pytest.fixture
def eth_usd() -> InMemoryPriceFeed:
    return InMemoryPriceFeed("eth-usd-feed", ETH_USD_PRICE)


@pytest.fixture
def btc_usd() -> InMemoryPriceFeed:
    return InMemoryPriceFeed("btc-usd-feed", BTC_USD_PRICE)


@pytest.fixture
def dsc() -> InMemoryStablecoin:
    return InMemoryStablecoin("dsc", owner=ENGINE)


@pytest.fixture
def bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def engine(
    weth: InMemoryToken,
    wbtc: InMemoryToken,
    eth_usd: InMemoryPriceFeed,
    btc_usd: InMemoryPriceFeed,
    dsc: InMemoryStablecoin,
    bus: InMemoryEventBus,
) -> CollateralDebtEngine:
    return unwrap(CollateralDebtEngine.create(
        [weth, wbtc], [eth_usd, btc_usd], dsc,
        config=EngineConfig(engine_address=ENGINE),
        event_bus=bus,
    ))


@pytest.fixture
def deposited(engine: CollateralDebtEngine, weth: InMemoryToken) -> CollateralDebtEngine:
    """USER has deposited COLLATERAL_AMOUNT WETH, no debt."""
    weth.approve(USER, ENGINE, COLLATERAL_AMOUNT)
    unwrap(engine.deposit_collateral(USER, weth.address, COLLATERAL_AMOUNT))
    return engine


@pytest.fixture
def minted(engine: CollateralDebtEngine, weth: InMemoryToken) -> CollateralDebtEngine:
    """USER has deposited COLLATERAL_AMOUNT WETH and minted AMOUNT_TO_MINT."""
    weth.approve(USER, ENGINE, COLLATERAL_AMOUNT)
    unwrap(engine.deposit_collateral_and_mint_dsc(
        USER, weth.address, COLLATERAL_AMOUNT, AMOUNT_TO_MINT,
    ))
    return engine


@pytest.fixture
def liquidator_funded(
    minted: CollateralDebtEngine, weth: InMemoryToken, dsc: InMemoryStablecoin,
) -> CollateralDebtEngine:
    """LIQUIDATOR holds AMOUNT_TO_MINT DSC backed by COLLATERAL_TO_COVER WETH."""
    weth.faucet(LIQUIDATOR, COLLATERAL_TO_COVER)
    weth.approve(LIQUIDATOR, ENGINE, COLLATERAL_TO_COVER)
    unwrap(minted.deposit_collateral_and_mint_dsc(
        LIQUIDATOR, weth.address, COLLATERAL_TO_COVER, AMOUNT_TO_MINT,
    ))
    dsc.approve(LIQUIDATOR, ENGINE, AMOUNT_TO_MINT)
    return minted
