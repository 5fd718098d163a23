"""
demo_liquidation.py -- A walkthrough of the collateral/debt engine, end to end.

A user locks WETH, mints a dollar-pegged synthetic asset (DSC) against it,
watches the oracle price collapse, and gets liquidated by a third party who
repays the debt and walks away with the collateral plus a 10% bonus.

Every amount is an integer in 18-decimal fixed point: 1 WETH is 10**18 wei,
1 DSC is 10**18 units, and a USD value of 10**18 means one dollar. Oracle
answers carry 8 decimals, so $2000 is 2000 * 10**8.

We will walk through:
  1. Deploying the engine with WETH and WBTC as collateral
  2. Depositing 10 WETH at $2000 -> $20000 of collateral
  3. Minting exactly to the solvency boundary, and 1 wei past it
  4. A price crash to $18 and a full liquidation
  5. Redeeming more than deposited
  6. A misconfigured deployment

Run this:  .venv/bin/python demo_liquidation.py
"""

from __future__ import annotations

import logging

from cdp_engine.core.fixed_point import MAX_UINT256
from cdp_engine.core.result import Err, Ok, unwrap
from cdp_engine.core.types import TokenAmount
from cdp_engine.infra.config import TOPIC_LIQUIDATIONS, EngineConfig
from cdp_engine.infra.memory_adapter import (
    InMemoryEventBus,
    InMemoryPriceFeed,
    InMemoryStablecoin,
    InMemoryToken,
)
from cdp_engine.ledger.engine import CollateralDebtEngine

ETHER = 10**18
ENGINE = "dsc-engine"


def sep(title: str) -> None:
    """Print a section separator."""
    print(f"\n{'=' * 72}")
    print(f"  {title}")
    print(f"{'=' * 72}\n")


def usd(value: int) -> str:
    return f"${TokenAmount(value)}"


def hf(value: int) -> str:
    return "max (no debt)" if value == MAX_UINT256 else str(TokenAmount(value))


# Show the engine's own commit/reject log lines alongside the walkthrough.
logging.basicConfig(level=logging.INFO, format="    [%(name)s] %(message)s")


# ============================================================================
#  STEP 1: DEPLOY
# ============================================================================
#
# The engine never names a concrete token or oracle. It is handed one
# implementation per collaborator: here, the in-memory doubles. tokens[i] is
# priced by price_feeds[i]; the synthetic asset is owned by the engine, so
# nobody else can mint or burn it.

sep("STEP 1: Deploy the engine")

weth = InMemoryToken("weth", symbol="WETH")
wbtc = InMemoryToken("wbtc", symbol="WBTC")
eth_usd = InMemoryPriceFeed("eth-usd-feed", 2000 * 10**8)
btc_usd = InMemoryPriceFeed("btc-usd-feed", 1000 * 10**8)
dsc = InMemoryStablecoin("dsc", owner=ENGINE)
bus = InMemoryEventBus()

match CollateralDebtEngine.create(
    [weth, wbtc], [eth_usd, btc_usd], dsc,
    config=EngineConfig(engine_address=ENGINE),
    event_bus=bus,
):
    case Ok(engine):
        print("Engine deployed.")
    case Err(e):
        raise RuntimeError(f"Deployment failed: {e.message}")

print(f"  Collateral tokens:  {engine.get_collateral_tokens()}")
print(f"  Synthetic asset:    {engine.get_dsc()}")
print(f"  Threshold:          {engine.get_liquidation_threshold()}% of collateral counts")
print(f"  Liquidation bonus:  {engine.get_liquidation_bonus()}%")
print(f"  Feed scale:         {unwrap(engine.get_additional_feed_precision())}")


# ============================================================================
#  STEP 2: DEPOSIT
# ============================================================================
#
# The engine pulls collateral with transfer_from, so the user approves it
# first, exactly like an ERC-20 allowance.

sep("STEP 2: Deposit 10 WETH at $2000")

weth.faucet("user", 10 * ETHER)
weth.approve("user", ENGINE, 10 * ETHER)
unwrap(engine.deposit_collateral("user", "weth", 10 * ETHER))

print(f"  Collateral value:   {usd(unwrap(engine.get_account_collateral_value('user')))}")
print(f"  Health factor:      {hf(unwrap(engine.get_health_factor('user')))}")


# ============================================================================
#  STEP 3: MINT TO THE BOUNDARY
# ============================================================================
#
# Only half of the collateral value counts (threshold 50/100), so $20000 of
# WETH supports at most 10000 DSC. At exactly 10000 the health factor is 1.0
# and the mint goes through. One more wei and it is refused, with the offending
# health factor carried in the error value.

sep("STEP 3: Mint to the solvency boundary")

unwrap(engine.mint_dsc("user", 10_000 * ETHER))
print(f"  Minted 10000 DSC. Health factor: {hf(unwrap(engine.get_health_factor('user')))}")

match engine.mint_dsc("user", 1):
    case Err(e):
        print(f"  Minting 1 more wei: {type(e).__name__} (health factor {e.health_factor})")
    case Ok():
        raise RuntimeError("Mint past the boundary should have been refused")

# Step back to a comfortable position: repay all but 100 DSC.
dsc.approve("user", ENGINE, 9_900 * ETHER)
unwrap(engine.burn_dsc("user", 9_900 * ETHER))
print(f"  Burned 9900 DSC.    Health factor: {hf(unwrap(engine.get_health_factor('user')))}")


# ============================================================================
#  STEP 4: PRICE CRASH AND LIQUIDATION
# ============================================================================
#
# WETH falls from $2000 to $18. The user's 10 WETH is now worth $180, half of
# which ($90) backs 100 DSC of debt: health factor 0.9. A liquidator with their
# own healthy position repays the whole 100 DSC and receives
#     100 / 18 = 5.555555555555555555 WETH  (floored)
#   + 10% bonus  = 0.555555555555555555 WETH
# = 6.11111111111111111 WETH.

sep("STEP 4: Price crash to $18, full liquidation")

weth.faucet("liquidator", 20 * ETHER)
weth.approve("liquidator", ENGINE, 20 * ETHER)
unwrap(engine.deposit_collateral_and_mint_dsc("liquidator", "weth", 20 * ETHER, 100 * ETHER))
dsc.approve("liquidator", ENGINE, 100 * ETHER)

eth_usd.update_answer(18 * 10**8)
print(f"  User health factor after crash: {hf(unwrap(engine.get_health_factor('user')))}")

unwrap(engine.liquidate("liquidator", "weth", "user", 100 * ETHER))

print(f"  Liquidator received: {TokenAmount(weth.balance_of('liquidator'))} WETH")
print(f"  User debt:           {engine.get_dsc_minted('user')}")
print(f"  User collateral:     "
      f"{TokenAmount(engine.get_collateral_balance_of_user('user', 'weth'))} WETH")
print(f"  User health factor:  {hf(unwrap(engine.get_health_factor('user')))}")
print(f"  Liquidation notices: {len(bus.get_messages(TOPIC_LIQUIDATIONS))}")


# ============================================================================
#  STEP 5: OVER-REDEMPTION
# ============================================================================
#
# Ledgers never go negative. Asking for more than is on deposit is an
# underflow error, and nothing moves.

sep("STEP 5: Redeem more than deposited")

match engine.redeem_collateral("user", "weth", 10 * ETHER):
    case Err(e):
        print(f"  {type(e).__name__}: balance {TokenAmount(e.balance)}, "
              f"requested {TokenAmount(e.requested)}")
    case Ok():
        raise RuntimeError("Over-redemption should have been refused")


# ============================================================================
#  STEP 6: MISCONFIGURED DEPLOYMENT
# ============================================================================

sep("STEP 6: Two tokens, one price feed")

match CollateralDebtEngine.create([weth, wbtc], [eth_usd], dsc):
    case Err(e):
        print(f"  {type(e).__name__} [{e.code}]: expected {e.expected}, got {e.actual}")
    case Ok():
        raise RuntimeError("Mismatched configuration should have been refused")


sep("SUMMARY")

print(f"  Events committed:   {len(engine.events())}")
print(f"  DSC supply:         {TokenAmount(dsc.total_supply)}")
print(f"  WETH in custody:    {TokenAmount(weth.balance_of(ENGINE))}")
print()
print("Done. Every rejected call above left the ledgers exactly as they were.")
