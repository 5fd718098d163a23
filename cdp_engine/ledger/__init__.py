"""cdp_engine.ledger — Position ledgers, health factor, and the collateral/debt engine."""

from cdp_engine.ledger.engine import CollateralDebtEngine as CollateralDebtEngine
from cdp_engine.ledger.events import CollateralDeposited as CollateralDeposited
from cdp_engine.ledger.events import CollateralRedeemed as CollateralRedeemed
from cdp_engine.ledger.events import DscBurned as DscBurned
from cdp_engine.ledger.events import DscMinted as DscMinted
from cdp_engine.ledger.events import EngineEvent as EngineEvent
from cdp_engine.ledger.events import Liquidated as Liquidated
from cdp_engine.ledger.health import AccountSnapshot as AccountSnapshot
from cdp_engine.ledger.health import HealthFactorEngine as HealthFactorEngine
from cdp_engine.ledger.health import calculate_health_factor as calculate_health_factor
from cdp_engine.ledger.positions import CollateralLedger as CollateralLedger
from cdp_engine.ledger.positions import DebtLedger as DebtLedger
