"""cdp_engine.infra — Collaborator protocols, in-memory adapters, and configuration."""

from cdp_engine.infra.config import ENGINE_TOPICS as ENGINE_TOPICS
from cdp_engine.infra.config import TOPIC_COLLATERAL as TOPIC_COLLATERAL
from cdp_engine.infra.config import TOPIC_DEBT as TOPIC_DEBT
from cdp_engine.infra.config import TOPIC_LIQUIDATIONS as TOPIC_LIQUIDATIONS
from cdp_engine.infra.config import EngineConfig as EngineConfig
from cdp_engine.infra.memory_adapter import InMemoryEventBus as InMemoryEventBus
from cdp_engine.infra.memory_adapter import InMemoryPriceFeed as InMemoryPriceFeed
from cdp_engine.infra.memory_adapter import InMemoryStablecoin as InMemoryStablecoin
from cdp_engine.infra.memory_adapter import InMemoryToken as InMemoryToken
from cdp_engine.infra.memory_adapter import StablecoinBurnError as StablecoinBurnError
from cdp_engine.infra.protocols import EventBus as EventBus
from cdp_engine.infra.protocols import PriceFeed as PriceFeed
from cdp_engine.infra.protocols import SyntheticAssetLedger as SyntheticAssetLedger
from cdp_engine.infra.protocols import TransferableAsset as TransferableAsset
