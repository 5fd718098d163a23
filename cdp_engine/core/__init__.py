"""cdp_engine.core — public API for all core types."""

from cdp_engine.core.errors import ConfigMismatchError as ConfigMismatchError
from cdp_engine.core.errors import EngineError as EngineError
from cdp_engine.core.errors import HealthFactorBrokenError as HealthFactorBrokenError
from cdp_engine.core.errors import (
    HealthFactorNotImprovedError as HealthFactorNotImprovedError,
)
from cdp_engine.core.errors import HealthFactorOkError as HealthFactorOkError
from cdp_engine.core.errors import InvalidAddressError as InvalidAddressError
from cdp_engine.core.errors import InvalidAmountError as InvalidAmountError
from cdp_engine.core.errors import InvalidPriceError as InvalidPriceError
from cdp_engine.core.errors import LedgerOverflowError as LedgerOverflowError
from cdp_engine.core.errors import LedgerUnderflowError as LedgerUnderflowError
from cdp_engine.core.errors import MintFailedError as MintFailedError
from cdp_engine.core.errors import ReentrancyError as ReentrancyError
from cdp_engine.core.errors import TransferFailedError as TransferFailedError
from cdp_engine.core.errors import UnsupportedAssetError as UnsupportedAssetError
from cdp_engine.core.fixed_point import MAX_UINT256 as MAX_UINT256
from cdp_engine.core.fixed_point import PRECISION as PRECISION
from cdp_engine.core.result import Err as Err
from cdp_engine.core.result import Ok as Ok
from cdp_engine.core.result import Result as Result
from cdp_engine.core.result import run_checks as run_checks
from cdp_engine.core.result import unwrap as unwrap
from cdp_engine.core.types import Address as Address
from cdp_engine.core.types import TokenAmount as TokenAmount
from cdp_engine.core.types import UtcDatetime as UtcDatetime
