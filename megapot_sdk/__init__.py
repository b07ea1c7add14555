"""
Megapot SDK - buy jackpot tickets and read jackpot results on Base.
"""
from .client import MegapotClient
from .config import DataApiConfig, MegapotConfig, NetworkConfig, SponsorshipConfig
from .exceptions import (
    MegapotError, ConfigurationError, InvalidIntentError, ChainReadError,
    AllowanceError, TransactionFailedError, ScanError, SponsorUnavailableError
)
from .models import (
    ApiResponse, AuthorizationRecord, AuthorizationScheme, JackpotPoolInfo,
    PoolInfo, PoolStats, PurchaseIntent, PurchaseKind, PurchaseResult,
    SettlementEvent, TxReceipt, UserAllowance, UserInfo
)
from .orchestrator import PurchaseState
from .utils import format_units, parse_units, tx_url
from .version import __version__
from .wallet import NodeWallet, PrivateKeyWallet, ReadOnlyWallet, SignerWallet

__all__ = [
    "MegapotClient",
    "MegapotConfig",
    "SponsorshipConfig",
    "DataApiConfig",
    "NetworkConfig",
    "PrivateKeyWallet",
    "SignerWallet",
    "NodeWallet",
    "ReadOnlyWallet",
    "PurchaseIntent",
    "PurchaseKind",
    "PurchaseResult",
    "PurchaseState",
    "AuthorizationRecord",
    "AuthorizationScheme",
    "SettlementEvent",
    "TxReceipt",
    "UserAllowance",
    "UserInfo",
    "JackpotPoolInfo",
    "PoolInfo",
    "PoolStats",
    "ApiResponse",
    "MegapotError",
    "ConfigurationError",
    "InvalidIntentError",
    "ChainReadError",
    "AllowanceError",
    "TransactionFailedError",
    "ScanError",
    "SponsorUnavailableError",
    "parse_units",
    "format_units",
    "tx_url",
    "__version__",
]
