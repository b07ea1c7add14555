"""
Wallet providers for the Megapot SDK.

A wallet provider is one of a few flavors (local private key, custom signer,
node-managed account, read-only). resolve_wallet() turns any of them into a
single WalletCapability once, at SDK construction, so the rest of the SDK
never needs to know which flavor it was given.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol, Union

from eth_account import Account
from web3 import Web3

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class Signer(Protocol):
    """Protocol for custom signers"""
    address: str

    def sign_transaction(self, transaction_dict: Dict[str, Any]) -> Any:
        """Sign transaction and return signed tx object"""
        ...


@dataclass(frozen=True)
class PrivateKeyWallet:
    private_key: str
    rpc_url: Optional[str] = None


@dataclass(frozen=True)
class SignerWallet:
    """Wallet backed by an external signer (hardware wallet, KMS, ...)"""
    signer: Signer
    rpc_url: Optional[str] = None


@dataclass(frozen=True)
class NodeWallet:
    """
    Wallet whose account is managed by the connected node or provider.

    Transactions are handed to eth_sendTransaction unsigned; this covers
    injected and other provider-managed accounts.
    """
    web3: Web3
    address: str


@dataclass(frozen=True)
class ReadOnlyWallet:
    rpc_url: Optional[str] = None


WalletProvider = Union[PrivateKeyWallet, SignerWallet, NodeWallet, ReadOnlyWallet]


@dataclass(frozen=True)
class WalletCapability:
    """The resolved read/write capability the SDK works against"""
    web3: Web3
    address: Optional[str]
    send_transaction: Callable[[Dict[str, Any]], Any]

    @property
    def can_write(self) -> bool:
        return self.address is not None


def _signing_sender(web3: Web3, signer: Signer) -> Callable[[Dict[str, Any]], Any]:
    def send(tx: Dict[str, Any]) -> Any:
        signed = signer.sign_transaction(tx)
        return web3.eth.send_raw_transaction(signed.raw_transaction)
    return send


def _read_only_sender(tx: Dict[str, Any]) -> Any:
    raise ConfigurationError("Wallet not configured. Provide a writable wallet to send transactions.")


def _http_web3(rpc_url: str, timeout: int) -> Web3:
    return Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))


def resolve_wallet(
    wallet: Optional[WalletProvider],
    default_rpc_url: str,
    timeout: int = 15
) -> WalletCapability:
    """
    Turn a wallet provider into a WalletCapability.

    Args:
        wallet: Wallet provider, or None for read-only access
        default_rpc_url: RPC endpoint used when the provider names none
        timeout: HTTP timeout for RPC requests in seconds

    Returns:
        Resolved capability

    Raises:
        ConfigurationError: If the provider type is not supported
    """
    if wallet is None or isinstance(wallet, ReadOnlyWallet):
        rpc_url = (wallet.rpc_url if wallet else None) or default_rpc_url
        return WalletCapability(_http_web3(rpc_url, timeout), None, _read_only_sender)

    if isinstance(wallet, PrivateKeyWallet):
        account = Account.from_key(wallet.private_key)
        web3 = _http_web3(wallet.rpc_url or default_rpc_url, timeout)
        logger.debug(f"Using private key wallet {account.address}")
        return WalletCapability(web3, account.address, _signing_sender(web3, account))

    if isinstance(wallet, SignerWallet):
        web3 = _http_web3(wallet.rpc_url or default_rpc_url, timeout)
        logger.debug(f"Using custom signer wallet {wallet.signer.address}")
        return WalletCapability(web3, wallet.signer.address, _signing_sender(web3, wallet.signer))

    if isinstance(wallet, NodeWallet):
        node_web3 = wallet.web3
        return WalletCapability(node_web3, wallet.address, lambda tx: node_web3.eth.send_transaction(tx))

    raise ConfigurationError(f"Unsupported wallet provider type: {type(wallet).__name__}")
