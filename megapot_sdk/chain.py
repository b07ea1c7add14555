"""
ChainAccessor - read/write gateway to an EVM chain.

Reads are retried a bounded number of times with exponential backoff before
surfacing as ChainReadError. Transaction submissions are never retried;
failures surface as TransactionFailedError right away.
"""
import logging
import re
import time
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

from web3 import Web3
from web3.exceptions import TimeExhausted
from web3.types import TxReceipt as Web3TxReceipt

from .exceptions import ChainReadError, ConfigurationError, TransactionFailedError
from .models import TxReceipt
from .utils import to_hex_hash
from .wallet import WalletCapability

T = TypeVar('T')

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def _checksum_args(args: Sequence[Any]) -> List[Any]:
    """Checksum any hex address arguments, which web3 requires for encoding"""
    return [
        Web3.to_checksum_address(arg) if isinstance(arg, str) and _ADDRESS_RE.match(arg) else arg
        for arg in args
    ]


class ChainAccessor:
    """
    Thin gateway over a Web3 instance and the resolved wallet capability.
    """

    def __init__(
        self,
        wallet: WalletCapability,
        chain_id: int,
        gas_limit: int,
        max_retries: int = 3,
        backoff_base: float = 0.5,
        receipt_timeout: int = 120,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the accessor

        Args:
            wallet: Resolved wallet capability (web3 instance and sender)
            chain_id: Chain id stamped on outgoing transactions
            gas_limit: Default gas limit when none is given or estimation fails
            max_retries: Total attempts for each chain read
            backoff_base: Base delay for read retries in seconds
            receipt_timeout: Seconds to wait for a transaction receipt
            logger: Optional logger instance
        """
        self.wallet = wallet
        self.w3 = wallet.web3
        self.chain_id = chain_id
        self.gas_limit = gas_limit
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.receipt_timeout = receipt_timeout
        self.logger = logger or logging.getLogger(__name__)

    @property
    def address(self) -> Optional[str]:
        return self.wallet.address

    def require_address(self) -> str:
        """
        Get the wallet address, failing if the SDK is read-only

        Raises:
            ConfigurationError: If no writable wallet is configured
        """
        if not self.wallet.address:
            raise ConfigurationError(
                "Wallet not configured. Please provide a wallet to the MegapotClient constructor."
            )
        return self.wallet.address

    def contract(self, address: str, abi: List[Dict[str, Any]]) -> Any:
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)

    def _with_retries(self, description: str, operation: Callable[[], T]) -> T:
        attempt = 0
        while True:
            attempt += 1
            try:
                return operation()
            except Exception as e:
                if attempt >= self.max_retries:
                    self.logger.error(f"{description} failed after {attempt} attempts: {e}")
                    raise ChainReadError(f"{description} failed: {e}", attempts=attempt) from e
                wait_time = self.backoff_base * (2 ** (attempt - 1))
                self.logger.warning(f"Retrying {description} in {wait_time}s after error: {e}")
                time.sleep(wait_time)

    def read(
        self,
        contract_address: str,
        abi: List[Dict[str, Any]],
        function_name: str,
        args: Sequence[Any] = (),
        caller: Optional[str] = None
    ) -> Any:
        """
        Call a view function

        Args:
            contract_address: Contract to call
            abi: Contract ABI
            function_name: Name of the view function
            args: Positional function arguments
            caller: Optional address used as msg.sender for the call

        Returns:
            Decoded return value

        Raises:
            ChainReadError: If the call keeps failing or reverts
        """
        contract = self.contract(contract_address, abi)
        call_params = {"from": Web3.to_checksum_address(caller)} if caller else {}
        return self._with_retries(
            f"{function_name}() on {contract_address}",
            lambda: contract.functions[function_name](*_checksum_args(args)).call(call_params)
        )

    def get_code(self, address: str) -> bytes:
        checksum = Web3.to_checksum_address(address)
        return bytes(self._with_retries(f"get_code({address})", lambda: self.w3.eth.get_code(checksum)))

    def block_number(self) -> int:
        return int(self._with_retries("block_number", lambda: self.w3.eth.block_number))

    def logs(
        self,
        contract_address: str,
        abi: List[Dict[str, Any]],
        event_name: str,
        from_block: int,
        to_block: int
    ) -> List[Any]:
        """
        Fetch decoded event logs in an inclusive block range.

        Logs are returned in provider order (block number, then log index,
        ascending). A failed query is not retried here.

        Raises:
            ChainReadError: If the provider request fails
        """
        event = self.contract(contract_address, abi).events[event_name]
        try:
            return list(event.get_logs(from_block=from_block, to_block=to_block))
        except Exception as e:
            raise ChainReadError(f"get_logs({event_name}) [{from_block}, {to_block}] failed: {e}") from e

    def encode(
        self,
        contract_address: str,
        abi: List[Dict[str, Any]],
        function_name: str,
        args: Sequence[Any] = ()
    ) -> str:
        """Encode calldata for a contract function"""
        return self.contract(contract_address, abi).encode_abi(function_name, args=_checksum_args(args))

    def estimate_gas(self, to: str, data: str, value: int = 0) -> int:
        """
        Estimate gas for a call, falling back to the default gas limit.
        """
        try:
            gas = self.w3.eth.estimate_gas({
                "from": self.require_address(),
                "to": Web3.to_checksum_address(to),
                "data": data,
                "value": value,
            })
            # 10% buffer on top of the estimate
            gas = int(gas * 1.1)
            self.logger.debug(f"Estimated gas: {gas}")
            return gas
        except ConfigurationError:
            raise
        except Exception as e:
            self.logger.warning(f"Gas estimation failed, using default: {self.gas_limit}. Error: {e}")
            return self.gas_limit

    def send(self, to: str, data: str, value: int = 0, gas: Optional[int] = None) -> str:
        """
        Build, sign and submit a transaction.

        Args:
            to: Target contract address
            data: Hex calldata
            value: Native value in wei
            gas: Gas limit (defaults to the configured gas limit)

        Returns:
            Transaction hash as 0x-prefixed hex

        Raises:
            ConfigurationError: If the SDK has no writable wallet
            TransactionFailedError: If building, signing or submitting fails
        """
        from_address = self.require_address()
        try:
            tx = {
                "from": from_address,
                "to": Web3.to_checksum_address(to),
                "data": data,
                "value": value,
                "gas": gas or self.gas_limit,
                "chainId": self.chain_id,
                "nonce": self.w3.eth.get_transaction_count(from_address, "pending"),
                "gasPrice": self.w3.eth.gas_price,
            }
            tx_hash = to_hex_hash(self.wallet.send_transaction(tx))
        except ConfigurationError:
            raise
        except Exception as e:
            # Nonce conflicts from concurrent writers land here too.
            self.logger.error(f"Failed to send transaction to {to}: {e}")
            raise TransactionFailedError(f"Failed to send transaction: {e}") from e

        self.logger.info(f"Transaction sent: {tx_hash}")
        return tx_hash

    def wait_for_receipt(self, tx_hash: str, poll_interval: Optional[float] = None) -> TxReceipt:
        """
        Wait until a transaction is mined and check that it succeeded.

        Raises:
            TransactionFailedError: On timeout or when the transaction reverted
        """
        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=self.receipt_timeout,
                poll_latency=poll_interval or 0.1
            )
        except TimeExhausted as e:
            raise TransactionFailedError(
                f"Timed out after {self.receipt_timeout}s waiting for receipt", tx_hash=tx_hash
            ) from e
        except Exception as e:
            raise TransactionFailedError(f"Failed to fetch receipt: {e}", tx_hash=tx_hash) from e

        converted = self._convert_receipt(receipt)
        if converted.status != 1:
            self.logger.error(f"Transaction {tx_hash} reverted in block {converted.block_number}")
            raise TransactionFailedError(f"Transaction {tx_hash} reverted", tx_hash=tx_hash)
        return converted

    def _convert_receipt(self, web3_receipt: Web3TxReceipt) -> TxReceipt:
        """
        Convert Web3 receipt to our TxReceipt model
        """
        receipt_dict = dict(web3_receipt)

        # Convert bytes to hex strings
        for key, value in list(receipt_dict.items()):
            if isinstance(value, bytes):
                receipt_dict[key] = to_hex_hash(value)
        receipt_dict["logs"] = [dict(log) for log in receipt_dict.get("logs", [])]

        return TxReceipt.model_validate(receipt_dict)
