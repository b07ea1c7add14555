"""
SponsorshipRouter - optional gas sponsorship for outgoing transactions.

The router asks a paymaster endpoint to sponsor a call when sponsorship is
enabled and the call fits the gas ceiling. Whatever the sponsor answers,
exactly one regular transaction is then submitted. The sponsor returns a
user operation hash, not a transaction hash, and there is no relay
confirmation to wait for.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ._rate_limited_log import rate_limited_log
from .chain import ChainAccessor
from .config import SponsorshipConfig
from .exceptions import SponsorUnavailableError
from .models import PreparedCall

logger = logging.getLogger(__name__)

# 21000 in hex
_BASE_VERIFICATION_GAS = "0x5208"


@dataclass(frozen=True)
class SendOutcome:
    tx_hash: str
    sponsored: bool


class SponsorshipRouter:
    """
    Routes a prepared call through the gas sponsor when possible, then sends it.
    """

    def __init__(
        self,
        chain: ChainAccessor,
        config: SponsorshipConfig,
        timeout: int = 15,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the router

        Args:
            chain: Chain accessor used for the actual submission
            config: Sponsorship settings snapshot
            timeout: Timeout for the sponsor request in seconds
            session: Optional HTTP session (one is created otherwise)
        """
        self.chain = chain
        self.config = config
        self.timeout = timeout
        if session is None:
            session = requests.Session()
            # A single sponsor attempt per call: no HTTP-level retries.
            no_retries = Retry(total=0, raise_on_status=False)
            session.mount("http://", HTTPAdapter(max_retries=no_retries))
            session.mount("https://", HTTPAdapter(max_retries=no_retries))
        self.session = session

    def should_sponsor(self, estimated_gas: int) -> bool:
        """Whether a call with this gas estimate is eligible for sponsorship"""
        if not self.config.available:
            logger.debug("Sponsorship unavailable (disabled or no endpoint configured)")
            return False
        if estimated_gas > self.config.max_gas_units:
            logger.info(
                f"Transaction gas ({estimated_gas}) exceeds sponsorship limit "
                f"({self.config.max_gas_units}), using regular transaction"
            )
            return False
        return True

    def _user_operation(self, call: PreparedCall, estimated_gas: int) -> Dict[str, Any]:
        # TODO: fill nonce and fee fields from the EntryPoint once sponsored
        # operations are relayed instead of sent as regular transactions.
        return {
            "sender": self.chain.require_address(),
            "nonce": "0x0",
            "initCode": "0x",
            "callData": call.data,
            "callGasLimit": hex(estimated_gas),
            "verificationGasLimit": _BASE_VERIFICATION_GAS,
            "preVerificationGas": _BASE_VERIFICATION_GAS,
            "maxFeePerGas": "0x0",
            "maxPriorityFeePerGas": "0x0",
            "paymasterAndData": "0x",
            "signature": "0x",
        }

    def request_sponsorship(self, call: PreparedCall, estimated_gas: int) -> Any:
        """
        Send one sponsorship request to the paymaster endpoint.

        Returns:
            The sponsor's result field

        Raises:
            SponsorUnavailableError: On any transport, HTTP or protocol failure
        """
        body = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "pm_sponsorUserOperation",
            "params": [self._user_operation(call, estimated_gas)],
        }
        try:
            response = self.session.post(self.config.endpoint_url, json=body, timeout=self.timeout)
            response.raise_for_status()
            result = response.json()
        except requests.RequestException as e:
            raise SponsorUnavailableError(f"Sponsor request failed: {e}") from e
        except ValueError as e:
            raise SponsorUnavailableError(f"Invalid JSON response from sponsor: {e}") from e

        if not isinstance(result, dict):
            raise SponsorUnavailableError(f"Malformed sponsor response: {result!r}")
        if result.get("error") is not None:
            error = result["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise SponsorUnavailableError(f"Sponsor error: {message}")
        if result.get("result") is None:
            raise SponsorUnavailableError(f"Sponsor response has no result: {result}")
        return result["result"]

    def try_send(self, call: PreparedCall, estimated_gas: int) -> SendOutcome:
        """
        Send a call, attempting sponsorship first when eligible.

        Sponsor failures are logged and never raised. Exactly one regular
        transaction is submitted.

        Args:
            call: Prepared call to send
            estimated_gas: Gas estimate used for the sponsorship ceiling

        Returns:
            The transaction hash and whether the sponsor accepted the call

        Raises:
            TransactionFailedError: If the regular submission fails
        """
        sponsored = False
        if self.should_sponsor(estimated_gas):
            try:
                operation = self.request_sponsorship(call, estimated_gas)
                sponsored = True
                logger.info(f"Sponsor accepted {call.description or 'transaction'}: {operation}")
            except SponsorUnavailableError as e:
                rate_limited_log(
                    f"Sponsorship failed, using regular transaction: {e}",
                    level="warning",
                    interval=60,
                    logger_instance=logger
                )

        tx_hash = self.chain.send(call.to, call.data, value=call.value, gas=call.gas or estimated_gas)
        return SendOutcome(tx_hash=tx_hash, sponsored=sponsored)
