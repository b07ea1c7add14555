"""
TransactionOrchestrator - turns a ticket purchase intent into transactions.

A purchase runs through a fixed sequence of states:

    VALIDATING -> CHECKING_ALLOWANCE -> [APPROVING_SMART | APPROVING_LEGACY | SKIPPED]
               -> PURCHASING -> SETTLED

and moves to FAILED from any state when it raises. Every run keeps its state
in local variables, so concurrent purchases need no locking.
"""
import logging
from enum import Enum
from typing import Callable, List, Optional

from .abi import JACKPOT_ABI, JACKPOT_POOL_ABI
from .allowance import (
    AllowanceLedger, ApprovalAction, ApproveSpendPermission, NoActionNeeded
)
from .chain import ChainAccessor
from .config import MegapotConfig
from .exceptions import AllowanceError, MegapotError, TransactionFailedError
from .models import PreparedCall, PurchaseIntent, PurchaseKind, PurchaseResult
from .sponsorship import SendOutcome, SponsorshipRouter
from .utils import tx_url

logger = logging.getLogger(__name__)


class PurchaseState(str, Enum):
    VALIDATING = "validating"
    CHECKING_ALLOWANCE = "checking_allowance"
    APPROVING_SMART = "approving_smart"
    APPROVING_LEGACY = "approving_legacy"
    SKIPPED = "skipped"
    PURCHASING = "purchasing"
    SETTLED = "settled"
    FAILED = "failed"


class TransactionOrchestrator:
    """
    Sequences allowance checks, approvals and the purchase call.
    """

    def __init__(
        self,
        config: MegapotConfig,
        chain: ChainAccessor,
        ledger: AllowanceLedger,
        router: SponsorshipRouter,
        wait_for_receipt: bool = True,
        on_transition: Optional[Callable[[PurchaseState], None]] = None
    ):
        """
        Initialize the orchestrator

        Args:
            config: Configuration snapshot used for every purchase of this instance
            chain: Chain accessor
            ledger: Allowance ledger
            router: Sponsorship router used for approval and purchase sends
            wait_for_receipt: Whether to wait for the purchase receipt
            on_transition: Optional callback invoked with each state entered
        """
        self.config = config
        self.chain = chain
        self.ledger = ledger
        self.router = router
        self.wait_for_receipt = wait_for_receipt
        self.on_transition = on_transition

    def unit_price(self) -> int:
        """
        Ticket price in the token's smallest unit.

        Raises:
            ChainReadError: If the price has to be read and the read fails
        """
        if self.config.ticket_price is not None:
            return self.config.ticket_price
        return int(self.chain.read(self.config.megapot_address, JACKPOT_ABI, "ticketPrice"))

    def required_amount(self, intent: PurchaseIntent, unit_price: int) -> int:
        return intent.ticket_count * unit_price

    def spender_for(self, intent: PurchaseIntent) -> str:
        """The contract that pulls the payment for this kind of purchase"""
        if intent.kind == PurchaseKind.POOL:
            return self.config.jackpot_pool_address
        return self.config.megapot_address

    def build_purchase_call(self, intent: PurchaseIntent) -> PreparedCall:
        if intent.kind == PurchaseKind.POOL:
            data = self.chain.encode(
                self.config.jackpot_pool_address, JACKPOT_POOL_ABI,
                "buyPoolTickets", [intent.pool_id, intent.ticket_count]
            )
            return PreparedCall(
                to=self.config.jackpot_pool_address, data=data,
                description=f"purchase of {intent.ticket_count} tickets in pool {intent.pool_id}"
            )
        data = self.chain.encode(
            self.config.megapot_address, JACKPOT_ABI, "buySoloTickets", [intent.ticket_count]
        )
        return PreparedCall(
            to=self.config.megapot_address, data=data,
            description=f"purchase of {intent.ticket_count} solo tickets"
        )

    def _enter(self, trail: List[PurchaseState], state: PurchaseState) -> None:
        trail.append(state)
        logger.debug(f"Purchase state -> {state.value}")
        if self.on_transition:
            self.on_transition(state)

    def _send(self, call: PreparedCall) -> SendOutcome:
        gas = self.chain.estimate_gas(call.to, call.data, call.value)
        return self.router.try_send(call, gas)

    def _approve(self, action: ApprovalAction, owner: str, spender: str) -> str:
        """Send one approval and wait until it is mined successfully"""
        call = self.ledger.build_approval_call(action, owner, spender, self.config.usdc_address)
        outcome = self._send(call)
        self.chain.wait_for_receipt(outcome.tx_hash)
        logger.info(f"Approval confirmed: {outcome.tx_hash}")
        return outcome.tx_hash

    def _run_approvals(self, trail: List[PurchaseState], plan, owner: str, spender: str) -> str:
        if owner.lower() != self.chain.require_address().lower():
            raise AllowanceError(
                f"Payer {owner} has to approve spending from its own wallet before purchasing"
            )
        last_error: Optional[Exception] = None
        for action in plan:
            if isinstance(action, ApproveSpendPermission):
                self._enter(trail, PurchaseState.APPROVING_SMART)
            else:
                self._enter(trail, PurchaseState.APPROVING_LEGACY)
            try:
                return self._approve(action, owner, spender)
            except TransactionFailedError as e:
                last_error = e
                if isinstance(action, ApproveSpendPermission):
                    logger.warning(f"Spend permission approval failed, falling back to token approval: {e}")
                else:
                    logger.error(f"Token approval failed: {e}")
        raise AllowanceError(f"Could not authorize spending: {last_error}") from last_error

    def approve(self, action: ApprovalAction, owner: str, spender: str) -> str:
        """
        Grant an authorization outside of a purchase.

        A spend permission action falls back to a single token approval.

        Returns:
            Hash of the approval transaction that succeeded

        Raises:
            AllowanceError: If every approval strategy failed
        """
        return self._run_approvals([], self.ledger.approval_plan(action), owner, spender)

    def purchase(self, intent: PurchaseIntent) -> PurchaseResult:
        """
        Run a full purchase.

        Args:
            intent: What to buy and who pays

        Returns:
            The purchase result

        Raises:
            InvalidIntentError: If the intent is malformed (before any chain call)
            ChainReadError: If the price or current allowance cannot be read
            AllowanceError: If every approval strategy failed
            TransactionFailedError: If the purchase transaction failed
        """
        trail: List[PurchaseState] = []
        try:
            self._enter(trail, PurchaseState.VALIDATING)
            intent.check()
            self.chain.require_address()

            self._enter(trail, PurchaseState.CHECKING_ALLOWANCE)
            cost = self.required_amount(intent, self.unit_price())
            spender = self.spender_for(intent)
            action = self.ledger.ensure_sufficient(intent.payer, spender, self.config.usdc_address, cost)

            if isinstance(action, NoActionNeeded):
                self._enter(trail, PurchaseState.SKIPPED)
            else:
                self._run_approvals(trail, self.ledger.approval_plan(action), intent.payer, spender)

            self._enter(trail, PurchaseState.PURCHASING)
            outcome = self._send(self.build_purchase_call(intent))
            if self.wait_for_receipt:
                self.chain.wait_for_receipt(outcome.tx_hash)

            result = PurchaseResult(
                tx_hash=outcome.tx_hash,
                kind=intent.kind,
                ticket_count=intent.ticket_count,
                cost_in_smallest_unit=cost,
                pool_id=intent.pool_id,
                sponsored=outcome.sponsored,
                receipt_url=tx_url(outcome.tx_hash, self.config.explorer_url),
            )
            self._enter(trail, PurchaseState.SETTLED)
            logger.info(
                f"Purchased {intent.ticket_count} {intent.kind.value} tickets for {cost}: {outcome.tx_hash}"
            )
            return result
        except MegapotError as e:
            failed_in = trail[-1].value if trail else PurchaseState.VALIDATING.value
            self._enter(trail, PurchaseState.FAILED)
            logger.error(f"Purchase failed while {failed_in}: {e}")
            raise
