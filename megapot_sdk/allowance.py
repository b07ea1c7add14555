"""
AllowanceLedger - spending authorization for the payment token.

Two authorization schemes can coexist for the same owner/spender/token:
the token's own approve() allowance, usable by any account, and a
spend permission held by the spend permission manager, usable only by
smart-contract wallets.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from .abi import ERC20_ABI, SPEND_PERMISSION_MANAGER_ABI
from .chain import ChainAccessor
from .exceptions import ChainReadError
from .models import AuthorizationRecord, AuthorizationScheme, PreparedCall

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NoActionNeeded:
    pass


@dataclass(frozen=True)
class ApproveLegacy:
    amount: int


@dataclass(frozen=True)
class ApproveSpendPermission:
    amount: int
    period_days: int


Action = Union[NoActionNeeded, ApproveLegacy, ApproveSpendPermission]
ApprovalAction = Union[ApproveLegacy, ApproveSpendPermission]


class AllowanceLedger:
    """
    Compares current and required authorization and decides how to close
    any gap.
    """

    def __init__(
        self,
        chain: ChainAccessor,
        spend_permission_manager_address: str,
        period_days: int = 30
    ):
        self.chain = chain
        self.spend_permission_manager_address = spend_permission_manager_address
        self.period_days = period_days

    def is_smart_wallet(self, owner: str) -> bool:
        """
        Check whether the owner address holds contract code.

        This is advisory: a contract wallet may still not support spend
        permissions. A failed lookup is treated as "not a smart wallet".
        """
        try:
            code = self.chain.get_code(owner)
        except ChainReadError as e:
            logger.warning(f"Could not determine wallet type for {owner}: {e}")
            return False
        return len(code) > 0

    def legacy_allowance(self, owner: str, spender: str, token: str) -> int:
        """
        Read the token allowance for a spender.

        Raises:
            ChainReadError: If the read fails after retries
        """
        return int(self.chain.read(token, ERC20_ABI, "allowance", [owner, spender]))

    def spend_permission_allowance(self, owner: str, spender: str, token: str) -> int:
        """Read the spend permission allowance; 0 when it cannot be read"""
        try:
            return int(self.chain.read(
                self.spend_permission_manager_address,
                SPEND_PERMISSION_MANAGER_ABI,
                "getSpendPermission",
                [owner, spender, token]
            ))
        except ChainReadError as e:
            logger.debug(f"Spend permission not readable for {owner}: {e}")
            return 0

    def _authorization_state(
        self, owner: str, spender: str, token: str
    ) -> Tuple[List[AuthorizationRecord], bool]:
        records: List[AuthorizationRecord] = []

        legacy = self.legacy_allowance(owner, spender, token)
        if legacy > 0:
            records.append(AuthorizationRecord(
                owner=owner, spender=spender, token=token,
                amount=legacy, scheme=AuthorizationScheme.LEGACY_APPROVAL
            ))

        smart = self.is_smart_wallet(owner)
        if smart:
            permitted = self.spend_permission_allowance(owner, spender, token)
            if permitted > 0:
                records.append(AuthorizationRecord(
                    owner=owner, spender=spender, token=token,
                    amount=permitted, scheme=AuthorizationScheme.SPEND_PERMISSION,
                    period_days=self.period_days
                ))
        return records, smart

    def current_authorization(self, owner: str, spender: str, token: str) -> List[AuthorizationRecord]:
        """
        Read both authorization schemes.

        Returns:
            Non-zero records, at most one per scheme

        Raises:
            ChainReadError: If the token allowance cannot be read
        """
        records, _ = self._authorization_state(owner, spender, token)
        return records

    def ensure_sufficient(self, owner: str, spender: str, token: str, required_amount: int) -> Action:
        """
        Decide which approval, if any, is needed to cover required_amount.

        Returns:
            NoActionNeeded when an existing authorization covers the amount,
            otherwise ApproveSpendPermission for smart wallets and
            ApproveLegacy for everything else

        Raises:
            ChainReadError: If the token allowance cannot be read
        """
        records, smart = self._authorization_state(owner, spender, token)
        current = max((record.amount for record in records), default=0)
        if current >= required_amount:
            return NoActionNeeded()

        logger.info(f"Insufficient allowance. Current: {current}, Required: {required_amount}")
        if smart:
            return ApproveSpendPermission(amount=required_amount, period_days=self.period_days)
        return ApproveLegacy(amount=required_amount)

    def legacy_fallback(self, action: ApprovalAction) -> ApproveLegacy:
        """The legacy approval to use after a spend permission approval failed"""
        return ApproveLegacy(amount=action.amount)

    def approval_plan(self, action: Action) -> Tuple[ApprovalAction, ...]:
        """
        Ordered approval strategies to try for an action.

        A spend permission is followed by exactly one legacy fallback; the
        spend permission strategy never appears twice.
        """
        if isinstance(action, NoActionNeeded):
            return ()
        if isinstance(action, ApproveSpendPermission):
            return (action, self.legacy_fallback(action))
        return (action,)

    def build_approval_call(
        self,
        action: ApprovalAction,
        owner: str,
        spender: str,
        token: str,
        gas: Optional[int] = None
    ) -> PreparedCall:
        """Build the transaction that grants the authorization in action"""
        if isinstance(action, ApproveSpendPermission):
            data = self.chain.encode(
                self.spend_permission_manager_address,
                SPEND_PERMISSION_MANAGER_ABI,
                "approve",
                [owner, spender, token, action.amount, action.period_days]
            )
            return PreparedCall(
                to=self.spend_permission_manager_address, data=data, gas=gas,
                description=f"spend permission approval of {action.amount} for {spender}"
            )
        data = self.chain.encode(token, ERC20_ABI, "approve", [spender, action.amount])
        return PreparedCall(
            to=token, data=data, gas=gas,
            description=f"token approval of {action.amount} for {spender}"
        )

    def build_revoke_call(self, owner: str, spender: str, token: str, gas: Optional[int] = None) -> PreparedCall:
        """Build the transaction that revokes a spend permission"""
        data = self.chain.encode(
            self.spend_permission_manager_address,
            SPEND_PERMISSION_MANAGER_ABI,
            "revoke",
            [owner, spender, token]
        )
        return PreparedCall(
            to=self.spend_permission_manager_address, data=data, gas=gas,
            description=f"spend permission revocation for {spender}"
        )
