"""
Read-only views over the jackpot, jackpot pool and token contracts.
"""
import time
from decimal import Decimal
from typing import Optional

from .abi import ERC20_ABI, JACKPOT_ABI, JACKPOT_POOL_ABI
from .chain import ChainAccessor
from .config import MegapotConfig
from .models import JackpotPoolInfo, UserInfo

BPS_DENOMINATOR = 10000


class JackpotReader:
    """
    Current round state. Every method is a fresh chain read; failures raise
    ChainReadError.
    """

    def __init__(self, chain: ChainAccessor, config: MegapotConfig):
        self.chain = chain
        self.config = config

    def _jackpot(self, function_name: str, *args):
        return self.chain.read(self.config.megapot_address, JACKPOT_ABI, function_name, args)

    def _token(self, function_name: str, *args):
        return self.chain.read(self.config.usdc_address, ERC20_ABI, function_name, args)

    def ticket_price(self) -> int:
        return int(self._jackpot("ticketPrice"))

    def jackpot_amount(self) -> int:
        """Current jackpot size: the larger of the LP pool and user pool totals"""
        return max(int(self._jackpot("lpPoolTotal")), int(self._jackpot("userPoolTotal")))

    def fee_bps(self) -> int:
        return int(self._jackpot("feeBps"))

    def time_remaining(self, now: Optional[float] = None) -> float:
        """
        Seconds until the current round ends.

        Args:
            now: Unix timestamp to measure from (defaults to the current time)

        Returns:
            Remaining seconds; negative once the round is due for settlement
        """
        last_end = int(self._jackpot("lastJackpotEndTime"))
        duration = int(self._jackpot("roundDurationInSeconds"))
        if now is None:
            now = time.time()
        return last_end + duration - now

    def users_info(self, address: str) -> UserInfo:
        tickets_bps, claimable, active = self._jackpot("usersInfo", address)
        return UserInfo(
            tickets_purchased_total_bps=int(tickets_bps),
            winnings_claimable=int(claimable),
            active=bool(active),
        )

    def ticket_count_for_round(self, address: str) -> Decimal:
        """
        Tickets the address holds in the current round.

        The contract stores fee-adjusted basis points per ticket, so the raw
        value is scaled back by the fee.
        """
        info = self.users_info(address)
        fee = self.fee_bps()
        per_ticket = Decimal(BPS_DENOMINATOR - fee) / BPS_DENOMINATOR
        if per_ticket == 0:
            return Decimal(0)
        return Decimal(info.tickets_purchased_total_bps) / BPS_DENOMINATOR / per_ticket

    def lp_pool_open(self) -> bool:
        """The LP pool accepts deposits until its total reaches the cap"""
        cap = int(self._jackpot("lpPoolCap"))
        total = int(self._jackpot("lpPoolTotal"))
        return total < cap

    def min_lp_deposit(self) -> int:
        return int(self._jackpot("minLpDeposit"))

    def token_decimals(self) -> int:
        return int(self._token("decimals"))

    def token_symbol(self) -> str:
        return str(self._token("symbol"))

    def token_name(self) -> str:
        return str(self._token("name"))

    def token_balance(self, address: str) -> int:
        return int(self._token("balanceOf", address))

    def jackpot_odds(self) -> Optional[Decimal]:
        """
        Odds of winning per ticket, as "1 in N".

        Returns:
            The jackpot size divided by the fee-adjusted ticket price, or None
            when the effective price is zero
        """
        jackpot = Decimal(self.jackpot_amount())
        price = Decimal(self.ticket_price())
        fee = Decimal(self.fee_bps())
        effective_price = price * (1 - fee / BPS_DENOMINATOR)
        if effective_price == 0:
            return None
        return jackpot / effective_price

    def pool_info(self, pool_id: int) -> JackpotPoolInfo:
        total, price, max_per_user, end_time, active = self.chain.read(
            self.config.jackpot_pool_address, JACKPOT_POOL_ABI, "getPoolInfo", [pool_id]
        )
        return JackpotPoolInfo(
            total_tickets=int(total),
            ticket_price=int(price),
            max_tickets_per_user=int(max_per_user),
            end_time=int(end_time),
            is_active=bool(active),
        )

    def user_tickets_in_pool(self, pool_id: int, user: str) -> int:
        return int(self.chain.read(
            self.config.jackpot_pool_address, JACKPOT_POOL_ABI, "getUserTickets", [pool_id], caller=user
        ))
