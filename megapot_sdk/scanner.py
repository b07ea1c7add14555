"""
HistoricalEventScanner - finds the most recent settled jackpot round.

There is no index of settlement events, so the scanner walks the chain
backward from the current head in fixed-size block windows until it finds a
JackpotRun log or spends its lookback budget. Windows are scanned newest
first, so the first window with a match holds the latest event.
"""
import logging
from collections.abc import Mapping
from typing import Any, List, Optional

from .abi import JACKPOT_ABI, JACKPOT_RUN_EVENT
from .chain import ChainAccessor
from .constants import SCAN_MAX_LOOKBACK, SCAN_WINDOW
from .exceptions import ChainReadError, ScanError
from .models import SettlementEvent

logger = logging.getLogger(__name__)


def _field(entry: Any, name: str) -> Any:
    if isinstance(entry, Mapping):
        return entry[name]
    return getattr(entry, name)


def to_settlement_event(log: Any) -> SettlementEvent:
    """Convert a decoded JackpotRun log into a SettlementEvent"""
    args = _field(log, "args")
    return SettlementEvent(
        timestamp=int(_field(args, "time")),
        winner_address=str(_field(args, "winner")),
        winning_ticket_index=int(_field(args, "winningTicket")),
        win_amount=int(_field(args, "winAmount")),
        total_tickets_basis_points=int(_field(args, "ticketsPurchasedTotalBps")),
        block_number=int(_field(log, "blockNumber")),
        log_index=int(_field(log, "logIndex")),
    )


class HistoricalEventScanner:
    """Bounded backward scan for the latest JackpotRun event"""

    def __init__(
        self,
        chain: ChainAccessor,
        contract_address: str,
        max_lookback: int = SCAN_MAX_LOOKBACK,
        window: int = SCAN_WINDOW
    ):
        if window < 1:
            raise ValueError("window must be at least 1 block")
        self.chain = chain
        self.contract_address = contract_address
        self.max_lookback = max_lookback
        self.window = window

    def _fetch(self, from_block: int, to_block: int) -> List[Any]:
        try:
            return self.chain.logs(self.contract_address, JACKPOT_ABI, JACKPOT_RUN_EVENT, from_block, to_block)
        except ChainReadError as e:
            raise ScanError(
                f"Failed to fetch settlement logs for blocks [{from_block}, {to_block}]: {e}",
                from_block=from_block, to_block=to_block
            ) from e

    def find_latest(self, head: Optional[int] = None) -> Optional[SettlementEvent]:
        """
        Find the most recent settlement event.

        Args:
            head: Block to start from (defaults to the current block number)

        Returns:
            The latest SettlementEvent, or None when no event exists within
            the lookback budget

        Raises:
            ScanError: If the block number or any window cannot be fetched;
                no partial result is returned
        """
        if head is None:
            try:
                head = self.chain.block_number()
            except ChainReadError as e:
                raise ScanError(f"Failed to read the current block number: {e}") from e

        current_to = head
        scanned = 0
        windows = 0
        while scanned <= self.max_lookback and current_to >= 0:
            window_size = min(self.window, current_to + 1)
            from_block = max(0, current_to - window_size + 1)

            logs = self._fetch(from_block, current_to)
            windows += 1
            if logs:
                events = [to_settlement_event(log) for log in logs]
                events.sort(key=lambda event: event.ordering_key, reverse=True)
                latest = events[0]
                logger.debug(
                    f"Found settlement at block {latest.block_number} "
                    f"(log {latest.log_index}) after {windows} windows"
                )
                return latest

            scanned += window_size
            if from_block == 0:
                break
            current_to = from_block - 1

        logger.info(f"No settlement event in the last {scanned} blocks from {head}")
        return None
