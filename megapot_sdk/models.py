"""
Data models for the Megapot SDK.
"""
from enum import Enum
from typing import Dict, Any, Optional, List, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import InvalidIntentError

T = TypeVar('T')


class AuthorizationScheme(str, Enum):
    """Ways a payer can authorize a spender to move their tokens."""
    LEGACY_APPROVAL = "legacy_approval"
    SPEND_PERMISSION = "spend_permission"


class PurchaseKind(str, Enum):
    SOLO = "solo"
    POOL = "pool"


class AuthorizationRecord(BaseModel):
    """Spending authorization read back from the chain for one scheme"""
    model_config = ConfigDict(frozen=True)

    owner: str
    spender: str
    token: str
    amount: int
    scheme: AuthorizationScheme
    period_days: Optional[int] = None


class PurchaseIntent(BaseModel):
    """
    A request to buy tickets, immutable once created.

    Cross-field rules are checked by check() so that a purchase flow can
    reject a bad intent before touching the chain.
    """
    model_config = ConfigDict(frozen=True)

    kind: PurchaseKind
    ticket_count: int
    payer: str
    pool_id: Optional[int] = None

    @classmethod
    def solo(cls, ticket_count: int, payer: str) -> "PurchaseIntent":
        return cls(kind=PurchaseKind.SOLO, ticket_count=ticket_count, payer=payer)

    @classmethod
    def pool(cls, pool_id: int, ticket_count: int, payer: str) -> "PurchaseIntent":
        return cls(kind=PurchaseKind.POOL, ticket_count=ticket_count, payer=payer, pool_id=pool_id)

    def check(self) -> None:
        """
        Validate the intent.

        Raises:
            InvalidIntentError: If the ticket count or pool id is inconsistent
        """
        if self.ticket_count < 1:
            raise InvalidIntentError(f"ticket_count must be at least 1, got {self.ticket_count}")
        if self.kind == PurchaseKind.POOL and self.pool_id is None:
            raise InvalidIntentError("Pool purchases require a pool_id")
        if self.kind == PurchaseKind.SOLO and self.pool_id is not None:
            raise InvalidIntentError("Solo purchases must not carry a pool_id")
        if self.pool_id is not None and self.pool_id < 0:
            raise InvalidIntentError(f"pool_id must be non-negative, got {self.pool_id}")
        if not self.payer:
            raise InvalidIntentError("Purchase intent has no payer address")


class PurchaseResult(BaseModel):
    """
    Outcome of one successful purchase flow.

    sponsored records that the gas sponsor accepted the purchase operation.
    The purchase itself is always sent as a regular transaction, so the payer
    still pays its gas.
    """
    model_config = ConfigDict(frozen=True)

    tx_hash: str
    kind: PurchaseKind
    ticket_count: int
    cost_in_smallest_unit: int
    pool_id: Optional[int] = None
    sponsored: bool = False
    receipt_url: Optional[str] = None


class PreparedCall(BaseModel):
    """A contract call ready to be sent as a transaction"""
    model_config = ConfigDict(frozen=True)

    to: str
    data: str
    value: int = 0
    gas: Optional[int] = None
    description: str = ""


class SettlementEvent(BaseModel):
    """One settled jackpot round, decoded from a JackpotRun log"""
    model_config = ConfigDict(frozen=True)

    timestamp: int
    winner_address: str
    winning_ticket_index: int
    win_amount: int
    total_tickets_basis_points: int
    block_number: int
    log_index: int

    @property
    def ordering_key(self) -> tuple:
        return (self.block_number, self.log_index)


class TxReceipt(BaseModel):
    """Transaction receipt from the blockchain"""
    tx_hash: str = Field(..., alias="transactionHash")
    block_number: int = Field(..., alias="blockNumber")
    block_hash: str = Field(..., alias="blockHash")
    status: int
    gas_used: int = Field(..., alias="gasUsed")
    from_address: str = Field(..., alias="from")
    to_address: Optional[str] = Field(None, alias="to")
    logs: List[Dict[str, Any]] = []

    model_config = ConfigDict(populate_by_name=True)


class UserAllowance(BaseModel):
    """Allowance summary row, one per authorization scheme"""
    token: str
    allowance: int
    spender: str
    remaining: int
    scheme: AuthorizationScheme


class JackpotPoolInfo(BaseModel):
    """On-chain state of a jackpot pool"""
    total_tickets: int
    ticket_price: int
    max_tickets_per_user: int
    end_time: int
    is_active: bool


class UserInfo(BaseModel):
    """Per-user jackpot state for the current round"""
    tickets_purchased_total_bps: int
    winnings_claimable: int
    active: bool


class PoolInfo(BaseModel):
    """Pool metadata served by the data API"""
    id: str
    participants: int
    max_participants: int = Field(..., alias="maxParticipants")
    ticket_price: float = Field(..., alias="ticketPrice")
    status: str
    end_time: int = Field(..., alias="endTime")

    model_config = ConfigDict(populate_by_name=True)


class PoolStats(BaseModel):
    """Aggregate pool statistics served by the data API"""
    total_pools: int = Field(..., alias="totalPools")
    active_pools: int = Field(..., alias="activePools")
    total_participants: int = Field(..., alias="totalParticipants")
    total_volume: float = Field(..., alias="totalVolume")
    average_pool_size: float = Field(..., alias="averagePoolSize")

    model_config = ConfigDict(populate_by_name=True)


class ApiResponse(BaseModel, Generic[T]):
    """Envelope returned by every data API call, successful or not"""
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    message: Optional[str] = None
