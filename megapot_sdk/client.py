"""
MegapotClient - Main client for the Megapot jackpot.
"""
import logging
from typing import Any, Callable, List, Optional

from .allowance import AllowanceLedger, ApproveLegacy, ApproveSpendPermission
from .chain import ChainAccessor
from .config import MegapotConfig
from .data_api import DataApiClient
from .exceptions import ConfigurationError
from .jackpot import JackpotReader
from .models import (
    ApiResponse, AuthorizationScheme, JackpotPoolInfo, PoolInfo, PoolStats,
    PurchaseIntent, PurchaseResult, SettlementEvent, UserAllowance
)
from .orchestrator import PurchaseState, TransactionOrchestrator
from .scanner import HistoricalEventScanner
from .sponsorship import SponsorshipRouter
from .utils import tx_url, validate_secure_url
from .wallet import WalletCapability, WalletProvider, resolve_wallet

_SCHEME_LABELS = {
    AuthorizationScheme.LEGACY_APPROVAL: "USDC",
    AuthorizationScheme.SPEND_PERMISSION: "USDC (SPM)",
}


class MegapotClient:
    """
    Client for buying Megapot jackpot tickets and reading jackpot history.

    This client handles:
    1. Spending authorization for USDC (token approval or spend permission)
    2. Solo and pool ticket purchases, optionally gas-sponsored
    3. Finding the latest settled jackpot round
    4. Reading pool data from the Megapot data API

    To use this client for purchases, you'll need a wallet: a private key, a
    custom signer, or a node-managed account. Without one the client is
    read-only.
    """

    def __init__(
        self,
        config: Optional[MegapotConfig] = None,
        wallet: Optional[WalletProvider] = None,
        rpc_url: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
        on_transition: Optional[Callable[[PurchaseState], None]] = None
    ):
        """
        Initialize the MegapotClient

        Args:
            config: SDK configuration (defaults to Base mainnet)
            wallet: Wallet provider (PrivateKeyWallet, SignerWallet, NodeWallet
                or ReadOnlyWallet); None gives read-only access
            rpc_url: RPC endpoint overriding config.rpc_url
            logger: Optional logger instance to use for debug/info logging
            on_transition: Optional callback receiving each purchase state

        Raises:
            ConfigurationError: If the configuration or wallet is invalid
        """
        try:
            config = config or MegapotConfig()
            if rpc_url:
                config = config.merged(rpc_url=rpc_url)
            wallet_rpc_url = getattr(wallet, "rpc_url", None)
            if wallet_rpc_url:
                validate_secure_url("wallet rpc_url", wallet_rpc_url)
            resolved = resolve_wallet(wallet, config.rpc_url, config.timeout)
        except ValueError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

        self.logger = logger or logging.getLogger(__name__)
        self._wallet_provider = wallet
        self._on_transition = on_transition
        self._wallet: WalletCapability = resolved
        self._build(config)

    def _build(self, config: MegapotConfig) -> None:
        """Wire every component against one configuration snapshot"""
        chain = ChainAccessor(
            self._wallet,
            chain_id=config.chain_id,
            gas_limit=config.gas_limit,
            max_retries=config.max_retries,
            backoff_base=config.backoff_base,
            receipt_timeout=config.receipt_timeout,
            logger=self.logger
        )
        ledger = AllowanceLedger(
            chain, config.spend_permission_manager_address, config.spend_permission_period_days
        )
        router = SponsorshipRouter(chain, config.sponsorship, timeout=config.timeout)

        self._config = config
        self.chain = chain
        self.ledger = ledger
        self.router = router
        self.orchestrator = TransactionOrchestrator(
            config, chain, ledger, router, on_transition=self._on_transition
        )
        self.scanner = HistoricalEventScanner(chain, config.megapot_address)
        self.data_api = DataApiClient(config.data_api, retry_count=config.max_retries)
        self._jackpot = JackpotReader(chain, config)

    @property
    def address(self) -> Optional[str]:
        """Wallet address, or None when the client is read-only"""
        return self._wallet.address

    @property
    def jackpot(self) -> JackpotReader:
        return self._jackpot

    # Configuration

    def get_config(self) -> MegapotConfig:
        """Current configuration (immutable)"""
        return self._config

    def update_config(self, **changes: Any) -> MegapotConfig:
        """
        Merge changes into the configuration.

        Fields that are not mentioned keep their values. The new configuration
        replaces the old one as a whole; purchases already running keep the
        snapshot they started with.

        Args:
            **changes: Configuration fields to replace; sponsorship and
                data_api accept dicts of the fields to change

        Returns:
            The new configuration

        Raises:
            ConfigurationError: If a field is unknown or a value is invalid
        """
        try:
            config = self._config.merged(**changes)
        except ValueError as e:
            raise ConfigurationError(f"Invalid configuration update: {e}") from e

        if config.rpc_url != self._config.rpc_url or config.timeout != self._config.timeout:
            self._wallet = resolve_wallet(self._wallet_provider, config.rpc_url, config.timeout)
        self._build(config)
        self.logger.debug(f"Configuration updated: {', '.join(sorted(changes))}")
        return config

    def tx_url(self, tx_hash: str) -> str:
        """Block explorer link for a transaction"""
        return tx_url(tx_hash, self._config.explorer_url)

    # Purchases

    def purchase(self, intent: PurchaseIntent) -> PurchaseResult:
        """
        Buy tickets as described by a purchase intent.

        Raises:
            InvalidIntentError: If the intent is malformed
            ChainReadError: If price or allowance reads keep failing
            AllowanceError: If spending could not be authorized
            TransactionFailedError: If the purchase transaction failed
            ConfigurationError: If the client has no writable wallet
        """
        return self.orchestrator.purchase(intent)

    def buy_solo_tickets(self, ticket_count: int, user_address: Optional[str] = None) -> PurchaseResult:
        """
        Buy solo tickets in the current round.

        Args:
            ticket_count: Number of tickets
            user_address: Paying address (defaults to the wallet address)
        """
        payer = user_address or self.chain.require_address()
        return self.purchase(PurchaseIntent.solo(ticket_count, payer))

    def buy_pool_tickets(
        self,
        pool_id: int,
        ticket_count: int,
        user_address: Optional[str] = None
    ) -> PurchaseResult:
        """
        Buy tickets in a jackpot pool.

        Args:
            pool_id: Pool to join
            ticket_count: Number of tickets
            user_address: Paying address (defaults to the wallet address)
        """
        payer = user_address or self.chain.require_address()
        return self.purchase(PurchaseIntent.pool(pool_id, ticket_count, payer))

    # Authorization

    def _default_spender(self, spender: Optional[str]) -> str:
        return spender or self._config.megapot_address

    def is_smart_wallet(self, address: Optional[str] = None) -> bool:
        if address is None:
            if not self.address:
                return False
            address = self.address
        return self.ledger.is_smart_wallet(address)

    def get_usdc_allowance(self, owner: str, spender: str) -> int:
        """
        USDC allowance granted by owner to spender.

        Raises:
            ChainReadError: If the allowance cannot be read
        """
        return self.ledger.legacy_allowance(owner, spender, self._config.usdc_address)

    def get_spend_permission_allowance(self, account: str, spender: str, token: Optional[str] = None) -> int:
        """Spend permission allowance; 0 when none exists or it cannot be read"""
        return self.ledger.spend_permission_allowance(account, spender, token or self._config.usdc_address)

    def get_user_allowances(
        self,
        user_address: Optional[str] = None,
        spender: Optional[str] = None
    ) -> List[UserAllowance]:
        """
        Non-zero allowances of a user, one row per authorization scheme.

        Args:
            user_address: Owner (defaults to the wallet address)
            spender: Spender (defaults to the jackpot contract)

        Raises:
            ConfigurationError: If no address is given and the client is read-only
            ChainReadError: If the token allowance cannot be read
        """
        owner = user_address or self.chain.require_address()
        spender = self._default_spender(spender)
        records = self.ledger.current_authorization(owner, spender, self._config.usdc_address)
        return [
            UserAllowance(
                token=_SCHEME_LABELS[record.scheme],
                allowance=record.amount,
                spender=record.spender,
                remaining=record.amount,
                scheme=record.scheme,
            )
            for record in records
        ]

    def approve_usdc(self, spender: Optional[str] = None, amount: Optional[int] = None) -> str:
        """
        Authorize a spender to move the wallet's USDC.

        Smart wallets get a spend permission first, with one token approval
        as fallback; other wallets get a token approval.

        Args:
            spender: Spender (defaults to the jackpot contract)
            amount: Amount in USDC's smallest unit (defaults to one ticket)

        Returns:
            Hash of the approval transaction

        Raises:
            ConfigurationError: If the client has no writable wallet
            AllowanceError: If every approval strategy failed
        """
        owner = self.chain.require_address()
        spender = self._default_spender(spender)
        if amount is None:
            amount = self.orchestrator.unit_price()

        if self.ledger.is_smart_wallet(owner):
            action = ApproveSpendPermission(amount=amount, period_days=self._config.spend_permission_period_days)
        else:
            self.logger.info("Using token approval for EOA wallet")
            action = ApproveLegacy(amount=amount)
        return self.orchestrator.approve(action, owner, spender)

    def approve_spend_permission(
        self,
        amount: int,
        spender: Optional[str] = None,
        period_days: Optional[int] = None
    ) -> str:
        """
        Grant a spend permission without fallback.

        Returns:
            Transaction hash

        Raises:
            ConfigurationError: If the client has no writable wallet
            TransactionFailedError: If the transaction could not be sent
        """
        owner = self.chain.require_address()
        action = ApproveSpendPermission(
            amount=amount,
            period_days=period_days or self._config.spend_permission_period_days
        )
        call = self.ledger.build_approval_call(
            action, owner, self._default_spender(spender), self._config.usdc_address,
            gas=self._config.gas_limit
        )
        return self.router.try_send(call, self._config.gas_limit).tx_hash

    def revoke_spend_permission(self, spender: Optional[str] = None) -> str:
        """
        Revoke the wallet's spend permission for a spender.

        Returns:
            Transaction hash
        """
        owner = self.chain.require_address()
        call = self.ledger.build_revoke_call(
            owner, self._default_spender(spender), self._config.usdc_address, gas=self._config.gas_limit
        )
        return self.router.try_send(call, self._config.gas_limit).tx_hash

    # History and jackpot state

    def get_last_jackpot_results(self) -> Optional[SettlementEvent]:
        """
        Latest settled jackpot round within the lookback window.

        Returns:
            The settlement event, or None if no round settled recently

        Raises:
            ScanError: If the chain could not be scanned
        """
        return self.scanner.find_latest()

    def get_jackpot_pool_info(self, pool_id: int) -> JackpotPoolInfo:
        return self._jackpot.pool_info(pool_id)

    def get_user_tickets_in_pool(self, pool_id: int, user_address: Optional[str] = None) -> int:
        return self._jackpot.user_tickets_in_pool(pool_id, user_address or self.chain.require_address())

    # Data API

    def get_pool_info(self, pool_id: str) -> ApiResponse[PoolInfo]:
        return self.data_api.get_pool_info(pool_id)

    def get_pool_stats(self) -> ApiResponse[PoolStats]:
        return self.data_api.get_pool_stats()

    def get_user_pools(self, user_address: str) -> ApiResponse[List[PoolInfo]]:
        return self.data_api.get_user_pools(user_address)

    def get_active_pools(self, limit: int = 20) -> ApiResponse[List[PoolInfo]]:
        return self.data_api.get_active_pools(limit)
