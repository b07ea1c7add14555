"""
Configuration for the Megapot SDK.

Configuration values are immutable. Updating the SDK configuration builds a
new value with merged fields and swaps it in as a whole, so a purchase that
is already running keeps the snapshot it started with.
"""
import importlib.resources
import json
import logging
import os
from typing import Dict, Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from . import constants
from .utils import validate_secure_url

logger = logging.getLogger(__name__)


class SponsorshipConfig(BaseModel):
    """Gas sponsorship (paymaster) settings"""
    model_config = ConfigDict(frozen=True)

    endpoint_url: Optional[str] = None
    max_gas_units: int = constants.DEFAULT_PAYMASTER_MAX_GAS
    enabled: bool = constants.DEFAULT_PAYMASTER_ENABLED

    @field_validator("endpoint_url")
    @classmethod
    def _check_endpoint(cls, value: Optional[str]) -> Optional[str]:
        if value:
            validate_secure_url("sponsorship endpoint_url", value)
        return value or None

    @property
    def available(self) -> bool:
        """Sponsorship can only be attempted when enabled with an endpoint"""
        return bool(self.enabled and self.endpoint_url)

    @classmethod
    def from_env(cls, **overrides: Any) -> "SponsorshipConfig":
        """
        Build sponsorship settings from PAYMASTER_* environment variables.

        Explicit keyword overrides win over the environment.
        """
        values: Dict[str, Any] = {}
        if os.environ.get("PAYMASTER_URL"):
            values["endpoint_url"] = os.environ["PAYMASTER_URL"]
        if os.environ.get("PAYMASTER_MAX_GAS_LIMIT"):
            values["max_gas_units"] = int(os.environ["PAYMASTER_MAX_GAS_LIMIT"])
        if os.environ.get("PAYMASTER_ENABLED"):
            values["enabled"] = os.environ["PAYMASTER_ENABLED"].lower() == "true"
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


class DataApiConfig(BaseModel):
    """Settings for the Megapot REST data API"""
    model_config = ConfigDict(frozen=True)

    base_url: str = constants.DATA_API_BASE_URL
    api_key: Optional[str] = None
    timeout: int = constants.DEFAULT_TIMEOUT

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        validate_secure_url("data_api base_url", value)
        return value.rstrip("/")


class MegapotConfig(BaseModel):
    """
    Process-wide SDK configuration.

    Defaults target the Base mainnet deployment. Use merged() to derive an
    updated configuration; fields that are not mentioned are kept.
    """
    model_config = ConfigDict(frozen=True)

    chain_id: int = constants.BASE_CHAIN_ID
    rpc_url: str = constants.BASE_MAINNET_RPC_URL
    explorer_url: str = constants.BASE_EXPLORER_URL
    usdc_address: str = constants.USDC_ADDRESS
    megapot_address: str = constants.MEGAPOT_ADDRESS
    jackpot_pool_address: str = constants.JACKPOT_POOL_ADDRESS
    spend_permission_manager_address: str = constants.SPEND_PERMISSION_MANAGER_ADDRESS
    referrer_address: str = constants.REFERRER_ADDRESS
    gas_limit: int = constants.DEFAULT_GAS_LIMIT
    max_retries: int = constants.DEFAULT_MAX_RETRIES
    backoff_base: float = constants.DEFAULT_BACKOFF_BASE
    timeout: int = constants.DEFAULT_TIMEOUT
    receipt_timeout: int = constants.DEFAULT_RECEIPT_TIMEOUT
    spend_permission_period_days: int = constants.DEFAULT_SPEND_PERMISSION_PERIOD_DAYS
    # Fixed ticket price in the token's smallest unit; read from the
    # jackpot contract when unset.
    ticket_price: Optional[int] = None
    sponsorship: SponsorshipConfig = SponsorshipConfig()
    data_api: DataApiConfig = DataApiConfig()

    @field_validator("rpc_url")
    @classmethod
    def _check_rpc_url(cls, value: str) -> str:
        validate_secure_url("rpc_url", value)
        return value

    @field_validator("max_retries")
    @classmethod
    def _check_retries(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_retries must be at least 1")
        return value

    @field_validator("ticket_price")
    @classmethod
    def _check_ticket_price(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 1:
            raise ValueError("ticket_price must be positive when set")
        return value

    def merged(self, **changes: Any) -> "MegapotConfig":
        """
        Return a new configuration with changes merged in.

        Nested sponsorship and data_api settings may be given as dicts, in
        which case only the named fields change.

        Args:
            **changes: Field values to replace

        Returns:
            New validated MegapotConfig

        Raises:
            ValueError: If a field name is unknown or a value is invalid
        """
        unknown = set(changes) - set(type(self).model_fields)
        if unknown:
            raise ValueError(f"Unknown configuration fields: {', '.join(sorted(unknown))}")

        data = self.model_dump()
        for key, value in changes.items():
            if key in ("sponsorship", "data_api") and value is not None:
                if isinstance(value, BaseModel):
                    value = value.model_dump(exclude_unset=True)
                data[key] = {**data[key], **value}
            else:
                data[key] = value
        return type(self).model_validate(data)

    @classmethod
    def from_env(cls, **overrides: Any) -> "MegapotConfig":
        """
        Build a configuration from environment variables and overrides.

        Reads MEGAPOT_RPC_URL, REFERRER_ADDRESS, MEGAPOT_API_KEY and the
        PAYMASTER_* variables.
        """
        values: Dict[str, Any] = {}
        if os.environ.get("MEGAPOT_RPC_URL"):
            values["rpc_url"] = os.environ["MEGAPOT_RPC_URL"]
        if os.environ.get("REFERRER_ADDRESS"):
            values["referrer_address"] = os.environ["REFERRER_ADDRESS"]
        if os.environ.get("MEGAPOT_API_KEY"):
            values["data_api"] = {"api_key": os.environ["MEGAPOT_API_KEY"]}
        values["sponsorship"] = SponsorshipConfig.from_env()
        return cls().merged(**{**values, **overrides})

    @classmethod
    def for_network(cls, network: str, rpc_override: Optional[str] = None, **overrides: Any) -> "MegapotConfig":
        """Build a configuration from a named network preset"""
        net = NetworkConfig.get_network(network)
        values = {
            "chain_id": net["chainId"],
            "rpc_url": NetworkConfig.get_rpc_url(network, override=rpc_override),
            "explorer_url": net.get("explorer", constants.BASE_EXPLORER_URL),
            "usdc_address": net["usdc"],
            "megapot_address": net["megapot"],
            "jackpot_pool_address": net["jackpotPool"],
            "spend_permission_manager_address": net["spendPermissionManager"],
        }
        return cls().merged(**{**values, **overrides})


class NetworkConfig:
    """Registry of network presets shipped with the package"""

    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        """Load (once) and return all network presets"""
        if cls._networks_cache is None:
            path = importlib.resources.files("megapot_sdk").joinpath("networks.json")
            cls._networks_cache = json.loads(path.read_text(encoding="utf-8"))
            logger.debug(f"Loaded {len(cls._networks_cache)} network presets")
        return cls._networks_cache

    @classmethod
    def get_network(cls, name: str) -> Dict[str, Any]:
        networks = cls.load_networks()
        if name not in networks:
            available = ", ".join(sorted(networks))
            raise ValueError(f"Unknown network '{name}'. Available networks: {available}")
        return networks[name]

    @classmethod
    def get_rpc_url(cls, name: str, override: Optional[str] = None) -> str:
        """
        Resolve the RPC URL for a network.

        Precedence: explicit override, then <NAME>_RPC_URL from the
        environment, then the preset.
        """
        if override:
            return override
        env_name = f"{name.upper().replace('-', '_')}_RPC_URL"
        if os.environ.get(env_name):
            return os.environ[env_name]
        return cls.get_network(name)["rpc"]

    @classmethod
    def get_chain_id(cls, name: str) -> int:
        return int(cls.get_network(name)["chainId"])
