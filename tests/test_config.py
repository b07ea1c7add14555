"""
Tests for MegapotConfig, SponsorshipConfig and NetworkConfig.
"""
import pytest
from pydantic import ValidationError
from unittest.mock import patch

from megapot_sdk import constants
from megapot_sdk.config import DataApiConfig, MegapotConfig, NetworkConfig, SponsorshipConfig
from tests.test_helpers import TEST_RPC_URL

# Sample network configuration
MOCK_NETWORKS = {
    "test-network": {
        "chainId": 123,
        "rpc": "https://test.example.com",
        "explorer": "https://explorer.example.com",
        "usdc": "0x1111111111111111111111111111111111111111",
        "megapot": "0x2222222222222222222222222222222222222222",
        "jackpotPool": "0x3333333333333333333333333333333333333333",
        "spendPermissionManager": "0x4444444444444444444444444444444444444444"
    }
}


class TestMegapotConfig:

    def test_defaults_target_base_mainnet(self):
        config = MegapotConfig()

        assert config.chain_id == 8453
        assert config.usdc_address == constants.USDC_ADDRESS
        assert config.gas_limit == 150_000
        assert config.max_retries == 3
        assert config.sponsorship.available is False
        assert config.data_api.base_url == "https://api.megapot.io"

    def test_config_is_immutable(self):
        config = MegapotConfig()
        with pytest.raises(ValidationError):
            config.gas_limit = 1

    @pytest.mark.parametrize("url", ["http://rpc.example.com", "ftp://rpc.example.com"])
    def test_insecure_rpc_url_rejected(self, url):
        with pytest.raises(ValidationError, match="https"):
            MegapotConfig(rpc_url=url)

    @pytest.mark.parametrize("url", ["http://localhost:8545", "http://127.0.0.1:8545"])
    def test_local_rpc_url_allowed(self, url):
        assert MegapotConfig(rpc_url=url).rpc_url == url

    def test_max_retries_must_be_positive(self):
        with pytest.raises(ValidationError):
            MegapotConfig(max_retries=0)

    @pytest.mark.parametrize("price", [0, -5])
    def test_ticket_price_must_be_positive(self, price):
        with pytest.raises(ValidationError, match="ticket_price must be positive"):
            MegapotConfig(ticket_price=price)

    def test_ticket_price_unset_or_positive(self):
        assert MegapotConfig().ticket_price is None
        assert MegapotConfig(ticket_price=1).ticket_price == 1

    def test_merged_keeps_unspecified_fields(self):
        config = MegapotConfig(rpc_url=TEST_RPC_URL, gas_limit=200_000)

        updated = config.merged(max_retries=5)

        assert updated.max_retries == 5
        assert updated.gas_limit == 200_000
        assert updated.rpc_url == TEST_RPC_URL
        assert config.max_retries == 3
        assert updated is not config

    def test_merged_nested_dict_changes_only_named_fields(self):
        config = MegapotConfig(sponsorship={"endpoint_url": "https://pm.example.com", "max_gas_units": 80_000})

        updated = config.merged(sponsorship={"enabled": True})

        assert updated.sponsorship.enabled is True
        assert updated.sponsorship.endpoint_url == "https://pm.example.com"
        assert updated.sponsorship.max_gas_units == 80_000

    def test_merged_nested_model_changes_only_set_fields(self):
        config = MegapotConfig(data_api={"api_key": "secret", "timeout": 30})

        updated = config.merged(data_api=DataApiConfig(timeout=5))

        assert updated.data_api.timeout == 5
        assert updated.data_api.api_key == "secret"

    def test_merged_rejects_unknown_fields(self):
        with pytest.raises(ValueError, match="Unknown configuration fields: nope"):
            MegapotConfig().merged(nope=1)

    def test_merged_revalidates(self):
        with pytest.raises(ValidationError):
            MegapotConfig().merged(rpc_url="http://insecure.example.com")

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("MEGAPOT_RPC_URL", "https://env-rpc.example.com")
        monkeypatch.setenv("REFERRER_ADDRESS", "0x5555555555555555555555555555555555555555")
        monkeypatch.setenv("MEGAPOT_API_KEY", "env-key")
        monkeypatch.setenv("PAYMASTER_URL", "https://pm.example.com")
        monkeypatch.setenv("PAYMASTER_ENABLED", "true")
        monkeypatch.setenv("PAYMASTER_MAX_GAS_LIMIT", "70000")

        config = MegapotConfig.from_env()

        assert config.rpc_url == "https://env-rpc.example.com"
        assert config.referrer_address == "0x5555555555555555555555555555555555555555"
        assert config.data_api.api_key == "env-key"
        assert config.sponsorship.available is True
        assert config.sponsorship.max_gas_units == 70_000

    def test_from_env_overrides_win(self, monkeypatch):
        monkeypatch.setenv("MEGAPOT_RPC_URL", "https://env-rpc.example.com")

        config = MegapotConfig.from_env(rpc_url=TEST_RPC_URL)

        assert config.rpc_url == TEST_RPC_URL

    def test_from_env_without_variables(self, monkeypatch):
        for name in ("MEGAPOT_RPC_URL", "REFERRER_ADDRESS", "MEGAPOT_API_KEY",
                     "PAYMASTER_URL", "PAYMASTER_ENABLED", "PAYMASTER_MAX_GAS_LIMIT"):
            monkeypatch.delenv(name, raising=False)

        assert MegapotConfig.from_env() == MegapotConfig()


class TestSponsorshipConfig:

    def test_available_needs_endpoint_and_enabled(self):
        assert SponsorshipConfig(endpoint_url="https://pm.example.com", enabled=True).available is True
        assert SponsorshipConfig(endpoint_url="https://pm.example.com", enabled=False).available is False
        assert SponsorshipConfig(endpoint_url=None, enabled=True).available is False

    def test_insecure_endpoint_rejected(self):
        with pytest.raises(ValidationError):
            SponsorshipConfig(endpoint_url="http://pm.example.com")

    def test_empty_endpoint_means_none(self):
        assert SponsorshipConfig(endpoint_url="").endpoint_url is None


class TestNetworkConfig:
    """Test NetworkConfig class."""

    def test_load_networks_cached(self):
        """Networks are cached after first load."""
        NetworkConfig._networks_cache = MOCK_NETWORKS

        with patch("importlib.resources.files") as mock_files:
            result = NetworkConfig.load_networks()
            mock_files.assert_not_called()

        assert result == MOCK_NETWORKS

    def test_packaged_base_preset(self):
        base = NetworkConfig.get_network("base")

        assert base["chainId"] == 8453
        assert base["usdc"] == constants.USDC_ADDRESS
        assert NetworkConfig.get_chain_id("base") == 8453

    def test_get_network_not_found(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS

        with pytest.raises(ValueError, match="Available networks: test-network"):
            NetworkConfig.get_network("missing")

    def test_rpc_url_precedence(self, monkeypatch):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        monkeypatch.delenv("TEST_NETWORK_RPC_URL", raising=False)

        assert NetworkConfig.get_rpc_url("test-network") == "https://test.example.com"

        monkeypatch.setenv("TEST_NETWORK_RPC_URL", "https://env.example.com")
        assert NetworkConfig.get_rpc_url("test-network") == "https://env.example.com"
        assert NetworkConfig.get_rpc_url("test-network", override="https://o.example.com") == "https://o.example.com"

    def test_config_for_network(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS

        config = MegapotConfig.for_network("test-network", gas_limit=99_000)

        assert config.chain_id == 123
        assert config.megapot_address == "0x2222222222222222222222222222222222222222"
        assert config.explorer_url == "https://explorer.example.com"
        assert config.gas_limit == 99_000
