"""
Pytest fixtures for the Megapot SDK tests.
"""
import time

import pytest
from web3.providers.rpc import HTTPProvider

from megapot_sdk._rate_limited_log import reset_rate_limits
from megapot_sdk.config import MegapotConfig, NetworkConfig
from tests.test_helpers import TEST_RPC_URL
from tests.test_helpers.fake_chain import TEST_SPONSOR_URL, FakeChain


# Make time.sleep instantaneous so retries don't slow the suite down
@pytest.fixture(autouse=True)
def _fast_sleep(monkeypatch):
    monkeypatch.setattr(time, "sleep", lambda *_a, **_kw: None)


@pytest.fixture(autouse=True)
def _patch_http_provider(monkeypatch):
    """
    Stub every Web3 HTTP call so no DNS / network traffic is triggered.
    Works for all tests because it is autouse.
    """
    def _dummy(self, method, params=None, _=None):      # signature match
        if method in {"eth_chainId"}:
            return {"jsonrpc": "2.0", "id": 1, "result": "0x2105"}      # Base
        if method in {"eth_gasPrice"}:
            return {"jsonrpc": "2.0", "id": 1, "result": "0x3b9aca00"}  # 1 gwei
        return {"jsonrpc": "2.0", "id": 1, "result": "0x0"}

    monkeypatch.setattr(HTTPProvider, "make_request", _dummy, raising=True)


@pytest.fixture(autouse=True)
def _clean_state():
    """Reset module-level caches between tests"""
    reset_rate_limits()
    NetworkConfig._networks_cache = None
    yield
    reset_rate_limits()
    NetworkConfig._networks_cache = None


@pytest.fixture
def fake_chain():
    return FakeChain()


@pytest.fixture
def test_config():
    """Mainnet addresses, fast retries, sponsorship off"""
    return MegapotConfig(rpc_url=TEST_RPC_URL, max_retries=3)


@pytest.fixture
def sponsored_config():
    return MegapotConfig(
        rpc_url=TEST_RPC_URL,
        sponsorship={"endpoint_url": TEST_SPONSOR_URL, "enabled": True, "max_gas_units": 50_000},
    )
