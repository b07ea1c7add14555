"""
Tests for the SponsorshipRouter.
"""
import logging

import pytest
import requests

from megapot_sdk.config import SponsorshipConfig
from megapot_sdk.exceptions import SponsorUnavailableError, TransactionFailedError
from megapot_sdk.models import PreparedCall
from megapot_sdk.sponsorship import SponsorshipRouter
from tests.test_helpers.fake_chain import TEST_JACKPOT, TEST_SPONSOR_URL

CALL = PreparedCall(to=TEST_JACKPOT, data="buySoloTickets(1)", description="test purchase")
ACCEPTED = {"jsonrpc": "2.0", "id": 1, "result": {"paymasterAndData": "0xdeadbeef"}}


@pytest.fixture
def enabled():
    return SponsorshipConfig(endpoint_url=TEST_SPONSOR_URL, enabled=True, max_gas_units=50_000)


def test_accepted_sponsorship_still_sends_normally(fake_chain, enabled, requests_mock):
    requests_mock.post(TEST_SPONSOR_URL, json=ACCEPTED)
    router = SponsorshipRouter(fake_chain, enabled)

    outcome = router.try_send(CALL, 40_000)

    assert outcome.sponsored is True
    assert outcome.tx_hash.startswith("0x")
    assert len(fake_chain.sent) == 1
    assert fake_chain.sent[0]["gas"] == 40_000

    body = requests_mock.last_request.json()
    assert body["method"] == "pm_sponsorUserOperation"
    assert body["params"][0]["callData"] == CALL.data
    assert body["params"][0]["callGasLimit"] == hex(40_000)


def test_gas_over_limit_makes_no_sponsor_call(fake_chain, enabled, requests_mock):
    route = requests_mock.post(TEST_SPONSOR_URL, json=ACCEPTED)
    router = SponsorshipRouter(fake_chain, enabled)

    outcome = router.try_send(CALL, 50_001)

    assert outcome.sponsored is False
    assert not route.called
    assert len(fake_chain.sent) == 1


def test_gas_at_limit_is_eligible(fake_chain, enabled):
    assert SponsorshipRouter(fake_chain, enabled).should_sponsor(50_000) is True


@pytest.mark.parametrize("config", [
    SponsorshipConfig(endpoint_url=TEST_SPONSOR_URL, enabled=False),
    SponsorshipConfig(endpoint_url=None, enabled=True),
    SponsorshipConfig(),
])
def test_unavailable_sponsorship_is_skipped(fake_chain, config, requests_mock):
    route = requests_mock.post(TEST_SPONSOR_URL, json=ACCEPTED)
    router = SponsorshipRouter(fake_chain, config)

    outcome = router.try_send(CALL, 10_000)

    assert outcome.sponsored is False
    assert not route.called
    assert len(fake_chain.sent) == 1


@pytest.mark.parametrize("mock_kwargs", [
    {"exc": requests.exceptions.ConnectTimeout},
    {"exc": requests.exceptions.ConnectionError},
    {"status_code": 500, "json": {"error": "down"}},
    {"status_code": 200, "text": "not json"},
    {"status_code": 200, "json": {"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "rejected"}}},
    {"status_code": 200, "json": {"jsonrpc": "2.0", "id": 1}},
    {"status_code": 200, "json": {"jsonrpc": "2.0", "id": 1, "error": {}, "result": {"paymasterAndData": "0x"}}},
    {"status_code": 200, "json": {"jsonrpc": "2.0", "id": 1, "error": "", "result": {"paymasterAndData": "0x"}}},
    {"status_code": 200, "json": ["unexpected"]},
])
def test_sponsor_failures_fall_back_to_normal_send(fake_chain, enabled, requests_mock, mock_kwargs):
    requests_mock.post(TEST_SPONSOR_URL, **mock_kwargs)
    router = SponsorshipRouter(fake_chain, enabled)

    outcome = router.try_send(CALL, 40_000)

    assert outcome.sponsored is False
    assert requests_mock.call_count == 1
    assert len(fake_chain.sent) == 1


def test_request_sponsorship_reports_error_field(fake_chain, enabled, requests_mock):
    requests_mock.post(TEST_SPONSOR_URL, json={"error": {"message": "policy rejected"}})
    router = SponsorshipRouter(fake_chain, enabled)

    with pytest.raises(SponsorUnavailableError, match="policy rejected"):
        router.request_sponsorship(CALL, 40_000)


def test_repeated_sponsor_failures_warn_once(fake_chain, enabled, requests_mock, caplog):
    requests_mock.post(TEST_SPONSOR_URL, status_code=503)
    router = SponsorshipRouter(fake_chain, enabled)

    with caplog.at_level(logging.WARNING, logger="megapot_sdk.sponsorship"):
        router.try_send(CALL, 40_000)
        router.try_send(CALL, 40_000)

    warnings = [r for r in caplog.records if "Sponsorship failed" in r.getMessage()]
    assert len(warnings) == 1
    assert len(fake_chain.sent) == 2


def test_send_failure_propagates(fake_chain, enabled, requests_mock):
    requests_mock.post(TEST_SPONSOR_URL, json=ACCEPTED)
    fake_chain.failing_sends.add(TEST_JACKPOT.lower())
    router = SponsorshipRouter(fake_chain, enabled)

    with pytest.raises(TransactionFailedError):
        router.try_send(CALL, 40_000)

    assert len(fake_chain.sent) == 1


def test_explicit_call_gas_wins(fake_chain):
    router = SponsorshipRouter(fake_chain, SponsorshipConfig())
    call = PreparedCall(to=TEST_JACKPOT, data="0x", gas=77_000)

    router.try_send(call, 40_000)

    assert fake_chain.sent[0]["gas"] == 77_000
