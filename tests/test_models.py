"""
Tests for data models.
"""
import pytest
from pydantic import ValidationError

from megapot_sdk.exceptions import InvalidIntentError
from megapot_sdk.models import (
    ApiResponse, PoolInfo, PurchaseIntent, PurchaseKind, SettlementEvent, TxReceipt
)
from tests.test_helpers.fake_chain import TEST_PAYER


def test_intent_constructors():
    solo = PurchaseIntent.solo(3, TEST_PAYER)
    pool = PurchaseIntent.pool(5, 2, TEST_PAYER)

    assert solo.kind == PurchaseKind.SOLO and solo.pool_id is None
    assert pool.kind == PurchaseKind.POOL and pool.pool_id == 5
    solo.check()
    pool.check()


def test_intent_is_immutable():
    intent = PurchaseIntent.solo(3, TEST_PAYER)
    with pytest.raises(ValidationError):
        intent.ticket_count = 4


@pytest.mark.parametrize("intent, message", [
    (PurchaseIntent.solo(0, TEST_PAYER), "at least 1"),
    (PurchaseIntent(kind="pool", ticket_count=1, payer=TEST_PAYER), "require a pool_id"),
    (PurchaseIntent(kind="solo", ticket_count=1, payer=TEST_PAYER, pool_id=1), "must not carry"),
    (PurchaseIntent.pool(-1, 1, TEST_PAYER), "non-negative"),
    (PurchaseIntent.solo(1, ""), "no payer"),
])
def test_intent_check_rejects(intent, message):
    with pytest.raises(InvalidIntentError, match=message):
        intent.check()


def test_settlement_event_ordering_key():
    event = SettlementEvent(
        timestamp=1, winner_address=TEST_PAYER, winning_ticket_index=0, win_amount=10,
        total_tickets_basis_points=100, block_number=97_500, log_index=3
    )
    assert event.ordering_key == (97_500, 3)


def test_tx_receipt_aliases():
    receipt = TxReceipt.model_validate({
        "transactionHash": "0xabc",
        "blockNumber": 1,
        "blockHash": "0xdef",
        "status": 1,
        "gasUsed": 21000,
        "from": TEST_PAYER,
    })

    assert receipt.tx_hash == "0xabc"
    assert receipt.to_address is None
    assert receipt.logs == []


def test_api_response_of_list():
    response = ApiResponse[list].model_validate({"success": True, "data": [1, 2]})
    assert response.data == [1, 2]
    assert response.error is None


def test_pool_info_accepts_field_names_and_aliases():
    by_alias = PoolInfo.model_validate({
        "id": "p", "participants": 1, "maxParticipants": 2, "ticketPrice": 1.0, "status": "active", "endTime": 3
    })
    by_name = PoolInfo(id="p", participants=1, max_participants=2, ticket_price=1.0, status="active", end_time=3)

    assert by_alias == by_name
