import pytest

from gachadash.schemas.wallet import PayloadKind
from gachadash.services.normalizer import (
    decode_wallet_payload,
    extract_inventory,
    extract_transactions,
    normalize,
    transaction_amount,
)


class TestNormalize:
    """Envelope normalization for flat and paginated list fields"""

    def test_flat_list_is_wrapped_as_single_page(self):
        items = [{"txHash": "0x1"}, {"txHash": "0x2"}, {"txHash": "0x3"}]

        env = normalize(items)

        assert env.items == items
        assert env.page == 1
        assert env.limit == 3
        assert env.total == 3
        assert env.totalPages == 1

    def test_empty_list(self):
        env = normalize([])

        assert env.items == []
        assert env.totalPages == 1
        assert env.total == 0

    def test_paginated_envelope_is_passed_through(self):
        raw = {"data": [{"id": "a"}, {"id": "b"}], "page": 2, "limit": 2, "total": 5, "totalPages": 3}

        env = normalize(raw)

        assert env.items == [{"id": "a"}, {"id": "b"}]
        assert env.page == 2
        assert env.limit == 2
        assert env.total == 5
        assert env.totalPages == 3

    @pytest.mark.parametrize(
        "total,limit,expected_pages",
        [(0, 20, 1), (20, 20, 1), (21, 20, 2), (95, 10, 10)],
    )
    def test_total_pages_matches_ceil_when_missing(self, total, limit, expected_pages):
        env = normalize({"data": [], "total": total, "limit": limit})

        assert env.totalPages == expected_pages

    def test_paginated_defaults_from_data_length(self):
        env = normalize({"data": [1, 2, 3, 4]})

        assert env.page == 1
        assert env.limit == 4
        assert env.total == 4
        assert env.totalPages == 1

    def test_page_is_clamped_to_total_pages(self):
        env = normalize({"data": [], "page": 9, "limit": 10, "total": 15, "totalPages": 2})

        assert env.page == 2

    @pytest.mark.parametrize("raw", [None, "oops", 42, {"data": "nope"}, {"items": []}])
    def test_malformed_input_degrades_to_empty_envelope(self, raw):
        env = normalize(raw)

        assert env.model_dump() == {
            "items": [],
            "page": 1,
            "limit": 20,
            "total": 0,
            "totalPages": 1,
        }

    def test_transactions_and_inventory_are_independent(self):
        payload = {
            "transactions": [{"txHash": "0x1"}],
            "inventoryWins": {"data": [{"id": "x"}], "page": 1, "limit": 10, "total": 11, "totalPages": 2},
        }

        tx_env = extract_transactions(payload["transactions"])
        inv_env = extract_inventory(payload["inventoryWins"])

        assert tx_env.totalPages == 1
        assert inv_env.totalPages == 2
        assert inv_env.total == 11


class TestDecodeWalletPayload:
    """Schema-generation detection"""

    def test_current_payload(self):
        raw = {
            "wallet": "0xabc",
            "username": "ash",
            "totalSpent": 100,
            "totalWinnings": 90,
            "transactions": {"data": [], "page": 1, "limit": 20, "total": 0, "totalPages": 1},
        }

        decoded = decode_wallet_payload(raw)

        assert decoded.kind == PayloadKind.CURRENT
        assert decoded.payload.username == "ash"

    def test_current_detected_from_transaction_amount_field(self):
        raw = {"wallet": "0xabc", "transactions": [{"txHash": "0x1", "amount": 10}]}

        assert decode_wallet_payload(raw).kind == PayloadKind.CURRENT

    def test_legacy_payload(self):
        raw = {
            "wallet": "0xabc",
            "totalSpent": 30,
            "totalPacks": 2,
            "packBreakdown": [{"packName": "A", "packAmount": 10, "count": 1, "totalSpent": 10}],
            "transactions": [{"txHash": "0x1", "packAmount": 10, "loggedAt": "2024-01-01T00:00:00Z"}],
        }

        decoded = decode_wallet_payload(raw)

        assert decoded.kind == PayloadKind.LEGACY
        assert decoded.payload.transactions[0].packAmount == 10

    @pytest.mark.parametrize("raw", [None, [], "text", {"unrelated": True}])
    def test_absent_payload(self, raw):
        decoded = decode_wallet_payload(raw)

        assert decoded.kind == PayloadKind.ABSENT
        assert decoded.payload is None


def test_transaction_amount_prefers_current_field():
    assert transaction_amount({"amount": 25, "packAmount": 10}) == 25
    assert transaction_amount({"packAmount": 10}) == 10
    assert transaction_amount({}) == 0
    assert transaction_amount({"amount": "bad"}) == 0
