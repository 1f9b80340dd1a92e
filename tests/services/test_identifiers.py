"""
Tests for transaction identifier generation.
"""

import re

import pytest

from wallet_ledger.services.identifiers import generate_transaction_id, to_base36


def test_format():
    txn_id = generate_transaction_id()
    assert re.fullmatch(r"QP[0-9A-Z]+", txn_id)
    assert txn_id == txn_id.upper()


def test_timestamp_component_is_embedded():
    txn_id = generate_transaction_id(now_ms=1_700_000_000_000)
    assert txn_id.startswith("QP" + to_base36(1_700_000_000_000).upper())
    assert len(txn_id) == 2 + len(to_base36(1_700_000_000_000)) + 8


def test_later_timestamps_sort_later():
    earlier = generate_transaction_id(now_ms=1_700_000_000_000)
    later = generate_transaction_id(now_ms=1_700_000_360_000)
    assert earlier[:10] < later[:10]


def test_same_millisecond_ids_differ():
    ids = {generate_transaction_id(now_ms=42) for _ in range(500)}
    assert len(ids) == 500


@pytest.mark.parametrize("value, expected", [
    (0, "0"),
    (35, "z"),
    (36, "10"),
    (1295, "zz"),
])
def test_to_base36(value, expected):
    assert to_base36(value) == expected


def test_to_base36_rejects_negative():
    with pytest.raises(ValueError):
        to_base36(-1)
