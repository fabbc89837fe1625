"""
Tests for liquidity-drop rug detection (is_liquidity_rug, detect_rug_pulls).
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from backend_devscore.analysis_engine import rug_detection
from backend_devscore.analysis_engine.rug_detection import detect_rug_pulls, is_liquidity_rug

DAY_SEC = 86400


@pytest.mark.parametrize(
    ("previous", "current", "rugged"),
    [
        ("5000", "900", True),
        ("5000", "1000", False),  # exactly 20% retained
        ("1000", "0", False),  # pool never above the $1000 floor
        ("1001", "0", True),
        ("5000", None, True),  # no liquidity reported reads as drained
        ("5000", "n/a", False),  # unreadable observation is not evidence
        (None, "0", False),
        (25000.0, 4999.99, True),
    ],
)
def test_is_liquidity_rug(previous, current, rugged):
    assert is_liquidity_rug(previous, current) is rugged


def _token(storage, address):
    return storage.first(
        "SELECT status, rug_detected_at FROM tokens WHERE contract_address = :a", {"a": address}
    )


def test_detect_marks_token_and_rescores_dev(storage, add_dev, add_token, now):
    add_dev("d1")
    add_token("d1", contract_address="t-drain", liquidity="10000", created_at=now - DAY_SEC)
    add_token("d1", contract_address="t-ok", liquidity="10000", created_at=now)
    add_token("d1", contract_address="t-old", liquidity="10000", created_at=now - 8 * DAY_SEC)
    add_token("d1", contract_address="t-unobserved", liquidity="10000", created_at=now)

    rugged = detect_rug_pulls(storage, {"t-drain": "500", "t-ok": "9000", "t-old": "0"}, now=now)

    assert rugged == ["t-drain"]
    assert _token(storage, "t-drain") == {"status": "rugged", "rug_detected_at": now}
    assert _token(storage, "t-ok")["status"] == "active"
    # outside the 7-day watch window
    assert _token(storage, "t-old")["status"] == "active"

    dev = storage.first("SELECT score, tier, rug_count, updated_at FROM devs WHERE id = 'd1'")
    assert dev["rug_count"] == 1
    assert dev["score"] == 35
    assert dev["tier"] == "bronze"
    assert dev["updated_at"] == now


def test_detect_skips_rugged_and_unobserved_tokens(storage, add_dev, add_token, now):
    add_dev("d1")
    add_token("d1", contract_address="t-gone", status="rugged", liquidity="10000")
    add_token("d1", contract_address="t-live", liquidity="10000")

    assert detect_rug_pulls(storage, {"t-gone": "0", "t-other": "0"}, now=now) == []
    assert storage.first("SELECT updated_at FROM devs WHERE id = 'd1'")["updated_at"] is None


def test_detect_continues_after_mark_failure():
    storage = MagicMock()
    storage.all.return_value = [
        {"id": 1, "contract_address": "A", "chain": "solana", "liquidity": "5000", "creator_dev_id": "da"},
        {"id": 2, "contract_address": "B", "chain": "solana", "liquidity": "5000", "creator_dev_id": "db"},
    ]
    storage.run.side_effect = [RuntimeError("locked"), 1]

    with patch.object(rug_detection, "update_dev_stats") as update:
        rugged = detect_rug_pulls(storage, {"A": "0", "B": "0"}, now=1_700_000_000)

    assert rugged == ["B"]
    assert [c.args[1] for c in update.call_args_list] == ["db"]


def test_detect_rescores_each_dev_once(storage, add_dev, add_token, now):
    add_dev("d1")
    add_token("d1", contract_address="t1", liquidity="2000")
    add_token("d1", contract_address="t2", liquidity="3000")

    with patch.object(rug_detection, "update_dev_stats") as update:
        rugged = detect_rug_pulls(storage, {"t1": "100", "t2": "100"}, now=now)

    assert sorted(rugged) == ["t1", "t2"]
    update.assert_called_once()
    assert update.call_args.args[1] == "d1"
