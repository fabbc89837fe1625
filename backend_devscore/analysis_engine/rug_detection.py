"""
Liquidity-drop rug detection for recently launched tokens.

A token is marked rugged when its pool held more than RUG_MIN_PREVIOUS_LIQUIDITY
and the latest observation retains less than RUG_RETAINED_RATIO of it. Only
active tokens launched within RUG_WATCH_WINDOW_SEC are checked.

Liquidity observations are passed in (contract_address -> current USD
liquidity); fetching them from a DEX API is the caller's job. Marking a token
rugged refreshes its creator's score, which recomputes rug_count.
"""

from __future__ import annotations

import math
import time
from typing import Any, Mapping

from backend_devscore.analysis_engine.dev_stats import update_dev_stats
from backend_devscore.analysis_engine.scorer import RUGGED_STATUS, ScoringConfig
from backend_devscore.database.database import StorageHandle
from backend_devscore.devscore_logging import get_logger

logger = get_logger(__name__)

RUG_MIN_PREVIOUS_LIQUIDITY = 1000.0
RUG_RETAINED_RATIO = 0.2
RUG_WATCH_WINDOW_SEC = 7 * 86400

SELECT_RUG_WATCH_TOKENS = """
    SELECT id, contract_address, chain, liquidity, creator_dev_id
    FROM tokens
    WHERE status = 'active' AND created_at > :since
"""

MARK_TOKEN_RUGGED = """
    UPDATE tokens SET status = :status, rug_detected_at = :now
    WHERE id = :token_id AND status = 'active'
"""


def _as_liquidity(value: Any) -> float:
    """Missing liquidity reads as 0; an unreadable value is NaN and never compares as a rug."""
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def is_liquidity_rug(previous_liquidity: Any, current_liquidity: Any) -> bool:
    """True when more than 80% of a pool that held over $1000 is gone."""
    previous = _as_liquidity(previous_liquidity)
    current = _as_liquidity(current_liquidity)
    return previous > RUG_MIN_PREVIOUS_LIQUIDITY and current < previous * RUG_RETAINED_RATIO


def detect_rug_pulls(
    storage: StorageHandle,
    current_liquidity: Mapping[str, Any],
    *,
    now: int | None = None,
    config: ScoringConfig | None = None,
) -> list[str]:
    """
    Mark watched tokens whose liquidity collapsed as rugged.

    Tokens without an entry in current_liquidity are skipped. A failure on one
    token is logged and the pass continues. Returns the contract addresses
    marked rugged.
    """
    now = now if now is not None else int(time.time())
    tokens = storage.all(SELECT_RUG_WATCH_TOKENS, {"since": now - RUG_WATCH_WINDOW_SEC})
    rugged: list[str] = []
    affected_devs: list[str] = []
    for token in tokens:
        address = token["contract_address"]
        if address not in current_liquidity:
            continue
        if not is_liquidity_rug(token.get("liquidity"), current_liquidity[address]):
            continue
        try:
            storage.run(MARK_TOKEN_RUGGED, {"status": RUGGED_STATUS, "now": now, "token_id": token["id"]})
        except Exception as e:
            logger.error("rug_mark_failed", contract_address=address, error=str(e), exc_info=True)
            continue
        logger.warning(
            "rug_detected",
            contract_address=address,
            chain=token.get("chain"),
            dev_id=token.get("creator_dev_id"),
            previous_liquidity=token.get("liquidity"),
            current_liquidity=current_liquidity[address],
        )
        rugged.append(address)
        dev_id = token.get("creator_dev_id")
        if dev_id and dev_id not in affected_devs:
            affected_devs.append(dev_id)

    for dev_id in affected_devs:
        try:
            update_dev_stats(storage, dev_id, config=config, now=now)
        except Exception as e:
            logger.error("dev_score_update_failed", dev_id=dev_id, error=str(e), exc_info=True)

    logger.info("rug_detection_done", checked=len(tokens), rugged=len(rugged), devs=len(affected_devs))
    return rugged
