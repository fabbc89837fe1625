"""
Read queries over devs and tokens for the HTTP API.

Plain functions taking a StorageHandle; every value is a bind parameter.
Sort columns are chosen from a fixed whitelist before being placed in SQL.
"""

from __future__ import annotations

from typing import Any

from backend_devscore.database.database import StorageHandle
from backend_devscore.devscore_logging import get_logger

logger = get_logger(__name__)

LEADERBOARD_SORT_FIELDS = ("score", "total_launches", "total_volume")
DEFAULT_SORT_FIELD = "score"
MAX_PAGE_SIZE = 100
HISTORY_LIMIT = 20


def clamp_page(page: int, limit: int) -> tuple[int, int, int]:
    """Return (page, limit, offset) with page >= 1 and 1 <= limit <= MAX_PAGE_SIZE."""
    page = max(1, page)
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    return page, limit, (page - 1) * limit


def get_dev_by_address(storage: StorageHandle, address: str) -> dict[str, Any] | None:
    return storage.first(
        """
        SELECT id, wallet_address, alias, score, tier, verified, total_launches,
               successful_launches, rug_count, total_volume, avg_ath_multiplier, updated_at
        FROM devs
        WHERE wallet_address = :address
        """,
        {"address": address},
    )


def get_dev_rank(storage: StorageHandle, score: int) -> int:
    """1-based rank: number of devs with a strictly higher score, plus one."""
    row = storage.first(
        "SELECT COUNT(*) + 1 AS rank FROM devs WHERE score > :score",
        {"score": score},
    )
    return int(row["rank"]) if row else 0


def get_dev_token_history(
    storage: StorageHandle,
    dev_id: str,
    *,
    limit: int = HISTORY_LIMIT,
    offset: int = 0,
) -> list[dict[str, Any]]:
    """Tokens launched by a dev, newest first."""
    return storage.all(
        """
        SELECT contract_address, chain, name, symbol, status, market_cap,
               ath_market_cap, created_at, rug_detected_at
        FROM tokens
        WHERE creator_dev_id = :dev_id
        ORDER BY created_at DESC
        LIMIT :limit OFFSET :offset
        """,
        {"dev_id": dev_id, "limit": limit, "offset": offset},
    )


def get_leaderboard(
    storage: StorageHandle,
    *,
    page: int = 1,
    limit: int = 20,
    sort_by: str = DEFAULT_SORT_FIELD,
    chain: str | None = None,
) -> tuple[list[dict[str, Any]], int]:
    """
    Return (rows, total) for devs with at least one launch.

    sort_by outside LEADERBOARD_SORT_FIELDS falls back to score. chain limits
    the board to devs with at least one token on that chain.
    """
    _, limit, offset = clamp_page(page, limit)
    order_by = sort_by if sort_by in LEADERBOARD_SORT_FIELDS else DEFAULT_SORT_FIELD
    if order_by == "total_volume":
        order_sql = "CAST(d.total_volume AS REAL)"
    else:
        order_sql = f"d.{order_by}"

    where = "d.total_launches > 0"
    params: dict[str, Any] = {"limit": limit, "offset": offset}
    if chain:
        where += " AND EXISTS (SELECT 1 FROM tokens t WHERE t.creator_dev_id = d.id AND t.chain = :chain)"
        params["chain"] = chain

    rows = storage.all(
        f"""
        SELECT d.wallet_address AS address, d.alias, d.score, d.tier, d.verified,
               d.total_launches, d.successful_launches, d.rug_count, d.total_volume,
               d.avg_ath_multiplier,
               CASE WHEN d.total_launches > 0
                    THEN CAST(d.successful_launches AS REAL) / d.total_launches
                    ELSE 0
               END AS win_rate
        FROM devs d
        WHERE {where}
        ORDER BY {order_sql} DESC, d.id ASC
        LIMIT :limit OFFSET :offset
        """,
        params,
    )
    count_row = storage.first(
        f"SELECT COUNT(*) AS count FROM devs d WHERE {where}",
        {k: v for k, v in params.items() if k == "chain"},
    )
    total = int(count_row["count"]) if count_row else 0
    logger.debug("leaderboard_loaded", sort_by=order_by, chain=chain, rows=len(rows), total=total)
    return rows, total
