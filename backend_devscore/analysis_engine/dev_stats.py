"""
Dev statistics aggregation: token rows -> DevStats -> score written back to devs.

update_dev_stats issues one read for the dev's tokens, one read for the
verified flag, and one update. The three statements are not wrapped in a
transaction; a concurrent refresh of the same dev is last-write-wins.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from backend_devscore.analysis_engine.models import (
    DevScore,
    DevStats,
    EpochMillis,
    EpochSeconds,
    millis_to_seconds,
    seconds_to_millis,
)
from backend_devscore.analysis_engine.scorer import (
    DEFAULT_SCORING_CONFIG,
    RUGGED_STATUS,
    ScoringConfig,
    calculate_dev_score,
    is_successful_launch,
    parse_numeric_or_default,
)
from backend_devscore.database.database import StorageHandle
from backend_devscore.devscore_logging import get_logger

logger = get_logger(__name__)

# Trade volume is not tracked per token yet; stored and scored as zero.
UNTRACKED_VOLUME = "0"

SELECT_DEV_TOKENS = """
    SELECT status, market_cap, ath_market_cap, created_at
    FROM tokens
    WHERE creator_dev_id = :dev_id
"""

SELECT_DEV_VERIFIED = "SELECT verified FROM devs WHERE id = :dev_id"

UPDATE_DEV_SCORE = """
    UPDATE devs SET
        score = :score,
        tier = :tier,
        total_launches = :total_launches,
        successful_launches = :successful_launches,
        rug_count = :rug_count,
        total_volume = :total_volume,
        avg_ath_multiplier = :avg_ath_multiplier,
        updated_at = :updated_at
    WHERE id = :dev_id
"""


@dataclass
class TokenAggregate:
    """Running totals over a dev's token rows."""

    total_launches: int = 0
    successful_launches: int = 0
    rug_count: int = 0
    ath_sum: float = 0.0
    last_active_at: EpochSeconds = EpochSeconds(0)

    def to_stats(self, total_volume: str = UNTRACKED_VOLUME) -> DevStats:
        n = self.total_launches
        return DevStats(
            total_launches=n,
            successful_launches=self.successful_launches,
            rug_count=self.rug_count,
            total_volume=total_volume,
            avg_ath_multiplier=self.ath_sum / n if n > 0 else 0.0,
            win_rate=self.successful_launches / n if n > 0 else 0.0,
            last_active_at=seconds_to_millis(self.last_active_at),
        )


def aggregate_token_stats(rows: Iterable[Mapping[str, Any]]) -> TokenAggregate:
    """
    Fold token rows (status, market_cap, ath_market_cap, created_at) into totals.

    market_cap is the launch (initial) market cap. created_at is Unix seconds;
    NULL created_at does not move last_active_at.
    """
    agg = TokenAggregate()
    for row in rows:
        agg.total_launches += 1
        status = row.get("status")
        if status == RUGGED_STATUS:
            agg.rug_count += 1
        if is_successful_launch(row.get("ath_market_cap"), row.get("market_cap"), status):
            agg.successful_launches += 1
        agg.ath_sum += parse_numeric_or_default(row.get("ath_market_cap"), 0.0)
        created_at = row.get("created_at")
        if created_at is not None and int(created_at) > agg.last_active_at:
            agg.last_active_at = EpochSeconds(int(created_at))
    return agg


def update_dev_stats(
    storage: StorageHandle,
    dev_id: str,
    *,
    config: ScoringConfig | None = None,
    now: float | None = None,
) -> DevScore | None:
    """
    Recompute one dev's stats and score from their tokens and persist them.

    A dev with no tokens is left untouched and None is returned. Storage errors
    propagate to the caller.

    Args:
        storage: all/first/run storage handle.
        dev_id: devs.id (also tokens.creator_dev_id).
        config: Scoring weights; defaults to DEFAULT_SCORING_CONFIG.
        now: Reference time in Unix seconds; defaults to time.time().

    Returns:
        The DevScore written, or None when the dev has no tokens.
    """
    cfg = config or DEFAULT_SCORING_CONFIG
    now = now if now is not None else time.time()

    tokens = storage.all(SELECT_DEV_TOKENS, {"dev_id": dev_id})
    if not tokens:
        logger.debug("dev_stats_skip_no_tokens", dev_id=dev_id)
        return None

    agg = aggregate_token_stats(tokens)
    stats = agg.to_stats()

    dev = storage.first(SELECT_DEV_VERIFIED, {"dev_id": dev_id})
    is_verified = dev is not None and dev.get("verified") == 1

    now_ms = EpochMillis(int(now * 1000))
    result = calculate_dev_score(stats, is_verified, config=cfg, now_ms=now_ms)

    storage.run(
        UPDATE_DEV_SCORE,
        {
            "score": result.score,
            "tier": result.tier.value,
            "total_launches": stats.total_launches,
            "successful_launches": stats.successful_launches,
            "rug_count": stats.rug_count,
            "total_volume": stats.total_volume,
            "avg_ath_multiplier": stats.avg_ath_multiplier,
            "updated_at": millis_to_seconds(now_ms),
            "dev_id": dev_id,
        },
    )
    logger.info(
        "dev_score_updated",
        dev_id=dev_id,
        score=result.score,
        tier=result.tier.value,
        total_launches=stats.total_launches,
        rug_count=stats.rug_count,
        verified=is_verified,
    )
    return result
