"""
Dev score batch runner.

- update_all_dev_scores(): refresh every dev, one at a time.
- update_stale_dev_scores(): refresh devs not updated within stale_after_sec, busiest first.
- run_periodic_worker(): background loop calling update_stale_dev_scores every interval.
  Started by the FastAPI lifespan; runs in a daemon thread, never blocks the API.

A failure for one dev is logged with its id and the batch moves on; that dev
keeps its previous score until the next run. No retries.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any

from backend_devscore.analysis_engine.dev_stats import update_dev_stats
from backend_devscore.analysis_engine.scorer import ScoringConfig
from backend_devscore.database.database import StorageHandle
from backend_devscore.devscore_logging import bind_dev, get_logger

logger = get_logger(__name__)

DEFAULT_REFRESH_INTERVAL_SEC = 300.0
DEFAULT_STALE_AFTER_SEC = 300
DEFAULT_BATCH_LIMIT = 50
SHUTDOWN_JOIN_TIMEOUT_SEC = 15.0


@dataclass
class PeriodicRunnerConfig:
    """Config for the periodic background runner (stale devs -> recompute score)."""

    interval_sec: float = DEFAULT_REFRESH_INTERVAL_SEC
    stale_after_sec: int = DEFAULT_STALE_AFTER_SEC
    batch_limit: int = DEFAULT_BATCH_LIMIT
    scoring_config: ScoringConfig | None = None


def _refresh_devs(
    storage: StorageHandle,
    dev_ids: list[Any],
    config: ScoringConfig | None,
    stop_event: threading.Event | None = None,
) -> tuple[int, int, int]:
    """
    Run update_dev_stats for each id in order.
    Returns (processed, skipped, errors); skipped devs had no tokens to score.
    """
    processed = 0
    skipped = 0
    errors = 0
    for dev_id in dev_ids:
        if stop_event is not None and stop_event.is_set():
            break
        try:
            result = update_dev_stats(storage, dev_id, config=config)
        except Exception as e:
            errors += 1
            bind_dev(dev_id, __name__).error("dev_score_update_failed", error=str(e), exc_info=True)
            continue
        if result is None:
            skipped += 1
        else:
            processed += 1
    return processed, skipped, errors


def update_all_dev_scores(storage: StorageHandle, *, config: ScoringConfig | None = None) -> None:
    """
    Refresh every dev's score sequentially.

    Per-dev failures are caught and logged; they never abort the batch.
    A failure listing devs is logged and ends the run. Never raises.
    """
    try:
        rows = storage.all("SELECT id FROM devs")
    except Exception as e:
        logger.error("dev_scores_batch_failed", error=str(e), exc_info=True)
        return
    dev_ids = [row["id"] for row in rows]
    started = time.monotonic()
    processed, skipped, errors = _refresh_devs(storage, dev_ids, config)
    logger.info(
        "dev_scores_batch_done",
        devs=len(dev_ids),
        processed=processed,
        skipped=skipped,
        errors=errors,
        duration_sec=round(time.monotonic() - started, 3),
    )


def get_stale_dev_ids(
    storage: StorageHandle,
    *,
    stale_after_sec: int = DEFAULT_STALE_AFTER_SEC,
    limit: int = DEFAULT_BATCH_LIMIT,
    now_ts: int | None = None,
) -> list[Any]:
    """
    Devs never scored or scored more than stale_after_sec ago, highest volume first.

    Devs without tokens are left out: update_dev_stats never writes their
    updated_at, so they would stay stale forever and crowd out scorable devs.
    """
    now_ts = now_ts if now_ts is not None else int(time.time())
    rows = storage.all(
        """
        SELECT id FROM devs
        WHERE (updated_at IS NULL OR updated_at < :cutoff)
          AND EXISTS (SELECT 1 FROM tokens t WHERE t.creator_dev_id = devs.id)
        ORDER BY CAST(total_volume AS REAL) DESC, id ASC
        LIMIT :limit
        """,
        {"cutoff": now_ts - stale_after_sec, "limit": limit},
    )
    return [row["id"] for row in rows]


def update_stale_dev_scores(
    storage: StorageHandle,
    *,
    stale_after_sec: int = DEFAULT_STALE_AFTER_SEC,
    limit: int = DEFAULT_BATCH_LIMIT,
    config: ScoringConfig | None = None,
    now_ts: int | None = None,
    stop_event: threading.Event | None = None,
) -> int:
    """Refresh up to limit stale devs. Returns the number whose score was written."""
    dev_ids = get_stale_dev_ids(storage, stale_after_sec=stale_after_sec, limit=limit, now_ts=now_ts)
    if not dev_ids:
        logger.debug("stale_devs_none")
        return 0
    processed, skipped, errors = _refresh_devs(storage, dev_ids, config, stop_event)
    logger.info(
        "stale_dev_scores_done",
        candidates=len(dev_ids),
        processed=processed,
        skipped=skipped,
        errors=errors,
    )
    return processed


def run_periodic_worker(
    storage: StorageHandle,
    config: PeriodicRunnerConfig,
    stop_event: threading.Event,
) -> None:
    """
    Every interval_sec, refresh stale dev scores until stop_event is set.
    A crash inside a tick is logged and the loop continues.
    """
    interval = max(1.0, config.interval_sec)
    logger.info(
        "periodic_runner_started",
        interval_sec=interval,
        stale_after_sec=config.stale_after_sec,
        batch_limit=config.batch_limit,
    )
    tick_count = 0
    while not stop_event.is_set():
        tick_start = time.monotonic()
        tick_count += 1
        try:
            processed = update_stale_dev_scores(
                storage,
                stale_after_sec=config.stale_after_sec,
                limit=config.batch_limit,
                config=config.scoring_config,
                stop_event=stop_event,
            )
            logger.debug("periodic_tick_done", tick=tick_count, processed=processed)
        except Exception as e:
            logger.error("periodic_tick_failed", tick=tick_count, error=str(e), exc_info=True)
        elapsed = time.monotonic() - tick_start
        stop_event.wait(timeout=max(0.0, interval - elapsed))
    logger.info("periodic_runner_stopped", ticks=tick_count)
