"""
Dev reputation score computation — rules only, no ML.

score = base + win_rate_bonus + volume_bonus + verification_bonus
        - rug_penalty - inactive_penalty, clamped to 0–100.

Tiers:
- diamond: 90–100
- platinum: 80–89
- gold: 70–79
- silver: 50–69
- bronze: 0–49

Every component is computed independently and returned in ScoreBreakdown so a
score can be explained. Thresholds live in an immutable ScoringConfig passed
to the scorer; DEFAULT_SCORING_CONFIG is the production table.
"""

from __future__ import annotations

import math
import re
import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from backend_devscore.analysis_engine.models import (
    DevScore,
    DevStats,
    DevTier,
    EpochMillis,
    ScoreBreakdown,
)

MS_PER_DAY = 1000 * 60 * 60 * 24
DAYS_PER_MONTH = 30

RUGGED_STATUS = "rugged"
SUCCESS_ATH_MULTIPLE = 2.0

# Leading numeric prefix, the way lenient decimal-string parsers read "12.5abc" as 12.5
_NUMERIC_PREFIX = re.compile(r"^\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))")


@dataclass(frozen=True)
class VolumeTier:
    min_volume: float
    bonus: int


DEFAULT_VOLUME_TIERS: tuple[VolumeTier, ...] = (
    VolumeTier(1_000_000, 15),
    VolumeTier(500_000, 12),
    VolumeTier(100_000, 8),
    VolumeTier(10_000, 4),
    VolumeTier(0, 0),
)

DEFAULT_TIER_THRESHOLDS: tuple[tuple[int, DevTier], ...] = (
    (90, DevTier.DIAMOND),
    (80, DevTier.PLATINUM),
    (70, DevTier.GOLD),
    (50, DevTier.SILVER),
)


@dataclass(frozen=True)
class ScoringConfig:
    """Scoring weights and thresholds. Frozen; build a new one to experiment."""

    base_score: int = 50
    win_rate_multiplier: int = 20
    volume_tiers: tuple[VolumeTier, ...] = field(default_factory=lambda: DEFAULT_VOLUME_TIERS)
    rug_penalty_per_rug: int = 15
    rug_penalty_cap: int = 50
    inactive_days_threshold: int = 30
    inactive_penalty_per_month: int = 5
    inactive_penalty_cap: int = 20
    verification_bonus: int = 10
    tier_thresholds: tuple[tuple[int, DevTier], ...] = field(
        default_factory=lambda: DEFAULT_TIER_THRESHOLDS
    )
    min_score: int = 0
    max_score: int = 100

    def __post_init__(self) -> None:
        # First match wins, so both tables must be evaluated highest first
        object.__setattr__(
            self,
            "volume_tiers",
            tuple(sorted(self.volume_tiers, key=lambda t: t.min_volume, reverse=True)),
        )
        object.__setattr__(
            self,
            "tier_thresholds",
            tuple(sorted(self.tier_thresholds, key=lambda t: t[0], reverse=True)),
        )


DEFAULT_SCORING_CONFIG = ScoringConfig()


def parse_numeric_or_default(value: Any, default: float) -> float:
    """
    Lenient numeric parse that never raises.

    Strings are read up to the end of their leading numeric prefix ("12.5abc" -> 12.5).
    None, unparseable input, NaN and zero all return default; zero maps to the
    default so that a zero initial market cap can be used as a divisor.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float, Decimal)):
        parsed = float(value)
    else:
        match = _NUMERIC_PREFIX.match(str(value))
        if match is None:
            return default
        text = match.group(1).replace("Infinity", "inf")
        try:
            parsed = float(text)
        except ValueError:
            return default
    if math.isnan(parsed) or parsed == 0:
        return default
    return parsed


def round_half_up(value: float) -> int:
    """Round .5 up (2.5 -> 3), unlike round() which rounds to even."""
    return int(math.floor(value + 0.5))


def get_tier_from_score(score: float, config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> DevTier:
    for min_score, tier in config.tier_thresholds:
        if score >= min_score:
            return tier
    return DevTier.BRONZE


def is_successful_launch(ath_market_cap: Any, initial_market_cap: Any, status: str | None) -> bool:
    """A launch succeeds when its ATH market cap reached 2x the initial cap and it was not rugged."""
    if status == RUGGED_STATUS:
        return False
    ath = parse_numeric_or_default(ath_market_cap, 0.0)
    initial = parse_numeric_or_default(initial_market_cap, 1.0)
    return ath >= initial * SUCCESS_ATH_MULTIPLE


def _volume_bonus(total_volume: Any, config: ScoringConfig) -> int:
    volume = parse_numeric_or_default(total_volume, 0.0)
    for tier in config.volume_tiers:
        if volume >= tier.min_volume:
            return tier.bonus
    return 0


def _inactive_penalty(last_active_at: EpochMillis, now_ms: int, config: ScoringConfig) -> int:
    # 0 means no recorded activity, not the 1970 epoch
    if int(last_active_at) <= 0:
        return 0
    days_since_active = math.floor((now_ms - int(last_active_at)) / MS_PER_DAY)
    if days_since_active <= config.inactive_days_threshold:
        return 0
    months_inactive = days_since_active // DAYS_PER_MONTH
    return min(months_inactive * config.inactive_penalty_per_month, config.inactive_penalty_cap)


def calculate_dev_score(
    stats: DevStats,
    is_verified: bool = False,
    *,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
    now_ms: int | None = None,
) -> DevScore:
    """
    Compute a dev's reputation score (0–100), tier, and breakdown.

    Pure apart from the clock: pass now_ms to make the inactivity term
    deterministic. Never raises for malformed numeric input.

    Args:
        stats: Aggregated launch statistics.
        is_verified: Dev passed manual verification.
        config: Weights and thresholds.
        now_ms: Reference time in epoch milliseconds; defaults to the current time.

    Returns:
        DevScore with the clamped integer score, its tier, and every component.
    """
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)

    win_rate_bonus = 0
    if stats.total_launches > 0:
        win_rate = parse_numeric_or_default(stats.win_rate, 0.0)
        if math.isfinite(win_rate):
            win_rate_bonus = round_half_up(win_rate * config.win_rate_multiplier)

    breakdown = ScoreBreakdown(
        base_score=config.base_score,
        win_rate_bonus=win_rate_bonus,
        volume_bonus=_volume_bonus(stats.total_volume, config),
        rug_penalty=min(max(stats.rug_count, 0) * config.rug_penalty_per_rug, config.rug_penalty_cap),
        inactive_penalty=_inactive_penalty(stats.last_active_at, now_ms, config),
        verification_bonus=config.verification_bonus if is_verified else 0,
    )

    score = max(config.min_score, min(config.max_score, breakdown.raw_total))
    return DevScore(
        score=round_half_up(score),
        tier=get_tier_from_score(score, config),
        breakdown=breakdown,
    )
