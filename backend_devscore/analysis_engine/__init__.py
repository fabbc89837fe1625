"""
Analysis engine package — dev reputation scoring.

Pure scoring rules (scorer), domain models, liquidity-drop rug detection, and
the aggregator that turns a dev's token launches into a persisted score.
"""

from backend_devscore.analysis_engine.models import (
    DevScore,
    DevStats,
    DevTier,
    EpochMillis,
    EpochSeconds,
    ScoreBreakdown,
    millis_to_seconds,
    seconds_to_millis,
)
from backend_devscore.analysis_engine.scorer import (
    DEFAULT_SCORING_CONFIG,
    ScoringConfig,
    VolumeTier,
    calculate_dev_score,
    get_tier_from_score,
    is_successful_launch,
    parse_numeric_or_default,
)
from backend_devscore.analysis_engine.dev_stats import (
    TokenAggregate,
    aggregate_token_stats,
    update_dev_stats,
)
from backend_devscore.analysis_engine.rug_detection import detect_rug_pulls, is_liquidity_rug

__all__ = [
    "DevScore",
    "DevStats",
    "DevTier",
    "EpochMillis",
    "EpochSeconds",
    "ScoreBreakdown",
    "millis_to_seconds",
    "seconds_to_millis",
    "DEFAULT_SCORING_CONFIG",
    "ScoringConfig",
    "VolumeTier",
    "calculate_dev_score",
    "get_tier_from_score",
    "is_successful_launch",
    "parse_numeric_or_default",
    "TokenAggregate",
    "aggregate_token_stats",
    "update_dev_stats",
    "detect_rug_pulls",
    "is_liquidity_rug",
]
