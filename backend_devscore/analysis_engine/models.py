"""
Domain models for dev reputation scoring.

DevStats is the aggregated input, DevScore the result. Timestamps carry their
unit in the type: token rows store EpochSeconds, the scorer works in EpochMillis.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, NewType

EpochSeconds = NewType("EpochSeconds", int)
EpochMillis = NewType("EpochMillis", int)

MS_PER_SECOND = 1000


def seconds_to_millis(ts: EpochSeconds) -> EpochMillis:
    return EpochMillis(int(ts) * MS_PER_SECOND)


def millis_to_seconds(ts: EpochMillis) -> EpochSeconds:
    return EpochSeconds(int(ts) // MS_PER_SECOND)


class DevTier(str, Enum):
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"
    DIAMOND = "diamond"


@dataclass(frozen=True)
class DevStats:
    """Aggregated launch statistics for one dev; recomputed on every refresh."""

    total_launches: int = 0
    successful_launches: int = 0
    rug_count: int = 0
    total_volume: str = "0"
    """Decimal string; parsed leniently by the scorer."""
    avg_ath_multiplier: float = 0.0
    win_rate: float = 0.0
    """successful_launches / total_launches, 0 when there are no launches."""
    last_active_at: EpochMillis = EpochMillis(0)
    """Creation time of the dev's most recent token."""


@dataclass(frozen=True)
class ScoreBreakdown:
    """Each component of a score, kept separately for auditing."""

    base_score: int
    win_rate_bonus: int = 0
    volume_bonus: int = 0
    rug_penalty: int = 0
    inactive_penalty: int = 0
    verification_bonus: int = 0

    @property
    def raw_total(self) -> int:
        """Sum before clamping to the score range."""
        return (
            self.base_score
            + self.win_rate_bonus
            + self.volume_bonus
            + self.verification_bonus
            - self.rug_penalty
            - self.inactive_penalty
        )

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class DevScore:
    score: int
    tier: DevTier
    breakdown: ScoreBreakdown

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "tier": self.tier.value,
            "breakdown": self.breakdown.to_dict(),
        }
