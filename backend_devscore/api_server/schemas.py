"""
Pydantic response models. Every response is wrapped as {"success", "data", "meta"?}.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class DevStatsOut(BaseModel):
    total_launches: int = 0
    successful_launches: int = 0
    win_rate: float = Field(0.0, ge=0, le=1)
    avg_ath_multiplier: float = 0.0
    rug_count: int = 0
    total_volume: str = "0"


class TokenOut(BaseModel):
    contract_address: str
    chain: str
    name: str | None = None
    symbol: str | None = None
    status: str
    market_cap: str | None = None
    ath_market_cap: str | None = None
    created_at: int | None = None
    rug_detected_at: int | None = None


class DevProfileOut(BaseModel):
    """GET /dev/{address}/score payload."""

    address: str
    score: int = Field(..., ge=0, le=100)
    rank: int = Field(0, description="1-based position by score; 0 for unknown devs")
    tier: str = Field(..., description="bronze..diamond, or unranked for unknown devs")
    verified: bool = False
    stats: DevStatsOut
    history: list[TokenOut] = Field(default_factory=list, description="Latest 20 launches")


class LeaderboardEntry(BaseModel):
    address: str
    alias: str | None = None
    score: int
    tier: str
    verified: bool
    total_launches: int
    successful_launches: int
    rug_count: int
    total_volume: str
    avg_ath_multiplier: float
    win_rate: float


class PageMeta(BaseModel):
    page: int
    limit: int
    total: int | None = None


class RefreshOut(BaseModel):
    dev_id: str
    address: str
    refreshed: bool = Field(..., description="False when the dev has no tokens to score")
    score: int | None = None
    tier: str | None = None
    breakdown: dict[str, int] | None = None


class DevProfileResponse(BaseModel):
    success: bool = True
    data: DevProfileOut


class LeaderboardResponse(BaseModel):
    success: bool = True
    data: list[LeaderboardEntry]
    meta: PageMeta


class TokenListResponse(BaseModel):
    success: bool = True
    data: list[TokenOut]
    meta: PageMeta


class RefreshResponse(BaseModel):
    success: bool = True
    data: RefreshOut


class MessageResponse(BaseModel):
    success: bool = True
    data: dict[str, Any] = Field(default_factory=dict)
