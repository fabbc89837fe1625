"""
FastAPI router: dev reputation lookups and on-demand refresh.

GET  /dev/leaderboard          ranked devs with at least one launch
GET  /dev/{address}/score      score, rank, tier, stats, latest launches
GET  /dev/{address}/tokens     paginated launches
POST /dev/{address}/refresh    recompute one dev now (admin)

Reads come straight from the devs row written by the last refresh; only the
refresh route computes a score.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from backend_devscore.analysis_engine.dev_stats import update_dev_stats
from backend_devscore.api_server.deps import get_app_storage, require_admin
from backend_devscore.api_server.schemas import (
    DevProfileOut,
    DevProfileResponse,
    DevStatsOut,
    LeaderboardEntry,
    LeaderboardResponse,
    PageMeta,
    RefreshOut,
    RefreshResponse,
    TokenListResponse,
    TokenOut,
)
from backend_devscore.core.exceptions import DevNotFoundError
from backend_devscore.database import StorageHandle
from backend_devscore.database.repositories import (
    DEFAULT_SORT_FIELD,
    clamp_page,
    get_dev_by_address,
    get_dev_rank,
    get_dev_token_history,
    get_leaderboard,
)
from backend_devscore.devscore_logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/dev", tags=["dev"])

UNKNOWN_DEV_SCORE = 50
UNKNOWN_DEV_TIER = "unranked"


def _default_profile(address: str) -> DevProfileOut:
    """Profile served for an address with no devs row."""
    return DevProfileOut(
        address=address,
        score=UNKNOWN_DEV_SCORE,
        rank=0,
        tier=UNKNOWN_DEV_TIER,
        verified=False,
        stats=DevStatsOut(),
        history=[],
    )


@router.get("/leaderboard", response_model=LeaderboardResponse)
def leaderboard(
    page: int = 1,
    limit: int = 20,
    sort_by: str = DEFAULT_SORT_FIELD,
    chain: str | None = None,
    storage: StorageHandle = Depends(get_app_storage),
) -> LeaderboardResponse:
    page, limit, _ = clamp_page(page, limit)
    rows, total = get_leaderboard(storage, page=page, limit=limit, sort_by=sort_by, chain=chain)
    return LeaderboardResponse(
        data=[LeaderboardEntry(**row) for row in rows],
        meta=PageMeta(page=page, limit=limit, total=total),
    )


@router.get("/{address}/score", response_model=DevProfileResponse)
def dev_score(address: str, storage: StorageHandle = Depends(get_app_storage)) -> DevProfileResponse:
    dev = get_dev_by_address(storage, address)
    if dev is None:
        logger.debug("dev_score_unknown_address", address=address)
        return DevProfileResponse(data=_default_profile(address))

    total = dev["total_launches"] or 0
    successful = dev["successful_launches"] or 0
    history = get_dev_token_history(storage, dev["id"])
    profile = DevProfileOut(
        address=dev["wallet_address"],
        score=dev["score"],
        rank=get_dev_rank(storage, dev["score"]),
        tier=dev["tier"],
        verified=bool(dev["verified"]),
        stats=DevStatsOut(
            total_launches=total,
            successful_launches=successful,
            win_rate=successful / total if total > 0 else 0.0,
            avg_ath_multiplier=dev["avg_ath_multiplier"] or 0.0,
            rug_count=dev["rug_count"] or 0,
            total_volume=dev["total_volume"] or "0",
        ),
        history=[TokenOut(**row) for row in history],
    )
    return DevProfileResponse(data=profile)


@router.get("/{address}/tokens", response_model=TokenListResponse)
def dev_tokens(
    address: str,
    page: int = 1,
    limit: int = 20,
    storage: StorageHandle = Depends(get_app_storage),
) -> TokenListResponse:
    page, limit, offset = clamp_page(page, limit)
    dev = get_dev_by_address(storage, address)
    rows = [] if dev is None else get_dev_token_history(storage, dev["id"], limit=limit, offset=offset)
    return TokenListResponse(
        data=[TokenOut(**row) for row in rows],
        meta=PageMeta(page=page, limit=limit),
    )


@router.post(
    "/{address}/refresh",
    response_model=RefreshResponse,
    dependencies=[Depends(require_admin)],
)
def refresh_dev(address: str, storage: StorageHandle = Depends(get_app_storage)) -> RefreshResponse:
    dev = get_dev_by_address(storage, address)
    if dev is None:
        raise DevNotFoundError(address)
    result = update_dev_stats(storage, dev["id"])
    out = RefreshOut(dev_id=dev["id"], address=address, refreshed=result is not None)
    if result is not None:
        out.score = result.score
        out.tier = result.tier.value
        out.breakdown = result.breakdown.to_dict()
    logger.info("dev_refresh_requested", dev_id=dev["id"], refreshed=out.refreshed)
    return RefreshResponse(data=out)
