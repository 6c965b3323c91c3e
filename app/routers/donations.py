"""
Consumer endpoints for the donation queue. All require ``X-API-Key``.

GET  /api/donations/pending          — unprocessed donations, oldest first
POST /api/donations/{id}/processed   — acknowledge one donation
GET  /api/donations/latest           — newest first, paginated
GET  /api/donations/stats            — totals over every stored donation
POST /api/donations/clear            — delete everything
POST /api/donations/cleanup          — trim old processed donations
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.config import Settings
from app.dependencies import get_settings, get_store, require_api_key
from app.schemas import (
    AckResponse,
    CleanupResponse,
    ClearResponse,
    LatestResponse,
    PendingResponse,
    StatsResponse,
)
from app.stores.base import DonationStore

logger = logging.getLogger(__name__)
router = APIRouter(dependencies=[Depends(require_api_key)])


# ── GET /api/donations/pending ───────────────────────────────────────────
@router.get("/donations/pending", response_model=PendingResponse)
def list_pending(store: DonationStore = Depends(get_store)):
    pending = store.list_pending()
    return PendingResponse(count=len(pending), donations=pending)


# ── POST /api/donations/{donation_id}/processed ──────────────────────────
@router.post("/donations/{donation_id}/processed", response_model=AckResponse)
def mark_processed(donation_id: str, store: DonationStore = Depends(get_store)):
    donation = store.mark_processed(donation_id)
    logger.info("Donation %s marked as processed", donation_id)
    return AckResponse(donation=donation)


# ── GET /api/donations/latest ────────────────────────────────────────────
@router.get("/donations/latest", response_model=LatestResponse)
def list_latest(
    limit: Optional[int] = Query(default=None, ge=1),
    offset: int = Query(default=0, ge=0),
    store: DonationStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    if limit is None:
        limit = settings.LATEST_DEFAULT_LIMIT
    limit = min(limit, settings.LATEST_MAX_LIMIT)
    donations, total = store.list_latest(limit=limit, offset=offset)
    return LatestResponse(total=total, limit=limit, offset=offset, donations=donations)


# ── GET /api/donations/stats ─────────────────────────────────────────────
@router.get("/donations/stats", response_model=StatsResponse)
def stats(store: DonationStore = Depends(get_store)):
    return StatsResponse(stats=store.stats())


# ── POST /api/donations/clear ────────────────────────────────────────────
@router.post("/donations/clear", response_model=ClearResponse)
def clear(store: DonationStore = Depends(get_store)):
    count = store.clear()
    logger.warning("Cleared %d donations", count)
    return ClearResponse(message=f"Cleared {count} donations", cleared=count)


# ── POST /api/donations/cleanup ──────────────────────────────────────────
@router.post("/donations/cleanup", response_model=CleanupResponse)
def cleanup(
    store: DonationStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    keep = settings.CLEANUP_KEEP
    deleted = store.cleanup(keep)
    return CleanupResponse(
        message=f"Removed {deleted} processed donations",
        deleted=deleted,
        kept=keep,
    )
