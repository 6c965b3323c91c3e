"""
Public endpoints.

GET  /api/status              — store counts + server time
POST /api/webhook/donation    — ingest one donation event
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Body, Depends

from app.config import Settings
from app.dependencies import get_settings, get_store
from app.pipeline import ingest_donation
from app.schemas import IngestResponse, StatusResponse
from app.stores.base import DonationStore

logger = logging.getLogger(__name__)
router = APIRouter()


# ── GET /api/status ──────────────────────────────────────────────────────
@router.get("/status", response_model=StatusResponse)
def status(store: DonationStore = Depends(get_store)):
    stats = store.stats()
    return StatusResponse(
        status="Donation bridge active",
        donations_stored=stats.total_donations,
        pending=stats.pending,
        timestamp=datetime.now(timezone.utc),
    )


# ── POST /api/webhook/donation ───────────────────────────────────────────
@router.post("/webhook/donation", response_model=IngestResponse)
@router.post("/webhook/saweria", response_model=IngestResponse, include_in_schema=False)
def receive_donation(
    raw: Any = Body(default=None),
    store: DonationStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    logger.info("Donation received: %s", raw)
    result = ingest_donation(raw, store, default_donor_name=settings.DEFAULT_DONOR_NAME)
    return IngestResponse(
        donation_id=result.donation_id,
        extracted_username=result.extracted_username,
        clean_name=result.clean_name,
    )
