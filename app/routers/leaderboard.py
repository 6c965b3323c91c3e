"""
Leaderboard side channel. Both endpoints require ``X-API-Key``.

POST /api/leaderboard/sync   — replace the snapshot
GET  /api/leaderboard        — read the snapshot
"""
from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool

from app.dependencies import get_leaderboard, require_api_key
from app.errors import ValidationError
from app.schemas import LeaderboardResponse, LeaderboardSyncRequest, LeaderboardSyncResponse
from app.stores.leaderboard import LeaderboardStore

logger = logging.getLogger(__name__)
router = APIRouter(dependencies=[Depends(require_api_key)])


# ── POST /api/leaderboard/sync ───────────────────────────────────────────
@router.post("/leaderboard/sync", response_model=LeaderboardSyncResponse)
async def sync_leaderboard(request: Request, leaderboard: LeaderboardStore = Depends(get_leaderboard)):
    # Body is read here, after auth, so a bad key is reported before a bad body
    raw = await request.body()
    try:
        body = json.loads(raw) if raw else {}
    except ValueError as exc:
        raise ValidationError("Invalid leaderboard data (body is not JSON)") from exc
    if not isinstance(body, dict):
        raise ValidationError("Invalid leaderboard data (body must be a JSON object)")
    try:
        req = LeaderboardSyncRequest.model_validate(body)
    except PydanticValidationError as exc:
        raise ValidationError("Invalid leaderboard data", details={"errors": exc.errors()}) from exc

    # Database-backed caches block; keep them off the event loop
    snapshot = await run_in_threadpool(leaderboard.sync, req.top_donors, req.total_raised)
    return LeaderboardSyncResponse(donors_count=len(snapshot.top_donors))


# ── GET /api/leaderboard ─────────────────────────────────────────────────
@router.get("/leaderboard", response_model=LeaderboardResponse)
def get_leaderboard_snapshot(leaderboard: LeaderboardStore = Depends(get_leaderboard)):
    return LeaderboardResponse(leaderboard=leaderboard.get())
