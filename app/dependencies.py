"""
Request dependencies: shared-secret auth and access to the owned stores.
"""
from __future__ import annotations

import hmac
from typing import Optional

from fastapi import Header, Request

from app.config import Settings
from app.errors import AuthError
from app.stores.base import DonationStore
from app.stores.leaderboard import LeaderboardStore

API_KEY_HEADER = "X-API-Key"


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> DonationStore:
    return request.app.state.donation_store


def get_leaderboard(request: Request) -> LeaderboardStore:
    return request.app.state.leaderboard


def require_api_key(
    request: Request,
    x_api_key: Optional[str] = Header(default=None, alias=API_KEY_HEADER),
) -> None:
    """Reject the request unless the header equals the configured secret."""
    secret = get_settings(request).API_SECRET
    if not x_api_key or not secret:
        raise AuthError()
    if not hmac.compare_digest(x_api_key.encode("utf-8"), secret.encode("utf-8")):
        raise AuthError()
