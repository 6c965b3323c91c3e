"""
donation-bridge contracts — request, record and response models.

All stages of the bridge produce and consume these Pydantic v2 models.
"""
from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    TypeAdapter,
    ValidationInfo,
    field_validator,
)
from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)

# A game-account handle as accepted by the consumer
HANDLE_PATTERN = r"^[A-Za-z0-9_]{3,20}$"

# Largest amount a 64-bit INTEGER column can hold
MAX_AMOUNT = 2**63 - 1

_DATETIME = TypeAdapter(datetime)


# ---------------------------------------------------------------------------
# Webhook input
# ---------------------------------------------------------------------------

class DonationWebhookPayload(BaseModel):
    """Raw donation event posted by the webhook source.

    The source sends many more keys than the bridge needs; they are ignored.
    """
    model_config = ConfigDict(extra="ignore")

    amount_raw: Union[StrictInt, StrictFloat]
    donator_name: Optional[str] = None
    message: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("amount_raw")
    @classmethod
    def _check_amount(cls, value: Union[int, float]) -> Union[int, float]:
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError("amount_raw must be a finite number")
        if value < 0:
            raise ValueError("amount_raw must not be negative")
        if value > MAX_AMOUNT:
            raise ValueError(f"amount_raw must not exceed {MAX_AMOUNT}")
        return value

    @field_validator("created_at", mode="before")
    @classmethod
    def _lenient_timestamp(cls, value: Any) -> Any:
        # An unreadable timestamp must not cost us the donation
        if value is None or isinstance(value, datetime):
            return value
        try:
            return _DATETIME.validate_python(value)
        except PydanticValidationError:
            logger.warning("Ignoring unparseable created_at %r, using receive time", value)
            return None

    @property
    def amount(self) -> int:
        """Amount in minor currency units."""
        return int(self.amount_raw)


# ---------------------------------------------------------------------------
# Donation record
# ---------------------------------------------------------------------------

class Donation(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    donor_name: str
    clean_donor_name: str
    amount: int = Field(..., ge=0, le=MAX_AMOUNT)
    message: str = ""
    extracted_username: Optional[str] = Field(default=None, pattern=HANDLE_PATTERN)
    created_at: datetime
    processed: bool = False
    processed_at: Optional[datetime] = None


class DonationStats(BaseModel):
    total_donations: int = 0
    total_amount: int = 0
    average: int = 0
    processed: int = 0
    pending: int = 0


# ---------------------------------------------------------------------------
# Leaderboard
# ---------------------------------------------------------------------------

class LeaderboardSnapshot(BaseModel):
    """Ranked donors as computed by the game server. Entries are opaque."""
    top_donors: list[Any] = Field(default_factory=list)
    total_raised: int = 0
    last_updated: Optional[datetime] = None


class LeaderboardSyncRequest(BaseModel):
    # The game server posts PascalCase keys
    top_donors: list[Any] = Field(
        default_factory=list,
        validation_alias=AliasChoices("top_donors", "TopDonors"),
    )
    total_raised: int = Field(
        default=0,
        validation_alias=AliasChoices("total_raised", "TotalRaised"),
    )

    @field_validator("top_donors", "total_raised", mode="before")
    @classmethod
    def _null_is_empty(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return [] if info.field_name == "top_donors" else 0
        return value


# ---------------------------------------------------------------------------
# API response envelopes
# ---------------------------------------------------------------------------

class IngestResponse(BaseModel):
    success: bool = True
    message: str = "Donation received"
    donation_id: str
    extracted_username: Optional[str] = None
    clean_name: str


class PendingResponse(BaseModel):
    success: bool = True
    count: int
    donations: list[Donation]


class AckResponse(BaseModel):
    success: bool = True
    message: str = "Donation marked as processed"
    donation: Donation


class LatestResponse(BaseModel):
    success: bool = True
    total: int
    limit: int
    offset: int
    donations: list[Donation]


class StatsResponse(BaseModel):
    success: bool = True
    stats: DonationStats


class ClearResponse(BaseModel):
    success: bool = True
    message: str
    cleared: int


class CleanupResponse(BaseModel):
    success: bool = True
    message: str
    deleted: int
    kept: int


class LeaderboardSyncResponse(BaseModel):
    success: bool = True
    message: str = "Leaderboard synced"
    donors_count: int


class LeaderboardResponse(BaseModel):
    success: bool = True
    leaderboard: LeaderboardSnapshot


class StatusResponse(BaseModel):
    status: str
    donations_stored: int
    pending: int
    timestamp: datetime
