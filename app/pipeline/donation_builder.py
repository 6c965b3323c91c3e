"""
Donation record builder — raw webhook event to a normalised record.
"""
from __future__ import annotations

import logging
import random
import string
import time
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from app.errors import ValidationError
from app.pipeline.identity import DEFAULT_DONOR_NAME, extract_identity, is_valid_handle
from app.schemas import Donation, DonationWebhookPayload

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def generate_donation_id(now: Optional[float] = None) -> str:
    """Millisecond timestamp followed by nine random base-36 characters."""
    millis = int((time.time() if now is None else now) * 1000)
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"{millis}{suffix}"


def _as_utc(value: Optional[datetime]) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    # Naive timestamps from the webhook source are taken as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _describe(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"] if not isinstance(p, int)) or "body"
        parts.append(f"{loc}: {err['msg']}")
    return "Invalid donation data (" + "; ".join(parts) + ")"


def parse_payload(raw: Any) -> DonationWebhookPayload:
    """Check a loosely typed request body against the webhook schema."""
    if not isinstance(raw, dict):
        raise ValidationError("Invalid donation data (body must be a JSON object)")
    try:
        return DonationWebhookPayload.model_validate(raw)
    except PydanticValidationError as exc:
        raise ValidationError(_describe(exc), details={"errors": exc.errors()}) from exc


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

def build_donation(raw: Any, default_donor_name: str = DEFAULT_DONOR_NAME) -> Donation:
    """Validate ``raw`` and return an unprocessed :class:`Donation`."""
    payload = parse_payload(raw)

    donor_name = payload.donator_name or default_donor_name
    identity = extract_identity(donor_name, payload.message, default_name=default_donor_name)

    handle = identity.handle
    if handle is not None and not is_valid_handle(handle):
        logger.debug("Dropping handle %r (strategy %s): not a valid handle", handle, identity.strategy)
        handle = None

    return Donation(
        id=generate_donation_id(),
        donor_name=donor_name,
        clean_donor_name=identity.clean_name,
        amount=payload.amount,
        message=payload.message or "",
        extracted_username=handle,
        created_at=_as_utc(payload.created_at),
    )
