"""
Donation bridge ingest pipeline.

Orchestrates: validate → extract identity → build record → append to store.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional

from app.pipeline.donation_builder import build_donation
from app.pipeline.identity import DEFAULT_DONOR_NAME
from app.stores.base import DonationStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngestResult:
    donation_id: str
    extracted_username: Optional[str]
    clean_name: str


def ingest_donation(
    raw: Any,
    store: DonationStore,
    default_donor_name: str = DEFAULT_DONOR_NAME,
) -> IngestResult:
    """Build a record from a webhook event and store it before returning."""
    donation = build_donation(raw, default_donor_name=default_donor_name)
    store.append(donation)
    logger.info(
        "Donation stored: id=%s amount=%d username=%s original_name=%r",
        donation.id,
        donation.amount,
        donation.extracted_username,
        donation.donor_name,
    )
    return IngestResult(
        donation_id=donation.id,
        extracted_username=donation.extracted_username,
        clean_name=donation.clean_donor_name,
    )
