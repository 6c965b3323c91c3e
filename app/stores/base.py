"""
Donation store contract shared by the in-memory and SQL variants.

Pending records are handed out oldest first. There is no claim step between
``list_pending`` and ``mark_processed``, so a consumer may see the same
record twice and must tolerate at-least-once delivery.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from app.schemas import Donation, DonationStats


def summarize(total_donations: int, total_amount: int, processed: int) -> DonationStats:
    return DonationStats(
        total_donations=total_donations,
        total_amount=total_amount,
        average=total_amount // total_donations if total_donations else 0,
        processed=processed,
        pending=total_donations - processed,
    )


class DonationStore(ABC):

    @abstractmethod
    def append(self, donation: Donation) -> None:
        """Insert a new record."""

    @abstractmethod
    def get(self, donation_id: str) -> Optional[Donation]:
        ...

    @abstractmethod
    def count(self) -> int:
        ...

    @abstractmethod
    def list_pending(self) -> list[Donation]:
        """Unprocessed records, oldest first."""

    @abstractmethod
    def mark_processed(self, donation_id: str) -> Donation:
        """Acknowledge a record. Raises :class:`app.errors.NotFound`.

        Acknowledging twice is allowed and keeps the first ``processed_at``.
        """

    @abstractmethod
    def list_latest(self, limit: int, offset: int = 0) -> tuple[list[Donation], int]:
        """One page of records, newest first, plus the total record count."""

    @abstractmethod
    def stats(self) -> DonationStats:
        """Totals over every stored record, processed or not."""

    @abstractmethod
    def clear(self) -> int:
        """Delete everything. Returns the number of deleted records."""

    @abstractmethod
    def cleanup(self, keep_n: int) -> int:
        """Delete processed records beyond the newest ``keep_n`` by ``created_at``.

        Unprocessed records are never deleted. Returns the number deleted.
        """
