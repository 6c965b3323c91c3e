"""
Bounded in-memory donation store.
"""
from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Optional

from app.errors import NotFound
from app.schemas import Donation, DonationStats
from app.stores.base import DonationStore, summarize

logger = logging.getLogger(__name__)

MAX_STORED_DONATIONS = 100


class BoundedDonationStore(DonationStore):
    """Keeps at most ``capacity`` records; the oldest insert is evicted first,
    whether or not it was processed."""

    def __init__(self, capacity: int = MAX_STORED_DONATIONS):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._lock = threading.Lock()
        # insertion order == dict order
        self._records: "OrderedDict[str, Donation]" = OrderedDict()

    def append(self, donation: Donation) -> None:
        with self._lock:
            self._records[donation.id] = donation.model_copy()
            while len(self._records) > self.capacity:
                evicted_id, evicted = self._records.popitem(last=False)
                logger.info(
                    "Store full (%d), evicted %s (processed=%s)",
                    self.capacity, evicted_id, evicted.processed,
                )

    def get(self, donation_id: str) -> Optional[Donation]:
        with self._lock:
            record = self._records.get(donation_id)
            return record.model_copy() if record else None

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def list_pending(self) -> list[Donation]:
        with self._lock:
            return [d.model_copy() for d in self._records.values() if not d.processed]

    def mark_processed(self, donation_id: str) -> Donation:
        with self._lock:
            record = self._records.get(donation_id)
            if record is None:
                raise NotFound(details={"donation_id": donation_id})
            if not record.processed:
                record = record.model_copy(
                    update={"processed": True, "processed_at": datetime.now(timezone.utc)}
                )
                self._records[donation_id] = record
            return record.model_copy()

    def list_latest(self, limit: int, offset: int = 0) -> tuple[list[Donation], int]:
        with self._lock:
            newest_first = list(reversed(self._records.values()))
            page = newest_first[offset:offset + limit]
            return [d.model_copy() for d in page], len(newest_first)

    def stats(self) -> DonationStats:
        with self._lock:
            records = list(self._records.values())
        return summarize(
            total_donations=len(records),
            total_amount=sum(d.amount for d in records),
            processed=sum(1 for d in records if d.processed),
        )

    def clear(self) -> int:
        with self._lock:
            count = len(self._records)
            self._records.clear()
            return count

    def cleanup(self, keep_n: int) -> int:
        with self._lock:
            processed = [d for d in self._records.values() if d.processed]
            # newest created_at first; later inserts win ties
            order = {donation_id: i for i, donation_id in enumerate(self._records)}
            processed.sort(key=lambda d: (d.created_at, order[d.id]), reverse=True)
            doomed = processed[max(keep_n, 0):]
            for d in doomed:
                del self._records[d.id]
            return len(doomed)
