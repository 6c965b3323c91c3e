"""
Leaderboard snapshot cache.

The game server computes the ranking and pushes it wholesale; the bridge
only keeps the latest snapshot. Nothing is merged and no history is kept.
"""
from __future__ import annotations

import copy
import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Sequence

from sqlalchemy.orm import sessionmaker

from app.models.donation import LeaderboardSnapshotModel
from app.schemas import LeaderboardSnapshot
from app.stores.sql import ensure_utc, storage_errors

logger = logging.getLogger(__name__)

SNAPSHOT_ROW_ID = 1


class LeaderboardStore(ABC):

    @abstractmethod
    def sync(self, top_donors: Sequence[Any], total_raised: int) -> LeaderboardSnapshot:
        """Replace the snapshot and stamp it with the current time."""

    @abstractmethod
    def get(self) -> LeaderboardSnapshot:
        """Current snapshot, or the empty default before the first sync."""


class LeaderboardCache(LeaderboardStore):
    """Process-local snapshot."""

    def __init__(self):
        self._lock = threading.Lock()
        self._snapshot = LeaderboardSnapshot()

    def sync(self, top_donors: Sequence[Any], total_raised: int) -> LeaderboardSnapshot:
        snapshot = LeaderboardSnapshot(
            top_donors=copy.deepcopy(list(top_donors)),
            total_raised=total_raised,
            last_updated=datetime.now(timezone.utc),
        )
        with self._lock:
            self._snapshot = snapshot
        logger.info("Leaderboard synced: %d donors", len(snapshot.top_donors))
        return snapshot.model_copy(deep=True)

    def get(self) -> LeaderboardSnapshot:
        with self._lock:
            return self._snapshot.model_copy(deep=True)


class SqlLeaderboardCache(LeaderboardStore):
    """Snapshot kept in a single database row."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @storage_errors
    def sync(self, top_donors: Sequence[Any], total_raised: int) -> LeaderboardSnapshot:
        snapshot = LeaderboardSnapshot(
            top_donors=list(top_donors),
            total_raised=total_raised,
            last_updated=datetime.now(timezone.utc),
        )
        with self._session_factory() as db:
            row = db.get(LeaderboardSnapshotModel, SNAPSHOT_ROW_ID)
            if row is None:
                row = LeaderboardSnapshotModel(id=SNAPSHOT_ROW_ID)
                db.add(row)
            row.top_donors_json = snapshot.top_donors
            row.total_raised = snapshot.total_raised
            row.last_updated = snapshot.last_updated
            db.commit()
        logger.info("Leaderboard synced: %d donors", len(snapshot.top_donors))
        return snapshot

    @storage_errors
    def get(self) -> LeaderboardSnapshot:
        with self._session_factory() as db:
            row = db.get(LeaderboardSnapshotModel, SNAPSHOT_ROW_ID)
            if row is None:
                return LeaderboardSnapshot()
            return LeaderboardSnapshot(
                top_donors=list(row.top_donors_json or []),
                total_raised=row.total_raised,
                last_updated=ensure_utc(row.last_updated),
            )
