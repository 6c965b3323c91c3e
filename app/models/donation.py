"""
SQLAlchemy models for the persisted store.
"""
from sqlalchemy import Column, String, Text, JSON, DateTime, Integer, Boolean

from app.database import Base


class DonationModel(Base):
    __tablename__ = "donations"

    # Insertion order; ``id`` is opaque and says nothing about ordering
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(64), nullable=False, unique=True, index=True)

    donor_name = Column(String, nullable=False)
    clean_donor_name = Column(String, nullable=False)
    amount = Column(Integer, nullable=False)
    message = Column(Text, nullable=False, default="")
    extracted_username = Column(String(20))

    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    processed = Column(Boolean, nullable=False, default=False, index=True)
    processed_at = Column(DateTime(timezone=True))


class LeaderboardSnapshotModel(Base):
    """Single-row table holding the last synced leaderboard."""
    __tablename__ = "leaderboard_snapshots"

    id = Column(Integer, primary_key=True)
    top_donors_json = Column(JSON, nullable=False)
    total_raised = Column(Integer, nullable=False, default=0)
    last_updated = Column(DateTime(timezone=True), nullable=False)
