"""
Persisted donation store on SQLAlchemy.

Each operation runs in its own session and commits once; there are no
multi-statement transactions across operations.
"""
from __future__ import annotations

import functools
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.errors import NotFound, StorageError
from app.models.donation import DonationModel
from app.schemas import Donation, DonationStats
from app.stores.base import DonationStore, summarize

logger = logging.getLogger(__name__)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def transform_donation(model: DonationModel) -> Donation:
    """DonationModel → Donation"""
    return Donation(
        id=model.id,
        donor_name=model.donor_name,
        clean_donor_name=model.clean_donor_name,
        amount=model.amount,
        message=model.message or "",
        extracted_username=model.extracted_username,
        created_at=ensure_utc(model.created_at),
        processed=bool(model.processed),
        processed_at=ensure_utc(model.processed_at),
    )


def storage_errors(fn):
    """Surface any database failure as :class:`StorageError`."""
    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except SQLAlchemyError as exc:
            logger.exception("Storage failure in %s", fn.__name__)
            raise StorageError(str(exc)) from exc
    return wrapper


class SqlDonationStore(DonationStore):

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _session(self) -> Session:
        return self._session_factory()

    @storage_errors
    def append(self, donation: Donation) -> None:
        with self._session() as db:
            db.add(
                DonationModel(
                    id=donation.id,
                    donor_name=donation.donor_name,
                    clean_donor_name=donation.clean_donor_name,
                    amount=donation.amount,
                    message=donation.message,
                    extracted_username=donation.extracted_username,
                    created_at=donation.created_at,
                    processed=donation.processed,
                    processed_at=donation.processed_at,
                )
            )
            db.commit()

    @storage_errors
    def get(self, donation_id: str) -> Optional[Donation]:
        with self._session() as db:
            row = db.query(DonationModel).filter(DonationModel.id == donation_id).first()
            return transform_donation(row) if row else None

    @storage_errors
    def count(self) -> int:
        with self._session() as db:
            return db.query(DonationModel).count()

    @storage_errors
    def list_pending(self) -> list[Donation]:
        with self._session() as db:
            rows = (
                db.query(DonationModel)
                .filter(DonationModel.processed == False)  # noqa: E712
                .order_by(DonationModel.seq.asc())
                .all()
            )
            return [transform_donation(r) for r in rows]

    @storage_errors
    def mark_processed(self, donation_id: str) -> Donation:
        with self._session() as db:
            row = db.query(DonationModel).filter(DonationModel.id == donation_id).first()
            if not row:
                raise NotFound(details={"donation_id": donation_id})
            if not row.processed:
                row.processed = True
                row.processed_at = datetime.now(timezone.utc)
                db.commit()
                db.refresh(row)
            return transform_donation(row)

    @storage_errors
    def list_latest(self, limit: int, offset: int = 0) -> tuple[list[Donation], int]:
        with self._session() as db:
            total = db.query(DonationModel).count()
            rows = (
                db.query(DonationModel)
                .order_by(DonationModel.seq.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )
            return [transform_donation(r) for r in rows], total

    @storage_errors
    def stats(self) -> DonationStats:
        with self._session() as db:
            total_donations, total_amount = db.query(
                func.count(DonationModel.seq),
                func.coalesce(func.sum(DonationModel.amount), 0),
            ).one()
            processed = (
                db.query(DonationModel)
                .filter(DonationModel.processed == True)  # noqa: E712
                .count()
            )
        return summarize(
            total_donations=int(total_donations),
            total_amount=int(total_amount),
            processed=processed,
        )

    @storage_errors
    def clear(self) -> int:
        with self._session() as db:
            deleted = db.query(DonationModel).delete(synchronize_session=False)
            db.commit()
            return deleted

    @storage_errors
    def cleanup(self, keep_n: int) -> int:
        with self._session() as db:
            stale = (
                db.query(DonationModel.seq)
                .filter(DonationModel.processed == True)  # noqa: E712
                .order_by(DonationModel.created_at.desc(), DonationModel.seq.desc())
                .offset(max(keep_n, 0))
                .all()
            )
            seqs = [s for (s,) in stale]
            if not seqs:
                return 0
            deleted = (
                db.query(DonationModel)
                .filter(DonationModel.seq.in_(seqs))
                .delete(synchronize_session=False)
            )
            db.commit()
            logger.info("Cleanup removed %d processed donations (kept %d)", deleted, keep_n)
            return deleted
