# visitor_register/services/visitor_service.py
"""
Visitor lifecycle: intake (check-in), listing, checkout and metrics.

How it works:
  - intake creates an active row; a national ID can only have one active row.
    The service checks first for a friendly error, and the partial unique
    index on (national_id WHERE is_active) catches concurrent intakes.
  - checkout is a one-way transition. The UPDATE is conditional on the row
    still being active, so two concurrent checkouts cannot both succeed.
  - duration is stored as whole minutes; the "N minutes" text is rendered
    on read (Visitor.visit_duration).
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from visitor_register.exceptions import AlreadyCheckedOutError, ConflictError, NotFoundError
from visitor_register.models.visitor import Visitor
from visitor_register.schemas.visitor import VisitorCreate
from visitor_register.utils.clock import as_utc, day_bounds, round_half_up, utcnow
from visitor_register.utils.logger import get_logger

logger = get_logger(__name__)

ACTIVE_CONFLICT_MESSAGE = "An active visit already exists for this national ID."


def compute_duration_minutes(entry_time: datetime, exit_time: datetime) -> int:
    """Whole minutes between entry and exit, rounded half up (29s → 0, 30s → 1)."""
    seconds = (as_utc(exit_time) - as_utc(entry_time)).total_seconds()
    return round_half_up(seconds / 60)


def find_active_by_national_id(db: Session, national_id: str) -> Optional[Visitor]:
    return (
        db.query(Visitor)
        .filter(Visitor.national_id == national_id, Visitor.is_active.is_(True))
        .first()
    )


def intake(db: Session, data: VisitorCreate, now: Optional[datetime] = None) -> Visitor:
    """Check a visitor in. Raises ConflictError if they already have an active visit."""
    if find_active_by_national_id(db, data.national_id):
        logger.warning(f"[INTAKE] Rejected duplicate active visit for national ID ending {data.national_id[-4:]}")
        raise ConflictError(ACTIVE_CONFLICT_MESSAGE)

    visitor = Visitor(
        national_id=data.national_id,
        first_name=data.first_name,
        last_name=data.last_name,
        birth_year=data.birth_year,
        reason_for_visit=data.reason_for_visit,
        entry_time=now or utcnow(),
        exit_time=None,
        duration_minutes=None,
        is_active=True,
    )
    db.add(visitor)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent intake for the same national ID
        db.rollback()
        logger.warning("[INTAKE] Active-visit index rejected a concurrent intake")
        raise ConflictError(ACTIVE_CONFLICT_MESSAGE)

    logger.info(f"[INTAKE] Visitor checked in: {visitor.first_name} {visitor.last_name} ({visitor.id})")
    return visitor


def list_active(db: Session) -> list[Visitor]:
    return (
        db.query(Visitor)
        .filter(Visitor.is_active.is_(True))
        .order_by(Visitor.entry_time.desc())
        .all()
    )


def list_past(db: Session) -> list[Visitor]:
    return (
        db.query(Visitor)
        .filter(Visitor.is_active.is_(False))
        .order_by(Visitor.exit_time.desc())
        .all()
    )


def checkout(db: Session, visitor_id: str, now: Optional[datetime] = None) -> Visitor:
    """
    Close an active visit. Not idempotent: a second checkout of the same
    visit raises AlreadyCheckedOutError.
    """
    visitor = db.query(Visitor).filter(Visitor.id == visitor_id).first()
    if visitor is None:
        raise NotFoundError("Visitor not found.")
    if not visitor.is_active:
        raise AlreadyCheckedOutError()

    exit_time = now or utcnow()
    minutes = compute_duration_minutes(visitor.entry_time, exit_time)

    updated = (
        db.query(Visitor)
        .filter(Visitor.id == visitor_id, Visitor.is_active.is_(True))
        .update(
            {"is_active": False, "exit_time": exit_time, "duration_minutes": minutes},
            synchronize_session=False,
        )
    )
    if updated == 0:
        db.rollback()
        raise AlreadyCheckedOutError()
    db.commit()
    db.refresh(visitor)

    logger.info(f"[CHECKOUT] Visitor checked out: {visitor.first_name} {visitor.last_name} after {minutes} min")
    return visitor


def compute_metrics(db: Session, tz_name: str = "UTC", now: Optional[datetime] = None) -> dict:
    """Visitors that entered today (in tz_name), currently active, and mean past duration."""
    start, end = day_bounds(now or utcnow(), tz_name)

    visitors_today = db.query(func.count(Visitor.id)).filter(
        Visitor.entry_time >= start,
        Visitor.entry_time < end,
    ).scalar() or 0

    active_visitors = db.query(func.count(Visitor.id)).filter(
        Visitor.is_active.is_(True),
    ).scalar() or 0

    total_minutes, finished = db.query(
        func.sum(Visitor.duration_minutes), func.count(Visitor.duration_minutes)
    ).filter(
        Visitor.is_active.is_(False),
        Visitor.duration_minutes.isnot(None),
    ).one()

    average = round_half_up(total_minutes / finished) if finished else 0

    return {
        "visitors_today": visitors_today,
        "active_visitors": active_visitors,
        "average_visit_duration_minutes": average,
    }
