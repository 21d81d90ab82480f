# visitor_register/models/visitor.py
"""
Visitors table: one row per check-in/check-out episode.
A national ID may appear many times, but only one row per national ID
may be active; the partial unique index enforces that at the database.
"""

import uuid

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, Text, text
from visitor_register.database import Base

DURATION_UNIT = "minutes"


def format_visit_duration(minutes):
    if minutes is None:
        return None
    return f"{minutes} {DURATION_UNIT}"


class Visitor(Base):
    __tablename__ = "visitors"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    national_id = Column(String(11), nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    birth_year = Column(Integer, nullable=False)
    reason_for_visit = Column(Text, nullable=False)
    entry_time = Column(DateTime(timezone=True), nullable=False, index=True)
    exit_time = Column(DateTime(timezone=True), index=True)     # set on checkout
    duration_minutes = Column(Integer)                           # set on checkout
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    __table_args__ = (
        Index(
            "uq_visitors_active_national_id",
            "national_id",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
    )

    @property
    def visit_duration(self):
        return format_visit_duration(self.duration_minutes)

    def __repr__(self):
        return f"<Visitor {self.id} national_id={self.national_id} active={self.is_active}>"
