# tests/test_visitor_service.py
"""Unit tests for the visitor lifecycle (intake, checkout, listing, metrics)."""

import pytest
from unittest.mock import MagicMock
from datetime import datetime, timedelta, timezone
from sqlalchemy.exc import IntegrityError

from visitor_register.exceptions import AlreadyCheckedOutError, ConflictError, NotFoundError
from visitor_register.models.visitor import Visitor
from visitor_register.schemas.visitor import VisitorCreate
from visitor_register.services import visitor_service
from visitor_register.services.visitor_service import compute_duration_minutes
from visitor_register.utils.clock import as_utc

T0 = datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)


def make_visitor(national_id="11111111111", first_name="Ada", last_name="Lovelace"):
    return VisitorCreate(
        national_id=national_id,
        first_name=first_name,
        last_name=last_name,
        birth_year=1990,
        reason_for_visit="meeting",
    )


class TestIntake:
    def test_creates_active_record(self, db):
        visitor = visitor_service.intake(db, make_visitor(), now=T0)

        assert visitor.id
        assert visitor.is_active is True
        assert visitor.exit_time is None
        assert visitor.duration_minutes is None
        assert visitor.visit_duration is None
        assert as_utc(visitor.entry_time) == T0

    def test_second_active_intake_conflicts(self, db):
        visitor_service.intake(db, make_visitor(), now=T0)

        with pytest.raises(ConflictError):
            visitor_service.intake(db, make_visitor(first_name="Someone"), now=T0 + timedelta(minutes=1))

        assert len(visitor_service.list_active(db)) == 1

    def test_same_national_id_allowed_after_checkout(self, db):
        first = visitor_service.intake(db, make_visitor(), now=T0)
        visitor_service.checkout(db, first.id, now=T0 + timedelta(minutes=5))

        second = visitor_service.intake(db, make_visitor(), now=T0 + timedelta(minutes=10))

        assert second.id != first.id
        assert second.is_active is True

    def test_other_national_ids_do_not_conflict(self, db):
        visitor_service.intake(db, make_visitor("11111111111"), now=T0)
        visitor_service.intake(db, make_visitor("22222222222"), now=T0)

        assert len(visitor_service.list_active(db)) == 2

    def test_index_violation_becomes_conflict(self):
        db = MagicMock()
        db.query.return_value.filter.return_value.first.return_value = None  # pre-check passes
        db.commit.side_effect = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

        with pytest.raises(ConflictError):
            visitor_service.intake(db, make_visitor(), now=T0)

        db.rollback.assert_called_once()


class TestActiveVisitIndex:
    """The partial unique index itself, bypassing the service pre-check."""

    def add_row(self, db, national_id, is_active):
        db.add(Visitor(
            national_id=national_id,
            first_name="Ada",
            last_name="Lovelace",
            birth_year=1990,
            reason_for_visit="meeting",
            entry_time=T0,
            exit_time=None if is_active else T0 + timedelta(minutes=5),
            duration_minutes=None if is_active else 5,
            is_active=is_active,
        ))
        db.commit()

    def test_two_active_rows_rejected_by_database(self, db):
        self.add_row(db, "11111111111", is_active=True)

        with pytest.raises(IntegrityError):
            self.add_row(db, "11111111111", is_active=True)
        db.rollback()

        assert db.query(Visitor).count() == 1

    def test_many_inactive_rows_allowed(self, db):
        self.add_row(db, "11111111111", is_active=False)
        self.add_row(db, "11111111111", is_active=False)
        self.add_row(db, "11111111111", is_active=True)

        assert db.query(Visitor).filter(Visitor.national_id == "11111111111").count() == 3


class TestCheckout:
    def test_checkout_closes_visit(self, db):
        visitor = visitor_service.intake(db, make_visitor(), now=T0)

        closed = visitor_service.checkout(db, visitor.id, now=T0 + timedelta(minutes=45))

        assert closed.is_active is False
        assert closed.duration_minutes == 45
        assert closed.visit_duration == "45 minutes"
        assert as_utc(closed.exit_time) == T0 + timedelta(minutes=45)

    def test_second_checkout_fails(self, db):
        visitor = visitor_service.intake(db, make_visitor(), now=T0)
        visitor_service.checkout(db, visitor.id, now=T0 + timedelta(minutes=3))

        with pytest.raises(AlreadyCheckedOutError):
            visitor_service.checkout(db, visitor.id, now=T0 + timedelta(minutes=4))

    def test_second_checkout_keeps_first_exit_time(self, db):
        visitor = visitor_service.intake(db, make_visitor(), now=T0)
        visitor_service.checkout(db, visitor.id, now=T0 + timedelta(minutes=3))

        with pytest.raises(AlreadyCheckedOutError):
            visitor_service.checkout(db, visitor.id, now=T0 + timedelta(hours=2))

        past = visitor_service.list_past(db)
        assert past[0].duration_minutes == 3

    def test_unknown_id_not_found(self, db):
        with pytest.raises(NotFoundError):
            visitor_service.checkout(db, "does-not-exist")

    def test_lost_race_is_already_checked_out(self):
        visitor = MagicMock()
        visitor.is_active = True
        visitor.entry_time = T0
        db = MagicMock()
        db.query.return_value.filter.return_value.first.return_value = visitor
        db.query.return_value.filter.return_value.update.return_value = 0  # someone else closed it

        with pytest.raises(AlreadyCheckedOutError):
            visitor_service.checkout(db, "abc", now=T0 + timedelta(minutes=1))

        db.commit.assert_not_called()


class TestDurationRounding:
    @pytest.mark.parametrize("seconds, minutes", [
        (0, 0),
        (29, 0),
        (30, 1),
        (59, 1),
        (89, 1),
        (90, 2),
        (2700, 45),
    ])
    def test_rounds_half_up_to_whole_minutes(self, seconds, minutes):
        assert compute_duration_minutes(T0, T0 + timedelta(seconds=seconds)) == minutes

    def test_naive_entry_time_treated_as_utc(self):
        naive_entry = T0.replace(tzinfo=None)
        assert compute_duration_minutes(naive_entry, T0 + timedelta(minutes=10)) == 10

    def test_zero_minute_checkout(self, db):
        visitor = visitor_service.intake(db, make_visitor(), now=T0)

        closed = visitor_service.checkout(db, visitor.id, now=T0 + timedelta(seconds=20))

        assert closed.duration_minutes == 0
        assert closed.visit_duration == "0 minutes"


class TestListing:
    def test_active_newest_entry_first(self, db):
        visitor_service.intake(db, make_visitor("11111111111"), now=T0)
        visitor_service.intake(db, make_visitor("22222222222"), now=T0 + timedelta(minutes=10))
        visitor_service.intake(db, make_visitor("33333333333"), now=T0 + timedelta(minutes=5))

        ids = [v.national_id for v in visitor_service.list_active(db)]

        assert ids == ["22222222222", "33333333333", "11111111111"]

    def test_past_latest_exit_first(self, db):
        a = visitor_service.intake(db, make_visitor("11111111111"), now=T0)
        b = visitor_service.intake(db, make_visitor("22222222222"), now=T0)
        visitor_service.checkout(db, b.id, now=T0 + timedelta(minutes=5))
        visitor_service.checkout(db, a.id, now=T0 + timedelta(minutes=30))

        past = visitor_service.list_past(db)

        assert [v.id for v in past] == [a.id, b.id]
        assert visitor_service.list_active(db) == []


class TestMetrics:
    def test_empty_store(self, db):
        metrics = visitor_service.compute_metrics(db, now=T0)

        assert metrics == {
            "visitors_today": 0,
            "active_visitors": 0,
            "average_visit_duration_minutes": 0,
        }

    def test_active_count_matches_active_list(self, db):
        for i, nid in enumerate(["11111111111", "22222222222", "33333333333"]):
            visitor_service.intake(db, make_visitor(nid), now=T0 + timedelta(minutes=i))
        first = visitor_service.list_active(db)[-1]
        visitor_service.checkout(db, first.id, now=T0 + timedelta(minutes=20))

        metrics = visitor_service.compute_metrics(db, now=T0 + timedelta(minutes=30))

        assert metrics["active_visitors"] == len(visitor_service.list_active(db)) == 2
        assert metrics["visitors_today"] == 3

    def test_average_rounds_half_up(self, db):
        a = visitor_service.intake(db, make_visitor("11111111111"), now=T0)
        b = visitor_service.intake(db, make_visitor("22222222222"), now=T0)
        visitor_service.checkout(db, a.id, now=T0 + timedelta(minutes=10))
        visitor_service.checkout(db, b.id, now=T0 + timedelta(minutes=21))

        metrics = visitor_service.compute_metrics(db, now=T0 + timedelta(hours=1))

        assert metrics["average_visit_duration_minutes"] == 16  # 15.5 rounds up

    def test_yesterday_not_counted_today(self, db):
        visitor_service.intake(db, make_visitor("11111111111"), now=T0 - timedelta(days=1))
        visitor_service.intake(db, make_visitor("22222222222"), now=T0)

        metrics = visitor_service.compute_metrics(db, now=T0 + timedelta(hours=1))

        assert metrics["visitors_today"] == 1
        assert metrics["active_visitors"] == 2

    def test_today_follows_configured_timezone(self, db):
        # 20:00 UTC is 23:00 in Istanbul (UTC+3); 21:15 UTC is already the next day there.
        visitor_service.intake(db, make_visitor("11111111111"), now=datetime(2026, 3, 2, 20, 0, tzinfo=timezone.utc))
        visitor_service.intake(db, make_visitor("22222222222"), now=datetime(2026, 3, 2, 21, 15, tzinfo=timezone.utc))
        now = datetime(2026, 3, 2, 21, 30, tzinfo=timezone.utc)

        assert visitor_service.compute_metrics(db, "UTC", now=now)["visitors_today"] == 2
        assert visitor_service.compute_metrics(db, "Europe/Istanbul", now=now)["visitors_today"] == 1
