"""Tests for the ordered admission checks of new reservation requests."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from django.test import SimpleTestCase, override_settings

from shared.domain.value_objects import TimeSlot
from apps.bookings.domain.admission import AdmissionChecker, AdmissionPolicy
from apps.bookings.domain.entities import Reservation, ReservationStatus, RoomView
from apps.bookings.domain.exceptions import (
    CollaboratorUnavailable,
    Conflict,
    InvalidArgument,
    NotFound,
)
from apps.bookings.tests.fakes import (
    ADMIN,
    NOW,
    R201,
    STUDENT,
    FakeCalendar,
    FakeDirectory,
    FakeReservationRepository,
    at,
)


class AdmissionCheckerTests(SimpleTestCase):
    def setUp(self) -> None:
        self.directory = FakeDirectory()
        self.calendar = FakeCalendar()
        self.reservations = FakeReservationRepository()
        self.checker = AdmissionChecker(
            directory=self.directory,
            calendar=self.calendar,
            overlap_index=self.reservations,
            policy=AdmissionPolicy(),
            reference_tz=timezone.utc,
        )

    def _existing(self, start: datetime, end: datetime, status=ReservationStatus.APPROVED) -> Reservation:
        reservation, _ = Reservation.create(
            room_id=R201.id, requester=STUDENT, slot=TimeSlot(start, end), purpose="", now=NOW - timedelta(days=1)
        )
        reservation.status = status
        self.reservations.add(reservation)
        return reservation

    def _check(self, start: datetime, end: datetime, room_id: int = R201.id, requester_id: int = STUDENT.id):
        return self.checker.check(room_id, requester_id, start, end, NOW)

    def test_valid_request_is_admitted(self) -> None:
        admission = self._check(at(25, 10), at(25, 12))

        self.assertEqual(admission.requester, STUDENT)
        self.assertEqual(admission.room, R201)
        self.assertEqual(admission.slot, TimeSlot(at(25, 10), at(25, 12)))

    def test_unknown_requester(self) -> None:
        with self.assertRaises(NotFound) as ctx:
            self._check(at(25, 10), at(25, 12), requester_id=999)

        self.assertEqual(ctx.exception.code, "user")

    def test_unknown_room(self) -> None:
        with self.assertRaises(NotFound) as ctx:
            self._check(at(25, 10), at(25, 12), room_id=999)

        self.assertEqual(ctx.exception.code, "room")

    def test_requester_is_checked_before_everything_else(self) -> None:
        self.calendar.holidays.add(date(2025, 8, 25))

        with self.assertRaises(NotFound) as ctx:
            self._check(at(25, 12), at(25, 10), room_id=999, requester_id=999)

        self.assertEqual(ctx.exception.code, "user")
        self.assertEqual(self.calendar.queried, [])

    def test_holiday_wins_over_every_later_check(self) -> None:
        self.calendar.holidays.add(date(2025, 8, 25))
        self._existing(at(25, 9), at(25, 13))

        cases = [
            (at(25, 10), at(25, 12)),  # otherwise valid
            (at(25, 12), at(25, 10)),  # inverted range
            (at(25, 9, 30), at(25, 10)),  # overlaps an approved reservation
        ]
        for start, end in cases:
            with self.subTest(start=start, end=end):
                with self.assertRaises(Conflict) as ctx:
                    self._check(start, end)
                self.assertEqual(ctx.exception.code, "holiday")

    def test_holiday_date_is_taken_in_reference_time_zone(self) -> None:
        self.checker.reference_tz = ZoneInfo("Asia/Almaty")
        self.calendar.holidays.add(date(2025, 8, 25))

        with self.assertRaises(Conflict) as ctx:
            self._check(at(24, 22), at(24, 23))

        self.assertEqual(ctx.exception.code, "holiday")
        self.assertEqual(self.calendar.queried, [date(2025, 8, 25)])

    def test_end_must_follow_start(self) -> None:
        for end in (at(25, 10), at(25, 9)):
            with self.subTest(end=end):
                with self.assertRaises(InvalidArgument) as ctx:
                    self._check(at(25, 10), end)
                self.assertEqual(ctx.exception.code, "time-range")

    def test_overlap_with_approved_reservation(self) -> None:
        self._existing(at(25, 10), at(25, 12))

        with self.assertRaises(Conflict) as ctx:
            self._check(at(25, 11), at(25, 13))

        self.assertEqual(ctx.exception.code, "overlap")

    def test_back_to_back_is_admitted(self) -> None:
        self._existing(at(25, 10), at(25, 12))

        self._check(at(25, 12), at(25, 13))
        self._check(at(25, 9), at(25, 10))

    def test_only_approved_reservations_conflict(self) -> None:
        for status in (ReservationStatus.PENDING, ReservationStatus.REJECTED, ReservationStatus.CANCELLED):
            self._existing(at(25, 10), at(25, 12), status=status)

        self._check(at(25, 11), at(25, 13))

    def test_other_rooms_do_not_conflict(self) -> None:
        self.directory.rooms[202] = RoomView(id=202, capacity=10)
        self._existing(at(25, 10), at(25, 12))

        self._check(at(25, 10), at(25, 12), room_id=202)

    def test_overlap_is_reported_before_past_booking(self) -> None:
        self._existing(at(19, 10), at(19, 12))

        with self.assertRaises(Conflict) as ctx:
            self._check(at(19, 11), at(19, 13))

        self.assertEqual(ctx.exception.code, "overlap")

    def test_start_in_the_past(self) -> None:
        for start in (NOW - timedelta(hours=1), NOW):
            with self.subTest(start=start):
                with self.assertRaises(Conflict) as ctx:
                    self._check(start, start + timedelta(hours=1))
                self.assertEqual(ctx.exception.code, "past-booking")

    def test_booking_horizon(self) -> None:
        limit = NOW + timedelta(days=90)

        self._check(limit, limit + timedelta(hours=1))
        with self.assertRaises(Conflict) as ctx:
            self._check(limit + timedelta(minutes=1), limit + timedelta(hours=1))
        self.assertEqual(ctx.exception.code, "horizon-exceeded")

    def test_minimum_lead_time(self) -> None:
        with self.assertRaises(InvalidArgument) as ctx:
            self._check(NOW + timedelta(minutes=30), NOW + timedelta(hours=2))
        self.assertEqual(ctx.exception.code, "insufficient-lead-time")

        self._check(NOW + timedelta(hours=1), NOW + timedelta(hours=2))
        self._check(NOW + timedelta(hours=2), NOW + timedelta(hours=3))

    def test_naive_datetimes_are_read_in_reference_time_zone(self) -> None:
        admission = self._check(datetime(2025, 8, 25, 10), datetime(2025, 8, 25, 12))

        self.assertEqual(admission.slot.start, at(25, 10))
        self.assertEqual(admission.slot.start.tzinfo, timezone.utc)

    def test_inactive_room_is_not_refused(self) -> None:
        self.directory.rooms[R201.id] = RoomView(id=R201.id, capacity=30, is_active=False)

        admission = self._check(at(25, 10), at(25, 12))

        self.assertFalse(admission.room.is_active)

    def test_calendar_failure_is_not_a_missing_record(self) -> None:
        self.calendar.unavailable = True

        with self.assertRaises(CollaboratorUnavailable):
            self._check(at(25, 10), at(25, 12))

    def test_directory_failure_is_not_a_missing_record(self) -> None:
        self.directory.unavailable = True

        with self.assertRaises(CollaboratorUnavailable) as ctx:
            self._check(at(25, 10), at(25, 12), requester_id=ADMIN.id)

        self.assertNotIsInstance(ctx.exception, NotFound)


class AdmissionPolicyTests(SimpleTestCase):
    def test_defaults(self) -> None:
        policy = AdmissionPolicy()

        self.assertEqual(policy.max_advance, timedelta(days=90))
        self.assertEqual(policy.min_lead_time, timedelta(hours=1))
        self.assertFalse(policy.strict_approval_overlap_check)

    @override_settings(RESERVATIONS={
        "MAX_ADVANCE_DAYS": 30,
        "MIN_LEAD_TIME_MINUTES": 15,
        "STRICT_APPROVAL_OVERLAP_CHECK": True,
    })
    def test_from_settings(self) -> None:
        policy = AdmissionPolicy.from_settings()

        self.assertEqual(policy.max_advance, timedelta(days=30))
        self.assertEqual(policy.min_lead_time, timedelta(minutes=15))
        self.assertTrue(policy.strict_approval_overlap_check)

    @override_settings(RESERVATIONS={})
    def test_missing_keys_fall_back_to_defaults(self) -> None:
        self.assertEqual(AdmissionPolicy.from_settings(), AdmissionPolicy())
