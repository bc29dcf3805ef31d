"""Tests for the Reservation aggregate state machine."""

from __future__ import annotations

from datetime import timedelta

from django.test import SimpleTestCase

from shared.domain.value_objects import TimeSlot
from apps.bookings.domain.entities import (
    TRANSITIONS,
    Reservation,
    ReservationAction,
    ReservationStatus,
)
from apps.bookings.domain.events import (
    ReservationApproved,
    ReservationCancelled,
    ReservationCreated,
    ReservationRejected,
)
from apps.bookings.domain.exceptions import Conflict, InvalidArgument, Unauthorized
from apps.bookings.tests.fakes import ADMIN, FACULTY, NOW, OTHER_STUDENT, STUDENT, at


def new_reservation(requester=STUDENT, slot=None) -> Reservation:
    reservation, _ = Reservation.create(
        room_id=201,
        requester=requester,
        slot=slot or TimeSlot(at(25, 10), at(25, 12)),
        purpose="Study group",
        now=NOW,
    )
    reservation.pull_events()
    return reservation


class TransitionTableTests(SimpleTestCase):
    def test_every_status_and_action_pair(self) -> None:
        expected = {
            ReservationAction.APPROVED: {ReservationStatus.PENDING},
            ReservationAction.REJECTED: {ReservationStatus.PENDING},
            ReservationAction.CANCELLED: {ReservationStatus.PENDING, ReservationStatus.APPROVED},
            ReservationAction.CREATED: set(),
        }
        for action, sources in expected.items():
            for status in ReservationStatus:
                reservation = new_reservation()
                reservation.status = status
                with self.subTest(action=action, status=status):
                    self.assertEqual(reservation.can(action), status in sources)

    def test_only_moderation_is_admin_only(self) -> None:
        admin_only = {action for action, rule in TRANSITIONS.items() if rule.admin_only}
        self.assertEqual(admin_only, {ReservationAction.APPROVED, ReservationAction.REJECTED})

    def test_terminal_statuses(self) -> None:
        self.assertEqual(
            {s for s in ReservationStatus if s.is_terminal},
            {ReservationStatus.REJECTED, ReservationStatus.CANCELLED},
        )


class CreateTests(SimpleTestCase):
    def test_new_reservation_is_pending(self) -> None:
        slot = TimeSlot(at(25, 10), at(25, 12))
        reservation, transition = Reservation.create(
            room_id=201, requester=FACULTY, slot=slot, purpose="Lecture", now=NOW
        )

        self.assertEqual(reservation.status, ReservationStatus.PENDING)
        self.assertIsNone(reservation.reason)
        self.assertEqual(reservation.requester_id, FACULTY.id)
        self.assertEqual(reservation.created_at, NOW)
        self.assertIsNone(transition.previous_status)
        self.assertEqual(transition.new_status, ReservationStatus.PENDING)
        self.assertEqual(transition.action, ReservationAction.CREATED)
        self.assertEqual(transition.actor_id, FACULTY.id)
        self.assertEqual([type(e) for e in reservation.events], [ReservationCreated])

    def test_reason_outside_terminal_status_is_refused(self) -> None:
        with self.assertRaises(ValueError):
            Reservation(
                room_id=201,
                requester_id=STUDENT.id,
                slot=TimeSlot(at(25, 10), at(25, 12)),
                status=ReservationStatus.APPROVED,
                reason="because",
            )

    def test_equality_is_by_identity(self) -> None:
        reservation = new_reservation()
        other = new_reservation()

        self.assertNotEqual(reservation, other)
        self.assertEqual(len({reservation, reservation}), 1)


class ApproveTests(SimpleTestCase):
    def test_admin_approves_pending(self) -> None:
        reservation = new_reservation()

        transition = reservation.approve(ADMIN, NOW)

        self.assertEqual(reservation.status, ReservationStatus.APPROVED)
        self.assertEqual(transition.previous_status, ReservationStatus.PENDING)
        self.assertEqual(transition.new_status, ReservationStatus.APPROVED)
        self.assertEqual(transition.actor_id, ADMIN.id)
        self.assertEqual([type(e) for e in reservation.events], [ReservationApproved])

    def test_non_admin_cannot_approve(self) -> None:
        reservation = new_reservation()

        for actor in (STUDENT, FACULTY):
            with self.subTest(role=actor.role):
                with self.assertRaises(Unauthorized) as ctx:
                    reservation.approve(actor, NOW)
                self.assertEqual(ctx.exception.code, "admin-required")
        self.assertEqual(reservation.status, ReservationStatus.PENDING)
        self.assertEqual(reservation.events, [])

    def test_approve_outside_pending_is_a_state_conflict(self) -> None:
        for status in (ReservationStatus.APPROVED, ReservationStatus.REJECTED, ReservationStatus.CANCELLED):
            reservation = new_reservation()
            reservation.status = status
            with self.subTest(status=status):
                with self.assertRaises(Conflict) as ctx:
                    reservation.approve(ADMIN, NOW)
                self.assertEqual(ctx.exception.code, "state-conflict")
                self.assertEqual(reservation.status, status)

    def test_updated_at_moves_forward_with_stalled_clock(self) -> None:
        reservation = new_reservation()
        before = reservation.updated_at

        reservation.approve(ADMIN, NOW - timedelta(minutes=5))

        self.assertGreater(reservation.updated_at, before)
        self.assertEqual(reservation.created_at, NOW)


class RejectTests(SimpleTestCase):
    def test_reason_is_stored_verbatim(self) -> None:
        reservation = new_reservation()

        transition = reservation.reject(ADMIN, "Room under maintenance", NOW)

        self.assertEqual(reservation.status, ReservationStatus.REJECTED)
        self.assertEqual(reservation.reason, "Room under maintenance")
        self.assertEqual(transition.reason, "Room under maintenance")
        self.assertEqual([type(e) for e in reservation.events], [ReservationRejected])

    def test_reason_is_required(self) -> None:
        reservation = new_reservation()

        for reason in (None, "", "   "):
            with self.subTest(reason=reason):
                with self.assertRaises(InvalidArgument) as ctx:
                    reservation.reject(ADMIN, reason, NOW)
                self.assertEqual(ctx.exception.code, "reason-required")
        self.assertEqual(reservation.status, ReservationStatus.PENDING)

    def test_role_is_checked_before_reason(self) -> None:
        reservation = new_reservation()

        with self.assertRaises(Unauthorized):
            reservation.reject(STUDENT, "", NOW)

    def test_second_rejection_is_a_state_conflict(self) -> None:
        reservation = new_reservation()
        reservation.reject(ADMIN, "Room under maintenance", NOW)

        with self.assertRaises(Conflict) as ctx:
            reservation.reject(ADMIN, "Again", NOW)

        self.assertEqual(ctx.exception.code, "state-conflict")
        self.assertEqual(reservation.reason, "Room under maintenance")


class CancelTests(SimpleTestCase):
    def test_owner_cancels_pending_or_approved(self) -> None:
        for approved in (False, True):
            reservation = new_reservation()
            if approved:
                reservation.approve(ADMIN, NOW)
            previous = reservation.status
            with self.subTest(previous=previous):
                transition = reservation.cancel(STUDENT, "Plans changed", NOW)
                self.assertEqual(reservation.status, ReservationStatus.CANCELLED)
                self.assertEqual(reservation.reason, "Plans changed")
                self.assertEqual(transition.previous_status, previous)
                self.assertIsInstance(reservation.events[-1], ReservationCancelled)

    def test_reason_is_optional(self) -> None:
        reservation = new_reservation()

        reservation.cancel(STUDENT, "", NOW)

        self.assertIsNone(reservation.reason)

    def test_other_member_cannot_cancel(self) -> None:
        reservation = new_reservation()

        with self.assertRaises(Unauthorized) as ctx:
            reservation.cancel(OTHER_STUDENT, None, NOW)

        self.assertEqual(ctx.exception.code, "not-owner")
        self.assertEqual(reservation.status, ReservationStatus.PENDING)

    def test_owner_cannot_cancel_once_started(self) -> None:
        reservation = new_reservation()

        for now in (reservation.start, reservation.start + timedelta(minutes=30)):
            with self.subTest(now=now):
                with self.assertRaises(Unauthorized) as ctx:
                    reservation.cancel(STUDENT, None, now)
                self.assertEqual(ctx.exception.code, "already-started")

    def test_owner_can_cancel_a_minute_before_start(self) -> None:
        reservation = new_reservation()

        reservation.cancel(STUDENT, None, reservation.start - timedelta(minutes=1))

        self.assertEqual(reservation.status, ReservationStatus.CANCELLED)

    def test_admin_cancels_any_reservation_at_any_time(self) -> None:
        reservation = new_reservation()
        reservation.approve(ADMIN, NOW)

        reservation.cancel(ADMIN, "Fire drill", reservation.start + timedelta(minutes=30))

        self.assertEqual(reservation.status, ReservationStatus.CANCELLED)

    def test_terminal_reservations_cannot_be_cancelled(self) -> None:
        rejected = new_reservation()
        rejected.reject(ADMIN, "No", NOW)
        cancelled = new_reservation()
        cancelled.cancel(STUDENT, None, NOW)

        for reservation in (rejected, cancelled):
            for actor in (ADMIN, STUDENT):
                with self.subTest(status=reservation.status, actor=actor.role):
                    with self.assertRaises(Conflict) as ctx:
                        reservation.cancel(actor, None, NOW)
                    self.assertEqual(ctx.exception.code, "state-conflict")
