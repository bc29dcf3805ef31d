"""
Reservation Command Handlers

These are the state-changing use cases of the reservation core.
Each one runs as a single unit of work: load and lock, check guards,
write the reservation and exactly one audit entry, commit.

Commands:
- CreateReservationCommand: Admit a new reservation request (-> PENDING)
- ApproveReservationCommand: Admin approval (PENDING -> APPROVED)
- RejectReservationCommand: Admin rejection (PENDING -> REJECTED)
- CancelReservationCommand: Cancellation (PENDING/APPROVED -> CANCELLED)
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable
from uuid import UUID

import structlog

from shared.application.uow import DjangoUnitOfWork, UnitOfWorkFactory
from shared.domain.base import utcnow
from apps.bookings.domain.admission import AdmissionChecker, AdmissionPolicy
from apps.bookings.domain.entities import (
    Reservation,
    ReservationAction,
    as_reservation_id,
    ensure_permitted,
)
from apps.bookings.domain.exceptions import Conflict, NotFound
from apps.bookings.domain.interfaces import (
    AuditRecorder,
    Directory,
    OverlapIndex,
    ReservationRepository,
)

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


# ===== Commands =====

@dataclass(frozen=True)
class CreateReservationCommand:
    room_id: int
    requester_id: int
    start: datetime
    end: datetime
    purpose: str = ''


@dataclass(frozen=True)
class ApproveReservationCommand:
    reservation_id: UUID
    acting_user_id: int


@dataclass(frozen=True)
class RejectReservationCommand:
    reservation_id: UUID
    acting_user_id: int
    reason: str


@dataclass(frozen=True)
class CancelReservationCommand:
    reservation_id: UUID
    acting_user_id: int
    reason: str | None = None


# ===== Command Handlers =====

class CreateReservationHandler:
    """
    Handler for CreateReservation command

    Creation is optimistic: only APPROVED reservations block a room, so
    two overlapping PENDING requests can both be admitted and the
    approval step decides between them.
    """

    def __init__(
        self,
        checker: AdmissionChecker,
        reservations: ReservationRepository,
        audit: AuditRecorder,
        uow_factory: UnitOfWorkFactory = DjangoUnitOfWork,
        clock: Clock = utcnow,
    ):
        self.checker = checker
        self.reservations = reservations
        self.audit = audit
        self.uow_factory = uow_factory
        self.clock = clock

    def handle(self, command: CreateReservationCommand) -> Reservation:
        now = self.clock()

        with self.uow_factory() as uow:
            admission = self.checker.check(
                command.room_id,
                command.requester_id,
                command.start,
                command.end,
                now,
            )

            reservation, transition = Reservation.create(
                room_id=admission.room.id,
                requester=admission.requester,
                slot=admission.slot,
                purpose=command.purpose,
                now=now,
            )

            self.reservations.add(reservation)
            self.audit.record_transition(reservation, transition)
            uow.collect_events(reservation)

        logger.info(
            "reservation.created",
            reservation_id=str(reservation.id),
            room_id=reservation.room_id,
            requester_id=admission.requester.id,
            role=admission.requester.role.value,
        )
        return reservation

    __call__ = handle


class ApproveReservationHandler:
    """
    Handler for ApproveReservation command

    By default approval trusts the admin's judgement and does not look for
    other APPROVED reservations in the same window. With
    strict_approval_overlap_check the room is locked and an overlapping
    APPROVED reservation makes the approval fail with Conflict(overlap).
    """

    def __init__(
        self,
        directory: Directory,
        reservations: ReservationRepository,
        overlap_index: OverlapIndex,
        audit: AuditRecorder,
        policy: AdmissionPolicy,
        uow_factory: UnitOfWorkFactory = DjangoUnitOfWork,
        clock: Clock = utcnow,
    ):
        self.directory = directory
        self.reservations = reservations
        self.overlap_index = overlap_index
        self.audit = audit
        self.policy = policy
        self.uow_factory = uow_factory
        self.clock = clock

    def handle(self, command: ApproveReservationCommand) -> Reservation:
        actor = self.directory.resolve_user(command.acting_user_id)
        ensure_permitted(ReservationAction.APPROVED, actor)

        with self.uow_factory() as uow:
            reservation = _load_for_update(self.reservations, command.reservation_id)
            transition = reservation.approve(actor, self.clock())

            if self.policy.strict_approval_overlap_check:
                self.reservations.lock_room(reservation.room_id)
                conflicting = [
                    r for r in self.overlap_index.find_conflicting(
                        reservation.room_id, reservation.start, reservation.end
                    )
                    if r.id != reservation.id and r.slot.overlaps_with(reservation.slot)
                ]
                if conflicting:
                    raise Conflict(
                        "Room is already booked for the selected time",
                        code="overlap",
                    )

            self.reservations.save(reservation, transition.previous_status)
            self.audit.record_transition(reservation, transition)
            uow.collect_events(reservation)

        logger.info(
            "reservation.approved",
            reservation_id=str(reservation.id),
            actor_id=actor.id,
            role=actor.role.value,
        )
        return reservation

    __call__ = handle


class RejectReservationHandler:
    """Handler for RejectReservation command"""

    def __init__(
        self,
        directory: Directory,
        reservations: ReservationRepository,
        audit: AuditRecorder,
        uow_factory: UnitOfWorkFactory = DjangoUnitOfWork,
        clock: Clock = utcnow,
    ):
        self.directory = directory
        self.reservations = reservations
        self.audit = audit
        self.uow_factory = uow_factory
        self.clock = clock

    def handle(self, command: RejectReservationCommand) -> Reservation:
        actor = self.directory.resolve_user(command.acting_user_id)
        ensure_permitted(ReservationAction.REJECTED, actor)

        with self.uow_factory() as uow:
            reservation = _load_for_update(self.reservations, command.reservation_id)
            transition = reservation.reject(actor, command.reason, self.clock())

            self.reservations.save(reservation, transition.previous_status)
            self.audit.record_transition(reservation, transition)
            uow.collect_events(reservation)

        logger.info(
            "reservation.rejected",
            reservation_id=str(reservation.id),
            actor_id=actor.id,
            reason=reservation.reason,
        )
        return reservation

    __call__ = handle


class CancelReservationHandler:
    """Handler for CancelReservation command"""

    def __init__(
        self,
        directory: Directory,
        reservations: ReservationRepository,
        audit: AuditRecorder,
        uow_factory: UnitOfWorkFactory = DjangoUnitOfWork,
        clock: Clock = utcnow,
    ):
        self.directory = directory
        self.reservations = reservations
        self.audit = audit
        self.uow_factory = uow_factory
        self.clock = clock

    def handle(self, command: CancelReservationCommand) -> Reservation:
        with self.uow_factory() as uow:
            reservation = _load_for_update(self.reservations, command.reservation_id)
            actor = self.directory.resolve_user(command.acting_user_id)
            transition = reservation.cancel(actor, command.reason, self.clock())

            self.reservations.save(reservation, transition.previous_status)
            self.audit.record_transition(reservation, transition)
            uow.collect_events(reservation)

        logger.info(
            "reservation.cancelled",
            reservation_id=str(reservation.id),
            actor_id=actor.id,
            role=actor.role.value,
            previous_status=transition.previous_status.value,
        )
        return reservation

    __call__ = handle


def _load_for_update(reservations: ReservationRepository, reservation_id: UUID) -> Reservation:
    reservation_id = as_reservation_id(reservation_id)
    reservation = reservations.get_for_update(reservation_id)
    if reservation is None:
        raise NotFound("reservation", reservation_id)
    return reservation
