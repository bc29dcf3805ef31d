"""
Reservation Domain Entities

Core business entities for the reservation domain:
- Reservation: Aggregate root, owns the lifecycle state machine
- ReservationStatus / ReservationAction: closed sets of states and transitions
- TRANSITIONS: explicit table of legal transitions
- Principal, RoomView: read-only views supplied by the directory
- AuditEntry: one immutable record of an accepted transition
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet
from uuid import UUID

from shared.domain.base import Aggregate, ValueObject
from shared.domain.value_objects import TimeSlot
from apps.bookings.domain.exceptions import Conflict, InvalidArgument, NotFound, Unauthorized


class Role(Enum):
    STUDENT = 'student'
    FACULTY_MEMBER = 'faculty_member'
    ADMIN = 'admin'


@dataclass(frozen=True)
class Principal(ValueObject):
    """The identity performing an action, as resolved by the directory"""
    id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class RoomView(ValueObject):
    """
    Room as seen by the reservation core

    The active flag is informational; the core does not refuse
    reservations for inactive rooms.
    """
    id: int
    capacity: int
    is_active: bool = True


class ReservationStatus(Enum):
    """
    Reservation Status Finite State Machine

    State transitions:
    - PENDING -> APPROVED (admin approves)
    - PENDING -> REJECTED (admin rejects with a reason)
    - PENDING -> CANCELLED (requester or admin cancels)
    - APPROVED -> CANCELLED (requester or admin cancels)

    REJECTED and CANCELLED are terminal.
    """
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    CANCELLED = 'cancelled'

    @property
    def is_terminal(self) -> bool:
        return self in (ReservationStatus.REJECTED, ReservationStatus.CANCELLED)


class ReservationAction(Enum):
    CREATED = 'created'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    CANCELLED = 'cancelled'


@dataclass(frozen=True)
class TransitionRule:
    sources: FrozenSet[ReservationStatus]
    target: ReservationStatus
    admin_only: bool = False


TRANSITIONS: Dict[ReservationAction, TransitionRule] = {
    ReservationAction.CREATED: TransitionRule(
        sources=frozenset(),
        target=ReservationStatus.PENDING,
    ),
    ReservationAction.APPROVED: TransitionRule(
        sources=frozenset({ReservationStatus.PENDING}),
        target=ReservationStatus.APPROVED,
        admin_only=True,
    ),
    ReservationAction.REJECTED: TransitionRule(
        sources=frozenset({ReservationStatus.PENDING}),
        target=ReservationStatus.REJECTED,
        admin_only=True,
    ),
    ReservationAction.CANCELLED: TransitionRule(
        sources=frozenset({ReservationStatus.PENDING, ReservationStatus.APPROVED}),
        target=ReservationStatus.CANCELLED,
    ),
}


def ensure_permitted(action: ReservationAction, actor: Principal):
    """Role check of the transition table, independent of any reservation"""
    if TRANSITIONS[action].admin_only and not actor.is_admin:
        raise Unauthorized(
            f"Only ADMIN users can perform {action.name.lower()} on a reservation",
            code="admin-required",
        )


def as_reservation_id(value) -> UUID:
    """Reservation ids are UUIDs; anything that does not parse names no reservation"""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise NotFound("reservation", value) from None


@dataclass(frozen=True)
class Transition(ValueObject):
    """Outcome of one accepted state change, handed to the audit recorder"""
    reservation_id: UUID
    actor_id: int
    previous_status: ReservationStatus | None
    new_status: ReservationStatus
    action: ReservationAction
    occurred_at: datetime
    reason: str | None = None


@dataclass(frozen=True)
class AuditEntry(ValueObject):
    """A recorded transition, as read back from the audit trail"""
    id: int
    reservation_id: UUID
    actor_id: int | None
    previous_status: ReservationStatus | None
    new_status: ReservationStatus
    action: ReservationAction
    created_at: datetime
    reason: str | None = None


@dataclass(kw_only=True, eq=False)
class Reservation(Aggregate):
    """
    Reservation Aggregate Root

    A requester's claim on a room for the interval [start, end).

    Key invariants:
    - start < end (guaranteed by TimeSlot)
    - reason is only present in REJECTED or CANCELLED
    - status only changes through the methods below, following TRANSITIONS
    """

    room_id: int
    requester_id: int
    slot: TimeSlot
    purpose: str = ''
    status: ReservationStatus = ReservationStatus.PENDING
    reason: str | None = None

    def __post_init__(self):
        if self.reason is not None and not self.status.is_terminal:
            raise ValueError(
                f"Reservation in status {self.status.value} cannot carry a reason"
            )

    @classmethod
    def create(
        cls,
        *,
        room_id: int,
        requester: Principal,
        slot: TimeSlot,
        purpose: str,
        now: datetime,
    ) -> tuple['Reservation', Transition]:
        """
        Open a new reservation in PENDING

        Admission rules are checked by the AdmissionChecker beforehand.
        Events: ReservationCreated
        """
        from apps.bookings.domain.events import ReservationCreated

        reservation = cls(
            room_id=room_id,
            requester_id=requester.id,
            slot=slot,
            purpose=purpose,
            created_at=now,
            updated_at=now,
        )
        transition = Transition(
            reservation_id=reservation.id,
            actor_id=requester.id,
            previous_status=None,
            new_status=ReservationStatus.PENDING,
            action=ReservationAction.CREATED,
            occurred_at=now,
        )
        reservation.add_event(ReservationCreated(
            aggregate_id=reservation.id,
            reservation_id=reservation.id,
            room_id=room_id,
            requester_id=requester.id,
            actor_id=requester.id,
            slot=slot,
        ))
        return reservation, transition

    def approve(self, actor: Principal, now: datetime) -> Transition:
        """
        Approve (PENDING -> APPROVED)

        Overlap with other APPROVED reservations is not re-checked here.
        Events: ReservationApproved
        """
        self._ensure_allowed(ReservationAction.APPROVED, actor)
        return self._apply(ReservationAction.APPROVED, actor, now)

    def reject(self, actor: Principal, reason: str | None, now: datetime) -> Transition:
        """
        Reject (PENDING -> REJECTED)

        The reason is mandatory and stored verbatim.
        Events: ReservationRejected
        """
        self._ensure_allowed(ReservationAction.REJECTED, actor)
        if reason is None or not reason.strip():
            raise InvalidArgument("A reason is required to reject a reservation", code="reason-required")
        return self._apply(ReservationAction.REJECTED, actor, now, reason=reason)

    def cancel(self, actor: Principal, reason: str | None, now: datetime) -> Transition:
        """
        Cancel (PENDING or APPROVED -> CANCELLED)

        Admins may cancel any reservation at any time. Anyone else may only
        cancel their own reservation, and only before it starts.
        Events: ReservationCancelled
        """
        self._ensure_allowed(ReservationAction.CANCELLED, actor)

        if not actor.is_admin:
            if actor.id != self.requester_id:
                raise Unauthorized("You can only cancel your own reservations", code="not-owner")
            if self.has_started(now):
                raise Unauthorized(
                    "You cannot cancel a reservation that has already started",
                    code="already-started",
                )

        return self._apply(ReservationAction.CANCELLED, actor, now, reason=reason or None)

    def can(self, action: ReservationAction) -> bool:
        """Whether the current status is a valid source for `action`"""
        return self.status in TRANSITIONS[action].sources

    def has_started(self, now: datetime) -> bool:
        return self.slot.start <= now

    @property
    def start(self) -> datetime:
        return self.slot.start

    @property
    def end(self) -> datetime:
        return self.slot.end

    def _ensure_allowed(self, action: ReservationAction, actor: Principal):
        ensure_permitted(action, actor)
        if not self.can(action):
            allowed = ", ".join(sorted(s.name for s in TRANSITIONS[action].sources))
            raise Conflict(
                f"Cannot {action.name.lower()} reservation {self.id} in status "
                f"{self.status.name}; allowed from: {allowed}",
                code="state-conflict",
            )

    def _apply(
        self,
        action: ReservationAction,
        actor: Principal,
        now: datetime,
        reason: str | None = None,
    ) -> Transition:
        from apps.bookings.domain.events import EVENT_FOR_ACTION

        previous = self.status
        self.status = TRANSITIONS[action].target
        self.reason = reason
        self.touch(now)

        self.add_event(EVENT_FOR_ACTION[action](
            aggregate_id=self.id,
            reservation_id=self.id,
            room_id=self.room_id,
            requester_id=self.requester_id,
            actor_id=actor.id,
            slot=self.slot,
            previous_status=previous.value,
            reason=reason,
        ))

        return Transition(
            reservation_id=self.id,
            actor_id=actor.id,
            previous_status=previous,
            new_status=self.status,
            action=action,
            occurred_at=self.updated_at,
            reason=reason,
        )

    def __str__(self):
        return f"Reservation {self.id} ({self.status.value})"

    def __repr__(self):
        return (
            f"Reservation(id={self.id}, room_id={self.room_id}, "
            f"status={self.status.value}, slot={self.slot!r})"
        )
