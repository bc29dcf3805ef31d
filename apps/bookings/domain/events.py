"""
Reservation Domain Events

Events that represent things that have happened in the reservation domain.
They are published after the transaction that produced them commits.
"""

from dataclasses import dataclass
from uuid import UUID

from shared.domain.base import DomainEvent
from shared.domain.value_objects import TimeSlot
from apps.bookings.domain.entities import ReservationAction


@dataclass(kw_only=True)
class ReservationEvent(DomainEvent):
    """Common payload of every reservation lifecycle event"""
    reservation_id: UUID
    room_id: int
    requester_id: int
    actor_id: int
    slot: TimeSlot
    previous_status: str | None = None
    reason: str | None = None

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            'reservation_id': str(self.reservation_id),
            'room_id': self.room_id,
            'requester_id': self.requester_id,
            'actor_id': self.actor_id,
            'start': self.slot.start.isoformat(),
            'end': self.slot.end.isoformat(),
            'previous_status': self.previous_status,
            'reason': self.reason,
        })
        return data


@dataclass(kw_only=True)
class ReservationCreated(ReservationEvent):
    """A new reservation request was admitted (-> PENDING)"""


@dataclass(kw_only=True)
class ReservationApproved(ReservationEvent):
    """An admin approved the reservation (PENDING -> APPROVED)"""


@dataclass(kw_only=True)
class ReservationRejected(ReservationEvent):
    """An admin rejected the reservation with a reason (PENDING -> REJECTED)"""


@dataclass(kw_only=True)
class ReservationCancelled(ReservationEvent):
    """The requester or an admin cancelled the reservation"""


EVENT_FOR_ACTION = {
    ReservationAction.CREATED: ReservationCreated,
    ReservationAction.APPROVED: ReservationApproved,
    ReservationAction.REJECTED: ReservationRejected,
    ReservationAction.CANCELLED: ReservationCancelled,
}
