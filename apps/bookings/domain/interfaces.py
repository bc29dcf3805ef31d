"""
Ports of the reservation core

The core talks to the outside world only through these interfaces.
Django-backed implementations live in apps.bookings.infrastructure.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from apps.bookings.domain.entities import (
    AuditEntry,
    Principal,
    Reservation,
    ReservationStatus,
    RoomView,
    Transition,
)


class Directory(ABC):
    """Read-only lookups of users and rooms"""

    @abstractmethod
    def resolve_user(self, user_id: int) -> Principal:
        """Raises NotFound('user', ...) if the user does not exist"""

    @abstractmethod
    def resolve_room(self, room_id: int) -> RoomView:
        """Raises NotFound('room', ...) if the room does not exist"""


class CalendarOracle(ABC):
    """Holiday calendar"""

    @abstractmethod
    def is_blackout_date(self, day: date) -> bool:
        """True when no reservation may begin on `day`"""


class OverlapIndex(ABC):
    """Conflict lookup for a room and an interval"""

    @abstractmethod
    def find_conflicting(self, room_id: int, start: datetime, end: datetime) -> List[Reservation]:
        """
        APPROVED reservations of the room intersecting [start, end)

        Reservations in any other status never conflict.
        """


class ReservationRepository(ABC):
    """Durable store of reservations"""

    @abstractmethod
    def add(self, reservation: Reservation) -> None:
        pass

    @abstractmethod
    def save(self, reservation: Reservation, expected_status: ReservationStatus) -> None:
        """
        Persist a transition out of `expected_status`

        Raises Conflict(state-conflict) when the stored status has moved on.
        """

    @abstractmethod
    def get(self, reservation_id: UUID) -> Optional[Reservation]:
        pass

    @abstractmethod
    def get_for_update(self, reservation_id: UUID) -> Optional[Reservation]:
        """Load a reservation and hold it until the surrounding transaction ends"""

    @abstractmethod
    def list(
        self,
        room_id: int | None = None,
        requester_id: int | None = None,
        status: ReservationStatus | None = None,
    ) -> List[Reservation]:
        pass

    @abstractmethod
    def lock_room(self, room_id: int) -> None:
        """Serialize writers that must see a stable set of APPROVED reservations for a room"""


class AuditRecorder(ABC):
    """Append-only history of reservation transitions"""

    @abstractmethod
    def record(
        self,
        reservation: Reservation,
        actor_id: int,
        previous_status: ReservationStatus | None,
        new_status: ReservationStatus,
        action,
        reason: str | None = None,
    ) -> AuditEntry:
        pass

    def record_transition(self, reservation: Reservation, transition: Transition) -> AuditEntry:
        return self.record(
            reservation,
            transition.actor_id,
            transition.previous_status,
            transition.new_status,
            transition.action,
            transition.reason,
        )

    @abstractmethod
    def history(self, reservation_id: UUID) -> List[AuditEntry]:
        """Entries for one reservation, oldest first"""
