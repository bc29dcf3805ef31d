"""Django ORM implementation of the reservation store and overlap index."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from django.db import transaction  # type: ignore
from django.db.models import Q  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from shared.domain.value_objects import TimeSlot
from apps.bookings.domain.entities import Reservation, ReservationStatus
from apps.bookings.domain.exceptions import Conflict
from apps.bookings.domain.interfaces import OverlapIndex, ReservationRepository
from apps.bookings.models import Reservation as ReservationModel
from apps.rooms.models import Room


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection(queryset.db).in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def to_domain(row: ReservationModel) -> Reservation:
    return Reservation(
        id=row.id,
        room_id=row.room_id,
        requester_id=row.requester_id,
        slot=TimeSlot(row.start_time, row.end_time),
        purpose=row.purpose,
        status=ReservationStatus(row.status),
        reason=row.reason,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class DjangoReservationRepository(ReservationRepository, OverlapIndex):
    """Reservations stored in the `bookings_reservation` table."""

    def add(self, reservation: Reservation) -> None:
        ReservationModel.objects.create(
            id=reservation.id,
            room_id=reservation.room_id,
            requester_id=reservation.requester_id,
            start_time=reservation.start,
            end_time=reservation.end,
            purpose=reservation.purpose,
            status=reservation.status.value,
            reason=reservation.reason,
            created_at=reservation.created_at,
            updated_at=reservation.updated_at,
        )

    def save(self, reservation: Reservation, expected_status: ReservationStatus) -> None:
        """
        Write the lifecycle fields if the row is still in `expected_status`

        A concurrent transition that committed first leaves zero matching
        rows, which is reported as Conflict(state-conflict).
        """
        updated = ReservationModel.objects.filter(
            pk=reservation.id,
            status=expected_status.value,
        ).update(
            status=reservation.status.value,
            reason=reservation.reason,
            updated_at=reservation.updated_at,
        )
        if updated:
            return

        current = ReservationModel.objects.filter(pk=reservation.id).values_list("status", flat=True).first()
        if current is None:
            raise ReservationModel.DoesNotExist(f"Reservation {reservation.id} does not exist")
        raise Conflict(
            f"Reservation {reservation.id} moved to {current} while being changed "
            f"from {expected_status.value}",
            code="state-conflict",
        )

    def get(self, reservation_id: UUID) -> Optional[Reservation]:
        row = ReservationModel.objects.filter(pk=reservation_id).first()
        return to_domain(row) if row else None

    def get_for_update(self, reservation_id: UUID) -> Optional[Reservation]:
        queryset = _lock_queryset_if_possible(ReservationModel.objects.filter(pk=reservation_id))
        row = queryset.first()
        return to_domain(row) if row else None

    def list(
        self,
        room_id: int | None = None,
        requester_id: int | None = None,
        status: ReservationStatus | None = None,
    ) -> List[Reservation]:
        queryset = ReservationModel.objects.all()
        if room_id is not None:
            queryset = queryset.filter(room_id=room_id)
        if requester_id is not None:
            queryset = queryset.filter(requester_id=requester_id)
        if status is not None:
            queryset = queryset.filter(status=status.value)
        return [to_domain(row) for row in queryset.order_by("created_at", "id")]

    def lock_room(self, room_id: int) -> None:
        list(_lock_queryset_if_possible(Room.objects.filter(pk=room_id)).values_list("pk", flat=True))

    def find_conflicting(self, room_id: int, start: datetime, end: datetime) -> List[Reservation]:
        """Only APPROVED reservations take part in conflict detection."""

        overlapping_filter = Q(start_time__lt=end) & Q(end_time__gt=start)

        queryset = ReservationModel.objects.filter(
            room_id=room_id,
            status=ReservationModel.Status.APPROVED,
        ).filter(overlapping_filter)

        return [to_domain(row) for row in queryset.order_by("start_time")]
