"""Audit recorder writing `ReservationHistory` rows."""

from __future__ import annotations

from typing import List
from uuid import UUID

from apps.bookings.domain.entities import (
    AuditEntry,
    Reservation,
    ReservationAction,
    ReservationStatus,
)
from apps.bookings.domain.interfaces import AuditRecorder
from apps.bookings.models import ReservationHistory


def to_entry(row: ReservationHistory) -> AuditEntry:
    return AuditEntry(
        id=row.id,
        reservation_id=row.reservation_id,
        actor_id=row.actor_id,
        previous_status=ReservationStatus(row.previous_status) if row.previous_status else None,
        new_status=ReservationStatus(row.new_status),
        action=ReservationAction(row.action),
        created_at=row.created_at,
        reason=row.reason,
    )


class DjangoAuditRecorder(AuditRecorder):
    """
    Appends history rows on the default connection.

    Callers invoke it inside the unit of work that mutates the reservation,
    so a failing insert rolls the whole transition back.
    """

    def record(
        self,
        reservation: Reservation,
        actor_id: int,
        previous_status: ReservationStatus | None,
        new_status: ReservationStatus,
        action: ReservationAction,
        reason: str | None = None,
    ) -> AuditEntry:
        row = ReservationHistory.objects.create(
            reservation_id=reservation.id,
            actor_id=actor_id,
            previous_status=previous_status.value if previous_status else None,
            new_status=new_status.value,
            action=action.value,
            reason=reason,
            created_at=reservation.updated_at,
        )
        return to_entry(row)

    def history(self, reservation_id: UUID) -> List[AuditEntry]:
        rows = ReservationHistory.objects.filter(reservation_id=reservation_id).order_by("created_at", "id")
        return [to_entry(row) for row in rows]
