"""Entry points of the reservation core.

Any front end (HTTP, CLI, bot) calls these functions. The acting user is
always passed explicitly; nothing is read from a request-scoped context.
State-changing operations are dispatched as commands through the message
bus; reads go straight to the repository.
"""

from __future__ import annotations

from datetime import datetime
from typing import List
from uuid import UUID

from shared.application.message_bus import MessageBus, message_bus
from apps.bookings.application.command_handlers import (
    ApproveReservationCommand,
    CancelReservationCommand,
    CreateReservationCommand,
    RejectReservationCommand,
)
from apps.bookings.domain.entities import AuditEntry, Reservation, ReservationStatus, as_reservation_id
from apps.bookings.domain.exceptions import NotFound
from apps.bookings.infrastructure.audit import DjangoAuditRecorder
from apps.bookings.infrastructure.repositories import DjangoReservationRepository


def create_reservation(
    room_id: int,
    requester_id: int,
    start: datetime,
    end: datetime,
    purpose: str = "",
    *,
    bus: MessageBus = message_bus,
) -> Reservation:
    """Admit a new reservation request; it starts in PENDING."""

    return bus.handle_command(CreateReservationCommand(
        room_id=room_id,
        requester_id=requester_id,
        start=start,
        end=end,
        purpose=purpose,
    ))


def get_reservation(reservation_id: UUID | str) -> Reservation:
    reservation = DjangoReservationRepository().get(as_reservation_id(reservation_id))
    if reservation is None:
        raise NotFound("reservation", reservation_id)
    return reservation


def list_reservations(
    *,
    room_id: int | None = None,
    requester_id: int | None = None,
    status: ReservationStatus | str | None = None,
) -> List[Reservation]:
    """All reservations in creation order, optionally filtered."""

    if isinstance(status, str):
        status = ReservationStatus(status)
    return DjangoReservationRepository().list(room_id=room_id, requester_id=requester_id, status=status)


def cancel_reservation(
    reservation_id: UUID,
    acting_user_id: int,
    reason: str | None = None,
    *,
    bus: MessageBus = message_bus,
) -> Reservation:
    return bus.handle_command(CancelReservationCommand(
        reservation_id=reservation_id,
        acting_user_id=acting_user_id,
        reason=reason,
    ))


def approve_reservation(
    reservation_id: UUID,
    acting_user_id: int,
    *,
    bus: MessageBus = message_bus,
) -> Reservation:
    """The acting user must be an admin."""

    return bus.handle_command(ApproveReservationCommand(
        reservation_id=reservation_id,
        acting_user_id=acting_user_id,
    ))


def reject_reservation(
    reservation_id: UUID,
    acting_user_id: int,
    reason: str,
    *,
    bus: MessageBus = message_bus,
) -> Reservation:
    """The acting user must be an admin; the reason is mandatory."""

    return bus.handle_command(RejectReservationCommand(
        reservation_id=reservation_id,
        acting_user_id=acting_user_id,
        reason=reason,
    ))


def get_reservation_history(reservation_id: UUID | str) -> List[AuditEntry]:
    """Audit trail of one reservation, oldest entry first."""

    reservation = get_reservation(reservation_id)
    return DjangoAuditRecorder().history(reservation.id)
