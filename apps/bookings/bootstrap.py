"""Composition of the reservation core with its Django adapters."""

from __future__ import annotations

from typing import Any, Callable, Dict

from django.utils import timezone  # type: ignore

from shared.application.message_bus import MessageBus
from shared.application.uow import DjangoUnitOfWork
from shared.domain.base import utcnow
from apps.bookings.application.command_handlers import (
    ApproveReservationCommand,
    ApproveReservationHandler,
    CancelReservationCommand,
    CancelReservationHandler,
    Clock,
    CreateReservationCommand,
    CreateReservationHandler,
    RejectReservationCommand,
    RejectReservationHandler,
)
from apps.bookings.application.event_handlers import register_event_handlers
from apps.bookings.domain.admission import AdmissionChecker, AdmissionPolicy
from apps.bookings.infrastructure.audit import DjangoAuditRecorder
from apps.bookings.infrastructure.directory import DjangoDirectory, HolidayCalendar
from apps.bookings.infrastructure.repositories import DjangoReservationRepository


def build_command_handlers(
    policy: AdmissionPolicy | None = None,
    clock: Clock = utcnow,
) -> Dict[type, Callable[[Any], Any]]:
    """Handlers for every reservation command, wired to the database."""

    policy = policy or AdmissionPolicy.from_settings()
    directory = DjangoDirectory()
    reservations = DjangoReservationRepository()
    audit = DjangoAuditRecorder()
    checker = AdmissionChecker(
        directory=directory,
        calendar=HolidayCalendar(),
        overlap_index=reservations,
        policy=policy,
        reference_tz=timezone.get_default_timezone(),
    )

    return {
        CreateReservationCommand: CreateReservationHandler(
            checker, reservations, audit, DjangoUnitOfWork, clock
        ),
        ApproveReservationCommand: ApproveReservationHandler(
            directory, reservations, reservations, audit, policy, DjangoUnitOfWork, clock
        ),
        RejectReservationCommand: RejectReservationHandler(
            directory, reservations, audit, DjangoUnitOfWork, clock
        ),
        CancelReservationCommand: CancelReservationHandler(
            directory, reservations, audit, DjangoUnitOfWork, clock
        ),
    }


def bootstrap(bus: MessageBus, policy: AdmissionPolicy | None = None, clock: Clock = utcnow) -> MessageBus:
    """Register reservation command and event handlers on `bus`."""

    for command_type, handler in build_command_handlers(policy, clock).items():
        bus.register_command_handler(command_type, handler, replace=True)
    register_event_handlers(bus)
    return bus
