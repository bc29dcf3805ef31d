"""Read-only adapters over the users, rooms and holidays apps."""

from __future__ import annotations

from datetime import date

import structlog
from django.contrib.auth import get_user_model  # type: ignore
from django.db import DatabaseError  # type: ignore

from apps.bookings.domain.entities import Principal, Role, RoomView
from apps.bookings.domain.exceptions import CollaboratorUnavailable, NotFound
from apps.bookings.domain.interfaces import CalendarOracle, Directory
from apps.holidays.models import Holiday
from apps.rooms.models import Room

logger = structlog.get_logger(__name__)


class DjangoDirectory(Directory):
    """Users and rooms from the local database."""

    def resolve_user(self, user_id: int) -> Principal:
        user_model = get_user_model()
        try:
            row = user_model.objects.filter(pk=user_id).values("pk", "role").first()
        except DatabaseError as exc:
            logger.error("directory.user_lookup_failed", user_id=user_id, error=str(exc))
            raise CollaboratorUnavailable("Directory", exc) from exc
        if row is None:
            raise NotFound("user", user_id)
        return Principal(id=row["pk"], role=Role(row["role"]))

    def resolve_room(self, room_id: int) -> RoomView:
        try:
            row = Room.objects.filter(pk=room_id).values("pk", "capacity", "is_active").first()
        except DatabaseError as exc:
            logger.error("directory.room_lookup_failed", room_id=room_id, error=str(exc))
            raise CollaboratorUnavailable("Directory", exc) from exc
        if row is None:
            raise NotFound("room", room_id)
        return RoomView(id=row["pk"], capacity=row["capacity"], is_active=row["is_active"])


class HolidayCalendar(CalendarOracle):
    """Blackout dates from active `Holiday` rows."""

    def is_blackout_date(self, day: date) -> bool:
        try:
            return Holiday.objects.blocks(day)
        except DatabaseError as exc:
            logger.error("calendar.lookup_failed", day=day.isoformat(), error=str(exc))
            raise CollaboratorUnavailable("Holiday calendar", exc) from exc
