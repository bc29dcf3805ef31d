"""
Admission Checker

Decides whether a new reservation request may exist. Checks run in a
fixed order and the first failing one is raised; nothing is written
until every check has passed.

    1. requester exists                  NotFound(user)
    2. room exists                       NotFound(room)
    3. start date is not a holiday       Conflict(holiday)
    4. end after start                   InvalidArgument(time-range)
    5. no APPROVED overlap               Conflict(overlap)
    6. start in the future               Conflict(past-booking)
    7. start within booking horizon      Conflict(horizon-exceeded)
    8. start respects minimum lead time  InvalidArgument(insufficient-lead-time)
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo

import structlog

from shared.domain.value_objects import TimeSlot
from apps.bookings.domain.entities import Principal, RoomView
from apps.bookings.domain.exceptions import Conflict, InvalidArgument
from apps.bookings.domain.interfaces import CalendarOracle, Directory, OverlapIndex

logger = structlog.get_logger(__name__)

DEFAULT_MAX_ADVANCE_DAYS = 90
DEFAULT_MIN_LEAD_TIME_MINUTES = 60


@dataclass(frozen=True)
class AdmissionPolicy:
    """Tunable limits of the admission rules"""
    max_advance: timedelta = timedelta(days=DEFAULT_MAX_ADVANCE_DAYS)
    min_lead_time: timedelta = timedelta(minutes=DEFAULT_MIN_LEAD_TIME_MINUTES)
    strict_approval_overlap_check: bool = False

    @classmethod
    def from_settings(cls) -> 'AdmissionPolicy':
        from django.conf import settings

        config = getattr(settings, 'RESERVATIONS', {})
        return cls(
            max_advance=timedelta(days=int(config.get('MAX_ADVANCE_DAYS', DEFAULT_MAX_ADVANCE_DAYS))),
            min_lead_time=timedelta(
                minutes=int(config.get('MIN_LEAD_TIME_MINUTES', DEFAULT_MIN_LEAD_TIME_MINUTES))
            ),
            strict_approval_overlap_check=bool(config.get('STRICT_APPROVAL_OVERLAP_CHECK', False)),
        )


@dataclass(frozen=True)
class Admission:
    """Everything the creation step needs once a request is admitted"""
    requester: Principal
    room: RoomView
    slot: TimeSlot


def as_aware(value: datetime, tz: tzinfo) -> datetime:
    """Interpret naive datetimes in the reference time zone"""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value


class AdmissionChecker:
    """Validates reservation requests against the calendar and the room's schedule"""

    def __init__(
        self,
        directory: Directory,
        calendar: CalendarOracle,
        overlap_index: OverlapIndex,
        policy: AdmissionPolicy,
        reference_tz: tzinfo,
    ):
        self.directory = directory
        self.calendar = calendar
        self.overlap_index = overlap_index
        self.policy = policy
        self.reference_tz = reference_tz

    def check(
        self,
        room_id: int,
        requester_id: int,
        start: datetime,
        end: datetime,
        now: datetime,
    ) -> Admission:
        requester = self.directory.resolve_user(requester_id)
        room = self.directory.resolve_room(room_id)

        start = as_aware(start, self.reference_tz)
        end = as_aware(end, self.reference_tz)

        booking_date = start.astimezone(self.reference_tz).date()
        if self.calendar.is_blackout_date(booking_date):
            raise Conflict(f"Bookings are not allowed on holidays ({booking_date})", code="holiday")

        if end <= start:
            raise InvalidArgument("End time must be after start time", code="time-range")

        slot = TimeSlot(start, end)

        conflicting = self.overlap_index.find_conflicting(room_id, slot.start, slot.end)
        if conflicting:
            logger.info(
                "reservation.admission.overlap",
                room_id=room_id,
                start=slot.start.isoformat(),
                end=slot.end.isoformat(),
                conflicting=[str(r.id) for r in conflicting],
            )
            raise Conflict("Room is already booked for the selected time", code="overlap")

        if slot.start <= now:
            raise Conflict("Cannot book a room in the past", code="past-booking")

        if slot.start > now + self.policy.max_advance:
            raise Conflict(
                f"Bookings cannot be made more than {self.policy.max_advance.days} days in advance",
                code="horizon-exceeded",
            )

        if slot.start < now + self.policy.min_lead_time:
            minutes = int(self.policy.min_lead_time.total_seconds() // 60)
            raise InvalidArgument(
                f"Bookings must be made at least {minutes} minutes in advance",
                code="insufficient-lead-time",
            )

        return Admission(requester=requester, room=room, slot=slot)
