"""
Reservation Event Handlers

Subscribers to the reservation lifecycle events. They run after the
transaction commits; a failing subscriber is logged by the message bus
and never affects the committed transition.
"""

import structlog

from apps.bookings.domain.events import ReservationEvent

logger = structlog.get_logger("apps.bookings.events")


def log_reservation_event(event: ReservationEvent) -> None:
    """One structured log line per committed lifecycle event"""
    payload = event.to_dict()
    event_type = payload.pop('event_type')
    logger.info(f"event.{event_type}", **payload)


def register_event_handlers(bus) -> None:
    # Subscribing to the base class covers created/approved/rejected/cancelled
    bus.register_event_handler(ReservationEvent, log_reservation_event)
