"""Bookings app package.

This app holds the room reservation core: admission of new requests
(holiday blackout, overlap with approved reservations, lead time and
booking horizon), the moderated approval lifecycle and the append-only
audit trail of every transition. Each state change runs in a single
database transaction with row locking on the reservation.

Public entry points live in ``apps.bookings.services``.
"""
