"""URL configuration for the room reservation service.

The reservation core has no HTTP surface of its own; front ends call
`apps.bookings.services` directly and mount their own routes here.
"""

urlpatterns: list = []
