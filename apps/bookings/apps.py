from django.apps import AppConfig


class BookingsConfig(AppConfig):
    name = 'apps.bookings'
    label = 'bookings'
    default_auto_field = 'django.db.models.BigAutoField'

    def ready(self):
        # Command and event handlers are registered on the global bus once the ORM is ready
        from shared.application.message_bus import message_bus
        from apps.bookings.bootstrap import bootstrap

        bootstrap(message_bus)
