"""
Message Bus

Routes commands to exactly one handler and events to any number of
subscribers. Front ends dispatch commands here instead of calling the
handlers directly, so wiring lives in one place (`AppConfig.ready()`).
"""

from typing import Any, Callable, Dict, Iterable, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]
CommandHandler = Callable[[Any], Any]


class MessageBus:
    """
    Commands are 1:1, events are 1:N.

    An event subscriber registered for a base class also receives every
    subclass of it, so one subscription can cover a whole event family.
    """

    def __init__(self):
        self._subscribers: Dict[Type[DomainEvent], List[EventHandler]] = {}
        self._command_handlers: Dict[Type, CommandHandler] = {}

    def register_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        subscribers = self._subscribers.setdefault(event_type, [])
        if handler not in subscribers:
            subscribers.append(handler)
            logger.debug("Subscribed %r to %s", handler, event_type.__name__)

    def register_command_handler(self, command_type: Type, handler: CommandHandler, replace: bool = False):
        if not replace and command_type in self._command_handlers:
            raise ValueError(f"{command_type.__name__} already has a handler")
        self._command_handlers[command_type] = handler

    def has_command_handler(self, command_type: Type) -> bool:
        return command_type in self._command_handlers

    def handle_command(self, command: Any) -> Any:
        """
        Run the handler for `command` and return its result

        Handler exceptions reach the caller unchanged. LookupError means
        nothing was registered for the command type.
        """
        name = type(command).__name__
        try:
            handler = self._command_handlers[type(command)]
        except KeyError:
            raise LookupError(f"No handler registered for {name}") from None

        logger.debug("Dispatching %s", name)
        try:
            return handler(command)
        except Exception as exc:
            logger.info("%s refused: %s", name, exc)
            raise

    def subscribers_for(self, event: DomainEvent) -> List[EventHandler]:
        handlers: List[EventHandler] = []
        for klass in type(event).__mro__:
            for handler in self._subscribers.get(klass, ()):
                if handler not in handlers:
                    handlers.append(handler)
        return handlers

    def publish_events(self, events: Iterable[DomainEvent]):
        """
        Deliver each event to its subscribers

        A failing subscriber is logged and skipped; the others still run.
        """
        for event in events:
            for handler in self.subscribers_for(event):
                try:
                    handler(event)
                except Exception:
                    logger.exception(
                        "Subscriber %r failed on %s %s", handler, event.name, event.event_id
                    )


# Process-wide bus; the bookings app registers its handlers on it at startup
message_bus = MessageBus()
