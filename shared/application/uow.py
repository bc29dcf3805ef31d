"""
Unit of Work

A state-changing reservation operation is one database transaction: the
reservation row, its audit entry and the events it raised either all
happen or none do. Events leave the process only after the commit is
durable.
"""

from abc import ABC, abstractmethod
from functools import partial
from typing import Callable, List
import logging

from django.db import transaction

from shared.domain.base import Aggregate, DomainEvent

logger = logging.getLogger(__name__)


class AbstractUnitOfWork(ABC):
    """Transaction boundary around one command"""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    @abstractmethod
    def commit(self):
        pass

    @abstractmethod
    def rollback(self):
        pass

    @abstractmethod
    def collect_events(self, aggregate: Aggregate):
        """Take ownership of the events buffered on `aggregate`"""


UnitOfWorkFactory = Callable[[], AbstractUnitOfWork]


class DjangoUnitOfWork(AbstractUnitOfWork):
    """
    `transaction.atomic()` scoped to one command

    Inside an outer atomic block the unit of work is a savepoint and its
    events wait for the outermost commit; on rollback they are dropped.

        with DjangoUnitOfWork() as uow:
            reservation = repository.get_for_update(reservation_id)
            transition = reservation.approve(actor, now)
            repository.save(reservation, transition.previous_status)
            audit.record_transition(reservation, transition)
            uow.collect_events(reservation)
    """

    def __init__(self, using: str | None = None, bus=None):
        self.using = using
        self._bus = bus
        self._atomic = None
        self._pending: List[DomainEvent] = []

    def __enter__(self):
        self._atomic = transaction.atomic(using=self.using)
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            super().__exit__(exc_type, exc_val, exc_tb)
        finally:
            atomic, self._atomic = self._atomic, None
            if atomic is not None:
                atomic.__exit__(exc_type, exc_val, exc_tb)

    def commit(self):
        events, self._pending = self._pending, []
        if events:
            logger.debug("Deferring %d event(s) until commit", len(events))
            transaction.on_commit(partial(self._publish, events), using=self.using)

    def rollback(self):
        if self._pending:
            logger.warning("Rolled back, dropping %d event(s)", len(self._pending))
        self._pending = []

    def collect_events(self, aggregate: Aggregate):
        self._pending.extend(aggregate.pull_events())

    def _publish(self, events: List[DomainEvent]):
        bus = self._bus
        if bus is None:
            from shared.application.message_bus import message_bus as bus

        try:
            bus.publish_events(events)
        except Exception:
            # The transaction is already durable; nothing left to undo
            logger.exception("Publishing %d event(s) failed after commit", len(events))
