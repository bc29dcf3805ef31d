"""
Domain Building Blocks

Shared kernel of the reservation core:
- Entity: identity plus creation/modification instants
- ValueObject: frozen, compared by value
- Aggregate: an entity that records domain events until they are pulled
- DomainEvent: a fact that a committed transition produced

All instants are timezone-aware UTC datetimes.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List
from uuid import UUID, uuid4

TICK = timedelta(microseconds=1)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Entity(ABC):
    """
    Identity-bearing domain object

    Equality and hashing use `id` only, so a reloaded copy of a
    reservation equals the instance that was saved.
    """
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def touch(self, now: datetime):
        """
        Record a modification at `now`

        updated_at never repeats or goes back: a stalled or skewed clock
        still moves it forward by one tick.
        """
        self.updated_at = max(now, self.updated_at + TICK)

    def __eq__(self, other):
        return isinstance(other, self.__class__) and self.id == other.id

    def __hash__(self):
        return hash(self.id)


@dataclass(frozen=True)
class ValueObject(ABC):
    """Immutable and identity-free; equal when all fields are equal"""


@dataclass(eq=False)
class Aggregate(Entity):
    """
    Consistency boundary that buffers its own domain events

    The unit of work pulls the buffer once the aggregate is written and
    publishes it after commit.
    """
    _events: List['DomainEvent'] = field(default_factory=list, repr=False, init=False, compare=False)

    def add_event(self, event: 'DomainEvent'):
        self._events.append(event)

    def pull_events(self) -> List['DomainEvent']:
        """Hand over buffered events and empty the buffer"""
        events, self._events = self._events, []
        return events

    @property
    def events(self) -> List['DomainEvent']:
        return list(self._events)


@dataclass
class DomainEvent:
    """
    Something that happened to an aggregate

    Subclasses add payload fields as keyword-only so they can follow the
    defaulted envelope fields below.
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=utcnow)
    aggregate_id: UUID | None = None

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict:
        """Envelope as plain JSON-friendly values"""
        return {
            'event_id': str(self.event_id),
            'event_type': self.name,
            'occurred_at': self.occurred_at.isoformat(),
            'aggregate_id': None if self.aggregate_id is None else str(self.aggregate_id),
        }
