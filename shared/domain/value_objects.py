"""
Common Value Objects

Value objects used across multiple domains:
- TimeSlot: A half-open interval of instants (start inclusive, end exclusive)
"""

from dataclasses import dataclass
from datetime import datetime

from shared.domain.base import ValueObject


@dataclass(frozen=True)
class TimeSlot(ValueObject):
    """
    Time slot value object

    Represents the interval [start, end). Used for room reservations
    and availability checks. Both bounds must be timezone-aware.
    """
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("TimeSlot bounds must be timezone-aware")
        if self.start >= self.end:
            raise ValueError(f"Start ({self.start}) must be before end ({self.end})")

    def overlaps_with(self, other: 'TimeSlot') -> bool:
        """
        Check if this slot overlaps with another

        End is exclusive, so a slot ending exactly when another starts
        does not overlap it.

        Examples:
            - [10:00, 12:00) overlaps with [11:00, 13:00) -> True
            - [10:00, 12:00) overlaps with [12:00, 13:00) -> False (back-to-back)
        """
        if not isinstance(other, TimeSlot):
            raise TypeError("Can only check overlap with another TimeSlot")

        # Overlap formula: start1 < end2 AND end1 > start2
        return self.start < other.end and self.end > other.start

    def __str__(self):
        return f"{self.start.isoformat()} - {self.end.isoformat()}"

    def __repr__(self):
        return f"TimeSlot({self.start.isoformat()}, {self.end.isoformat()})"
