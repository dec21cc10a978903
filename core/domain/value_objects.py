"""
Value objects for the domain.

Value objects are immutable objects that are defined by their attributes
rather than their identity. They have no identity and are compared by value.
"""
import re
from abc import ABC
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Union

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]{3,20}$")

PERMANENT = "permanent"

# 1 hour, 1 day, 3 days, 7 days, 30 days
ALLOWED_DURATION_HOURS = (1, 24, 72, 168, 720)


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects.

    Value objects are immutable and compared by value.
    """

    def __eq__(self, other):
        """Compare value objects by their attributes."""
        if not isinstance(other, self.__class__):
            return False
        return self.__dict__ == other.__dict__

    def __hash__(self):
        """Make value objects hashable."""
        return hash(tuple(sorted(self.__dict__.items())))


@dataclass(frozen=True)
class Username(ValueObject):
    """Username value object: 3-20 letters, digits or underscores."""

    value: str

    def __post_init__(self):
        """Validate username format."""
        if not isinstance(self.value, str) or not USERNAME_PATTERN.match(self.value):
            raise ValueError(
                "Invalid username (3-20 characters, letters, digits and underscore only)"
            )

    def __str__(self) -> str:
        """Return username as string."""
        return self.value


@dataclass(frozen=True)
class KeyDuration(ValueObject):
    """
    Key duration value object.

    Stored as the string form used in the key document: an hour count
    ("1", "24", "72", "168", "720") or "permanent".
    """

    value: str

    def __post_init__(self):
        """Validate duration value."""
        if self.value == PERMANENT:
            return
        if self.value not in {str(hours) for hours in ALLOWED_DURATION_HOURS}:
            raise ValueError(f"Invalid duration: {self.value}")

    @classmethod
    def parse(cls, raw: Union[str, int]) -> "KeyDuration":
        """
        Build a duration from request input.

        Args:
            raw: Hour count as int or string, or "permanent"

        Returns:
            KeyDuration instance

        Raises:
            ValueError: If the value is not an allowed duration
        """
        if isinstance(raw, bool) or raw is None:
            raise ValueError(f"Invalid duration: {raw}")
        return cls(str(raw).strip())

    @property
    def is_permanent(self) -> bool:
        return self.value == PERMANENT

    @property
    def hours(self) -> Optional[int]:
        if self.is_permanent:
            return None
        return int(self.value)

    def as_timedelta(self) -> Optional[timedelta]:
        """Return the duration as a timedelta, None when permanent."""
        if self.is_permanent:
            return None
        return timedelta(hours=self.hours)

    @property
    def label(self) -> str:
        """Human-readable label, e.g. '1 Hour', '3 Days', 'Permanent'."""
        if self.is_permanent:
            return "Permanent"
        hours = self.hours
        if hours < 24:
            return f"{hours} Hour{'s' if hours > 1 else ''}"
        days = hours // 24
        return f"{days} Day{'s' if days > 1 else ''}"

    def __str__(self) -> str:
        """Return duration as string."""
        return self.value
