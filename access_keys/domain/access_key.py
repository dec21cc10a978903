"""
AccessKey domain entity.

This is the core domain entity representing one record of the key
document. It contains business logic and is independent of infrastructure.
"""

import secrets
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from core.domain.exceptions import (
    KeyAlreadyExpiredError,
    KeyNotRenewableError,
    KeyTooCloseToExpiryError,
)
from core.domain.value_objects import PERMANENT, KeyDuration, Username

KEY_BYTES = 16

MINIMUM_RENEWAL_WINDOW = timedelta(hours=1)

_DOCUMENT_FIELDS = (
    "key",
    "username",
    "duration",
    "createdAt",
    "expiresAt",
    "renewCount",
    "lastRenewedAt",
    "renewedAt",
)


def generate_access_key() -> str:
    """
    Generate an opaque access key.

    Returns:
        32 uppercase hexadecimal characters (128 bits of randomness)
    """
    return secrets.token_hex(KEY_BYTES).upper()


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Render a datetime as UTC ISO-8601 with milliseconds and a Z suffix."""
    if value is None:
        return None
    utc_value = value.astimezone(timezone.utc)
    return utc_value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a stored timestamp into an aware UTC datetime.

    Naive values are taken to be UTC.

    Raises:
        ValueError: If the value is not ISO-8601
    """
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValueError(f"Invalid timestamp: {value!r}")
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True)
class AccessKey:
    """
    AccessKey domain entity.

    A record is active while it is permanent (no expiry) or its
    expiry is strictly in the future. Instances are immutable;
    lifecycle methods return new instances.
    """

    key: str
    username: str
    duration: str
    created_at: datetime
    expires_at: Optional[datetime]
    renew_count: int = 0
    last_renewed_at: Optional[datetime] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        """Validate access key entity."""
        if not self.key or not isinstance(self.key, str):
            raise ValueError("Access key cannot be empty")
        if not self.username or not isinstance(self.username, str):
            raise ValueError("Username is required")
        if self.renew_count < 0:
            raise ValueError("Renew count cannot be negative")

    @classmethod
    def create(
        cls,
        username: Username,
        duration: KeyDuration,
        now: datetime,
        key: Optional[str] = None,
    ) -> "AccessKey":
        """
        Create a new AccessKey entity.

        Args:
            username: Validated username
            duration: Validated duration
            now: Creation time
            key: Optional key (generated if not provided)

        Returns:
            AccessKey entity instance
        """
        delta = duration.as_timedelta()
        return cls(
            key=key or generate_access_key(),
            username=username.value,
            duration=duration.value,
            created_at=now,
            expires_at=None if delta is None else now + delta,
            renew_count=0,
            last_renewed_at=None,
        )

    @property
    def is_permanent(self) -> bool:
        return self.expires_at is None

    def is_active(self, now: datetime) -> bool:
        """
        Check if the key is active at the given time.

        Args:
            now: Current time

        Returns:
            True if permanent or expiring strictly after now
        """
        return self.expires_at is None or self.expires_at > now

    def is_expired(self, now: datetime) -> bool:
        return not self.is_active(now)

    def time_remaining(self, now: datetime) -> Optional[timedelta]:
        """Time until expiry, None for permanent keys."""
        if self.expires_at is None:
            return None
        return self.expires_at - now

    def original_extension(self) -> Optional[timedelta]:
        """The stored duration as a timedelta, None if it is not an hour count."""
        if self.duration == PERMANENT:
            return None
        try:
            hours = int(self.duration)
        except (TypeError, ValueError):
            return None
        if hours <= 0:
            return None
        return timedelta(hours=hours)

    def renew(self, now: datetime, extension: Optional[timedelta] = None) -> "AccessKey":
        """
        Create a new AccessKey instance with a later expiry.

        The extension is added to the current expiry, not to now.

        Args:
            now: Current time
            extension: Amount to extend by (defaults to the stored duration)

        Returns:
            New AccessKey instance with updated expiry and renewal counters

        Raises:
            KeyNotRenewableError: If the key is permanent
            KeyAlreadyExpiredError: If the expiry has passed
            KeyTooCloseToExpiryError: If less than one hour remains
        """
        if self.is_permanent or self.duration == PERMANENT:
            raise KeyNotRenewableError()
        if self.is_expired(now):
            raise KeyAlreadyExpiredError()

        remaining = self.time_remaining(now)
        if remaining < MINIMUM_RENEWAL_WINDOW:
            raise KeyTooCloseToExpiryError(round(remaining.total_seconds() / 60))

        if extension is None:
            extension = self.original_extension()
            if extension is None:
                raise KeyNotRenewableError(
                    f"Key has no renewable duration: {self.duration}"
                )
        if extension <= timedelta(0):
            raise ValueError("Renewal extension must be positive")

        return replace(
            self,
            expires_at=self.expires_at + extension,
            renew_count=self.renew_count + 1,
            last_renewed_at=now,
        )

    def to_document(self) -> Dict[str, Any]:
        """Convert to the JSON object stored in the key document."""
        document = {
            "key": self.key,
            "username": self.username,
            "duration": self.duration,
            "createdAt": format_timestamp(self.created_at),
            "expiresAt": format_timestamp(self.expires_at),
            "renewCount": self.renew_count,
            "lastRenewedAt": format_timestamp(self.last_renewed_at),
        }
        document.update(self.extra)
        return document

    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "AccessKey":
        """
        Build an entity from a stored JSON object.

        Accepts the legacy ``renewedAt`` field in place of ``lastRenewedAt``.

        Raises:
            ValueError: If required fields are missing or malformed
        """
        if not isinstance(data, dict):
            raise ValueError(f"Key record must be an object, got {type(data).__name__}")
        try:
            key = data["key"]
            username = data["username"]
        except KeyError as e:
            raise ValueError(f"Key record is missing field {e}") from e

        duration = data.get("duration")
        last_renewed = data.get("lastRenewedAt") or data.get("renewedAt")
        created_at = parse_timestamp(data.get("createdAt"))

        return cls(
            key=key,
            username=username,
            duration=PERMANENT if duration is None else str(duration),
            created_at=created_at,
            expires_at=parse_timestamp(data.get("expiresAt")),
            renew_count=int(data.get("renewCount") or 0),
            last_renewed_at=parse_timestamp(last_renewed),
            extra={k: v for k, v in data.items() if k not in _DOCUMENT_FIELDS},
        )

    def summary(self) -> Dict[str, Any]:
        """Public fields surfaced when a duplicate generation is rejected."""
        return {
            "key": self.key,
            "expiresAt": format_timestamp(self.expires_at),
            "duration": self.duration,
        }
