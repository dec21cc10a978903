"""
Access key domain services.

Domain services contain business logic that doesn't naturally
fit within a single entity. Everything here is pure: the record list
and the current time come in, results go out, no I/O happens.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

from access_keys.domain.access_key import AccessKey
from core.domain.exceptions import DuplicateActiveKeyError, KeyNotFoundError
from core.domain.value_objects import KeyDuration, Username

REASON_NO_KEYS = "No keys registered"
REASON_MISMATCH = "Key invalid or username mismatch"
REASON_EXPIRED = "Key has expired"


def format_expiry(value: Optional[datetime], tz_name: str = "UTC") -> str:
    """
    Format an expiry for display, e.g. '19/10/2026, 14.30.00'.

    Args:
        value: Expiry datetime, None for permanent keys
        tz_name: IANA time zone used for display

    Returns:
        Formatted string, 'Never' for permanent keys
    """
    if value is None:
        return "Never"
    return value.astimezone(ZoneInfo(tz_name)).strftime("%d/%m/%Y, %H.%M.%S")


@dataclass(frozen=True)
class KeyCheckResult:
    """Outcome of checking a key/username pair against the record list."""

    valid: bool
    reason: Optional[str] = None
    record: Optional[AccessKey] = None


class KeyLifecycleEngine:
    """Domain service implementing generate, verify, renew and cleanup rules."""

    @staticmethod
    def find_active_for_user(
        records: Sequence[AccessKey], username: str, now: datetime
    ) -> Optional[AccessKey]:
        """
        Find the active record held by a username.

        Args:
            records: Current record list
            username: Username to look up
            now: Current time

        Returns:
            The first active record for the username, or None
        """
        for record in records:
            if record.username == username and record.is_active(now):
                return record
        return None

    @staticmethod
    def find_exact(
        records: Sequence[AccessKey], key: str, username: str
    ) -> Optional[AccessKey]:
        """Find the record matching both key and username (case-sensitive)."""
        for record in records:
            if record.key == key and record.username == username:
                return record
        return None

    @staticmethod
    def partition_expired(
        records: Sequence[AccessKey], now: datetime
    ) -> Tuple[List[AccessKey], List[AccessKey]]:
        """
        Split records into active and expired, preserving order.

        Permanent records are always active.

        Returns:
            Tuple of (active, expired)
        """
        active: List[AccessKey] = []
        expired: List[AccessKey] = []
        for record in records:
            (active if record.is_active(now) else expired).append(record)
        return active, expired

    @staticmethod
    def issue(
        records: Sequence[AccessKey],
        username: Username,
        duration: KeyDuration,
        now: datetime,
        key: Optional[str] = None,
        display_timezone: str = "UTC",
    ) -> AccessKey:
        """
        Issue a new key for a username.

        Args:
            records: Current record list
            username: Validated username
            duration: Validated duration
            now: Current time
            key: Optional pre-generated key
            display_timezone: Time zone for the rejection message

        Returns:
            The new AccessKey (not yet appended)

        Raises:
            DuplicateActiveKeyError: If the username already holds an active key
        """
        existing = KeyLifecycleEngine.find_active_for_user(records, username.value, now)
        if existing:
            expiry_text = format_expiry(existing.expires_at, display_timezone)
            raise DuplicateActiveKeyError(
                f"User {username.value} already has an active key that expires at: "
                f"{expiry_text}. Wait until it expires or renew it.",
                existing_key=existing.summary(),
            )
        return AccessKey.create(username=username, duration=duration, now=now, key=key)

    @staticmethod
    def check(
        records: Sequence[AccessKey], key: str, username: str, now: datetime
    ) -> KeyCheckResult:
        """
        Check a key/username pair.

        A wrong key and a wrong username produce the same reason.

        Returns:
            KeyCheckResult
        """
        record = KeyLifecycleEngine.find_exact(records, key, username)
        if record is None:
            return KeyCheckResult(valid=False, reason=REASON_MISMATCH)
        if record.is_expired(now):
            return KeyCheckResult(valid=False, reason=REASON_EXPIRED, record=record)
        return KeyCheckResult(valid=True, record=record)

    @staticmethod
    def resolve_renewal_target(
        records: Sequence[AccessKey],
        username: str,
        now: datetime,
        key: Optional[str] = None,
    ) -> AccessKey:
        """
        Resolve the record a renewal applies to.

        With a key, the exact key/username match is used regardless of
        expiry. Without one, the username's active record is used.

        Raises:
            KeyNotFoundError: If nothing matches
        """
        if key:
            record = KeyLifecycleEngine.find_exact(records, key, username)
        else:
            record = KeyLifecycleEngine.find_active_for_user(records, username, now)
        if record is None:
            raise KeyNotFoundError()
        return record

    @staticmethod
    def renew(
        records: Sequence[AccessKey],
        username: str,
        now: datetime,
        key: Optional[str] = None,
        extension: Optional[timedelta] = None,
    ) -> Tuple[List[AccessKey], AccessKey]:
        """
        Renew a key in place within the record list.

        Args:
            records: Current record list
            username: Username owning the key
            now: Current time
            key: Optional exact key
            extension: Explicit extension, defaults to the record's own duration

        Returns:
            Tuple of (updated record list, renewed record)
        """
        target = KeyLifecycleEngine.resolve_renewal_target(records, username, now, key)
        renewed = target.renew(now, extension)
        updated = [renewed if record is target else record for record in records]
        return updated, renewed
