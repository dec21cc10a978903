"""
Unit tests for KeyLifecycleEngine and display helpers.
"""
from datetime import datetime, timedelta, timezone

import pytest

from access_keys.domain.access_key import AccessKey
from access_keys.domain.services import (
    REASON_EXPIRED,
    REASON_MISMATCH,
    KeyLifecycleEngine,
    format_expiry,
)
from core.domain.exceptions import (
    DuplicateActiveKeyError,
    KeyAlreadyExpiredError,
    KeyNotFoundError,
)
from core.domain.value_objects import KeyDuration, Username

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def _record(username, key, hours_left):
    return AccessKey(
        key=key,
        username=username,
        duration="permanent" if hours_left is None else "24",
        created_at=NOW - timedelta(days=1),
        expires_at=None if hours_left is None else NOW + timedelta(hours=hours_left),
    )


@pytest.fixture
def records():
    """Mixed record list: active, expired, permanent."""
    return [
        _record("alice", "KEY_ALICE", 5),
        _record("bob", "KEY_BOB_OLD", -2),
        _record("carol", "KEY_CAROL", None),
        _record("bob", "KEY_BOB", 10),
    ]


class TestFormatExpiry:
    """Tests for expiry display formatting."""

    def test_permanent(self):
        """Test permanent keys display as Never."""
        assert format_expiry(None) == "Never"

    def test_utc(self):
        """Test day-first format with dotted time."""
        assert format_expiry(NOW) == "01/01/2026, 12.00.00"

    def test_display_timezone(self):
        """Test conversion into the display time zone."""
        assert format_expiry(NOW, "Asia/Jakarta") == "01/01/2026, 19.00.00"


class TestKeyLifecycleEngine:
    """Tests for KeyLifecycleEngine."""

    def test_find_active_skips_expired(self, records):
        """Test an expired record does not count as the user's active key."""
        found = KeyLifecycleEngine.find_active_for_user(records, "bob", NOW)
        assert found.key == "KEY_BOB"

    def test_partition_keeps_permanent_and_order(self, records):
        """Test partition preserves order and treats permanent keys as active."""
        active, expired = KeyLifecycleEngine.partition_expired(records, NOW)
        assert [r.key for r in active] == ["KEY_ALICE", "KEY_CAROL", "KEY_BOB"]
        assert [r.key for r in expired] == ["KEY_BOB_OLD"]

    def test_issue_rejects_duplicate_active(self, records):
        """Test a second key is refused while one is active."""
        with pytest.raises(DuplicateActiveKeyError) as exc_info:
            KeyLifecycleEngine.issue(records, Username("alice"), KeyDuration("24"), NOW)
        assert exc_info.value.existing_key["key"] == "KEY_ALICE"
        assert "already has an active key" in exc_info.value.message

    def test_issue_rejects_while_permanent(self, records):
        """Test a permanent key blocks new keys and is reported as Never expiring."""
        with pytest.raises(DuplicateActiveKeyError) as exc_info:
            KeyLifecycleEngine.issue(records, Username("carol"), KeyDuration("1"), NOW)
        assert "Never" in exc_info.value.message
        assert exc_info.value.existing_key["expiresAt"] is None

    def test_issue_after_expiry(self):
        """Test a user whose only key expired gets a new one."""
        records = [_record("dave", "KEY_DAVE_OLD", -1)]
        new_key = KeyLifecycleEngine.issue(records, Username("dave"), KeyDuration("72"), NOW)
        assert new_key.username == "dave"
        assert new_key.expires_at == NOW + timedelta(hours=72)

    def test_check_valid(self, records):
        """Test an exact active match is valid."""
        result = KeyLifecycleEngine.check(records, "KEY_ALICE", "alice", NOW)
        assert result.valid
        assert result.record.username == "alice"

    def test_check_wrong_username_same_reason_as_wrong_key(self, records):
        """Test wrong key and wrong username are indistinguishable."""
        wrong_user = KeyLifecycleEngine.check(records, "KEY_ALICE", "bob", NOW)
        wrong_key = KeyLifecycleEngine.check(records, "NOPE", "alice", NOW)
        assert wrong_user.reason == wrong_key.reason == REASON_MISMATCH

    def test_check_is_case_sensitive(self, records):
        """Test keys are compared exactly."""
        assert not KeyLifecycleEngine.check(records, "key_alice", "alice", NOW).valid

    def test_check_expired(self, records):
        """Test an exact but expired match reports expiry."""
        result = KeyLifecycleEngine.check(records, "KEY_BOB_OLD", "bob", NOW)
        assert not result.valid
        assert result.reason == REASON_EXPIRED

    def test_renew_by_username(self, records):
        """Test renewal without a key targets the active key in place."""
        updated, renewed = KeyLifecycleEngine.renew(records, "bob", NOW)
        assert renewed.key == "KEY_BOB"
        assert [r.key for r in updated] == [r.key for r in records]
        assert updated[3].expires_at == records[3].expires_at + timedelta(hours=24)
        assert updated[1] is records[1]

    def test_renew_by_key_expired(self, records):
        """Test an explicit key is resolved even when expired, then refused."""
        with pytest.raises(KeyAlreadyExpiredError):
            KeyLifecycleEngine.renew(records, "bob", NOW, key="KEY_BOB_OLD")

    def test_renew_unknown(self, records):
        """Test renewing for an unknown user."""
        with pytest.raises(KeyNotFoundError):
            KeyLifecycleEngine.renew(records, "zed", NOW)
