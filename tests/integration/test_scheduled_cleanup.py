"""
Integration tests for the scheduled cleanup entry points.
"""
from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import CommandError, call_command
from django.test import override_settings
from django.utils import timezone

from core.tasks import cleanup_expired_keys_task


@pytest.fixture
def expired_document(make_record, seed_document):
    """Key document with one expired and one active record."""
    now = timezone.now()
    seed_document(
        [
            make_record("alice", now - timedelta(hours=1), key="A1"),
            make_record("bob", now + timedelta(hours=1), key="B1"),
        ]
    )


@pytest.mark.integration
class TestCleanupCommand:
    """Tests for the cleanup_expired_keys management command."""

    def test_cleanup_command(self, expired_document, stored_records):
        """Test the command removes expired keys."""
        out = StringIO()
        call_command("cleanup_expired_keys", stdout=out)

        assert "Removed 1 expired key(s), 1 remaining" in out.getvalue()
        assert [r["key"] for r in stored_records()] == ["B1"]

    def test_cleanup_command_dry_run(self, expired_document, stored_records, store):
        """Test dry run reports without writing."""
        out = StringIO()
        call_command("cleanup_expired_keys", "--dry-run", stdout=out)

        assert "DRY RUN" in out.getvalue()
        assert "Found 1 expired key(s)" in out.getvalue()
        assert len(stored_records()) == 2
        assert list(store.write_messages) == []

    def test_cleanup_command_nothing_to_do(self):
        """Test the command with no key document."""
        out = StringIO()
        call_command("cleanup_expired_keys", stdout=out)
        assert "No expired keys to remove" in out.getvalue()

    @override_settings(KEY_STORE={"BACKEND": "github", "PATH": "keys.json"})
    def test_cleanup_command_store_not_configured(self):
        """Test store failures become CommandError."""
        with pytest.raises(CommandError):
            call_command("cleanup_expired_keys", stdout=StringIO())


@pytest.mark.integration
class TestCleanupTask:
    """Tests for the Celery cleanup task."""

    def test_cleanup_task(self, expired_document, stored_records, store):
        """Test the task removes expired keys and reports counts."""
        result = cleanup_expired_keys_task.apply().get()

        assert result == {"deletedCount": 1, "remainingKeys": 1}
        assert list(store.write_messages) == ["Cleanup: Removed 1 expired key(s)"]
