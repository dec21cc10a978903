"""
Pytest configuration and shared fixtures.
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from access_keys.application.handlers.cleanup_keys_handler import CleanupKeysHandler
from access_keys.application.handlers.generate_key_handler import GenerateKeyHandler
from access_keys.application.handlers.renew_key_handler import RenewKeyHandler
from access_keys.application.handlers.verify_key_handler import VerifyKeyHandler
from access_keys.domain.access_key import format_timestamp
from access_keys.infrastructure.repositories.document_key_repository import (
    DocumentKeyRepository,
)
from access_keys.infrastructure.stores.memory_store import memory_store

DOCUMENT_PATH = "keys.json"


class FakeClock:
    """Controllable clock passed to handlers."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture(autouse=True)
def reset_memory_store():
    """Start every test with an empty in-memory key store."""
    memory_store.reset()
    yield
    memory_store.reset()


@pytest.fixture
def store():
    """Fixture for the shared in-memory document store."""
    return memory_store


@pytest.fixture
def clock():
    """Fixture for a fixed, advanceable clock."""
    return FakeClock(datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def key_repository(store):
    """Fixture for KeyRepository over the in-memory store."""
    return DocumentKeyRepository(store=store, path=DOCUMENT_PATH)


@pytest.fixture
def make_record():
    """Fixture building a stored key record as it appears in the document."""

    def _make(
        username,
        expires_at,
        key=None,
        duration="24",
        created_at=None,
        renew_count=0,
        **extra,
    ):
        created_at = created_at or datetime(2025, 12, 1, tzinfo=timezone.utc)
        record = {
            "key": key or f"{username.upper():0<32}"[:32],
            "username": username,
            "duration": duration,
            "createdAt": format_timestamp(created_at),
            "expiresAt": format_timestamp(expires_at),
            "renewCount": renew_count,
            "lastRenewedAt": None,
        }
        record.update(extra)
        return record

    return _make


@pytest.fixture
def seed_document(store):
    """Fixture writing a list of records into the key document."""

    def _seed(records):
        return store.seed(DOCUMENT_PATH, json.dumps(records, indent=2))

    return _seed


@pytest.fixture
def stored_records(store):
    """Fixture reading back the raw records of the key document."""

    def _read():
        document = store._documents.get(DOCUMENT_PATH)  # pylint: disable=protected-access
        return None if document is None else json.loads(document.content)

    return _read


@pytest.fixture
def handler_options(clock):
    """Keyword arguments shared by handler fixtures."""
    return {"clock": clock, "backoff_seconds": 0, "display_timezone": "UTC"}


@pytest.fixture
def generate_handler(key_repository, handler_options):
    """Fixture for GenerateKeyHandler."""
    return GenerateKeyHandler(key_repository=key_repository, **handler_options)


@pytest.fixture
def verify_handler(key_repository, handler_options):
    """Fixture for VerifyKeyHandler."""
    return VerifyKeyHandler(key_repository=key_repository, **handler_options)


@pytest.fixture
def renew_handler(key_repository, handler_options):
    """Fixture for RenewKeyHandler."""
    return RenewKeyHandler(key_repository=key_repository, **handler_options)


@pytest.fixture
def cleanup_handler(key_repository, handler_options):
    """Fixture for CleanupKeysHandler."""
    return CleanupKeysHandler(key_repository=key_repository, **handler_options)


@pytest.fixture
def api_client():
    """Fixture for DRF API client."""
    from rest_framework.test import APIClient

    return APIClient()
