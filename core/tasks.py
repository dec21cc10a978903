"""
Celery tasks for background processing.

Scheduled removal of expired keys.
"""
import logging

from asgiref.sync import async_to_sync

from access_keys.application.commands.cleanup_keys import CleanupKeysCommand
from access_keys.application.handlers.cleanup_keys_handler import CleanupKeysHandler
from access_keys.infrastructure.repositories import build_key_repository
from access_keys.ports.document_store import StoreUnavailableError
from core.domain.exceptions import KeyStoreConflictError
from KeyLifecycleService.celery import app

logger = logging.getLogger(__name__)


@app.task(bind=True, max_retries=3)
def cleanup_expired_keys_task(self):
    """
    Celery task for removing expired keys.

    Transient store failures and exhausted conflict retries are retried
    with exponential backoff.

    Returns:
        Dict with deletedCount and remainingKeys
    """
    handler = CleanupKeysHandler(key_repository=build_key_repository())
    try:
        result = async_to_sync(handler.handle)(CleanupKeysCommand(trigger="schedule"))
    except (StoreUnavailableError, KeyStoreConflictError) as exc:
        logger.error("Scheduled cleanup failed: %s", exc, exc_info=True)
        raise self.retry(exc=exc, countdown=2 ** self.request.retries)

    return {"deletedCount": result.deleted_count, "remainingKeys": result.remaining_keys}
