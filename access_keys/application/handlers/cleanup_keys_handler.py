"""
CleanupKeysHandler.

Handles the cleanup keys command, run on a schedule.
"""
import logging

from access_keys.application.commands.cleanup_keys import CleanupKeysCommand
from access_keys.application.dto.key_dto import CleanupResultDTO
from access_keys.application.handlers.base import KeyHandlerBase
from access_keys.application.services.conflict_retry import run_with_conflict_retry
from access_keys.domain.events import ExpiredKeysPurged
from access_keys.domain.services import KeyLifecycleEngine
from core.infrastructure.events import event_bus
from core.metrics import keys_purged_total

logger = logging.getLogger(__name__)


class CleanupKeysHandler(KeyHandlerBase):
    """Handler for CleanupKeysCommand."""

    async def handle(self, command: CleanupKeysCommand) -> CleanupResultDTO:
        """
        Handle cleanup keys command.

        Args:
            command: CleanupKeysCommand

        Returns:
            CleanupResultDTO with deleted and remaining counts

        Raises:
            KeyStoreConflictError: If concurrent writes exhausted the retries
            StoreUnavailableError: If the key document cannot be read or written
        """

        async def attempt() -> CleanupResultDTO:
            snapshot = await self.key_repository.load()
            if snapshot is None:
                logger.info("No key document to clean up")
                return CleanupResultDTO(deleted_count=0, remaining_keys=0, dry_run=command.dry_run)

            active, expired = KeyLifecycleEngine.partition_expired(
                snapshot.records, self.clock()
            )
            if expired and not command.dry_run:
                await self.key_repository.save(
                    active,
                    snapshot.revision,
                    f"Cleanup: Removed {len(expired)} expired key(s)",
                )
            return CleanupResultDTO(
                deleted_count=len(expired),
                remaining_keys=len(active),
                dry_run=command.dry_run,
            )

        result = await run_with_conflict_retry(
            "cleanup", attempt, self.max_attempts, self.backoff_seconds
        )

        if command.dry_run:
            logger.info("Cleanup dry run: %d expired key(s) would be removed", result.deleted_count)
            return result

        logger.info(
            "Cleanup finished: removed %d, %d remaining",
            result.deleted_count,
            result.remaining_keys,
        )
        if result.deleted_count:
            keys_purged_total.labels(trigger=command.trigger).inc(result.deleted_count)
            await event_bus.publish(
                ExpiredKeysPurged(
                    aggregate_id="keys",
                    deleted_count=result.deleted_count,
                    remaining_count=result.remaining_keys,
                    trigger=command.trigger,
                )
            )
        return result
