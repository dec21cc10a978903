"""
GenerateKeyHandler.

Handles the generate key command.
"""
import logging

from access_keys.application.commands.generate_key import GenerateKeyCommand
from access_keys.application.dto.key_dto import GeneratedKeyDTO
from access_keys.application.handlers.base import KeyHandlerBase
from access_keys.application.services.conflict_retry import run_with_conflict_retry
from access_keys.domain.access_key import AccessKey
from access_keys.domain.events import KeyGenerated
from access_keys.domain.services import KeyLifecycleEngine, format_expiry
from core.domain.exceptions import InvalidKeyRequestError
from core.domain.value_objects import KeyDuration, Username
from core.infrastructure.events import event_bus
from core.metrics import keys_generated_total

logger = logging.getLogger(__name__)


class GenerateKeyHandler(KeyHandlerBase):
    """Handler for GenerateKeyCommand."""

    async def handle(self, command: GenerateKeyCommand) -> GeneratedKeyDTO:
        """
        Handle generate key command.

        Args:
            command: GenerateKeyCommand

        Returns:
            GeneratedKeyDTO for the new key

        Raises:
            InvalidKeyRequestError: If username or duration is invalid
            DuplicateActiveKeyError: If the username already holds an active key
            KeyStoreConflictError: If concurrent writes exhausted the retries
            StoreUnavailableError: If the key document cannot be read or written
        """
        try:
            username = Username(command.username)
            duration = KeyDuration.parse(command.duration)
        except ValueError as e:
            raise InvalidKeyRequestError(str(e)) from e

        logger.info("Creating key for user: %s (%s)", username, duration.label)

        async def attempt() -> AccessKey:
            snapshot = await self.key_repository.load()
            records = list(snapshot.records) if snapshot else []
            revision = snapshot.revision if snapshot else None
            if snapshot is None:
                logger.info("No existing key document, creating a new one")
            else:
                logger.debug("Found %d existing key(s)", len(records))

            new_key = KeyLifecycleEngine.issue(
                records,
                username=username,
                duration=duration,
                now=self.clock(),
                display_timezone=self.display_timezone,
            )
            records.append(new_key)
            await self.key_repository.save(
                records,
                revision,
                f"Add key for {username} ({duration.label})",
            )
            return new_key

        new_key = await run_with_conflict_retry(
            "generate", attempt, self.max_attempts, self.backoff_seconds
        )

        keys_generated_total.labels(duration=duration.value).inc()
        logger.info("Saved key %s... for user %s", new_key.key[:8], username)

        await event_bus.publish(
            KeyGenerated(
                aggregate_id=new_key.username,
                username=new_key.username,
                duration=new_key.duration,
                expires_at=new_key.expires_at,
            )
        )

        return GeneratedKeyDTO(
            key=new_key.key,
            username=new_key.username,
            duration_label=duration.label,
            duration_value=duration.value,
            created_at=new_key.created_at,
            expires_at=new_key.expires_at,
            expires_at_formatted=format_expiry(new_key.expires_at, self.display_timezone),
        )
