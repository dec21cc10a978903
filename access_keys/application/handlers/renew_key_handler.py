"""
RenewKeyHandler.

Handles the renew key command.
"""
import logging
from datetime import timedelta
from typing import Optional

from access_keys.application.commands.renew_key import RenewKeyCommand
from access_keys.application.dto.key_dto import RenewalResultDTO
from access_keys.application.handlers.base import KeyHandlerBase
from access_keys.application.services.conflict_retry import run_with_conflict_retry
from access_keys.domain.access_key import AccessKey
from access_keys.domain.events import KeyRenewed
from access_keys.domain.services import KeyLifecycleEngine, format_expiry
from core.domain.exceptions import InvalidKeyRequestError, KeyNotFoundError
from core.domain.value_objects import KeyDuration
from core.infrastructure.events import event_bus
from core.metrics import keys_renewed_total

logger = logging.getLogger(__name__)


class RenewKeyHandler(KeyHandlerBase):
    """Handler for RenewKeyCommand."""

    @staticmethod
    def _parse_extension(raw) -> Optional[timedelta]:
        """Turn an explicit duration into an extension, None when omitted."""
        if raw is None or raw == "":
            return None
        try:
            duration = KeyDuration.parse(raw)
        except ValueError as e:
            raise InvalidKeyRequestError(str(e)) from e
        if duration.is_permanent:
            raise InvalidKeyRequestError("Renewal duration must be an hour count")
        return duration.as_timedelta()

    async def handle(self, command: RenewKeyCommand) -> RenewalResultDTO:
        """
        Handle renew key command.

        Args:
            command: RenewKeyCommand

        Returns:
            RenewalResultDTO with the new expiry and renew count

        Raises:
            InvalidKeyRequestError: If username or duration is invalid
            KeyNotFoundError: If no key document or matching key exists
            KeyNotRenewableError: If the key is permanent
            KeyAlreadyExpiredError: If the key has expired
            KeyTooCloseToExpiryError: If less than an hour remains
            KeyStoreConflictError: If concurrent writes exhausted the retries
        """
        if not command.username:
            raise InvalidKeyRequestError("Username is required")
        extension = self._parse_extension(command.duration)

        async def attempt() -> AccessKey:
            snapshot = await self.key_repository.load()
            if snapshot is None:
                raise KeyNotFoundError("Key document not found")

            records, renewed = KeyLifecycleEngine.renew(
                snapshot.records,
                username=command.username,
                now=self.clock(),
                key=command.key,
                extension=extension,
            )
            await self.key_repository.save(
                records, snapshot.revision, f"Renew key for {command.username}"
            )
            return renewed

        renewed = await run_with_conflict_retry(
            "renew", attempt, self.max_attempts, self.backoff_seconds
        )

        keys_renewed_total.inc()
        logger.info(
            "Renewed key %s... for %s until %s (renewal #%d)",
            renewed.key[:8],
            renewed.username,
            renewed.expires_at.isoformat(),
            renewed.renew_count,
        )

        await event_bus.publish(
            KeyRenewed(
                aggregate_id=renewed.username,
                username=renewed.username,
                new_expires_at=renewed.expires_at,
                renew_count=renewed.renew_count,
            )
        )

        return RenewalResultDTO(
            key=renewed.key,
            username=renewed.username,
            new_expires_at=renewed.expires_at,
            new_expires_at_formatted=format_expiry(renewed.expires_at, self.display_timezone),
            renew_count=renewed.renew_count,
            last_renewed_at=renewed.last_renewed_at,
        )
