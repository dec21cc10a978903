"""
VerifyKeyHandler.

Handles the verify key query. Expired records found while verifying
are pruned from the key document on a best-effort basis.
"""
import logging
from datetime import datetime
from typing import List, Optional

from access_keys.application.dto.key_dto import KeyDetailsDTO, VerificationResultDTO
from access_keys.application.handlers.base import KeyHandlerBase
from access_keys.application.queries.verify_key import VerifyKeyQuery
from access_keys.domain.access_key import AccessKey
from access_keys.domain.events import ExpiredKeysPurged
from access_keys.domain.services import REASON_NO_KEYS, KeyLifecycleEngine
from access_keys.ports.document_store import StoreError
from core.domain.exceptions import InvalidKeyRequestError
from core.infrastructure.events import event_bus
from core.metrics import keys_purged_total, keys_verified_total

logger = logging.getLogger(__name__)


class VerifyKeyHandler(KeyHandlerBase):
    """Handler for VerifyKeyQuery."""

    async def handle(self, query: VerifyKeyQuery) -> VerificationResultDTO:
        """
        Handle verify key query.

        Args:
            query: VerifyKeyQuery

        Returns:
            VerificationResultDTO; an invalid key is a result, not an error

        Raises:
            InvalidKeyRequestError: If key or username is missing
            StoreUnavailableError: If the key document cannot be read
        """
        if not query.key or not query.username:
            raise InvalidKeyRequestError("Key and username are required")

        snapshot = await self.key_repository.load()
        if snapshot is None:
            keys_verified_total.labels(outcome="no_keys").inc()
            return VerificationResultDTO(valid=False, reason=REASON_NO_KEYS)

        now = self.clock()
        active, expired = KeyLifecycleEngine.partition_expired(snapshot.records, now)
        if expired:
            await self._prune(active, expired, snapshot.revision, now)

        result = KeyLifecycleEngine.check(snapshot.records, query.key, query.username, now)
        if not result.valid:
            outcome = "expired" if result.record else "invalid"
            keys_verified_total.labels(outcome=outcome).inc()
            logger.info("Key %s... rejected for %s: %s", query.key[:8], query.username, outcome)
            return VerificationResultDTO(valid=False, reason=result.reason)

        keys_verified_total.labels(outcome="valid").inc()
        record = result.record
        return VerificationResultDTO(
            valid=True,
            data=KeyDetailsDTO(
                username=record.username,
                duration=record.duration,
                created_at=record.created_at,
                expires_at=record.expires_at,
            ),
        )

    async def _prune(
        self,
        active: List[AccessKey],
        expired: List[AccessKey],
        revision: Optional[str],
        now: datetime,
    ) -> None:
        """Write back the active records. Failures are logged and ignored."""
        deleted_count = len(expired)
        try:
            await self.key_repository.save(
                active,
                revision,
                f"Auto cleanup: Removed {deleted_count} expired key(s)",
            )
        except StoreError as e:
            logger.warning(
                "Auto cleanup of %d expired key(s) skipped: %s", deleted_count, e.message
            )
            return

        keys_purged_total.labels(trigger="verify").inc(deleted_count)
        logger.info("Auto cleanup removed %d expired key(s)", deleted_count)
        await event_bus.publish(
            ExpiredKeysPurged(
                aggregate_id="keys",
                occurred_at=now,
                deleted_count=deleted_count,
                remaining_count=len(active),
                trigger="verify",
            )
        )
