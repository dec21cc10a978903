"""
Document store implementation of KeyRepository port.

This adapter converts between the JSON key document and domain entities.
"""
import json
import logging
from typing import Optional, Sequence

from access_keys.domain.access_key import AccessKey
from access_keys.ports.document_store import CorruptKeyStoreError, DocumentStore
from access_keys.ports.key_repository import KeyRepository, KeySnapshot

logger = logging.getLogger(__name__)

DEFAULT_DOCUMENT_PATH = "keys.json"


class DocumentKeyRepository(KeyRepository):
    """
    KeyRepository backed by a single JSON array in a DocumentStore.

    This adapter:
    1. Decodes the stored JSON array into AccessKey entities
    2. Encodes entities back into the same array shape
    3. Threads the store revision through every write
    """

    def __init__(self, store: DocumentStore, path: str = DEFAULT_DOCUMENT_PATH):
        """Initialize repository with a store and document path."""
        self.store = store
        self.path = path

    def _to_domain(self, content: str) -> list:
        """
        Convert document text to domain entities.

        Args:
            content: JSON document text

        Returns:
            List of AccessKey entities
        """
        if not content.strip():
            return []
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise CorruptKeyStoreError(f"Key document {self.path} is not valid JSON: {e}") from e
        if not isinstance(data, list):
            raise CorruptKeyStoreError(f"Key document {self.path} must be a JSON array")
        try:
            return [AccessKey.from_document(item) for item in data]
        except (TypeError, ValueError) as e:
            raise CorruptKeyStoreError(f"Key document {self.path} has a bad record: {e}") from e

    def _to_document(self, records: Sequence[AccessKey]) -> str:
        """
        Convert domain entities to document text.

        Args:
            records: AccessKey entities

        Returns:
            Pretty-printed JSON array
        """
        return json.dumps([record.to_document() for record in records], indent=2)

    async def load(self) -> Optional[KeySnapshot]:
        """Load all key records with the revision they were read at."""
        document = await self.store.fetch(self.path)
        if document is None:
            return None
        records = self._to_domain(document.content)
        logger.debug("Loaded %d key record(s) from %s", len(records), self.path)
        return KeySnapshot(records=records, revision=document.revision)

    async def save(
        self,
        records: Sequence[AccessKey],
        revision: Optional[str],
        message: str,
    ) -> str:
        """Write the record list against the given revision."""
        return await self.store.replace(
            self.path, self._to_document(records), revision, message
        )
