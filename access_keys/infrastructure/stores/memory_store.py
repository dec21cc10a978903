"""
In-memory implementation of the DocumentStore port.

Suitable for development and tests. Revisions are git blob shas of
the content, so they behave like the ones the GitHub store returns.
"""
import hashlib
import logging
import threading
from collections import deque
from typing import Deque, Dict, Optional

from access_keys.ports.document_store import (
    DocumentStore,
    StoreConflictError,
    VersionedDocument,
)

logger = logging.getLogger(__name__)

# Commit messages kept for inspection
WRITE_LOG_SIZE = 100


def blob_sha(content: str) -> str:
    """Compute the git blob sha of a text document."""
    data = content.encode("utf-8")
    return hashlib.sha1(b"blob %d\0" % len(data) + data).hexdigest()


class InMemoryDocumentStore(DocumentStore):
    """Process-local document store with optimistic concurrency."""

    def __init__(self):
        """Initialize an empty store."""
        self._documents: Dict[str, VersionedDocument] = {}
        self._lock = threading.Lock()
        self.write_messages: Deque[str] = deque(maxlen=WRITE_LOG_SIZE)

    def seed(self, path: str, content: str) -> str:
        """Put a document in place without a revision check. Returns its revision."""
        with self._lock:
            document = VersionedDocument(content=content, revision=blob_sha(content))
            self._documents[path] = document
            return document.revision

    def reset(self) -> None:
        """Drop every document."""
        with self._lock:
            self._documents.clear()
            self.write_messages.clear()

    async def fetch(self, path: str) -> Optional[VersionedDocument]:
        """Return the stored document, or None."""
        with self._lock:
            return self._documents.get(path)

    async def replace(
        self,
        path: str,
        content: str,
        revision: Optional[str],
        message: str,
    ) -> str:
        """Store the document if the revision still matches."""
        with self._lock:
            current = self._documents.get(path)
            current_revision = current.revision if current else None
            if revision != current_revision:
                raise StoreConflictError(
                    f"Key document {path} changed since revision {(revision or 'none')[:8]}"
                )
            document = VersionedDocument(content=content, revision=blob_sha(content))
            self._documents[path] = document
            self.write_messages.append(message)
            logger.debug("Wrote %s: %s (revision %s)", path, message, document.revision[:8])
            return document.revision


# Shared instance used when KEY_STORE["BACKEND"] is "memory"
memory_store = InMemoryDocumentStore()
