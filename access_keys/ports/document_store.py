"""
Document store port (interface).

This defines the contract for reading and replacing the versioned key
document. Implementations are in the infrastructure layer.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


class StoreError(Exception):
    """Base exception for document store failures."""

    code = "STORE_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class StoreConflictError(StoreError):
    """Raised when the supplied revision no longer matches the stored one."""

    code = "STORE_CONFLICT"


class StoreUnavailableError(StoreError):
    """Raised on transport failures and unexpected responses."""

    code = "STORE_UNAVAILABLE"


class StoreNotConfiguredError(StoreUnavailableError):
    """Raised when store credentials or location are missing."""

    code = "STORE_NOT_CONFIGURED"


class CorruptKeyStoreError(StoreUnavailableError):
    """Raised when the stored document cannot be decoded into key records."""

    code = "CORRUPT_KEY_STORE"


@dataclass(frozen=True)
class VersionedDocument:
    """Document contents together with the revision they were read at."""

    content: str
    revision: str


class DocumentStore(ABC):
    """
    Abstract path-addressed document store with optimistic concurrency.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.
    """

    @abstractmethod
    async def fetch(self, path: str) -> Optional[VersionedDocument]:
        """
        Fetch the current document.

        Args:
            path: Document path

        Returns:
            VersionedDocument, or None if no document exists

        Raises:
            StoreUnavailableError: On transport or response failures
        """
        pass

    @abstractmethod
    async def replace(
        self,
        path: str,
        content: str,
        revision: Optional[str],
        message: str,
    ) -> str:
        """
        Replace the document if it is still at the given revision.

        Args:
            path: Document path
            content: New document text
            revision: Revision last read, None to create the document
            message: Change description recorded by the store

        Returns:
            The new revision

        Raises:
            StoreConflictError: If the revision does not match
            StoreUnavailableError: On transport or response failures
        """
        pass
