"""
Key repository port (interface).

This defines the contract for key record persistence operations.
Implementations are in the infrastructure layer.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence

from access_keys.domain.access_key import AccessKey


@dataclass(frozen=True)
class KeySnapshot:
    """Key records as read from the store, with the revision to write against."""

    records: List[AccessKey]
    revision: Optional[str]


class KeyRepository(ABC):
    """
    Abstract repository for the key record list.

    Callers must pass back the revision they loaded; there is no
    write path that skips it.
    """

    @abstractmethod
    async def load(self) -> Optional[KeySnapshot]:
        """
        Load all key records.

        Returns:
            KeySnapshot, or None if the key document does not exist
        """
        pass

    @abstractmethod
    async def save(
        self,
        records: Sequence[AccessKey],
        revision: Optional[str],
        message: str,
    ) -> str:
        """
        Replace the key record list.

        Args:
            records: Full record list to store
            revision: Revision the records were derived from
            message: Change description

        Returns:
            The new revision
        """
        pass
