"""
Access key domain events.

Domain events represent something that happened in the access key domain.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.domain.events import DomainEvent


@dataclass(frozen=True, kw_only=True)
class KeyGenerated(DomainEvent):
    """Event raised when a key is issued to a username."""

    username: str
    duration: str
    expires_at: Optional[datetime]


@dataclass(frozen=True, kw_only=True)
class KeyRenewed(DomainEvent):
    """Event raised when a key's expiry is extended."""

    username: str
    new_expires_at: datetime
    renew_count: int


@dataclass(frozen=True, kw_only=True)
class ExpiredKeysPurged(DomainEvent):
    """Event raised when expired records are removed from the key document."""

    deleted_count: int
    remaining_count: int
    trigger: str
