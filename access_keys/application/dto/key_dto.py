"""
Access key DTOs for API responses.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class GeneratedKeyDTO:
    """DTO for a newly generated key."""

    key: str
    username: str
    duration_label: str
    duration_value: str
    created_at: datetime
    expires_at: Optional[datetime]
    expires_at_formatted: str


@dataclass
class KeyDetailsDTO:
    """DTO for the public fields of a verified key."""

    username: str
    duration: str
    created_at: Optional[datetime]
    expires_at: Optional[datetime]


@dataclass
class VerificationResultDTO:
    """DTO for verify response."""

    valid: bool
    reason: Optional[str] = None
    data: Optional[KeyDetailsDTO] = None


@dataclass
class RenewalResultDTO:
    """DTO for renew response."""

    key: str
    username: str
    new_expires_at: datetime
    new_expires_at_formatted: str
    renew_count: int
    last_renewed_at: datetime


@dataclass
class CleanupResultDTO:
    """DTO for cleanup response."""

    deleted_count: int
    remaining_keys: int
    dry_run: bool = False
