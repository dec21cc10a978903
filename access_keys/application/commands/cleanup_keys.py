"""
CleanupKeysCommand.

Command to remove expired, non-permanent keys from the key document.
"""
from dataclasses import dataclass


@dataclass
class CleanupKeysCommand:
    """Command to purge expired keys."""

    dry_run: bool = False
    trigger: str = "schedule"
