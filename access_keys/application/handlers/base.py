"""
Shared wiring for access key handlers.
"""
from datetime import datetime
from typing import Callable, Optional

from django.conf import settings
from django.utils import timezone

from access_keys.ports.key_repository import KeyRepository

Clock = Callable[[], datetime]


class KeyHandlerBase:
    """Holds the repository, clock and retry/display settings used by handlers."""

    def __init__(
        self,
        key_repository: KeyRepository,
        clock: Optional[Clock] = None,
        max_attempts: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
        display_timezone: Optional[str] = None,
    ):
        """Initialize handler with repository and optional overrides."""
        store_settings = settings.KEY_STORE
        self.key_repository = key_repository
        self.clock = clock or timezone.now
        self.max_attempts = (
            max_attempts
            if max_attempts is not None
            else int(store_settings.get("MAX_ATTEMPTS", 3))
        )
        self.backoff_seconds = (
            backoff_seconds
            if backoff_seconds is not None
            else float(store_settings.get("RETRY_BACKOFF_SECONDS", 0.1))
        )
        self.display_timezone = display_timezone or getattr(
            settings, "KEY_EXPIRY_DISPLAY_TIMEZONE", "UTC"
        )
