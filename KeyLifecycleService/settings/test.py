"""
Test settings for KeyLifecycleService.
"""

from .base import *  # noqa: F403, F401

DEBUG = False

ALLOWED_HOSTS = ["testserver", "localhost"]

KEY_STORE = {
    "BACKEND": "memory",
    "PATH": "keys.json",
    "TOKEN": "test-token",
    "OWNER": "acme",
    "REPO": "key-store",
    "BRANCH": None,
    "API_URL": "https://api.github.com",
    "TIMEOUT_SECONDS": 5,
    "MAX_ATTEMPTS": 3,
    "RETRY_BACKOFF_SECONDS": 0,
}

CRON_SECRET = "test-cron-secret"

KEY_EXPIRY_DISPLAY_TIMEZONE = "UTC"

OTEL_ENABLED = False

CELERY_TASK_ALWAYS_EAGER = True

# Disable logging during tests
LOGGING_CONFIG = None
