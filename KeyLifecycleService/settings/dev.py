"""
Development settings for KeyLifecycleService.
"""
import os

from .base import *  # noqa: F403, F401

DEBUG = True

ALLOWED_HOSTS = ["localhost", "127.0.0.1", "0.0.0.0"]

# Use the in-memory store unless GitHub credentials are provided
if not os.environ.get("GITHUB_TOKEN"):
    KEY_STORE["BACKEND"] = os.environ.get("KEY_STORE_BACKEND", "memory")  # noqa: F405

CRON_SECRET = os.environ.get("CRON_SECRET", "dev-cron-secret")
