"""
Base Django settings for KeyLifecycleService.

These settings are shared across all environments.
Environment-specific overrides are in dev.py, test.py, and prod.py
"""
import os
from datetime import timedelta
from pathlib import Path

from .logging import get_logging_config

# Build paths inside the project
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.environ.get(
    "SECRET_KEY", "django-insecure-k3y-l1fecycle-0x9!s2@d8q#w4e%r6t^y7u&i*o(p)"
)

ALLOWED_HOSTS = [host for host in os.environ.get("ALLOWED_HOSTS", "").split(",") if host]

# Application definition
INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.staticfiles",
    # Third party
    "rest_framework",
    "drf_spectacular",
    # Local apps
    "KeyLifecycleService.apps.KeyLifecycleServiceConfig",
    "core",
    "access_keys",
    "api",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    # Custom middleware
    "core.middleware.observability.ObservabilityMiddleware",
    "core.middleware.metrics.MetricsMiddleware",
    "core.middleware.cron_auth.CronSecretMiddleware",
]

ROOT_URLCONF = "KeyLifecycleService.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
            ],
        },
    },
]

WSGI_APPLICATION = "KeyLifecycleService.wsgi.application"
ASGI_APPLICATION = "KeyLifecycleService.asgi.application"

# Keys live in a JSON document in a GitHub repository, not in a database
DATABASES = {}

# Internationalization
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# Static files (CSS, JavaScript, Images)
STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# REST Framework
REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
    ],
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": [],
    "UNAUTHENTICATED_USER": None,
    "EXCEPTION_HANDLER": "api.exceptions.custom_exception_handler",
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
}

# drf-spectacular settings
SPECTACULAR_SETTINGS = {
    "TITLE": "Key Lifecycle Service API",
    "DESCRIPTION": (
        "Issues, verifies, renews and cleans up access keys stored as a "
        "JSON document in a GitHub repository."
    ),
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
    "COMPONENT_SPLIT_REQUEST": True,
    "SCHEMA_PATH_PREFIX": "/api/v1",
    "TAGS": [
        {"name": "Key API", "description": "Key generation, verification and renewal"},
        {"name": "Health", "description": "Health check endpoints"},
    ],
}

# Key store
KEY_STORE = {
    "BACKEND": os.environ.get("KEY_STORE_BACKEND", "github"),
    "TOKEN": os.environ.get("GITHUB_TOKEN"),
    "OWNER": os.environ.get("GITHUB_OWNER"),
    "REPO": os.environ.get("GITHUB_REPO"),
    "BRANCH": os.environ.get("GITHUB_BRANCH") or None,
    "API_URL": os.environ.get("GITHUB_API_URL", "https://api.github.com"),
    "PATH": os.environ.get("KEY_STORE_PATH", "keys.json"),
    "TIMEOUT_SECONDS": float(os.environ.get("KEY_STORE_TIMEOUT", "10")),
    "MAX_ATTEMPTS": int(os.environ.get("KEY_STORE_MAX_ATTEMPTS", "3")),
    "RETRY_BACKOFF_SECONDS": 0.1,
}

# Bearer secret for the cleanup endpoint; empty rejects every call
CRON_SECRET = os.environ.get("CRON_SECRET", "")
CRON_PROTECTED_PATHS = ["/api/v1/keys/cleanup"]

# Timezone used for human-readable expiry strings
KEY_EXPIRY_DISPLAY_TIMEZONE = os.environ.get("KEY_EXPIRY_DISPLAY_TIMEZONE", "Asia/Jakarta")

# Celery
CELERY_BROKER_URL = os.environ.get("CELERY_BROKER_URL", "redis://127.0.0.1:6379/0")
CELERY_TASK_SERIALIZER = "json"
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TIMEZONE = "UTC"
CLEANUP_SCHEDULE_MINUTES = int(os.environ.get("CLEANUP_SCHEDULE_MINUTES", "60"))
CELERY_BEAT_SCHEDULE = {
    "cleanup-expired-keys": {
        "task": "core.tasks.cleanup_expired_keys_task",
        "schedule": timedelta(minutes=CLEANUP_SCHEDULE_MINUTES),
    },
}

# Observability
OTEL_ENABLED = os.environ.get("OTEL_ENABLED", "true").lower() == "true"
LOGGING = get_logging_config(os.environ.get("ENVIRONMENT", "development"))
