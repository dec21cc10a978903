"""
App configuration for Key Lifecycle Service.
"""

from django.apps import AppConfig


class KeyLifecycleServiceConfig(AppConfig):
    """App configuration for KeyLifecycleService."""

    name = "KeyLifecycleService"
    verbose_name = "Key Lifecycle Service"

    def ready(self):
        """Called when Django starts."""
        import os
        import sys

        # Skip for management commands that never serve requests
        if len(sys.argv) > 1 and sys.argv[1] in ["shell", "check", "collectstatic"]:
            return

        # Django's reloader parent process
        if os.environ.get("RUN_MAIN") == "false":
            return

        if not hasattr(self, "_initialized"):
            import logging

            logger = logging.getLogger(__name__)
            logger.info("Setting up observability...")
            self.setup_observability()
            self.register_event_handlers()
            self._initialized = True
            logger.info("Observability setup complete")

    def setup_observability(self):
        """Setup observability after apps are ready."""
        from django.conf import settings

        if not getattr(settings, "OTEL_ENABLED", True):
            return
        from core.instrumentation import setup_opentelemetry

        setup_opentelemetry()

    def register_event_handlers(self):
        """Register event handlers after apps are ready."""
        from core.infrastructure.event_handlers import register_event_handlers as register

        register()
