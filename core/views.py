"""
Core views for health checks and system status.
"""

import logging

from asgiref.sync import async_to_sync
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from access_keys.infrastructure.repositories import build_key_repository
from access_keys.infrastructure.stores import build_document_store
from access_keys.ports.document_store import StoreError

logger = logging.getLogger(__name__)


@method_decorator(csrf_exempt, name="dispatch")
class HealthView(View):
    """Health check endpoint."""

    def get(self, _request):
        """Return service health status."""
        return JsonResponse({"status": "healthy", "service": "access-key-service"})


@method_decorator(csrf_exempt, name="dispatch")
class HealthStoreView(View):
    """Key store health check endpoint."""

    def get(self, _request):
        """Check that the key document can be read."""
        try:
            snapshot = async_to_sync(build_key_repository().load)()
        except StoreError as e:
            logger.warning("Key store health check failed: %s", e.message)
            return JsonResponse(
                {"status": "unhealthy", "store": "unavailable", "error": e.message},
                status=503,
            )
        return JsonResponse(
            {
                "status": "healthy",
                "store": "connected",
                "document": "present" if snapshot is not None else "missing",
                "keys": len(snapshot.records) if snapshot is not None else 0,
            }
        )


@method_decorator(csrf_exempt, name="dispatch")
class ReadyView(View):
    """Readiness check endpoint."""

    def get(self, _request):
        """Check if service is ready to accept traffic."""
        checks = {
            "store_configured": self._check_store_configured(),
        }

        all_healthy = all(checks.values())
        status_code = 200 if all_healthy else 503

        return JsonResponse(
            {
                "status": "ready" if all_healthy else "not_ready",
                "checks": checks,
            },
            status=status_code,
        )

    def _check_store_configured(self) -> bool:
        """Check that a key store can be built from settings."""
        try:
            build_document_store()
        except StoreError as e:
            logger.warning("Key store not ready: %s", e.message)
            return False
        return True
