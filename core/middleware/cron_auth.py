"""
Cron secret authentication middleware.

This middleware guards the scheduler-facing endpoints with a shared
bearer secret.
"""

import hmac
import logging
from typing import Optional

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.utils.deprecation import MiddlewareMixin

from core.domain.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)


class CronSecretMiddleware(MiddlewareMixin):
    """
    Middleware for bearer secret authentication.

    This middleware:
    1. Matches requests against settings.CRON_PROTECTED_PATHS
    2. Compares the Authorization bearer value with settings.CRON_SECRET
    3. Returns 401 Unauthorized on mismatch, or when no secret is configured
    """

    def process_request(self, request: HttpRequest) -> Optional[HttpResponse]:
        """
        Process request and validate the bearer secret.

        Args:
            request: HTTP request

        Returns:
            HttpResponse with 401 if authentication fails, None otherwise
        """
        if not self._is_protected(request.path):
            return None

        expected = getattr(settings, "CRON_SECRET", "") or ""
        if not expected:
            logger.error("CRON_SECRET is not configured; rejecting %s", request.path)
            return self._unauthorized(UnauthorizedError("Cron secret is not configured"))

        header = request.headers.get("Authorization", "")
        scheme, _, provided = header.partition(" ")
        if scheme != "Bearer" or not hmac.compare_digest(
            provided.strip().encode(), expected.encode()
        ):
            logger.warning("Invalid cron secret attempted on %s", request.path)
            return self._unauthorized(UnauthorizedError())

        return None

    def _is_protected(self, path: str) -> bool:
        """
        Check if the path requires the cron secret.

        Args:
            path: Request path

        Returns:
            True if the path is protected
        """
        protected = getattr(settings, "CRON_PROTECTED_PATHS", [])
        normalized = path.rstrip("/")
        return any(normalized == p.rstrip("/") for p in protected)

    def _unauthorized(self, exc: UnauthorizedError) -> HttpResponse:
        from api.exceptions import error_body

        return JsonResponse(error_body(exc.code, exc.message, **exc.details), status=401)
