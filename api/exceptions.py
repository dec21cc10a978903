"""
API exception handlers.

This module provides custom exception handling for REST API responses.
"""

import logging
from typing import Any, Dict, Optional

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

from access_keys.ports.document_store import StoreConflictError, StoreError
from core.domain.exceptions import (
    DomainException,
    KeyNotFoundError,
    UnauthorizedError,
)
from core.metrics import errors_total

logger = logging.getLogger(__name__)


def error_body(code: str, message: Any, **details) -> Dict[str, Any]:
    """Build the error payload shared by every endpoint."""
    error = {"code": code, "message": message}
    error.update(details)
    return {"success": False, "error": error}


def custom_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """Custom exception handler for REST API."""
    trace_id = _get_trace_id(context)

    if isinstance(exc, DomainException):
        response = _handle_domain_exception(exc, trace_id)
    elif isinstance(exc, StoreError):
        response = _handle_store_exception(exc, trace_id)
    elif isinstance(exc, APIException):
        response = exception_handler(exc, context)
        code = (
            exc.default_code.upper().replace("-", "_")
            if hasattr(exc, "default_code")
            else "API_ERROR"
        )
        detail = response.data.get("detail", exc.default_detail) if isinstance(
            response.data, dict
        ) else response.data
        response.data = error_body(code, detail)
    elif isinstance(exc, Http404):
        response = Response(
            error_body("NOT_FOUND", "Resource not found"),
            status=status.HTTP_404_NOT_FOUND,
        )
    else:
        response = _handle_unexpected_exception(exc, trace_id)

    view = context.get("view")
    if getattr(view, "reports_validity", False):
        response.data["valid"] = False
    if trace_id:
        response["X-Trace-ID"] = trace_id
    return response


def _get_trace_id(context: Dict[str, Any]) -> Optional[str]:
    """Extract trace ID from request context."""
    request = context.get("request")
    if not request:
        return None
    return getattr(request, "trace_id", getattr(request, "correlation_id", None))


def _handle_domain_exception(exc: DomainException, trace_id: Optional[str]) -> Response:
    """Handle domain-specific exceptions."""
    status_code = status.HTTP_400_BAD_REQUEST
    if isinstance(exc, KeyNotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, UnauthorizedError):
        status_code = status.HTTP_401_UNAUTHORIZED

    logger.warning("Domain exception: %s - %s", exc.code, exc.message, extra={"trace_id": trace_id})
    return Response(error_body(exc.code, exc.message, **exc.details), status=status_code)


def _handle_store_exception(exc: StoreError, trace_id: Optional[str]) -> Response:
    """Handle document store failures."""
    if isinstance(exc, StoreConflictError):
        logger.warning("Store conflict: %s", exc.message, extra={"trace_id": trace_id})
        return Response(error_body(exc.code, exc.message), status=status.HTTP_400_BAD_REQUEST)

    errors_total.labels(error_type=exc.code, endpoint="store").inc()
    logger.error("Store error: %s - %s", exc.code, exc.message, extra={"trace_id": trace_id})
    return Response(
        error_body(exc.code, f"Key store error: {exc.message}"),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def _handle_unexpected_exception(exc: Exception, trace_id: Optional[str]) -> Response:
    """Handle unexpected or untracked exceptions."""
    errors_total.labels(error_type=type(exc).__name__, endpoint="api").inc()
    logger.error("Unexpected error: %s", exc, extra={"trace_id": trace_id}, exc_info=True)
    return Response(
        error_body("INTERNAL_ERROR", f"An internal error occurred: {exc}"),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
