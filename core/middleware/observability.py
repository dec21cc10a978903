"""
Observability middleware.

Gives every request a correlation id, logs one structured line when it
starts and one when it ends, and echoes the ids back in headers so a
caller can find its request in Loki or in a trace backend.
"""

import logging
import time
import uuid
from typing import Callable, Dict, Optional

from django.http import HttpRequest, HttpResponse
from opentelemetry import trace
from opentelemetry.trace import format_span_id, format_trace_id

logger = logging.getLogger(__name__)

KEY_API_PREFIX = "/api/v1/keys/"


def _key_operation(path: str) -> Optional[str]:
    """Return 'generate', 'verify', 'renew' or 'cleanup' for key API paths."""
    if not path.startswith(KEY_API_PREFIX):
        return None
    return path[len(KEY_API_PREFIX):].strip("/") or None


def _outcome(status_code: int) -> str:
    if status_code >= 500:
        return "server_error"
    if status_code >= 400:
        return "client_error"
    return "success"


class ObservabilityMiddleware:
    """
    Middleware for request observability.

    An inbound X-Correlation-ID is reused so calls can be followed
    across services; otherwise a new one is generated.
    """

    def __init__(self, get_response: Callable):
        """Initialize middleware."""
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        """Process request and add observability."""
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        request.correlation_id = correlation_id  # type: ignore

        context = self._request_context(request, correlation_id)
        logger.info("Request started", extra=context)

        start_time = time.time()
        try:
            response = self.get_response(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={
                    **context,
                    "request_status": "exception",
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "duration_ms": round((time.time() - start_time) * 1000, 2),
                },
                exc_info=True,
            )
            raise

        duration = time.time() - start_time
        status = _outcome(response.status_code)
        log_extra = {
            **context,
            "request_status": status,
            "status_code": response.status_code,
            "duration_ms": round(duration * 1000, 2),
            "response_size": len(response.content) if hasattr(response, "content") else 0,
        }
        log = {
            "server_error": logger.error,
            "client_error": logger.warning,
        }.get(status, logger.info)
        log("Request completed with %s", status.replace("_", " "), extra=log_extra)

        response["X-Correlation-ID"] = correlation_id
        response["X-Request-Status"] = status
        response["X-Request-Duration"] = f"{duration:.3f}"
        if "trace_id" in context:
            response["X-Trace-ID"] = context["trace_id"]
        return response

    def _request_context(self, request: HttpRequest, correlation_id: str) -> Dict[str, str]:
        """Fields attached to every log line of this request."""
        context = {
            "correlation_id": correlation_id,
            "method": request.method,
            "path": request.path,
            "remote_addr": request.META.get("REMOTE_ADDR"),
        }
        operation = _key_operation(request.path)
        if operation:
            context["key_operation"] = operation

        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            context["trace_id"] = format_trace_id(span_context.trace_id)
            context["span_id"] = format_span_id(span_context.span_id)
            request.trace_id = context["trace_id"]  # type: ignore
        return context
