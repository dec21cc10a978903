"""
Unit tests for the API exception handler.
"""
from types import SimpleNamespace

from rest_framework.exceptions import MethodNotAllowed

from access_keys.ports.document_store import (
    CorruptKeyStoreError,
    StoreConflictError,
    StoreUnavailableError,
)
from api.exceptions import custom_exception_handler, error_body
from core.domain.exceptions import (
    DuplicateActiveKeyError,
    KeyNotFoundError,
    KeyStoreConflictError,
    UnauthorizedError,
)


def _context(reports_validity=False, trace_id=None):
    view = SimpleNamespace(reports_validity=reports_validity)
    request = SimpleNamespace(trace_id=trace_id)
    return {"view": view, "request": request}


class TestErrorBody:
    """Tests for error_body."""

    def test_error_body_with_details(self):
        """Test details are merged into the error object."""
        assert error_body("KEY_NOT_FOUND", "Key not found", extra=1) == {
            "success": False,
            "error": {"code": "KEY_NOT_FOUND", "message": "Key not found", "extra": 1},
        }


class TestCustomExceptionHandler:
    """Tests for custom_exception_handler."""

    def test_domain_exception(self):
        """Test domain rejections are 400 with their details."""
        exc = DuplicateActiveKeyError("already active", existing_key={"key": "K"})
        response = custom_exception_handler(exc, _context())

        assert response.status_code == 400
        assert response.data["error"]["code"] == "DUPLICATE_ACTIVE_KEY"
        assert response.data["error"]["existingKey"] == {"key": "K"}

    def test_not_found(self):
        """Test missing keys are 404."""
        response = custom_exception_handler(KeyNotFoundError(), _context())
        assert response.status_code == 404

    def test_unauthorized(self):
        """Test unauthorized is 401."""
        response = custom_exception_handler(UnauthorizedError(), _context())
        assert response.status_code == 401

    def test_conflict_exhausted(self):
        """Test exhausted retries are a 400 business rejection."""
        response = custom_exception_handler(KeyStoreConflictError(), _context())
        assert response.status_code == 400
        assert response.data["error"]["code"] == "KEY_STORE_CONFLICT"

    def test_store_conflict(self):
        """Test a raw store conflict is 400."""
        response = custom_exception_handler(StoreConflictError("stale"), _context())
        assert response.status_code == 400

    def test_store_unavailable(self):
        """Test store failures are 500 and include the cause."""
        response = custom_exception_handler(StoreUnavailableError("timeout"), _context())

        assert response.status_code == 500
        assert response.data["error"]["code"] == "STORE_UNAVAILABLE"
        assert response.data["error"]["message"] == "Key store error: timeout"

    def test_corrupt_store(self):
        """Test a corrupt document is a server error."""
        response = custom_exception_handler(CorruptKeyStoreError("bad json"), _context())
        assert response.status_code == 500
        assert response.data["error"]["code"] == "CORRUPT_KEY_STORE"

    def test_drf_exception(self):
        """Test DRF exceptions are reshaped into the error body."""
        response = custom_exception_handler(MethodNotAllowed("DELETE"), _context())

        assert response.status_code == 405
        assert response.data["success"] is False
        assert response.data["error"]["code"] == "METHOD_NOT_ALLOWED"

    def test_unexpected_exception(self):
        """Test unexpected errors are 500 with the message."""
        response = custom_exception_handler(RuntimeError("kaput"), _context())

        assert response.status_code == 500
        assert response.data["error"]["code"] == "INTERNAL_ERROR"
        assert "kaput" in response.data["error"]["message"]

    def test_reports_validity(self):
        """Test views that report validity get valid false on errors."""
        response = custom_exception_handler(
            StoreUnavailableError("timeout"), _context(reports_validity=True)
        )
        assert response.data["valid"] is False

    def test_trace_id_header(self):
        """Test the trace id is echoed in a header."""
        response = custom_exception_handler(KeyNotFoundError(), _context(trace_id="abc"))
        assert response["X-Trace-ID"] == "abc"
