"""
Unit tests for CronSecretMiddleware.
"""
import json

import pytest
from django.http import HttpResponse
from django.test import override_settings

from core.middleware.cron_auth import CronSecretMiddleware

CLEANUP_PATH = "/api/v1/keys/cleanup"


@pytest.fixture
def middleware():
    """Fixture for the middleware wrapping a view that always succeeds."""
    return CronSecretMiddleware(lambda request: HttpResponse("ok"))


class TestCronSecretMiddleware:
    """Tests for the bearer secret check."""

    def test_valid_secret_passes(self, middleware, rf):
        """Test the configured secret reaches the view."""
        request = rf.get(CLEANUP_PATH, HTTP_AUTHORIZATION="Bearer test-cron-secret")
        assert middleware(request).status_code == 200

    def test_trailing_slash_is_protected(self, middleware, rf):
        """Test the path match ignores a trailing slash."""
        assert middleware(rf.get(CLEANUP_PATH + "/")).status_code == 401

    def test_unprotected_path_passes(self, middleware, rf):
        """Test other paths do not need the secret."""
        assert middleware(rf.get("/api/v1/keys/verify")).status_code == 200

    def test_wrong_secret_body(self, middleware, rf):
        """Test a rejected request carries the unauthorized error payload."""
        response = middleware(rf.post(CLEANUP_PATH, HTTP_AUTHORIZATION="Bearer wrong"))

        assert response.status_code == 401
        assert json.loads(response.content) == {
            "success": False,
            "error": {"code": "UNAUTHORIZED", "message": "Unauthorized"},
        }

    def test_wrong_scheme(self, middleware, rf):
        """Test the secret must be sent as a bearer token."""
        request = rf.get(CLEANUP_PATH, HTTP_AUTHORIZATION="Basic test-cron-secret")
        assert middleware(request).status_code == 401

    @override_settings(CRON_SECRET="")
    def test_unconfigured_secret(self, middleware, rf):
        """Test an unset secret is reported as such."""
        response = middleware(rf.get(CLEANUP_PATH, HTTP_AUTHORIZATION="Bearer "))

        assert response.status_code == 401
        assert json.loads(response.content)["error"] == {
            "code": "UNAUTHORIZED",
            "message": "Cron secret is not configured",
        }
