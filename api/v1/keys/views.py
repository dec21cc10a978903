"""
Key API views.

These endpoints are used by clients and the scheduler to:
- Generate keys
- Verify keys
- Renew keys
- Clean up expired keys
"""

from asgiref.sync import async_to_sync
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from access_keys.application.commands.cleanup_keys import CleanupKeysCommand
from access_keys.application.commands.generate_key import GenerateKeyCommand
from access_keys.application.commands.renew_key import RenewKeyCommand
from access_keys.application.handlers.cleanup_keys_handler import CleanupKeysHandler
from access_keys.application.handlers.generate_key_handler import GenerateKeyHandler
from access_keys.application.handlers.renew_key_handler import RenewKeyHandler
from access_keys.application.handlers.verify_key_handler import VerifyKeyHandler
from access_keys.application.queries.verify_key import VerifyKeyQuery
from access_keys.infrastructure.repositories import build_key_repository
from api.exceptions import error_body
from api.v1.keys.serializers import (
    CleanupResultSerializer,
    GeneratedKeySerializer,
    GenerateKeyRequestSerializer,
    KeyDetailsSerializer,
    RenewalResultSerializer,
    RenewKeyRequestSerializer,
    VerifyKeyRequestSerializer,
)
from core.instrumentation import Status, StatusCode, get_tracer

tracer = get_tracer(__name__)


def _validation_failed(span, errors) -> Response:
    span.set_attribute("error", "validation_failed")
    span.set_status(Status(StatusCode.ERROR, "Validation failed"))
    return Response(error_body("VALIDATION_ERROR", errors), status=status.HTTP_400_BAD_REQUEST)


class GenerateKeyView(APIView):
    """View for generating keys."""

    @extend_schema(
        operation_id="generate_key",
        summary="Generate Key",
        description=(
            "Issue a new key for a username. Duration is an hour count "
            "(1, 24, 72, 168, 720) or 'permanent'. Rejected while the "
            "username still holds an active key."
        ),
        tags=["Key API"],
        request=GenerateKeyRequestSerializer,
        responses={
            200: GeneratedKeySerializer,
            400: {"description": "Invalid input or username already has an active key"},
            500: {"description": "Key store unavailable or not configured"},
        },
    )
    def post(self, request: Request) -> Response:
        """Generate a key."""
        return async_to_sync(self._handle_generate_key)(request)

    async def _handle_generate_key(self, request: Request) -> Response:
        """Async handler for generate key."""
        with tracer.start_as_current_span("generate_key") as span:
            span.set_attribute("operation", "generate_key")

            serializer = GenerateKeyRequestSerializer(data=request.data)
            if not serializer.is_valid():
                return _validation_failed(span, serializer.errors)

            span.set_attribute("username", serializer.validated_data["username"])
            span.set_attribute("duration", serializer.validated_data["duration"])

            handler = GenerateKeyHandler(key_repository=build_key_repository())
            command = GenerateKeyCommand(
                username=serializer.validated_data["username"],
                duration=serializer.validated_data["duration"],
            )

            result = await handler.handle(command)

            span.set_status(Status(StatusCode.OK))
            return Response(
                {
                    "success": True,
                    "message": f"Key created for {result.username}!",
                    **GeneratedKeySerializer(result).data,
                },
                status=status.HTTP_200_OK,
            )


class VerifyKeyView(APIView):
    """
    View for verifying keys.

    A wrong or expired key is answered with 200 and valid=false;
    non-200 statuses mean bad input or a broken key store.
    """

    reports_validity = True

    @extend_schema(
        operation_id="verify_key_get",
        summary="Verify Key (query string)",
        tags=["Key API"],
        parameters=[
            OpenApiParameter(name="key", type=str, location=OpenApiParameter.QUERY, required=True),
            OpenApiParameter(
                name="username", type=str, location=OpenApiParameter.QUERY, required=True
            ),
        ],
        responses={200: {"description": "Verification result"}},
    )
    def get(self, request: Request) -> Response:
        """Verify a key given in the query string."""
        return async_to_sync(self._handle_verify_key)(request.query_params)

    @extend_schema(
        operation_id="verify_key",
        summary="Verify Key",
        description="Check whether a key is valid for a username.",
        tags=["Key API"],
        request=VerifyKeyRequestSerializer,
        responses={
            200: {"description": "Verification result"},
            400: {"description": "Key or username missing"},
            500: {"description": "Key store unavailable or not configured"},
        },
    )
    def post(self, request: Request) -> Response:
        """Verify a key given in the body."""
        return async_to_sync(self._handle_verify_key)(request.data)

    async def _handle_verify_key(self, data) -> Response:
        """Async handler for verify key."""
        with tracer.start_as_current_span("verify_key") as span:
            span.set_attribute("operation", "verify_key")

            serializer = VerifyKeyRequestSerializer(data=data)
            if not serializer.is_valid():
                response = _validation_failed(span, serializer.errors)
                response.data["valid"] = False
                return response

            span.set_attribute("username", serializer.validated_data["username"])

            handler = VerifyKeyHandler(key_repository=build_key_repository())
            result = await handler.handle(
                VerifyKeyQuery(
                    key=serializer.validated_data["key"],
                    username=serializer.validated_data["username"],
                )
            )

            span.set_attribute("key.valid", result.valid)
            span.set_status(Status(StatusCode.OK))
            if not result.valid:
                return Response(
                    {"valid": False, "error": result.reason},
                    status=status.HTTP_200_OK,
                )
            return Response(
                {
                    "valid": True,
                    "message": "Key valid!",
                    "data": KeyDetailsSerializer(result.data).data,
                },
                status=status.HTTP_200_OK,
            )


class RenewKeyView(APIView):
    """View for renewing keys."""

    @extend_schema(
        operation_id="renew_key",
        summary="Renew Key",
        description=(
            "Extend a timed key. Identify it by key and username, or by username "
            "alone for the username's active key. Without a duration the key is "
            "extended by its own duration. Keys with under an hour left, expired "
            "keys and permanent keys cannot be renewed."
        ),
        tags=["Key API"],
        request=RenewKeyRequestSerializer,
        responses={
            200: RenewalResultSerializer,
            400: {"description": "Not renewable, expired, too close to expiry or invalid input"},
            404: {"description": "Key not found"},
            500: {"description": "Key store unavailable or not configured"},
        },
    )
    def post(self, request: Request) -> Response:
        """Renew a key."""
        return async_to_sync(self._handle_renew_key)(request)

    async def _handle_renew_key(self, request: Request) -> Response:
        """Async handler for renew key."""
        with tracer.start_as_current_span("renew_key") as span:
            span.set_attribute("operation", "renew_key")

            serializer = RenewKeyRequestSerializer(data=request.data)
            if not serializer.is_valid():
                return _validation_failed(span, serializer.errors)

            span.set_attribute("username", serializer.validated_data["username"])

            handler = RenewKeyHandler(key_repository=build_key_repository())
            command = RenewKeyCommand(
                username=serializer.validated_data["username"],
                key=serializer.validated_data.get("key") or None,
                duration=serializer.validated_data.get("duration") or None,
            )

            result = await handler.handle(command)

            span.set_attribute("renew_count", result.renew_count)
            span.set_status(Status(StatusCode.OK))
            return Response(
                {
                    "success": True,
                    "message": f"Key renewed! Expires: {result.new_expires_at_formatted}",
                    **RenewalResultSerializer(result).data,
                },
                status=status.HTTP_200_OK,
            )


class CleanupKeysView(APIView):
    """
    View for removing expired keys.

    Called by the scheduler; the bearer secret is checked by
    CronSecretMiddleware before the view runs.
    """

    @extend_schema(
        operation_id="cleanup_keys",
        summary="Clean Up Expired Keys",
        tags=["Key API"],
        parameters=[
            OpenApiParameter(
                name="Authorization",
                type=str,
                location=OpenApiParameter.HEADER,
                required=True,
                description="Bearer <CRON_SECRET>",
            ),
        ],
        request=None,
        responses={
            200: CleanupResultSerializer,
            401: {"description": "Unauthorized - Missing or invalid secret"},
            500: {"description": "Key store unavailable or write failed"},
        },
    )
    def get(self, request: Request) -> Response:
        """Remove expired keys."""
        return async_to_sync(self._handle_cleanup_keys)(request)

    @extend_schema(operation_id="cleanup_keys_post", tags=["Key API"], request=None)
    def post(self, request: Request) -> Response:
        """Remove expired keys."""
        return async_to_sync(self._handle_cleanup_keys)(request)

    async def _handle_cleanup_keys(self, request: Request) -> Response:
        """Async handler for cleanup keys."""
        with tracer.start_as_current_span("cleanup_keys") as span:
            span.set_attribute("operation", "cleanup_keys")

            handler = CleanupKeysHandler(key_repository=build_key_repository())
            result = await handler.handle(CleanupKeysCommand(trigger="http"))

            span.set_attribute("deleted_count", result.deleted_count)
            span.set_status(Status(StatusCode.OK))
            return Response(
                {
                    "success": True,
                    "message": "Cleanup finished",
                    **CleanupResultSerializer(result).data,
                },
                status=status.HTTP_200_OK,
            )
