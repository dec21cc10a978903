"""
Serializers for Key API endpoints.

Response field names follow the camelCase keys of the stored key document.
"""

from rest_framework import serializers

from access_keys.domain.access_key import format_timestamp


class TimestampField(serializers.Field):
    """Read-only UTC timestamp rendered as ISO-8601 with milliseconds and Z."""

    def __init__(self, **kwargs):
        kwargs["read_only"] = True
        super().__init__(**kwargs)

    def to_representation(self, value):
        return format_timestamp(value)


class DurationInputField(serializers.CharField):
    """Duration given as an hour count (string or number) or "permanent"."""

    def to_internal_value(self, data):
        if isinstance(data, bool):
            self.fail("invalid")
        return super().to_internal_value(data)


class GenerateKeyRequestSerializer(serializers.Serializer):
    """Serializer for generate key request."""

    username = serializers.CharField(required=True, max_length=100)
    duration = DurationInputField(required=True, max_length=20)


class VerifyKeyRequestSerializer(serializers.Serializer):
    """Serializer for verify key request (query string or body)."""

    key = serializers.CharField(required=True, max_length=200)
    username = serializers.CharField(required=True, max_length=100)


class RenewKeyRequestSerializer(serializers.Serializer):
    """Serializer for renew key request."""

    username = serializers.CharField(required=True, max_length=100)
    key = serializers.CharField(required=False, allow_blank=True, max_length=200)
    duration = DurationInputField(required=False, allow_blank=True, max_length=20)


class GeneratedKeySerializer(serializers.Serializer):
    """Serializer for GeneratedKeyDTO."""

    key = serializers.CharField()
    username = serializers.CharField()
    duration = serializers.CharField(source="duration_label")
    durationValue = serializers.CharField(source="duration_value")
    createdAt = TimestampField(source="created_at")
    expiresAt = TimestampField(source="expires_at", allow_null=True)
    expiresAtFormatted = serializers.CharField(source="expires_at_formatted")


class KeyDetailsSerializer(serializers.Serializer):
    """Serializer for KeyDetailsDTO."""

    username = serializers.CharField()
    duration = serializers.CharField()
    createdAt = TimestampField(source="created_at", allow_null=True)
    expiresAt = TimestampField(source="expires_at", allow_null=True)


class RenewalResultSerializer(serializers.Serializer):
    """Serializer for RenewalResultDTO."""

    key = serializers.CharField()
    username = serializers.CharField()
    newExpiresAt = TimestampField(source="new_expires_at")
    newExpiresAtFormatted = serializers.CharField(source="new_expires_at_formatted")
    renewCount = serializers.IntegerField(source="renew_count")
    lastRenewedAt = TimestampField(source="last_renewed_at")


class CleanupResultSerializer(serializers.Serializer):
    """Serializer for CleanupResultDTO."""

    deletedCount = serializers.IntegerField(source="deleted_count")
    remainingKeys = serializers.IntegerField(source="remaining_keys")
