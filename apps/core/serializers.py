# apps/core/serializers.py

"""
Base serializers for the storefront.
Provides common serialization functionality for all models.
"""

import html
import re
from typing import Any, ClassVar

from rest_framework import serializers

from apps.core.models import AuditStampedModelBase as BaseModel


class SecurityMixin:
    """
    Mixin that provides security features for serializers.
    Includes input sanitization and basic XSS protection.
    """

    @staticmethod
    def sanitize_input(value: str) -> str:
        """
        Basic input sanitization to prevent XSS attacks.
        Removes potentially dangerous HTML tags and scripts.
        """
        if not isinstance(value, str):
            return value

        value = re.sub(
            r"<script[^>]*>.*?</script>",
            "",
            value,
            flags=re.DOTALL | re.IGNORECASE,
        )

        dangerous_tags = ["script", "iframe", "object", "embed", "form", "input"]
        for tag in dangerous_tags:
            value = re.sub(f"<{tag}[^>]*>", "", value, flags=re.IGNORECASE)
            value = re.sub(f"</{tag}>", "", value, flags=re.IGNORECASE)

        return html.escape(value, quote=False).strip()


class BaseModelSerializer(SecurityMixin, serializers.ModelSerializer):
    """
    Base serializer for models deriving from AuditStampedModelBase.
    Formats audit timestamps and sanitizes every incoming string.
    """

    created_at = serializers.DateTimeField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True)

    class Meta:
        model = BaseModel
        fields: ClassVar[list[str]] = ["id", "created_at", "updated_at"]
        read_only_fields: ClassVar[list[str]] = ["id", "created_at", "updated_at"]

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        """
        Global validation that applies to all serializers.
        """
        for field_name, value in attrs.items():
            if isinstance(value, str):
                attrs[field_name] = self.sanitize_input(value)

        return super().validate(attrs)


class SanitizedCharField(serializers.CharField):
    """
    Custom CharField that automatically sanitizes input.
    """

    def to_internal_value(self, data: str) -> str:
        data = super().to_internal_value(data)
        return SecurityMixin.sanitize_input(data)
