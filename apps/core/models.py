# apps/core/models.py

"""
Base models for the storefront.
Provides common functionality that can be inherited by other models.
"""

import uuid

from django.db import models


class AuditStampedModelBase(models.Model):
    """
    Abstract base model that provides audit fields for tracking
    when records are created and updated.
    """

    id: models.UUIDField = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for this record",
    )

    created_at: models.DateTimeField = models.DateTimeField(
        auto_now_add=True, help_text="When this record was created"
    )

    updated_at: models.DateTimeField = models.DateTimeField(
        auto_now=True, help_text="When this record was last updated"
    )

    is_active: models.BooleanField = models.BooleanField(
        default=True, help_text="Whether this record is active"
    )

    class Meta:
        abstract = True
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.__class__.__name__} {self.id}"


class AllObjectsManager(models.Manager):
    """
    Manager that returns all objects including soft-deleted ones.
    Useful for admin interfaces or data recovery.
    """

    def get_queryset(self):
        """Return all objects regardless of is_active status."""
        return super().get_queryset()
