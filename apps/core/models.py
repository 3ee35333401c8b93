"""
Core models for the RRHH API.
Provides BaseModel with UUID primary keys and timestamp fields.
"""
import uuid
from django.db import models


class BaseModel(models.Model):
    """
    Abstract base model with UUID primary key and timestamps.

    Records are removed physically; catalog entries are switched off through
    their own ``estado`` flag instead of a deletion marker.
    """
    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier"
    )

    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="Timestamp when the record was created"
    )

    updated_at = models.DateTimeField(
        auto_now=True,
        db_index=True,
        help_text="Timestamp when the record was last updated"
    )

    class Meta:
        abstract = True
        ordering = ['-created_at']


class EstadoQuerySet(models.QuerySet):
    """QuerySet for models carrying the ``estado`` active flag."""

    def activos(self):
        return self.filter(estado=True)

    def inactivos(self):
        return self.filter(estado=False)
