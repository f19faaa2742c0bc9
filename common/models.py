"""
Abstract base models shared by the Group Ledger apps.
"""
import uuid

from django.db import models


class TimestampedModel(models.Model):
    """
    Abstract base model with a UUID primary key and self-updating
    ``created_at`` / ``updated_at`` fields.

    UUIDs double as the stable public identifiers of members, groups and
    expenses in the API.
    """
    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ['-created_at']
