"""
Models for the Members app.
"""
from django.db import models

from common.models import TimestampedModel


class Member(TimestampedModel):
    """
    A person who can belong to groups and take part in expenses.

    Members exist independently of any group: leaving a group or deleting
    a group never deletes the Member record.
    """
    name = models.CharField(max_length=100)
    email = models.EmailField(
        blank=True,
        default='',
        help_text='Optional contact address.',
    )

    class Meta:
        db_table = 'members'
        ordering = ['name', 'created_at']

    def __str__(self):
        if self.email:
            return f'{self.name} ({self.email})'
        return self.name

    @property
    def has_expenses(self):
        return self.paid_expenses.exists() or self.expense_splits.exists()
