"""
Models for the Groups app.
"""
from django.db import models

from common.models import TimestampedModel


class Group(TimestampedModel):
    """
    A set of members sharing expenses.

    Deleting a group cascades to its expenses (and their splits) and to its
    membership rows, but never to the members themselves.
    """
    name = models.CharField(max_length=100)
    description = models.CharField(max_length=500, blank=True, default='')
    members = models.ManyToManyField(
        'members.Member',
        through='GroupMember',
        related_name='expense_groups',
    )

    class Meta:
        db_table = 'groups'
        ordering = ['-created_at']

    def __str__(self):
        return self.name

    @property
    def member_count(self):
        return self.memberships.count()

    def ordered_members(self):
        """Current members in the order they joined."""
        return [m.member for m in self.memberships.select_related('member')]

    def has_member(self, member_id):
        return self.memberships.filter(member_id=member_id).exists()


class GroupMember(TimestampedModel):
    """
    Membership record linking a member to a group.
    """
    group = models.ForeignKey(
        Group,
        on_delete=models.CASCADE,
        related_name='memberships',
    )
    member = models.ForeignKey(
        'members.Member',
        on_delete=models.CASCADE,
        related_name='group_memberships',
    )
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'group_members'
        unique_together = ['group', 'member']
        ordering = ['joined_at', 'created_at']

    def __str__(self):
        return f'{self.member} in {self.group}'
