"""
Serializers for the Groups app.
All output uses camelCase to match the web client.
"""
from rest_framework import serializers

from apps.expenses.serializers import ExpenseSerializer
from apps.groups.models import Group, GroupMember
from apps.members.serializers import MemberSerializer


class GroupMemberSerializer(serializers.ModelSerializer):
    memberId = serializers.CharField(source='member.id', read_only=True)
    groupId = serializers.CharField(source='group_id', read_only=True)
    name = serializers.CharField(source='member.name', read_only=True)
    email = serializers.CharField(source='member.email', read_only=True)
    joinedAt = serializers.DateTimeField(source='joined_at', read_only=True)

    class Meta:
        model = GroupMember
        fields = ['memberId', 'groupId', 'name', 'email', 'joinedAt']
        read_only_fields = fields


class GroupSerializer(serializers.ModelSerializer):
    memberIds = serializers.SerializerMethodField()
    memberCount = serializers.ReadOnlyField(source='member_count')
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Group
        fields = ['id', 'name', 'description', 'memberIds', 'memberCount', 'createdAt']
        read_only_fields = fields

    def get_memberIds(self, obj):
        return [str(m.member_id) for m in obj.memberships.all()]


class GroupWriteSerializer(serializers.ModelSerializer):
    class Meta:
        model = Group
        fields = ['name', 'description']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Group name is required.')
        return value


class AddGroupMemberSerializer(serializers.Serializer):
    """
    Add a member to a group: either an existing member by ``memberId`` or a
    new one created from ``name`` and ``email``.
    """
    memberId = serializers.UUIDField(required=False)
    name = serializers.CharField(max_length=100, required=False)
    email = serializers.EmailField(required=False, allow_blank=True)

    def validate(self, attrs):
        has_id = 'memberId' in attrs
        has_name = bool(attrs.get('name', '').strip())
        if has_id == has_name:
            raise serializers.ValidationError(
                'Provide either memberId or name, but not both.'
            )
        return attrs


def group_detail_data(group):
    """Group payload with its members and expenses, as the detail view returns it."""
    expenses = group.expenses.select_related('paid_by').prefetch_related('splits__member')
    data = GroupSerializer(group).data
    data['members'] = MemberSerializer(group.ordered_members(), many=True).data
    data['expenses'] = ExpenseSerializer(expenses, many=True).data
    return data
