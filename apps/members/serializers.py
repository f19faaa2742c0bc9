"""
Serializers for the Members app.
All output uses camelCase to match the web client.
"""
from rest_framework import serializers

from apps.members.models import Member


class MemberSerializer(serializers.ModelSerializer):
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Member
        fields = ['id', 'name', 'email', 'createdAt']
        read_only_fields = fields


class MemberWriteSerializer(serializers.ModelSerializer):
    class Meta:
        model = Member
        fields = ['name', 'email']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Member name is required.')
        return value

    def validate_email(self, value):
        return value.strip().lower()
