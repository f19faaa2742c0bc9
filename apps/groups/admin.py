"""
Admin configuration for the Groups app.
"""
from django.contrib import admin

from apps.groups.models import Group, GroupMember


class GroupMemberInline(admin.TabularInline):
    model = GroupMember
    extra = 0
    readonly_fields = ['joined_at']
    autocomplete_fields = ['member']


@admin.register(Group)
class GroupAdmin(admin.ModelAdmin):
    list_display = ['name', 'member_count', 'created_at']
    list_filter = ['created_at']
    search_fields = ['name', 'description']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [GroupMemberInline]


@admin.register(GroupMember)
class GroupMemberAdmin(admin.ModelAdmin):
    list_display = ['member', 'group', 'joined_at']
    list_filter = ['joined_at']
    search_fields = ['member__name', 'member__email', 'group__name']
