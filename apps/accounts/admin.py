from django.contrib import admin
from django.utils.html import format_html

from .models import FamilyMember, Notification


@admin.register(FamilyMember)
class FamilyMemberAdmin(admin.ModelAdmin):
    list_display = ('member', 'creator', 'role_badge', 'relationship_label', 'status', 'created_at')
    list_filter = ('role', 'status', 'created_at')
    search_fields = ('member__email', 'creator__email', 'relationship_label')
    readonly_fields = ('created_at', 'updated_at')
    raw_id_fields = ('creator', 'member')

    def role_badge(self, obj):
        if obj.role == FamilyMember.ROLE_REPRESENTATIVE:
            return format_html(
                '<span style="background-color: #2563eb; color: white; padding: 3px 8px; '
                'border-radius: 3px; font-weight: bold;">REPRESENTATIVE</span>'
            )
        return format_html(
            '<span style="background-color: #6b7280; color: white; padding: 3px 8px; '
            'border-radius: 3px;">MEMBER</span>'
        )
    role_badge.short_description = 'Role'


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('notification_type', 'recipient', 'related_creator', 'is_read', 'created_at')
    list_filter = ('notification_type', 'is_read', 'created_at')
    search_fields = ('recipient__email', 'title', 'message')
    readonly_fields = ('created_at', 'email_sent_at')
    raw_id_fields = ('recipient', 'related_creator')
    date_hierarchy = 'created_at'
