from django.contrib import admin
from django.utils.html import format_html

from .models import Lifecycle, ConsentRecord, DeletionConsentRecord, LifecycleActionLog


STATUS_COLORS = {
    Lifecycle.STATUS_ACTIVE: '#16a34a',
    Lifecycle.STATUS_DEATH_REPORTED: '#6b7280',
    Lifecycle.STATUS_CONSENT_GATHERING: '#d97706',
    Lifecycle.STATUS_OPENED: '#2563eb',
}


class ConsentRecordInline(admin.TabularInline):
    model = ConsentRecord
    extra = 0
    raw_id_fields = ('family_member',)
    readonly_fields = ('created_at',)


class DeletionConsentRecordInline(admin.TabularInline):
    model = DeletionConsentRecord
    extra = 0
    raw_id_fields = ('family_member',)
    readonly_fields = ('created_at',)


@admin.register(Lifecycle)
class LifecycleAdmin(admin.ModelAdmin):
    list_display = ('creator', 'status_badge', 'deletion_status', 'death_reported_at', 'opened_at', 'updated_at')
    list_filter = ('status', 'deletion_status')
    search_fields = ('creator__email',)
    readonly_fields = ('created_at', 'updated_at')
    raw_id_fields = ('creator', 'death_reported_by', 'consent_initiated_by')
    inlines = [ConsentRecordInline, DeletionConsentRecordInline]

    def status_badge(self, obj):
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 8px; '
            'border-radius: 3px;">{}</span>',
            STATUS_COLORS.get(obj.status, '#6b7280'),
            obj.get_status_display().upper(),
        )
    status_badge.short_description = 'Status'


@admin.register(LifecycleActionLog)
class LifecycleActionLogAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'action', 'creator', 'performed_by')
    list_filter = ('action', 'created_at')
    search_fields = ('creator__email', 'performed_by__email', 'action')
    date_hierarchy = 'created_at'
    readonly_fields = ('lifecycle', 'creator', 'action', 'performed_by', 'metadata', 'created_at')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
