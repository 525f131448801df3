from django.contrib import admin

from .models import AuditEvent


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'action', 'entity_type', 'entity_id', 'user')
    list_filter = ('action', 'entity_type')
    search_fields = ('entity_id', 'user__email')
    readonly_fields = ('action', 'entity_type', 'entity_id', 'user', 'changes', 'created_at')

    # Append-only log
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
