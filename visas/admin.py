import logging

from django.contrib import admin

from core.services.audit import log_event
from .models import ApplicationDocument, ApplicationSnapshot, VisaApplication
from .schema import FIELDS, SECTIONS
from .services.notifications import notify_status_change

logger = logging.getLogger(__name__)


class ApplicationDocumentInline(admin.TabularInline):
    model = ApplicationDocument
    extra = 0
    # Files are evidence: view only
    readonly_fields = ('document_type', 'file', 'file_name', 'mime_type',
                       'file_size', 'uploaded_at')
    can_delete = False


@admin.register(VisaApplication)
class VisaApplicationAdmin(admin.ModelAdmin):
    """
    The administrator path: only `status` and `admin_notes` are editable.
    Status changes are audited and mailed to the applicant.
    """
    list_display = ('id', 'full_name', 'email', 'visa_type', 'status',
                    'is_paid', 'submitted_at', 'created_at')
    list_filter = ('status', 'visa_type', 'is_paid')
    search_fields = ('id', 'surname', 'given_name', 'email', 'passport_number')
    inlines = [ApplicationDocumentInline]

    fieldsets = (
        ('Lifecycle', {
            'fields': ('status', 'admin_notes', 'user', 'is_locked', 'is_paid',
                       'last_autosave_at', 'submitted_at', 'created_at', 'updated_at')
        }),
    ) + tuple(
        (title, {'fields': [spec.name for spec in FIELDS if spec.section == key],
                 'classes': ('collapse',)})
        for key, title in SECTIONS.items()
    )

    def get_readonly_fields(self, request, obj=None):
        return (
            'user', 'is_locked', 'is_paid', 'last_autosave_at', 'submitted_at',
            'created_at', 'updated_at',
        ) + tuple(spec.name for spec in FIELDS)

    def has_add_permission(self, request):
        return False

    def save_model(self, request, obj, form, change):
        old_status = form.initial.get('status') if change else None
        super().save_model(request, obj, form, change)

        if not change or old_status == obj.status:
            return

        log_event(
            'application_status_changed', 'application', obj.id, user=request.user,
            changes={'status': [old_status, obj.status]}
        )
        try:
            notify_status_change(obj, old_status)
        except Exception as e:
            logger.error(f"Status notification failed for application {obj.id}: {e}")


@admin.register(ApplicationSnapshot)
class ApplicationSnapshotAdmin(admin.ModelAdmin):
    list_display = ('application', 'submitted_by', 'payment', 'booking', 'submitted_at')
    search_fields = ('application__id', 'submitted_by__email')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
