from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(UserAdmin):
    list_display = ('email', 'first_name', 'last_name', 'phone',
                    'application_count', 'is_staff', 'is_active')
    list_filter = ('is_active', 'is_staff')
    search_fields = ('email', 'first_name', 'last_name', 'phone')
    ordering = ('email',)
    readonly_fields = ('last_login', 'date_joined', 'updated_at')

    fieldsets = (
        (None, {'fields': ('email', 'username', 'password')}),
        ('Contact', {'fields': ('first_name', 'last_name', 'phone')}),
        ('Access', {'fields': ('is_active', 'is_staff', 'is_superuser')}),
        ('Dates', {'fields': ('last_login', 'date_joined', 'updated_at')}),
    )

    def application_count(self, obj):
        return obj.visa_applications.count()
    application_count.short_description = "Applications"
