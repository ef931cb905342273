from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Email based user admin; role decides API access, is_staff only admin site access"""

    list_display = ('email', 'first_name', 'last_name', 'role', 'department', 'is_active', 'last_login')
    list_filter = ('role', 'department', 'is_active')
    search_fields = ('email', 'first_name', 'last_name', 'department')
    ordering = ('email',)

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Profile', {'fields': ('first_name', 'last_name', 'department')}),
        ('Role', {'fields': ('role',)}),
        ('Site access', {'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions')}),
        ('History', {'fields': ('last_login', 'date_joined', 'created_at', 'updated_at')}),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'first_name', 'last_name', 'role', 'department', 'password1', 'password2'),
        }),
    )

    readonly_fields = ('last_login', 'date_joined', 'created_at', 'updated_at')
