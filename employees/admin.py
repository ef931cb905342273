from django.contrib import admin

from .models import Employee, EmployeeDocument


class EmployeeDocumentInline(admin.TabularInline):
    model = EmployeeDocument
    extra = 0
    readonly_fields = ['upload_date']


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ['full_name', 'email', 'department', 'position', 'status', 'hire_date']
    list_filter = ['status', 'department']
    search_fields = ['first_name', 'last_name', 'email']
    readonly_fields = ['id', 'created_at', 'updated_at']
    inlines = [EmployeeDocumentInline]

    fieldsets = (
        ('Basic Information', {
            'fields': ('id', 'user', 'first_name', 'last_name', 'email')
        }),
        ('Employment', {
            'fields': ('department', 'position', 'salary', 'hire_date', 'status')
        }),
        ('Contact', {
            'fields': ('phone', 'address')
        }),
        ('Emergency Contact', {
            'fields': ('emergency_contact_name', 'emergency_contact_relationship', 'emergency_contact_phone')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at')
        }),
    )
