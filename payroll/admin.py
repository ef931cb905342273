from django.contrib import admin

from .models import PayrollDeduction, PayrollEntry


class PayrollDeductionInline(admin.TabularInline):
    model = PayrollDeduction
    extra = 0
    fields = ['position', 'kind', 'amount', 'description']
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(PayrollEntry)
class PayrollEntryAdmin(admin.ModelAdmin):
    """View only; payroll entries are written through PayrollStore"""

    list_display = ['employee_id', 'month', 'year', 'net_salary', 'status', 'payment_method', 'updated_at']
    list_filter = ['status', 'payment_method', 'year', 'month']
    search_fields = ['employee_id', 'notes']
    readonly_fields = [
        'id', 'employee_id', 'month', 'year', 'base_salary', 'bonus',
        'total_deductions', 'net_salary', 'status', 'payment_date', 'payment_method',
        'processed_by_id', 'notes', 'created_at', 'updated_at',
    ]
    inlines = [PayrollDeductionInline]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
