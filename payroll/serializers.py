from decimal import Decimal

from rest_framework import serializers

from .domain import (
    DEDUCTION_KIND_CHOICES,
    MIN_PAYROLL_YEAR,
    PAYMENT_BANK_TRANSFER,
    PAYMENT_METHOD_CHOICES,
    STATUS_CHOICES,
    STATUS_PENDING,
)

MONEY = dict(max_digits=12, decimal_places=2)
TOTAL_MONEY = dict(max_digits=20, decimal_places=2)


class DeductionEntrySerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=DEDUCTION_KIND_CHOICES, source='kind')
    amount = serializers.DecimalField(min_value=Decimal('0.00'), **MONEY)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)


class EmployeeSnapshotSerializer(serializers.Serializer):
    id = serializers.CharField()
    first_name = serializers.CharField()
    last_name = serializers.CharField()
    email = serializers.EmailField()
    department = serializers.CharField()


class PayrollRecordSerializer(serializers.Serializer):
    """Read-only representation of a PayrollRecord."""

    id = serializers.CharField()
    employee_id = serializers.CharField()
    employee = EmployeeSnapshotSerializer(allow_null=True)
    month = serializers.IntegerField()
    year = serializers.IntegerField()
    base_salary = serializers.DecimalField(**MONEY)
    bonus = serializers.DecimalField(**MONEY)
    deductions = DeductionEntrySerializer(many=True)
    total_deductions = serializers.DecimalField(**MONEY)
    net_salary = serializers.DecimalField(**MONEY)
    net_salary_negative = serializers.BooleanField()
    status = serializers.CharField()
    payment_date = serializers.DateField(allow_null=True)
    payment_method = serializers.CharField()
    processed_by = serializers.IntegerField(allow_null=True)
    notes = serializers.CharField(allow_blank=True)
    created_at = serializers.DateTimeField(allow_null=True)
    updated_at = serializers.DateTimeField(allow_null=True)


class PayrollCreateSerializer(serializers.Serializer):
    employee = serializers.UUIDField()
    month = serializers.IntegerField(min_value=1, max_value=12)
    year = serializers.IntegerField(min_value=MIN_PAYROLL_YEAR)
    base_salary = serializers.DecimalField(min_value=Decimal('0.00'), **MONEY)
    bonus = serializers.DecimalField(min_value=Decimal('0.00'), required=False, default=Decimal('0.00'), **MONEY)
    deductions = DeductionEntrySerializer(many=True, required=False)
    status = serializers.ChoiceField(choices=STATUS_CHOICES, required=False, default=STATUS_PENDING)
    payment_date = serializers.DateField(required=False, allow_null=True)
    payment_method = serializers.ChoiceField(
        choices=PAYMENT_METHOD_CHOICES, required=False, default=PAYMENT_BANK_TRANSFER
    )
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def to_store_kwargs(self):
        data = dict(self.validated_data)
        data['employee_id'] = str(data.pop('employee'))
        data['deductions'] = data.get('deductions') or []
        return data


class PayrollUpdateSerializer(serializers.Serializer):
    """Partial compensation update. Employee, month and year are ignored if sent."""

    base_salary = serializers.DecimalField(min_value=Decimal('0.00'), required=False, **MONEY)
    bonus = serializers.DecimalField(min_value=Decimal('0.00'), required=False, **MONEY)
    deductions = DeductionEntrySerializer(many=True, required=False)
    status = serializers.ChoiceField(choices=STATUS_CHOICES, required=False)
    payment_date = serializers.DateField(required=False, allow_null=True)
    payment_method = serializers.ChoiceField(choices=PAYMENT_METHOD_CHOICES, required=False)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class PayrollStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=STATUS_CHOICES)
    payment_date = serializers.DateField(required=False, allow_null=True)
    payment_method = serializers.ChoiceField(choices=PAYMENT_METHOD_CHOICES, required=False)


class PayrollPeriodFilterSerializer(serializers.Serializer):
    month = serializers.IntegerField(min_value=1, max_value=12, required=False)
    year = serializers.IntegerField(min_value=MIN_PAYROLL_YEAR, required=False)


class PayrollTotalsSerializer(serializers.Serializer):
    count = serializers.IntegerField()
    total_base_salary = serializers.DecimalField(**TOTAL_MONEY)
    total_bonus = serializers.DecimalField(**TOTAL_MONEY)
    total_deductions = serializers.DecimalField(**TOTAL_MONEY)
    total_net_salary = serializers.DecimalField(**TOTAL_MONEY)


class PayrollSummarySerializer(serializers.Serializer):
    total_employees = serializers.IntegerField()
    total_base_salary = serializers.DecimalField(**TOTAL_MONEY)
    total_bonus = serializers.DecimalField(**TOTAL_MONEY)
    total_deductions = serializers.DecimalField(**TOTAL_MONEY)
    total_net_salary = serializers.DecimalField(**TOTAL_MONEY)
    by_department = serializers.DictField(child=PayrollTotalsSerializer())
