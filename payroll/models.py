import uuid
from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from .domain import (
    DEDUCTION_KIND_CHOICES,
    MIN_PAYROLL_YEAR,
    PAYMENT_BANK_TRANSFER,
    PAYMENT_METHOD_CHOICES,
    STATUS_CHOICES,
    STATUS_PENDING,
    DeductionEntry,
    PayrollRecord,
)


class PayrollEntry(models.Model):
    """
    Stored payroll record for one employee and one (month, year) period.

    ``employee_id`` is a plain reference into the employees table rather than
    a foreign key: payroll rows outlive the employee they were paid to.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    employee_id = models.UUIDField(db_index=True)
    month = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(12)]
    )
    year = models.PositiveIntegerField(validators=[MinValueValidator(MIN_PAYROLL_YEAR)])

    base_salary = models.DecimalField(
        max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0.00'))]
    )
    bonus = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
    )
    total_deductions = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    net_salary = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    payment_date = models.DateField(null=True, blank=True)
    payment_method = models.CharField(
        max_length=20, choices=PAYMENT_METHOD_CHOICES, default=PAYMENT_BANK_TRANSFER
    )
    processed_by_id = models.IntegerField(null=True, blank=True, db_index=True)
    notes = models.TextField(blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'payroll_entries'
        verbose_name = 'Payroll Entry'
        verbose_name_plural = 'Payroll Entries'
        ordering = ['-year', '-month', '-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['employee_id', 'month', 'year'],
                name='uniq_payroll_employee_period',
            ),
        ]
        indexes = [
            models.Index(fields=['year', 'month'], name='payroll_period_idx'),
        ]

    def __str__(self):
        return f"Payroll {self.employee_id} {self.month:02d}/{self.year}"

    def to_record(self):
        return PayrollRecord(
            id=str(self.pk),
            employee_id=str(self.employee_id),
            month=self.month,
            year=self.year,
            base_salary=self.base_salary,
            bonus=self.bonus,
            deductions=tuple(line.to_entry() for line in self.deduction_lines.all()),
            total_deductions=self.total_deductions,
            net_salary=self.net_salary,
            status=self.status,
            payment_date=self.payment_date,
            payment_method=self.payment_method,
            processed_by=self.processed_by_id,
            notes=self.notes or '',
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class PayrollDeduction(models.Model):
    """One line of a payroll entry's deduction ledger, kept in entry order."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    entry = models.ForeignKey(
        PayrollEntry,
        on_delete=models.CASCADE,
        related_name='deduction_lines',
    )
    position = models.PositiveSmallIntegerField()
    kind = models.CharField(max_length=20, choices=DEDUCTION_KIND_CHOICES)
    amount = models.DecimalField(
        max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0.00'))]
    )
    description = models.CharField(max_length=255, blank=True, default='')

    class Meta:
        db_table = 'payroll_deductions'
        verbose_name = 'Payroll Deduction'
        verbose_name_plural = 'Payroll Deductions'
        ordering = ['position']
        unique_together = [('entry', 'position')]

    def __str__(self):
        return f"{self.get_kind_display()} {self.amount}"

    def to_entry(self):
        return DeductionEntry(kind=self.kind, amount=self.amount, description=self.description or None)
