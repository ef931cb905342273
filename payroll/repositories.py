"""Payroll repository adapters: the Django ORM one and an in-process one."""
import logging
import threading
import uuid
from dataclasses import replace
from datetime import datetime, timezone

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction

from .exceptions import DuplicatePayroll
from .models import PayrollDeduction, PayrollEntry
from .ports import PayrollRepository

logger = logging.getLogger(__name__)

MUTABLE_FIELDS = (
    'base_salary',
    'bonus',
    'deductions',
    'total_deductions',
    'net_salary',
    'status',
    'payment_date',
    'payment_method',
    'processed_by',
    'notes',
)


def _carry_mutable_fields(current, updated):
    """Copy only the mutable fields of ``updated`` onto ``current``."""
    return replace(current, **{name: getattr(updated, name) for name in MUTABLE_FIELDS})


class InMemoryPayrollRepository(PayrollRepository):
    """
    Dictionary backed repository.

    Inserts lock on the (employee, month, year) key and updates lock on the
    record id, so unrelated keys never wait on each other. A key lock is
    dropped once the key is taken; record locks live as long as the record.
    """

    def __init__(self):
        self._records = {}
        self._keys = {}
        self._guard = threading.Lock()
        self._key_locks = {}
        self._record_locks = {}

    def _lock_for(self, table, key):
        with self._guard:
            lock = table.get(key)
            if lock is None:
                lock = table[key] = threading.Lock()
            return lock

    def _release_key_lock(self, key):
        # A taken key fails every later check, so nothing needs its lock again.
        with self._guard:
            if key in self._keys:
                self._key_locks.pop(key, None)

    def insert(self, record):
        try:
            with self._lock_for(self._key_locks, record.key):
                if record.key in self._keys:
                    raise DuplicatePayroll()
                now = datetime.now(timezone.utc)
                stored = replace(record, id=str(uuid.uuid4()), created_at=now, updated_at=now, employee=None)
                with self._guard:
                    self._records[stored.id] = stored
                    self._keys[stored.key] = stored.id
        finally:
            self._release_key_lock(record.key)
        return stored

    def get(self, record_id):
        return self._records.get(str(record_id))

    def update(self, record_id, mutate):
        record_id = str(record_id)
        if record_id not in self._records:
            return None
        with self._lock_for(self._record_locks, record_id):
            current = self._records.get(record_id)
            if current is None:
                return None
            stored = _carry_mutable_fields(current, mutate(current))
            stored = replace(stored, updated_at=datetime.now(timezone.utc), employee=None)
            with self._guard:
                self._records[record_id] = stored
        return stored

    def query(self, *, employee_id=None, month=None, year=None):
        with self._guard:
            records = list(self._records.values())
        if employee_id is not None:
            records = [r for r in records if r.employee_id == str(employee_id)]
        if month is not None:
            records = [r for r in records if r.month == month]
        if year is not None:
            records = [r for r in records if r.year == year]
        records.sort(key=lambda r: (r.year, r.month, r.created_at), reverse=True)
        return records


class DjangoPayrollRepository(PayrollRepository):
    """
    Repository over ``PayrollEntry`` rows.

    Uniqueness is enforced by the ``uniq_payroll_employee_period`` database
    constraint; the pre-insert existence check only gives a cheaper path
    for the common case.
    """

    def _queryset(self):
        return PayrollEntry.objects.prefetch_related('deduction_lines')

    @staticmethod
    def _write_deductions(entry, deductions):
        PayrollDeduction.objects.bulk_create([
            PayrollDeduction(
                entry=entry,
                position=position,
                kind=deduction.kind,
                amount=deduction.amount,
                description=deduction.description or '',
            )
            for position, deduction in enumerate(deductions)
        ])

    def insert(self, record):
        try:
            with transaction.atomic():
                if PayrollEntry.objects.filter(
                    employee_id=record.employee_id, month=record.month, year=record.year
                ).exists():
                    raise DuplicatePayroll()
                entry = PayrollEntry.objects.create(
                    employee_id=record.employee_id,
                    month=record.month,
                    year=record.year,
                    base_salary=record.base_salary,
                    bonus=record.bonus,
                    total_deductions=record.total_deductions,
                    net_salary=record.net_salary,
                    status=record.status,
                    payment_date=record.payment_date,
                    payment_method=record.payment_method,
                    processed_by_id=record.processed_by,
                    notes=record.notes or '',
                )
                self._write_deductions(entry, record.deductions)
        except IntegrityError:
            # Lost a race with a concurrent insert for the same key.
            if self.exists(record.employee_id, record.month, record.year):
                logger.info(
                    f"Concurrent payroll insert rejected for employee {record.employee_id} "
                    f"period {record.month:02d}/{record.year}"
                )
                raise DuplicatePayroll()
            raise
        return self.get(entry.pk)

    def get(self, record_id):
        try:
            entry = self._queryset().get(pk=record_id)
        except (PayrollEntry.DoesNotExist, DjangoValidationError, ValueError):
            return None
        return entry.to_record()

    def update(self, record_id, mutate):
        with transaction.atomic():
            try:
                entry = PayrollEntry.objects.select_for_update().get(pk=record_id)
            except (PayrollEntry.DoesNotExist, DjangoValidationError, ValueError):
                return None
            current = entry.to_record()
            updated = mutate(current)

            entry.base_salary = updated.base_salary
            entry.bonus = updated.bonus
            entry.total_deductions = updated.total_deductions
            entry.net_salary = updated.net_salary
            entry.status = updated.status
            entry.payment_date = updated.payment_date
            entry.payment_method = updated.payment_method
            entry.processed_by_id = updated.processed_by
            entry.notes = updated.notes or ''
            entry.save()

            if updated.deductions != current.deductions:
                entry.deduction_lines.all().delete()
                self._write_deductions(entry, updated.deductions)
        return self.get(entry.pk)

    def query(self, *, employee_id=None, month=None, year=None):
        queryset = self._queryset()
        if employee_id is not None:
            try:
                employee_id = uuid.UUID(str(employee_id))
            except ValueError:
                return []
            queryset = queryset.filter(employee_id=employee_id)
        if month is not None:
            queryset = queryset.filter(month=month)
        if year is not None:
            queryset = queryset.filter(year=year)
        return [entry.to_record() for entry in queryset]

    def exists(self, employee_id, month, year):
        return PayrollEntry.objects.filter(employee_id=employee_id, month=month, year=year).exists()
