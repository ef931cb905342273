"""
Payroll store and the operations exposed to callers.

``PayrollStore`` combines a ``PayrollRepository`` with an
``EmployeeDirectory``. The module level functions put the access policy in
front of it; views only ever call those functions.
"""
import logging
from dataclasses import replace
from typing import List, Optional

from .domain import (
    PAYMENT_BANK_TRANSFER,
    STATUS_PENDING,
    STATUSES,
    ZERO,
    PayrollRecord,
    build_ledger,
    derive_totals,
    validate_payment_method,
    validate_status,
)
from .exceptions import EmployeeNotFound, PayrollNotFound, PayrollValidationError
from .policy import (
    OPERATION_CREATE,
    OPERATION_LIST_ALL,
    OPERATION_READ_EMPLOYEE,
    OPERATION_READ_RECORD,
    OPERATION_SUMMARY,
    OPERATION_UPDATE_FIELDS,
    OPERATION_UPDATE_STATUS,
    Caller,
    authorize,
)
from .ports import EmployeeDirectory, PayrollRepository
from .summary import PayrollSummary, summarize

logger = logging.getLogger(__name__)

# Marks an optional argument the caller did not supply, as opposed to None.
UNCHANGED = object()

UPDATABLE_FIELDS = frozenset({
    'base_salary',
    'bonus',
    'deductions',
    'notes',
    'status',
    'payment_date',
    'payment_method',
})


class PayrollStore:

    def __init__(self, repository: PayrollRepository, directory: EmployeeDirectory):
        self.repository = repository
        self.directory = directory

    def _with_employee(self, record, profile=None):
        if profile is None:
            profile = self.directory.find_by_id(record.employee_id)
        return replace(record, employee=profile)

    def _with_employees(self, records):
        profiles = self.directory.find_many(record.employee_id for record in records)
        return [replace(record, employee=profiles.get(record.employee_id)) for record in records]

    def create(
        self,
        *,
        employee_id,
        month: int,
        year: int,
        base_salary,
        bonus=ZERO,
        deductions=(),
        status: str = STATUS_PENDING,
        payment_date=None,
        payment_method: str = PAYMENT_BANK_TRANSFER,
        notes: str = '',
        processed_by: Optional[int] = None,
    ) -> PayrollRecord:
        record = PayrollRecord(
            employee_id=employee_id,
            month=month,
            year=year,
            base_salary=base_salary,
            bonus=bonus,
            deductions=deductions,
            status=status,
            payment_date=payment_date,
            payment_method=payment_method,
            notes=notes or '',
            processed_by=processed_by,
        )
        profile = self.directory.find_by_id(record.employee_id)
        if profile is None:
            raise EmployeeNotFound()

        stored = self.repository.insert(derive_totals(record))
        logger.info(
            f"Payroll {stored.id} created for employee {stored.employee_id} "
            f"period {stored.month:02d}/{stored.year} net={stored.net_salary}"
        )
        return self._with_employee(stored, profile)

    def get(self, record_id, *, with_employee: bool = True) -> Optional[PayrollRecord]:
        record = self.repository.get(record_id)
        if record is None or not with_employee:
            return record
        return self._with_employee(record)

    def find_by_employee(self, employee_id) -> List[PayrollRecord]:
        records = self.repository.query(employee_id=employee_id)
        if not records:
            return []
        profile = self.directory.find_by_id(employee_id)
        return [replace(record, employee=profile) for record in records]

    def find_all(self, *, month=None, year=None, with_employee: bool = True) -> List[PayrollRecord]:
        records = self.repository.query(month=month, year=year)
        if not with_employee:
            return records
        return self._with_employees(records)

    def update_status(
        self,
        record_id,
        *,
        status: str,
        payment_date=UNCHANGED,
        payment_method: Optional[str] = None,
        processed_by: Optional[int] = None,
    ) -> PayrollRecord:
        validate_status(status)
        if payment_method is not None:
            validate_payment_method(payment_method)

        def mutate(current):
            if STATUSES.index(status) < STATUSES.index(current.status):
                logger.info(
                    f"Payroll {current.id} status moved back from {current.status} to {status}"
                )
            changes = {'status': status, 'processed_by': processed_by}
            if payment_date is not UNCHANGED:
                changes['payment_date'] = payment_date
            if payment_method is not None:
                changes['payment_method'] = payment_method
            return derive_totals(replace(current, **changes))

        updated = self.repository.update(record_id, mutate)
        if updated is None:
            raise PayrollNotFound()
        logger.info(f"Payroll {updated.id} status set to {updated.status}")
        return self._with_employee(updated)

    def update_fields(self, record_id, changes: dict, *, processed_by: Optional[int] = None) -> PayrollRecord:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise PayrollValidationError(
                {name: 'This field cannot be changed.' for name in sorted(unknown)}
            )
        changes = dict(changes)
        if 'deductions' in changes:
            changes['deductions'] = build_ledger(changes['deductions'])
        if changes.get('notes') is None and 'notes' in changes:
            changes['notes'] = ''

        def mutate(current):
            # replace() reruns field validation on the merged record.
            return derive_totals(replace(current, processed_by=processed_by, **changes))

        updated = self.repository.update(record_id, mutate)
        if updated is None:
            raise PayrollNotFound()
        logger.info(f"Payroll {updated.id} updated: {', '.join(sorted(changes)) or 'no fields'}")
        return self._with_employee(updated)


def create_payroll(store: PayrollStore, caller: Caller, **fields) -> PayrollRecord:
    authorize(caller, OPERATION_CREATE)
    return store.create(processed_by=caller.user_id, **fields)


def get_payroll(store: PayrollStore, caller: Caller, record_id) -> PayrollRecord:
    record = store.get(record_id)
    # Non-staff callers get the same denial whether or not the id exists.
    authorize(caller, OPERATION_READ_RECORD, record.employee_id if record else None)
    if record is None:
        raise PayrollNotFound()
    return record


def update_payroll_status(
    store: PayrollStore,
    caller: Caller,
    record_id,
    *,
    status: str,
    payment_date=UNCHANGED,
    payment_method: Optional[str] = None,
) -> PayrollRecord:
    authorize(caller, OPERATION_UPDATE_STATUS)
    return store.update_status(
        record_id,
        status=status,
        payment_date=payment_date,
        payment_method=payment_method,
        processed_by=caller.user_id,
    )


def update_payroll(store: PayrollStore, caller: Caller, record_id, changes: dict) -> PayrollRecord:
    authorize(caller, OPERATION_UPDATE_FIELDS)
    return store.update_fields(record_id, changes, processed_by=caller.user_id)


def get_payrolls_for_employee(store: PayrollStore, caller: Caller, employee_id) -> List[PayrollRecord]:
    authorize(caller, OPERATION_READ_EMPLOYEE, employee_id)
    return store.find_by_employee(employee_id)


def list_payrolls(store: PayrollStore, caller: Caller, *, month=None, year=None) -> List[PayrollRecord]:
    authorize(caller, OPERATION_LIST_ALL)
    return store.find_all(month=month, year=year)


def get_summary(store: PayrollStore, caller: Caller, *, month=None, year=None) -> PayrollSummary:
    authorize(caller, OPERATION_SUMMARY)
    return summarize(store, store.directory, month=month, year=year)
