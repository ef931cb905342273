"""Payroll totals, overall and per department."""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable

from .domain import ZERO, PayrollRecord

UNASSIGNED_DEPARTMENT = 'Unassigned'


@dataclass
class PayrollTotals:
    count: int = 0
    total_base_salary: Decimal = ZERO
    total_bonus: Decimal = ZERO
    total_deductions: Decimal = ZERO
    total_net_salary: Decimal = ZERO

    def add(self, record: PayrollRecord):
        self.count += 1
        self.total_base_salary += record.base_salary
        self.total_bonus += record.bonus
        self.total_deductions += record.total_deductions
        self.total_net_salary += record.net_salary


@dataclass
class PayrollSummary:
    totals: PayrollTotals = field(default_factory=PayrollTotals)
    by_department: Dict[str, PayrollTotals] = field(default_factory=dict)

    @property
    def total_employees(self) -> int:
        # Counts records, so one employee paid for two periods counts twice.
        return self.totals.count

    @property
    def total_base_salary(self) -> Decimal:
        return self.totals.total_base_salary

    @property
    def total_bonus(self) -> Decimal:
        return self.totals.total_bonus

    @property
    def total_deductions(self) -> Decimal:
        return self.totals.total_deductions

    @property
    def total_net_salary(self) -> Decimal:
        return self.totals.total_net_salary


def summarize_records(records: Iterable[PayrollRecord], departments: Dict[str, str]) -> PayrollSummary:
    """
    Fold ``records`` into a summary.

    ``departments`` maps employee id to department name as the directory
    reports it; ids missing from it land in ``UNASSIGNED_DEPARTMENT``.
    """
    summary = PayrollSummary()
    for record in records:
        department = departments.get(record.employee_id, UNASSIGNED_DEPARTMENT)
        summary.totals.add(record)
        summary.by_department.setdefault(department, PayrollTotals()).add(record)
    return summary


def summarize(store, directory, month=None, year=None) -> PayrollSummary:
    records = store.find_all(month=month, year=year, with_employee=False)
    profiles = directory.find_many(record.employee_id for record in records)
    departments = {employee_id: profile.department for employee_id, profile in profiles.items()}
    return summarize_records(records, departments)
