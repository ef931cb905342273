"""
Payroll domain values.

Frozen dataclasses for payroll records and their deduction ledger, plus the
pure derivation that keeps ``total_deductions`` and ``net_salary`` in step
with their inputs. Nothing here touches the database.

All money is ``Decimal`` quantized to cents.
"""
import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Optional, Tuple

from .exceptions import PayrollValidationError

logger = logging.getLogger(__name__)

CENTS = Decimal('0.01')
ZERO = Decimal('0.00')
# Largest amount a DecimalField(max_digits=12, decimal_places=2) column holds.
MAX_MONEY = Decimal('9999999999.99')
MIN_PAYROLL_YEAR = 2000

DEDUCTION_TAX = 'tax'
DEDUCTION_INSURANCE = 'insurance'
DEDUCTION_PENSION = 'pension'
DEDUCTION_OTHER = 'other'

DEDUCTION_KIND_CHOICES = [
    (DEDUCTION_TAX, 'Tax'),
    (DEDUCTION_INSURANCE, 'Insurance'),
    (DEDUCTION_PENSION, 'Pension'),
    (DEDUCTION_OTHER, 'Other'),
]
DEDUCTION_KINDS = frozenset(code for code, _ in DEDUCTION_KIND_CHOICES)

STATUS_PENDING = 'pending'
STATUS_APPROVED = 'approved'
STATUS_PAID = 'paid'

STATUS_CHOICES = [
    (STATUS_PENDING, 'Pending'),
    (STATUS_APPROVED, 'Approved'),
    (STATUS_PAID, 'Paid'),
]
STATUSES = tuple(code for code, _ in STATUS_CHOICES)

PAYMENT_BANK_TRANSFER = 'bank_transfer'
PAYMENT_CHECK = 'check'
PAYMENT_CASH = 'cash'

PAYMENT_METHOD_CHOICES = [
    (PAYMENT_BANK_TRANSFER, 'Bank Transfer'),
    (PAYMENT_CHECK, 'Check'),
    (PAYMENT_CASH, 'Cash'),
]
PAYMENT_METHODS = frozenset(code for code, _ in PAYMENT_METHOD_CHOICES)


def to_money(value, field_name: str) -> Decimal:
    """Coerce ``value`` to a cent-quantized Decimal or raise a validation error."""
    if isinstance(value, bool) or value is None:
        raise PayrollValidationError({field_name: 'A valid number is required.'})
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise PayrollValidationError({field_name: 'A valid number is required.'})
    if not amount.is_finite():
        raise PayrollValidationError({field_name: 'A valid number is required.'})
    _check_money_range(amount, field_name)
    amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    _check_money_range(amount, field_name)
    return amount


def _check_money_range(amount: Decimal, field_name: str):
    if abs(amount) > MAX_MONEY:
        raise PayrollValidationError(
            {field_name: f'Ensure the amount is between -{MAX_MONEY} and {MAX_MONEY}.'}
        )


def _non_negative_money(value, field_name: str) -> Decimal:
    amount = to_money(value, field_name)
    if amount < 0:
        raise PayrollValidationError({field_name: 'Ensure this value is greater than or equal to 0.'})
    return amount


def validate_period(month, year) -> Tuple[int, int]:
    errors = {}
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        errors['month'] = 'Month must be an integer between 1 and 12.'
    if isinstance(year, bool) or not isinstance(year, int) or year < MIN_PAYROLL_YEAR:
        errors['year'] = f'Year must be an integer greater than or equal to {MIN_PAYROLL_YEAR}.'
    if errors:
        raise PayrollValidationError(errors)
    return month, year


def validate_status(status: str) -> str:
    if status not in STATUSES:
        raise PayrollValidationError({'status': f'"{status}" is not a valid payroll status.'})
    return status


def validate_payment_method(method: str) -> str:
    if method not in PAYMENT_METHODS:
        raise PayrollValidationError({'payment_method': f'"{method}" is not a valid payment method.'})
    return method


@dataclass(frozen=True)
class EmployeeProfile:
    """Snapshot of the employee fields payroll needs; never a live reference."""
    id: str
    department: str
    first_name: str
    last_name: str
    email: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class DeductionEntry:
    """One line of a payroll record's deduction ledger."""
    kind: str
    amount: Decimal
    description: Optional[str] = None

    def __post_init__(self):
        if self.kind not in DEDUCTION_KINDS:
            raise PayrollValidationError(
                {'deductions': f'"{self.kind}" is not a valid deduction type.'}
            )
        object.__setattr__(self, 'amount', _non_negative_money(self.amount, 'deductions'))

    @classmethod
    def from_dict(cls, data) -> 'DeductionEntry':
        kind = data.get('kind', data.get('type'))
        return cls(kind=kind, amount=data.get('amount'), description=data.get('description') or None)


def build_ledger(entries: Iterable) -> Tuple[DeductionEntry, ...]:
    """Accept DeductionEntry instances or mappings; keeps the caller's order."""
    ledger = []
    for entry in entries or ():
        if isinstance(entry, DeductionEntry):
            ledger.append(entry)
        else:
            ledger.append(DeductionEntry.from_dict(entry))
    return tuple(ledger)


def total_deductions(entries: Iterable[DeductionEntry]) -> Decimal:
    return sum((entry.amount for entry in entries), ZERO).quantize(CENTS)


@dataclass(frozen=True)
class PayrollRecord:
    """
    One employee's compensation for one (month, year) period.

    ``total_deductions`` and ``net_salary`` are derived; use
    ``derive_totals`` rather than setting them directly.
    """
    employee_id: str
    month: int
    year: int
    base_salary: Decimal
    bonus: Decimal = ZERO
    deductions: Tuple[DeductionEntry, ...] = ()
    total_deductions: Decimal = ZERO
    net_salary: Decimal = ZERO
    status: str = STATUS_PENDING
    payment_date: Optional[date] = None
    payment_method: str = PAYMENT_BANK_TRANSFER
    processed_by: Optional[int] = None
    notes: str = ''
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # Display-only snapshot populated by lookups; never persisted.
    employee: Optional[EmployeeProfile] = field(default=None, compare=False)

    def __post_init__(self):
        if not self.employee_id:
            raise PayrollValidationError({'employee': 'This field is required.'})
        object.__setattr__(self, 'employee_id', str(self.employee_id))
        validate_period(self.month, self.year)
        object.__setattr__(self, 'base_salary', _non_negative_money(self.base_salary, 'base_salary'))
        object.__setattr__(self, 'bonus', _non_negative_money(self.bonus, 'bonus'))
        object.__setattr__(self, 'deductions', build_ledger(self.deductions))
        object.__setattr__(self, 'total_deductions', to_money(self.total_deductions, 'total_deductions'))
        object.__setattr__(self, 'net_salary', to_money(self.net_salary, 'net_salary'))
        validate_status(self.status)
        validate_payment_method(self.payment_method)
        if self.id is not None:
            object.__setattr__(self, 'id', str(self.id))

    @property
    def period(self) -> Tuple[int, int]:
        return self.month, self.year

    @property
    def key(self) -> Tuple[str, int, int]:
        return self.employee_id, self.month, self.year

    @property
    def net_salary_negative(self) -> bool:
        return self.net_salary < 0


def derive_totals(record: PayrollRecord) -> PayrollRecord:
    """
    Recompute ``total_deductions`` from the ledger, then
    ``net_salary = base_salary + bonus - total_deductions``.

    Pure and idempotent. A negative net salary is kept as is and logged.
    Raises PayrollValidationError when a derived amount would not fit the
    stored money columns.
    """
    total = total_deductions(record.deductions)
    _check_money_range(total, 'total_deductions')
    net = (record.base_salary + record.bonus - total).quantize(CENTS)
    _check_money_range(net, 'net_salary')
    if net < 0:
        logger.warning(
            f"Negative net salary {net} for employee {record.employee_id} "
            f"period {record.month:02d}/{record.year}"
        )
    if total == record.total_deductions and net == record.net_salary:
        return record
    return replace(record, total_deductions=total, net_salary=net)
