"""Role based access rules for payroll operations."""
import logging
from dataclasses import dataclass
from typing import Optional

from accounts.models import User

from .exceptions import PayrollForbidden, PayrollValidationError

logger = logging.getLogger(__name__)

OPERATION_LIST_ALL = 'list_all'
OPERATION_SUMMARY = 'summary'
OPERATION_CREATE = 'create'
OPERATION_UPDATE_FIELDS = 'update_fields'
OPERATION_UPDATE_STATUS = 'update_status'
OPERATION_READ_EMPLOYEE = 'read_employee'
OPERATION_READ_RECORD = 'read_record'

STAFF_ONLY_OPERATIONS = frozenset({
    OPERATION_LIST_ALL,
    OPERATION_SUMMARY,
    OPERATION_CREATE,
    OPERATION_UPDATE_FIELDS,
    OPERATION_UPDATE_STATUS,
})
SELF_SERVICE_OPERATIONS = frozenset({
    OPERATION_READ_EMPLOYEE,
    OPERATION_READ_RECORD,
})
OPERATIONS = STAFF_ONLY_OPERATIONS | SELF_SERVICE_OPERATIONS

ROLES = frozenset(code for code, _ in User.ROLE_CHOICES)


@dataclass(frozen=True)
class Caller:
    """Who is asking: user id, role, and the linked employee id if any."""
    user_id: Optional[int]
    role: str
    employee_id: Optional[str] = None

    @classmethod
    def from_user(cls, user) -> 'Caller':
        employee = getattr(user, 'employee_profile', None)
        return cls(
            user_id=user.pk,
            role=user.role,
            employee_id=str(employee.pk) if employee is not None else None,
        )


def is_allowed(role: str, caller_employee_id, operation: str, target_employee_id=None) -> bool:
    """
    Decide whether ``role`` may perform ``operation``.

    Admins and managers may do everything. Employees may only read payroll
    records that belong to their own employee id.
    """
    if role not in ROLES:
        raise PayrollValidationError({'role': f'"{role}" is not a valid role.'})
    if operation not in OPERATIONS:
        raise ValueError(f"Unknown payroll operation: {operation}")

    if role in User.STAFF_ROLES:
        return True
    if operation in STAFF_ONLY_OPERATIONS:
        return False
    if caller_employee_id is None or target_employee_id is None:
        return False
    return str(caller_employee_id) == str(target_employee_id)


def authorize(caller: Caller, operation: str, target_employee_id=None):
    if not is_allowed(caller.role, caller.employee_id, operation, target_employee_id):
        logger.warning(
            f"Payroll access denied: user={caller.user_id} role={caller.role} "
            f"operation={operation}"
        )
        raise PayrollForbidden()
