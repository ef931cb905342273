"""
Payroll error taxonomy.

Each error is a DRF ``APIException`` so views can let them propagate and the
project exception handler renders them in the standard response envelope.
Anything else raised while talking to storage (``DatabaseError`` and
friends) is deliberately not wrapped and ends up as a 500.
"""
from rest_framework import status
from rest_framework.exceptions import APIException, NotFound, PermissionDenied, ValidationError


class PayrollValidationError(ValidationError):
    default_detail = 'Invalid payroll data.'
    default_code = 'invalid_payroll'


class PayrollNotFound(NotFound):
    default_detail = 'Payroll entry not found.'
    default_code = 'payroll_not_found'


class EmployeeNotFound(PayrollNotFound):
    default_detail = 'Employee not found.'
    default_code = 'employee_not_found'


class DuplicatePayroll(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Payroll entry already exists for this month.'
    default_code = 'duplicate_payroll'


class PayrollForbidden(PermissionDenied):
    default_detail = 'Not authorized to access payroll records.'
    default_code = 'payroll_forbidden'
