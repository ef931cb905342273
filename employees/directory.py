"""Employee directory backed by the employees table, as consumed by payroll."""
from django.core.exceptions import ValidationError as DjangoValidationError

from payroll.domain import EmployeeProfile
from payroll.ports import EmployeeDirectory

from .models import Employee


def _to_profile(employee):
    return EmployeeProfile(
        id=str(employee.id),
        department=employee.department,
        first_name=employee.first_name,
        last_name=employee.last_name,
        email=employee.email,
    )


class DjangoEmployeeDirectory(EmployeeDirectory):
    """Read-only lookups against Employee rows."""

    def find_by_id(self, employee_id):
        try:
            employee = Employee.objects.only(
                'id', 'department', 'first_name', 'last_name', 'email'
            ).get(pk=employee_id)
        except (Employee.DoesNotExist, DjangoValidationError, ValueError):
            return None
        return _to_profile(employee)

    def find_many(self, employee_ids):
        ids = {str(employee_id) for employee_id in employee_ids}
        if not ids:
            return {}
        rows = Employee.objects.filter(pk__in=ids).only(
            'id', 'department', 'first_name', 'last_name', 'email'
        )
        return {str(row.id): _to_profile(row) for row in rows}
