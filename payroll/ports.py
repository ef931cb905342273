"""
Storage and lookup interfaces the payroll services depend on.

``PayrollRepository`` owns payroll records. ``EmployeeDirectory`` is the
read-only view payroll has of the employees system; payroll never writes
through it and never holds live employee objects.
"""
from abc import ABC, abstractmethod
from typing import Callable, Dict, Iterable, List, Optional

from .domain import EmployeeProfile, PayrollRecord


class PayrollRepository(ABC):

    @abstractmethod
    def insert(self, record: PayrollRecord) -> PayrollRecord:
        """
        Persist a new record and return it with ``id`` and timestamps set.

        The uniqueness check on (employee_id, month, year) and the write
        must be atomic. Raises ``DuplicatePayroll`` when the key is taken.
        """

    @abstractmethod
    def get(self, record_id) -> Optional[PayrollRecord]:
        """Return the record with ``record_id`` or None."""

    @abstractmethod
    def update(
        self,
        record_id,
        mutate: Callable[[PayrollRecord], PayrollRecord],
    ) -> Optional[PayrollRecord]:
        """
        Apply ``mutate`` to the current record and persist the result.

        Updates to the same record are serialized, so ``mutate`` always sees
        the latest committed state. If ``mutate`` raises, nothing is written.
        Returns None when the record does not exist.
        """

    @abstractmethod
    def query(
        self,
        *,
        employee_id=None,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> List[PayrollRecord]:
        """Records matching every given filter, newest period first."""

    def exists(self, employee_id, month: int, year: int) -> bool:
        return bool(self.query(employee_id=employee_id, month=month, year=year))


class EmployeeDirectory(ABC):

    @abstractmethod
    def find_by_id(self, employee_id) -> Optional[EmployeeProfile]:
        """Return the employee's profile or None if it does not resolve."""

    def find_many(self, employee_ids: Iterable) -> Dict[str, EmployeeProfile]:
        profiles = {}
        for employee_id in set(str(value) for value in employee_ids):
            profile = self.find_by_id(employee_id)
            if profile is not None:
                profiles[employee_id] = profile
        return profiles


class InMemoryEmployeeDirectory(EmployeeDirectory):
    """Directory over a fixed set of profiles. Used by tests and scripts."""

    def __init__(self, profiles: Iterable[EmployeeProfile] = ()):
        self._profiles = {str(profile.id): profile for profile in profiles}

    def add(self, profile: EmployeeProfile):
        self._profiles[str(profile.id)] = profile

    def remove(self, employee_id):
        self._profiles.pop(str(employee_id), None)

    def find_by_id(self, employee_id):
        return self._profiles.get(str(employee_id))
