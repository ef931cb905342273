import threading
import uuid
from datetime import date
from decimal import Decimal

from django.contrib.admin.sites import AdminSite
from django.db import IntegrityError, transaction
from django.test import RequestFactory, SimpleTestCase, TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import User
from employees.directory import DjangoEmployeeDirectory
from employees.models import Employee

from payroll.admin import PayrollEntryAdmin
from payroll.domain import (
    DeductionEntry,
    EmployeeProfile,
    PayrollRecord,
    derive_totals,
    total_deductions,
)
from payroll.exceptions import (
    DuplicatePayroll,
    EmployeeNotFound,
    PayrollForbidden,
    PayrollNotFound,
    PayrollValidationError,
)
from payroll.models import PayrollEntry
from payroll.policy import (
    OPERATION_CREATE,
    OPERATION_LIST_ALL,
    OPERATION_READ_EMPLOYEE,
    OPERATION_SUMMARY,
    OPERATION_UPDATE_STATUS,
    Caller,
    is_allowed,
)
from payroll.ports import InMemoryEmployeeDirectory
from payroll.repositories import DjangoPayrollRepository, InMemoryPayrollRepository
from payroll.services import (
    PayrollStore,
    create_payroll,
    get_payroll,
    get_payrolls_for_employee,
    get_summary,
    list_payrolls,
    update_payroll,
    update_payroll_status,
)
from payroll.summary import UNASSIGNED_DEPARTMENT, summarize


def make_profile(department='Engineering', first_name='Ada', last_name='Lovelace'):
    employee_id = str(uuid.uuid4())
    return EmployeeProfile(
        id=employee_id,
        department=department,
        first_name=first_name,
        last_name=last_name,
        email=f"{employee_id[:8]}@example.com",
    )


STANDARD_DEDUCTIONS = [
    {'type': 'tax', 'amount': '600'},
    {'type': 'insurance', 'amount': '200'},
]

ADMIN = Caller(user_id=1, role=User.ROLE_ADMIN)
MANAGER = Caller(user_id=2, role=User.ROLE_MANAGER)


class DeductionLedgerTests(SimpleTestCase):
    def test_total_is_sum_of_amounts_in_any_order(self):
        entries = [
            DeductionEntry('tax', Decimal('600')),
            DeductionEntry('insurance', Decimal('200.50')),
            DeductionEntry('pension', '99.50'),
        ]
        self.assertEqual(total_deductions(entries), Decimal('900.00'))
        self.assertEqual(total_deductions(reversed(entries)), Decimal('900.00'))

    def test_empty_ledger_totals_zero(self):
        self.assertEqual(total_deductions([]), Decimal('0.00'))

    def test_unknown_kind_is_rejected(self):
        with self.assertRaises(PayrollValidationError):
            DeductionEntry('bonus', Decimal('10'))

    def test_negative_amount_is_rejected(self):
        with self.assertRaises(PayrollValidationError):
            DeductionEntry('tax', Decimal('-1'))

    def test_non_numeric_amount_is_rejected(self):
        with self.assertRaises(PayrollValidationError):
            DeductionEntry('tax', 'lots')

    def test_amounts_are_rounded_to_cents(self):
        self.assertEqual(DeductionEntry('other', '10.005').amount, Decimal('10.01'))

    def test_from_dict_accepts_type_key(self):
        entry = DeductionEntry.from_dict({'type': 'pension', 'amount': 5, 'description': ''})
        self.assertEqual(entry.kind, 'pension')
        self.assertIsNone(entry.description)


class PayrollRecordDerivationTests(SimpleTestCase):
    def build(self, **overrides):
        fields = dict(
            employee_id='E1',
            month=3,
            year=2024,
            base_salary='5000',
            bonus='500',
            deductions=STANDARD_DEDUCTIONS,
        )
        fields.update(overrides)
        return PayrollRecord(**fields)

    def test_net_salary_example(self):
        record = derive_totals(self.build())
        self.assertEqual(record.total_deductions, Decimal('800.00'))
        self.assertEqual(record.net_salary, Decimal('4700.00'))
        self.assertFalse(record.net_salary_negative)

    def test_derivation_is_idempotent(self):
        once = derive_totals(self.build())
        twice = derive_totals(once)
        self.assertEqual(once, twice)
        self.assertIs(twice, once)

    def test_stale_totals_are_replaced(self):
        record = self.build(total_deductions='1', net_salary='1')
        derived = derive_totals(record)
        self.assertEqual(derived.total_deductions, Decimal('800.00'))
        self.assertEqual(derived.net_salary, Decimal('4700.00'))

    def test_negative_net_salary_is_kept_and_flagged(self):
        with self.assertLogs('payroll.domain', level='WARNING'):
            record = derive_totals(self.build(base_salary='100', bonus='0'))
        self.assertEqual(record.net_salary, Decimal('-700.00'))
        self.assertTrue(record.net_salary_negative)

    def test_bonus_defaults_to_zero(self):
        record = derive_totals(PayrollRecord(employee_id='E1', month=1, year=2024, base_salary='1000'))
        self.assertEqual(record.bonus, Decimal('0.00'))
        self.assertEqual(record.net_salary, Decimal('1000.00'))

    def test_invalid_period_is_rejected(self):
        for month, year in ((0, 2024), (13, 2024), (5, 1999)):
            with self.subTest(month=month, year=year):
                with self.assertRaises(PayrollValidationError):
                    self.build(month=month, year=year)

    def test_negative_base_salary_is_rejected(self):
        with self.assertRaises(PayrollValidationError):
            self.build(base_salary='-1')

    def test_net_salary_beyond_column_range_is_rejected(self):
        record = self.build(base_salary='9999999999.99', bonus='9999999999.99', deductions=[])
        with self.assertRaises(PayrollValidationError) as ctx:
            derive_totals(record)
        self.assertIn('net_salary', ctx.exception.detail)

    def test_total_deductions_beyond_column_range_is_rejected(self):
        record = self.build(
            base_salary='0',
            bonus='0',
            deductions=[
                {'type': 'tax', 'amount': '9999999999.99'},
                {'type': 'other', 'amount': '9999999999.99'},
            ],
        )
        with self.assertRaises(PayrollValidationError) as ctx:
            derive_totals(record)
        self.assertIn('total_deductions', ctx.exception.detail)

    def test_largest_storable_amounts_are_accepted(self):
        record = derive_totals(self.build(base_salary='9999999999.99', bonus='0', deductions=[]))
        self.assertEqual(record.net_salary, Decimal('9999999999.99'))

    def test_oversized_input_amount_is_rejected(self):
        with self.assertRaises(PayrollValidationError):
            self.build(base_salary='10000000000.00')

    def test_invalid_status_and_payment_method_are_rejected(self):
        with self.assertRaises(PayrollValidationError):
            self.build(status='cancelled')
        with self.assertRaises(PayrollValidationError):
            self.build(payment_method='crypto')


class AccessPolicyTests(SimpleTestCase):
    def test_staff_roles_may_do_everything(self):
        for role in (User.ROLE_ADMIN, User.ROLE_MANAGER):
            for operation in (OPERATION_LIST_ALL, OPERATION_SUMMARY, OPERATION_CREATE, OPERATION_UPDATE_STATUS):
                with self.subTest(role=role, operation=operation):
                    self.assertTrue(is_allowed(role, None, operation))

    def test_employee_reads_only_own_records(self):
        self.assertTrue(is_allowed(User.ROLE_EMPLOYEE, 'E1', OPERATION_READ_EMPLOYEE, 'E1'))
        self.assertFalse(is_allowed(User.ROLE_EMPLOYEE, 'E1', OPERATION_READ_EMPLOYEE, 'E2'))
        self.assertFalse(is_allowed(User.ROLE_EMPLOYEE, None, OPERATION_READ_EMPLOYEE, 'E2'))

    def test_employee_cannot_list_create_or_summarize(self):
        for operation in (OPERATION_LIST_ALL, OPERATION_SUMMARY, OPERATION_CREATE, OPERATION_UPDATE_STATUS):
            with self.subTest(operation=operation):
                self.assertFalse(is_allowed(User.ROLE_EMPLOYEE, 'E1', operation, 'E1'))

    def test_unknown_role_is_a_validation_error(self):
        with self.assertRaises(PayrollValidationError):
            is_allowed('intern', 'E1', OPERATION_READ_EMPLOYEE, 'E1')


class InMemoryPayrollStoreTests(SimpleTestCase):
    def setUp(self):
        self.engineer = make_profile('Engineering')
        self.directory = InMemoryEmployeeDirectory([self.engineer])
        self.store = PayrollStore(InMemoryPayrollRepository(), self.directory)

    def create(self, profile=None, month=3, year=2024, **overrides):
        fields = dict(
            employee_id=(profile or self.engineer).id,
            month=month,
            year=year,
            base_salary='5000',
            bonus='500',
            deductions=STANDARD_DEDUCTIONS,
        )
        fields.update(overrides)
        return create_payroll(self.store, ADMIN, **fields)

    def test_create_derives_and_assigns_id(self):
        record = self.create()
        self.assertIsNotNone(record.id)
        self.assertEqual(record.net_salary, Decimal('4700.00'))
        self.assertEqual(record.processed_by, ADMIN.user_id)
        self.assertEqual(record.employee, self.engineer)

    def test_duplicate_period_is_rejected(self):
        self.create()
        with self.assertRaises(DuplicatePayroll):
            self.create()
        self.create(month=4)
        self.assertEqual(len(self.store.find_by_employee(self.engineer.id)), 2)
        self.assertEqual(len(self.store.find_all(month=3, year=2024)), 1)

    def test_unknown_employee_is_not_found(self):
        with self.assertRaises(EmployeeNotFound):
            create_payroll(
                self.store, ADMIN, employee_id='missing', month=1, year=2024, base_salary='10'
            )

    def test_concurrent_creates_for_one_key_have_one_winner(self):
        barrier = threading.Barrier(8)
        outcomes = []

        def attempt():
            barrier.wait()
            try:
                self.create()
                outcomes.append('created')
            except DuplicatePayroll:
                outcomes.append('duplicate')

        threads = [threading.Thread(target=attempt) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(outcomes.count('created'), 1)
        self.assertEqual(outcomes.count('duplicate'), 7)
        self.assertEqual(len(self.store.find_all()), 1)

    def test_status_update_changes_only_given_fields(self):
        record = self.create(payment_method='check')
        updated = update_payroll_status(self.store, MANAGER, record.id, status='approved')
        self.assertEqual(updated.status, 'approved')
        self.assertEqual(updated.payment_method, 'check')
        self.assertIsNone(updated.payment_date)
        self.assertEqual(updated.processed_by, MANAGER.user_id)
        self.assertEqual(updated.net_salary, Decimal('4700.00'))

        paid = update_payroll_status(
            self.store, MANAGER, record.id, status='paid', payment_date=date(2024, 3, 31)
        )
        self.assertEqual(paid.payment_date, date(2024, 3, 31))
        self.assertEqual(paid.payment_method, 'check')

    def test_status_update_with_explicit_null_clears_payment_date(self):
        record = self.create(status='paid', payment_date=date(2024, 3, 31))
        kept = update_payroll_status(self.store, ADMIN, record.id, status='approved')
        self.assertEqual(kept.payment_date, date(2024, 3, 31))

        cleared = update_payroll_status(self.store, ADMIN, record.id, status='pending', payment_date=None)
        self.assertIsNone(cleared.payment_date)
        self.assertEqual(cleared.status, 'pending')

    def test_update_overflowing_net_salary_leaves_record_untouched(self):
        record = self.create(base_salary='9999999999.99', bonus='0', deductions=[])
        with self.assertRaises(PayrollValidationError):
            update_payroll(self.store, ADMIN, record.id, {'bonus': Decimal('1.00')})
        self.assertEqual(self.store.get(record.id).bonus, Decimal('0.00'))

    def test_key_locks_are_released_once_key_is_taken(self):
        repository = self.store.repository
        self.create()
        self.assertEqual(repository._key_locks, {})
        with self.assertRaises(DuplicatePayroll):
            self.create()
        self.assertEqual(repository._key_locks, {})

    def test_update_of_unknown_id_does_not_allocate_lock(self):
        repository = self.store.repository
        self.assertIsNone(repository.update(str(uuid.uuid4()), lambda current: current))
        self.assertEqual(repository._record_locks, {})

    def test_status_may_move_backwards(self):
        record = self.create(status='paid')
        with self.assertLogs('payroll.services', level='INFO') as logs:
            updated = update_payroll_status(self.store, ADMIN, record.id, status='pending')
        self.assertEqual(updated.status, 'pending')
        self.assertTrue(any('moved back' in line for line in logs.output))

    def test_status_update_of_missing_record_is_not_found(self):
        with self.assertRaises(PayrollNotFound):
            update_payroll_status(self.store, ADMIN, str(uuid.uuid4()), status='paid')

    def test_field_update_rederives_totals(self):
        record = self.create()
        updated = update_payroll(
            self.store, ADMIN, record.id,
            {'bonus': Decimal('1000'), 'deductions': [{'kind': 'tax', 'amount': Decimal('1000')}]},
        )
        self.assertEqual(updated.total_deductions, Decimal('1000.00'))
        self.assertEqual(updated.net_salary, Decimal('5000.00'))
        self.assertEqual(len(updated.deductions), 1)

    def test_field_update_cannot_move_period(self):
        record = self.create()
        with self.assertRaises(PayrollValidationError):
            update_payroll(self.store, ADMIN, record.id, {'month': 4})
        self.assertEqual(self.store.get(record.id).month, 3)

    def test_failed_update_leaves_record_untouched(self):
        record = self.create()
        with self.assertRaises(PayrollValidationError):
            update_payroll(self.store, ADMIN, record.id, {'deductions': [{'kind': 'fine', 'amount': 5}]})
        self.assertEqual(self.store.get(record.id).deductions, record.deductions)

    def test_employee_caller_reads_own_records_only(self):
        record = self.create()
        other = make_profile('Sales')
        self.directory.add(other)
        self.create(profile=other)

        own = Caller(user_id=9, role=User.ROLE_EMPLOYEE, employee_id=self.engineer.id)
        records = get_payrolls_for_employee(self.store, own, self.engineer.id)
        self.assertEqual([r.id for r in records], [record.id])
        self.assertEqual(records[0].employee.first_name, 'Ada')

        with self.assertRaises(PayrollForbidden):
            get_payrolls_for_employee(self.store, own, other.id)
        with self.assertRaises(PayrollForbidden):
            list_payrolls(self.store, own)
        with self.assertRaises(PayrollForbidden):
            get_summary(self.store, own)
        with self.assertRaises(PayrollForbidden):
            create_payroll(self.store, own, employee_id=self.engineer.id, month=5, year=2024, base_salary='1')

    def test_single_record_denial_does_not_reveal_existence(self):
        other = make_profile('Sales')
        self.directory.add(other)
        theirs = self.create(profile=other)
        caller = Caller(user_id=9, role=User.ROLE_EMPLOYEE, employee_id=self.engineer.id)

        with self.assertRaises(PayrollForbidden):
            get_payroll(self.store, caller, theirs.id)
        with self.assertRaises(PayrollForbidden):
            get_payroll(self.store, caller, str(uuid.uuid4()))
        with self.assertRaises(PayrollNotFound):
            get_payroll(self.store, ADMIN, str(uuid.uuid4()))


class SummaryTests(SimpleTestCase):
    def setUp(self):
        self.alice = make_profile('Engineering', 'Alice')
        self.bob = make_profile('Engineering', 'Bob')
        self.carol = make_profile('Sales', 'Carol')
        self.directory = InMemoryEmployeeDirectory([self.alice, self.bob, self.carol])
        self.store = PayrollStore(InMemoryPayrollRepository(), self.directory)

    def add(self, profile, base_salary, month=3, year=2024, deductions=()):
        return self.store.create(
            employee_id=profile.id, month=month, year=year,
            base_salary=base_salary, deductions=deductions,
        )

    def test_period_summary_example(self):
        self.add(self.alice, '5500', deductions=[{'type': 'tax', 'amount': '800'}])
        self.add(self.bob, '3000')
        self.add(self.carol, '2000')
        self.add(self.carol, '9999', month=4)

        summary = summarize(self.store, self.directory, month=3, year=2024)

        self.assertEqual(summary.total_employees, 3)
        self.assertEqual(summary.total_net_salary, Decimal('9700.00'))
        self.assertEqual(summary.total_deductions, Decimal('800.00'))
        self.assertEqual(summary.by_department['Engineering'].count, 2)
        self.assertEqual(summary.by_department['Engineering'].total_net_salary, Decimal('7700.00'))
        self.assertEqual(summary.by_department['Sales'].count, 1)

    def test_unfiltered_summary_counts_records_not_employees(self):
        self.add(self.carol, '2000', month=3)
        self.add(self.carol, '2000', month=4)
        summary = summarize(self.store, self.directory)
        self.assertEqual(summary.total_employees, 2)
        self.assertEqual(summary.by_department['Sales'].count, 2)

    def test_totals_equal_sum_of_departments(self):
        self.add(self.alice, '1000.10')
        self.add(self.bob, '2000.20', month=5)
        self.add(self.carol, '3000.30', month=7, year=2023)
        summary = summarize(self.store, self.directory)
        departments = summary.by_department.values()
        self.assertEqual(summary.total_employees, sum(d.count for d in departments))
        self.assertEqual(summary.total_base_salary, sum(d.total_base_salary for d in departments))
        self.assertEqual(summary.total_net_salary, sum(d.total_net_salary for d in departments))

    def test_unresolved_employee_is_grouped_as_unassigned(self):
        self.add(self.alice, '1000')
        self.directory.remove(self.alice.id)
        summary = summarize(self.store, self.directory)
        self.assertEqual(summary.by_department[UNASSIGNED_DEPARTMENT].count, 1)

    def test_department_names_are_not_normalized(self):
        lower = make_profile('engineering')
        self.directory.add(lower)
        self.add(self.alice, '1000')
        self.add(lower, '1000')
        summary = summarize(self.store, self.directory)
        self.assertEqual(set(summary.by_department), {'Engineering', 'engineering'})

    def test_empty_summary(self):
        summary = summarize(self.store, self.directory, month=1, year=2030)
        self.assertEqual(summary.total_employees, 0)
        self.assertEqual(summary.total_net_salary, Decimal('0.00'))
        self.assertEqual(summary.by_department, {})


def create_employee(email, department='Engineering', user=None, **overrides):
    fields = dict(
        first_name='Test',
        last_name='Employee',
        email=email,
        department=department,
        position='Engineer',
        salary=Decimal('5000.00'),
        user=user,
    )
    fields.update(overrides)
    return Employee.objects.create(**fields)


class DjangoPayrollRepositoryTests(TestCase):
    def setUp(self):
        self.employee = create_employee('repo@example.com')
        self.store = PayrollStore(DjangoPayrollRepository(), DjangoEmployeeDirectory())

    def create(self, month=3, **overrides):
        fields = dict(
            employee_id=str(self.employee.id), month=month, year=2024,
            base_salary='5000', bonus='500', deductions=STANDARD_DEDUCTIONS,
        )
        fields.update(overrides)
        return self.store.create(**fields)

    def test_create_persists_entry_and_ordered_deductions(self):
        record = self.create()
        entry = PayrollEntry.objects.get(pk=record.id)
        self.assertEqual(entry.net_salary, Decimal('4700.00'))
        self.assertEqual(entry.total_deductions, Decimal('800.00'))
        self.assertEqual(
            [(line.position, line.kind) for line in entry.deduction_lines.all()],
            [(0, 'tax'), (1, 'insurance')],
        )
        self.assertEqual(record.employee.email, 'repo@example.com')

    def test_duplicate_period_is_rejected(self):
        self.create()
        with self.assertRaises(DuplicatePayroll):
            self.create()
        self.assertEqual(PayrollEntry.objects.filter(employee_id=self.employee.id).count(), 1)

    def test_database_constraint_enforces_uniqueness(self):
        fields = dict(employee_id=self.employee.id, month=6, year=2024, base_salary=Decimal('1'))
        PayrollEntry.objects.create(**fields)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                PayrollEntry.objects.create(**fields)

    def test_update_replaces_ledger_and_rederives(self):
        record = self.create()
        updated = self.store.update_fields(
            record.id, {'deductions': [{'kind': 'pension', 'amount': Decimal('50')}]}, processed_by=7
        )
        self.assertEqual(updated.net_salary, Decimal('5450.00'))
        entry = PayrollEntry.objects.get(pk=record.id)
        self.assertEqual(entry.deduction_lines.count(), 1)
        self.assertEqual(entry.processed_by_id, 7)

    def test_missing_or_malformed_ids_read_as_absent(self):
        repository = DjangoPayrollRepository()
        self.assertIsNone(repository.get(uuid.uuid4()))
        self.assertIsNone(repository.get('not-a-uuid'))
        self.assertEqual(repository.query(employee_id='not-a-uuid'), [])

    def test_unknown_employee_is_not_found(self):
        with self.assertRaises(EmployeeNotFound):
            self.store.create(employee_id=str(uuid.uuid4()), month=1, year=2024, base_salary='1')


class PayrollEndpointTests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(email='admin@example.com', password='pass', role=User.ROLE_ADMIN)
        self.manager = User.objects.create_user(email='manager@example.com', password='pass', role=User.ROLE_MANAGER)
        self.employee_user = User.objects.create_user(email='worker@example.com', password='pass')
        self.engineer = create_employee('worker@example.com', user=self.employee_user)
        self.salesperson = create_employee('sales@example.com', department='Sales')

    def payload(self, employee=None, **overrides):
        data = {
            'employee': str((employee or self.engineer).id),
            'month': 3,
            'year': 2024,
            'base_salary': '5000',
            'bonus': '500',
            'deductions': STANDARD_DEDUCTIONS,
        }
        data.update(overrides)
        return data

    def create_as_admin(self, **overrides):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(reverse('payroll:payroll-list'), self.payload(**overrides), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        return response.data['data']

    def test_create_returns_derived_totals(self):
        data = self.create_as_admin()
        self.assertEqual(data['total_deductions'], '800.00')
        self.assertEqual(data['net_salary'], '4700.00')
        self.assertFalse(data['net_salary_negative'])
        self.assertEqual(data['status'], 'pending')
        self.assertEqual(data['payment_method'], 'bank_transfer')
        self.assertEqual(data['processed_by'], self.admin.id)
        self.assertEqual(data['deductions'][0]['type'], 'tax')
        self.assertEqual(data['employee']['department'], 'Engineering')

    def test_duplicate_create_is_conflict(self):
        self.create_as_admin()
        response = self.client.post(reverse('payroll:payroll-list'), self.payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['message'], 'Payroll entry already exists for this month.')
        self.assertEqual(response.data['code'], 'duplicate_payroll')

        response = self.client.post(reverse('payroll:payroll-list'), self.payload(month=4), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_create_rejects_bad_input(self):
        self.client.force_authenticate(user=self.admin)
        url = reverse('payroll:payroll-list')
        bad_payloads = [
            self.payload(month=13),
            self.payload(year=1999),
            self.payload(base_salary='-5'),
            self.payload(deductions=[{'type': 'fine', 'amount': '5'}]),
            self.payload(deductions=[{'type': 'tax', 'amount': '-5'}]),
        ]
        for payload in bad_payloads:
            with self.subTest(payload=payload):
                response = self.client.post(url, payload, format='json')
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertEqual(response.data['message'], 'Validation failed.')

    def test_create_for_unknown_employee_is_not_found(self):
        self.client.force_authenticate(user=self.admin)
        payload = self.payload()
        payload['employee'] = str(uuid.uuid4())
        response = self.client.post(reverse('payroll:payroll-list'), payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(PayrollEntry.objects.exists())

    def test_employee_cannot_create_or_list(self):
        self.client.force_authenticate(user=self.employee_user)
        response = self.client.post(reverse('payroll:payroll-list'), self.payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.get(reverse('payroll:payroll-list'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.get(reverse('payroll:payroll-summary'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_anonymous_requests_are_rejected(self):
        response = self.client.get(reverse('payroll:payroll-list'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_filters_by_period(self):
        self.create_as_admin()
        self.create_as_admin(month=4)
        self.client.force_authenticate(user=self.manager)
        response = self.client.get(reverse('payroll:payroll-list'), {'month': 4, 'year': 2024})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['count'], 1)
        self.assertEqual(response.data['data']['results'][0]['month'], 4)

    def test_employee_reads_own_history_only(self):
        self.create_as_admin()
        self.create_as_admin(employee=self.salesperson)

        self.client.force_authenticate(user=self.employee_user)
        own_url = reverse('payroll:payroll-employee', kwargs={'employee_id': self.engineer.id})
        response = self.client.get(own_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['count'], 1)
        self.assertEqual(response.data['data']['results'][0]['employee']['email'], 'worker@example.com')

        other_url = reverse('payroll:payroll-employee', kwargs={'employee_id': self.salesperson.id})
        response = self.client.get(other_url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_employee_detail_denial_matches_missing_record(self):
        theirs = self.create_as_admin(employee=self.salesperson)
        self.client.force_authenticate(user=self.employee_user)

        response = self.client.get(reverse('payroll:payroll-detail', kwargs={'payroll_id': theirs['id']}))
        missing = self.client.get(reverse('payroll:payroll-detail', kwargs={'payroll_id': uuid.uuid4()}))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(missing.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data, missing.data)

    def test_status_patch(self):
        record = self.create_as_admin()
        self.client.force_authenticate(user=self.manager)
        url = reverse('payroll:payroll-status', kwargs={'payroll_id': record['id']})

        response = self.client.patch(url, {'status': 'paid', 'payment_date': '2024-03-31'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual(data['status'], 'paid')
        self.assertEqual(data['payment_date'], '2024-03-31')
        self.assertEqual(data['payment_method'], 'bank_transfer')
        self.assertEqual(data['net_salary'], '4700.00')
        self.assertEqual(data['processed_by'], self.manager.id)

        response = self.client.patch(url, {'status': 'archived'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_status_patch_null_payment_date_clears_it(self):
        record = self.create_as_admin(status='paid', payment_date='2024-03-31')
        url = reverse('payroll:payroll-status', kwargs={'payroll_id': record['id']})

        response = self.client.patch(url, {'status': 'pending', 'payment_date': None}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['data']['payment_date'])
        self.assertIsNone(PayrollEntry.objects.get(pk=record['id']).payment_date)

    def test_create_with_overflowing_totals_is_rejected_without_writing(self):
        self.client.force_authenticate(user=self.admin)
        url = reverse('payroll:payroll-list')
        oversized = [
            self.payload(base_salary='9999999999.99', bonus='9999999999.99', deductions=[]),
            self.payload(
                base_salary='0',
                bonus='0',
                deductions=[
                    {'type': 'tax', 'amount': '9999999999.99'},
                    {'type': 'pension', 'amount': '9999999999.99'},
                ],
            ),
        ]
        for payload in oversized:
            with self.subTest(payload=payload):
                response = self.client.post(url, payload, format='json')
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertFalse(response.data['success'])
        self.assertFalse(PayrollEntry.objects.exists())

        response = self.client.get(reverse('payroll:payroll-summary'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['total_employees'], 0)

    def test_status_patch_missing_record(self):
        self.client.force_authenticate(user=self.admin)
        url = reverse('payroll:payroll-status', kwargs={'payroll_id': uuid.uuid4()})
        response = self.client.patch(url, {'status': 'paid'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_employee_cannot_patch_status(self):
        record = self.create_as_admin()
        self.client.force_authenticate(user=self.employee_user)
        url = reverse('payroll:payroll-status', kwargs={'payroll_id': record['id']})
        response = self.client.patch(url, {'status': 'paid'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(PayrollEntry.objects.get(pk=record['id']).status, 'pending')

    def test_put_updates_compensation_and_keeps_period(self):
        record = self.create_as_admin()
        url = reverse('payroll:payroll-detail', kwargs={'payroll_id': record['id']})
        response = self.client.put(
            url,
            {'base_salary': '100', 'bonus': '0', 'deductions': STANDARD_DEDUCTIONS, 'month': 9},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual(data['net_salary'], '-700.00')
        self.assertTrue(data['net_salary_negative'])
        self.assertEqual(data['month'], 3)

    def test_summary_endpoint(self):
        second_engineer = create_employee('second@example.com')
        self.create_as_admin(base_salary='5500', bonus='0', deductions=[{'type': 'tax', 'amount': '800'}])
        self.create_as_admin(employee=second_engineer, base_salary='3000', bonus='0', deductions=[])
        self.create_as_admin(employee=self.salesperson, base_salary='2000', bonus='0', deductions=[])

        self.client.force_authenticate(user=self.manager)
        response = self.client.get(reverse('payroll:payroll-summary'), {'month': 3, 'year': 2024})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual(data['total_employees'], 3)
        self.assertEqual(data['total_net_salary'], '9700.00')
        self.assertEqual(data['by_department']['Engineering']['count'], 2)
        self.assertEqual(data['by_department']['Sales']['count'], 1)

    def test_summary_rejects_bad_filter(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(reverse('payroll:payroll-summary'), {'month': 'march'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class PayrollEntryAdminTests(TestCase):
    def setUp(self):
        self.model_admin = PayrollEntryAdmin(PayrollEntry, AdminSite())
        self.request = RequestFactory().get('/admin/payroll/payrollentry/')
        self.request.user = User.objects.create_superuser(email='root@example.com', password='pass')

    def test_every_entry_field_is_read_only(self):
        readonly = set(self.model_admin.get_readonly_fields(self.request))
        editable = {
            field.name for field in PayrollEntry._meta.concrete_fields
        } - readonly
        self.assertEqual(editable, set())

    def test_entries_cannot_be_added_or_deleted(self):
        self.assertFalse(self.model_admin.has_add_permission(self.request))
        self.assertFalse(self.model_admin.has_delete_permission(self.request))
