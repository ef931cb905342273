import uuid
from decimal import Decimal
from unittest import mock

from django.db import IntegrityError
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import User
from employees.directory import DjangoEmployeeDirectory
from employees.models import Employee
from employees.serializers import EmployeeDetailSerializer


def employee_payload(**overrides):
    data = {
        'first_name': 'Grace',
        'last_name': 'Hopper',
        'email': 'Grace@Example.com',
        'department': 'Engineering',
        'position': 'Engineer',
        'salary': '7000.00',
    }
    data.update(overrides)
    return data


class EmployeeModelTests(TestCase):
    def test_save_normalizes_fields(self):
        employee = Employee.objects.create(
            first_name=' Grace ', last_name='Hopper ', email='GRACE@example.com ',
            department=' Engineering', position='Engineer', salary=Decimal('1'),
        )
        self.assertEqual(employee.email, 'grace@example.com')
        self.assertEqual(employee.full_name, 'Grace Hopper')
        self.assertEqual(employee.department, 'Engineering')
        self.assertEqual(employee.status, Employee.STATUS_ACTIVE)


class EmployeeDirectoryTests(TestCase):
    def setUp(self):
        self.employee = Employee.objects.create(**{
            **employee_payload(email='dir@example.com'), 'salary': Decimal('10'),
        })
        self.directory = DjangoEmployeeDirectory()

    def test_find_by_id_returns_profile(self):
        profile = self.directory.find_by_id(self.employee.id)
        self.assertEqual(profile.id, str(self.employee.id))
        self.assertEqual(profile.department, 'Engineering')
        self.assertEqual(profile.email, 'dir@example.com')

    def test_unknown_and_malformed_ids_return_none(self):
        self.assertIsNone(self.directory.find_by_id(uuid.uuid4()))
        self.assertIsNone(self.directory.find_by_id('not-a-uuid'))

    def test_find_many_skips_missing(self):
        profiles = self.directory.find_many([self.employee.id, uuid.uuid4()])
        self.assertEqual(list(profiles), [str(self.employee.id)])


class EmployeeEndpointTests(APITestCase):
    def setUp(self):
        self.admin = User.objects.create_user(email='admin@example.com', password='pass', role=User.ROLE_ADMIN)
        self.manager = User.objects.create_user(email='manager@example.com', password='pass', role=User.ROLE_MANAGER)
        self.worker = User.objects.create_user(email='worker@example.com', password='pass')

    def test_manager_creates_employee(self):
        self.client.force_authenticate(user=self.manager)
        response = self.client.post(reverse('employees:employee-list'), employee_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data['email'], 'grace@example.com')
        self.assertEqual(response.data['full_name'], 'Grace Hopper')

    def test_duplicate_email_is_rejected(self):
        self.client.force_authenticate(user=self.admin)
        self.client.post(reverse('employees:employee-list'), employee_payload(), format='json')
        response = self.client.post(
            reverse('employees:employee-list'), employee_payload(email='grace@example.com'), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data['errors'])

    def test_duplicate_email_lost_race_uses_error_envelope(self):
        self.client.force_authenticate(user=self.admin)
        with mock.patch.object(EmployeeDetailSerializer, 'save', side_effect=IntegrityError('unique email')):
            response = self.client.post(reverse('employees:employee-list'), employee_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])
        self.assertIn('email', response.data['errors'])
        self.assertFalse(Employee.objects.exists())

    def test_employee_role_can_read_but_not_write(self):
        Employee.objects.create(**{**employee_payload(email='x@example.com'), 'salary': Decimal('1')})
        self.client.force_authenticate(user=self.worker)
        response = self.client.get(reverse('employees:employee-list'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

        response = self.client.post(reverse('employees:employee-list'), employee_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_only_admin_deletes(self):
        employee = Employee.objects.create(**{**employee_payload(), 'salary': Decimal('1')})
        url = reverse('employees:employee-detail', kwargs={'pk': employee.pk})

        self.client.force_authenticate(user=self.manager)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.admin)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Employee.objects.filter(pk=employee.pk).exists())

    def test_list_filters(self):
        Employee.objects.create(**{**employee_payload(email='a@example.com'), 'salary': Decimal('1')})
        Employee.objects.create(**{
            **employee_payload(email='b@example.com', first_name='Alan', department='Sales'),
            'salary': Decimal('1'),
        })
        self.client.force_authenticate(user=self.admin)

        response = self.client.get(reverse('employees:employee-list'), {'department': 'Sales'})
        self.assertEqual([row['email'] for row in response.data], ['b@example.com'])

        response = self.client.get(reverse('employees:employee-list'), {'search': 'alan'})
        self.assertEqual(len(response.data), 1)

    def test_add_document(self):
        employee = Employee.objects.create(**{**employee_payload(), 'salary': Decimal('1')})
        self.client.force_authenticate(user=self.admin)
        url = reverse('employees:employee-add-document', kwargs={'pk': employee.pk})
        response = self.client.post(url, {
            'type': 'contract', 'name': 'Offer letter', 'url': 'https://files.example.com/offer.pdf',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data['documents'][0]['type'], 'contract')
