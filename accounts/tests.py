from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import User
from employees.models import Employee


class UserModelTests(TestCase):
    def test_email_is_normalized_and_role_defaults_to_employee(self):
        user = User.objects.create_user(email='Someone@Example.COM', password='pass')
        self.assertEqual(user.email, 'someone@example.com')
        self.assertEqual(user.role, User.ROLE_EMPLOYEE)
        self.assertFalse(user.is_admin_or_manager)

    def test_superuser_is_admin(self):
        user = User.objects.create_superuser(email='root@example.com', password='pass')
        self.assertTrue(user.is_admin)
        self.assertTrue(user.is_staff)

    def test_employee_profile_resolves_linked_employee(self):
        user = User.objects.create_user(email='linked@example.com', password='pass')
        self.assertIsNone(user.employee_profile)

        user = User.objects.get(pk=user.pk)
        employee = Employee.objects.create(
            user=user, first_name='Lin', last_name='Ked', email='linked@example.com',
            department='Ops', position='Analyst', salary=Decimal('100'),
        )
        self.assertEqual(user.employee_profile, employee)


@override_settings(RATELIMIT_ENABLE=False)
class AuthEndpointTests(APITestCase):
    def test_register_creates_employee_account_with_tokens(self):
        response = self.client.post(reverse('accounts:register'), {
            'email': 'New@Example.com',
            'password': 'a-Strong-passw0rd',
            'first_name': 'New',
            'last_name': 'User',
            'role': User.ROLE_ADMIN,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertIn('access', response.data['data']['tokens'])
        user = User.objects.get(email='new@example.com')
        self.assertEqual(user.role, User.ROLE_EMPLOYEE)

    def test_register_rejects_existing_email(self):
        User.objects.create_user(email='taken@example.com', password='pass')
        response = self.client.post(reverse('accounts:register'), {
            'email': 'taken@example.com',
            'password': 'a-Strong-passw0rd',
            'first_name': 'Dup',
            'last_name': 'User',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data['errors'])

    def test_login_and_me(self):
        User.objects.create_user(email='login@example.com', password='pass', role=User.ROLE_MANAGER)
        response = self.client.post(reverse('accounts:login'), {
            'email': 'login@example.com', 'password': 'pass',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['user']['role'], User.ROLE_MANAGER)

        access = response.data['data']['tokens']['access']
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {access}')
        response = self.client.get(reverse('accounts:me'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['email'], 'login@example.com')
        self.assertIsNone(response.data['data']['employee_id'])

    def test_login_with_wrong_password_fails(self):
        User.objects.create_user(email='login@example.com', password='pass')
        response = self.client.post(reverse('accounts:login'), {
            'email': 'login@example.com', 'password': 'nope',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])

    def test_token_refresh(self):
        User.objects.create_user(email='refresh@example.com', password='pass')
        response = self.client.post(reverse('accounts:login'), {
            'email': 'refresh@example.com', 'password': 'pass',
        }, format='json')
        refresh = response.data['data']['tokens']['refresh']
        response = self.client.post(reverse('accounts:token-refresh'), {'refresh': refresh}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

    def test_me_requires_authentication(self):
        response = self.client.get(reverse('accounts:me'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['success'])


class CreateAdminCommandTests(TestCase):
    def test_creates_admin_user(self):
        out = StringIO()
        call_command(
            'createadmin', '--email', 'boss@example.com', '--password', 'pass',
            '--first-name', 'Big', '--last-name', 'Boss', stdout=out,
        )
        user = User.objects.get(email='boss@example.com')
        self.assertTrue(user.is_admin)
        self.assertTrue(user.is_superuser)
        self.assertTrue(user.check_password('pass'))
