from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import User
from customers.models import Customer


def customer_payload(**overrides):
    data = {
        'company_name': 'Acme Ltd',
        'contact_name': 'Wile Coyote',
        'email': 'Orders@Acme.example.com',
        'phone': '555-0100',
        'type': Customer.TYPE_BUSINESS,
        'street': '1 Desert Road',
        'city': 'Mesa',
        'state': 'AZ',
        'zip_code': '85201',
        'country': 'USA',
    }
    data.update(overrides)
    return data


class CustomerModelTests(TestCase):
    def test_full_address(self):
        customer = Customer(street='1 Desert Road', city='Mesa', state='AZ', zip_code='85201', country='USA')
        self.assertEqual(customer.full_address, '1 Desert Road, Mesa, AZ 85201, USA')

    def test_full_address_skips_missing_parts(self):
        self.assertEqual(Customer(city='Mesa', country='USA').full_address, 'Mesa, USA')


class CustomerEndpointTests(APITestCase):
    def setUp(self):
        self.owner = User.objects.create_user(email='owner@example.com', password='pass')
        self.other = User.objects.create_user(email='other@example.com', password='pass')
        self.manager = User.objects.create_user(email='manager@example.com', password='pass', role=User.ROLE_MANAGER)

    def create_customer(self, user=None, **overrides):
        self.client.force_authenticate(user=user or self.owner)
        response = self.client.post(reverse('customers:customer-list'), customer_payload(**overrides), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        return response.data

    def test_creator_becomes_assignee(self):
        data = self.create_customer()
        self.assertEqual(data['assigned_to']['email'], 'owner@example.com')
        self.assertEqual(data['email'], 'orders@acme.example.com')
        self.assertEqual(data['status'], Customer.STATUS_ACTIVE)

    def test_invalid_type_is_rejected(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.post(
            reverse('customers:customer-list'), customer_payload(type='government'), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_only_assignee_or_staff_may_update(self):
        data = self.create_customer()
        url = reverse('customers:customer-detail', kwargs={'pk': data['id']})

        self.client.force_authenticate(user=self.other)
        response = self.client.patch(url, {'notes': 'hijack'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.owner)
        response = self.client.patch(url, {'notes': 'follow up'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.force_authenticate(user=self.manager)
        response = self.client.patch(url, {'notes': 'reviewed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Customer.objects.get(pk=data['id']).notes, 'reviewed')

    def test_status_patch(self):
        data = self.create_customer()
        url = reverse('customers:customer-update-status', kwargs={'pk': data['id']})
        response = self.client.patch(url, {'status': Customer.STATUS_INACTIVE}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], Customer.STATUS_INACTIVE)

        response = self.client.patch(url, {'status': 'archived'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_only_staff_may_delete(self):
        data = self.create_customer()
        url = reverse('customers:customer-detail', kwargs={'pk': data['id']})

        self.client.force_authenticate(user=self.owner)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.manager)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_204_NO_CONTENT)

    def test_list_filters_by_status(self):
        self.create_customer()
        self.create_customer(email='solo@example.com', type=Customer.TYPE_INDIVIDUAL)
        Customer.objects.filter(email='solo@example.com').update(status=Customer.STATUS_PENDING)

        response = self.client.get(reverse('customers:customer-list'), {'status': Customer.STATUS_PENDING})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['email'] for row in response.data], ['solo@example.com'])
