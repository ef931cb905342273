import getpass

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import IntegrityError

User = get_user_model()


class Command(BaseCommand):
    help = 'Create an admin user'

    def add_arguments(self, parser):
        parser.add_argument('--email', type=str, help='Admin email address', required=True)
        parser.add_argument('--password', type=str, help='Admin password', required=False)
        parser.add_argument('--first-name', type=str, default='Admin')
        parser.add_argument('--last-name', type=str, default='User')
        parser.add_argument('--department', type=str, default='Administration')

    def handle(self, *args, **options):
        email = options['email'].lower()
        password = options.get('password')

        if User.objects.filter(email=email).exists():
            self.stdout.write(self.style.WARNING(f'User with email {email} already exists'))
            return

        if not password:
            password = getpass.getpass('Enter password: ')
            confirm_password = getpass.getpass('Confirm password: ')

            if password != confirm_password:
                self.stdout.write(self.style.ERROR('Passwords do not match'))
                return

        try:
            user = User.objects.create_superuser(
                email=email,
                password=password,
                first_name=options['first_name'],
                last_name=options['last_name'],
                department=options['department'],
            )
        except IntegrityError as e:
            self.stdout.write(self.style.ERROR(f'Error creating user: {str(e)}'))
            return

        self.stdout.write(self.style.SUCCESS(f'Successfully created admin: {email}'))
        self.stdout.write(f'  - Role: {user.role}')
        self.stdout.write(f'  - Department: {user.department}')
        self.stdout.write(f'  - Is Superuser: {user.is_superuser}')
