"""
Initialize System Command.

Creates role groups, the admin user and the default system settings.
"""

from django.conf import settings
from django.core.management.base import BaseCommand
from django.db import transaction


class Command(BaseCommand):
    help = 'Initialize system with default data (role groups, admin user, settings)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--admin-password',
            type=str,
            default='admin123',
            help='Password for admin user'
        )
        parser.add_argument(
            '--skip-roles',
            action='store_true',
            help='Skip creating role groups'
        )
        parser.add_argument(
            '--skip-admin',
            action='store_true',
            help='Skip creating admin user'
        )

    def handle(self, *args, **options):
        with transaction.atomic():
            if not options['skip_roles']:
                self._create_role_groups()

            if not options['skip_admin']:
                self._create_admin_user(options['admin_password'])

            self._create_system_settings()

        self.stdout.write(
            self.style.SUCCESS('System initialization completed!')
        )

    def _create_role_groups(self):
        """One auth group per role; the API resolves a user's role from them."""
        from django.contrib.auth.models import Group
        from domain.auth.authorization import Role, get_role_info

        for role in Role:
            group, created = Group.objects.get_or_create(name=role.value)
            label = get_role_info(role)['label']
            if created:
                self.stdout.write(f'Created role group: {label}')
            else:
                self.stdout.write(f'Role group already exists: {label}')

    def _create_admin_user(self, password):
        """Create admin user if not exists."""
        from django.contrib.auth import get_user_model

        User = get_user_model()

        admin_user, created = User.objects.get_or_create(
            username='admin',
            defaults={
                'email': 'admin@example.com',
                'first_name': 'System',
                'last_name': 'Administrator',
                'is_staff': True,
                'is_superuser': True,
            }
        )

        if created:
            admin_user.set_password(password)
            admin_user.save()

            self.stdout.write(
                self.style.SUCCESS(f'Created admin user (password: {password})')
            )
        else:
            self.stdout.write('Admin user already exists')

    def _create_system_settings(self):
        """Create default system settings."""
        from infrastructure.persistence.models import SystemSetting

        defaults = settings.BOATYARD
        system_settings = [
            {
                'key': 'pricing',
                'value': {
                    'vat_rate': str(defaults['VAT_RATE']),
                    'quote_validity_days': defaults['QUOTE_VALIDITY_DAYS'],
                    'cost_estimation_ratio': str(defaults['COST_ESTIMATION_RATIO']),
                },
                'description': 'Pricing overrides for VAT, quote validity and cost estimation'
            },
            {
                'key': 'library',
                'value': {
                    'catalog_version_id': None,
                    'template_version_ids': {},
                    'procedure_version_ids': [],
                },
                'description': 'Approved library versions pinned at order confirmation'
            },
        ]

        for setting_data in system_settings:
            setting, created = SystemSetting.objects.get_or_create(
                key=setting_data['key'],
                defaults=setting_data
            )
            if created:
                self.stdout.write(f'Created setting: {setting.key}')
