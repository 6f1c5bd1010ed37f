"""
Tests for the Django persistence adapters.

The shared service fixtures are rebound to the ORM-backed repository,
audit log, settings provider and library port, so the same project
fixtures run against the test database.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from domain.shared.exceptions import ConcurrencyException
from domain.shared.value_objects import AuditAction, ProjectStatus, ProjectType, QuoteStatus
from infrastructure.persistence.adapters import DjangoAuditLog, DjangoLibraryPort, DjangoSettingsProvider
from infrastructure.persistence.models import AuditLog, ProjectRecord, SystemSetting
from infrastructure.persistence.repositories import DjangoProjectRepository

pytestmark = pytest.mark.django_db


@pytest.fixture
def repository():
    return DjangoProjectRepository()


@pytest.fixture
def audit():
    return DjangoAuditLog()


@pytest.fixture
def settings_provider():
    return DjangoSettingsProvider()


@pytest.fixture
def library():
    return DjangoLibraryPort()


@pytest.fixture
def library_setting():
    return SystemSetting.objects.create(key='library', value={
        'catalog_version_id': 'catalog-2026.3',
        'template_version_ids': {'owners_manual': 'tpl-owners-manual-v4'},
        'procedure_version_ids': ['proc-sea-trial-v2'],
    })


class TestProjectRepository:

    def test_round_trip_keeps_the_whole_aggregate(self, confirmed_project, repository):
        loaded = repository.get_by_id(confirmed_project.id)

        assert loaded.status == ProjectStatus.ORDER_CONFIRMED
        assert loaded.is_frozen
        assert [item.quantity for item in loaded.configuration.items] == [Decimal('2'), Decimal('1')]
        assert loaded.configuration.total_incl_vat == Decimal('3025.00')
        assert loaded.current_quote.status == QuoteStatus.ACCEPTED
        assert isinstance(loaded.current_quote.locked_at, datetime)
        assert loaded.latest_bom.total_cost_excl_vat == Decimal('1500.00')
        assert loaded.latest_configuration_snapshot.data.total_excl_vat == Decimal('2500.00')

    def test_quote_lines_and_totals_round_trip(self, configured_project, quote_service, admin, repository):
        quote = quote_service.create_draft(configured_project.id, admin)
        quote_service.update_draft(configured_project.id, quote.id, {
            'lines': [
                {'description': 'Antifouling', 'quantity': 1, 'unit_price_excl_vat': '100'},
                {'description': 'Fenders', 'quantity': 1, 'unit_price_excl_vat': '200'},
                {'description': 'Mooring lines', 'quantity': 1, 'unit_price_excl_vat': '300'},
            ],
        }, admin)

        stored = repository.get_by_id(configured_project.id).get_quote(quote.id)

        assert isinstance(stored.lines, tuple)
        assert [line.description for line in stored.lines] == ['Antifouling', 'Fenders', 'Mooring lines']
        assert stored.subtotal_excl_vat == Decimal('600.00')
        assert stored.total_incl_vat == Decimal('726.00')

    def test_denormalized_columns_follow_the_aggregate(self, confirmed_project):
        record = ProjectRecord.objects.get(pk=confirmed_project.id)

        assert record.project_number == confirmed_project.project_number
        assert record.status == 'order_confirmed'
        assert record.project_type == 'new_build'
        assert record.client_id == 'client-42'

    def test_every_save_bumps_the_record_version(self, project, configuration_service, admin, repository):
        from .fakes import HULL_ENGINE

        assert ProjectRecord.objects.get(pk=project.id).version == 1

        configuration_service.add_item(project.id, HULL_ENGINE, admin)

        assert ProjectRecord.objects.get(pk=project.id).version == 2
        assert repository.get_by_id(project.id).version == 2

    def test_save_hands_back_the_stored_version(self, project, repository):
        loaded = repository.get_by_id(project.id)

        saved = repository.save(loaded)

        assert saved is loaded
        assert saved.version == ProjectRecord.objects.get(pk=project.id).version == 2

    def test_stale_write_is_rejected(self, project, repository):
        first = repository.get_by_id(project.id)
        second = repository.get_by_id(project.id)

        first.title = 'Eagle 1000 (revised)'
        repository.save(first)

        second.title = 'Eagle 1000 (lost update)'
        with pytest.raises(ConcurrencyException):
            repository.save(second)

        assert repository.get_by_id(project.id).title == 'Eagle 1000 (revised)'

    def test_delete_is_soft(self, project, repository):
        assert repository.delete(project.id) is True

        assert repository.get_by_id(project.id) is None
        assert ProjectRecord.all_objects.filter(pk=project.id).exists()
        assert repository.delete(project.id) is False

    def test_project_numbers_are_never_reused(self, project, project_service, repository, admin):
        year = project.created_at.year
        assert project.project_number == f'PRJ-{year}-0001'

        repository.delete(project.id)

        assert repository.next_project_number(year) == f'PRJ-{year}-0002'

    def test_get_all_filters(self, project, project_service, repository, admin):
        refit = project_service.create_project(
            {'title': 'Refit Kaag', 'client_id': 'client-7', 'type': 'refit'}, admin,
        )
        project_service.archive(refit.id, 'Client withdrew', admin)

        assert [p.id for p in repository.get_all()] == [project.id]
        assert repository.get_all(project_type=ProjectType.REFIT) == []
        assert [p.id for p in repository.get_all(project_type=ProjectType.REFIT, include_archived=True)] == [refit.id]
        assert [p.id for p in repository.get_all(client_id='client-42')] == [project.id]
        assert repository.get_all(status=ProjectStatus.QUOTED) == []

    def test_history_records_each_write(self, configured_project):
        record = ProjectRecord.objects.get(pk=configured_project.id)

        assert record.history.count() == 3
        assert record.history.first().version == 3


class TestAuditLog:

    def test_entries_are_read_back_in_order(self, configured_project, audit):
        history = audit.get_history('Project', configured_project.id)

        assert history[0].action == AuditAction.CREATE
        assert history[0].user_name == 'Anna Admin'
        assert history[0].after['project_number'] == configured_project.project_number

    def test_entries_are_append_only(self, project):
        row = AuditLog.objects.first()
        row.description = 'rewritten'

        with pytest.raises(ValueError):
            row.save()
        with pytest.raises(ValueError):
            row.delete()


class TestSettingsProvider:

    def test_defaults_come_from_django_settings(self, settings_provider):
        pricing = settings_provider.get_pricing_settings()

        assert pricing.vat_rate == Decimal('21')
        assert pricing.quote_validity_days == 30
        assert pricing.cost_estimation_ratio == Decimal('0.6')

    def test_pricing_setting_overrides_per_key(self, settings_provider):
        SystemSetting.objects.create(key='pricing', value={'vat_rate': '9', 'quote_validity_days': 14})

        pricing = settings_provider.get_pricing_settings()

        assert pricing.vat_rate == Decimal('9')
        assert pricing.quote_validity_days == 14
        assert pricing.cost_estimation_ratio == Decimal('0.6')


class TestLibraryPort:

    def test_without_setting_nothing_is_approved(self, library):
        versions = library.get_current_versions()

        assert versions.catalog_version_id is None
        assert versions.template_version_ids == {}
        assert versions.procedure_version_ids == []

    def test_order_confirmation_pins_the_approved_versions(self, library_setting, confirmed_project, repository):
        pins = repository.get_by_id(confirmed_project.id).library_pins

        assert pins.catalog_version_id == 'catalog-2026.3'
        assert pins.template_version_ids == {'owners_manual': 'tpl-owners-manual-v4'}
        assert pins.procedure_version_ids == ('proc-sea-trial-v2',)


class TestInitSystem:

    def test_bootstrap_is_idempotent(self, django_user_model):
        from io import StringIO

        from django.contrib.auth.models import Group
        from django.core.management import call_command

        call_command('init_system', admin_password='harbour', stdout=StringIO())
        call_command('init_system', stdout=StringIO())

        assert sorted(Group.objects.values_list('name', flat=True)) == [
            'admin', 'manager', 'production', 'sales', 'viewer',
        ]
        admin = django_user_model.objects.get(username='admin')
        assert admin.is_superuser and admin.check_password('harbour')
        assert sorted(SystemSetting.objects.values_list('key', flat=True)) == ['library', 'pricing']
        assert DjangoSettingsProvider().get_pricing_settings().vat_rate == Decimal('21')
