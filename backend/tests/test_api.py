"""
API tests.

Requests go through the full stack: DRF views, role permissions, the
application services and the Django repository.
"""

from decimal import Decimal
from uuid import uuid4

import pytest
from django.contrib.auth.models import Group
from rest_framework.test import APIClient

from infrastructure.persistence.models import AuditLog, ProjectRecord

from .fakes import HULL_ENGINE, NAV_LIGHTS

pytestmark = pytest.mark.django_db

PROJECTS_URL = '/api/v1/projects/'


def project_url(project_id, suffix=''):
    return f'{PROJECTS_URL}{project_id}/{suffix}'


@pytest.fixture
def make_client(django_user_model):
    def make(username, role=None, superuser=False):
        user = django_user_model.objects.create_user(
            username=username, password='secret', is_superuser=superuser,
        )
        if role:
            user.groups.add(Group.objects.get_or_create(name=role)[0])
        client = APIClient()
        client.force_authenticate(user=user)
        return client
    return make


@pytest.fixture
def admin_client(make_client):
    return make_client('admin', superuser=True)


@pytest.fixture
def sales_client(make_client):
    return make_client('sales', role='sales')


@pytest.fixture
def production_client(make_client):
    return make_client('production', role='production')


@pytest.fixture
def viewer_client(make_client):
    return make_client('viewer')


@pytest.fixture
def created(admin_client):
    response = admin_client.post(PROJECTS_URL, {
        'title': 'Eagle 1000 for Van Dijk',
        'client_id': 'client-42',
        'type': 'new_build',
        'boat_model_version_id': 'eagle-1000-v3',
    }, format='json')
    assert response.status_code == 201
    return response.data


@pytest.fixture
def configured(admin_client, created):
    for item in (HULL_ENGINE, NAV_LIGHTS):
        response = admin_client.post(project_url(created['id'], 'items/'), item, format='json')
        assert response.status_code == 201
    return created


@pytest.fixture
def accepted_quote(admin_client, configured):
    url = project_url(configured['id'], 'quotes/')
    quote = admin_client.post(url, {}, format='json').data
    admin_client.post(f"{url}{quote['id']}/send/")
    response = admin_client.post(f"{url}{quote['id']}/accept/")
    assert response.status_code == 200
    return response.data


@pytest.fixture
def confirmed(admin_client, configured, accepted_quote):
    response = admin_client.post(
        project_url(configured['id'], 'transition/'), {'status': 'order_confirmed'}, format='json',
    )
    assert response.status_code == 200
    return response.data


class TestProjects:

    def test_create(self, created):
        assert created['project_number'].startswith('PRJ-')
        assert created['status'] == 'draft'
        assert created['configuration']['boat_model_version_id'] == 'eagle-1000-v3'
        assert created['configuration']['vat_rate'] == '21.00'

    def test_list_hides_archived(self, admin_client, created):
        admin_client.post(project_url(created['id'], 'archive/'), {'reason': 'Duplicate entry'}, format='json')

        assert admin_client.get(PROJECTS_URL).data['count'] == 0
        assert admin_client.get(PROJECTS_URL, {'include_archived': 'true'}).data['count'] == 1

    def test_list_filters_by_status(self, admin_client, created):
        assert admin_client.get(PROJECTS_URL, {'status': 'draft'}).data['count'] == 1
        assert admin_client.get(PROJECTS_URL, {'status': 'quoted'}).data['count'] == 0

    def test_retrieve(self, admin_client, configured):
        response = admin_client.get(project_url(configured['id']))

        assert response.status_code == 200
        assert response.data['configuration']['total_incl_vat'] == '3025.00'
        assert len(response.data['configuration']['items']) == 2

    def test_unknown_project(self, admin_client):
        response = admin_client.get(project_url(uuid4()))

        assert response.status_code == 404
        assert response.data['error'] == 'entity_not_found'

    def test_missing_title_is_rejected_by_the_serializer(self, admin_client):
        response = admin_client.post(PROJECTS_URL, {'client_id': 'client-42'}, format='json')

        assert response.status_code == 400
        assert 'title' in response.data

    def test_next_statuses(self, admin_client, created):
        response = admin_client.get(project_url(created['id'], 'next-statuses/'))

        assert [info['status'] for info in response.data] == ['quoted']

    def test_audit_trail(self, admin_client, configured):
        response = admin_client.get(project_url(configured['id'], 'audit/'))

        assert response.data[0]['action'] == 'create'

    def test_history(self, admin_client, configured):
        response = admin_client.get(project_url(configured['id'], 'history/'))

        assert len(response.data) == 3
        assert response.data[0]['version'] == 3


class TestPermissions:

    def test_anonymous_requests_are_rejected(self):
        response = APIClient().get(PROJECTS_URL)

        assert response.status_code == 401

    def test_viewer_reads_but_cannot_create(self, viewer_client, created):
        assert viewer_client.get(project_url(created['id'])).status_code == 200

        response = viewer_client.post(PROJECTS_URL, {'title': 'X', 'client_id': 'c'}, format='json')
        assert response.status_code == 403

    def test_production_cannot_edit_configuration(self, production_client, created):
        response = production_client.post(project_url(created['id'], 'items/'), HULL_ENGINE, format='json')

        assert response.status_code == 403

    def test_sales_cannot_archive(self, sales_client, created):
        response = sales_client.post(project_url(created['id'], 'archive/'), {'reason': 'x'}, format='json')

        assert response.status_code == 403

    def test_sales_can_confirm_the_order(self, sales_client, configured, accepted_quote):
        response = sales_client.post(
            project_url(configured['id'], 'transition/'), {'status': 'order_confirmed'}, format='json',
        )

        assert response.status_code == 200
        assert response.data['status'] == 'order_confirmed'

    def test_only_admin_may_emergency_unlock(self, make_client, confirmed):
        manager_client = make_client('manager', role='manager')
        url = project_url(confirmed['id'], 'emergency-unlock/')

        assert manager_client.post(url, {'reason': 'Wrong hull colour'}, format='json').status_code == 403


class TestConfiguration:

    def test_item_pricing(self, admin_client, created):
        response = admin_client.post(project_url(created['id'], 'items/'), HULL_ENGINE, format='json')

        assert response.data['line_total_excl_vat'] == '2000.00'
        assert response.data['unit_cost'] == '600.00'
        assert response.data['is_cost_estimated'] is True

    def test_negative_quantity_is_a_validation_error(self, admin_client, created):
        response = admin_client.post(
            project_url(created['id'], 'items/'), {**HULL_ENGINE, 'quantity': '-1'}, format='json',
        )

        assert response.status_code == 400
        assert response.data['error'] == 'validation_error'

    def test_duplicate_item_conflicts(self, admin_client, configured):
        response = admin_client.post(project_url(configured['id'], 'items/'), HULL_ENGINE, format='json')

        assert response.status_code == 409
        assert response.data['error'] == 'business_rule_violation'

    def test_discount(self, admin_client, configured):
        response = admin_client.post(
            project_url(configured['id'], 'discount/'), {'discount_percent': '10'}, format='json',
        )

        assert response.data['discount_amount'] == '250.00'
        assert response.data['total_incl_vat'] == '2722.50'

    def test_remove_item(self, admin_client, configured):
        item_id = configured_items(admin_client, configured)[1]['id']

        response = admin_client.delete(project_url(configured['id'], f'items/{item_id}/'))

        assert response.status_code == 204
        assert len(configured_items(admin_client, configured)) == 1

    def test_frozen_configuration_is_read_only(self, admin_client, confirmed):
        response = admin_client.post(project_url(confirmed['id'], 'items/'), {
            'category': 'Deck', 'name': 'Teak deck', 'quantity': '1', 'unit_price_excl_vat': '800',
        }, format='json')

        assert response.status_code == 409
        assert response.data['error'] == 'invalid_operation'


def configured_items(client, project):
    return client.get(project_url(project['id'])).data['configuration']['items']


class TestQuotesAndLifecycle:

    def test_sending_a_quote_moves_the_project_to_offer_sent(self, admin_client, configured):
        url = project_url(configured['id'], 'quotes/')
        quote = admin_client.post(url, {}, format='json').data
        assert quote['status'] == 'draft'
        assert quote['total_incl_vat'] == '3025.00'

        sent = admin_client.post(f"{url}{quote['id']}/send/")

        assert sent.data['status'] == 'sent'
        assert admin_client.get(project_url(configured['id'])).data['status'] == 'offer_sent'

    def test_invalid_transition_conflicts(self, admin_client, created):
        response = admin_client.post(
            project_url(created['id'], 'transition/'), {'status': 'in_production'}, format='json',
        )

        assert response.status_code == 409
        assert response.data['error'] == 'invalid_status_transition'

    def test_unknown_status_is_rejected(self, admin_client, created):
        response = admin_client.post(
            project_url(created['id'], 'transition/'), {'status': 'sunk'}, format='json',
        )

        assert response.status_code == 400

    def test_validate_transition(self, admin_client, created):
        response = admin_client.post(
            project_url(created['id'], 'validate-transition/'), {'status': 'order_confirmed'}, format='json',
        )

        assert response.data['is_valid'] is False
        assert response.data['errors']

    def test_order_confirmation(self, confirmed):
        assert confirmed['is_frozen'] is True
        assert confirmed['snapshot_count'] == 1
        assert confirmed['bom_count'] == 1
        assert confirmed['library_pins']['boat_model_version_id'] == 'eagle-1000-v3'

    def test_async_transition_runs_the_task(self, admin_client, configured, accepted_quote):
        response = admin_client.post(
            project_url(configured['id'], 'transition/'),
            {'status': 'order_confirmed', 'run_async': True},
            format='json',
        )

        assert response.status_code == 202
        assert response.data['task_id']
        assert ProjectRecord.objects.get(pk=configured['id']).status == 'order_confirmed'

    def test_amendment(self, admin_client, confirmed):
        engine = next(i for i in confirmed['configuration']['items'] if i['category'] == 'Propulsion')
        response = admin_client.post(project_url(confirmed['id'], 'amendments/'), {
            'type': 'equipment_change',
            'reason': 'Client wants a single engine',
            'items_to_update': [{'id': engine['id'], 'updates': {'quantity': '1'}}],
        }, format='json')

        assert response.status_code == 201
        assert response.data['amendment_number'] == 1
        assert response.data['price_impact_excl_vat'] == '-1000.00'
        assert AuditLog.objects.filter(action='amendment').count() == 1

    @pytest.mark.parametrize('quantity', ['-1', 'lots'])
    def test_amendment_item_updates_are_typed(self, admin_client, confirmed, quantity):
        engine = next(i for i in confirmed['configuration']['items'] if i['category'] == 'Propulsion')
        response = admin_client.post(project_url(confirmed['id'], 'amendments/'), {
            'type': 'equipment_change',
            'reason': 'Client wants a single engine',
            'items_to_update': [{'id': engine['id'], 'updates': {'quantity': quantity}}],
        }, format='json')

        assert response.status_code == 400
        assert AuditLog.objects.filter(action='amendment').count() == 0


class TestBOM:

    def test_no_bom_before_order_confirmation(self, admin_client, configured):
        assert admin_client.get(project_url(configured['id'], 'bom/')).status_code == 404

    def test_bom_and_margin(self, admin_client, confirmed):
        bom = admin_client.get(project_url(confirmed['id'], 'bom/'))
        margin = admin_client.get(project_url(confirmed['id'], 'bom/margin/'))

        assert bom.data['total_cost_excl_vat'] == '1500.00'
        assert margin.data['margin'] == Decimal('1000.00')
        assert margin.data['margin_percent'] == Decimal('40.0')


class TestCertifications:

    def test_initialize_and_read_stats(self, admin_client, created):
        url = project_url(created['id'], 'certifications/')

        response = admin_client.post(url, {'type': 'ce'}, format='json')
        assert response.status_code == 201
        assert response.data['status'] == 'draft'
        assert response.data['chapters']

        stats = admin_client.get(f"{url}{response.data['id']}/stats/")
        assert stats.data['total_chapters'] == len(response.data['chapters'])
        assert stats.data['final_chapters'] == 0

        assert len(admin_client.get(url).data) == 1

    def test_second_pack_of_the_same_type_conflicts(self, admin_client, created):
        url = project_url(created['id'], 'certifications/')
        admin_client.post(url, {'type': 'ce'}, format='json')

        response = admin_client.post(url, {'type': 'ce'}, format='json')

        assert response.status_code == 409

    def test_viewer_cannot_initialize(self, viewer_client, created):
        response = viewer_client.post(project_url(created['id'], 'certifications/'), {'type': 'ce'}, format='json')

        assert response.status_code == 403

    def test_checklist_item_attachments(self, admin_client, created):
        url = project_url(created['id'], 'certifications/')
        pack = admin_client.post(url, {'type': 'ce'}, format='json').data
        item_id = pack['chapters'][0]['checklist'][0]['id']
        attachments_url = f"{url}{pack['id']}/checklist/{item_id}/attachments/"

        response = admin_client.post(attachments_url, {'filename': 'hull-id-photo.jpg', 'type': 'photo'}, format='json')
        assert response.status_code == 201
        assert admin_client.get(f"{url}{pack['id']}/stats/").data['total_attachments'] == 1

        response = admin_client.delete(f"{attachments_url}{response.data['id']}/")
        assert response.status_code == 204
        assert admin_client.get(f"{url}{pack['id']}/stats/").data['total_attachments'] == 0

    def test_viewer_cannot_attach_evidence(self, admin_client, viewer_client, created):
        url = project_url(created['id'], 'certifications/')
        pack = admin_client.post(url, {'type': 'ce'}, format='json').data
        item_id = pack['chapters'][0]['checklist'][0]['id']

        response = viewer_client.post(
            f"{url}{pack['id']}/checklist/{item_id}/attachments/", {'filename': 'x.pdf'}, format='json',
        )

        assert response.status_code == 403
