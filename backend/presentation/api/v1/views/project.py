"""
Project Views.

API views for projects: lifecycle, configuration, quotes, amendments and
BOM analytics. Every write goes through an application service.
"""

from uuid import UUID

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from domain.auth.authorization import Permission
from domain.bom import services as bom_services
from domain.project import status_machine
from domain.shared.exceptions import EntityNotFoundException
from infrastructure import wiring
from infrastructure.persistence.models import ProjectRecord
from presentation.api.pagination import StandardResultsSetPagination

from ..serializers.base import AuditEntrySerializer, ReasonSerializer
from ..serializers.bom import BOMItemSerializer, BOMSnapshotSerializer
from ..serializers.project import (
    AmendmentCreateSerializer,
    AmendmentSerializer,
    ChangeTypeSerializer,
    ConfigurationItemInputSerializer,
    ConfigurationItemSerializer,
    ConfigurationSerializer,
    ConfigurationSnapshotSerializer,
    DiscountSerializer,
    DocumentRegisterSerializer,
    FreezeSerializer,
    ProjectCreateSerializer,
    ProjectDetailSerializer,
    ProjectDocumentSerializer,
    ProjectRecordSerializer,
    ReorderSerializer,
    TransitionSerializer,
)
from ..serializers.quote import (
    QuoteCreateSerializer,
    QuoteRejectSerializer,
    QuoteSerializer,
    QuoteUpdateSerializer,
)
from .base import HistoryViewMixin, ServiceViewMixin

UUID_PATTERN = '[0-9a-f-]{36}'


def _effects(effects):
    return [{'type': e.type.value, 'description': e.description} for e in effects]


class ProjectViewSet(
    ServiceViewMixin,
    HistoryViewMixin,
    mixins.ListModelMixin,
    viewsets.GenericViewSet,
):
    """
    ViewSet for projects.

    Endpoints:
    - GET /projects/ - list projects (filter, search, order)
    - POST /projects/ - create project
    - GET /projects/{id}/ - full project aggregate
    - GET /projects/{id}/summary/ - status info, flags and current quote
    - POST /projects/{id}/transition/ - move along the lifecycle
    - POST /projects/{id}/items/ - add configuration item
    - GET|POST /projects/{id}/quotes/ - list or draft quotes
    - GET|POST /projects/{id}/amendments/ - list or record amendments
    - GET /projects/{id}/bom/ - latest BOM snapshot
    """

    queryset = ProjectRecord.objects.all()
    serializer_class = ProjectRecordSerializer
    pagination_class = StandardResultsSetPagination
    lookup_value_regex = UUID_PATTERN

    filter_backends = [
        DjangoFilterBackend,
        filters.SearchFilter,
        filters.OrderingFilter,
    ]
    filterset_fields = ['status', 'project_type', 'client_id']
    search_fields = ['project_number', 'title', 'client_id']
    ordering_fields = ['project_number', 'title', 'status', 'created_at', 'updated_at']
    ordering = ['-created_at']

    required_permissions = {
        'create': Permission.PROJECT_CREATE,
        'archive': Permission.PROJECT_ARCHIVE,
        'emergency_unlock': Permission.EMERGENCY_UNLOCK,
        'change_type': Permission.PROJECT_EDIT,
        'register_document': Permission.PROJECT_EDIT,
        'items': Permission.PROJECT_EDIT,
        'item_detail': Permission.PROJECT_EDIT,
        'move_item': Permission.PROJECT_EDIT,
        'discount': Permission.PROJECT_EDIT,
        'reorder': Permission.PROJECT_EDIT,
        'configuration': Permission.PROJECT_EDIT,
        'freeze': Permission.PROJECT_EDIT,
        'quotes': Permission.QUOTE_CREATE,
        'quote_detail': Permission.QUOTE_CREATE,
        'new_quote_version': Permission.QUOTE_CREATE,
        'send_quote': Permission.QUOTE_SEND,
        'accept_quote': Permission.PROJECT_EDIT,
        'reject_quote': Permission.PROJECT_EDIT,
        'amendments': Permission.AMENDMENT_APPROVE,
    }

    def get_queryset(self):
        queryset = super().get_queryset()
        include_archived = self.request.query_params.get('include_archived', '').lower() in ('1', 'true', 'yes')
        if not include_archived:
            queryset = queryset.filter(archived_at__isnull=True)
        return queryset

    @property
    def project_id(self):
        return UUID(self.kwargs['pk'])

    # =========================================================================
    # PROJECT
    # =========================================================================

    def create(self, request):
        data = self.validated(ProjectCreateSerializer)
        project = wiring.get_project_service().create_project(data, self.audit_context())
        return self.respond(ProjectDetailSerializer, project, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        project = wiring.get_project_service().get_project(self.project_id)
        return self.respond(ProjectDetailSerializer, project)

    @action(detail=True, methods=['get'])
    def summary(self, request, pk=None):
        summary = wiring.get_project_service().get_project_summary(self.project_id)
        summary['project'] = ProjectDetailSerializer(summary['project']).data
        return Response(summary)

    @action(detail=True, methods=['get'], url_path='next-statuses')
    def next_statuses(self, request, pk=None):
        project = wiring.get_project_service().get_project(self.project_id)
        data = []
        for target in status_machine.get_valid_next_statuses(project.status):
            info = status_machine.get_status_info(target)
            info['is_milestone'] = status_machine.is_milestone(target)
            info['milestone_effects'] = _effects(status_machine.get_milestone_effects(target))
            data.append(info)
        return Response(data)

    @action(detail=True, methods=['post'], url_path='validate-transition')
    def validate_transition(self, request, pk=None):
        target = self.validated(TransitionSerializer)['status']
        validation = wiring.get_project_service().validate_transition(self.project_id, target)
        return Response({
            'is_valid': validation.is_valid,
            'errors': list(validation.errors),
            'warnings': list(validation.warnings),
            'requires_confirmation': validation.requires_confirmation,
            'milestone_effects': _effects(validation.milestone_effects),
        })

    @action(detail=True, methods=['post'])
    def transition(self, request, pk=None):
        """
        Move the project to ``status``. With ``run_async`` the transition is
        queued as a Celery task and 202 is returned with the task id.
        """
        data = self.validated(TransitionSerializer)
        context = self.audit_context()

        if data.get('run_async'):
            from application.tasks.project_tasks import transition_project_status

            result = transition_project_status.delay(
                str(self.project_id),
                data['status'].value,
                context.user_id,
                context.user_name,
                role=context.role.value,
                force=data['force'],
                reason=data.get('reason'),
            )
            return Response({'task_id': result.id}, status=status.HTTP_202_ACCEPTED)

        project = wiring.get_project_service().transition_status(
            self.project_id,
            data['status'],
            context,
            force=data['force'],
            reason=data.get('reason') or None,
        )
        return self.respond(ProjectDetailSerializer, project)

    @action(detail=True, methods=['post'])
    def archive(self, request, pk=None):
        reason = self.validated(ReasonSerializer)['reason']
        project = wiring.get_project_service().archive(self.project_id, reason, self.audit_context())
        return self.respond(ProjectDetailSerializer, project)

    @action(detail=True, methods=['post'], url_path='emergency-unlock')
    def emergency_unlock(self, request, pk=None):
        reason = self.validated(ReasonSerializer)['reason']
        project = wiring.get_project_service().emergency_unlock(self.project_id, reason, self.audit_context())
        return self.respond(ProjectDetailSerializer, project)

    @action(detail=True, methods=['post'], url_path='change-type')
    def change_type(self, request, pk=None):
        project_type = self.validated(ChangeTypeSerializer)['type']
        project = wiring.get_project_service().update_project_type(
            self.project_id, project_type, self.audit_context(),
        )
        return self.respond(ProjectDetailSerializer, project)

    @action(detail=True, methods=['post'], url_path='documents')
    def register_document(self, request, pk=None):
        data = self.validated(DocumentRegisterSerializer)
        document = wiring.get_project_service().register_document(
            self.project_id, data['document_type'], data['title'], self.audit_context(),
        )
        return self.respond(ProjectDocumentSerializer, document, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'])
    def history(self, request, pk=None):
        record = ProjectRecord.all_objects.filter(pk=self.project_id).first()
        if record is None:
            raise EntityNotFoundException("Project", self.project_id)
        return self.history_response(record)

    @action(detail=True, methods=['get'])
    def audit(self, request, pk=None):
        entries = wiring.get_project_service().get_audit_history(self.project_id)
        return self.respond(AuditEntrySerializer, entries, many=True)

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    @action(detail=True, methods=['post'])
    def items(self, request, pk=None):
        data = self.validated(ConfigurationItemInputSerializer)
        item = wiring.get_configuration_service().add_item(self.project_id, data, self.audit_context())
        return self.respond(ConfigurationItemSerializer, item, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['patch', 'delete'], url_path=rf'items/(?P<item_id>{UUID_PATTERN})')
    def item_detail(self, request, pk=None, item_id=None):
        service = wiring.get_configuration_service()
        if request.method == 'DELETE':
            service.remove_item(self.project_id, UUID(item_id), self.audit_context())
            return Response(status=status.HTTP_204_NO_CONTENT)

        updates = self.validated(ConfigurationItemInputSerializer, partial=True)
        item = service.update_item(self.project_id, UUID(item_id), updates, self.audit_context())
        return self.respond(ConfigurationItemSerializer, item)

    @action(detail=True, methods=['post'], url_path=rf'items/(?P<item_id>{UUID_PATTERN})/move')
    def move_item(self, request, pk=None, item_id=None):
        direction = request.data.get('direction')
        project = wiring.get_configuration_service().move_item(
            self.project_id, UUID(item_id), direction, self.audit_context(),
        )
        return self.respond(ConfigurationSerializer, project.configuration)

    @action(detail=True, methods=['post'])
    def discount(self, request, pk=None):
        discount = self.validated(DiscountSerializer)['discount_percent']
        project = wiring.get_configuration_service().set_discount(self.project_id, discount, self.audit_context())
        return self.respond(ConfigurationSerializer, project.configuration)

    @action(detail=True, methods=['post'])
    def reorder(self, request, pk=None):
        item_ids = self.validated(ReorderSerializer)['item_ids']
        project = wiring.get_configuration_service().reorder_items(self.project_id, item_ids, self.audit_context())
        return self.respond(ConfigurationSerializer, project.configuration)

    @action(detail=True, methods=['patch'])
    def configuration(self, request, pk=None):
        updates = {
            name: request.data[name]
            for name in ('boat_model_version_id', 'propulsion_type')
            if name in request.data
        }
        project = wiring.get_configuration_service().update_configuration(
            self.project_id, updates, self.audit_context(),
        )
        return self.respond(ConfigurationSerializer, project.configuration)

    @action(detail=True, methods=['post'])
    def freeze(self, request, pk=None):
        reason = self.validated(FreezeSerializer).get('reason')
        snapshot = wiring.get_configuration_service().freeze(self.project_id, reason, self.audit_context())
        return self.respond(ConfigurationSnapshotSerializer, snapshot, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'])
    def snapshots(self, request, pk=None):
        snapshots = wiring.get_configuration_service().get_snapshots(self.project_id)
        return self.respond(ConfigurationSnapshotSerializer, snapshots, many=True)

    # =========================================================================
    # QUOTES
    # =========================================================================

    @action(detail=True, methods=['get', 'post'])
    def quotes(self, request, pk=None):
        service = wiring.get_quote_service()
        if request.method == 'GET':
            return self.respond(QuoteSerializer, service.get_quotes(self.project_id), many=True)

        options = self.validated(QuoteCreateSerializer)
        quote = service.create_draft(self.project_id, self.audit_context(), options)
        return self.respond(QuoteSerializer, quote, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['patch'], url_path=rf'quotes/(?P<quote_id>{UUID_PATTERN})')
    def quote_detail(self, request, pk=None, quote_id=None):
        updates = self.validated(QuoteUpdateSerializer, partial=True)
        quote = wiring.get_quote_service().update_draft(
            self.project_id, UUID(quote_id), updates, self.audit_context(),
        )
        return self.respond(QuoteSerializer, quote)

    @action(detail=True, methods=['post'], url_path=rf'quotes/(?P<quote_id>{UUID_PATTERN})/send')
    def send_quote(self, request, pk=None, quote_id=None):
        quote = wiring.get_quote_service().mark_as_sent(self.project_id, UUID(quote_id), self.audit_context())
        return self.respond(QuoteSerializer, quote)

    @action(detail=True, methods=['post'], url_path=rf'quotes/(?P<quote_id>{UUID_PATTERN})/accept')
    def accept_quote(self, request, pk=None, quote_id=None):
        quote = wiring.get_quote_service().mark_as_accepted(self.project_id, UUID(quote_id), self.audit_context())
        return self.respond(QuoteSerializer, quote)

    @action(detail=True, methods=['post'], url_path=rf'quotes/(?P<quote_id>{UUID_PATTERN})/reject')
    def reject_quote(self, request, pk=None, quote_id=None):
        reason = self.validated(QuoteRejectSerializer).get('reason')
        quote = wiring.get_quote_service().mark_as_rejected(
            self.project_id, UUID(quote_id), self.audit_context(), reason=reason,
        )
        return self.respond(QuoteSerializer, quote)

    @action(detail=True, methods=['post'], url_path=rf'quotes/(?P<quote_id>{UUID_PATTERN})/new-version')
    def new_quote_version(self, request, pk=None, quote_id=None):
        quote = wiring.get_quote_service().create_new_version(
            self.project_id, UUID(quote_id), self.audit_context(),
        )
        return self.respond(QuoteSerializer, quote, status=status.HTTP_201_CREATED)

    # =========================================================================
    # AMENDMENTS
    # =========================================================================

    @action(detail=True, methods=['get', 'post'])
    def amendments(self, request, pk=None):
        service = wiring.get_amendment_service()
        if request.method == 'GET':
            return self.respond(AmendmentSerializer, service.get_amendments(self.project_id), many=True)

        data = self.validated(AmendmentCreateSerializer)
        amendment = service.create_amendment(self.project_id, data, self.audit_context())
        return self.respond(AmendmentSerializer, amendment, status=status.HTTP_201_CREATED)

    # =========================================================================
    # BOM
    # =========================================================================

    def _latest_bom(self):
        project = wiring.get_project_service().get_project(self.project_id)
        if project.latest_bom is None:
            raise EntityNotFoundException("BOM snapshot", self.project_id)
        return project, project.latest_bom

    @action(detail=True, methods=['get'])
    def bom(self, request, pk=None):
        _, bom = self._latest_bom()
        return self.respond(BOMSnapshotSerializer, bom)

    @action(detail=True, methods=['get'], url_path='bom/estimation')
    def bom_estimation(self, request, pk=None):
        _, bom = self._latest_bom()
        return Response(bom_services.get_estimation_summary(bom))

    @action(detail=True, methods=['get'], url_path='bom/categories')
    def bom_categories(self, request, pk=None):
        _, bom = self._latest_bom()
        return Response(bom_services.get_cost_summary_by_category(bom))

    @action(detail=True, methods=['get'], url_path='bom/critical-path')
    def bom_critical_path(self, request, pk=None):
        _, bom = self._latest_bom()
        limit = request.query_params.get('limit', '5')
        limit = int(limit) if limit.isdigit() else 5
        items = bom_services.get_critical_path_items(bom, limit=limit)
        return self.respond(BOMItemSerializer, items, many=True)

    @action(detail=True, methods=['get'], url_path='bom/margin')
    def bom_margin(self, request, pk=None):
        """Margin of the current quote (or the configuration total) over the BOM cost."""
        project, bom = self._latest_bom()
        quote = project.current_quote
        sell_price = quote.total_excl_vat if quote else project.configuration.total_excl_vat
        return Response(bom_services.calculate_margin(sell_price, bom))
