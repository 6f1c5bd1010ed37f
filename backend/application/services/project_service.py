"""
Project Service.

Project creation, lifecycle transitions and the milestone effects they
trigger. A milestone's effects and the status change are applied to the
in-memory aggregate and persisted with a single save, so a crash half way
through leaves nothing behind.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional
from uuid import UUID

from application.ports import AuditContext, AuditLogPort, LibraryPort, SettingsProvider
from application.services.base import ProjectScopedService
from domain.auth.authorization import Permission
from domain.bom.services import generate_bom_snapshot
from domain.project import status_machine
from domain.project.aggregates import Project
from domain.project.entities import ConfigurationSnapshot, LibraryPins, ProjectConfiguration, ProjectDocument
from domain.project.repositories import ProjectRepository
from domain.project.rules import ProjectRules
from domain.shared.base_entity import utc_now
from domain.shared.events import MilestoneReached
from domain.shared.exceptions import InvalidOperationException, StatusTransitionException
from domain.shared.value_objects import (
    AuditAction,
    BOMStatus,
    MilestoneEffectType,
    ProjectStatus,
    ProjectType,
    SnapshotTrigger,
)

logger = logging.getLogger(__name__)


# Transitions that need more than project.edit
TRANSITION_PERMISSIONS = {
    ProjectStatus.ORDER_CONFIRMED: Permission.PROJECT_CONFIRM_ORDER,
    ProjectStatus.DELIVERED: Permission.PROJECT_MARK_DELIVERED,
}


class ProjectService(ProjectScopedService):

    def __init__(
        self,
        repository: ProjectRepository,
        audit: AuditLogPort,
        settings: Optional[SettingsProvider] = None,
        library: Optional[LibraryPort] = None,
    ):
        super().__init__(repository, audit, settings)
        self.library = library

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get_project(self, project_id: UUID) -> Project:
        return self._load(project_id)

    def list_projects(
        self,
        status: Optional[ProjectStatus] = None,
        project_type: Optional[ProjectType] = None,
        client_id: Optional[str] = None,
        include_archived: bool = False,
    ) -> List[Project]:
        return self.repository.get_all(
            status=status,
            project_type=project_type,
            client_id=client_id,
            include_archived=include_archived,
        )

    def get_project_summary(self, project_id: UUID) -> Dict[str, Any]:
        project = self._load(project_id)
        quote = project.current_quote
        return {
            "project": project,
            "current_quote": {
                "id": quote.id,
                "quote_number": quote.quote_number,
                "status": quote.effective_status().value,
                "total": quote.total_incl_vat,
            } if quote else None,
            "status_info": status_machine.get_status_info(project.status),
            "is_editable": project.is_editable,
            "is_frozen": project.is_frozen,
            "is_locked": project.is_locked,
            "valid_next_statuses": [s.value for s in status_machine.get_valid_next_statuses(project.status)],
        }

    def validate_transition(self, project_id: UUID, target: ProjectStatus) -> status_machine.TransitionValidation:
        return self._load(project_id).validate_transition(target)

    def get_audit_history(self, project_id: UUID):
        return self.audit.get_history("Project", project_id)

    # =========================================================================
    # COMMANDS
    # =========================================================================

    def create_project(self, data: Mapping[str, Any], context: AuditContext) -> Project:
        context.require(Permission.PROJECT_CREATE)
        self._raise_if_invalid(ProjectRules.validate(data))

        with self.repository.atomic():
            project = Project.create(
                project_number=self.repository.next_project_number(utc_now().year),
                title=data["title"].strip(),
                client_id=str(data["client_id"]),
                project_type=ProjectType(data["type"]),
                description=data.get("description"),
                configuration=ProjectConfiguration(
                    boat_model_version_id=data.get("boat_model_version_id"),
                    propulsion_type=data.get("propulsion_type"),
                    vat_rate=self._pricing().vat_rate,
                ),
                user_id=context.user_id,
            )
            project = self._save(project)
            self.audit.log_create(context, "Project", project.id, {
                "project_number": project.project_number,
                "title": project.title,
                "type": project.type.value,
                "client_id": project.client_id,
            })

        logger.info("Created project %s", project.project_number)
        return project

    def transition_status(
        self,
        project_id: UUID,
        target: ProjectStatus,
        context: AuditContext,
        force: bool = False,
        reason: Optional[str] = None,
    ) -> Project:
        with self.repository.atomic():
            project = self._load(project_id)
            self.apply_transition(project, target, context, force=force, reason=reason)
            project = self._save(project)
        return project

    def apply_transition(
        self,
        project: Project,
        target: ProjectStatus,
        context: AuditContext,
        force: bool = False,
        reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> List[MilestoneEffectType]:
        """
        Validate, advance the status and run the milestone effects in order.

        Mutates ``project`` and writes audit entries but does not save; the
        caller owns the surrounding atomic block. ``force`` skips business
        prerequisites, never the lifecycle graph.
        """
        permission = TRANSITION_PERMISSIONS.get(target)
        if permission:
            context.require(permission)

        validation = project.validate_transition(target)
        if not status_machine.can_transition(project.status, target) or (validation.errors and not force):
            logger.warning(
                "Rejected transition of %s from %s to %s: %s",
                project.project_number, project.status.name, target.name, "; ".join(validation.errors),
            )
            raise StatusTransitionException(
                "Project",
                project.status.value,
                target.value,
                [s.value for s in status_machine.get_valid_next_statuses(project.status)],
                list(validation.errors),
            )

        now = now or utc_now()
        old_status = project.change_status(target, context.user_id, reason)

        effects = status_machine.get_milestone_effects(target)
        snapshot: Optional[ConfigurationSnapshot] = None
        for effect in effects:
            snapshot = self._apply_effect(project, effect.type, context, now, snapshot) or snapshot
        if effects:
            project.add_domain_event(MilestoneReached(
                project_id=project.id,
                status=target.value,
                effects=tuple(effect.type.value for effect in effects),
            ))

        self.audit.log_status_transition(
            context, "Project", project.id, old_status.name, target.name, reason,
        )
        logger.info(
            "Project %s: %s -> %s (%d milestone effects)",
            project.project_number, old_status.name, target.name, len(effects),
        )
        return [effect.type for effect in effects]

    def _apply_effect(
        self,
        project: Project,
        effect: MilestoneEffectType,
        context: AuditContext,
        now: datetime,
        snapshot: Optional[ConfigurationSnapshot],
    ) -> Optional[ConfigurationSnapshot]:
        if effect == MilestoneEffectType.LOCK_QUOTE:
            locked = project.lock_quote(now)
            if locked:
                self.audit.log(context, AuditAction.UPDATE, "ProjectQuote", locked.id,
                               f"Locked quote {locked.quote_number}")

        elif effect == MilestoneEffectType.FREEZE_CONFIGURATION:
            snapshot = project.freeze_configuration(
                context.user_id, SnapshotTrigger.ORDER_CONFIRMED, "Order confirmed", now,
            )
            self.audit.log_freeze(context, project.id, snapshot.id)
            logger.info("Froze configuration of %s as snapshot #%d", project.project_number, snapshot.snapshot_number)
            return snapshot

        elif effect == MilestoneEffectType.GENERATE_BOM:
            if snapshot is None:
                raise InvalidOperationException("No configuration snapshot found")
            bom = generate_bom_snapshot(
                snapshot,
                snapshot_number=len(project.bom_snapshots) + 1,
                estimation_ratio=self._pricing().cost_estimation_ratio,
                created_by=context.user_id,
                status=BOMStatus.BASELINE,
            )
            project.add_bom_snapshot(bom)
            self.audit.log(
                context, AuditAction.CREATE, "BOMSnapshot", bom.id,
                f"Generated BOM baseline #{bom.snapshot_number}",
                after={
                    "snapshot_number": bom.snapshot_number,
                    "total_parts": str(bom.total_parts),
                    "total_cost": str(bom.total_cost_excl_vat),
                },
            )
            logger.info("Generated BOM baseline #%d for %s", bom.snapshot_number, project.project_number)

        elif effect == MilestoneEffectType.PIN_LIBRARY_VERSIONS:
            pins = self._resolve_pins(project, context, now, snapshot)
            project.pin_library_versions(pins)
            self.audit.log(
                context, AuditAction.UPDATE, "Project", project.id,
                f"Pinned library versions: {len(pins.template_version_ids)} templates, "
                f"{len(pins.procedure_version_ids)} procedures",
            )

        elif effect == MilestoneEffectType.INITIALIZE_PRODUCTION:
            if project.initialize_production():
                self.audit.log(context, AuditAction.UPDATE, "Project", project.id,
                               "Initialized production stages")

        elif effect == MilestoneEffectType.FINALIZE_DOCUMENTS:
            finalized = project.finalize_documents(context.user_id, now)
            if finalized:
                self.audit.log(context, AuditAction.UPDATE, "Project", project.id,
                               f"Finalized {len(finalized)} documents")

        return None

    def _resolve_pins(
        self,
        project: Project,
        context: AuditContext,
        now: datetime,
        snapshot: Optional[ConfigurationSnapshot],
    ) -> LibraryPins:
        versions = self.library.get_current_versions() if self.library else None
        return LibraryPins(
            boat_model_version_id=project.configuration.boat_model_version_id or "",
            catalog_version_id=(versions and versions.catalog_version_id) or f"catalog-{now.year}",
            configuration_snapshot_id=snapshot.id if snapshot else None,
            template_version_ids=dict(versions.template_version_ids) if versions else {},
            procedure_version_ids=tuple(versions.procedure_version_ids) if versions else (),
            pinned_at=now,
            pinned_by=context.user_id,
        )

    def archive(self, project_id: UUID, reason: str, context: AuditContext) -> Project:
        context.require(Permission.PROJECT_ARCHIVE)
        with self.repository.atomic():
            project = self._load(project_id)
            if project.is_frozen and project.status != ProjectStatus.CLOSED:
                raise InvalidOperationException(
                    "Cannot archive a frozen project that is not closed",
                    current_state=project.status.value,
                )
            self._raise_if_err(ProjectRules.can_archive(project), project.status.value)
            project.archive(context.user_id)
            project = self._save(project)
            self.audit.log_archive(context, "Project", project.id, reason)
        logger.info("Archived project %s", project.project_number)
        return project

    def emergency_unlock(self, project_id: UUID, reason: str, context: AuditContext) -> Project:
        context.require(Permission.EMERGENCY_UNLOCK)
        with self.repository.atomic():
            project = self._load(project_id)
            project.emergency_unlock(context.user_id)
            project = self._save(project)
            self.audit.log_emergency_unlock(context, project.id, reason)
        logger.warning("EMERGENCY UNLOCK of %s by %s: %s", project.project_number, context.user_name, reason)
        return project

    def update_project_type(self, project_id: UUID, project_type: ProjectType, context: AuditContext) -> Project:
        context.require(Permission.PROJECT_EDIT)
        with self.repository.atomic():
            project = self._load(project_id)
            old_type = project.type
            project.change_type(project_type, context.user_id)
            project = self._save(project)
            self.audit.log(
                context, AuditAction.UPDATE, "Project", project.id,
                f"Changed project type from {old_type.name} to {project_type.name}",
                before={"type": old_type.value}, after={"type": project_type.value},
            )
        return project

    def register_document(
        self,
        project_id: UUID,
        document_type: str,
        title: str,
        context: AuditContext,
    ) -> ProjectDocument:
        with self.repository.atomic():
            project = self._load(project_id)
            version = sum(1 for d in project.documents if d.document_type == document_type) + 1
            document = ProjectDocument(
                document_type=document_type,
                title=title,
                version=version,
                created_by=context.user_id,
            )
            project.register_document(document)
            self._save(project)
            self.audit.log(
                context, AuditAction.GENERATE_DOCUMENT, "ProjectDocument", document.id,
                f"Generated {document_type}",
                metadata={"project_id": str(project.id), "document_type": document_type},
            )
        return document
