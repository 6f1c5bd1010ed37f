"""
Project Domain - Aggregates.

Project is the aggregate root for a boat-building order: the live
configuration, and the append-only history of snapshots, quotes, BOM
baselines, amendments and certification packs hanging off it.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from domain.bom.entities import BOMSnapshot
from domain.compliance.entities import ComplianceCertification
from domain.shared.base_aggregate import AggregateRoot
from domain.shared.base_entity import utc_now
from domain.shared.events import (
    BOMBaselineGenerated,
    ConfigurationFrozen,
    ProjectCreated,
    ProjectStatusChanged,
    QuoteStatusChanged,
)
from domain.shared.exceptions import (
    InvalidOperationException,
    StatusTransitionException,
    ValidationException,
)
from domain.shared.value_objects import (
    DocumentStatus,
    ProjectStatus,
    ProjectType,
    QuoteStatus,
    SnapshotTrigger,
)

from . import status_machine
from .entities import (
    DEFAULT_PRODUCTION_STAGES,
    ConfigurationSnapshot,
    LibraryPins,
    ProductionStage,
    ProjectAmendment,
    ProjectConfiguration,
    ProjectDocument,
    ProjectQuote,
)


@dataclass(eq=False)
class Project(AggregateRoot):
    """
    Project - the main aggregate root of the boatyard.

    Exactly one configuration is live at a time. Snapshots, BOM baselines
    and amendments are append-only; a quote becomes read-only once it
    leaves DRAFT.

    Commands mutate the aggregate in memory only. The caller persists the
    whole aggregate in a single write so a milestone (freeze, BOM, pins)
    lands all at once or not at all.
    """

    # Identification
    project_number: str = ""
    title: str = ""
    description: Optional[str] = None
    type: ProjectType = ProjectType.NEW_BUILD
    client_id: str = ""

    # Lifecycle
    status: ProjectStatus = ProjectStatus.DRAFT

    # Live configuration
    configuration: ProjectConfiguration = field(default_factory=ProjectConfiguration)

    # History (append-only)
    configuration_snapshots: List[ConfigurationSnapshot] = field(default_factory=list)
    quotes: List[ProjectQuote] = field(default_factory=list)
    current_quote_id: Optional[UUID] = None
    bom_snapshots: List[BOMSnapshot] = field(default_factory=list)
    amendments: List[ProjectAmendment] = field(default_factory=list)
    certifications: List[ComplianceCertification] = field(default_factory=list)
    library_pins: Optional[LibraryPins] = None

    # Production and documents
    production_stages: List[ProductionStage] = field(default_factory=list)
    documents: List[ProjectDocument] = field(default_factory=list)

    archived_at: Optional[datetime] = None
    archived_by: Optional[str] = None

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def is_archived(self) -> bool:
        return self.archived_at is not None

    @property
    def is_editable(self) -> bool:
        return status_machine.is_editable(self.status)

    @property
    def is_frozen(self) -> bool:
        return status_machine.is_frozen(self.status)

    @property
    def is_locked(self) -> bool:
        return status_machine.is_locked(self.status)

    @property
    def current_quote(self) -> Optional[ProjectQuote]:
        if not self.quotes:
            return None
        if self.current_quote_id:
            return self.get_quote(self.current_quote_id)
        return self.quotes[-1]

    @property
    def latest_configuration_snapshot(self) -> Optional[ConfigurationSnapshot]:
        return self.configuration_snapshots[-1] if self.configuration_snapshots else None

    @property
    def latest_bom(self) -> Optional[BOMSnapshot]:
        return self.bom_snapshots[-1] if self.bom_snapshots else None

    def get_quote(self, quote_id: UUID) -> Optional[ProjectQuote]:
        for quote in self.quotes:
            if quote.id == quote_id:
                return quote
        return None

    def get_snapshot(self, snapshot_id: UUID) -> Optional[ConfigurationSnapshot]:
        for snapshot in self.configuration_snapshots:
            if snapshot.id == snapshot_id:
                return snapshot
        return None

    def get_certification(self, certification_id: UUID) -> Optional[ComplianceCertification]:
        for certification in self.certifications:
            if certification.id == certification_id:
                return certification
        return None

    def quotes_with_status(self, status: QuoteStatus) -> List[ProjectQuote]:
        return [quote for quote in self.quotes if quote.status == status]

    # =========================================================================
    # STATUS MANAGEMENT
    # =========================================================================

    def transition_context(self) -> status_machine.TransitionContext:
        """Facts the status machine needs to check business prerequisites."""
        return status_machine.TransitionContext(
            has_quote_draft=bool(self.quotes_with_status(QuoteStatus.DRAFT)),
            has_quote_sent=bool(self.quotes_with_status(QuoteStatus.SENT)),
            has_quote_accepted=bool(self.quotes_with_status(QuoteStatus.ACCEPTED)),
            configuration_item_count=len(self.configuration.items),
        )

    def validate_transition(self, target: ProjectStatus) -> status_machine.TransitionValidation:
        return status_machine.validate_transition(self.status, target, self.transition_context())

    def change_status(
        self,
        new_status: ProjectStatus,
        user_id: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> ProjectStatus:
        """Move along one edge of the lifecycle graph. Returns the old status."""
        if not status_machine.can_transition(self.status, new_status):
            raise StatusTransitionException(
                "Project",
                self.status.value,
                new_status.value,
                [s.value for s in status_machine.get_valid_next_statuses(self.status)],
            )

        old_status = self.status
        self.status = new_status
        self.mark_updated(user_id)

        self.add_domain_event(ProjectStatusChanged(
            project_id=self.id,
            old_status=old_status.value,
            new_status=new_status.value,
            reason=reason,
            changed_by=user_id,
        ))
        return old_status

    def change_type(self, project_type: ProjectType, user_id: Optional[str] = None) -> None:
        if self.status == ProjectStatus.CLOSED:
            raise InvalidOperationException(
                "Cannot change project type when project is closed",
                current_state=self.status.value,
            )
        self.type = project_type
        self.mark_updated(user_id)

    def archive(self, user_id: Optional[str] = None, now: Optional[datetime] = None) -> None:
        self.archived_at = now or utc_now()
        self.archived_by = user_id
        self.mark_updated(user_id)

    # =========================================================================
    # CONFIGURATION FREEZE & SNAPSHOTS
    # =========================================================================

    def take_snapshot(
        self,
        trigger: SnapshotTrigger,
        reason: Optional[str] = None,
        user_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ConfigurationSnapshot:
        """Append an immutable copy of the live configuration."""
        snapshot = ConfigurationSnapshot(
            project_id=self.id,
            snapshot_number=len(self.configuration_snapshots) + 1,
            data=self.configuration.copy(),
            trigger=trigger,
            trigger_reason=reason,
            created_by=user_id,
            created_at=now or utc_now(),
        )
        self.configuration_snapshots.append(snapshot)
        return snapshot

    def freeze_configuration(
        self,
        user_id: Optional[str] = None,
        trigger: SnapshotTrigger = SnapshotTrigger.ORDER_CONFIRMED,
        reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ConfigurationSnapshot:
        """
        Freeze the live configuration and capture it.

        The snapshot is taken after the frozen flag is set, so it is identical
        to the configuration at the freeze instant.
        """
        if self.configuration.is_frozen and trigger != SnapshotTrigger.AMENDMENT:
            raise InvalidOperationException("Configuration is already frozen")

        now = now or utc_now()
        self.configuration.is_frozen = True
        self.configuration.frozen_at = now
        self.configuration.frozen_by = user_id
        snapshot = self.take_snapshot(trigger, reason, user_id, now)
        self.mark_updated(user_id)

        self.add_domain_event(ConfigurationFrozen(
            project_id=self.id,
            snapshot_id=snapshot.id,
            trigger=trigger.value,
        ))
        return snapshot

    def emergency_unlock(self, user_id: Optional[str] = None) -> None:
        """Unfreeze the configuration while keeping every snapshot."""
        if not self.configuration.is_frozen:
            raise InvalidOperationException("Project configuration is not frozen")
        self.configuration.is_frozen = False
        self.configuration.frozen_at = None
        self.configuration.frozen_by = None
        self.mark_updated(user_id)

    # =========================================================================
    # BOM & LIBRARY PINS
    # =========================================================================

    def add_bom_snapshot(self, bom: BOMSnapshot) -> None:
        if bom.configuration_snapshot_id is None or self.get_snapshot(bom.configuration_snapshot_id) is None:
            raise ValidationException(
                "BOM must reference a configuration snapshot of this project",
                field="configuration_snapshot_id",
                value=bom.configuration_snapshot_id,
            )
        bom.project_id = self.id
        self.bom_snapshots.append(bom)
        self.add_domain_event(BOMBaselineGenerated(
            project_id=self.id,
            bom_snapshot_id=bom.id,
            configuration_snapshot_id=bom.configuration_snapshot_id,
            total_cost_excl_vat=bom.total_cost_excl_vat,
        ))

    def pin_library_versions(self, pins: LibraryPins) -> None:
        if self.library_pins is not None:
            raise InvalidOperationException("Library versions are already pinned")
        self.library_pins = pins

    # =========================================================================
    # QUOTES
    # =========================================================================

    def add_quote(self, quote: ProjectQuote, now: Optional[datetime] = None) -> None:
        """Append a new DRAFT quote, superseding any earlier drafts."""
        now = now or utc_now()
        for existing in self.quotes_with_status(QuoteStatus.DRAFT):
            self._supersede(existing, quote.id, now)
        quote.project_id = self.id
        self.quotes.append(quote)
        self.current_quote_id = quote.id

    def set_quote_status(self, quote: ProjectQuote, status: QuoteStatus) -> QuoteStatus:
        old_status = quote.status
        quote.status = status
        quote.touch()
        self.add_domain_event(QuoteStatusChanged(
            project_id=self.id,
            quote_id=quote.id,
            old_status=old_status.value,
            new_status=status.value,
        ))
        return old_status

    def supersede_open_quotes(self, keep: ProjectQuote, now: datetime) -> List[ProjectQuote]:
        """Supersede every DRAFT or SENT quote other than ``keep``."""
        superseded = []
        for quote in self.quotes:
            if quote.id != keep.id and quote.status in (QuoteStatus.DRAFT, QuoteStatus.SENT):
                self._supersede(quote, keep.id, now)
                superseded.append(quote)
        return superseded

    def lock_quote(self, now: Optional[datetime] = None) -> Optional[ProjectQuote]:
        """
        Lock the latest SENT quote and supersede the other open quotes.

        ``now`` must be the instant of the status change that triggered it.
        """
        now = now or utc_now()
        sent = self.quotes_with_status(QuoteStatus.SENT)
        if not sent:
            return None
        locked = max(sent, key=lambda q: q.version)
        locked.locked_at = now
        self.supersede_open_quotes(locked, now)
        self.current_quote_id = locked.id
        return locked

    def _supersede(self, quote: ProjectQuote, by_quote_id: UUID, now: datetime) -> None:
        old_status = quote.status
        quote.supersede(by_quote_id, now)
        self.add_domain_event(QuoteStatusChanged(
            project_id=self.id,
            quote_id=quote.id,
            old_status=old_status.value,
            new_status=QuoteStatus.SUPERSEDED.value,
        ))

    # =========================================================================
    # AMENDMENTS & CERTIFICATIONS
    # =========================================================================

    def record_amendment(self, amendment: ProjectAmendment) -> None:
        if amendment.before_snapshot_id == amendment.after_snapshot_id:
            raise ValidationException(
                "Amendment requires distinct before and after snapshots",
                field="after_snapshot_id",
            )
        amendment.project_id = self.id
        self.amendments.append(amendment)

    def add_certification(self, certification: ComplianceCertification) -> None:
        certification.project_id = self.id
        self.certifications.append(certification)

    # =========================================================================
    # PRODUCTION & DOCUMENTS
    # =========================================================================

    def initialize_production(self) -> List[ProductionStage]:
        """Seed the fixed production pipeline. A no-op when stages exist."""
        if self.production_stages:
            return []
        self.production_stages = [
            ProductionStage(project_id=self.id, code=code, name=name, order=order, estimated_days=days)
            for order, (code, name, days) in enumerate(DEFAULT_PRODUCTION_STAGES, start=1)
        ]
        return list(self.production_stages)

    def register_document(self, document: ProjectDocument) -> None:
        document.project_id = self.id
        document.status = DocumentStatus.DRAFT
        self.documents.append(document)

    def finalize_documents(self, user_id: Optional[str] = None, now: Optional[datetime] = None) -> List[ProjectDocument]:
        """Mark DRAFT documents FINAL. Already final documents are left alone."""
        now = now or utc_now()
        finalized = []
        for document in self.documents:
            if document.status == DocumentStatus.DRAFT:
                document.status = DocumentStatus.FINAL
                document.finalized_at = now
                document.finalized_by = user_id
                finalized.append(document)
        return finalized

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def validate(self) -> None:
        if not self.title:
            raise ValidationException("Title is required", "title")
        if not self.client_id:
            raise ValidationException("Client is required", "client_id")

    # =========================================================================
    # FACTORY METHODS
    # =========================================================================

    @classmethod
    def create(
        cls,
        project_number: str,
        title: str,
        client_id: str,
        project_type: ProjectType = ProjectType.NEW_BUILD,
        description: Optional[str] = None,
        configuration: Optional[ProjectConfiguration] = None,
        user_id: Optional[str] = None,
    ) -> Project:
        """Factory method to create a new project."""
        project = cls(
            project_number=project_number,
            title=title,
            client_id=client_id,
            type=project_type,
            description=description,
            configuration=configuration or ProjectConfiguration(),
            created_by=user_id,
            updated_by=user_id,
        )
        project.validate()

        project.add_domain_event(ProjectCreated(
            project_id=project.id,
            project_number=project_number,
            created_by=user_id,
        ))
        return project
