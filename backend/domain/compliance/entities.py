"""
Compliance Domain - Entities.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterator, List, Optional, Tuple
from uuid import UUID

from domain.shared.base_entity import Entity, utc_now
from domain.shared.exceptions import InvalidOperationException, ValidationException
from domain.shared.value_objects import (
    AttachmentType,
    CertificationType,
    ChecklistItemStatus,
    ChecklistItemType,
    ComplianceStatus,
)


CERTIFICATION_LABELS = {
    CertificationType.CE: "CE Marking (RCD)",
    CertificationType.ES_TRIN: "ES-TRIN",
    CertificationType.LLOYDS: "Lloyds Classification",
    CertificationType.OTHER: "Other Certification",
}

CHECKLIST_TYPE_LABELS = {
    ChecklistItemType.DOC: "Documentation",
    ChecklistItemType.INSPECTION: "Inspection",
    ChecklistItemType.CALC: "Calculation",
    ChecklistItemType.CONFIRM: "Confirmation",
}

CHECKLIST_STATUS_LABELS = {
    ChecklistItemStatus.NOT_STARTED: "Not Started",
    ChecklistItemStatus.IN_PROGRESS: "In Progress",
    ChecklistItemStatus.PASSED: "Passed",
    ChecklistItemStatus.FAILED: "Failed",
    ChecklistItemStatus.NA: "N/A",
}


@dataclass(eq=False)
class Attachment(Entity):
    type: AttachmentType = AttachmentType.OTHER
    filename: str = ""
    mime_type: str = "application/octet-stream"
    size_bytes: int = 0
    url: Optional[str] = None
    uploaded_at: Optional[datetime] = None
    uploaded_by: Optional[str] = None
    notes: Optional[str] = None


@dataclass(eq=False)
class ComplianceChecklistItem(Entity):
    """
    A single piece of evidence to collect.
    
    PASSED and NA both satisfy a mandatory item; NA must carry a reason.
    """
    
    chapter_id: Optional[UUID] = None
    section_id: Optional[UUID] = None
    title: str = ""
    type: ChecklistItemType = ChecklistItemType.DOC
    status: ChecklistItemStatus = ChecklistItemStatus.NOT_STARTED
    mandatory: bool = True
    notes: Optional[str] = None
    na_reason: Optional[str] = None
    attachments: List[Attachment] = field(default_factory=list)
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    sort_order: int = 0
    
    def set_status(
        self,
        status: ChecklistItemStatus,
        user: Optional[str] = None,
        na_reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> None:
        if na_reason is not None:
            self.na_reason = na_reason
        if status == ChecklistItemStatus.NA and not (self.na_reason or "").strip():
            raise ValidationException("NA status requires a reason", field="na_reason")
        self.status = status
        if status in (ChecklistItemStatus.PASSED, ChecklistItemStatus.FAILED):
            self.verified_by = user
            self.verified_at = now or utc_now()


class _Finalizable:
    """DRAFT/FINAL bookkeeping shared by packs, chapters and sections."""
    
    _kind = "item"
    
    @property
    def is_final(self) -> bool:
        return self.status == ComplianceStatus.FINAL
    
    def ensure_editable(self) -> None:
        if self.is_final:
            raise InvalidOperationException(
                f"Cannot modify a finalized {self._kind}",
                current_state=self.status.value,
            )
    
    def finalize(self, user: Optional[str] = None, now: Optional[datetime] = None) -> None:
        self.status = ComplianceStatus.FINAL
        if self.finalized_at is None:
            self.finalized_at = now or utc_now()
            self.finalized_by = user


@dataclass(eq=False)
class ComplianceSection(_Finalizable, Entity):
    _kind = "section"
    
    chapter_id: Optional[UUID] = None
    section_number: str = ""
    title: str = ""
    description: Optional[str] = None
    status: ComplianceStatus = ComplianceStatus.DRAFT
    attachments: List[Attachment] = field(default_factory=list)
    checklist: List[ComplianceChecklistItem] = field(default_factory=list)
    notes: Optional[str] = None
    sort_order: int = 0
    finalized_at: Optional[datetime] = None
    finalized_by: Optional[str] = None


@dataclass(eq=False)
class ComplianceChapter(_Finalizable, Entity):
    _kind = "chapter"
    
    certification_id: Optional[UUID] = None
    chapter_number: str = ""
    title: str = ""
    description: Optional[str] = None
    status: ComplianceStatus = ComplianceStatus.DRAFT
    attachments: List[Attachment] = field(default_factory=list)
    sections: List[ComplianceSection] = field(default_factory=list)
    checklist: List[ComplianceChecklistItem] = field(default_factory=list)
    notes: Optional[str] = None
    sort_order: int = 0
    finalized_at: Optional[datetime] = None
    finalized_by: Optional[str] = None
    
    def get_section(self, section_id: UUID) -> Optional[ComplianceSection]:
        return next((s for s in self.sections if s.id == section_id), None)
    
    def iter_checklists(self) -> Iterator[Tuple[Optional[ComplianceSection], List[ComplianceChecklistItem]]]:
        """The chapter's own checklist first, then each section's."""
        yield None, self.checklist
        for section in self.sections:
            yield section, section.checklist


@dataclass(eq=False)
class ComplianceCertification(_Finalizable, Entity):
    _kind = "certification"
    
    project_id: Optional[UUID] = None
    type: CertificationType = CertificationType.CE
    name: str = ""
    version: int = 1
    status: ComplianceStatus = ComplianceStatus.DRAFT
    chapters: List[ComplianceChapter] = field(default_factory=list)
    notes: Optional[str] = None
    created_by: Optional[str] = None
    finalized_at: Optional[datetime] = None
    finalized_by: Optional[str] = None
    
    @property
    def label(self) -> str:
        return CERTIFICATION_LABELS[self.type]
    
    def get_chapter(self, chapter_id: UUID) -> Optional[ComplianceChapter]:
        return next((c for c in self.chapters if c.id == chapter_id), None)
    
    def find_checklist_item(
        self, item_id: UUID
    ) -> Optional[Tuple[ComplianceChapter, Optional[ComplianceSection], ComplianceChecklistItem]]:
        for chapter in self.chapters:
            for section, checklist in chapter.iter_checklists():
                for item in checklist:
                    if item.id == item_id:
                        return chapter, section, item
        return None
