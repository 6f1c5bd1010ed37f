"""
Compliance Service.

Certification packs (CE, ES-TRIN, Lloyds) stored on the project. Packs,
chapters and sections each move DRAFT -> FINAL independently; anything
FINAL rejects further edits. Finalizing a pack runs the checklist
validator first and needs an explicit acknowledgement when it warns.
"""

import copy
import logging
from typing import Any, List, Mapping, Optional, Tuple
from uuid import UUID, uuid4

from application.ports import AuditContext
from application.services.base import ProjectScopedService
from domain.compliance import validation
from domain.compliance.entities import (
    Attachment,
    ComplianceCertification,
    ComplianceChapter,
    ComplianceChecklistItem,
    ComplianceSection,
)
from domain.compliance.scaffolds import get_chapter_checklist, get_chapter_scaffold
from domain.project.aggregates import Project
from domain.shared.base_entity import utc_now
from domain.shared.events import CertificationFinalized
from domain.shared.exceptions import EntityNotFoundException, InvalidOperationException, ValidationException
from domain.shared.value_objects import (
    AttachmentType,
    AuditAction,
    CertificationType,
    ChecklistItemStatus,
    ChecklistItemType,
    ComplianceStatus,
)

logger = logging.getLogger(__name__)


def build_attachment(data: Mapping[str, Any], context: AuditContext) -> Attachment:
    if not data.get("filename"):
        raise ValidationException("Filename is required", field="filename")
    return Attachment(
        type=AttachmentType(data.get("type") or AttachmentType.OTHER),
        filename=data["filename"],
        mime_type=data.get("mime_type") or "application/octet-stream",
        size_bytes=int(data.get("size_bytes") or 0),
        url=data.get("url"),
        uploaded_at=utc_now(),
        uploaded_by=context.user_name,
        notes=data.get("notes"),
    )


def pop_attachment(attachments: List[Attachment], attachment_id: UUID) -> Attachment:
    attachment = next((a for a in attachments if a.id == attachment_id), None)
    if attachment is None:
        raise EntityNotFoundException("Attachment", attachment_id)
    attachments.remove(attachment)
    return attachment


def _reset_item(item: ComplianceChecklistItem, chapter_id: UUID, section_id: Optional[UUID]) -> None:
    item.id = uuid4()
    item.chapter_id = chapter_id
    item.section_id = section_id
    item.status = ChecklistItemStatus.NOT_STARTED
    item.verified_by = None
    item.verified_at = None


def _reset_finalizable(entity) -> None:
    entity.status = ComplianceStatus.DRAFT
    entity.finalized_at = None
    entity.finalized_by = None


class ComplianceService(ProjectScopedService):

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    @staticmethod
    def _certification(project: Project, certification_id: UUID) -> ComplianceCertification:
        certification = project.get_certification(certification_id)
        if certification is None:
            raise EntityNotFoundException("Certification", certification_id)
        return certification

    @staticmethod
    def _chapter(certification: ComplianceCertification, chapter_id: UUID) -> ComplianceChapter:
        chapter = certification.get_chapter(chapter_id)
        if chapter is None:
            raise EntityNotFoundException("Chapter", chapter_id)
        return chapter

    @staticmethod
    def _section(chapter: ComplianceChapter, section_id: UUID) -> ComplianceSection:
        section = chapter.get_section(section_id)
        if section is None:
            raise EntityNotFoundException("Section", section_id)
        return section

    def _editable_chapter(
        self, project: Project, certification_id: UUID, chapter_id: UUID,
    ) -> Tuple[ComplianceCertification, ComplianceChapter]:
        certification = self._certification(project, certification_id)
        certification.ensure_editable()
        chapter = self._chapter(certification, chapter_id)
        chapter.ensure_editable()
        return certification, chapter

    def _editable_item(
        self, project: Project, certification_id: UUID, item_id: UUID,
    ) -> Tuple[ComplianceChapter, Optional[ComplianceSection], ComplianceChecklistItem]:
        certification = self._certification(project, certification_id)
        certification.ensure_editable()
        found = certification.find_checklist_item(item_id)
        if found is None:
            raise EntityNotFoundException("Checklist item", item_id)
        chapter, section, item = found
        chapter.ensure_editable()
        if section is not None:
            section.ensure_editable()
        return chapter, section, item

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get_certifications(self, project_id: UUID) -> List[ComplianceCertification]:
        return list(self._load(project_id).certifications)

    def get_certification(self, project_id: UUID, certification_id: UUID) -> ComplianceCertification:
        return self._certification(self._load(project_id), certification_id)

    def get_certification_stats(self, project_id: UUID, certification_id: UUID) -> validation.CertificationStats:
        return validation.get_certification_stats(self.get_certification(project_id, certification_id))

    def validate_certification(
        self, project_id: UUID, certification_id: UUID,
    ) -> validation.CertificationValidationResult:
        return validation.validate_certification(self.get_certification(project_id, certification_id))

    # =========================================================================
    # CERTIFICATIONS
    # =========================================================================

    def initialize_certification(
        self, project_id: UUID, data: Mapping[str, Any], context: AuditContext,
    ) -> ComplianceCertification:
        """Create a pack for ``data["type"]`` with chapters and checklists from the scaffold."""
        certification_type = CertificationType(data["type"])

        with self.repository.atomic():
            project = self._load(project_id)
            in_progress = [
                c for c in project.certifications
                if c.type == certification_type and not c.is_final
            ]
            certification = ComplianceCertification(
                type=certification_type,
                version=1,
                notes=data.get("notes"),
                created_by=context.user_name,
            )
            if in_progress:
                raise InvalidOperationException(
                    f"A {certification.label} certification is already in progress",
                )
            certification.name = data.get("name") or certification.label

            for order, template in enumerate(get_chapter_scaffold(certification_type), start=1):
                chapter = ComplianceChapter(
                    certification_id=certification.id,
                    chapter_number=template.chapter_number,
                    title=template.title,
                    description=template.description,
                    sort_order=order,
                )
                chapter.checklist = [
                    ComplianceChecklistItem(
                        chapter_id=chapter.id,
                        title=item.title,
                        type=item.type,
                        mandatory=item.mandatory,
                        sort_order=position,
                    )
                    for position, item in enumerate(
                        get_chapter_checklist(certification_type, template.chapter_number), start=1,
                    )
                ]
                certification.chapters.append(chapter)

            project.add_certification(certification)
            self._save(project)
            self.audit.log(
                context, AuditAction.CREATE, "ComplianceCertification", certification.id,
                f"Initialized {certification.label} certification for project",
                metadata={"project_id": str(project.id), "type": certification_type.value},
            )

        logger.info("Initialized %s certification with %d chapters on %s",
                    certification.label, len(certification.chapters), project.project_number)
        return certification

    def update_certification_notes(
        self, project_id: UUID, certification_id: UUID, notes: Optional[str], context: AuditContext,
    ) -> ComplianceCertification:
        with self.repository.atomic():
            project = self._load(project_id)
            certification = self._certification(project, certification_id)
            certification.ensure_editable()
            certification.notes = notes
            certification.touch()
            self._save(project)
        return certification

    def duplicate_certification(
        self, project_id: UUID, certification_id: UUID, context: AuditContext,
    ) -> ComplianceCertification:
        """Deep copy a pack as a new DRAFT version with every checklist item reset."""
        with self.repository.atomic():
            project = self._load(project_id)
            original = self._certification(project, certification_id)

            duplicate = copy.deepcopy(original)
            duplicate.id = uuid4()
            duplicate.created_at = duplicate.updated_at = utc_now()
            duplicate.created_by = context.user_name
            duplicate.version = sum(1 for c in project.certifications if c.type == original.type) + 1
            duplicate.notes = f"Duplicated from v{original.version}"
            _reset_finalizable(duplicate)

            for chapter in duplicate.chapters:
                chapter.id = uuid4()
                chapter.certification_id = duplicate.id
                _reset_finalizable(chapter)
                for item in chapter.checklist:
                    _reset_item(item, chapter.id, None)
                for section in chapter.sections:
                    section.id = uuid4()
                    section.chapter_id = chapter.id
                    _reset_finalizable(section)
                    for item in section.checklist:
                        _reset_item(item, chapter.id, section.id)

            project.add_certification(duplicate)
            self._save(project)
            self.audit.log(
                context, AuditAction.CREATE, "ComplianceCertification", duplicate.id,
                f"Duplicated {original.label} certification v{original.version} to v{duplicate.version}",
                metadata={"project_id": str(project.id), "original_id": str(original.id)},
            )
        return duplicate

    def finalize_certification(
        self,
        project_id: UUID,
        certification_id: UUID,
        context: AuditContext,
        acknowledge_warnings: bool = False,
    ) -> ComplianceCertification:
        """
        Lock the pack together with every chapter and section.

        Validation is advisory: with failed or incomplete mandatory items the
        caller must pass ``acknowledge_warnings=True`` to finalize anyway.
        """
        with self.repository.atomic():
            project = self._load(project_id)
            certification = self._certification(project, certification_id)
            if certification.is_final:
                raise InvalidOperationException(
                    "Certification is already finalized", current_state=certification.status.value,
                )

            result = validation.validate_certification(certification)
            if result.warnings and not acknowledge_warnings:
                logger.warning("Finalize of %s needs acknowledgement: %s",
                               certification.name, result.finalize_summary)
                raise InvalidOperationException(result.finalize_summary, current_state=certification.status.value)

            now = utc_now()
            for chapter in certification.chapters:
                chapter.finalize(context.user_name, now)
                for section in chapter.sections:
                    section.finalize(context.user_name, now)
            certification.finalize(context.user_name, now)

            project.add_domain_event(CertificationFinalized(
                project_id=project.id,
                certification_id=certification.id,
                had_warnings=bool(result.warnings),
            ))
            self._save(project)
            self.audit.log(
                context, AuditAction.UPDATE, "ComplianceCertification", certification.id,
                f"Finalized {certification.name} certification",
                metadata={
                    "project_id": str(project.id),
                    "failed_mandatory": result.total_failed_mandatory,
                    "incomplete_mandatory": result.total_incomplete_mandatory,
                },
            )

        logger.info("Finalized certification %s v%d on %s",
                    certification.name, certification.version, project.project_number)
        return certification

    # =========================================================================
    # CHAPTERS & SECTIONS
    # =========================================================================

    def add_chapter(
        self, project_id: UUID, certification_id: UUID, data: Mapping[str, Any], context: AuditContext,
    ) -> ComplianceChapter:
        with self.repository.atomic():
            project = self._load(project_id)
            certification = self._certification(project, certification_id)
            certification.ensure_editable()
            chapter = ComplianceChapter(
                certification_id=certification.id,
                chapter_number=str(data["chapter_number"]),
                title=data["title"],
                description=data.get("description"),
                notes=data.get("notes"),
                sort_order=data.get("sort_order") or len(certification.chapters) + 1,
            )
            certification.chapters.append(chapter)
            self._save(project)
            self.audit.log(
                context, AuditAction.CREATE, "ComplianceChapter", chapter.id,
                f'Added chapter "{chapter.title}" to {certification.name}',
                metadata={"project_id": str(project.id), "certification_id": str(certification.id)},
            )
        return chapter

    def update_chapter(
        self,
        project_id: UUID,
        certification_id: UUID,
        chapter_id: UUID,
        updates: Mapping[str, Any],
        context: AuditContext,
    ) -> ComplianceChapter:
        with self.repository.atomic():
            project = self._load(project_id)
            _, chapter = self._editable_chapter(project, certification_id, chapter_id)
            for name in ("title", "description", "notes", "sort_order"):
                if name in updates:
                    setattr(chapter, name, updates[name])
            chapter.touch()
            self._save(project)
        return chapter

    def finalize_chapter(
        self, project_id: UUID, certification_id: UUID, chapter_id: UUID, context: AuditContext,
    ) -> ComplianceChapter:
        with self.repository.atomic():
            project = self._load(project_id)
            certification = self._certification(project, certification_id)
            if certification.is_final:
                raise InvalidOperationException("Certification is already finalized")
            chapter = self._chapter(certification, chapter_id)
            if chapter.is_final:
                raise InvalidOperationException("Chapter is already finalized")

            now = utc_now()
            for section in chapter.sections:
                section.finalize(context.user_name, now)
            chapter.finalize(context.user_name, now)
            self._save(project)
            self.audit.log(
                context, AuditAction.UPDATE, "ComplianceChapter", chapter.id,
                f'Finalized chapter "{chapter.title}" in {certification.name}',
                metadata={"project_id": str(project.id), "certification_id": str(certification.id)},
            )
        return chapter

    def add_section(
        self,
        project_id: UUID,
        certification_id: UUID,
        chapter_id: UUID,
        data: Mapping[str, Any],
        context: AuditContext,
    ) -> ComplianceSection:
        with self.repository.atomic():
            project = self._load(project_id)
            _, chapter = self._editable_chapter(project, certification_id, chapter_id)
            section = ComplianceSection(
                chapter_id=chapter.id,
                section_number=str(data["section_number"]),
                title=data["title"],
                description=data.get("description"),
                notes=data.get("notes"),
                sort_order=data.get("sort_order") or len(chapter.sections) + 1,
            )
            chapter.sections.append(section)
            self._save(project)
        return section

    def finalize_section(
        self,
        project_id: UUID,
        certification_id: UUID,
        chapter_id: UUID,
        section_id: UUID,
        context: AuditContext,
    ) -> ComplianceSection:
        with self.repository.atomic():
            project = self._load(project_id)
            certification = self._certification(project, certification_id)
            section = self._section(self._chapter(certification, chapter_id), section_id)
            if section.is_final:
                raise InvalidOperationException("Section is already finalized")
            section.finalize(context.user_name)
            self._save(project)
            self.audit.log(
                context, AuditAction.UPDATE, "ComplianceSection", section.id,
                f'Finalized section "{section.title}" in {certification.name}',
            )
        return section

    # =========================================================================
    # ATTACHMENTS
    # =========================================================================

    def add_chapter_attachment(
        self,
        project_id: UUID,
        certification_id: UUID,
        chapter_id: UUID,
        data: Mapping[str, Any],
        context: AuditContext,
    ) -> Attachment:
        with self.repository.atomic():
            project = self._load(project_id)
            _, chapter = self._editable_chapter(project, certification_id, chapter_id)
            attachment = build_attachment(data, context)
            chapter.attachments.append(attachment)
            self._save(project)
            self.audit.log(
                context, AuditAction.CREATE, "ComplianceAttachment", attachment.id,
                f'Added attachment "{attachment.filename}" to chapter "{chapter.title}"',
                metadata={"project_id": str(project.id), "chapter_id": str(chapter.id)},
            )
        return attachment

    def remove_chapter_attachment(
        self,
        project_id: UUID,
        certification_id: UUID,
        chapter_id: UUID,
        attachment_id: UUID,
        context: AuditContext,
    ) -> None:
        with self.repository.atomic():
            project = self._load(project_id)
            _, chapter = self._editable_chapter(project, certification_id, chapter_id)
            attachment = pop_attachment(chapter.attachments, attachment_id)
            self._save(project)
            self.audit.log(
                context, AuditAction.DELETE, "ComplianceAttachment", attachment.id,
                f'Removed attachment "{attachment.filename}" from chapter "{chapter.title}"',
            )

    def add_section_attachment(
        self,
        project_id: UUID,
        certification_id: UUID,
        chapter_id: UUID,
        section_id: UUID,
        data: Mapping[str, Any],
        context: AuditContext,
    ) -> Attachment:
        with self.repository.atomic():
            project = self._load(project_id)
            _, chapter = self._editable_chapter(project, certification_id, chapter_id)
            section = self._section(chapter, section_id)
            section.ensure_editable()
            attachment = build_attachment(data, context)
            section.attachments.append(attachment)
            self._save(project)
        return attachment

    def remove_section_attachment(
        self,
        project_id: UUID,
        certification_id: UUID,
        chapter_id: UUID,
        section_id: UUID,
        attachment_id: UUID,
        context: AuditContext,
    ) -> None:
        with self.repository.atomic():
            project = self._load(project_id)
            _, chapter = self._editable_chapter(project, certification_id, chapter_id)
            section = self._section(chapter, section_id)
            section.ensure_editable()
            attachment = pop_attachment(section.attachments, attachment_id)
            self._save(project)
            self.audit.log(
                context, AuditAction.DELETE, "ComplianceAttachment", attachment.id,
                f'Removed attachment "{attachment.filename}" from section "{section.title}"',
            )

    def add_checklist_attachment(
        self,
        project_id: UUID,
        certification_id: UUID,
        item_id: UUID,
        data: Mapping[str, Any],
        context: AuditContext,
    ) -> Attachment:
        """Attach evidence to a checklist item, wherever it sits in the pack."""
        with self.repository.atomic():
            project = self._load(project_id)
            _, _, item = self._editable_item(project, certification_id, item_id)
            attachment = build_attachment(data, context)
            item.attachments.append(attachment)
            item.touch()
            self._save(project)
            self.audit.log(
                context, AuditAction.CREATE, "ComplianceAttachment", attachment.id,
                f'Added attachment "{attachment.filename}" to checklist item "{item.title}"',
                metadata={"project_id": str(project.id), "item_id": str(item.id)},
            )
        return attachment

    def remove_checklist_attachment(
        self,
        project_id: UUID,
        certification_id: UUID,
        item_id: UUID,
        attachment_id: UUID,
        context: AuditContext,
    ) -> None:
        with self.repository.atomic():
            project = self._load(project_id)
            _, _, item = self._editable_item(project, certification_id, item_id)
            attachment = pop_attachment(item.attachments, attachment_id)
            item.touch()
            self._save(project)
            self.audit.log(
                context, AuditAction.DELETE, "ComplianceAttachment", attachment.id,
                f'Removed attachment "{attachment.filename}" from checklist item "{item.title}"',
            )

    # =========================================================================
    # CHECKLIST
    # =========================================================================

    def add_checklist_item(
        self,
        project_id: UUID,
        certification_id: UUID,
        chapter_id: UUID,
        data: Mapping[str, Any],
        context: AuditContext,
    ) -> ComplianceChecklistItem:
        """Add an item to the chapter, or to one of its sections when ``section_id`` is given."""
        if not (data.get("title") or "").strip():
            raise ValidationException("Title is required", field="title")

        with self.repository.atomic():
            project = self._load(project_id)
            _, chapter = self._editable_chapter(project, certification_id, chapter_id)
            section = None
            checklist = chapter.checklist
            if data.get("section_id"):
                section = self._section(chapter, UUID(str(data["section_id"])))
                section.ensure_editable()
                checklist = section.checklist

            item = ComplianceChecklistItem(
                chapter_id=chapter.id,
                section_id=section.id if section else None,
                title=data["title"].strip(),
                type=ChecklistItemType(data.get("type") or ChecklistItemType.DOC),
                mandatory=data.get("mandatory", True),
                notes=data.get("notes"),
                sort_order=data.get("sort_order") or len(checklist) + 1,
            )
            checklist.append(item)
            self._save(project)
        return item

    def update_checklist_item(
        self,
        project_id: UUID,
        certification_id: UUID,
        item_id: UUID,
        updates: Mapping[str, Any],
        context: AuditContext,
    ) -> ComplianceChecklistItem:
        with self.repository.atomic():
            project = self._load(project_id)
            _, _, item = self._editable_item(project, certification_id, item_id)

            for name in ("title", "notes", "mandatory", "sort_order"):
                if name in updates:
                    setattr(item, name, updates[name])
            if "type" in updates:
                item.type = ChecklistItemType(updates["type"])
            if "status" in updates:
                item.set_status(
                    ChecklistItemStatus(updates["status"]),
                    user=context.user_name,
                    na_reason=updates.get("na_reason"),
                )
            elif "na_reason" in updates:
                if item.status == ChecklistItemStatus.NA and not (updates["na_reason"] or "").strip():
                    raise ValidationException("NA status requires a reason", field="na_reason")
                item.na_reason = updates["na_reason"]
            item.touch()
            self._save(project)
        return item

    def update_checklist_status(
        self,
        project_id: UUID,
        certification_id: UUID,
        item_id: UUID,
        status: ChecklistItemStatus,
        context: AuditContext,
        na_reason: Optional[str] = None,
    ) -> ComplianceChecklistItem:
        updates = {"status": status}
        if na_reason is not None:
            updates["na_reason"] = na_reason
        return self.update_checklist_item(project_id, certification_id, item_id, updates, context)

    def remove_checklist_item(
        self, project_id: UUID, certification_id: UUID, item_id: UUID, context: AuditContext,
    ) -> None:
        with self.repository.atomic():
            project = self._load(project_id)
            chapter, section, item = self._editable_item(project, certification_id, item_id)
            (section or chapter).checklist.remove(item)
            self._save(project)
            self.audit.log(
                context, AuditAction.DELETE, "ComplianceChecklistItem", item.id,
                f'Removed checklist item "{item.title}" from chapter "{chapter.title}"',
            )
