"""
Compliance Views.

Certification packs of a project: chapters, sections, attachments and
evidence checklists, plus validation and finalization.
"""

from uuid import UUID

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from domain.auth.authorization import Permission
from domain.compliance import validation
from infrastructure import wiring

from ..serializers.base import plain
from ..serializers.compliance import (
    AttachmentInputSerializer,
    AttachmentSerializer,
    CertificationCreateSerializer,
    CertificationListSerializer,
    CertificationSerializer,
    ChapterInputSerializer,
    ChapterSerializer,
    ChecklistItemInputSerializer,
    ChecklistItemSerializer,
    ChecklistItemUpdateSerializer,
    FinalizeCertificationSerializer,
    NotesSerializer,
    SectionInputSerializer,
    SectionSerializer,
)
from .base import ServiceViewSet

UUID_PATTERN = '[0-9a-f-]{36}'
CHAPTER = rf'chapters/(?P<chapter_id>{UUID_PATTERN})'
SECTION = rf'{CHAPTER}/sections/(?P<section_id>{UUID_PATTERN})'
CHECKLIST_ITEM = rf'checklist/(?P<item_id>{UUID_PATTERN})'


class CertificationViewSet(ServiceViewSet):
    """
    ViewSet for certification packs, nested under a project.

    Endpoints:
    - GET /projects/{project_pk}/certifications/ - list packs
    - POST /projects/{project_pk}/certifications/ - initialize a pack from its scaffold
    - GET /projects/{project_pk}/certifications/{id}/ - full pack
    - GET .../{id}/stats/ and .../{id}/validate/ - progress and warnings
    - POST .../{id}/finalize/ - finalize (``acknowledge_warnings`` when there are warnings)
    - POST .../{id}/duplicate/ - copy as the next version
    """

    required_permissions = {
        'create': Permission.PROJECT_EDIT,
        'notes': Permission.PROJECT_EDIT,
        'finalize': Permission.PROJECT_EDIT,
        'duplicate': Permission.PROJECT_EDIT,
        'chapters': Permission.PROJECT_EDIT,
        'chapter_detail': Permission.PROJECT_EDIT,
        'finalize_chapter': Permission.PROJECT_EDIT,
        'sections': Permission.PROJECT_EDIT,
        'finalize_section': Permission.PROJECT_EDIT,
        'chapter_attachments': Permission.PROJECT_EDIT,
        'remove_chapter_attachment': Permission.PROJECT_EDIT,
        'section_attachments': Permission.PROJECT_EDIT,
        'remove_section_attachment': Permission.PROJECT_EDIT,
        'checklist_attachments': Permission.PROJECT_EDIT,
        'remove_checklist_attachment': Permission.PROJECT_EDIT,
        'checklist': Permission.PROJECT_EDIT,
        'checklist_item': Permission.PROJECT_EDIT,
    }

    @property
    def project_id(self):
        return UUID(self.kwargs['project_pk'])

    @property
    def certification_id(self):
        return UUID(self.kwargs['pk'])

    @property
    def service(self):
        return wiring.get_compliance_service()

    # =========================================================================
    # CERTIFICATIONS
    # =========================================================================

    def list(self, request, project_pk=None):
        certifications = self.service.get_certifications(self.project_id)
        return self.respond(CertificationListSerializer, certifications, many=True)

    def create(self, request, project_pk=None):
        data = self.validated(CertificationCreateSerializer)
        certification = self.service.initialize_certification(self.project_id, data, self.audit_context())
        return self.respond(CertificationSerializer, certification, status=status.HTTP_201_CREATED)

    def retrieve(self, request, project_pk=None, pk=None):
        certification = self.service.get_certification(self.project_id, self.certification_id)
        return self.respond(CertificationSerializer, certification)

    @action(detail=True, methods=['patch'])
    def notes(self, request, project_pk=None, pk=None):
        notes = self.validated(NotesSerializer)['notes']
        certification = self.service.update_certification_notes(
            self.project_id, self.certification_id, notes, self.audit_context(),
        )
        return self.respond(CertificationListSerializer, certification)

    @action(detail=True, methods=['get'])
    def stats(self, request, project_pk=None, pk=None):
        stats = self.service.get_certification_stats(self.project_id, self.certification_id)
        return Response(plain(stats))

    @action(detail=True, methods=['get'])
    def validate(self, request, project_pk=None, pk=None):
        result = self.service.validate_certification(self.project_id, self.certification_id)
        certification = self.service.get_certification(self.project_id, self.certification_id)
        data = plain(result)
        data['chapter_summaries'] = {
            str(chapter.id): validation.get_chapter_warnings_summary(chapter)
            for chapter in certification.chapters
        }
        return Response(data)

    @action(detail=True, methods=['post'])
    def finalize(self, request, project_pk=None, pk=None):
        acknowledge = self.validated(FinalizeCertificationSerializer)['acknowledge_warnings']
        certification = self.service.finalize_certification(
            self.project_id, self.certification_id, self.audit_context(), acknowledge_warnings=acknowledge,
        )
        return self.respond(CertificationSerializer, certification)

    @action(detail=True, methods=['post'])
    def duplicate(self, request, project_pk=None, pk=None):
        certification = self.service.duplicate_certification(
            self.project_id, self.certification_id, self.audit_context(),
        )
        return self.respond(CertificationSerializer, certification, status=status.HTTP_201_CREATED)

    # =========================================================================
    # CHAPTERS & SECTIONS
    # =========================================================================

    @action(detail=True, methods=['post'])
    def chapters(self, request, project_pk=None, pk=None):
        data = self.validated(ChapterInputSerializer)
        chapter = self.service.add_chapter(self.project_id, self.certification_id, data, self.audit_context())
        return self.respond(ChapterSerializer, chapter, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['patch'], url_path=CHAPTER)
    def chapter_detail(self, request, project_pk=None, pk=None, chapter_id=None):
        updates = self.validated(ChapterInputSerializer, partial=True)
        chapter = self.service.update_chapter(
            self.project_id, self.certification_id, UUID(chapter_id), updates, self.audit_context(),
        )
        return self.respond(ChapterSerializer, chapter)

    @action(detail=True, methods=['post'], url_path=rf'{CHAPTER}/finalize')
    def finalize_chapter(self, request, project_pk=None, pk=None, chapter_id=None):
        chapter = self.service.finalize_chapter(
            self.project_id, self.certification_id, UUID(chapter_id), self.audit_context(),
        )
        return self.respond(ChapterSerializer, chapter)

    @action(detail=True, methods=['post'], url_path=rf'{CHAPTER}/sections')
    def sections(self, request, project_pk=None, pk=None, chapter_id=None):
        data = self.validated(SectionInputSerializer)
        section = self.service.add_section(
            self.project_id, self.certification_id, UUID(chapter_id), data, self.audit_context(),
        )
        return self.respond(SectionSerializer, section, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], url_path=rf'{SECTION}/finalize')
    def finalize_section(self, request, project_pk=None, pk=None, chapter_id=None, section_id=None):
        section = self.service.finalize_section(
            self.project_id, self.certification_id, UUID(chapter_id), UUID(section_id), self.audit_context(),
        )
        return self.respond(SectionSerializer, section)

    # =========================================================================
    # ATTACHMENTS
    # =========================================================================

    @action(detail=True, methods=['post'], url_path=rf'{CHAPTER}/attachments')
    def chapter_attachments(self, request, project_pk=None, pk=None, chapter_id=None):
        data = self.validated(AttachmentInputSerializer)
        attachment = self.service.add_chapter_attachment(
            self.project_id, self.certification_id, UUID(chapter_id), data, self.audit_context(),
        )
        return self.respond(AttachmentSerializer, attachment, status=status.HTTP_201_CREATED)

    @action(
        detail=True,
        methods=['delete'],
        url_path=rf'{CHAPTER}/attachments/(?P<attachment_id>{UUID_PATTERN})',
    )
    def remove_chapter_attachment(self, request, project_pk=None, pk=None, chapter_id=None, attachment_id=None):
        self.service.remove_chapter_attachment(
            self.project_id, self.certification_id, UUID(chapter_id), UUID(attachment_id), self.audit_context(),
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'], url_path=rf'{SECTION}/attachments')
    def section_attachments(self, request, project_pk=None, pk=None, chapter_id=None, section_id=None):
        data = self.validated(AttachmentInputSerializer)
        attachment = self.service.add_section_attachment(
            self.project_id, self.certification_id, UUID(chapter_id), UUID(section_id), data,
            self.audit_context(),
        )
        return self.respond(AttachmentSerializer, attachment, status=status.HTTP_201_CREATED)

    @action(
        detail=True,
        methods=['delete'],
        url_path=rf'{SECTION}/attachments/(?P<attachment_id>{UUID_PATTERN})',
    )
    def remove_section_attachment(
        self, request, project_pk=None, pk=None, chapter_id=None, section_id=None, attachment_id=None,
    ):
        self.service.remove_section_attachment(
            self.project_id, self.certification_id, UUID(chapter_id), UUID(section_id), UUID(attachment_id),
            self.audit_context(),
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'], url_path=rf'{CHECKLIST_ITEM}/attachments')
    def checklist_attachments(self, request, project_pk=None, pk=None, item_id=None):
        data = self.validated(AttachmentInputSerializer)
        attachment = self.service.add_checklist_attachment(
            self.project_id, self.certification_id, UUID(item_id), data, self.audit_context(),
        )
        return self.respond(AttachmentSerializer, attachment, status=status.HTTP_201_CREATED)

    @action(
        detail=True,
        methods=['delete'],
        url_path=rf'{CHECKLIST_ITEM}/attachments/(?P<attachment_id>{UUID_PATTERN})',
    )
    def remove_checklist_attachment(self, request, project_pk=None, pk=None, item_id=None, attachment_id=None):
        self.service.remove_checklist_attachment(
            self.project_id, self.certification_id, UUID(item_id), UUID(attachment_id), self.audit_context(),
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    # =========================================================================
    # CHECKLIST
    # =========================================================================

    @action(detail=True, methods=['post'], url_path=rf'{CHAPTER}/checklist')
    def checklist(self, request, project_pk=None, pk=None, chapter_id=None):
        data = self.validated(ChecklistItemInputSerializer)
        item = self.service.add_checklist_item(
            self.project_id, self.certification_id, UUID(chapter_id), data, self.audit_context(),
        )
        return self.respond(ChecklistItemSerializer, item, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['patch', 'delete'], url_path=CHECKLIST_ITEM)
    def checklist_item(self, request, project_pk=None, pk=None, item_id=None):
        if request.method == 'DELETE':
            self.service.remove_checklist_item(
                self.project_id, self.certification_id, UUID(item_id), self.audit_context(),
            )
            return Response(status=status.HTTP_204_NO_CONTENT)

        updates = self.validated(ChecklistItemUpdateSerializer, partial=True)
        item = self.service.update_checklist_item(
            self.project_id, self.certification_id, UUID(item_id), updates, self.audit_context(),
        )
        return self.respond(ChecklistItemSerializer, item)
