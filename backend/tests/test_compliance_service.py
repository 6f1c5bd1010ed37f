"""Tests for ComplianceService: certification packs, checklists and finalization."""

import pytest

from domain.shared.exceptions import (
    EntityNotFoundException,
    InvalidOperationException,
    ValidationException,
)
from domain.shared.value_objects import ChecklistItemStatus, ComplianceStatus


@pytest.fixture
def ce_pack(project, compliance_service, admin):
    return compliance_service.initialize_certification(project.id, {"type": "ce"}, admin)


class TestInitialize:

    def test_ce_scaffold(self, ce_pack):
        assert ce_pack.name == "CE Marking (RCD)"
        assert ce_pack.version == 1
        assert len(ce_pack.chapters) == 15
        assert ce_pack.chapters[0].title == "General Description"
        assert len(ce_pack.chapters[0].checklist) == 5
        assert all(item.status == ChecklistItemStatus.NOT_STARTED for item in ce_pack.chapters[0].checklist)

    def test_one_draft_per_type(self, project, compliance_service, admin, ce_pack):
        with pytest.raises(InvalidOperationException, match="CE Marking \\(RCD\\) certification is already in progress"):
            compliance_service.initialize_certification(project.id, {"type": "ce"}, admin)

        lloyds = compliance_service.initialize_certification(project.id, {"type": "lloyds", "name": "LR class"}, admin)
        assert lloyds.name == "LR class"
        assert len(compliance_service.get_certifications(project.id)) == 2

    def test_unknown_pack(self, project, compliance_service):
        with pytest.raises(EntityNotFoundException):
            compliance_service.get_certification(project.id, project.id)


class TestChecklist:

    def test_status_updates(self, project, compliance_service, production, ce_pack):
        item = ce_pack.chapters[0].checklist[0]
        updated = compliance_service.update_checklist_status(
            project.id, ce_pack.id, item.id, ChecklistItemStatus.PASSED, production,
        )
        assert updated.status == ChecklistItemStatus.PASSED
        assert updated.verified_by == production.user_name

        stats = compliance_service.get_certification_stats(project.id, ce_pack.id)
        assert stats.passed_checklist_items == 1

    def test_na_requires_reason(self, project, compliance_service, admin, ce_pack):
        item = ce_pack.chapters[9].checklist[0]
        with pytest.raises(ValidationException, match="NA status requires a reason"):
            compliance_service.update_checklist_status(project.id, ce_pack.id, item.id, ChecklistItemStatus.NA, admin)

        updated = compliance_service.update_checklist_status(
            project.id, ce_pack.id, item.id, ChecklistItemStatus.NA, admin, na_reason="No gas installed",
        )
        assert updated.na_reason == "No gas installed"

    def test_na_reason_cannot_be_cleared(self, project, compliance_service, admin, ce_pack):
        item = ce_pack.chapters[9].checklist[0]
        compliance_service.update_checklist_status(
            project.id, ce_pack.id, item.id, ChecklistItemStatus.NA, admin, na_reason="No gas installed",
        )

        for blank in ("", "  ", None):
            with pytest.raises(ValidationException, match="NA status requires a reason"):
                compliance_service.update_checklist_item(project.id, ce_pack.id, item.id, {"na_reason": blank}, admin)

        stored = compliance_service.get_certification(project.id, ce_pack.id).find_checklist_item(item.id)[2]
        assert stored.status == ChecklistItemStatus.NA
        assert stored.na_reason == "No gas installed"

    def test_na_reason_is_free_on_other_statuses(self, project, compliance_service, admin, ce_pack):
        item = ce_pack.chapters[9].checklist[0]

        updated = compliance_service.update_checklist_item(project.id, ce_pack.id, item.id, {"na_reason": ""}, admin)

        assert updated.status == ChecklistItemStatus.NOT_STARTED
        assert updated.na_reason == ""

    def test_section_items(self, project, compliance_service, admin, ce_pack):
        chapter = ce_pack.chapters[6]
        section = compliance_service.add_section(
            project.id, ce_pack.id, chapter.id, {"section_number": "7.1", "title": "Fuel system"}, admin,
        )
        item = compliance_service.add_checklist_item(project.id, ce_pack.id, chapter.id, {
            "title": "Fuel hose certificates", "section_id": str(section.id), "type": "doc",
        }, admin)
        assert item.section_id == section.id

        stored = compliance_service.get_certification(project.id, ce_pack.id).chapters[6]
        assert [i.title for i in stored.sections[0].checklist] == ["Fuel hose certificates"]

        compliance_service.remove_checklist_item(project.id, ce_pack.id, item.id, admin)
        stored = compliance_service.get_certification(project.id, ce_pack.id).chapters[6]
        assert stored.sections[0].checklist == []

    def test_title_required(self, project, compliance_service, admin, ce_pack):
        with pytest.raises(ValidationException, match="Title is required"):
            compliance_service.add_checklist_item(project.id, ce_pack.id, ce_pack.chapters[0].id, {"title": " "}, admin)


class TestAttachments:

    def test_add_and_remove(self, project, compliance_service, admin, ce_pack):
        chapter = ce_pack.chapters[2]
        attachment = compliance_service.add_chapter_attachment(project.id, ce_pack.id, chapter.id, {
            "filename": "laminate-spec.pdf", "type": "report", "size_bytes": 20480,
        }, admin)
        assert attachment.uploaded_by == admin.user_name
        assert compliance_service.get_certification_stats(project.id, ce_pack.id).total_attachments == 1

        compliance_service.remove_chapter_attachment(project.id, ce_pack.id, chapter.id, attachment.id, admin)
        assert compliance_service.get_certification_stats(project.id, ce_pack.id).total_attachments == 0

    def test_checklist_item_evidence(self, project, compliance_service, admin, ce_pack):
        item = ce_pack.chapters[0].checklist[0]
        attachment = compliance_service.add_checklist_attachment(project.id, ce_pack.id, item.id, {
            "filename": "hull-id-photo.jpg", "type": "photo", "mime_type": "image/jpeg",
        }, admin)

        stored = compliance_service.get_certification(project.id, ce_pack.id).find_checklist_item(item.id)[2]
        assert [a.filename for a in stored.attachments] == ["hull-id-photo.jpg"]
        assert compliance_service.get_certification_stats(project.id, ce_pack.id).total_attachments == 1

        compliance_service.remove_checklist_attachment(project.id, ce_pack.id, item.id, attachment.id, admin)

        stored = compliance_service.get_certification(project.id, ce_pack.id).find_checklist_item(item.id)[2]
        assert stored.attachments == []
        with pytest.raises(EntityNotFoundException):
            compliance_service.remove_checklist_attachment(project.id, ce_pack.id, item.id, attachment.id, admin)

    def test_section_attachment_can_be_removed(self, project, compliance_service, admin, ce_pack):
        chapter = ce_pack.chapters[6]
        section = compliance_service.add_section(
            project.id, ce_pack.id, chapter.id, {"section_number": "7.1", "title": "Fuel system"}, admin,
        )
        attachment = compliance_service.add_section_attachment(
            project.id, ce_pack.id, chapter.id, section.id, {"filename": "fuel-tank-test.pdf"}, admin,
        )

        compliance_service.remove_section_attachment(project.id, ce_pack.id, chapter.id, section.id, attachment.id, admin)

        stored = compliance_service.get_certification(project.id, ce_pack.id).chapters[6].sections[0]
        assert stored.attachments == []

    def test_final_pack_rejects_checklist_attachments(self, project, compliance_service, admin, ce_pack):
        item = ce_pack.chapters[0].checklist[0]
        attachment = compliance_service.add_checklist_attachment(
            project.id, ce_pack.id, item.id, {"filename": "hull-id-photo.jpg"}, admin,
        )
        compliance_service.finalize_certification(project.id, ce_pack.id, admin, acknowledge_warnings=True)

        with pytest.raises(InvalidOperationException, match="Cannot modify a finalized certification"):
            compliance_service.add_checklist_attachment(
                project.id, ce_pack.id, item.id, {"filename": "late.jpg"}, admin,
            )
        with pytest.raises(InvalidOperationException, match="Cannot modify a finalized certification"):
            compliance_service.remove_checklist_attachment(project.id, ce_pack.id, item.id, attachment.id, admin)

    def test_filename_required(self, project, compliance_service, admin, ce_pack):
        with pytest.raises(ValidationException, match="Filename is required"):
            compliance_service.add_chapter_attachment(project.id, ce_pack.id, ce_pack.chapters[0].id, {}, admin)


class TestFinalize:

    def test_warnings_need_acknowledgement(self, project, compliance_service, admin, ce_pack):
        with pytest.raises(InvalidOperationException, match="Finalizing will lock these issues"):
            compliance_service.finalize_certification(project.id, ce_pack.id, admin)
        assert compliance_service.get_certification(project.id, ce_pack.id).status == ComplianceStatus.DRAFT

        finalized = compliance_service.finalize_certification(
            project.id, ce_pack.id, admin, acknowledge_warnings=True,
        )
        assert finalized.status == ComplianceStatus.FINAL
        assert all(chapter.is_final for chapter in finalized.chapters)

    def test_clean_pack_finalizes_directly(self, project, compliance_service, admin):
        pack = compliance_service.initialize_certification(project.id, {"type": "es_trin"}, admin)
        finalized = compliance_service.finalize_certification(project.id, pack.id, admin)
        assert finalized.finalized_by == admin.user_name

    def test_final_pack_rejects_edits(self, project, compliance_service, admin, ce_pack):
        compliance_service.finalize_certification(project.id, ce_pack.id, admin, acknowledge_warnings=True)
        item = ce_pack.chapters[0].checklist[0]
        with pytest.raises(InvalidOperationException, match="Cannot modify a finalized certification"):
            compliance_service.update_checklist_status(
                project.id, ce_pack.id, item.id, ChecklistItemStatus.PASSED, admin,
            )
        with pytest.raises(InvalidOperationException, match="Certification is already finalized"):
            compliance_service.finalize_certification(project.id, ce_pack.id, admin, acknowledge_warnings=True)

    def test_final_chapter_rejects_edits(self, project, compliance_service, admin, ce_pack):
        chapter = ce_pack.chapters[0]
        compliance_service.finalize_chapter(project.id, ce_pack.id, chapter.id, admin)
        with pytest.raises(InvalidOperationException, match="Cannot modify a finalized chapter"):
            compliance_service.update_chapter(project.id, ce_pack.id, chapter.id, {"notes": "Late"}, admin)

        # Other chapters stay editable
        compliance_service.update_chapter(project.id, ce_pack.id, ce_pack.chapters[1].id, {"notes": "OK"}, admin)

    def test_validate(self, project, compliance_service, ce_pack):
        result = compliance_service.validate_certification(project.id, ce_pack.id)
        assert not result.is_valid
        assert result.can_finalize
        assert result.total_incomplete_mandatory == result.total_mandatory
        assert result.total_failed_mandatory == 0


class TestDuplicate:

    def test_duplicate_resets_progress(self, project, compliance_service, admin, ce_pack):
        item = ce_pack.chapters[0].checklist[0]
        compliance_service.update_checklist_status(project.id, ce_pack.id, item.id, ChecklistItemStatus.PASSED, admin)
        compliance_service.finalize_certification(project.id, ce_pack.id, admin, acknowledge_warnings=True)

        duplicate = compliance_service.duplicate_certification(project.id, ce_pack.id, admin)
        assert duplicate.version == 2
        assert duplicate.status == ComplianceStatus.DRAFT
        assert duplicate.notes == "Duplicated from v1"
        assert duplicate.id != ce_pack.id
        assert not any(chapter.is_final for chapter in duplicate.chapters)

        copied = duplicate.chapters[0].checklist[0]
        assert copied.title == item.title
        assert copied.status == ChecklistItemStatus.NOT_STARTED
        assert copied.id != item.id
        assert copied.chapter_id == duplicate.chapters[0].id
