"""Tests for certification readiness checks and progress statistics."""

import pytest

from domain.compliance import scaffolds, validation
from domain.compliance.entities import (
    Attachment,
    ComplianceCertification,
    ComplianceChapter,
    ComplianceChecklistItem,
    ComplianceSection,
)
from domain.shared.exceptions import InvalidOperationException, ValidationException
from domain.shared.value_objects import (
    CertificationType,
    ChecklistItemStatus,
    ComplianceStatus,
    ComplianceWarningLevel,
)

ST = ChecklistItemStatus


def item(title, status=ST.NOT_STARTED, mandatory=True):
    return ComplianceChecklistItem(title=title, status=status, mandatory=mandatory)


@pytest.fixture
def chapter():
    section = ComplianceSection(
        section_number="7.1",
        title="Fuel system",
        checklist=[item("Fuel hose certificates", ST.FAILED)],
        attachments=[Attachment(filename="hoses.pdf")],
    )
    return ComplianceChapter(
        chapter_number="7",
        title="Propulsion Installation",
        sections=[section],
        checklist=[
            item("Engine installation drawings", ST.PASSED),
            item("Exhaust system inspection", ST.IN_PROGRESS),
            item("Propulsion system test"),
            item("Speed trial results", ST.NOT_STARTED, mandatory=False),
        ],
    )


class TestChecklistStats:

    def test_na_items_leave_the_denominator(self):
        items = [item("A", ST.PASSED), item("B", ST.NA), item("C", ST.FAILED)]
        stats = validation.checklist_stats(items)
        assert stats.total == 3
        assert stats.mandatory_complete == 2
        assert stats.percent_complete == 50

    def test_optional_na_item_does_not_hold_back_progress(self):
        items = [item("Hull identification number", ST.PASSED), item("Speed trial", ST.NA, mandatory=False)]

        stats = validation.checklist_stats(items)

        assert stats.percent_complete == 100
        assert stats.mandatory == 1
        assert stats.mandatory_complete == 1
        assert stats.na == 1

    def test_all_na_is_complete(self):
        assert validation.checklist_stats([item("A", ST.NA)]).percent_complete == 100

    def test_empty_checklist(self):
        assert validation.checklist_stats([]).percent_complete == 0


class TestValidateChapter:

    def test_warnings_cover_sections(self, chapter):
        result = validation.validate_chapter_checklist(chapter)
        assert not result.is_valid
        assert result.total_mandatory == 4
        assert result.failed_mandatory_count == 1
        assert result.incomplete_mandatory_count == 2

        failed = [w for w in result.warnings if w.level == ComplianceWarningLevel.ERROR]
        assert [w.message for w in failed] == ['Mandatory item "Fuel hose certificates" has FAILED status']
        assert failed[0].section_id == chapter.sections[0].id

        messages = [w.message for w in result.warnings]
        assert 'Mandatory item "Exhaust system inspection" is in progress' in messages
        assert 'Mandatory item "Propulsion system test" is not started' in messages

    def test_optional_items_never_warn(self, chapter):
        titles = {w.item_title for w in validation.validate_chapter_checklist(chapter).warnings}
        assert "Speed trial results" not in titles

    def test_chapter_summary(self, chapter):
        summary = validation.get_chapter_warnings_summary(chapter)
        assert summary == {
            "has_errors": True,
            "has_warnings": True,
            "error_count": 1,
            "warning_count": 2,
            "summary": "1 failed, 2 incomplete",
        }

    def test_summary_without_mandatory_items(self):
        assert validation.get_chapter_warnings_summary(ComplianceChapter())["summary"] == ""


class TestValidateCertification:

    def test_advisory_result(self, chapter):
        certification = ComplianceCertification(chapters=[chapter])
        result = validation.validate_certification(certification)
        assert not result.is_valid
        assert result.can_finalize
        assert result.finalize_summary == (
            "Warning: 1 failed mandatory item and 2 incomplete mandatory items detected. "
            "Finalizing will lock these issues."
        )

    def test_clean_certification(self):
        chapter = ComplianceChapter(checklist=[item("Owner's manual complete", ST.PASSED)])
        result = validation.validate_certification(ComplianceCertification(chapters=[chapter]))
        assert result.is_valid
        assert result.finalize_summary == "All mandatory checklist items are complete. Ready to finalize."

    def test_stats_count_chapters_and_sections(self, chapter):
        chapter.sections[0].finalize("1")
        certification = ComplianceCertification(chapters=[chapter, ComplianceChapter(chapter_number="8")])
        stats = validation.get_certification_stats(certification)
        assert stats.total_chapters == 2
        assert stats.total_sections == 1
        assert stats.final_sections == 1
        assert stats.total_attachments == 1
        assert stats.total_checklist_items == 5
        # One of three chapters and sections is final
        assert stats.percent_complete == 33

    def test_fully_finalized(self, chapter):
        certification = ComplianceCertification(chapters=[chapter])
        certification.finalize("1")
        assert not validation.is_certification_fully_finalized(certification)

        chapter.finalize("1")
        chapter.sections[0].finalize("1")
        assert validation.is_certification_fully_finalized(certification)


class TestEntities:

    def test_na_requires_reason(self):
        checklist_item = item("Gas system drawings (if installed)")
        with pytest.raises(ValidationException, match="NA status requires a reason"):
            checklist_item.set_status(ST.NA)

        checklist_item.set_status(ST.NA, na_reason="No gas installation")
        assert checklist_item.status == ST.NA

    def test_passed_records_verifier(self):
        checklist_item = item("HIN format verification")
        checklist_item.set_status(ST.PASSED, user="4")
        assert checklist_item.verified_by == "4"
        assert checklist_item.verified_at is not None

    def test_final_chapter_is_not_editable(self):
        chapter = ComplianceChapter(title="Steering System")
        chapter.finalize("1")
        assert chapter.status == ComplianceStatus.FINAL
        with pytest.raises(InvalidOperationException):
            chapter.ensure_editable()


class TestScaffolds:

    def test_ce_has_fifteen_chapters_with_checklists(self):
        chapters = scaffolds.get_chapter_scaffold(CertificationType.CE)
        assert [c.chapter_number for c in chapters] == [str(n) for n in range(1, 16)]
        for chapter in chapters:
            assert scaffolds.get_chapter_checklist(CertificationType.CE, chapter.chapter_number)

    def test_other_types_have_no_checklist(self):
        assert len(scaffolds.get_chapter_scaffold(CertificationType.ES_TRIN)) == 5
        assert scaffolds.get_chapter_checklist(CertificationType.LLOYDS, "1") == []
        assert scaffolds.get_chapter_scaffold(CertificationType.OTHER) == []
