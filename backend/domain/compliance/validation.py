"""
Compliance Domain - Checklist Validation.

Pure readiness checks over certification packs. Nothing here ever blocks:
failed or incomplete mandatory items surface as warnings and the caller
decides whether to finalize anyway.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, List, Optional
from uuid import UUID

from domain.shared.value_objects import ChecklistItemStatus, ComplianceWarningLevel, percent

from .entities import (
    ComplianceCertification,
    ComplianceChapter,
    ComplianceChecklistItem,
    ComplianceSection,
)


@dataclass(frozen=True)
class ComplianceWarning:
    level: ComplianceWarningLevel
    message: str
    chapter_id: Optional[UUID] = None
    chapter_number: Optional[str] = None
    section_id: Optional[UUID] = None
    item_id: Optional[UUID] = None
    item_title: Optional[str] = None


@dataclass(frozen=True)
class ChapterValidationResult:
    chapter_id: UUID
    chapter_number: str
    chapter_title: str
    is_valid: bool
    warnings: List[ComplianceWarning] = field(default_factory=list)
    failed_mandatory_count: int = 0
    incomplete_mandatory_count: int = 0
    total_mandatory: int = 0


@dataclass(frozen=True)
class CertificationValidationResult:
    certification_id: UUID
    is_valid: bool
    warnings: List[ComplianceWarning]
    chapter_results: List[ChapterValidationResult]
    total_failed_mandatory: int
    total_incomplete_mandatory: int
    total_mandatory: int
    can_finalize: bool
    finalize_summary: str


@dataclass(frozen=True)
class ChecklistStats:
    total: int = 0
    passed: int = 0
    failed: int = 0
    na: int = 0
    in_progress: int = 0
    not_started: int = 0
    mandatory: int = 0
    mandatory_complete: int = 0
    percent_complete: int = 0


@dataclass(frozen=True)
class CertificationStats:
    total_chapters: int
    final_chapters: int
    total_sections: int
    final_sections: int
    total_attachments: int
    total_checklist_items: int
    passed_checklist_items: int
    failed_checklist_items: int
    na_checklist_items: int
    mandatory_checklist_items: int
    mandatory_passed_items: int
    checklist_percent_complete: int
    percent_complete: int


def _completion_percent(passed: int, total: int, na: int) -> int:
    """Passed share of applicable items; NA items leave the denominator."""
    applicable = total - na
    if applicable > 0:
        return percent(passed, applicable)
    return 100 if total > 0 else 0


def checklist_stats(items: Iterable[ComplianceChecklistItem]) -> ChecklistStats:
    counts = {status: 0 for status in ChecklistItemStatus}
    total = mandatory = mandatory_complete = 0
    for item in items:
        total += 1
        counts[item.status] += 1
        if item.mandatory:
            mandatory += 1
            if item.status.is_complete:
                mandatory_complete += 1
    
    passed = counts[ChecklistItemStatus.PASSED]
    na = counts[ChecklistItemStatus.NA]
    return ChecklistStats(
        total=total,
        passed=passed,
        failed=counts[ChecklistItemStatus.FAILED],
        na=na,
        in_progress=counts[ChecklistItemStatus.IN_PROGRESS],
        not_started=counts[ChecklistItemStatus.NOT_STARTED],
        mandatory=mandatory,
        mandatory_complete=mandatory_complete,
        percent_complete=_completion_percent(passed, total, na),
    )


def get_chapter_checklist_stats(chapter: ComplianceChapter) -> ChecklistStats:
    return checklist_stats(chapter.checklist)


def get_section_checklist_stats(section: ComplianceSection) -> ChecklistStats:
    return checklist_stats(section.checklist)


def _mandatory_item_warning(
    chapter: ComplianceChapter,
    section: Optional[ComplianceSection],
    item: ComplianceChecklistItem,
) -> Optional[ComplianceWarning]:
    if not item.mandatory:
        return None
    if item.status == ChecklistItemStatus.FAILED:
        level = ComplianceWarningLevel.ERROR
        message = f'Mandatory item "{item.title}" has FAILED status'
    elif item.status.is_incomplete:
        level = ComplianceWarningLevel.WARNING
        state = "not started" if item.status == ChecklistItemStatus.NOT_STARTED else "in progress"
        message = f'Mandatory item "{item.title}" is {state}'
    else:
        return None
    return ComplianceWarning(
        level=level,
        message=message,
        chapter_id=chapter.id,
        chapter_number=chapter.chapter_number,
        section_id=section.id if section else None,
        item_id=item.id,
        item_title=item.title,
    )


def validate_chapter_checklist(chapter: ComplianceChapter) -> ChapterValidationResult:
    """
    Collect warnings for mandatory items that are FAILED (ERROR) or not yet
    done (WARNING), across the chapter checklist and its sections' checklists.
    """
    warnings: List[ComplianceWarning] = []
    failed = incomplete = total_mandatory = 0
    
    for section, checklist in chapter.iter_checklists():
        for item in checklist:
            if item.mandatory:
                total_mandatory += 1
            warning = _mandatory_item_warning(chapter, section, item)
            if warning is None:
                continue
            warnings.append(warning)
            if warning.level == ComplianceWarningLevel.ERROR:
                failed += 1
            else:
                incomplete += 1
    
    return ChapterValidationResult(
        chapter_id=chapter.id,
        chapter_number=chapter.chapter_number,
        chapter_title=chapter.title,
        is_valid=failed == 0 and incomplete == 0,
        warnings=warnings,
        failed_mandatory_count=failed,
        incomplete_mandatory_count=incomplete,
        total_mandatory=total_mandatory,
    )


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


def build_finalize_summary(failed: int, incomplete: int) -> str:
    if not failed and not incomplete:
        return "All mandatory checklist items are complete. Ready to finalize."
    parts = []
    if failed:
        parts.append(_plural(failed, "failed mandatory item"))
    if incomplete:
        parts.append(_plural(incomplete, "incomplete mandatory item"))
    return f"Warning: {' and '.join(parts)} detected. Finalizing will lock these issues."


def validate_certification(certification: ComplianceCertification) -> CertificationValidationResult:
    chapter_results = [validate_chapter_checklist(chapter) for chapter in certification.chapters]
    warnings = [warning for result in chapter_results for warning in result.warnings]
    failed = sum(result.failed_mandatory_count for result in chapter_results)
    incomplete = sum(result.incomplete_mandatory_count for result in chapter_results)
    
    return CertificationValidationResult(
        certification_id=certification.id,
        is_valid=failed == 0 and incomplete == 0,
        warnings=warnings,
        chapter_results=chapter_results,
        total_failed_mandatory=failed,
        total_incomplete_mandatory=incomplete,
        total_mandatory=sum(result.total_mandatory for result in chapter_results),
        # Advisory only; finalizing with warnings needs an explicit confirmation
        can_finalize=True,
        finalize_summary=build_finalize_summary(failed, incomplete),
    )


def get_certification_stats(certification: ComplianceCertification) -> CertificationStats:
    items: List[ComplianceChecklistItem] = []
    total_sections = final_sections = final_chapters = attachments = 0
    
    for chapter in certification.chapters:
        if chapter.is_final:
            final_chapters += 1
        attachments += len(chapter.attachments)
        for section in chapter.sections:
            total_sections += 1
            if section.is_final:
                final_sections += 1
            attachments += len(section.attachments)
        for _, checklist in chapter.iter_checklists():
            items.extend(checklist)
    
    attachments += sum(len(item.attachments) for item in items)
    stats = checklist_stats(items)
    total_chapters = len(certification.chapters)
    
    return CertificationStats(
        total_chapters=total_chapters,
        final_chapters=final_chapters,
        total_sections=total_sections,
        final_sections=final_sections,
        total_attachments=attachments,
        total_checklist_items=stats.total,
        passed_checklist_items=stats.passed,
        failed_checklist_items=stats.failed,
        na_checklist_items=stats.na,
        mandatory_checklist_items=stats.mandatory,
        mandatory_passed_items=stats.mandatory_complete,
        checklist_percent_complete=stats.percent_complete,
        percent_complete=percent(final_chapters + final_sections, total_chapters + total_sections),
    )


def is_certification_fully_finalized(certification: ComplianceCertification) -> bool:
    """The pack, every chapter and every section must all be FINAL."""
    if not certification.is_final:
        return False
    return all(
        chapter.is_final and all(section.is_final for section in chapter.sections)
        for chapter in certification.chapters
    )


def get_chapter_warnings_summary(chapter: ComplianceChapter) -> dict:
    result = validate_chapter_checklist(chapter)
    errors = result.failed_mandatory_count
    incomplete = result.incomplete_mandatory_count
    
    if errors and incomplete:
        summary = f"{errors} failed, {incomplete} incomplete"
    elif errors:
        summary = f"{errors} failed mandatory"
    elif incomplete:
        summary = f"{incomplete} incomplete mandatory"
    elif result.total_mandatory > 0:
        summary = "All mandatory complete"
    else:
        summary = ""
    
    return {
        "has_errors": errors > 0,
        "has_warnings": incomplete > 0,
        "error_count": errors,
        "warning_count": incomplete,
        "summary": summary,
    }
