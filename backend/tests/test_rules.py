"""Tests for the Result-returning business rules."""

from datetime import timedelta
from decimal import Decimal

from domain.project.aggregates import Project
from domain.project.entities import ConfigurationItem, ProjectQuote, QuoteLine
from domain.project.rules import (
    AmendmentRules,
    ComplianceRules,
    ConfigurationRules,
    ProjectRules,
    QuoteRules,
)
from domain.shared.base_entity import utc_now
from domain.shared.result import Err, Ok
from domain.shared.value_objects import ProjectStatus, QuoteStatus


def make_project(status=ProjectStatus.DRAFT, frozen=False):
    project = Project.create(project_number="PRJ-2026-0001", title="Eagle 1000", client_id="client-1")
    project.status = status
    project.configuration.is_frozen = frozen
    return project


def make_quote(status=QuoteStatus.DRAFT, total="121.00", lines=1, valid_days=30):
    return ProjectQuote(
        quote_number="QUO-2026-0001-v1",
        status=status,
        lines=[QuoteLine(description=f"Line {n}") for n in range(lines)],
        total_incl_vat=Decimal(total),
        valid_until=utc_now() + timedelta(days=valid_days),
    )


class TestProjectRules:

    def test_can_edit(self):
        assert ProjectRules.can_edit(make_project()) == Ok(True)
        assert ProjectRules.can_edit(make_project(frozen=True)) == Err(
            "Configuration is frozen. Use amendments to make changes.")
        assert ProjectRules.can_edit(make_project(ProjectStatus.DELIVERED)) == Err(
            "Project is locked after delivery")

    def test_can_edit_after_emergency_unlock(self):
        # Frozen status but unfrozen configuration
        assert ProjectRules.can_edit(make_project(ProjectStatus.IN_PRODUCTION, frozen=False)).ok

    def test_archived_project_cannot_be_edited(self):
        project = make_project()
        project.archive("1")
        assert ProjectRules.can_edit(project) == Err("Project is archived")

    def test_can_archive(self):
        assert ProjectRules.can_archive(make_project()).ok
        assert ProjectRules.can_archive(make_project(ProjectStatus.CLOSED)).ok
        assert ProjectRules.can_archive(make_project(ProjectStatus.QUOTED)) == Err(
            "Can only archive closed or draft projects")

    def test_validate_collects_every_error(self):
        result = ProjectRules.validate({"title": "  ", "client_id": None})
        assert result == Err(["Title is required", "Client is required", "Project type is required"])


class TestQuoteRules:

    def test_can_send(self):
        assert QuoteRules.can_send(make_quote()).ok
        assert QuoteRules.can_send(make_quote(lines=0)) == Err("Quote must have at least one line item")
        assert QuoteRules.can_send(make_quote(total="0")) == Err("Quote total must be greater than zero")
        assert QuoteRules.can_send(make_quote(QuoteStatus.SENT)) == Err("Only draft quotes can be sent")

    def test_can_accept(self):
        assert QuoteRules.can_accept(make_quote(QuoteStatus.SENT)).ok
        assert QuoteRules.can_accept(make_quote(QuoteStatus.SENT, valid_days=-1)) == Err("Quote has expired")
        assert QuoteRules.can_accept(make_quote(QuoteStatus.DRAFT)) == Err("Only sent quotes can be accepted")

    def test_only_drafts_are_mutable(self):
        assert not QuoteRules.is_immutable(make_quote())
        for status in (QuoteStatus.SENT, QuoteStatus.ACCEPTED, QuoteStatus.REJECTED, QuoteStatus.SUPERSEDED):
            assert QuoteRules.is_immutable(make_quote(status))
            assert not QuoteRules.can_edit(make_quote(status)).ok

    def test_validate(self):
        result = QuoteRules.validate({"lines": [], "payment_terms": "", "delivery_terms": "EXW"})
        assert result == Err([
            "Quote must have at least one line",
            "Validity date is required",
            "Payment terms are required",
        ])


class TestConfigurationRules:

    def test_can_modify(self):
        assert ConfigurationRules.can_modify(False, ProjectStatus.QUOTED).ok
        assert ConfigurationRules.can_modify(True, ProjectStatus.DRAFT) == Err("Configuration is frozen")
        assert ConfigurationRules.can_modify(False, ProjectStatus.IN_PRODUCTION) == Err(
            "Cannot modify configuration in IN_PRODUCTION status")

    def test_validate_item(self):
        result = ConfigurationRules.validate_item({
            "name": "", "category": "Deck", "quantity": "-1", "unit_price_excl_vat": "abc", "unit": "pcs",
        })
        assert result == Err([
            "Item name is required",
            "Quantity must be a positive number",
            "Unit price must be a positive number",
        ])

    def test_zero_quantity_and_price_are_allowed(self):
        data = {"name": "Bilge pump", "category": "Deck", "quantity": 0, "unit_price_excl_vat": 0, "unit": "pcs"}
        assert ConfigurationRules.validate_item(data).ok

    def test_duplicate_is_case_insensitive(self):
        items = [ConfigurationItem(name="Bow Thruster", category="Propulsion")]
        assert ConfigurationRules.has_duplicate(items, "bow thruster", "PROPULSION")
        assert not ConfigurationRules.has_duplicate(items, "bow thruster", "Electrical")


class TestAmendmentRules:

    def test_only_frozen_unlocked_statuses(self):
        for status in (ProjectStatus.ORDER_CONFIRMED, ProjectStatus.IN_PRODUCTION, ProjectStatus.READY_FOR_DELIVERY):
            assert AmendmentRules.can_amend(make_project(status)).ok
        assert AmendmentRules.can_amend(make_project(ProjectStatus.OFFER_SENT)) == Err(
            "Amendments are only needed for frozen projects")
        assert AmendmentRules.can_amend(make_project(ProjectStatus.DELIVERED)) == Err(
            "Project is locked and cannot be amended")

    def test_validate_requires_reason_and_approver(self):
        result = AmendmentRules.validate({"type": "scope_change", "reason": " "})
        assert result == Err(["Reason is required for amendments", "Approver is required"])


class TestComplianceRules:

    def test_relevant_items_exclude_unincluded(self):
        items = [
            ConfigurationItem(name="Life raft", ce_relevant=True, safety_critical=True),
            ConfigurationItem(name="Fire blanket", safety_critical=True, is_included=False),
            ConfigurationItem(name="Teak deck"),
        ]
        assert [i.name for i in ComplianceRules.get_ce_relevant_items(items)] == ["Life raft"]
        assert [i.name for i in ComplianceRules.get_safety_critical_items(items)] == ["Life raft"]
