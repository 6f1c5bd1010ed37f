"""Tests for QuoteService: drafts, versions and the send/accept/reject flow."""

from datetime import timedelta
from decimal import Decimal

import pytest

from application.ports import PricingSettings
from domain.shared.base_entity import utc_now
from domain.shared.exceptions import AuthorizationException, InvalidOperationException
from domain.shared.value_objects import ProjectStatus, QuoteStatus


class TestCreateDraft:

    def test_draft_from_configuration(self, configured_project, quote_service, admin):
        quote = quote_service.create_draft(configured_project.id, admin)

        assert quote.status == QuoteStatus.DRAFT
        assert quote.version == 1
        assert quote.quote_number == configured_project.project_number.replace("PRJ", "QUO") + "-v1"
        assert [line.description for line in quote.lines] == [
            "Volvo D4 inboard engine", "LED navigation light set",
        ]
        assert quote.subtotal_excl_vat == Decimal("2500.00")
        assert quote.vat_amount == Decimal("525.00")
        assert quote.total_incl_vat == Decimal("3025.00")
        assert quote.payment_terms.startswith("30% upon order confirmation")
        assert quote.delivery_terms.startswith("Ex Works (EXW)")
        assert timedelta(days=29) < quote.valid_until - utc_now() <= timedelta(days=30)

    def test_requires_items(self, project, quote_service, admin):
        with pytest.raises(InvalidOperationException, match="Configuration has no items"):
            quote_service.create_draft(project.id, admin)

    def test_requires_quote_permission(self, configured_project, quote_service, production):
        with pytest.raises(AuthorizationException):
            quote_service.create_draft(configured_project.id, production)

    def test_excluded_items_are_left_out(self, configured_project, configuration_service, quote_service, admin):
        lights = configured_project.configuration.items[1]
        configuration_service.update_item(configured_project.id, lights.id, {"is_included": False}, admin)
        quote = quote_service.create_draft(configured_project.id, admin)
        assert len(quote.lines) == 1
        assert quote.total_incl_vat == Decimal("2420.00")

    def test_new_draft_supersedes_earlier_drafts(self, configured_project, quote_service, admin):
        first = quote_service.create_draft(configured_project.id, admin)
        second = quote_service.create_draft(configured_project.id, admin)

        quotes = quote_service.get_quotes(configured_project.id)
        assert [q.status for q in quotes] == [QuoteStatus.SUPERSEDED, QuoteStatus.DRAFT]
        assert quotes[0].superseded_by == second.id
        assert quote_service.get_current_quote(configured_project.id).id == second.id
        assert first.quote_number.endswith("-v1") and second.quote_number.endswith("-v2")

    def test_settings_are_captured_at_creation(self, configured_project, quote_service, settings_provider, admin):
        quote = quote_service.create_draft(configured_project.id, admin)
        settings_provider.settings = PricingSettings(vat_rate=Decimal("9"))
        assert quote_service.get_current_quote(configured_project.id).vat_rate == quote.vat_rate == Decimal("21")


class TestUpdateDraft:

    def test_replaces_lines_and_recomputes(self, configured_project, quote_service, admin):
        quote = quote_service.create_draft(configured_project.id, admin)
        updated = quote_service.update_draft(configured_project.id, quote.id, {
            "lines": [
                {"description": "Eagle 1000 hull", "quantity": 1, "unit_price_excl_vat": "2500"},
                {"description": "Bimini top", "quantity": 1, "unit_price_excl_vat": "800", "is_optional": True},
            ],
            "discount_percent": 10,
            "notes": "Launch in spring",
        }, admin)

        assert updated.subtotal_excl_vat == Decimal("2500.00")
        assert updated.discount_amount == Decimal("250.00")
        assert updated.total_incl_vat == Decimal("2722.50")
        assert updated.notes == "Launch in spring"

    def test_line_totals_survive_a_reload(self, configured_project, quote_service, admin, repository):
        quote = quote_service.create_draft(configured_project.id, admin)
        quote_service.update_draft(configured_project.id, quote.id, {
            "lines": [
                {"description": "Antifouling", "quantity": 1, "unit_price_excl_vat": "100"},
                {"description": "Fenders", "quantity": 2, "unit_price_excl_vat": "100"},
                {"description": "Mooring lines", "quantity": 3, "unit_price_excl_vat": "100"},
            ],
        }, admin)

        stored = repository.get_by_id(configured_project.id).get_quote(quote.id)

        assert [line.line_total_excl_vat for line in stored.lines] == [
            Decimal("100.00"), Decimal("200.00"), Decimal("300.00"),
        ]
        assert stored.subtotal_excl_vat == Decimal("600.00")
        assert stored.vat_amount == Decimal("126.00")
        assert stored.total_incl_vat == Decimal("726.00")

    def test_sent_quote_is_immutable(self, configured_project, quote_service, admin):
        quote = quote_service.create_draft(configured_project.id, admin)
        sent = quote_service.mark_as_sent(configured_project.id, quote.id, admin)

        with pytest.raises(InvalidOperationException, match="Only draft quotes can be updated"):
            quote_service.update_draft(configured_project.id, quote.id, {"notes": "Too late"}, admin)
        with pytest.raises(InvalidOperationException, match="immutable once sent"):
            sent.total_incl_vat = Decimal("1")

    def test_sent_lines_cannot_be_edited_in_place(self, configured_project, quote_service, admin, repository):
        quote = quote_service.create_draft(configured_project.id, admin)
        sent = quote_service.mark_as_sent(configured_project.id, quote.id, admin)

        assert isinstance(sent.lines, tuple)
        with pytest.raises(AttributeError):
            sent.lines.append(sent.lines[0])
        with pytest.raises(InvalidOperationException, match="immutable once sent"):
            sent.lines = sent.lines + sent.lines[:1]

        stored = repository.get_by_id(configured_project.id).get_quote(quote.id)
        assert isinstance(stored.lines, tuple)
        assert len(stored.lines) == 2

    def test_new_version_copies_lines(self, configured_project, quote_service, admin):
        source = quote_service.create_draft(configured_project.id, admin)
        quote_service.mark_as_sent(configured_project.id, source.id, admin)

        revision = quote_service.create_new_version(configured_project.id, source.id, admin)
        assert revision.version == 2
        assert revision.status == QuoteStatus.DRAFT
        assert revision.total_incl_vat == source.total_incl_vat
        assert [l.description for l in revision.lines] == [l.description for l in source.lines]
        assert {l.id for l in revision.lines}.isdisjoint({l.id for l in source.lines})

    def test_new_version_needs_a_source(self, configured_project, quote_service, admin):
        with pytest.raises(InvalidOperationException, match="Source quote not found"):
            quote_service.create_new_version(configured_project.id, configured_project.id, admin)


class TestSend:

    def test_send_walks_the_project_to_offer_sent(self, configured_project, quote_service, sales, repository, audit):
        quote = quote_service.create_draft(configured_project.id, sales)
        sent = quote_service.mark_as_sent(configured_project.id, quote.id, sales)

        assert sent.status == QuoteStatus.SENT
        assert sent.locked_at == sent.sent_at
        project = repository.get_by_id(configured_project.id)
        assert project.status == ProjectStatus.OFFER_SENT

        descriptions = [e.description for e in audit.entries if e.entity_type == "Project"]
        assert descriptions[-2:] == [
            f"Project status: DRAFT → QUOTED (Quote {quote.quote_number} sent)",
            f"Project status: QUOTED → OFFER_SENT (Quote {quote.quote_number} sent)",
        ]

    def test_revised_offer_supersedes_the_sent_quote(self, configured_project, quote_service, admin):
        first = quote_service.create_draft(configured_project.id, admin)
        quote_service.mark_as_sent(configured_project.id, first.id, admin)
        revision = quote_service.create_new_version(configured_project.id, first.id, admin)
        quote_service.mark_as_sent(configured_project.id, revision.id, admin)

        statuses = {q.id: q.status for q in quote_service.get_quotes(configured_project.id)}
        assert statuses == {first.id: QuoteStatus.SUPERSEDED, revision.id: QuoteStatus.SENT}
        assert quote_service.get_current_quote(configured_project.id).id == revision.id

    def test_viewer_cannot_send(self, configured_project, quote_service, admin, viewer):
        quote = quote_service.create_draft(configured_project.id, admin)
        with pytest.raises(AuthorizationException):
            quote_service.mark_as_sent(configured_project.id, quote.id, viewer)

    def test_cannot_send_twice(self, configured_project, quote_service, admin):
        quote = quote_service.create_draft(configured_project.id, admin)
        quote_service.mark_as_sent(configured_project.id, quote.id, admin)
        with pytest.raises(InvalidOperationException, match="Only draft quotes can be marked as sent"):
            quote_service.mark_as_sent(configured_project.id, quote.id, admin)

    def test_cannot_send_after_order_confirmation(self, confirmed_project, quote_service, admin, repository):
        accepted = confirmed_project.current_quote
        revision = quote_service.create_new_version(confirmed_project.id, accepted.id, admin)
        with pytest.raises(InvalidOperationException, match="Cannot send quotes in ORDER_CONFIRMED status"):
            quote_service.mark_as_sent(confirmed_project.id, revision.id, admin)
        assert repository.get_by_id(confirmed_project.id).get_quote(revision.id).status == QuoteStatus.DRAFT


class TestAcceptReject:

    def test_accept(self, accepted_project):
        quote = accepted_project.current_quote
        assert quote.status == QuoteStatus.ACCEPTED
        assert quote.accepted_at is not None

    def test_expired_quote_cannot_be_accepted(self, configured_project, quote_service, admin, repository):
        quote = quote_service.create_draft(configured_project.id, admin, {"validity_days": -1})
        quote_service.mark_as_sent(configured_project.id, quote.id, admin)

        with pytest.raises(InvalidOperationException, match="Quote has expired") as exc_info:
            quote_service.mark_as_accepted(configured_project.id, quote.id, admin)
        assert exc_info.value.details["current_state"] == QuoteStatus.EXPIRED.value

        stored = repository.get_by_id(configured_project.id).get_quote(quote.id)
        # Expiry is observed, never stored
        assert stored.status == QuoteStatus.SENT
        assert stored.effective_status() == QuoteStatus.EXPIRED

    def test_draft_cannot_be_accepted(self, configured_project, quote_service, admin):
        quote = quote_service.create_draft(configured_project.id, admin)
        with pytest.raises(InvalidOperationException, match="Only sent quotes can be accepted"):
            quote_service.mark_as_accepted(configured_project.id, quote.id, admin)

    def test_reject(self, configured_project, quote_service, admin, audit):
        quote = quote_service.create_draft(configured_project.id, admin)
        quote_service.mark_as_sent(configured_project.id, quote.id, admin)
        rejected = quote_service.mark_as_rejected(configured_project.id, quote.id, admin, reason="Too expensive")

        assert rejected.status == QuoteStatus.REJECTED
        assert rejected.rejection_reason == "Too expensive"
        assert audit.entries[-1].description == "ProjectQuote status: SENT → REJECTED (Too expensive)"

    def test_only_sent_quotes_can_be_rejected(self, configured_project, quote_service, admin):
        quote = quote_service.create_draft(configured_project.id, admin)
        with pytest.raises(InvalidOperationException, match="Only sent quotes can be rejected"):
            quote_service.mark_as_rejected(configured_project.id, quote.id, admin)
