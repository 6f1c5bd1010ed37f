"""
Quote Service.

Versioned client offers. A quote is built from the included configuration
items and is writable only while DRAFT; sending it drives the project
along DRAFT -> QUOTED -> OFFER_SENT through the status machine so the
LOCK_QUOTE milestone fires in the same instant as the status change.
"""

import copy
import logging
from datetime import timedelta
from typing import Any, List, Mapping, Optional
from uuid import UUID, uuid4

from application.ports import AuditContext, AuditLogPort, SettingsProvider
from application.services.base import ProjectScopedService
from application.services.project_service import ProjectService
from domain.auth.authorization import Permission
from domain.project import pricing
from domain.project.aggregates import Project
from domain.project.entities import ConfigurationItem, ProjectQuote, QuoteLine
from domain.project.repositories import ProjectRepository
from domain.project.rules import QuoteRules
from domain.shared.base_entity import utc_now
from domain.shared.exceptions import EntityNotFoundException, InvalidOperationException
from domain.shared.value_objects import AuditAction, ProjectStatus, QuoteStatus, to_decimal

logger = logging.getLogger(__name__)


def quote_number_for(project: Project, version: int) -> str:
    """PRJ-2026-0001 -> QUO-2026-0001-v2"""
    return f"{project.project_number.replace('PRJ', 'QUO', 1)}-v{version}"


def line_from_item(item: ConfigurationItem) -> QuoteLine:
    description = item.name + (f" - {item.description}" if item.description else "")
    return QuoteLine(
        configuration_item_id=item.id,
        category=item.category,
        description=description,
        quantity=item.quantity,
        unit=item.unit,
        unit_price_excl_vat=item.unit_price_excl_vat,
        line_total_excl_vat=item.line_total_excl_vat,
    )


def line_from_data(data: Mapping[str, Any]) -> QuoteLine:
    quantity = to_decimal(data.get("quantity", 1))
    unit_price = to_decimal(data.get("unit_price_excl_vat", 0))
    return QuoteLine(
        configuration_item_id=data.get("configuration_item_id"),
        category=data.get("category", ""),
        description=data.get("description", ""),
        quantity=quantity,
        unit=data.get("unit") or "pcs",
        unit_price_excl_vat=unit_price,
        line_total_excl_vat=pricing.line_total(quantity, unit_price),
        is_optional=data.get("is_optional", False),
    )


def apply_quote_totals(quote: ProjectQuote, totals: pricing.PricingTotals) -> None:
    quote.subtotal_excl_vat = totals.subtotal_excl_vat
    quote.discount_percent = totals.discount_percent
    quote.discount_amount = totals.discount_amount
    quote.total_excl_vat = totals.total_excl_vat
    quote.vat_rate = totals.vat_rate
    quote.vat_amount = totals.vat_amount
    quote.total_incl_vat = totals.total_incl_vat


class QuoteService(ProjectScopedService):

    def __init__(
        self,
        repository: ProjectRepository,
        audit: AuditLogPort,
        settings: Optional[SettingsProvider] = None,
        project_service: Optional[ProjectService] = None,
    ):
        super().__init__(repository, audit, settings)
        self.project_service = project_service or ProjectService(repository, audit, settings)

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get_quotes(self, project_id: UUID) -> List[ProjectQuote]:
        return sorted(self._load(project_id).quotes, key=lambda q: q.version)

    def get_current_quote(self, project_id: UUID) -> Optional[ProjectQuote]:
        return self._load(project_id).current_quote

    @staticmethod
    def _get_quote(project: Project, quote_id: UUID) -> ProjectQuote:
        quote = project.get_quote(quote_id)
        if quote is None:
            raise EntityNotFoundException("Quote", quote_id)
        return quote

    # =========================================================================
    # DRAFTS
    # =========================================================================

    def create_draft(
        self,
        project_id: UUID,
        context: AuditContext,
        options: Optional[Mapping[str, Any]] = None,
    ) -> ProjectQuote:
        """
        Build a DRAFT quote from the included configuration items.

        VAT, validity and terms are read from the settings now and stored on
        the quote; later settings changes do not touch existing quotes.
        """
        context.require(Permission.QUOTE_CREATE, resource="Quote")
        options = options or {}
        settings = self._pricing()

        with self.repository.atomic():
            project = self._load(project_id)
            configuration = project.configuration
            if not configuration.items:
                raise InvalidOperationException(
                    "Configuration has no items. Add items before creating a quote.",
                    current_state=project.status.value,
                )

            now = utc_now()
            version = len(project.quotes) + 1
            lines = [line_from_item(item) for item in configuration.included_items]
            validity_days = options.get("validity_days") or settings.quote_validity_days
            data = {
                "lines": lines,
                "valid_until": now + timedelta(days=int(validity_days)),
                "payment_terms": options.get("payment_terms") or settings.default_payment_terms,
                "delivery_terms": options.get("delivery_terms") or settings.default_delivery_terms,
            }
            self._raise_if_invalid(QuoteRules.validate(data))

            quote = ProjectQuote(
                quote_number=quote_number_for(project, version),
                version=version,
                delivery_weeks=options.get("delivery_weeks"),
                notes=options.get("notes"),
                created_by=context.user_id,
                created_at=now,
                **data,
            )
            apply_quote_totals(quote, pricing.calculate_totals(
                configuration.items, configuration.discount_percent, settings.vat_rate,
            ))

            project.add_quote(quote, now)
            project.mark_updated(context.user_id)
            self._save(project)
            self.audit.log(
                context, AuditAction.CREATE, "ProjectQuote", quote.id,
                f"Created quote {quote.quote_number}",
                after={
                    "quote_number": quote.quote_number,
                    "version": version,
                    "total_incl_vat": str(quote.total_incl_vat),
                },
            )

        logger.info("Created quote %s (%s incl. VAT)", quote.quote_number, quote.total_incl_vat)
        return quote

    def update_draft(
        self,
        project_id: UUID,
        quote_id: UUID,
        updates: Mapping[str, Any],
        context: AuditContext,
    ) -> ProjectQuote:
        with self.repository.atomic():
            project = self._load(project_id)
            quote = self._get_quote(project, quote_id)
            if quote.status != QuoteStatus.DRAFT:
                raise InvalidOperationException(
                    "Only draft quotes can be updated", current_state=quote.status.value,
                )

            before = {"total_incl_vat": str(quote.total_incl_vat), "line_count": len(quote.lines)}

            if "lines" in updates:
                quote.lines = [line_from_data(line) for line in updates["lines"]]
            for name in ("valid_until", "payment_terms", "delivery_terms", "delivery_weeks", "notes"):
                if name in updates:
                    setattr(quote, name, updates[name])

            discount = updates.get("discount_percent", quote.discount_percent)
            subtotal = sum(
                (line.line_total_excl_vat for line in quote.lines if not line.is_optional),
                to_decimal(0),
            )
            apply_quote_totals(quote, pricing.totals_for_subtotal(subtotal, discount, quote.vat_rate))
            quote.touch()

            self._save(project)
            self.audit.log_update(context, "ProjectQuote", quote.id, before, {
                "total_incl_vat": str(quote.total_incl_vat),
                "line_count": len(quote.lines),
            })
        return quote

    def create_new_version(self, project_id: UUID, source_quote_id: UUID, context: AuditContext) -> ProjectQuote:
        """Copy a quote's lines and terms into a new DRAFT with the next version number."""
        context.require(Permission.QUOTE_CREATE, resource="Quote")
        settings = self._pricing()

        with self.repository.atomic():
            project = self._load(project_id)
            source = project.get_quote(source_quote_id)
            if source is None:
                raise InvalidOperationException("Source quote not found")

            now = utc_now()
            version = len(project.quotes) + 1
            lines = []
            for line in source.lines:
                duplicate = copy.deepcopy(line)
                duplicate.id = uuid4()
                lines.append(duplicate)

            quote = ProjectQuote(
                quote_number=quote_number_for(project, version),
                version=version,
                lines=lines,
                subtotal_excl_vat=source.subtotal_excl_vat,
                discount_percent=source.discount_percent,
                discount_amount=source.discount_amount,
                total_excl_vat=source.total_excl_vat,
                vat_rate=source.vat_rate,
                vat_amount=source.vat_amount,
                total_incl_vat=source.total_incl_vat,
                valid_until=now + timedelta(days=settings.quote_validity_days),
                payment_terms=source.payment_terms,
                delivery_terms=source.delivery_terms,
                delivery_weeks=source.delivery_weeks,
                notes=source.notes,
                created_by=context.user_id,
                created_at=now,
            )
            project.add_quote(quote, now)
            project.mark_updated(context.user_id)
            self._save(project)
            self.audit.log_create(context, "ProjectQuote", quote.id, {
                "quote_number": quote.quote_number,
                "version": version,
                "based_on": str(source.id),
            })

        logger.info("Created quote %s from %s", quote.quote_number, source.quote_number)
        return quote

    # =========================================================================
    # STATUS
    # =========================================================================

    def mark_as_sent(self, project_id: UUID, quote_id: UUID, context: AuditContext) -> ProjectQuote:
        context.require(Permission.QUOTE_SEND, resource="Quote")

        with self.repository.atomic():
            project = self._load(project_id)
            quote = self._get_quote(project, quote_id)
            if quote.status != QuoteStatus.DRAFT:
                raise InvalidOperationException(
                    "Only draft quotes can be marked as sent", current_state=quote.status.value,
                )
            self._raise_if_err(QuoteRules.can_send(quote), quote.status.value)
            if not project.is_editable:
                raise InvalidOperationException(
                    f"Cannot send quotes in {project.status.name} status",
                    current_state=project.status.value,
                )

            now = utc_now()
            # DRAFT -> QUOTED needs the quote to still be a draft
            if project.status == ProjectStatus.DRAFT:
                self.project_service.apply_transition(
                    project, ProjectStatus.QUOTED, context, reason=f"Quote {quote.quote_number} sent", now=now,
                )

            project.set_quote_status(quote, QuoteStatus.SENT)
            quote.sent_at = now

            if project.status == ProjectStatus.QUOTED:
                self.project_service.apply_transition(
                    project, ProjectStatus.OFFER_SENT, context, reason=f"Quote {quote.quote_number} sent", now=now,
                )
            else:
                # Already OFFER_SENT: a revised offer replaces the earlier one
                project.lock_quote(now)

            self._save(project)
            self.audit.log_status_transition(
                context, "ProjectQuote", quote.id, QuoteStatus.DRAFT.name, QuoteStatus.SENT.name,
            )

        logger.info("Quote %s sent; project %s is %s", quote.quote_number, project.project_number, project.status.name)
        return quote

    def mark_as_accepted(self, project_id: UUID, quote_id: UUID, context: AuditContext) -> ProjectQuote:
        with self.repository.atomic():
            project = self._load(project_id)
            quote = self._get_quote(project, quote_id)
            now = utc_now()
            result = QuoteRules.can_accept(quote, now)
            if not result.ok:
                logger.warning("Rejected acceptance of %s: %s", quote.quote_number, result.error)
            self._raise_if_err(result, quote.effective_status(now).value)

            project.set_quote_status(quote, QuoteStatus.ACCEPTED)
            quote.accepted_at = now
            project.supersede_open_quotes(quote, now)
            project.current_quote_id = quote.id
            project.mark_updated(context.user_id)

            self._save(project)
            self.audit.log_status_transition(
                context, "ProjectQuote", quote.id, QuoteStatus.SENT.name, QuoteStatus.ACCEPTED.name,
            )

        logger.info("Quote %s accepted", quote.quote_number)
        return quote

    def mark_as_rejected(
        self,
        project_id: UUID,
        quote_id: UUID,
        context: AuditContext,
        reason: Optional[str] = None,
    ) -> ProjectQuote:
        with self.repository.atomic():
            project = self._load(project_id)
            quote = self._get_quote(project, quote_id)
            if quote.status != QuoteStatus.SENT:
                raise InvalidOperationException(
                    "Only sent quotes can be rejected", current_state=quote.status.value,
                )

            project.set_quote_status(quote, QuoteStatus.REJECTED)
            quote.rejected_at = utc_now()
            quote.rejection_reason = reason
            project.mark_updated(context.user_id)

            self._save(project)
            self.audit.log_status_transition(
                context, "ProjectQuote", quote.id, QuoteStatus.SENT.name, QuoteStatus.REJECTED.name, reason,
            )

        logger.info("Quote %s rejected", quote.quote_number)
        return quote
