"""
Project Domain - Business Rules.

Predicates gating mutating operations. Every function returns a Result so
callers can chain checks before committing anything; validators return the
full list of problems instead of stopping at the first one.
"""

from __future__ import annotations
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, Iterable, List, Mapping, Optional

from domain.shared.base_entity import utc_now
from domain.shared.result import Err, Ok, Result, collect
from domain.shared.value_objects import ProjectStatus, QuoteStatus

from . import status_machine
from .entities import ConfigurationItem, ProjectQuote

if TYPE_CHECKING:
    from .aggregates import Project


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _negative_or_missing(value: Any) -> bool:
    if value is None or value == "":
        return True
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return True
    return not number.is_finite() or number < 0


# =============================================================================
# PROJECT RULES
# =============================================================================

class ProjectRules:

    @staticmethod
    def can_edit(project: Project) -> Result:
        if project.archived_at:
            return Err("Project is archived")
        if status_machine.is_locked(project.status):
            return Err("Project is locked after delivery")
        if status_machine.is_frozen(project.status) and not project.configuration.is_frozen:
            # Status is frozen but the configuration was emergency-unlocked
            return Ok(True)
        if project.configuration.is_frozen:
            return Err("Configuration is frozen. Use amendments to make changes.")
        return Ok(True)

    @staticmethod
    def can_archive(project: Project) -> Result:
        if project.archived_at:
            return Err("Project is already archived")
        if project.status not in (ProjectStatus.CLOSED, ProjectStatus.DRAFT):
            return Err("Can only archive closed or draft projects")
        return Ok(True)

    @staticmethod
    def validate(data: Mapping[str, Any]) -> Result:
        errors: List[str] = []
        if _blank(data.get("title")):
            errors.append("Title is required")
        if _blank(data.get("client_id")):
            errors.append("Client is required")
        if not data.get("type"):
            errors.append("Project type is required")
        return collect(errors)


# =============================================================================
# QUOTE RULES
# =============================================================================

class QuoteRules:
    """DRAFT -> SENT -> ACCEPTED | REJECTED; anything but DRAFT is immutable."""

    @staticmethod
    def can_edit(quote: ProjectQuote) -> Result:
        if quote.status != QuoteStatus.DRAFT:
            return Err("Only draft quotes can be edited")
        return Ok(True)

    @staticmethod
    def can_send(quote: ProjectQuote) -> Result:
        if quote.status != QuoteStatus.DRAFT:
            return Err("Only draft quotes can be sent")
        if not quote.lines:
            return Err("Quote must have at least one line item")
        if quote.total_incl_vat <= 0:
            return Err("Quote total must be greater than zero")
        return Ok(True)

    @staticmethod
    def can_accept(quote: ProjectQuote, now: Optional[datetime] = None) -> Result:
        if quote.status != QuoteStatus.SENT:
            return Err("Only sent quotes can be accepted")
        if quote.valid_until is None or (now or utc_now()) > quote.valid_until:
            return Err("Quote has expired")
        return Ok(True)

    @staticmethod
    def is_immutable(quote: ProjectQuote) -> bool:
        return quote.status != QuoteStatus.DRAFT

    @staticmethod
    def validate(data: Mapping[str, Any]) -> Result:
        errors: List[str] = []
        if not data.get("lines"):
            errors.append("Quote must have at least one line")
        if not data.get("valid_until"):
            errors.append("Validity date is required")
        if _blank(data.get("payment_terms")):
            errors.append("Payment terms are required")
        if _blank(data.get("delivery_terms")):
            errors.append("Delivery terms are required")
        return collect(errors)


# =============================================================================
# CONFIGURATION RULES
# =============================================================================

class ConfigurationRules:

    @staticmethod
    def can_modify(is_frozen: bool, project_status: ProjectStatus) -> Result:
        if is_frozen:
            return Err("Configuration is frozen")
        if not status_machine.is_editable(project_status):
            return Err(f"Cannot modify configuration in {project_status.name} status")
        return Ok(True)

    @staticmethod
    def validate_item(data: Mapping[str, Any]) -> Result:
        errors: List[str] = []
        if _blank(data.get("name")):
            errors.append("Item name is required")
        if _blank(data.get("category")):
            errors.append("Category is required")
        if _negative_or_missing(data.get("quantity")):
            errors.append("Quantity must be a positive number")
        if _negative_or_missing(data.get("unit_price_excl_vat")):
            errors.append("Unit price must be a positive number")
        if _blank(data.get("unit")):
            errors.append("Unit is required")
        return collect(errors)

    @staticmethod
    def has_duplicate(items: Iterable[ConfigurationItem], name: str, category: str) -> bool:
        return any(
            item.name.lower() == name.lower() and item.category.lower() == category.lower()
            for item in items
        )


# =============================================================================
# AMENDMENT RULES
# =============================================================================

class AmendmentRules:
    """Amendments apply exactly to ORDER_CONFIRMED, IN_PRODUCTION and READY_FOR_DELIVERY."""

    @staticmethod
    def can_amend(project: Project) -> Result:
        if not status_machine.is_frozen(project.status):
            return Err("Amendments are only needed for frozen projects")
        if status_machine.is_locked(project.status):
            return Err("Project is locked and cannot be amended")
        return Ok(True)

    @staticmethod
    def validate(data: Mapping[str, Any]) -> Result:
        errors: List[str] = []
        if not data.get("type"):
            errors.append("Amendment type is required")
        if _blank(data.get("reason")):
            errors.append("Reason is required for amendments")
        if _blank(data.get("approved_by")):
            errors.append("Approver is required")
        return collect(errors)


# =============================================================================
# CE / SAFETY RULES
# =============================================================================

class ComplianceRules:

    @staticmethod
    def get_ce_relevant_items(items: Iterable[ConfigurationItem]) -> List[ConfigurationItem]:
        return [item for item in items if item.ce_relevant and item.is_included]

    @staticmethod
    def get_safety_critical_items(items: Iterable[ConfigurationItem]) -> List[ConfigurationItem]:
        return [item for item in items if item.safety_critical and item.is_included]
