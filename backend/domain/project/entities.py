"""
Project Domain - Entities.

Configuration, quotes, snapshots and the other records a project owns.
Snapshots, amendments and sent quotes are historical records: once created
they are never mutated.
"""

from __future__ import annotations
import copy
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from domain.shared.base_entity import Entity, utc_now
from domain.shared.exceptions import InvalidOperationException, ValidationException
from domain.shared.value_objects import (
    AmendmentType,
    ConfigurationItemType,
    DocumentStatus,
    ProductionStageStatus,
    QuoteStatus,
    SnapshotTrigger,
)


# Fixed production pipeline seeded when production starts: (code, name, estimated days)
DEFAULT_PRODUCTION_STAGES: Tuple[Tuple[str, str, int], ...] = (
    ("PREP", "Preparation", 5),
    ("HULL", "Hull Construction", 15),
    ("PROPULSION", "Propulsion Installation", 7),
    ("ELECTRICAL", "Electrical Systems", 10),
    ("INTERIOR", "Interior Fit-out", 12),
    ("EXTERIOR", "Exterior & Finishing", 8),
    ("SYSTEMS", "Navigation & Safety Systems", 5),
    ("TESTING", "Testing & Quality Assurance", 5),
    ("FINAL", "Final Inspection & Handover Prep", 3),
)


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass(eq=False)
class ConfigurationItem(Entity):
    """
    One line of equipment in a project configuration.

    Sell-side figures (``unit_price_excl_vat``, ``line_total_excl_vat``) and
    cost-side figures (``unit_cost``, ``line_cost``) are filled in by the
    pricing function when the item is added or changed; the BOM copies them.
    """

    item_type: ConfigurationItemType = ConfigurationItemType.ARTICLE
    category: str = ""
    name: str = ""
    description: Optional[str] = None
    article_number: Optional[str] = None
    quantity: Decimal = Decimal("1")
    unit: str = "pcs"

    # Sell price
    unit_price_excl_vat: Decimal = Decimal("0")
    line_total_excl_vat: Decimal = Decimal("0")

    # Cost price (None = unknown, estimated from sell price)
    cost_price: Optional[Decimal] = None
    unit_cost: Decimal = Decimal("0")
    line_cost: Decimal = Decimal("0")
    is_cost_estimated: bool = False

    is_included: bool = True
    ce_relevant: bool = False
    safety_critical: bool = False
    sort_order: int = 0
    lead_time_days: Optional[int] = None
    supplier: Optional[str] = None


@dataclass(eq=False)
class ProjectConfiguration:
    """
    The live working equipment list and its computed pricing totals.

    ``boat_model_version_id`` can be set once; any later attempt to change it
    raises. Changing the boat model goes through an amendment.
    """

    boat_model_version_id: Optional[str] = None
    propulsion_type: Optional[str] = None
    items: List[ConfigurationItem] = field(default_factory=list)

    subtotal_excl_vat: Decimal = Decimal("0")
    discount_percent: Decimal = Decimal("0")
    discount_amount: Decimal = Decimal("0")
    total_excl_vat: Decimal = Decimal("0")
    vat_rate: Decimal = Decimal("21")
    vat_amount: Decimal = Decimal("0")
    total_incl_vat: Decimal = Decimal("0")

    is_frozen: bool = False
    frozen_at: Optional[datetime] = None
    frozen_by: Optional[str] = None
    last_modified_at: Optional[datetime] = None
    last_modified_by: Optional[str] = None

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "boat_model_version_id":
            current = self.__dict__.get(name)
            if current and value != current:
                raise ValidationException(
                    "Boat model version cannot be changed after project creation. "
                    "Use an Amendment instead.",
                    field="boat_model_version_id",
                    value=value,
                )
        super().__setattr__(name, value)

    def replace_boat_model(self, boat_model_version_id: str) -> None:
        """Amendment-only path for changing the boat model."""
        self.__dict__["boat_model_version_id"] = boat_model_version_id

    @property
    def included_items(self) -> List[ConfigurationItem]:
        return [item for item in self.items if item.is_included]

    def get_item(self, item_id: UUID) -> Optional[ConfigurationItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def copy(self) -> ProjectConfiguration:
        return copy.deepcopy(self)


@dataclass(eq=False)
class ConfigurationSnapshot(Entity):
    """Immutable copy of the configuration at a freeze or amendment instant."""

    project_id: Optional[UUID] = None
    snapshot_number: int = 1
    data: ProjectConfiguration = field(default_factory=ProjectConfiguration)
    trigger: SnapshotTrigger = SnapshotTrigger.MANUAL
    trigger_reason: Optional[str] = None
    created_by: Optional[str] = None


# =============================================================================
# QUOTES
# =============================================================================

@dataclass(eq=False)
class QuoteLine(Entity):
    configuration_item_id: Optional[UUID] = None
    category: str = ""
    description: str = ""
    quantity: Decimal = Decimal("1")
    unit: str = "pcs"
    unit_price_excl_vat: Decimal = Decimal("0")
    line_total_excl_vat: Decimal = Decimal("0")
    is_optional: bool = False


# Fields that freeze once a quote leaves DRAFT
QUOTE_CONTENT_FIELDS = frozenset({
    "lines",
    "subtotal_excl_vat",
    "discount_percent",
    "discount_amount",
    "total_excl_vat",
    "vat_rate",
    "vat_amount",
    "total_incl_vat",
    "valid_until",
    "payment_terms",
    "delivery_terms",
    "delivery_weeks",
})


@dataclass(eq=False)
class ProjectQuote(Entity):
    """
    A versioned offer to the client.

    Lines and totals are writable only while the quote is DRAFT. ``lines``
    is always a tuple; replace it to change the lines. A revision is a new
    ProjectQuote with the next version number.
    """

    project_id: Optional[UUID] = None
    quote_number: str = ""
    version: int = 1
    status: QuoteStatus = QuoteStatus.DRAFT

    lines: Tuple[QuoteLine, ...] = ()
    subtotal_excl_vat: Decimal = Decimal("0")
    discount_percent: Decimal = Decimal("0")
    discount_amount: Decimal = Decimal("0")
    total_excl_vat: Decimal = Decimal("0")
    vat_rate: Decimal = Decimal("21")
    vat_amount: Decimal = Decimal("0")
    total_incl_vat: Decimal = Decimal("0")

    valid_until: Optional[datetime] = None
    payment_terms: str = ""
    delivery_terms: str = ""
    delivery_weeks: Optional[int] = None
    notes: Optional[str] = None

    sent_at: Optional[datetime] = None
    locked_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    superseded_at: Optional[datetime] = None
    superseded_by: Optional[UUID] = None
    created_by: Optional[str] = None

    def __setattr__(self, name: str, value: Any) -> None:
        if (
            name in QUOTE_CONTENT_FIELDS
            and name in self.__dict__
            and self.__dict__.get("status", QuoteStatus.DRAFT) != QuoteStatus.DRAFT
        ):
            raise InvalidOperationException(
                f"Quote {self.__dict__.get('quote_number')} is immutable once sent",
                current_state=self.__dict__["status"].value,
            )
        if name == "lines":
            value = tuple(value)
        super().__setattr__(name, value)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.status != QuoteStatus.SENT or self.valid_until is None:
            return False
        return (now or utc_now()) > self.valid_until

    def effective_status(self, now: Optional[datetime] = None) -> QuoteStatus:
        """Stored status, with EXPIRED derived for overdue SENT quotes."""
        return QuoteStatus.EXPIRED if self.is_expired(now) else self.status

    def supersede(self, by_quote_id: UUID, at: datetime) -> None:
        self.status = QuoteStatus.SUPERSEDED
        self.superseded_at = at
        self.superseded_by = by_quote_id


# =============================================================================
# AMENDMENTS, PINS, PRODUCTION, DOCUMENTS
# =============================================================================

@dataclass(eq=False)
class ProjectAmendment(Entity):
    """Approved post-freeze change, bracketed by a before and an after snapshot."""

    project_id: Optional[UUID] = None
    amendment_number: int = 1
    type: AmendmentType = AmendmentType.EQUIPMENT_CHANGE
    reason: str = ""
    before_snapshot_id: Optional[UUID] = None
    after_snapshot_id: Optional[UUID] = None
    price_impact_excl_vat: Decimal = Decimal("0")
    affected_items: List[str] = field(default_factory=list)
    requested_by: Optional[str] = None
    requested_at: Optional[datetime] = None
    approved_by: str = ""
    approved_at: Optional[datetime] = None


@dataclass(frozen=True)
class LibraryPins:
    """Library versions a confirmed order is bound to. Never re-resolved to latest."""

    boat_model_version_id: str
    catalog_version_id: str
    configuration_snapshot_id: Optional[UUID] = None
    template_version_ids: Dict[str, str] = field(default_factory=dict)
    procedure_version_ids: Tuple[str, ...] = ()
    pinned_at: Optional[datetime] = None
    pinned_by: Optional[str] = None


@dataclass(eq=False)
class ProductionStage(Entity):
    project_id: Optional[UUID] = None
    code: str = ""
    name: str = ""
    order: int = 0
    status: ProductionStageStatus = ProductionStageStatus.NOT_STARTED
    progress_percent: int = 0
    estimated_days: int = 0


@dataclass(eq=False)
class ProjectDocument(Entity):
    project_id: Optional[UUID] = None
    document_type: str = ""
    title: str = ""
    version: int = 1
    status: DocumentStatus = DocumentStatus.DRAFT
    created_by: Optional[str] = None
    finalized_at: Optional[datetime] = None
    finalized_by: Optional[str] = None
