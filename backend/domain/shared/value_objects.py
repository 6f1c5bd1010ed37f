"""
Shared Value Objects used across multiple domains.

Value Objects are immutable objects that describe characteristics of a thing.
Two value objects are equal if all their properties are equal.
"""

from __future__ import annotations
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any, Union

from domain.shared.exceptions import ValidationException


# =============================================================================
# ENUMERATIONS - PROJECT LIFECYCLE
# =============================================================================

class ProjectStatus(str, Enum):
    """Lifecycle status of a boat-building project, in lifecycle order."""
    
    DRAFT = "draft"                              # Being configured
    QUOTED = "quoted"                            # Quote generated
    OFFER_SENT = "offer_sent"                    # Quote sent to client
    ORDER_CONFIRMED = "order_confirmed"          # Client accepted, configuration frozen
    IN_PRODUCTION = "in_production"              # Boat is being built
    READY_FOR_DELIVERY = "ready_for_delivery"    # Production complete
    DELIVERED = "delivered"                      # Handed over to client
    CLOSED = "closed"                            # Completed and archived
    
    @property
    def order(self) -> int:
        return list(ProjectStatus).index(self)


class ProjectType(str, Enum):
    """Kind of work a project covers."""
    
    NEW_BUILD = "new_build"
    REFIT = "refit"
    MAINTENANCE = "maintenance"


class MilestoneEffectType(str, Enum):
    """Side effects a milestone transition triggers, executed in listed order."""
    
    LOCK_QUOTE = "lock_quote"
    FREEZE_CONFIGURATION = "freeze_configuration"
    GENERATE_BOM = "generate_bom"
    PIN_LIBRARY_VERSIONS = "pin_library_versions"
    INITIALIZE_PRODUCTION = "initialize_production"
    FINALIZE_DOCUMENTS = "finalize_documents"


class SnapshotTrigger(str, Enum):
    """Why a configuration snapshot was taken."""
    
    ORDER_CONFIRMED = "order_confirmed"
    AMENDMENT = "amendment"
    MANUAL = "manual"


class ConfigurationItemType(str, Enum):
    ARTICLE = "article"
    KIT = "kit"
    CUSTOM = "custom"
    LEGACY = "legacy"


class QuoteStatus(str, Enum):
    """
    Stored quote status.
    
    EXPIRED is observed from ``valid_until`` rather than stored by a transition.
    """
    
    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"
    SUPERSEDED = "superseded"


class AmendmentType(str, Enum):
    EQUIPMENT_ADD = "equipment_add"
    EQUIPMENT_REMOVE = "equipment_remove"
    EQUIPMENT_CHANGE = "equipment_change"
    SCOPE_CHANGE = "scope_change"
    PRICE_ADJUSTMENT = "price_adjustment"
    SPECIFICATION_CHANGE = "specification_change"


class BOMStatus(str, Enum):
    BASELINE = "baseline"
    REVISED = "revised"


class DocumentStatus(str, Enum):
    DRAFT = "draft"
    FINAL = "final"
    SUPERSEDED = "superseded"
    ARCHIVED = "archived"


class ProductionStageStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"


# =============================================================================
# ENUMERATIONS - COMPLIANCE
# =============================================================================

class CertificationType(str, Enum):
    CE = "ce"
    ES_TRIN = "es_trin"
    LLOYDS = "lloyds"
    OTHER = "other"


class ComplianceStatus(str, Enum):
    """Status shared by certifications, chapters and sections."""
    
    DRAFT = "draft"
    FINAL = "final"


class ChecklistItemType(str, Enum):
    DOC = "doc"                  # Documentation
    INSPECTION = "inspection"    # Inspection
    CALC = "calc"                # Calculation
    CONFIRM = "confirm"          # Confirmation


class ChecklistItemStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    PASSED = "passed"
    FAILED = "failed"
    NA = "na"
    
    @property
    def is_complete(self) -> bool:
        """PASSED and NA both satisfy a mandatory item."""
        return self in (ChecklistItemStatus.PASSED, ChecklistItemStatus.NA)
    
    @property
    def is_incomplete(self) -> bool:
        return self in (ChecklistItemStatus.NOT_STARTED, ChecklistItemStatus.IN_PROGRESS)


class ComplianceWarningLevel(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class AttachmentType(str, Enum):
    CERTIFICATE = "certificate"
    REPORT = "report"
    DRAWING = "drawing"
    PHOTO = "photo"
    CALCULATION = "calculation"
    OTHER = "other"


# =============================================================================
# ENUMERATIONS - AUDIT
# =============================================================================

class AuditAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    ARCHIVE = "archive"
    STATUS_TRANSITION = "status_transition"
    APPROVE = "approve"
    FREEZE = "freeze"
    GENERATE_DOCUMENT = "generate_document"
    AMENDMENT = "amendment"
    EMERGENCY_UNLOCK = "emergency_unlock"
    IMPORT = "import"


# =============================================================================
# MONEY HELPERS
# =============================================================================

CENT = Decimal("0.01")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Any) -> Decimal:
    """Coerce user input to Decimal without binary float artefacts."""
    if isinstance(value, Decimal):
        return value
    if value is None or value == "":
        return Decimal("0")
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        raise ValidationException(f"'{value}' is not a valid number", value=value)
    if not result.is_finite():
        raise ValidationException(f"'{value}' is not a valid number", value=value)
    return result


def round_money(value: Number) -> Decimal:
    """Round half-up to cents."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def round_to(value: Number, places: int) -> Decimal:
    exponent = Decimal(1).scaleb(-places)
    return to_decimal(value).quantize(exponent, rounding=ROUND_HALF_UP)


def percent(part: Number, whole: Number) -> int:
    """Whole-number percentage, rounded half-up; 0 when ``whole`` is zero."""
    whole = to_decimal(whole)
    if whole == 0:
        return 0
    return int((to_decimal(part) * 100 / whole).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
