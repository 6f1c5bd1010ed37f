"""
Domain Events.

Domain events are records of significant business occurrences.
They are collected on the aggregate and dispatched after the
surrounding transaction commits.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple
from uuid import UUID, uuid4

from .base_entity import utc_now


@dataclass(frozen=True)
class DomainEvent:
    """
    Base class for all domain events.
    
    Domain events are immutable records of something that happened in the domain.
    They are used for:
    - Decoupling bounded contexts
    - Triggering side effects (notifications, background jobs)
    - Audit trail
    """
    
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=utc_now)
    
    @property
    def event_type(self) -> str:
        """Get the event type name."""
        return self.__class__.__name__
    
    def to_dict(self) -> Dict[str, Any]:
        payload = {
            key: (str(value) if isinstance(value, (UUID, Decimal, datetime)) else value)
            for key, value in self.__dict__.items()
        }
        payload["event_type"] = self.event_type
        return payload


# =============================================================================
# PROJECT EVENTS
# =============================================================================

@dataclass(frozen=True)
class ProjectCreated(DomainEvent):
    """Event raised when a new project is created."""
    
    project_id: Optional[UUID] = None
    project_number: str = ""
    created_by: Optional[str] = None


@dataclass(frozen=True)
class ProjectStatusChanged(DomainEvent):
    """Event raised when project status changes."""
    
    project_id: Optional[UUID] = None
    old_status: str = ""
    new_status: str = ""
    reason: Optional[str] = None
    changed_by: Optional[str] = None


@dataclass(frozen=True)
class MilestoneReached(DomainEvent):
    """Event raised after the milestone effects of a transition were applied."""
    
    project_id: Optional[UUID] = None
    status: str = ""
    effects: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ConfigurationFrozen(DomainEvent):
    """Event raised when the working configuration is frozen into a snapshot."""
    
    project_id: Optional[UUID] = None
    snapshot_id: Optional[UUID] = None
    trigger: str = ""


@dataclass(frozen=True)
class BOMBaselineGenerated(DomainEvent):
    """Event raised when a BOM snapshot is derived from a configuration snapshot."""
    
    project_id: Optional[UUID] = None
    bom_snapshot_id: Optional[UUID] = None
    configuration_snapshot_id: Optional[UUID] = None
    total_cost_excl_vat: Decimal = Decimal("0")


# =============================================================================
# QUOTE & AMENDMENT EVENTS
# =============================================================================

@dataclass(frozen=True)
class QuoteStatusChanged(DomainEvent):
    """Event raised when a quote moves between DRAFT/SENT/ACCEPTED/REJECTED/SUPERSEDED."""
    
    project_id: Optional[UUID] = None
    quote_id: Optional[UUID] = None
    old_status: str = ""
    new_status: str = ""


@dataclass(frozen=True)
class AmendmentRecorded(DomainEvent):
    """Event raised when a post-freeze amendment is recorded."""
    
    project_id: Optional[UUID] = None
    amendment_id: Optional[UUID] = None
    amendment_type: str = ""
    price_impact_excl_vat: Decimal = Decimal("0")


# =============================================================================
# COMPLIANCE EVENTS
# =============================================================================

@dataclass(frozen=True)
class CertificationFinalized(DomainEvent):
    """Event raised when a compliance certification pack is finalized."""
    
    project_id: Optional[UUID] = None
    certification_id: Optional[UUID] = None
    had_warnings: bool = False
