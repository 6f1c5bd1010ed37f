"""
Project Domain - Status Machine.

Pure functions over the project lifecycle graph: which transitions are
legal, which statuses are milestones, and which side effects a milestone
transition must trigger. Nothing here touches storage.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Tuple

from domain.shared.value_objects import MilestoneEffectType, ProjectStatus


# Valid status transitions, in the order offered to the user.
# QUOTED -> DRAFT is the revision path, OFFER_SENT -> QUOTED re-quotes
# after client feedback, READY_FOR_DELIVERY -> IN_PRODUCTION is rework.
VALID_STATUS_TRANSITIONS: Dict[ProjectStatus, Tuple[ProjectStatus, ...]] = {
    ProjectStatus.DRAFT: (ProjectStatus.QUOTED,),
    ProjectStatus.QUOTED: (ProjectStatus.DRAFT, ProjectStatus.OFFER_SENT),
    ProjectStatus.OFFER_SENT: (ProjectStatus.QUOTED, ProjectStatus.ORDER_CONFIRMED),
    ProjectStatus.ORDER_CONFIRMED: (ProjectStatus.IN_PRODUCTION,),
    ProjectStatus.IN_PRODUCTION: (ProjectStatus.READY_FOR_DELIVERY,),
    ProjectStatus.READY_FOR_DELIVERY: (ProjectStatus.IN_PRODUCTION, ProjectStatus.DELIVERED),
    ProjectStatus.DELIVERED: (ProjectStatus.CLOSED,),
    ProjectStatus.CLOSED: (),  # Terminal
}


@dataclass(frozen=True)
class MilestoneEffect:
    type: MilestoneEffectType
    description: str


MILESTONE_EFFECTS: Dict[ProjectStatus, Tuple[MilestoneEffect, ...]] = {
    ProjectStatus.OFFER_SENT: (
        MilestoneEffect(
            MilestoneEffectType.LOCK_QUOTE,
            "Quote will be locked and PDF snapshot created",
        ),
    ),
    ProjectStatus.ORDER_CONFIRMED: (
        MilestoneEffect(
            MilestoneEffectType.FREEZE_CONFIGURATION,
            "Configuration will be frozen as snapshot",
        ),
        MilestoneEffect(
            MilestoneEffectType.GENERATE_BOM,
            "Bill of Materials baseline will be generated",
        ),
        MilestoneEffect(
            MilestoneEffectType.PIN_LIBRARY_VERSIONS,
            "Library versions will be pinned to project",
        ),
    ),
    ProjectStatus.IN_PRODUCTION: (
        MilestoneEffect(
            MilestoneEffectType.INITIALIZE_PRODUCTION,
            "Production stages will be initialized",
        ),
    ),
    ProjectStatus.DELIVERED: (
        MilestoneEffect(
            MilestoneEffectType.FINALIZE_DOCUMENTS,
            "All documents will be finalized",
        ),
    ),
}

EDITABLE_STATUSES: FrozenSet[ProjectStatus] = frozenset({
    ProjectStatus.DRAFT,
    ProjectStatus.QUOTED,
    ProjectStatus.OFFER_SENT,
})

FROZEN_STATUSES: FrozenSet[ProjectStatus] = frozenset({
    ProjectStatus.ORDER_CONFIRMED,
    ProjectStatus.IN_PRODUCTION,
    ProjectStatus.READY_FOR_DELIVERY,
    ProjectStatus.DELIVERED,
    ProjectStatus.CLOSED,
})

LOCKED_STATUSES: FrozenSet[ProjectStatus] = frozenset({
    ProjectStatus.DELIVERED,
    ProjectStatus.CLOSED,
})

STATUS_INFO: Dict[ProjectStatus, Tuple[str, str]] = {
    ProjectStatus.DRAFT: ("Draft", "Project is being configured"),
    ProjectStatus.QUOTED: ("Quoted", "Quote has been generated"),
    ProjectStatus.OFFER_SENT: ("Offer Sent", "Quote sent to client, awaiting response"),
    ProjectStatus.ORDER_CONFIRMED: ("Order Confirmed", "Client has accepted, configuration frozen"),
    ProjectStatus.IN_PRODUCTION: ("In Production", "Boat is being built"),
    ProjectStatus.READY_FOR_DELIVERY: ("Ready for Delivery", "Production complete, awaiting handover"),
    ProjectStatus.DELIVERED: ("Delivered", "Boat delivered to client"),
    ProjectStatus.CLOSED: ("Closed", "Project completed and archived"),
}


@dataclass(frozen=True)
class TransitionContext:
    """Facts about the project the caller gathered before asking for a transition."""
    
    has_quote_draft: bool = False
    has_quote_sent: bool = False
    has_quote_accepted: bool = False
    delivery_checklist_complete: Optional[bool] = None
    configuration_item_count: Optional[int] = None


@dataclass(frozen=True)
class TransitionValidation:
    is_valid: bool
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()
    requires_confirmation: bool = False
    milestone_effects: Tuple[MilestoneEffect, ...] = field(default_factory=tuple)


def can_transition(current: ProjectStatus, target: ProjectStatus) -> bool:
    return target in VALID_STATUS_TRANSITIONS.get(current, ())


def get_valid_next_statuses(status: ProjectStatus) -> List[ProjectStatus]:
    return list(VALID_STATUS_TRANSITIONS.get(status, ()))


def is_milestone(status: ProjectStatus) -> bool:
    return status in MILESTONE_EFFECTS


def get_milestone_effects(status: ProjectStatus) -> List[MilestoneEffect]:
    return list(MILESTONE_EFFECTS.get(status, ()))


def is_editable(status: ProjectStatus) -> bool:
    return status in EDITABLE_STATUSES


def is_frozen(status: ProjectStatus) -> bool:
    return status in FROZEN_STATUSES


def is_locked(status: ProjectStatus) -> bool:
    return status in LOCKED_STATUSES


def get_status_info(status: ProjectStatus) -> Dict[str, str]:
    label, description = STATUS_INFO[status]
    return {"status": status.value, "label": label, "description": description}


def validate_transition(
    current: ProjectStatus,
    target: ProjectStatus,
    context: Optional[TransitionContext] = None,
) -> TransitionValidation:
    """
    Check a transition against the graph and the business prerequisites.
    
    Advisory only: nothing is mutated. An illegal edge short-circuits with
    a single error and no milestone effects.
    """
    if not can_transition(current, target):
        return TransitionValidation(
            is_valid=False,
            errors=(f"Cannot transition from {current.name} to {target.name}",),
        )
    
    context = context or TransitionContext()
    errors: List[str] = []
    warnings: List[str] = []
    requires_confirmation = False
    
    if target == ProjectStatus.QUOTED and not context.has_quote_draft:
        errors.append("A quote draft is required before marking as Quoted")
    
    if target == ProjectStatus.OFFER_SENT and not context.has_quote_sent:
        errors.append("Quote must be marked as sent before proceeding")
    
    if target == ProjectStatus.ORDER_CONFIRMED:
        if not context.has_quote_accepted:
            errors.append("Quote must be accepted by client before confirming order")
        if not context.configuration_item_count:
            warnings.append("Configuration has no items - BOM will be empty")
    
    if target == ProjectStatus.DELIVERED and not context.delivery_checklist_complete:
        warnings.append("Delivery checklist is not complete")
        requires_confirmation = True
    
    # Effects are only surfaced for a transition that may actually run.
    effects = () if errors else tuple(get_milestone_effects(target))

    return TransitionValidation(
        is_valid=not errors,
        errors=tuple(errors),
        warnings=tuple(warnings),
        requires_confirmation=requires_confirmation or is_milestone(target),
        milestone_effects=effects,
    )
