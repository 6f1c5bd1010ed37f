"""Tests for the project lifecycle graph and transition validation."""

import pytest

from domain.project import status_machine
from domain.project.status_machine import TransitionContext, validate_transition
from domain.shared.value_objects import MilestoneEffectType, ProjectStatus

S = ProjectStatus


class TestGraph:

    @pytest.mark.parametrize("current,target", [
        (S.DRAFT, S.QUOTED),
        (S.QUOTED, S.DRAFT),
        (S.QUOTED, S.OFFER_SENT),
        (S.OFFER_SENT, S.QUOTED),
        (S.OFFER_SENT, S.ORDER_CONFIRMED),
        (S.ORDER_CONFIRMED, S.IN_PRODUCTION),
        (S.IN_PRODUCTION, S.READY_FOR_DELIVERY),
        (S.READY_FOR_DELIVERY, S.IN_PRODUCTION),
        (S.READY_FOR_DELIVERY, S.DELIVERED),
        (S.DELIVERED, S.CLOSED),
    ])
    def test_allowed_edges(self, current, target):
        assert status_machine.can_transition(current, target)

    @pytest.mark.parametrize("current,target", [
        (S.DRAFT, S.ORDER_CONFIRMED),
        (S.DRAFT, S.DRAFT),
        (S.ORDER_CONFIRMED, S.OFFER_SENT),
        (S.IN_PRODUCTION, S.ORDER_CONFIRMED),
        (S.DELIVERED, S.READY_FOR_DELIVERY),
    ])
    def test_rejected_edges(self, current, target):
        assert not status_machine.can_transition(current, target)

    @pytest.mark.parametrize("current,target", [
        (current, target)
        for current in S
        for target in S
        if target not in status_machine.VALID_STATUS_TRANSITIONS[current]
    ])
    def test_every_edge_outside_the_graph_is_rejected(self, current, target):
        assert not status_machine.can_transition(current, target)
        result = validate_transition(current, target, TransitionContext(
            has_quote_draft=True, has_quote_sent=True, has_quote_accepted=True,
            delivery_checklist_complete=True, configuration_item_count=3,
        ))
        assert not result.is_valid
        assert result.errors == (f"Cannot transition from {current.name} to {target.name}",)

    def test_closed_is_terminal(self):
        assert status_machine.get_valid_next_statuses(S.CLOSED) == []
        assert not any(status_machine.can_transition(S.CLOSED, target) for target in S)

    def test_next_statuses_keep_graph_order(self):
        assert status_machine.get_valid_next_statuses(S.QUOTED) == [S.DRAFT, S.OFFER_SENT]


class TestStatusGroups:

    def test_editable_frozen_and_locked(self):
        assert {s for s in S if status_machine.is_editable(s)} == {S.DRAFT, S.QUOTED, S.OFFER_SENT}
        assert {s for s in S if status_machine.is_locked(s)} == {S.DELIVERED, S.CLOSED}
        for status in S:
            # Every status is either editable or frozen, never both
            assert status_machine.is_editable(status) != status_machine.is_frozen(status)

    def test_milestones(self):
        milestones = {s for s in S if status_machine.is_milestone(s)}
        assert milestones == {S.OFFER_SENT, S.ORDER_CONFIRMED, S.IN_PRODUCTION, S.DELIVERED}

    def test_order_confirmed_effects_run_in_order(self):
        effects = [e.type for e in status_machine.get_milestone_effects(S.ORDER_CONFIRMED)]
        assert effects == [
            MilestoneEffectType.FREEZE_CONFIGURATION,
            MilestoneEffectType.GENERATE_BOM,
            MilestoneEffectType.PIN_LIBRARY_VERSIONS,
        ]

    def test_status_info(self):
        info = status_machine.get_status_info(S.OFFER_SENT)
        assert info == {
            "status": "offer_sent",
            "label": "Offer Sent",
            "description": "Quote sent to client, awaiting response",
        }


class TestValidateTransition:

    def test_illegal_edge_short_circuits(self):
        result = validate_transition(S.DRAFT, S.DELIVERED, TransitionContext(has_quote_accepted=True))
        assert not result.is_valid
        assert result.errors == ("Cannot transition from DRAFT to DELIVERED",)
        assert result.milestone_effects == ()

    def test_quoted_needs_a_draft_quote(self):
        result = validate_transition(S.DRAFT, S.QUOTED)
        assert not result.is_valid
        assert "A quote draft is required before marking as Quoted" in result.errors

        assert validate_transition(S.DRAFT, S.QUOTED, TransitionContext(has_quote_draft=True)).is_valid

    def test_offer_sent_needs_a_sent_quote(self):
        result = validate_transition(S.QUOTED, S.OFFER_SENT, TransitionContext(has_quote_draft=True))
        assert result.errors == ("Quote must be marked as sent before proceeding",)

    def test_order_confirmed_needs_acceptance_and_warns_on_empty_configuration(self):
        rejected = validate_transition(S.OFFER_SENT, S.ORDER_CONFIRMED, TransitionContext(configuration_item_count=0))
        assert "Quote must be accepted by client before confirming order" in rejected.errors
        assert rejected.milestone_effects == ()

        accepted = validate_transition(
            S.OFFER_SENT, S.ORDER_CONFIRMED,
            TransitionContext(has_quote_accepted=True, configuration_item_count=0),
        )
        assert accepted.is_valid
        assert accepted.warnings == ("Configuration has no items - BOM will be empty",)
        assert accepted.requires_confirmation
        assert len(accepted.milestone_effects) == 3

    def test_incomplete_delivery_checklist_is_a_warning(self):
        result = validate_transition(
            S.READY_FOR_DELIVERY, S.DELIVERED, TransitionContext(delivery_checklist_complete=False),
        )
        assert result.is_valid
        assert result.warnings == ("Delivery checklist is not complete",)
        assert result.requires_confirmation

    def test_plain_transition_needs_no_confirmation(self):
        result = validate_transition(S.IN_PRODUCTION, S.READY_FOR_DELIVERY)
        assert result.is_valid
        assert not result.requires_confirmation
        assert result.milestone_effects == ()

    def test_validation_is_repeatable(self):
        context = TransitionContext(has_quote_accepted=True, configuration_item_count=2)

        first = validate_transition(S.OFFER_SENT, S.ORDER_CONFIRMED, context)
        second = validate_transition(S.OFFER_SENT, S.ORDER_CONFIRMED, context)

        assert first == second
        assert context == TransitionContext(has_quote_accepted=True, configuration_item_count=2)

    def test_unknown_facts_still_warn(self):
        confirmed = validate_transition(S.OFFER_SENT, S.ORDER_CONFIRMED, TransitionContext(has_quote_accepted=True))
        assert confirmed.warnings == ("Configuration has no items - BOM will be empty",)

        delivered = validate_transition(S.READY_FOR_DELIVERY, S.DELIVERED)
        assert delivered.is_valid
        assert delivered.warnings == ("Delivery checklist is not complete",)
        assert delivered.requires_confirmation

    def test_complete_delivery_checklist_has_no_warning(self):
        result = validate_transition(
            S.READY_FOR_DELIVERY, S.DELIVERED, TransitionContext(delivery_checklist_complete=True),
        )
        assert result.warnings == ()
