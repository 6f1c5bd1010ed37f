"""
Amendment Service.

The only way to change a frozen configuration. Every amendment is
bracketed by a before and an after snapshot and produces a REVISED BOM
from the after snapshot; the configuration stays frozen throughout.
"""

import logging
from decimal import Decimal
from typing import Any, List, Mapping
from uuid import UUID

from application.ports import AuditContext
from application.services.base import ProjectScopedService
from application.services.configuration_service import apply_item_updates, build_item, merged_item_data
from domain.auth.authorization import Permission
from domain.bom.services import generate_bom_snapshot
from domain.project import pricing
from domain.project.aggregates import Project
from domain.project.entities import ProjectAmendment
from domain.project.rules import AmendmentRules, ConfigurationRules
from domain.shared.base_entity import utc_now
from domain.shared.events import AmendmentRecorded
from domain.shared.value_objects import AmendmentType, BOMStatus, SnapshotTrigger, round_money

logger = logging.getLogger(__name__)


class AmendmentService(ProjectScopedService):

    def get_amendments(self, project_id: UUID) -> List[ProjectAmendment]:
        return list(self._load(project_id).amendments)

    def get_total_price_impact(self, project_id: UUID) -> Decimal:
        return round_money(sum(
            (a.price_impact_excl_vat for a in self._load(project_id).amendments),
            Decimal("0"),
        ))

    def create_amendment(self, project_id: UUID, data: Mapping[str, Any], context: AuditContext) -> ProjectAmendment:
        """
        Apply an approved change set to a frozen configuration.

        ``data`` carries ``type``, ``reason`` and any of ``items_to_remove``
        (ids), ``items_to_update`` (``{"id", "updates"}``), ``items_to_add``
        and ``boat_model_version_id``. Changes apply in that order.
        """
        with self.repository.atomic():
            project = self._load(project_id)

            can_amend = AmendmentRules.can_amend(project)
            if not can_amend.ok:
                logger.warning("Rejected amendment on %s: %s", project.project_number, can_amend.error)
            self._raise_if_err(can_amend, project.status.value)
            self._raise_if_invalid(AmendmentRules.validate({**data, "approved_by": context.user_id}))
            context.require(
                Permission.AMENDMENT_APPROVE,
                resource="Amendment",
                message="User is not authorized to approve amendments",
            )

            now = utc_now()
            amendment_type = AmendmentType(data["type"])
            reason = data["reason"].strip()

            before = project.take_snapshot(
                SnapshotTrigger.AMENDMENT, f"Before amendment: {reason}", context.user_id, now,
            )
            price_impact, affected = self._apply_changes(project, data)

            configuration = project.configuration
            pricing.recalculate(configuration)
            configuration.last_modified_at = now
            configuration.last_modified_by = context.user_id

            after = project.take_snapshot(
                SnapshotTrigger.AMENDMENT, f"After amendment: {reason}", context.user_id, now,
            )

            amendment = ProjectAmendment(
                amendment_number=len(project.amendments) + 1,
                type=amendment_type,
                reason=reason,
                before_snapshot_id=before.id,
                after_snapshot_id=after.id,
                price_impact_excl_vat=round_money(price_impact),
                affected_items=affected,
                requested_by=data.get("requested_by") or context.user_id,
                requested_at=now,
                approved_by=context.user_id,
                approved_at=now,
                created_at=now,
            )
            project.record_amendment(amendment)

            bom = generate_bom_snapshot(
                after,
                snapshot_number=len(project.bom_snapshots) + 1,
                estimation_ratio=self._pricing().cost_estimation_ratio,
                created_by=context.user_id,
                status=BOMStatus.REVISED,
            )
            project.add_bom_snapshot(bom)

            project.mark_updated(context.user_id)
            project.add_domain_event(AmendmentRecorded(
                project_id=project.id,
                amendment_id=amendment.id,
                amendment_type=amendment_type.value,
                price_impact_excl_vat=amendment.price_impact_excl_vat,
            ))
            self._save(project)
            self.audit.log_amendment(
                context, project.id, amendment.id, amendment_type.value, reason, amendment.price_impact_excl_vat,
            )

        logger.info(
            "Amendment #%d on %s (%s): price impact %s",
            amendment.amendment_number, project.project_number, amendment_type.name, amendment.price_impact_excl_vat,
        )
        return amendment

    def _apply_changes(self, project: Project, data: Mapping[str, Any]):
        configuration = project.configuration
        ratio = self._pricing().cost_estimation_ratio
        price_impact = Decimal("0")
        affected: List[str] = []

        for item_id in data.get("items_to_remove") or ():
            item = configuration.get_item(_as_uuid(item_id))
            if item is None:
                continue
            price_impact -= item.line_total_excl_vat
            affected.append(item.name)
            configuration.items = [i for i in configuration.items if i.id != item.id]

        for change in data.get("items_to_update") or ():
            item = configuration.get_item(_as_uuid(change["id"]))
            if item is None:
                continue
            updates = change.get("updates") or {}
            self._raise_if_invalid(ConfigurationRules.validate_item(merged_item_data(item, updates)))
            old_total = item.line_total_excl_vat
            apply_item_updates(item, updates)
            pricing.price_item(item, ratio)
            price_impact += item.line_total_excl_vat - old_total
            affected.append(item.name)

        for item_data in data.get("items_to_add") or ():
            self._raise_if_invalid(ConfigurationRules.validate_item(item_data))
            item = pricing.price_item(build_item(item_data, sort_order=len(configuration.items)), ratio)
            configuration.items.append(item)
            price_impact += item.line_total_excl_vat
            affected.append(item.name)

        if data.get("boat_model_version_id"):
            configuration.replace_boat_model(data["boat_model_version_id"])

        return price_impact, affected


def _as_uuid(value) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))
