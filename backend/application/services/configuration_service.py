"""
Configuration Service.

Edits to the live equipment list. Every mutation reprices the touched item,
recomputes the configuration totals and stamps ``last_modified_*``; once
the configuration is frozen only the amendment service may change it.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence
from uuid import UUID

from application.ports import AuditContext
from application.services.base import ProjectScopedService
from domain.project import pricing
from domain.project.aggregates import Project
from domain.project.entities import ConfigurationItem, ConfigurationSnapshot
from domain.project.rules import ConfigurationRules, ProjectRules
from domain.shared.base_entity import utc_now
from domain.shared.exceptions import (
    BusinessRuleViolationException,
    EntityNotFoundException,
    InvalidOperationException,
    ValidationException,
)
from domain.shared.result import Err
from domain.shared.value_objects import AuditAction, ConfigurationItemType, SnapshotTrigger, to_decimal

logger = logging.getLogger(__name__)


# Item fields a caller may change through update_item
EDITABLE_ITEM_FIELDS = (
    "item_type",
    "category",
    "name",
    "description",
    "article_number",
    "quantity",
    "unit",
    "unit_price_excl_vat",
    "cost_price",
    "is_included",
    "ce_relevant",
    "safety_critical",
    "lead_time_days",
    "supplier",
)

DECIMAL_ITEM_FIELDS = ("quantity", "unit_price_excl_vat", "cost_price")


def build_item(data: Mapping[str, Any], sort_order: int = 0) -> ConfigurationItem:
    """Create an unpriced ConfigurationItem from validated input."""
    cost_price = data.get("cost_price")
    return ConfigurationItem(
        item_type=ConfigurationItemType(data.get("item_type") or ConfigurationItemType.ARTICLE),
        category=data["category"],
        name=data["name"],
        description=data.get("description"),
        article_number=data.get("article_number"),
        quantity=to_decimal(data["quantity"]),
        unit=data.get("unit") or "pcs",
        unit_price_excl_vat=to_decimal(data["unit_price_excl_vat"]),
        cost_price=to_decimal(cost_price) if cost_price not in (None, "") else None,
        is_included=data.get("is_included", True),
        ce_relevant=data.get("ce_relevant", False),
        safety_critical=data.get("safety_critical", False),
        sort_order=sort_order,
        lead_time_days=data.get("lead_time_days"),
        supplier=data.get("supplier"),
    )


def apply_item_updates(item: ConfigurationItem, updates: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy allowed fields onto ``item``. Returns the previous values of changed fields."""
    before = {}
    for name in EDITABLE_ITEM_FIELDS:
        if name not in updates:
            continue
        value = updates[name]
        if name == "cost_price" and value in (None, ""):
            value = None
        elif name in DECIMAL_ITEM_FIELDS:
            value = to_decimal(value)
        elif name == "item_type":
            value = ConfigurationItemType(value)
        before[name] = getattr(item, name)
        setattr(item, name, value)
    return before


def merged_item_data(item: ConfigurationItem, updates: Mapping[str, Any]) -> Dict[str, Any]:
    """Current editable fields of ``item`` overlaid with ``updates``, for validate_item."""
    data = {name: getattr(item, name) for name in EDITABLE_ITEM_FIELDS}
    data.update((name, updates[name]) for name in EDITABLE_ITEM_FIELDS if name in updates)
    return data


def item_to_dict(item: ConfigurationItem) -> Dict[str, Any]:
    return {
        "id": str(item.id),
        "name": item.name,
        "category": item.category,
        "quantity": str(item.quantity),
        "unit_price_excl_vat": str(item.unit_price_excl_vat),
        "line_total_excl_vat": str(item.line_total_excl_vat),
    }


class ConfigurationService(ProjectScopedService):

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get_snapshots(self, project_id: UUID) -> List[ConfigurationSnapshot]:
        return list(self._load(project_id).configuration_snapshots)

    def get_current_snapshot(self, project_id: UUID) -> Optional[ConfigurationSnapshot]:
        return self._load(project_id).latest_configuration_snapshot

    @staticmethod
    def can_change_boat_model(project: Project) -> Dict[str, Any]:
        if project.configuration.boat_model_version_id:
            return {
                "allowed": False,
                "reason": "Boat model version is pinned at project creation. "
                          "Use an Amendment to change the model.",
            }
        return {"allowed": True, "reason": None}

    # =========================================================================
    # GUARDS
    # =========================================================================

    def _ensure_editable(self, project: Project) -> None:
        result = ProjectRules.can_edit(project)
        if isinstance(result, Err):
            logger.warning("Rejected configuration edit on %s: %s", project.project_number, result.error)
            raise InvalidOperationException(result.error, current_state=project.status.value)

    def _ensure_modifiable(self, project: Project) -> None:
        self._raise_if_err(
            ConfigurationRules.can_modify(project.configuration.is_frozen, project.status),
            project.status.value,
        )

    def _touch(self, project: Project, context: AuditContext) -> None:
        pricing.recalculate(project.configuration)
        project.configuration.last_modified_at = utc_now()
        project.configuration.last_modified_by = context.user_id
        project.mark_updated(context.user_id)

    @staticmethod
    def _get_item(project: Project, item_id: UUID) -> ConfigurationItem:
        item = project.configuration.get_item(item_id)
        if item is None:
            raise EntityNotFoundException("Configuration item", item_id)
        return item

    # =========================================================================
    # ITEMS
    # =========================================================================

    def add_item(self, project_id: UUID, data: Mapping[str, Any], context: AuditContext) -> ConfigurationItem:
        self._raise_if_invalid(ConfigurationRules.validate_item(data))

        with self.repository.atomic():
            project = self._load(project_id)
            self._ensure_editable(project)
            configuration = project.configuration

            if ConfigurationRules.has_duplicate(configuration.items, data["name"], data["category"]):
                raise BusinessRuleViolationException(
                    "DUPLICATE_ITEM",
                    f"Item '{data['name']}' already exists in category '{data['category']}'",
                )

            item = build_item(data, sort_order=len(configuration.items))
            pricing.price_item(item, self._pricing().cost_estimation_ratio)
            configuration.items.append(item)
            self._touch(project, context)
            self._save(project)

            self.audit.log(
                context, AuditAction.UPDATE, "ProjectConfiguration", project.id,
                f"Added item: {item.name}",
                after=item_to_dict(item),
            )

        logger.info("Added item %s to %s", item.name, project.project_number)
        return item

    def update_item(
        self,
        project_id: UUID,
        item_id: UUID,
        updates: Mapping[str, Any],
        context: AuditContext,
    ) -> ConfigurationItem:
        with self.repository.atomic():
            project = self._load(project_id)
            self._ensure_editable(project)
            item = self._get_item(project, item_id)

            self._raise_if_invalid(ConfigurationRules.validate_item(merged_item_data(item, updates)))

            before_item = item_to_dict(item)
            apply_item_updates(item, updates)

            pricing.price_item(item, self._pricing().cost_estimation_ratio)
            self._touch(project, context)
            self._save(project)
            self.audit.log_update(context, "ConfigurationItem", item.id, before_item, item_to_dict(item))

        return item

    def remove_item(self, project_id: UUID, item_id: UUID, context: AuditContext) -> Project:
        with self.repository.atomic():
            project = self._load(project_id)
            self._ensure_editable(project)
            item = self._get_item(project, item_id)

            project.configuration.items = [i for i in project.configuration.items if i.id != item.id]
            self._touch(project, context)
            project = self._save(project)
            self.audit.log(
                context, AuditAction.UPDATE, "ProjectConfiguration", project.id,
                f"Removed item: {item.name}",
                before={"item_id": str(item.id), "name": item.name},
            )
        return project

    def set_discount(self, project_id: UUID, discount_percent, context: AuditContext) -> Project:
        discount = to_decimal(discount_percent)
        if discount < 0 or discount > 100:
            raise ValidationException(
                "Discount must be between 0 and 100", field="discount_percent", value=discount_percent,
            )

        with self.repository.atomic():
            project = self._load(project_id)
            self._ensure_modifiable(project)
            project.configuration.discount_percent = discount
            self._touch(project, context)
            project = self._save(project)
            self.audit.log(
                context, AuditAction.UPDATE, "ProjectConfiguration", project.id,
                f"Set discount to {discount}%",
            )
        return project

    def reorder_items(self, project_id: UUID, ordered_item_ids: Sequence[UUID], context: AuditContext) -> Project:
        """
        Apply an explicit order. Unknown ids are ignored and items missing
        from ``ordered_item_ids`` keep their relative order at the end.
        """
        with self.repository.atomic():
            project = self._load(project_id)
            self._ensure_modifiable(project)
            self._reorder(project, ordered_item_ids)
            project.configuration.last_modified_at = utc_now()
            project.configuration.last_modified_by = context.user_id
            project = self._save(project)
            self.audit.log(
                context, AuditAction.UPDATE, "ProjectConfiguration", project.id,
                "Reordered configuration items",
            )
        return project

    def move_item(self, project_id: UUID, item_id: UUID, direction: str, context: AuditContext) -> Project:
        if direction not in ("up", "down"):
            raise ValidationException("Direction must be 'up' or 'down'", field="direction", value=direction)

        project = self._load(project_id)
        items = sorted(project.configuration.items, key=lambda i: i.sort_order)
        index = next((n for n, item in enumerate(items) if item.id == item_id), None)
        if index is None:
            raise EntityNotFoundException("Configuration item", item_id)

        new_index = index - 1 if direction == "up" else index + 1
        if new_index < 0 or new_index >= len(items):
            return project

        items[index], items[new_index] = items[new_index], items[index]
        return self.reorder_items(project_id, [item.id for item in items], context)

    @staticmethod
    def _reorder(project: Project, ordered_item_ids: Sequence[UUID]) -> None:
        by_id = {item.id: item for item in project.configuration.items}
        ordered: List[ConfigurationItem] = []
        for item_id in ordered_item_ids:
            item = by_id.pop(item_id, None)
            if item is not None:
                ordered.append(item)
        ordered.extend(item for item in project.configuration.items if item.id in by_id)
        for position, item in enumerate(ordered):
            item.sort_order = position
        project.configuration.items = ordered

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def update_configuration(self, project_id: UUID, updates: Mapping[str, Any], context: AuditContext) -> Project:
        with self.repository.atomic():
            project = self._load(project_id)
            self._ensure_editable(project)
            configuration = project.configuration
            before = {
                "boat_model_version_id": configuration.boat_model_version_id,
                "propulsion_type": configuration.propulsion_type,
            }

            # Raises ValidationException on an attempt to replace a pinned boat model
            if "boat_model_version_id" in updates:
                configuration.boat_model_version_id = updates["boat_model_version_id"]
            if "propulsion_type" in updates:
                configuration.propulsion_type = updates["propulsion_type"]

            self._touch(project, context)
            project = self._save(project)
            self.audit.log_update(context, "ProjectConfiguration", project.id, before, {
                "boat_model_version_id": configuration.boat_model_version_id,
                "propulsion_type": configuration.propulsion_type,
            })
        return project

    def freeze(self, project_id: UUID, reason: Optional[str], context: AuditContext) -> ConfigurationSnapshot:
        """Manually freeze the configuration and capture a MANUAL snapshot."""
        with self.repository.atomic():
            project = self._load(project_id)
            snapshot = project.freeze_configuration(context.user_id, SnapshotTrigger.MANUAL, reason)
            self._save(project)
            self.audit.log_freeze(context, project.id, snapshot.id)

        logger.info("Manually froze configuration of %s (snapshot #%d)",
                    project.project_number, snapshot.snapshot_number)
        return snapshot

    def recalculate_totals(self, project_id: UUID, context: AuditContext) -> Project:
        with self.repository.atomic():
            project = self._load(project_id)
            self._ensure_modifiable(project)
            ratio = self._pricing().cost_estimation_ratio
            for item in project.configuration.items:
                pricing.price_item(item, ratio)
            self._touch(project, context)
            return self._save(project)
