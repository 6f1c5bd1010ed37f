"""
Django-backed adapters for the application ports.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.conf import settings

from application.ports import (
    AuditContext,
    AuditEntry,
    AuditLogPort,
    LibraryPort,
    LibraryVersions,
    PricingSettings,
    SettingsProvider,
)
from domain.shared.value_objects import AuditAction

from .models import AuditLog, SystemSetting

logger = logging.getLogger(__name__)


class DjangoAuditLog(AuditLogPort):
    """Writes audit entries to the ``audit_log`` table."""

    def log(
        self,
        context: AuditContext,
        action: AuditAction,
        entity_type: str,
        entity_id: Any,
        description: str,
        before: Optional[Dict[str, Any]] = None,
        after: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AuditEntry:
        row = AuditLog.objects.create(
            user_id=context.user_id,
            user_name=context.user_name,
            action=action.value,
            entity_type=entity_type,
            entity_id=str(entity_id),
            description=description,
            before=before,
            after=after,
            metadata=metadata,
        )
        logger.debug("Audit %s %s %s: %s", action.value, entity_type, entity_id, description)
        return self._to_entry(row)

    def get_history(self, entity_type: str, entity_id: Any) -> List[AuditEntry]:
        rows = AuditLog.objects.filter(entity_type=entity_type, entity_id=str(entity_id))
        return [self._to_entry(row) for row in rows.order_by('timestamp')]

    @staticmethod
    def _to_entry(row: AuditLog) -> AuditEntry:
        return AuditEntry(
            action=AuditAction(row.action),
            entity_type=row.entity_type,
            entity_id=row.entity_id,
            description=row.description,
            user_id=row.user_id,
            user_name=row.user_name,
            before=row.before,
            after=row.after,
            metadata=row.metadata,
            timestamp=row.timestamp,
        )


class DjangoSettingsProvider(SettingsProvider):
    """
    Business defaults from ``settings.BOATYARD``, overridden per key by the
    ``pricing`` SystemSetting.
    """

    def get_pricing_settings(self) -> PricingSettings:
        defaults = getattr(settings, 'BOATYARD', {})
        overrides = _setting_value('pricing')
        merged = {**defaults, **{k.upper(): v for k, v in overrides.items()}}

        fallback = PricingSettings()
        return PricingSettings(
            vat_rate=Decimal(str(merged.get('VAT_RATE', fallback.vat_rate))),
            quote_validity_days=int(merged.get('QUOTE_VALIDITY_DAYS', fallback.quote_validity_days)),
            default_payment_terms=merged.get('DEFAULT_PAYMENT_TERMS', fallback.default_payment_terms),
            default_delivery_terms=merged.get('DEFAULT_DELIVERY_TERMS', fallback.default_delivery_terms),
            cost_estimation_ratio=Decimal(str(merged.get('COST_ESTIMATION_RATIO', fallback.cost_estimation_ratio))),
        )


class DjangoLibraryPort(LibraryPort):
    """Approved library versions from the ``library`` SystemSetting."""

    def get_current_versions(self) -> LibraryVersions:
        value = _setting_value('library')
        return LibraryVersions(
            catalog_version_id=value.get('catalog_version_id'),
            template_version_ids=dict(value.get('template_version_ids') or {}),
            procedure_version_ids=list(value.get('procedure_version_ids') or []),
        )


def _setting_value(key: str) -> Dict[str, Any]:
    setting = SystemSetting.objects.filter(key=key).first()
    if setting is None or not isinstance(setting.value, dict):
        return {}
    return setting.value
