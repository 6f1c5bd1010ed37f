"""
Application Ports.

Interfaces the application services depend on. Infrastructure provides the
Django-backed adapters; tests provide in-memory fakes.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from domain.auth.authorization import Permission, Role, has_permission
from domain.shared.exceptions import AuthorizationException
from domain.shared.value_objects import AuditAction


# =============================================================================
# AUDIT
# =============================================================================

@dataclass(frozen=True)
class AuditContext:
    """Who is acting. Travels with every state-changing call."""

    user_id: str
    user_name: str
    role: Role = Role.VIEWER

    @classmethod
    def system(cls) -> AuditContext:
        return cls(user_id="system", user_name="System", role=Role.ADMIN)

    def can(self, permission: Permission) -> bool:
        return has_permission(self.role, permission)

    def require(self, permission: Permission, resource: str = "Project", message: Optional[str] = None) -> None:
        if not self.can(permission):
            raise AuthorizationException(permission.value, resource, message)


@dataclass(frozen=True)
class AuditEntry:
    action: AuditAction
    entity_type: str
    entity_id: str
    description: str
    user_id: str
    user_name: str
    before: Optional[Dict[str, Any]] = None
    after: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None
    timestamp: Optional[Any] = None


class AuditLogPort(ABC):
    """
    Append-only audit trail.

    Adapters implement ``log`` and ``get_history``; the helpers below fix
    the description format for the common actions.
    """

    @abstractmethod
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
        pass

    @abstractmethod
    def get_history(self, entity_type: str, entity_id: Any) -> List[AuditEntry]:
        pass

    def log_create(self, context, entity_type, entity_id, entity: Dict[str, Any]) -> AuditEntry:
        return self.log(context, AuditAction.CREATE, entity_type, entity_id,
                        f"Created {entity_type}", after=entity)

    def log_update(self, context, entity_type, entity_id, before: Dict[str, Any], after: Dict[str, Any]) -> AuditEntry:
        return self.log(context, AuditAction.UPDATE, entity_type, entity_id,
                        f"Updated {entity_type}", before=before, after=after)

    def log_archive(self, context, entity_type, entity_id, reason: str) -> AuditEntry:
        return self.log(context, AuditAction.ARCHIVE, entity_type, entity_id,
                        f"Archived {entity_type}: {reason}", metadata={"reason": reason})

    def log_status_transition(
        self,
        context,
        entity_type: str,
        entity_id,
        from_status: str,
        to_status: str,
        reason: Optional[str] = None,
    ) -> AuditEntry:
        description = f"{entity_type} status: {from_status} → {to_status}"
        if reason:
            description += f" ({reason})"
        return self.log(
            context, AuditAction.STATUS_TRANSITION, entity_type, entity_id, description,
            metadata={"from_status": from_status, "to_status": to_status, "reason": reason},
        )

    def log_freeze(self, context, project_id, snapshot_id) -> AuditEntry:
        return self.log(context, AuditAction.FREEZE, "Project", project_id,
                        "Configuration frozen", metadata={"snapshot_id": str(snapshot_id)})

    def log_amendment(self, context, project_id, amendment_id, amendment_type: str,
                      reason: str, price_impact: Decimal) -> AuditEntry:
        return self.log(
            context, AuditAction.AMENDMENT, "Project", project_id,
            f"Amendment: {amendment_type} - {reason}",
            metadata={
                "amendment_id": str(amendment_id),
                "amendment_type": amendment_type,
                "reason": reason,
                "price_impact": str(price_impact),
            },
        )

    def log_emergency_unlock(self, context, project_id, reason: str) -> AuditEntry:
        return self.log(context, AuditAction.EMERGENCY_UNLOCK, "Project", project_id,
                        f"EMERGENCY UNLOCK: {reason}",
                        metadata={"reason": reason, "warning_level": "CRITICAL"})


# =============================================================================
# SETTINGS
# =============================================================================

@dataclass(frozen=True)
class PricingSettings:
    """Business defaults captured into quotes at creation time."""

    vat_rate: Decimal = Decimal("21")
    quote_validity_days: int = 30
    default_payment_terms: str = "30% upon order confirmation, 40% upon hull completion, 30% upon delivery"
    default_delivery_terms: str = "Ex Works (EXW) - Buyer arranges collection from our facility in Elburg"
    cost_estimation_ratio: Decimal = Decimal("0.6")


class SettingsProvider(ABC):

    @abstractmethod
    def get_pricing_settings(self) -> PricingSettings:
        pass


# =============================================================================
# LIBRARY
# =============================================================================

@dataclass(frozen=True)
class LibraryVersions:
    catalog_version_id: Optional[str] = None
    template_version_ids: Dict[str, str] = field(default_factory=dict)
    procedure_version_ids: List[str] = field(default_factory=list)


class LibraryPort(ABC):
    """Currently approved library versions, resolved once at order confirmation."""

    @abstractmethod
    def get_current_versions(self) -> LibraryVersions:
        pass
