"""
Service wiring.

Builds application services on top of the Django adapters. Views and
Celery tasks get their services from here.
"""

from application.services.amendment_service import AmendmentService
from application.services.compliance_service import ComplianceService
from application.services.configuration_service import ConfigurationService
from application.services.project_service import ProjectService
from application.services.quote_service import QuoteService
from infrastructure.persistence.adapters import DjangoAuditLog, DjangoLibraryPort, DjangoSettingsProvider
from infrastructure.persistence.repositories import DjangoProjectRepository


def get_project_repository() -> DjangoProjectRepository:
    return DjangoProjectRepository()


def get_audit_log() -> DjangoAuditLog:
    return DjangoAuditLog()


def get_settings_provider() -> DjangoSettingsProvider:
    return DjangoSettingsProvider()


def get_library() -> DjangoLibraryPort:
    return DjangoLibraryPort()


def get_project_service() -> ProjectService:
    return ProjectService(
        get_project_repository(),
        get_audit_log(),
        get_settings_provider(),
        get_library(),
    )


def get_configuration_service() -> ConfigurationService:
    return ConfigurationService(get_project_repository(), get_audit_log(), get_settings_provider())


def get_quote_service() -> QuoteService:
    return QuoteService(
        get_project_repository(),
        get_audit_log(),
        get_settings_provider(),
        project_service=get_project_service(),
    )


def get_amendment_service() -> AmendmentService:
    return AmendmentService(get_project_repository(), get_audit_log(), get_settings_provider())


def get_compliance_service() -> ComplianceService:
    return ComplianceService(get_project_repository(), get_audit_log())
