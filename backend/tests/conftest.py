"""
Shared fixtures.

Service fixtures run on the in-memory fakes; the ``confirmed_project``
fixture walks a project through quoting up to ORDER_CONFIRMED.
"""

import pytest

from application.ports import AuditContext, LibraryVersions
from application.services.amendment_service import AmendmentService
from application.services.compliance_service import ComplianceService
from application.services.configuration_service import ConfigurationService
from application.services.project_service import ProjectService
from application.services.quote_service import QuoteService
from domain.auth.authorization import Role
from domain.shared.value_objects import ProjectStatus

from .fakes import (
    HULL_ENGINE,
    NAV_LIGHTS,
    InMemoryAuditLog,
    InMemoryProjectRepository,
    StaticLibraryPort,
    StaticSettingsProvider,
)


# =============================================================================
# CONTEXTS
# =============================================================================

@pytest.fixture
def admin():
    return AuditContext(user_id="1", user_name="Anna Admin", role=Role.ADMIN)

@pytest.fixture
def manager():
    return AuditContext(user_id="2", user_name="Mark Manager", role=Role.MANAGER)

@pytest.fixture
def sales():
    return AuditContext(user_id="3", user_name="Sam Sales", role=Role.SALES)

@pytest.fixture
def production():
    return AuditContext(user_id="4", user_name="Pat Production", role=Role.PRODUCTION)

@pytest.fixture
def viewer():
    return AuditContext(user_id="5", user_name="Vic Viewer", role=Role.VIEWER)

# =============================================================================
# PORTS & SERVICES
# =============================================================================

@pytest.fixture
def repository():
    return InMemoryProjectRepository()

@pytest.fixture
def audit():
    return InMemoryAuditLog()

@pytest.fixture
def settings_provider():
    return StaticSettingsProvider()

@pytest.fixture
def library():
    return StaticLibraryPort(LibraryVersions(
        catalog_version_id="catalog-2026.2",
        template_version_ids={"owners_manual": "tpl-owners-manual-v3"},
        procedure_version_ids=["proc-hull-layup-v5", "proc-sea-trial-v2"],
    ))

@pytest.fixture
def project_service(repository, audit, settings_provider, library):
    return ProjectService(repository, audit, settings_provider, library)

@pytest.fixture
def configuration_service(repository, audit, settings_provider):
    return ConfigurationService(repository, audit, settings_provider)

@pytest.fixture
def quote_service(repository, audit, settings_provider, project_service):
    return QuoteService(repository, audit, settings_provider, project_service=project_service)

@pytest.fixture
def amendment_service(repository, audit, settings_provider):
    return AmendmentService(repository, audit, settings_provider)

@pytest.fixture
def compliance_service(repository, audit):
    return ComplianceService(repository, audit)

# =============================================================================
# PROJECTS
# =============================================================================

@pytest.fixture
def project(project_service, admin):
    return project_service.create_project({
        "title": "Eagle 1000 for Van Dijk",
        "client_id": "client-42",
        "type": "new_build",
        "boat_model_version_id": "eagle-1000-v3",
        "propulsion_type": "diesel",
    }, admin)

@pytest.fixture
def configured_project(project, configuration_service, admin, repository):
    """A DRAFT project with two items: one estimated cost, one known cost."""
    configuration_service.add_item(project.id, HULL_ENGINE, admin)
    configuration_service.add_item(project.id, NAV_LIGHTS, admin)
    return repository.get_by_id(project.id)

@pytest.fixture
def accepted_project(configured_project, quote_service, admin, repository):
    """OFFER_SENT with the current quote accepted."""
    quote = quote_service.create_draft(configured_project.id, admin)
    quote_service.mark_as_sent(configured_project.id, quote.id, admin)
    quote_service.mark_as_accepted(configured_project.id, quote.id, admin)
    return repository.get_by_id(configured_project.id)

@pytest.fixture
def confirmed_project(accepted_project, project_service, admin):
    return project_service.transition_status(accepted_project.id, ProjectStatus.ORDER_CONFIRMED, admin)

