"""
Base class for project-scoped application services.
"""

import logging
from typing import Optional
from uuid import UUID

from application.ports import AuditLogPort, PricingSettings, SettingsProvider
from domain.project.aggregates import Project
from domain.project.repositories import ProjectRepository
from domain.shared.exceptions import (
    EntityNotFoundException,
    InvalidOperationException,
    ValidationException,
)
from domain.shared.result import Err

logger = logging.getLogger(__name__)


class ProjectScopedService:
    """Loading and saving helpers shared by the services below."""
    
    def __init__(
        self,
        repository: ProjectRepository,
        audit: AuditLogPort,
        settings: Optional[SettingsProvider] = None,
    ):
        self.repository = repository
        self.audit = audit
        self.settings = settings
    
    def _load(self, project_id: UUID) -> Project:
        project = self.repository.get_by_id(project_id)
        if project is None:
            raise EntityNotFoundException("Project", project_id)
        return project
    
    def _save(self, project: Project) -> Project:
        saved = self.repository.save(project)
        for event in project.clear_domain_events():
            logger.debug("Domain event %s", event.event_type, extra={"event": event.to_dict()})
        return saved
    
    def _pricing(self) -> PricingSettings:
        if self.settings is None:
            return PricingSettings()
        return self.settings.get_pricing_settings()
    
    @staticmethod
    def _raise_if_err(result, current_state: Optional[str] = None) -> None:
        """Turn a failed rule check into an InvalidOperationException."""
        if isinstance(result, Err):
            raise InvalidOperationException(result.error, current_state=current_state)
    
    @staticmethod
    def _raise_if_invalid(result) -> None:
        """Turn a failed validator into a ValidationException carrying every message."""
        if isinstance(result, Err):
            errors = result.error if isinstance(result.error, list) else [result.error]
            raise ValidationException(". ".join(errors), errors=errors)
