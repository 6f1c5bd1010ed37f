"""
Project Domain - Repository Interfaces.
"""

from abc import ABC, abstractmethod
from typing import ContextManager, List, Optional
from uuid import UUID

from domain.shared.value_objects import ProjectStatus, ProjectType

from .aggregates import Project


class ProjectRepository(ABC):
    """
    Repository interface for the Project aggregate.
    
    The aggregate is loaded and saved as a whole. ``save`` compares the
    aggregate's version with the stored one and raises ConcurrencyException
    on a stale write.
    """
    
    @abstractmethod
    def get_by_id(self, project_id: UUID) -> Optional[Project]:
        """Get project by ID."""
        pass
    
    @abstractmethod
    def get_all(
        self,
        status: Optional[ProjectStatus] = None,
        project_type: Optional[ProjectType] = None,
        client_id: Optional[str] = None,
        include_archived: bool = False,
    ) -> List[Project]:
        """Get all projects, optionally filtered."""
        pass
    
    @abstractmethod
    def save(self, project: Project) -> Project:
        """Persist the aggregate and bump its version."""
        pass
    
    @abstractmethod
    def delete(self, project_id: UUID) -> bool:
        """Soft-delete project."""
        pass
    
    @abstractmethod
    def next_project_number(self, year: int) -> str:
        """Next free number of the form PRJ-{year}-{seq:04d}."""
        pass
    
    @abstractmethod
    def atomic(self) -> ContextManager:
        """Transaction boundary for a load-mutate-save-audit sequence."""
        pass
