"""
Base Entity class for all domain entities.

Entities have identity and lifecycle.
Two entities are equal if they have the same ID.
"""

from __future__ import annotations
from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID, uuid4


def utc_now() -> datetime:
    """Timezone-aware current time used for every domain timestamp."""
    return datetime.now(timezone.utc)


@dataclass(eq=False)
class Entity(ABC):
    """
    Base class for all domain entities.
    
    Entities are objects that have a distinct identity that runs through time
    and different representations. They are defined by their identity, not their attributes.
    """
    
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    
    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Entity):
            return False
        return self.id == other.id
    
    def __hash__(self) -> int:
        return hash(self.id)
    
    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} id={self.id}>"
    
    def touch(self) -> None:
        self.updated_at = utc_now()


@dataclass(eq=False)
class VersionedEntity(Entity):
    """
    Entity with an optimistic version counter.
    
    The counter mirrors the stored version of the record; the persistence
    adapter compares it on write to detect stale updates.
    """
    
    version: int = 1


@dataclass(eq=False)
class AuditableEntity(VersionedEntity):
    """
    Versioned entity that remembers who created and last modified it.
    
    User references are opaque identifiers handed in by the caller's
    audit context (a Django user pk, or ``"system"`` for background jobs).
    """
    
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    
    def mark_updated(self, user_id: Optional[str]) -> None:
        """Record the modifying user and bump the timestamp."""
        self.updated_by = user_id
        self.touch()
