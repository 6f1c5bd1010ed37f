"""
Persistence Models Package.

All Django ORM models for the boatyard backend.
"""

# Base mixins and managers
from .base import (
    TimeStampedMixin,
    SoftDeleteMixin,
    VersionedMixin,
    ActiveManager,
    AllObjectsManager,
    BaseModel,
)

# Project models
from .project import (
    ProjectRecord,
    ProjectStatusChoices,
    ProjectTypeChoices,
)

# Audit models
from .audit import (
    AuditActionChoices,
    AuditLog,
    SystemSetting,
)

__all__ = [
    'TimeStampedMixin',
    'SoftDeleteMixin',
    'VersionedMixin',
    'ActiveManager',
    'AllObjectsManager',
    'BaseModel',
    'ProjectRecord',
    'ProjectStatusChoices',
    'ProjectTypeChoices',
    'AuditActionChoices',
    'AuditLog',
    'SystemSetting',
]
