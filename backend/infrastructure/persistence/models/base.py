"""
Base ORM Models and Mixins.

Provides common functionality for all models:
- UUID primary keys
- Timestamps (created_at, updated_at)
- Soft delete
- Version control
"""

import uuid
from django.db import models
from django.utils import timezone


class TimeStampedMixin(models.Model):
    """Mixin for created_at and updated_at timestamps."""
    
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Created at"
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name="Updated at"
    )
    
    class Meta:
        abstract = True


class SoftDeleteMixin(models.Model):
    """Mixin for soft delete functionality."""
    
    deleted_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name="Deleted at"
    )
    deleted_by = models.CharField(
        max_length=150,
        blank=True,
        default='',
        verbose_name="Deleted by"
    )
    
    class Meta:
        abstract = True
    
    @property
    def is_deleted(self):
        return self.deleted_at is not None
    
    def soft_delete(self, user_id=''):
        self.deleted_at = timezone.now()
        self.deleted_by = user_id or ''
        self.save(update_fields=['deleted_at', 'deleted_by', 'updated_at'])
    
    def restore(self):
        self.deleted_at = None
        self.deleted_by = ''
        self.save(update_fields=['deleted_at', 'deleted_by', 'updated_at'])


class VersionedMixin(models.Model):
    """
    Mixin for optimistic locking with version control.
    
    Every save of an existing row bumps ``version``; the repository compares
    it with the version the caller loaded before writing.
    """
    
    version = models.PositiveIntegerField(
        default=1,
        verbose_name="Version"
    )
    
    class Meta:
        abstract = True
    
    def save(self, *args, **kwargs):
        if not self._state.adding:
            self.version += 1
            update_fields = kwargs.get('update_fields')
            if update_fields is not None and 'version' not in update_fields:
                kwargs['update_fields'] = list(update_fields) + ['version']
        super().save(*args, **kwargs)


# =============================================================================
# MANAGER FOR SOFT DELETE
# =============================================================================

class ActiveManager(models.Manager):
    """Manager that excludes soft-deleted records by default."""
    
    def get_queryset(self):
        return super().get_queryset().filter(deleted_at__isnull=True)


class AllObjectsManager(models.Manager):
    """Manager that includes all records, including soft-deleted."""
    
    pass


class BaseModel(TimeStampedMixin, SoftDeleteMixin, VersionedMixin):
    """
    Base model with all common functionality.
    
    Includes:
    - UUID primary key
    - Timestamps (created_at, updated_at)
    - Soft delete (deleted_at, deleted_by)
    - Version control (version)
    """
    
    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        verbose_name="ID"
    )
    
    objects = ActiveManager()
    all_objects = AllObjectsManager()
    
    class Meta:
        abstract = True
    
    def __str__(self):
        return str(self.id)
