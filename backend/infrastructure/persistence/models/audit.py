"""
Audit ORM Models.

Append-only audit log and database-backed system settings.
"""

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models

import uuid


class AuditActionChoices(models.TextChoices):
    CREATE = 'create', 'Create'
    UPDATE = 'update', 'Update'
    DELETE = 'delete', 'Delete'
    ARCHIVE = 'archive', 'Archive'
    STATUS_TRANSITION = 'status_transition', 'Status transition'
    APPROVE = 'approve', 'Approve'
    FREEZE = 'freeze', 'Freeze'
    GENERATE_DOCUMENT = 'generate_document', 'Generate document'
    AMENDMENT = 'amendment', 'Amendment'
    EMERGENCY_UNLOCK = 'emergency_unlock', 'Emergency unlock'
    IMPORT = 'import', 'Import'


class AuditLog(models.Model):
    """
    Append-only audit log.
    
    Tracks who did what to which entity, and when. Rows are never updated
    or deleted through the ORM.
    """
    
    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    
    # When
    timestamp = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        verbose_name="Timestamp"
    )
    
    # Who
    user_id = models.CharField(
        max_length=150,
        db_index=True,
        verbose_name="User ID"
    )
    user_name = models.CharField(
        max_length=255,
        blank=True,
        verbose_name="User name"
    )
    
    # What action
    action = models.CharField(
        max_length=30,
        choices=AuditActionChoices.choices,
        db_index=True,
        verbose_name="Action"
    )
    
    # What object
    entity_type = models.CharField(
        max_length=100,
        db_index=True,
        verbose_name="Entity type"
    )
    entity_id = models.CharField(
        max_length=100,
        db_index=True,
        verbose_name="Entity ID"
    )
    description = models.TextField(
        verbose_name="Description"
    )
    
    # What changed (JSON)
    before = models.JSONField(
        encoder=DjangoJSONEncoder,
        null=True,
        blank=True,
        verbose_name="Before"
    )
    after = models.JSONField(
        encoder=DjangoJSONEncoder,
        null=True,
        blank=True,
        verbose_name="After"
    )
    metadata = models.JSONField(
        encoder=DjangoJSONEncoder,
        null=True,
        blank=True,
        verbose_name="Metadata"
    )
    
    class Meta:
        db_table = 'audit_log'
        verbose_name = 'Audit log entry'
        verbose_name_plural = 'Audit log'
        ordering = ['timestamp']
        indexes = [
            models.Index(fields=['entity_type', 'entity_id'], name='audit_log_entity__7c1f0e_idx'),
            models.Index(fields=['action', 'timestamp'], name='audit_log_action_3b9d2a_idx'),
        ]
    
    def __str__(self):
        return f"{self.timestamp}: {self.user_name} - {self.get_action_display()} {self.entity_type}"
    
    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Audit log entries are append-only")
        super().save(*args, **kwargs)
    
    def delete(self, *args, **kwargs):
        raise ValueError("Audit log entries are append-only")


class SystemSetting(models.Model):
    """
    System-wide settings stored in database.
    
    Known keys: ``pricing`` overrides the BOATYARD business defaults,
    ``library`` holds the approved template/procedure/catalog versions.
    """
    
    key = models.CharField(
        max_length=100,
        unique=True,
        verbose_name="Key"
    )
    value = models.JSONField(
        default=dict,
        verbose_name="Value"
    )
    description = models.TextField(
        blank=True,
        verbose_name="Description"
    )
    
    # Metadata
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name="Updated at"
    )
    updated_by = models.CharField(
        max_length=150,
        blank=True,
        verbose_name="Updated by"
    )
    
    class Meta:
        db_table = 'system_settings'
        verbose_name = 'System setting'
        verbose_name_plural = 'System settings'
        ordering = ['key']
    
    def __str__(self):
        return self.key
