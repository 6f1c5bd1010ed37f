"""
Project ORM Models.

The Project aggregate is stored whole as a JSON document. The columns next
to it are denormalized copies used for filtering and ordering; the
document is the source of truth.
"""

from django.db import models
from simple_history.models import HistoricalRecords

from .base import BaseModel


class ProjectStatusChoices(models.TextChoices):
    """Project lifecycle status choices."""
    
    DRAFT = 'draft', 'Draft'
    QUOTED = 'quoted', 'Quoted'
    OFFER_SENT = 'offer_sent', 'Offer Sent'
    ORDER_CONFIRMED = 'order_confirmed', 'Order Confirmed'
    IN_PRODUCTION = 'in_production', 'In Production'
    READY_FOR_DELIVERY = 'ready_for_delivery', 'Ready for Delivery'
    DELIVERED = 'delivered', 'Delivered'
    CLOSED = 'closed', 'Closed'


class ProjectTypeChoices(models.TextChoices):
    NEW_BUILD = 'new_build', 'New Build'
    REFIT = 'refit', 'Refit'
    MAINTENANCE = 'maintenance', 'Maintenance'


class ProjectRecord(BaseModel):
    """
    Persisted Project aggregate.
    
    ``version`` is the optimistic lock: the repository refuses to write a
    document loaded at an older version.
    """
    
    project_number = models.CharField(
        max_length=30,
        unique=True,
        db_index=True,
        verbose_name="Project number"
    )
    title = models.CharField(
        max_length=255,
        verbose_name="Title"
    )
    project_type = models.CharField(
        max_length=20,
        choices=ProjectTypeChoices.choices,
        default=ProjectTypeChoices.NEW_BUILD,
        db_index=True,
        verbose_name="Type"
    )
    status = models.CharField(
        max_length=30,
        choices=ProjectStatusChoices.choices,
        default=ProjectStatusChoices.DRAFT,
        db_index=True,
        verbose_name="Status"
    )
    client_id = models.CharField(
        max_length=100,
        db_index=True,
        verbose_name="Client"
    )
    archived_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name="Archived at"
    )
    
    # Whole aggregate
    document = models.JSONField(
        default=dict,
        verbose_name="Aggregate document"
    )
    
    history = HistoricalRecords()
        
    class Meta:
        db_table = 'projects'
        verbose_name = 'Project'
        verbose_name_plural = 'Projects'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'project_type'], name='projects_status_5e2c8b_idx'),
        ]
    
    def __str__(self):
        return f"{self.project_number} {self.title}"
