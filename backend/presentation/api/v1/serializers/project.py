"""
Project Serializers.
"""

from rest_framework import serializers

from domain.shared.value_objects import (
    AmendmentType,
    ConfigurationItemType,
    ProjectStatus,
    ProjectType,
)
from infrastructure.persistence.models import ProjectRecord

from .base import AuditFieldsMixin, EnumField, MoneyField, QuantityField


# =============================================================================
# CONFIGURATION
# =============================================================================

class ConfigurationItemSerializer(AuditFieldsMixin):
    item_type = EnumField()
    category = serializers.CharField()
    name = serializers.CharField()
    description = serializers.CharField(allow_null=True)
    article_number = serializers.CharField(allow_null=True)
    quantity = QuantityField()
    unit = serializers.CharField()
    unit_price_excl_vat = MoneyField()
    line_total_excl_vat = MoneyField()
    cost_price = MoneyField(allow_null=True)
    unit_cost = MoneyField()
    line_cost = MoneyField()
    is_cost_estimated = serializers.BooleanField()
    is_included = serializers.BooleanField()
    ce_relevant = serializers.BooleanField()
    safety_critical = serializers.BooleanField()
    sort_order = serializers.IntegerField()
    lead_time_days = serializers.IntegerField(allow_null=True)
    supplier = serializers.CharField(allow_null=True)


class ConfigurationSerializer(serializers.Serializer):
    boat_model_version_id = serializers.CharField(allow_null=True)
    propulsion_type = serializers.CharField(allow_null=True)
    items = ConfigurationItemSerializer(many=True)
    subtotal_excl_vat = MoneyField()
    discount_percent = MoneyField()
    discount_amount = MoneyField()
    total_excl_vat = MoneyField()
    vat_rate = MoneyField()
    vat_amount = MoneyField()
    total_incl_vat = MoneyField()
    is_frozen = serializers.BooleanField()
    frozen_at = serializers.DateTimeField(allow_null=True)
    frozen_by = serializers.CharField(allow_null=True)
    last_modified_at = serializers.DateTimeField(allow_null=True)
    last_modified_by = serializers.CharField(allow_null=True)


class ConfigurationSnapshotSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    snapshot_number = serializers.IntegerField()
    trigger = EnumField()
    trigger_reason = serializers.CharField(allow_null=True)
    created_by = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField()
    data = ConfigurationSerializer()


class ConfigurationItemInputSerializer(serializers.Serializer):
    """Item fields accepted on add (full) and update (partial)."""
    
    item_type = serializers.ChoiceField(
        choices=[t.value for t in ConfigurationItemType],
        default=ConfigurationItemType.ARTICLE.value,
    )
    category = serializers.CharField(max_length=100)
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    article_number = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    quantity = QuantityField()
    unit = serializers.CharField(max_length=20, default='pcs')
    unit_price_excl_vat = MoneyField()
    cost_price = MoneyField(required=False, allow_null=True)
    is_included = serializers.BooleanField(default=True)
    ce_relevant = serializers.BooleanField(default=False)
    safety_critical = serializers.BooleanField(default=False)
    lead_time_days = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    supplier = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class DiscountSerializer(serializers.Serializer):
    discount_percent = serializers.DecimalField(max_digits=5, decimal_places=2)


class ReorderSerializer(serializers.Serializer):
    item_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)


class FreezeSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=1000, required=False, allow_null=True, allow_blank=True)


# =============================================================================
# PROJECT
# =============================================================================

class ProjectRecordSerializer(serializers.ModelSerializer):
    """List rows, read straight from the denormalized columns."""
    
    class Meta:
        model = ProjectRecord
        fields = [
            'id', 'project_number', 'title', 'project_type', 'status',
            'client_id', 'version', 'archived_at', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class LibraryPinsSerializer(serializers.Serializer):
    boat_model_version_id = serializers.CharField()
    catalog_version_id = serializers.CharField()
    configuration_snapshot_id = serializers.UUIDField(allow_null=True)
    template_version_ids = serializers.DictField(child=serializers.CharField())
    procedure_version_ids = serializers.ListField(child=serializers.CharField())
    pinned_at = serializers.DateTimeField(allow_null=True)
    pinned_by = serializers.CharField(allow_null=True)


class ProductionStageSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    code = serializers.CharField()
    name = serializers.CharField()
    order = serializers.IntegerField()
    status = EnumField()
    progress_percent = serializers.IntegerField()
    estimated_days = serializers.IntegerField()


class ProjectDocumentSerializer(AuditFieldsMixin):
    document_type = serializers.CharField()
    title = serializers.CharField()
    version = serializers.IntegerField()
    status = EnumField()
    created_by = serializers.CharField(allow_null=True)
    finalized_at = serializers.DateTimeField(allow_null=True)
    finalized_by = serializers.CharField(allow_null=True)


class ProjectSerializer(AuditFieldsMixin):
    project_number = serializers.CharField()
    title = serializers.CharField()
    description = serializers.CharField(allow_null=True)
    type = EnumField()
    client_id = serializers.CharField()
    status = EnumField()
    version = serializers.IntegerField()
    is_editable = serializers.BooleanField()
    is_frozen = serializers.BooleanField()
    is_locked = serializers.BooleanField()
    created_by = serializers.CharField(allow_null=True)
    updated_by = serializers.CharField(allow_null=True)
    archived_at = serializers.DateTimeField(allow_null=True)
    archived_by = serializers.CharField(allow_null=True)


class ProjectDetailSerializer(ProjectSerializer):
    configuration = ConfigurationSerializer()
    current_quote_id = serializers.UUIDField(allow_null=True)
    library_pins = LibraryPinsSerializer(allow_null=True)
    production_stages = ProductionStageSerializer(many=True)
    documents = ProjectDocumentSerializer(many=True)
    snapshot_count = serializers.SerializerMethodField()
    bom_count = serializers.SerializerMethodField()
    amendment_count = serializers.SerializerMethodField()
    
    def get_snapshot_count(self, obj):
        return len(obj.configuration_snapshots)
    
    def get_bom_count(self, obj):
        return len(obj.bom_snapshots)
    
    def get_amendment_count(self, obj):
        return len(obj.amendments)


class ProjectCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    client_id = serializers.CharField(max_length=100)
    type = serializers.ChoiceField(choices=[t.value for t in ProjectType], default=ProjectType.NEW_BUILD.value)
    description = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    boat_model_version_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    propulsion_type = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class TransitionSerializer(serializers.Serializer):
    status = EnumField(ProjectStatus)
    force = serializers.BooleanField(default=False)
    reason = serializers.CharField(max_length=1000, required=False, allow_null=True, allow_blank=True)
    run_async = serializers.BooleanField(default=False)


class ChangeTypeSerializer(serializers.Serializer):
    type = EnumField(ProjectType)


class DocumentRegisterSerializer(serializers.Serializer):
    document_type = serializers.CharField(max_length=100)
    title = serializers.CharField(max_length=255)


# =============================================================================
# AMENDMENTS
# =============================================================================

class AmendmentSerializer(AuditFieldsMixin):
    amendment_number = serializers.IntegerField()
    type = EnumField()
    reason = serializers.CharField()
    before_snapshot_id = serializers.UUIDField()
    after_snapshot_id = serializers.UUIDField()
    price_impact_excl_vat = MoneyField()
    affected_items = serializers.ListField(child=serializers.CharField())
    requested_by = serializers.CharField(allow_null=True)
    requested_at = serializers.DateTimeField(allow_null=True)
    approved_by = serializers.CharField()
    approved_at = serializers.DateTimeField(allow_null=True)


class ItemChangesSerializer(serializers.Serializer):
    """Editable item fields for an amendment; only the given ones change."""
    
    item_type = serializers.ChoiceField(choices=[t.value for t in ConfigurationItemType], required=False)
    category = serializers.CharField(max_length=100, required=False)
    name = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    article_number = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    quantity = QuantityField(required=False, min_value=0)
    unit = serializers.CharField(max_length=20, required=False)
    unit_price_excl_vat = MoneyField(required=False, min_value=0)
    cost_price = MoneyField(required=False, allow_null=True, min_value=0)
    is_included = serializers.BooleanField(required=False)
    ce_relevant = serializers.BooleanField(required=False)
    safety_critical = serializers.BooleanField(required=False)
    lead_time_days = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    supplier = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class ItemUpdateSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    updates = ItemChangesSerializer()


class AmendmentCreateSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=[t.value for t in AmendmentType])
    reason = serializers.CharField(max_length=2000)
    requested_by = serializers.CharField(max_length=150, required=False, allow_null=True)
    items_to_remove = serializers.ListField(child=serializers.UUIDField(), required=False)
    items_to_update = ItemUpdateSerializer(many=True, required=False)
    items_to_add = ConfigurationItemInputSerializer(many=True, required=False)
    boat_model_version_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
