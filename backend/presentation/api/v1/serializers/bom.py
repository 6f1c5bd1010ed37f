"""
BOM Serializers.
"""

from rest_framework import serializers

from .base import EnumField, MoneyField, QuantityField


class BOMItemSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    configuration_item_id = serializers.UUIDField(allow_null=True)
    category = serializers.CharField()
    article_number = serializers.CharField(allow_null=True)
    name = serializers.CharField()
    description = serializers.CharField(allow_null=True)
    quantity = QuantityField()
    unit = serializers.CharField()
    unit_cost = MoneyField()
    total_cost = MoneyField()
    is_estimated = serializers.BooleanField()
    estimation_ratio = serializers.DecimalField(max_digits=5, decimal_places=3, allow_null=True)
    sell_price = MoneyField()
    supplier = serializers.CharField(allow_null=True)
    lead_time_days = serializers.IntegerField(allow_null=True)


class BOMSnapshotSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    snapshot_number = serializers.IntegerField()
    configuration_snapshot_id = serializers.UUIDField()
    status = EnumField()
    items = BOMItemSerializer(many=True)
    total_parts = QuantityField()
    total_cost_excl_vat = MoneyField()
    estimated_cost_count = serializers.IntegerField()
    estimated_cost_total = MoneyField()
    actual_cost_total = MoneyField()
    cost_estimation_ratio = serializers.DecimalField(max_digits=5, decimal_places=3)
    created_by = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField()
