"""
Quote Serializers.
"""

from rest_framework import serializers

from .base import AuditFieldsMixin, EnumField, MoneyField, QuantityField


class QuoteLineSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    configuration_item_id = serializers.UUIDField(required=False, allow_null=True)
    category = serializers.CharField(max_length=100, allow_blank=True, default='')
    description = serializers.CharField(max_length=1000)
    quantity = QuantityField(default=1)
    unit = serializers.CharField(max_length=20, default='pcs')
    unit_price_excl_vat = MoneyField()
    line_total_excl_vat = MoneyField(read_only=True)
    is_optional = serializers.BooleanField(default=False)


class QuoteSerializer(AuditFieldsMixin):
    quote_number = serializers.CharField()
    version = serializers.IntegerField()
    status = serializers.SerializerMethodField()
    stored_status = EnumField(source='status')
    lines = QuoteLineSerializer(many=True)
    subtotal_excl_vat = MoneyField()
    discount_percent = MoneyField()
    discount_amount = MoneyField()
    total_excl_vat = MoneyField()
    vat_rate = MoneyField()
    vat_amount = MoneyField()
    total_incl_vat = MoneyField()
    valid_until = serializers.DateTimeField(allow_null=True)
    payment_terms = serializers.CharField()
    delivery_terms = serializers.CharField()
    delivery_weeks = serializers.IntegerField(allow_null=True)
    notes = serializers.CharField(allow_null=True)
    sent_at = serializers.DateTimeField(allow_null=True)
    locked_at = serializers.DateTimeField(allow_null=True)
    accepted_at = serializers.DateTimeField(allow_null=True)
    rejected_at = serializers.DateTimeField(allow_null=True)
    rejection_reason = serializers.CharField(allow_null=True)
    superseded_at = serializers.DateTimeField(allow_null=True)
    superseded_by = serializers.UUIDField(allow_null=True)
    created_by = serializers.CharField(allow_null=True)
    
    def get_status(self, obj):
        """EXPIRED is derived from ``valid_until``, never stored."""
        return obj.effective_status().value


class QuoteCreateSerializer(serializers.Serializer):
    validity_days = serializers.IntegerField(required=False, min_value=1)
    payment_terms = serializers.CharField(required=False, allow_blank=True)
    delivery_terms = serializers.CharField(required=False, allow_blank=True)
    delivery_weeks = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class QuoteUpdateSerializer(serializers.Serializer):
    lines = QuoteLineSerializer(many=True, required=False)
    discount_percent = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False)
    valid_until = serializers.DateTimeField(required=False)
    payment_terms = serializers.CharField(required=False)
    delivery_terms = serializers.CharField(required=False)
    delivery_weeks = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class QuoteRejectSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=1000, required=False, allow_null=True, allow_blank=True)
