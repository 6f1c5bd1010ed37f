"""
Base Serializers.

Domain objects are dataclasses, so the read serializers below are plain
``Serializer`` classes reading attributes; write serializers only shape
input before it reaches a service.
"""

from dataclasses import asdict, is_dataclass

from rest_framework import serializers


class EnumField(serializers.Field):
    """Renders a ``str, Enum`` member as its value."""
    
    def __init__(self, enum_class=None, **kwargs):
        self.enum_class = enum_class
        kwargs.setdefault('read_only', enum_class is None)
        super().__init__(**kwargs)
    
    def to_representation(self, value):
        return getattr(value, 'value', value)
    
    def to_internal_value(self, data):
        try:
            return self.enum_class(data)
        except ValueError:
            choices = ', '.join(member.value for member in self.enum_class)
            raise serializers.ValidationError(f"'{data}' is not one of: {choices}")


def MoneyField(**kwargs):
    return serializers.DecimalField(max_digits=14, decimal_places=2, **kwargs)


def QuantityField(**kwargs):
    return serializers.DecimalField(max_digits=12, decimal_places=3, **kwargs)


class AuditFieldsMixin(serializers.Serializer):
    """Mixin for entity timestamps."""
    
    id = serializers.UUIDField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True)


class AuditEntrySerializer(serializers.Serializer):
    action = EnumField()
    entity_type = serializers.CharField()
    entity_id = serializers.CharField()
    description = serializers.CharField()
    user_id = serializers.CharField()
    user_name = serializers.CharField()
    before = serializers.JSONField(allow_null=True)
    after = serializers.JSONField(allow_null=True)
    metadata = serializers.JSONField(allow_null=True)
    timestamp = serializers.DateTimeField(allow_null=True)


class ReasonSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=1000)


def plain(value):
    """Result dataclasses (validation results, stats) as plain data."""
    return asdict(value) if is_dataclass(value) else value
