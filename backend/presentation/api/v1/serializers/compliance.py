"""
Compliance Serializers.
"""

from rest_framework import serializers

from domain.shared.value_objects import (
    AttachmentType,
    CertificationType,
    ChecklistItemStatus,
    ChecklistItemType,
)

from .base import AuditFieldsMixin, EnumField


class AttachmentSerializer(AuditFieldsMixin):
    type = EnumField()
    filename = serializers.CharField()
    mime_type = serializers.CharField()
    size_bytes = serializers.IntegerField()
    url = serializers.CharField(allow_null=True)
    uploaded_at = serializers.DateTimeField(allow_null=True)
    uploaded_by = serializers.CharField(allow_null=True)
    notes = serializers.CharField(allow_null=True)


class ChecklistItemSerializer(AuditFieldsMixin):
    chapter_id = serializers.UUIDField(allow_null=True)
    section_id = serializers.UUIDField(allow_null=True)
    title = serializers.CharField()
    type = EnumField()
    status = EnumField()
    mandatory = serializers.BooleanField()
    notes = serializers.CharField(allow_null=True)
    na_reason = serializers.CharField(allow_null=True)
    attachments = AttachmentSerializer(many=True)
    verified_by = serializers.CharField(allow_null=True)
    verified_at = serializers.DateTimeField(allow_null=True)
    sort_order = serializers.IntegerField()


class SectionSerializer(AuditFieldsMixin):
    chapter_id = serializers.UUIDField(allow_null=True)
    section_number = serializers.CharField()
    title = serializers.CharField()
    description = serializers.CharField(allow_null=True)
    status = EnumField()
    attachments = AttachmentSerializer(many=True)
    checklist = ChecklistItemSerializer(many=True)
    notes = serializers.CharField(allow_null=True)
    sort_order = serializers.IntegerField()
    finalized_at = serializers.DateTimeField(allow_null=True)
    finalized_by = serializers.CharField(allow_null=True)


class ChapterSerializer(AuditFieldsMixin):
    certification_id = serializers.UUIDField(allow_null=True)
    chapter_number = serializers.CharField()
    title = serializers.CharField()
    description = serializers.CharField(allow_null=True)
    status = EnumField()
    attachments = AttachmentSerializer(many=True)
    sections = SectionSerializer(many=True)
    checklist = ChecklistItemSerializer(many=True)
    notes = serializers.CharField(allow_null=True)
    sort_order = serializers.IntegerField()
    finalized_at = serializers.DateTimeField(allow_null=True)
    finalized_by = serializers.CharField(allow_null=True)


class CertificationListSerializer(AuditFieldsMixin):
    type = EnumField()
    label = serializers.CharField()
    name = serializers.CharField()
    version = serializers.IntegerField()
    status = EnumField()
    notes = serializers.CharField(allow_null=True)
    created_by = serializers.CharField(allow_null=True)
    finalized_at = serializers.DateTimeField(allow_null=True)
    finalized_by = serializers.CharField(allow_null=True)


class CertificationSerializer(CertificationListSerializer):
    chapters = ChapterSerializer(many=True)


# =============================================================================
# INPUT
# =============================================================================

class CertificationCreateSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=[t.value for t in CertificationType])
    name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class NotesSerializer(serializers.Serializer):
    notes = serializers.CharField(allow_null=True, allow_blank=True)


class FinalizeCertificationSerializer(serializers.Serializer):
    acknowledge_warnings = serializers.BooleanField(default=False)


class ChapterInputSerializer(serializers.Serializer):
    chapter_number = serializers.CharField(max_length=20)
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    sort_order = serializers.IntegerField(required=False, min_value=0)


class SectionInputSerializer(serializers.Serializer):
    section_number = serializers.CharField(max_length=20)
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class AttachmentInputSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=[t.value for t in AttachmentType], default=AttachmentType.OTHER.value)
    filename = serializers.CharField(max_length=255, allow_blank=True)
    mime_type = serializers.CharField(max_length=100, default='application/octet-stream')
    size_bytes = serializers.IntegerField(min_value=0, default=0)
    url = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class ChecklistItemInputSerializer(serializers.Serializer):
    section_id = serializers.UUIDField(required=False, allow_null=True)
    title = serializers.CharField(max_length=500, allow_blank=True)
    type = serializers.ChoiceField(choices=[t.value for t in ChecklistItemType], default=ChecklistItemType.DOC.value)
    mandatory = serializers.BooleanField(default=True)
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class ChecklistItemUpdateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=500, required=False)
    type = serializers.ChoiceField(choices=[t.value for t in ChecklistItemType], required=False)
    status = serializers.ChoiceField(choices=[s.value for s in ChecklistItemStatus], required=False)
    mandatory = serializers.BooleanField(required=False)
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    na_reason = serializers.CharField(required=False, allow_null=True, allow_blank=True)
