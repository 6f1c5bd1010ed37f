"""
Base Views.

Common view mixins and base classes.
"""

from rest_framework import viewsets
from rest_framework.response import Response

from presentation.api.permissions import RolePermission, audit_context_for


class ServiceViewMixin:
    """
    Helpers for views that delegate to application services.
    
    Input is validated by a serializer, handed to the service as plain
    data, and domain exceptions are left to the API exception handler.
    """
    
    permission_classes = [RolePermission]
    required_permissions = {}
    
    def audit_context(self):
        return audit_context_for(self.request)
    
    def validated(self, serializer_class, partial=False):
        serializer = serializer_class(data=self.request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data
    
    def respond(self, serializer_class, instance, many=False, status=None):
        return Response(serializer_class(instance, many=many).data, status=status)


class HistoryViewMixin:
    """
    Mixin for accessing simple-history records of a model instance.
    """
    
    def history_response(self, obj, limit=50):
        history = obj.history.all()[:limit]
        data = [{
            'id': h.history_id,
            'date': h.history_date,
            'user': str(h.history_user) if h.history_user else None,
            'type': h.history_type,
            'changes': h.history_change_reason,
            'status': getattr(h, 'status', None),
            'version': getattr(h, 'version', None),
        } for h in history]
        
        return Response(data)


class ServiceViewSet(ServiceViewMixin, viewsets.ViewSet):
    """ViewSet without a queryset; every action goes through a service."""
    
    lookup_value_regex = '[0-9a-f-]{36}'
