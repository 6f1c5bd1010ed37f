"""
API permissions.

Resolves the acting user's role from Django auth and builds the audit
context the application services expect.
"""

from rest_framework.permissions import SAFE_METHODS, BasePermission

from application.ports import AuditContext
from domain.auth.authorization import Role, has_permission


def resolve_role(user) -> Role:
    """
    Superusers are admins. Otherwise the first role (in role order) that
    matches one of the user's group names wins; the fallback is viewer.
    """
    if not user or not user.is_authenticated:
        return Role.VIEWER
    if user.is_superuser:
        return Role.ADMIN
    group_names = set(user.groups.values_list('name', flat=True))
    for role in Role:
        if role.value in group_names:
            return role
    return Role.VIEWER


def audit_context_for(request) -> AuditContext:
    user = request.user
    return AuditContext(
        user_id=str(user.pk),
        user_name=user.get_full_name() or user.get_username(),
        role=resolve_role(user),
    )


class RolePermission(BasePermission):
    """
    Gates unsafe requests by the view's ``required_permissions`` map
    (action name -> Permission). Reads only need an authenticated user.
    """

    message = 'Your role does not allow this operation.'

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        if request.method in SAFE_METHODS:
            return True
        required = getattr(view, 'required_permissions', {}).get(view.action)
        if required is None:
            return True
        return has_permission(resolve_role(request.user), required)
