"""
DRF permission backed by the authorization gate.
"""

from rest_framework.permissions import BasePermission

from .gate import Action, Resource, can_access

# DRF viewset action -> gate action, for views that do not override it
DEFAULT_ACTIONS = {
    "list": Action.READ,
    "retrieve": Action.READ,
    "create": Action.CREATE,
    "update": Action.UPDATE,
    "partial_update": Action.UPDATE,
}

METHOD_ACTIONS = {
    "GET": Action.READ,
    "HEAD": Action.READ,
    "OPTIONS": Action.READ,
    "POST": Action.CREATE,
    "PUT": Action.UPDATE,
    "PATCH": Action.UPDATE,
}


def get_auth_context(request):
    """The AuthContext attached by SessionTokenAuthentication, or an anonymous one."""
    from apps.accounts.context import AuthContext

    ctx = getattr(request, "auth", None)
    if isinstance(ctx, AuthContext):
        return ctx
    return AuthContext.anonymous()


class GatePermission(BasePermission):
    """
    Visibility check for a view.

    Views declare ``gate_resource`` and optionally ``gate_actions`` mapping a
    viewset action (or HTTP method on plain APIViews) to a gate action.
    Row ownership is not known here; services check it.
    """

    message = "You are not allowed to perform this action"

    def has_permission(self, request, view):
        resource = getattr(view, "gate_resource", None)
        if resource is None:
            return False
        if resource == Resource.AUTH:
            return True

        ctx = get_auth_context(request)
        if not ctx.is_authenticated:
            return False

        action = self._resolve_action(request, view)
        if action is None:
            return False
        return can_access(ctx.profile, resource, action)

    def _resolve_action(self, request, view):
        overrides = getattr(view, "gate_actions", {})
        view_action = getattr(view, "action", None)
        if view_action is not None:
            if view_action in overrides:
                return overrides[view_action]
            return DEFAULT_ACTIONS.get(view_action)
        if request.method in overrides:
            return overrides[request.method]
        return METHOD_ACTIONS.get(request.method)
