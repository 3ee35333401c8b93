"""
DRF permission class for RBAC permission enforcement.
"""
import logging
from rest_framework.permissions import BasePermission

logger = logging.getLogger(__name__)


class HasPermissions(BasePermission):
    """
    DRF permission class that enforces permission requirements on API endpoints.

    The view declares what it needs either as a flat ``required_permissions``
    set or as ``method_permissions``, a mapping from HTTP method to set.
    The user's effective permissions are resolved through RBACService and
    cached on the request.

    Usage in views:
        class FarmListView(APIView):
            permission_classes = [HasPermissions]
            method_permissions = {
                'GET': {'farms:view'},
                'POST': {'farms:create'},
            }
    """

    message = 'No tiene permisos para realizar esta acción'

    def has_permission(self, request, view):
        """
        Check if the authenticated user holds every permission the view requires.

        Unauthenticated requests are rejected here so DRF answers with 401.
        """
        user = getattr(request, 'user', None)
        if not user or not user.is_authenticated:
            return False

        if user.is_superuser:
            return True

        required = self._required_permissions(request, view)
        if not required:
            return True

        from apps.rbac.services import RBACService

        if not hasattr(request, 'permissions'):
            request.permissions = RBACService.resolve_permissions(user)

        missing = required - request.permissions
        if missing:
            from apps.core.logging import SecurityLogger

            logger.warning(
                f"Permission denied: User {user.email} missing permissions: {missing}",
                extra={
                    'user_email': user.email,
                    'required_permissions': sorted(required),
                    'missing_permissions': sorted(missing),
                    'view': view.__class__.__name__,
                    'method': request.method,
                    'path': request.path,
                    'request_id': getattr(request, 'request_id', None),
                }
            )
            SecurityLogger.log_permission_denied(
                user_email=user.email,
                required_permission=', '.join(sorted(missing)),
                endpoint=request.path,
            )
            return False

        return True

    @staticmethod
    def _required_permissions(request, view):
        method_permissions = getattr(view, 'method_permissions', None) or {}
        required = method_permissions.get(request.method)
        if required is None:
            required = getattr(view, 'required_permissions', None)
        if not required:
            return set()
        if isinstance(required, str):
            return {required}
        return set(required)

