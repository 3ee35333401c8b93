# Export the RBAC permission class for easy importing
from apps.core.permissions import HasPermissions

__all__ = ['HasPermissions']
