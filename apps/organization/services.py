"""
Organization services: guarded deletes and association syncing.

Every delete checks for dependent rows first and raises ResourceInUse
instead of relying on the database to reject the statement.
"""
import logging
from typing import Iterable, Optional

from django.db import transaction

from apps.core.exceptions import ResourceInUse
from apps.organization.models import Color, Department, OrganizationalStructure
from apps.rbac.models import AuditLog, User

logger = logging.getLogger(__name__)


class OrganizationService:
    """Deletion guards and relationship management for the organization app."""

    @staticmethod
    def _log_delete(instance, label, deleted_by=None, request=None):
        AuditLog.log_action(
            action=f'{instance._meta.model_name}_deleted',
            user=deleted_by,
            target_type=instance.__class__.__name__,
            target_id=instance.id,
            metadata={'label': label},
            request=request,
        )
        logger.info(
            f"{instance.__class__.__name__} deleted",
            extra={'target_id': str(instance.id), 'request_id': getattr(request, 'request_id', None)},
        )

    @classmethod
    @transaction.atomic
    def delete_color(cls, color: Color, deleted_by: Optional[User] = None, request=None):
        """
        Raises:
            ResourceInUse: departments or organizational structures use the color
        """
        if color.is_in_use():
            raise ResourceInUse(
                'No se puede eliminar el color porque está siendo utilizado '
                'por departamentos o estructuras organizacionales'
            )
        cls._log_delete(color, color.color, deleted_by, request)
        color.delete()

    @classmethod
    @transaction.atomic
    def delete_department(cls, department: Department, deleted_by: Optional[User] = None, request=None):
        """
        Raises:
            ResourceInUse: structures belong to the department or grant access to it
        """
        if department.has_dependents():
            raise ResourceInUse(
                'No se puede eliminar el departamento porque tiene estructuras '
                'organizacionales asociadas'
            )
        cls._log_delete(department, department.nombre, deleted_by, request)
        department.delete()

    @classmethod
    @transaction.atomic
    def delete_structure(cls, structure: OrganizationalStructure, deleted_by: Optional[User] = None,
                         request=None):
        """
        Detach colors and access departments, then delete.

        Raises:
            ResourceInUse: employees hold this structure
        """
        if structure.empleados.exists():
            raise ResourceInUse(
                'No se puede eliminar la estructura organizacional porque tiene '
                'empleados asociados'
            )
        structure.colores.clear()
        structure.departamentos_acceso.clear()
        cls._log_delete(structure, structure.cargo, deleted_by, request)
        structure.delete()

    @staticmethod
    def sync_colors(structure: OrganizationalStructure, colors: Iterable[Color]):
        structure.colores.set(list(colors))
        return structure

    @staticmethod
    def sync_access_departments(structure: OrganizationalStructure, departments: Iterable[Department]):
        structure.departamentos_acceso.set(list(departments))
        return structure
