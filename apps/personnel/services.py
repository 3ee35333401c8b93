"""
Personnel services: guarded deletes for farms, contract types,
cost centers and employees.
"""
import logging
from typing import Optional

from django.db import transaction

from apps.core.exceptions import ResourceInUse
from apps.personnel.models import Farm, ContractType, CostCenter, Employee
from apps.rbac.models import AuditLog, User

logger = logging.getLogger(__name__)


class PersonnelService:

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
    def delete_farm(cls, farm: Farm, deleted_by: Optional[User] = None, request=None):
        """
        Raises:
            ResourceInUse: employees are assigned to the farm
        """
        if farm.empleados.exists():
            raise ResourceInUse('No se puede eliminar la finca porque tiene empleados asociados')
        cls._log_delete(farm, farm.nombre, deleted_by, request)
        farm.delete()

    @classmethod
    @transaction.atomic
    def delete_contract_type(cls, contract_type: ContractType, deleted_by: Optional[User] = None,
                             request=None):
        """
        Raises:
            ResourceInUse: employees or cost centers reference the contract type
        """
        if contract_type.is_in_use():
            raise ResourceInUse('No se puede eliminar el tipo de contrato porque está en uso')
        cls._log_delete(contract_type, contract_type.tipo, deleted_by, request)
        contract_type.delete()

    @classmethod
    @transaction.atomic
    def delete_cost_center(cls, cost_center: CostCenter, deleted_by: Optional[User] = None,
                           request=None):
        cls._log_delete(cost_center, cost_center.nombre, deleted_by, request)
        cost_center.delete()

    @classmethod
    @transaction.atomic
    def delete_employee(cls, employee: Employee, deleted_by: Optional[User] = None, request=None):
        """Detach the employee's farms, then delete."""
        employee.fincas.clear()
        cls._log_delete(employee, employee.idempleado_as2, deleted_by, request)
        employee.delete()
