"""
Personnel REST API views.

GET/POST          /api/fincas
GET/PUT/DELETE    /api/fincas/{id}
GET/POST          /api/tipos-contrato
GET/PUT/DELETE    /api/tipos-contrato/{id}
GET/POST          /api/centro-costos
GET/PUT/DELETE    /api/centro-costos/{id}
GET/POST          /api/empleados
GET/PUT/DELETE    /api/empleados/{id}
"""
import logging
import uuid

from django.db import transaction
from rest_framework.views import APIView

from apps.core.exceptions import ValidationError
from apps.core.permissions import HasPermissions
from apps.core.responses import success_response, created_response, paginated_response, parse_bool
from apps.core.shortcuts import get_object_or_404, actor
from apps.personnel.models import Farm, ContractType, CostCenter, Employee
from apps.personnel.serializers import (
    FarmSerializer, ContractTypeSerializer, CostCenterSerializer,
    EmployeeSerializer, EmployeeDetailSerializer,
)
from apps.personnel.services import PersonnelService

logger = logging.getLogger(__name__)

FARM_NOT_FOUND = 'Finca no encontrada'
CONTRACT_TYPE_NOT_FOUND = 'Tipo de contrato no encontrado'
COST_CENTER_NOT_FOUND = 'Centro de costo no encontrado'
EMPLOYEE_NOT_FOUND = 'Empleado no encontrado'


def _filter_bool(request, queryset, param):
    value = parse_bool(request.query_params.get(param))
    if value is not None:
        queryset = queryset.filter(**{param: value})
    return queryset


# ===== FARMS =====

class FarmListView(APIView):
    """
    List and create farms.
    """
    permission_classes = [HasPermissions]
    method_permissions = {
        'GET': {'farms:view'},
        'POST': {'farms:create'},
    }

    def get(self, request):
        farms = _filter_bool(request, Farm.objects.all(), 'estado').order_by('-created_at')
        return paginated_response(request, farms, FarmSerializer)

    def post(self, request):
        serializer = FarmSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        farm = serializer.save()
        logger.info("Farm created", extra={'target_id': str(farm.id)})
        return created_response(FarmSerializer(farm).data, 'Finca creada exitosamente')


class FarmDetailView(APIView):
    permission_classes = [HasPermissions]
    method_permissions = {
        'GET': {'farms:view'},
        'PUT': {'farms:edit'},
        'PATCH': {'farms:edit'},
        'DELETE': {'farms:delete'},
    }

    def get(self, request, farm_id):
        farm = get_object_or_404(Farm, FARM_NOT_FOUND, id=farm_id)
        return success_response(FarmSerializer(farm).data)

    def put(self, request, farm_id):
        farm = get_object_or_404(Farm, FARM_NOT_FOUND, id=farm_id)
        serializer = FarmSerializer(farm, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        farm = serializer.save()
        return success_response(FarmSerializer(farm).data, 'Finca actualizada exitosamente')

    patch = put

    def delete(self, request, farm_id):
        farm = get_object_or_404(Farm, FARM_NOT_FOUND, id=farm_id)
        PersonnelService.delete_farm(farm, deleted_by=actor(request), request=request)
        return success_response(None, 'Finca eliminada exitosamente')


# ===== CONTRACT TYPES =====

class ContractTypeListView(APIView):
    """
    List and create contract types.
    """
    permission_classes = [HasPermissions]
    method_permissions = {
        'GET': {'contract-types:view'},
        'POST': {'contract-types:create'},
    }

    def get(self, request):
        contract_types = _filter_bool(request, ContractType.objects.all(), 'estado').order_by('-created_at')
        return paginated_response(request, contract_types, ContractTypeSerializer)

    def post(self, request):
        serializer = ContractTypeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        contract_type = serializer.save()
        logger.info("Contract type created", extra={'target_id': str(contract_type.id)})
        return created_response(
            ContractTypeSerializer(contract_type).data, 'Tipo de contrato creado exitosamente'
        )


class ContractTypeDetailView(APIView):
    permission_classes = [HasPermissions]
    method_permissions = {
        'GET': {'contract-types:view'},
        'PUT': {'contract-types:edit'},
        'PATCH': {'contract-types:edit'},
        'DELETE': {'contract-types:delete'},
    }

    def get(self, request, contract_type_id):
        contract_type = get_object_or_404(ContractType, CONTRACT_TYPE_NOT_FOUND, id=contract_type_id)
        return success_response(ContractTypeSerializer(contract_type).data)

    def put(self, request, contract_type_id):
        contract_type = get_object_or_404(ContractType, CONTRACT_TYPE_NOT_FOUND, id=contract_type_id)
        serializer = ContractTypeSerializer(contract_type, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        contract_type = serializer.save()
        return success_response(
            ContractTypeSerializer(contract_type).data, 'Tipo de contrato actualizado exitosamente'
        )

    patch = put

    def delete(self, request, contract_type_id):
        contract_type = get_object_or_404(ContractType, CONTRACT_TYPE_NOT_FOUND, id=contract_type_id)
        PersonnelService.delete_contract_type(contract_type, deleted_by=actor(request), request=request)
        return success_response(None, 'Tipo de contrato eliminado exitosamente')


# ===== COST CENTERS =====

class CostCenterListView(APIView):
    """
    List (ordered by ``nombre``, filterable by ``estado`` and ``grupo``)
    and create cost centers.
    """
    permission_classes = [HasPermissions]
    method_permissions = {
        'GET': {'cost-centers:view'},
        'POST': {'cost-centers:create'},
    }

    def get(self, request):
        cost_centers = _filter_bool(
            request, CostCenter.objects.select_related('tipo_contrato'), 'estado'
        )

        grupo = request.query_params.get('grupo')
        if grupo:
            cost_centers = cost_centers.filter(grupo=grupo)

        return paginated_response(request, cost_centers.order_by('nombre'), CostCenterSerializer)

    def post(self, request):
        serializer = CostCenterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cost_center = serializer.save()
        logger.info("Cost center created", extra={'target_id': str(cost_center.id)})
        return created_response(
            CostCenterSerializer(cost_center).data, 'Centro de costo creado exitosamente'
        )


class CostCenterDetailView(APIView):
    permission_classes = [HasPermissions]
    method_permissions = {
        'GET': {'cost-centers:view'},
        'PUT': {'cost-centers:edit'},
        'PATCH': {'cost-centers:edit'},
        'DELETE': {'cost-centers:delete'},
    }

    def get(self, request, cost_center_id):
        cost_center = get_object_or_404(
            CostCenter.objects.select_related('tipo_contrato'), COST_CENTER_NOT_FOUND, id=cost_center_id
        )
        return success_response(CostCenterSerializer(cost_center).data)

    def put(self, request, cost_center_id):
        cost_center = get_object_or_404(CostCenter, COST_CENTER_NOT_FOUND, id=cost_center_id)
        serializer = CostCenterSerializer(cost_center, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        cost_center = serializer.save()
        return success_response(
            CostCenterSerializer(cost_center).data, 'Centro de costo actualizado exitosamente'
        )

    patch = put

    def delete(self, request, cost_center_id):
        cost_center = get_object_or_404(CostCenter, COST_CENTER_NOT_FOUND, id=cost_center_id)
        PersonnelService.delete_cost_center(cost_center, deleted_by=actor(request), request=request)
        return success_response(None, 'Centro de costo eliminado exitosamente')


# ===== EMPLOYEES =====

class EmployeeListView(APIView):
    """
    List and create employees.

    Filters: ``estado_rrhh``, ``estado_as2``, ``tipo_contrato_id``,
    ``estructura_organizacional_id``; ``with_relations=true`` nests the
    user, contract type, structure and farms.
    """
    permission_classes = [HasPermissions]
    method_permissions = {
        'GET': {'employees:view'},
        'POST': {'employees:create'},
    }

    def get(self, request):
        employees = Employee.objects.all()
        employees = _filter_bool(request, employees, 'estado_rrhh')
        employees = _filter_bool(request, employees, 'estado_as2')

        for param in ('tipo_contrato_id', 'estructura_organizacional_id'):
            value = request.query_params.get(param)
            if value:
                try:
                    value = uuid.UUID(value)
                except ValueError:
                    raise ValidationError(details={param: ['Identificador inválido.']})
                employees = employees.filter(**{param: value})

        serializer_class = EmployeeSerializer
        if parse_bool(request.query_params.get('with_relations')):
            employees = employees.with_relations()
            serializer_class = EmployeeDetailSerializer
        else:
            employees = employees.prefetch_related('fincas')

        return paginated_response(request, employees.order_by('-created_at'), serializer_class)

    @transaction.atomic
    def post(self, request):
        serializer = EmployeeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        employee = serializer.save()
        logger.info("Employee created", extra={'target_id': str(employee.id)})
        return created_response(EmployeeDetailSerializer(employee).data, 'Empleado creado exitosamente')


class EmployeeDetailView(APIView):
    permission_classes = [HasPermissions]
    method_permissions = {
        'GET': {'employees:view'},
        'PUT': {'employees:edit'},
        'PATCH': {'employees:edit'},
        'DELETE': {'employees:delete'},
    }

    def get(self, request, employee_id):
        employee = get_object_or_404(
            Employee.objects.with_relations(), EMPLOYEE_NOT_FOUND, id=employee_id
        )
        return success_response(EmployeeDetailSerializer(employee).data)

    @transaction.atomic
    def put(self, request, employee_id):
        employee = get_object_or_404(Employee, EMPLOYEE_NOT_FOUND, id=employee_id)
        serializer = EmployeeSerializer(employee, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        employee = serializer.save()
        return success_response(EmployeeDetailSerializer(employee).data, 'Empleado actualizado exitosamente')

    patch = put

    def delete(self, request, employee_id):
        employee = get_object_or_404(Employee, EMPLOYEE_NOT_FOUND, id=employee_id)
        PersonnelService.delete_employee(employee, deleted_by=actor(request), request=request)
        return success_response(None, 'Empleado eliminado exitosamente')
