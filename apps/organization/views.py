"""
Organization REST API views.

GET/POST          /api/colores
GET/PUT/DELETE    /api/colores/{id}
GET/POST          /api/departamentos
GET/PUT/DELETE    /api/departamentos/{id}
GET/POST          /api/estructuras-organizacionales
GET/PUT/DELETE    /api/estructuras-organizacionales/{id}
POST              /api/estructuras-organizacionales/{id}/colores
POST              /api/estructuras-organizacionales/{id}/departamentos-acceso
GET               /api/estructuras-organizacionales/{id}/colores-carnet
"""
import logging

from django.db import transaction
from rest_framework.views import APIView

from apps.core.permissions import HasPermissions
from apps.core.responses import success_response, created_response, paginated_response, parse_bool
from apps.core.shortcuts import get_object_or_404, actor
from apps.organization.models import Color, Department, OrganizationalStructure
from apps.organization.serializers import (
    ColorSerializer, ColorSummarySerializer,
    DepartmentSerializer, DepartmentWithStructuresSerializer,
    OrganizationalStructureSerializer, OrganizationalStructureDetailSerializer,
    ColorIdsSerializer, AccessDepartmentIdsSerializer,
)
from apps.organization.services import OrganizationService

logger = logging.getLogger(__name__)

COLOR_NOT_FOUND = 'Color no encontrado'
DEPARTMENT_NOT_FOUND = 'Departamento no encontrado'
STRUCTURE_NOT_FOUND = 'Estructura organizacional no encontrada'


def _filter_estado(request, queryset):
    estado = parse_bool(request.query_params.get('estado'))
    if estado is True:
        return queryset.activos()
    if estado is False:
        return queryset.inactivos()
    return queryset


# ===== COLORS =====

class ColorListView(APIView):
    """
    List and create colors.
    """
    permission_classes = [HasPermissions]
    method_permissions = {
        'GET': {'colors:view'},
        'POST': {'colors:create'},
    }

    def get(self, request):
        colors = _filter_estado(request, Color.objects.all()).order_by('-created_at')
        return paginated_response(request, colors, ColorSerializer)

    def post(self, request):
        serializer = ColorSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        color = serializer.save()
        logger.info("Color created", extra={'target_id': str(color.id)})
        return created_response(ColorSerializer(color).data, 'Color creado exitosamente')


class ColorDetailView(APIView):
    """
    Retrieve, update or delete a color.
    """
    permission_classes = [HasPermissions]
    method_permissions = {
        'GET': {'colors:view'},
        'PUT': {'colors:edit'},
        'PATCH': {'colors:edit'},
        'DELETE': {'colors:delete'},
    }

    def get(self, request, color_id):
        color = get_object_or_404(Color, COLOR_NOT_FOUND, id=color_id)
        return success_response(ColorSerializer(color).data)

    def put(self, request, color_id):
        color = get_object_or_404(Color, COLOR_NOT_FOUND, id=color_id)
        serializer = ColorSerializer(color, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        color = serializer.save()
        return success_response(ColorSerializer(color).data, 'Color actualizado exitosamente')

    patch = put

    def delete(self, request, color_id):
        color = get_object_or_404(Color, COLOR_NOT_FOUND, id=color_id)
        OrganizationService.delete_color(color, deleted_by=actor(request), request=request)
        return success_response(None, 'Color eliminado exitosamente')


# ===== DEPARTMENTS =====

class DepartmentListView(APIView):
    """
    List and create departments.

    ``with_estructuras=true`` nests each department's structures.
    """
    permission_classes = [HasPermissions]
    method_permissions = {
        'GET': {'departments:view'},
        'POST': {'departments:create'},
    }

    def get(self, request):
        departments = _filter_estado(
            request, Department.objects.select_related('color')
        ).order_by('-created_at')

        serializer_class = DepartmentSerializer
        if parse_bool(request.query_params.get('with_estructuras')):
            departments = departments.prefetch_related('estructuras')
            serializer_class = DepartmentWithStructuresSerializer

        return paginated_response(request, departments, serializer_class)

    def post(self, request):
        serializer = DepartmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        department = serializer.save()
        logger.info("Department created", extra={'target_id': str(department.id)})
        return created_response(DepartmentSerializer(department).data, 'Departamento creado exitosamente')


class DepartmentDetailView(APIView):
    """
    Retrieve, update or delete a department.
    """
    permission_classes = [HasPermissions]
    method_permissions = {
        'GET': {'departments:view'},
        'PUT': {'departments:edit'},
        'PATCH': {'departments:edit'},
        'DELETE': {'departments:delete'},
    }

    def get(self, request, department_id):
        department = get_object_or_404(Department, DEPARTMENT_NOT_FOUND, id=department_id)
        return success_response(DepartmentWithStructuresSerializer(department).data)

    def put(self, request, department_id):
        department = get_object_or_404(Department, DEPARTMENT_NOT_FOUND, id=department_id)
        serializer = DepartmentSerializer(department, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        department = serializer.save()
        return success_response(DepartmentSerializer(department).data, 'Departamento actualizado exitosamente')

    patch = put

    def delete(self, request, department_id):
        department = get_object_or_404(Department, DEPARTMENT_NOT_FOUND, id=department_id)
        OrganizationService.delete_department(department, deleted_by=actor(request), request=request)
        return success_response(None, 'Departamento eliminado exitosamente')


# ===== ORGANIZATIONAL STRUCTURES =====

class OrganizationalStructureListView(APIView):
    """
    List and create organizational structures.

    Filters: ``estado``, ``departamento_id``; ``with_relations=true`` nests
    the department, colors and access departments.
    """
    permission_classes = [HasPermissions]
    method_permissions = {
        'GET': {'structures:view'},
        'POST': {'structures:create'},
    }

    def get(self, request):
        structures = _filter_estado(request, OrganizationalStructure.objects.all())

        departamento_id = request.query_params.get('departamento_id')
        if departamento_id:
            get_object_or_404(Department, DEPARTMENT_NOT_FOUND, id=departamento_id)
            structures = structures.filter(departamento_id=departamento_id)

        serializer_class = OrganizationalStructureSerializer
        if parse_bool(request.query_params.get('with_relations')):
            structures = structures.select_related('departamento__color').prefetch_related(
                'colores', 'departamentos_acceso__color'
            )
            serializer_class = OrganizationalStructureDetailSerializer
        else:
            structures = structures.prefetch_related('colores', 'departamentos_acceso')

        return paginated_response(request, structures.order_by('-created_at'), serializer_class)

    @transaction.atomic
    def post(self, request):
        serializer = OrganizationalStructureSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        structure = serializer.save()
        logger.info("Organizational structure created", extra={'target_id': str(structure.id)})
        return created_response(
            OrganizationalStructureDetailSerializer(structure).data,
            'Estructura organizacional creada exitosamente',
        )


class OrganizationalStructureDetailView(APIView):
    """
    Retrieve, update or delete an organizational structure.
    """
    permission_classes = [HasPermissions]
    method_permissions = {
        'GET': {'structures:view'},
        'PUT': {'structures:edit'},
        'PATCH': {'structures:edit'},
        'DELETE': {'structures:delete'},
    }

    def get(self, request, structure_id):
        structure = get_object_or_404(OrganizationalStructure, STRUCTURE_NOT_FOUND, id=structure_id)
        return success_response(OrganizationalStructureDetailSerializer(structure).data)

    @transaction.atomic
    def put(self, request, structure_id):
        structure = get_object_or_404(OrganizationalStructure, STRUCTURE_NOT_FOUND, id=structure_id)
        serializer = OrganizationalStructureSerializer(structure, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        structure = serializer.save()
        return success_response(
            OrganizationalStructureDetailSerializer(structure).data,
            'Estructura organizacional actualizada exitosamente',
        )

    patch = put

    def delete(self, request, structure_id):
        structure = get_object_or_404(OrganizationalStructure, STRUCTURE_NOT_FOUND, id=structure_id)
        OrganizationService.delete_structure(structure, deleted_by=actor(request), request=request)
        return success_response(None, 'Estructura organizacional eliminada exitosamente')


class StructureColorsView(APIView):
    """
    POST /api/estructuras-organizacionales/{id}/colores

    Replace the structure's colors with the ``colores`` id list.
    """
    permission_classes = [HasPermissions]
    required_permissions = {'structures:edit'}

    def post(self, request, structure_id):
        structure = get_object_or_404(OrganizationalStructure, STRUCTURE_NOT_FOUND, id=structure_id)
        serializer = ColorIdsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        OrganizationService.sync_colors(structure, serializer.validated_data['colores'])
        return success_response(
            OrganizationalStructureDetailSerializer(structure).data,
            'Colores asociados exitosamente',
        )


class StructureAccessDepartmentsView(APIView):
    """
    POST /api/estructuras-organizacionales/{id}/departamentos-acceso

    Replace the departments this structure has access to.
    """
    permission_classes = [HasPermissions]
    required_permissions = {'structures:edit'}

    def post(self, request, structure_id):
        structure = get_object_or_404(OrganizationalStructure, STRUCTURE_NOT_FOUND, id=structure_id)
        serializer = AccessDepartmentIdsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        OrganizationService.sync_access_departments(
            structure, serializer.validated_data['departamentos_acceso']
        )
        return success_response(
            OrganizationalStructureDetailSerializer(structure).data,
            'Departamentos de acceso asociados exitosamente',
        )


class StructureBadgeColorsView(APIView):
    """
    GET /api/estructuras-organizacionales/{id}/colores-carnet

    Badge colors: the distinct colors of the structure's access departments.
    """
    permission_classes = [HasPermissions]
    required_permissions = {'structures:view'}

    def get(self, request, structure_id):
        structure = get_object_or_404(OrganizationalStructure, STRUCTURE_NOT_FOUND, id=structure_id)
        return success_response({
            'estructura_id': str(structure.id),
            'cargo': structure.cargo,
            'colores_carnet': ColorSummarySerializer(structure.badge_colors(), many=True).data,
        })
