"""
RBAC REST API views.

Implements endpoints for:
- User management (list, detail, update, delete, administrator-created users)
- Role management (CRUD with permission sync)
- Permission management (list, create)
- Role assignment
- Audit log viewing
"""
import logging

from django.db.models import Q
from rest_framework.views import APIView

from apps.core.exceptions import ValidationError
from apps.core.permissions import HasPermissions
from apps.core.responses import success_response, created_response, paginated_response
from apps.core.shortcuts import get_object_or_404, actor
from apps.rbac.models import User, Permission, Role, AuditLog
from apps.rbac.services import RBACService, AuthService
from apps.rbac.serializers import (
    UserSerializer, UserUpdateSerializer, CreateEmployeeUserSerializer,
    PermissionSerializer, RoleSerializer, RoleWriteSerializer,
    AssignRoleSerializer, AuditLogSerializer,
)

logger = logging.getLogger(__name__)

USER_NOT_FOUND = 'Usuario no encontrado'
ROLE_NOT_FOUND = 'Rol no encontrado'


class UserListView(APIView):
    """
    GET /api/users - Paginated users, filterable by ``is_active`` and ``search``
    """
    permission_classes = [HasPermissions]
    required_permissions = {'users:view'}

    def get(self, request):
        users = User.objects.prefetch_related('user_roles__role')

        is_active = request.query_params.get('is_active')
        if is_active is not None:
            users = users.filter(is_active=is_active.lower() in ('1', 'true'))

        search = request.query_params.get('search')
        if search:
            users = users.filter(Q(name__icontains=search) | Q(email__icontains=search))

        return paginated_response(request, users.order_by('-created_at'), UserSerializer)


class UserDetailView(APIView):
    """
    GET    /api/users/{id}
    PUT    /api/users/{id} - Partial update
    PATCH  /api/users/{id}
    DELETE /api/users/{id}
    """
    permission_classes = [HasPermissions]
    method_permissions = {
        'GET': {'users:view'},
        'PUT': {'users:edit'},
        'PATCH': {'users:edit'},
        'DELETE': {'users:delete'},
    }

    def get(self, request, user_id):
        user = get_object_or_404(User, USER_NOT_FOUND, id=user_id)
        return success_response(UserSerializer(user).data)

    def put(self, request, user_id):
        user = get_object_or_404(User, USER_NOT_FOUND, id=user_id)

        serializer = UserUpdateSerializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        user = AuthService.update_user(
            user, serializer.validated_data, updated_by=actor(request), request=request
        )
        return success_response(UserSerializer(user).data, 'Usuario actualizado exitosamente')

    patch = put

    def delete(self, request, user_id):
        user = get_object_or_404(User, USER_NOT_FOUND, id=user_id)

        if user.id == request.user.id:
            raise ValidationError(
                'No puede eliminar su propio usuario',
                details={'user': ['No puede eliminar su propio usuario.']},
            )

        AuthService.delete_user(user, deleted_by=actor(request), request=request)
        return success_response(None, 'Usuario eliminado exitosamente')


class CreateEmployeeUserView(APIView):
    """
    POST /api/users/create-employee

    Create a user account (optionally with roles) on behalf of an administrator.
    """
    permission_classes = [HasPermissions]
    required_permissions = {'users:create'}

    def post(self, request):
        serializer = CreateEmployeeUserSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        user = AuthService.create_user(
            name=data['name'],
            email=data['email'],
            password=data['password'],
            roles=data.get('roles', []),
            created_by=actor(request),
            request=request,
        )
        return created_response(UserSerializer(user).data, 'Usuario creado exitosamente')


class UsersWithRolesView(APIView):
    """
    GET /api/users-with-roles - Paginated users with their role names
    """
    permission_classes = [HasPermissions]
    required_permissions = {'users:view'}

    def get(self, request):
        users = User.objects.prefetch_related('user_roles__role').order_by('name')
        return paginated_response(request, users, UserSerializer)


class RoleListView(APIView):
    """
    GET  /api/roles - List roles with their permissions
    POST /api/roles - Create a role, optionally with permissions
    """
    permission_classes = [HasPermissions]
    method_permissions = {
        'GET': {'roles:view'},
        'POST': {'roles:create'},
    }

    def get(self, request):
        roles = Role.objects.prefetch_related('permissions').order_by('name')
        return success_response(RoleSerializer(roles, many=True).data)

    def post(self, request):
        serializer = RoleWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        role = RBACService.create_role(
            name=data['name'],
            permissions=data.get('permissions', []),
            description=data.get('description', ''),
            guard_name=data.get('guard_name', 'api'),
            created_by=actor(request),
            request=request,
        )
        return created_response(RoleSerializer(role).data, 'Rol creado exitosamente')


class RoleDetailView(APIView):
    """
    GET    /api/roles/{id}
    PUT    /api/roles/{id} - Partial update; ``permissions`` is synced when sent
    DELETE /api/roles/{id} - 409 while the role is assigned to users
    """
    permission_classes = [HasPermissions]
    method_permissions = {
        'GET': {'roles:view'},
        'PUT': {'roles:edit'},
        'PATCH': {'roles:edit'},
        'DELETE': {'roles:delete'},
    }

    def get(self, request, role_id):
        role = get_object_or_404(Role, ROLE_NOT_FOUND, id=role_id)
        return success_response(RoleSerializer(role).data)

    def put(self, request, role_id):
        role = get_object_or_404(Role, ROLE_NOT_FOUND, id=role_id)

        serializer = RoleWriteSerializer(role, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        role = RBACService.update_role(
            role, serializer.validated_data, updated_by=actor(request), request=request
        )
        return success_response(RoleSerializer(role).data, 'Rol actualizado exitosamente')

    patch = put

    def delete(self, request, role_id):
        role = get_object_or_404(Role, ROLE_NOT_FOUND, id=role_id)
        RBACService.delete_role(role, deleted_by=actor(request), request=request)
        return success_response(None, 'Rol eliminado exitosamente')


class PermissionListView(APIView):
    """
    GET  /api/permissions - List permissions, filterable by ``category``
    POST /api/permissions - Create a permission
    """
    permission_classes = [HasPermissions]
    method_permissions = {
        'GET': {'roles:view'},
        'POST': {'roles:create'},
    }

    def get(self, request):
        permissions = Permission.objects.all()
        category = request.query_params.get('category')
        if category:
            permissions = permissions.filter(category=category)
        return success_response(PermissionSerializer(permissions, many=True).data)

    def post(self, request):
        serializer = PermissionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        permission = RBACService.create_permission(
            name=data['name'],
            guard_name=data.get('guard_name', 'api'),
            description=data.get('description', ''),
            category=data.get('category', ''),
            created_by=actor(request),
            request=request,
        )
        return created_response(PermissionSerializer(permission).data, 'Permiso creado exitosamente')


class AssignRoleView(APIView):
    """
    POST /api/assign-role

    Replace the roles of ``user_id`` with ``roles``.
    """
    permission_classes = [HasPermissions]
    required_permissions = {'roles:edit'}

    def post(self, request):
        serializer = AssignRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = serializer.validated_data['user_id']
        roles = RBACService.sync_user_roles(
            user,
            serializer.validated_data['roles'],
            assigned_by=actor(request),
            request=request,
        )

        return success_response(
            {
                'user': {'id': str(user.id), 'name': user.name, 'email': user.email},
                'roles': sorted(role.name for role in roles),
            },
            'Roles asignados exitosamente',
        )


class AuditLogListView(APIView):
    """
    GET /api/audit-logs - Paginated audit trail, filterable by ``action``
    and ``target_type``
    """
    permission_classes = [HasPermissions]
    required_permissions = {'audit:view'}

    def get(self, request):
        logs = AuditLog.objects.select_related('user')

        action = request.query_params.get('action')
        if action:
            logs = logs.filter(action=action)

        target_type = request.query_params.get('target_type')
        if target_type:
            logs = logs.filter(target_type=target_type)

        return paginated_response(request, logs.order_by('-created_at'), AuditLogSerializer)
