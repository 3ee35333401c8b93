"""
RBAC API URLs.

Provides endpoints for:
- User management
- Role management (CRUD, permission sync)
- Permission management
- Role assignment
- Audit log viewing
"""
from django.urls import path
from apps.rbac.views import (
    UserListView,
    UserDetailView,
    CreateEmployeeUserView,
    UsersWithRolesView,
    RoleListView,
    RoleDetailView,
    PermissionListView,
    AssignRoleView,
    AuditLogListView,
)

app_name = 'rbac'

urlpatterns = [
    # Users
    path('users', UserListView.as_view(), name='user-list'),
    path('users/create-employee', CreateEmployeeUserView.as_view(), name='user-create-employee'),
    path('users/<uuid:user_id>', UserDetailView.as_view(), name='user-detail'),
    path('users-with-roles', UsersWithRolesView.as_view(), name='users-with-roles'),

    # Roles and permissions
    path('roles', RoleListView.as_view(), name='role-list'),
    path('roles/<uuid:role_id>', RoleDetailView.as_view(), name='role-detail'),
    path('permissions', PermissionListView.as_view(), name='permission-list'),
    path('assign-role', AssignRoleView.as_view(), name='assign-role'),

    # Audit logs
    path('audit-logs', AuditLogListView.as_view(), name='audit-log-list'),
]
