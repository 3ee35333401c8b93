"""
Django admin configuration for RBAC app.
"""
from django.contrib import admin
from .models import (
    User,
    Permission,
    Role,
    RolePermission,
    UserRole,
    AccessToken,
    LoginLocation,
    AuditLog,
)


class UserRoleInline(admin.TabularInline):
    model = UserRole
    fk_name = 'user'
    extra = 0
    fields = ['role', 'assigned_by', 'created_at']
    readonly_fields = ['assigned_by', 'created_at']


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    """
    Admin for the email-based User model.

    Passwords are stored through ``set_password``; the hash is shown read-only.
    """
    list_display = ['email', 'name', 'is_active', 'is_superuser', 'last_login_at', 'created_at']
    list_filter = ['is_active', 'is_superuser', 'created_at']
    search_fields = ['email', 'name']
    ordering = ['-created_at']
    fieldsets = (
        (None, {'fields': ('email', 'name', 'password_hash')}),
        ('Permisos', {'fields': ('is_active', 'is_superuser')}),
        ('Actividad', {'fields': ('last_login_at', 'created_at', 'updated_at')}),
    )
    readonly_fields = ['password_hash', 'last_login_at', 'created_at', 'updated_at']
    inlines = [UserRoleInline]


class RolePermissionInline(admin.TabularInline):
    model = RolePermission
    extra = 0


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ['name', 'guard_name', 'created_at']
    search_fields = ['name']
    inlines = [RolePermissionInline]


@admin.register(Permission)
class PermissionAdmin(admin.ModelAdmin):
    list_display = ['name', 'guard_name', 'category', 'created_at']
    list_filter = ['category', 'guard_name']
    search_fields = ['name', 'description']


@admin.register(AccessToken)
class AccessTokenAdmin(admin.ModelAdmin):
    list_display = ['user', 'name', 'expires_at', 'last_used_at', 'revoked_at']
    list_filter = ['revoked_at']
    search_fields = ['user__email', 'jti']
    readonly_fields = ['jti', 'created_at']


@admin.register(LoginLocation)
class LoginLocationAdmin(admin.ModelAdmin):
    list_display = ['user', 'latitude', 'longitude', 'ip_address', 'login_at']
    search_fields = ['user__email', 'ip_address']


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['action', 'user', 'target_type', 'target_id', 'created_at']
    list_filter = ['action', 'target_type']
    search_fields = ['action', 'user__email', 'request_id']
    readonly_fields = [f.name for f in AuditLog._meta.fields]
