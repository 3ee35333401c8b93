"""
RBAC serializers for REST API endpoints.

Provides serialization for:
- Authentication (registration, login)
- Users and administrator-created users
- Roles, permissions and role assignments
- Audit logs
"""
import re

from rest_framework import serializers
from rest_framework.validators import UniqueValidator
from apps.rbac.models import User, Permission, Role, AuditLog


NAME_PATTERN = re.compile(r"^[^\W\d_]+(?:[\s'][^\W\d_]+)*$")
STRONG_PASSWORD_PATTERN = re.compile(r'^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).+$')


def unique_email_validator():
    return UniqueValidator(
        queryset=User.objects.all(),
        lookup='iexact',
        message='El correo electrónico ya está registrado.',
    )


class PasswordConfirmationMixin:
    """Require ``password_confirmation`` to match ``password``."""

    def validate(self, attrs):
        attrs = super().validate(attrs)
        confirmation = attrs.pop('password_confirmation', None)
        if 'password' in attrs and attrs['password'] != confirmation:
            raise serializers.ValidationError({
                'password_confirmation': ['La confirmación de la contraseña no coincide.']
            })
        return attrs


# ===== AUTHENTICATION SERIALIZERS =====

class LoginSerializer(serializers.Serializer):
    """Serializer for user login."""

    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )
    latitude = serializers.DecimalField(
        max_digits=10, decimal_places=7, min_value=-90, max_value=90,
        required=False, allow_null=True,
    )
    longitude = serializers.DecimalField(
        max_digits=10, decimal_places=7, min_value=-180, max_value=180,
        required=False, allow_null=True,
    )

    def validate_email(self, value):
        return User.objects.normalize_email(value)


class RegisterSerializer(PasswordConfirmationMixin, serializers.Serializer):
    """Serializer for public user registration."""

    name = serializers.CharField(max_length=255)
    email = serializers.EmailField(max_length=255, validators=[unique_email_validator()])
    password = serializers.CharField(min_length=8, write_only=True, style={'input_type': 'password'})
    password_confirmation = serializers.CharField(write_only=True, required=False)

    def validate_email(self, value):
        return User.objects.normalize_email(value)


class CreateEmployeeUserSerializer(PasswordConfirmationMixin, serializers.Serializer):
    """
    Serializer for users created by an administrator.

    Stricter than public registration: the name may hold only letters and
    spaces, and the password needs upper case, lower case and a digit.
    """

    name = serializers.CharField(max_length=255)
    email = serializers.EmailField(max_length=255, validators=[unique_email_validator()])
    password = serializers.CharField(min_length=8, write_only=True, style={'input_type': 'password'})
    password_confirmation = serializers.CharField(write_only=True, required=False)
    roles = serializers.PrimaryKeyRelatedField(
        queryset=Role.objects.all(), many=True, required=False,
    )

    def validate_name(self, value):
        value = value.strip()
        if not NAME_PATTERN.match(value):
            raise serializers.ValidationError('El nombre solo puede contener letras y espacios.')
        return value

    def validate_email(self, value):
        return User.objects.normalize_email(value)

    def validate_password(self, value):
        if not STRONG_PASSWORD_PATTERN.match(value):
            raise serializers.ValidationError(
                'La contraseña debe contener al menos una mayúscula, una minúscula y un número.'
            )
        return value


# ===== USER SERIALIZERS =====

class UserSerializer(serializers.ModelSerializer):
    """Serializer for User model with role names."""

    roles = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id', 'name', 'email', 'is_active', 'is_superuser',
            'roles', 'last_login_at', 'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_roles(self, obj):
        return sorted(user_role.role.name for user_role in obj.user_roles.all())


class UserProfileSerializer(UserSerializer):
    """Current user with effective permission names (GET /api/profile)."""

    permissions = serializers.SerializerMethodField()

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ['permissions']
        read_only_fields = fields

    def get_permissions(self, obj):
        from apps.rbac.services import RBACService

        return sorted(RBACService.resolve_permissions(obj))


class UserUpdateSerializer(serializers.ModelSerializer):
    """Serializer for partial user updates."""

    email = serializers.EmailField(max_length=255, required=False, validators=[unique_email_validator()])
    password = serializers.CharField(
        min_length=8, write_only=True, required=False, style={'input_type': 'password'}
    )

    class Meta:
        model = User
        fields = ['name', 'email', 'password', 'is_active']

    def validate_email(self, value):
        return User.objects.normalize_email(value)


# ===== ROLE / PERMISSION SERIALIZERS =====

class PermissionSerializer(serializers.ModelSerializer):
    """Serializer for Permission model."""

    name = serializers.CharField(
        max_length=100,
        validators=[UniqueValidator(
            queryset=Permission.objects.all(),
            message='Ya existe un permiso con este nombre.',
        )],
    )
    guard_name = serializers.CharField(max_length=50, required=False, default='api')

    class Meta:
        model = Permission
        fields = [
            'id', 'name', 'guard_name', 'description', 'category',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']


class RoleSerializer(serializers.ModelSerializer):
    """Serializer for Role model with its permissions."""

    permissions = PermissionSerializer(many=True, read_only=True)
    users_count = serializers.SerializerMethodField()

    class Meta:
        model = Role
        fields = [
            'id', 'name', 'guard_name', 'description',
            'permissions', 'users_count', 'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_users_count(self, obj):
        return obj.user_roles.count()


class RoleWriteSerializer(serializers.ModelSerializer):
    """Serializer for creating and updating roles."""

    name = serializers.CharField(
        max_length=100,
        validators=[UniqueValidator(
            queryset=Role.objects.all(),
            message='Ya existe un rol con este nombre.',
        )],
    )
    permissions = serializers.PrimaryKeyRelatedField(
        queryset=Permission.objects.all(), many=True, required=False,
    )

    class Meta:
        model = Role
        fields = ['name', 'guard_name', 'description', 'permissions']


class AssignRoleSerializer(serializers.Serializer):
    """Serializer for replacing a user's roles."""

    user_id = serializers.PrimaryKeyRelatedField(queryset=User.objects.all())
    roles = serializers.PrimaryKeyRelatedField(
        queryset=Role.objects.all(), many=True, allow_empty=True,
    )


class AuditLogSerializer(serializers.ModelSerializer):
    """Serializer for AuditLog model."""

    user_email = serializers.EmailField(source='user.email', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = [
            'id', 'user_email', 'action',
            'target_type', 'target_id', 'diff', 'metadata',
            'ip_address', 'user_agent', 'request_id',
            'created_at'
        ]
        read_only_fields = fields
