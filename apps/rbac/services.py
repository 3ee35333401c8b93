"""
RBAC and Authentication services.

Implements:
- RBACService: permission resolution, role/permission management, role assignment
- AuthService: JWT issuing and validation, login, registration, logout
"""
import uuid
from datetime import datetime, timedelta, timezone as dt_timezone
from typing import Set, Optional, Dict, Any, Iterable, Tuple
from django.conf import settings
from django.db import transaction
from django.utils import timezone
from django.core.cache import cache
import jwt

from apps.core.exceptions import AuthenticationError, PermissionDeniedError, ResourceInUse, ValidationError
from apps.core.logging import SecurityLogger
from apps.rbac.models import (
    User, Permission, Role, RolePermission, UserRole, AccessToken,
    LoginLocation, AuditLog,
)


class RBACService:
    """
    Service for RBAC operations: permission resolution, role management and
    role assignment.
    """

    PERMISSION_CACHE_TTL = 300  # 5 minutes

    @staticmethod
    def _cache_key(user_id) -> str:
        return f"permissions:user:{user_id}"

    @classmethod
    def resolve_permissions(cls, user: User) -> Set[str]:
        """
        Resolve the effective permission names for a user.

        Effective permissions are the union of the permissions of every role
        the user holds. Superusers hold every permission. Results for other
        users are cached for 5 minutes.

        Returns:
            Set of permission names (e.g., {'employees:view', 'farms:edit'})
        """
        # Superusers are not cached so newly created permissions show up at once
        if user.is_superuser:
            return set(Permission.objects.values_list('name', flat=True))

        cache_key = cls._cache_key(user.id)
        cached = cache.get(cache_key)
        if cached is not None:
            return set(cached)

        permissions = set(
            Permission.objects.filter(
                role_permissions__role__user_roles__user=user
            ).values_list('name', flat=True).distinct()
        )

        cache.set(cache_key, list(permissions), cls.PERMISSION_CACHE_TTL)
        return permissions

    @classmethod
    def invalidate_permission_cache(cls, user_or_id):
        user_id = getattr(user_or_id, 'id', user_or_id)
        cache.delete(cls._cache_key(user_id))

    @classmethod
    def invalidate_role_cache(cls, role: Role):
        """Invalidate cached permissions for every holder of ``role``."""
        user_ids = UserRole.objects.filter(role=role).values_list('user_id', flat=True)
        cache.delete_many([cls._cache_key(user_id) for user_id in user_ids])

    @classmethod
    def has_permission(cls, user: User, permission_name: str) -> bool:
        if user.is_superuser:
            return True
        return permission_name in cls.resolve_permissions(user)

    @classmethod
    def sync_role_permissions(cls, role: Role, permissions: Iterable[Permission]):
        """
        Make ``role`` hold exactly ``permissions`` (idempotent).
        """
        current_ids = set(
            RolePermission.objects.filter(role=role).values_list('permission_id', flat=True)
        )
        target = {permission.id: permission for permission in permissions}

        for permission_id in set(target) - current_ids:
            RolePermission.objects.grant_permission(role, target[permission_id])

        stale = current_ids - set(target)
        if stale:
            RolePermission.objects.filter(role=role, permission_id__in=stale).delete()

        cls.invalidate_role_cache(role)

    @classmethod
    @transaction.atomic
    def create_role(cls, name: str, permissions: Iterable[Permission] = (),
                    description: str = '', guard_name: str = 'api',
                    created_by: Optional[User] = None, request=None) -> Role:
        role = Role.objects.create(name=name, description=description, guard_name=guard_name)
        permissions = list(permissions)
        if permissions:
            cls.sync_role_permissions(role, permissions)

        AuditLog.log_action(
            action='role_created',
            user=created_by,
            target_type='Role',
            target_id=role.id,
            diff={'permissions': sorted(p.name for p in permissions)},
            metadata={'role_name': role.name},
            request=request,
        )
        return role

    @classmethod
    @transaction.atomic
    def update_role(cls, role: Role, data: Dict[str, Any], updated_by: Optional[User] = None,
                    request=None) -> Role:
        """
        Apply a partial update to ``role``.

        ``data`` may carry ``name``, ``description``, ``guard_name`` and
        ``permissions``; permissions are synced only when the key is present.
        """
        before = {'name': role.name, 'permissions': sorted(role.get_permission_names())}

        update_fields = []
        for field in ('name', 'description', 'guard_name'):
            if field in data:
                setattr(role, field, data[field])
                update_fields.append(field)
        if update_fields:
            role.save(update_fields=update_fields + ['updated_at'])

        if 'permissions' in data:
            cls.sync_role_permissions(role, data['permissions'])

        after = {'name': role.name, 'permissions': sorted(role.get_permission_names())}
        AuditLog.log_action(
            action='role_updated',
            user=updated_by,
            target_type='Role',
            target_id=role.id,
            diff={'before': before, 'after': after},
            request=request,
        )
        return role

    @classmethod
    @transaction.atomic
    def delete_role(cls, role: Role, deleted_by: Optional[User] = None, request=None):
        """
        Delete ``role`` unless some user still holds it.

        Raises:
            ResourceInUse: if the role is assigned to any user
        """
        if role.is_assigned():
            raise ResourceInUse('No se puede eliminar el rol porque está asignado a usuarios')

        role_id, role_name = role.id, role.name
        role.delete()

        AuditLog.log_action(
            action='role_deleted',
            user=deleted_by,
            target_type='Role',
            target_id=role_id,
            metadata={'role_name': role_name},
            request=request,
        )

    @classmethod
    def create_permission(cls, name: str, guard_name: str = 'api', description: str = '',
                          category: str = '', created_by: Optional[User] = None,
                          request=None) -> Permission:
        if not category and ':' in name:
            category = name.split(':', 1)[0]
        permission = Permission.objects.create(
            name=name,
            guard_name=guard_name or 'api',
            description=description,
            category=category,
        )
        AuditLog.log_action(
            action='permission_created',
            user=created_by,
            target_type='Permission',
            target_id=permission.id,
            metadata={'permission_name': name},
            request=request,
        )
        return permission

    @classmethod
    def get_user_roles(cls, user: User):
        return Role.objects.filter(user_roles__user=user).distinct()

    @classmethod
    def assign_role(cls, user: User, role: Role, assigned_by: Optional[User] = None,
                    request=None) -> UserRole:
        """
        Assign a role to a user (idempotent).
        """
        user_role, created = UserRole.objects.get_or_create(
            user=user,
            role=role,
            defaults={'assigned_by': assigned_by}
        )

        cls.invalidate_permission_cache(user)

        if created:
            AuditLog.log_action(
                action='role_assigned',
                user=assigned_by,
                target_type='UserRole',
                target_id=user_role.id,
                diff={'role': role.name, 'action': 'assigned'},
                metadata={'target_user_email': user.email, 'role_name': role.name},
                request=request,
            )

        return user_role

    @classmethod
    def remove_role(cls, user: User, role: Role, removed_by: Optional[User] = None,
                    request=None) -> bool:
        deleted, _ = UserRole.objects.filter(user=user, role=role).delete()

        cls.invalidate_permission_cache(user)

        if deleted:
            AuditLog.log_action(
                action='role_removed',
                user=removed_by,
                target_type='User',
                target_id=user.id,
                diff={'role': role.name, 'action': 'removed'},
                metadata={'target_user_email': user.email, 'role_name': role.name},
                request=request,
            )

        return bool(deleted)

    @classmethod
    @transaction.atomic
    def sync_user_roles(cls, user: User, roles: Iterable[Role], assigned_by: Optional[User] = None,
                        request=None):
        """
        Replace the user's roles with ``roles``.
        """
        target = {role.id: role for role in roles}
        current = {role.id: role for role in cls.get_user_roles(user)}

        for role_id in set(current) - set(target):
            cls.remove_role(user, current[role_id], removed_by=assigned_by, request=request)
        for role_id in set(target) - set(current):
            cls.assign_role(user, target[role_id], assigned_by=assigned_by, request=request)

        cls.invalidate_permission_cache(user)
        return cls.get_user_roles(user)


class AuthService:
    """
    Service for authentication operations: JWT, login, registration, logout.
    """

    @classmethod
    def generate_jwt(cls, user: User, name: str = 'auth_token') -> Tuple[str, AccessToken]:
        """
        Issue a JWT for ``user`` and record it as an AccessToken.

        Returns:
            Tuple of (encoded token, AccessToken row)
        """
        now = datetime.now(dt_timezone.utc)
        expires_at = now + timedelta(hours=getattr(settings, 'JWT_EXPIRATION_HOURS', 24))
        jti = uuid.uuid4().hex

        payload = {
            'user_id': str(user.id),
            'email': user.email,
            'jti': jti,
            'exp': expires_at,
            'iat': now,
        }

        token = jwt.encode(
            payload,
            settings.JWT_SECRET_KEY,
            algorithm=getattr(settings, 'JWT_ALGORITHM', 'HS256')
        )

        access_token = AccessToken.objects.create(
            user=user,
            jti=jti,
            name=name,
            expires_at=expires_at,
        )
        return token, access_token

    @classmethod
    def validate_jwt(cls, token: str) -> Optional[Dict[str, Any]]:
        """
        Validate JWT signature and expiry.

        Returns:
            Decoded payload dict or None if invalid
        """
        try:
            return jwt.decode(
                token,
                settings.JWT_SECRET_KEY,
                algorithms=[getattr(settings, 'JWT_ALGORITHM', 'HS256')]
            )
        except jwt.ExpiredSignatureError:
            return None
        except jwt.InvalidTokenError:
            return None

    @classmethod
    def authenticate_token(cls, token: str, ip_address: str = None) -> Optional[Tuple[User, AccessToken]]:
        """
        Map a bearer token to its user.

        The token must be a valid JWT whose ``jti`` belongs to an AccessToken
        that is neither revoked nor owned by an inactive user.
        """
        payload = cls.validate_jwt(token)
        if not payload or not payload.get('jti'):
            return None

        access_token = (
            AccessToken.objects.select_related('user')
            .filter(jti=payload['jti'], user_id=payload.get('user_id'))
            .first()
        )
        if access_token is None:
            return None

        if access_token.is_revoked:
            SecurityLogger.log_revoked_token_used(
                user_id=str(access_token.user_id),
                ip_address=ip_address,
            )
            return None

        user = access_token.user
        if not user.is_active:
            return None

        AccessToken.objects.filter(pk=access_token.pk).update(last_used_at=timezone.now())
        return user, access_token

    @classmethod
    def login(cls, email: str, password: str, request=None, latitude=None,
              longitude=None) -> Dict[str, Any]:
        """
        Authenticate user and issue a token.

        Raises:
            AuthenticationError: unknown email or wrong password
            PermissionDeniedError: the account is disabled
        """
        ip_address = request.META.get('REMOTE_ADDR') if request is not None else None
        user_agent = request.META.get('HTTP_USER_AGENT', '') if request is not None else ''

        user = User.objects.by_email(email)
        if user is None:
            # Hash once anyway to keep timing similar for unknown emails
            User().set_password(password)
            SecurityLogger.log_failed_login(email, ip_address, user_agent, reason='unknown_email')
            raise AuthenticationError('Credenciales inválidas')

        if not user.check_password(password):
            SecurityLogger.log_failed_login(email, ip_address, user_agent, reason='bad_password')
            raise AuthenticationError('Credenciales inválidas')

        if not user.is_active:
            SecurityLogger.log_failed_login(email, ip_address, user_agent, reason='inactive')
            raise PermissionDeniedError('La cuenta de usuario está desactivada')

        user.update_last_login()
        token, access_token = cls.generate_jwt(user)

        if latitude is not None and longitude is not None:
            LoginLocation.objects.create(
                user=user,
                latitude=latitude,
                longitude=longitude,
                ip_address=ip_address,
                user_agent=user_agent,
            )

        AuditLog.log_action(
            action='user_login',
            user=user,
            target_type='User',
            target_id=user.id,
            metadata={'email': user.email},
            request=request,
        )

        return {
            'user': user,
            'token': token,
            'expires_at': access_token.expires_at,
        }

    @classmethod
    @transaction.atomic
    def register_user(cls, name: str, email: str, password: str, request=None) -> Dict[str, Any]:
        """
        Register a new user and issue a token.

        Raises:
            ValidationError: if the email is already registered
        """
        if User.objects.by_email(email) is not None:
            raise ValidationError(
                'El correo electrónico ya está registrado',
                details={'email': ['El correo electrónico ya está registrado.']},
            )

        user = User.objects.create_user(email=email, password=password, name=name)
        token, access_token = cls.generate_jwt(user)

        AuditLog.log_action(
            action='user_registered',
            user=user,
            target_type='User',
            target_id=user.id,
            metadata={'email': user.email},
            request=request,
        )

        return {
            'user': user,
            'token': token,
            'expires_at': access_token.expires_at,
        }

    @classmethod
    def logout(cls, user: User, access_token: Optional[AccessToken], request=None):
        """Revoke the token used for the current request."""
        if access_token is not None and not access_token.is_revoked:
            access_token.revoke()

        AuditLog.log_action(
            action='user_logout',
            user=user,
            target_type='User',
            target_id=user.id,
            request=request,
        )

    @classmethod
    @transaction.atomic
    def create_user(cls, name: str, email: str, password: str, roles: Iterable[Role] = (),
                    created_by: Optional[User] = None, request=None) -> User:
        """Create a user on behalf of an administrator, optionally with roles."""
        roles = list(roles)
        user = User.objects.create_user(email=email, password=password, name=name)
        for role in roles:
            RBACService.assign_role(user, role, assigned_by=created_by, request=request)

        AuditLog.log_action(
            action='user_created',
            user=created_by,
            target_type='User',
            target_id=user.id,
            metadata={'email': user.email, 'roles': [role.name for role in roles]},
            request=request,
        )
        return user

    @classmethod
    @transaction.atomic
    def update_user(cls, user: User, data: Dict[str, Any], updated_by: Optional[User] = None,
                    request=None) -> User:
        changed = []
        for field in ('name', 'email', 'is_active'):
            if field in data and getattr(user, field) != data[field]:
                setattr(user, field, data[field])
                changed.append(field)
        if data.get('password'):
            user.set_password(data['password'])
            changed.append('password_hash')

        if changed:
            user.save(update_fields=changed + ['updated_at'])
            if 'is_active' in changed and not user.is_active:
                AccessToken.objects.revoke_for_user(user)

            AuditLog.log_action(
                action='user_updated',
                user=updated_by,
                target_type='User',
                target_id=user.id,
                diff={'fields': [f for f in changed if f != 'password_hash']},
                metadata={'password_changed': 'password_hash' in changed},
                request=request,
            )
        return user

    @classmethod
    @transaction.atomic
    def delete_user(cls, user: User, deleted_by: Optional[User] = None, request=None):
        user_id, email = user.id, user.email
        RBACService.invalidate_permission_cache(user)
        user.delete()

        AuditLog.log_action(
            action='user_deleted',
            user=deleted_by,
            target_type='User',
            target_id=user_id,
            metadata={'email': email},
            request=request,
        )
