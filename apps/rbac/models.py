"""
RBAC models for API access control.

Implements:
- User identity (AUTH_USER_MODEL, email login)
- Permission (canonical named permissions, scoped to a guard)
- Role (named role holding a set of permissions)
- RolePermission (maps permissions to roles)
- UserRole (maps roles to users)
- AccessToken (issued bearer tokens, revocable on logout)
- LoginLocation (where a login happened, when reported by the client)
- AuditLog (audit trail)
"""
import logging
from django.db import models, transaction
from django.contrib.auth.hashers import make_password, check_password
from django.utils import timezone
from apps.core.models import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_GUARD = 'api'


class UserManager(models.Manager):
    """
    Manager for User queries.

    Compatible with Django's authentication system and admin interface.
    """

    def by_email(self, email):
        return self.filter(email=self.normalize_email(email)).first()

    def create_user(self, email, password=None, **extra_fields):
        """Create a new user with hashed password."""
        if not email:
            raise ValueError('Email address is required')

        email = self.normalize_email(email)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('is_superuser', False)

        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """Create a superuser; required by Django's createsuperuser command."""
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)

        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superuser must have is_superuser=True')

        return self.create_user(email, password, **extra_fields)

    @classmethod
    def normalize_email(cls, email):
        """
        Normalize the email address by lowercasing the domain part.
        """
        email = (email or '').strip()
        try:
            email_name, domain_part = email.rsplit('@', 1)
        except ValueError:
            return email
        return f"{email_name}@{domain_part.lower()}"

    def get_by_natural_key(self, email):
        return self.get(email=email)


class User(BaseModel):
    """
    User identity.

    This is the AUTH_USER_MODEL for the entire application, including Django
    admin. Authorization comes from the roles attached through UserRole.
    """

    email = models.EmailField(
        unique=True,
        db_index=True,
        help_text="User email address"
    )
    name = models.CharField(
        max_length=255,
        help_text="Display name"
    )
    password_hash = models.CharField(
        max_length=255,
        help_text="Hashed password",
        db_column='password_hash'
    )

    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Whether user account is active"
    )
    is_superuser = models.BooleanField(
        default=False,
        help_text="Holds every permission regardless of roles"
    )
    last_login_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Last login timestamp"
    )

    USERNAME_FIELD = 'email'
    EMAIL_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    objects = UserManager()

    class Meta:
        db_table = 'users'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['is_active', 'created_at']),
        ]

    def __str__(self):
        return self.email

    @property
    def password(self):
        """Alias for password_hash; Django admin expects a 'password' attribute."""
        return self.password_hash

    @password.setter
    def password(self, value):
        self.password_hash = value

    def check_password(self, raw_password):
        return check_password(raw_password, self.password_hash)

    def set_password(self, raw_password):
        self.password_hash = make_password(raw_password)

    def get_full_name(self):
        return self.name or self.email

    def get_short_name(self):
        return self.name.split(' ')[0] if self.name else self.email

    def get_username(self):
        return self.email

    def update_last_login(self):
        self.last_login_at = timezone.now()
        self.save(update_fields=['last_login_at'])

    @property
    def is_authenticated(self):
        return True

    @property
    def is_anonymous(self):
        return False

    @property
    def is_staff(self):
        """Only superusers may enter the Django admin."""
        return self.is_superuser

    def has_perm(self, perm, obj=None):
        return self.is_active and self.is_superuser

    def has_perms(self, perm_list, obj=None):
        return self.is_active and self.is_superuser

    def has_module_perms(self, app_label):
        return self.is_active and self.is_superuser

    def natural_key(self):
        return (self.email,)

    def get_role_names(self):
        return list(
            Role.objects.filter(user_roles__user=self)
            .order_by('name')
            .values_list('name', flat=True)
        )


class PermissionManager(models.Manager):
    """Manager for Permission queries."""

    def get_or_create_permission(self, name, description='', category='', guard_name=DEFAULT_GUARD):
        """Get or create permission (idempotent)."""
        return self.get_or_create(
            name=name,
            defaults={
                'guard_name': guard_name,
                'description': description,
                'category': category,
            }
        )


class Permission(BaseModel):
    """
    Named permission scoped to an authentication guard.

    Canonical permissions are seeded with ``manage.py seed_rbac``; extra
    ones can be created through the API.
    """

    name = models.CharField(
        max_length=100,
        unique=True,
        db_index=True,
        help_text="Unique permission name (e.g., 'employees:view')"
    )
    guard_name = models.CharField(
        max_length=50,
        default=DEFAULT_GUARD,
        help_text="Authentication guard the permission applies to"
    )
    description = models.TextField(
        blank=True,
        help_text="What this permission grants"
    )
    category = models.CharField(
        max_length=50,
        blank=True,
        db_index=True,
        help_text="Resource group (e.g., 'employees', 'farms')"
    )

    objects = PermissionManager()

    class Meta:
        db_table = 'permissions'
        ordering = ['category', 'name']

    def __str__(self):
        return self.name


class RoleManager(models.Manager):
    """Manager for Role queries."""

    def get_or_create_role(self, name, description='', guard_name=DEFAULT_GUARD):
        """Get or create role (idempotent)."""
        return self.get_or_create(
            name=name,
            defaults={
                'description': description,
                'guard_name': guard_name,
            }
        )


class Role(BaseModel):
    """
    Named role holding a set of permissions.

    Users receive permissions only through roles; effective permissions are
    the union over all of a user's roles.
    """

    name = models.CharField(
        max_length=100,
        unique=True,
        help_text="Role name (e.g., 'admin', 'rrhh')"
    )
    guard_name = models.CharField(
        max_length=50,
        default=DEFAULT_GUARD,
        help_text="Authentication guard the role applies to"
    )
    description = models.TextField(
        blank=True,
        help_text="Role description"
    )
    permissions = models.ManyToManyField(
        Permission,
        through='RolePermission',
        related_name='roles',
        blank=True,
    )

    objects = RoleManager()

    class Meta:
        db_table = 'roles'
        ordering = ['name']

    def __str__(self):
        return self.name

    def get_permission_names(self):
        return set(self.permissions.values_list('name', flat=True))

    def is_assigned(self):
        return self.user_roles.exists()


class RolePermissionManager(models.Manager):
    """Manager for RolePermission queries."""

    def grant_permission(self, role, permission):
        """Grant permission to role (idempotent)."""
        return self.get_or_create(role=role, permission=permission)


class RolePermission(BaseModel):
    """
    Maps permissions to roles.
    """

    role = models.ForeignKey(
        Role,
        on_delete=models.CASCADE,
        related_name='role_permissions',
        help_text="Role that grants this permission"
    )
    permission = models.ForeignKey(
        Permission,
        on_delete=models.CASCADE,
        related_name='role_permissions',
        help_text="Permission being granted"
    )

    objects = RolePermissionManager()

    class Meta:
        db_table = 'role_has_permissions'
        unique_together = [('role', 'permission')]
        ordering = ['role', 'permission']

    def __str__(self):
        return f"{self.role.name} -> {self.permission.name}"


class UserRole(BaseModel):
    """
    Maps roles to users.

    A user can have multiple roles, and permissions are aggregated.
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='user_roles',
        help_text="User who has this role"
    )
    role = models.ForeignKey(
        Role,
        on_delete=models.CASCADE,
        related_name='user_roles',
        help_text="Role assigned to the user"
    )
    assigned_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='role_assignments_made',
        help_text="User who assigned this role"
    )

    class Meta:
        db_table = 'user_has_roles'
        unique_together = [('user', 'role')]
        ordering = ['user', 'role']

    def __str__(self):
        return f"{self.user.email} -> {self.role.name}"


class AccessTokenManager(models.Manager):

    def active(self):
        return self.filter(revoked_at__isnull=True, expires_at__gt=timezone.now())

    def revoke_for_user(self, user):
        return self.filter(user=user, revoked_at__isnull=True).update(revoked_at=timezone.now())


class AccessToken(BaseModel):
    """
    Bearer token issued at login or registration.

    The token itself is a signed JWT; only its ``jti`` is stored so that a
    token can be revoked before it expires.
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='access_tokens',
    )
    jti = models.CharField(
        max_length=64,
        unique=True,
        help_text="JWT ID claim of the issued token"
    )
    name = models.CharField(
        max_length=100,
        default='auth_token',
    )
    expires_at = models.DateTimeField()
    last_used_at = models.DateTimeField(null=True, blank=True)
    revoked_at = models.DateTimeField(null=True, blank=True, db_index=True)

    objects = AccessTokenManager()

    class Meta:
        db_table = 'access_tokens'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user.email} - {self.name}"

    @property
    def is_revoked(self):
        return self.revoked_at is not None

    def revoke(self):
        self.revoked_at = timezone.now()
        self.save(update_fields=['revoked_at', 'updated_at'])


class LoginLocation(BaseModel):
    """Geolocation reported by the client at login."""

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='login_locations',
    )
    latitude = models.DecimalField(max_digits=10, decimal_places=7)
    longitude = models.DecimalField(max_digits=10, decimal_places=7)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True)
    login_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'login_locations'
        ordering = ['-login_at']

    def __str__(self):
        return f"{self.user.email} @ {self.latitude},{self.longitude}"


class AuditLog(BaseModel):
    """
    Audit trail for access-control changes and record deletions.
    """

    user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
        help_text="User who performed the action (null for system actions)"
    )
    action = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Action performed (e.g., 'role_assigned', 'empleado_deleted')"
    )
    target_type = models.CharField(
        max_length=50,
        db_index=True,
        help_text="Type of target entity (e.g., 'Role', 'Employee')"
    )
    target_id = models.UUIDField(
        null=True,
        blank=True,
        db_index=True,
    )
    diff = models.JSONField(
        default=dict,
        blank=True,
        help_text="Before/after changes"
    )
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True)
    request_id = models.CharField(
        max_length=64,
        blank=True,
        db_index=True,
        help_text="Request ID for tracing"
    )
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'created_at']),
            models.Index(fields=['action', 'created_at']),
            models.Index(fields=['target_type', 'target_id']),
        ]

    def __str__(self):
        user_str = self.user.email if self.user else 'System'
        return f"{user_str} - {self.action}"

    @classmethod
    def log_action(cls, action, user=None, target_type=None, target_id=None,
                   diff=None, metadata=None, request=None):
        """
        Convenience method to create an audit log entry.

        Args:
            action: Action being performed
            user: User performing the action
            target_type: Type of target entity
            target_id: ID of target entity
            diff: Before/after changes
            metadata: Additional context
            request: Request object (for IP, user agent, request ID)
        """
        if user is not None and not getattr(user, 'is_authenticated', False):
            user = None

        log_data = {
            'action': action,
            'user': user,
            'target_type': target_type or '',
            'target_id': target_id,
            'diff': diff or {},
            'metadata': metadata or {},
        }

        if request is not None:
            log_data['ip_address'] = cls._get_client_ip(request)
            log_data['user_agent'] = request.META.get('HTTP_USER_AGENT', '')
            log_data['request_id'] = getattr(request, 'request_id', None) or ''

        try:
            with transaction.atomic():
                return cls.objects.create(**log_data)
        except Exception as e:
            # Audit logging must not break the main operation
            logger.error(
                f"Failed to create audit log: {e}",
                extra={'action': action},
                exc_info=True
            )
            return None

    @staticmethod
    def _get_client_ip(request):
        x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
        if x_forwarded_for:
            return x_forwarded_for.split(',')[0].strip()
        return request.META.get('REMOTE_ADDR')
