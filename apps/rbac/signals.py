"""
RBAC signals for permission cache invalidation.

Any change to a role's permissions or a user's roles drops the cached
permission set of the affected users, whichever code path made the change
(services, admin or shell).
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver


@receiver([post_save, post_delete], sender='rbac.RolePermission')
def invalidate_on_role_permission_change(sender, instance, **kwargs):
    from apps.rbac.services import RBACService

    RBACService.invalidate_role_cache(instance.role)


@receiver([post_save, post_delete], sender='rbac.UserRole')
def invalidate_on_user_role_change(sender, instance, **kwargs):
    from apps.rbac.services import RBACService

    RBACService.invalidate_permission_cache(instance.user_id)


@receiver(post_save, sender='rbac.User')
def invalidate_on_superuser_change(sender, instance, created, update_fields=None, **kwargs):
    """Superuser and active flags change the effective permission set."""
    if created:
        return
    if update_fields is not None and not {'is_superuser', 'is_active'} & set(update_fields):
        return

    from apps.rbac.services import RBACService

    RBACService.invalidate_permission_cache(instance.id)
