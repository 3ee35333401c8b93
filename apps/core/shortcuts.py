"""
View helpers shared by the resource apps.
"""
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework.exceptions import NotFound


def get_object_or_404(queryset, message, **lookup):
    """
    Fetch a single object or raise NotFound carrying ``message``.

    ``queryset`` may be a model class or a queryset. Malformed ids are
    reported as missing rather than as server errors.
    """
    manager = getattr(queryset, '_default_manager', queryset)
    try:
        return manager.get(**lookup)
    except (manager.model.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFound(message)


def actor(request):
    """Authenticated user behind ``request``, or None."""
    user = getattr(request, 'user', None)
    if user is not None and user.is_authenticated:
        return user
    return None
