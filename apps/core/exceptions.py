"""
Custom exception handling for DRF.

Every error leaves the API in the same envelope:

    {"success": false, "message": "...", "errors": {...}}
"""
import logging
from django.conf import settings
from django.http import Http404, JsonResponse
from django_ratelimit.exceptions import Ratelimited
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class RRHHException(Exception):
    """Base exception for RRHH API errors."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Solicitud inválida'

    def __init__(self, message=None, details=None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationError(RRHHException):
    """Raised when authentication fails."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = 'Credenciales inválidas'


class PermissionDeniedError(RRHHException):
    """Raised when user lacks required permissions."""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'No tiene permisos para realizar esta acción'


class ValidationError(RRHHException):
    """Raised when input validation fails outside a serializer."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = 'Error de validación'


class ResourceInUse(RRHHException):
    """Raised when a delete is blocked by dependent records."""
    status_code = status.HTTP_409_CONFLICT
    default_message = 'El recurso tiene registros asociados'


STATUS_MESSAGES = {
    status.HTTP_401_UNAUTHORIZED: 'No autenticado',
    status.HTTP_403_FORBIDDEN: 'No tiene permisos para realizar esta acción',
    status.HTTP_404_NOT_FOUND: 'Recurso no encontrado',
    status.HTTP_405_METHOD_NOT_ALLOWED: 'Método no permitido',
    status.HTTP_422_UNPROCESSABLE_ENTITY: 'Error de validación',
    status.HTTP_429_TOO_MANY_REQUESTS: 'Demasiadas solicitudes. Intente más tarde.',
}


def error_payload(message, errors=None):
    payload = {'success': False, 'message': message}
    if errors:
        payload['errors'] = errors
    return payload


def rate_limited_response(request, limit, retry_after=60):
    """
    Build the 429 response for a rate-limited request and log the event.

    Used by views decorated with ``ratelimit(block=False)`` and by the
    ``RATELIMIT_VIEW`` hook when a block happens outside DRF.
    """
    from apps.core.logging import SecurityLogger

    ip_address = request.META.get('REMOTE_ADDR', 'unknown')
    email = None
    data = getattr(request, 'data', None)
    if isinstance(data, dict):
        email = data.get('email')

    SecurityLogger.log_rate_limit_exceeded(
        endpoint=request.path,
        ip_address=ip_address,
        user_email=email,
        limit=limit,
    )

    response = Response(
        error_payload(STATUS_MESSAGES[status.HTTP_429_TOO_MANY_REQUESTS]),
        status=status.HTTP_429_TOO_MANY_REQUESTS,
    )
    response['Retry-After'] = str(retry_after)
    return response


def ratelimit_view(request, exception):
    """Return 429 instead of 403 when django-ratelimit blocks a plain view."""
    response = JsonResponse(
        error_payload(STATUS_MESSAGES[status.HTTP_429_TOO_MANY_REQUESTS]),
        status=status.HTTP_429_TOO_MANY_REQUESTS,
    )
    response['Retry-After'] = '60'
    return response


def _drf_message(exc, status_code):
    detail = getattr(exc, 'detail', None)
    if isinstance(detail, str):
        return str(detail)
    return STATUS_MESSAGES.get(status_code, 'Error')


def custom_exception_handler(exc, context):
    """
    Render every exception raised inside a DRF view as an error envelope.

    - serializer ``ValidationError`` -> 422 with field-level ``errors``
    - ``Http404`` / ``NotFound`` -> 404
    - ``RRHHException`` subclasses -> their own ``status_code``
    - ``Ratelimited`` -> 429
    - anything unhandled -> 500 with a generic message
    """
    request = context.get('request')
    request_id = getattr(request, 'request_id', None) if request else None
    log_extra = {
        'request_id': request_id,
        'path': request.path if request else None,
        'method': request.method if request else None,
    }

    if isinstance(exc, Ratelimited):
        return rate_limited_response(request, limit='Rate limit exceeded')

    if isinstance(exc, RRHHException):
        logger.info(
            f"API error: {exc.__class__.__name__}: {exc.message}",
            extra=log_extra,
        )
        return Response(
            error_payload(exc.message, exc.details),
            status=exc.status_code,
        )

    if isinstance(exc, drf_exceptions.ValidationError):
        errors = exc.detail
        if not isinstance(errors, dict):
            errors = {'non_field_errors': errors}
        logger.info("Validation error", extra=log_extra)
        return Response(
            error_payload(STATUS_MESSAGES[status.HTTP_422_UNPROCESSABLE_ENTITY], errors),
            status=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )

    if isinstance(exc, Http404):
        exc = drf_exceptions.NotFound(str(exc) or None)

    response = exception_handler(exc, context)

    if response is None:
        logger.error(
            f"Unhandled API exception: {exc.__class__.__name__}",
            extra={**log_extra, 'exception': str(exc)},
            exc_info=True,
        )
        message = 'Error interno del servidor'
        if settings.DEBUG:
            message = f"{message}: {exc}"
        return Response(
            error_payload(message),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if response.status_code >= 500:
        logger.error(f"API exception: {exc.__class__.__name__}", extra=log_extra, exc_info=True)
    else:
        logger.info(f"API exception: {exc.__class__.__name__}", extra=log_extra)

    response.data = error_payload(_drf_message(exc, response.status_code))
    return response
