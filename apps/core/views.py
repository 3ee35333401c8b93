"""
Core API views.
"""
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from django.db import connection
from django.core.cache import cache
from django.http import JsonResponse
import logging

from apps.core.exceptions import error_payload
from apps.core.log_sanitizer import sanitize_url

logger = logging.getLogger(__name__)


class HealthCheckView(APIView):
    """
    Health check endpoint to verify system dependencies.

    GET /api/health

    Returns 200 if the database and cache respond, 503 otherwise.
    """
    authentication_classes = []
    permission_classes = []

    def get(self, request):
        health_status = {
            'status': 'healthy',
            'database': 'unknown',
            'cache': 'unknown',
        }
        errors = []

        try:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1")
            health_status['database'] = 'healthy'
        except Exception as e:
            health_status['database'] = 'unhealthy'
            errors.append(f"Database: {sanitize_url(str(e))}")
            logger.error("Database health check failed", exc_info=True)

        try:
            cache.set('health_check', 'ok', timeout=10)
            if cache.get('health_check') == 'ok':
                health_status['cache'] = 'healthy'
            else:
                health_status['cache'] = 'unhealthy'
                errors.append("Cache: Unable to read test key")
        except Exception as e:
            health_status['cache'] = 'unhealthy'
            errors.append(f"Cache: {e}")
            logger.error("Cache health check failed", exc_info=True)

        if errors:
            health_status['status'] = 'unhealthy'
            return Response(
                {'success': False, 'message': 'Servicio no disponible', 'errors': errors, 'data': health_status},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        return Response({'success': True, 'data': health_status}, status=status.HTTP_200_OK)


def not_found_view(request, exception=None):
    """JSON 404 for URLs that match no route."""
    return JsonResponse(error_payload('Recurso no encontrado'), status=status.HTTP_404_NOT_FOUND)


def server_error_view(request):
    """JSON 500 for errors raised outside DRF views."""
    return JsonResponse(error_payload('Error interno del servidor'), status=status.HTTP_500_INTERNAL_SERVER_ERROR)
