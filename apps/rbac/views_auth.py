"""
Authentication REST API views.

Implements endpoints for:
- Login
- Registration
- Logout (token revocation)
- Current user profile
"""
import logging

from rest_framework import status
from rest_framework.views import APIView
from django_ratelimit.decorators import ratelimit
from django.utils.decorators import method_decorator

from apps.core.exceptions import rate_limited_response
from apps.core.permissions import HasPermissions
from apps.core.responses import success_response
from apps.rbac.services import AuthService
from apps.rbac.serializers import (
    LoginSerializer, RegisterSerializer, UserSerializer, UserProfileSerializer,
)

logger = logging.getLogger(__name__)


def _token_payload(result):
    return {
        'user': UserSerializer(result['user']).data,
        'token': result['token'],
        'token_type': 'Bearer',
        'expires_at': result['expires_at'].isoformat(),
    }


@method_decorator(ratelimit(key='ip', rate='5/m', method='POST', block=False), name='dispatch')
class LoginView(APIView):
    """
    POST /api/login

    Exchange email and password for a bearer token. The client may also
    report the latitude/longitude of the device, which is stored as a
    LoginLocation.

    No authentication required.
    Rate limited to 5 requests per minute per IP.
    """
    authentication_classes = []
    permission_classes = []

    def post(self, request):
        if getattr(request, 'limited', False):
            return rate_limited_response(request, limit='5/minute per IP', retry_after=60)

        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = AuthService.login(
            email=data['email'],
            password=data['password'],
            request=request,
            latitude=data.get('latitude'),
            longitude=data.get('longitude'),
        )

        logger.info(
            "User logged in",
            extra={'user_id': str(result['user'].id), 'request_id': getattr(request, 'request_id', None)}
        )
        return success_response(_token_payload(result), 'Inicio de sesión exitoso')


@method_decorator(ratelimit(key='ip', rate='3/h', method='POST', block=False), name='dispatch')
class RegisterView(APIView):
    """
    POST /api/register

    Create an account without roles and return a bearer token.

    No authentication required.
    Rate limited to 3 requests per hour per IP.
    """
    authentication_classes = []
    permission_classes = []

    def post(self, request):
        if getattr(request, 'limited', False):
            return rate_limited_response(request, limit='3/hour per IP', retry_after=3600)

        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = AuthService.register_user(
            name=serializer.validated_data['name'],
            email=serializer.validated_data['email'],
            password=serializer.validated_data['password'],
            request=request,
        )

        return success_response(
            _token_payload(result),
            'Usuario registrado exitosamente',
            status_code=status.HTTP_201_CREATED,
        )


class LogoutView(APIView):
    """
    POST /api/logout

    Revoke the token used to authenticate this request.
    """
    permission_classes = [HasPermissions]

    def post(self, request):
        AuthService.logout(request.user, request.auth, request=request)
        return success_response(None, 'Sesión cerrada exitosamente')


class ProfileView(APIView):
    """
    GET /api/profile

    Current user with role names and effective permissions.
    """
    permission_classes = [HasPermissions]

    def get(self, request):
        return success_response(UserProfileSerializer(request.user).data)
