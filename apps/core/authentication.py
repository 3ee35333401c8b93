"""
Custom DRF authentication classes.
"""
from rest_framework.authentication import BaseAuthentication, get_authorization_header
from rest_framework.exceptions import AuthenticationFailed


class JWTAuthentication(BaseAuthentication):
    """
    Bearer-token authentication backed by AuthService.

    Clients send ``Authorization: Bearer <token>``. A request without the
    header is left anonymous so public views keep working; a malformed,
    expired or revoked token fails with 401.
    """

    keyword = 'Bearer'

    def authenticate(self, request):
        """
        Returns:
            tuple: (user, access_token) if the token is valid, None when absent
        """
        auth = get_authorization_header(request).split()

        if not auth or auth[0].lower() != self.keyword.lower().encode():
            return None

        if len(auth) != 2:
            raise AuthenticationFailed('Encabezado de autorización inválido')

        try:
            token = auth[1].decode()
        except UnicodeError:
            raise AuthenticationFailed('Encabezado de autorización inválido')

        from apps.rbac.services import AuthService

        result = AuthService.authenticate_token(
            token,
            ip_address=request.META.get('REMOTE_ADDR'),
        )
        if result is None:
            raise AuthenticationFailed('Token inválido o expirado')

        return result

    def authenticate_header(self, request):
        return self.keyword
