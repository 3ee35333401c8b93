from django.apps import AppConfig
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
import logging
import sys

logger = logging.getLogger(__name__)

KEY_HINT = "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(48))\""


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.core'
    verbose_name = 'Core'

    def ready(self):
        """
        Validate security-critical configuration when serving requests.

        Management commands other than runserver skip the checks so that
        migrate, shell and seed commands work with a partial environment.
        """
        serving = 'runserver' in sys.argv or 'gunicorn' in sys.argv[0]
        if not serving:
            return

        self._validate_jwt_configuration()
        self._validate_security_settings()

        logger.info("Startup security validations passed")

    def _validate_jwt_configuration(self):
        jwt_secret = getattr(settings, 'JWT_SECRET_KEY', None)

        if not jwt_secret:
            raise ImproperlyConfigured(f"JWT_SECRET_KEY must be set. {KEY_HINT}")

        if len(jwt_secret) < 32:
            raise ImproperlyConfigured(
                f"JWT_SECRET_KEY must be at least 32 characters long "
                f"(current length: {len(jwt_secret)}). {KEY_HINT}"
            )

        if jwt_secret == settings.SECRET_KEY:
            raise ImproperlyConfigured(
                f"JWT_SECRET_KEY must be different from SECRET_KEY. {KEY_HINT}"
            )

        unique_chars = len(set(jwt_secret))
        if unique_chars < 16:
            raise ImproperlyConfigured(
                f"JWT_SECRET_KEY has insufficient entropy: only {unique_chars} "
                f"unique characters, need at least 16. {KEY_HINT}"
            )

    def _validate_security_settings(self):
        if settings.DEBUG:
            return

        weak_patterns = ['change-me', 'insecure', 'dev-only', '12345']
        secret_lower = settings.SECRET_KEY.lower()
        for pattern in weak_patterns:
            if pattern in secret_lower:
                raise ImproperlyConfigured(
                    f"SECRET_KEY appears to be a default value (contains '{pattern}'). {KEY_HINT}"
                )

        if not getattr(settings, 'SECURE_SSL_REDIRECT', False):
            logger.warning("SECURE_SSL_REDIRECT is not enabled outside DEBUG")
