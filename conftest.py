"""
Pytest configuration and fixtures.
"""
from io import StringIO

import pytest
from django.conf import settings
import django
from django.core.cache import cache
from django.core.management import call_command


def pytest_configure(config):
    """Configure Django settings for tests."""
    settings.DATABASES['default'] = {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
        'ATOMIC_REQUESTS': False,
    }
    settings.CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
            'LOCATION': 'rrhh-tests',
        }
    }
    settings.PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']
    settings.SECURE_SSL_REDIRECT = False
    settings.RATELIMIT_ENABLE = True
    django.setup()


@pytest.fixture(scope='session')
def django_db_setup(django_db_setup, django_db_blocker):
    """Set up test database with migrations."""
    with django_db_blocker.unblock():
        call_command('migrate', '--run-syncdb', verbosity=0)


@pytest.fixture(autouse=True)
def clear_cache():
    """Permission and rate-limit counters live in the cache; start each test clean."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    """Return DRF API client."""
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def seeded_rbac(db):
    """Canonical permissions and the default roles."""
    call_command('seed_rbac', stdout=StringIO())
    from apps.rbac.models import Role
    return {role.name: role for role in Role.objects.all()}


@pytest.fixture
def make_user(db):
    """Factory for users, optionally holding roles by name."""
    from apps.rbac.models import User, Role
    from apps.rbac.services import RBACService

    counter = {'n': 0}

    def _make_user(email=None, password='Secreto123', name='Usuario Prueba', roles=(), **extra):
        counter['n'] += 1
        user = User.objects.create_user(
            email=email or f"usuario{counter['n']}@example.com",
            password=password,
            name=name,
            **extra
        )
        for role_name in roles:
            RBACService.assign_role(user, Role.objects.get(name=role_name))
        return user

    return _make_user


@pytest.fixture
def authenticate(api_client):
    """Attach a freshly issued bearer token for ``user`` to the API client."""
    from apps.rbac.services import AuthService

    def _authenticate(user, client=None):
        client = client or api_client
        token, _ = AuthService.generate_jwt(user)
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        return client

    return _authenticate


@pytest.fixture
def admin_user(seeded_rbac, make_user):
    return make_user(email='admin@example.com', name='Admin Principal', roles=['admin'])


@pytest.fixture
def admin_client(api_client, authenticate, admin_user):
    """API client authenticated as a user holding the admin role."""
    return authenticate(admin_user)


@pytest.fixture
def visor_client(seeded_rbac, make_user, authenticate):
    """API client authenticated as a read-only (visor) user."""
    from rest_framework.test import APIClient

    user = make_user(email='visor@example.com', name='Visor', roles=['visor'])
    return authenticate(user, client=APIClient())
