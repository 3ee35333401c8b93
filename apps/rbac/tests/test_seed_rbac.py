"""
Tests for the seed_rbac management command.
"""
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from apps.rbac.models import Permission, Role, User
from apps.rbac.services import RBACService


def seed(*args):
    out = StringIO()
    call_command('seed_rbac', *args, stdout=out)
    return out.getvalue()


@pytest.mark.django_db
class TestSeedRbac:

    def test_creates_canonical_permissions(self):
        seed()

        # nine resources with four actions each, plus audit:view
        assert Permission.objects.count() == 37
        assert Permission.objects.filter(name='audit:view').exists()
        assert Permission.objects.get(name='contract-types:edit').category == 'contract-types'

    def test_creates_default_roles(self):
        seed()

        roles = {role.name: role for role in Role.objects.all()}
        assert set(roles) == {'admin', 'rrhh', 'gerente', 'visor'}
        assert roles['admin'].get_permission_names() == set(
            Permission.objects.values_list('name', flat=True)
        )
        assert roles['visor'].get_permission_names() == {
            'employees:view', 'departments:view', 'structures:view',
        }
        assert 'employees:delete' in roles['rrhh'].get_permission_names()
        assert 'employees:edit' not in roles['gerente'].get_permission_names()

    def test_is_idempotent(self):
        seed()
        output = seed()

        assert Permission.objects.count() == 37
        assert Role.objects.count() == 4
        assert '0 permissions created' in output

    def test_restores_drifted_role_permissions(self):
        seed()
        visor = Role.objects.get(name='visor')
        RBACService.sync_role_permissions(visor, [Permission.objects.get(name='users:delete')])

        seed()

        assert 'users:delete' not in visor.get_permission_names()

    def test_creates_admin_user(self):
        seed('--admin-email', 'jefe@example.com', '--admin-password', 'Secreto123')

        user = User.objects.get(email='jefe@example.com')
        assert user.check_password('Secreto123')
        assert user.get_role_names() == ['admin']

    def test_admin_email_requires_password(self):
        with pytest.raises(CommandError):
            seed('--admin-email', 'jefe@example.com')
