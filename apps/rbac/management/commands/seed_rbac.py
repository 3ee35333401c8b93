"""
Management command to seed canonical permissions and default roles.

Creates every Permission the API checks and the four default roles with
their permission mappings. Optionally creates an administrator account.
This command is idempotent and safe to re-run.
"""
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from apps.rbac.models import Permission, Role, User
from apps.rbac.services import RBACService


RESOURCES = {
    'users': 'usuarios',
    'roles': 'roles y permisos',
    'employees': 'empleados',
    'departments': 'departamentos',
    'structures': 'estructuras organizacionales',
    'farms': 'fincas',
    'colors': 'colores',
    'contract-types': 'tipos de contrato',
    'cost-centers': 'centros de costo',
}

ACTIONS = {
    'view': 'Ver',
    'create': 'Crear',
    'edit': 'Editar',
    'delete': 'Eliminar',
}


def build_canonical_permissions():
    permissions = []
    for resource, label in RESOURCES.items():
        for action, verb in ACTIONS.items():
            permissions.append({
                'name': f'{resource}:{action}',
                'description': f'{verb} {label}',
                'category': resource,
            })
    permissions.append({
        'name': 'audit:view',
        'description': 'Ver registro de auditoría',
        'category': 'audit',
    })
    return permissions


class Command(BaseCommand):
    help = 'Seed canonical permissions and default roles (idempotent)'

    CANONICAL_PERMISSIONS = build_canonical_permissions()

    DEFAULT_ROLES = {
        'admin': {
            'description': 'Acceso total al sistema',
            'permissions': 'ALL',
        },
        'rrhh': {
            'description': 'Gestión de empleados y consulta de catálogos',
            'permissions': [
                'employees:view', 'employees:create', 'employees:edit', 'employees:delete',
                'departments:view', 'structures:view', 'farms:view',
                'contract-types:view', 'contract-types:create',
                'cost-centers:view', 'cost-centers:create',
            ],
        },
        'gerente': {
            'description': 'Consulta de empleados y estructura organizacional',
            'permissions': [
                'employees:view', 'departments:view', 'structures:view',
                'farms:view', 'cost-centers:view',
            ],
        },
        'visor': {
            'description': 'Solo lectura de empleados y organización',
            'permissions': [
                'employees:view', 'departments:view', 'structures:view',
            ],
        },
    }

    def add_arguments(self, parser):
        parser.add_argument('--admin-email', type=str, help='Create (or update) an admin user with this email')
        parser.add_argument('--admin-password', type=str, help='Password for --admin-email')
        parser.add_argument('--admin-name', type=str, default='Administrador')

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Seeding canonical permissions...')
        created_count = 0
        for perm_data in self.CANONICAL_PERMISSIONS:
            permission, created = Permission.objects.get_or_create_permission(
                name=perm_data['name'],
                description=perm_data['description'],
                category=perm_data['category'],
            )
            if created:
                created_count += 1
                self.stdout.write(self.style.SUCCESS(f'  Created: {permission.name}'))
            elif (permission.description, permission.category) != (perm_data['description'], perm_data['category']):
                permission.description = perm_data['description']
                permission.category = perm_data['category']
                permission.save(update_fields=['description', 'category', 'updated_at'])
                self.stdout.write(self.style.WARNING(f'  Updated: {permission.name}'))

        self.stdout.write('Seeding default roles...')
        for role_name, role_config in self.DEFAULT_ROLES.items():
            role, created = Role.objects.get_or_create_role(
                name=role_name,
                description=role_config['description'],
            )
            if role_config['permissions'] == 'ALL':
                permissions = Permission.objects.all()
            else:
                permissions = Permission.objects.filter(name__in=role_config['permissions'])
            RBACService.sync_role_permissions(role, list(permissions))

            status = 'Created' if created else 'Synced'
            self.stdout.write(self.style.SUCCESS(f'  {status}: {role.name} ({permissions.count()} permissions)'))

        if options.get('admin_email'):
            self._seed_admin(options)

        self.stdout.write(self.style.SUCCESS(
            f'Seeding complete: {created_count} permissions created, '
            f'{Permission.objects.count()} total, {Role.objects.count()} roles'
        ))

    def _seed_admin(self, options):
        password = options.get('admin_password')
        if not password:
            raise CommandError('--admin-password is required with --admin-email')

        user = User.objects.by_email(options['admin_email'])
        if user is None:
            user = User.objects.create_user(
                email=options['admin_email'],
                password=password,
                name=options['admin_name'],
            )
            self.stdout.write(self.style.SUCCESS(f'  Created admin user: {user.email}'))
        else:
            self.stdout.write(self.style.HTTP_INFO(f'  Admin user exists: {user.email}'))

        RBACService.assign_role(user, Role.objects.get(name='admin'))
