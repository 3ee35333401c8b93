from django.apps import AppConfig


class RbacConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.rbac'
    verbose_name = 'Usuarios, roles y permisos'

    def ready(self):
        # Permission cache invalidation hooks
        import apps.rbac.signals  # noqa
