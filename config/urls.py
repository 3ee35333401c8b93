"""
URL configuration for the RRHH API.
"""
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

handler404 = 'apps.core.views.not_found_view'
handler500 = 'apps.core.views.server_error_view'

urlpatterns = [
    path('admin/', admin.site.urls),

    # API Documentation
    path('schema/', SpectacularAPIView.as_view(), name='schema'),
    path('schema/swagger/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),

    path('api/', include('apps.core.urls')),  # Health check

    # Authentication endpoints
    path('api/', include('apps.rbac.urls_auth')),  # login, register, logout, profile

    # RBAC endpoints
    path('api/', include('apps.rbac.urls')),  # Users, roles, permissions, audit logs

    # HR catalogs and employees
    path('api/', include('apps.organization.urls')),  # colores, departamentos, estructuras-organizacionales
    path('api/', include('apps.personnel.urls')),  # fincas, tipos-contrato, centro-costos, empleados
]
