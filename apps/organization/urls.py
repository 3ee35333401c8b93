"""
Organization API URLs: colors, departments and organizational structures.
"""
from django.urls import path
from apps.organization.views import (
    ColorListView,
    ColorDetailView,
    DepartmentListView,
    DepartmentDetailView,
    OrganizationalStructureListView,
    OrganizationalStructureDetailView,
    StructureColorsView,
    StructureAccessDepartmentsView,
    StructureBadgeColorsView,
)

app_name = 'organization'

urlpatterns = [
    # Colors
    path('colores', ColorListView.as_view(), name='color-list'),
    path('colores/<uuid:color_id>', ColorDetailView.as_view(), name='color-detail'),

    # Departments
    path('departamentos', DepartmentListView.as_view(), name='department-list'),
    path('departamentos/<uuid:department_id>', DepartmentDetailView.as_view(), name='department-detail'),

    # Organizational structures
    path('estructuras-organizacionales', OrganizationalStructureListView.as_view(), name='structure-list'),
    path(
        'estructuras-organizacionales/<uuid:structure_id>',
        OrganizationalStructureDetailView.as_view(),
        name='structure-detail',
    ),
    path(
        'estructuras-organizacionales/<uuid:structure_id>/colores',
        StructureColorsView.as_view(),
        name='structure-colors',
    ),
    path(
        'estructuras-organizacionales/<uuid:structure_id>/departamentos-acceso',
        StructureAccessDepartmentsView.as_view(),
        name='structure-access-departments',
    ),
    path(
        'estructuras-organizacionales/<uuid:structure_id>/colores-carnet',
        StructureBadgeColorsView.as_view(),
        name='structure-badge-colors',
    ),
]
