"""
Django admin configuration for organization app.
"""
from django.contrib import admin
from .models import Color, Department, OrganizationalStructure


@admin.register(Color)
class ColorAdmin(admin.ModelAdmin):
    list_display = ['color', 'codigo', 'estado', 'created_at']
    list_filter = ['estado']
    search_fields = ['color', 'codigo']


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ['nombre', 'color', 'estado', 'created_at']
    list_filter = ['estado']
    search_fields = ['nombre']


@admin.register(OrganizationalStructure)
class OrganizationalStructureAdmin(admin.ModelAdmin):
    list_display = ['cargo', 'departamento', 'estado', 'created_at']
    list_filter = ['estado', 'departamento']
    search_fields = ['cargo', 'departamento__nombre']
    filter_horizontal = ['colores', 'departamentos_acceso']
