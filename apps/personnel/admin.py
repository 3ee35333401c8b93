"""
Django admin configuration for personnel app.
"""
from django.contrib import admin
from .models import Farm, ContractType, CostCenter, Employee


@admin.register(Farm)
class FarmAdmin(admin.ModelAdmin):
    list_display = ['nombre', 'estado', 'created_at']
    list_filter = ['estado']
    search_fields = ['nombre']


@admin.register(ContractType)
class ContractTypeAdmin(admin.ModelAdmin):
    list_display = ['tipo', 'estado', 'created_at']
    list_filter = ['estado']
    search_fields = ['tipo']


@admin.register(CostCenter)
class CostCenterAdmin(admin.ModelAdmin):
    list_display = ['nombre', 'grupo', 'tipo_contrato', 'estado']
    list_filter = ['estado', 'grupo', 'tipo_contrato']
    search_fields = ['nombre', 'grupo']


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = [
        'idempleado_as2', 'nombre_as2', 'apellido_as2', 'tipo_contrato',
        'estructura_organizacional', 'estado_rrhh', 'estado_as2'
    ]
    list_filter = ['estado_rrhh', 'estado_as2', 'tipo_contrato']
    search_fields = ['idempleado_as2', 'nombre_as2', 'apellido_as2']
    raw_id_fields = ['user']
    filter_horizontal = ['fincas']
