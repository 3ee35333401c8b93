"""
Personnel API URLs: farms, contract types, cost centers and employees.
"""
from django.urls import path
from apps.personnel.views import (
    FarmListView,
    FarmDetailView,
    ContractTypeListView,
    ContractTypeDetailView,
    CostCenterListView,
    CostCenterDetailView,
    EmployeeListView,
    EmployeeDetailView,
)

app_name = 'personnel'

urlpatterns = [
    path('fincas', FarmListView.as_view(), name='farm-list'),
    path('fincas/<uuid:farm_id>', FarmDetailView.as_view(), name='farm-detail'),

    path('tipos-contrato', ContractTypeListView.as_view(), name='contract-type-list'),
    path('tipos-contrato/<uuid:contract_type_id>', ContractTypeDetailView.as_view(), name='contract-type-detail'),

    path('centro-costos', CostCenterListView.as_view(), name='cost-center-list'),
    path('centro-costos/<uuid:cost_center_id>', CostCenterDetailView.as_view(), name='cost-center-detail'),

    path('empleados', EmployeeListView.as_view(), name='employee-list'),
    path('empleados/<uuid:employee_id>', EmployeeDetailView.as_view(), name='employee-detail'),
]
