"""
Tests for personnel endpoints: farms, contract types, cost centers and
employees.
"""
import pytest
from rest_framework import status
from rest_framework.test import APIClient

from apps.organization.models import Department, OrganizationalStructure
from apps.personnel.models import Farm, ContractType, CostCenter, Employee
from apps.rbac.models import AuditLog

MISSING_ID = '00000000-0000-0000-0000-000000000000'


@pytest.fixture
def fijo(db):
    return ContractType.objects.create(tipo='Fijo')


@pytest.fixture
def eventual(db):
    return ContractType.objects.create(tipo='Eventual')


@pytest.fixture
def cosechador(db):
    department = Department.objects.create(nombre='Cosecha')
    return OrganizationalStructure.objects.create(cargo='Cosechador', departamento=department)


@pytest.fixture
def fincas(db):
    return [Farm.objects.create(nombre=nombre) for nombre in ('San Juan', 'La Esperanza')]


@pytest.fixture
def employee_payload(fijo, cosechador):
    return {
        'idempleado_as2': 'E0001',
        'nombre_as2': 'Juan',
        'apellido_as2': 'Pérez',
        'fecha_nacimiento_as2': '1990-05-14',
        'fecha_ingreso_as2': '2020-01-06',
        'tipo_contrato_id': str(fijo.id),
        'estructura_organizacional_id': str(cosechador.id),
    }


@pytest.fixture
def make_employee(fijo, cosechador):
    counter = {'n': 0}

    def _make_employee(**extra):
        counter['n'] += 1
        fields = {
            'idempleado_as2': f"E{counter['n']:04d}",
            'nombre_as2': 'Empleado',
            'apellido_as2': f"N{counter['n']}",
            'fecha_nacimiento_as2': '1990-01-01',
            'fecha_ingreso_as2': '2020-01-01',
            'tipo_contrato': fijo,
            'estructura_organizacional': cosechador,
        }
        fields.update(extra)
        return Employee.objects.create(**fields)

    return _make_employee


@pytest.fixture
def rrhh_client(seeded_rbac, make_user, authenticate):
    user = make_user(email='rrhh@example.com', name='Recursos Humanos', roles=['rrhh'])
    return authenticate(user, client=APIClient())


@pytest.mark.django_db
class TestFarmEndpoints:

    def test_create_farm(self, admin_client):
        response = admin_client.post('/api/fincas', {'nombre': 'San Juan'}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['message'] == 'Finca creada exitosamente'
        assert response.data['data']['estado'] is True

    def test_duplicate_name_is_422(self, admin_client, fincas):
        response = admin_client.post('/api/fincas', {'nombre': 'San Juan'}, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert 'nombre' in response.data['errors']

    def test_name_is_required(self, admin_client):
        response = admin_client.post('/api/fincas', {'estado': True}, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert 'nombre' in response.data['errors']

    def test_page_past_the_end_is_empty(self, admin_client, fincas):
        response = admin_client.get('/api/fincas?page=5')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['data']['results'] == []
        assert response.data['data']['last_page'] == 1

    def test_list_filters_by_estado(self, admin_client, fincas):
        Farm.objects.filter(nombre='San Juan').update(estado=False)

        response = admin_client.get('/api/fincas?estado=true')

        assert [f['nombre'] for f in response.data['data']['results']] == ['La Esperanza']

    def test_deactivate_farm(self, admin_client, fincas):
        farm = fincas[0]

        response = admin_client.put(f'/api/fincas/{farm.id}', {'estado': False}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['message'] == 'Finca actualizada exitosamente'
        farm.refresh_from_db()
        assert farm.estado is False
        assert farm.nombre == 'San Juan'

    def test_delete_farm(self, admin_client, fincas):
        response = admin_client.delete(f'/api/fincas/{fincas[0].id}')

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {
            'success': True, 'message': 'Finca eliminada exitosamente', 'data': None,
        }
        assert AuditLog.objects.filter(action='farm_deleted', target_id=fincas[0].id).exists()

    def test_delete_farm_with_employees_is_409(self, admin_client, fincas, make_employee):
        make_employee().fincas.add(fincas[0])

        response = admin_client.delete(f'/api/fincas/{fincas[0].id}')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['message'] == (
            'No se puede eliminar la finca porque tiene empleados asociados'
        )
        assert Farm.objects.filter(pk=fincas[0].pk).exists()

    def test_farm_not_found(self, admin_client):
        response = admin_client.get(f'/api/fincas/{MISSING_ID}')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data == {'success': False, 'message': 'Finca no encontrada'}

    def test_rrhh_can_read_but_not_create(self, rrhh_client, fincas):
        assert rrhh_client.get('/api/fincas').status_code == status.HTTP_200_OK

        response = rrhh_client.post('/api/fincas', {'nombre': 'Nueva'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestContractTypeEndpoints:

    def test_create_contract_type(self, admin_client):
        response = admin_client.post('/api/tipos-contrato', {'tipo': 'Temporal'}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['message'] == 'Tipo de contrato creado exitosamente'

    def test_duplicate_is_422(self, admin_client, fijo):
        response = admin_client.post('/api/tipos-contrato', {'tipo': 'Fijo'}, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert 'tipo' in response.data['errors']

    def test_delete_used_by_employee_is_409(self, admin_client, fijo, make_employee):
        make_employee()

        response = admin_client.delete(f'/api/tipos-contrato/{fijo.id}')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['message'] == (
            'No se puede eliminar el tipo de contrato porque está en uso'
        )

    def test_delete_used_by_cost_center_is_409(self, admin_client, eventual):
        CostCenter.objects.create(nombre='Empaque', tipo_contrato=eventual)

        response = admin_client.delete(f'/api/tipos-contrato/{eventual.id}')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert CostCenter.objects.filter(nombre='Empaque').exists()

    def test_delete_unused(self, admin_client, eventual):
        response = admin_client.delete(f'/api/tipos-contrato/{eventual.id}')

        assert response.status_code == status.HTTP_200_OK
        assert not ContractType.objects.filter(pk=eventual.pk).exists()

    def test_not_found(self, admin_client):
        response = admin_client.delete(f'/api/tipos-contrato/{MISSING_ID}')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['message'] == 'Tipo de contrato no encontrado'


@pytest.mark.django_db
class TestCostCenterEndpoints:

    def test_create_nests_contract_type(self, admin_client, fijo):
        response = admin_client.post('/api/centro-costos', {
            'nombre': 'Empacadora',
            'grupo': 'Planta',
            'tipo_contrato_id': str(fijo.id),
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['message'] == 'Centro de costo creado exitosamente'
        assert response.data['data']['tipo_contrato']['tipo'] == 'Fijo'
        assert response.data['data']['grupo'] == 'Planta'

    def test_contract_type_is_required(self, admin_client):
        response = admin_client.post('/api/centro-costos', {'nombre': 'Empacadora'}, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert 'tipo_contrato_id' in response.data['errors']

    def test_list_is_ordered_by_name(self, admin_client, fijo):
        for nombre in ('Riego', 'Administración', 'Fumigación'):
            CostCenter.objects.create(nombre=nombre, tipo_contrato=fijo)

        response = admin_client.get('/api/centro-costos')

        names = [c['nombre'] for c in response.data['data']['results']]
        assert names == ['Administración', 'Fumigación', 'Riego']

    def test_list_filters_by_grupo(self, admin_client, fijo):
        CostCenter.objects.create(nombre='Riego', grupo='Campo', tipo_contrato=fijo)
        CostCenter.objects.create(nombre='Oficina', grupo='Administrativo', tipo_contrato=fijo)

        response = admin_client.get('/api/centro-costos?grupo=Campo')

        assert [c['nombre'] for c in response.data['data']['results']] == ['Riego']

    def test_change_contract_type(self, admin_client, fijo, eventual):
        center = CostCenter.objects.create(nombre='Riego', tipo_contrato=fijo)

        response = admin_client.put(
            f'/api/centro-costos/{center.id}', {'tipo_contrato_id': str(eventual.id)}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['data']['tipo_contrato']['tipo'] == 'Eventual'

    def test_delete(self, admin_client, fijo):
        center = CostCenter.objects.create(nombre='Riego', tipo_contrato=fijo)

        response = admin_client.delete(f'/api/centro-costos/{center.id}')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['message'] == 'Centro de costo eliminado exitosamente'
        assert ContractType.objects.filter(pk=fijo.pk).exists()

    def test_not_found(self, admin_client):
        response = admin_client.get(f'/api/centro-costos/{MISSING_ID}')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['message'] == 'Centro de costo no encontrado'


@pytest.mark.django_db
class TestEmployeeEndpoints:

    def test_create_employee_with_farms(self, rrhh_client, employee_payload, fincas):
        employee_payload['fincas'] = [str(f.id) for f in fincas]

        response = rrhh_client.post('/api/empleados', employee_payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['message'] == 'Empleado creado exitosamente'
        data = response.data['data']
        assert data['nombre_completo'] == 'Juan Pérez'
        assert data['estado_rrhh'] is True
        assert data['is_active'] is True
        assert data['tipo_contrato']['tipo'] == 'Fijo'
        assert data['estructura_organizacional']['cargo'] == 'Cosechador'
        assert sorted(f['nombre'] for f in data['fincas_detalle']) == ['La Esperanza', 'San Juan']

    def test_required_fields(self, rrhh_client):
        response = rrhh_client.post('/api/empleados', {}, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert {
            'idempleado_as2', 'nombre_as2', 'apellido_as2', 'fecha_nacimiento_as2',
            'fecha_ingreso_as2', 'tipo_contrato_id', 'estructura_organizacional_id',
        } <= set(response.data['errors'])

    def test_duplicate_code_is_422(self, rrhh_client, employee_payload, make_employee):
        make_employee(idempleado_as2='E0001')

        response = rrhh_client.post('/api/empleados', employee_payload, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert 'idempleado_as2' in response.data['errors']

    def test_exit_before_entry_is_422(self, rrhh_client, employee_payload):
        employee_payload['fecha_salida_as2'] = '2019-12-31'

        response = rrhh_client.post('/api/empleados', employee_payload, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert 'fecha_salida_as2' in response.data['errors']
        assert not Employee.objects.exists()

    def test_exit_date_checked_against_stored_entry(self, rrhh_client, make_employee):
        employee = make_employee(fecha_ingreso_rrhh='2021-03-01')

        response = rrhh_client.put(
            f'/api/empleados/{employee.id}', {'fecha_salida_rrhh': '2021-02-01'}, format='json'
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert 'fecha_salida_rrhh' in response.data['errors']

    def test_disability_percentage_range(self, rrhh_client, employee_payload):
        employee_payload['porcentaje_discapacidad_as2'] = 150

        response = rrhh_client.post('/api/empleados', employee_payload, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert 'porcentaje_discapacidad_as2' in response.data['errors']

    def test_user_linked_to_one_employee_only(self, rrhh_client, employee_payload, make_employee, make_user):
        account = make_user(email='juan@example.com')
        make_employee(user=account)
        employee_payload['user_id'] = str(account.id)

        response = rrhh_client.post('/api/empleados', employee_payload, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.data['errors']['user_id'] == ['El usuario ya está asociado a otro empleado.']

    def test_unknown_structure_is_422(self, rrhh_client, employee_payload):
        employee_payload['estructura_organizacional_id'] = MISSING_ID

        response = rrhh_client.post('/api/empleados', employee_payload, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert 'estructura_organizacional_id' in response.data['errors']

    def test_filter_by_status(self, rrhh_client, make_employee):
        make_employee(nombre_as2='Activo')
        make_employee(nombre_as2='Retirado', estado_rrhh=False)

        response = rrhh_client.get('/api/empleados?estado_rrhh=false')

        assert [e['nombre_as2'] for e in response.data['data']['results']] == ['Retirado']

    def test_filter_by_contract_type(self, rrhh_client, make_employee, eventual):
        make_employee(nombre_as2='Fijo')
        make_employee(nombre_as2='Temporal', tipo_contrato=eventual)

        response = rrhh_client.get(f'/api/empleados?tipo_contrato_id={eventual.id}')

        assert [e['nombre_as2'] for e in response.data['data']['results']] == ['Temporal']

    def test_invalid_filter_id_is_422(self, rrhh_client):
        response = rrhh_client.get('/api/empleados?estructura_organizacional_id=abc')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert 'estructura_organizacional_id' in response.data['errors']

    def test_list_with_relations(self, rrhh_client, make_employee, fincas):
        make_employee().fincas.set(fincas)

        response = rrhh_client.get('/api/empleados?with_relations=true')

        employee = response.data['data']['results'][0]
        assert employee['tipo_contrato']['tipo'] == 'Fijo'
        assert len(employee['fincas_detalle']) == 2

    def test_flat_list_has_no_nested_relations(self, rrhh_client, make_employee):
        make_employee()

        response = rrhh_client.get('/api/empleados')

        assert 'tipo_contrato' not in response.data['data']['results'][0]

    def test_partial_update_replaces_farms(self, rrhh_client, make_employee, fincas):
        employee = make_employee()
        employee.fincas.set(fincas)

        response = rrhh_client.put(
            f'/api/empleados/{employee.id}',
            {'fincas': [str(fincas[1].id)], 'contacto': '0991234567'},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['message'] == 'Empleado actualizado exitosamente'
        employee.refresh_from_db()
        assert list(employee.fincas.all()) == [fincas[1]]
        assert employee.contacto == '0991234567'
        assert employee.nombre_as2 == 'Empleado'

    def test_update_without_farms_keeps_them(self, rrhh_client, make_employee, fincas):
        employee = make_employee()
        employee.fincas.set(fincas)

        response = rrhh_client.patch(f'/api/empleados/{employee.id}', {'estado_as2': False}, format='json')

        assert response.data['data']['is_active'] is False
        assert employee.fincas.count() == 2

    def test_detail(self, rrhh_client, make_employee, make_user):
        account = make_user(email='juan@example.com', name='Juan')
        employee = make_employee(user=account)

        response = rrhh_client.get(f'/api/empleados/{employee.id}')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['data']['user']['email'] == 'juan@example.com'

    def test_delete_detaches_farms(self, rrhh_client, make_employee, fincas):
        employee = make_employee()
        employee.fincas.set(fincas)

        response = rrhh_client.delete(f'/api/empleados/{employee.id}')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['message'] == 'Empleado eliminado exitosamente'
        assert not Employee.objects.filter(pk=employee.pk).exists()
        assert Farm.objects.count() == 2
        assert fincas[0].empleados.count() == 0

    def test_structure_with_employees_cannot_be_deleted(self, admin_client, make_employee, cosechador):
        make_employee()

        response = admin_client.delete(f'/api/estructuras-organizacionales/{cosechador.id}')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert OrganizationalStructure.objects.filter(pk=cosechador.pk).exists()

    def test_not_found(self, rrhh_client):
        response = rrhh_client.get(f'/api/empleados/{MISSING_ID}')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data == {'success': False, 'message': 'Empleado no encontrado'}

    def test_visor_cannot_create(self, visor_client, employee_payload):
        response = visor_client.post('/api/empleados', employee_payload, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert not Employee.objects.exists()


@pytest.mark.django_db
class TestSuperuserAccess:
    """Superusers pass every permission check, seeded or not."""

    @pytest.fixture
    def root_client(self, authenticate):
        from apps.rbac.models import User

        root = User.objects.create_superuser(email='root@example.com', password='Secreto123', name='Root')
        return authenticate(root)

    def test_reads_farms_without_seeded_permissions(self, root_client, fincas):
        response = root_client.get('/api/fincas')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['data']['total'] == 2

    def test_creates_employee_without_seeded_permissions(self, root_client, employee_payload):
        response = root_client.post('/api/empleados', employee_payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert Employee.objects.filter(idempleado_as2='E0001').exists()
