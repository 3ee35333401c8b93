"""
Tests for organization endpoints: colors, departments and organizational
structures.
"""
import pytest
from rest_framework import status

from apps.organization.models import Color, Department, OrganizationalStructure
from apps.rbac.models import AuditLog

MISSING_ID = '00000000-0000-0000-0000-000000000000'


@pytest.fixture
def rojo(db):
    return Color.objects.create(color='Rojo', codigo='#FF0000')


@pytest.fixture
def azul(db):
    return Color.objects.create(color='Azul', codigo='#0000FF')


@pytest.fixture
def produccion(rojo):
    return Department.objects.create(nombre='Producción', color=rojo)


@pytest.fixture
def empaque(azul):
    return Department.objects.create(nombre='Empaque', color=azul)


@pytest.fixture
def supervisor(produccion):
    return OrganizationalStructure.objects.create(cargo='Supervisor', departamento=produccion)


@pytest.mark.django_db
class TestColorEndpoints:

    def test_create_color(self, admin_client):
        response = admin_client.post('/api/colores', {'color': 'Verde', 'codigo': '#00FF00'}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['message'] == 'Color creado exitosamente'
        assert response.data['data']['estado'] is True
        assert Color.objects.filter(codigo='#00FF00').exists()

    @pytest.mark.parametrize('codigo', ['FF0000', '#FF00', '#GG0000', '#FF00001'])
    def test_invalid_hex_code_is_422(self, admin_client, codigo):
        response = admin_client.post('/api/colores', {'color': 'Raro', 'codigo': codigo}, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert 'codigo' in response.data['errors']

    def test_duplicate_name_and_code_are_422(self, admin_client, rojo):
        response = admin_client.post('/api/colores', {'color': 'Rojo', 'codigo': '#FF0000'}, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert set(response.data['errors']) == {'color', 'codigo'}

    def test_list_filters_by_estado(self, admin_client, rojo, azul):
        Color.objects.filter(pk=azul.pk).update(estado=False)

        response = admin_client.get('/api/colores?estado=false')

        names = [c['color'] for c in response.data['data']['results']]
        assert names == ['Azul']

    def test_partial_update_keeps_other_fields(self, admin_client, rojo):
        response = admin_client.put(f'/api/colores/{rojo.id}', {'estado': False}, format='json')

        assert response.status_code == status.HTTP_200_OK
        rojo.refresh_from_db()
        assert rojo.estado is False
        assert rojo.codigo == '#FF0000'

    def test_update_to_own_code_is_accepted(self, admin_client, rojo):
        response = admin_client.put(
            f'/api/colores/{rojo.id}', {'color': 'Rojo intenso', 'codigo': '#FF0000'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK

    def test_delete_unused_color(self, admin_client, azul):
        response = admin_client.delete(f'/api/colores/{azul.id}')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['message'] == 'Color eliminado exitosamente'
        assert not Color.objects.filter(pk=azul.pk).exists()
        assert AuditLog.objects.filter(action='color_deleted', target_id=azul.id).exists()

    def test_delete_color_used_by_department_is_409(self, admin_client, rojo, produccion):
        response = admin_client.delete(f'/api/colores/{rojo.id}')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['success'] is False
        assert Color.objects.filter(pk=rojo.pk).exists()

    def test_delete_color_used_by_structure_is_409(self, admin_client, azul, supervisor):
        supervisor.colores.add(azul)

        response = admin_client.delete(f'/api/colores/{azul.id}')

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_color_not_found(self, admin_client):
        response = admin_client.get(f'/api/colores/{MISSING_ID}')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data == {'success': False, 'message': 'Color no encontrado'}

    def test_visor_cannot_read_colors(self, visor_client, rojo):
        response = visor_client.get('/api/colores')

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestDepartmentEndpoints:

    def test_create_department_with_color(self, admin_client, rojo):
        response = admin_client.post(
            '/api/departamentos', {'nombre': 'Cosecha', 'color_id': str(rojo.id)}, format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['message'] == 'Departamento creado exitosamente'
        assert response.data['data']['color']['codigo'] == '#FF0000'

    def test_create_department_without_color(self, admin_client):
        response = admin_client.post('/api/departamentos', {'nombre': 'Cosecha'}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['data']['color'] is None

    def test_unknown_color_is_422(self, admin_client):
        response = admin_client.post(
            '/api/departamentos', {'nombre': 'Cosecha', 'color_id': MISSING_ID}, format='json'
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert 'color_id' in response.data['errors']

    def test_duplicate_name_is_422(self, admin_client, produccion):
        response = admin_client.post('/api/departamentos', {'nombre': 'Producción'}, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert 'nombre' in response.data['errors']

    def test_list_with_structures(self, admin_client, supervisor):
        response = admin_client.get('/api/departamentos?with_estructuras=true')

        department = response.data['data']['results'][0]
        assert [e['cargo'] for e in department['estructuras']] == ['Supervisor']

    def test_list_without_structures_flag(self, admin_client, supervisor):
        response = admin_client.get('/api/departamentos')

        assert 'estructuras' not in response.data['data']['results'][0]

    def test_detail_includes_structures(self, admin_client, produccion, supervisor):
        response = admin_client.get(f'/api/departamentos/{produccion.id}')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['data']['estructuras'][0]['cargo'] == 'Supervisor'

    def test_clear_color(self, admin_client, produccion):
        response = admin_client.put(f'/api/departamentos/{produccion.id}', {'color_id': None}, format='json')

        assert response.status_code == status.HTTP_200_OK
        produccion.refresh_from_db()
        assert produccion.color is None
        assert produccion.nombre == 'Producción'

    def test_delete_department_with_structures_is_409(self, admin_client, produccion, supervisor):
        response = admin_client.delete(f'/api/departamentos/{produccion.id}')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert Department.objects.filter(pk=produccion.pk).exists()

    def test_delete_access_department_is_409(self, admin_client, empaque, supervisor):
        supervisor.departamentos_acceso.add(empaque)

        response = admin_client.delete(f'/api/departamentos/{empaque.id}')

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_delete_department(self, admin_client, empaque):
        response = admin_client.delete(f'/api/departamentos/{empaque.id}')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['message'] == 'Departamento eliminado exitosamente'

    def test_visor_reads_but_cannot_write(self, visor_client, produccion):
        assert visor_client.get('/api/departamentos').status_code == status.HTTP_200_OK

        response = visor_client.post('/api/departamentos', {'nombre': 'Cosecha'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert not Department.objects.filter(nombre='Cosecha').exists()


@pytest.mark.django_db
class TestStructureEndpoints:

    def test_create_with_colors_and_access(self, admin_client, produccion, empaque, rojo, azul):
        response = admin_client.post('/api/estructuras-organizacionales', {
            'cargo': 'Jefe de planta',
            'departamento_id': str(produccion.id),
            'colores': [str(rojo.id)],
            'departamentos_acceso': [str(produccion.id), str(empaque.id)],
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['message'] == 'Estructura organizacional creada exitosamente'
        data = response.json()['data']
        assert data['departamento']['nombre'] == 'Producción'
        assert [c['color'] for c in data['colores']] == ['Rojo']
        assert [c['color'] for c in data['colores_carnet']] == ['Azul', 'Rojo']

    def test_department_is_required(self, admin_client):
        response = admin_client.post('/api/estructuras-organizacionales', {'cargo': 'Jefe'}, format='json')

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert 'departamento_id' in response.data['errors']

    def test_filter_by_department(self, admin_client, supervisor, empaque):
        OrganizationalStructure.objects.create(cargo='Empacador', departamento=empaque)

        response = admin_client.get(f'/api/estructuras-organizacionales?departamento_id={empaque.id}')

        assert [e['cargo'] for e in response.data['data']['results']] == ['Empacador']

    def test_filter_by_unknown_department_is_404(self, admin_client):
        response = admin_client.get(f'/api/estructuras-organizacionales?departamento_id={MISSING_ID}')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['message'] == 'Departamento no encontrado'

    def test_list_with_relations(self, admin_client, supervisor):
        response = admin_client.get('/api/estructuras-organizacionales?with_relations=true')

        structure = response.data['data']['results'][0]
        assert structure['departamento']['nombre'] == 'Producción'
        assert 'colores_carnet' in structure

    def test_partial_update(self, admin_client, supervisor, empaque):
        response = admin_client.put(
            f'/api/estructuras-organizacionales/{supervisor.id}',
            {'departamentos_acceso': [str(empaque.id)]},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        supervisor.refresh_from_db()
        assert supervisor.cargo == 'Supervisor'
        assert list(supervisor.departamentos_acceso.all()) == [empaque]

    def test_sync_colors(self, admin_client, supervisor, rojo, azul):
        supervisor.colores.add(rojo)

        response = admin_client.post(
            f'/api/estructuras-organizacionales/{supervisor.id}/colores',
            {'colores': [str(azul.id)]},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['message'] == 'Colores asociados exitosamente'
        assert list(supervisor.colores.all()) == [azul]

    def test_sync_colors_with_empty_list_clears(self, admin_client, supervisor, rojo):
        supervisor.colores.add(rojo)

        response = admin_client.post(
            f'/api/estructuras-organizacionales/{supervisor.id}/colores', {'colores': []}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert supervisor.colores.count() == 0

    def test_sync_colors_unknown_id_is_422(self, admin_client, supervisor):
        response = admin_client.post(
            f'/api/estructuras-organizacionales/{supervisor.id}/colores',
            {'colores': [MISSING_ID]},
            format='json',
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_sync_access_departments(self, admin_client, supervisor, produccion, empaque):
        response = admin_client.post(
            f'/api/estructuras-organizacionales/{supervisor.id}/departamentos-acceso',
            {'departamentos_acceso': [str(produccion.id), str(empaque.id)]},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['message'] == 'Departamentos de acceso asociados exitosamente'
        assert supervisor.departamentos_acceso.count() == 2

    def test_badge_colors_are_distinct(self, admin_client, supervisor, produccion, rojo):
        otro = Department.objects.create(nombre='Calidad', color=rojo)
        sin_color = Department.objects.create(nombre='Bodega')
        supervisor.departamentos_acceso.set([produccion, otro, sin_color])

        response = admin_client.get(f'/api/estructuras-organizacionales/{supervisor.id}/colores-carnet')

        assert response.status_code == status.HTTP_200_OK
        data = response.data['data']
        assert data['estructura_id'] == str(supervisor.id)
        assert data['cargo'] == 'Supervisor'
        assert [c['codigo'] for c in data['colores_carnet']] == ['#FF0000']

    def test_delete_detaches_associations(self, admin_client, supervisor, rojo, produccion):
        supervisor.colores.add(rojo)
        supervisor.departamentos_acceso.add(produccion)

        response = admin_client.delete(f'/api/estructuras-organizacionales/{supervisor.id}')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['message'] == 'Estructura organizacional eliminada exitosamente'
        assert not OrganizationalStructure.objects.filter(pk=supervisor.pk).exists()
        assert rojo.estructuras.count() == 0

    def test_structure_not_found(self, admin_client):
        response = admin_client.get(f'/api/estructuras-organizacionales/{MISSING_ID}')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['message'] == 'Estructura organizacional no encontrada'

    def test_visor_cannot_sync_colors(self, visor_client, supervisor, rojo):
        response = visor_client.post(
            f'/api/estructuras-organizacionales/{supervisor.id}/colores',
            {'colores': [str(rojo.id)]},
            format='json',
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
