"""
Personnel models.

Implements:
- Farm ("finca") where employees work
- ContractType
- CostCenter (belongs to a ContractType)
- Employee (payroll record mirrored from the AS2 system plus HR state)
"""
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models

from apps.core.models import BaseModel, EstadoQuerySet


class Farm(BaseModel):
    """Farm an employee can be assigned to."""

    nombre = models.CharField(
        max_length=100,
        unique=True,
        error_messages={'unique': 'Ya existe una finca con este nombre.'},
    )
    estado = models.BooleanField(default=True, db_index=True)

    objects = EstadoQuerySet.as_manager()

    class Meta:
        db_table = 'fincas'
        ordering = ['-created_at']

    def __str__(self):
        return self.nombre


class ContractType(BaseModel):
    """Kind of employment contract (e.g., 'Indefinido')."""

    tipo = models.CharField(
        max_length=100,
        unique=True,
        error_messages={'unique': 'Ya existe un tipo de contrato con este nombre.'},
    )
    estado = models.BooleanField(default=True, db_index=True)

    objects = EstadoQuerySet.as_manager()

    class Meta:
        db_table = 'tipo_contrato'
        ordering = ['-created_at']

    def __str__(self):
        return self.tipo

    def is_in_use(self):
        return self.empleados.exists() or self.centros_costo.exists()


class CostCenter(BaseModel):
    """Cost center, optionally grouped, tied to a contract type."""

    nombre = models.CharField(
        max_length=150,
        unique=True,
        error_messages={'unique': 'Ya existe un centro de costo con este nombre.'},
    )
    grupo = models.CharField(max_length=100, null=True, blank=True, db_index=True)
    tipo_contrato = models.ForeignKey(
        ContractType,
        on_delete=models.CASCADE,
        related_name='centros_costo',
    )
    estado = models.BooleanField(default=True, db_index=True)

    objects = EstadoQuerySet.as_manager()

    class Meta:
        db_table = 'centro_costos'
        ordering = ['nombre']

    def __str__(self):
        return self.nombre


class EmployeeQuerySet(models.QuerySet):

    def with_relations(self):
        return self.select_related(
            'user', 'tipo_contrato', 'estructura_organizacional__departamento'
        ).prefetch_related('fincas')


class Employee(BaseModel):
    """
    Employee record.

    Fields suffixed ``_as2`` mirror the payroll system; ``_rrhh`` fields are
    maintained by HR. ``user`` links the employee to a login account.
    """

    idempleado_as2 = models.CharField(
        max_length=10,
        unique=True,
        error_messages={'unique': 'Ya existe un empleado con este código.'},
    )
    estado_rrhh = models.BooleanField(default=True, db_index=True)
    estado_as2 = models.BooleanField(default=True, db_index=True)
    nombre_as2 = models.CharField(max_length=20)
    apellido_as2 = models.CharField(max_length=20)
    fecha_nacimiento_as2 = models.DateField()
    contacto = models.CharField(max_length=10, null=True, blank=True)
    discapacidad_as2 = models.CharField(max_length=20, null=True, blank=True)
    porcentaje_discapacidad_as2 = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    fecha_ingreso_as2 = models.DateField()
    fecha_salida_as2 = models.DateField(null=True, blank=True)
    estructura_costo_as2 = models.CharField(max_length=255, null=True, blank=True)
    fecha_ingreso_rrhh = models.DateField(null=True, blank=True)
    fecha_salida_rrhh = models.DateField(null=True, blank=True)
    id_srv66 = models.CharField(max_length=255, null=True, blank=True)
    id_srv90 = models.CharField(max_length=255, null=True, blank=True)
    id_areas = models.CharField(max_length=255, null=True, blank=True)
    tipo_user_biometrico = models.CharField(max_length=255, null=True, blank=True)
    foto_perfil = models.CharField(max_length=255, null=True, blank=True)

    user = models.OneToOneField(
        'rbac.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='empleado',
        error_messages={'unique': 'El usuario ya está asociado a otro empleado.'},
    )
    tipo_contrato = models.ForeignKey(
        ContractType,
        on_delete=models.PROTECT,
        related_name='empleados',
    )
    estructura_organizacional = models.ForeignKey(
        'organization.OrganizationalStructure',
        on_delete=models.PROTECT,
        related_name='empleados',
    )
    fincas = models.ManyToManyField(
        Farm,
        related_name='empleados',
        blank=True,
        db_table='empleado_finca',
    )

    objects = EmployeeQuerySet.as_manager()

    class Meta:
        db_table = 'empleados'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.idempleado_as2} - {self.nombre_completo}"

    @property
    def nombre_completo(self):
        return f"{self.nombre_as2} {self.apellido_as2}"

    @property
    def is_active(self):
        return self.estado_rrhh and self.estado_as2
