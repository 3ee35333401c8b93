"""
Organization models.

Implements:
- Color (badge/identification color with hex code)
- Department (optionally tagged with a Color)
- OrganizationalStructure (position slot inside a Department, tagged with
  Colors and granted access to other Departments)
"""
from django.core.validators import RegexValidator
from django.db import models

from apps.core.models import BaseModel, EstadoQuerySet

HEX_COLOR_VALIDATOR = RegexValidator(
    regex=r'^#[0-9A-Fa-f]{6}$',
    message='El código debe ser un color hexadecimal válido (ej: #FF5733).',
)


class Color(BaseModel):
    """Named color with a unique hex code."""

    color = models.CharField(
        max_length=50,
        unique=True,
        error_messages={'unique': 'Ya existe un color con este nombre.'},
        help_text="Color name (e.g., 'Rojo')"
    )
    codigo = models.CharField(
        max_length=7,
        unique=True,
        validators=[HEX_COLOR_VALIDATOR],
        error_messages={'unique': 'Ya existe un color con este código.'},
        help_text="Hex code (e.g., '#FF0000')"
    )
    estado = models.BooleanField(default=True, db_index=True)

    objects = EstadoQuerySet.as_manager()

    class Meta:
        db_table = 'colores'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.color} ({self.codigo})"

    def is_in_use(self):
        return self.departamentos.exists() or self.estructuras.exists()


class Department(BaseModel):
    """Department, optionally identified by a Color."""

    nombre = models.CharField(
        max_length=100,
        unique=True,
        error_messages={'unique': 'Ya existe un departamento con este nombre.'},
    )
    color = models.ForeignKey(
        Color,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='departamentos',
    )
    estado = models.BooleanField(default=True, db_index=True)

    objects = EstadoQuerySet.as_manager()

    class Meta:
        db_table = 'departamentos'
        ordering = ['-created_at']

    def __str__(self):
        return self.nombre

    def has_dependents(self):
        return self.estructuras.exists() or self.estructuras_con_acceso.exists()


class OrganizationalStructure(BaseModel):
    """
    Position slot ("cargo") inside a department.

    ``departamentos_acceso`` lists the departments the holder may enter; the
    colors of those departments make up the holder's badge.
    """

    cargo = models.CharField(max_length=150)
    departamento = models.ForeignKey(
        Department,
        on_delete=models.PROTECT,
        related_name='estructuras',
    )
    estado = models.BooleanField(default=True, db_index=True)
    colores = models.ManyToManyField(
        Color,
        related_name='estructuras',
        blank=True,
        db_table='estructura_organizacional_color',
    )
    departamentos_acceso = models.ManyToManyField(
        Department,
        related_name='estructuras_con_acceso',
        blank=True,
        db_table='estructura_organizacional_departamento',
    )

    objects = EstadoQuerySet.as_manager()

    class Meta:
        db_table = 'estructuras_organizacionales'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.cargo} - {self.departamento.nombre}"

    def badge_colors(self):
        """Distinct colors of the departments this structure has access to."""
        return Color.objects.filter(
            departamentos__estructuras_con_acceso=self
        ).distinct().order_by('color')
