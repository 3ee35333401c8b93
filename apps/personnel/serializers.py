"""
Personnel serializers.
"""
from rest_framework import serializers
from rest_framework.validators import UniqueValidator

from apps.organization.models import OrganizationalStructure
from apps.organization.serializers import StructureSummarySerializer
from apps.personnel.models import Farm, ContractType, CostCenter, Employee
from apps.rbac.models import User


class FarmSerializer(serializers.ModelSerializer):
    """Serializer for Farm model."""

    class Meta:
        model = Farm
        fields = ['id', 'nombre', 'estado', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']


class FarmSummarySerializer(serializers.ModelSerializer):

    class Meta:
        model = Farm
        fields = ['id', 'nombre']
        read_only_fields = fields


class ContractTypeSerializer(serializers.ModelSerializer):
    """Serializer for ContractType model."""

    class Meta:
        model = ContractType
        fields = ['id', 'tipo', 'estado', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']


class ContractTypeSummarySerializer(serializers.ModelSerializer):

    class Meta:
        model = ContractType
        fields = ['id', 'tipo']
        read_only_fields = fields


class CostCenterSerializer(serializers.ModelSerializer):
    """Serializer for CostCenter model; always nests its contract type."""

    tipo_contrato_id = serializers.PrimaryKeyRelatedField(
        source='tipo_contrato',
        queryset=ContractType.objects.all(),
    )
    tipo_contrato = ContractTypeSummarySerializer(read_only=True)

    class Meta:
        model = CostCenter
        fields = [
            'id', 'nombre', 'grupo', 'tipo_contrato_id', 'tipo_contrato',
            'estado', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']


class EmployeeUserSerializer(serializers.ModelSerializer):

    class Meta:
        model = User
        fields = ['id', 'name', 'email']
        read_only_fields = fields


# Date pairs where the second must not precede the first
DATE_RANGES = (
    ('fecha_ingreso_as2', 'fecha_salida_as2'),
    ('fecha_ingreso_rrhh', 'fecha_salida_rrhh'),
)


class EmployeeSerializer(serializers.ModelSerializer):
    """
    Serializer for Employee writes and flat reads.

    Relations are exchanged as ids: ``user_id``, ``tipo_contrato_id``,
    ``estructura_organizacional_id`` and the ``fincas`` id list, which
    replaces the current farms when sent.
    """

    user_id = serializers.PrimaryKeyRelatedField(
        source='user',
        queryset=User.objects.all(),
        allow_null=True,
        required=False,
        validators=[UniqueValidator(
            queryset=Employee.objects.all(),
            message='El usuario ya está asociado a otro empleado.',
        )],
    )
    tipo_contrato_id = serializers.PrimaryKeyRelatedField(
        source='tipo_contrato',
        queryset=ContractType.objects.all(),
    )
    estructura_organizacional_id = serializers.PrimaryKeyRelatedField(
        source='estructura_organizacional',
        queryset=OrganizationalStructure.objects.all(),
    )
    fincas = serializers.PrimaryKeyRelatedField(
        queryset=Farm.objects.all(), many=True, required=False,
    )
    nombre_completo = serializers.CharField(read_only=True)
    is_active = serializers.BooleanField(read_only=True)

    class Meta:
        model = Employee
        fields = [
            'id', 'idempleado_as2', 'estado_rrhh', 'estado_as2',
            'nombre_as2', 'apellido_as2', 'nombre_completo', 'is_active',
            'fecha_nacimiento_as2', 'contacto', 'discapacidad_as2',
            'porcentaje_discapacidad_as2', 'fecha_ingreso_as2', 'fecha_salida_as2',
            'estructura_costo_as2', 'fecha_ingreso_rrhh', 'fecha_salida_rrhh',
            'id_srv66', 'id_srv90', 'id_areas', 'tipo_user_biometrico', 'foto_perfil',
            'user_id', 'tipo_contrato_id', 'estructura_organizacional_id', 'fincas',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate(self, attrs):
        errors = {}
        for start_field, end_field in DATE_RANGES:
            start = attrs.get(start_field, getattr(self.instance, start_field, None))
            end = attrs.get(end_field, getattr(self.instance, end_field, None))
            if start and end and end < start:
                errors[end_field] = ['La fecha de salida no puede ser anterior a la fecha de ingreso.']
        if errors:
            raise serializers.ValidationError(errors)
        return attrs


class EmployeeDetailSerializer(EmployeeSerializer):
    """Employee with nested user, contract type, structure and farms."""

    user = EmployeeUserSerializer(read_only=True)
    tipo_contrato = ContractTypeSummarySerializer(read_only=True)
    estructura_organizacional = StructureSummarySerializer(read_only=True)
    fincas_detalle = FarmSummarySerializer(source='fincas', many=True, read_only=True)

    class Meta(EmployeeSerializer.Meta):
        fields = EmployeeSerializer.Meta.fields + [
            'user', 'tipo_contrato', 'estructura_organizacional', 'fincas_detalle'
        ]
        read_only_fields = fields
