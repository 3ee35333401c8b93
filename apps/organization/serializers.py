"""
Organization serializers.

Foreign keys travel as ``<name>_id`` fields; nested read-only
representations are added when the caller asks for relations.
"""
from rest_framework import serializers

from apps.organization.models import Color, Department, OrganizationalStructure


class ColorSerializer(serializers.ModelSerializer):
    """Serializer for Color model."""

    class Meta:
        model = Color
        fields = ['id', 'color', 'codigo', 'estado', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']


class ColorSummarySerializer(serializers.ModelSerializer):

    class Meta:
        model = Color
        fields = ['id', 'color', 'codigo']
        read_only_fields = fields


class DepartmentSummarySerializer(serializers.ModelSerializer):
    color = ColorSummarySerializer(read_only=True)

    class Meta:
        model = Department
        fields = ['id', 'nombre', 'color', 'estado']
        read_only_fields = fields


class DepartmentSerializer(serializers.ModelSerializer):
    """Serializer for Department model."""

    color_id = serializers.PrimaryKeyRelatedField(
        source='color',
        queryset=Color.objects.all(),
        allow_null=True,
        required=False,
    )
    color = ColorSummarySerializer(read_only=True)

    class Meta:
        model = Department
        fields = ['id', 'nombre', 'color_id', 'color', 'estado', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']


class StructureSummarySerializer(serializers.ModelSerializer):

    class Meta:
        model = OrganizationalStructure
        fields = ['id', 'cargo', 'estado']
        read_only_fields = fields


class DepartmentWithStructuresSerializer(DepartmentSerializer):
    """Department with its organizational structures (``with_estructuras=true``)."""

    estructuras = StructureSummarySerializer(many=True, read_only=True)

    class Meta(DepartmentSerializer.Meta):
        fields = DepartmentSerializer.Meta.fields + ['estructuras']


class OrganizationalStructureSerializer(serializers.ModelSerializer):
    """
    Serializer for OrganizationalStructure.

    ``colores`` and ``departamentos_acceso`` take id lists; when present
    they replace the current associations.
    """

    departamento_id = serializers.PrimaryKeyRelatedField(
        source='departamento',
        queryset=Department.objects.all(),
    )
    colores = serializers.PrimaryKeyRelatedField(
        queryset=Color.objects.all(), many=True, required=False,
    )
    departamentos_acceso = serializers.PrimaryKeyRelatedField(
        queryset=Department.objects.all(), many=True, required=False,
    )

    class Meta:
        model = OrganizationalStructure
        fields = [
            'id', 'cargo', 'departamento_id', 'estado',
            'colores', 'departamentos_acceso', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']


class OrganizationalStructureDetailSerializer(serializers.ModelSerializer):
    """Structure with nested department, colors and access departments."""

    departamento_id = serializers.UUIDField(read_only=True)
    departamento = DepartmentSummarySerializer(read_only=True)
    colores = ColorSummarySerializer(many=True, read_only=True)
    departamentos_acceso = DepartmentSummarySerializer(many=True, read_only=True)
    colores_carnet = serializers.SerializerMethodField()

    class Meta:
        model = OrganizationalStructure
        fields = [
            'id', 'cargo', 'departamento_id', 'departamento', 'estado',
            'colores', 'departamentos_acceso', 'colores_carnet',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_colores_carnet(self, obj):
        return ColorSummarySerializer(obj.badge_colors(), many=True).data


class ColorIdsSerializer(serializers.Serializer):
    """Payload for replacing a structure's colors."""

    colores = serializers.PrimaryKeyRelatedField(
        queryset=Color.objects.all(), many=True, allow_empty=True,
    )


class AccessDepartmentIdsSerializer(serializers.Serializer):
    """Payload for replacing a structure's access departments."""

    departamentos_acceso = serializers.PrimaryKeyRelatedField(
        queryset=Department.objects.all(), many=True, allow_empty=True,
    )
