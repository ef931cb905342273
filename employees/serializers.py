from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import Employee, EmployeeDocument

User = get_user_model()


class EmployeeDocumentSerializer(serializers.ModelSerializer):
    """Serializer for employee documents"""

    type = serializers.CharField(source='document_type', max_length=100)

    class Meta:
        model = EmployeeDocument
        fields = ['id', 'type', 'name', 'url', 'upload_date']
        read_only_fields = ['id', 'upload_date']

    def validate_name(self, value):
        if not value.strip():
            raise serializers.ValidationError("This field may not be blank.")
        return value.strip()


class EmployeeListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for employee listings"""

    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = Employee
        fields = [
            'id', 'first_name', 'last_name', 'full_name', 'email',
            'department', 'position', 'status', 'hire_date',
        ]


class EmployeeDetailSerializer(serializers.ModelSerializer):
    """Full employee record, used for retrieve, create and update"""

    full_name = serializers.CharField(read_only=True)
    documents = EmployeeDocumentSerializer(many=True, read_only=True)
    user = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(),
        required=False,
        allow_null=True,
    )

    class Meta:
        model = Employee
        fields = [
            'id', 'user', 'first_name', 'last_name', 'full_name', 'email',
            'department', 'position', 'salary', 'hire_date', 'status',
            'phone', 'address',
            'emergency_contact_name', 'emergency_contact_relationship', 'emergency_contact_phone',
            'documents', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_email(self, value):
        value = value.strip().lower()
        queryset = Employee.objects.filter(email=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError("An employee with this email address already exists.")
        return value

    def validate_user(self, value):
        if value is None:
            return value
        queryset = Employee.objects.filter(user=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError("This user is already linked to another employee.")
        return value

    def validate(self, attrs):
        for field in ('first_name', 'last_name', 'department', 'position'):
            if field in attrs and not str(attrs[field]).strip():
                raise serializers.ValidationError({field: "This field may not be blank."})
        return attrs
