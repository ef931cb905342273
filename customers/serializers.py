from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import Customer

User = get_user_model()


class AssignedUserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'first_name', 'last_name', 'email']


class CustomerSerializer(serializers.ModelSerializer):
    type = serializers.ChoiceField(choices=Customer.TYPE_CHOICES, source='customer_type')
    full_address = serializers.CharField(read_only=True)
    assigned_to = AssignedUserSerializer(read_only=True)

    class Meta:
        model = Customer
        fields = [
            'id', 'company_name', 'contact_name', 'email', 'phone',
            'street', 'city', 'state', 'zip_code', 'country', 'full_address',
            'status', 'type', 'notes',
            'last_order', 'total_orders', 'total_spent',
            'assigned_to', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'assigned_to', 'created_at', 'updated_at']

    def validate_email(self, value):
        value = value.strip().lower()
        queryset = Customer.objects.filter(email=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError("A customer with this email address already exists.")
        return value

    def validate(self, attrs):
        for field in ('company_name', 'contact_name', 'phone'):
            if field in attrs and not str(attrs[field]).strip():
                raise serializers.ValidationError({field: "This field may not be blank."})
        return attrs


class CustomerStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Customer.STATUS_CHOICES)
