"""Views for customer management"""
import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from accounts.permissions import IsAdminOrManager, IsAuthenticated, IsOwnerOrAdminOrManager

from .models import Customer
from .serializers import CustomerSerializer, CustomerStatusSerializer

logger = logging.getLogger(__name__)


class CustomerViewSet(viewsets.ModelViewSet):
    """ViewSet for managing customers"""

    queryset = Customer.objects.select_related('assigned_to')
    serializer_class = CustomerSerializer
    owner_field = 'assigned_to'

    def get_permissions(self):
        if self.action in ('update', 'partial_update', 'update_status'):
            permission_classes = [IsAuthenticated, IsOwnerOrAdminOrManager]
        elif self.action == 'destroy':
            permission_classes = [IsAuthenticated, IsAdminOrManager]
        else:
            permission_classes = [IsAuthenticated]
        return [permission() for permission in permission_classes]

    def get_queryset(self):
        queryset = Customer.objects.select_related('assigned_to')
        if self.action != 'list':
            return queryset

        status_filter = self.request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)

        customer_type = self.request.query_params.get('type')
        if customer_type:
            queryset = queryset.filter(customer_type=customer_type)

        return queryset

    def perform_create(self, serializer):
        customer = serializer.save(assigned_to=self.request.user)
        logger.info(f"Customer {customer.id} created by user {self.request.user.id}")

    def perform_destroy(self, instance):
        logger.info(f"Customer {instance.id} deleted by user {self.request.user.id}")
        instance.delete()

    @action(detail=True, methods=['patch'], url_path='status')
    def update_status(self, request, pk=None):
        customer = self.get_object()
        serializer = CustomerStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        customer.status = serializer.validated_data['status']
        customer.save(update_fields=['status', 'updated_at'])
        return Response(CustomerSerializer(customer).data, status=status.HTTP_200_OK)
