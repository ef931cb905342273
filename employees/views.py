"""Views for employee management"""
import logging

from django.db import IntegrityError
from django.db.models import Q
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from accounts.permissions import IsAdmin, IsAdminOrManager, IsAuthenticated
from accounts.utils import api_response

from .models import Employee
from .serializers import (
    EmployeeDetailSerializer, EmployeeDocumentSerializer, EmployeeListSerializer
)

logger = logging.getLogger(__name__)


class EmployeeViewSet(viewsets.ModelViewSet):
    """ViewSet for managing employees"""

    queryset = Employee.objects.all()

    def get_permissions(self):
        if self.action in ('list', 'retrieve'):
            permission_classes = [IsAuthenticated]
        elif self.action == 'destroy':
            permission_classes = [IsAuthenticated, IsAdmin]
        else:
            permission_classes = [IsAuthenticated, IsAdminOrManager]
        return [permission() for permission in permission_classes]

    def get_serializer_class(self):
        """Return appropriate serializer based on action"""
        if self.action == 'list':
            return EmployeeListSerializer
        if self.action == 'add_document':
            return EmployeeDocumentSerializer
        return EmployeeDetailSerializer

    def get_queryset(self):
        queryset = Employee.objects.all()

        if self.action != 'list':
            return queryset.prefetch_related('documents')

        # Filter by status if provided
        status_filter = self.request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)

        # Filter by department if provided
        department = self.request.query_params.get('department')
        if department:
            queryset = queryset.filter(department=department)

        # Search by name or email
        search = self.request.query_params.get('search')
        if search:
            queryset = queryset.filter(
                Q(first_name__icontains=search) |
                Q(last_name__icontains=search) |
                Q(email__icontains=search)
            )

        return queryset

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            employee = serializer.save()
        except IntegrityError as e:
            logger.warning(f"Employee create rejected by integrity constraint: {e}")
            return api_response(
                success=False,
                message='Duplicate Email',
                errors={'email': ['An employee with this email address already exists.']},
                status=status.HTTP_400_BAD_REQUEST,
            )

        logger.info(f"Employee {employee.id} created by user {request.user.id}")
        return Response(EmployeeDetailSerializer(employee).data, status=status.HTTP_201_CREATED)

    def perform_destroy(self, instance):
        logger.info(f"Employee {instance.id} deleted by user {self.request.user.id}")
        instance.delete()

    @action(detail=True, methods=['post'], url_path='documents')
    def add_document(self, request, pk=None):
        """Attach a document to the employee record"""
        employee = self.get_object()
        serializer = EmployeeDocumentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save(employee=employee)

        employee = Employee.objects.prefetch_related('documents').get(pk=employee.pk)
        return Response(EmployeeDetailSerializer(employee).data, status=status.HTTP_201_CREATED)
