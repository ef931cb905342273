import logging

from rest_framework import permissions, status
from rest_framework.views import APIView

from accounts.utils import api_response
from employees.directory import DjangoEmployeeDirectory

from .policy import Caller
from .repositories import DjangoPayrollRepository
from .serializers import (
    PayrollCreateSerializer,
    PayrollPeriodFilterSerializer,
    PayrollRecordSerializer,
    PayrollStatusSerializer,
    PayrollSummarySerializer,
    PayrollUpdateSerializer,
)
from .services import (
    PayrollStore,
    create_payroll,
    get_payroll,
    get_payrolls_for_employee,
    get_summary,
    list_payrolls,
    update_payroll,
    update_payroll_status,
)

logger = logging.getLogger(__name__)


class PayrollStoreMixin:
    """Builds the Django backed store and the caller identity for a request."""

    def get_store(self):
        return PayrollStore(DjangoPayrollRepository(), DjangoEmployeeDirectory())

    def get_caller(self):
        return Caller.from_user(self.request.user)

    def get_period_filter(self):
        serializer = PayrollPeriodFilterSerializer(data=self.request.query_params)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data


class PayrollListCreateView(PayrollStoreMixin, APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        records = list_payrolls(self.get_store(), self.get_caller(), **self.get_period_filter())
        data = PayrollRecordSerializer(records, many=True).data
        return api_response(
            success=True,
            message='Payroll entries retrieved.',
            data={'results': data, 'count': len(data)},
        )

    def post(self, request):
        serializer = PayrollCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = create_payroll(self.get_store(), self.get_caller(), **serializer.to_store_kwargs())
        return api_response(
            success=True,
            message='Payroll entry created.',
            data=PayrollRecordSerializer(record).data,
            status=status.HTTP_201_CREATED,
        )


class PayrollDetailView(PayrollStoreMixin, APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, payroll_id):
        record = get_payroll(self.get_store(), self.get_caller(), payroll_id)
        return api_response(
            success=True,
            message='Payroll entry retrieved.',
            data=PayrollRecordSerializer(record).data,
        )

    def put(self, request, payroll_id):
        return self._update(request, payroll_id)

    def patch(self, request, payroll_id):
        return self._update(request, payroll_id)

    def _update(self, request, payroll_id):
        serializer = PayrollUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = update_payroll(
            self.get_store(), self.get_caller(), payroll_id, dict(serializer.validated_data)
        )
        return api_response(
            success=True,
            message='Payroll entry updated.',
            data=PayrollRecordSerializer(record).data,
        )


class PayrollStatusView(PayrollStoreMixin, APIView):
    permission_classes = [permissions.IsAuthenticated]

    def patch(self, request, payroll_id):
        serializer = PayrollStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = update_payroll_status(
            self.get_store(), self.get_caller(), payroll_id, **serializer.validated_data
        )
        return api_response(
            success=True,
            message=f'Payroll status updated to {record.status}.',
            data=PayrollRecordSerializer(record).data,
        )


class PayrollEmployeeListView(PayrollStoreMixin, APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, employee_id):
        records = get_payrolls_for_employee(self.get_store(), self.get_caller(), employee_id)
        data = PayrollRecordSerializer(records, many=True).data
        return api_response(
            success=True,
            message='Payroll entries retrieved.',
            data={'results': data, 'count': len(data)},
        )


class PayrollSummaryView(PayrollStoreMixin, APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        summary = get_summary(self.get_store(), self.get_caller(), **self.get_period_filter())
        return api_response(
            success=True,
            message='Payroll summary generated.',
            data=PayrollSummarySerializer(summary).data,
        )
