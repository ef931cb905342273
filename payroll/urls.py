from django.urls import path

from .views import (
    PayrollDetailView,
    PayrollEmployeeListView,
    PayrollListCreateView,
    PayrollStatusView,
    PayrollSummaryView,
)

app_name = 'payroll'

urlpatterns = [
    path('', PayrollListCreateView.as_view(), name='payroll-list'),
    path('summary/', PayrollSummaryView.as_view(), name='payroll-summary'),
    path('employee/<uuid:employee_id>/', PayrollEmployeeListView.as_view(), name='payroll-employee'),
    path('<uuid:payroll_id>/', PayrollDetailView.as_view(), name='payroll-detail'),
    path('<uuid:payroll_id>/status/', PayrollStatusView.as_view(), name='payroll-status'),
]
