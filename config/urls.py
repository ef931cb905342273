"""Root URL configuration"""
from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path


def health(request):
    return JsonResponse({'status': 'ok'})


urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/health/', health, name='health'),
    path('api/', include('accounts.urls')),
    path('api/', include('employees.urls')),
    path('api/', include('customers.urls')),
    path('api/payroll/', include('payroll.urls')),
]
