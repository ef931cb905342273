"""Custom permissions for the application"""
from rest_framework import permissions


class IsAuthenticated(permissions.BasePermission):
    """
    Permission to only allow authenticated users.
    """

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)


class IsAdmin(permissions.BasePermission):
    """
    Permission to only allow admin users.
    """
    message = 'Only administrators can perform this action.'

    def has_permission(self, request, view):
        return bool(
            request.user and
            request.user.is_authenticated and
            request.user.is_admin
        )


class IsAdminOrManager(permissions.BasePermission):
    """
    Permission to only allow admins and managers.
    """
    message = 'Only administrators and managers can perform this action.'

    def has_permission(self, request, view):
        return bool(
            request.user and
            request.user.is_authenticated and
            request.user.is_admin_or_manager
        )


class IsOwnerOrAdminOrManager(permissions.BasePermission):
    """
    Permission to allow the owning user to edit their own data, or staff roles.
    """
    message = 'Not authorized to update this record.'
    owner_field = 'assigned_to'

    def has_object_permission(self, request, view, obj):
        if request.user.is_admin_or_manager:
            return True

        owner_field = getattr(view, 'owner_field', self.owner_field)
        owner_id = getattr(obj, f'{owner_field}_id', None)
        return owner_id is not None and owner_id == request.user.id
