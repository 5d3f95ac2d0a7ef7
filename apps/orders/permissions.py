# apps/orders/permissions.py

from rest_framework import permissions


class IsOrderOwnerOrAdmin(permissions.BasePermission):
    """
    Permission that allows access to order owners or admin users.
    """

    def has_permission(self, request, view):
        """Check if user is authenticated."""
        return bool(request.user and request.user.is_authenticated)

    def has_object_permission(self, request, view, obj):
        """Check if user owns the order or is admin."""
        # Admin users have full access
        if request.user.is_staff:
            return True

        # Users can access their own orders
        return obj.user_id == request.user.id


class IsAdminUser(permissions.BasePermission):
    """
    Permission that only allows access to admin users.
    """

    message = "Admin permission required"

    def has_permission(self, request, view):
        """Check if user is admin."""
        return bool(
            request.user and request.user.is_authenticated and request.user.is_staff
        )

    def has_object_permission(self, request, view, obj):
        """Admin users have access to all objects."""
        return request.user.is_staff
