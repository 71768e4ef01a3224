from rest_framework import permissions

from utils.rbac import is_admin, is_seller


class IsSellerUser(permissions.BasePermission):
    """
    Permission to check if user has seller role
    Allows sellers and admins to access seller-only endpoints
    """

    message = "Seller access required"

    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False

        return is_seller(request.user)


class IsAdminUser(permissions.BasePermission):
    """
    Permission to check if user has admin role
    Only allows admins to access admin-only endpoints
    """

    message = "Admin access required"

    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False

        return is_admin(request.user)


class IsAdminOrReadOnly(IsAdminUser):
    """Category management: anyone may read, only admins write."""

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        return super().has_permission(request, view)
