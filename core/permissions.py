# core/permissions.py

from rest_framework.permissions import BasePermission
from rest_framework import permissions
from .constants import UserRoles


class IsAuthenticatedAndActive(BasePermission):
    def has_permission(self, request, view):
        return bool(
            request.user
            and request.user.is_authenticated
            and request.user.is_active
        )


class IsAdmin(IsAuthenticatedAndActive):
    def has_permission(self, request, view):
        return super().has_permission(request, view) and request.user.role == UserRoles.ADMIN


class IsCashierOrAdmin(IsAuthenticatedAndActive):
    def has_permission(self, request, view):
        return super().has_permission(request, view) and request.user.role in [
            UserRoles.CASHIER,
            UserRoles.ADMIN,
        ]


class IsStaff(IsAuthenticatedAndActive):
    def has_permission(self, request, view):
        return super().has_permission(request, view) and request.user.role in [
            UserRoles.ADMIN,
            UserRoles.SALES,
            UserRoles.CASHIER,
        ]


class ReadOnlyOrCashierOrAdmin(permissions.BasePermission):
    """Staff may read; only cashiers and admins may write"""
    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return IsStaff().has_permission(request, view)
        return IsCashierOrAdmin().has_permission(request, view)
