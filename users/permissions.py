from rest_framework import permissions


class IsTeacher(permissions.BasePermission):
    """Exam authors. Staff accounts are let through as well."""
    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return request.user.is_staff or getattr(request.user, 'role', '') == 'teacher'


class IsStudent(permissions.BasePermission):
    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return getattr(request.user, 'role', '') == 'student'
