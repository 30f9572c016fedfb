"""Role-based permissions."""

from rest_framework import permissions

from auth_app.models import UserProfile, get_profile


class IsTeacher(permissions.BasePermission):
    """Allow access only to users whose profile role is teacher."""

    message = "Only teachers can perform this action."

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return get_profile(user).role == UserProfile.Role.TEACHER
