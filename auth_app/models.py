"""Models for user accounts."""

from django.contrib.auth.models import User
from django.db import models


class UserProfile(models.Model):
    """Role and display data attached to an authenticated user."""

    class Role(models.TextChoices):
        TEACHER = "teacher", "Teacher"
        STUDENT = "student", "Student"

    user = models.OneToOneField(User, related_name="profile", on_delete=models.CASCADE)
    role = models.CharField(max_length=16, choices=Role.choices, default=Role.STUDENT)
    display_name = models.CharField(max_length=150, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    last_login_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = "User profile"
        verbose_name_plural = "User profiles"

    def __str__(self):
        return f"{self.display_name or self.user.username} ({self.role})"

    @property
    def is_teacher(self):
        return self.role == self.Role.TEACHER


def get_profile(user) -> UserProfile:
    """Return the profile of a user, creating a student profile if missing."""
    profile, _ = UserProfile.objects.get_or_create(
        user=user,
        defaults={"display_name": user.get_full_name() or user.username},
    )
    return profile
