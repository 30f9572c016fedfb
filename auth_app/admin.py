from django.contrib import admin
from .models import UserProfile


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    """Admin interface for UserProfile model."""

    list_display = ['id', 'user', 'display_name', 'role', 'created_at', 'last_login_at']
    list_filter = ['role', 'created_at']
    search_fields = ['display_name', 'user__username', 'user__email']
    readonly_fields = ['created_at', 'updated_at', 'last_login_at']
