"""Django admin configuration for users app."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from server.apps.users.models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin interface for User model with profile fields."""

    list_display = (
        'username',
        'name',
        'email',
        'is_staff',
        'date_joined',
    )

    fieldsets = (
        *BaseUserAdmin.fieldsets,
        ('Profile', {
            'fields': ('name', 'avatar'),
        }),
    )
