"""Database models for users app."""

from typing import Final, final, override

from django.contrib.auth.models import AbstractUser
from django.db import models

_NAME_MAX_LENGTH: Final = 150
_AVATAR_MAX_LENGTH: Final = 500


@final
class User(AbstractUser):
    """Account owning folders, files and shares.

    ``name`` and ``avatar`` are the public profile shown to people
    opening one of the user's share links.
    """

    name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
        blank=True,
        default='',
        help_text='Display name shown on shared items',
    )

    avatar = models.URLField(
        max_length=_AVATAR_MAX_LENGTH,
        blank=True,
        default='',
        help_text='Avatar image URL',
    )

    @override
    def __str__(self) -> str:
        """String representation."""
        return self.username

    @property
    def display_name(self) -> str:
        """Public name, falling back to the username."""
        return self.name or self.username
