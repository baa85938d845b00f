"""Database models for drive app."""

from datetime import datetime
from typing import Final, final, override

from django.conf import settings
from django.db import models
from django.utils import timezone

# Constants for field max lengths
_NAME_MAX_LENGTH: Final = 255
_MIME_TYPE_MAX_LENGTH: Final = 255
_PATH_MAX_LENGTH: Final = 1024
_TOKEN_MAX_LENGTH: Final = 64
_ACCESS_TYPE_MAX_LENGTH: Final = 16


@final
class Folder(models.Model):
    """Folder in a user's drive.

    Folders form a tree per user. ``parent`` is null for folders at the
    root of the drive and always points to a folder of the same owner.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='folders',
        db_index=True,
    )

    name = models.CharField(max_length=_NAME_MAX_LENGTH)

    parent = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        related_name='subfolders',
        null=True,
        blank=True,
    )

    # Trash state
    in_trash = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)

    starred = models.BooleanField(default=False)
    is_shared = models.BooleanField(default=False)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    modified_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Folder'  # type: ignore[mutable-override]
        verbose_name_plural = 'Folders'  # type: ignore[mutable-override]
        ordering = ['name', 'id']

        indexes = [
            # Optimize directory listing queries
            models.Index(
                fields=['user', 'parent'],
                name='folders_user_parent_idx',
            ),
            # Optimize starred and trash views
            models.Index(
                fields=['user', 'starred'],
                name='folders_user_starred_idx',
            ),
            models.Index(
                fields=['user', 'in_trash'],
                name='folders_user_trash_idx',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user.username}:{self.name}'


@final
class File(models.Model):
    """File uploaded to a user's drive.

    The blob lives in the configured storage backend under
    ``{user_id}/{unique_name}``; ``name`` is the user-facing filename and
    ``folder`` the containing folder (null for the drive root).
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='files',
        db_index=True,
    )

    name = models.CharField(max_length=_NAME_MAX_LENGTH)

    folder = models.ForeignKey(
        Folder,
        on_delete=models.CASCADE,
        related_name='files',
        null=True,
        blank=True,
    )

    # Blob in storage, upload_to='' means we control the full path
    file = models.FileField(
        upload_to='',
        max_length=_PATH_MAX_LENGTH,
        help_text='Path in storage: {user_id}/{unique_name}.ext',
    )

    size_bytes = models.BigIntegerField(
        help_text='File size in bytes',
    )

    mime_type = models.CharField(
        max_length=_MIME_TYPE_MAX_LENGTH,
        help_text='MIME type declared on upload or guessed from the name',
    )

    starred = models.BooleanField(default=False)
    is_shared = models.BooleanField(default=False)

    # Trash state
    in_trash = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(null=True, blank=True)

    # Timestamps
    last_accessed_at = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)
    modified_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'File'  # type: ignore[mutable-override]
        verbose_name_plural = 'Files'  # type: ignore[mutable-override]
        ordering = ['name', 'id']

        indexes = [
            models.Index(
                fields=['user', 'folder'],
                name='files_user_folder_idx',
            ),
            # Optimize recent files queries
            models.Index(
                fields=['user', '-last_accessed_at'],
                name='files_user_recent_idx',
            ),
            models.Index(
                fields=['user', 'starred'],
                name='files_user_starred_idx',
            ),
            models.Index(
                fields=['user', 'in_trash'],
                name='files_user_trash_idx',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user.username}:{self.name}'


@final
class Share(models.Model):
    """Link granting access to one file or one folder.

    Exactly one of ``file`` and ``folder`` is set. Anyone holding the
    ``token`` can resolve the share; expiry is checked by the caller.
    """

    class AccessType(models.TextChoices):
        """Who may open the share link."""

        PUBLIC = 'public', 'Public'
        RESTRICTED = 'restricted', 'Restricted'

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='shares',
        db_index=True,
    )

    file = models.ForeignKey(
        File,
        on_delete=models.CASCADE,
        related_name='shares',
        null=True,
        blank=True,
    )

    folder = models.ForeignKey(
        Folder,
        on_delete=models.CASCADE,
        related_name='shares',
        null=True,
        blank=True,
    )

    access_type = models.CharField(
        max_length=_ACCESS_TYPE_MAX_LENGTH,
        choices=AccessType.choices,
        default=AccessType.PUBLIC,
    )

    allow_download = models.BooleanField(default=True)

    expiry_date = models.DateTimeField(
        null=True,
        blank=True,
        help_text='Null means the share never expires',
    )

    token = models.CharField(
        max_length=_TOKEN_MAX_LENGTH,
        unique=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Share'  # type: ignore[mutable-override]
        verbose_name_plural = 'Shares'  # type: ignore[mutable-override]
        ordering = ['-created_at', '-id']

        constraints = [
            # A share targets exactly one file or one folder
            models.CheckConstraint(
                condition=(
                    models.Q(file__isnull=False, folder__isnull=True) |
                    models.Q(file__isnull=True, folder__isnull=False)
                ),
                name='shares_single_target',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        target = self.file or self.folder
        return f'{self.user.username}:{target} ({self.token[:8]})'

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the share's expiry date has passed.

        Args:
            now: Reference time, defaults to the current time.

        Returns:
            True if the share has an expiry date in the past.
        """
        if self.expiry_date is None:
            return False
        return self.expiry_date < (now or timezone.now())


# Default storage limit: 15 GB in bytes
_DEFAULT_QUOTA_BYTES: Final = 15 * 1024 * 1024 * 1024


def _default_quota_bytes() -> int:
    return getattr(
        settings,
        'DRIVE_STORAGE_LIMIT_BYTES',
        _DEFAULT_QUOTA_BYTES,
    )


@final
class UserQuota(models.Model):
    """Storage limit and current usage for a user.

    Usage includes trashed files: only a permanent delete frees space.
    When over quota, users can still read and delete files, but uploads
    are refused until usage falls below the limit.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='quota',
        primary_key=True,
    )

    quota_bytes = models.BigIntegerField(
        default=_default_quota_bytes,
        help_text='Storage limit in bytes',
    )

    used_bytes = models.BigIntegerField(
        default=0,
        help_text='Currently used storage in bytes',
    )

    class Meta:
        """Model metadata."""

        verbose_name = 'User Quota'  # type: ignore[mutable-override]
        verbose_name_plural = 'User Quotas'  # type: ignore[mutable-override]

        constraints = [
            models.CheckConstraint(
                condition=models.Q(quota_bytes__gte=0),
                name='quota_bytes_non_negative',
            ),
            models.CheckConstraint(
                condition=models.Q(used_bytes__gte=0),
                name='used_bytes_non_negative',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user.username}: {self.used_bytes}/{self.quota_bytes}'

    def has_space_for(self, size_bytes: int) -> bool:
        """Check if there's enough space for the given size.

        Args:
            size_bytes: Size to check in bytes.

        Returns:
            True if there's enough space, False otherwise.
        """
        return self.used_bytes + size_bytes <= self.quota_bytes

    def available_bytes(self) -> int:
        """Get available storage space.

        Returns:
            Available bytes (never negative).
        """
        available = self.quota_bytes - self.used_bytes
        return max(0, available)

    def used_percentage(self) -> float:
        """Get the share of the limit in use.

        Returns:
            Percentage of quota used (0 when the limit is 0).
        """
        if self.quota_bytes == 0:
            return 0.0
        return (self.used_bytes / self.quota_bytes) * 100
