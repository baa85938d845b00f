"""Django admin configuration for drive app."""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest
from django.utils.html import format_html

from server.apps.drive.models import File, Folder, Share, UserQuota

_KB = 1024
_MB = _KB * 1024
_GB = _MB * 1024


def _format_bytes(size_bytes: int) -> str:
    """Format bytes in human-readable format.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Formatted size string (e.g., '1.5 MB', '234 KB').
    """
    if size_bytes < _KB:
        return f'{size_bytes} B'
    if size_bytes < _MB:
        return f'{size_bytes / _KB:.1f} KB'
    if size_bytes < _GB:
        return f'{size_bytes / _MB:.1f} MB'
    return f'{size_bytes / _GB:.1f} GB'


@admin.register(Folder)
class FolderAdmin(admin.ModelAdmin):
    """Admin interface for Folder model."""

    list_display = [
        'name',
        'user',
        'parent',
        'starred',
        'in_trash',
        'modified_at',
    ]

    list_filter = [
        'starred',
        'in_trash',
        'user',
    ]

    search_fields = [
        'name',
        'user__username',
    ]

    raw_id_fields = ['parent']

    readonly_fields = [
        'deleted_at',
        'created_at',
        'modified_at',
    ]

    def get_queryset(self, request: HttpRequest) -> QuerySet[Folder]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('user', 'parent')


@admin.register(File)
class FileAdmin(admin.ModelAdmin):
    """Admin interface for File model.

    Records are read-only here: changing size or deleting through the
    admin would bypass quota accounting.
    """

    list_display = [
        'name',
        'user',
        'folder',
        'size_display',
        'mime_type',
        'in_trash',
        'last_accessed_at',
    ]

    list_filter = [
        'mime_type',
        'starred',
        'in_trash',
        'user',
    ]

    search_fields = [
        'name',
        'file',  # Searches file.name field
    ]

    readonly_fields = [
        'user',
        'file',
        'size_bytes',
        'mime_type',
        'deleted_at',
        'last_accessed_at',
        'created_at',
        'modified_at',
    ]

    raw_id_fields = ['folder']

    fieldsets = (
        ('File Information', {
            'fields': ('name', 'user', 'folder', 'file'),
        }),
        ('Metadata', {
            'fields': ('size_bytes', 'mime_type'),
        }),
        ('State', {
            'fields': ('starred', 'is_shared', 'in_trash', 'deleted_at'),
        }),
        ('Timestamps', {
            'fields': ('last_accessed_at', 'created_at', 'modified_at'),
        }),
    )

    def size_display(self, obj: File) -> str:
        """Display file size in human-readable format.

        Args:
            obj: File instance.

        Returns:
            Formatted size string.
        """
        return _format_bytes(obj.size_bytes)
    size_display.short_description = 'Size'  # type: ignore[attr-defined]

    def has_delete_permission(
        self,
        request: HttpRequest,
        obj: File | None = None,
    ) -> bool:
        """Deletes must go through the API to keep quotas right."""
        return False

    def get_queryset(self, request: HttpRequest) -> QuerySet[File]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('user', 'folder')


@admin.register(Share)
class ShareAdmin(admin.ModelAdmin):
    """Admin interface for Share model."""

    list_display = [
        'token_display',
        'user',
        'file',
        'folder',
        'access_type',
        'expiry_date',
        'created_at',
    ]

    list_filter = [
        'access_type',
        'allow_download',
    ]

    search_fields = [
        'token',
        'user__username',
    ]

    readonly_fields = [
        'token',
        'created_at',
    ]

    raw_id_fields = ['file', 'folder']

    def token_display(self, obj: Share) -> str:
        """Display the first characters of the token.

        Args:
            obj: Share instance.

        Returns:
            Shortened token.
        """
        return f'{obj.token[:8]}…'
    token_display.short_description = 'Token'  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[Share]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related(
            'user',
            'file',
            'folder',
        )


@admin.register(UserQuota)
class UserQuotaAdmin(admin.ModelAdmin):
    """Admin interface for UserQuota model."""

    list_display = [
        'user',
        'quota_display',
        'used_display',
        'percentage_display',
        'status_display',
    ]

    search_fields = [
        'user__username',
        'user__email',
    ]

    readonly_fields = [
        'user',
        'used_bytes',
    ]

    fieldsets = (
        ('User', {
            'fields': ('user',),
        }),
        ('Quota Settings', {
            'fields': ('quota_bytes',),
        }),
        ('Current Usage', {
            'fields': ('used_bytes',),
        }),
    )

    def quota_display(self, obj: UserQuota) -> str:
        """Display quota in human-readable format."""
        return _format_bytes(obj.quota_bytes)
    quota_display.short_description = 'Quota'  # type: ignore[attr-defined]

    def used_display(self, obj: UserQuota) -> str:
        """Display used bytes in human-readable format."""
        return _format_bytes(obj.used_bytes)
    used_display.short_description = 'Used'  # type: ignore[attr-defined]

    def percentage_display(self, obj: UserQuota) -> str:
        """Display percentage of quota used."""
        return f'{obj.used_percentage():.1f}%'
    percentage_display.short_description = '%'  # type: ignore[attr-defined]

    def status_display(self, obj: UserQuota) -> str:
        """Display status indicator based on usage.

        Args:
            obj: UserQuota instance.

        Returns:
            HTML formatted status indicator.
        """
        percentage = obj.used_percentage()

        if percentage >= 100:
            color = '#dc3545'  # Red - over quota
            status = 'Over Quota'
        elif percentage >= 90:
            color = '#ffc107'  # Yellow - warning
            status = 'Warning'
        else:
            color = '#28a745'  # Green - ok
            status = 'OK'

        return format_html(
            '<span style="color: {color}; font-weight: bold;">'
            '{status}</span>',
            color=color,
            status=status,
        )
    status_display.short_description = 'Status'  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[UserQuota]:
        """Optimize queryset with select_related."""
        return super().get_queryset(request).select_related('user')
