"""Folder listings and derived views (recent, starred, shared, trash).

Every function returns a lazy QuerySet scoped to one user. Folder
querysets are annotated with ``file_count`` and ``total_size`` over the
folder's direct child files (trashed ones included).
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any, Final

from django.conf import settings
from django.db.models import BigIntegerField, Count, Q, QuerySet, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from server.apps.drive.models import File, Folder, Share

# User type for Django's dynamic user model
_User = Any

_DEFAULT_RECENT_DAYS: Final = 30

logger = logging.getLogger(__name__)


def with_stats(folders: QuerySet[Folder]) -> QuerySet[Folder]:
    """Annotate folders with direct-child file count and total size.

    Args:
        folders: Folder queryset to annotate.

    Returns:
        QuerySet with ``file_count`` and ``total_size`` attributes.
    """
    return folders.annotate(
        file_count=Count('files'),
        total_size=Coalesce(
            Sum('files__size_bytes'),
            Value(0),
            output_field=BigIntegerField(),
        ),
    )


def list_folders(
    user: _User,
    parent_id: int | None = None,
) -> QuerySet[Folder]:
    """List non-trashed folders directly inside a folder.

    Args:
        user: Owner of folders.
        parent_id: Parent folder ID, None for the drive root.

    Returns:
        QuerySet of folders with stats.
    """
    logger.debug('Listing folders for user %s in %s', user.username, parent_id)
    return with_stats(
        Folder.objects.filter(user=user, parent_id=parent_id, in_trash=False),
    )


def list_files(user: _User, folder_id: int | None = None) -> QuerySet[File]:
    """List non-trashed files directly inside a folder.

    Args:
        user: Owner of files.
        folder_id: Folder ID, None for the drive root.

    Returns:
        QuerySet of files.
    """
    logger.debug('Listing files for user %s in %s', user.username, folder_id)
    return File.objects.filter(user=user, folder_id=folder_id, in_trash=False)


def recent_files(user: _User, now: datetime | None = None) -> QuerySet[File]:
    """List files accessed recently, most recent first.

    Args:
        user: Owner of files.
        now: Reference time, defaults to the current time.

    Returns:
        Non-trashed files accessed within the recent window.
    """
    window = getattr(settings, 'DRIVE_RECENT_DAYS', _DEFAULT_RECENT_DAYS)
    cutoff = (now or timezone.now()) - timedelta(days=window)
    return File.objects.filter(
        user=user,
        in_trash=False,
        last_accessed_at__gte=cutoff,
    ).order_by('-last_accessed_at', '-id')


def starred_files(user: _User) -> QuerySet[File]:
    """List starred files outside the trash.

    Args:
        user: Owner of files.

    Returns:
        QuerySet of starred files.
    """
    return File.objects.filter(user=user, starred=True, in_trash=False)


def shared_files(user: _User) -> QuerySet[File]:
    """List files the user shared, by link or by flag.

    Args:
        user: Owner of files.

    Returns:
        Non-trashed files with a share or with ``is_shared`` set.
    """
    shared_ids = Share.objects.filter(
        user=user,
        file__isnull=False,
    ).values('file_id')
    return File.objects.filter(
        user=user,
        in_trash=False,
    ).filter(
        Q(is_shared=True) | Q(id__in=shared_ids),
    )


def trashed_files(user: _User) -> QuerySet[File]:
    """List files in the trash, most recently trashed first.

    Args:
        user: Owner of files.

    Returns:
        QuerySet of trashed files.
    """
    return File.objects.filter(
        user=user,
        in_trash=True,
    ).order_by('-deleted_at', '-id')


def starred_folders(user: _User) -> QuerySet[Folder]:
    """List starred folders outside the trash.

    Args:
        user: Owner of folders.

    Returns:
        QuerySet of starred folders with stats.
    """
    return with_stats(
        Folder.objects.filter(user=user, starred=True, in_trash=False),
    )


def shared_folders(user: _User) -> QuerySet[Folder]:
    """List folders the user shared, by link or by flag.

    Args:
        user: Owner of folders.

    Returns:
        Non-trashed folders with a share or with ``is_shared`` set.
    """
    shared_ids = Share.objects.filter(
        user=user,
        folder__isnull=False,
    ).values('folder_id')
    return with_stats(
        Folder.objects.filter(
            user=user,
            in_trash=False,
        ).filter(
            Q(is_shared=True) | Q(id__in=shared_ids),
        ),
    )


def trashed_folders(user: _User) -> QuerySet[Folder]:
    """List folders in the trash, most recently trashed first.

    Args:
        user: Owner of folders.

    Returns:
        QuerySet of trashed folders with stats.
    """
    return with_stats(
        Folder.objects.filter(user=user, in_trash=True),
    ).order_by('-deleted_at', '-id')


FILE_VIEWS: Final[dict[str, Callable[[_User], QuerySet[File]]]] = {
    'recent': recent_files,
    'starred': starred_files,
    'shared': shared_files,
    'trash': trashed_files,
}

FOLDER_VIEWS: Final[dict[str, Callable[[_User], QuerySet[Folder]]]] = {
    'starred': starred_folders,
    'shared': shared_folders,
    'trash': trashed_folders,
}


def file_view(user: _User, view_name: str) -> QuerySet[File]:
    """Resolve a named file view.

    Args:
        user: Owner of files.
        view_name: One of 'recent', 'starred', 'shared', 'trash'.

    Returns:
        The view's files, or an empty queryset for unknown names.
    """
    view = FILE_VIEWS.get(view_name)
    if view is None:
        return File.objects.none()
    return view(user)


def folder_view(user: _User, view_name: str) -> QuerySet[Folder]:
    """Resolve a named folder view.

    Args:
        user: Owner of folders.
        view_name: One of 'starred', 'shared', 'trash'.

    Returns:
        The view's folders, or an empty queryset for unknown names.
    """
    view = FOLDER_VIEWS.get(view_name)
    if view is None:
        return Folder.objects.none()
    return view(user)
