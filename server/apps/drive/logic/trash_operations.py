"""Business logic for trash (soft delete) operations."""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from django.db.models import QuerySet

from server.apps.drive.logic.file_operations import delete_file, update_file
from server.apps.drive.logic.folder_operations import (
    delete_folder,
    update_folder,
)
from server.apps.drive.models import File, Folder

# User type for Django's dynamic user model
_User = Any

logger = logging.getLogger(__name__)


def soft_delete_file(file_id: int) -> File:
    """Move file to trash (soft delete).

    Quota is NOT decremented - trashed files count toward quota.

    Args:
        file_id: ID of file to trash.

    Returns:
        Updated File instance.

    Raises:
        File.DoesNotExist: If file not found.
    """
    file_instance = update_file(file_id, in_trash=True)
    logger.info('File moved to trash: ID=%d', file_id)
    return file_instance


def restore_file(file_id: int) -> File:
    """Restore file from trash to where it was.

    Args:
        file_id: ID of file to restore.

    Returns:
        Updated File instance.

    Raises:
        File.DoesNotExist: If file not found.
    """
    file_instance = update_file(file_id, in_trash=False)
    logger.info('File restored from trash: ID=%d', file_id)
    return file_instance


def soft_delete_folder(folder_id: int) -> Folder:
    """Move folder to trash (soft delete).

    Only the folder itself is flagged; its contents keep their state
    and are hidden because the folder is.

    Args:
        folder_id: ID of folder to trash.

    Returns:
        Updated Folder instance.

    Raises:
        Folder.DoesNotExist: If folder not found.
    """
    folder = update_folder(folder_id, in_trash=True)
    logger.info('Folder moved to trash: ID=%d', folder_id)
    return folder


def restore_folder(folder_id: int) -> Folder:
    """Restore folder from trash.

    Args:
        folder_id: ID of folder to restore.

    Returns:
        Updated Folder instance.

    Raises:
        Folder.DoesNotExist: If folder not found.
    """
    folder = update_folder(folder_id, in_trash=False)
    logger.info('Folder restored from trash: ID=%d', folder_id)
    return folder


def empty_trash(user: _User) -> int:
    """Permanently delete everything in user's trash.

    Trashed folders go first with their contents, then the trashed
    files that were not inside one of them.

    Args:
        user: User whose trash to empty.

    Returns:
        Number of trashed items deleted.
    """
    folder_ids = list(
        Folder.objects.filter(
            user=user,
            in_trash=True,
        ).values_list('id', flat=True),
    )
    count = sum(1 for folder_id in folder_ids if delete_folder(folder_id))

    file_ids = list(
        File.objects.filter(
            user=user,
            in_trash=True,
        ).values_list('id', flat=True),
    )
    count += sum(1 for file_id in file_ids if delete_file(file_id))

    logger.info(
        'Trash emptied for user %s: %d items deleted',
        user.username,
        count,
    )
    return count


def list_expired_trash(
    cutoff: datetime,
) -> tuple[QuerySet[Folder], QuerySet[File]]:
    """List trashed items deleted at or before a cutoff, oldest first.

    Args:
        cutoff: Items trashed at or before this time are expired.

    Returns:
        Expired folders and expired files, across all users.
    """
    folders = Folder.objects.filter(
        in_trash=True,
        deleted_at__lte=cutoff,
    ).select_related('user').order_by('deleted_at', 'id')
    files = File.objects.filter(
        in_trash=True,
        deleted_at__lte=cutoff,
    ).select_related('user').order_by('deleted_at', 'id')
    return folders, files


def purge_trash(cutoff: datetime, batch_size: int) -> tuple[int, int]:
    """Permanently delete items trashed at or before a cutoff.

    Expired folders go first with their contents; expired files that
    were inside one of them are already gone and are not counted.
    A failing item is logged and skipped.

    Args:
        cutoff: Items trashed at or before this time are purged.
        batch_size: Max folders and max files to process.

    Returns:
        (purged, failed) item counts.
    """
    folders, files = list_expired_trash(cutoff)
    folder_ids = list(folders.values_list('id', flat=True)[:batch_size])
    purged, failed = _purge_each(delete_folder, folder_ids)

    file_ids = list(files.values_list('id', flat=True)[:batch_size])
    purged_files, failed_files = _purge_each(delete_file, file_ids)

    logger.info(
        'Purged trash before %s: %d items, %d failed',
        cutoff,
        purged + purged_files,
        failed + failed_files,
    )
    return purged + purged_files, failed + failed_files


def _purge_each(
    delete: Callable[[int], bool],
    item_ids: list[int],
) -> tuple[int, int]:
    purged = 0
    failed = 0
    for item_id in item_ids:
        try:
            deleted = delete(item_id)
        except Exception:
            logger.exception('Failed to purge item from trash: %d', item_id)
            failed += 1
            continue
        purged += int(deleted)
    return purged, failed
