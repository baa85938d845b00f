"""Business logic for file operations."""

import logging
from typing import TYPE_CHECKING, Any, Final

from django.core.exceptions import PermissionDenied, ValidationError
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import UploadedFile
from django.db import transaction
from django.utils import timezone

from server.apps.drive.infrastructure.metadata import (
    detect_mime_type,
    generate_storage_path,
    validate_storage_path,
)
from server.apps.drive.logic.quota_operations import (
    adjust_usage,
    check_quota,
    decrement_usage,
    increment_usage,
)
from server.apps.drive.logic.records import apply_changes
from server.apps.drive.models import File, Folder, Share

if TYPE_CHECKING:
    from server.apps.drive.infrastructure.storage import FileStorage

# User type for Django's dynamic user model
_User = Any

_UPDATABLE_FIELDS: Final = frozenset((
    'name',
    'folder',
    'size_bytes',
    'mime_type',
    'starred',
    'is_shared',
    'in_trash',
    'deleted_at',
    'last_accessed_at',
))

logger = logging.getLogger(__name__)


def _get_storage() -> 'FileStorage':
    """Get the configured default storage backend.

    Returns:
        FileStorage instance with proper S3 configuration.
    """
    return default_storage  # type: ignore[return-value]


def create_file(  # noqa: WPS211
    user: _User,
    name: str,
    mime_type: str,
    size_bytes: int,
    storage_path: str,
    folder: Folder | None = None,
) -> File:
    """Create a file record for a blob already in storage.

    The record and the usage increment are committed together.

    Args:
        user: Owner of the file.
        name: User-facing filename.
        mime_type: MIME type of the content.
        size_bytes: Size of the blob in bytes.
        storage_path: Path of the blob in storage.
        folder: Containing folder, None for the drive root.

    Returns:
        Created File instance.

    Raises:
        ValidationError: If storage path validation fails.
    """
    validate_storage_path(user.id, storage_path)

    with transaction.atomic():
        file_instance = File.objects.create(
            user=user,
            name=name,
            folder=folder,
            file=storage_path,
            size_bytes=size_bytes,
            mime_type=mime_type,
        )
        increment_usage(user, size_bytes)

    logger.info(
        'File record created: %s (ID: %d, size: %d)',
        name,
        file_instance.id,
        size_bytes,
    )
    return file_instance


def upload_file(
    user: _User,
    uploaded_file: UploadedFile,
    folder_id: int | None = None,
) -> File:
    """Store an uploaded file and create its record.

    Transaction safety: the blob is stored first, then the record is
    created. If the DB step fails, the blob is deleted again.

    Args:
        user: Owner of the file.
        uploaded_file: Uploaded content with name, size and type.
        folder_id: Target folder ID, None for the drive root.

    Returns:
        Created File instance.

    Raises:
        QuotaExceededError: If the upload doesn't fit the user's quota.
        ValidationError: If the folder is missing or not the user's.
    """
    size_bytes = uploaded_file.size or 0
    check_quota(user, size_bytes)

    folder = _resolve_target_folder(user, folder_id)

    filename = uploaded_file.name or 'untitled'
    mime_type = detect_mime_type(filename, uploaded_file.content_type)
    storage_path = generate_storage_path(user.id, filename)
    storage = _get_storage()

    logger.info(
        'Uploading file for user %s: %s (%d bytes)',
        user.username,
        filename,
        size_bytes,
    )
    saved_name = storage.save(storage_path, uploaded_file)

    try:
        return create_file(
            user,
            name=filename,
            mime_type=mime_type,
            size_bytes=size_bytes,
            storage_path=saved_name,
            folder=folder,
        )
    except Exception:
        logger.exception(
            'Database transaction failed, rolling back storage upload: %s',
            saved_name,
        )
        storage.rollback_upload(saved_name)
        raise


def get_file(file_id: int) -> File:
    """Get file by ID.

    Args:
        file_id: File ID.

    Returns:
        File instance.

    Raises:
        File.DoesNotExist: If file not found.
    """
    return File.objects.select_related('user').get(id=file_id)


def get_owned_file(user: _User, file_id: int) -> File:
    """Get file by ID, checking that the user owns it.

    Args:
        user: User requesting the file.
        file_id: File ID.

    Returns:
        File instance.

    Raises:
        File.DoesNotExist: If file not found.
        PermissionDenied: If the file belongs to another user.
    """
    file_instance = get_file(file_id)
    if file_instance.user_id != user.id:
        raise PermissionDenied('Unauthorized to access this file')
    return file_instance


def update_file(file_id: int, **changes: Any) -> File:
    """Apply a partial update to a file.

    A size change adjusts the owner's usage in the same transaction.

    Args:
        file_id: ID of file to update.
        **changes: Field values to merge (name, folder, size_bytes,
            mime_type, starred, is_shared, in_trash, deleted_at,
            last_accessed_at).

    Returns:
        Updated File instance.

    Raises:
        File.DoesNotExist: If file not found.
        ValidationError: If a field is not updatable, the new name is
            blank or the target folder belongs to another user.
    """
    if 'name' in changes:
        changes['name'] = _clean_name(changes['name'])

    with transaction.atomic():
        file_instance = File.objects.select_for_update().select_related(
            'user',
        ).get(id=file_id)

        target_folder = changes.get('folder')
        if target_folder is not None and (
            target_folder.user_id != file_instance.user_id
        ):
            raise ValidationError('Invalid folder')

        old_size = file_instance.size_bytes
        update_fields = apply_changes(
            file_instance,
            changes,
            _UPDATABLE_FIELDS,
        )
        file_instance.save(update_fields=update_fields)

        if file_instance.size_bytes != old_size:
            adjust_usage(
                file_instance.user,
                old_size=old_size,
                new_size=file_instance.size_bytes,
            )

    logger.info(
        'File updated: ID=%d, fields=%s',
        file_id,
        ', '.join(sorted(changes)),
    )
    return file_instance


def move_file(user: _User, file_id: int, folder_id: int | None) -> File:
    """Move a file into a folder or to the drive root.

    Args:
        user: Owner of the file and the target folder.
        file_id: ID of file to move.
        folder_id: Target folder ID, None for the drive root.

    Returns:
        Updated File instance.

    Raises:
        File.DoesNotExist: If file not found.
        ValidationError: If the folder is missing or not the user's.
    """
    folder = _resolve_target_folder(user, folder_id)
    return update_file(file_id, folder=folder)


def touch_file(file_id: int) -> None:
    """Record that a file was just accessed.

    Feeds the "recent" view without bumping ``modified_at``.

    Args:
        file_id: ID of accessed file.
    """
    File.objects.filter(id=file_id).update(last_accessed_at=timezone.now())


def delete_file(file_id: int) -> bool:
    """Permanently delete a file.

    Removes the file's shares and record and frees its size from the
    owner's quota in one transaction. The blob is removed from storage
    by the post_delete signal handler in signals.py.

    Args:
        file_id: ID of file to delete.

    Returns:
        True if the file existed, False otherwise.
    """
    with transaction.atomic():
        file_instance = File.objects.select_related('user').filter(
            id=file_id,
        ).first()
        if file_instance is None:
            logger.debug('File not found for delete: ID=%d', file_id)
            return False

        file_size = file_instance.size_bytes
        file_user = file_instance.user

        Share.objects.filter(file_id=file_id).delete()
        file_instance.delete()
        decrement_usage(file_user, file_size)

    logger.info(
        'File deleted: ID=%d (size: %d)',
        file_id,
        file_size,
    )
    return True


def _resolve_target_folder(
    user: _User,
    folder_id: int | None,
) -> Folder | None:
    """Resolve the folder a file goes into.

    Args:
        user: Owner of the file.
        folder_id: Folder ID, None for the drive root.

    Returns:
        Folder instance, or None for the drive root.

    Raises:
        ValidationError: If the folder is missing or not the user's.
    """
    if folder_id is None:
        return None

    folder = Folder.objects.filter(id=folder_id, user=user).first()
    if folder is None:
        raise ValidationError('Invalid folder')
    return folder


def _clean_name(name: str) -> str:
    cleaned = (name or '').strip()
    if not cleaned:
        raise ValidationError('File name cannot be empty')
    return cleaned
