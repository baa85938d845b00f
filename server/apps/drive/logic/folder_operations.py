"""Business logic for folder operations."""

import logging
from typing import Any, Final

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction

from server.apps.drive.exceptions import (
    DuplicateFolderNameError,
    FolderCycleError,
)
from server.apps.drive.logic.file_operations import delete_file
from server.apps.drive.logic.records import apply_changes
from server.apps.drive.models import File, Folder, Share

# User type for Django's dynamic user model
_User = Any

_UPDATABLE_FIELDS: Final = frozenset((
    'name',
    'parent',
    'starred',
    'is_shared',
    'in_trash',
    'deleted_at',
))

logger = logging.getLogger(__name__)


def create_folder(
    user: _User,
    name: str,
    parent_id: int | None = None,
) -> Folder:
    """Create a folder at the root or inside another folder.

    Args:
        user: Owner of the new folder.
        name: Folder name, unique among siblings (case-insensitive).
        parent_id: Parent folder ID, None for the drive root.

    Returns:
        Created Folder instance.

    Raises:
        Folder.DoesNotExist: If the parent folder doesn't exist.
        PermissionDenied: If the parent folder belongs to another user.
        DuplicateFolderNameError: If a sibling already uses the name.
        ValidationError: If the name is blank.
    """
    name = _clean_name(name)

    parent = None
    if parent_id is not None:
        parent = Folder.objects.get(id=parent_id)
        if parent.user_id != user.id:
            raise PermissionDenied(
                "You don't have access to this parent folder",
            )

    with transaction.atomic():
        _ensure_unique_name(user.id, name, parent_id)
        folder = Folder.objects.create(
            user=user,
            name=name,
            parent=parent,
        )

    logger.info(
        'Folder created: %s (ID: %d, parent: %s)',
        name,
        folder.id,
        parent_id,
    )
    return folder


def get_folder(folder_id: int) -> Folder:
    """Get folder by ID.

    Args:
        folder_id: Folder ID.

    Returns:
        Folder instance.

    Raises:
        Folder.DoesNotExist: If folder not found.
    """
    return Folder.objects.select_related('user').get(id=folder_id)


def get_owned_folder(user: _User, folder_id: int) -> Folder:
    """Get folder by ID, checking that the user owns it.

    Args:
        user: User requesting the folder.
        folder_id: Folder ID.

    Returns:
        Folder instance.

    Raises:
        Folder.DoesNotExist: If folder not found.
        PermissionDenied: If the folder belongs to another user.
    """
    folder = get_folder(folder_id)
    if folder.user_id != user.id:
        raise PermissionDenied('Unauthorized to access this folder')
    return folder


def update_folder(folder_id: int, **changes: Any) -> Folder:
    """Apply a partial update to a folder.

    Renames and moves are checked against sibling names, and moves
    against ownership and cycles.

    Args:
        folder_id: ID of folder to update.
        **changes: Field values to merge (name, parent, starred,
            is_shared, in_trash, deleted_at).

    Returns:
        Updated Folder instance.

    Raises:
        Folder.DoesNotExist: If folder not found.
        PermissionDenied: If the new parent belongs to another user.
        FolderCycleError: If the new parent is the folder or below it.
        DuplicateFolderNameError: If a sibling already uses the name.
        ValidationError: If a field is not updatable or name is blank.
    """
    with transaction.atomic():
        folder = Folder.objects.select_for_update().get(id=folder_id)

        if 'name' in changes:
            changes['name'] = _clean_name(changes['name'])
        if 'parent' in changes:
            _validate_parent(folder, changes['parent'])

        new_name = changes.get('name', folder.name)
        new_parent_id = (
            _parent_id(changes['parent'])
            if 'parent' in changes
            else folder.parent_id
        )
        if new_name != folder.name or new_parent_id != folder.parent_id:
            _ensure_unique_name(
                folder.user_id,
                new_name,
                new_parent_id,
                exclude_id=folder.id,
            )

        update_fields = apply_changes(folder, changes, _UPDATABLE_FIELDS)
        folder.save(update_fields=update_fields)

    logger.info(
        'Folder updated: ID=%d, fields=%s',
        folder_id,
        ', '.join(sorted(changes)),
    )
    return folder


def move_folder(folder_id: int, parent_id: int | None) -> Folder:
    """Move a folder under another folder or to the drive root.

    Args:
        folder_id: ID of folder to move.
        parent_id: New parent folder ID, None for the drive root.

    Returns:
        Updated Folder instance.

    Raises:
        Folder.DoesNotExist: If either folder doesn't exist.
        PermissionDenied: If the new parent belongs to another user.
        FolderCycleError: If the new parent is the folder or below it.
        DuplicateFolderNameError: If the new location has the name.
    """
    parent = None if parent_id is None else Folder.objects.get(id=parent_id)
    return update_folder(folder_id, parent=parent)


def delete_folder(folder_id: int) -> bool:
    """Permanently delete a folder with everything below it.

    Files are deleted first (freeing their quota and removing their
    shares), then the shares of every folder in the subtree, then the
    folders themselves.

    Args:
        folder_id: ID of folder to delete.

    Returns:
        True if the folder existed, False otherwise.
    """
    with transaction.atomic():
        if not Folder.objects.filter(id=folder_id).exists():
            return False

        subtree_ids = collect_subtree_ids(folder_id)

        file_ids = list(
            File.objects.filter(
                folder_id__in=subtree_ids,
            ).values_list('id', flat=True),
        )
        for file_id in file_ids:
            delete_file(file_id)

        Share.objects.filter(folder_id__in=subtree_ids).delete()
        Folder.objects.filter(id__in=subtree_ids).delete()

    logger.info(
        'Folder deleted: ID=%d (%d folders, %d files)',
        folder_id,
        len(subtree_ids),
        len(file_ids),
    )
    return True


def collect_subtree_ids(folder_id: int) -> list[int]:
    """Collect a folder's ID and the IDs of all folders below it.

    Walks the tree level by level and never revisits a folder, so it
    terminates even if stored data contains a cycle.

    Args:
        folder_id: Root of the subtree.

    Returns:
        Folder IDs, the root first, then level by level.
    """
    collected = [folder_id]
    seen = {folder_id}
    frontier = [folder_id]

    while frontier:
        children = Folder.objects.filter(
            parent_id__in=frontier,
        ).exclude(
            id__in=seen,
        ).values_list('id', flat=True)
        frontier = list(children)
        seen.update(frontier)
        collected.extend(frontier)

    return collected


def _clean_name(name: str) -> str:
    cleaned = (name or '').strip()
    if not cleaned:
        raise ValidationError('Folder name cannot be empty')
    return cleaned


def _parent_id(parent: Folder | None) -> int | None:
    return None if parent is None else parent.id


def _ensure_unique_name(
    user_id: int,
    name: str,
    parent_id: int | None,
    exclude_id: int | None = None,
) -> None:
    """Reject a name already used by a sibling folder.

    Args:
        user_id: Owner of the folders.
        name: Candidate name, compared case-insensitively.
        parent_id: Parent folder ID, None for the drive root.
        exclude_id: Folder to ignore (the one being renamed).

    Raises:
        DuplicateFolderNameError: If a sibling already uses the name.
    """
    siblings = Folder.objects.filter(
        user_id=user_id,
        parent_id=parent_id,
        name__iexact=name,
    )
    if exclude_id is not None:
        siblings = siblings.exclude(id=exclude_id)

    if siblings.exists():
        logger.warning(
            'Duplicate folder name for user %d: %s (parent: %s)',
            user_id,
            name,
            parent_id,
        )
        raise DuplicateFolderNameError(name, parent_id)


def _validate_parent(folder: Folder, parent: Folder | None) -> None:
    """Check that a folder may be moved under the given parent.

    Args:
        folder: Folder being moved.
        parent: New parent, None for the drive root.

    Raises:
        PermissionDenied: If the parent belongs to another user.
        FolderCycleError: If the parent is the folder or below it.
    """
    if parent is None:
        return

    if parent.user_id != folder.user_id:
        raise PermissionDenied(
            "You don't have access to this parent folder",
        )

    # Walk up from the new parent; reaching the folder means a cycle
    seen: set[int] = set()
    current_id: int | None = parent.id
    while current_id is not None and current_id not in seen:
        if current_id == folder.id:
            raise FolderCycleError(folder.id, parent.id)
        seen.add(current_id)
        current_id = Folder.objects.filter(
            id=current_id,
        ).values_list('parent_id', flat=True).first()
