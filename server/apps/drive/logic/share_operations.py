"""Business logic for share links."""

import logging
import secrets
from datetime import datetime
from typing import Any, Final

from django.core.exceptions import PermissionDenied, ValidationError
from django.db.models import QuerySet

from server.apps.drive.models import File, Folder, Share

# User type for Django's dynamic user model
_User = Any

# Token length in bytes (generates 32 hex chars)
_TOKEN_BYTES: Final = 16

logger = logging.getLogger(__name__)


def create_share(  # noqa: WPS211
    user: _User,
    file_id: int | None = None,
    folder_id: int | None = None,
    access_type: str = Share.AccessType.PUBLIC,
    allow_download: bool = True,
    expiry_date: datetime | None = None,
) -> Share:
    """Share one of the user's files or folders through a link.

    The token is random; uniqueness relies on its size and the
    database unique constraint.

    Args:
        user: Owner of the shared item.
        file_id: File to share (exclusive with folder_id).
        folder_id: Folder to share (exclusive with file_id).
        access_type: 'public' or 'restricted'.
        allow_download: Whether link holders may download content.
        expiry_date: When the link stops working, None for never.

    Returns:
        Created Share instance.

    Raises:
        ValidationError: If not exactly one target is given or the
            access type is unknown.
        PermissionDenied: If the target is missing or not the user's.
    """
    if (file_id is None) == (folder_id is None):
        raise ValidationError('Must specify either file_id or folder_id')

    if access_type not in Share.AccessType.values:
        raise ValidationError(f'Unknown access type: {access_type}')

    shared_file = None
    shared_folder = None
    if file_id is not None:
        shared_file = File.objects.filter(id=file_id, user=user).first()
        if shared_file is None:
            raise PermissionDenied('Unauthorized to share this file')
    else:
        shared_folder = Folder.objects.filter(id=folder_id, user=user).first()
        if shared_folder is None:
            raise PermissionDenied('Unauthorized to share this folder')

    share = Share.objects.create(
        user=user,
        file=shared_file,
        folder=shared_folder,
        access_type=access_type,
        allow_download=allow_download,
        expiry_date=expiry_date,
        token=secrets.token_hex(_TOKEN_BYTES),
    )

    logger.info(
        'Share created by user %s: ID=%d (file: %s, folder: %s)',
        user.username,
        share.id,
        file_id,
        folder_id,
    )
    return share


def get_share_by_token(token: str) -> Share:
    """Resolve a share link with its target and sharer.

    Expired shares are returned too; callers decide what to do with
    them (see ``Share.is_expired``).

    Args:
        token: Share token from the link.

    Returns:
        Share with file, folder and user loaded.

    Raises:
        Share.DoesNotExist: If no share has this token.
    """
    return Share.objects.select_related(
        'file',
        'folder',
        'user',
    ).get(token=token)


def list_shares(user: _User) -> QuerySet[Share]:
    """List user's shares with their targets, newest first.

    Args:
        user: Sharer.

    Returns:
        QuerySet of shares with file, folder and user loaded.
    """
    return Share.objects.filter(user=user).select_related(
        'file',
        'folder',
        'user',
    )


def delete_share(share_id: int) -> bool:
    """Delete a share link.

    Args:
        share_id: ID of share to delete.

    Returns:
        True if the share existed, False otherwise.
    """
    deleted, _ = Share.objects.filter(id=share_id).delete()
    if deleted:
        logger.info('Share deleted: ID=%d', share_id)
    return deleted > 0
