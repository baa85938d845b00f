"""JSON payloads for drive entities."""

from datetime import datetime
from typing import Any

from django.urls import reverse

from server.apps.drive.models import File, Folder, Share


def _isoformat(moment: datetime | None) -> str | None:
    return moment.isoformat() if moment else None


def file_payload(
    file_instance: File,
    include_path: bool = True,
) -> dict[str, Any]:
    """Serialize a file with its download URL.

    Args:
        file_instance: File to serialize.
        include_path: Include the storage key, only for the owner.

    Returns:
        JSON-ready dict.
    """
    payload = {
        'id': file_instance.id,
        'name': file_instance.name,
        'type': file_instance.mime_type,
        'size': file_instance.size_bytes,
        'user_id': file_instance.user_id,
        'folder_id': file_instance.folder_id,
        'path': file_instance.file.name,
        'starred': file_instance.starred,
        'is_shared': file_instance.is_shared,
        'in_trash': file_instance.in_trash,
        'deleted_at': _isoformat(file_instance.deleted_at),
        'last_accessed_at': _isoformat(file_instance.last_accessed_at),
        'created_at': _isoformat(file_instance.created_at),
        'modified_at': _isoformat(file_instance.modified_at),
        'url': reverse('drive:file-download', args=[file_instance.id]),
    }
    if not include_path:
        del payload['path']  # noqa: WPS420
    return payload


def folder_payload(folder: Folder) -> dict[str, Any]:
    """Serialize a folder, with stats when the queryset annotated them."""
    payload = {
        'id': folder.id,
        'name': folder.name,
        'user_id': folder.user_id,
        'parent_id': folder.parent_id,
        'starred': folder.starred,
        'is_shared': folder.is_shared,
        'in_trash': folder.in_trash,
        'deleted_at': _isoformat(folder.deleted_at),
        'created_at': _isoformat(folder.created_at),
        'modified_at': _isoformat(folder.modified_at),
    }
    if hasattr(folder, 'file_count'):
        payload['file_count'] = folder.file_count
        payload['total_size'] = folder.total_size
    return payload


def share_payload(share: Share, with_details: bool = True) -> dict[str, Any]:
    """Serialize a share, optionally with its target and sharer.

    Args:
        share: Share to serialize.
        with_details: Include the target file/folder and sharer profile.

    Returns:
        JSON-ready dict.
    """
    payload: dict[str, Any] = {
        'id': share.id,
        'file_id': share.file_id,
        'folder_id': share.folder_id,
        'user_id': share.user_id,
        'access_type': share.access_type,
        'allow_download': share.allow_download,
        'expiry_date': _isoformat(share.expiry_date),
        'token': share.token,
        'created_at': _isoformat(share.created_at),
    }
    if not with_details:
        return payload

    payload['file'] = (
        file_payload(share.file, include_path=False) if share.file else None
    )
    payload['folder'] = folder_payload(share.folder) if share.folder else None
    payload['shared_by'] = {
        'name': share.user.display_name,
        'avatar': share.user.avatar,
    }
    return payload
