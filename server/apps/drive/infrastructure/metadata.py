"""Metadata helpers for uploaded files."""

import mimetypes
import secrets
from datetime import UTC, datetime
from pathlib import Path
from typing import Final

from django.core.exceptions import ValidationError

_DEFAULT_MIME_TYPE: Final = 'application/octet-stream'
_SUFFIX_BYTES: Final = 8  # 16 hex chars


def detect_mime_type(filename: str, declared: str | None = None) -> str:
    """Pick the MIME type for an upload.

    Trusts the type declared by the client, then falls back to a guess
    from the filename extension.

    Args:
        filename: Original filename with extension.
        declared: Content type sent with the upload, if any.

    Returns:
        MIME type string (e.g., 'image/jpeg', 'application/pdf').
        Returns 'application/octet-stream' if type cannot be determined.
    """
    if declared:
        return declared
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return _DEFAULT_MIME_TYPE
    return mime_type


def generate_storage_path(user_id: int, filename: str) -> str:
    """Build a unique storage path for a new blob.

    The original name is not reused so that two uploads of
    'report.pdf' never collide; only the extension is kept.

    Example: (7, 'report.PDF') -> '7/20260131T143052123456-9f86d081884c7d65.pdf'

    Args:
        user_id: Owner's user ID.
        filename: Original filename.

    Returns:
        Storage path starting with the owner's ID.
    """
    timestamp = datetime.now(tz=UTC).strftime('%Y%m%dT%H%M%S%f')
    suffix = secrets.token_hex(_SUFFIX_BYTES)
    extension = Path(filename).suffix.lower()
    return f'{user_id}/{timestamp}-{suffix}{extension}'


def validate_storage_path(user_id: int, storage_path: str) -> None:
    """Validate storage path follows user isolation rules.

    Ensures the storage path starts with the user's ID to maintain
    multi-user isolation.

    Args:
        user_id: Owner's user ID.
        storage_path: Proposed storage path.

    Raises:
        ValidationError: If path doesn't start with user_id or is invalid.
    """
    if not storage_path:
        raise ValidationError('Storage path cannot be empty')

    path_parts = Path(storage_path).parts
    if len(path_parts) < 2:
        raise ValidationError('Storage path must include a filename')

    try:
        path_user_id = int(path_parts[0])
    except ValueError as error:
        raise ValidationError(
            'Storage path must start with user ID',
        ) from error

    if path_user_id != user_id:
        raise ValidationError(
            f'Storage path user ID ({path_user_id}) does not match '
            f'owner ({user_id})',
        )
