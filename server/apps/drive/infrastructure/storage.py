"""Storage backend for uploaded file content."""

import logging
from typing import Any, final, override

from storages.backends.s3 import S3Storage

logger = logging.getLogger(__name__)


@final
class FileStorage(S3Storage):
    """S3-compatible storage for drive blobs.

    Extends django-storages S3Storage with logging around writes and
    deletes, and a best-effort delete used to undo an upload when the
    database record could not be created.
    """

    @override
    def save(  # noqa: WPS211
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Save blob to the bucket.

        Args:
            name: Requested storage path.
            content: File-like object with the blob.
            max_length: Optional maximum length for the name.

        Returns:
            Actual storage path used (differs from name on conflicts).

        Raises:
            Exception: If the upload fails.
        """
        try:
            saved_name = super().save(name, content, max_length)
        except Exception:
            logger.exception('Failed to store blob: %s', name)
            raise
        logger.info('Stored blob: %s', saved_name)
        return saved_name

    @override
    def delete(self, name: str) -> None:
        """Delete blob from the bucket.

        Args:
            name: Storage path of the blob.

        Raises:
            Exception: If the delete fails.
        """
        try:
            super().delete(name)
        except Exception:
            logger.exception('Failed to delete blob: %s', name)
            raise
        logger.info('Deleted blob: %s', name)

    def rollback_upload(self, name: str) -> None:
        """Delete a freshly stored blob after its DB record failed.

        Never raises: the database side is already rolled back and a
        leftover blob is only wasted space.

        Args:
            name: Storage path of the blob.
        """
        logger.warning('Rolling back upload: %s', name)
        try:
            self.delete(name)
        except Exception:
            logger.exception('Rollback failed, orphaned blob: %s', name)
