"""Exceptions for drive app.

Missing entities raise the model's ``DoesNotExist``, ownership
violations raise ``django.core.exceptions.PermissionDenied`` and bad
input raises ``django.core.exceptions.ValidationError``; the classes
below cover what Django has no type for.
"""

from django.core.exceptions import ValidationError


class QuotaExceededError(Exception):
    """Raised when upload would exceed user's storage quota."""

    def __init__(
        self,
        quota_bytes: int,
        used_bytes: int,
        required_bytes: int,
    ) -> None:
        """Initialize QuotaExceededError.

        Args:
            quota_bytes: Total quota limit in bytes.
            used_bytes: Currently used bytes.
            required_bytes: Bytes needed for the operation.
        """
        self.quota_bytes = quota_bytes
        self.used_bytes = used_bytes
        self.required_bytes = required_bytes

        available = max(0, quota_bytes - used_bytes)
        super().__init__(
            f'Not enough storage space: need {required_bytes} bytes, '
            f'only {available} bytes available '
            f'(quota: {quota_bytes}, used: {used_bytes})',
        )


class DuplicateFolderNameError(Exception):
    """Raised when a sibling folder already uses the requested name."""

    def __init__(self, name: str, parent_id: int | None) -> None:
        """Initialize DuplicateFolderNameError.

        Args:
            name: Requested folder name.
            parent_id: Parent folder ID, None for the drive root.
        """
        self.name = name
        self.parent_id = parent_id
        super().__init__(
            'A folder with this name already exists in this location',
        )


class FolderCycleError(ValidationError):
    """Raised when a folder would become its own ancestor."""

    def __init__(self, folder_id: int, parent_id: int) -> None:
        """Initialize FolderCycleError.

        Args:
            folder_id: Folder being moved.
            parent_id: Requested new parent.
        """
        self.folder_id = folder_id
        self.parent_id = parent_id
        super().__init__(
            f'Cannot move folder {folder_id} into itself or one of its '
            f'subfolders ({parent_id})',
        )
