"""Drive storage accounting.

Every stored file counts against its owner's limit until it is deleted
for good; trashing a file frees nothing. Uploads call ``check_quota``
first and ``increment_usage`` once the row exists, permanent deletes
call ``decrement_usage``.
"""

import logging
from typing import Any, TypedDict

from django.db import transaction
from django.db.models import F, Sum  # noqa: WPS347

from server.apps.drive.exceptions import QuotaExceededError
from server.apps.drive.models import File, UserQuota

_User = Any

_USED_BYTES_FIELD = 'used_bytes'  # noqa: WPS226

logger = logging.getLogger(__name__)


class StorageInfo(TypedDict):
    """Storage usage summary for one user."""

    storage_used: int
    storage_limit: int
    storage_percentage: float


def get_or_create_quota(user: _User) -> UserQuota:
    """Return the user's quota row, creating it with the default limit.

    Args:
        user: Drive owner.

    Returns:
        The user's UserQuota.
    """
    quota, created = UserQuota.objects.get_or_create(user=user)
    if created:
        logger.info(
            'Opened storage account for %s with limit %d bytes',
            user.username,
            quota.quota_bytes,
        )
    return quota


def check_quota(user: _User, size_bytes: int) -> None:
    """Refuse an upload that would push the drive past its limit.

    Args:
        user: Uploading user.
        size_bytes: Size of the incoming file.

    Raises:
        QuotaExceededError: When used plus incoming bytes exceed the limit.
    """
    quota = get_or_create_quota(user)

    if quota.has_space_for(size_bytes):
        return

    logger.warning(
        'Upload of %d bytes refused for %s, %d bytes free',
        size_bytes,
        user.username,
        quota.available_bytes(),
    )
    raise QuotaExceededError(
        quota_bytes=quota.quota_bytes,
        used_bytes=quota.used_bytes,
        required_bytes=size_bytes,
    )


def increment_usage(user: _User, size_bytes: int) -> None:
    """Charge a stored file's bytes to its owner.

    Args:
        user: Drive owner.
        size_bytes: Bytes added to the drive.
    """
    with transaction.atomic():
        charged = UserQuota.objects.filter(user=user).update(
            used_bytes=F(_USED_BYTES_FIELD) + size_bytes,
        )

        if not charged:
            quota = get_or_create_quota(user)
            quota.used_bytes = size_bytes
            quota.save(update_fields=[_USED_BYTES_FIELD])

    logger.debug('Charged %d bytes to %s', size_bytes, user.username)


def decrement_usage(user: _User, size_bytes: int) -> None:
    """Release the bytes of a permanently deleted file.

    Usage never drops below zero.

    Args:
        user: Drive owner.
        size_bytes: Bytes removed from the drive.
    """
    with transaction.atomic():
        quota = UserQuota.objects.select_for_update().filter(
            user=user,
        ).first()
        if quota is None:
            logger.debug(
                'Nothing to release for %s, no storage account',
                user.username,
            )
            return

        remaining = max(0, quota.used_bytes - size_bytes)
        quota.used_bytes = remaining
        quota.save(update_fields=[_USED_BYTES_FIELD])

    logger.debug(
        'Released %d bytes for %s, %d bytes still in use',
        size_bytes,
        user.username,
        remaining,
    )


def adjust_usage(user: _User, old_size: int, new_size: int) -> None:
    """Charge or release the difference when a file's size changes.

    Args:
        user: Drive owner.
        old_size: Size before the change.
        new_size: Size after the change.
    """
    delta = new_size - old_size
    if delta > 0:
        increment_usage(user, delta)
    elif delta < 0:
        decrement_usage(user, -delta)


def recalculate_usage(user: _User) -> int:
    """Reset the usage counter to the sum of the user's file sizes.

    Trashed files are part of the sum.

    Args:
        user: Drive owner.

    Returns:
        Usage in bytes after the reset.
    """
    stored = File.objects.filter(user=user).aggregate(
        stored=Sum('size_bytes'),
    )['stored'] or 0

    with transaction.atomic():
        quota = get_or_create_quota(user)
        previous = quota.used_bytes
        quota.used_bytes = stored
        quota.save(update_fields=[_USED_BYTES_FIELD])

    logger.info(
        'Usage of %s reset from %d to %d bytes',
        user.username,
        previous,
        stored,
    )
    return stored


def get_storage_info(user: _User) -> StorageInfo:
    """Summarize user's storage usage.

    Args:
        user: User to summarize.

    Returns:
        Used bytes, limit and percentage of the limit in use.
    """
    quota = get_or_create_quota(user)
    return StorageInfo(
        storage_used=quota.used_bytes,
        storage_limit=quota.quota_bytes,
        storage_percentage=quota.used_percentage(),
    )
