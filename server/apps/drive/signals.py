"""Signal handlers for drive app."""

import logging
from functools import partial

from django.core.files.storage import default_storage
from django.db import transaction
from django.db.models.signals import post_delete
from django.dispatch import receiver

from server.apps.drive.models import File

logger = logging.getLogger(__name__)


@receiver(post_delete, sender=File)
def delete_blob_from_storage(
    sender: type[File],
    instance: File,
    **kwargs: object,
) -> None:
    """Delete the blob once its File record deletion commits.

    Covers every delete path (logic layer, folder cascade, admin,
    user deletion) so no blob outlives its record. A rolled back
    delete keeps the blob.

    Args:
        sender: The File model class.
        instance: The File instance being deleted.
        **kwargs: Additional signal arguments.
    """
    if not instance.file:
        return

    transaction.on_commit(partial(remove_blob, instance.file.name))


def remove_blob(storage_name: str) -> None:
    """Remove a blob from storage, logging instead of raising.

    Args:
        storage_name: Storage path of the blob.
    """
    try:
        if default_storage.exists(storage_name):
            default_storage.delete(storage_name)
        else:
            logger.warning(
                'Blob not found in storage (already deleted?): %s',
                storage_name,
            )
    except Exception:
        # DB delete already committed, the blob is only orphaned
        logger.exception(
            'Failed to delete blob from storage (orphaned): %s',
            storage_name,
        )
