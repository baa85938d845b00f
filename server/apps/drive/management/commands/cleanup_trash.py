"""Management command to purge old items from trash."""

from datetime import datetime, timedelta
from typing import Any, Final

from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone

from server.apps.drive.logic.trash_operations import (
    list_expired_trash,
    purge_trash,
)

_DEFAULT_RETENTION_DAYS: Final = 30
_DEFAULT_BATCH_SIZE: Final = 1000


class Command(BaseCommand):
    """Permanently delete folders and files trashed long ago."""

    help = 'Purge trashed folders and files older than the retention period'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--days',
            type=int,
            default=getattr(
                settings,
                'DRIVE_TRASH_RETENTION_DAYS',
                _DEFAULT_RETENTION_DAYS,
            ),
            help='Retention period in days',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be deleted without deleting',
        )
        parser.add_argument(
            '--batch-size',
            type=int,
            default=_DEFAULT_BATCH_SIZE,
            help=(
                'Max items of each kind to process '
                f'(default: {_DEFAULT_BATCH_SIZE})'
            ),
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the cleanup command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        batch_size = options['batch_size']
        retention_days = options['days']

        cutoff = timezone.now() - timedelta(days=retention_days)

        self.stdout.write(
            f'Looking for items trashed before {cutoff} '
            f'(older than {retention_days} days)',
        )

        if options['dry_run']:
            self._report(cutoff, batch_size)
            return

        purged, failed = purge_trash(cutoff, batch_size)
        if failed:
            self.stderr.write(f'Failed to delete {failed} items, see logs')
        self.stdout.write(
            self.style.SUCCESS(
                f'Purged {purged} items from trash, {failed} failed',
            ),
        )

    def _report(self, cutoff: datetime, batch_size: int) -> None:
        """List what a real run would purge."""
        old_folders, old_files = list_expired_trash(cutoff)
        count = 0

        for folder in old_folders[:batch_size]:
            self.stdout.write(
                f'Would delete folder: {folder.name} '
                f'(user: {folder.user.username}, '
                f'deleted: {folder.deleted_at})',
            )
            count += 1

        for file_instance in old_files[:batch_size]:
            self.stdout.write(
                f'Would delete file: {file_instance.name} '
                f'(user: {file_instance.user.username}, '
                f'deleted: {file_instance.deleted_at})',
            )
            count += 1

        self.stdout.write(
            self.style.SUCCESS(f'Would purge {count} items from trash'),
        )
