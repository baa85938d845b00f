"""Tests for cleanup_trash management command."""

from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command
from django.utils import timezone

from server.apps.drive.logic.folder_operations import create_folder
from server.apps.drive.logic.trash_operations import (
    soft_delete_file,
    soft_delete_folder,
)
from server.apps.drive.models import File, Folder, UserQuota


def _age_file(file_id, days):
    File.objects.filter(id=file_id).update(
        deleted_at=timezone.now() - timedelta(days=days),
    )


@pytest.mark.django_db
class TestCleanupTrashCommand:
    """Tests for cleanup_trash management command."""

    def test_cleanup_deletes_old_files(self, user, make_file):
        """Test cleanup deletes files trashed more than 30 days ago."""
        file_instance = make_file(user, size_bytes=100)
        soft_delete_file(file_instance.id)
        _age_file(file_instance.id, days=31)

        out = StringIO()
        call_command('cleanup_trash', stdout=out)

        assert not File.objects.filter(id=file_instance.id).exists()
        assert UserQuota.objects.get(user=user).used_bytes == 0
        assert 'Purged 1 items from trash, 0 failed' in out.getvalue()

    def test_cleanup_preserves_recent_files(self, user, make_file):
        """Test cleanup keeps files trashed less than 30 days ago."""
        file_instance = make_file(user)
        soft_delete_file(file_instance.id)
        _age_file(file_instance.id, days=29)

        out = StringIO()
        call_command('cleanup_trash', stdout=out)

        assert File.objects.filter(id=file_instance.id).exists()
        assert 'Purged 0 items from trash' in out.getvalue()

    def test_cleanup_deletes_old_folder_with_contents(self, user, make_file):
        """Test an expired folder is purged with everything below it."""
        folder = create_folder(user, 'Old')
        child = create_folder(user, 'Child', parent_id=folder.id)
        make_file(user, name='inside.txt', size_bytes=70, folder=child)
        soft_delete_folder(folder.id)
        Folder.objects.filter(id=folder.id).update(
            deleted_at=timezone.now() - timedelta(days=45),
        )

        out = StringIO()
        call_command('cleanup_trash', stdout=out)

        assert not Folder.objects.filter(user=user).exists()
        assert not File.objects.filter(user=user).exists()
        assert UserQuota.objects.get(user=user).used_bytes == 0
        assert 'Purged 1 items from trash' in out.getvalue()

    def test_cleanup_custom_days(self, user, make_file):
        """Test --days changes the retention period."""
        file_instance = make_file(user)
        soft_delete_file(file_instance.id)
        _age_file(file_instance.id, days=8)

        call_command('cleanup_trash', '--days=7', stdout=StringIO())

        assert not File.objects.filter(id=file_instance.id).exists()

    def test_cleanup_batch_limit(self, user, make_file):
        """Test cleanup respects --batch-size option."""
        for index in range(5):
            file_instance = make_file(user, name=f'file{index}.txt')
            soft_delete_file(file_instance.id)
            _age_file(file_instance.id, days=31)

        out = StringIO()
        call_command('cleanup_trash', '--batch-size=2', stdout=out)

        assert File.objects.filter(user=user).count() == 3
        assert 'Purged 2 items from trash' in out.getvalue()

    def test_cleanup_dry_run(self, user, make_file):
        """Test --dry-run reports without deleting."""
        file_instance = make_file(user, name='old.txt')
        soft_delete_file(file_instance.id)
        _age_file(file_instance.id, days=31)

        out = StringIO()
        call_command('cleanup_trash', '--dry-run', stdout=out)

        assert File.objects.filter(id=file_instance.id).exists()
        assert 'Would delete file: old.txt' in out.getvalue()
        assert 'Would purge 1 items from trash' in out.getvalue()

    def test_cleanup_ignores_untrashed_files(self, user, make_file):
        """Test files outside the trash are never purged."""
        file_instance = make_file(user)
        _age_file(file_instance.id, days=100)

        call_command('cleanup_trash', stdout=StringIO())

        assert File.objects.filter(id=file_instance.id).exists()
