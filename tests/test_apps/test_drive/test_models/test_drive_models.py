"""Tests for drive models."""

from datetime import timedelta

import pytest
from django.db import IntegrityError
from django.utils import timezone

from server.apps.drive.models import File, Folder, Share, UserQuota


@pytest.mark.django_db
def test_user_quota_default_values(user):
    """Test UserQuota defaults to the 15 GB limit."""
    quota = UserQuota.objects.create(user=user)

    assert quota.quota_bytes == 15 * 1024 * 1024 * 1024
    assert quota.used_bytes == 0


@pytest.mark.django_db
def test_user_quota_one_to_one_constraint(user):
    """Test that a user can only have one quota record."""
    UserQuota.objects.create(user=user)

    with pytest.raises(IntegrityError):
        UserQuota.objects.create(user=user)


@pytest.mark.django_db
def test_user_quota_negative_usage_rejected(user):
    """Test the database refuses negative usage."""
    with pytest.raises(IntegrityError):
        UserQuota.objects.create(user=user, used_bytes=-1)


@pytest.mark.django_db
def test_user_quota_space_helpers(user):
    """Test has_space_for, available_bytes and used_percentage."""
    quota = UserQuota.objects.create(
        user=user,
        quota_bytes=1000,
        used_bytes=250,
    )

    assert quota.has_space_for(750)
    assert not quota.has_space_for(751)
    assert quota.available_bytes() == 750
    assert quota.used_percentage() == 25.0


@pytest.mark.django_db
def test_user_quota_over_limit_helpers(user):
    """Test helpers when usage exceeds the limit."""
    quota = UserQuota.objects.create(
        user=user,
        quota_bytes=100,
        used_bytes=150,
    )

    assert quota.available_bytes() == 0
    assert quota.used_percentage() == 150.0


@pytest.mark.django_db
def test_user_quota_zero_limit_percentage(user):
    """Test a zero limit reports 0% instead of dividing by zero."""
    quota = UserQuota.objects.create(user=user, quota_bytes=0)

    assert quota.used_percentage() == 0.0


@pytest.mark.django_db
def test_folder_str_representation(user):
    """Test Folder string representation."""
    folder = Folder.objects.create(user=user, name='Documents')

    assert str(folder) == 'testuser:Documents'


@pytest.mark.django_db
def test_file_str_representation(user):
    """Test File string representation uses the user-facing name."""
    file_instance = File.objects.create(
        user=user,
        name='Report.PDF',
        file=f'{user.id}/abc.pdf',
        size_bytes=1,
        mime_type='application/pdf',
    )

    assert str(file_instance) == 'testuser:Report.PDF'


@pytest.mark.django_db
def test_share_needs_exactly_one_target(user):
    """Test the database refuses a share without target."""
    with pytest.raises(IntegrityError):
        Share.objects.create(user=user, token='a' * 32)


@pytest.mark.django_db
def test_share_token_unique(user):
    """Test two shares cannot use the same token."""
    folder = Folder.objects.create(user=user, name='Docs')
    Share.objects.create(user=user, folder=folder, token='b' * 32)

    with pytest.raises(IntegrityError):
        Share.objects.create(user=user, folder=folder, token='b' * 32)


@pytest.mark.django_db
def test_share_is_expired(user):
    """Test expiry compares the expiry date with the reference time."""
    folder = Folder.objects.create(user=user, name='Docs')
    now = timezone.now()
    share = Share(
        user=user,
        folder=folder,
        token='c' * 32,
        expiry_date=now - timedelta(seconds=1),
    )

    assert share.is_expired(now)
    assert not share.is_expired(now - timedelta(days=1))


@pytest.mark.django_db
def test_share_without_expiry_never_expires(user):
    """Test a share with no expiry date never expires."""
    folder = Folder.objects.create(user=user, name='Docs')
    share = Share(user=user, folder=folder, token='d' * 32)

    assert not share.is_expired()
    assert share.access_type == Share.AccessType.PUBLIC
    assert share.allow_download
