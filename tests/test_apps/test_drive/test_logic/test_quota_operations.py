"""Tests for quota operations business logic."""

import pytest

from server.apps.drive.exceptions import QuotaExceededError
from server.apps.drive.logic.quota_operations import (
    adjust_usage,
    check_quota,
    decrement_usage,
    get_or_create_quota,
    get_storage_info,
    increment_usage,
    recalculate_usage,
)
from server.apps.drive.models import File, UserQuota


@pytest.mark.django_db
def test_get_or_create_quota_creates_new(user):
    """Test get_or_create_quota creates quota when none exists."""
    assert not UserQuota.objects.filter(user=user).exists()

    quota = get_or_create_quota(user)

    assert quota.user == user
    assert quota.quota_bytes == 15 * 1024 * 1024 * 1024  # 15 GB default
    assert quota.used_bytes == 0


@pytest.mark.django_db
def test_get_or_create_quota_returns_existing(user):
    """Test get_or_create_quota returns existing quota."""
    UserQuota.objects.create(user=user, quota_bytes=5000, used_bytes=1000)

    quota = get_or_create_quota(user)

    assert quota.quota_bytes == 5000
    assert quota.used_bytes == 1000


@pytest.mark.django_db
def test_check_quota_passes_at_exact_limit(user):
    """Test check_quota doesn't raise when the upload fills the quota."""
    UserQuota.objects.create(user=user, quota_bytes=1000, used_bytes=400)

    check_quota(user, 600)


@pytest.mark.django_db
def test_check_quota_raises_when_exceeded(user):
    """Test check_quota raises with the numbers in the error."""
    UserQuota.objects.create(user=user, quota_bytes=1000, used_bytes=900)

    with pytest.raises(QuotaExceededError) as exc_info:
        check_quota(user, 200)

    assert exc_info.value.required_bytes == 200
    assert exc_info.value.used_bytes == 900
    assert 'only 100 bytes available' in str(exc_info.value)


@pytest.mark.django_db
def test_increment_usage(user):
    """Test increment_usage adds bytes to usage."""
    UserQuota.objects.create(user=user, quota_bytes=1000, used_bytes=100)

    increment_usage(user, 50)

    assert UserQuota.objects.get(user=user).used_bytes == 150


@pytest.mark.django_db
def test_increment_usage_creates_missing_quota(user):
    """Test increment_usage creates the quota on first use."""
    increment_usage(user, 300)

    assert UserQuota.objects.get(user=user).used_bytes == 300


@pytest.mark.django_db
def test_decrement_usage_clamps_to_zero(user):
    """Test decrement_usage never goes below zero."""
    UserQuota.objects.create(user=user, quota_bytes=1000, used_bytes=100)

    decrement_usage(user, 500)

    assert UserQuota.objects.get(user=user).used_bytes == 0


@pytest.mark.django_db
def test_decrement_usage_without_quota(user):
    """Test decrement_usage is a no-op when no quota exists."""
    decrement_usage(user, 100)

    assert not UserQuota.objects.filter(user=user).exists()


@pytest.mark.django_db
@pytest.mark.parametrize(('old_size', 'new_size', 'expected'), [
    (100, 300, 700),
    (300, 100, 300),
    (200, 200, 500),
])
def test_adjust_usage(user, old_size, new_size, expected):
    """Test adjust_usage applies the size difference."""
    UserQuota.objects.create(user=user, quota_bytes=1000, used_bytes=500)

    adjust_usage(user, old_size=old_size, new_size=new_size)

    assert UserQuota.objects.get(user=user).used_bytes == expected


@pytest.mark.django_db
def test_recalculate_usage_counts_trashed_files(user):
    """Test recalculation sums every file, trashed ones included."""
    UserQuota.objects.create(user=user, quota_bytes=10000, used_bytes=9999)
    File.objects.create(
        user=user,
        name='a.txt',
        file=f'{user.id}/a.txt',
        size_bytes=100,
        mime_type='text/plain',
    )
    File.objects.create(
        user=user,
        name='b.txt',
        file=f'{user.id}/b.txt',
        size_bytes=50,
        mime_type='text/plain',
        in_trash=True,
    )

    total = recalculate_usage(user)

    assert total == 150
    assert UserQuota.objects.get(user=user).used_bytes == 150


@pytest.mark.django_db
def test_get_storage_info(user):
    """Test storage summary reports usage against the limit."""
    UserQuota.objects.create(user=user, quota_bytes=2000, used_bytes=500)

    info = get_storage_info(user)

    assert info == {
        'storage_used': 500,
        'storage_limit': 2000,
        'storage_percentage': 25.0,
    }


@pytest.mark.django_db
def test_get_storage_info_for_new_user(user):
    """Test a user without files reports zero usage."""
    info = get_storage_info(user)

    assert info['storage_used'] == 0
    assert info['storage_limit'] == 15 * 1024 * 1024 * 1024
    assert info['storage_percentage'] == 0.0
