"""Tests for user account business logic."""

import pytest
from django.core.exceptions import ValidationError

from server.apps.drive.models import UserQuota
from server.apps.users.logic.user_operations import (
    create_user,
    get_user,
    get_user_by_username,
    update_user,
)
from server.apps.users.models import User


@pytest.mark.django_db
def test_create_user_with_quota():
    """Test a new user gets a hashed password and a quota."""
    user = create_user('alice', 'secret-password', name='Alice')

    assert user.check_password('secret-password')
    assert user.password != 'secret-password'
    assert user.display_name == 'Alice'
    assert UserQuota.objects.get(user=user).used_bytes == 0


@pytest.mark.django_db
def test_create_user_duplicate_username():
    """Test usernames are unique."""
    create_user('alice', 'secret-password')

    with pytest.raises(ValidationError):
        create_user('alice', 'another-password')

    assert User.objects.count() == 1


@pytest.mark.django_db
def test_get_user(user):
    """Test fetching users by ID and username."""
    assert get_user(user.id) == user
    assert get_user_by_username('testuser') == user
    assert get_user_by_username('nobody') is None


@pytest.mark.django_db
def test_get_missing_user(db):
    """Test a missing ID raises DoesNotExist."""
    with pytest.raises(User.DoesNotExist):
        get_user(99999)


@pytest.mark.django_db
def test_update_user_profile(user):
    """Test profile fields merge over the user."""
    updated = update_user(user.id, avatar='https://example.com/me.png')

    assert updated.avatar == 'https://example.com/me.png'
    assert updated.name == 'Test User'


@pytest.mark.django_db
def test_update_user_refuses_other_fields(user):
    """Test credentials cannot change through profile updates."""
    with pytest.raises(ValidationError):
        update_user(user.id, is_superuser=True)


@pytest.mark.django_db
def test_display_name_falls_back_to_username(other_user):
    """Test users without a name show their username."""
    assert other_user.display_name == 'otheruser'
