"""Business logic for user accounts."""

import logging
from typing import Any, Final

from django.core.exceptions import ValidationError
from django.db import transaction

from server.apps.drive.logic.quota_operations import get_or_create_quota
from server.apps.users.models import User

_UPDATABLE_FIELDS: Final = frozenset(('name', 'avatar', 'email'))

logger = logging.getLogger(__name__)


def create_user(
    username: str,
    password: str,
    name: str = '',
    avatar: str = '',
) -> User:
    """Create a user with a hashed password and a storage quota.

    Args:
        username: Unique login name.
        password: Raw password, stored hashed.
        name: Display name.
        avatar: Avatar image URL.

    Returns:
        Created User instance.

    Raises:
        ValidationError: If the username is already taken.
    """
    if User.objects.filter(username=username).exists():
        raise ValidationError('Username already exists')

    with transaction.atomic():
        user = User.objects.create_user(
            username=username,
            password=password,
            name=name,
            avatar=avatar,
        )
        get_or_create_quota(user)

    logger.info('User created: %s (ID: %d)', username, user.id)
    return user


def get_user(user_id: int) -> User:
    """Get user by ID.

    Raises:
        User.DoesNotExist: If user not found.
    """
    return User.objects.get(id=user_id)


def get_user_by_username(username: str) -> User | None:
    """Find user by username, None if there is none."""
    return User.objects.filter(username=username).first()


def update_user(user_id: int, **changes: Any) -> User:
    """Apply a partial update to a user's profile.

    Args:
        user_id: ID of user to update.
        **changes: Field values to merge (name, avatar, email).

    Returns:
        Updated User instance.

    Raises:
        User.DoesNotExist: If user not found.
        ValidationError: If a field is not updatable.
    """
    unknown = sorted(set(changes) - _UPDATABLE_FIELDS)
    if unknown:
        raise ValidationError(
            'Cannot update fields: {0}'.format(', '.join(unknown)),
        )

    user = User.objects.get(id=user_id)
    for field_name, field_value in changes.items():
        setattr(user, field_name, field_value)
    user.save(update_fields=list(changes))

    logger.info('User updated: ID=%d', user_id)
    return user
