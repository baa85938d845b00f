"""Partial updates shared by folders and files."""

from collections.abc import Mapping
from typing import Any

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

# Stamped by auto_now on every save
_MODIFIED_FIELD = 'modified_at'


def apply_changes(
    instance: models.Model,
    changes: Mapping[str, Any],
    allowed_fields: frozenset[str],
) -> list[str]:
    """Shallow-merge changes over a folder or file instance.

    Flipping ``in_trash`` stamps ``deleted_at`` (now when trashing,
    cleared when restoring) unless the caller sets it explicitly.
    The instance is not saved.

    Args:
        instance: Folder or File to modify in place.
        changes: Field name to new value.
        allowed_fields: Field names callers may change.

    Returns:
        Field names to pass as ``update_fields`` when saving.

    Raises:
        ValidationError: If a field is not updatable.
    """
    unknown = sorted(set(changes) - allowed_fields)
    if unknown:
        raise ValidationError(
            'Cannot update fields: {0}'.format(', '.join(unknown)),
        )

    merged = dict(changes)
    trashing = merged.get('in_trash')
    if (
        trashing is not None and
        trashing != instance.in_trash and
        'deleted_at' not in merged
    ):
        merged['deleted_at'] = timezone.now() if trashing else None

    for field_name, field_value in merged.items():
        setattr(instance, field_name, field_value)

    return [*merged, _MODIFIED_FIELD]
