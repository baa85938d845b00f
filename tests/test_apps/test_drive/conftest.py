"""Shared fixtures for drive app tests."""

from collections.abc import Callable
from typing import Any

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import Client

from server.apps.drive.logic.file_operations import create_file
from server.apps.drive.models import File, Folder


@pytest.fixture
def make_file(db) -> Callable[..., File]:
    """Factory creating file records without touching storage.

    Usage is accounted like a real upload.

    Returns:
        Callable(user, name='test.txt', size_bytes=100, folder=None).
    """
    def factory(
        owner: Any,
        name: str = 'test.txt',
        size_bytes: int = 100,
        folder: Folder | None = None,
    ) -> File:
        return create_file(
            owner,
            name=name,
            mime_type='text/plain',
            size_bytes=size_bytes,
            storage_path=f'{owner.id}/{name}',
            folder=folder,
        )
    return factory


@pytest.fixture
def sample_upload():
    """Small text upload.

    Returns:
        SimpleUploadedFile with test data.
    """
    return SimpleUploadedFile(
        'notes.txt',
        b'test file content',
        content_type='text/plain',
    )


@pytest.fixture
def api_client(user):
    """Django test client logged in as ``user``.

    Returns:
        Authenticated Client.
    """
    client = Client()
    client.force_login(user)
    return client
