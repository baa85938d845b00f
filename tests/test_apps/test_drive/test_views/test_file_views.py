"""Tests for file API endpoints."""

from http import HTTPStatus

import pytest
from django.core.exceptions import ValidationError
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import Client

from server.apps.drive.logic import file_operations
from server.apps.drive.logic.folder_operations import create_folder
from server.apps.drive.models import File, UserQuota


@pytest.mark.django_db
def test_files_require_login():
    """Test anonymous requests get 401."""
    response = Client().get('/api/files')

    assert response.status_code == HTTPStatus.UNAUTHORIZED


@pytest.mark.django_db
def test_upload_file(api_client, user, mock_s3, sample_upload):
    """Test multipart upload creates the file and accounts its size."""
    response = api_client.post('/api/files/upload', {'file': sample_upload})

    assert response.status_code == HTTPStatus.CREATED
    payload = response.json()
    assert payload['name'] == 'notes.txt'
    assert payload['type'] == 'text/plain'
    assert payload['size'] == 17
    assert payload['folder_id'] is None
    assert payload['url'] == f'/api/files/{payload["id"]}/download'

    storage = api_client.get('/api/user/storage').json()
    assert storage['storage_used'] == 17


@pytest.mark.django_db
def test_upload_file_into_folder(api_client, user, mock_s3, sample_upload):
    """Test upload with folder_id places the file in the folder."""
    folder = create_folder(user, 'Documents')

    response = api_client.post(
        '/api/files/upload',
        {'file': sample_upload, 'folder_id': folder.id},
    )

    assert response.status_code == HTTPStatus.CREATED
    assert response.json()['folder_id'] == folder.id


@pytest.mark.django_db
def test_upload_without_file(api_client, mock_s3):
    """Test upload without a file part answers 400."""
    response = api_client.post('/api/files/upload', {})

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert 'file' in response.json()['errors']


@pytest.mark.django_db
def test_upload_too_large(api_client, mock_s3, settings):
    """Test uploads above the size limit answer 400."""
    settings.DRIVE_MAX_UPLOAD_BYTES = 5
    upload = SimpleUploadedFile('big.bin', b'0123456789')

    response = api_client.post('/api/files/upload', {'file': upload})

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert not File.objects.exists()


@pytest.mark.django_db
def test_upload_quota_exceeded(api_client, user, mock_s3, sample_upload):
    """Test an upload that doesn't fit answers 400."""
    UserQuota.objects.create(user=user, quota_bytes=10, used_bytes=0)

    response = api_client.post('/api/files/upload', {'file': sample_upload})

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json()['message'].startswith('Not enough storage space')
    assert not File.objects.exists()


@pytest.mark.django_db
def test_list_files(api_client, user, make_file):
    """Test GET lists root files, or a folder's with folderId."""
    folder = create_folder(user, 'Documents')
    make_file(user, name='root.txt')
    make_file(user, name='inside.txt', folder=folder)

    root = api_client.get('/api/files').json()
    inside = api_client.get('/api/files', {'folderId': folder.id}).json()

    assert [item['name'] for item in root] == ['root.txt']
    assert [item['name'] for item in inside] == ['inside.txt']


@pytest.mark.django_db
def test_list_files_unknown_view(api_client, user, make_file):
    """Test an unknown view answers an empty list."""
    make_file(user)

    response = api_client.get('/api/files', {'view': 'bogus'})

    assert response.status_code == HTTPStatus.OK
    assert response.json() == []


@pytest.mark.django_db
def test_star_then_trash_file(api_client, user, make_file):
    """Test a starred file moves to the trash view when trashed."""
    file_instance = make_file(user)
    url = f'/api/files/{file_instance.id}'

    starred = api_client.patch(
        url,
        {'starred': True},
        content_type='application/json',
    ).json()
    assert starred['starred'] is True
    starred_view = api_client.get('/api/files', {'view': 'starred'}).json()
    assert [item['id'] for item in starred_view] == [file_instance.id]

    trashed = api_client.patch(
        url,
        {'in_trash': True},
        content_type='application/json',
    ).json()
    assert trashed['in_trash'] is True
    assert trashed['deleted_at'] is not None
    assert api_client.get('/api/files', {'view': 'starred'}).json() == []
    trash_view = api_client.get('/api/files', {'view': 'trash'}).json()
    assert [item['id'] for item in trash_view] == [file_instance.id]


@pytest.mark.django_db
def test_rename_and_move_file(api_client, user, make_file):
    """Test PATCH renames and moves in one request."""
    folder = create_folder(user, 'Documents')
    file_instance = make_file(user, name='draft.txt')

    response = api_client.patch(
        f'/api/files/{file_instance.id}',
        {'name': 'final.txt', 'folder_id': folder.id},
        content_type='application/json',
    )

    assert response.status_code == HTTPStatus.OK
    payload = response.json()
    assert payload['name'] == 'final.txt'
    assert payload['folder_id'] == folder.id


@pytest.mark.django_db
def test_move_file_into_foreign_folder(
    api_client,
    user,
    other_user,
    make_file,
):
    """Test moving into another user's folder answers 400."""
    folder = create_folder(other_user, 'Private')
    file_instance = make_file(user)

    response = api_client.patch(
        f'/api/files/{file_instance.id}',
        {'folder_id': folder.id},
        content_type='application/json',
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST


@pytest.mark.django_db
def test_update_foreign_file(api_client, other_user, make_file):
    """Test another user's file answers 403."""
    file_instance = make_file(other_user)

    response = api_client.patch(
        f'/api/files/{file_instance.id}',
        {'starred': True},
        content_type='application/json',
    )

    assert response.status_code == HTTPStatus.FORBIDDEN


@pytest.mark.django_db
def test_delete_file(api_client, user, make_file):
    """Test DELETE removes the file and frees its space."""
    file_instance = make_file(user, size_bytes=500)

    response = api_client.delete(f'/api/files/{file_instance.id}')

    assert response.status_code == HTTPStatus.NO_CONTENT
    assert not File.objects.exists()
    assert api_client.get('/api/user/storage').json()['storage_used'] == 0


@pytest.mark.django_db
def test_delete_missing_file(api_client):
    """Test deleting a missing file answers 404."""
    response = api_client.delete('/api/files/99999')

    assert response.status_code == HTTPStatus.NOT_FOUND


@pytest.mark.django_db
def test_download_file(api_client, user, mock_s3, sample_upload):
    """Test download streams the blob as an attachment."""
    file_id = api_client.post(
        '/api/files/upload',
        {'file': sample_upload},
    ).json()['id']

    response = api_client.get(f'/api/files/{file_id}/download')

    assert response.status_code == HTTPStatus.OK
    assert b''.join(response.streaming_content) == b'test file content'
    assert 'attachment' in response['Content-Disposition']
    assert 'notes.txt' in response['Content-Disposition']


@pytest.mark.django_db
def test_download_missing_blob(api_client, user, mock_s3, make_file):
    """Test a record without blob answers 404."""
    file_instance = make_file(user)

    response = api_client.get(f'/api/files/{file_instance.id}/download')

    assert response.status_code == HTTPStatus.NOT_FOUND


@pytest.mark.django_db
def test_empty_trash(api_client, user, make_file):
    """Test emptying the trash reports the number of deleted items."""
    trashed = make_file(user, name='trashed.txt')
    make_file(user, name='kept.txt')
    api_client.patch(
        f'/api/files/{trashed.id}',
        {'in_trash': True},
        content_type='application/json',
    )

    response = api_client.post('/api/trash/empty')

    assert response.status_code == HTTPStatus.OK
    assert response.json() == {'deleted': 1}
    assert [item.name for item in File.objects.all()] == ['kept.txt']


@pytest.mark.django_db
def test_storage_info(api_client, user, make_file):
    """Test storage endpoint reports usage against the limit."""
    make_file(user, size_bytes=1024)

    response = api_client.get('/api/user/storage')

    assert response.json() == {
        'storage_used': 1024,
        'storage_limit': 15 * 1024 * 1024 * 1024,
        'storage_percentage': pytest.approx(
            1024 / (15 * 1024 * 1024 * 1024) * 100,
        ),
    }


@pytest.mark.django_db
def test_rejected_patch_keeps_file_in_place(
    api_client,
    user,
    make_file,
    monkeypatch,
):
    """Test a failure after the move rolls the move back."""
    folder = create_folder(user, 'Documents')
    file_instance = make_file(user)

    def failing_update(file_id, **changes):
        raise ValidationError('Update refused')

    monkeypatch.setattr(file_operations, 'update_file', failing_update)

    response = api_client.patch(
        f'/api/files/{file_instance.id}',
        {'folder_id': folder.id, 'starred': True},
        content_type='application/json',
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    file_instance.refresh_from_db()
    assert file_instance.folder_id is None


@pytest.mark.django_db
def test_rename_file_to_blank(api_client, user, make_file):
    """Test a blank name answers 400 and keeps the old name."""
    folder = create_folder(user, 'Documents')
    file_instance = make_file(user, name='draft.txt')

    response = api_client.patch(
        f'/api/files/{file_instance.id}',
        {'name': '   ', 'folder_id': folder.id},
        content_type='application/json',
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    file_instance.refresh_from_db()
    assert file_instance.name == 'draft.txt'
    assert file_instance.folder_id is None


@pytest.mark.django_db
def test_list_files_malformed_folder_id(api_client, user, make_file):
    """Test a non-numeric folderId answers 400 instead of the root."""
    make_file(user)

    response = api_client.get('/api/files', {'folderId': 'abc'})

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json()['errors'] == ['folderId must be an integer']
