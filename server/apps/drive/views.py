"""JSON API views for folders, files, shares and storage usage.

Views only parse input, check ownership and serialize; the work is
done in ``server.apps.drive.logic``.
"""

import logging
from http import HTTPStatus

from django.core.exceptions import ValidationError
from django.core.files.storage import default_storage
from django.db import transaction
from django.http import FileResponse, HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.http import require_http_methods

from server.apps.drive.forms import (
    FileUpdateForm,
    FileUploadForm,
    FolderCreateForm,
    FolderUpdateForm,
    ShareCreateForm,
)
from server.apps.drive.http import (
    error_response,
    json_endpoint,
    parse_json_body,
    validated,
)
from server.apps.drive.logic import (
    file_operations,
    folder_operations,
    listing_operations,
    quota_operations,
    share_operations,
    trash_operations,
)
from server.apps.drive.serializers import (
    file_payload,
    folder_payload,
    share_payload,
)

logger = logging.getLogger(__name__)


def _optional_int(request: HttpRequest, name: str) -> int | None:
    raw_value = request.GET.get(name)
    if not raw_value:
        return None
    try:
        return int(raw_value)
    except ValueError:
        raise ValidationError(
            f'{name} must be an integer',
        ) from None


def _without_unset_flags(changes: dict) -> dict:
    # Null starred/in_trash means "leave as is"
    return {
        field: value for field, value in changes.items()
        if value is not None or field not in {'starred', 'in_trash'}
    }


# Folders

@require_http_methods(['GET', 'POST'])
@json_endpoint()
def folders(request: HttpRequest) -> HttpResponse:
    """List folders (optionally a derived view) or create one."""
    if request.method == 'POST':
        cleaned = validated(FolderCreateForm(parse_json_body(request)))
        folder = folder_operations.create_folder(
            request.user,
            name=cleaned['name'],
            parent_id=cleaned['parent_id'],
        )
        return JsonResponse(folder_payload(folder), status=HTTPStatus.CREATED)

    view_name = request.GET.get('view')
    if view_name:
        queryset = listing_operations.folder_view(request.user, view_name)
    else:
        queryset = listing_operations.list_folders(
            request.user,
            parent_id=_optional_int(request, 'parentId'),
        )
    return JsonResponse(
        [folder_payload(folder) for folder in queryset],
        safe=False,
    )


@require_http_methods(['PATCH', 'DELETE'])
@json_endpoint()
def folder_detail(request: HttpRequest, folder_id: int) -> HttpResponse:
    """Update or permanently delete one of the user's folders."""
    folder_operations.get_owned_folder(request.user, folder_id)

    if request.method == 'DELETE':
        folder_operations.delete_folder(folder_id)
        return HttpResponse(status=HTTPStatus.NO_CONTENT)

    form = FolderUpdateForm(parse_json_body(request))
    validated(form)
    changes = _without_unset_flags(form.changes())

    # A PATCH applies whole or not at all
    with transaction.atomic():
        if 'parent_id' in changes:
            folder_operations.move_folder(folder_id, changes.pop('parent_id'))
        folder = folder_operations.update_folder(folder_id, **changes)
    return JsonResponse(folder_payload(folder))


# Files

@require_http_methods(['GET'])
@json_endpoint()
def files(request: HttpRequest) -> HttpResponse:
    """List files in a folder, or a derived view."""
    view_name = request.GET.get('view')
    if view_name:
        queryset = listing_operations.file_view(request.user, view_name)
    else:
        queryset = listing_operations.list_files(
            request.user,
            folder_id=_optional_int(request, 'folderId'),
        )
    return JsonResponse(
        [file_payload(file_instance) for file_instance in queryset],
        safe=False,
    )


@require_http_methods(['POST'])
@json_endpoint()
def upload(request: HttpRequest) -> HttpResponse:
    """Upload a file to the drive root or a folder."""
    cleaned = validated(FileUploadForm(request.POST, request.FILES))
    file_instance = file_operations.upload_file(
        request.user,
        cleaned['file'],
        folder_id=cleaned['folder_id'],
    )
    return JsonResponse(
        file_payload(file_instance),
        status=HTTPStatus.CREATED,
    )


@require_http_methods(['PATCH', 'DELETE'])
@json_endpoint()
def file_detail(request: HttpRequest, file_id: int) -> HttpResponse:
    """Update or permanently delete one of the user's files."""
    file_operations.get_owned_file(request.user, file_id)

    if request.method == 'DELETE':
        file_operations.delete_file(file_id)
        return HttpResponse(status=HTTPStatus.NO_CONTENT)

    form = FileUpdateForm(parse_json_body(request))
    validated(form)
    changes = _without_unset_flags(form.changes())

    with transaction.atomic():
        if 'folder_id' in changes:
            file_operations.move_file(
                request.user,
                file_id,
                changes.pop('folder_id'),
            )
        # Opening or editing a file outside the trash counts as an access
        if not changes.get('in_trash'):
            file_operations.touch_file(file_id)
        file_instance = file_operations.update_file(file_id, **changes)
    return JsonResponse(file_payload(file_instance))


@require_http_methods(['GET'])
@json_endpoint()
def download(request: HttpRequest, file_id: int) -> HttpResponse:
    """Stream one of the user's files as an attachment."""
    file_instance = file_operations.get_owned_file(request.user, file_id)

    if not default_storage.exists(file_instance.file.name):
        logger.warning(
            'Blob missing for file ID=%d: %s',
            file_id,
            file_instance.file.name,
        )
        return error_response(
            'File not found on storage',
            HTTPStatus.NOT_FOUND,
        )

    file_operations.touch_file(file_id)
    return FileResponse(
        file_instance.file.open('rb'),
        as_attachment=True,
        filename=file_instance.name,
        content_type=file_instance.mime_type,
    )


# Trash

@require_http_methods(['POST'])
@json_endpoint()
def empty_trash(request: HttpRequest) -> HttpResponse:
    """Permanently delete everything in the user's trash."""
    deleted = trash_operations.empty_trash(request.user)
    return JsonResponse({'deleted': deleted})


# Shares

@require_http_methods(['GET', 'POST'])
@json_endpoint()
def shares(request: HttpRequest) -> HttpResponse:
    """List the user's shares or create a new one."""
    if request.method == 'POST':
        cleaned = validated(ShareCreateForm(parse_json_body(request)))
        share = share_operations.create_share(request.user, **cleaned)
        return JsonResponse(
            share_payload(share, with_details=False),
            status=HTTPStatus.CREATED,
        )

    return JsonResponse(
        [share_payload(share) for share in share_operations.list_shares(
            request.user,
        )],
        safe=False,
    )


@require_http_methods(['GET', 'DELETE'])
@json_endpoint(login_required=False)
def share_detail(request: HttpRequest, key: str) -> HttpResponse:
    """Resolve a share token (public) or delete one of the user's shares.

    GET takes the share token, DELETE the share ID.
    """
    if request.method == 'DELETE':
        return _delete_share(request, key)

    share = share_operations.get_share_by_token(key)
    if share.is_expired():
        return error_response('Share has expired', HTTPStatus.FORBIDDEN)
    return JsonResponse(share_payload(share))


def _delete_share(request: HttpRequest, key: str) -> HttpResponse:
    if not request.user.is_authenticated:
        return error_response('Unauthorized', HTTPStatus.UNAUTHORIZED)

    try:
        share_id = int(key)
    except ValueError:
        share_id = None

    owned = share_id is not None and share_operations.list_shares(
        request.user,
    ).filter(id=share_id).exists()
    if not owned:
        return error_response('Share not found', HTTPStatus.NOT_FOUND)

    share_operations.delete_share(share_id)
    return HttpResponse(status=HTTPStatus.NO_CONTENT)


# Storage

@require_http_methods(['GET'])
@json_endpoint()
def storage_info(request: HttpRequest) -> HttpResponse:
    """Report the user's storage usage against their limit."""
    return JsonResponse(quota_operations.get_storage_info(request.user))
