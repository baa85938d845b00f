"""Input validation for the drive API.

Update forms are partial: ``changes()`` only returns the fields that
were present in the request body, so an omitted flag is left alone
instead of being reset.
"""

from typing import Any, Final

from django import forms
from django.conf import settings
from django.core.exceptions import ValidationError

from server.apps.drive.models import Share

_NAME_MAX_LENGTH: Final = 255
_DEFAULT_MAX_UPLOAD_BYTES: Final = 2 * 1024 * 1024 * 1024


class PartialUpdateForm(forms.Form):
    """Form for PATCH bodies where absent fields mean "unchanged"."""

    def changes(self) -> dict[str, Any]:
        """Cleaned values of the fields sent in the request.

        Returns:
            Field name to cleaned value, for submitted fields only.
        """
        return {
            field_name: field_value
            for field_name, field_value in self.cleaned_data.items()
            if field_name in self.data
        }


class FolderCreateForm(forms.Form):
    """Body of POST /api/folders."""

    name = forms.CharField(max_length=_NAME_MAX_LENGTH)
    parent_id = forms.IntegerField(required=False, min_value=1)


class FolderUpdateForm(PartialUpdateForm):
    """Body of PATCH /api/folders/<id>."""

    name = forms.CharField(max_length=_NAME_MAX_LENGTH, required=False)
    parent_id = forms.IntegerField(required=False, min_value=1)
    starred = forms.NullBooleanField(required=False)
    in_trash = forms.NullBooleanField(required=False)


class FileUpdateForm(PartialUpdateForm):
    """Body of PATCH /api/files/<id>."""

    name = forms.CharField(max_length=_NAME_MAX_LENGTH, required=False)
    folder_id = forms.IntegerField(required=False, min_value=1)
    starred = forms.NullBooleanField(required=False)
    in_trash = forms.NullBooleanField(required=False)


class FileUploadForm(forms.Form):
    """Multipart body of POST /api/files/upload."""

    file = forms.FileField()
    folder_id = forms.IntegerField(required=False, min_value=1)

    def clean_file(self) -> Any:
        """Reject uploads above the configured size limit."""
        uploaded_file = self.cleaned_data['file']
        limit = getattr(
            settings,
            'DRIVE_MAX_UPLOAD_BYTES',
            _DEFAULT_MAX_UPLOAD_BYTES,
        )
        if uploaded_file.size > limit:
            raise ValidationError(
                f'File is too large: {uploaded_file.size} bytes '
                f'(limit: {limit})',
            )
        return uploaded_file


class ShareCreateForm(forms.Form):
    """Body of POST /api/shares."""

    file_id = forms.IntegerField(required=False, min_value=1)
    folder_id = forms.IntegerField(required=False, min_value=1)
    access_type = forms.ChoiceField(
        choices=Share.AccessType.choices,
        required=False,
    )
    allow_download = forms.NullBooleanField(required=False)
    expiry_date = forms.DateTimeField(required=False)

    def clean_access_type(self) -> str:
        """Default to a public link."""
        return self.cleaned_data['access_type'] or Share.AccessType.PUBLIC

    def clean_allow_download(self) -> bool:
        """Default to allowing downloads."""
        allow_download = self.cleaned_data['allow_download']
        return True if allow_download is None else allow_download
