"""JSON helpers for the API views.

Logic functions raise; ``json_endpoint`` turns those exceptions into
JSON error responses with the matching status code.
"""

import json
import logging
from collections.abc import Callable
from functools import wraps
from http import HTTPStatus
from typing import Any

from django import forms
from django.core.exceptions import (
    ObjectDoesNotExist,
    PermissionDenied,
    ValidationError,
)
from django.http import HttpRequest, HttpResponse, JsonResponse

from server.apps.drive.exceptions import (
    DuplicateFolderNameError,
    QuotaExceededError,
)

logger = logging.getLogger(__name__)

_View = Callable[..., HttpResponse]


def error_response(
    message: str,
    status: int,
    errors: Any = None,
) -> JsonResponse:
    """Build a JSON error response.

    Args:
        message: Human readable summary.
        status: HTTP status code.
        errors: Optional structured details (e.g., field errors).

    Returns:
        JsonResponse with ``message`` and, if given, ``errors``.
    """
    payload: dict[str, Any] = {'message': message}
    if errors is not None:
        payload['errors'] = errors
    return JsonResponse(payload, status=status)


def csrf_failure(request: HttpRequest, reason: str = '') -> HttpResponse:
    """Answer a failed CSRF check with a JSON 403."""
    logger.warning('CSRF check failed for %s: %s', request.path, reason)
    return error_response(
        f'CSRF verification failed: {reason}',
        HTTPStatus.FORBIDDEN,
    )


def parse_json_body(request: HttpRequest) -> dict[str, Any]:
    """Decode a JSON object request body.

    An empty body decodes to an empty dict.

    Args:
        request: Incoming request.

    Returns:
        Decoded object.

    Raises:
        ValidationError: If the body is not a JSON object.
    """
    if not request.body:
        return {}
    try:
        payload = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError) as error:
        raise ValidationError('Invalid JSON body') from error
    if not isinstance(payload, dict):
        raise ValidationError('JSON body must be an object')
    return payload


def validated(form: forms.Form) -> dict[str, Any]:
    """Validate a form and return its cleaned data.

    Args:
        form: Bound form.

    Returns:
        Cleaned data.

    Raises:
        ValidationError: With the form's field errors if invalid.
    """
    if not form.is_valid():
        raise ValidationError(form.errors.as_data())
    return form.cleaned_data


def json_endpoint(
    login_required: bool = True,
) -> Callable[[_View], _View]:
    """Decorate a view with authentication and error translation.

    Args:
        login_required: Answer 401 to anonymous requests.

    Returns:
        View decorator.
    """
    def decorator(view: _View) -> _View:
        @wraps(view)
        def wrapper(
            request: HttpRequest,
            *args: Any,
            **kwargs: Any,
        ) -> HttpResponse:
            if login_required and not request.user.is_authenticated:
                return error_response('Unauthorized', HTTPStatus.UNAUTHORIZED)
            try:
                return view(request, *args, **kwargs)
            except ObjectDoesNotExist as error:
                return error_response(str(error), HTTPStatus.NOT_FOUND)
            except PermissionDenied as error:
                return error_response(
                    str(error) or 'Forbidden',
                    HTTPStatus.FORBIDDEN,
                )
            except DuplicateFolderNameError as error:
                return error_response(str(error), HTTPStatus.CONFLICT)
            except QuotaExceededError as error:
                return error_response(str(error), HTTPStatus.BAD_REQUEST)
            except ValidationError as error:
                return error_response(
                    'Validation error',
                    HTTPStatus.BAD_REQUEST,
                    errors=_validation_details(error),
                )
            except Exception:
                logger.exception('Unhandled error in %s', view.__name__)
                return error_response(
                    'Internal server error',
                    HTTPStatus.INTERNAL_SERVER_ERROR,
                )
        return wrapper
    return decorator


def _validation_details(error: ValidationError) -> Any:
    if hasattr(error, 'error_dict'):
        return error.message_dict
    return error.messages
