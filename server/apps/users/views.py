"""JSON session endpoints: register, log in, log out, current user.

Unsafe requests need the ``X-CSRFToken`` header set to the value of the
``csrftoken`` cookie. ``GET /api/csrf`` issues that cookie; logging in
rotates it, so clients re-read the cookie after each login.
"""

from http import HTTPStatus
from typing import Any

from django.contrib.auth import authenticate, login, logout
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.middleware.csrf import get_token
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_http_methods

from server.apps.drive.http import (
    error_response,
    json_endpoint,
    parse_json_body,
    validated,
)
from server.apps.users.forms import LoginForm, RegisterForm
from server.apps.users.logic.user_operations import create_user
from server.apps.users.models import User


def user_payload(user: User) -> dict[str, Any]:
    """Serialize a user without credentials."""
    return {
        'id': user.id,
        'username': user.username,
        'name': user.name,
        'avatar': user.avatar,
        'created_at': user.date_joined.isoformat(),
    }


@require_http_methods(['GET'])
@ensure_csrf_cookie
@json_endpoint(login_required=False)
def csrf(request: HttpRequest) -> HttpResponse:
    """Set the CSRF cookie and return its token."""
    return JsonResponse({'csrf_token': get_token(request)})


@require_http_methods(['POST'])
@json_endpoint(login_required=False)
def register(request: HttpRequest) -> HttpResponse:
    """Create an account and start a session for it."""
    cleaned = validated(RegisterForm(parse_json_body(request)))
    user = create_user(**cleaned)
    login(request, user, backend='django.contrib.auth.backends.ModelBackend')
    return JsonResponse(user_payload(user), status=HTTPStatus.CREATED)


@require_http_methods(['POST'])
@json_endpoint(login_required=False)
def login_view(request: HttpRequest) -> HttpResponse:
    """Start a session from username and password."""
    cleaned = validated(LoginForm(parse_json_body(request)))
    user = authenticate(
        request,
        username=cleaned['username'],
        password=cleaned['password'],
    )
    if user is None:
        return error_response(
            'Invalid username or password',
            HTTPStatus.UNAUTHORIZED,
        )
    login(request, user)
    return JsonResponse(user_payload(user))


@require_http_methods(['POST'])
@json_endpoint(login_required=False)
def logout_view(request: HttpRequest) -> HttpResponse:
    """End the current session."""
    logout(request)
    return HttpResponse(status=HTTPStatus.NO_CONTENT)


@require_http_methods(['GET'])
@ensure_csrf_cookie
@json_endpoint()
def current_user(request: HttpRequest) -> HttpResponse:
    """Return the logged in user."""
    return JsonResponse(user_payload(request.user))
