"""Input validation for account endpoints."""

from typing import Final

from django import forms

_USERNAME_MAX_LENGTH: Final = 150
_NAME_MAX_LENGTH: Final = 150


class RegisterForm(forms.Form):
    """Body of POST /api/register."""

    username = forms.CharField(max_length=_USERNAME_MAX_LENGTH)
    password = forms.CharField(min_length=8)
    name = forms.CharField(max_length=_NAME_MAX_LENGTH, required=False)
    avatar = forms.URLField(required=False)


class LoginForm(forms.Form):
    """Body of POST /api/login."""

    username = forms.CharField(max_length=_USERNAME_MAX_LENGTH)
    password = forms.CharField()
