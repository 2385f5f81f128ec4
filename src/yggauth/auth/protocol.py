"""Yggdrasil wire protocol: request payloads and response interpretation.

Responses are always read as text first and interpreted afterwards.  Login
and refresh bodies go through a two-step decode: the success shape
(:class:`~yggauth.models.LoginResponse`) is tried first, then the error
shape (:class:`~yggauth.models.ErrorResponse`); when neither matches, the
original decode error is surfaced.  Decoding steps return their failure as
a value so the order of attempts is visible in one place
(:func:`decode_login`).
"""

from __future__ import annotations

from typing import Any, Optional, TypeVar, Union

import httpx
from pydantic import BaseModel, ValidationError

from yggauth.exceptions import JsonError, MissingProfileError, RequestError
from yggauth.models import Agent, ErrorResponse, LoginResponse, SelectedProfile

AUTHENTICATE = "authenticate"
REFRESH = "refresh"
INVALIDATE = "invalidate"

TWO_FACTOR_ERROR = "ForbiddenOperationException"
TWO_FACTOR_MESSAGE = "Account protected with two factor auth."

_M = TypeVar("_M", bound=BaseModel)


# --- Request payloads ---


def _agent() -> dict[str, Any]:
    return Agent().model_dump()


def authenticate_payload(username: str, password: str) -> dict[str, Any]:
    """Body of an ``authenticate`` request.

    No ``clientToken`` is sent, so the server issues one.
    """
    return {
        "agent": _agent(),
        "username": username,
        "password": password,
        "requestUser": True,
    }


def refresh_payload(access_token: str, client_token: str) -> dict[str, Any]:
    return {"accessToken": access_token, "clientToken": client_token}


def invalidate_payload(access_token: str, client_token: str) -> dict[str, Any]:
    return {
        "agent": _agent(),
        "accessToken": access_token,
        "clientToken": client_token,
        "requestUser": True,
    }


# --- Response decoding ---


def _decode(model: type[_M], text: str) -> Union[_M, JsonError]:
    try:
        return model.model_validate_json(text)
    except ValidationError as exc:
        return JsonError(str(exc), text)


def decode_error(text: str) -> Optional[ErrorResponse]:
    """Decode *text* as an ``{error, errorMessage}`` body, or return ``None``."""
    result = _decode(ErrorResponse, text)
    if isinstance(result, ErrorResponse):
        return result
    return None


def decode_login(text: str) -> Union[LoginResponse, ErrorResponse]:
    """Decode a login/refresh body as the success shape, else as the error shape.

    Raises:
        JsonError: The decode error of the success shape, when the body
            matches neither shape.
    """
    result = _decode(LoginResponse, text)
    if isinstance(result, LoginResponse):
        return result
    error = decode_error(text)
    if error is not None:
        return error
    raise result


def interpret_login(response: httpx.Response) -> Union[LoginResponse, ErrorResponse]:
    """Interpret an ``authenticate`` or ``refresh`` response.

    A non-2xx response whose body is an error payload yields that payload;
    any other non-2xx response raises a status error.

    Raises:
        RequestError: Non-2xx status without an error payload.
        JsonError: 2xx status with a body of neither shape.
    """
    text = response.text
    if not response.is_success:
        error = decode_error(text)
        if error is None:
            raise RequestError.from_status(response.status_code, str(response.url))
        return error
    return decode_login(text)


def require_profile(login: LoginResponse) -> SelectedProfile:
    """Return the selected profile of *login*.

    Raises:
        MissingProfileError: The server did not select a profile.
    """
    if login.selected_profile is None:
        raise MissingProfileError()
    return login.selected_profile


def is_two_factor_challenge(error: ErrorResponse) -> bool:
    """Whether *error* is Ely.by's "account protected with two factor auth" answer."""
    return error.error == TWO_FACTOR_ERROR and error.error_message == TWO_FACTOR_MESSAGE
