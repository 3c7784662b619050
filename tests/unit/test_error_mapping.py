from __future__ import annotations

import json
from uuid import uuid4

import pytest

from user_auth.application.services.user_directory_service import (
    EmailAlreadyInUseError,
    UserNotFoundError,
)
from user_auth.infrastructure.http.auth_guard import InvalidAuthTokenError, MissingAuthTokenError
from user_auth.infrastructure.http.error_mapping import InvalidCredentialsError, to_error_response


def _body(exc: Exception) -> tuple[int, dict[str, object]]:
    response = to_error_response(exc)
    return response.status_code, json.loads(bytes(response.body))


@pytest.mark.parametrize(
    ("exc", "detail"),
    [
        (InvalidCredentialsError(), "invalid credentials"),
        (MissingAuthTokenError("missing bearer token"), "missing bearer token"),
        (InvalidAuthTokenError("invalid or expired auth token"), "invalid or expired auth token"),
    ],
)
def test_auth_errors_map_to_401_with_bearer_challenge(exc: Exception, detail: str) -> None:
    response = to_error_response(exc)

    assert response.status_code == 401
    assert json.loads(bytes(response.body)) == {"detail": detail}
    assert response.headers["www-authenticate"] == "Bearer"


def test_conflict_names_the_email_field() -> None:
    assert _body(EmailAlreadyInUseError()) == (
        409,
        {"detail": "email already in use", "field": "email"},
    )


def test_not_found_carries_no_identifier() -> None:
    user_id = uuid4()

    status, body = _body(UserNotFoundError(user_id=user_id))

    assert status == 404
    assert body == {"detail": "user not found"}
    assert str(user_id) not in json.dumps(body)


def test_unexpected_errors_become_opaque_500() -> None:
    status, body = _body(RuntimeError("connection string postgres://secret@db"))

    assert status == 500
    assert body == {"detail": "internal server error"}
