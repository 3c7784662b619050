"""FastAPI router for credential login."""

from __future__ import annotations

from fastapi import APIRouter

from user_auth.application.dto.user_models import LoginRequest, LoginResponse, UserResponse
from user_auth.application.services.auth_service import AuthOutcome, AuthService
from user_auth.infrastructure.http.auth_guard import RequestAccessGuard
from user_auth.infrastructure.http.error_mapping import InvalidCredentialsError
from user_auth.infrastructure.http.route_table import RouteSpec, mount_routes


def build_auth_router(
    *,
    auth_service: AuthService,
    access_guard: RequestAccessGuard,
) -> APIRouter:
    """Build router exposing the public login endpoint."""

    async def login(payload: LoginRequest) -> LoginResponse:
        result = await auth_service.authenticate(email=payload.email, password=payload.password)
        if result.outcome is not AuthOutcome.SUCCESS:
            raise InvalidCredentialsError()

        assert result.token is not None
        assert result.user is not None
        return LoginResponse(
            access_token=result.token.token,
            expires_at=result.token.expires_at,
            user=UserResponse.from_view(result.user),
        )

    routes = [
        RouteSpec(
            path="/auth/login",
            method="POST",
            is_public=True,
            handler=login,
            response_model=LoginResponse,
        ),
    ]
    return mount_routes(APIRouter(tags=["auth"]), routes=routes, access_guard=access_guard)
