"""FastAPI router for user registration and CRUD endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query, Request, Response

from user_auth.application.dto.user_models import (
    UserCreateRequest,
    UserListResponse,
    UserResponse,
    UserUpdateRequest,
)
from user_auth.application.services.user_directory_service import (
    UserDirectoryService,
    UserNotFoundError,
    UserPatch,
    UserProfileInput,
)
from user_auth.infrastructure.http.auth_guard import RequestAccessGuard
from user_auth.infrastructure.http.route_table import RouteSpec, current_identity, mount_routes


def _parse_user_id(raw_user_id: str) -> UUID:
    try:
        return UUID(raw_user_id)
    except ValueError as exc:
        raise UserNotFoundError() from exc


def _actor_id(request: Request) -> UUID | None:
    identity = current_identity(request)
    return identity.user_id if identity is not None else None


def build_users_router(
    *,
    user_directory: UserDirectoryService,
    access_guard: RequestAccessGuard,
) -> APIRouter:
    """Build router exposing user registration and token-protected CRUD."""

    async def create_user(payload: UserCreateRequest) -> UserResponse:
        view = await user_directory.create_user(
            profile=UserProfileInput(
                email=payload.email,
                first_name=payload.first_name,
                last_name=payload.last_name,
            ),
            password=payload.password,
        )
        return UserResponse.from_view(view)

    async def list_users(
        page: int = Query(default=1),
        limit: int = Query(default=10),
    ) -> UserListResponse:
        result = await user_directory.list_users(page=page, limit=limit)
        return UserListResponse(
            items=[UserResponse.from_view(item) for item in result.items],
            total=result.total,
            page=result.page,
            limit=result.limit,
        )

    async def get_user(user_id: str) -> UserResponse:
        view = await user_directory.get_user(user_id=_parse_user_id(user_id))
        return UserResponse.from_view(view)

    async def update_user(
        user_id: str,
        payload: UserUpdateRequest,
        request: Request,
    ) -> UserResponse:
        view = await user_directory.update_user(
            user_id=_parse_user_id(user_id),
            patch=UserPatch(
                email=payload.email,
                password=payload.password,
                first_name=payload.first_name,
                last_name=payload.last_name,
                is_active=payload.is_active,
            ),
            actor_id=_actor_id(request),
        )
        return UserResponse.from_view(view)

    async def delete_user(user_id: str, request: Request) -> Response:
        await user_directory.remove_user(
            user_id=_parse_user_id(user_id),
            actor_id=_actor_id(request),
        )
        return Response(status_code=204)

    routes = [
        RouteSpec(
            path="/users",
            method="POST",
            is_public=True,
            handler=create_user,
            status_code=201,
            response_model=UserResponse,
        ),
        RouteSpec(
            path="/users",
            method="GET",
            is_public=False,
            handler=list_users,
            response_model=UserListResponse,
        ),
        RouteSpec(
            path="/users/{user_id}",
            method="GET",
            is_public=False,
            handler=get_user,
            response_model=UserResponse,
        ),
        RouteSpec(
            path="/users/{user_id}",
            method="PATCH",
            is_public=False,
            handler=update_user,
            response_model=UserResponse,
        ),
        RouteSpec(
            path="/users/{user_id}",
            method="DELETE",
            is_public=False,
            handler=delete_user,
            status_code=204,
        ),
    ]
    return mount_routes(APIRouter(tags=["users"]), routes=routes, access_guard=access_guard)
