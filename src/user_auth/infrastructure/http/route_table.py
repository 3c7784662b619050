"""Explicit per-route table with access-guard wiring."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

from fastapi import APIRouter, Depends, Request

from user_auth.infrastructure.http.auth_guard import AuthenticatedIdentity, RequestAccessGuard


@dataclass(frozen=True)
class RouteSpec:
    """One HTTP route and whether it may be reached without a token."""

    path: str
    method: str
    is_public: bool
    handler: Callable[..., Any]
    status_code: int = 200
    response_model: Any = None


def build_guard_dependency(
    *,
    access_guard: RequestAccessGuard,
    is_public: bool,
) -> Callable[[Request], Awaitable[None]]:
    """Build a dependency that authorizes the request before the handler body runs."""

    async def require_access(request: Request) -> None:
        request.state.identity = access_guard.authorize(
            authorization_header=request.headers.get("authorization"),
            is_public=is_public,
        )

    return require_access


def mount_routes(
    router: APIRouter,
    *,
    routes: Sequence[RouteSpec],
    access_guard: RequestAccessGuard,
) -> APIRouter:
    """Register each table entry on the router with its guard dependency."""

    for route in routes:
        router.add_api_route(
            route.path,
            route.handler,
            methods=[route.method],
            status_code=route.status_code,
            response_model=route.response_model,
            dependencies=[
                Depends(
                    build_guard_dependency(access_guard=access_guard, is_public=route.is_public)
                )
            ],
        )
    return router


def current_identity(request: Request) -> AuthenticatedIdentity | None:
    """Return identity attached by the guard for this request, if any."""

    return getattr(request.state, "identity", None)
