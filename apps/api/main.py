"""User auth API entrypoint and HTTP route wiring."""

from __future__ import annotations

import logging

import uvicorn
from fastapi import APIRouter, FastAPI

from user_auth.application.ports.password_hasher_port import PasswordHasherPort
from user_auth.application.ports.token_service_port import TokenServicePort
from user_auth.application.ports.user_repository_port import UserRepositoryPort
from user_auth.application.services.auth_service import AuthService
from user_auth.application.services.user_directory_service import UserDirectoryService
from user_auth.config.settings import Settings, load_settings
from user_auth.infrastructure.db.session import create_session_factory
from user_auth.infrastructure.db.user_repository import SqlAlchemyUserRepository
from user_auth.infrastructure.http.auth_guard import RequestAccessGuard
from user_auth.infrastructure.http.auth_router import build_auth_router
from user_auth.infrastructure.http.error_mapping import register_error_handlers
from user_auth.infrastructure.http.request_logging import RequestLoggingMiddleware
from user_auth.infrastructure.http.route_table import RouteSpec, mount_routes
from user_auth.infrastructure.http.users_router import build_users_router
from user_auth.infrastructure.logging import configure_logging
from user_auth.infrastructure.security.password_hasher import BcryptPasswordHasher
from user_auth.infrastructure.security.token_service import JwtTokenService

API_HOST = "0.0.0.0"
API_PORT = 3000
logger = logging.getLogger(__name__)


def build_token_service(settings: Settings) -> JwtTokenService:
    """Build token service from configured secret, algorithm and ttl."""

    return JwtTokenService(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        token_ttl=settings.jwt_expires_in,
    )


def build_user_repository(database_url: str) -> SqlAlchemyUserRepository:
    """Build user repository with SQLAlchemy session factory."""

    return SqlAlchemyUserRepository(create_session_factory(database_url))


def build_health_router(*, access_guard: RequestAccessGuard) -> APIRouter:
    """Build router exposing the public liveness probe."""

    async def health() -> dict[str, str]:
        return {"status": "ok"}

    routes = [RouteSpec(path="/health", method="GET", is_public=True, handler=health)]
    return mount_routes(APIRouter(tags=["health"]), routes=routes, access_guard=access_guard)


def create_app(
    *,
    user_repository: UserRepositoryPort | None = None,
    password_hasher: PasswordHasherPort | None = None,
    token_service: TokenServicePort | None = None,
    database_url: str | None = None,
) -> FastAPI:
    """Create FastAPI app with explicitly wired auth and user services."""

    settings = None
    if token_service is None or (user_repository is None and database_url is None):
        settings = load_settings()
        configure_logging(level=settings.log_level)
        if database_url is None:
            database_url = settings.database_url
        if token_service is None:
            token_service = build_token_service(settings)

    if user_repository is None:
        assert database_url is not None
        user_repository = build_user_repository(database_url)
    if password_hasher is None:
        password_hasher = (
            BcryptPasswordHasher(rounds=settings.bcrypt_rounds)
            if settings is not None
            else BcryptPasswordHasher()
        )

    assert token_service is not None

    user_directory = UserDirectoryService(users=user_repository, password_hasher=password_hasher)
    auth_service = AuthService(
        user_directory=user_directory,
        password_hasher=password_hasher,
        token_service=token_service,
    )
    access_guard = RequestAccessGuard(token_service=token_service)

    app = FastAPI(title="user-auth-api")
    app.add_middleware(RequestLoggingMiddleware)
    register_error_handlers(app)
    app.include_router(build_health_router(access_guard=access_guard))
    app.include_router(build_auth_router(auth_service=auth_service, access_guard=access_guard))
    app.include_router(
        build_users_router(user_directory=user_directory, access_guard=access_guard)
    )
    logger.info("api_app_created")
    return app


def run_asgi_server(*, host: str = API_HOST, port: int = API_PORT) -> None:
    """Run the API as a long-lived ASGI process using application factory mode."""

    uvicorn.run(
        "apps.api.main:create_app",
        host=host,
        port=port,
        factory=True,
    )


def main() -> None:
    """Run API runtime process."""

    run_asgi_server()


if __name__ == "__main__":
    main()
