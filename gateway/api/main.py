from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from addonmirror import __version__
from addonmirror.common.config import MirrorConfig, load_typed_config, parse_repositories
from addonmirror.common.errors import NotFoundError, ReloadError
from addonmirror.common.logger import configure_logging, get_logger
from addonmirror.service import build_service
from addonmirror.upstream.github import build_client
from gateway.api.middleware.access_log import AccessLogMiddleware
from gateway.api.routers import health, repository
from gateway.core.config import Settings, get_settings

logger = get_logger("gateway")


def create_app(
    settings: Optional[Settings] = None,
    mirror_config: Optional[MirrorConfig] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """Build the FastAPI application.

    The first reload runs during startup; if it fails the application does
    not start, unless allow_empty_start is set.

    Args:
        settings: Service settings (environment by default)
        mirror_config: Parsed repository configuration (loaded from
            settings.config_path by default)
        http_client: Client for the release API (owned by the caller when given)
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        config = mirror_config or load_typed_config(settings.config_path)
        configure_logging(config.logging)

        try:
            repositories = parse_repositories(settings.repositories_list) or config.repositories
        except ValueError as e:
            raise RuntimeError(f"Invalid REPOSITORIES setting: {e}") from e
        if not repositories:
            raise RuntimeError(
                f"No repositories configured (set REPOSITORIES or list them in {settings.config_path})"
            )

        client = http_client or build_client(config.upstream)
        service = build_service(config, client, repositories=repositories)
        app.state.service = service

        try:
            try:
                await service.reload()
            except ReloadError as e:
                if not settings.allow_empty_start:
                    raise RuntimeError(f"Initial repository reload failed: {e}") from e
                service.publish_empty()

            logger.info(f"Serving {len(service.store.current())} addons")
            yield
        finally:
            if http_client is None:
                await client.aclose()

    app = FastAPI(
        title=settings.app_name,
        description="Kodi addon repository built from GitHub releases",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(AccessLogMiddleware)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        logger.debug(f"{request.url.path}: {exc}")
        return PlainTextResponse("Not found", status_code=404)

    # Health first: the repository router ends in catch-all addon routes
    app.include_router(health.router)
    app.include_router(repository.router)

    return app


app = create_app()
