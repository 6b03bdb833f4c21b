"""
FastAPI Application Factory.

Creates and configures the FastAPI application with middleware
and core API endpoints.
"""

from typing import TYPE_CHECKING
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from core.app_context import AppContext

if TYPE_CHECKING:
    from core.registry import ModuleRegistry

_logger = logging.getLogger(__name__)

DEV_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:8787",
    "http://127.0.0.1:8787",
]


def create_base_app(
    context: AppContext,
    registry: "ModuleRegistry | None" = None,
    title: str = "Vacation Tracker API",
    description: str = "Vacation requests, manager approvals and leave timeline",
    version: str = "1.0.0",
) -> FastAPI:
    """
    Create and configure the base FastAPI application.

    Args:
        context: Application context for logging and configuration.
        registry: Optional module registry.
        title: API title for OpenAPI documentation.
        description: API description for OpenAPI documentation.
        version: API version string.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(title=title, description=description, version=version)

    # Store references in app state for access in route handlers
    app.state.context = context
    app.state.registry = registry

    # Get allowed origins from configuration (defaults to BASE_URL only)
    config = context.config
    base_url = config.get("server.base_url", "")
    is_debug = config.get("app.debug", False)

    allowed_origins: list[str] = []
    if base_url:
        allowed_origins.append(base_url.rstrip("/"))

    # In debug mode, also allow the local dev frontend
    if is_debug:
        allowed_origins.extend(DEV_ORIGINS)

    if not allowed_origins:
        _logger.warning(
            "BASE_URL not configured and not in debug mode. "
            "CORS will reject all cross-origin requests."
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Manager-Token"],
    )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "no-referrer"
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    _register_core_routes(app)

    return app


def _register_core_routes(app: FastAPI) -> None:
    """Register core API routes (health check)."""

    @app.get("/health")
    @app.get("/api/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "Vacation Tracker"}


def set_registry(app: FastAPI, registry: "ModuleRegistry") -> None:
    """
    Set the module registry on the app.

    Args:
        app: FastAPI application instance.
        registry: Module registry instance.
    """
    app.state.registry = registry
