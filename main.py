"""
Vacation Tracker - Entry Point.

Headless ASGI application for uvicorn execution.

Usage:
    uvicorn main:app --host 0.0.0.0 --port 8787 --reload

Or run directly:
    python main.py
"""

import logging
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI

from core.app_context import AppContext
from core.database import close_db_connections, init_database
from core.logging_config import setup_logging
from core.registry import ModuleLoader, ModuleRegistry
from core.server import create_base_app, set_registry

# Module directory path
MODULES_DIR = "modules"


# -----------------------------------------------------------------------------
# Application Factory
# -----------------------------------------------------------------------------


def create_app_context() -> AppContext:
    """Create and configure the AppContext."""
    return AppContext()


def create_registry(context: AppContext) -> ModuleRegistry:
    """Create and configure the ModuleRegistry with loaded modules."""
    registry = ModuleRegistry()
    registry.set_context(context)

    # Load modules from /modules directory
    modules_path = Path(__file__).parent / MODULES_DIR
    loader = ModuleLoader(registry)
    count = loader.load_from_directory(str(modules_path), package=MODULES_DIR)
    context.log_event(f"Loaded {count} module(s) from {MODULES_DIR}/", "LOADER")

    return registry


def create_fastapi_app(context: AppContext, registry: ModuleRegistry) -> FastAPI:
    """Create the FastAPI application with all routers configured."""
    app = create_base_app(context, registry, version=_read_version())
    set_registry(app, registry)

    # Register module API routers
    for module in registry.get_all_modules():
        module_router = module.get_api_router()
        if module_router is not None:
            app.include_router(module_router, prefix="/api")
            context.log_event(
                f"Registered API router for module: {module.get_module_name()} at /api",
                "LOADER",
            )

    return app


def _read_version() -> str:
    try:
        return version("vacation-tracker")
    except PackageNotFoundError:
        return "0.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Handles startup and shutdown events.
    """
    logger = logging.getLogger(__name__)
    context: AppContext = app.state.context
    registry: ModuleRegistry | None = app.state.registry

    # Startup
    logger.info("Starting Vacation Tracker...")

    try:
        await init_database()
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise

    # Call async_startup on all modules (event loop is now running)
    if registry:
        await registry.async_startup_all(app)
        logger.info("Module async startup completed")

    port = context.config.get("server.port", 8787)
    context.set_server_status(True, port)
    context.log_event("Application started successfully", "SUCCESS")
    logger.info(f"API health: http://localhost:{port}/api/health")

    yield

    # Shutdown
    logger.info("Shutting down Vacation Tracker...")

    if registry:
        await registry.async_shutdown_all(app)
        registry.shutdown_all()

    context.set_server_status(False)
    await close_db_connections()
    logger.info("Cleanup complete")


# -----------------------------------------------------------------------------
# Module-level Application Instance
# -----------------------------------------------------------------------------

# Create core components
_context = create_app_context()

# Setup logging first
setup_logging(_context.config.get("app.log_level", "INFO"))

_registry = create_registry(_context)

# Create FastAPI app with lifespan
_app = create_fastapi_app(_context, _registry)
_app.router.lifespan_context = lifespan

# Export for uvicorn
app = _app


# -----------------------------------------------------------------------------
# Direct Execution
# -----------------------------------------------------------------------------


def main() -> None:
    """Run the application directly with uvicorn."""
    host = _context.config.get("server.host", "127.0.0.1")
    port = _context.config.get("server.port", 8787)
    debug = _context.config.get("app.debug", False)

    uvicorn_config = {
        "host": host,
        "port": port,
        "reload": debug,
        "log_level": "warning",  # Suppress uvicorn info logs
        "access_log": False,     # Disable uvicorn access logs
    }

    # If reload is enabled, exclude logs, data and cache directories
    if debug:
        uvicorn_config["reload_excludes"] = [
            "logs/*",
            "data/*",
            "**/__pycache__/*",
            "**/*.pyc",
            ".venv/*",
            "*.log",
        ]

    uvicorn.run("main:app", **uvicorn_config)


if __name__ == "__main__":
    main()
