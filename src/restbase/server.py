"""
restbase server.

This module builds the FastAPI application serving a resource registry and
runs it with uvicorn.
"""
import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine

from restbase.api.app import create_api_router, system_router
from restbase.api.middleware import add_error_handlers, add_logging_middleware
from restbase.api.registry import ResourceRegistry, load_registry
from restbase.config import ENV_PREFIX, RestBaseConfig, get_config
from restbase.storage import get_engine, get_session_factory
from restbase.utils.logging import logger
from restbase.version import __version__

LOG_FILE_PATH = "logs/restbase.log"

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "()": "uvicorn.logging.DefaultFormatter",
            "fmt": "%(levelprefix)s %(message)s",
            "use_colors": None,
        },
        "access": {
            "()": "uvicorn.logging.AccessFormatter",
            "fmt": '%(levelprefix)s %(client_addr)s - "%(request_line)s" %(status_code)s',
        },
        "file": {
            "format": "%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "access": {
            "formatter": "access",
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
        },
        "rich_console": {
            "()": "restbase.utils.logging.formatter.create_rich_console_handler",
        },
        "rotating_file": {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "file",
            "level": "DEBUG",
            "filename": LOG_FILE_PATH,
            "maxBytes": 2 * 1024 * 1024,  # 2 MB
            "backupCount": 5,
            "encoding": "utf-8",
        },
    },
    "loggers": {
        "uvicorn": {"handlers": ["rich_console"], "level": "INFO", "propagate": False},
        "uvicorn.error": {"level": "INFO", "propagate": True},
        "uvicorn.access": {"handlers": ["access", "rotating_file"], "level": "INFO", "propagate": False},
        "sqlalchemy.engine": {"handlers": ["rotating_file"], "level": "WARNING", "propagate": False},
        "restbase": {
            "handlers": ["rich_console", "rotating_file"],
            "level": "DEBUG",
            "propagate": False,
        },
    },
    "root": {
        "level": "DEBUG",
        "handlers": ["rich_console", "rotating_file"],
    },
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Server lifespan context manager.

    Args:
        app: FastAPI application instance
    """
    registry = app.state.registry
    logger.info(
        "restbase server started and ready",
        component="server",
        operation="startup",
        context={"resources": registry.names()},
    )
    try:
        yield
    finally:
        if app.state.owns_engine:
            app.state.engine.dispose()
        logger.info("Server shutdown complete", component="server", operation="shutdown")


def create_server(
    registry: Optional[ResourceRegistry] = None,
    config: Optional[RestBaseConfig] = None,
    engine: Optional[Engine] = None,
) -> FastAPI:
    """Create and configure the FastAPI server.

    Args:
        registry: Resources to serve; loaded from ``api.registry`` when omitted
        config: Configuration; the global configuration when omitted
        engine: Database engine; built from ``database.url`` when omitted

    Returns:
        Configured FastAPI application
    """
    config = config or get_config()

    if registry is None:
        if config.api.registry:
            registry = load_registry(config.api.registry)
        else:
            logger.warning("No resource registry configured", component="server", operation="startup")
            registry = ResourceRegistry()

    owns_engine = engine is None
    if engine is None:
        engine = get_engine(config.database.url, config.database.echo)

    app = FastAPI(
        title="restbase",
        description="RESTful JSON resource API",
        version=__version__,
        lifespan=lifespan,
        debug=config.server.debug,
    )

    app.state.config = config
    app.state.registry = registry
    app.state.engine = engine
    app.state.owns_engine = owns_engine
    app.state.session_factory = get_session_factory(engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    add_logging_middleware(app)
    add_error_handlers(app)

    app.include_router(system_router)
    app.include_router(create_api_router(registry), prefix=config.api.prefix)

    return app


def configure_log_levels(log_level: str) -> None:
    """Apply the final log level to ``LOGGING_CONFIG``."""
    final_log_level = log_level.upper()

    LOGGING_CONFIG["root"]["level"] = final_log_level
    LOGGING_CONFIG["loggers"]["restbase"]["level"] = final_log_level
    LOGGING_CONFIG["loggers"]["uvicorn.access"]["level"] = final_log_level
    uvicorn_base_level = "DEBUG" if final_log_level == "DEBUG" else "INFO"
    LOGGING_CONFIG["loggers"]["uvicorn"]["level"] = uvicorn_base_level
    LOGGING_CONFIG["loggers"]["uvicorn.error"]["level"] = uvicorn_base_level
    LOGGING_CONFIG["handlers"]["rich_console"]["detailed"] = final_log_level == "DEBUG"


def start_server(
    host: Optional[str] = None,
    port: Optional[int] = None,
    workers: Optional[int] = None,
    log_level: Optional[str] = None,
    registry: Optional[str] = None,
    reload: bool = False,
) -> None:
    """Start the restbase server using dictConfig for logging.

    Args:
        host: Bind address
        port: Bind port
        workers: Number of worker processes
        log_level: Log level
        registry: ``module:attribute`` of the registry to serve
        reload: Reload on code changes
    """
    config = get_config()
    server_host = host or config.server.host
    server_port = port or config.server.port
    server_workers = workers or config.server.workers

    if registry:
        # Worker processes rebuild their configuration from the environment
        config.api.registry = registry
        os.environ[f"{ENV_PREFIX}API__REGISTRY"] = registry

    log_dir = os.path.dirname(LOG_FILE_PATH)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    configure_log_levels(log_level or config.server.log_level)

    logging.info(f"Preparing to start Uvicorn on {server_host}:{server_port}...")

    uvicorn.run(
        "restbase.server:create_server",
        host=server_host,
        port=server_port,
        workers=server_workers,
        log_config=LOGGING_CONFIG,
        reload=reload,
        factory=True,
    )
