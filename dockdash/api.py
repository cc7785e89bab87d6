"""FastAPI application for the dockdash REST gateway."""

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dockdash import __version__
from dockdash.config import load_config
from dockdash.lifespan import lifespan
from dockdash.models import ErrorResponse, GatewayConfig
from dockdash.routers import (
    root,
    containers,
    images,
    system,
    networks,
    volumes,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def http_exception_handler(request: Request, exc: HTTPException):
    """Custom exception handler for HTTP exceptions."""
    if isinstance(exc.detail, dict):
        content = ErrorResponse(**exc.detail)
    else:
        content = ErrorResponse(error=exc.detail or "Unknown error")
    return JSONResponse(
        status_code=exc.status_code,
        content=content.model_dump(),
        headers=exc.headers,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed request bodies and parameters as 400."""
    errors = exc.errors()
    fields = ", ".join(".".join(str(part) for part in err["loc"]) for err in errors)
    logger.warning(f"Rejected {request.method} {request.url.path}: invalid {fields}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(
            error=f"Invalid request: {fields}",
            detail="; ".join(err["msg"] for err in errors),
            code="BAD_REQUEST",
        ).model_dump(),
    )


def create_app(config: Optional[GatewayConfig] = None) -> FastAPI:
    """Build the gateway application.

    Args:
        config: Gateway configuration. Loaded from file and environment when None.

    Returns:
        Configured FastAPI app. The Docker client is created by its lifespan.
    """
    if config is None:
        config = load_config()
    logging.getLogger().setLevel(config.log_level.upper())

    app = FastAPI(
        title="Dockdash API",
        description="""
    REST gateway for a web-based Docker management console.

    Every endpoint forwards to the Docker engine and returns its payload
    unmodified. The dashboard polls these endpoints to render container,
    image and system state.

    ## Features

    * List, inspect, start, stop, restart and remove containers
    * Container logs (last lines) and one-shot stats
    * Replace a container's environment variables (recreates the container)
    * Run a command inside a running container
    * Images, networks and volumes management
    * Engine system info and version

    ## Documentation

    * **Swagger UI**: Available at `/docs` (interactive API testing)
    * **ReDoc**: Available at `/redoc` (alternative documentation)
    * **OpenAPI Schema**: Available at `/openapi.json`
    """,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        openapi_tags=[
            {
                "name": "root",
                "description": "Root endpoint and API information",
            },
            {
                "name": "containers",
                "description": "Container operations: list, inspect, logs, stats, control, exec and environment updates.",
            },
            {
                "name": "images",
                "description": "List, inspect and remove images.",
            },
            {
                "name": "system",
                "description": "Engine system information and version.",
            },
            {
                "name": "networks",
                "description": "List, inspect, create and remove networks.",
            },
            {
                "name": "volumes",
                "description": "List, inspect, create and remove volumes.",
            },
        ],
    )
    app.state.config = config

    # The dashboard dev server runs on another origin; production serves it same-origin
    if config.mode == "development":
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )

    # Include routers
    app.include_router(root.router)
    app.include_router(containers.router)
    app.include_router(images.router)
    app.include_router(system.router)
    app.include_router(networks.router)
    app.include_router(volumes.router)

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    return app


app = create_app()
