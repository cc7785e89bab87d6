"""Lifespan management for FastAPI app."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from dockdash.docker_client import DockerClient
from dockdash.errors import EngineError
from dockdash.state import get_docker_client_or_none, set_docker_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes the Docker client on startup and closes it on shutdown.
    """
    config = app.state.config

    # Startup
    logger.info(f"Starting dockdash ({config.mode} mode)...")

    # Docker client is optional at startup; routes answer 503 until it exists
    try:
        docker_client = DockerClient(
            base_url=config.docker_base_url, timeout=config.engine_timeout
        )
        set_docker_client(docker_client)
    except EngineError as e:
        logger.warning(f"Docker client initialization failed (Docker operations will be unavailable): {e}")
        set_docker_client(None)

    logger.info("Dockdash initialized successfully")

    yield

    # Shutdown
    logger.info("Shutting down dockdash...")
    docker_client = get_docker_client_or_none()
    if docker_client:
        docker_client.close()
    set_docker_client(None)
    logger.info("Dockdash shut down")
