"""Global state management and FastAPI dependencies for dockdash."""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status

from dockdash.docker_client import DockerClient
from dockdash.env_update import ContainerLocks, EnvironmentUpdater
from dockdash.models import GatewayConfig

# Global state (private)
_docker_client: Optional[DockerClient] = None
_container_locks = ContainerLocks()


# State setters (for lifespan.py)
def set_docker_client(client: Optional[DockerClient]):
    """Set the global Docker client."""
    global _docker_client
    _docker_client = client


def get_docker_client_or_none() -> Optional[DockerClient]:
    """Get Docker client without raising (for shutdown)."""
    return _docker_client


# FastAPI Dependencies (for endpoints)
def get_config(request: Request) -> GatewayConfig:
    """Get the configuration the app was built with."""
    return request.app.state.config


def get_docker_client() -> DockerClient:
    """Get Docker client.

    Returns:
        DockerClient instance.

    Raises:
        HTTPException: If Docker client is not available.
    """
    if _docker_client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "error": "Docker client not available. Ensure Docker socket is mounted.",
                "code": "ENGINE_UNAVAILABLE",
            },
        )
    return _docker_client


def get_container_locks() -> ContainerLocks:
    """Get the process-wide per-container lock registry."""
    return _container_locks


def get_env_updater(
    docker_client: DockerClient = Depends(get_docker_client),
    config: GatewayConfig = Depends(get_config),
    locks: ContainerLocks = Depends(get_container_locks),
) -> EnvironmentUpdater:
    """Build the environment updater for a request."""
    return EnvironmentUpdater(
        docker_client,
        locks,
        stop_timeout=config.stop_timeout,
        rollback_on_failure=config.rollback_on_failure,
    )
