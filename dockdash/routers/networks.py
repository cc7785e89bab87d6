"""Network endpoints router."""

import logging

from fastapi import APIRouter, Depends, status

from dockdash.docker_client import DockerClient, run_engine_call
from dockdash.errors import EngineError, to_http_exception
from dockdash.models import DeleteResponse, ErrorResponse, NetworkCreateRequest
from dockdash.state import get_docker_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/networks", tags=["networks"])

ENGINE_ERRORS = {
    404: {"model": ErrorResponse, "description": "Network not found"},
    409: {"model": ErrorResponse, "description": "Network in use or duplicate"},
    500: {"model": ErrorResponse, "description": "Engine call failed"},
    503: {"model": ErrorResponse, "description": "Engine unavailable"},
}


@router.get("", summary="List networks")
async def list_networks(
    docker_client: DockerClient = Depends(get_docker_client),
) -> list[dict]:
    """Get all networks with their full inspect details."""
    try:
        return await run_engine_call(docker_client.list_networks)
    except EngineError as e:
        logger.error(f"Failed to list networks: {e}")
        raise to_http_exception(e, "Failed to fetch networks")


@router.get("/{network_id}", summary="Inspect a network", responses=ENGINE_ERRORS)
async def inspect_network(
    network_id: str,
    docker_client: DockerClient = Depends(get_docker_client),
) -> dict:
    try:
        return await run_engine_call(docker_client.inspect_network, network_id)
    except EngineError as e:
        logger.error(f"Failed to inspect network '{network_id}': {e}")
        raise to_http_exception(e, f"Failed to fetch network {network_id}")


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create a network",
    responses={400: {"model": ErrorResponse, "description": "Invalid request"}, **ENGINE_ERRORS},
)
async def create_network(
    request: NetworkCreateRequest,
    docker_client: DockerClient = Depends(get_docker_client),
) -> dict:
    """Create a network. The gateway is only applied together with a subnet.

    Example Request:
        ```json
        {
          "name": "backend",
          "driver": "bridge",
          "subnet": "172.28.0.0/16",
          "gateway": "172.28.0.1"
        }
        ```
    """
    try:
        return await run_engine_call(
            docker_client.create_network,
            request.name,
            driver=request.driver,
            subnet=request.subnet,
            gateway=request.gateway,
            internal=request.internal,
        )
    except EngineError as e:
        logger.error(f"Failed to create network '{request.name}': {e}")
        raise to_http_exception(e, "Failed to create network")


@router.delete(
    "/{network_id}",
    response_model=DeleteResponse,
    summary="Remove a network",
    responses=ENGINE_ERRORS,
)
async def remove_network(
    network_id: str,
    docker_client: DockerClient = Depends(get_docker_client),
) -> DeleteResponse:
    try:
        await run_engine_call(docker_client.remove_network, network_id)
    except EngineError as e:
        logger.error(f"Failed to remove network '{network_id}': {e}")
        raise to_http_exception(e, f"Failed to delete network {network_id}")
    return DeleteResponse(message=f"Network {network_id} deleted successfully")
