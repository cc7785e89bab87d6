"""Volume endpoints router."""

import logging

from fastapi import APIRouter, Depends, status

from dockdash.docker_client import DockerClient, run_engine_call
from dockdash.errors import EngineError, to_http_exception
from dockdash.models import DeleteResponse, ErrorResponse, VolumeCreateRequest
from dockdash.state import get_docker_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/volumes", tags=["volumes"])

ENGINE_ERRORS = {
    404: {"model": ErrorResponse, "description": "Volume not found"},
    409: {"model": ErrorResponse, "description": "Volume in use"},
    500: {"model": ErrorResponse, "description": "Engine call failed"},
    503: {"model": ErrorResponse, "description": "Engine unavailable"},
}


@router.get("", summary="List volumes")
async def list_volumes(
    docker_client: DockerClient = Depends(get_docker_client),
) -> dict:
    """Get the engine's volume listing (``Volumes`` and ``Warnings``)."""
    try:
        return await run_engine_call(docker_client.list_volumes)
    except EngineError as e:
        logger.error(f"Failed to list volumes: {e}")
        raise to_http_exception(e, "Failed to fetch volumes")


@router.get("/{name}", summary="Inspect a volume", responses=ENGINE_ERRORS)
async def inspect_volume(
    name: str,
    docker_client: DockerClient = Depends(get_docker_client),
) -> dict:
    try:
        return await run_engine_call(docker_client.inspect_volume, name)
    except EngineError as e:
        logger.error(f"Failed to inspect volume '{name}': {e}")
        raise to_http_exception(e, f"Failed to fetch volume {name}")


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create a volume",
    responses={400: {"model": ErrorResponse, "description": "Invalid request"}, **ENGINE_ERRORS},
)
async def create_volume(
    request: VolumeCreateRequest,
    docker_client: DockerClient = Depends(get_docker_client),
) -> dict:
    try:
        return await run_engine_call(
            docker_client.create_volume,
            request.name,
            driver=request.driver,
            driver_opts=request.driver_opts,
            labels=request.labels,
        )
    except EngineError as e:
        logger.error(f"Failed to create volume '{request.name}': {e}")
        raise to_http_exception(e, "Failed to create volume")


@router.delete(
    "/{name}",
    response_model=DeleteResponse,
    summary="Remove a volume",
    responses=ENGINE_ERRORS,
)
async def remove_volume(
    name: str,
    docker_client: DockerClient = Depends(get_docker_client),
) -> DeleteResponse:
    try:
        await run_engine_call(docker_client.remove_volume, name)
    except EngineError as e:
        logger.error(f"Failed to remove volume '{name}': {e}")
        raise to_http_exception(e, f"Failed to delete volume {name}")
    return DeleteResponse(message=f"Volume {name} deleted successfully")
