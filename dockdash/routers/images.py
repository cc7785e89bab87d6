"""Image endpoints router."""

import logging

from fastapi import APIRouter, Depends

from dockdash.docker_client import DockerClient, run_engine_call
from dockdash.errors import EngineError, to_http_exception
from dockdash.models import DeleteResponse, ErrorResponse
from dockdash.state import get_docker_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/images", tags=["images"])

ENGINE_ERRORS = {
    404: {"model": ErrorResponse, "description": "Image not found"},
    409: {"model": ErrorResponse, "description": "Image in use"},
    500: {"model": ErrorResponse, "description": "Engine call failed"},
    503: {"model": ErrorResponse, "description": "Engine unavailable"},
}


@router.get("", summary="List images")
async def list_images(
    docker_client: DockerClient = Depends(get_docker_client),
) -> list[dict]:
    """Get list of all images as reported by the engine."""
    try:
        return await run_engine_call(docker_client.list_images)
    except EngineError as e:
        logger.error(f"Failed to list images: {e}")
        raise to_http_exception(e, "Failed to fetch images")


@router.get("/{image_id:path}", summary="Inspect an image", responses=ENGINE_ERRORS)
async def inspect_image(
    image_id: str,
    docker_client: DockerClient = Depends(get_docker_client),
) -> dict:
    try:
        return await run_engine_call(docker_client.inspect_image, image_id)
    except EngineError as e:
        logger.error(f"Failed to inspect image '{image_id}': {e}")
        raise to_http_exception(e, f"Failed to fetch image {image_id}")


@router.delete(
    "/{image_id:path}",
    response_model=DeleteResponse,
    summary="Remove an image",
    responses=ENGINE_ERRORS,
)
async def remove_image(
    image_id: str,
    force: bool = False,
    noprune: bool = False,
    docker_client: DockerClient = Depends(get_docker_client),
) -> DeleteResponse:
    """Remove an image.

    Args:
        image_id: Image id or reference.
        force: Remove even if tagged in multiple repositories or used by stopped containers.
        noprune: Keep untagged parent images.
    """
    try:
        await run_engine_call(
            docker_client.remove_image, image_id, force=force, noprune=noprune
        )
    except EngineError as e:
        logger.error(f"Failed to remove image '{image_id}': {e}")
        raise to_http_exception(e, f"Failed to delete image {image_id}")
    return DeleteResponse(message=f"Image {image_id} deleted successfully")
