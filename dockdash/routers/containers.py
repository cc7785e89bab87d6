"""Container endpoints router."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from dockdash.docker_client import DockerClient, run_engine_call
from dockdash.env_update import EnvironmentUpdater
from dockdash.errors import EngineError, to_http_exception
from dockdash.models import (
    ActionResponse,
    DeleteResponse,
    ErrorResponse,
    ExecRequest,
    ExecResponse,
    GatewayConfig,
    UpdateEnvRequest,
    UpdateEnvResponse,
)
from dockdash.state import get_config, get_docker_client, get_env_updater

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/containers", tags=["containers"])

ENGINE_ERRORS = {
    404: {"model": ErrorResponse, "description": "Container not found"},
    409: {"model": ErrorResponse, "description": "Invalid container state"},
    500: {"model": ErrorResponse, "description": "Engine call failed"},
    503: {"model": ErrorResponse, "description": "Engine unavailable"},
}


@router.get(
    "",
    summary="List all containers",
    description="List all containers, including stopped ones, as reported by the engine",
)
async def list_containers(
    docker_client: DockerClient = Depends(get_docker_client),
) -> list[dict]:
    """Get list of all containers, running or not."""
    try:
        return await run_engine_call(docker_client.list_containers, all=True)
    except EngineError as e:
        logger.error(f"Failed to list containers: {e}")
        raise to_http_exception(e, "Failed to fetch containers")


@router.get("/{container_id}", summary="Inspect a container", responses=ENGINE_ERRORS)
async def inspect_container(
    container_id: str,
    docker_client: DockerClient = Depends(get_docker_client),
) -> dict:
    """Get the engine's inspect payload for a container."""
    try:
        return await run_engine_call(docker_client.inspect_container, container_id)
    except EngineError as e:
        logger.error(f"Failed to inspect container '{container_id}': {e}")
        raise to_http_exception(e, f"Failed to fetch container {container_id}")


@router.delete(
    "/{container_id}",
    response_model=DeleteResponse,
    summary="Remove a container",
    responses=ENGINE_ERRORS,
)
async def remove_container(
    container_id: str,
    force: bool = False,
    docker_client: DockerClient = Depends(get_docker_client),
) -> DeleteResponse:
    """Remove a container. Running containers need ``force=true``."""
    try:
        await run_engine_call(docker_client.remove_container, container_id, force=force)
    except EngineError as e:
        logger.error(f"Failed to remove container '{container_id}': {e}")
        raise to_http_exception(e, f"Failed to delete container {container_id}")
    return DeleteResponse(message=f"Container {container_id} deleted successfully")


@router.get(
    "/{container_id}/logs",
    response_class=PlainTextResponse,
    summary="Get container logs",
    description="Last lines of stdout and stderr, merged, as plain text",
    responses=ENGINE_ERRORS,
)
async def get_container_logs(
    container_id: str,
    docker_client: DockerClient = Depends(get_docker_client),
    config: GatewayConfig = Depends(get_config),
) -> PlainTextResponse:
    """Get the tail of a container's logs."""
    try:
        logs = await run_engine_call(
            docker_client.get_container_logs, container_id, tail=config.logs_tail
        )
    except EngineError as e:
        logger.error(f"Failed to get logs for container '{container_id}': {e}")
        raise to_http_exception(e, f"Failed to fetch logs for container {container_id}")
    return PlainTextResponse(logs)


@router.get("/{container_id}/stats", summary="Get container stats", responses=ENGINE_ERRORS)
async def get_container_stats(
    container_id: str,
    docker_client: DockerClient = Depends(get_docker_client),
) -> dict:
    """Get a one-shot resource usage snapshot."""
    try:
        return await run_engine_call(docker_client.get_container_stats, container_id)
    except EngineError as e:
        logger.error(f"Failed to get stats for container '{container_id}': {e}")
        raise to_http_exception(e, f"Failed to fetch stats for container {container_id}")


@router.post(
    "/{container_id}/start",
    response_model=ActionResponse,
    summary="Start a container",
    responses=ENGINE_ERRORS,
)
async def start_container(
    container_id: str,
    docker_client: DockerClient = Depends(get_docker_client),
) -> ActionResponse:
    try:
        await run_engine_call(docker_client.start_container, container_id)
    except EngineError as e:
        logger.error(f"Failed to start container '{container_id}': {e}")
        raise to_http_exception(e, f"Failed to start container {container_id}")
    return ActionResponse()


@router.post(
    "/{container_id}/stop",
    response_model=ActionResponse,
    summary="Stop a container",
    responses=ENGINE_ERRORS,
)
async def stop_container(
    container_id: str,
    docker_client: DockerClient = Depends(get_docker_client),
    config: GatewayConfig = Depends(get_config),
) -> ActionResponse:
    try:
        await run_engine_call(
            docker_client.stop_container, container_id, timeout=config.stop_timeout
        )
    except EngineError as e:
        logger.error(f"Failed to stop container '{container_id}': {e}")
        raise to_http_exception(e, f"Failed to stop container {container_id}")
    return ActionResponse()


@router.post(
    "/{container_id}/restart",
    response_model=ActionResponse,
    summary="Restart a container",
    responses=ENGINE_ERRORS,
)
async def restart_container(
    container_id: str,
    docker_client: DockerClient = Depends(get_docker_client),
    config: GatewayConfig = Depends(get_config),
) -> ActionResponse:
    try:
        await run_engine_call(
            docker_client.restart_container, container_id, timeout=config.stop_timeout
        )
    except EngineError as e:
        logger.error(f"Failed to restart container '{container_id}': {e}")
        raise to_http_exception(e, f"Failed to restart container {container_id}")
    return ActionResponse()


@router.post(
    "/{container_id}/exec",
    response_model=ExecResponse,
    summary="Run a command in a container",
    responses={400: {"model": ErrorResponse, "description": "Invalid command"}, **ENGINE_ERRORS},
)
async def exec_in_container(
    container_id: str,
    request: ExecRequest,
    docker_client: DockerClient = Depends(get_docker_client),
) -> ExecResponse:
    """Run a command to completion inside a running container.

    Example Request:
        ```json
        {
          "command": ["ls", "-la", "/app"]
        }
        ```
    """
    try:
        output = await run_engine_call(docker_client.exec_command, container_id, request.command)
    except EngineError as e:
        logger.error(f"Failed to execute command in container '{container_id}': {e}")
        raise to_http_exception(e, f"Failed to execute command in container {container_id}")
    return ExecResponse(output=output)


@router.post(
    "/{container_id}/update-env",
    response_model=UpdateEnvResponse,
    summary="Replace a container's environment",
    description="Recreate the container under the same name with a new environment",
    responses={400: {"model": ErrorResponse, "description": "Invalid env list"}, **ENGINE_ERRORS},
)
async def update_container_env(
    container_id: str,
    request: UpdateEnvRequest,
    updater: EnvironmentUpdater = Depends(get_env_updater),
) -> UpdateEnvResponse:
    """Replace the environment variables of a container.

    Docker cannot edit the environment of an existing container, so the
    container is stopped, removed and recreated with the same image, command
    and host configuration, then started. The engine assigns a new id; the
    name is kept. Concurrent updates of the same container are serialized.

    If the update fails after the original was removed, the error code is
    ``CONTAINER_RECREATE_FAILED`` (or ``ENV_UPDATE_ROLLED_BACK`` when rollback
    is enabled and succeeded), so the caller can re-list containers by name.

    Example Request:
        ```json
        {
          "env": ["DEBUG=1", "PORT=8080"]
        }
        ```

    Example Response:
        ```json
        {
          "success": true,
          "id": "4f6e1b2c9a0d...",
          "name": "web",
          "warnings": []
        }
        ```
    """
    try:
        return await updater.update(container_id, request.env)
    except EngineError as e:
        logger.error(f"Failed to update environment of container '{container_id}': {e}")
        raise to_http_exception(
            e, f"Failed to update environment variables for container {container_id}"
        )
