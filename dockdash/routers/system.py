"""System endpoints router."""

import logging

from fastapi import APIRouter, Depends

from dockdash.docker_client import DockerClient, run_engine_call
from dockdash.errors import EngineError, to_http_exception
from dockdash.state import get_docker_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/system", tags=["system"])


@router.get("/info", summary="Engine system information")
async def get_system_info(
    docker_client: DockerClient = Depends(get_docker_client),
) -> dict:
    try:
        return await run_engine_call(docker_client.info)
    except EngineError as e:
        logger.error(f"Failed to get system info: {e}")
        raise to_http_exception(e, "Failed to fetch system info")


@router.get("/version", summary="Engine version")
async def get_system_version(
    docker_client: DockerClient = Depends(get_docker_client),
) -> dict:
    try:
        return await run_engine_call(docker_client.version)
    except EngineError as e:
        logger.error(f"Failed to get Docker version: {e}")
        raise to_http_exception(e, "Failed to fetch Docker version")
