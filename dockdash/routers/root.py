"""Root endpoint router."""

from fastapi import APIRouter

from dockdash import __version__

router = APIRouter(tags=["root"])


@router.get(
    "/",
    summary="API Information",
    description="Get API information and links to documentation",
    response_description="API metadata and documentation links",
)
async def root():
    """Root endpoint with API information and documentation links.

    Returns:
        API metadata including version and links to interactive documentation.
    """
    return {
        "message": "Dockdash API",
        "version": __version__,
        "docs": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_schema": "/openapi.json",
        },
        "description": "REST gateway for managing Docker containers, images, networks and volumes",
    }
