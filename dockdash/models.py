"""Pydantic models for dockdash API and configuration."""

from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator


class GatewayConfig(BaseModel):
    """Root configuration model."""

    host: str = Field(default="0.0.0.0", description="Address the gateway listens on")
    port: int = Field(default=3001, description="Port the gateway listens on", examples=[3001])
    mode: Literal["development", "production"] = Field(
        default="development",
        description="Development enables CORS for the dashboard origins; production disables it",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Origins allowed to call the API in development mode",
    )
    docker_base_url: str = Field(
        default="unix://var/run/docker.sock", description="Docker daemon socket URL"
    )
    engine_timeout: int = Field(
        default=60, description="Docker SDK request timeout in seconds"
    )
    stop_timeout: Optional[int] = Field(
        default=None,
        description="Seconds to wait before killing on stop. Engine default when unset.",
    )
    logs_tail: int = Field(
        default=100, ge=1, description="Number of log lines returned by the logs endpoint"
    )
    rollback_on_failure: bool = Field(
        default=False,
        description="Restore the original container when update-env fails after removal",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Root log level"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value


# API Request/Response Models


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")
    code: Optional[str] = Field(None, description="Machine-readable error kind", examples=["NOT_FOUND"])


class ActionResponse(BaseModel):
    """Response for container start/stop/restart."""

    success: bool = Field(default=True, description="Whether the action succeeded")


class DeleteResponse(BaseModel):
    """Response for removal of a container, image, network or volume."""

    success: bool = Field(default=True)
    message: str = Field(..., description="Human-readable confirmation")


class UpdateEnvRequest(BaseModel):
    """Request body for POST /api/containers/{id}/update-env."""

    env: list[str] = Field(
        ...,
        description="Replacement environment, KEY=VALUE entries. Replaces the whole list.",
        examples=[["DEBUG=1", "PORT=8080"]],
    )


class UpdateEnvResponse(BaseModel):
    """Response for a completed environment update."""

    success: bool = Field(default=True)
    id: str = Field(..., description="Engine id of the recreated container")
    name: str = Field(..., description="Container name, unchanged across recreation")
    warnings: list[str] = Field(default_factory=list, description="Engine create warnings")


class ExecRequest(BaseModel):
    """Request body for POST /api/containers/{id}/exec."""

    command: list[str] = Field(
        ..., min_length=1, description="Command and arguments", examples=[["ls", "-la"]]
    )


class ExecResponse(BaseModel):
    """Output of a command run inside a container."""

    success: bool = Field(default=True)
    output: str = Field(..., description="Combined stdout and stderr")


class NetworkCreateRequest(BaseModel):
    """Request body for POST /api/networks."""

    name: str = Field(..., min_length=1, description="Network name")
    driver: str = Field(default="bridge", description="Network driver")
    subnet: Optional[str] = Field(None, description="Subnet in CIDR form", examples=["172.28.0.0/16"])
    gateway: Optional[str] = Field(None, description="Gateway address, used only with subnet")
    internal: bool = Field(default=False, description="Restrict external access")


class VolumeCreateRequest(BaseModel):
    """Request body for POST /api/volumes."""

    name: str = Field(..., min_length=1, description="Volume name")
    driver: str = Field(default="local", description="Volume driver")
    driver_opts: dict[str, str] = Field(default_factory=dict, alias="driverOpts")
    labels: dict[str, str] = Field(default_factory=dict)

    model_config = {"populate_by_name": True}
