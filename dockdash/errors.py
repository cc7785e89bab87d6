"""Engine error kinds and their mapping to HTTP responses.

Every failure coming out of the Docker SDK is translated into one of the
``EngineError`` subclasses below, so routes can report distinct status codes
(404, 409, 503, 500) instead of collapsing everything into a single 500.
"""

from typing import Optional

import requests
from docker.errors import APIError, DockerException, NotFound
from fastapi import HTTPException, status


class EngineError(Exception):
    """Base error for any failed container engine call."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "ENGINE_ERROR"

    def __init__(self, message: str, explanation: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.explanation = explanation

    def __str__(self) -> str:
        if self.explanation and self.explanation != self.message:
            return f"{self.message}: {self.explanation}"
        return self.message


class EngineNotFound(EngineError):
    """Referenced container, image, network or volume does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class ContainerNotFound(EngineNotFound):
    """Referenced container does not exist."""


class EngineConflict(EngineError):
    """Engine refused the operation in the object's current state."""

    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"


class ContainerNotRunning(EngineConflict):
    """Operation needs a running container."""

    code = "CONTAINER_NOT_RUNNING"


class EngineUnavailable(EngineError):
    """Engine socket unreachable, timed out, or client never initialized."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "ENGINE_UNAVAILABLE"


class ContainerRecreateFailed(EngineError):
    """Update-env failed after the original container was removed.

    The container named ``name`` may no longer exist; callers should re-list
    containers and decide whether to retry.
    """

    code = "CONTAINER_RECREATE_FAILED"

    def __init__(self, name: str, step: str, cause: Exception):
        super().__init__(
            f"Container '{name}' was removed but recreation failed at step '{step}'",
            str(cause),
        )
        self.name = name
        self.step = step
        self.cause = cause


class EnvUpdateRolledBack(EngineError):
    """Update-env failed after removal; the original container was restored."""

    code = "ENV_UPDATE_ROLLED_BACK"

    def __init__(self, name: str, step: str, restored_id: str, cause: Exception):
        super().__init__(
            f"Environment update for '{name}' failed at step '{step}'; "
            f"original container restored as {restored_id[:12]}",
            str(cause),
        )
        self.name = name
        self.step = step
        self.restored_id = restored_id
        self.cause = cause


def translate_docker_error(exc: Exception, resource: str = "") -> EngineError:
    """Map a Docker SDK (or transport) exception to an ``EngineError`` kind.

    Args:
        exc: Exception raised by the docker SDK.
        resource: Identifier the call was made for, used in messages.

    Returns:
        The matching ``EngineError`` subclass instance.
    """
    if isinstance(exc, EngineError):
        return exc

    if isinstance(exc, NotFound):
        return EngineNotFound(f"'{resource}' not found", exc.explanation)

    if isinstance(exc, APIError):
        explanation = exc.explanation or str(exc)
        if exc.status_code in (status.HTTP_304_NOT_MODIFIED, status.HTTP_409_CONFLICT):
            return EngineConflict(f"Conflict on '{resource}'", explanation)
        return EngineError(f"Engine rejected request for '{resource}'", explanation)

    if isinstance(exc, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)):
        return EngineUnavailable("Container engine unreachable", str(exc))

    if isinstance(exc, DockerException):
        return EngineUnavailable("Container engine error", str(exc))

    return EngineError(f"Unexpected engine failure for '{resource}'", str(exc))


def to_http_exception(exc: EngineError, message: str) -> HTTPException:
    """Build the HTTPException a route raises for an engine failure.

    The detail dict is turned into an ``ErrorResponse`` body by the app's
    exception handler.
    """
    return HTTPException(
        status_code=exc.status_code,
        detail={"error": message, "detail": str(exc), "code": exc.code},
    )
