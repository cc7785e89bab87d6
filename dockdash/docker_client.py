"""Docker client for container management.

Wraps the docker SDK's low-level API so engine payloads are passed through
unmodified, and translates SDK exceptions into ``dockdash.errors`` kinds.
"""

import asyncio
import functools
import logging
from typing import Callable, Optional, TypeVar

import docker
import requests
from docker.errors import DockerException, NotFound
from docker.types import IPAMConfig, IPAMPool

from dockdash.errors import (
    ContainerNotFound,
    ContainerNotRunning,
    EngineError,
    EngineNotFound,
    translate_docker_error,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

SHELL_COMMANDS = ("/bin/sh", "/bin/bash")


async def run_engine_call(func: Callable[..., T], *args, **kwargs) -> T:
    """Run a blocking engine call in the default executor.

    The docker SDK is synchronous; each call is dispatched to a worker thread
    so the event loop keeps serving other requests while it waits.
    """
    loop = asyncio.get_event_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))


class DockerClient:
    """Client for interacting with Docker daemon via Docker socket."""

    def __init__(self, base_url: str = "unix://var/run/docker.sock", timeout: int = 60):
        """Initialize Docker client.

        Args:
            base_url: Docker daemon socket URL. Defaults to Unix socket.
            timeout: Request timeout in seconds.

        Raises:
            EngineUnavailable: If the daemon cannot be reached.
        """
        try:
            self.client = docker.DockerClient(base_url=base_url, timeout=timeout)
            # Test connection
            self.client.ping()
            logger.info(f"Docker client connected to {base_url}")
        except (DockerException, requests.exceptions.RequestException) as e:
            logger.error(f"Failed to initialize Docker client: {e}")
            raise translate_docker_error(e, base_url) from e

    @property
    def api(self) -> docker.APIClient:
        return self.client.api

    def _call(
        self,
        operation: str,
        resource: str,
        func: Callable[..., T],
        *args,
        not_found: type[EngineNotFound] = EngineNotFound,
        **kwargs,
    ) -> T:
        """Invoke an SDK call and translate its failures.

        Args:
            operation: Short description used in log messages.
            resource: Identifier the call targets.
            func: Bound docker SDK method.
            not_found: Error kind raised when the engine answers 404.

        Raises:
            EngineError: Tagged error kind for the failure.
        """
        try:
            return func(*args, **kwargs)
        except NotFound as e:
            logger.warning(f"{operation}: '{resource}' not found")
            raise not_found(f"'{resource}' not found", e.explanation) from e
        except (DockerException, requests.exceptions.RequestException) as e:
            error = translate_docker_error(e, resource)
            logger.error(f"Failed to {operation} '{resource}': {error}")
            raise error from e
        except (TypeError, ValueError) as e:
            # SDK argument handling fails before any request is sent
            logger.error(f"Failed to {operation} '{resource}': {e}")
            raise EngineError(f"Engine call '{operation}' failed", str(e)) from e

    # Containers

    def list_containers(self, all: bool = True) -> list[dict]:
        """List containers as returned by the engine.

        Args:
            all: If True, include stopped containers.
        """
        return self._call("list containers", "*", self.api.containers, all=all)

    def inspect_container(self, container_id: str) -> dict:
        """Get the full inspect payload of a container.

        Raises:
            ContainerNotFound: If container not found.
        """
        return self._call(
            "inspect container",
            container_id,
            self.api.inspect_container,
            container_id,
            not_found=ContainerNotFound,
        )

    def get_container_logs(self, container_id: str, tail: int = 100) -> str:
        """Get the last ``tail`` lines of stdout and stderr, merged.

        Args:
            container_id: Container name or ID.
            tail: Number of lines to return from the end.

        Returns:
            Container logs as string.
        """
        logs = self._call(
            "get logs for container",
            container_id,
            self.api.logs,
            container_id,
            stdout=True,
            stderr=True,
            stream=False,
            tail=tail,
            not_found=ContainerNotFound,
        )
        return logs.decode("utf-8", errors="replace") if isinstance(logs, bytes) else logs

    def get_container_stats(self, container_id: str) -> dict:
        """Get a one-shot stats snapshot of a container."""
        return self._call(
            "get stats for container",
            container_id,
            self.api.stats,
            container_id,
            stream=False,
            not_found=ContainerNotFound,
        )

    def start_container(self, container_id: str) -> None:
        self._call(
            "start container", container_id, self.api.start, container_id,
            not_found=ContainerNotFound,
        )
        logger.info(f"Started container '{container_id}'")

    def stop_container(self, container_id: str, timeout: Optional[int] = None) -> None:
        """Stop a container.

        Args:
            container_id: Container name or ID.
            timeout: Seconds before force killing. Engine default when None.
        """
        self._call(
            "stop container", container_id, self.api.stop, container_id,
            timeout=timeout, not_found=ContainerNotFound,
        )
        logger.info(f"Stopped container '{container_id}'")

    def restart_container(self, container_id: str, timeout: Optional[int] = None) -> None:
        """Restart a container.

        Args:
            container_id: Container name or ID.
            timeout: Seconds before force killing. SDK default when None.
        """
        # APIClient.restart adds timeout to the connection timeout, so None is not accepted
        kwargs = {} if timeout is None else {"timeout": timeout}
        self._call(
            "restart container", container_id, self.api.restart, container_id,
            not_found=ContainerNotFound, **kwargs,
        )
        logger.info(f"Restarted container '{container_id}'")

    def remove_container(
        self, container_id: str, force: bool = False, volumes: bool = False
    ) -> None:
        """Remove a container.

        Args:
            container_id: Container name or ID.
            force: Kill the container first if it is running.
            volumes: Also remove anonymous volumes. Named volumes are never removed.
        """
        self._call(
            "remove container", container_id, self.api.remove_container, container_id,
            v=volumes, force=force, not_found=ContainerNotFound,
        )
        logger.info(f"Removed container '{container_id}'")

    def create_container(self, config: dict, name: Optional[str] = None) -> dict:
        """Create a container from a raw engine config (``HostConfig`` included).

        Returns:
            Engine create response: ``{"Id": ..., "Warnings": [...]}``.
        """
        result = self._call(
            "create container", name or config.get("Image", ""),
            self.api.create_container_from_config, config, name,
        )
        logger.info(f"Created container '{name}' ({result['Id'][:12]})")
        return result

    def exec_command(self, container_id: str, command: list[str]) -> str:
        """Run a command to completion inside a running container.

        A TTY is allocated only for a bare shell command.

        Returns:
            Combined stdout and stderr output.

        Raises:
            ContainerNotRunning: If the container is not running.
        """
        info = self.inspect_container(container_id)
        if not info.get("State", {}).get("Running"):
            raise ContainerNotRunning(f"Container '{container_id}' is not running")

        tty = len(command) == 1 and command[0] in SHELL_COMMANDS
        exec_info = self._call(
            "create exec in container", container_id, self.api.exec_create,
            container_id, command, stdout=True, stderr=True, tty=tty,
            not_found=ContainerNotFound,
        )
        output = self._call(
            "run exec in container", container_id, self.api.exec_start,
            exec_info["Id"], tty=tty,
        )
        return output.decode("utf-8", errors="replace") if isinstance(output, bytes) else output

    # Images

    def list_images(self) -> list[dict]:
        return self._call("list images", "*", self.api.images)

    def inspect_image(self, image_id: str) -> dict:
        return self._call("inspect image", image_id, self.api.inspect_image, image_id)

    def remove_image(self, image_id: str, force: bool = False, noprune: bool = False) -> None:
        self._call(
            "remove image", image_id, self.api.remove_image, image_id,
            force=force, noprune=noprune,
        )
        logger.info(f"Removed image '{image_id}'")

    # System

    def info(self) -> dict:
        return self._call("get system info", "engine", self.api.info)

    def version(self) -> dict:
        return self._call("get engine version", "engine", self.api.version)

    def ping(self) -> bool:
        return self._call("ping engine", "engine", self.api.ping)

    # Networks

    def list_networks(self) -> list[dict]:
        """List networks, each replaced by its full inspect payload.

        A network whose inspect fails is returned as its list entry.
        """
        networks = self._call("list networks", "*", self.api.networks)
        detailed = []
        for network in networks:
            try:
                detailed.append(self.inspect_network(network["Id"]))
            except EngineError as e:
                logger.warning(f"Using list entry for network {network['Id'][:12]}: {e}")
                detailed.append(network)
        return detailed

    def inspect_network(self, network_id: str) -> dict:
        return self._call("inspect network", network_id, self.api.inspect_network, network_id)

    def create_network(
        self,
        name: str,
        driver: str = "bridge",
        subnet: Optional[str] = None,
        gateway: Optional[str] = None,
        internal: bool = False,
    ) -> dict:
        """Create a network; duplicate names are rejected by the engine.

        Returns:
            Engine create response: ``{"Id": ..., "Warning": ...}``.
        """
        pools = [IPAMPool(subnet=subnet, gateway=gateway)] if subnet else []
        result = self._call(
            "create network", name, self.api.create_network, name,
            driver=driver,
            ipam=IPAMConfig(driver="default", pool_configs=pools),
            check_duplicate=True,
            internal=internal,
        )
        logger.info(f"Created network '{name}'")
        return result

    def remove_network(self, network_id: str) -> None:
        self._call("remove network", network_id, self.api.remove_network, network_id)
        logger.info(f"Removed network '{network_id}'")

    # Volumes

    def list_volumes(self) -> dict:
        return self._call("list volumes", "*", self.api.volumes)

    def inspect_volume(self, name: str) -> dict:
        return self._call("inspect volume", name, self.api.inspect_volume, name)

    def create_volume(
        self,
        name: str,
        driver: str = "local",
        driver_opts: Optional[dict[str, str]] = None,
        labels: Optional[dict[str, str]] = None,
    ) -> dict:
        result = self._call(
            "create volume", name, self.api.create_volume, name,
            driver=driver, driver_opts=driver_opts or {}, labels=labels or {},
        )
        logger.info(f"Created volume '{name}'")
        return result

    def remove_volume(self, name: str) -> None:
        self._call("remove volume", name, self.api.remove_volume, name)
        logger.info(f"Removed volume '{name}'")

    def close(self) -> None:
        """Close the Docker client connection."""
        if hasattr(self, "client"):
            self.client.close()
