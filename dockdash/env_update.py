"""Environment variable update by container recreation.

Docker cannot change the environment of an existing container, so an update
stops, removes and recreates the container under its original name with the
new ``Env`` list, then starts it. The sequence holds a per-identifier lock so
concurrent updates of the same container serialize instead of racing.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from dockdash.docker_client import DockerClient, run_engine_call
from dockdash.errors import ContainerRecreateFailed, EngineError, EnvUpdateRolledBack
from dockdash.models import UpdateEnvResponse

logger = logging.getLogger(__name__)

# Config keys carried from the inspected container into the new one
CONFIG_KEYS = (
    "Image",
    "Cmd",
    "Entrypoint",
    "ExposedPorts",
    "WorkingDir",
    "Labels",
    "User",
    "Tty",
    "OpenStdin",
    "StdinOnce",
    "StopSignal",
    "Volumes",
    "Healthcheck",
)

HOST_CONFIG_KEYS = (
    "Binds",
    "PortBindings",
    "RestartPolicy",
    "NetworkMode",
    "Privileged",
    "Devices",
    "VolumesFrom",
    "ExtraHosts",
    "CapAdd",
    "CapDrop",
    "Dns",
    "LogConfig",
    "Mounts",
)


class ContainerLocks:
    """Registry of per-container asyncio locks.

    An entry exists only while some request holds or waits on it.
    """

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, container_id: str):
        """Hold the exclusive lock for ``container_id`` for the block's duration."""
        lock = self._locks.setdefault(container_id, asyncio.Lock())
        self._users[container_id] = self._users.get(container_id, 0) + 1
        try:
            if lock.locked():
                logger.info(f"Waiting for pending update of container '{container_id}'")
            async with lock:
                yield
        finally:
            self._users[container_id] -= 1
            if self._users[container_id] == 0:
                del self._users[container_id]
                del self._locks[container_id]

    def is_locked(self, container_id: str) -> bool:
        lock = self._locks.get(container_id)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)


def container_name(info: dict) -> str:
    """Container name without the engine's leading slash."""
    return (info.get("Name") or "").lstrip("/")


def build_recreate_config(info: dict, env: list[str]) -> dict:
    """Build a create payload from an inspect payload with ``Env`` replaced.

    Args:
        info: Engine inspect payload of the original container.
        env: Replacement environment, used verbatim and in order.

    Returns:
        Raw engine create config including ``HostConfig``.
    """
    config = info.get("Config") or {}
    host_config = info.get("HostConfig") or {}

    new_config = {key: config[key] for key in CONFIG_KEYS if config.get(key) is not None}
    new_config["Env"] = list(env)
    new_config["HostConfig"] = {
        key: host_config[key] for key in HOST_CONFIG_KEYS if host_config.get(key) is not None
    }
    return new_config


class EnvironmentUpdater:
    """Recreates containers with a replacement environment."""

    def __init__(
        self,
        docker_client: DockerClient,
        locks: ContainerLocks,
        stop_timeout: Optional[int] = None,
        rollback_on_failure: bool = False,
    ):
        """Initialize the updater.

        Args:
            docker_client: Engine client used for every step.
            locks: Shared lock registry, one per process.
            stop_timeout: Seconds before the engine kills a stopping container.
            rollback_on_failure: Recreate the original container when the
                update fails after the original was removed.
        """
        self.docker_client = docker_client
        self.locks = locks
        self.stop_timeout = stop_timeout
        self.rollback_on_failure = rollback_on_failure

    async def update(self, container_id: str, env: list[str]) -> UpdateEnvResponse:
        """Replace the environment of a container.

        Runs inspect, stop (if running), remove, create and start in order
        while holding the lock for ``container_id``.

        Raises:
            EngineError: Any engine failure before the original was removed.
            ContainerRecreateFailed: Failure after removal; the name may be gone.
            EnvUpdateRolledBack: Failure after removal, original restored.
        """
        async with self.locks.hold(container_id):
            return await self._recreate(container_id, env)

    async def _recreate(self, container_id: str, env: list[str]) -> UpdateEnvResponse:
        info = await run_engine_call(self.docker_client.inspect_container, container_id)
        name = container_name(info)
        was_running = bool((info.get("State") or {}).get("Running"))
        logger.info(
            f"Updating environment of container '{name}' ({container_id}), "
            f"{len(env)} variables"
        )

        if was_running:
            await run_engine_call(
                self.docker_client.stop_container, container_id, timeout=self.stop_timeout
            )
        else:
            logger.debug(f"Container '{name}' is not running, skipping stop")

        await run_engine_call(self.docker_client.remove_container, container_id, volumes=False)

        new_config = build_recreate_config(info, env)
        step = "create"
        new_id: Optional[str] = None
        try:
            created = await run_engine_call(self.docker_client.create_container, new_config, name)
            new_id = created["Id"]
            step = "start"
            await run_engine_call(self.docker_client.start_container, new_id)
        except EngineError as e:
            logger.error(f"Recreating container '{name}' failed at step '{step}': {e}")
            if self.rollback_on_failure:
                await self._restore(info, name, was_running, new_id, step, e)
            raise ContainerRecreateFailed(name, step, e) from e

        logger.info(f"Container '{name}' recreated as {new_id[:12]}")
        return UpdateEnvResponse(
            id=new_id, name=name, warnings=created.get("Warnings") or []
        )

    async def _restore(
        self,
        info: dict,
        name: str,
        was_running: bool,
        failed_id: Optional[str],
        step: str,
        cause: EngineError,
    ) -> None:
        """Recreate the original container with its original environment.

        Always raises: ``EnvUpdateRolledBack`` when the original is back,
        ``ContainerRecreateFailed`` when compensation failed as well.
        """
        original_env = (info.get("Config") or {}).get("Env") or []
        try:
            if failed_id is not None:
                await run_engine_call(
                    self.docker_client.remove_container, failed_id, force=True
                )
            restored = await run_engine_call(
                self.docker_client.create_container,
                build_recreate_config(info, original_env),
                name,
            )
            if was_running:
                await run_engine_call(self.docker_client.start_container, restored["Id"])
        except EngineError as e:
            logger.error(f"Rollback of container '{name}' failed: {e}")
            raise ContainerRecreateFailed(name, step, cause) from e

        logger.warning(f"Container '{name}' restored with its original environment")
        raise EnvUpdateRolledBack(name, step, restored["Id"], cause) from cause
