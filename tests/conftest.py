import copy
import threading
import uuid

import pytest
from fastapi.testclient import TestClient

from dockdash.api import create_app
from dockdash.env_update import ContainerLocks
from dockdash.errors import (
    ContainerNotFound,
    ContainerNotRunning,
    EngineConflict,
    EngineNotFound,
)
from dockdash.models import GatewayConfig
from dockdash.state import get_container_locks, get_docker_client


class FakeEngine:
    """In-memory stand-in for ``DockerClient`` that records every call.

    Containers are stored as engine inspect payloads keyed by id. Failures can
    be queued per operation with ``fail_next``.
    """

    def __init__(self):
        self.containers: dict[str, dict] = {}
        self.logs: dict[str, list[str]] = {}
        self.images = [
            {"Id": "sha256:" + "a" * 64, "RepoTags": ["nginx:latest"], "Size": 187000000},
            {"Id": "sha256:" + "b" * 64, "RepoTags": ["redis:7"], "Size": 117000000},
        ]
        self.networks = {
            "n1": {"Id": "n1", "Name": "bridge", "Driver": "bridge"},
            "n2": {"Id": "n2", "Name": "backend", "Driver": "bridge"},
        }
        self.volumes = {"data": {"Name": "data", "Driver": "local", "Mountpoint": "/var/lib/docker/volumes/data/_data"}}
        self.calls: list[tuple] = []
        self._failures: dict[str, list[Exception]] = {}
        self._lock = threading.Lock()

    # helpers

    def add_container(self, name, env=None, running=True, image="nginx:latest"):
        container_id = uuid.uuid4().hex + uuid.uuid4().hex
        self.containers[container_id] = {
            "Id": container_id,
            "Name": f"/{name}",
            "Config": {
                "Image": image,
                "Cmd": ["nginx", "-g", "daemon off;"],
                "Entrypoint": ["/docker-entrypoint.sh"],
                "Env": list(env or []),
                "ExposedPorts": {"80/tcp": {}},
                "WorkingDir": "",
                "Labels": {"app": name},
                "Hostname": container_id[:12],
            },
            "HostConfig": {
                "Binds": ["/srv/www:/usr/share/nginx/html:ro"],
                "PortBindings": {"80/tcp": [{"HostIp": "", "HostPort": "8080"}]},
                "RestartPolicy": {"Name": "unless-stopped", "MaximumRetryCount": 0},
                "NetworkMode": "bridge",
                "Privileged": False,
                "Devices": [],
                "VolumesFrom": None,
            },
            "State": {
                "Running": running,
                "Status": "running" if running else "exited",
            },
        }
        return container_id

    def by_name(self, name):
        return [c for c in self.containers.values() if c["Name"] == f"/{name}"]

    def fail_next(self, operation, error, times=1):
        self._failures.setdefault(operation, []).extend([error] * times)

    def operations(self):
        return [call[0] for call in self.calls]

    def _record(self, operation, *args):
        with self._lock:
            self.calls.append((operation, *args))
            queued = self._failures.get(operation)
            if queued:
                raise queued.pop(0)

    def _resolve(self, id_or_name):
        for container_id, info in self.containers.items():
            if container_id == id_or_name or info["Name"] == f"/{id_or_name}":
                return container_id
        if len(id_or_name) >= 4:
            matches = [cid for cid in self.containers if cid.startswith(id_or_name)]
            if len(matches) == 1:
                return matches[0]
        raise ContainerNotFound(f"'{id_or_name}' not found", f"No such container: {id_or_name}")

    # DockerClient interface

    def list_containers(self, all=True):
        self._record("list_containers", all)
        return [
            {
                "Id": info["Id"],
                "Names": [info["Name"]],
                "Image": info["Config"]["Image"],
                "State": info["State"]["Status"],
            }
            for info in self.containers.values()
            if all or info["State"]["Running"]
        ]

    def inspect_container(self, container_id):
        self._record("inspect_container", container_id)
        return copy.deepcopy(self.containers[self._resolve(container_id)])

    def get_container_logs(self, container_id, tail=100):
        self._record("get_container_logs", container_id, tail)
        lines = self.logs.get(self._resolve(container_id), [])
        return "".join(line + "\n" for line in lines[-tail:])

    def get_container_stats(self, container_id):
        self._record("get_container_stats", container_id)
        resolved = self._resolve(container_id)
        return {"id": resolved, "cpu_stats": {"online_cpus": 2}, "memory_stats": {"usage": 1024}}

    def start_container(self, container_id):
        self._record("start_container", container_id)
        state = self.containers[self._resolve(container_id)]["State"]
        state.update(Running=True, Status="running")

    def stop_container(self, container_id, timeout=None):
        self._record("stop_container", container_id, timeout)
        state = self.containers[self._resolve(container_id)]["State"]
        state.update(Running=False, Status="exited")

    def restart_container(self, container_id, timeout=None):
        self._record("restart_container", container_id, timeout)
        state = self.containers[self._resolve(container_id)]["State"]
        state.update(Running=True, Status="running")

    def remove_container(self, container_id, force=False, volumes=False):
        self._record("remove_container", container_id, force, volumes)
        resolved = self._resolve(container_id)
        if self.containers[resolved]["State"]["Running"] and not force:
            raise EngineConflict(
                f"Conflict on '{container_id}'",
                "You cannot remove a running container. Stop the container before attempting removal or force remove",
            )
        del self.containers[resolved]

    def create_container(self, config, name=None):
        self._record("create_container", copy.deepcopy(config), name)
        if name and self.by_name(name):
            raise EngineConflict(
                f"Conflict on '{name}'", f'The container name "/{name}" is already in use'
            )
        container_id = uuid.uuid4().hex + uuid.uuid4().hex
        container_config = {k: v for k, v in config.items() if k != "HostConfig"}
        self.containers[container_id] = {
            "Id": container_id,
            "Name": f"/{name}",
            "Config": copy.deepcopy(container_config),
            "HostConfig": copy.deepcopy(config.get("HostConfig", {})),
            "State": {"Running": False, "Status": "created"},
        }
        return {"Id": container_id, "Warnings": []}

    def exec_command(self, container_id, command):
        self._record("exec_command", container_id, list(command))
        info = self.containers[self._resolve(container_id)]
        if not info["State"]["Running"]:
            raise ContainerNotRunning(f"Container '{container_id}' is not running")
        return f"ran {' '.join(command)}\n"

    def list_images(self):
        self._record("list_images")
        return copy.deepcopy(self.images)

    def inspect_image(self, image_id):
        self._record("inspect_image", image_id)
        for image in self.images:
            if image["Id"] == image_id or image_id in image["RepoTags"]:
                return copy.deepcopy(image)
        raise EngineNotFound(f"'{image_id}' not found", f"No such image: {image_id}")

    def remove_image(self, image_id, force=False, noprune=False):
        self._record("remove_image", image_id, force, noprune)
        image = self.inspect_image(image_id)
        self.images = [i for i in self.images if i["Id"] != image["Id"]]

    def info(self):
        self._record("info")
        return {"Containers": len(self.containers), "OperatingSystem": "Debian GNU/Linux 12"}

    def version(self):
        self._record("version")
        return {"Version": "26.1.4", "ApiVersion": "1.45"}

    def list_networks(self):
        self._record("list_networks")
        return [copy.deepcopy(n) for n in self.networks.values()]

    def inspect_network(self, network_id):
        self._record("inspect_network", network_id)
        if network_id not in self.networks:
            raise EngineNotFound(f"'{network_id}' not found", f"network {network_id} not found")
        return copy.deepcopy(self.networks[network_id])

    def create_network(self, name, driver="bridge", subnet=None, gateway=None, internal=False):
        self._record("create_network", name, driver, subnet, gateway, internal)
        if any(n["Name"] == name for n in self.networks.values()):
            raise EngineConflict(f"Conflict on '{name}'", f"network with name {name} already exists")
        network_id = uuid.uuid4().hex
        self.networks[network_id] = {"Id": network_id, "Name": name, "Driver": driver, "Internal": internal}
        return {"Id": network_id, "Warning": ""}

    def remove_network(self, network_id):
        self._record("remove_network", network_id)
        self.inspect_network(network_id)
        del self.networks[network_id]

    def list_volumes(self):
        self._record("list_volumes")
        return {"Volumes": [copy.deepcopy(v) for v in self.volumes.values()], "Warnings": None}

    def inspect_volume(self, name):
        self._record("inspect_volume", name)
        if name not in self.volumes:
            raise EngineNotFound(f"'{name}' not found", f"get {name}: no such volume")
        return copy.deepcopy(self.volumes[name])

    def create_volume(self, name, driver="local", driver_opts=None, labels=None):
        self._record("create_volume", name, driver, driver_opts, labels)
        volume = {"Name": name, "Driver": driver, "Options": driver_opts or {}, "Labels": labels or {}}
        self.volumes[name] = volume
        return copy.deepcopy(volume)

    def remove_volume(self, name):
        self._record("remove_volume", name)
        self.inspect_volume(name)
        del self.volumes[name]


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def config():
    return GatewayConfig()


@pytest.fixture
def locks():
    return ContainerLocks()


@pytest.fixture
def app(engine, config, locks):
    """App wired to the fake engine. Lifespan is not run, so no real Docker client."""
    application = create_app(config)
    application.dependency_overrides[get_docker_client] = lambda: engine
    application.dependency_overrides[get_container_locks] = lambda: locks
    return application


@pytest.fixture
def client(app):
    return TestClient(app)
