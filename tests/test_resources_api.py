"""Tests for image, system, network and volume endpoints."""

from dockdash.errors import EngineConflict, EngineUnavailable


# Images


def test_list_images(client, engine):
    response = client.get("/api/images")

    assert response.status_code == 200
    assert [i["RepoTags"] for i in response.json()] == [["nginx:latest"], ["redis:7"]]


def test_inspect_image_by_reference(client):
    response = client.get("/api/images/redis:7")

    assert response.status_code == 200
    assert response.json()["Id"] == "sha256:" + "b" * 64


def test_inspect_missing_image_is_404(client):
    response = client.get("/api/images/missing:1")

    assert response.status_code == 404
    assert response.json()["error"] == "Failed to fetch image missing:1"


def test_remove_image_passes_flags(client, engine):
    response = client.delete(
        "/api/images/nginx:latest", params={"force": "true", "noprune": "true"}
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Image nginx:latest deleted successfully"
    assert ("remove_image", "nginx:latest", True, True) in engine.calls
    assert len(engine.images) == 1


def test_remove_image_in_use_is_409(client, engine):
    engine.fail_next(
        "remove_image",
        EngineConflict("Conflict on 'nginx:latest'", "image is being used by running container"),
    )

    response = client.delete("/api/images/nginx:latest")

    assert response.status_code == 409
    assert response.json()["code"] == "CONFLICT"


# System


def test_system_info_and_version(client, engine):
    engine.add_container("web")

    info = client.get("/api/system/info")
    version = client.get("/api/system/version")

    assert info.status_code == 200
    assert info.json()["Containers"] == 1
    assert version.json() == {"Version": "26.1.4", "ApiVersion": "1.45"}


def test_system_info_engine_down(client, engine):
    engine.fail_next("info", EngineUnavailable("Container engine unreachable", "connection refused"))

    response = client.get("/api/system/info")

    assert response.status_code == 503
    assert response.json()["error"] == "Failed to fetch system info"


# Networks


def test_list_and_inspect_networks(client):
    listed = client.get("/api/networks")
    inspected = client.get("/api/networks/n2")

    assert {n["Name"] for n in listed.json()} == {"bridge", "backend"}
    assert inspected.json()["Name"] == "backend"


def test_create_network(client, engine):
    response = client.post(
        "/api/networks",
        json={"name": "frontend", "subnet": "172.28.0.0/16", "gateway": "172.28.0.1"},
    )

    assert response.status_code == 201
    assert "Id" in response.json()
    assert ("create_network", "frontend", "bridge", "172.28.0.0/16", "172.28.0.1", False) in engine.calls


def test_create_network_requires_name(client, engine):
    response = client.post("/api/networks", json={"driver": "bridge"})

    assert response.status_code == 400
    assert "name" in response.json()["error"]
    assert "create_network" not in engine.operations()


def test_create_duplicate_network_is_409(client):
    response = client.post("/api/networks", json={"name": "backend"})

    assert response.status_code == 409
    assert response.json()["error"] == "Failed to create network"


def test_remove_network(client, engine):
    response = client.delete("/api/networks/n2")

    assert response.status_code == 200
    assert "n2" not in engine.networks
    assert client.delete("/api/networks/n2").status_code == 404


# Volumes


def test_list_volumes_keeps_engine_shape(client):
    response = client.get("/api/volumes")

    assert response.status_code == 200
    body = response.json()
    assert [v["Name"] for v in body["Volumes"]] == ["data"]
    assert body["Warnings"] is None


def test_create_volume_accepts_camel_case_options(client, engine):
    response = client.post(
        "/api/volumes",
        json={"name": "cache", "driverOpts": {"type": "tmpfs"}, "labels": {"tier": "cache"}},
    )

    assert response.status_code == 201
    assert response.json()["Options"] == {"type": "tmpfs"}
    assert ("create_volume", "cache", "local", {"type": "tmpfs"}, {"tier": "cache"}) in engine.calls


def test_inspect_and_remove_volume(client, engine):
    assert client.get("/api/volumes/data").json()["Driver"] == "local"

    response = client.delete("/api/volumes/data")

    assert response.json() == {"success": True, "message": "Volume data deleted successfully"}
    assert client.get("/api/volumes/data").status_code == 404
