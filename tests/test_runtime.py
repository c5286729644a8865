"""Unit tests for the Docker engine adapter."""

from __future__ import annotations

from types import SimpleNamespace
from unittest import mock

import docker
import pytest

from kindenv.runtime import ContainerState, DockerRuntime


def _client(containers: dict[str, dict], networks: dict[str, str]) -> mock.Mock:
    client = mock.Mock()

    def get_container(name: str):
        if name not in containers:
            raise docker.errors.NotFound(f"No such container: {name}")
        return SimpleNamespace(attrs=containers[name], remove=mock.Mock())

    def get_network(name: str):
        if name not in networks:
            raise docker.errors.NotFound(f"network {name} not found")
        return SimpleNamespace(id=networks[name], connect=mock.Mock(), disconnect=mock.Mock())

    client.containers.get.side_effect = get_container
    client.networks.get.side_effect = get_network
    return client


@pytest.fixture
def runtime() -> DockerRuntime:
    containers = {
        "registry": {
            "State": {"Running": True},
            "NetworkSettings": {"Networks": {
                "bridge": {"NetworkID": "b71d0a9e3c11"},
                "kind": {"NetworkID": "f3a91c0e77d2"},
            }},
        },
        "old-registry": {"State": {"Running": False}},
    }
    return DockerRuntime(_client(containers, {"kind": "f3a91c0e77d2"}))


class TestContainerState:
    """Tests for DockerRuntime.container_state."""

    def test_running(self, runtime: DockerRuntime) -> None:
        assert runtime.container_state("registry") is ContainerState.RUNNING

    def test_stopped(self, runtime: DockerRuntime) -> None:
        assert runtime.container_state("old-registry") is ContainerState.STOPPED

    def test_absent(self, runtime: DockerRuntime) -> None:
        assert runtime.container_state("nope") is ContainerState.ABSENT


def test_container_network_ids(runtime: DockerRuntime) -> None:
    assert runtime.container_network_ids("registry") == {"b71d0a9e3c11", "f3a91c0e77d2"}
    assert runtime.container_network_ids("old-registry") == set()
    assert runtime.container_network_ids("nope") == set()


def test_network_id(runtime: DockerRuntime) -> None:
    assert runtime.network_id("kind") == "f3a91c0e77d2"
    assert runtime.network_id("nope") is None


def test_run_container_is_detached() -> None:
    client = mock.Mock()

    DockerRuntime(client).run_container("registry", "registry:2", {"5000/tcp": 5000})

    client.containers.run.assert_called_once_with(
        "registry:2", name="registry", ports={"5000/tcp": 5000}, detach=True,
    )


def test_unreachable_engine(monkeypatch: pytest.MonkeyPatch) -> None:
    def _from_env():
        raise docker.errors.DockerException("Error while fetching server API version")

    monkeypatch.setattr(docker, "from_env", _from_env)

    with pytest.raises(RuntimeError, match="Failed to connect to Docker"):
        DockerRuntime().container_state("registry")
