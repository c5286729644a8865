# /*
# Copyright 2026 The Porter Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Container engine access for the registry and network linking.

Lookups of things that do not exist raise ``docker.errors.NotFound`` for
mutations and return an empty answer for queries.
"""

from __future__ import annotations

import enum
from typing import Protocol

import docker


class ContainerState(enum.Enum):
    ABSENT = "absent"
    STOPPED = "stopped"
    RUNNING = "running"


class ContainerRuntime(Protocol):
    """Operations the environment needs from the container engine."""

    def container_state(self, name: str) -> ContainerState: ...

    def run_container(self, name: str, image: str, ports: dict[str, int]) -> None: ...

    def remove_container(self, name: str) -> None: ...

    def network_id(self, network: str) -> str | None: ...

    def container_network_ids(self, name: str) -> set[str]: ...

    def connect_network(self, network: str, container: str) -> None: ...

    def disconnect_network(self, network: str, container: str) -> None: ...


class DockerRuntime:
    """ContainerRuntime backed by the Docker engine API."""

    def __init__(self, client: docker.DockerClient | None = None) -> None:
        self._client = client

    @property
    def client(self) -> docker.DockerClient:
        if self._client is None:
            try:
                self._client = docker.from_env()
            except docker.errors.DockerException as err:
                raise RuntimeError(f"Failed to connect to Docker: {err}") from err
        return self._client

    def container_state(self, name: str) -> ContainerState:
        """Report whether container *name* is running, stopped or absent."""
        try:
            container = self.client.containers.get(name)
        except docker.errors.NotFound:
            return ContainerState.ABSENT
        running = container.attrs.get("State", {}).get("Running", False)
        return ContainerState.RUNNING if running else ContainerState.STOPPED

    def run_container(self, name: str, image: str, ports: dict[str, int]) -> None:
        """Start a detached container.

        Args:
            name: Container name.
            image: Image reference to run.
            ports: Mapping of ``<port>/tcp`` inside the container to host port.
        """
        self.client.containers.run(image, name=name, ports=ports, detach=True)

    def remove_container(self, name: str) -> None:
        """Force-remove container *name*.

        Raises:
            docker.errors.NotFound: If there is no such container.
            docker.errors.APIError: If the engine refuses the removal.
        """
        self.client.containers.get(name).remove(force=True)

    def network_id(self, network: str) -> str | None:
        try:
            return self.client.networks.get(network).id
        except docker.errors.NotFound:
            return None

    def container_network_ids(self, name: str) -> set[str]:
        """Return the ids of every network container *name* is attached to."""
        try:
            container = self.client.containers.get(name)
        except docker.errors.NotFound:
            return set()
        networks = container.attrs.get("NetworkSettings", {}).get("Networks") or {}
        return {settings["NetworkID"] for settings in networks.values() if settings.get("NetworkID")}

    def connect_network(self, network: str, container: str) -> None:
        self.client.networks.get(network).connect(container)

    def disconnect_network(self, network: str, container: str) -> None:
        self.client.networks.get(network).disconnect(container)
