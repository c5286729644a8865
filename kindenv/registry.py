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

"""Local docker registry used for test image pushes and pulls."""

from __future__ import annotations

import docker

from kindenv import console, logger
from kindenv.config import Settings
from kindenv.constants import NO_SUCH_CONTAINER
from kindenv.runtime import ContainerRuntime, ContainerState


class RegistryManager:
    """Keeps the single local registry container running or removes it."""

    def __init__(self, settings: Settings, runtime: ContainerRuntime) -> None:
        self.settings = settings
        self.runtime = runtime

    @property
    def container(self) -> str:
        return self.settings.registry_container

    def state(self) -> ContainerState:
        return self.runtime.container_state(self.container)

    def ensure_running(self) -> None:
        """Start the registry unless it is already running.

        A stopped container left over from an earlier run is removed first
        so the registry always starts from a fresh container.
        """
        if self.state() is ContainerState.RUNNING:
            return

        self.stop()

        console.print("[yellow]\u2139\ufe0f  Starting local docker registry[/yellow]")
        ports = {f"{self.settings.registry_container_port}/tcp": self.settings.registry_host_port}
        self.runtime.run_container(self.container, self.settings.registry_image, ports)
        console.print(
            f"[green]\u2705 Registry '{self.container}' listening on "
            f"localhost:{self.settings.registry_host_port}[/green]"
        )

    def stop(self) -> None:
        """Remove the registry container if it exists.

        Raises:
            RuntimeError: If the engine fails to remove an existing container.
        """
        if self.state() is ContainerState.ABSENT:
            return

        console.print("[yellow]\u2139\ufe0f  Stopping local docker registry[/yellow]")
        try:
            self.runtime.remove_container(self.container)
        except docker.errors.NotFound:
            logger.debug("Registry container %s already removed", self.container)
        except docker.errors.APIError as err:
            if NO_SUCH_CONTAINER not in str(err):
                raise RuntimeError(f"Failed to remove container {self.container}: {err}") from err
