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

"""Joining containers to docker networks."""

from __future__ import annotations

from kindenv import logger
from kindenv.runtime import ContainerRuntime


class NetworkLinker:
    """Connects, disconnects and inspects container-to-network links."""

    def __init__(self, runtime: ContainerRuntime) -> None:
        self.runtime = runtime

    def is_linked(self, container: str, network: str) -> bool:
        """Check whether *container* is attached to *network*.

        Args:
            container: Container name.
            network: Network name.

        Returns:
            True only if the network exists and its id is one of the
            container's attached network ids.
        """
        network_id = self.runtime.network_id(network)
        if not network_id:
            return False
        return network_id in self.runtime.container_network_ids(container)

    def connect(self, container: str, network: str) -> None:
        logger.info("Connecting %s to the %s network", container, network)
        self.runtime.connect_network(network, container)

    def disconnect(self, container: str, network: str) -> None:
        logger.info("Disconnecting %s from the %s network", container, network)
        self.runtime.disconnect_network(network, container)
