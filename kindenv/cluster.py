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

"""kind cluster lifecycle: create, reuse, configure, delete."""

from __future__ import annotations

import ipaddress
import os
import socket
import string
from collections.abc import Iterator, Mapping, MutableMapping
from contextlib import contextmanager
from pathlib import Path

import psutil
from rich.panel import Panel

from kindenv import console, logger
from kindenv.config import Settings
from kindenv.constants import ENV_KUBECONFIG
from kindenv.network import NetworkLinker
from kindenv.runner import Runner


# ============================================================================
# Cluster config rendering
# ============================================================================

def detect_host_address() -> str:
    """Find the host's first non-loopback IPv4 address.

    Interfaces are scanned in the order the platform reports them.

    Returns:
        The address, or an empty string if the host has none.
    """
    for addrs in psutil.net_if_addrs().values():
        for addr in addrs:
            if addr.family != socket.AF_INET:
                continue
            ip = ipaddress.ip_address(addr.address)
            if not ip.is_loopback:
                return str(ip)
    return ""


def render_template(template: str, values: Mapping[str, str]) -> str:
    """Substitute ``${name}`` placeholders in a cluster template.

    Args:
        template: Template text.
        values: Placeholder values by name.

    Returns:
        The rendered text.

    Raises:
        RuntimeError: If the template references an unknown placeholder.
    """
    try:
        return string.Template(template).substitute(values)
    except (KeyError, ValueError) as err:
        raise RuntimeError(f"error rendering template: {err}") from err


def read_template(path: Path) -> str:
    try:
        return path.read_text()
    except OSError as err:
        raise RuntimeError(f"error reading {path}") from err


@contextmanager
def rendered_config(path: Path, contents: str) -> Iterator[Path]:
    """Write *contents* to *path* for the duration of the block.

    The file is removed however the block exits, including a failed write.
    """
    try:
        try:
            path.write_text(contents)
        except OSError as err:
            raise RuntimeError(f"could not write config file {path}") from err
        yield path
    finally:
        path.unlink(missing_ok=True)


# ============================================================================
# Cluster operations
# ============================================================================

class ClusterManager:
    """Manages the project's single kind cluster."""

    def __init__(
        self,
        settings: Settings,
        runner: Runner,
        linker: NetworkLinker,
        environ: MutableMapping[str, str] | None = None,
    ) -> None:
        self.settings = settings
        self.runner = runner
        self.linker = linker
        self.environ = os.environ if environ is None else environ

    @property
    def name(self) -> str:
        return self.settings.cluster_name

    @property
    def kube_env(self) -> dict[str, str]:
        return {ENV_KUBECONFIG: str(self.settings.kubeconfig_path)}

    def fetch_credentials(self) -> str | None:
        """Fetch the cluster's kubeconfig from kind.

        Returns:
            The kubeconfig contents, or None if the cluster does not exist.
        """
        result = self.runner.run("kind", "get", "kubeconfig", "--name", self.name)
        return result.stdout if result.ok else None

    def write_credentials(self, contents: str) -> None:
        """Write *contents* to the canonical kubeconfig file.

        Raises:
            RuntimeError: If the file cannot be written.
        """
        path = self.settings.kubeconfig_path
        try:
            path.write_text(contents)
        except OSError as err:
            raise RuntimeError(f"error writing {path}") from err

    def reuse_existing(self) -> bool:
        """Point the environment at the cluster if it already exists.

        Returns:
            True if an existing cluster is being reused, False if there is
            no cluster to reuse.
        """
        contents = self.fetch_credentials()
        if contents is None:
            return False

        logger.info("Reusing existing kind cluster")

        canonical = self.settings.kubeconfig_path.resolve()
        user_kubeconfig = (self.settings.project_dir / self.environ.get(ENV_KUBECONFIG, "")).resolve()
        if user_kubeconfig != canonical:
            console.print(
                "[bold yellow]ATTENTION![/bold yellow] You should set your KUBECONFIG to match "
                "the cluster used by this project\n\n"
                f"\texport KUBECONFIG={canonical}\n",
                highlight=False,
            )
        self.environ[ENV_KUBECONFIG] = str(canonical)

        self.write_credentials(contents)
        self.set_namespace(self.settings.operator_namespace)
        return True

    def set_namespace(self, namespace: str) -> None:
        self.runner.must(
            "kubectl", "config", "set-context", "--current", "--namespace", namespace,
            env=self.kube_env,
        )

    def create(self) -> None:
        """Create the kind cluster and hook it up to the local registry.

        Raises:
            RuntimeError: If the config template cannot be read or rendered.
            CommandError: If kind fails to create the cluster.
        """
        console.print(Panel.fit(f"Creating kind cluster '{self.name}'", style="bold blue"))

        address = detect_host_address()
        if address:
            logger.info("Current IP address: %s", address)
        else:
            logger.warning("Could not determine a non-loopback IPv4 address for the API server")

        self.environ[ENV_KUBECONFIG] = str(self.settings.kubeconfig_path)

        values = self.template_values(address)
        template = read_template(self.settings.resolve(self.settings.kind_config_template))
        config_path = self.settings.resolve(self.settings.kind_config_file)
        with rendered_config(config_path, render_template(template, values)):
            self.runner.must(
                "kind", "create", "cluster", "--name", self.name, "--config", str(config_path),
                env=self.kube_env, stream=True,
            )

        contents = self.fetch_credentials()
        if contents is None:
            raise RuntimeError(f"kind cluster '{self.name}' has no kubeconfig after creation")
        self.write_credentials(contents)

        self.link_registry()

        manifest = read_template(self.settings.resolve(self.settings.registry_manifest))
        manifest_path = self.settings.resolve(self.settings.registry_manifest_file)
        with rendered_config(manifest_path, render_template(manifest, values)):
            result = self.runner.run("kubectl", "apply", "-f", str(manifest_path), env=self.kube_env)
        if not result.ok:
            console.print(
                f"[yellow]\u26a0\ufe0f  Could not apply the local registry manifest: "
                f"{result.stderr.strip()}[/yellow]"
            )

        console.print(f"[green]\u2705 Cluster '{self.name}' created[/green]")

    def template_values(self, address: str) -> dict[str, str]:
        """Placeholder values for the kind config and registry manifest."""
        return {
            "address": address,
            "registry_container": self.settings.registry_container,
            "registry_host_port": str(self.settings.registry_host_port),
            "registry_container_port": str(self.settings.registry_container_port),
        }

    def link_registry(self) -> None:
        """Attach the registry container to the kind network unless it already is."""
        registry = self.settings.registry_container
        network = self.settings.kind_network
        if not self.linker.is_linked(registry, network):
            self.linker.connect(registry, network)

    def configure(self) -> None:
        """Select the operator namespace and install flux into the cluster."""
        self.set_namespace(self.settings.operator_namespace)
        self.runner.must("flux", "install", env=self.kube_env, stream=True)

    def delete(self) -> None:
        """Delete the kind cluster and unhook the registry from its network."""
        console.print(f"[yellow]\u2139\ufe0f  Deleting kind cluster '{self.name}'...[/yellow]")
        result = self.runner.run("kind", "delete", "cluster", "--name", self.name)
        if result.ok:
            console.print(f"[green]\u2705 Cluster '{self.name}' deleted[/green]")
        else:
            console.print(f"[yellow]\u26a0\ufe0f  Cluster '{self.name}' not found or already deleted[/yellow]")

        registry = self.settings.registry_container
        network = self.settings.kind_network
        if self.linker.is_linked(registry, network):
            self.linker.disconnect(registry, network)
