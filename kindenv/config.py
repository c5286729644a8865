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

"""Configuration classes and tool specifications."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.panel import Panel

from kindenv import console
from kindenv.constants import (
    DEFAULT_CLUSTER_NAME,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_KIND_NETWORK,
    DEFAULT_KUBECONFIG,
    DEFAULT_OPERATOR_NAMESPACE,
    DEFAULT_REGISTRY_CONTAINER,
    DEFAULT_REGISTRY_IMAGE,
    DEFAULT_REGISTRY_PORT,
    REL_KIND_CONFIG_RENDERED,
    REL_KIND_CONFIG_TEMPLATE,
    REL_REGISTRY_MANIFEST,
    REL_REGISTRY_MANIFEST_RENDERED,
    dep_value,
)


# ============================================================================
# Configuration classes
# ============================================================================

class Settings(BaseSettings):
    """Test environment configuration, auto-loaded from KINDENV_* env vars.

    Relative paths are resolved against ``project_dir``.

    Attributes:
        project_dir: Root of the operator checkout.
        cluster_name: Name of the kind cluster.
        kubeconfig: Canonical credential file for the cluster.
        kind_network: Docker network kind attaches its nodes to.
        operator_namespace: Namespace the operator is installed into.
        registry_container: Container name of the local registry.
        registry_image: Image used to run the local registry.
        registry_host_port: Host port the registry is published on.
        registry_container_port: Port the registry listens on in its container.
        kind_config_template: Template for the kind cluster configuration.
        kind_config_file: Transient rendered kind configuration.
        registry_manifest: Template of the manifest documenting the local registry.
        registry_manifest_file: Transient rendered registry manifest.
        install_dir: Where downloaded tools go, or None for GOPATH/bin.
        http_timeout: Seconds to wait on tool downloads.
    """

    model_config = SettingsConfigDict(env_prefix="KINDENV_", extra="ignore")

    project_dir: Path = Field(default_factory=Path.cwd)
    cluster_name: str = DEFAULT_CLUSTER_NAME
    kubeconfig: Path = Path(DEFAULT_KUBECONFIG)
    kind_network: str = DEFAULT_KIND_NETWORK
    operator_namespace: str = DEFAULT_OPERATOR_NAMESPACE
    registry_container: str = DEFAULT_REGISTRY_CONTAINER
    registry_image: str = DEFAULT_REGISTRY_IMAGE
    registry_host_port: int = Field(default=DEFAULT_REGISTRY_PORT, ge=1, le=65535)
    registry_container_port: int = Field(default=DEFAULT_REGISTRY_PORT, ge=1, le=65535)
    kind_config_template: Path = Path(REL_KIND_CONFIG_TEMPLATE)
    kind_config_file: Path = Path(REL_KIND_CONFIG_RENDERED)
    registry_manifest: Path = Path(REL_REGISTRY_MANIFEST)
    registry_manifest_file: Path = Path(REL_REGISTRY_MANIFEST_RENDERED)
    install_dir: Path | None = None
    http_timeout: int = Field(default=DEFAULT_HTTP_TIMEOUT_SECONDS, ge=1)

    def resolve(self, path: Path) -> Path:
        """Resolve *path* against the project directory."""
        return path if path.is_absolute() else self.project_dir / path

    @property
    def kubeconfig_path(self) -> Path:
        return self.resolve(self.kubeconfig)


# ============================================================================
# Tool specifications
# ============================================================================

ToolSource = Literal["download", "go", "make", "unsupported"]


@dataclass(frozen=True)
class ToolSpec:
    """How a development tool is located and installed.

    Attributes:
        name: Executable name.
        source: Installation strategy.
        version: Pinned version, or empty when unpinned or resolved dynamically.
        version_url: Endpoint returning the latest stable version as text.
        url: Download URL template with {version}, {goos}, {goarch}, {ext}.
        package: Go package path for ``go install``.
        target: Makefile target that installs the tool.
        version_args: Arguments that make the tool print its version.
        unsupported_os: Operating systems the tool cannot be installed on.
        unsupported_reason: Message shown on an unsupported operating system.
    """

    name: str
    source: ToolSource
    version: str = ""
    version_url: str = ""
    url: str = ""
    package: str = ""
    target: str = ""
    version_args: tuple[str, ...] = ()
    unsupported_os: tuple[str, ...] = ()
    unsupported_reason: str = ""

    @classmethod
    def from_dict(cls, name: str, data: dict) -> ToolSpec:
        """Build a spec from one ``tools`` entry of dependencies.yaml.

        Args:
            name: Tool name (the mapping key).
            data: The entry's fields.

        Returns:
            The parsed tool specification.

        Raises:
            ValueError: If the source is not a known installation strategy.
        """
        source = data.get("source", "")
        if source not in ("download", "go", "make", "unsupported"):
            raise ValueError(f"tool '{name}' has unknown source '{source}'")
        return cls(
            name=name,
            source=source,
            version=str(data.get("version", "")),
            version_url=data.get("version_url", ""),
            url=data.get("url", ""),
            package=data.get("package", ""),
            target=data.get("target", ""),
            version_args=tuple(data.get("version_args", ())),
            unsupported_os=tuple(data.get("unsupported_os", ())),
            unsupported_reason=data.get("unsupported_reason", ""),
        )


def load_tool_specs(tools: dict | None = None) -> dict[str, ToolSpec]:
    """Parse the tool catalogue.

    Args:
        tools: Mapping of tool name to entry, or None to use dependencies.yaml.

    Returns:
        Mapping of tool name to its specification.
    """
    if tools is None:
        tools = dep_value("tools", default={})
    return {name: ToolSpec.from_dict(name, entry or {}) for name, entry in tools.items()}


def display_config(settings: Settings) -> None:
    """Print the resolved configuration."""
    console.print(Panel.fit("Configuration", style="bold blue"))
    console.print(f"  project_dir     : {settings.project_dir}")
    console.print(f"  cluster_name    : {settings.cluster_name}")
    console.print(f"  kubeconfig      : {settings.kubeconfig_path}")
    console.print(f"  namespace       : {settings.operator_namespace}")
    console.print(f"  registry        : {settings.registry_container} "
                  f"(localhost:{settings.registry_host_port})")
    console.print(f"  install_dir     : {settings.install_dir or '(GOPATH/bin)'}")
