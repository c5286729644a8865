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

"""Orchestration: wires the domain modules together and declares the tasks."""

from __future__ import annotations

import os
from collections.abc import MutableMapping
from dataclasses import dataclass

from rich.panel import Panel

from kindenv import console
from kindenv.cluster import ClusterManager
from kindenv.config import Settings
from kindenv.constants import REL_BOILERPLATE, UNIT_TEST_COVERAGE_PROFILE
from kindenv.network import NetworkLinker
from kindenv.registry import RegistryManager
from kindenv.runner import CommandRunner, Runner
from kindenv.runtime import ContainerRuntime, DockerRuntime
from kindenv.tasks import TaskGraph
from kindenv.tools import ToolInstaller

# Tools that get an ``ensure-<name>`` task.
ENSURE_TOOLS = (
    "kind",
    "kubectl",
    "operator-sdk",
    "controller-gen",
    "yq",
    "ginkgo",
    "kustomize",
    "flux",
)


@dataclass
class Workspace:
    """Everything a task needs, built from one Settings instance.

    Attributes:
        settings: Resolved configuration.
        runner: Runs external programs.
        tools: Installs missing CLIs.
        registry: Manages the local registry container.
        linker: Links containers to docker networks.
        cluster: Manages the kind cluster.
    """

    settings: Settings
    runner: Runner
    tools: ToolInstaller
    registry: RegistryManager
    linker: NetworkLinker
    cluster: ClusterManager

    @classmethod
    def create(
        cls,
        settings: Settings,
        runner: Runner | None = None,
        runtime: ContainerRuntime | None = None,
        tools: ToolInstaller | None = None,
        environ: MutableMapping[str, str] | None = None,
    ) -> Workspace:
        """Build a workspace, using real implementations for anything not given.

        Args:
            settings: Resolved configuration.
            runner: Command runner, defaults to one rooted at the project dir.
            runtime: Container runtime, defaults to the Docker engine.
            tools: Tool installer, defaults to one using dependencies.yaml.
            environ: Process environment to read and update.

        Returns:
            The assembled workspace.
        """
        environ = os.environ if environ is None else environ
        runner = runner or CommandRunner(cwd=settings.project_dir)
        runtime = runtime or DockerRuntime()
        linker = NetworkLinker(runtime)
        return cls(
            settings=settings,
            runner=runner,
            tools=tools or ToolInstaller(settings, runner, environ=environ),
            registry=RegistryManager(settings, runtime),
            linker=linker,
            cluster=ClusterManager(settings, runner, linker, environ=environ),
        )


def _register_ensure_tool(graph: TaskGraph, ws: Workspace, tool: str) -> None:
    @graph.task(f"ensure-{tool}", help=f"Ensure {tool} is installed.")
    def _ensure() -> None:
        ws.tools.ensure(tool)


def build_graph(ws: Workspace) -> TaskGraph:
    """Declare every task of the development workflow.

    Args:
        ws: Workspace the task bodies operate on.

    Returns:
        The populated task graph.
    """
    graph = TaskGraph()

    for tool in ENSURE_TOOLS:
        _register_ensure_tool(graph, ws, tool)

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    @graph.task("start-docker-registry")
    def start_docker_registry() -> None:
        """Ensure that a local docker registry is running."""
        ws.registry.ensure_running()

    @graph.task("stop-docker-registry")
    def stop_docker_registry() -> None:
        """Stop the local docker registry."""
        ws.registry.stop()

    # ------------------------------------------------------------------
    # Cluster
    # ------------------------------------------------------------------

    @graph.task("create-kind-cluster", deps=["ensure-kind", "start-docker-registry"])
    def create_kind_cluster() -> None:
        """Create the kind test cluster."""
        ws.cluster.create()

    @graph.task("delete-kind-cluster", deps=["ensure-kind"])
    def delete_kind_cluster() -> None:
        """Delete the kind test cluster."""
        ws.cluster.delete()

    @graph.task("configure-cluster", deps=["start-docker-registry"], hidden=True)
    def configure_cluster() -> None:
        """Select the operator namespace and install flux."""
        ws.cluster.configure()

    @graph.task("ensure-cluster", deps=["ensure-kubectl"])
    def ensure_cluster() -> None:
        """Ensure that the test kind cluster is up."""
        if not ws.cluster.reuse_existing():
            graph.run("create-kind-cluster")
        graph.run("configure-cluster")
        ws.cluster.link_registry()

    # ------------------------------------------------------------------
    # Code generation, lint and tests
    # ------------------------------------------------------------------

    @graph.task("generate", deps=["ensure-controller-gen"])
    def generate() -> None:
        """Generate deepcopy code with controller-gen."""
        ws.runner.must(
            "controller-gen", f'object:headerFile="{REL_BOILERPLATE}"', 'paths="./..."', stream=True,
        )

    @graph.task("fmt")
    def fmt() -> None:
        """Format the Go sources."""
        ws.runner.must("go", "fmt", "./...", stream=True)

    @graph.task("vet")
    def vet() -> None:
        """Vet the Go sources."""
        ws.runner.must("go", "vet", "./...", stream=True)

    @graph.task("test-unit")
    def test_unit() -> None:
        """Run unit tests."""
        console.print(Panel.fit("Running unit tests", style="bold blue"))
        ws.runner.must(
            "go", "test", "./...", "-coverprofile", UNIT_TEST_COVERAGE_PROFILE, stream=True,
        )

    @graph.task("test", deps=["test-unit"])
    def test() -> None:
        """Run all tests."""

    return graph
