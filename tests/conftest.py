"""Shared fixtures: fake command runner, container runtime and HTTP session."""

from __future__ import annotations

import shutil
from collections.abc import Callable
from pathlib import Path

import docker
import pytest

from kindenv.config import Settings
from kindenv.orchestrator import Workspace
from kindenv.runner import CommandResult
from kindenv.runtime import ContainerState
from kindenv.tools import ToolInstaller
from kindenv.utils import Platform

REPO_ROOT = Path(__file__).resolve().parents[1]

KUBECONFIG_CONTENTS = "apiVersion: v1\nkind: Config\nclusters:\n- name: kind-porter\n"


class FakeRunner:
    """Records commands and answers them from canned results.

    Responses are matched by command prefix, longest prefix first. Unmatched
    commands succeed with empty output.
    """

    def __init__(self, installed: set[str] | None = None) -> None:
        self.calls: list[tuple[str, ...]] = []
        self.envs: list[dict[str, str] | None] = []
        self.installed = set(installed or ())
        self._responses: dict[tuple[str, ...], tuple[int, str, str]] = {}
        self._hooks: list[tuple[tuple[str, ...], Callable[[tuple[str, ...]], None]]] = []

    def respond(self, *prefix: str, exit_code: int = 0, stdout: str = "", stderr: str = "") -> None:
        self._responses[prefix] = (exit_code, stdout, stderr)

    def on(self, *prefix: str, action: Callable[[tuple[str, ...]], None]) -> None:
        self._hooks.append((prefix, action))

    def run(self, program: str, *args: str, env: dict[str, str] | None = None,
            stream: bool = False) -> CommandResult:
        command = (program, *args)
        self.calls.append(command)
        self.envs.append(env)
        for prefix, action in self._hooks:
            if command[:len(prefix)] == prefix:
                action(command)
        for prefix in sorted(self._responses, key=len, reverse=True):
            if command[:len(prefix)] == prefix:
                exit_code, stdout, stderr = self._responses[prefix]
                return CommandResult(command, exit_code, stdout, stderr)
        return CommandResult(command)

    def must(self, program: str, *args: str, env: dict[str, str] | None = None,
             stream: bool = False) -> CommandResult:
        return self.run(program, *args, env=env, stream=stream).check()

    def which(self, program: str) -> str | None:
        return f"/usr/local/bin/{program}" if program in self.installed else None

    def ran(self, *prefix: str) -> bool:
        return any(call[:len(prefix)] == prefix for call in self.calls)

    def count(self, *prefix: str) -> int:
        return sum(1 for call in self.calls if call[:len(prefix)] == prefix)

    def index(self, *prefix: str) -> int:
        for i, call in enumerate(self.calls):
            if call[:len(prefix)] == prefix:
                return i
        raise ValueError(f"{prefix} was not run")


class FakeRuntime:
    """In-memory container engine."""

    def __init__(self) -> None:
        self.containers: dict[str, dict] = {}
        self.networks: dict[str, str] = {}
        self.started: list[str] = []
        self.removed: list[str] = []
        self.remove_error: Exception | None = None

    def add_container(self, name: str, running: bool = True, networks: set[str] | None = None) -> None:
        self.containers[name] = {"running": running, "networks": set(networks or ())}

    def add_network(self, name: str, network_id: str) -> None:
        self.networks[name] = network_id

    def container_state(self, name: str) -> ContainerState:
        if name not in self.containers:
            return ContainerState.ABSENT
        return ContainerState.RUNNING if self.containers[name]["running"] else ContainerState.STOPPED

    def run_container(self, name: str, image: str, ports: dict[str, int]) -> None:
        if name in self.containers:
            raise docker.errors.APIError(f"Conflict. The container name \"/{name}\" is already in use")
        self.containers[name] = {"running": True, "networks": set(), "image": image, "ports": ports}
        self.started.append(name)

    def remove_container(self, name: str) -> None:
        if self.remove_error is not None:
            raise self.remove_error
        if name not in self.containers:
            raise docker.errors.NotFound(f"No such container: {name}")
        del self.containers[name]
        self.removed.append(name)

    def network_id(self, network: str) -> str | None:
        return self.networks.get(network)

    def container_network_ids(self, name: str) -> set[str]:
        if name not in self.containers:
            return set()
        return set(self.containers[name]["networks"])

    def connect_network(self, network: str, container: str) -> None:
        if container not in self.containers:
            raise docker.errors.NotFound(f"No such container: {container}")
        self.containers[container]["networks"].add(self.networks[network])

    def disconnect_network(self, network: str, container: str) -> None:
        self.containers[container]["networks"].discard(self.networks[network])


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "", content: bytes = b"",
                 reason: str = "OK") -> None:
        self.status_code = status_code
        self.text = text
        self.content = content
        self.reason = reason


class FakeSession:
    """requests.Session stand-in serving canned responses by URL."""

    def __init__(self, responses: dict[str, FakeResponse] | None = None) -> None:
        self.responses = dict(responses or {})
        self.requested: list[str] = []

    def get(self, url: str, timeout: int | None = None) -> FakeResponse:
        self.requested.append(url)
        return self.responses.get(url, FakeResponse(404, reason="Not Found"))


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings rooted in a scratch project directory with the real templates."""
    hack = tmp_path / "hack"
    hack.mkdir()
    shutil.copy(REPO_ROOT / "hack" / "kind.config.yaml", hack / "kind.config.yaml")
    shutil.copy(REPO_ROOT / "hack" / "local-registry.yaml", hack / "local-registry.yaml")
    return Settings(project_dir=tmp_path, install_dir=tmp_path / "bin")


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner(installed={"kind", "kubectl", "flux", "controller-gen", "go"})


@pytest.fixture
def runtime() -> FakeRuntime:
    fake = FakeRuntime()
    fake.add_network("kind", "f3a91c0e77d2")
    return fake


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def environ() -> dict[str, str]:
    return {}


@pytest.fixture
def tools(settings: Settings, runner: FakeRunner, session: FakeSession,
          environ: dict[str, str]) -> ToolInstaller:
    return ToolInstaller(
        settings, runner, session=session, target=Platform("linux", "amd64"), environ=environ,
    )


@pytest.fixture
def workspace(
    settings: Settings,
    runner: FakeRunner,
    runtime: FakeRuntime,
    tools: ToolInstaller,
    environ: dict[str, str],
    monkeypatch: pytest.MonkeyPatch,
) -> Workspace:
    monkeypatch.setattr("kindenv.cluster.detect_host_address", lambda: "192.168.1.10")
    return Workspace.create(settings, runner=runner, runtime=runtime, tools=tools, environ=environ)
