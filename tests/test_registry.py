"""Unit tests for the local registry manager."""

from __future__ import annotations

import docker
import pytest

from kindenv.config import Settings
from kindenv.registry import RegistryManager
from kindenv.runtime import ContainerState

from .conftest import FakeRuntime


class TestEnsureRunning:
    """Tests for RegistryManager.ensure_running."""

    def test_starts_absent_registry(self, settings: Settings, runtime: FakeRuntime) -> None:
        RegistryManager(settings, runtime).ensure_running()

        assert runtime.started == ["registry"]
        assert runtime.containers["registry"]["image"] == "registry:2"
        assert runtime.containers["registry"]["ports"] == {"5000/tcp": 5000}

    def test_running_registry_is_left_alone(self, settings: Settings, runtime: FakeRuntime) -> None:
        registry = RegistryManager(settings, runtime)

        registry.ensure_running()
        registry.ensure_running()

        assert runtime.started == ["registry"]
        assert runtime.removed == []

    def test_stopped_registry_is_replaced(self, settings: Settings, runtime: FakeRuntime) -> None:
        runtime.add_container("registry", running=False)

        RegistryManager(settings, runtime).ensure_running()

        assert runtime.removed == ["registry"]
        assert runtime.started == ["registry"]
        assert runtime.container_state("registry") is ContainerState.RUNNING

    def test_uses_configured_ports(self, tmp_path, runtime: FakeRuntime) -> None:
        settings = Settings(project_dir=tmp_path, registry_host_port=5001)

        RegistryManager(settings, runtime).ensure_running()

        assert runtime.containers["registry"]["ports"] == {"5000/tcp": 5001}


class TestStop:
    """Tests for RegistryManager.stop."""

    def test_absent_registry_is_not_an_error(self, settings: Settings, runtime: FakeRuntime) -> None:
        RegistryManager(settings, runtime).stop()

        assert runtime.removed == []

    def test_existing_registry_is_removed(self, settings: Settings, runtime: FakeRuntime) -> None:
        runtime.add_container("registry", running=True)

        RegistryManager(settings, runtime).stop()

        assert "registry" not in runtime.containers

    def test_container_vanishing_mid_removal_is_tolerated(self, settings: Settings,
                                                          runtime: FakeRuntime) -> None:
        runtime.add_container("registry")
        runtime.remove_error = docker.errors.NotFound("No such container: registry")

        RegistryManager(settings, runtime).stop()

    def test_no_such_container_message_is_tolerated(self, settings: Settings,
                                                    runtime: FakeRuntime) -> None:
        runtime.add_container("registry")
        runtime.remove_error = docker.errors.APIError("Error: No such container: registry")

        RegistryManager(settings, runtime).stop()

    def test_other_removal_failures_are_fatal(self, settings: Settings, runtime: FakeRuntime) -> None:
        runtime.add_container("registry")
        runtime.remove_error = docker.errors.APIError("removal of container registry is already in progress")

        with pytest.raises(RuntimeError, match="Failed to remove container registry"):
            RegistryManager(settings, runtime).stop()
