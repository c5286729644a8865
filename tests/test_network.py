"""Unit tests for docker network linking."""

from __future__ import annotations

from kindenv.network import NetworkLinker

from .conftest import FakeRuntime


class TestIsLinked:
    """Tests for NetworkLinker.is_linked."""

    def test_linked_when_network_id_attached(self, runtime: FakeRuntime) -> None:
        runtime.add_container("registry", networks={"b71d0a9e3c11", "f3a91c0e77d2"})

        assert NetworkLinker(runtime).is_linked("registry", "kind") is True

    def test_not_linked_when_network_id_absent(self, runtime: FakeRuntime) -> None:
        runtime.add_container("registry", networks={"b71d0a9e3c11"})

        assert NetworkLinker(runtime).is_linked("registry", "kind") is False

    def test_identifier_prefix_is_not_membership(self, runtime: FakeRuntime) -> None:
        runtime.add_container("registry", networks={"f3a91c0e77d2aa55"})

        assert NetworkLinker(runtime).is_linked("registry", "kind") is False

    def test_missing_network(self, runtime: FakeRuntime) -> None:
        runtime.add_container("registry")

        assert NetworkLinker(runtime).is_linked("registry", "no-such-network") is False

    def test_missing_container(self, runtime: FakeRuntime) -> None:
        assert NetworkLinker(runtime).is_linked("registry", "kind") is False


def test_connect_then_disconnect(runtime: FakeRuntime) -> None:
    runtime.add_container("registry")
    linker = NetworkLinker(runtime)

    linker.connect("registry", "kind")
    assert linker.is_linked("registry", "kind") is True

    linker.disconnect("registry", "kind")
    assert linker.is_linked("registry", "kind") is False
