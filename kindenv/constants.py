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

"""Constants, dependency loading, and dep_value helper."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

DEPENDENCIES_FILE = Path(__file__).resolve().parent / "dependencies.yaml"


def load_dependencies(path: Path = DEPENDENCIES_FILE) -> dict:
    """Load the tool catalogue from dependencies.yaml.

    Args:
        path: YAML file to read.

    Returns:
        Parsed YAML content as a nested dictionary.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


DEPENDENCIES = load_dependencies()


def dep_value(*keys: str, default: Any = None) -> Any:
    """Safely traverse the DEPENDENCIES dict by key path.

    Args:
        *keys: Sequence of dictionary keys to traverse.
        default: Value to return if any key is missing.

    Returns:
        The value at the nested key path, or *default* if not found.
    """
    node = DEPENDENCIES
    for key in keys:
        if not isinstance(node, dict):
            return default
        node = node.get(key)
        if node is None:
            return default
    return node


# -- Cluster defaults --
DEFAULT_CLUSTER_NAME = "porter"
DEFAULT_KUBECONFIG = "kind.config"
DEFAULT_KIND_NETWORK = "kind"

# -- Namespaces --
DEFAULT_OPERATOR_NAMESPACE = "porter-operator-system"

# -- Registry defaults --
DEFAULT_REGISTRY_CONTAINER = "registry"
DEFAULT_REGISTRY_IMAGE = "registry:2"
DEFAULT_REGISTRY_PORT = 5000

# -- Relative paths --
REL_KIND_CONFIG_TEMPLATE = "hack/kind.config.yaml"
REL_KIND_CONFIG_RENDERED = "kind.config.yaml"
REL_REGISTRY_MANIFEST = "hack/local-registry.yaml"
REL_REGISTRY_MANIFEST_RENDERED = "local-registry.yaml"
REL_BOILERPLATE = "hack/boilerplate.go.txt"

# -- Tool installation --
DEFAULT_HTTP_TIMEOUT_SECONDS = 60
DEFAULT_GOPATH = Path.home() / "go"
EXECUTABLE_MODE = 0o755

# -- Environment variables --
ENV_KUBECONFIG = "KUBECONFIG"
ENV_GITHUB_PATH = "GITHUB_PATH"

# -- Command output markers --
NO_SUCH_CONTAINER = "No such container"
UNIT_TEST_COVERAGE_PROFILE = "coverage-unit.out"
