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

"""
cli.py - Development tasks for the Porter operator.

Every task is a subcommand. Prerequisite tasks run automatically, once each.

Examples:
    # Bring up (or reuse) the kind test cluster and local registry
    kindenv ensure-cluster

    # Tear the cluster down
    kindenv delete-kind-cluster

    # Run the unit tests
    kindenv test

Environment Variables:
    Configuration can be overridden via KINDENV_* environment variables, e.g.
    KINDENV_CLUSTER_NAME (default: porter) or KINDENV_REGISTRY_HOST_PORT
    (default: 5000). GITHUB_PATH, when set, receives the tool install directory.

For detailed usage information, run: kindenv --help
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable

import typer

from kindenv import console
from kindenv.config import Settings, display_config
from kindenv.orchestrator import Workspace, build_graph
from kindenv.tasks import TaskGraph


def _task_command(graph: TaskGraph, name: str) -> Callable[[], None]:
    def _command() -> None:
        graph.run(name)

    _command.__name__ = name.replace("-", "_")
    return _command


def create_app(workspace: Workspace | None = None) -> typer.Typer:
    """Build the CLI with one subcommand per task.

    Args:
        workspace: Workspace for the tasks, or None to build one from the
            environment.

    Returns:
        The Typer application.

    Raises:
        TaskGraphError: If the task declarations are inconsistent.
    """
    if workspace is None:
        workspace = Workspace.create(Settings())
    graph = build_graph(workspace)
    graph.validate()

    app = typer.Typer(
        help="Development tasks for the Porter operator.",
        no_args_is_help=True,
    )

    @app.callback()
    def _main_callback() -> None:
        """Initialize logging for all subcommands."""
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s [%(levelname)s] %(message)s",
            datefmt="%H:%M:%S",
        )

    @app.command("show-config")
    def show_config() -> None:
        """Print the resolved configuration."""
        display_config(workspace.settings)

    for task in graph.tasks():
        app.command(task.name, help=task.help, hidden=task.hidden)(_task_command(graph, task.name))

    return app


def main() -> None:
    try:
        app = create_app()
        app()
    except Exception as e:
        console.print(f"[red]\u274c {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
