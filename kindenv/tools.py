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

"""Installation of the CLIs the development workflow shells out to."""

from __future__ import annotations

import os
from collections.abc import MutableMapping
from pathlib import Path

import requests

from kindenv import console, logger
from kindenv.config import Settings, ToolSpec, load_tool_specs
from kindenv.constants import (
    DEFAULT_GOPATH,
    ENV_GITHUB_PATH,
    ENV_KUBECONFIG,
    EXECUTABLE_MODE,
)
from kindenv.runner import Runner
from kindenv.utils import Platform, detect_platform, tool_download_url


def _http_get(session: requests.Session, url: str, timeout: int) -> requests.Response:
    """GET *url*, failing on anything but a 2xx response.

    Raises:
        RuntimeError: If the request fails or the status is not 2xx.
    """
    try:
        response = session.get(url, timeout=timeout)
    except requests.RequestException as err:
        raise RuntimeError(f"GET {url} failed: {err}") from err
    if response.status_code > 299:
        raise RuntimeError(f"GET {url} ({response.status_code}): {response.reason}")
    return response


class ToolInstaller:
    """Makes sure a named development tool is installed.

    Presence on the search path is enough: an already-installed tool is
    never checked against the pinned version, except for go-installed tools
    that declare ``version_args``.
    """

    def __init__(
        self,
        settings: Settings,
        runner: Runner,
        tools: dict[str, ToolSpec] | None = None,
        session: requests.Session | None = None,
        target: Platform | None = None,
        environ: MutableMapping[str, str] | None = None,
    ) -> None:
        self.settings = settings
        self.runner = runner
        self.tools = load_tool_specs() if tools is None else tools
        self.session = session or requests.Session()
        self.target = target or detect_platform()
        self.environ = os.environ if environ is None else environ
        self._install_dir: Path | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def ensure(self, name: str) -> None:
        """Install *name* unless it is already available.

        Args:
            name: Tool name as listed in dependencies.yaml.

        Raises:
            RuntimeError: If the tool is unknown or cannot be installed.
        """
        spec = self.tools.get(name)
        if spec is None:
            raise RuntimeError(f"Unknown tool '{name}'")

        if spec.source == "download":
            self._ensure_download(spec)
        elif spec.source == "go":
            self._ensure_go_package(spec)
        elif spec.source == "make":
            self._ensure_make_target(spec)
        else:
            logger.warning("Automatic installation of %s is not supported yet, install it manually", name)

    def is_available(self, name: str) -> bool:
        return self.runner.which(name) is not None

    def install_dir(self) -> Path:
        """Directory downloaded tools are written to.

        Returns:
            ``settings.install_dir`` if set, else ``$(go env GOPATH)/bin``,
            else ``~/go/bin``.
        """
        if self._install_dir is None:
            if self.settings.install_dir is not None:
                self._install_dir = self.settings.resolve(self.settings.install_dir)
            else:
                result = self.runner.run("go", "env", "GOPATH")
                gopath = result.stdout.strip() if result.ok else ""
                self._install_dir = Path(gopath or DEFAULT_GOPATH) / "bin"
        return self._install_dir

    def resolve_version(self, spec: ToolSpec) -> str:
        """Return the version to download for *spec*.

        Pinned versions are used as-is; otherwise the version is read from
        the tool's "latest stable" endpoint.

        Raises:
            RuntimeError: If the version endpoint does not answer with 2xx.
        """
        if spec.version or not spec.version_url:
            return spec.version
        response = _http_get(self.session, spec.version_url, self.settings.http_timeout)
        version = response.text.strip()
        logger.info("Latest stable %s is %s", spec.name, version)
        return version

    def download(self, spec: ToolSpec, version: str) -> Path:
        """Download a tool binary into the install directory.

        Args:
            spec: Tool to download.
            version: Version to substitute into the URL template.

        Returns:
            Path of the installed executable.

        Raises:
            RuntimeError: If the download fails or cannot be written.
        """
        url = tool_download_url(spec.url, version, self.target)
        dest = self.install_dir() / f"{spec.name}{self.target.ext}"
        console.print(f"[yellow]\u2139\ufe0f  Downloading {spec.name} {version} to {dest}...[/yellow]")

        response = _http_get(self.session, url, self.settings.http_timeout)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_bytes(response.content)
            dest.chmod(EXECUTABLE_MODE)
        except OSError as err:
            raise RuntimeError(f"error writing {dest}") from err

        self._publish_install_dir()
        console.print(f"[green]\u2705 Installed {spec.name} {version}[/green]")
        return dest

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    def _ensure_download(self, spec: ToolSpec) -> None:
        if self.is_available(spec.name):
            return
        if self.target.goos in spec.unsupported_os:
            raise RuntimeError(spec.unsupported_reason or f"{spec.name} does not support {self.target.goos}")
        self.download(spec, self.resolve_version(spec))

    def _ensure_go_package(self, spec: ToolSpec) -> None:
        if self.is_available(spec.name) and self._has_version(spec):
            return
        module = f"{spec.package}@{spec.version or 'latest'}"
        console.print(f"[yellow]\u2139\ufe0f  Installing {module}...[/yellow]")
        self.runner.must("go", "install", module, stream=True)
        console.print(f"[green]\u2705 Installed {spec.name}[/green]")

    def _ensure_make_target(self, spec: ToolSpec) -> None:
        env = {ENV_KUBECONFIG: self.environ.get(ENV_KUBECONFIG, "")}
        self.runner.must("make", spec.target, env=env, stream=True)

    def _has_version(self, spec: ToolSpec) -> bool:
        """Check the installed tool reports the pinned version."""
        if not spec.version or not spec.version_args:
            return True
        result = self.runner.run(spec.name, *spec.version_args)
        return result.ok and spec.version in result.stdout + result.stderr

    def _publish_install_dir(self) -> None:
        """Append the install directory to $GITHUB_PATH on GitHub Actions."""
        github_path = self.environ.get(ENV_GITHUB_PATH, "")
        if not github_path:
            return
        logger.info("Adding %s to the PATH for the GitHub Actions agent", self.install_dir())
        with open(github_path, "a") as f:
            f.write(f"{self.install_dir()}\n")
