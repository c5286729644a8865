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

"""Utility functions for platform detection and tool URLs."""

from __future__ import annotations

import platform
from dataclasses import dataclass

_GOARCH = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
    "i386": "386",
    "i686": "386",
}


@dataclass(frozen=True)
class Platform:
    """Target platform for binary downloads, named the way Go names them.

    Attributes:
        goos: Operating system (``linux``, ``darwin``, ``windows``).
        goarch: CPU architecture (``amd64``, ``arm64``, ...).
        ext: Executable file extension, ``.exe`` on Windows.
    """

    goos: str
    goarch: str
    ext: str = ""


def detect_platform(system: str | None = None, machine: str | None = None) -> Platform:
    """Describe the host in Go's GOOS/GOARCH vocabulary.

    Args:
        system: Override for ``platform.system()``.
        machine: Override for ``platform.machine()``.

    Returns:
        The host platform.
    """
    goos = (system or platform.system()).lower()
    raw_arch = (machine or platform.machine()).lower()
    goarch = _GOARCH.get(raw_arch, raw_arch)
    ext = ".exe" if goos == "windows" else ""
    return Platform(goos=goos, goarch=goarch, ext=ext)


def tool_download_url(template: str, version: str, target: Platform) -> str:
    """Fill in a tool download URL template.

    Args:
        template: URL with ``{version}``, ``{goos}``, ``{goarch}`` and ``{ext}``
            placeholders.
        version: Tool version tag (e.g. ``v0.10.0``).
        target: Platform to download for.

    Returns:
        The concrete download URL.
    """
    return template.format(version=version, goos=target.goos, goarch=target.goarch, ext=target.ext)
