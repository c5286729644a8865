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

"""Running external programs.

Every call returns a :class:`CommandResult`. Callers decide per call site
whether a failure is tolerated (inspect ``result.ok``) or fatal
(``result.check()`` or :meth:`CommandRunner.must`).
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import sh

from kindenv import logger

COMMAND_NOT_FOUND_EXIT_CODE = 127


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command.

    Attributes:
        command: Program and arguments that were run.
        exit_code: Process exit status.
        stdout: Captured standard output (empty when streamed).
        stderr: Captured standard error (empty when streamed).
    """

    command: tuple[str, ...]
    exit_code: int = 0
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def check(self) -> CommandResult:
        """Escalate a failed result.

        Returns:
            This result, when it succeeded.

        Raises:
            CommandError: If the command exited non-zero.
        """
        if not self.ok:
            raise CommandError(self)
        return self


class CommandError(RuntimeError):
    """An external command that had to succeed did not."""

    def __init__(self, result: CommandResult) -> None:
        self.result = result
        message = f"'{' '.join(result.command)}' failed with exit code {result.exit_code}"
        detail = (result.stderr or result.stdout).strip()
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class Runner(Protocol):
    """What the provisioning code needs from a command runner."""

    def run(self, program: str, *args: str, env: dict[str, str] | None = None,
            stream: bool = False) -> CommandResult: ...

    def must(self, program: str, *args: str, env: dict[str, str] | None = None,
             stream: bool = False) -> CommandResult: ...

    def which(self, program: str) -> str | None: ...


def _decode(output: bytes | str | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode(errors="replace")
    return output


class CommandRunner:
    """Runs programs through ``sh`` and reports the outcome as a result."""

    def __init__(self, cwd: Path | None = None) -> None:
        self.cwd = cwd

    def run(
        self,
        program: str,
        *args: str,
        env: dict[str, str] | None = None,
        stream: bool = False,
    ) -> CommandResult:
        """Run a program and return its result without raising on failure.

        Args:
            program: Executable name or path.
            *args: Command-line arguments.
            env: Variables to set on top of the current environment.
            stream: Forward output to the terminal instead of capturing it.

        Returns:
            The command's result; a missing executable yields exit code 127.
        """
        command = (program, *args)
        logger.debug("Running %s", " ".join(command))

        kwargs: dict = {"_return_cmd": True}
        if env:
            kwargs["_env"] = {**os.environ, **env}
        if self.cwd is not None:
            kwargs["_cwd"] = str(self.cwd)
        if stream:
            kwargs["_out"] = sys.stdout
            kwargs["_err"] = sys.stderr

        try:
            proc = sh.Command(program)(*args, **kwargs)
        except sh.CommandNotFound:
            return CommandResult(command, COMMAND_NOT_FOUND_EXIT_CODE, "", f"{program}: command not found")
        except sh.ErrorReturnCode as err:
            return CommandResult(command, err.exit_code, _decode(err.stdout), _decode(err.stderr))
        return CommandResult(command, proc.exit_code, _decode(proc.stdout), _decode(proc.stderr))

    def must(
        self,
        program: str,
        *args: str,
        env: dict[str, str] | None = None,
        stream: bool = False,
    ) -> CommandResult:
        """Run a program that has to succeed.

        Raises:
            CommandError: If the program exits non-zero or cannot be found.
        """
        return self.run(program, *args, env=env, stream=stream).check()

    def which(self, program: str) -> str | None:
        """Look up *program* on the search path.

        Args:
            program: Executable name.

        Returns:
            Full path of the executable, or None if it is not installed.
        """
        try:
            found = sh.which(program)
        except sh.ErrorReturnCode:
            return None
        return str(found).strip() if found else None
