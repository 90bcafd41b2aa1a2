"""Helpers for invoking the disassembler backend against a probed file."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from typing import Callable, Sequence

from ..config_manager import AppConfig
from ..models.disassembly_output import DisassemblyOutput
from ..models.file_identity import FileIdentity
from .executors import Executor, executor_for, run_captured
from .locations import Location, parse_location
from .probe import BACKEND_ENV

logger = logging.getLogger(__name__)


class BackendInvocationError(RuntimeError):
    """The backend could not be run against a file that passed the probe."""

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str] = (),
        returncode: int | None = None,
    ) -> None:
        super().__init__(message)
        self.command = list(command)
        self.returncode = returncode


class DisassemblyRunner:
    """Run ``<backend> -d`` and capture the listing.

    The caller is responsible for probing first; nothing here re-checks the
    file.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        executor_factory: Callable[[Location, AppConfig], Executor] = executor_for,
    ) -> None:
        self.config = config or AppConfig()
        self._executor_factory = executor_factory

    def disassemble(
        self,
        target: FileIdentity | Location | str | os.PathLike[str],
        *,
        timeout: float | None = None,
        on_output: Callable[[str], None] | None = None,
    ) -> DisassemblyOutput:
        identity = self._identity(target)
        executor = self._executor_factory(identity.location, self.config)
        argv = [self.config.backend_executable, *self.config.extra_arguments, "-d", "--", identity.name]
        command, cwd, env = executor.prepare(argv, cwd=identity.directory, env=BACKEND_ENV)

        if on_output:
            on_output(f"Disassembling {identity.name}...")
        logger.info("running %s in %s", shlex.join(argv), identity.directory)

        try:
            result = run_captured(command, cwd=cwd, env=env, timeout=timeout)
        except OSError as exc:
            logger.error("unable to start %s: %s", self.config.backend_executable, exc)
            raise BackendInvocationError(
                f"Unable to start '{self.config.backend_executable}' for {identity.display()}: {exc}",
                command=command,
            ) from exc
        except subprocess.TimeoutExpired as exc:
            logger.error("%s timed out after %ss", self.config.backend_executable, timeout)
            raise BackendInvocationError(
                f"'{self.config.backend_executable}' did not finish within {timeout}s for {identity.display()}",
                command=command,
            ) from exc

        if result.returncode != 0 and not result.stdout:
            details = (result.stderr or "").strip() or "Unknown error"
            logger.error("%s exited with %s: %s", self.config.backend_executable, result.returncode, details)
            raise BackendInvocationError(
                f"'{self.config.backend_executable}' exited with {result.returncode}: {details}",
                command=command,
                returncode=result.returncode,
            )

        if on_output:
            on_output(f"Disassembly of {identity.name} finished.")
        return DisassemblyOutput(text=result.stdout, identity=identity, command=argv)

    def _identity(self, target: FileIdentity | Location | str | os.PathLike[str]) -> FileIdentity:
        if isinstance(target, FileIdentity):
            return target
        return FileIdentity(location=parse_location(target))
