"""Run commands and inspect files either locally or on an ssh host."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
import shlex
import shutil
import subprocess
from typing import TYPE_CHECKING, Mapping, Sequence

from .locations import Location

if TYPE_CHECKING:
    from ..config_manager import AppConfig

logger = logging.getLogger(__name__)

# Prints the canonical path, the entry kind and the size, one per line.
_RESOLVE_SCRIPT = (
    'p=$(readlink -e -- "$1") || exit 3; printf "%s\\n" "$p"; '
    'if [ -d "$p" ]; then echo dir; echo 0; else echo file; wc -c < "$p"; fi'
)
_RUN_IN_SCRIPT = 'cd "$1" || exit 126; shift; exec "$@"'


@dataclass(frozen=True)
class ResolvedEntry:
    path: str
    is_directory: bool
    size: int


def run_captured(
    command: Sequence[str],
    *,
    cwd: str | None = None,
    env: Mapping[str, str] | None = None,
    merge_stderr: bool = False,
    timeout: float | None = None,
    text: bool = True,
) -> subprocess.CompletedProcess:
    """Run ``command`` to completion and capture its output.

    Text output is decoded as UTF-8 with undecodable bytes replaced, since
    file and symbol names are arbitrary bytes.

    ``OSError`` is raised when the program cannot be started and
    ``subprocess.TimeoutExpired`` when ``timeout`` elapses; the child is killed
    before the latter propagates.
    """
    combined_env = None
    if env:
        combined_env = os.environ.copy()
        combined_env.update(env)

    process = subprocess.Popen(
        list(command),
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
        stdin=subprocess.DEVNULL,
        text=text,
        encoding="utf-8" if text else None,
        errors="replace" if text else None,
        cwd=cwd,
        env=combined_env,
    )
    try:
        stdout, stderr = process.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        process.kill()
        process.communicate()
        raise
    empty = "" if text else b""
    return subprocess.CompletedProcess(
        list(command),
        process.returncode,
        stdout if stdout is not None else empty,
        stderr if stderr is not None else empty,
    )


class LocalExecutor:
    """Filesystem and process access on this machine."""

    def resolve(self, location: Location) -> ResolvedEntry | None:
        try:
            canonical = Path(location.path).resolve(strict=True)
            info = canonical.stat()
        except (OSError, RuntimeError):
            return None
        is_directory = canonical.is_dir()
        return ResolvedEntry(str(canonical), is_directory, 0 if is_directory else info.st_size)

    def which(self, program: str) -> str | None:
        return shutil.which(program)

    def prepare(
        self,
        argv: Sequence[str],
        *,
        cwd: str,
        env: Mapping[str, str] | None = None,
    ) -> tuple[list[str], str | None, Mapping[str, str] | None]:
        return list(argv), cwd, env

    def read_prefix(self, location: Location, size: int) -> bytes:
        if size <= 0:
            return b""
        with open(location.path, "rb") as handle:
            return handle.read(size)

    def read_bytes(self, location: Location) -> bytes:
        return Path(location.path).read_bytes()


class SshExecutor:
    """Filesystem and process access on the host named by a remote location."""

    def __init__(self, location: Location, ssh_executable: str = "ssh") -> None:
        if not location.is_remote:
            raise ValueError(f"{location.path} is not a remote location")
        self.location = location
        self.ssh_executable = ssh_executable

    def _ssh(self, remote_argv: Sequence[str]) -> list[str]:
        command = [self.ssh_executable, "-o", "BatchMode=yes"]
        if self.location.port:
            command.extend(["-p", str(self.location.port)])
        command.extend([self.location.ssh_target(), "--", shlex.join(remote_argv)])
        return command

    def _shell(self, script: str, *args: str, text: bool = True) -> subprocess.CompletedProcess:
        command = self._ssh(["sh", "-c", script, "sh", *args])
        logger.debug("remote: %s", shlex.join(command))
        return run_captured(command, text=text)

    def resolve(self, location: Location) -> ResolvedEntry | None:
        try:
            result = self._shell(_RESOLVE_SCRIPT, location.path)
        except OSError as exc:
            logger.debug("unable to reach %s: %s", location.display(), exc)
            return None
        lines = result.stdout.splitlines()
        if result.returncode != 0 or len(lines) < 3:
            return None
        try:
            size = int(lines[2].strip())
        except ValueError:
            return None
        return ResolvedEntry(lines[0], lines[1].strip() == "dir", size)

    def which(self, program: str) -> str | None:
        try:
            result = self._shell('command -v -- "$1"', program)
        except OSError:
            return None
        found = result.stdout.strip()
        if result.returncode != 0 or not found:
            return None
        return found.splitlines()[0]

    def prepare(
        self,
        argv: Sequence[str],
        *,
        cwd: str,
        env: Mapping[str, str] | None = None,
    ) -> tuple[list[str], str | None, Mapping[str, str] | None]:
        remote_argv = list(argv)
        if env:
            remote_argv = ["env", *(f"{key}={value}" for key, value in env.items()), *remote_argv]
        return self._ssh(["sh", "-c", _RUN_IN_SCRIPT, "sh", cwd, *remote_argv]), None, None

    def read_prefix(self, location: Location, size: int) -> bytes:
        if size <= 0:
            return b""
        return self._read(["head", "-c", str(size), "--", location.path])

    def read_bytes(self, location: Location) -> bytes:
        return self._read(["cat", "--", location.path])

    def _read(self, remote_argv: list[str]) -> bytes:
        result = run_captured(self._ssh(remote_argv), text=False)
        if result.returncode != 0:
            message = result.stderr.decode("utf-8", errors="replace").strip()
            raise OSError(f"{shlex.join(remote_argv)} failed on {self.location.host}: {message}")
        return result.stdout


Executor = LocalExecutor | SshExecutor


def executor_for(location: Location, config: "AppConfig | None" = None) -> Executor:
    if location.is_remote:
        ssh = config.ssh_executable if config is not None else "ssh"
        return SshExecutor(location, ssh_executable=ssh)
    return LocalExecutor()
