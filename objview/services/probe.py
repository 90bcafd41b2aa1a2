"""Decide whether the disassembler backend can handle a file."""

from __future__ import annotations

import logging
import os
from typing import Callable

from ..config_manager import AppConfig
from ..models.file_identity import FileIdentity
from ..models.probe_result import ProbeReason, ProbeResult
from . import sniffer
from .executors import Executor, LocalExecutor, executor_for, run_captured
from .locations import Location, parse_location

logger = logging.getLogger(__name__)

UNRECOGNIZED_SIGNAL = "file format not recognized"
# objdump's diagnostics are translated; pin them to English so the signal matches.
BACKEND_ENV = {"LC_ALL": "C"}


class BackendProbe:
    """Cheap, repeatable check run before committing to a full disassembly.

    Checks run cheapest first and stop at the first failure, so most files are
    rejected without spawning the backend at all.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        executor_factory: Callable[[Location, AppConfig], Executor] = executor_for,
    ) -> None:
        self.config = config or AppConfig()
        self._executor_factory = executor_factory

    def can_disassemble(self, path: str | os.PathLike[str] | Location) -> ProbeResult:
        try:
            location = parse_location(path)
        except ValueError as exc:
            return self._reject(ProbeReason.NOT_FOUND, detail=str(exc))

        executor = self._executor_factory(location, self.config)
        entry = executor.resolve(location)
        if entry is None:
            return self._reject(ProbeReason.NOT_FOUND, detail=location.display())
        identity = FileIdentity(
            location=location.with_path(entry.path),
            exists=True,
            size=entry.size,
            is_directory=entry.is_directory,
        )

        backend = self.config.backend_executable
        lookup = executor if identity.is_remote and not self.config.disable_on_remote_filesystems else None
        if (lookup or LocalExecutor()).which(backend) is None:
            return self._reject(ProbeReason.BACKEND_MISSING, identity, backend)

        if identity.is_remote and self.config.disable_on_remote_filesystems:
            return self._reject(ProbeReason.REMOTE_DISALLOWED, identity)
        if identity.is_directory:
            return self._reject(ProbeReason.IS_DIRECTORY, identity)
        if identity.size == 0:
            return self._reject(ProbeReason.ZERO_SIZE, identity)

        if identity.is_remote:
            try:
                prefix = executor.read_prefix(identity.location, self.config.binary_sniff_chunk_size)
            except OSError as exc:
                return self._reject(ProbeReason.NOT_FOUND, identity, str(exc))
            if not sniffer.is_binary(prefix, self.config.binary_sniff_chunk_size):
                return self._reject(ProbeReason.FORMAT_UNRECOGNIZED, identity, "no NUL byte in prefix")

        return self._query_headers(identity, executor)

    def _query_headers(self, identity: FileIdentity, executor: Executor) -> ProbeResult:
        command, cwd, env = executor.prepare(
            [self.config.backend_executable, "--file-headers", "--", identity.name],
            cwd=identity.directory,
            env=BACKEND_ENV,
        )
        try:
            result = run_captured(command, cwd=cwd, env=env, merge_stderr=True)
        except OSError as exc:
            return self._reject(ProbeReason.BACKEND_MISSING, identity, str(exc))

        if UNRECOGNIZED_SIGNAL in (result.stdout or "").lower():
            return self._reject(ProbeReason.FORMAT_UNRECOGNIZED, identity)
        logger.debug("%s accepted by %s", identity.display(), self.config.backend_executable)
        return ProbeResult.accept(identity)

    def _reject(
        self,
        reason: ProbeReason,
        identity: FileIdentity | None = None,
        detail: str = "",
    ) -> ProbeResult:
        subject = identity.display() if identity is not None else detail
        logger.debug("cannot disassemble %s: %s", subject, reason.value)
        return ProbeResult.reject(reason, identity, detail)
