from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .file_identity import FileIdentity


class ProbeReason(str, Enum):
    """Why a file was accepted or rejected for disassembly."""

    NOT_FOUND = "not-found"
    IS_DIRECTORY = "is-directory"
    ZERO_SIZE = "zero-size"
    BACKEND_MISSING = "backend-missing"
    REMOTE_DISALLOWED = "remote-disallowed"
    FORMAT_UNRECOGNIZED = "format-unrecognized"
    OK = "ok"


@dataclass(frozen=True)
class ProbeResult:
    ok: bool
    reason: ProbeReason
    identity: FileIdentity | None = None
    detail: str = ""

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def accept(cls, identity: FileIdentity) -> "ProbeResult":
        return cls(True, ProbeReason.OK, identity)

    @classmethod
    def reject(
        cls,
        reason: ProbeReason,
        identity: FileIdentity | None = None,
        detail: str = "",
    ) -> "ProbeResult":
        return cls(False, reason, identity, detail)
