from __future__ import annotations

from dataclasses import dataclass, field

from .file_identity import FileIdentity


@dataclass
class DisassemblyOutput:
    text: str
    identity: FileIdentity
    command: list[str] = field(default_factory=list)
