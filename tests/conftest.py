import os
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from objview.services import executors  # noqa: E402

HEADERS_OUTPUT = """\

a.out:     file format elf64-x86-64
architecture: i386:x86-64, flags 0x00000150:
HAS_SYMS, DYNAMIC, D_PAGED
start address 0x0000000000001040
"""

SAMPLE_LISTING = """\

a.out:     file format elf64-x86-64


Disassembly of section .init:

0000000000001000 <_init>:
    1000:\tf3 0f 1e fa          \tendbr64
    1004:\t48 83 ec 08          \tsub    $0x8,%rsp

Disassembly of section .plt:

0000000000001020 <puts@plt>:
    1020:\tff 25 e2 2f 00 00    \tjmp    *0x2fe2(%rip)

Disassembly of section .text:

0000000000001040 <_start>:
    1040:\tf3 0f 1e fa          \tendbr64
    1044:\t31 ed                \txor    %ebp,%ebp

0000000000001139 <main>:
    1139:\t55                   \tpush   %rbp
    113a:\t48 89 e5             \tmov    %rsp,%rbp
    113d:\te8 de fe ff ff       \tcall   1020 <puts@plt>
    1142:\tc3                   \tret
"""


class _FakeProcess:
    def __init__(self, backend: "FakeBackend", command: list[str], kwargs: dict[str, Any]):
        self._backend = backend
        self._command = command
        self._merged = kwargs.get("stderr") is subprocess.STDOUT
        self.returncode: int | None = None
        self.killed = False

    def communicate(self, timeout=None):
        if self._backend.hang and not self.killed:
            raise subprocess.TimeoutExpired(self._command, timeout)
        if self.killed:
            self.returncode = -9
            return "", None if self._merged else ""
        if "--file-headers" in self._command:
            stdout = self._backend.headers_output
        else:
            stdout = self._backend.disassembly
        self.returncode = self._backend.returncode
        stderr = self._backend.stderr
        if self._merged:
            return stdout + stderr, None
        return stdout, stderr

    def kill(self):
        self.killed = True
        self._backend.killed += 1


@dataclass
class FakeBackend:
    headers_output: str = HEADERS_OUTPUT
    disassembly: str = SAMPLE_LISTING
    stderr: str = ""
    returncode: int = 0
    fail_start: bool = False
    hang: bool = False
    killed: int = 0
    calls: list[dict[str, Any]] = field(default_factory=list)

    def popen(self, command, **kwargs):
        self.calls.append({"command": list(command), **kwargs})
        if self.fail_start:
            raise FileNotFoundError(2, "No such file or directory", command[0])
        return _FakeProcess(self, list(command), kwargs)

    def calls_with(self, flag: str) -> list[dict[str, Any]]:
        return [call for call in self.calls if flag in call["command"]]


@pytest.fixture
def fake_backend(monkeypatch) -> FakeBackend:
    backend = FakeBackend()
    monkeypatch.setattr(executors.subprocess, "Popen", backend.popen)
    monkeypatch.setattr(executors.shutil, "which", lambda name: f"/usr/bin/{name}")
    return backend


@pytest.fixture
def sample_listing() -> str:
    return SAMPLE_LISTING


@pytest.fixture
def elf_file(tmp_path) -> Path:
    path = tmp_path / "a.out"
    path.write_bytes(b"\x7fELF\x02\x01\x01\x00" + bytes(range(256)) * 4)
    return path


@pytest.fixture
def script_backend(tmp_path):
    """Write an executable shell script that stands in for the backend."""
    if sys.platform == "win32":
        pytest.skip("needs a POSIX shell")

    def write(body: str) -> str:
        path = tmp_path / "bin" / "fake-objdump"
        path.parent.mkdir(exist_ok=True)
        path.write_text("#!/bin/sh\n" + body)
        path.chmod(0o755)
        return str(path)

    return write
