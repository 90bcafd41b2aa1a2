"""End-to-end checks against a real objdump, using the running interpreter as the sample binary."""

from __future__ import annotations

import os
import shutil
import sys
from pathlib import Path

import pytest

from objview.config_manager import AppConfig
from objview.controllers.presenter import BufferPresenter
from objview.controllers.view_lifecycle import DisassemblyView
from objview.models.probe_result import ProbeReason
from objview.models.view_state import ViewState
from objview.services.probe import BackendProbe

pytestmark = [
    pytest.mark.timeout(120),
    pytest.mark.skipif(shutil.which("objdump") is None, reason="objdump is not installed"),
    pytest.mark.skipif(not sys.platform.startswith("linux"), reason="expects an ELF interpreter"),
]


@pytest.fixture
def interpreter_copy(tmp_path) -> Path:
    target = tmp_path / "a.out"
    shutil.copyfile(Path(sys.executable).resolve(), target)
    return target


def test_real_round_trip(interpreter_copy):
    original = interpreter_copy.read_bytes()
    presenter = BufferPresenter.open(str(interpreter_copy))
    view = DisassemblyView(presenter, AppConfig())

    assert view.setup(str(interpreter_copy))
    assert view.state is ViewState.ACTIVE
    assert presenter.identity == str(interpreter_copy.resolve().with_suffix(".objdump"))
    assert "file format" in presenter.text
    assert "Disassembly of section" in presenter.text

    view.teardown()
    assert view.state is ViewState.INACTIVE
    assert presenter.content == original
    assert presenter.identity == str(interpreter_copy.resolve())


def test_real_probe_rejects_text(tmp_path):
    notes = tmp_path / "notes.txt"
    notes.write_text("definitely not an object file\n")
    assert BackendProbe().can_disassemble(str(notes)).reason is ProbeReason.FORMAT_UNRECOGNIZED


def test_real_dash_prefixed_file(tmp_path, interpreter_copy):
    target = tmp_path / "-x"
    interpreter_copy.rename(target)
    view = DisassemblyView(BufferPresenter(str(target), reader=lambda location: b""), AppConfig())
    assert view.setup(str(target))
    assert "Disassembly of section" in view.text
    view.teardown()


def test_real_probe_survives_non_utf8_names(tmp_path):
    notes = tmp_path / os.fsdecode(b"caf\xe9.txt")
    notes.write_text("definitely not an object file\n")
    assert BackendProbe().can_disassemble(str(notes)).reason is ProbeReason.FORMAT_UNRECOGNIZED
