from __future__ import annotations

import pytest

from objview.controllers.file_hooks import DISASSEMBLY_HANDLER, FileOpenHooks, install_disassembly_handler
from objview.controllers.presenter import BufferPresenter
from objview.controllers.view_lifecycle import DisassemblyView

pytestmark = pytest.mark.timeout(10)


def test_disassembly_handler_activates_for_object_files(fake_backend, elf_file):
    hooks = FileOpenHooks()
    install_disassembly_handler(hooks)
    presenter = BufferPresenter.open(str(elf_file))

    view = hooks.dispatch(str(elf_file), presenter)

    assert isinstance(view, DisassemblyView)
    assert view.active
    assert presenter.identity.endswith("a.objdump")


def test_text_files_are_skipped_without_running_the_backend(fake_backend, tmp_path):
    notes = tmp_path / "notes.txt"
    notes.write_text("plain text\n")
    hooks = FileOpenHooks()
    install_disassembly_handler(hooks)

    assert hooks.dispatch(str(notes), BufferPresenter.open(str(notes))) is None
    assert fake_backend.calls == []


def test_first_accepting_handler_wins():
    hooks = FileOpenHooks()
    seen: list[str] = []
    hooks.register("never", lambda path: False, lambda path, presenter: seen.append("never"))
    hooks.register("always", lambda path: True, lambda path, presenter: "always")
    hooks.register("later", lambda path: True, lambda path, presenter: "later")

    assert hooks.dispatch("/tmp/x", BufferPresenter()) == "always"
    assert seen == []


def test_registering_twice_replaces_the_handler():
    hooks = FileOpenHooks()
    install_disassembly_handler(hooks)
    install_disassembly_handler(hooks)
    assert hooks.names() == [DISASSEMBLY_HANDLER]
    hooks.unregister(DISASSEMBLY_HANDLER)
    assert hooks.names() == []
