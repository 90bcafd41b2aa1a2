from __future__ import annotations

import logging

import pytest

from objview.__main__ import EXIT_BACKEND_FAILED, EXIT_REJECTED, main

pytestmark = pytest.mark.timeout(10)


@pytest.fixture(autouse=True)
def _restore_logging():
    logger = logging.getLogger("objview")
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


@pytest.fixture
def config_args(tmp_path) -> list[str]:
    return ["--config", str(tmp_path / "settings.json")]


def test_probe_accepts_object_file(fake_backend, elf_file, config_args, capsys):
    assert main([*config_args, "probe", str(elf_file)]) == 0
    assert capsys.readouterr().out.strip() == "ok"


def test_probe_reports_reason(fake_backend, tmp_path, config_args, capsys):
    assert main([*config_args, "probe", str(tmp_path)]) == EXIT_REJECTED
    assert capsys.readouterr().out.strip() == "is-directory"


def test_dump_prints_listing(fake_backend, elf_file, config_args, capsys, sample_listing):
    assert main([*config_args, "--backend", "llvm-objdump", "dump", str(elf_file)]) == 0
    assert capsys.readouterr().out == sample_listing
    assert fake_backend.calls_with("-d")[0]["command"][0] == "llvm-objdump"


def test_dump_reports_backend_failure(fake_backend, elf_file, config_args, capsys):
    fake_backend.disassembly = ""
    fake_backend.returncode = 1
    fake_backend.stderr = "objdump: a.out: memory exhausted"
    assert main([*config_args, "dump", str(elf_file)]) == EXIT_BACKEND_FAILED
    assert "memory exhausted" in capsys.readouterr().err


def test_symbols_lists_by_address(fake_backend, elf_file, config_args, capsys):
    assert main([*config_args, "symbols", str(elf_file)]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines == [
        "0000000000001000 _init",
        "0000000000001040 _start",
        "0000000000001139 main",
    ]


def test_symbols_single_name(fake_backend, elf_file, config_args, capsys):
    assert main([*config_args, "symbols", str(elf_file), "--name", "main"]) == 0
    assert capsys.readouterr().out.strip() == "0x1139"
    assert main([*config_args, "symbols", str(elf_file), "--name", "nope"]) == EXIT_REJECTED


def test_symbols_on_empty_file(fake_backend, tmp_path, config_args, capsys):
    empty = tmp_path / "empty.o"
    empty.write_bytes(b"")
    assert main([*config_args, "symbols", str(empty)]) == EXIT_REJECTED
    assert "zero-size" in capsys.readouterr().err


def test_gui_receives_command_line_overrides(monkeypatch, config_args):
    import objview.app

    launched = {}

    def fake_gui_main(argv, config_manager=None, config=None):
        launched.update(argv=argv, config=config)
        return 0

    monkeypatch.setattr(objview.app, "main", fake_gui_main)
    assert main([*config_args, "--backend", "llvm-objdump", "--no-remote", "gui", "a.out"]) == 0
    assert launched["argv"][1:] == ["a.out"]
    assert launched["config"].backend_executable == "llvm-objdump"
    assert launched["config"].disable_on_remote_filesystems is True


def test_symbols_does_not_read_the_original_back(fake_backend, elf_file, config_args, monkeypatch):
    from objview.services import executors

    def refuse(self, location):
        raise AssertionError(f"read {location.path}")

    monkeypatch.setattr(executors.LocalExecutor, "read_bytes", refuse)
    assert main([*config_args, "symbols", str(elf_file)]) == 0
