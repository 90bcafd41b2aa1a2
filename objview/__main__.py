"""Command line access to the probe, the disassembler and the symbol index."""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
import sys

from .config_manager import ConfigManager, default_config_path
from .controllers.presenter import BufferPresenter
from .controllers.view_lifecycle import DisassemblyView
from .logging import LEVELS, setup_logging
from .services.objdump_runner import BackendInvocationError, DisassemblyRunner
from .services.probe import BackendProbe

EXIT_REJECTED = 1
EXIT_BACKEND_FAILED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="objview", description="Browse object files as disassembly")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Settings file (defaults to {default_config_path()})",
    )
    parser.add_argument("--backend", default=None, help="Disassembler executable to use instead of the configured one")
    parser.add_argument(
        "--no-remote",
        action="store_true",
        help="Refuse files on ssh:// and sftp:// locations",
    )
    parser.add_argument("--log-level", choices=sorted(LEVELS), default="warning")
    parser.add_argument("--log-file", default=None, help="Also write log records to this file")

    commands = parser.add_subparsers(dest="command", required=True)
    probe = commands.add_parser("probe", help="Report whether a file can be disassembled")
    probe.add_argument("path")
    dump = commands.add_parser("dump", help="Print the disassembly of a file")
    dump.add_argument("path")
    dump.add_argument("--timeout", type=float, default=None, help="Give up on the backend after this many seconds")
    symbols = commands.add_parser("symbols", help="List the symbols of a file's disassembly")
    symbols.add_argument("path")
    symbols.add_argument("--name", default=None, help="Print only the address of this symbol")
    gui = commands.add_parser("gui", help="Open the viewer window")
    gui.add_argument("path", nargs="?")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(level=LEVELS[args.log_level], file=args.log_file)

    manager = ConfigManager(args.config)
    config = manager.load()
    if args.backend:
        config = replace(config, backend_executable=args.backend)
    if args.no_remote:
        config = replace(config, disable_on_remote_filesystems=True)

    if args.command == "gui":
        from .app import main as gui_main

        return gui_main([sys.argv[0], *([args.path] if args.path else [])], manager, config)

    probe = BackendProbe(config)
    if args.command == "probe":
        result = probe.can_disassemble(args.path)
        print(result.reason.value)
        return 0 if result else EXIT_REJECTED

    try:
        if args.command == "dump":
            result = probe.can_disassemble(args.path)
            if not result:
                print(f"{args.path}: {result.reason.value}", file=sys.stderr)
                return EXIT_REJECTED
            output = DisassemblyRunner(config).disassemble(result.identity, timeout=args.timeout)
            sys.stdout.write(output.text)
            return 0

        view = DisassemblyView(BufferPresenter(args.path, reader=lambda location: b""), config, probe=probe)
        if not view.setup(args.path):
            print(f"{args.path}: {view.last_probe.reason.value}", file=sys.stderr)
            return EXIT_REJECTED
        try:
            if args.name is not None:
                address = view.address_of(args.name)
                if address is None:
                    print(f"{args.name}: no such symbol", file=sys.stderr)
                    return EXIT_REJECTED
                print(f"0x{address:x}")
            else:
                for address, name in view.symbols.by_address():
                    print(f"{address:016x} {name}")
        finally:
            view.teardown()
    except BackendInvocationError as exc:
        print(f"objview: {exc}", file=sys.stderr)
        return EXIT_BACKEND_FAILED
    return 0


if __name__ == "__main__":
    sys.exit(main())
