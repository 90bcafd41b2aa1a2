"""Registration point used by a file-opening shell to pick a view for a file."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Callable

from ..config_manager import AppConfig
from ..services import sniffer
from ..services.locations import parse_location
from ..services.probe import BackendProbe
from .presenter import Presenter
from .view_lifecycle import DisassemblyView

logger = logging.getLogger(__name__)

Predicate = Callable[[str], bool]
Activator = Callable[[str, Presenter], Any]

DISASSEMBLY_HANDLER = "disassembly"


@dataclass
class FileHandler:
    name: str
    predicate: Predicate
    activate: Activator


class FileOpenHooks:
    def __init__(self) -> None:
        self._handlers: list[FileHandler] = []

    def register(self, name: str, predicate: Predicate, activate: Activator) -> None:
        self.unregister(name)
        self._handlers.append(FileHandler(name, predicate, activate))

    def unregister(self, name: str) -> None:
        self._handlers = [handler for handler in self._handlers if handler.name != name]

    def names(self) -> list[str]:
        return [handler.name for handler in self._handlers]

    def dispatch(self, path: str, presenter: Presenter) -> Any:
        """Activate the first handler that accepts ``path``; ``None`` if none do."""
        for handler in self._handlers:
            if handler.predicate(path):
                logger.debug("%s handles %s", handler.name, path)
                return handler.activate(path, presenter)
        return None


def looks_disassemblable(path: str, probe: BackendProbe) -> bool:
    location = parse_location(path)
    if not location.is_remote:
        # Text files are rejected here without spawning the backend.
        try:
            if not sniffer.is_binary(location.path, probe.config.binary_sniff_chunk_size):
                return False
        except OSError:
            return False
    return probe.can_disassemble(location).ok


def install_disassembly_handler(
    hooks: FileOpenHooks,
    config: AppConfig | None = None,
    probe: BackendProbe | None = None,
) -> None:
    config = config or AppConfig()
    probe = probe or BackendProbe(config)

    def activate(path: str, presenter: Presenter) -> DisassemblyView | None:
        view = DisassemblyView(presenter, config, probe=probe)
        return view if view.setup(path) else None

    hooks.register(DISASSEMBLY_HANDLER, lambda path: looks_disassemblable(path, probe), activate)
