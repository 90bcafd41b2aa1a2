from __future__ import annotations

import re
import sys
from pathlib import Path
from typing import Sequence

from PySide6.QtCore import Signal
from PySide6.QtGui import QAction, QColor, QFont, QSyntaxHighlighter, QTextCharFormat, QTextCursor, QTextDocument
from PySide6.QtWidgets import (
    QApplication,
    QFileDialog,
    QInputDialog,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QWidget,
)

from .config_manager import AppConfig, ConfigManager
from .controllers.file_hooks import FileOpenHooks, install_disassembly_handler
from .controllers.view_lifecycle import DisassemblyView
from .models.file_identity import FileIdentity
from .services.executors import executor_for
from .services.locations import Location, parse_location
from .services.objdump_runner import BackendInvocationError
from .services.probe import BackendProbe


class AsmHighlighter(QSyntaxHighlighter):
    """Colors objdump -d listings: symbol headers, addresses, opcodes and references."""

    RULES = (
        (r"^[0-9a-fA-F]+ <[^>]+>:$", "#c678dd", True),
        (r"^\s*[0-9a-fA-F]+:", "#7f848e", False),
        (r"(?<=:\t)(?:[0-9a-f]{2} )+", "#5c6370", False),
        (r"(?<=\t)[a-z][a-z0-9.]*(?=\s|$)", "#61afef", False),
        (r"<[^>\n]+>", "#e5c07b", False),
        (r"[#;].*$", "#98c379", False),
        (r"^\S.*file format .*$", "#56b6c2", True),
    )

    def __init__(self, document: QTextDocument) -> None:
        super().__init__(document)
        self._rules: list[tuple[re.Pattern[str], QTextCharFormat]] = []
        for pattern, color, bold in self.RULES:
            text_format = QTextCharFormat()
            text_format.setForeground(QColor(color))
            if bold:
                text_format.setFontWeight(QFont.Weight.Bold)
            self._rules.append((re.compile(pattern), text_format))

    def highlightBlock(self, text: str) -> None:  # type: ignore[override]
        for pattern, text_format in self._rules:
            for match in pattern.finditer(text):
                self.setFormat(match.start(), match.end() - match.start(), text_format)


def read_original(location: Location, config: AppConfig) -> bytes:
    return executor_for(location, config).read_bytes(location)


class DisassemblyEditor(QPlainTextEdit):
    """Text pane that doubles as the presenter for a :class:`DisassemblyView`."""

    identity_changed = Signal(str)

    def __init__(self, parent: QWidget | None = None, config: AppConfig | None = None) -> None:
        super().__init__(parent)
        self.config = config or AppConfig()
        self.identity = ""
        self.raw_content = b""
        self._highlighter: AsmHighlighter | None = None
        self.setLineWrapMode(QPlainTextEdit.LineWrapMode.NoWrap)
        font = QFont("Monospace")
        font.setStyleHint(QFont.StyleHint.TypeWriter)
        self.setFont(font)

    def load(self, path: str) -> None:
        location = parse_location(path)
        self.raw_content = read_original(location, self.config)
        self._show_raw()
        self.set_identity(location.display())

    def show_text(self, text: str) -> None:
        self.setReadOnly(True)
        self.setPlainText(text)

    def set_identity(self, name: str) -> None:
        self.identity = name
        if name.endswith(self.config.view_extension):
            if self._highlighter is None:
                self._highlighter = AsmHighlighter(self.document())
        elif self._highlighter is not None:
            self._highlighter.setDocument(None)
            self._highlighter = None
        self.identity_changed.emit(name)

    def mark_unmodified(self) -> None:
        self.document().setModified(False)

    def restore(self, identity: FileIdentity) -> None:
        self.raw_content = read_original(identity.location, self.config)
        self._show_raw()
        self.set_identity(identity.display())

    def go_to_line(self, line: int) -> None:
        block = self.document().findBlockByNumber(line)
        if not block.isValid():
            return
        self.setTextCursor(QTextCursor(block))
        self.centerCursor()

    def _show_raw(self) -> None:
        self.setReadOnly(False)
        self.setPlainText(self.raw_content.decode("utf-8", errors="replace"))
        self.mark_unmodified()


class App(QMainWindow):
    def __init__(self, config_manager: ConfigManager | None = None, config: AppConfig | None = None) -> None:
        super().__init__()
        self.setWindowTitle("objview")
        self.resize(1100, 760)
        self.config_manager = config_manager or ConfigManager()
        self.config: AppConfig = config if config is not None else self.config_manager.load()
        self.probe = BackendProbe(self.config)
        self.hooks = FileOpenHooks()
        install_disassembly_handler(self.hooks, self.config, self.probe)
        self.view: DisassemblyView | None = None

        self.editor = DisassemblyEditor(self, self.config)
        self.editor.identity_changed.connect(self._on_identity_changed)
        self.setCentralWidget(self.editor)

        file_menu = self.menuBar().addMenu("File")
        self.open_action = QAction("Open...", self)
        self.open_action.setShortcut("Ctrl+O")
        self.open_action.triggered.connect(self.choose_file)
        file_menu.addAction(self.open_action)
        self.restore_action = QAction("Restore Original", self)
        self.restore_action.setEnabled(False)
        self.restore_action.triggered.connect(self.restore_original)
        file_menu.addAction(self.restore_action)

        navigate_menu = self.menuBar().addMenu("Navigate")
        self.symbol_action = QAction("Go to Symbol...", self)
        self.symbol_action.setShortcut("Ctrl+G")
        self.symbol_action.setEnabled(False)
        self.symbol_action.triggered.connect(self.go_to_symbol)
        navigate_menu.addAction(self.symbol_action)
        self.address_action = QAction("Go to Address...", self)
        self.address_action.setEnabled(False)
        self.address_action.triggered.connect(self.go_to_address)
        navigate_menu.addAction(self.address_action)

        self.statusBar().showMessage("Open an executable or object file.")

    def choose_file(self) -> None:
        start_dir = str(Path(self.config.last_opened).parent) if self.config.last_opened else ""
        path, _ = QFileDialog.getOpenFileName(self, "Open File", start_dir)
        if path:
            self.open_path(path)

    def open_path(self, path: str) -> bool:
        """Load ``path`` and switch to its disassembly when the backend accepts it."""
        self.restore_original()
        try:
            self.editor.load(path)
        except (OSError, ValueError) as exc:
            QMessageBox.critical(self, "Unable to open file", str(exc))
            return False
        self.config.last_opened = path
        # Only the history is persisted; command line overrides stay in memory.
        stored = self.config_manager.load()
        stored.last_opened = path
        self.config_manager.save(stored)

        try:
            view = self.hooks.dispatch(path, self.editor)
        except BackendInvocationError as exc:
            QMessageBox.critical(self, "Disassembly failed", str(exc))
            return False
        self.view = view
        self._sync_actions()
        if view is None:
            self.statusBar().showMessage(f"{Path(path).name} is not disassemblable; showing it as text.")
            return False
        self.statusBar().showMessage(f"Disassembled {Path(path).name}.")
        return True

    def restore_original(self) -> None:
        if self.view is None:
            return
        view, self.view = self.view, None
        try:
            view.teardown()
        except OSError as exc:
            QMessageBox.critical(self, "Unable to restore original", str(exc))
        self._sync_actions()

    def go_to_symbol(self) -> None:
        if self.view is None:
            return
        names = [name for _, name in self.view.symbols.by_address()]
        if not names:
            self.statusBar().showMessage("No symbols in this listing.")
            return
        name, ok = QInputDialog.getItem(self, "Go to Symbol", "Symbol:", names, 0, True)
        if ok and name:
            self.jump_to_symbol(name.strip())

    def go_to_address(self) -> None:
        if self.view is None:
            return
        text, ok = QInputDialog.getText(self, "Go to Address", "Address (hex):")
        if not ok or not text.strip():
            return
        try:
            address = int(text.strip().lower().removeprefix("0x"), 16)
        except ValueError:
            QMessageBox.information(self, "Invalid address", f"'{text}' is not a hexadecimal address.")
            return
        name = self.view.symbol_at(address)
        if name is None:
            self.statusBar().showMessage(f"No symbol at or below 0x{address:x}.")
            return
        self.jump_to_symbol(name)

    def jump_to_symbol(self, name: str) -> bool:
        if self.view is None:
            return False
        line = self.view.line_of(name)
        if line is None:
            self.statusBar().showMessage(f"Unknown symbol: {name}")
            return False
        self.editor.go_to_line(line)
        self.statusBar().showMessage(f"{name} @ 0x{self.view.address_of(name):x}")
        return True

    def _sync_actions(self) -> None:
        active = self.view is not None and self.view.active
        self.restore_action.setEnabled(active)
        self.symbol_action.setEnabled(active)
        self.address_action.setEnabled(active)

    def _on_identity_changed(self, name: str) -> None:
        self.setWindowTitle(f"{name} - objview" if name else "objview")

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self.restore_original()
        super().closeEvent(event)


def main(
    argv: Sequence[str] | None = None,
    config_manager: ConfigManager | None = None,
    config: AppConfig | None = None,
) -> int:
    args = list(sys.argv if argv is None else argv)
    qt_app = QApplication.instance() or QApplication(args)
    window = App(config_manager, config)
    window.show()
    if len(args) > 1:
        window.open_path(args[1])
    return int(qt_app.exec())


if __name__ == "__main__":
    raise SystemExit(main())
