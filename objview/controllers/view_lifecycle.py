"""Reversible swap of a binary file for its disassembly listing."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os

from ..config_manager import AppConfig
from ..models.disassembly_output import DisassemblyOutput
from ..models.file_identity import FileIdentity
from ..models.probe_result import ProbeResult
from ..models.view_state import ViewState
from ..services.objdump_runner import DisassemblyRunner
from ..services.probe import BackendProbe
from ..services.symbol_indexer import SymbolTable, build_index
from .presenter import Presenter

logger = logging.getLogger(__name__)


class ViewStateError(RuntimeError):
    """A lifecycle operation was called in the wrong state."""


@dataclass
class ViewSession:
    original: FileIdentity
    output: DisassemblyOutput | None = None
    state: ViewState = ViewState.ACTIVE
    symbols: SymbolTable | None = None


class DisassemblyView:
    """Owns the state of one presented disassembly view.

    Only one transition may be in flight at a time; callers serialize setup and
    teardown themselves.
    """

    def __init__(
        self,
        presenter: Presenter,
        config: AppConfig | None = None,
        *,
        probe: BackendProbe | None = None,
        runner: DisassemblyRunner | None = None,
    ) -> None:
        self.presenter = presenter
        self.config = config or AppConfig()
        self.probe = probe or BackendProbe(self.config)
        self.runner = runner or DisassemblyRunner(self.config)
        self._session: ViewSession | None = None
        self.last_probe: ProbeResult | None = None

    @property
    def state(self) -> ViewState:
        return self._session.state if self._session else ViewState.INACTIVE

    @property
    def active(self) -> bool:
        return self.state is ViewState.ACTIVE

    @property
    def original(self) -> FileIdentity | None:
        return self._session.original if self._session else None

    @property
    def text(self) -> str:
        session = self._require_active()
        return session.output.text if session.output else ""

    def setup(self, path: str | os.PathLike[str], *, timeout: float | None = None) -> bool:
        """Replace the presented file with its disassembly.

        Returns ``False`` when the probe rejects the file, which is the normal
        outcome for anything that is not an object file. A
        :class:`BackendInvocationError` from the runner propagates and leaves
        the view inactive.
        """
        if self._session is not None:
            raise ViewStateError(f"view is already {self.state.value}; tear it down first")

        result = self.probe.can_disassemble(path)
        self.last_probe = result
        if not result or result.identity is None:
            return False

        output = self.runner.disassemble(result.identity, timeout=timeout)

        original = result.identity
        try:
            self.presenter.show_text(output.text)
            self.presenter.set_identity(original.view_name(self.config.view_extension))
            self.presenter.mark_unmodified()
        except Exception:
            logger.error("presenting %s failed, putting the original back", original.display())
            self.presenter.set_identity(original.display())
            self.presenter.restore(original)
            raise
        self._session = ViewSession(original=original, output=output)
        logger.info("showing disassembly of %s", result.identity.display())
        return True

    def teardown(self) -> None:
        """Put the original file back; a no-op unless the view is active."""
        session = self._session
        if session is None or session.state is not ViewState.ACTIVE:
            return
        session.state = ViewState.TEARING_DOWN
        try:
            self.presenter.set_identity(session.original.display())
            self.presenter.restore(session.original)
        finally:
            session.output = None
            session.symbols = None
            self._session = None
        logger.info("restored %s", session.original.display())

    @property
    def symbols(self) -> SymbolTable:
        session = self._require_active()
        if session.symbols is None:
            session.symbols = build_index(session.output.text if session.output else "")
        return session.symbols

    def address_of(self, name: str) -> int | None:
        return self.symbols.get(name)

    def line_of(self, name: str) -> int | None:
        return self.symbols.line_of(name)

    def symbol_at(self, address: int) -> str | None:
        return self.symbols.symbol_at(address)

    def _require_active(self) -> ViewSession:
        if self._session is None or self._session.state is not ViewState.ACTIVE:
            raise ViewStateError("no disassembly view is active")
        return self._session
