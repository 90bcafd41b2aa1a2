"""The seam between the view lifecycle and whatever displays the text."""

from __future__ import annotations

from typing import Callable, Protocol

from ..models.file_identity import FileIdentity
from ..services.executors import executor_for
from ..services.locations import Location, parse_location


class Presenter(Protocol):
    identity: str

    def show_text(self, text: str) -> None: ...

    def set_identity(self, name: str) -> None: ...

    def mark_unmodified(self) -> None: ...

    def restore(self, identity: FileIdentity) -> None: ...


def read_original(location: Location) -> bytes:
    return executor_for(location).read_bytes(location)


class BufferPresenter:
    """In-memory stand-in for an editor buffer."""

    def __init__(
        self,
        identity: str = "",
        content: bytes = b"",
        reader: Callable[[Location], bytes] = read_original,
    ) -> None:
        self.identity = identity
        self.content = content
        self.modified = False
        self.read_only = False
        self._reader = reader

    @classmethod
    def open(cls, path: str, reader: Callable[[Location], bytes] = read_original) -> "BufferPresenter":
        location = parse_location(path)
        return cls(location.display(), reader(location), reader=reader)

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def show_text(self, text: str) -> None:
        self.content = text.encode("utf-8")
        self.read_only = True
        self.modified = True

    def set_identity(self, name: str) -> None:
        self.identity = name

    def mark_unmodified(self) -> None:
        self.modified = False

    def restore(self, identity: FileIdentity) -> None:
        self.identity = identity.display()
        self.content = self._reader(identity.location)
        self.read_only = False
        self.modified = False
