from __future__ import annotations

from dataclasses import dataclass

from ..services.locations import Location


@dataclass(frozen=True)
class FileIdentity:
    """Snapshot of a file as seen by the probe.

    Nothing here is refreshed after construction; re-probe to observe changes
    on disk.
    """

    location: Location
    exists: bool = True
    size: int = 0
    is_directory: bool = False

    @property
    def path(self) -> str:
        return self.location.path

    @property
    def name(self) -> str:
        return self.location.name

    @property
    def directory(self) -> str:
        return self.location.directory

    @property
    def is_remote(self) -> bool:
        return self.location.is_remote

    def display(self) -> str:
        return self.location.display()

    def view_name(self, marker: str) -> str:
        """Return the presented identity of the derived view for this file."""
        return self.location.with_suffix(marker).display()
