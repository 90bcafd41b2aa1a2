"""Local and remote file locations understood by the probe and the runner."""

from __future__ import annotations

from dataclasses import dataclass, replace
import os
from pathlib import Path, PurePosixPath
from urllib.parse import unquote, urlsplit

REMOTE_SCHEMES = ("ssh", "sftp")


@dataclass(frozen=True)
class Location:
    path: str
    host: str | None = None
    user: str | None = None
    port: int | None = None
    scheme: str = "ssh"

    @property
    def is_remote(self) -> bool:
        return self.host is not None

    def _pure(self) -> PurePosixPath | Path:
        return PurePosixPath(self.path) if self.is_remote else Path(self.path)

    @property
    def name(self) -> str:
        return self._pure().name

    @property
    def directory(self) -> str:
        return str(self._pure().parent)

    def with_path(self, path: str) -> "Location":
        return replace(self, path=path)

    def with_suffix(self, suffix: str) -> "Location":
        pure = self._pure()
        if not pure.name:
            return self
        return self.with_path(str(pure.with_suffix(suffix)))

    def ssh_target(self) -> str:
        if not self.is_remote:
            raise ValueError(f"{self.path} is not a remote location")
        return f"{self.user}@{self.host}" if self.user else str(self.host)

    def display(self) -> str:
        if not self.is_remote:
            return self.path
        netloc = self.ssh_target()
        if self.port:
            netloc = f"{netloc}:{self.port}"
        return f"{self.scheme}://{netloc}{self.path}"


def parse_location(raw: str | os.PathLike[str] | Location) -> Location:
    """Turn a user-supplied path or ``ssh://`` URL into a :class:`Location`."""
    if isinstance(raw, Location):
        return raw
    text = os.fspath(raw)
    scheme, sep, _ = text.partition("://")
    if sep and scheme.lower() in REMOTE_SCHEMES:
        parts = urlsplit(text)
        if not parts.hostname:
            raise ValueError(f"Remote location is missing a host: {text}")
        path = unquote(parts.path) or "/"
        return Location(
            path=path,
            host=parts.hostname,
            user=parts.username,
            port=parts.port,
            scheme=scheme.lower(),
        )
    return Location(path=os.path.abspath(os.path.expanduser(text)))
