from __future__ import annotations

import os
from typing import IO, Union

DEFAULT_CHUNK_SIZE = 1024

ByteSource = Union[bytes, bytearray, memoryview, IO[bytes], str, "os.PathLike[str]"]


def _read_prefix(source: ByteSource, max_bytes: int) -> bytes:
    if max_bytes <= 0:
        return b""
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source[:max_bytes])
    if hasattr(source, "read"):
        return source.read(max_bytes) or b""
    with open(os.fspath(source), "rb") as handle:
        return handle.read(max_bytes)


def first_nul_offset(source: ByteSource, max_bytes: int = DEFAULT_CHUNK_SIZE) -> int | None:
    """Return the index of the first NUL byte within the first ``max_bytes`` bytes."""
    offset = _read_prefix(source, max_bytes).find(b"\x00")
    return None if offset < 0 else offset


def is_binary(source: ByteSource, max_bytes: int = DEFAULT_CHUNK_SIZE) -> bool:
    """Report whether ``source`` looks binary, i.e. has a NUL in its prefix.

    At most ``max_bytes`` bytes are read, however long the source is.
    """
    return first_nul_offset(source, max_bytes) is not None
