from __future__ import annotations

from bisect import bisect_right
from collections.abc import Mapping
import re
from typing import Iterator

# e.g. "0000000000001139 <main>:"
SYMBOL_PATTERN = re.compile(r"^(?P<address>[0-9a-fA-F]+) <(?P<name>[A-Za-z0-9_:.]+)>:$")


class SymbolTable(Mapping[str, int]):
    """Symbol name to address mapping for one disassembly listing."""

    def __init__(self) -> None:
        self._addresses: dict[str, int] = {}
        self._lines: dict[str, int] = {}
        self._sorted: list[tuple[int, str]] | None = None

    def add(self, name: str, address: int, line: int) -> None:
        # Later definitions replace earlier ones.
        self._addresses[name] = address
        self._lines[name] = line
        self._sorted = None

    def __getitem__(self, name: str) -> int:
        return self._addresses[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._addresses)

    def __len__(self) -> int:
        return len(self._addresses)

    def __repr__(self) -> str:
        return f"SymbolTable({len(self)} symbols)"

    def line_of(self, name: str) -> int | None:
        """0-based line of the symbol's header in the listing."""
        return self._lines.get(name)

    def by_address(self) -> list[tuple[int, str]]:
        if self._sorted is None:
            self._sorted = sorted((address, name) for name, address in self._addresses.items())
        return self._sorted

    def symbol_at(self, address: int) -> str | None:
        """Return the closest symbol starting at or below ``address``."""
        ordered = self.by_address()
        index = bisect_right(ordered, (address, "\U0010ffff"))
        if index == 0:
            return None
        return ordered[index - 1][1]


def build_index(text: str | None) -> SymbolTable:
    table = SymbolTable()
    if not text:
        return table
    for line_number, line in enumerate(text.splitlines()):
        match = SYMBOL_PATTERN.match(line)
        if not match:
            continue
        table.add(match.group("name"), int(match.group("address"), 16), line_number)
    return table
