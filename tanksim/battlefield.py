"""Battlefield map files and the initial satellite view built from them."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Protocol

Position = tuple[int, int]

_ALLOWED = frozenset(" #@12")
_MAX_UNSIGNED = 2**64 - 1


class MapError(RuntimeError):
    """A map file is missing or malformed."""


class SatelliteView(Protocol):
    def get_object_at(self, x: int, y: int) -> str: ...


@dataclass
class ParsedMap:
    """Dimensions, limits and object positions read from a map file."""

    map_width: int = 0
    map_height: int = 0
    max_steps: int = 0
    num_shells: int = 0
    player1_tanks: set[Position] = field(default_factory=set)
    player2_tanks: set[Position] = field(default_factory=set)
    mines: set[Position] = field(default_factory=set)
    walls: set[Position] = field(default_factory=set)


@dataclass
class InitialSatellite:
    """Satellite view of the board as it stands before the first turn."""

    player1_tanks: set[Position] = field(default_factory=set)
    player2_tanks: set[Position] = field(default_factory=set)
    walls: set[Position] = field(default_factory=set)
    mines: set[Position] = field(default_factory=set)

    def get_object_at(self, x: int, y: int) -> str:
        """Glyph of the object at (x, y); a space for an empty cell."""
        pos = (x, y)
        if pos in self.player1_tanks:
            return "1"
        if pos in self.player2_tanks:
            return "2"
        if pos in self.walls:
            return "#"
        if pos in self.mines:
            return "@"
        return " "


def _fail(msg: str, filename: str) -> MapError:
    return MapError(f'Invalid map "{filename}": {msg}')


def _lines(text: str) -> Iterator[str]:
    parts = text.split("\n")
    if text.endswith("\n"):
        parts.pop()
    for line in parts:
        yield line[:-1] if line.endswith("\r") else line


def _read_param(lines: Iterator[str], key: str, filename: str) -> int:
    line = next(lines, None)
    if line is None:
        raise _fail(f"Missing line for {key}.", filename)
    match = re.fullmatch(rf"\s*{key}\s*=\s*([0-9]+)\s*", line, re.IGNORECASE | re.ASCII)
    if match is None:
        raise _fail(f"Invalid line for {key}: {line}", filename)
    value = int(match.group(1))
    if value > _MAX_UNSIGNED:
        raise _fail(f"Invalid number for {key}: {match.group(1)}", filename)
    return value


def _describe_char(c: str) -> str:
    code = ord(c)
    if 0x20 <= code < 0x7F:
        return c
    return f"\\x{code:X}"


def _read_grid(lines: Iterator[str], parsed: ParsedMap, filename: str) -> None:
    targets = {
        "#": parsed.walls,
        "@": parsed.mines,
        "1": parsed.player1_tanks,
        "2": parsed.player2_tanks,
    }
    width = parsed.map_width
    for row in range(parsed.map_height):
        line = next(lines, "")
        line = line[:width].ljust(width)
        for col, c in enumerate(line):
            if c not in _ALLOWED:
                raise _fail(
                    f"Invalid character '{_describe_char(c)}' at (row {row}, col {col})."
                    " Allowed: space, '#', '@', '1', '2'.",
                    filename,
                )
            bucket = targets.get(c)
            if bucket is not None:
                bucket.add((col, row))


def parse_battlefield_file(filename: str | Path) -> ParsedMap:
    """Read a map file: a description line, four parameters, then the grid."""
    name = str(filename)
    try:
        text = Path(filename).read_bytes().decode("latin-1")
    except OSError as exc:
        raise MapError(f"Cannot open map file: {name}") from exc

    lines = _lines(text)
    if next(lines, None) is None:
        raise _fail("Missing line 1 (map name/description).", name)

    parsed = ParsedMap()
    parsed.max_steps = _read_param(lines, "MaxSteps", name)
    parsed.num_shells = _read_param(lines, "NumShells", name)
    parsed.map_height = _read_param(lines, "Rows", name)
    if parsed.map_height == 0:
        raise _fail("Rows must be >= 1.", name)
    parsed.map_width = _read_param(lines, "Cols", name)
    if parsed.map_width == 0:
        raise _fail("Cols must be >= 1.", name)

    _read_grid(lines, parsed, name)
    return parsed


def satellite_to_string(view: SatelliteView, width: int, height: int) -> str:
    """Render a satellite view row by row, each row ending in a newline."""
    return "".join(
        "".join(view.get_object_at(x, y) for x in range(width)) + "\n"
        for y in range(height)
    )


def unique_time_str() -> str:
    """Milliseconds since the epoch, as a string."""
    return str(time.time_ns() // 1_000_000)