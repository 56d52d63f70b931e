"""Command-line parsing, usage text and plugin discovery helpers."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Iterable

PLUGIN_EXTENSION = ".py"

_WHITESPACE = " \t\r\n"

_USAGE = (
    "Comparative:\n"
    "  ./sim -comparative game_map=<file> game_managers_folder=<dir> "
    "algorithm1=<plugin> algorithm2=<plugin> [num_threads=<n>] [-verbose]\n"
    "Competition:\n"
    "  ./sim -competition game_maps_folder=<dir> game_manager=<plugin> "
    "algorithms_folder=<dir> [num_threads=<n>] [-verbose]\n"
)


class Mode(Enum):
    """How the simulator pits plugins against each other."""

    COMPARATIVE = "comparative"
    COMPETITION = "competition"


@dataclass
class Cli:
    """Parsed command line: the mode, the verbose flag and key=value pairs."""

    mode: Mode | None = None
    verbose: bool = False
    kv: dict[str, str] = field(default_factory=dict)


class PluginError(RuntimeError):
    """A plugin could not be found, loaded or registered."""


def stem_key(path: str | Path) -> str:
    """File name of a path without its extension."""
    return Path(path).stem


def list_shared_objects(directory: str | Path, extension: str = PLUGIN_EXTENSION) -> list[str]:
    """Sorted paths of the regular files in a directory that carry the extension."""
    try:
        entries = list(Path(directory).iterdir())
    except OSError:
        return []
    found = []
    for entry in entries:
        try:
            if not entry.is_file():
                continue
        except OSError:
            continue
        if entry.suffix == extension:
            found.append(str(entry))
    return sorted(found)


def pick_key_from_stem(keys: Iterable[str], stem: str) -> str | None:
    """Best key for a file stem: exact, then case-insensitive, then substring match."""
    keys = list(keys)
    if stem in keys:
        return stem
    lowered = stem.lower()
    for key in keys:
        if key.lower() == lowered:
            return key
    for key in keys:
        if lowered in key.lower():
            return key
    return None


def _trim(text: str) -> str:
    return text.strip(_WHITESPACE)


def parse_cli(argv: Iterable[str]) -> tuple[Cli, list[str]]:
    """Parse arguments (without the program name); return the result and the rejected ones."""
    cli = Cli()
    bad: list[str] = []
    mode_set = False
    for arg in argv:
        if arg == "-comparative":
            cli.mode = Mode.COMPARATIVE
            mode_set = True
        elif arg == "-competition":
            cli.mode = Mode.COMPETITION
            mode_set = True
        elif arg == "-verbose":
            cli.verbose = True
        elif "=" in arg:
            key, _, value = arg.partition("=")
            key, value = _trim(key), _trim(value)
            if key and value:
                cli.kv[key] = value
            else:
                bad.append(arg)
        else:
            bad.append(arg)
    if not mode_set:
        bad.append("(missing -comparative/-competition)")
    return cli, bad


def usage(err: str, bad: Iterable[str] = ()) -> None:
    """Print an error, any rejected arguments and the usage summary to stderr."""
    out = sys.stderr
    out.write(f"Error: {err}\n")
    bad = list(bad)
    if bad:
        out.write("Unsupported/invalid:" + "".join(f" {item}" for item in bad) + "\n")
    out.write(_USAGE)


def file_exists(path: str | Path) -> bool:
    try:
        return Path(path).is_file()
    except OSError:
        return False


def dir_exists(path: str | Path) -> bool:
    try:
        return Path(path).is_dir()
    except OSError:
        return False


def list_files(directory: str | Path) -> list[str]:
    """Sorted paths of the regular files in a directory."""
    return sorted(str(p) for p in Path(directory).iterdir() if p.is_file())


def load_plugin(path: str | Path, loader: Callable[[str], Any]) -> Any:
    """Load a plugin through ``loader``, which registers its factories as a side effect."""
    try:
        return loader(str(path))
    except Exception as exc:
        raise PluginError(str(exc)) from exc