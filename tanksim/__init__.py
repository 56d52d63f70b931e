"""Tank battle tournament modes, map parsing, factory registries and a grid world model."""

__version__ = "0.1.0"