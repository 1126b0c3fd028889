"""Renames Jsonnet local variables with per-file prefixes so that files can be bundled together."""

__version__ = "0.1.0"
