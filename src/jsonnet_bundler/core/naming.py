"""Deterministic per-file name generation.

Every renamed identifier gets a prefix derived from the file it lives in.
The prefix is a 32-bit FNV-1a hash of the file identity rendered as eight
hex digits behind an underscore, so it is stable across runs, does not
depend on process state, and is always a valid identifier start.

Example:
    >>> file_prefix("a")
    '_e40c292c'
    >>> renamed_identifier(file_prefix("a"), "x")
    '_e40c292c_x'
"""

from __future__ import annotations

from pathlib import Path

from jsonnet_bundler.utils.path_utils import PathLike

# FNV-1a 32-bit parameters
FNV32_OFFSET_BASIS = 0x811C9DC5
FNV32_PRIME = 0x01000193

DEFAULT_SEPARATOR = "_"


def fnv1a_32(data: bytes) -> int:
    """Return the 32-bit FNV-1a hash of ``data``."""
    value = FNV32_OFFSET_BASIS
    for byte in data:
        value ^= byte
        value = (value * FNV32_PRIME) & 0xFFFFFFFF
    return value


def file_prefix(identity: str) -> str:
    """Return the rename prefix for a file identity.

    Examples:
        >>> file_prefix("a.conf") != file_prefix("b.conf")
        True
    """
    return f"_{fnv1a_32(identity.encode('utf-8')):08x}"


def renamed_identifier(prefix: str, name: str, separator: str = DEFAULT_SEPARATOR) -> str:
    """Join a file prefix and an original identifier."""
    return f"{prefix}{separator}{name}"


def file_identity(path: PathLike, root: PathLike | None = None) -> str:
    """Return the identity string a file's prefix is derived from.

    The identity is the POSIX form of the path as given. With ``root``, a
    file located under it is identified by its path relative to the root,
    which keeps prefixes identical across checkouts in different places.

    Examples:
        >>> file_identity("lib/util.libsonnet")
        'lib/util.libsonnet'
        >>> file_identity("/src/app/lib/util.libsonnet", root="/src/app")
        'lib/util.libsonnet'
    """
    path = Path(path)
    if root is not None:
        try:
            return path.resolve().relative_to(Path(root).resolve()).as_posix()
        except ValueError:
            pass
    return path.as_posix()
