"""
Path utilities for file system operations.

All functions use pathlib.Path. They cover what the bundler needs around
its inputs and outputs: normalisation, directory creation, permission
checks and extension handling for Jsonnet sources.

Examples:
    >>> from jsonnet_bundler.utils.path_utils import normalize_path, ensure_directory
    >>> out = ensure_directory(normalize_path("build/bundle"))
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Union

# Type alias for path-like objects
PathLike = Union[str, Path]

# Extensions the bundler treats as Jsonnet sources
JSONNET_EXTENSIONS = (".jsonnet", ".libsonnet", ".json")


def normalize_path(path: PathLike) -> Path:
    """
    Convert a string or Path object to a normalized absolute Path.

    Handles ``~`` expansion and resolves relative paths.

    Args:
        path: A file system path as string or Path object.

    Returns:
        Normalized absolute Path object.

    Raises:
        ValueError: If path is empty or None.

    Examples:
        >>> normalize_path("../relative/path")
        PosixPath('/absolute/resolved/path')
    """
    if path is None or (isinstance(path, str) and not path.strip()):
        raise ValueError("Path cannot be None or empty")

    return Path(path).expanduser().resolve()


def ensure_directory(path: Path) -> Path:
    """
    Create directory if it doesn't exist, return Path.

    Raises:
        OSError: If directory creation fails.
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_relative_path(path: Path, base: Path) -> Path:
    """
    Get relative path from base directory.

    Raises:
        ValueError: If path is not located under base.

    Examples:
        >>> get_relative_path(Path("/home/user/lib/util.libsonnet"), Path("/home/user"))
        PosixPath('lib/util.libsonnet')
    """
    return path.relative_to(base)


def is_safe_path(path: Path, base: Path) -> bool:
    """
    Validate path doesn't escape base directory.

    Args:
        path: Path to validate.
        base: Base directory that should contain the path.

    Returns:
        True if the resolved path is within base, False otherwise.
    """
    try:
        path.resolve().relative_to(base.resolve())
        return True
    except ValueError:
        return False


def is_readable(path: Path) -> bool:
    """Return True if path exists and is readable."""
    return path.exists() and os.access(path, os.R_OK)


def is_writable(path: Path) -> bool:
    """Return True if path exists and is writable."""
    return path.exists() and os.access(path, os.W_OK)


def get_file_extension(path: Path) -> str:
    """
    Return the lowercase file extension including the dot.

    Examples:
        >>> get_file_extension(Path("main.Jsonnet"))
        '.jsonnet'
    """
    return path.suffix.lower()


def validate_jsonnet_file(path: Path) -> bool:
    """
    Check that path is an existing file with a Jsonnet extension.

    Examples:
        >>> validate_jsonnet_file(Path("lib/util.libsonnet"))
        True
    """
    return path.is_file() and get_file_extension(path) in JSONNET_EXTENSIONS
