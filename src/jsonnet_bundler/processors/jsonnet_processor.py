"""Jsonnet source processor.

This module wraps the parser with the file handling the bundler needs:
existence, readability and size checks, reading the raw bytes, and turning
parser failures into a ``ParseResult`` instead of an exception.

The raw bytes are kept next to the tree because every later stage works on
byte offsets into the original, unmodified buffer.

Example:
    >>> processor = JsonnetProcessor()
    >>> result = processor.parse_file("lib/util.libsonnet")
    >>> if result.success:
    ...     print(type(result.ast_node).__name__)
    ... else:
    ...     for error in result.errors:
    ...         print(f"Error: {error}")
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from jsonnet_bundler.processors.jsonnet_ast import Node
from jsonnet_bundler.processors.jsonnet_parser import JsonnetSyntaxError, parse_jsonnet
from jsonnet_bundler.utils.logger import get_logger

MAX_FILE_SIZE_MB: int = 10

logger = get_logger("jsonnet_bundler.processors.jsonnet_processor")


@dataclass
class ParseResult:
    """Result of parsing a Jsonnet source.

    Attributes:
        ast_node: Root of the syntax tree, or None if parsing failed.
        source: Original source bytes. Empty when the file could not be read.
        file_path: Path the source came from.
        success: Whether parsing succeeded.
        errors: Error messages encountered while reading or parsing.
    """

    ast_node: Node | None
    source: bytes
    file_path: Path
    success: bool
    errors: list[str] = field(default_factory=list)


class JsonnetProcessor:
    """Reads and parses Jsonnet files.

    Example:
        >>> result = JsonnetProcessor().parse_source(b"local x = 1; x", "inline")
        >>> result.success
        True
    """

    def __init__(self, max_file_size_mb: int = MAX_FILE_SIZE_MB) -> None:
        self.logger = get_logger("jsonnet_bundler.processors.jsonnet_processor")
        self.max_file_size_mb = max_file_size_mb

    def _failure(self, path: Path, message: str, source: bytes = b"") -> ParseResult:
        self.logger.error(message)
        return ParseResult(
            ast_node=None,
            source=source,
            file_path=path,
            success=False,
            errors=[message],
        )

    def parse_file(self, file_path: Path | str) -> ParseResult:
        """Read a Jsonnet file from disk and parse it.

        Args:
            file_path: Path to the file.

        Returns:
            ParseResult holding the tree and the raw source bytes.

        Note:
            Files larger than ``max_file_size_mb`` are rejected.
        """
        path = Path(file_path)

        if not path.exists():
            return self._failure(path, f"File not found: {path}")

        if not os.access(path, os.R_OK):
            return self._failure(path, f"File is not readable: {path}")

        try:
            file_size = path.stat().st_size
        except OSError as e:
            return self._failure(path, f"Failed to check file size for {path}: {e}")

        max_size = self.max_file_size_mb * 1024 * 1024
        if file_size > max_size:
            return self._failure(
                path,
                f"File too large: {path} ({file_size / 1024 / 1024:.2f} MB). "
                f"Maximum allowed size is {self.max_file_size_mb} MB",
            )

        try:
            source = path.read_bytes()
        except OSError as e:
            return self._failure(path, f"Failed to read file {path}: {e}")

        return self.parse_source(source, path)

    def parse_source(self, source: bytes, file_path: Path | str = "") -> ParseResult:
        """Parse source bytes that are already in memory.

        Args:
            source: Raw UTF-8 source.
            file_path: Name recorded in node locations and messages.
        """
        path = Path(file_path)
        try:
            tree = parse_jsonnet(source, file_name=str(file_path))
        except JsonnetSyntaxError as e:
            return self._failure(path, f"Syntax error in {e}", source)

        self.logger.info(f"Successfully parsed Jsonnet file: {path}")
        self.logger.debug(f"AST root type: {type(tree).__name__}")
        return ParseResult(
            ast_node=tree,
            source=source,
            file_path=path,
            success=True,
        )
