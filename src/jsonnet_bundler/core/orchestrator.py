"""Bundling orchestrator for coordinating multi-file processing.

This module provides the ``BundleOrchestrator`` class that runs the complete
workflow for a set of Jsonnet files:

1. **Validation**: every input must exist and be readable; files without a
   Jsonnet extension only produce a warning.
2. **Processing**: each file is read as raw bytes, parsed, renamed with its
   own prefix, optionally given a provenance header and written to the
   output directory through ``OutputWriter``.

Files are processed one after another and independently of each other. The
run stops at the first fatal error: a file that cannot be read or parsed raises
``BundleError``, and write failures propagate as ``OSError``. Span mismatches
inside a file are never fatal; they are reported per file.

Example:
    Basic usage::

        from pathlib import Path
        from jsonnet_bundler.core.config import BundlerConfig
        from jsonnet_bundler.core.orchestrator import BundleOrchestrator

        config = BundlerConfig(output_dir="bundle", project_root="src")
        orchestrator = BundleOrchestrator(config)
        result = orchestrator.process_files([Path("src/main.jsonnet")])
        for file_result in result.files:
            print(file_result.output_path, file_result.prefix)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable

from jsonnet_bundler.core.config import BundlerConfig
from jsonnet_bundler.core.naming import file_identity
from jsonnet_bundler.core.output_writer import ConflictStrategy, OutputWriter
from jsonnet_bundler.core.renamer import RenameResult, SkippedSpan, rename_locals
from jsonnet_bundler.processors.jsonnet_processor import JsonnetProcessor, ParseResult
from jsonnet_bundler.utils.logger import get_logger
from jsonnet_bundler.utils.path_utils import (
    JSONNET_EXTENSIONS,
    ensure_directory,
    get_file_extension,
    is_readable,
)

logger = get_logger("jsonnet_bundler.core.orchestrator")

HEADER_TEMPLATE = "// Auto-generated by jsonnet-bundler at {timestamp} for {source}\n"


class BundleError(Exception):
    """Fatal error that stops a bundling run.

    Attributes:
        file_path: The file being processed, if any.
        errors: Individual error messages.
    """

    def __init__(self, message: str, file_path: Path | None = None, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.file_path = file_path
        self.errors = errors or [message]


@dataclass
class FileResult:
    """Result of processing a single file.

    Attributes:
        input_path: Path of the source file
        identity: Identity the file prefix was derived from
        prefix: File prefix used for renamed names
        output_path: Path the output was written to, None if skipped
        renamed: Original names that were renamed
        bind_count: Number of binding sites rewritten
        reference_count: Number of references rewritten
        skipped: Occurrences left unrenamed because their span did not verify
        conflict_resolution: How an existing output was handled
    """
    input_path: Path
    identity: str
    prefix: str
    output_path: Path | None = None
    renamed: list[str] = field(default_factory=list)
    bind_count: int = 0
    reference_count: int = 0
    skipped: list[SkippedSpan] = field(default_factory=list)
    conflict_resolution: str | None = None


@dataclass
class BundleResult:
    """Result of a complete bundling run.

    Attributes:
        files: One entry per processed file, in input order
        warnings: Validation warnings
    """
    files: list[FileResult] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def written_files(self) -> list[Path]:
        return [f.output_path for f in self.files if f.output_path is not None]

    @property
    def skipped_spans(self) -> int:
        return sum(len(f.skipped) for f in self.files)


def format_timestamp(moment: datetime) -> str:
    """Render ``moment`` as an RFC 3339 timestamp with second precision.

    Examples:
        >>> from datetime import timezone
        >>> format_timestamp(datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))
        '2024-05-01T12:00:00Z'
    """
    if moment.tzinfo is None:
        moment = moment.astimezone()
    text = moment.isoformat(timespec="seconds")
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


def make_header(source: str, moment: datetime) -> bytes:
    """Return the provenance comment line placed above rewritten code."""
    return HEADER_TEMPLATE.format(timestamp=format_timestamp(moment), source=source).encode("utf-8")


class BundleOrchestrator:
    """Coordinates validation, renaming and writing of Jsonnet files.

    Args:
        config: Bundling configuration; defaults to ``BundlerConfig()``.
        processor: Parser front end; a new ``JsonnetProcessor`` by default.
        clock: Returns the time used in headers. Inject a fixed clock for
            reproducible output.

    Raises:
        ValueError: If the configuration is invalid.
    """

    def __init__(
        self,
        config: BundlerConfig | None = None,
        processor: JsonnetProcessor | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config or BundlerConfig()
        self.config.validate()
        self.processor = processor or JsonnetProcessor()
        self._clock = clock or (lambda: datetime.now().astimezone())
        self.project_root = Path(self.config.project_root) if self.config.project_root else None

    def validate_inputs(self, input_files: Iterable[Path]) -> list[str]:
        """Check that every input can be processed.

        Returns:
            Warning messages for files with an unexpected extension.

        Raises:
            BundleError: If a file is missing, unreadable or too large.
        """
        warnings: list[str] = []
        max_size = self.processor.max_file_size_mb * 1024 * 1024
        for path in input_files:
            if not path.is_file():
                raise BundleError(f"File not found: {path}", path)
            if not is_readable(path):
                raise BundleError(f"File is not readable: {path}", path)
            if path.stat().st_size > max_size:
                raise BundleError(
                    f"File too large: {path}. "
                    f"Maximum allowed size is {self.processor.max_file_size_mb} MB",
                    path,
                )
            if get_file_extension(path) not in JSONNET_EXTENSIONS:
                message = f"Unexpected file extension '{path.suffix}' for: {path}"
                logger.warning(message)
                warnings.append(message)
        return warnings

    def identity_for(self, path: Path) -> str:
        return file_identity(path, self.project_root)

    def rename_source(self, source: bytes, identity: str, file_name: str = "") -> RenameResult:
        """Parse and rename in-memory source without touching the disk.

        Args:
            source: Raw UTF-8 source.
            identity: File identity the prefix is derived from.
            file_name: Name used in node locations; defaults to ``identity``.

        Raises:
            BundleError: If the source cannot be parsed.
        """
        return self._rename_parsed(self.processor.parse_source(source, file_name or identity), identity)

    def _rename_parsed(self, parsed: ParseResult, identity: str) -> RenameResult:
        if not parsed.success:
            raise BundleError(
                f"Failed to process {parsed.file_path}",
                parsed.file_path,
                parsed.errors,
            )
        return rename_locals(parsed.ast_node, parsed.source, identity, self.config.separator)

    def render(self, result: RenameResult, identity: str) -> bytes:
        """Return the final output bytes, with the header when enabled."""
        if not self.config.add_header:
            return result.code
        return make_header(identity, self._clock()) + result.code

    def process_file(self, path: Path, writer: OutputWriter) -> FileResult:
        """Rename one file and write its output.

        Raises:
            BundleError: If the file cannot be read or parsed.
            OSError: If writing fails.
        """
        identity = self.identity_for(path)
        result = self._rename_parsed(self.processor.parse_file(path), identity)
        write = writer.write_with_structure(path, self.render(result, identity), self.project_root)

        if result.skipped:
            logger.warning(f"{path}: {len(result.skipped)} occurrence(s) left unrenamed")
        logger.info(
            f"Processed {path} (prefix {result.prefix}): {len(result.renamed)} name(s), "
            f"{result.bind_count} bind(s), {result.reference_count} reference(s)"
        )

        return FileResult(
            input_path=path,
            identity=identity,
            prefix=result.prefix,
            output_path=write.output_path,
            renamed=result.renamed,
            bind_count=result.bind_count,
            reference_count=result.reference_count,
            skipped=result.skipped,
            conflict_resolution=write.conflict_resolution,
        )

    def process_files(self, input_files: Iterable[Path | str]) -> BundleResult:
        """Validate and process every input file in order.

        Raises:
            BundleError: On the first validation or parse failure.
            OSError: On the first write failure.
        """
        paths = [Path(p) for p in input_files]
        if not paths:
            raise BundleError("No input files given")

        logger.info(f"Bundling {len(paths)} file(s) into {self.config.output_dir}")
        result = BundleResult(warnings=self.validate_inputs(paths))

        writer = OutputWriter(
            output_dir=Path(self.config.output_dir),
            conflict_strategy=ConflictStrategy(self.config.conflict_strategy),
        )
        ensure_directory(writer.output_dir)

        targets: dict[Path, Path] = {}
        for path in paths:
            target = writer.output_path_for(path, self.project_root)
            if target in targets:
                message = (
                    f"{path} and {targets[target]} both map to {target}; "
                    f"conflict strategy '{self.config.conflict_strategy}' applies"
                )
                logger.warning(message)
                result.warnings.append(message)
            targets.setdefault(target, path)
            result.files.append(self.process_file(path, writer))

        logger.info(
            f"Bundling complete: {len(result.written_files)} file(s) written, "
            f"{result.skipped_spans} occurrence(s) left unrenamed"
        )
        return result
