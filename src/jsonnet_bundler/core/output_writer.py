"""Output writer module for atomic file writing with conflict resolution.

This module provides the ``OutputWriter`` class that performs every disk
write of a bundling run. Content is written to a temporary file in the
target directory, flushed with ``fsync`` and moved into place, so a reader
never sees a half-written output. Existing files are handled according to
the configured :class:`ConflictStrategy`.

Example:
    Basic single-file write::

        from pathlib import Path
        from jsonnet_bundler.core.output_writer import ConflictStrategy, OutputWriter

        writer = OutputWriter(
            output_dir=Path("./bundle"),
            conflict_strategy=ConflictStrategy.OVERWRITE,
        )
        result = writer.write_file(Path("./bundle/main.jsonnet"), b"{}\\n")
        print(f"Written to {result.output_path}")

    Preserving directory structure::

        result = writer.write_with_structure(
            input_path=Path("src/lib/util.libsonnet"),
            content=code,
            project_root=Path("src"),
        )
        # Writes to ./bundle/lib/util.libsonnet
"""

from __future__ import annotations

import os
import shutil
import tempfile
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from jsonnet_bundler.utils.logger import get_logger
from jsonnet_bundler.utils.path_utils import (
    ensure_directory,
    get_relative_path,
    is_writable,
    normalize_path,
)


class ConflictStrategy(Enum):
    """Enumeration of conflict resolution strategies for file output.

    Strategies:
        OVERWRITE: Replace existing files
        SKIP: Leave existing files alone and write nothing
        RENAME: Append a timestamp to the file name (e.g. `util_20260213_143022.libsonnet`)
    """
    OVERWRITE = "overwrite"
    SKIP = "skip"
    RENAME = "rename"


# ---------------------------------------------------------------------------
# Result dataclasses
# ---------------------------------------------------------------------------

@dataclass
class WriteResult:
    """Result of a single file write operation.

    Attributes:
        output_path: Final path the file was written to, or ``None`` if the
            write was skipped.
        original_path: The requested output path before conflict resolution.
        conflict_resolution: ``"overwritten"``, ``"skipped"`` or
            ``"renamed"``; ``None`` when there was no conflict.
    """

    output_path: Path | None
    original_path: Path
    conflict_resolution: str | None = None

    @property
    def skipped(self) -> bool:
        return self.output_path is None


@dataclass
class WriteMetadata:
    """Aggregated statistics for all writes of an ``OutputWriter``.

    Attributes:
        total_writes: Number of write attempts.
        successful_writes: Number of files actually written.
        skipped_writes: Number of writes skipped due to conflict resolution.
        renamed_writes: Number of writes that used a renamed output path.
        overwritten_writes: Number of writes that replaced an existing file.
        written_files: Ordered list of paths that were written.
    """

    total_writes: int = 0
    successful_writes: int = 0
    skipped_writes: int = 0
    renamed_writes: int = 0
    overwritten_writes: int = 0
    written_files: list[Path] = field(default_factory=list)


# ---------------------------------------------------------------------------
# OutputWriter
# ---------------------------------------------------------------------------

class OutputWriter:
    """File writer with atomic operations and conflict resolution.

    Attributes:
        output_dir: Base output directory (normalised absolute path).
        conflict_strategy: Active conflict resolution strategy.

    Raises:
        ValueError: If *output_dir* is empty.
    """

    def __init__(
        self,
        output_dir: Path | str,
        conflict_strategy: ConflictStrategy = ConflictStrategy.OVERWRITE,
    ) -> None:
        self._logger = get_logger("jsonnet_bundler.core.output_writer")
        self.output_dir: Path = normalize_path(output_dir)
        self.conflict_strategy: ConflictStrategy = conflict_strategy
        self._metadata: WriteMetadata = WriteMetadata()

        self._logger.debug(
            f"OutputWriter initialised: dir={self.output_dir}, "
            f"strategy={self.conflict_strategy.value}"
        )

    # ------------------------------------------------------------------
    # Conflict resolution
    # ------------------------------------------------------------------

    def _resolve_conflict(self, output_path: Path) -> tuple[Path | None, str]:
        """Resolve an existing-file conflict for *output_path*.

        Returns:
            ``(resolved_path, resolution_type)`` where *resolved_path* is
            ``None`` for the SKIP strategy.
        """
        strategy = self.conflict_strategy

        if strategy == ConflictStrategy.SKIP:
            self._logger.info(f"Conflict resolved for {output_path.name}: SKIP")
            return None, "skipped"

        if strategy == ConflictStrategy.RENAME:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            stem = output_path.stem
            suffix = output_path.suffix
            new_path = output_path.parent / f"{stem}_{timestamp}{suffix}"

            counter = 1
            while new_path.exists():
                new_path = output_path.parent / f"{stem}_{timestamp}_{counter}{suffix}"
                counter += 1

            self._logger.info(
                f"Conflict resolved for {output_path.name}: RENAME -> {new_path.name}"
            )
            return new_path, "renamed"

        self._logger.info(f"Conflict resolved for {output_path.name}: OVERWRITE")
        return output_path, "overwritten"

    # ------------------------------------------------------------------
    # Low-level writer
    # ------------------------------------------------------------------

    def _write_atomic(self, output_path: Path, content: bytes) -> None:
        """Write *content* to *output_path* atomically.

        The temporary file lives in the destination directory so the final
        move is a same-filesystem rename.

        Raises:
            OSError: On file-system errors (propagated after cleanup).
        """
        ensure_directory(output_path.parent)
        temp_path: str | None = None

        try:
            with tempfile.NamedTemporaryFile(
                mode="wb",
                delete=False,
                dir=str(output_path.parent),
                suffix=output_path.suffix,
            ) as fd:
                temp_path = fd.name
                fd.write(content)
                fd.flush()
                os.fsync(fd.fileno())

            shutil.move(temp_path, str(output_path))
            self._logger.debug(f"Atomic write: renamed {temp_path} -> {output_path}")

        except OSError as exc:
            self._logger.error(f"Atomic write failed for {output_path}: {exc}")
            if temp_path is not None and os.path.exists(temp_path):
                try:
                    os.unlink(temp_path)
                except OSError:
                    self._logger.error(f"Failed to clean up temp file: {temp_path}")
            raise

    # ------------------------------------------------------------------
    # Public write API
    # ------------------------------------------------------------------

    def write_file(
        self,
        output_path: Path,
        content: bytes,
        input_path: Path | None = None,
    ) -> WriteResult:
        """Write *content* to *output_path* with conflict resolution.

        Args:
            output_path: Desired output file path.
            content: Bytes to write.
            input_path: Optional source file path (for logging context).

        Returns:
            A :class:`WriteResult` describing the outcome.

        Raises:
            OSError: If the target is not writable or the write fails.
        """
        self._metadata.total_writes += 1
        original_path = output_path
        output_path = normalize_path(output_path)

        if output_path.exists() and not is_writable(output_path):
            raise PermissionError(f"File is not writable: {output_path}")

        conflict_resolution: str | None = None
        if output_path.exists():
            resolved, conflict_resolution = self._resolve_conflict(output_path)
            if resolved is None:
                self._metadata.skipped_writes += 1
                self._logger.info(f"Skipped writing {original_path.name} (conflict: SKIP)")
                return WriteResult(
                    output_path=None,
                    original_path=original_path,
                    conflict_resolution=conflict_resolution,
                )
            output_path = resolved

        self._write_atomic(output_path, content)

        self._metadata.successful_writes += 1
        self._metadata.written_files.append(output_path)
        if conflict_resolution == "overwritten":
            self._metadata.overwritten_writes += 1
        elif conflict_resolution == "renamed":
            self._metadata.renamed_writes += 1

        input_label = f" (source: {input_path})" if input_path else ""
        self._logger.info(f"Wrote {output_path}{input_label} [conflict={conflict_resolution}]")

        return WriteResult(
            output_path=output_path,
            original_path=original_path,
            conflict_resolution=conflict_resolution,
        )

    def output_path_for(self, input_path: Path, project_root: Path | None = None) -> Path:
        """Return where *input_path* lands under the output directory.

        With *project_root* the layout relative to the root is kept; files
        outside the root (or without a root) are placed flat by name.
        """
        if project_root is not None:
            try:
                relative = get_relative_path(input_path.resolve(), project_root.resolve())
                return self.output_dir / relative
            except ValueError:
                self._logger.debug(
                    f"{input_path} is outside {project_root}, using flat structure"
                )
        return self.output_dir / input_path.name

    def write_with_structure(
        self,
        input_path: Path,
        content: bytes,
        project_root: Path | None = None,
    ) -> WriteResult:
        """Write the output for *input_path*, preserving its directory layout."""
        output_path = self.output_path_for(input_path, project_root)
        self._logger.debug(f"Output path: {input_path} -> {output_path}")
        return self.write_file(output_path, content, input_path)

    def get_metadata(self) -> WriteMetadata:
        """Return the write statistics collected so far."""
        return self._metadata

    def get_written_files(self) -> list[Path]:
        return list(self._metadata.written_files)
