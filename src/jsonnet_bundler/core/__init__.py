"""Core renaming engine and bundling workflow.

Classes:
    LocalRenamer: Collects and applies local-variable replacements for one file
    RenameContext: Per-file state shared by the collection passes
    RenameResult: Outcome of renaming one file
    Replacement: A pending edit of the original source
    BundlerConfig: Configuration data model
    BundleOrchestrator: Runs validation, renaming and writing for many files
    OutputWriter: Atomic file writer with conflict resolution
"""

from jsonnet_bundler.core.config import BundlerConfig
from jsonnet_bundler.core.line_index import build_line_offsets, line_col_to_offset
from jsonnet_bundler.core.naming import file_identity, file_prefix, fnv1a_32, renamed_identifier
from jsonnet_bundler.core.orchestrator import BundleError, BundleOrchestrator, BundleResult, FileResult
from jsonnet_bundler.core.output_writer import ConflictStrategy, OutputWriter, WriteMetadata, WriteResult
from jsonnet_bundler.core.renamer import LocalRenamer, RenameContext, RenameResult, rename_locals
from jsonnet_bundler.core.replacements import Replacement, apply_replacements
from jsonnet_bundler.core.spans import Span, SpanMismatchError, resolve_span, verify_span

__all__ = [
    "BundlerConfig",
    "build_line_offsets",
    "line_col_to_offset",
    "file_identity",
    "file_prefix",
    "fnv1a_32",
    "renamed_identifier",
    "BundleError",
    "BundleOrchestrator",
    "BundleResult",
    "FileResult",
    "ConflictStrategy",
    "OutputWriter",
    "WriteMetadata",
    "WriteResult",
    "LocalRenamer",
    "RenameContext",
    "RenameResult",
    "rename_locals",
    "Replacement",
    "apply_replacements",
    "Span",
    "SpanMismatchError",
    "resolve_span",
    "verify_span",
]
