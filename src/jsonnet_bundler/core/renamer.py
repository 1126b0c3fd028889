"""Local-variable renaming for a single Jsonnet file.

Renaming runs in two passes over the syntax tree, both against the same
frozen source buffer:

1. **Bind collection** visits every ``local`` expression and every object
   local. Each bound name is located in the source, verified, queued for
   replacement and added to the rename set.
2. **Reference collection** visits every ``Var`` node. References whose
   name is in the rename set are located, verified and queued.

The queued replacements are then applied in one go. A candidate whose
computed span does not hold the expected identifier (or that has no
location at all) is logged and left untouched; it never aborts the file.

Renaming is scope-blind: once a name is bound anywhere in the file, every
reference with that text is renamed, including references that actually
resolve to a function parameter or a comprehension variable of the same
name. Those bindings keep their original names, so such a program can
change meaning. Files that reuse a local name as a parameter name need
to be checked by hand.

Example:
    >>> tree = parse_jsonnet("local x = 1; x + 2")
    >>> result = rename_locals(tree, b"local x = 1; x + 2", "a.conf")
    >>> result.code
    b'local _b31f2734_x = 1; _b31f2734_x + 2'
"""

from __future__ import annotations

from dataclasses import dataclass, field

from jsonnet_bundler.core.line_index import build_line_offsets
from jsonnet_bundler.core.naming import (
    DEFAULT_SEPARATOR,
    file_prefix,
    renamed_identifier,
)
from jsonnet_bundler.core.replacements import Replacement, apply_replacements
from jsonnet_bundler.core.spans import (
    Span,
    SpanMismatchError,
    resolve_span,
    verify_span,
)
from jsonnet_bundler.processors.jsonnet_ast import (
    Local,
    LocalBind,
    LocationRange,
    Node,
    ObjectLocal,
    Var,
)
from jsonnet_bundler.utils.logger import get_logger

logger = get_logger("jsonnet_bundler.core.renamer")


@dataclass
class SkippedSpan:
    """An occurrence that was left unrenamed.

    Attributes:
        name: The identifier.
        kind: ``"bind"`` or ``"reference"``.
        line: 1-indexed line from the parser location, 0 if unset.
        column: 1-indexed column from the parser location, 0 if unset.
        reason: Message of the verification failure.
    """

    name: str
    kind: str
    line: int
    column: int
    reason: str


@dataclass
class RenameContext:
    """Per-file state shared by both collection passes.

    Attributes:
        prefix: File prefix every new name starts with.
        source: The original, never modified source buffer.
        line_offsets: Line-offset table of ``source``.
        separator: Text between the prefix and the original name.
        local_binds: Names bound locally anywhere in the file.
        replacements: Queued edits against ``source``.
        skipped: Occurrences dropped because their span did not verify.
    """

    prefix: str
    source: bytes
    line_offsets: list[int]
    separator: str = DEFAULT_SEPARATOR
    local_binds: set[str] = field(default_factory=set)
    replacements: list[Replacement] = field(default_factory=list)
    skipped: list[SkippedSpan] = field(default_factory=list)

    @classmethod
    def for_source(
        cls,
        source: bytes,
        identity: str,
        separator: str = DEFAULT_SEPARATOR,
    ) -> RenameContext:
        """Build a context for ``source`` identified by ``identity``."""
        return cls(
            prefix=file_prefix(identity),
            source=source,
            line_offsets=build_line_offsets(source),
            separator=separator,
        )

    def new_name(self, name: str) -> str:
        return renamed_identifier(self.prefix, name, self.separator)


@dataclass
class RenameResult:
    """Outcome of renaming one file.

    Attributes:
        code: The rewritten source.
        prefix: File prefix used for every new name.
        renamed: Sorted original names that were bound locally.
        bind_count: Number of binding sites rewritten.
        reference_count: Number of references rewritten.
        skipped: Occurrences left untouched.
    """

    code: bytes
    prefix: str
    renamed: list[str] = field(default_factory=list)
    bind_count: int = 0
    reference_count: int = 0
    skipped: list[SkippedSpan] = field(default_factory=list)


class LocalRenamer:
    """Collects and applies local-variable replacements for one file.

    ``collect_var_replacements`` relies on the rename set, so it must run
    after ``collect_local_bind_replacements`` has covered the whole tree.

    Example:
        >>> renamer = LocalRenamer(RenameContext.for_source(source, "main.jsonnet"))
        >>> renamer.collect_local_bind_replacements(tree)
        >>> renamer.collect_var_replacements(tree)
        >>> code = renamer.apply()
    """

    def __init__(self, context: RenameContext) -> None:
        self.context = context
        self.bind_count = 0
        self.reference_count = 0

    def _skip(self, name: str, kind: str, loc: LocationRange, error: SpanMismatchError) -> None:
        logger.warning(
            f"Not renaming {kind} '{name}' at "
            f"{loc.file_name or '<source>'}:{loc.begin.line}:{loc.begin.column}: {error}"
        )
        self.context.skipped.append(
            SkippedSpan(name, kind, loc.begin.line, loc.begin.column, str(error))
        )

    def _queue(self, span: Span, name: str) -> None:
        new_name = self.context.new_name(name)
        self.context.replacements.append(Replacement(span.begin, span.end, new_name))
        logger.debug(f"Queued [{span.begin}:{span.end}] {name} -> {new_name}")

    def _collect_bind(self, bind: LocalBind) -> None:
        name = bind.variable
        loc = bind.loc
        try:
            if not loc.is_set():
                raise SpanMismatchError(name, "", None)
            # the bind's end location covers the whole binding, not the name
            line, column = loc.begin.line, loc.begin.column
            span = resolve_span(self.context.line_offsets, line, column, line, column + len(name))
            verify_span(self.context.source, span, name)
        except SpanMismatchError as e:
            self._skip(name, "bind", loc, e)
            return

        self._queue(span, name)
        self.context.local_binds.add(name)
        self.bind_count += 1

    def _collect_var(self, var: Var) -> None:
        loc = var.loc
        try:
            if not loc.is_set():
                raise SpanMismatchError(var.id, "", None)
            span = resolve_span(
                self.context.line_offsets,
                loc.begin.line,
                loc.begin.column,
                loc.end.line,
                loc.end.column,
            )
            verify_span(self.context.source, span, var.id)
        except SpanMismatchError as e:
            self._skip(var.id, "reference", loc, e)
            return

        self._queue(span, var.id)
        self.reference_count += 1

    def collect_local_bind_replacements(self, node: Node) -> None:
        """Queue a replacement for every locally bound name under ``node``."""
        if isinstance(node, Local):
            for bind in node.binds:
                self._collect_bind(bind)
        elif isinstance(node, ObjectLocal):
            self._collect_bind(node.bind)

        for child in node.children():
            self.collect_local_bind_replacements(child)

    def collect_var_replacements(self, node: Node) -> None:
        """Queue a replacement for every reference to a locally bound name."""
        if isinstance(node, Var) and node.id in self.context.local_binds:
            self._collect_var(node)

        for child in node.children():
            self.collect_var_replacements(child)

    def apply(self) -> bytes:
        """Apply every queued replacement to the original source."""
        return apply_replacements(self.context.source, self.context.replacements)

    def result(self) -> RenameResult:
        return RenameResult(
            code=self.apply(),
            prefix=self.context.prefix,
            renamed=sorted(self.context.local_binds),
            bind_count=self.bind_count,
            reference_count=self.reference_count,
            skipped=list(self.context.skipped),
        )


def rename_locals(
    tree: Node,
    source: bytes,
    identity: str,
    separator: str = DEFAULT_SEPARATOR,
) -> RenameResult:
    """Rename every local variable of one file.

    Args:
        tree: Syntax tree parsed from ``source``.
        source: Original source bytes.
        identity: File identity the prefix is derived from.
        separator: Text between the prefix and each original name.

    Returns:
        RenameResult with the rewritten source and statistics.
    """
    renamer = LocalRenamer(RenameContext.for_source(source, identity, separator))
    renamer.collect_local_bind_replacements(tree)
    renamer.collect_var_replacements(tree)
    result = renamer.result()
    logger.debug(
        f"Renamed {len(result.renamed)} name(s) in {identity}: "
        f"{result.bind_count} bind(s), {result.reference_count} reference(s), "
        f"{len(result.skipped)} skipped"
    )
    return result
