"""Jsonnet parser built on lark.

The grammar lives next to this module in ``jsonnet.lark`` and is compiled
once at import time into an LALR parser with position propagation. The
resulting parse tree is converted into the node classes of
``jsonnet_ast`` by ``_AstBuilder``.

Locations follow lark's conventions: lines and columns are 1-indexed and
counted in characters, and end columns point just past the last character.
Identifier nodes (``Var``, bound names, parameters) take their positions
from the identifier token itself rather than from the enclosing rule.

Example:
    >>> tree = parse_jsonnet("local x = 1; x + 2", file_name="main.jsonnet")
    >>> tree.body.left.loc.begin
    Location(line=1, column=14)
"""

from __future__ import annotations

import re
from pathlib import Path

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import UnexpectedInput, VisitError

from jsonnet_bundler.processors.jsonnet_ast import (
    Apply,
    ApplyBrace,
    Array,
    ArrayComprehension,
    Assert,
    Binary,
    BooleanLiteral,
    Conditional,
    Dollar,
    Error,
    FieldNameKind,
    ForSpec,
    Function,
    IfSpec,
    Import,
    ImportKind,
    Index,
    InSuper,
    Local,
    LocalBind,
    Location,
    LocationRange,
    NamedArgument,
    Node,
    NullLiteral,
    NumberLiteral,
    Object,
    ObjectAssert,
    ObjectComprehension,
    ObjectField,
    ObjectLocal,
    Parameter,
    Parens,
    Self,
    Slice,
    StringKind,
    StringLiteral,
    SuperIndex,
    Unary,
    Var,
    Visibility,
)

_GRAMMAR_PATH = Path(__file__).with_name("jsonnet.lark")

_PARSER = Lark(
    _GRAMMAR_PATH.read_text(encoding="utf-8"),
    parser="lalr",
    start="start",
    propagate_positions=True,
    maybe_placeholders=False,
)

_BINARY_OPS = {
    "or_op": "||",
    "and_op": "&&",
    "bit_or_op": "|",
    "bit_xor_op": "^",
    "bit_and_op": "&",
    "eq_op": "==",
    "ne_op": "!=",
    "lt_op": "<",
    "le_op": "<=",
    "gt_op": ">",
    "ge_op": ">=",
    "in_op": "in",
    "lshift_op": "<<",
    "rshift_op": ">>",
    "add_op": "+",
    "sub_op": "-",
    "mul_op": "*",
    "div_op": "/",
    "mod_op": "%",
}

_UNARY_OPS = {
    "neg_op": "-",
    "pos_op": "+",
    "not_op": "!",
    "bitnot_op": "~",
}

_STRING_KINDS = {
    "STRING_DOUBLE": StringKind.DOUBLE,
    "STRING_SINGLE": StringKind.SINGLE,
    "VERBATIM_DOUBLE": StringKind.VERBATIM_DOUBLE,
    "VERBATIM_SINGLE": StringKind.VERBATIM_SINGLE,
    "TEXT_BLOCK": StringKind.BLOCK,
}

_ESCAPES = {
    '"': '"',
    "'": "'",
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}

_ESCAPE_RE = re.compile(r"\\(u[0-9a-fA-F]{4}|[\s\S])")


class JsonnetSyntaxError(ValueError):
    """Raised when source text is not a valid Jsonnet program.

    Attributes:
        line: 1-indexed line of the error, or 0 when unknown.
        column: 1-indexed column of the error, or 0 when unknown.
        file_name: File the source came from, if known.
    """

    def __init__(
        self,
        message: str,
        line: int = 0,
        column: int = 0,
        file_name: str = "",
    ) -> None:
        self.message = message
        self.line = max(line, 0)
        self.column = max(column, 0)
        self.file_name = file_name
        where = file_name or "<source>"
        if self.line:
            where = f"{where}:{self.line}:{self.column}"
        super().__init__(f"{where}: {message}")


def _unescape(body: str, loc: LocationRange) -> str:
    def replace(match: re.Match) -> str:
        escape = match.group(1)
        if escape[0] == "u" and len(escape) == 5:
            return chr(int(escape[1:], 16))
        if escape in _ESCAPES:
            return _ESCAPES[escape]
        raise JsonnetSyntaxError(
            f"unknown escape sequence '\\{escape}'",
            loc.begin.line,
            loc.begin.column,
            loc.file_name,
        )

    text = _ESCAPE_RE.sub(replace, body)
    # \uXXXX pairs encode characters outside the BMP as surrogates
    return text.encode("utf-16", "surrogatepass").decode("utf-16")


def _decode_text_block(raw: str, loc: LocationRange) -> str:
    chomp = raw.startswith("|||-")
    body = raw[raw.index("\n") + 1:raw.rindex("\n")]
    lines = body.split("\n")
    first = lines[0]
    indent = first[:len(first) - len(first.lstrip(" \t"))]
    if not indent:
        raise JsonnetSyntaxError(
            "text block's first line must start with whitespace",
            loc.begin.line,
            loc.begin.column,
            loc.file_name,
        )

    out = []
    for offset, line in enumerate(lines):
        if not line.strip():
            out.append("")
        elif line.startswith(indent):
            out.append(line[len(indent):])
        else:
            raise JsonnetSyntaxError(
                "text block not terminated with |||",
                loc.begin.line + 1 + offset,
                1,
                loc.file_name,
            )

    text = "\n".join(out) + "\n"
    return text[:-1] if chomp else text


def decode_string(token: Token, loc: LocationRange) -> str:
    """Return the value of a string literal token."""
    raw = str(token)
    kind = _STRING_KINDS[token.type]
    if kind is StringKind.DOUBLE or kind is StringKind.SINGLE:
        return _unescape(raw[1:-1], loc)
    if kind is StringKind.VERBATIM_DOUBLE:
        return raw[2:-1].replace('""', '"')
    if kind is StringKind.VERBATIM_SINGLE:
        return raw[2:-1].replace("''", "'")
    return _decode_text_block(raw, loc)


@v_args(meta=True)
class _AstBuilder(Transformer):
    """Converts a lark parse tree into ``jsonnet_ast`` nodes."""

    def __init__(self, file_name: str = "") -> None:
        super().__init__()
        self.file_name = file_name

    # -- locations ---------------------------------------------------------

    def _range(self, meta) -> LocationRange:
        if meta.empty:
            return LocationRange(self.file_name)
        return LocationRange(
            self.file_name,
            Location(meta.line, meta.column),
            Location(meta.end_line, meta.end_column),
        )

    def _token_range(self, token: Token, end_meta=None) -> LocationRange:
        if end_meta is not None and not end_meta.empty:
            end = Location(end_meta.end_line, end_meta.end_column)
        else:
            end = Location(token.end_line, token.end_column)
        return LocationRange(self.file_name, Location(token.line, token.column), end)

    def _error(self, message: str, meta) -> JsonnetSyntaxError:
        loc = self._range(meta)
        return JsonnetSyntaxError(message, loc.begin.line, loc.begin.column, self.file_name)

    # -- operators ---------------------------------------------------------

    def __default__(self, data, children, meta):
        name = str(data)
        if name in _BINARY_OPS:
            left, right = children
            return Binary(left, _BINARY_OPS[name], right, loc=self._range(meta))
        if name in _UNARY_OPS:
            (expr,) = children
            return Unary(_UNARY_OPS[name], expr, loc=self._range(meta))
        raise self._error(f"unsupported construct '{name}'", meta)

    def in_super(self, meta, children):
        (index,) = children
        return InSuper(index, loc=self._range(meta))

    # -- locals and functions ----------------------------------------------

    def local_expr(self, meta, children):
        *binds, body = children
        return Local(binds, body, loc=self._range(meta))

    def value_bind(self, meta, children):
        name, body = children
        return LocalBind(str(name), body, loc=self._token_range(name, meta))

    def function_bind(self, meta, children):
        name, *params, body = children
        loc = self._token_range(name, meta)
        function = Function(params, body, loc=loc)
        return LocalBind(str(name), body, function=function, loc=loc)

    def param(self, meta, children):
        name = children[0]
        default = children[1] if len(children) > 1 else None
        return Parameter(str(name), default, loc=self._token_range(name))

    def function_expr(self, meta, children):
        *params, body = children
        return Function(params, body, loc=self._range(meta))

    # -- control flow ------------------------------------------------------

    def if_expr(self, meta, children):
        return Conditional(*children, loc=self._range(meta))

    def assert_plain(self, meta, children):
        cond, rest = children
        return Assert(cond, None, rest, loc=self._range(meta))

    def assert_message(self, meta, children):
        cond, message, rest = children
        return Assert(cond, message, rest, loc=self._range(meta))

    def error_expr(self, meta, children):
        (expr,) = children
        return Error(expr, loc=self._range(meta))

    # -- postfix forms -----------------------------------------------------

    def field_access(self, meta, children):
        target, name = children
        return Index(target, field_name=str(name), loc=self._range(meta))

    def index_access(self, meta, children):
        target, index = children
        return Index(target, index=index, loc=self._range(meta))

    def slice(self, meta, children):
        parts: list[Node | None] = [None, None, None]
        slot = 0
        for child in children:
            if isinstance(child, Token):
                slot += len(str(child))
            else:
                parts[slot] = child
        return tuple(parts)

    def slice_access(self, meta, children):
        target, (begin, end, step) = children
        return Slice(target, begin, end, step, loc=self._range(meta))

    def _apply(self, meta, children, tailstrict: bool) -> Apply:
        target, *args = children
        positional: list[Node] = []
        named: list[NamedArgument] = []
        for arg in args:
            if isinstance(arg, NamedArgument):
                named.append(arg)
            elif named:
                raise self._error("positional argument after a named argument", meta)
            else:
                positional.append(arg)
        return Apply(target, positional, named, tailstrict, loc=self._range(meta))

    def apply(self, meta, children):
        return self._apply(meta, children, tailstrict=False)

    def apply_tailstrict(self, meta, children):
        return self._apply(meta, children, tailstrict=True)

    def named_arg(self, meta, children):
        name, arg = children
        return NamedArgument(str(name), arg, loc=self._range(meta))

    def apply_brace(self, meta, children):
        left, right = children
        return ApplyBrace(left, right, loc=self._range(meta))

    # -- primaries ---------------------------------------------------------

    def null_lit(self, meta, children):
        return NullLiteral(loc=self._range(meta))

    def true_lit(self, meta, children):
        return BooleanLiteral(True, loc=self._range(meta))

    def false_lit(self, meta, children):
        return BooleanLiteral(False, loc=self._range(meta))

    def self_ref(self, meta, children):
        return Self(loc=self._range(meta))

    def dollar(self, meta, children):
        return Dollar(loc=self._range(meta))

    def number(self, meta, children):
        (token,) = children
        return NumberLiteral(float(token), str(token), loc=self._token_range(token))

    def var(self, meta, children):
        (token,) = children
        return Var(str(token), loc=self._token_range(token))

    def string(self, meta, children):
        (token,) = children
        loc = self._token_range(token)
        return StringLiteral(decode_string(token, loc), _STRING_KINDS[token.type], loc=loc)

    def parens(self, meta, children):
        (inner,) = children
        return Parens(inner, loc=self._range(meta))

    def super_field(self, meta, children):
        (name,) = children
        return SuperIndex(field_name=str(name), loc=self._range(meta))

    def super_index(self, meta, children):
        (index,) = children
        return SuperIndex(index=index, loc=self._range(meta))

    def import_code(self, meta, children):
        return Import(ImportKind.CODE, children[0], loc=self._range(meta))

    def import_str(self, meta, children):
        return Import(ImportKind.STRING, children[0], loc=self._range(meta))

    def import_bin(self, meta, children):
        return Import(ImportKind.BINARY, children[0], loc=self._range(meta))

    # -- objects -----------------------------------------------------------

    def object(self, meta, children):
        return Object(list(children), loc=self._range(meta))

    def object_comp(self, meta, children):
        members = [c for c in children if not isinstance(c, (ForSpec, IfSpec))]
        specs = [c for c in children if isinstance(c, (ForSpec, IfSpec))]
        fields = [m for m in members if isinstance(m, ObjectField)]
        if any(isinstance(m, ObjectAssert) for m in members):
            raise self._error("object comprehension cannot have asserts", meta)
        if len(fields) != 1:
            raise self._error("object comprehension must have exactly one field", meta)
        if fields[0].name_kind is not FieldNameKind.EXPR:
            raise self._error("object comprehension field name must be computed with [...]", meta)
        return ObjectComprehension(members, specs, loc=self._range(meta))

    def object_local(self, meta, children):
        (bind,) = children
        return ObjectLocal(bind, loc=self._range(meta))

    def object_assert(self, meta, children):
        cond = children[0]
        message = children[1] if len(children) > 1 else None
        return ObjectAssert(cond, message, loc=self._range(meta))

    def plain_field(self, meta, children):
        (name_kind, name), visibility, body = children
        return ObjectField(name_kind, name, body, visibility, loc=self._range(meta))

    def plus_field(self, meta, children):
        (name_kind, name), visibility, body = children
        return ObjectField(name_kind, name, body, visibility, plus_super=True, loc=self._range(meta))

    def method_field(self, meta, children):
        (name_kind, name), *params, visibility, body = children
        loc = self._range(meta)
        method = Function(params, body, loc=loc)
        return ObjectField(name_kind, name, body, visibility, method=method, loc=loc)

    def id_name(self, meta, children):
        (token,) = children
        return FieldNameKind.ID, StringLiteral(str(token), loc=self._token_range(token))

    def string_name(self, meta, children):
        return FieldNameKind.STRING, children[0]

    def expr_name(self, meta, children):
        return FieldNameKind.EXPR, children[0]

    def visibility(self, meta, children):
        (token,) = children
        return Visibility(str(token))

    # -- arrays and comprehensions -----------------------------------------

    def array(self, meta, children):
        return Array(list(children), loc=self._range(meta))

    def array_comp(self, meta, children):
        elements = [c for c in children if not isinstance(c, (ForSpec, IfSpec))]
        specs = [c for c in children if isinstance(c, (ForSpec, IfSpec))]
        if len(elements) != 1:
            raise self._error("array comprehension must have exactly one element", meta)
        return ArrayComprehension(elements[0], specs, loc=self._range(meta))

    def forspec(self, meta, children):
        name, expr = children
        return ForSpec(str(name), expr, loc=self._range(meta))

    def ifspec(self, meta, children):
        (cond,) = children
        return IfSpec(cond, loc=self._range(meta))


def parse_jsonnet(source: str | bytes, file_name: str = "") -> Node:
    """Parse Jsonnet source into a syntax tree.

    Args:
        source: Program text, or its UTF-8 bytes.
        file_name: Name recorded in every node's location.

    Returns:
        The root node of the tree.

    Raises:
        JsonnetSyntaxError: If the source is not valid UTF-8 or not valid Jsonnet.
    """
    if isinstance(source, bytes):
        try:
            source = source.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise JsonnetSyntaxError(f"source is not valid UTF-8: {exc}", file_name=file_name) from exc

    try:
        tree = _PARSER.parse(source)
    except UnexpectedInput as exc:
        message = str(exc).strip().splitlines()[0] if str(exc).strip() else type(exc).__name__
        # lark reports '?' when the failing token has no position
        line = exc.line if isinstance(exc.line, int) else 0
        column = exc.column if isinstance(exc.column, int) else 0
        raise JsonnetSyntaxError(message, line, column, file_name) from exc

    try:
        return _AstBuilder(file_name).transform(tree)
    except VisitError as exc:
        if isinstance(exc.orig_exc, JsonnetSyntaxError):
            raise exc.orig_exc from None
        raise
