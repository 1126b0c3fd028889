"""Syntax tree for Jsonnet programs.

Every node carries a ``LocationRange`` and enumerates its child nodes via
``children()``. Locations are 1-indexed; the end column points just past
the last character. A range whose begin line is 0 is *unset*: the node has
no position information.

Only two node kinds matter to the renamer: local binding constructs
(``Local`` and object-level ``ObjectLocal``) and variable references
(``Var``). Everything else is traversed but otherwise ignored.

Example:
    >>> tree = parse_jsonnet("local x = 1; x")
    >>> isinstance(tree, Local), tree.binds[0].variable
    (True, 'x')
    >>> [type(c).__name__ for c in children(tree)]
    ['NumberLiteral', 'Var']
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Union


@dataclass(frozen=True)
class Location:
    """A 1-indexed (line, column) position. Line 0 means unknown."""

    line: int = 0
    column: int = 0


@dataclass(frozen=True)
class LocationRange:
    """Source range of a node.

    Attributes:
        file_name: Name of the file the node was parsed from.
        begin: Position of the first character.
        end: Position just past the last character.
    """

    file_name: str = ""
    begin: Location = Location()
    end: Location = Location()

    def is_set(self) -> bool:
        """Return True if the range carries position information."""
        return self.begin.line != 0


class Node:
    """Base class of all syntax tree nodes."""

    loc: LocationRange

    def children(self) -> list["Node"]:
        """Return the direct child nodes in source order."""
        return []


def children(node: Node) -> list[Node]:
    """Return the direct children of ``node``."""
    return node.children()


def walk(node: Node) -> Iterator[Node]:
    """Yield ``node`` and all of its descendants, depth first."""
    yield node
    for child in node.children():
        yield from walk(child)


def _present(*nodes: Optional[Node]) -> list[Node]:
    return [n for n in nodes if n is not None]


# ---------------------------------------------------------------------------
# Literals
# ---------------------------------------------------------------------------

@dataclass
class NullLiteral(Node):
    loc: LocationRange = field(default_factory=LocationRange)


@dataclass
class BooleanLiteral(Node):
    value: bool
    loc: LocationRange = field(default_factory=LocationRange)


@dataclass
class NumberLiteral(Node):
    value: float
    original: str
    loc: LocationRange = field(default_factory=LocationRange)


class StringKind(Enum):
    """Lexical form a string literal was written in."""

    DOUBLE = "double"
    SINGLE = "single"
    VERBATIM_DOUBLE = "verbatim_double"
    VERBATIM_SINGLE = "verbatim_single"
    BLOCK = "block"


@dataclass
class StringLiteral(Node):
    value: str
    kind: StringKind = StringKind.DOUBLE
    loc: LocationRange = field(default_factory=LocationRange)


@dataclass
class Self(Node):
    loc: LocationRange = field(default_factory=LocationRange)


@dataclass
class Dollar(Node):
    loc: LocationRange = field(default_factory=LocationRange)


# ---------------------------------------------------------------------------
# Variables and bindings
# ---------------------------------------------------------------------------

@dataclass
class Var(Node):
    """A reference to a variable by name."""

    id: str
    loc: LocationRange = field(default_factory=LocationRange)


@dataclass
class Parameter:
    """A function parameter, with an optional default value."""

    name: str
    default: Optional[Node] = None
    loc: LocationRange = field(default_factory=LocationRange)


@dataclass
class Function(Node):
    parameters: list[Parameter]
    body: Node
    loc: LocationRange = field(default_factory=LocationRange)

    def children(self) -> list[Node]:
        return _present(*(p.default for p in self.parameters), self.body)


@dataclass
class LocalBind:
    """One ``name = value`` (or ``name(params) = value``) binding.

    The location begins at the bound name. Its end covers the whole binding,
    so it does not tell where the name itself ends.

    Attributes:
        variable: The bound identifier.
        body: Bound value. For function binds this is the function body.
        function: The function node for ``name(params) = body`` binds.
    """

    variable: str
    body: Node
    function: Optional[Function] = None
    loc: LocationRange = field(default_factory=LocationRange)

    def children(self) -> list[Node]:
        return [self.function] if self.function is not None else [self.body]


@dataclass
class Local(Node):
    """``local a = ..., b = ...; body``"""

    binds: list[LocalBind]
    body: Node
    loc: LocationRange = field(default_factory=LocationRange)

    def children(self) -> list[Node]:
        result: list[Node] = []
        for bind in self.binds:
            result.extend(bind.children())
        result.append(self.body)
        return result


# ---------------------------------------------------------------------------
# Operators and control flow
# ---------------------------------------------------------------------------

@dataclass
class Binary(Node):
    left: Node
    op: str
    right: Node
    loc: LocationRange = field(default_factory=LocationRange)

    def children(self) -> list[Node]:
        return [self.left, self.right]


@dataclass
class Unary(Node):
    op: str
    expr: Node
    loc: LocationRange = field(default_factory=LocationRange)

    def children(self) -> list[Node]:
        return [self.expr]


@dataclass
class Conditional(Node):
    cond: Node
    branch_true: Node
    branch_false: Optional[Node] = None
    loc: LocationRange = field(default_factory=LocationRange)

    def children(self) -> list[Node]:
        return _present(self.cond, self.branch_true, self.branch_false)


@dataclass
class Assert(Node):
    """``assert cond : message; rest``"""

    cond: Node
    message: Optional[Node]
    rest: Node
    loc: LocationRange = field(default_factory=LocationRange)

    def children(self) -> list[Node]:
        return _present(self.cond, self.message, self.rest)


@dataclass
class Error(Node):
    expr: Node
    loc: LocationRange = field(default_factory=LocationRange)

    def children(self) -> list[Node]:
        return [self.expr]


@dataclass
class Parens(Node):
    inner: Node
    loc: LocationRange = field(default_factory=LocationRange)

    def children(self) -> list[Node]:
        return [self.inner]


class ImportKind(Enum):
    CODE = "import"
    STRING = "importstr"
    BINARY = "importbin"


@dataclass
class Import(Node):
    kind: ImportKind
    file: StringLiteral
    loc: LocationRange = field(default_factory=LocationRange)

    def children(self) -> list[Node]:
        return [self.file]


# ---------------------------------------------------------------------------
# Calls and indexing
# ---------------------------------------------------------------------------

@dataclass
class NamedArgument:
    name: str
    arg: Node
    loc: LocationRange = field(default_factory=LocationRange)


@dataclass
class Apply(Node):
    target: Node
    arguments: list[Node] = field(default_factory=list)
    named_arguments: list[NamedArgument] = field(default_factory=list)
    tailstrict: bool = False
    loc: LocationRange = field(default_factory=LocationRange)

    def children(self) -> list[Node]:
        return [self.target, *self.arguments, *(a.arg for a in self.named_arguments)]


@dataclass
class ApplyBrace(Node):
    """Object extension by juxtaposition: ``base { ... }``."""

    left: Node
    right: Node
    loc: LocationRange = field(default_factory=LocationRange)

    def children(self) -> list[Node]:
        return [self.left, self.right]


@dataclass
class Index(Node):
    """``target.field_name`` or ``target[index]``.

    Exactly one of ``index`` and ``field_name`` is set.
    """

    target: Node
    index: Optional[Node] = None
    field_name: Optional[str] = None
    loc: LocationRange = field(default_factory=LocationRange)

    def children(self) -> list[Node]:
        return _present(self.target, self.index)


@dataclass
class Slice(Node):
    target: Node
    begin: Optional[Node] = None
    end: Optional[Node] = None
    step: Optional[Node] = None
    loc: LocationRange = field(default_factory=LocationRange)

    def children(self) -> list[Node]:
        return _present(self.target, self.begin, self.end, self.step)


@dataclass
class SuperIndex(Node):
    """``super.field_name`` or ``super[index]``."""

    index: Optional[Node] = None
    field_name: Optional[str] = None
    loc: LocationRange = field(default_factory=LocationRange)

    def children(self) -> list[Node]:
        return _present(self.index)


@dataclass
class InSuper(Node):
    """``index in super``"""

    index: Node
    loc: LocationRange = field(default_factory=LocationRange)

    def children(self) -> list[Node]:
        return [self.index]


# ---------------------------------------------------------------------------
# Objects, arrays and comprehensions
# ---------------------------------------------------------------------------

class FieldNameKind(Enum):
    ID = "id"
    STRING = "string"
    EXPR = "expr"


class Visibility(Enum):
    INHERIT = ":"
    HIDDEN = "::"
    VISIBLE = ":::"


@dataclass
class ObjectField(Node):
    """A field or method of an object literal.

    Identifier names are stored as ``StringLiteral`` nodes, so object keys
    never appear as ``Var`` references.
    """

    name_kind: FieldNameKind
    name: Node
    body: Node
    visibility: Visibility = Visibility.INHERIT
    plus_super: bool = False
    method: Optional[Function] = None
    loc: LocationRange = field(default_factory=LocationRange)

    def children(self) -> list[Node]:
        if self.method is not None:
            return [self.name, self.method]
        return [self.name, self.body]


@dataclass
class ObjectLocal(Node):
    """``local name = value`` inside an object literal."""

    bind: LocalBind
    loc: LocationRange = field(default_factory=LocationRange)

    def children(self) -> list[Node]:
        return self.bind.children()


@dataclass
class ObjectAssert(Node):
    cond: Node
    message: Optional[Node] = None
    loc: LocationRange = field(default_factory=LocationRange)

    def children(self) -> list[Node]:
        return _present(self.cond, self.message)


ObjectMember = Union[ObjectField, ObjectLocal, ObjectAssert]


@dataclass
class Object(Node):
    members: list[ObjectMember] = field(default_factory=list)
    loc: LocationRange = field(default_factory=LocationRange)

    def children(self) -> list[Node]:
        return list(self.members)


@dataclass
class ForSpec(Node):
    """``for variable in expr``"""

    variable: str
    expr: Node
    loc: LocationRange = field(default_factory=LocationRange)

    def children(self) -> list[Node]:
        return [self.expr]


@dataclass
class IfSpec(Node):
    cond: Node
    loc: LocationRange = field(default_factory=LocationRange)

    def children(self) -> list[Node]:
        return [self.cond]


CompSpec = Union[ForSpec, IfSpec]


@dataclass
class ObjectComprehension(Node):
    """``{ locals..., [key]: value, locals... for ... }``"""

    members: list[ObjectMember]
    specs: list[CompSpec]
    loc: LocationRange = field(default_factory=LocationRange)

    def children(self) -> list[Node]:
        return [*self.specs, *self.members]


@dataclass
class Array(Node):
    elements: list[Node] = field(default_factory=list)
    loc: LocationRange = field(default_factory=LocationRange)

    def children(self) -> list[Node]:
        return list(self.elements)


@dataclass
class ArrayComprehension(Node):
    body: Node
    specs: list[CompSpec]
    loc: LocationRange = field(default_factory=LocationRange)

    def children(self) -> list[Node]:
        return [*self.specs, self.body]
