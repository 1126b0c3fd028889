"""Tests for the Jsonnet parser.

This test suite covers:
- Identifier locations used by the renamer
- Operator precedence and associativity
- Locals, functions, calls and indexing
- Objects, arrays and comprehensions
- String literal forms
- Syntax errors
"""

import pytest

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
    Location,
    NullLiteral,
    NumberLiteral,
    Object,
    ObjectAssert,
    ObjectComprehension,
    ObjectField,
    ObjectLocal,
    Parens,
    Self,
    Slice,
    StringKind,
    StringLiteral,
    SuperIndex,
    Unary,
    Var,
    Visibility,
    walk,
)
from jsonnet_bundler.processors.jsonnet_parser import JsonnetSyntaxError, parse_jsonnet


# ============================================================================
# Locations
# ============================================================================


class TestLocations:
    """Identifier positions are 1-indexed with an exclusive end column."""

    def test_bind_and_var_positions(self):
        tree = parse_jsonnet("local x = 1; x + 2", file_name="main.jsonnet")

        bind = tree.binds[0]
        assert bind.variable == "x"
        assert bind.loc.begin == Location(1, 7)
        assert bind.loc.file_name == "main.jsonnet"

        var = tree.body.left
        assert isinstance(var, Var)
        assert var.loc.begin == Location(1, 14)
        assert var.loc.end == Location(1, 15)

    def test_multi_line_positions(self):
        tree = parse_jsonnet("local a = 1;\n  local bb = a;\n    bb")

        inner = tree.body
        assert inner.binds[0].loc.begin == Location(2, 9)
        assert inner.body.loc.begin == Location(3, 5)
        assert inner.body.loc.end == Location(3, 7)

    def test_columns_count_characters(self):
        tree = parse_jsonnet('["é", x]')
        assert tree.elements[1].loc.begin == Location(1, 7)

    def test_local_range_starts_at_keyword(self):
        tree = parse_jsonnet("  local x = 1; x")
        assert tree.loc.begin == Location(1, 3)
        assert tree.loc.is_set()

    def test_bytes_input(self):
        tree = parse_jsonnet(b"local x = 1; x")
        assert isinstance(tree, Local)


# ============================================================================
# Expressions
# ============================================================================


class TestOperators:
    def test_precedence(self):
        tree = parse_jsonnet("1 + 2 * 3")
        assert isinstance(tree, Binary) and tree.op == "+"
        assert isinstance(tree.right, Binary) and tree.right.op == "*"

    def test_left_associative(self):
        tree = parse_jsonnet("1 - 2 - 3")
        assert tree.op == "-"
        assert isinstance(tree.left, Binary)
        assert isinstance(tree.right, NumberLiteral)

    def test_logical_precedence(self):
        tree = parse_jsonnet("a || b && c")
        assert tree.op == "||"
        assert tree.right.op == "&&"

    @pytest.mark.parametrize("op", ["==", "!=", "<", "<=", ">", ">=", "<<", ">>", "%", "/", "&", "|", "^", "in"])
    def test_binary_operators(self, op):
        tree = parse_jsonnet(f"a {op} b")
        assert isinstance(tree, Binary)
        assert tree.op == op

    @pytest.mark.parametrize("op", ["-", "+", "!", "~"])
    def test_unary_operators(self, op):
        tree = parse_jsonnet(f"{op}x")
        assert isinstance(tree, Unary)
        assert tree.op == op
        assert isinstance(tree.expr, Var)

    def test_in_super(self):
        tree = parse_jsonnet("{ a: 'a' in super }")
        assert isinstance(tree.members[0].body, InSuper)


class TestLiterals:
    def test_keywords(self):
        tree = parse_jsonnet("[null, true, false, self, $]")
        assert [type(e) for e in tree.elements] == [NullLiteral, BooleanLiteral, BooleanLiteral, Self, Dollar]
        assert tree.elements[1].value is True
        assert tree.elements[2].value is False

    def test_number(self):
        tree = parse_jsonnet("1.5e3")
        assert tree.value == 1500.0
        assert tree.original == "1.5e3"

    def test_comments_are_ignored(self):
        tree = parse_jsonnet("# hash\n/* block\n */ 1 // line")
        assert isinstance(tree, NumberLiteral)

    def test_keyword_prefix_is_an_identifier(self):
        tree = parse_jsonnet("local localVar = 1; localVar")
        assert tree.binds[0].variable == "localVar"


class TestStrings:
    def test_double_quoted_escapes(self):
        tree = parse_jsonnet(r'"a\n\t\"\\é"')
        assert tree.value == 'a\n\t"\\é'
        assert tree.kind is StringKind.DOUBLE

    def test_single_quoted(self):
        tree = parse_jsonnet(r"'it\'s'")
        assert tree.value == "it's"
        assert tree.kind is StringKind.SINGLE

    def test_surrogate_pair(self):
        assert parse_jsonnet(r'"\ud83d\ude00"').value == "\U0001F600"

    def test_verbatim(self):
        assert parse_jsonnet('@"a""b\\n"').value == 'a"b\\n'
        assert parse_jsonnet("@'it''s'").kind is StringKind.VERBATIM_SINGLE

    def test_text_block(self):
        tree = parse_jsonnet("|||\n  line1\n    line2\n\n  line3\n|||")
        assert tree.value == "line1\n  line2\n\nline3\n"
        assert tree.kind is StringKind.BLOCK

    def test_text_block_chomped(self):
        assert parse_jsonnet("|||-\n  text\n|||").value == "text"

    def test_unknown_escape(self):
        with pytest.raises(JsonnetSyntaxError, match="unknown escape"):
            parse_jsonnet(r"'\q'")


class TestLocalsAndFunctions:
    def test_multiple_binds(self):
        tree = parse_jsonnet("local a = 1, b = 2; a + b")
        assert [b.variable for b in tree.binds] == ["a", "b"]

    def test_function_bind(self):
        tree = parse_jsonnet("local f(a, b=2) = a; f(1)")

        bind = tree.binds[0]
        assert isinstance(bind.function, Function)
        assert [p.name for p in bind.function.parameters] == ["a", "b"]
        assert bind.function.parameters[1].default.value == 2.0
        assert bind.children() == [bind.function]

    def test_anonymous_function(self):
        tree = parse_jsonnet("function(x, y,) x")
        assert isinstance(tree, Function)
        assert [p.name for p in tree.parameters] == ["x", "y"]

    def test_keyword_expressions_extend_right(self):
        tree = parse_jsonnet("local x = 1; x + 1 + 2")
        assert isinstance(tree.body, Binary)
        assert isinstance(tree.body.left, Binary)

    def test_conditional(self):
        full = parse_jsonnet("if a then b else c")
        partial = parse_jsonnet("if a then b")
        assert isinstance(full, Conditional) and isinstance(full.branch_false, Var)
        assert partial.branch_false is None

    def test_assert_and_error(self):
        tree = parse_jsonnet("assert x : 'msg'; error 'boom'")
        assert isinstance(tree, Assert)
        assert tree.message.value == "msg"
        assert isinstance(tree.rest, Error)

    def test_import_forms(self):
        tree = parse_jsonnet("[import 'a.libsonnet', importstr 'b.txt', importbin 'c.bin']")
        assert [e.kind for e in tree.elements] == [ImportKind.CODE, ImportKind.STRING, ImportKind.BINARY]
        assert isinstance(tree.elements[0], Import)
        assert tree.elements[0].file.value == "a.libsonnet"

    def test_parens(self):
        assert isinstance(parse_jsonnet("(1)"), Parens)


class TestCallsAndIndexing:
    def test_positional_and_named_arguments(self):
        tree = parse_jsonnet("f(1, b=2,)")
        assert isinstance(tree, Apply)
        assert len(tree.arguments) == 1
        assert [a.name for a in tree.named_arguments] == ["b"]
        assert tree.tailstrict is False

    def test_positional_after_named_is_an_error(self):
        with pytest.raises(JsonnetSyntaxError, match="positional argument after a named"):
            parse_jsonnet("f(b=2, 1)")

    def test_tailstrict(self):
        assert parse_jsonnet("f(1) tailstrict").tailstrict is True

    def test_field_access_is_not_a_var(self):
        tree = parse_jsonnet("a.b")
        assert isinstance(tree, Index)
        assert tree.field_name == "b"
        assert [type(n) for n in walk(tree)] == [Index, Var]

    def test_index(self):
        tree = parse_jsonnet("a[0]")
        assert isinstance(tree.index, NumberLiteral)

    @pytest.mark.parametrize(
        "source, present",
        [
            ("a[1:2]", (True, True, False)),
            ("a[1:]", (True, False, False)),
            ("a[:2]", (False, True, False)),
            ("a[::2]", (False, False, True)),
            ("a[1:2:3]", (True, True, True)),
            ("a[1::3]", (True, False, True)),
        ],
    )
    def test_slices(self, source, present):
        tree = parse_jsonnet(source)
        assert isinstance(tree, Slice)
        assert (tree.begin is not None, tree.end is not None, tree.step is not None) == present

    def test_super_access(self):
        tree = parse_jsonnet("{ a: super.a, b: super['b'] }")
        first, second = (m.body for m in tree.members)
        assert isinstance(first, SuperIndex) and first.field_name == "a"
        assert isinstance(second, SuperIndex) and second.index.value == "b"

    def test_apply_brace(self):
        tree = parse_jsonnet("base { a: 1 }")
        assert isinstance(tree, ApplyBrace)
        assert isinstance(tree.right, Object)


class TestObjects:
    def test_member_kinds(self):
        tree = parse_jsonnet(
            "{ a: 1, b:: 2, c::: 3, d+: 4, m(x): x, local l = 1, "
            "assert true : 'msg', 'q': 5, [k]: 6, }"
        )
        fields = [m for m in tree.members if isinstance(m, ObjectField)]

        assert [f.visibility for f in fields[:3]] == [Visibility.INHERIT, Visibility.HIDDEN, Visibility.VISIBLE]
        assert fields[3].plus_super is True
        assert isinstance(fields[4].method, Function)
        assert [f.name_kind for f in fields[5:]] == [FieldNameKind.STRING, FieldNameKind.EXPR]
        assert isinstance(tree.members[5], ObjectLocal)
        assert tree.members[5].bind.variable == "l"
        assert isinstance(tree.members[6], ObjectAssert)

    def test_field_names_are_not_vars(self):
        tree = parse_jsonnet("{ a: 1 }")
        assert isinstance(tree.members[0].name, StringLiteral)
        assert not any(isinstance(n, Var) for n in walk(tree))

    def test_empty_object(self):
        assert parse_jsonnet("{}").members == []

    def test_object_comprehension(self):
        tree = parse_jsonnet("{ local y = 1, [k]: y for k in ['a'] if k != '' }")
        assert isinstance(tree, ObjectComprehension)
        assert [type(s) for s in tree.specs] == [ForSpec, IfSpec]
        assert tree.specs[0].variable == "k"

    def test_object_comprehension_needs_computed_field(self):
        with pytest.raises(JsonnetSyntaxError, match="computed"):
            parse_jsonnet("{ a: 1 for k in [] }")

    def test_object_comprehension_single_field(self):
        with pytest.raises(JsonnetSyntaxError, match="exactly one field"):
            parse_jsonnet("{ [a]: 1, [b]: 2 for k in [] }")


class TestArrays:
    def test_array_with_trailing_comma(self):
        tree = parse_jsonnet("[1, 2,]")
        assert isinstance(tree, Array)
        assert len(tree.elements) == 2

    def test_array_comprehension(self):
        tree = parse_jsonnet("[x for x in [1, 2] if x > 1 for y in [3]]")
        assert isinstance(tree, ArrayComprehension)
        assert [type(s) for s in tree.specs] == [ForSpec, IfSpec, ForSpec]

    def test_array_comprehension_single_element(self):
        with pytest.raises(JsonnetSyntaxError, match="exactly one element"):
            parse_jsonnet("[1, 2 for x in y]")


# ============================================================================
# Errors
# ============================================================================


class TestSyntaxErrors:
    def test_error_carries_position(self):
        with pytest.raises(JsonnetSyntaxError) as excinfo:
            parse_jsonnet("local x = ; x", file_name="bad.jsonnet")

        error = excinfo.value
        assert (error.line, error.column) == (1, 11)
        assert error.file_name == "bad.jsonnet"
        assert str(error).startswith("bad.jsonnet:1:11: ")

    @pytest.mark.parametrize("source", ["1 +", "{ a: }", "local local = 1; 1", "[1", "'unterminated"])
    def test_invalid_sources(self, source):
        with pytest.raises(JsonnetSyntaxError):
            parse_jsonnet(source)

    @pytest.mark.parametrize(
        "source",
        [
            "local self = 1; self",
            "local super = 1; 1",
            "local in = 1; 1",
            "local f(if) = 1; f(1)",
            "[x for null in [1]]",
            "{ local true = 1, a: 1 }",
            "f(then=1)",
        ],
    )
    def test_reserved_words_are_not_names(self, source):
        with pytest.raises(JsonnetSyntaxError):
            parse_jsonnet(source)

    @pytest.mark.parametrize("name", ["selfish", "index", "nullable", "importer", "iff", "_local"])
    def test_names_starting_with_reserved_words(self, name):
        tree = parse_jsonnet(f"local {name} = 1; {name}")
        assert tree.binds[0].variable == name
        assert tree.body.id == name

    def test_invalid_utf8(self):
        with pytest.raises(JsonnetSyntaxError, match="not valid UTF-8"):
            parse_jsonnet(b"local x = '\xff'; x")

    def test_is_value_error(self):
        assert issubclass(JsonnetSyntaxError, ValueError)
