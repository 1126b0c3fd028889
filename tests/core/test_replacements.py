"""Tests for replacement application."""

import pytest

from jsonnet_bundler.core.replacements import Replacement, apply_replacements


class TestReplacement:
    def test_begin_after_end_is_rejected(self):
        with pytest.raises(ValueError, match="begins after it ends"):
            Replacement(5, 4, "x")

    def test_empty_range_is_allowed(self):
        assert Replacement(3, 3, "x").begin_offset == 3


class TestApplyReplacements:
    def test_no_replacements_returns_source(self):
        assert apply_replacements(b"local x = 1; x", []) == b"local x = 1; x"

    def test_order_of_input_does_not_matter(self):
        source = b"local x = 1; x + 2"
        reps = [Replacement(6, 7, "_p_x"), Replacement(13, 14, "_p_x")]

        forward = apply_replacements(source, reps)
        backward = apply_replacements(source, list(reversed(reps)))

        assert forward == backward == b"local _p_x = 1; _p_x + 2"

    def test_source_is_not_modified(self):
        source = b"local x = 1; x"
        apply_replacements(source, [Replacement(6, 7, "y")])
        assert source == b"local x = 1; x"

    def test_replacement_at_buffer_edges(self):
        assert apply_replacements(b"ab", [Replacement(0, 1, "X"), Replacement(1, 2, "Y")]) == b"XY"

    def test_new_value_is_utf8_encoded(self):
        assert apply_replacements(b"x", [Replacement(0, 1, "é")]) == "é".encode("utf-8")

    def test_overlapping_replacements_fail_assertion(self):
        with pytest.raises(AssertionError, match="overlapping"):
            apply_replacements(b"abcdef", [Replacement(0, 3, "x"), Replacement(2, 4, "y")])
