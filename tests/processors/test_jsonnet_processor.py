"""Tests for JsonnetProcessor file handling."""

import logging
import os
from pathlib import Path

import pytest

from jsonnet_bundler.processors import JsonnetProcessor, ParseResult
from jsonnet_bundler.processors.jsonnet_ast import Local


@pytest.fixture
def processor():
    return JsonnetProcessor()


@pytest.fixture
def jsonnet_file(tmp_path: Path) -> Path:
    path = tmp_path / "main.jsonnet"
    path.write_bytes('local greeting = "héllo"; greeting\n'.encode("utf-8"))
    return path


class TestParseFile:
    """Reading sources from disk."""

    def test_success_keeps_raw_bytes(self, processor, jsonnet_file):
        result = processor.parse_file(jsonnet_file)

        assert isinstance(result, ParseResult)
        assert result.success
        assert result.errors == []
        assert isinstance(result.ast_node, Local)
        assert result.source == jsonnet_file.read_bytes()
        assert result.file_path == jsonnet_file

    def test_locations_carry_file_name(self, processor, jsonnet_file):
        result = processor.parse_file(str(jsonnet_file))
        assert result.ast_node.binds[0].loc.file_name == str(jsonnet_file)

    def test_missing_file(self, processor, tmp_path):
        result = processor.parse_file(tmp_path / "missing.jsonnet")

        assert not result.success
        assert result.ast_node is None
        assert result.source == b""
        assert "File not found" in result.errors[0]

    def test_file_too_large(self, jsonnet_file):
        result = JsonnetProcessor(max_file_size_mb=0).parse_file(jsonnet_file)

        assert not result.success
        assert "File too large" in result.errors[0]
        assert "Maximum allowed size is 0 MB" in result.errors[0]

    @pytest.mark.skipif(os.name == "nt" or os.geteuid() == 0, reason="permission bits not enforced")
    def test_unreadable_file(self, processor, jsonnet_file):
        os.chmod(jsonnet_file, 0o000)
        try:
            result = processor.parse_file(jsonnet_file)
        finally:
            os.chmod(jsonnet_file, 0o644)

        assert not result.success
        assert "File is not readable" in result.errors[0]

    def test_syntax_error_keeps_source(self, processor, tmp_path):
        path = tmp_path / "broken.jsonnet"
        path.write_bytes(b"local x = ;\n")

        result = processor.parse_file(path)

        assert not result.success
        assert result.source == b"local x = ;\n"
        assert result.errors[0].startswith(f"Syntax error in {path}:1:11: ")


class TestParseSource:
    """Parsing buffers that are already in memory."""

    def test_in_memory_source(self, processor):
        result = processor.parse_source(b"local x = 1; x", "inline.jsonnet")

        assert result.success
        assert result.file_path == Path("inline.jsonnet")

    def test_invalid_utf8(self, processor):
        result = processor.parse_source(b"'\xff'", "bad.jsonnet")

        assert not result.success
        assert "not valid UTF-8" in result.errors[0]

    def test_failure_is_logged(self, processor, caplog):
        with caplog.at_level(logging.ERROR, logger="jsonnet_bundler.processors.jsonnet_processor"):
            processor.parse_source(b"{", "open.jsonnet")

        assert "Syntax error in open.jsonnet" in caplog.text
