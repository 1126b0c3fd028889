"""Shared fixtures for renaming and bundling tests."""

from __future__ import annotations

import textwrap
from datetime import datetime, timezone
from pathlib import Path

import pytest

from jsonnet_bundler.core.config import BundlerConfig
from jsonnet_bundler.core.orchestrator import BundleOrchestrator
from jsonnet_bundler.core.renamer import RenameResult, rename_locals
from jsonnet_bundler.processors.jsonnet_parser import parse_jsonnet

FIXED_TIME = datetime(2024, 5, 1, 12, 30, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------

def create_test_file(directory: Path, name: str, content: str = "local x = 1; x\n") -> Path:
    """Create a test file with the given name and content."""
    file_path = directory / name
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(textwrap.dedent(content), encoding="utf-8")
    return file_path


def rename(source: str, identity: str = "test.jsonnet", separator: str = "_") -> RenameResult:
    """Parse and rename ``source`` in one step."""
    data = source.encode("utf-8")
    return rename_locals(parse_jsonnet(data, identity), data, identity, separator)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A small project with two files that both use ``x``."""
    src = tmp_path / "src"
    create_test_file(src, "main.jsonnet", """\
        local util = import 'lib/util.libsonnet';
        local x = 1;
        { value: x + util.x }
    """)
    create_test_file(src, "lib/util.libsonnet", """\
        local x = 2;
        { x: x }
    """)
    return src


@pytest.fixture
def bundler_config(tmp_path: Path) -> BundlerConfig:
    return BundlerConfig(name="test", output_dir=str(tmp_path / "out"))


@pytest.fixture
def orchestrator(bundler_config: BundlerConfig) -> BundleOrchestrator:
    return BundleOrchestrator(bundler_config, clock=lambda: FIXED_TIME)
