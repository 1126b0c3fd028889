"""Tests for the BundlerConfig data model."""

from __future__ import annotations

import json

import pytest

from jsonnet_bundler.core.config import BundlerConfig


class TestDefaults:
    def test_default_values(self):
        config = BundlerConfig()

        assert config.version == "1.0"
        assert config.output_dir == "output"
        assert config.separator == "_"
        assert config.add_header is True
        assert config.conflict_strategy == "overwrite"
        assert config.project_root is None
        assert config.log_level == "INFO"

    def test_defaults_validate(self):
        BundlerConfig().validate()


class TestValidation:
    """Each invalid option is reported with a ValueError."""

    @pytest.mark.parametrize(
        "changes, message",
        [
            ({"version": "2.0"}, "Invalid version"),
            ({"name": ""}, "'name'"),
            ({"output_dir": ""}, "'output_dir'"),
            ({"separator": "-"}, "Invalid separator"),
            ({"separator": "a b"}, "Invalid separator"),
            ({"add_header": "yes"}, "'add_header'"),
            ({"conflict_strategy": "ask"}, "Invalid conflict_strategy"),
            ({"project_root": 3}, "'project_root'"),
            ({"log_level": "LOUD"}, "Invalid log_level"),
        ],
    )
    def test_invalid_values(self, changes, message):
        config = BundlerConfig(**changes)
        with pytest.raises(ValueError, match=message):
            config.validate()

    @pytest.mark.parametrize("separator", ["", "_", "__", "x9"])
    def test_identifier_separators_are_accepted(self, separator):
        BundlerConfig(separator=separator).validate()

    def test_log_level_is_case_insensitive(self):
        BundlerConfig(log_level="debug").validate()


class TestSerialization:
    def test_dict_round_trip(self):
        config = BundlerConfig(name="bundle", separator="__", add_header=False, project_root="src")
        assert BundlerConfig.from_dict(config.to_dict()) == config

    def test_from_dict_fills_defaults(self):
        config = BundlerConfig.from_dict({"version": "1.0"})
        assert config == BundlerConfig()

    def test_from_dict_requires_version(self):
        with pytest.raises(KeyError, match="Missing required field"):
            BundlerConfig.from_dict({"name": "x"})

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "configs" / "bundle.json"
        config = BundlerConfig(name="saved", output_dir="dist", conflict_strategy="rename")

        config.save(path)

        assert json.loads(path.read_text(encoding="utf-8"))["output_dir"] == "dist"
        assert BundlerConfig.load(path) == config

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "bundle.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid JSON"):
            BundlerConfig.load(path)

    def test_load_non_object(self, tmp_path):
        path = tmp_path / "bundle.json"
        path.write_text("[]", encoding="utf-8")

        with pytest.raises(ValueError, match="JSON object"):
            BundlerConfig.load(path)

    def test_load_missing_version(self, tmp_path):
        path = tmp_path / "bundle.json"
        path.write_text('{"name": "x"}', encoding="utf-8")

        with pytest.raises(ValueError, match="Missing required field"):
            BundlerConfig.load(path)

    def test_load_validates(self, tmp_path):
        path = tmp_path / "bundle.json"
        path.write_text('{"version": "1.0", "separator": "-"}', encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid separator"):
            BundlerConfig.load(path)

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            BundlerConfig.load(tmp_path / "missing.json")
