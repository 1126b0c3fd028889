"""Configuration data model for bundling runs.

This module defines the ``BundlerConfig`` dataclass. A configuration can be
built in code, read from a JSON file, or assembled by the command line
front end; in every case ``validate()`` is the single place where values
are checked.

Example:
    Loading and adjusting a stored configuration:

    >>> config = BundlerConfig.load("bundle.json")
    >>> config.separator = "__"
    >>> config.validate()

    Converting to dictionary for JSON serialization:

    >>> config_dict = config.to_dict()
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from jsonnet_bundler.utils.logger import VALID_LOG_LEVELS, get_logger
from jsonnet_bundler.utils.path_utils import PathLike

logger = get_logger("jsonnet_bundler.core.config")

CONFIG_VERSION = "1.0"

# Valid conflict strategy names, see output_writer.ConflictStrategy
VALID_CONFLICT_STRATEGIES = {"overwrite", "skip", "rename"}

_SEPARATOR_RE = re.compile(r"[_a-zA-Z0-9]*")


@dataclass
class BundlerConfig:
    """Bundling configuration profile.

    Attributes:
        name: Profile name
        version: Schema version (currently "1.0")
        output_dir: Directory rewritten files are written to
        separator: Text placed between the file prefix and the original name
        add_header: Whether to prepend the provenance comment line
        conflict_strategy: "overwrite" | "skip" | "rename" for existing outputs
        project_root: Optional root; file identities and output layout are
            taken relative to it
        log_level: Logging level name
    """

    name: str = "default"
    version: str = CONFIG_VERSION
    output_dir: str = "output"
    separator: str = "_"
    add_header: bool = True
    conflict_strategy: str = "overwrite"
    project_root: Optional[str] = None
    log_level: str = "INFO"

    def validate(self) -> None:
        """Validate the configuration.

        Raises:
            ValueError: If any validation check fails
        """
        if self.version != CONFIG_VERSION:
            raise ValueError(f"Invalid version: {self.version}. Expected '{CONFIG_VERSION}'")

        if not isinstance(self.name, str) or not self.name:
            raise ValueError("Option 'name' must be a non-empty string")

        if not isinstance(self.output_dir, str) or not self.output_dir:
            raise ValueError("Option 'output_dir' must be a non-empty string")

        if not isinstance(self.separator, str):
            raise ValueError("Option 'separator' must be a string")
        if not _SEPARATOR_RE.fullmatch(self.separator):
            raise ValueError(
                f"Invalid separator: {self.separator!r}. "
                "Only letters, digits and underscores are allowed"
            )

        if not isinstance(self.add_header, bool):
            raise ValueError("Option 'add_header' must be a boolean")

        if self.conflict_strategy not in VALID_CONFLICT_STRATEGIES:
            raise ValueError(
                f"Invalid conflict_strategy: {self.conflict_strategy}. "
                f"Expected one of {sorted(VALID_CONFLICT_STRATEGIES)}"
            )

        if self.project_root is not None and not isinstance(self.project_root, str):
            raise ValueError("Option 'project_root' must be a string or None")

        if not isinstance(self.log_level, str) or self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log_level: {self.log_level}. "
                f"Expected one of {VALID_LOG_LEVELS}"
            )

        logger.debug(f"Configuration '{self.name}' validated successfully")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for JSON serialization.

        Example:
            >>> BundlerConfig(name="Test").to_dict()["separator"]
            '_'
        """
        return {
            "version": self.version,
            "name": self.name,
            "output_dir": self.output_dir,
            "separator": self.separator,
            "add_header": self.add_header,
            "conflict_strategy": self.conflict_strategy,
            "project_root": self.project_root,
            "log_level": self.log_level,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> BundlerConfig:
        """Create configuration from dictionary.

        Missing keys take their defaults; ``version`` is required.

        Raises:
            KeyError: If required fields are missing
        """
        try:
            config = cls(
                version=data["version"],
                name=data.get("name", "default"),
                output_dir=data.get("output_dir", "output"),
                separator=data.get("separator", "_"),
                add_header=data.get("add_header", True),
                conflict_strategy=data.get("conflict_strategy", "overwrite"),
                project_root=data.get("project_root"),
                log_level=data.get("log_level", "INFO"),
            )
        except KeyError as e:
            raise KeyError(f"Missing required field in configuration: {e}") from e

        logger.debug(f"Created configuration from dictionary: {config.name}")
        return config

    @classmethod
    def load(cls, path: PathLike) -> BundlerConfig:
        """Read and validate a configuration from a JSON file.

        Raises:
            OSError: If the file cannot be read
            ValueError: If the file is not valid JSON or fails validation
        """
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {path} must contain a JSON object")

        try:
            config = cls.from_dict(data)
        except KeyError as e:
            raise ValueError(str(e)) from e
        config.validate()
        logger.info(f"Loaded configuration '{config.name}' from {path}")
        return config

    def save(self, path: PathLike) -> None:
        """Validate and write the configuration as JSON."""
        self.validate()
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2) + "\n", encoding="utf-8")
        logger.info(f"Saved configuration '{self.name}' to {path}")
