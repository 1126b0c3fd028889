"""
Utility modules for path handling and logging.

Examples:
    >>> from jsonnet_bundler.utils import normalize_path, setup_logger
    >>> path = normalize_path("~/configs/main.jsonnet")
    >>> logger = setup_logger("jsonnet_bundler")
"""

from .path_utils import (
    PathLike,
    JSONNET_EXTENSIONS,
    normalize_path,
    ensure_directory,
    get_relative_path,
    is_safe_path,
    is_readable,
    is_writable,
    get_file_extension,
    validate_jsonnet_file,
)

from .logger import (
    setup_logger,
    get_logger,
    set_log_level,
    add_file_handler,
    add_console_handler,
    get_log_directory,
    VALID_LOG_LEVELS,
)

__all__ = [
    # Path utilities
    "PathLike",
    "JSONNET_EXTENSIONS",
    "normalize_path",
    "ensure_directory",
    "get_relative_path",
    "is_safe_path",
    "is_readable",
    "is_writable",
    "get_file_extension",
    "validate_jsonnet_file",
    # Logger
    "setup_logger",
    "get_logger",
    "set_log_level",
    "add_file_handler",
    "add_console_handler",
    "get_log_directory",
    "VALID_LOG_LEVELS",
]
