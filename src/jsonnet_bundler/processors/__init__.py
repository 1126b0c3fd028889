"""Public API for the Jsonnet parser and processor with lazy imports.

Importing the parser compiles the lark grammar, so nothing is loaded until
one of the exports is first accessed.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORT_MAP: dict[str, tuple[str, str]] = {
    "JsonnetProcessor": (
        "jsonnet_bundler.processors.jsonnet_processor",
        "JsonnetProcessor",
    ),
    "ParseResult": (
        "jsonnet_bundler.processors.jsonnet_processor",
        "ParseResult",
    ),
    "parse_jsonnet": (
        "jsonnet_bundler.processors.jsonnet_parser",
        "parse_jsonnet",
    ),
    "JsonnetSyntaxError": (
        "jsonnet_bundler.processors.jsonnet_parser",
        "JsonnetSyntaxError",
    ),
}

__all__ = list(_EXPORT_MAP.keys())


def __getattr__(name: str) -> Any:
    """Resolve package exports lazily."""
    target = _EXPORT_MAP.get(name)
    if target is None:
        raise AttributeError(f"module 'jsonnet_bundler.processors' has no attribute {name!r}")

    module_name, attr_name = target
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value
