"""Config package with lazy attribute loading to avoid heavy imports during packaging."""

from __future__ import annotations

from importlib import import_module
from typing import Any, Dict, Iterable

__all__ = [
    "CONFIG",
    "LOGGING_CONFIG",
    "DATA_DIR",
    "ENVIRONMENT",
    "IS_PRODUCTION",
    "DEBUG",
    "TIMEZONE",
    "logging_settings",
    "storage_settings",
    "validate_config",
    "ALL_SOURCES",
    "SITEMAP_CATEGORIES",
    "get_sources_by_category",
    "get_source_domain",
    "validate_sources",
    "PROJECT_VERSION",
    "PYTHON_REQUIRES_SPECIFIER",
    "__version__",
]

_MODULE_ATTRS: Dict[str, Iterable[str]] = {
    "config.settings": [
        "CONFIG",
        "LOGGING_CONFIG",
        "DATA_DIR",
        "ENVIRONMENT",
        "IS_PRODUCTION",
        "DEBUG",
        "TIMEZONE",
        "logging_settings",
        "storage_settings",
        "validate_config",
    ],
    "config.sources": [
        "ALL_SOURCES",
        "SITEMAP_CATEGORIES",
        "get_sources_by_category",
        "get_source_domain",
        "validate_sources",
    ],
    "config.version": [
        "PROJECT_VERSION",
        "PYTHON_REQUIRES_SPECIFIER",
        "__version__",
    ],
}

_ATTR_TO_MODULE: Dict[str, str] = {
    attribute: module for module, attributes in _MODULE_ATTRS.items() for attribute in attributes
}


def __getattr__(name: str) -> Any:
    module_name = _ATTR_TO_MODULE.get(name)
    if module_name is None:
        raise AttributeError(f"module 'config' has no attribute {name!r}")
    module = import_module(module_name)
    for attribute in _MODULE_ATTRS[module_name]:
        globals()[attribute] = getattr(module, attribute)
    return globals()[name]


__author__ = "SuperFacts Team"
