"""Configuration module for polyfills-loader.

This module provides the loader configuration model and its YAML parser.
"""

from polyfills_loader.config.parser import (
    EntryType,
    ENTRY_TYPES,
    REGENERATOR_ALWAYS,
    EntrySet,
    PolyfillConfig,
    PolyfillsOptions,
    LoaderConfig,
    parse_config,
    config_from_dict,
)

__all__ = [
    "EntryType",
    "ENTRY_TYPES",
    "REGENERATOR_ALWAYS",
    "EntrySet",
    "PolyfillConfig",
    "PolyfillsOptions",
    "LoaderConfig",
    "parse_config",
    "config_from_dict",
]
