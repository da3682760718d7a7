"""Configuration model and YAML parser for polyfills-loader.

This module defines the loader configuration dataclasses and parses them from
YAML files or plain mappings. Keys may be written in snake_case or in the
camelCase used by JavaScript tooling (legacyEntries, coreJs, sourcemapPath).
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml

from polyfills_loader.core.exceptions import ConfigurationError, TypeNotSupportedError


class EntryType(str, Enum):
    """Mechanisms available for loading application entries."""

    SCRIPT = "script"
    MODULE = "module"
    MODULE_SHIM = "module-shim"
    SYSTEMJS = "systemjs"


ENTRY_TYPES = [t.value for t in EntryType]

# Literal value of regenerator_runtime that disables the no-module guard
REGENERATOR_ALWAYS = "always"


@dataclass
class EntrySet:
    """Ordered application files loaded with one mechanism."""

    type: str  # 'script', 'module', 'module-shim', 'systemjs'
    files: List[str] = field(default_factory=list)


@dataclass
class PolyfillConfig:
    """A polyfill before its code is loaded."""

    name: Optional[str] = None
    path: Optional[Union[str, Path]] = None
    test: Optional[str] = None  # expression which should evaluate to true to load
    module: bool = False  # load with type="module"
    sourcemap_path: Optional[Union[str, Path]] = None
    package: Optional[str] = None  # npm package providing the polyfill


@dataclass
class PolyfillsOptions:
    """Which polyfills to include and how to process them."""

    core_js: bool = False
    regenerator_runtime: Union[bool, str] = False  # True or 'always'
    fetch: bool = False
    webcomponents: bool = False
    intersection_observer: bool = False
    dynamic_import: bool = False
    es_module_shims: bool = False
    system_js_extended: bool = False
    custom: List[PolyfillConfig] = field(default_factory=list)
    minify: bool = False
    hash: bool = False


@dataclass
class LoaderConfig:
    """Complete loader configuration."""

    entries: EntrySet
    legacy_entries: Optional[EntrySet] = None
    polyfills: PolyfillsOptions = field(default_factory=PolyfillsOptions)
    root_dir: Optional[Path] = None  # where the node_modules search starts


_BOOLEAN_OPTIONS = [
    "core_js",
    "fetch",
    "webcomponents",
    "intersection_observer",
    "dynamic_import",
    "es_module_shims",
    "system_js_extended",
    "minify",
    "hash",
]


def parse_config(config_path: Path) -> LoaderConfig:
    """
    Parse a YAML loader configuration file.

    Args:
        config_path: Path to the YAML file

    Returns:
        Parsed and validated configuration

    Raises:
        ConfigurationError: If configuration is invalid
        TypeNotSupportedError: If an entry type is unknown
    """
    config_path = Path(config_path)
    if not config_path.is_file():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML syntax: {e}") from e
    except OSError as e:
        raise ConfigurationError(
            f"Could not read configuration file {config_path}: {e}"
        ) from e

    if data is None:
        raise ConfigurationError("Configuration file is empty")

    config = config_from_dict(data)

    # Relative root_dir is anchored to the config file location
    if config.root_dir is None:
        config.root_dir = config_path.parent.resolve()
    elif not config.root_dir.is_absolute():
        config.root_dir = (config_path.parent / config.root_dir).resolve()

    return config


def config_from_dict(data: Mapping[str, Any]) -> LoaderConfig:
    """
    Build a loader configuration from a plain mapping.

    Args:
        data: Mapping with 'entries' and optional 'legacy_entries',
              'polyfills' and 'root_dir' keys

    Returns:
        Parsed and validated configuration

    Raises:
        ConfigurationError: If configuration is invalid
        TypeNotSupportedError: If an entry type is unknown
    """
    data = _normalize_keys(data, "configuration")

    if "entries" not in data:
        raise ConfigurationError("Missing required field: entries")

    entries = _parse_entries(data["entries"], "entries")

    legacy_entries = None
    if data.get("legacy_entries") is not None:
        legacy_entries = _parse_entries(data["legacy_entries"], "legacy_entries")

    polyfills = _parse_polyfills(data.get("polyfills") or {})

    root_dir = data.get("root_dir")

    return LoaderConfig(
        entries=entries,
        legacy_entries=legacy_entries,
        polyfills=polyfills,
        root_dir=Path(root_dir) if root_dir else None,
    )


def _snake_case(key: str) -> str:
    """Convert camelCase keys to snake_case."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def _normalize_keys(data: Any, where: str) -> Dict[str, Any]:
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"{where} must be a mapping")
    return {_snake_case(str(key)): value for key, value in data.items()}


def _parse_entries(data: Any, where: str) -> EntrySet:
    """Parse an entry set."""
    data = _normalize_keys(data, where)

    for field_name in ["type", "files"]:
        if field_name not in data:
            raise ConfigurationError(f"{where} missing required field: {field_name}")

    if data["type"] not in ENTRY_TYPES:
        raise TypeNotSupportedError(data["type"])

    files = data["files"]
    if isinstance(files, str) or not isinstance(files, list):
        raise ConfigurationError(f"{where}.files must be a list of paths")
    if not all(isinstance(f, str) for f in files):
        raise ConfigurationError(f"{where}.files must only contain strings")

    return EntrySet(type=data["type"], files=list(files))


def _parse_polyfills(data: Any) -> PolyfillsOptions:
    """Parse polyfill options."""
    data = _normalize_keys(data, "polyfills")

    known = set(_BOOLEAN_OPTIONS) | {"regenerator_runtime", "custom"}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(f"Unknown polyfills option(s): {', '.join(unknown)}")

    options = {}
    for name in _BOOLEAN_OPTIONS:
        value = data.get(name, False)
        if not isinstance(value, bool):
            raise ConfigurationError(f"polyfills.{name} must be true or false")
        options[name] = value

    regenerator_runtime = data.get("regenerator_runtime", False)
    if not isinstance(regenerator_runtime, bool) and (
        regenerator_runtime != REGENERATOR_ALWAYS
    ):
        raise ConfigurationError(
            f"Invalid polyfills.regenerator_runtime: {regenerator_runtime} "
            f"(expected true, false or '{REGENERATOR_ALWAYS}')"
        )

    custom_data = data.get("custom") or []
    if not isinstance(custom_data, list):
        raise ConfigurationError("polyfills.custom must be a list")

    return PolyfillsOptions(
        regenerator_runtime=regenerator_runtime,
        custom=[
            _parse_custom_polyfill(item, i) for i, item in enumerate(custom_data)
        ],
        **options,
    )


def _parse_custom_polyfill(data: Any, index: int) -> PolyfillConfig:
    """
    Parse a user supplied polyfill.

    Missing name or path is reported when the polyfill is resolved, so the
    error can name the offending polyfill.
    """
    data = _normalize_keys(data, f"polyfills.custom[{index}]")
    where = f"polyfills.custom[{index}]"

    test = data.get("test")
    if test is not None and not isinstance(test, str):
        raise ConfigurationError(f"{where}.test must be a string expression")

    module = data.get("module", False)
    if not isinstance(module, bool):
        raise ConfigurationError(f"{where}.module must be a boolean")

    return PolyfillConfig(
        name=data.get("name"),
        path=data.get("path"),
        test=test,
        module=module,
        sourcemap_path=data.get("sourcemap_path"),
        package=data.get("package"),
    )
