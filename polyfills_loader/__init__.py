"""
polyfills-loader: generate a script that loads polyfills behind feature tests
and then loads modern or legacy application entries.
"""

from polyfills_loader.config import (
    EntryType,
    EntrySet,
    PolyfillConfig,
    PolyfillsOptions,
    LoaderConfig,
    parse_config,
    config_from_dict,
)
from polyfills_loader.core import (
    PolyfillsLoaderError,
    ConfigurationError,
    PolyfillNotInstalledError,
    TypeNotSupportedError,
    MinificationError,
    TemplateRenderError,
    Minifier,
    MinifyResult,
    TerserMinifier,
)
from polyfills_loader.loader import (
    PolyfillDescriptor,
    NodeModulesResolver,
    LoaderCodeGenerator,
    create_polyfills_data,
)
from polyfills_loader.loader.api import LoaderResult, create_polyfills_loader

__version__ = "0.1.0"

__all__ = [
    "EntryType",
    "EntrySet",
    "PolyfillConfig",
    "PolyfillsOptions",
    "LoaderConfig",
    "parse_config",
    "config_from_dict",
    "PolyfillsLoaderError",
    "ConfigurationError",
    "PolyfillNotInstalledError",
    "TypeNotSupportedError",
    "MinificationError",
    "TemplateRenderError",
    "Minifier",
    "MinifyResult",
    "TerserMinifier",
    "PolyfillDescriptor",
    "NodeModulesResolver",
    "LoaderCodeGenerator",
    "create_polyfills_data",
    "LoaderResult",
    "create_polyfills_loader",
]
