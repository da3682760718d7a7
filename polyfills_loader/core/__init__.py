"""
Core functionality for polyfills-loader.

This package contains the foundational modules that the loader depends on.
"""

from .exceptions import (
    PolyfillsLoaderError,
    ConfigurationError,
    PolyfillNotInstalledError,
    TypeNotSupportedError,
    MinificationError,
    TemplateRenderError,
)

from .filesystem import (
    normalize_path,
    read_text_file,
    find_executable,
    temporary_directory,
)

from .hashing import (
    DEFAULT_HASH_ALGORITHM,
    compute_content_hash,
)

from .interfaces import (
    Minifier,
    MinifyResult,
)

from .minifier import (
    TerserMinifier,
)

__all__ = [
    "PolyfillsLoaderError",
    "ConfigurationError",
    "PolyfillNotInstalledError",
    "TypeNotSupportedError",
    "MinificationError",
    "TemplateRenderError",
    "normalize_path",
    "read_text_file",
    "find_executable",
    "temporary_directory",
    "DEFAULT_HASH_ALGORITHM",
    "compute_content_hash",
    "Minifier",
    "MinifyResult",
    "TerserMinifier",
]
