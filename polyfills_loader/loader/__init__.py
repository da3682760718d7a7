"""
Polyfill resolution and loader script generation.
"""

from .polyfills import (
    NO_MODULE_TEST,
    MODULE_TEST,
    PolyfillDescriptor,
    NodeModulesResolver,
    collect_polyfill_configs,
    create_polyfills_data,
)
from .generator import (
    ENTRY_LOADERS,
    LoaderCodeGenerator,
    clean_import_path,
    js_string,
)

__all__ = [
    "NO_MODULE_TEST",
    "MODULE_TEST",
    "PolyfillDescriptor",
    "NodeModulesResolver",
    "collect_polyfill_configs",
    "create_polyfills_data",
    "ENTRY_LOADERS",
    "LoaderCodeGenerator",
    "clean_import_path",
    "js_string",
]
