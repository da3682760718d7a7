"""
Centralized exception hierarchy for polyfills-loader.

Every error raised while resolving polyfills or generating the loader script
derives from PolyfillsLoaderError, except missing files which raise the
builtin FileNotFoundError.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class PolyfillsLoaderError(Exception):
    """Base exception for all polyfills-loader errors."""

    pass


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigurationError(PolyfillsLoaderError):
    """Invalid or incomplete loader configuration."""

    pass


class PolyfillNotInstalledError(ConfigurationError):
    """Raised when a configured polyfill cannot be found in node_modules."""

    def __init__(self, polyfill_name: str, package: str = ""):
        self.polyfill_name = polyfill_name
        self.package = package or polyfill_name
        super().__init__(
            f"configured to polyfill {polyfill_name}, but no polyfills found. "
            f'Install with "npm i -D {self.package}"'
        )


class TypeNotSupportedError(ConfigurationError):
    """Raised when an entry type has no code generation rule."""

    def __init__(self, entry_type: str):
        self.entry_type = entry_type
        super().__init__(f"Unsupported entry type: {entry_type}")


# ============================================================================
# Generation Exceptions
# ============================================================================


class MinificationError(PolyfillsLoaderError):
    """Raised when the external minifier fails."""

    pass


class TemplateRenderError(PolyfillsLoaderError):
    """Raised when the loader template cannot be loaded or rendered."""

    pass
