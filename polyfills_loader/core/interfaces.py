"""
Core interfaces for polyfills-loader.

The resolver and the code generator depend on a minifier only through the
interface defined here, so the external tool can be swapped or faked.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class MinifyResult:
    """Output of a minifier run."""

    code: str
    map: Optional[str] = None


class Minifier(ABC):
    """
    Abstract interface for JavaScript minifiers.
    """

    @abstractmethod
    def minify(self, code: str, source_map: bool = False) -> MinifyResult:
        """
        Minify JavaScript source code.

        Args:
            code: JavaScript source
            source_map: Whether to generate a source map as well

        Returns:
            MinifyResult with the minified code, and the source map when requested

        Raises:
            MinificationError: If the code cannot be minified
        """
        pass


__all__ = ["MinifyResult", "Minifier"]
