"""
High level entry point: resolve polyfills and generate the loader in one call.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from polyfills_loader.config.parser import LoaderConfig
from polyfills_loader.core.interfaces import Minifier
from polyfills_loader.loader.generator import POLYFILLS_DIR, LoaderCodeGenerator
from polyfills_loader.loader.polyfills import (
    NodeModulesResolver,
    PolyfillDescriptor,
    create_polyfills_data,
)

logger = logging.getLogger(__name__)


@dataclass
class LoaderResult:
    """Generated loader script and the polyfills it references."""

    code: str
    polyfills: List[PolyfillDescriptor] = field(default_factory=list)

    @property
    def polyfill_files(self) -> List[Tuple[str, str]]:
        """
        Files the loader expects next to it, as (relative path, content) pairs.

        Source maps are listed as <file>.map after their polyfill.
        """
        files = []
        for polyfill in self.polyfills:
            path = f"{POLYFILLS_DIR}/{polyfill.filename}"
            files.append((path, polyfill.code))
            if polyfill.sourcemap:
                files.append((f"{path}.map", polyfill.sourcemap))
        return files


def create_polyfills_loader(
    config: LoaderConfig,
    minifier: Optional[Minifier] = None,
    resolver: Optional[NodeModulesResolver] = None,
    template_dir: Optional[Path] = None,
) -> LoaderResult:
    """
    Create a loader script that executes immediately.

    Args:
        config: Loader configuration
        minifier: Minifier for polyfills and the loader (default: terser)
        resolver: Locator for npm packages (default: searches from config.root_dir)
        template_dir: Directory with a custom loader.js.j2

    Returns:
        LoaderResult with the script and the resolved polyfills

    Raises:
        PolyfillsLoaderError: If the configuration cannot be turned into a loader
        FileNotFoundError: If a polyfill or source map file cannot be read

    Example:
        >>> config = config_from_dict({"entries": {"type": "module", "files": ["app.js"]}})
        >>> print(create_polyfills_loader(config).code)
    """
    generator = LoaderCodeGenerator(template_dir=template_dir, minifier=minifier)
    generator.validate(config)

    polyfills = create_polyfills_data(config, resolver=resolver, minifier=minifier)
    code = generator.generate(config, polyfills)

    return LoaderResult(code=code, polyfills=polyfills)
