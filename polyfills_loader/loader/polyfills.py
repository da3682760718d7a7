"""
Polyfill resolution.

Turns the polyfill options of a loader configuration into an ordered list of
PolyfillDescriptor objects holding the code to serve and the feature test
guarding each polyfill. The order of the list is the order in which the
generated loader attempts to load the polyfills.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from polyfills_loader.config.parser import (
    REGENERATOR_ALWAYS,
    EntryType,
    LoaderConfig,
    PolyfillConfig,
)
from polyfills_loader.core.exceptions import (
    ConfigurationError,
    PolyfillNotInstalledError,
)
from polyfills_loader.core.filesystem import read_text_file
from polyfills_loader.core.hashing import compute_content_hash
from polyfills_loader.core.interfaces import Minifier

logger = logging.getLogger(__name__)

NO_MODULE_TEST = "!('noModule' in HTMLScriptElement.prototype)"
MODULE_TEST = "'noModule' in HTMLScriptElement.prototype"

# Dynamic import is syntax, so it can only be detected by compiling a function
# that uses it. A syntax error there would otherwise abort the whole loader.
DYNAMIC_IMPORT_TEST = (
    "'noModule' in HTMLScriptElement.prototype && (function () { try { "
    "Function('window.importShim = s => import(s);').call(); return true; } "
    "catch (_) { return false } })()"
)

FETCH_TEST = "!('fetch' in window)"

INTERSECTION_OBSERVER_TEST = (
    "!('IntersectionObserver' in window && 'IntersectionObserverEntry' in window "
    "&& 'intersectionRatio' in window.IntersectionObserverEntry.prototype)"
)

WEBCOMPONENTS_TEST = (
    "!('attachShadow' in Element.prototype) || !('getRootNode' in Element.prototype)"
)

# Browsers with native custom elements but without nomodule (Safari 10.1)
# need the ES5 adapter
CUSTOM_ELEMENTS_ES5_ADAPTER_TEST = (
    "!('noModule' in HTMLScriptElement.prototype) && 'getRootNode' in Element.prototype"
)

BUNDLED_DIR = Path(__file__).parent


@dataclass
class PolyfillDescriptor:
    """A resolved polyfill, ready to be referenced by the loader."""

    name: str
    code: str
    test: Optional[str] = None
    sourcemap: Optional[str] = None
    hash: Optional[str] = None
    module: bool = False

    @property
    def filename(self) -> str:
        """File name the loader requests, versioned by hash when present."""
        if self.hash:
            return f"{self.name}.{self.hash}.js"
        return f"{self.name}.js"


class NodeModulesResolver:
    """
    Locate files of installed npm packages.

    Mirrors node's lookup: <dir>/node_modules/<specifier> is tried for the
    root directory and each of its parents.
    """

    def __init__(self, root_dir: Optional[Union[str, Path]] = None):
        self.root_dir = Path(root_dir).resolve() if root_dir else Path.cwd()

    def find(self, specifier: str) -> Optional[Path]:
        """
        Find the file for a package specifier such as 'whatwg-fetch/dist/fetch.umd.js'.

        Returns:
            Path to the file, or None if no node_modules directory has it
        """
        candidates = [specifier]
        if not specifier.endswith(".js") and not specifier.endswith(".map"):
            candidates.append(f"{specifier}.js")

        for directory in [self.root_dir, *self.root_dir.parents]:
            node_modules = directory / "node_modules"
            if not node_modules.is_dir():
                continue
            for candidate in candidates:
                path = node_modules / candidate
                if path.is_file():
                    return path

        return None

    def resolve(self, specifier: str, polyfill_name: str, package: str) -> Path:
        """
        Resolve a specifier for a configured polyfill.

        Raises:
            PolyfillNotInstalledError: If the package file is not installed
        """
        path = self.find(specifier)
        if path is None:
            raise PolyfillNotInstalledError(polyfill_name, package)
        logger.debug(f"Resolved {specifier} to {path}")
        return path


Resolve = Callable[[str, str, str], Path]


def _core_js(config: LoaderConfig, resolve: Resolve) -> List[PolyfillConfig]:
    if not config.polyfills.core_js:
        return []
    return [
        PolyfillConfig(
            name="core-js",
            test=NO_MODULE_TEST,
            path=resolve("core-js-bundle/minified.js", "core-js", "core-js-bundle"),
            sourcemap_path=resolve(
                "core-js-bundle/minified.js.map", "core-js", "core-js-bundle"
            ),
            package="core-js-bundle",
        )
    ]


def _regenerator_runtime(
    config: LoaderConfig, resolve: Resolve
) -> List[PolyfillConfig]:
    option = config.polyfills.regenerator_runtime
    if not option:
        return []
    return [
        PolyfillConfig(
            name="regenerator-runtime",
            test=None if option == REGENERATOR_ALWAYS else NO_MODULE_TEST,
            path=resolve(
                "regenerator-runtime/runtime.js",
                "regenerator-runtime",
                "regenerator-runtime",
            ),
            package="regenerator-runtime",
        )
    ]


def _fetch(config: LoaderConfig, resolve: Resolve) -> List[PolyfillConfig]:
    if not config.polyfills.fetch:
        return []
    return [
        PolyfillConfig(
            name="fetch",
            test=FETCH_TEST,
            path=resolve("whatwg-fetch/dist/fetch.umd.js", "fetch", "whatwg-fetch"),
            package="whatwg-fetch",
        )
    ]


def _systemjs(config: LoaderConfig, resolve: Resolve) -> List[PolyfillConfig]:
    """SystemJS is needed when either entry set is loaded through it."""
    entry_types = [config.entries.type]
    if config.legacy_entries:
        entry_types.append(config.legacy_entries.type)
    if EntryType.SYSTEMJS.value not in entry_types:
        return []

    # Modern systemjs entries need it everywhere, legacy ones only without nomodule
    modern = config.entries.type == EntryType.SYSTEMJS.value
    test = None if modern else NO_MODULE_TEST

    # The extended build includes the import maps polyfill
    bundle = "system.min.js" if config.polyfills.system_js_extended else "s.min.js"
    return [
        PolyfillConfig(
            name="systemjs",
            test=test,
            path=resolve(f"systemjs/dist/{bundle}", "systemjs", "systemjs"),
            sourcemap_path=resolve(
                f"systemjs/dist/{bundle}.map", "systemjs", "systemjs"
            ),
            package="systemjs",
        )
    ]


def _dynamic_import(config: LoaderConfig, resolve: Resolve) -> List[PolyfillConfig]:
    if not config.polyfills.dynamic_import:
        return []
    return [
        PolyfillConfig(
            name="dynamic-import",
            test=DYNAMIC_IMPORT_TEST,
            path=BUNDLED_DIR / "dynamic-import-polyfill.js",
        )
    ]


def _es_module_shims(config: LoaderConfig, resolve: Resolve) -> List[PolyfillConfig]:
    if not config.polyfills.es_module_shims:
        return []
    return [
        PolyfillConfig(
            name="es-module-shims",
            test=MODULE_TEST,
            path=resolve(
                "es-module-shims/dist/es-module-shims.min.js",
                "es-module-shims",
                "es-module-shims",
            ),
            sourcemap_path=resolve(
                "es-module-shims/dist/es-module-shims.min.js.map",
                "es-module-shims",
                "es-module-shims",
            ),
            module=True,
            package="es-module-shims",
        )
    ]


def _intersection_observer(
    config: LoaderConfig, resolve: Resolve
) -> List[PolyfillConfig]:
    if not config.polyfills.intersection_observer:
        return []
    return [
        PolyfillConfig(
            name="intersection-observer",
            test=INTERSECTION_OBSERVER_TEST,
            path=resolve(
                "intersection-observer/intersection-observer.js",
                "intersection-observer",
                "intersection-observer",
            ),
            package="intersection-observer",
        )
    ]


def _webcomponents(config: LoaderConfig, resolve: Resolve) -> List[PolyfillConfig]:
    if not config.polyfills.webcomponents:
        return []
    package = "@webcomponents/webcomponentsjs"
    return [
        PolyfillConfig(
            name="webcomponents",
            test=WEBCOMPONENTS_TEST,
            path=resolve(f"{package}/webcomponents-bundle.js", "webcomponents", package),
            sourcemap_path=resolve(
                f"{package}/webcomponents-bundle.js.map", "webcomponents", package
            ),
            package=package,
        ),
        PolyfillConfig(
            name="custom-elements-es5-adapter",
            test=CUSTOM_ELEMENTS_ES5_ADAPTER_TEST,
            path=resolve(
                f"{package}/custom-elements-es5-adapter.js",
                "custom-elements-es5-adapter",
                package,
            ),
            package=package,
        ),
    ]


PolyfillFactory = Callable[[LoaderConfig, Resolve], List[PolyfillConfig]]

# Applied in order after the custom polyfills
POLYFILL_FACTORIES: Tuple[PolyfillFactory, ...] = (
    _core_js,
    _regenerator_runtime,
    _fetch,
    _systemjs,
    _dynamic_import,
    _es_module_shims,
    _intersection_observer,
    _webcomponents,
)


def collect_polyfill_configs(
    config: LoaderConfig, resolver: Optional[NodeModulesResolver] = None
) -> List[PolyfillConfig]:
    """
    Collect the polyfill configs requested by a loader configuration.

    Args:
        config: Loader configuration
        resolver: Locator for npm packages (default: searches from config.root_dir)

    Returns:
        Polyfill configs in load order: custom ones first, then built-ins

    Raises:
        PolyfillNotInstalledError: If a requested built-in polyfill is not installed
    """
    if resolver is None:
        resolver = NodeModulesResolver(config.root_dir)

    polyfill_configs = list(config.polyfills.custom)
    for factory in POLYFILL_FACTORIES:
        polyfill_configs.extend(factory(config, resolver.resolve))

    return polyfill_configs


def create_polyfills_data(
    config: LoaderConfig,
    resolver: Optional[NodeModulesResolver] = None,
    minifier: Optional[Minifier] = None,
) -> List[PolyfillDescriptor]:
    """
    Resolve the polyfills requested by a loader configuration.

    Args:
        config: Loader configuration
        resolver: Locator for npm packages (default: searches from config.root_dir)
        minifier: Minifier used when polyfills.minify is set (default: terser)

    Returns:
        Polyfill descriptors in load order

    Raises:
        ConfigurationError: If a polyfill lacks a name or path, or is not installed
        FileNotFoundError: If a polyfill or source map file cannot be read
        MinificationError: If minifying a polyfill fails
    """
    options = config.polyfills
    polyfill_configs = collect_polyfill_configs(config, resolver)

    if options.minify and minifier is None:
        from polyfills_loader.core.minifier import TerserMinifier

        minifier = TerserMinifier(root_dir=config.root_dir)

    descriptors = [
        _create_descriptor(polyfill_config, config, minifier)
        for polyfill_config in polyfill_configs
    ]

    logger.info(
        f"Resolved {len(descriptors)} polyfill(s): "
        f"{', '.join(d.name for d in descriptors) or 'none'}"
    )
    return descriptors


def _create_descriptor(
    polyfill_config: PolyfillConfig,
    config: LoaderConfig,
    minifier: Optional[Minifier],
) -> PolyfillDescriptor:
    """Load, minify and hash a single polyfill."""
    if not polyfill_config.name or not polyfill_config.path:
        label = polyfill_config.name or polyfill_config.path or "<unnamed>"
        message = f"Polyfill {label} should have a name and a path property"
        if polyfill_config.package:
            message += f'. Install with "npm i -D {polyfill_config.package}"'
        raise ConfigurationError(message)

    name = polyfill_config.name
    code = read_text_file(polyfill_config.path, config.root_dir)
    sourcemap = None

    if polyfill_config.sourcemap_path:
        sourcemap = read_text_file(polyfill_config.sourcemap_path, config.root_dir)
        logger.debug(f"Polyfill {name} ships a source map, not minifying")
    elif config.polyfills.minify:
        result = minifier.minify(code, source_map=True)
        code, sourcemap = result.code, result.map
        logger.debug(f"Minified polyfill {name}")

    content_hash = None
    if config.polyfills.hash:
        content_hash = compute_content_hash(code)
        logger.debug(f"Polyfill {name} hash: {content_hash}")

    return PolyfillDescriptor(
        name=name,
        code=code,
        test=polyfill_config.test,
        sourcemap=sourcemap,
        hash=content_hash,
        module=polyfill_config.module,
    )
