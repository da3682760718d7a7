"""
Loader script generator.

Renders the bootstrap script that loads polyfills behind feature tests and
then loads the application entries, choosing between modern and legacy
entries at run time.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from polyfills_loader.config.parser import EntrySet, EntryType, LoaderConfig
from polyfills_loader.core.exceptions import (
    ConfigurationError,
    TemplateRenderError,
    TypeNotSupportedError,
)
from polyfills_loader.core.interfaces import Minifier
from polyfills_loader.loader.polyfills import MODULE_TEST, PolyfillDescriptor

logger = logging.getLogger(__name__)

LOADER_TEMPLATE = "loader.js.j2"
POLYFILLS_DIR = "polyfills"


def js_string(value: str) -> str:
    """Quote a value as a single-quoted JavaScript string literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def clean_import_path(file_path: str) -> str:
    """
    Make a file path explicitly relative.

    A bare 'app.js' would be treated as a package name by module loaders.
    Absolute paths and paths already starting with ./ or ../ are unchanged.
    """
    if file_path.startswith(("/", "./", "../")):
        return file_path
    return f"./{file_path}"


def _array_literal(files: Sequence[str]) -> str:
    return f"[{','.join(js_string(f) for f in files)}]"


def _loader_call(function: str) -> Callable[[Sequence[str]], str]:
    def create(files: Sequence[str]) -> str:
        if len(files) == 1:
            return f"{function}({js_string(files[0])})"
        return (
            f"{_array_literal(files)}.forEach(function (entry) "
            f"{{ {function}(entry); }})"
        )

    return create


ENTRY_LOADERS: Dict[str, Callable[[Sequence[str]], str]] = {
    EntryType.SCRIPT.value: _loader_call("loadScript"),
    EntryType.MODULE.value: _loader_call("window.importShim"),
    EntryType.MODULE_SHIM.value: _loader_call("window.importShim"),
    EntryType.SYSTEMJS.value: _loader_call("System.import"),
}


class LoaderCodeGenerator:
    """
    Generate the polyfills loader script.

    The script is an immediately invoked function that:
    - defines a loadScript helper when scripts must be injected
    - loads every polyfill whose feature test passes
    - loads the entries once all polyfill loads have settled
    """

    def __init__(
        self,
        template_dir: Optional[Path] = None,
        minifier: Optional[Minifier] = None,
    ):
        """
        Initialize loader generator.

        Args:
            template_dir: Directory containing loader.js.j2 (default: built-in)
            minifier: Minifier used when polyfills.minify is set (default: terser)
        """
        self.template_dir = template_dir
        self.minifier = minifier
        self._jinja_env = self._init_jinja2()

    def _init_jinja2(self):
        """
        Initialize Jinja2 template environment.

        Returns:
            Jinja2 Environment instance

        Raises:
            TemplateRenderError: If templates cannot be initialized
        """
        from jinja2 import Environment, FileSystemLoader

        if self.template_dir:
            template_dir = Path(self.template_dir)
        else:
            template_dir = Path(__file__).parent / "templates"

        if not template_dir.exists():
            raise TemplateRenderError(f"Template directory not found: {template_dir}")

        jinja_env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

        logger.debug(f"Jinja2 templates initialized from: {template_dir}")
        return jinja_env

    def _render_template(self, template_name: str, **context) -> str:
        """
        Render a Jinja2 template.

        Raises:
            TemplateRenderError: If template rendering fails
        """
        from jinja2 import TemplateError

        try:
            template = self._jinja_env.get_template(template_name)
            return template.render(**context)
        except TemplateError as e:
            raise TemplateRenderError(
                f"Failed to render template {template_name}: {e}"
            ) from e

    def generate(
        self, config: LoaderConfig, polyfills: Sequence[PolyfillDescriptor]
    ) -> str:
        """
        Generate the loader script.

        Args:
            config: Loader configuration
            polyfills: Resolved polyfills, in load order

        Returns:
            JavaScript source of the loader

        Raises:
            TypeNotSupportedError: If an entry type has no loader
            ConfigurationError: If an entry set has no files
            MinificationError: If minification is requested and fails
        """
        load_entries = self._entries_loader_code(config)

        code = self._render_template(
            LOADER_TEMPLATE,
            load_script=self._needs_load_script(config, polyfills),
            polyfills=self._polyfills_context(polyfills),
            load_entries=load_entries,
        )

        if config.polyfills.minify:
            code = self._minify(code, config)

        logger.info(
            f"Generated loader script ({len(code)} bytes, {len(polyfills)} polyfill(s))"
        )
        return code

    def _needs_load_script(
        self, config: LoaderConfig, polyfills: Sequence[PolyfillDescriptor]
    ) -> bool:
        if polyfills:
            return True

        script = EntryType.SCRIPT.value
        if config.entries.type == script:
            return True
        return bool(config.legacy_entries and config.legacy_entries.type == script)

    def _polyfills_context(
        self, polyfills: Sequence[PolyfillDescriptor]
    ) -> List[Dict[str, Optional[str]]]:
        context = []
        for polyfill in polyfills:
            src = js_string(f"{POLYFILLS_DIR}/{polyfill.filename}")
            if polyfill.module:
                load = f"loadScript({src}, 'module')"
            else:
                load = f"loadScript({src})"
            context.append({"test": polyfill.test, "load": load})
        return context

    def _entries_loader_code(self, config: LoaderConfig) -> str:
        """Statement that loads the modern or legacy entries."""
        load = self._entry_set_loader_code(config.entries, "entries")
        if not config.legacy_entries:
            return f"{load};"

        load_legacy = self._entry_set_loader_code(
            config.legacy_entries, "legacy_entries"
        )
        return f"{MODULE_TEST} ? {load} : {load_legacy};"

    def validate(self, config: LoaderConfig) -> None:
        """
        Check that the entries of a configuration can be loaded.

        Raises:
            TypeNotSupportedError: If an entry type has no loader
            ConfigurationError: If an entry set has no files
        """
        self._entries_loader_code(config)

    def _entry_set_loader_code(self, entries: EntrySet, where: str) -> str:
        try:
            create_loader = ENTRY_LOADERS[entries.type]
        except KeyError:
            raise TypeNotSupportedError(entries.type) from None

        if not entries.files:
            raise ConfigurationError(f"{where} must contain at least one file")

        return create_loader([clean_import_path(f) for f in entries.files])

    def _minify(self, code: str, config: LoaderConfig) -> str:
        minifier = self.minifier
        if minifier is None:
            from polyfills_loader.core.minifier import TerserMinifier

            minifier = TerserMinifier(root_dir=config.root_dir)

        result = minifier.minify(code)
        if not result.code:
            logger.warning("Minifier returned no code, using unminified loader")
            return code
        return result.code
