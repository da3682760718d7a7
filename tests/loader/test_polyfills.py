"""
Tests for polyfill resolution.
"""

import hashlib

import pytest

from polyfills_loader.config.parser import (
    EntrySet,
    LoaderConfig,
    PolyfillConfig,
    PolyfillsOptions,
)
from polyfills_loader.core.exceptions import (
    ConfigurationError,
    MinificationError,
    PolyfillNotInstalledError,
)
from polyfills_loader.core.interfaces import Minifier
from polyfills_loader.loader.polyfills import (
    CUSTOM_ELEMENTS_ES5_ADAPTER_TEST,
    DYNAMIC_IMPORT_TEST,
    FETCH_TEST,
    INTERSECTION_OBSERVER_TEST,
    MODULE_TEST,
    NO_MODULE_TEST,
    WEBCOMPONENTS_TEST,
    NodeModulesResolver,
    PolyfillDescriptor,
    collect_polyfill_configs,
    create_polyfills_data,
)


def make_config(root, entries="module", legacy=None, **options):
    return LoaderConfig(
        entries=EntrySet(type=entries, files=["app.js"]),
        legacy_entries=EntrySet(type=legacy, files=["legacy/app.js"]) if legacy else None,
        polyfills=PolyfillsOptions(**options),
        root_dir=root,
    )


def names_and_tests(polyfills):
    return [(p.name, p.test) for p in polyfills]


class TestPolyfillOrder:
    """Test which polyfills are produced and in which order."""

    def test_no_polyfills(self, project_root):
        """Test that nothing is produced without options."""
        assert create_polyfills_data(make_config(project_root)) == []

    def test_returns_correct_polyfills_data(self, project_root, minifier):
        """Test the built-in polyfills with their feature tests."""
        config = make_config(
            project_root,
            legacy="module",
            minify=True,
            hash=True,
            core_js=True,
            webcomponents=True,
            fetch=True,
            intersection_observer=True,
        )

        polyfills = create_polyfills_data(config, minifier=minifier)

        assert names_and_tests(polyfills) == [
            ("core-js", NO_MODULE_TEST),
            ("fetch", FETCH_TEST),
            ("intersection-observer", INTERSECTION_OBSERVER_TEST),
            ("webcomponents", WEBCOMPONENTS_TEST),
            ("custom-elements-es5-adapter", CUSTOM_ELEMENTS_ES5_ADAPTER_TEST),
        ]
        for polyfill in polyfills:
            assert isinstance(polyfill.code, str)
            assert isinstance(polyfill.hash, str)
            assert isinstance(polyfill.sourcemap, str)

    def test_core_js_fetch_webcomponents(self, project_root):
        """Test the four polyfills of the common module setup."""
        config = make_config(project_root, core_js=True, fetch=True, webcomponents=True)

        polyfills = create_polyfills_data(config)

        assert [p.name for p in polyfills] == [
            "core-js",
            "fetch",
            "webcomponents",
            "custom-elements-es5-adapter",
        ]
        assert all(p.test for p in polyfills)

    def test_webcomponents_adds_adapter_last(self, project_root):
        """Test webcomponents yields the bundle and then the ES5 adapter."""
        config = make_config(
            project_root,
            webcomponents=True,
            core_js=True,
            regenerator_runtime=True,
            dynamic_import=True,
            intersection_observer=True,
        )

        names = [p.name for p in create_polyfills_data(config)]

        assert names.count("webcomponents") == 1
        assert names.count("custom-elements-es5-adapter") == 1
        assert names[-2:] == ["webcomponents", "custom-elements-es5-adapter"]

    def test_all_builtin_polyfills_order(self, project_root):
        """Test the full declared order of built-in polyfills."""
        config = make_config(
            project_root,
            entries="systemjs",
            core_js=True,
            regenerator_runtime=True,
            fetch=True,
            dynamic_import=True,
            es_module_shims=True,
            intersection_observer=True,
            webcomponents=True,
        )

        names = [p.name for p in create_polyfills_data(config)]

        assert names == [
            "core-js",
            "regenerator-runtime",
            "fetch",
            "systemjs",
            "dynamic-import",
            "es-module-shims",
            "intersection-observer",
            "webcomponents",
            "custom-elements-es5-adapter",
        ]


class TestPolyfillTests:
    """Test feature tests attached to individual polyfills."""

    def test_regenerator_runtime_guarded(self, project_root):
        """Test regenerator runtime loads only on legacy browsers by default."""
        polyfills = create_polyfills_data(
            make_config(project_root, regenerator_runtime=True)
        )
        assert names_and_tests(polyfills) == [("regenerator-runtime", NO_MODULE_TEST)]

    def test_regenerator_runtime_always(self, project_root):
        """Test regenerator runtime 'always' removes the feature test."""
        polyfills = create_polyfills_data(
            make_config(project_root, regenerator_runtime="always")
        )
        assert names_and_tests(polyfills) == [("regenerator-runtime", None)]

    def test_dynamic_import(self, project_root):
        """Test the dynamic import polyfill is loaded from this package."""
        polyfills = create_polyfills_data(make_config(project_root, dynamic_import=True))

        assert names_and_tests(polyfills) == [("dynamic-import", DYNAMIC_IMPORT_TEST)]
        assert "window.importShim" in polyfills[0].code
        assert DYNAMIC_IMPORT_TEST.startswith(MODULE_TEST)

    def test_es_module_shims_is_module(self, project_root):
        """Test es-module-shims is loaded as a module script."""
        polyfills = create_polyfills_data(make_config(project_root, es_module_shims=True))

        assert names_and_tests(polyfills) == [("es-module-shims", MODULE_TEST)]
        assert polyfills[0].module is True


class TestSystemJs:
    """Test systemjs selection."""

    def test_systemjs_legacy_entry(self, project_root):
        """Test legacy-only systemjs is guarded by the no-module test."""
        config = make_config(project_root, entries="module", legacy="systemjs")

        polyfills = create_polyfills_data(config)

        assert names_and_tests(polyfills) == [("systemjs", NO_MODULE_TEST)]

    def test_systemjs_modern_entry(self, project_root):
        """Test modern systemjs entries always load systemjs."""
        config = make_config(project_root, entries="systemjs")

        polyfills = create_polyfills_data(config)

        assert names_and_tests(polyfills) == [("systemjs", None)]

    def test_systemjs_both_entries_single_polyfill(self, project_root):
        """Test systemjs is added once when both entry sets use it."""
        config = make_config(project_root, entries="systemjs", legacy="systemjs")

        polyfills = create_polyfills_data(config)

        assert names_and_tests(polyfills) == [("systemjs", None)]

    def test_systemjs_plain_build(self, project_root):
        """Test plain s.min.js is used by default."""
        polyfills = create_polyfills_data(make_config(project_root, entries="systemjs"))

        assert polyfills[0].code.startswith("/* s */")
        assert '"file":"s.min.js"' in polyfills[0].sourcemap

    def test_systemjs_extended_build(self, project_root):
        """Test system_js_extended selects the import maps build."""
        config = make_config(project_root, entries="systemjs", system_js_extended=True)

        polyfills = create_polyfills_data(config)

        assert polyfills[0].code.startswith("/* system */")
        assert '"file":"system.min.js"' in polyfills[0].sourcemap


class TestCustomPolyfills:
    """Test user supplied polyfills."""

    def test_can_load_custom_polyfills(self, project_root, minifier):
        """Test custom polyfills come before built-ins."""
        custom = [
            PolyfillConfig(
                name="polyfill-a",
                test="'foo' in window",
                path="custom-polyfills/polyfill-a.js",
            ),
            PolyfillConfig(
                name="polyfill-b",
                path=project_root / "custom-polyfills" / "polyfill-b.js",
                sourcemap_path=project_root / "custom-polyfills" / "polyfill-b.js.map",
            ),
        ]
        config = make_config(
            project_root,
            legacy="module",
            minify=True,
            hash=True,
            core_js=True,
            custom=custom,
        )

        polyfills = create_polyfills_data(config, minifier=minifier)

        assert names_and_tests(polyfills) == [
            ("polyfill-a", "'foo' in window"),
            ("polyfill-b", None),
            ("core-js", NO_MODULE_TEST),
        ]
        for polyfill in polyfills:
            assert isinstance(polyfill.code, str)
            assert isinstance(polyfill.hash, str)
            assert isinstance(polyfill.sourcemap, str)

    def test_missing_path(self, project_root):
        """Test a custom polyfill without path is rejected by name."""
        config = make_config(
            project_root, custom=[PolyfillConfig(name="polyfill-without-path")]
        )

        with pytest.raises(ConfigurationError, match="polyfill-without-path"):
            create_polyfills_data(config)

    def test_missing_path_names_package(self, project_root):
        """Test the error names the package to install when it is known."""
        config = make_config(
            project_root,
            custom=[PolyfillConfig(name="polyfill-x", package="polyfill-x-pkg")],
        )

        with pytest.raises(ConfigurationError) as exc_info:
            create_polyfills_data(config)

        message = str(exc_info.value)
        assert "polyfill-x should have a name and a path property" in message
        assert 'Install with "npm i -D polyfill-x-pkg"' in message

    def test_missing_name(self, project_root):
        """Test a custom polyfill without name is rejected."""
        config = make_config(
            project_root, custom=[PolyfillConfig(path="custom-polyfills/polyfill-a.js")]
        )

        with pytest.raises(ConfigurationError, match="name and a path"):
            create_polyfills_data(config)

    def test_fails_fast(self, project_root, minifier):
        """Test later polyfills are not processed after an invalid one."""
        config = make_config(
            project_root,
            minify=True,
            custom=[
                PolyfillConfig(name="broken"),
                PolyfillConfig(name="polyfill-a", path="custom-polyfills/polyfill-a.js"),
            ],
        )

        with pytest.raises(ConfigurationError):
            create_polyfills_data(config, minifier=minifier)
        assert minifier.calls == []

    def test_missing_file(self, project_root):
        """Test a path that does not exist."""
        config = make_config(
            project_root,
            custom=[PolyfillConfig(name="ghost", path="custom-polyfills/ghost.js")],
        )

        with pytest.raises(FileNotFoundError, match="ghost.js"):
            create_polyfills_data(config)

    def test_path_is_directory(self, project_root):
        """Test a path pointing to a directory."""
        config = make_config(
            project_root,
            custom=[PolyfillConfig(name="dir", path="custom-polyfills")],
        )

        with pytest.raises(FileNotFoundError):
            create_polyfills_data(config)

    def test_missing_sourcemap_file(self, project_root):
        """Test a source map path that does not exist."""
        config = make_config(
            project_root,
            custom=[
                PolyfillConfig(
                    name="polyfill-a",
                    path="custom-polyfills/polyfill-a.js",
                    sourcemap_path="custom-polyfills/polyfill-a.js.map",
                )
            ],
        )

        with pytest.raises(FileNotFoundError, match="polyfill-a.js.map"):
            create_polyfills_data(config)


class TestMinifyAndHash:
    """Test minification and hashing of polyfill code."""

    def test_sourcemap_skips_minification(self, project_root, minifier):
        """Test polyfills with a source map are never minified."""
        config = make_config(
            project_root,
            minify=True,
            custom=[
                PolyfillConfig(
                    name="polyfill-b",
                    path="custom-polyfills/polyfill-b.js",
                    sourcemap_path="custom-polyfills/polyfill-b.js.map",
                )
            ],
        )

        polyfills = create_polyfills_data(config, minifier=minifier)

        assert minifier.calls == []
        assert polyfills[0].code == "/* polyfill b */\nwindow.b = 2;\n"
        assert polyfills[0].sourcemap == '{"version":3,"file":"polyfill-b.js"}'

    def test_minify_without_sourcemap(self, project_root, minifier):
        """Test minified code and generated map replace the source code."""
        config = make_config(project_root, minify=True, fetch=True)

        polyfills = create_polyfills_data(config, minifier=minifier)

        assert minifier.calls == [
            ("/* fetch */\nwindow.fetch = function () {};\n", True)
        ]
        assert polyfills[0].code == "/* fetch */ window.fetch = function () {};"
        assert polyfills[0].sourcemap == '{"version":3,"mappings":""}'

    def test_no_minify_keeps_code(self, project_root, minifier):
        """Test code is untouched when minify is off."""
        config = make_config(project_root, fetch=True)

        polyfills = create_polyfills_data(config, minifier=minifier)

        assert minifier.calls == []
        assert polyfills[0].code == "/* fetch */\nwindow.fetch = function () {};\n"
        assert polyfills[0].sourcemap is None

    def test_minification_error_propagates(self, project_root):
        """Test a failing minifier aborts resolution."""

        class FailingMinifier(Minifier):
            def minify(self, code, source_map=False):
                raise MinificationError("boom")

        config = make_config(project_root, minify=True, fetch=True)

        with pytest.raises(MinificationError, match="boom"):
            create_polyfills_data(config, minifier=FailingMinifier())

    def test_hash_of_final_code(self, project_root, minifier):
        """Test the hash is the md5 of the minified code."""
        config = make_config(project_root, minify=True, hash=True, fetch=True)

        polyfill = create_polyfills_data(config, minifier=minifier)[0]

        assert polyfill.hash == hashlib.md5(polyfill.code.encode("utf-8")).hexdigest()
        assert polyfill.filename == f"fetch.{polyfill.hash}.js"

    def test_no_hash(self, project_root):
        """Test hash is empty when hashing is off."""
        polyfill = create_polyfills_data(make_config(project_root, fetch=True))[0]

        assert polyfill.hash is None
        assert polyfill.filename == "fetch.js"


class TestNodeModulesResolver:
    """Test locating npm package files."""

    def test_missing_package(self, empty_project):
        """Test a missing built-in package names the npm package."""
        config = make_config(empty_project, webcomponents=True)

        with pytest.raises(PolyfillNotInstalledError) as exc_info:
            create_polyfills_data(config)

        message = str(exc_info.value)
        assert "webcomponents" in message
        assert 'npm i -D @webcomponents/webcomponentsjs' in message
        assert isinstance(exc_info.value, ConfigurationError)

    def test_resolves_from_parent_directory(self, project_root):
        """Test node_modules of a parent directory is found."""
        nested = project_root / "packages" / "app"
        nested.mkdir(parents=True)

        resolver = NodeModulesResolver(nested)

        assert resolver.find("whatwg-fetch/dist/fetch.umd.js") == (
            project_root / "node_modules" / "whatwg-fetch" / "dist" / "fetch.umd.js"
        ).resolve()

    def test_adds_js_extension(self, project_root):
        """Test extensionless specifiers fall back to .js."""
        resolver = NodeModulesResolver(project_root)

        assert resolver.find("regenerator-runtime/runtime").name == "runtime.js"

    def test_collect_uses_given_resolver(self, project_root, empty_project):
        """Test an explicit resolver overrides root_dir."""
        config = make_config(empty_project, fetch=True)

        configs = collect_polyfill_configs(config, NodeModulesResolver(project_root))

        assert [c.name for c in configs] == ["fetch"]
        assert configs[0].package == "whatwg-fetch"


class TestPolyfillDescriptor:
    """Test descriptor helpers."""

    def test_filename_with_hash(self):
        descriptor = PolyfillDescriptor(name="core-js", code="", hash="abc123")
        assert descriptor.filename == "core-js.abc123.js"

    def test_filename_without_hash(self):
        descriptor = PolyfillDescriptor(name="core-js", code="")
        assert descriptor.filename == "core-js.js"
