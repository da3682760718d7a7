"""Test fixtures for polyfills-loader tests.

- polyfills: fake node_modules tree with the built-in polyfill packages,
  a project with custom polyfills, and a recording fake minifier

Import fixtures in your tests using:
    from tests.fixtures.polyfills import project_root
"""

__all__ = [
    "polyfills",
]
