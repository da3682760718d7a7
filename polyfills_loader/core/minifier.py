"""
Terser-backed JavaScript minifier.

Runs the terser command line tool in a scratch directory. terser is an npm
package; install it with "npm i -D terser" (it is then found under
node_modules/.bin) or globally.
"""

import logging
import subprocess
from pathlib import Path
from typing import Optional, Union

from polyfills_loader.core.exceptions import MinificationError
from polyfills_loader.core.filesystem import find_executable, temporary_directory
from polyfills_loader.core.interfaces import Minifier, MinifyResult

logger = logging.getLogger(__name__)


class TerserMinifier(Minifier):
    """Minify code by shelling out to terser."""

    def __init__(
        self,
        executable: Optional[Union[str, Path]] = None,
        root_dir: Optional[Union[str, Path]] = None,
        timeout: int = 60,
    ):
        """
        Initialize terser minifier.

        Args:
            executable: Explicit path to terser, looked up lazily when None
            root_dir: Project directory whose node_modules/.bin is searched first
            timeout: Seconds to wait for a single terser run
        """
        self.executable = Path(executable) if executable else None
        self.root_dir = Path(root_dir) if root_dir else Path.cwd()
        self.timeout = timeout

    def _find_terser(self) -> Path:
        if self.executable:
            return self.executable

        local_bin = self.root_dir / "node_modules" / ".bin"
        terser = find_executable("terser", [local_bin]) or find_executable("terser")
        if terser is None:
            raise MinificationError(
                'terser executable not found. Install with "npm i -D terser"'
            )

        logger.debug(f"Using terser at: {terser}")
        self.executable = terser
        return terser

    def minify(self, code: str, source_map: bool = False) -> MinifyResult:
        terser = self._find_terser()

        with temporary_directory() as tmp:
            input_path = tmp / "input.js"
            output_path = tmp / "output.js"
            input_path.write_text(code, encoding="utf-8")

            # Relative names keep the temp directory out of the source map
            cmd = [
                str(terser),
                input_path.name,
                "--compress",
                "--mangle",
                "--output",
                output_path.name,
            ]
            if source_map:
                cmd += ["--source-map", f"filename='{output_path.name}'"]

            try:
                result = subprocess.run(
                    cmd,
                    cwd=tmp,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                )
            except subprocess.TimeoutExpired as e:
                raise MinificationError(
                    f"terser timed out after {self.timeout} seconds"
                ) from e
            except OSError as e:
                raise MinificationError(f"Could not run terser: {e}") from e

            if result.returncode != 0:
                raise MinificationError(
                    f"terser exited with code {result.returncode}: "
                    f"{result.stderr.strip()}"
                )

            try:
                minified = output_path.read_text(encoding="utf-8")
                sourcemap = None
                if source_map:
                    map_path = output_path.with_name(output_path.name + ".map")
                    sourcemap = map_path.read_text(encoding="utf-8")
            except OSError as e:
                raise MinificationError(f"terser produced no output: {e}") from e

        logger.debug(f"Minified {len(code)} bytes to {len(minified)} bytes")
        return MinifyResult(code=minified, map=sourcemap)


__all__ = ["TerserMinifier"]
