"""
File system utilities for polyfills-loader.

This module provides the small set of file operations the resolver and the
minifier need:
- Path normalization
- Reading polyfill and source map files with clear errors
- Executable lookup on PATH
- Temporary directories with automatic cleanup
"""

import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Union

IS_WINDOWS = os.name == "nt"


def normalize_path(
    path: Union[str, Path], base_dir: Optional[Union[str, Path]] = None
) -> Path:
    """
    Normalize a path to an absolute path.

    Relative paths are resolved against base_dir when given, otherwise
    against the current working directory.

    Args:
        path: Path to normalize
        base_dir: Optional directory relative paths are anchored to

    Returns:
        Normalized absolute path

    Example:
        >>> normalize_path("polyfills/a.js", "/project")
        PosixPath('/project/polyfills/a.js')
    """
    path = Path(path).expanduser()
    if not path.is_absolute() and base_dir is not None:
        path = Path(base_dir) / path
    return path.resolve().absolute()


def read_text_file(
    path: Union[str, Path], base_dir: Optional[Union[str, Path]] = None
) -> str:
    """
    Read a UTF-8 text file.

    Args:
        path: File to read
        base_dir: Optional directory relative paths are anchored to

    Returns:
        File contents

    Raises:
        FileNotFoundError: If the path is missing, not a file, or unreadable
    """
    file_path = normalize_path(path, base_dir)

    if not file_path.is_file():
        raise FileNotFoundError(f"Could not find a file at {path}")

    try:
        return file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileNotFoundError(f"Could not read file at {path}: {e}") from e


def find_executable(
    name: str, search_paths: Optional[list[Path]] = None
) -> Optional[Path]:
    """
    Find an executable in the system PATH or provided search paths.

    Args:
        name: Executable name (e.g., 'terser')
        search_paths: Optional list of directories to search

    Returns:
        Path to executable if found, None otherwise

    Example:
        >>> find_executable('terser')
        PosixPath('/usr/local/bin/terser')
    """
    # npm installs .cmd shims on Windows
    extensions = [""] if not IS_WINDOWS else ["", ".exe", ".bat", ".cmd"]

    if search_paths is None:
        path_env = os.environ.get("PATH", "")
        search_paths = [Path(p) for p in path_env.split(os.pathsep) if p]

    for directory in search_paths:
        for ext in extensions:
            exe_path = directory / f"{name}{ext}"
            if exe_path.is_file() and os.access(exe_path, os.X_OK):
                return exe_path

    return None


@contextmanager
def temporary_directory(prefix: str = "polyfills_loader_", cleanup: bool = True):
    """
    Context manager for temporary directory with automatic cleanup.

    Args:
        prefix: Prefix for temp directory name
        cleanup: If True, remove directory on exit

    Yields:
        Path to temporary directory
    """
    temp_dir = Path(tempfile.mkdtemp(prefix=prefix))

    try:
        yield temp_dir
    finally:
        if cleanup and temp_dir.exists():
            shutil.rmtree(temp_dir, ignore_errors=True)


__all__ = [
    "normalize_path",
    "read_text_file",
    "find_executable",
    "temporary_directory",
]
