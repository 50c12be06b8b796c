"""Source discovery for the annotation loader.

Source-kind detection and directory walking.
"""

import os
from typing import Dict, Iterator, Optional

# Extension → extractor mapping
SUPPORTED_EXTENSIONS: Dict[str, str] = {
    ".xml": "xml",
    ".py": "python",
}

# Directories to skip during file walking
SKIP_DIRECTORIES = frozenset({
    "__pycache__",
    ".git",
    "venv",
    "env",
    ".venv",
    ".env",
    "node_modules",
    ".tox",
    "__pypackages__",
    ".mypy_cache",
    ".pytest_cache",
    ".ruff_cache",
    "dist",
    "build",
    ".eggs",
    # C# / .NET
    "obj",
    "packages",
})


def detect_source_kind(file_path: str) -> Optional[str]:
    """Return "xml", "python", or None for unsupported files."""
    _, ext = os.path.splitext(file_path)
    return SUPPORTED_EXTENSIONS.get(ext.lower())


def should_skip_directory(dir_name: str) -> bool:
    """Check if a directory should be skipped during file walking.

    Args:
        dir_name: Directory name (not full path)
    """
    return (
        dir_name in SKIP_DIRECTORIES
        or dir_name.startswith(".")
        or dir_name.endswith(".egg-info")
    )


def iter_source_files(directory: str) -> Iterator[str]:
    """Yield supported files under `directory` in a stable, sorted order."""
    for current, dir_names, file_names in os.walk(directory):
        dir_names[:] = sorted(name for name in dir_names if not should_skip_directory(name))
        for file_name in sorted(file_names):
            if detect_source_kind(file_name) is not None:
                yield os.path.join(current, file_name)
