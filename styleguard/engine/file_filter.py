"""
Centralized file filtering for the styleguard engine.

Decides which files on disk become source units:
- Vendor/generated directory exclusions (node_modules, dist, etc.)
- Supported extensions, minus declaration and minified bundles
- User-supplied exclude globs from the configuration file
"""

import fnmatch
import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import FrozenSet, Iterable, List, Sequence, Tuple

logger = logging.getLogger(__name__)


# ============================================================================
# VENDOR / GENERATED DIRECTORY EXCLUSIONS
# ============================================================================
EXCLUDED_DIRS: FrozenSet[str] = frozenset([
    # Package managers / dependencies
    "node_modules",
    "bower_components",
    "jspm_packages",
    "vendor",
    ".yarn",
    ".pnpm-store",

    # Build output
    "dist",
    "build",
    "out",
    ".next",
    ".nuxt",
    ".svelte-kit",
    ".vercel",
    ".netlify",
    "storybook-static",

    # Version control
    ".git",
    ".svn",
    ".hg",

    # IDE / editor
    ".idea",
    ".vscode",

    # Cache / temp
    ".cache",
    ".parcel-cache",
    ".turbo",
    ".nx",
    "__snapshots__",
    "coverage",
    ".nyc_output",

    # Generated code markers
    "generated",
    "__generated__",
])

_EXCLUDED_DIR_PATTERN = re.compile(
    r'[/\\](?:' + '|'.join(re.escape(d) for d in sorted(EXCLUDED_DIRS)) + r')(?:[/\\]|$)',
    re.IGNORECASE
)

SUPPORTED_EXTENSIONS: Tuple[str, ...] = (".ts", ".mts", ".cts", ".tsx", ".js", ".jsx", ".mjs", ".cjs")

# Declaration files and bundles carry no hand-written style
EXCLUDED_SUFFIXES: Tuple[str, ...] = (".d.ts", ".d.mts", ".d.cts", ".min.js", ".bundle.js")


@lru_cache(maxsize=4096)
def is_excluded_path(file_path: str) -> bool:
    """Check if a file path is in an excluded directory or has an excluded suffix."""
    normalized = file_path.replace('\\', '/')
    if normalized.endswith(EXCLUDED_SUFFIXES):
        return True
    return bool(_EXCLUDED_DIR_PATTERN.search(normalized))


def matches_exclude(file_path: str, patterns: Sequence[str]) -> bool:
    """Check a path against user exclude globs (matched on the full path and the name)."""
    normalized = file_path.replace('\\', '/')
    name = normalized.rsplit('/', 1)[-1]
    return any(fnmatch.fnmatch(normalized, p) or fnmatch.fnmatch(name, p) for p in patterns)


def collect_files(paths: Iterable[str], extensions: Sequence[str] = SUPPORTED_EXTENSIONS,
                  exclude: Sequence[str] = ()) -> List[str]:
    """Collect files to analyze from files and directories.

    Files named explicitly are kept if their extension is supported; directories
    are walked recursively with vendor/generated directories skipped.

    Returns:
        Sorted, de-duplicated absolute paths
    """
    extensions = tuple(extensions)
    all_files = set()
    for path in paths:
        path_obj = Path(path)
        if path_obj.is_file():
            abs_path = str(path_obj.absolute())
            if abs_path.endswith(extensions) and not matches_exclude(abs_path, exclude):
                all_files.add(abs_path)
        elif path_obj.is_dir():
            for candidate in path_obj.rglob("*"):
                if not candidate.is_file():
                    continue
                abs_path = str(candidate.absolute())
                if not abs_path.endswith(extensions):
                    continue
                # Directory exclusions apply below the walked root only
                relative = "/" + candidate.relative_to(path_obj).as_posix()
                if is_excluded_path(relative) or matches_exclude(abs_path, exclude):
                    continue
                all_files.add(abs_path)
        else:
            logger.warning("Path '%s' does not exist", path)

    return sorted(all_files)


def clear_caches():
    """Clear all LRU caches. Useful for testing."""
    is_excluded_path.cache_clear()
