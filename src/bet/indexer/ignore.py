"""Ignore resolution: glob patterns pruned during traversal, explicit paths
filtered out of the discovered candidates.

Glob patterns follow gitignore semantics (pathspec's ``GitIgnoreSpec``) and
are matched against paths relative to the directory being walked.
"""

import logging
from collections.abc import Iterable

from pathspec import GitIgnoreSpec, PathSpec

from bet.indexer.models import AppConfig
from bet.indexer.paths import is_within, normalize_absolute

logger = logging.getLogger(__name__)

VCS_DIR_NAME = ".git"

# Applied when the configuration carries no "ignores" list of its own
DEFAULT_GLOB_IGNORES: tuple[str, ...] = (
    # Dependencies
    "**/node_modules/**",
    "**/vendor/**",
    "**/bower_components/**",
    # Version control internals
    "**/.git/**",
    "**/.hg/**",
    "**/.svn/**",
    # Build output
    "**/dist/**",
    "**/build/**",
    "**/out/**",
    "**/.next/**",
    "**/.nuxt/**",
    "**/target/**",
    # Virtual environments
    "**/.venv/**",
    "**/venv/**",
    "**/.tox/**",
    # Caches
    "**/__pycache__/**",
    "**/.mypy_cache/**",
    "**/.pytest_cache/**",
    "**/.ruff_cache/**",
    "**/.gradle/**",
    "**/.cache/**",
)


def effective_glob_ignores(config: AppConfig) -> list[str]:
    """Return the user's glob list verbatim if present, else the defaults.

    A user list replaces the defaults entirely; the two are never merged.
    """
    if config.ignores is not None:
        return list(config.ignores)
    return list(DEFAULT_GLOB_IGNORES)


def effective_path_ignores(config: AppConfig) -> list[str]:
    """Return the explicitly ignored absolute paths, normalized."""
    if not config.ignored_paths:
        return []
    return [normalize_absolute(path) for path in config.ignored_paths]


def is_path_ignored(path: str, explicit_ignores: Iterable[str]) -> bool:
    """True iff ``path`` equals, or is nested under, an explicitly ignored path."""
    return any(is_within(path, ignored) for ignored in explicit_ignores)


def without_vcs_internals(patterns: Iterable[str]) -> list[str]:
    """Drop patterns that would hide the version-control marker directory."""
    return [p for p in patterns if p.strip().strip("*/") != VCS_DIR_NAME]


def build_ignore_spec(patterns: Iterable[str]) -> PathSpec:
    """Compile glob patterns for matching relative paths."""
    lines = [p for p in patterns if p.strip() and not p.strip().startswith("#")]
    return GitIgnoreSpec.from_lines(lines)


def is_dir_ignored(spec: PathSpec, rel_dir: str) -> bool:
    """Whether a directory (relative, ``/``-separated) is pruned by ``spec``."""
    return spec.match_file(rel_dir) or spec.match_file(rel_dir + "/")
