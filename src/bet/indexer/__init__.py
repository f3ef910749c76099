"""
Indexer module for bet.

This module discovers projects under the configured roots, derives their
metadata and merges the result into the persisted index without touching
the user-authored parts of each record.
"""

from bet.indexer.git import GitCli, VersionControl
from bet.indexer.ignore import (
    DEFAULT_GLOB_IGNORES,
    effective_glob_ignores,
    effective_path_ignores,
    is_path_ignored,
)
from bet.indexer.indexer import Indexer, will_override_roots
from bet.indexer.metadata import compute_metadata
from bet.indexer.models import (
    AppConfig,
    AutoMetadata,
    Candidate,
    Project,
    RootConfig,
    ScanResult,
    UpdateReport,
    UserMetadata,
)
from bet.indexer.paths import is_subpath, is_within, normalize_absolute
from bet.indexer.scanner import dedupe_nested, scan_roots
from bet.indexer.slug import project_slug
from bet.indexer.store import ConfigPaths, IndexStore, merge_projects

__all__ = [
    "DEFAULT_GLOB_IGNORES",
    "AppConfig",
    "AutoMetadata",
    "Candidate",
    "ConfigPaths",
    "GitCli",
    "IndexStore",
    "Indexer",
    "Project",
    "RootConfig",
    "ScanResult",
    "UpdateReport",
    "UserMetadata",
    "VersionControl",
    "compute_metadata",
    "dedupe_nested",
    "effective_glob_ignores",
    "effective_path_ignores",
    "is_path_ignored",
    "is_subpath",
    "is_within",
    "merge_projects",
    "normalize_absolute",
    "project_slug",
    "scan_roots",
    "will_override_roots",
]
