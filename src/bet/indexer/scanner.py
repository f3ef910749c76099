"""Project discovery across the configured roots.

A directory is a candidate when it directly contains a ``.git`` entry or a
README. Nested candidates collapse into the outermost one, so a repository
with sub-packages that carry their own README is indexed once.
"""

import logging
import os
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor

from pathspec import PathSpec

from bet.indexer.git import VersionControl
from bet.indexer.ignore import (
    VCS_DIR_NAME,
    build_ignore_spec,
    is_path_ignored,
    without_vcs_internals,
)
from bet.indexer.models import Candidate, ScanResult
from bet.indexer.paths import is_subpath, is_within, normalize_absolute
from bet.indexer.readme import README_NAMES
from bet.indexer.walker import walk_tree

logger = logging.getLogger(__name__)


class _Traversal:
    """Collects marker matches and read errors for one walk of one root."""

    def __init__(self, root: str):
        self.root = root
        self.matches: list[str] = []
        self.warnings: list[str] = []

    def on_error(self, error: OSError) -> None:
        message = f"{self.root}: cannot read {error.filename}: {error.strerror or error}"
        logger.warning(message)
        self.warnings.append(message)


def find_git_markers(root: str, spec: PathSpec) -> _Traversal:
    """Find ``.git`` directories (or worktree files) below ``root``."""
    traversal = _Traversal(root)
    for entry in walk_tree(
        root,
        spec,
        on_error=traversal.on_error,
        prune=lambda name: name == VCS_DIR_NAME,
    ):
        if VCS_DIR_NAME in entry.filenames or os.path.isdir(
            os.path.join(entry.path, VCS_DIR_NAME)
        ):
            traversal.matches.append(os.path.join(entry.path, VCS_DIR_NAME))
    return traversal


def find_readmes(root: str, spec: PathSpec) -> _Traversal:
    """Find README files below ``root``, any of the accepted spellings."""
    traversal = _Traversal(root)
    for entry in walk_tree(root, spec, on_error=traversal.on_error):
        for name in entry.filenames:
            if name not in README_NAMES:
                continue
            rel = f"{entry.relative_path}/{name}" if entry.relative_path else name
            if spec.match_file(rel):
                continue
            traversal.matches.append(os.path.join(entry.path, name))
    return traversal


def _add_candidate(
    candidates: dict[str, Candidate],
    path: str,
    root: str,
    has_git: bool = False,
    has_readme: bool = False,
) -> None:
    existing = candidates.get(path)
    if existing is None:
        candidates[path] = Candidate(
            path=path, root=root, has_git=has_git, has_readme=has_readme
        )
        return
    existing.has_git = existing.has_git or has_git
    existing.has_readme = existing.has_readme or has_readme
    # Overlapping roots: the more specific one owns the project
    if len(root) > len(existing.root):
        existing.root = root


def dedupe_nested(paths: Iterable[str]) -> list[str]:
    """
    Keep only the outermost of any chain of nested paths.

    Paths are visited shortest first; a path survives unless it lies below
    one that already survived. The result is ordered by length, then path.
    """
    kept: list[str] = []
    for path in sorted(set(paths), key=lambda p: (len(p), p)):
        if not any(is_subpath(path, outer) for outer in kept):
            kept.append(path)
    return kept


def filter_ignored(
    candidates: Iterable[Candidate], explicit_ignores: Sequence[str]
) -> list[Candidate]:
    """Drop candidates at or below an explicitly ignored path."""
    kept = []
    for candidate in candidates:
        if is_path_ignored(candidate.path, explicit_ignores):
            logger.debug("Ignoring %s (explicit ignore)", candidate.path)
            continue
        kept.append(candidate)
    return kept


def scan_roots(
    roots: Sequence[str],
    glob_ignores: Sequence[str],
    vcs: VersionControl,
) -> ScanResult:
    """
    Discover project candidates under every root.

    Each root gets two independent walks, one for ``.git`` markers and one
    for READMEs, both pruned by ``glob_ignores`` (the git walk keeps
    ``.git`` itself visible). A read error inside one root is recorded as a
    warning and the scan goes on.
    """
    readme_spec = build_ignore_spec(glob_ignores)
    git_spec = build_ignore_spec(without_vcs_internals(glob_ignores))

    candidates: dict[str, Candidate] = {}
    warnings: list[str] = []

    for raw_root in roots:
        root = normalize_absolute(raw_root)
        logger.debug("Scanning root %s", root)

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="bet-scan") as pool:
            git_future = pool.submit(find_git_markers, root, git_spec)
            readme_future = pool.submit(find_readmes, root, readme_spec)
            git_walk = git_future.result()
            readme_walk = readme_future.result()

        for traversal, flag in ((git_walk, "has_git"), (readme_walk, "has_readme")):
            warnings.extend(w for w in traversal.warnings if w not in warnings)
            for match in traversal.matches:
                project_path = os.path.dirname(match)
                if not is_within(project_path, root):
                    logger.warning("Skipping %s: outside root %s", project_path, root)
                    continue
                _add_candidate(candidates, project_path, root, **{flag: True})

    survivors = [candidates[path] for path in dedupe_nested(candidates)]

    # The marker may sit above the candidate, or inside an ignored directory
    for candidate in survivors:
        if not candidate.has_git and vcs.is_repo(candidate.path):
            candidate.has_git = True

    logger.info(
        "Scan found %d candidates in %d root(s) (%d before nesting filter)",
        len(survivors),
        len(roots),
        len(candidates),
    )
    return ScanResult(candidates=survivors, warnings=warnings)
