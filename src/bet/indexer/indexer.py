"""Main indexer that coordinates one update run: scan, describe, merge, persist."""

import logging
import os
import threading
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

from bet.errors import ConfigurationError
from bet.indexer.git import VersionControl
from bet.indexer.ignore import effective_glob_ignores, effective_path_ignores
from bet.indexer.metadata import compute_metadata
from bet.indexer.models import AppConfig, Candidate, Project, RootConfig, UpdateReport
from bet.indexer.scanner import filter_ignored, scan_roots
from bet.indexer.slug import DEFAULT_SLUG_PARENT_FOLDERS, project_slug
from bet.indexer.store import IndexStore, merge_projects, resolve_roots

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 8


def will_override_roots(
    provided: Sequence[RootConfig] | None,
    configured: Sequence[RootConfig],
) -> bool:
    """True when explicitly provided roots would replace configured ones."""
    return provided is not None and len(configured) > 0


class Indexer:
    """
    Indexer that refreshes the persisted project index from the filesystem.

    The filesystem is the source of truth for which projects exist and for
    their auto metadata; the previous index only contributes user blocks.

    Thread Safety:
        ``update`` holds a lock so two runs in one process never interleave.
        Runs in separate processes are not coordinated; the last write wins.
    """

    def __init__(
        self,
        store: IndexStore,
        vcs: VersionControl,
        workers: int = DEFAULT_WORKERS,
    ):
        """
        Initialize the indexer.

        Args:
            store: Where configuration is read from and the index written to
            vcs: Version-control probes
            workers: Threads used to compute per-project metadata
        """
        if workers < 1:
            raise ValueError(f"Worker count must be positive, got {workers}")
        self.store = store
        self.vcs = vcs
        self.workers = workers
        self._write_lock = threading.Lock()

    def _describe(
        self,
        candidate: Candidate,
        roots: dict[str, RootConfig],
        glob_ignores: list[str],
        parent_folders: Sequence[str],
    ) -> Project:
        """Build the fresh record for one candidate (no user block)."""
        auto = compute_metadata(candidate.path, candidate.has_git, glob_ignores, self.vcs)
        root = roots.get(candidate.root)
        return Project(
            path=candidate.path,
            slug=project_slug(candidate.path, parent_folders),
            root=candidate.root,
            root_name=root.name if root else os.path.basename(candidate.root),
            has_git=candidate.has_git,
            has_readme=candidate.has_readme,
            auto=auto,
        )

    def update(self, roots: Sequence[str] | None = None) -> UpdateReport:
        """
        Scan the roots and rewrite the index.

        Args:
            roots: Paths that replace the configured roots for this run and
                are saved as the new configuration. None uses the configured
                roots.

        Returns:
            UpdateReport with the new index, the roots used, the paths that
            dropped out of the index and any non-fatal traversal warnings.

        Raises:
            ConfigurationError: No roots are available. Nothing is written.
            PersistenceError: A document could not be written.
        """
        with self._write_lock:
            config, prior = self.store.load()

            active_roots = resolve_roots(roots) if roots is not None else config.roots
            if not active_roots:
                raise ConfigurationError(
                    "No roots specified. Provide roots with --roots, "
                    "e.g. bet update --roots ~/code"
                )

            glob_ignores = effective_glob_ignores(config)
            path_ignores = effective_path_ignores(config)
            parent_folders = (
                config.slug_parent_folders
                if config.slug_parent_folders is not None
                else list(DEFAULT_SLUG_PARENT_FOLDERS)
            )

            logger.info(
                "Starting update of %d root(s): %s",
                len(active_roots),
                ", ".join(root.path for root in active_roots),
            )
            result = scan_roots([root.path for root in active_roots], glob_ignores, self.vcs)
            candidates = filter_ignored(result.candidates, path_ignores)

            roots_by_path = {root.path: root for root in active_roots}
            scanned: dict[str, Project] = {}
            # One task per unique path; each result lands under its own key
            with ThreadPoolExecutor(
                max_workers=self.workers, thread_name_prefix="bet-meta"
            ) as pool:
                futures = {
                    candidate.path: pool.submit(
                        self._describe, candidate, roots_by_path, glob_ignores, parent_folders
                    )
                    for candidate in candidates
                }
                for path, future in futures.items():
                    scanned[path] = future.result()

            projects, dropped = merge_projects(prior, scanned)
            for path in dropped:
                had_user = prior[path].user is not None
                logger.info(
                    "Dropping %s from the index%s",
                    path,
                    " (its user metadata is discarded)" if had_user else "",
                )

            next_config = AppConfig(
                version=config.version,
                roots=active_roots,
                ignores=config.ignores,
                ignored_paths=config.ignored_paths,
                slug_parent_folders=config.slug_parent_folders,
            )
            if roots is not None:
                self.store.write_config(next_config)
            self.store.write_projects(projects)

            logger.info(
                "Update complete: %d projects from %d root(s), %d dropped, %d warning(s)",
                len(projects),
                len(active_roots),
                len(dropped),
                len(result.warnings),
            )
            return UpdateReport(
                projects=projects,
                roots=active_roots,
                dropped=dropped,
                warnings=result.warnings,
            )
