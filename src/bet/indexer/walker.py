"""Directory walker shared by the scanner and the metadata computation."""

import logging
import os
import stat
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from pathspec import PathSpec

from bet.indexer.ignore import is_dir_ignored

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[OSError], None]


@dataclass
class DirEntry:
    """One visited directory."""

    path: str  # Absolute
    relative_path: str  # Relative to the walk's top, "/"-separated, "" for the top
    dirnames: list[str]
    filenames: list[str]


def _relative(path: str, top: str) -> str:
    rel = os.path.relpath(path, top)
    if rel == os.curdir:
        return ""
    return rel.replace(os.sep, "/")


def _log_error(error: OSError) -> None:
    logger.warning("Cannot read %s: %s", error.filename, error.strerror or error)


def walk_tree(
    top: str,
    spec: PathSpec,
    on_error: ErrorHandler | None = None,
    prune: Callable[[str], bool] | None = None,
) -> Iterator[DirEntry]:
    """
    Walk ``top`` without following symlinks, pruning ignored directories.

    Directories matching ``spec`` (or for which ``prune(name)`` is true) are
    neither yielded nor descended into. Unreadable directories are reported
    to ``on_error`` and skipped; the walk carries on with the rest of the tree.

    Callers may shrink ``dirnames`` in place to prune further.
    """
    handler = on_error or _log_error
    for dirpath, dirnames, filenames in os.walk(top, onerror=handler, followlinks=False):
        rel_dir = _relative(dirpath, top)
        kept = []
        for name in dirnames:
            rel = f"{rel_dir}/{name}" if rel_dir else name
            if prune is not None and prune(name):
                continue
            if is_dir_ignored(spec, rel):
                continue
            kept.append(name)
        dirnames[:] = kept
        yield DirEntry(
            path=dirpath,
            relative_path=rel_dir,
            dirnames=dirnames,
            filenames=filenames,
        )


def iter_file_mtimes(
    top: str,
    spec: PathSpec,
    on_error: ErrorHandler | None = None,
) -> Iterator[float]:
    """Yield the mtime of every non-ignored regular file below ``top``."""
    for entry in walk_tree(top, spec, on_error=on_error):
        for name in entry.filenames:
            rel = f"{entry.relative_path}/{name}" if entry.relative_path else name
            if spec.match_file(rel):
                continue
            try:
                st = os.lstat(os.path.join(entry.path, name))
            except OSError as e:
                logger.debug("Cannot stat %s: %s", rel, e)
                continue
            if stat.S_ISREG(st.st_mode):
                yield st.st_mtime
