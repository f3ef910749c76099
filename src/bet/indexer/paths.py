"""Path normalization and containment checks.

Every path stored or compared by the indexer goes through
``normalize_absolute`` first, so containment can be decided lexically.
"""

import os


def expand_home(path: str) -> str:
    """Expand a leading ``~`` or ``~/`` to the user's home directory."""
    if not path:
        return path
    if path == "~" or path.startswith("~" + os.sep) or path.startswith("~/"):
        return os.path.expanduser(path)
    return path


def normalize_absolute(path: str) -> str:
    """Expand the home directory and resolve to a clean absolute path.

    Symlinks are not resolved and case is preserved.
    """
    return os.path.abspath(expand_home(path))


def is_subpath(child: str, parent: str) -> bool:
    """Return True if ``child`` lies strictly below ``parent``.

    Equal paths are not nested.
    """
    try:
        rel = os.path.relpath(child, parent)
    except ValueError:
        # Different drives on Windows
        return False
    if rel == os.curdir or os.path.isabs(rel):
        return False
    return rel != os.pardir and not rel.startswith(os.pardir + os.sep)


def is_within(path: str, parent: str) -> bool:
    """Return True if ``path`` equals ``parent`` or is nested below it."""
    return path == parent or is_subpath(path, parent)
