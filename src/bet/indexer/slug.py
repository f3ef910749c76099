"""Slug assignment."""

import os
from collections.abc import Collection

# Folders that usually hold a repository's code one level below its root
DEFAULT_SLUG_PARENT_FOLDERS: tuple[str, ...] = ("src", "app")


def project_slug(
    path: str,
    parent_folders: Collection[str] = DEFAULT_SLUG_PARENT_FOLDERS,
) -> str:
    """
    Short name for a project path.

    The final path segment, unless that segment is one of ``parent_folders``,
    in which case the parent's name is used: ``/code/my-api/src`` -> ``my-api``.
    Slugs are not unique; lookups must handle several matches.
    """
    path = path.rstrip(os.sep) or path
    name = os.path.basename(path)
    if name in parent_folders:
        parent = os.path.basename(os.path.dirname(path))
        if parent:
            return parent
    return name
