"""Read-only views over the persisted index: listing, slug lookup, search.

Only ``project_slugs`` reads the store itself; everything else works on
projects the caller already loaded.
"""

import logging
import os
import re
from collections.abc import Iterable, Mapping
from difflib import SequenceMatcher

from bet.errors import BetError
from bet.indexer.models import Project, RootConfig
from bet.indexer.store import IndexStore

logger = logging.getLogger(__name__)

SEARCH_THRESHOLD = 0.6

TOKEN_SPLIT = re.compile(r"[^0-9a-z]+")


def list_projects(projects: Mapping[str, Project]) -> list[Project]:
    """All projects ordered by root display name, then slug."""
    return sorted(projects.values(), key=lambda p: (p.root_name, p.slug, p.path))


def project_label(project: Project) -> str:
    return f"{project.root_name}/{project.slug}"


def relative_path(project: Project) -> str:
    """Project path relative to its root, the basename for the root itself."""
    rel = os.path.relpath(project.path, project.root)
    if rel == os.curdir:
        return os.path.basename(project.path)
    return rel


def format_row(project: Project) -> str:
    return f"{project.slug} [{project.root_name}] {relative_path(project)}"


def find_by_slug(projects: Iterable[Project], slug: str) -> list[Project]:
    """Every project whose slug matches, ignoring case and surrounding space."""
    wanted = slug.strip().lower()
    return [p for p in projects if p.slug.lower() == wanted]


def group_by_roots(
    projects: Iterable[Project], roots: Iterable[RootConfig]
) -> list[tuple[str, list[Project]]]:
    """
    Group projects under their root's display name.

    Configured roots come first, in configuration order; projects whose
    root is no longer configured follow, grouped alphabetically.
    """
    groups: dict[str, tuple[str, list[Project]]] = {}
    for project in projects:
        groups.setdefault(project.root, (project.root_name, []))[1].append(project)

    ordered: list[tuple[str, list[Project]]] = []
    for root in roots:
        group = groups.pop(root.path, None)
        if group is not None:
            ordered.append((root.name, group[1]))
    ordered.extend(sorted(groups.values(), key=lambda group: group[0]))
    return ordered


def _search_fields(project: Project) -> list[str]:
    fields = [project.slug, project.name, project.path, project.root_name, project.root]
    if project.user is not None:
        fields.extend(project.user.tags or [])
        if project.user.description:
            fields.append(project.user.description)
    if project.auto.description:
        fields.append(project.auto.description)
    return [f.lower() for f in fields if f]


def match_score(project: Project, query: str) -> float:
    """How well ``query`` matches the project, 0.0 to 1.0."""
    q = query.strip().lower()
    best = 0.0
    for text in _search_fields(project):
        if q in text:
            return 1.0
        for candidate in [text, *TOKEN_SPLIT.split(text)]:
            if candidate:
                best = max(best, SequenceMatcher(None, q, candidate).ratio())
    return best


def search_projects(
    projects: Iterable[Project],
    query: str,
    threshold: float = SEARCH_THRESHOLD,
) -> list[Project]:
    """
    Fuzzy search over slug, path, root, tags and descriptions.

    An empty query returns every project unchanged. Otherwise results are
    ordered best match first, ties keeping their input order.
    """
    items = list(projects)
    if not query.strip():
        return items
    scored = [(match_score(p, query), i, p) for i, p in enumerate(items)]
    hits = [entry for entry in scored if entry[0] >= threshold]
    hits.sort(key=lambda entry: (-entry[0], entry[1]))
    return [p for _, _, p in hits]


def project_slugs(store: IndexStore) -> list[str]:
    """
    Slugs of every indexed project, in listing order, for shell completion.

    Completion must stay silent, so an unreadable index yields no slugs.
    """
    try:
        _, indexed = store.load()
    except (BetError, OSError) as e:
        logger.debug("Cannot load the index for completion: %s", e)
        return []
    return [p.slug for p in list_projects(indexed)]
