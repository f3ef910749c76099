"""MCP tools for the bet server.

This module defines the read-only tools exposed over MCP:
- list_projects: Every indexed project, optionally for one root
- search_projects: Fuzzy search across slugs, paths, tags and descriptions
- project_path: Resolve a slug to its absolute path(s)
- project_info: Full record of a project plus a README excerpt

The tools read whatever the last ``bet update`` persisted. They never scan.
"""

from typing import Any

from fastmcp import FastMCP

from bet import projects as views
from bet.indexer.models import Project
from bet.indexer.readme import read_readme_excerpt
from bet.indexer.store import IndexStore


def project_summary(project: Project) -> dict[str, Any]:
    """Compact view of a project for tool results."""
    return {
        "slug": project.slug,
        "path": project.path,
        "root_name": project.root_name,
        "description": project.description,
        "tags": list(project.user.tags or []) if project.user else [],
        "has_git": project.has_git,
        "dirty": project.auto.dirty,
        "last_modified_at": project.auto.last_modified_at,
    }


def lookup_slug(store: IndexStore, slug: str) -> dict[str, Any]:
    """Resolve ``slug`` against the persisted index.

    Ambiguous slugs return every match; callers choose.
    """
    _, indexed = store.load()
    matches = views.find_by_slug(views.list_projects(indexed), slug)
    result: dict[str, Any] = {
        "slug": slug,
        "matches": [
            {"label": views.project_label(p), "path": p.path} for p in matches
        ],
    }
    if not matches:
        result["error"] = f'No project found for slug "{slug}"'
    return result


def register_tools(mcp: FastMCP, store: IndexStore) -> None:
    """Register all read tools with the FastMCP server.

    Args:
        mcp: FastMCP server instance
        store: Index store the tools read from
    """

    @mcp.tool()
    def list_projects(root: str | None = None) -> list[dict]:
        """List indexed projects, ordered by root name then slug.

        Args:
            root: Optional root display name to filter by

        Returns:
            List of projects with slug, path, root_name, description, tags,
            has_git, dirty and last_modified_at.
        """
        _, indexed = store.load()
        items = views.list_projects(indexed)
        if root is not None:
            items = [p for p in items if p.root_name == root]
        return [project_summary(p) for p in items]

    @mcp.tool()
    def search_projects(query: str, limit: int = 20) -> list[dict]:
        """Fuzzy search for projects.

        Matches against slug, path, root name, user tags and descriptions.

        Args:
            query: Free text; an empty query lists everything
            limit: Maximum number of results to return (default: 20)
        """
        _, indexed = store.load()
        hits = views.search_projects(views.list_projects(indexed), query)
        return [project_summary(p) for p in hits[: max(limit, 0)]]

    @mcp.tool()
    def project_path(slug: str) -> dict:
        """Resolve a project slug to its absolute path.

        Args:
            slug: Project slug (case-insensitive)

        Returns:
            The slug, a list of matches (label and path) and an error message
            when nothing matches.
        """
        return lookup_slug(store, slug)

    @mcp.tool()
    def project_info(slug: str) -> list[dict]:
        """Show the full index record for every project with this slug.

        Args:
            slug: Project slug (case-insensitive)

        Returns:
            One entry per match with the stored record and a README excerpt.
        """
        _, indexed = store.load()
        matches = views.find_by_slug(views.list_projects(indexed), slug)
        return [
            {**p.to_dict(), "readme_excerpt": read_readme_excerpt(p.path)}
            for p in matches
        ]
