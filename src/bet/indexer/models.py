"""Data models for the indexer.

The ``to_dict``/``from_dict`` pairs define the persisted JSON shape. Keys are
camelCase and optional values are omitted rather than written as null, so
documents written by earlier releases round-trip unchanged.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

CONFIG_VERSION = 1


def str_list(value: Any) -> list[str] | None:
    """Keep the string entries of a JSON list, or None when it is not a list."""
    if not isinstance(value, list):
        return None
    items = [item for item in value if isinstance(item, str)]
    if len(items) != len(value):
        logger.debug("Dropped %d non-string list entries", len(value) - len(items))
    return items


def _opt_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


@dataclass
class RootConfig:
    """A configured top-level directory to scan."""

    path: str  # Absolute, normalized
    name: str  # Display name

    @classmethod
    def from_path(cls, path: str) -> "RootConfig":
        return cls(path=path, name=os.path.basename(path) or path)

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "name": self.name}


@dataclass
class Candidate:
    """A directory discovered during one scan that plausibly hosts a project."""

    path: str
    root: str
    has_git: bool = False
    has_readme: bool = False


@dataclass
class AutoMetadata:
    """System-derived attributes, recomputed on every scan."""

    last_indexed_at: str
    description: str | None = None
    started_at: str | None = None
    last_modified_at: str | None = None
    dirty: bool | None = None  # None means unknown, not clean

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.description is not None:
            data["description"] = self.description
        if self.started_at is not None:
            data["startedAt"] = self.started_at
        if self.last_modified_at is not None:
            data["lastModifiedAt"] = self.last_modified_at
        data["lastIndexedAt"] = self.last_indexed_at
        if self.dirty is not None:
            data["dirty"] = self.dirty
        return data

    @classmethod
    def from_dict(cls, raw: Any) -> "AutoMetadata":
        if not isinstance(raw, dict):
            return cls(last_indexed_at="")
        dirty = raw.get("dirty")
        return cls(
            last_indexed_at=_opt_str(raw.get("lastIndexedAt")) or "",
            description=_opt_str(raw.get("description")),
            started_at=_opt_str(raw.get("startedAt")),
            last_modified_at=_opt_str(raw.get("lastModifiedAt")),
            dirty=dirty if isinstance(dirty, bool) else None,
        )


@dataclass
class UserMetadata:
    """Operator-authored attributes. Scans never modify these."""

    description: str | None = None
    on_enter: str | None = None
    tags: list[str] | None = None
    # Keys we don't model, and modeled keys whose stored value doesn't parse;
    # both are written back unchanged
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.description is not None:
            data["description"] = self.description
        if self.on_enter is not None:
            data["onEnter"] = self.on_enter
        if self.tags is not None:
            data["tags"] = list(self.tags)
        for key, value in self.extra.items():
            data.setdefault(key, value)
        return data

    @classmethod
    def from_dict(cls, raw: Any) -> "UserMetadata | None":
        if not isinstance(raw, dict):
            return None
        user = cls(extra=dict(raw))
        if isinstance(raw.get("description"), str):
            user.description = user.extra.pop("description")
        if isinstance(raw.get("onEnter"), str):
            user.on_enter = user.extra.pop("onEnter")
        tags = raw.get("tags")
        if isinstance(tags, list) and all(isinstance(tag, str) for tag in tags):
            user.tags = list(user.extra.pop("tags"))
        return user


@dataclass
class Project:
    """A persisted, user-facing project record keyed by absolute path."""

    path: str
    slug: str
    root: str
    root_name: str
    has_git: bool = False
    has_readme: bool = False
    auto: AutoMetadata = field(default_factory=lambda: AutoMetadata(last_indexed_at=""))
    user: UserMetadata | None = None

    @property
    def id(self) -> str:
        return self.path

    @property
    def name(self) -> str:
        return self.slug

    @property
    def description(self) -> str | None:
        """User override first, then the README-derived text."""
        if self.user is not None and self.user.description:
            return self.user.description
        return self.auto.description

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "slug": self.slug,
            "name": self.name,
            "path": self.path,
            "root": self.root,
            "rootName": self.root_name,
            "hasGit": self.has_git,
            "hasReadme": self.has_readme,
            "auto": self.auto.to_dict(),
        }
        if self.user is not None:
            data["user"] = self.user.to_dict()
        return data

    @classmethod
    def from_dict(cls, raw: Any, path: str) -> "Project | None":
        """Build a record from its JSON form; None when it is unusable.

        ``rootName`` is left as stored; the store re-derives it when missing
        (legacy documents carried a ``group`` field instead).
        """
        if not isinstance(raw, dict):
            return None
        root = _opt_str(raw.get("root"))
        if root is None:
            return None
        slug = _opt_str(raw.get("slug")) or os.path.basename(path)
        return cls(
            path=path,
            slug=slug,
            root=root,
            root_name=_opt_str(raw.get("rootName")) or "",
            has_git=raw.get("hasGit") is True,
            has_readme=raw.get("hasReadme") is True,
            auto=AutoMetadata.from_dict(raw.get("auto")),
            user=UserMetadata.from_dict(raw.get("user")),
        )


@dataclass
class AppConfig:
    """Root and ignore configuration, persisted independently of the index."""

    version: int = CONFIG_VERSION
    roots: list[RootConfig] = field(default_factory=list)
    ignores: list[str] | None = None  # Glob override, replaces the defaults
    ignored_paths: list[str] | None = None  # Explicit absolute paths
    slug_parent_folders: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "version": self.version,
            "roots": [root.to_dict() for root in self.roots],
        }
        if self.ignores is not None:
            data["ignores"] = list(self.ignores)
        if self.ignored_paths is not None:
            data["ignoredPaths"] = list(self.ignored_paths)
        if self.slug_parent_folders is not None:
            data["slugParentFolders"] = list(self.slug_parent_folders)
        return data


@dataclass
class ScanResult:
    """Outcome of scanning a set of roots."""

    candidates: list[Candidate] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class UpdateReport:
    """Summary of one update run."""

    projects: dict[str, Project]
    roots: list[RootConfig]
    dropped: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def project_count(self) -> int:
        return len(self.projects)

    @property
    def root_count(self) -> int:
        return len(self.roots)
