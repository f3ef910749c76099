"""JSON persistence for the root configuration and the project index.

Two independent documents live in the config directory:

    config.json    - roots and ignore lists, edited by configuration commands
    projects.json  - the project index, rewritten wholesale by every update

Reads are permissive: a missing or malformed document yields the empty
default. Writes go to a temporary file that is renamed over the target, so
an interrupted run never leaves a half-written document behind.
"""

import json
import logging
import os
import tempfile
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from typing import Any

from bet.errors import PersistenceError
from bet.indexer.models import CONFIG_VERSION, AppConfig, Project, RootConfig, str_list
from bet.indexer.paths import normalize_absolute

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"
PROJECTS_FILENAME = "projects.json"


@dataclass(frozen=True)
class ConfigPaths:
    """Where the store keeps its documents."""

    config_dir: str

    @property
    def config_path(self) -> str:
        return os.path.join(self.config_dir, CONFIG_FILENAME)

    @property
    def projects_path(self) -> str:
        return os.path.join(self.config_dir, PROJECTS_FILENAME)


def resolve_roots(roots: Iterable[RootConfig | str]) -> list[RootConfig]:
    """Normalize root paths and drop later duplicates, keeping order.

    Bare strings (the legacy form) become records named after their basename.
    """
    seen: set[str] = set()
    resolved: list[RootConfig] = []
    for root in roots:
        if isinstance(root, str):
            record = RootConfig.from_path(normalize_absolute(root))
        else:
            path = normalize_absolute(root.path)
            record = RootConfig(path=path, name=root.name or RootConfig.from_path(path).name)
        if record.path in seen:
            continue
        seen.add(record.path)
        resolved.append(record)
    return resolved


def _parse_roots(raw: Any) -> list[RootConfig]:
    if not isinstance(raw, list):
        return []
    roots: list[RootConfig | str] = []
    for item in raw:
        if isinstance(item, str) and item:
            roots.append(item)
        elif isinstance(item, dict) and isinstance(item.get("path"), str) and item["path"]:
            name = item.get("name")
            roots.append(RootConfig(path=item["path"], name=name if isinstance(name, str) else ""))
        else:
            logger.debug("Skipping malformed root entry: %r", item)
    return resolve_roots(roots)


def parse_config(raw: Any) -> AppConfig:
    """Build an AppConfig from a decoded config document."""
    if not isinstance(raw, dict):
        return AppConfig()
    version = raw.get("version")
    return AppConfig(
        version=version if isinstance(version, int) else CONFIG_VERSION,
        roots=_parse_roots(raw.get("roots")),
        ignores=str_list(raw.get("ignores")),
        ignored_paths=str_list(raw.get("ignoredPaths")),
        slug_parent_folders=str_list(raw.get("slugParentFolders")),
    )


def parse_projects(raw: Any, roots: Iterable[RootConfig] = ()) -> dict[str, Project]:
    """Build the project map from a decoded index document.

    A missing ``rootName`` is re-derived from the configured root with the
    same path, else from the root path's basename.
    """
    if not isinstance(raw, dict) or not isinstance(raw.get("projects"), dict):
        return {}
    names = {root.path: root.name for root in roots}
    projects: dict[str, Project] = {}
    for path, record in raw["projects"].items():
        project = Project.from_dict(record, path)
        if project is None:
            logger.debug("Skipping malformed project record for %s", path)
            continue
        if not project.root_name:
            project.root_name = names.get(project.root) or os.path.basename(project.root)
        projects[path] = project
    return projects


def merge_projects(
    prior: Mapping[str, Project],
    scanned: Mapping[str, Project],
) -> tuple[dict[str, Project], list[str]]:
    """
    Combine a fresh scan with the previous index.

    Every scanned record is kept as computed, except that the user block is
    copied over from the prior record at the same path. Prior paths missing
    from the scan are dropped along with their user block.

    Returns:
        Tuple of (merged projects, dropped paths).
    """
    merged: dict[str, Project] = {}
    for path, project in scanned.items():
        previous = prior.get(path)
        merged[path] = replace(project, user=previous.user if previous is not None else None)
    dropped = sorted(path for path in prior if path not in scanned)
    return merged, dropped


class IndexStore:
    """Reads and writes the two documents under a ``ConfigPaths`` location."""

    def __init__(self, paths: ConfigPaths):
        self.paths = paths

    def _read_json(self, path: str) -> Any:
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning("Cannot read %s, using defaults: %s", path, e)
            return None

    def _write_json(self, path: str, data: Any) -> None:
        directory = os.path.dirname(path)
        tmp_path: str | None = None
        try:
            os.makedirs(directory, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=directory,
                prefix=f".{os.path.basename(path)}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_path = f.name
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except OSError as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise PersistenceError(f"Cannot write {path}: {e}") from e
        logger.debug("Wrote %s", path)

    def read_config(self) -> AppConfig:
        return parse_config(self._read_json(self.paths.config_path))

    def write_config(self, config: AppConfig) -> None:
        self._write_json(self.paths.config_path, config.to_dict())

    def read_projects(self, roots: Iterable[RootConfig] = ()) -> dict[str, Project]:
        return parse_projects(self._read_json(self.paths.projects_path), roots)

    def write_projects(self, projects: Mapping[str, Project]) -> None:
        document = {
            "projects": {path: projects[path].to_dict() for path in sorted(projects)}
        }
        self._write_json(self.paths.projects_path, document)

    def load(self) -> tuple[AppConfig, dict[str, Project]]:
        """Read both documents."""
        config = self.read_config()
        return config, self.read_projects(config.roots)
