"""Per-project metadata derived from git history, file timestamps and the README."""

import logging
from collections.abc import Iterable
from datetime import datetime, timezone

from bet.indexer.git import VersionControl
from bet.indexer.ignore import build_ignore_spec
from bet.indexer.models import AutoMetadata
from bet.indexer.readme import read_description
from bet.indexer.walker import iter_file_mtimes

logger = logging.getLogger(__name__)


def format_timestamp(value: datetime | float) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. ``2024-05-01T09:30:00.000Z``."""
    if isinstance(value, datetime):
        moment = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    else:
        moment = datetime.fromtimestamp(value, tz=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def mtime_range(project_path: str, glob_ignores: Iterable[str]) -> tuple[float, float] | None:
    """Oldest and newest mtime of the project's non-ignored files."""
    spec = build_ignore_spec(glob_ignores)
    oldest: float | None = None
    newest: float | None = None
    for mtime in iter_file_mtimes(project_path, spec):
        if oldest is None or mtime < oldest:
            oldest = mtime
        if newest is None or mtime > newest:
            newest = mtime
    if oldest is None or newest is None:
        return None
    return oldest, newest


def compute_metadata(
    project_path: str,
    has_git: bool,
    glob_ignores: Iterable[str],
    vcs: VersionControl,
) -> AutoMetadata:
    """
    Derive the auto metadata block for one project.

    ``started_at`` prefers the first commit and falls back to the oldest file
    mtime; ``dirty`` is only probed when the project has git and otherwise
    stays None (unknown).
    """
    indexed_at = format_timestamp(datetime.now(timezone.utc))

    times = mtime_range(project_path, glob_ignores)
    description = read_description(project_path)

    started_at: str | None = None
    dirty: bool | None = None
    if has_git:
        first_commit = vcs.first_commit_time(project_path)
        if first_commit is not None:
            started_at = format_timestamp(first_commit)
        dirty = vcs.is_dirty(project_path)

    if started_at is None and times is not None:
        started_at = format_timestamp(times[0])

    return AutoMetadata(
        last_indexed_at=indexed_at,
        description=description,
        started_at=started_at,
        last_modified_at=format_timestamp(times[1]) if times is not None else None,
        dirty=dirty,
    )
