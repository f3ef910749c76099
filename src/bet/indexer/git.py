"""Version-control probes.

The indexer only needs three questions answered about a directory, so the
git binary sits behind the small ``VersionControl`` protocol. Every probe
degrades to an absent answer on failure; none of them raise.
"""

import logging
import subprocess
from datetime import datetime
from typing import Protocol

logger = logging.getLogger(__name__)

DEFAULT_GIT_TIMEOUT = 10.0


class VersionControl(Protocol):
    """What the indexer asks about a project's version control."""

    def is_repo(self, path: str) -> bool:
        """True if ``path`` is inside a work tree."""
        ...

    def first_commit_time(self, path: str) -> datetime | None:
        """Commit time of the oldest reachable commit, None if unknown."""
        ...

    def is_dirty(self, path: str) -> bool | None:
        """True if there are uncommitted or untracked changes, None if unknown."""
        ...


class GitCli:
    """``VersionControl`` backed by the ``git`` command line."""

    def __init__(self, git_binary: str = "git", timeout: float = DEFAULT_GIT_TIMEOUT):
        self.git_binary = git_binary
        self.timeout = timeout

    def _run(self, cwd: str, *args: str) -> str | None:
        """Run a git subcommand in ``cwd``; None on any failure."""
        try:
            completed = subprocess.run(
                [self.git_binary, "-C", cwd, *args],
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("git %s failed in %s: %s", args[0], cwd, e)
            return None
        if completed.returncode != 0:
            logger.debug(
                "git %s exited %d in %s: %s",
                args[0],
                completed.returncode,
                cwd,
                completed.stderr.strip(),
            )
            return None
        return completed.stdout.strip()

    def is_repo(self, path: str) -> bool:
        return self._run(path, "rev-parse", "--is-inside-work-tree") == "true"

    def first_commit_time(self, path: str) -> datetime | None:
        # -n would be applied before --reverse, so read the whole log
        output = self._run(path, "log", "--reverse", "--format=%cI")
        if not output:
            return None
        first = output.splitlines()[0].strip()
        try:
            return datetime.fromisoformat(first)
        except ValueError:
            logger.debug("Unparseable commit date %r in %s", first, path)
            return None

    def is_dirty(self, path: str) -> bool | None:
        output = self._run(path, "status", "--porcelain")
        if output is None:
            return None
        return len(output) > 0
