"""Management of the explicit ignore list.

Only ``ignoredPaths`` in the configuration document is touched here; the
glob ignores and the project index are left alone until the next update.
"""

import logging

from bet.errors import ConfigurationError
from bet.indexer.paths import is_within, normalize_absolute
from bet.indexer.store import IndexStore

logger = logging.getLogger(__name__)


class IgnoreList:
    """Add, remove and list explicitly ignored project paths."""

    def __init__(self, store: IndexStore):
        self.store = store

    def list(self) -> list[str]:
        return list(self.store.read_config().ignored_paths or [])

    def add(self, path: str) -> bool:
        """
        Ignore ``path`` and everything below it on future updates.

        Returns:
            False if the path was already ignored, True if it was added.

        Raises:
            ConfigurationError: No roots are configured, or the path is not
                at or below one of them.
        """
        normalized = normalize_absolute(path)
        config = self.store.read_config()

        if not config.roots:
            raise ConfigurationError(
                "No roots configured. Add roots first (e.g. bet update --roots /path/to/code)."
            )

        root_paths = [root.path for root in config.roots]
        if not any(is_within(normalized, root) for root in root_paths):
            raise ConfigurationError(
                f"Path must be under a configured root.\n"
                f"  Path: {normalized}\n"
                f"  Roots: {', '.join(root_paths)}"
            )

        ignored = list(config.ignored_paths or [])
        if normalized in ignored:
            return False

        ignored.append(normalized)
        config.ignored_paths = ignored
        self.store.write_config(config)
        logger.info("Ignored %s", normalized)
        return True

    def remove(self, path: str) -> bool:
        """
        Stop ignoring ``path``.

        Returns:
            False if the path was not in the list, True if it was removed.
        """
        normalized = normalize_absolute(path)
        config = self.store.read_config()
        ignored = list(config.ignored_paths or [])
        if normalized not in ignored:
            return False

        ignored.remove(normalized)
        config.ignored_paths = ignored or None
        self.store.write_config(config)
        logger.info("Removed %s from the ignore list", normalized)
        return True
