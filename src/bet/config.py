"""Configuration module for bet.

Loads process settings from environment variables with sensible defaults.
The root/ignore configuration itself lives in ``config.json`` and is handled
by the index store.
"""

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from bet.indexer.git import DEFAULT_GIT_TIMEOUT
from bet.indexer.indexer import DEFAULT_WORKERS
from bet.indexer.store import ConfigPaths

LOG_FILENAME = "bet.log"

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def default_config_dir() -> Path:
    xdg = os.getenv("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "bet"
    return Path.home() / ".config" / "bet"


def default_log_dir() -> Path:
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Logs" / "bet"
    state_home = os.getenv("XDG_STATE_HOME")
    if state_home:
        return Path(state_home) / "bet"
    return Path.home() / ".local" / "state" / "bet"


@dataclass
class Settings:
    """Application settings."""

    config_dir: Path
    log_dir: Path
    log_level: int
    scan_workers: int
    git_timeout: float

    @property
    def paths(self) -> ConfigPaths:
        return ConfigPaths(config_dir=str(self.config_dir))

    @property
    def log_file(self) -> Path:
        return self.log_dir / LOG_FILENAME

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        config_dir = Path(os.getenv("BET_CONFIG_DIR", str(default_config_dir()))).expanduser()
        log_dir = Path(os.getenv("BET_LOG_DIR", str(default_log_dir()))).expanduser()

        level_name = os.getenv("BET_LOG_LEVEL", "info").strip().lower()
        if level_name not in LOG_LEVELS:
            raise ValueError(
                f"Invalid BET_LOG_LEVEL value '{level_name}': "
                f"expected one of {', '.join(sorted(LOG_LEVELS))}"
            )

        workers_str = os.getenv("BET_SCAN_WORKERS", str(DEFAULT_WORKERS))
        try:
            scan_workers = int(workers_str)
            if scan_workers < 1:
                raise ValueError(f"Worker count must be >= 1, got {scan_workers}")
        except ValueError as e:
            raise ValueError(f"Invalid BET_SCAN_WORKERS value '{workers_str}': {e}") from e

        timeout_str = os.getenv("BET_GIT_TIMEOUT", str(DEFAULT_GIT_TIMEOUT))
        try:
            git_timeout = float(timeout_str)
            if git_timeout <= 0:
                raise ValueError(f"Timeout must be positive, got {git_timeout}")
        except ValueError as e:
            raise ValueError(f"Invalid BET_GIT_TIMEOUT value '{timeout_str}': {e}") from e

        return cls(
            config_dir=config_dir,
            log_dir=log_dir,
            log_level=LOG_LEVELS[level_name],
            scan_workers=scan_workers,
            git_timeout=git_timeout,
        )
