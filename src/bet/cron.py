"""Hourly ``bet update`` through the user's crontab.

The installer writes a small wrapper script into the config directory and
replaces (or appends) a marked block in the crontab. Running it again
replaces the same block, so it is idempotent.
"""

import logging
import os
import shlex
import subprocess
import sys
from collections.abc import Sequence
from pathlib import Path

from bet.errors import BetError

logger = logging.getLogger(__name__)

CRON_MARKER = "# bet:update hourly"
WRAPPER_SCRIPT_NAME = "bet-update-cron.sh"
LOG_FILE_NAME = "cron-update.log"
SCHEDULE = "0 * * * *"


class CronError(BetError):
    """The crontab could not be read or written."""


def default_command() -> list[str]:
    return [sys.executable, "-m", "bet"]


def render_crontab(existing: str, block: str) -> str:
    """
    Return ``existing`` with the bet block replaced, or appended if absent.

    The block is the marker line followed by exactly one schedule line.
    """
    out: list[str] = []
    skip_next = False
    replaced = False
    for line in existing.split("\n"):
        if skip_next:
            skip_next = False
            continue
        if line == CRON_MARKER:
            if not replaced:
                out.append(block)
                replaced = True
            skip_next = True
            continue
        out.append(line)

    if not replaced:
        while out and out[-1] == "":
            out.pop()
        out.append(block)

    return "\n".join(out).rstrip("\n") + "\n"


def write_wrapper(config_dir: Path, command: Sequence[str]) -> Path:
    """Write the executable wrapper that runs one update and logs its output."""
    config_dir.mkdir(parents=True, exist_ok=True)
    wrapper = config_dir / WRAPPER_SCRIPT_NAME
    log_path = config_dir / LOG_FILE_NAME
    invocation = " ".join(shlex.quote(part) for part in [*command, "update"])
    wrapper.write_text(
        f"#!/bin/sh\n{invocation} >> {shlex.quote(str(log_path))} 2>&1\n",
        encoding="utf-8",
    )
    os.chmod(wrapper, 0o755)
    return wrapper


def install_hourly_update_cron(
    config_dir: Path,
    command: Sequence[str] | None = None,
) -> Path:
    """
    Install or refresh the hourly update entry.

    Args:
        config_dir: Where the wrapper script and its log live.
        command: How to invoke bet; defaults to the running interpreter.

    Returns:
        Path of the wrapper script.

    Raises:
        CronError: ``crontab`` is missing or rejected the new table.
    """
    wrapper = write_wrapper(config_dir, command or default_command())
    block = f"{CRON_MARKER}\n{SCHEDULE} {shlex.quote(str(wrapper))}"

    try:
        listing = subprocess.run(
            ["crontab", "-l"], capture_output=True, text=True, check=False
        )
    except OSError as e:
        raise CronError(f"crontab -l failed: {e}") from e

    existing = ""
    if listing.returncode == 0:
        existing = listing.stdout
    elif "no crontab" not in listing.stderr:
        raise CronError(f"crontab -l failed: {listing.stderr.strip()}")

    try:
        written = subprocess.run(
            ["crontab", "-"],
            input=render_crontab(existing, block),
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        raise CronError(f"crontab install failed: {e}") from e
    if written.returncode != 0:
        raise CronError(f"crontab install failed: {written.stderr.strip() or 'unknown'}")

    logger.info("Installed hourly update cron job (%s)", wrapper)
    return wrapper
