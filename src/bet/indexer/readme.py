"""README lookup and description extraction."""

import logging
import os
import re

logger = logging.getLogger(__name__)

# Priority order; the first existing name wins
README_NAMES = ("README.md", "readme.md", "Readme.md", "README.MD")

# Only this much of a README is ever read
MAX_README_BYTES = 64 * 1024

EXCERPT_LENGTH = 500

FENCE = "```"
HTML_TAG_PATTERN = re.compile(r"<[^>]*>?")
HEADING_PREFIX = re.compile(r"^#+\s*")


def find_readme(project_path: str) -> str | None:
    """Return the path of the project's README, or None."""
    for name in README_NAMES:
        candidate = os.path.join(project_path, name)
        if os.path.isfile(candidate):
            return candidate
    return None


def read_readme(project_path: str) -> str | None:
    """Read the bounded prefix of the project's README."""
    readme_path = find_readme(project_path)
    if readme_path is None:
        return None
    try:
        with open(readme_path, "rb") as f:
            data = f.read(MAX_README_BYTES)
    except OSError as e:
        logger.warning("Cannot read %s: %s", readme_path, e)
        return None
    return data.decode("utf-8", errors="replace")


def extract_description(text: str) -> str | None:
    """
    Pull a one-paragraph description out of markdown.

    Everything before the first heading is skipped. The paragraph is the run
    of non-blank, non-heading lines after it, outside fenced code blocks,
    joined with spaces. It ends at the first blank line, heading or fence
    once some text has been captured. Without a paragraph the heading text
    itself is returned; without a heading, None.
    """
    title: str | None = None
    paragraph: list[str] = []
    in_code_block = False

    for line in text.splitlines():
        stripped = line.strip()

        if stripped.startswith(FENCE):
            if paragraph:
                break
            in_code_block = not in_code_block
            continue

        if in_code_block:
            continue

        if title is None:
            if stripped.startswith("#"):
                title = HEADING_PREFIX.sub("", stripped).strip()
            continue

        if not stripped or stripped.startswith("#"):
            if paragraph:
                break
            continue

        paragraph.append(stripped)

    description = " ".join(paragraph).strip()
    if description:
        return description
    return title or None


def read_description(project_path: str) -> str | None:
    """Description of the project from its README, None without one."""
    text = read_readme(project_path)
    if text is None:
        return None
    return extract_description(text)


def read_readme_excerpt(project_path: str, length: int = EXCERPT_LENGTH) -> str | None:
    """The README with HTML tags removed, cut to ``length`` characters."""
    text = read_readme(project_path)
    if text is None:
        return None
    text = HTML_TAG_PATTERN.sub("", text)
    if len(text) > length:
        return text[:length] + "..."
    return text
