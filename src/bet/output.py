"""Shell integration: how a selected project reaches the calling shell."""

import os
import shlex

from bet.indexer.models import Project

EVAL_ENV = "BET_EVAL"
EVAL_PREFIX = "__BET_EVAL__"

SHELL_SNIPPET = "\n".join(
    [
        "bet() {",
        "  local out",
        '  out="$(BET_EVAL=1 command bet "$@")" || return $?',
        '  if [[ "$out" == __BET_EVAL__* ]]; then',
        '    eval "${out#__BET_EVAL__}"',
        '  elif [[ -n "$out" ]]; then',
        '    printf "%s\\n" "$out"',
        "  fi",
        "}",
    ]
)


def shell_quote(value: str) -> str:
    return shlex.quote(value)


def format_selection(project: Project, print_only: bool = False, no_enter: bool = False) -> str:
    """
    Text to write to stdout for a selected project.

    Without the shell function wrapping us (``BET_EVAL`` unset) or with
    ``print_only``, this is just the path. Otherwise it is an eval payload
    that changes directory (the path single-quoted so the shell
    expands nothing in it) and runs the project's ``on_enter`` command.
    """
    if print_only or os.getenv(EVAL_ENV) != "1":
        return f"{project.path}\n"

    lines = [f"cd {shell_quote(project.path)}"]
    if not no_enter and project.user is not None and project.user.on_enter:
        lines.append(project.user.on_enter)
    return EVAL_PREFIX + "\n".join(lines)
