"""Shell completion scripts for subcommands and project slugs.

The scripts call ``bet completion --list`` for slugs at completion time, so
they never go stale when the index changes.
"""

from collections.abc import Iterable

from bet.errors import ConfigurationError

# Subcommands and their zsh descriptions, in menu order
SUBCOMMANDS: tuple[tuple[str, str], ...] = (
    ("update", "Scan roots and update the project index"),
    ("ignore", "Manage ignored project paths"),
    ("list", "List projects"),
    ("search", "Search projects"),
    ("path", "Print the absolute path of a project"),
    ("go", "Change into a project"),
    ("info", "Show a project's metadata"),
    ("shell", "Print shell integration for cd support"),
    ("completion", "Print a shell completion script"),
    ("serve", "Serve the index to MCP clients over stdio"),
)

# Subcommands whose first argument is a slug
SLUG_COMMANDS: tuple[str, ...] = ("go", "path", "info")

SHELLS = ("bash", "zsh")


def zsh_script() -> str:
    described = "\n".join(f"    '{name}:{help_text}'" for name, help_text in SUBCOMMANDS)
    return "\n".join(
        [
            "#compdef bet",
            "_bet() {",
            "  local -a subcommands",
            "  subcommands=(",
            described,
            "  )",
            "",
            "  if (( CURRENT == 2 )); then",
            "    _describe 'bet commands' subcommands",
            "    return",
            "  fi",
            "",
            '  case "$words[2]" in',
            f"    {'|'.join(SLUG_COMMANDS)})",
            "      if (( CURRENT == 3 )); then",
            "        local -a slugs",
            '        slugs=(${(f)"$(command bet completion --list 2>/dev/null)"})',
            "        _describe 'project' slugs",
            "      fi",
            "      ;;",
            "    *)",
            "      _default",
            "      ;;",
            "  esac",
            "}",
            "compdef _bet bet",
            "",
        ]
    )


def bash_script() -> str:
    names = " ".join(name for name, _ in SUBCOMMANDS)
    return "\n".join(
        [
            "_bet_completions() {",
            '  local cur="${COMP_WORDS[COMP_CWORD]}"',
            "",
            "  if (( COMP_CWORD == 1 )); then",
            f'    COMPREPLY=($(compgen -W "{names}" -- "$cur"))',
            "    return",
            "  fi",
            "",
            '  case "${COMP_WORDS[1]}" in',
            f"    {'|'.join(SLUG_COMMANDS)})",
            "      if (( COMP_CWORD == 2 )); then",
            "        local IFS=$'\\n'",
            '        COMPREPLY=($(compgen -W "$(command bet completion --list 2>/dev/null)" -- "$cur"))',
            "      fi",
            "      ;;",
            "  esac",
            "}",
            "complete -F _bet_completions bet",
            "",
        ]
    )


def completion_script(shell: str) -> str:
    """The completion script for ``shell`` (bash or zsh, any case)."""
    name = shell.strip().lower()
    if name == "zsh":
        return zsh_script()
    if name == "bash":
        return bash_script()
    raise ConfigurationError(f'Unknown shell "{shell}". Use bash or zsh.')


def filter_slugs(slugs: Iterable[str], prefix: str | None = None) -> list[str]:
    """Slugs starting with ``prefix``, ignoring case; all of them without one."""
    if not prefix:
        return list(slugs)
    wanted = prefix.lower()
    return [slug for slug in slugs if slug.lower().startswith(wanted)]
