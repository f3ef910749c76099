"""Main entry point for the bet command line."""

import argparse
import json
import logging
import sys
from collections.abc import Sequence

from fastmcp import FastMCP

from bet import __version__
from bet import projects as views
from bet.completion import completion_script, filter_slugs
from bet.config import Settings
from bet.cron import install_hourly_update_cron
from bet.errors import BetError, ConfigurationError
from bet.ignores import IgnoreList
from bet.indexer import GitCli, Indexer, IndexStore, Project, will_override_roots
from bet.indexer.paths import normalize_absolute
from bet.indexer.readme import read_readme_excerpt
from bet.indexer.store import resolve_roots
from bet.output import SHELL_SNIPPET, format_selection
from bet.tools import register_tools

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: Settings, verbose: bool = False) -> None:
    """Log to the log file, and to stderr for warnings (everything if verbose)."""
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(settings.log_level if verbose else logging.WARNING)
    handlers: list[logging.Handler] = [stderr_handler]

    file_error: OSError | None = None
    try:
        settings.log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(settings.log_file, encoding="utf-8"))
    except OSError as e:
        file_error = e

    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT, handlers=handlers, force=True)
    if file_error is not None:
        logger.warning("Cannot open log file %s: %s", settings.log_file, file_error)


def create_server(settings: Settings) -> FastMCP:
    """Create the read-only MCP server over the persisted index."""
    mcp = FastMCP(
        name="bet",
        instructions=(
            "bet indexes the software projects on this machine. Use search_projects "
            "to find a project by name, tag or description, and project_path to "
            "resolve a slug to its directory."
        ),
    )
    logger.info("Registering read tools...")
    register_tools(mcp, IndexStore(settings.paths))
    logger.info("Server configured successfully")
    return mcp


def _parse_roots(value: str | None) -> list[str] | None:
    if not value:
        return None
    roots = [root.strip() for root in value.split(",") if root.strip()]
    return roots or None


def _confirm(question: str) -> bool:
    """Ask a yes/no question on stderr; anything but yes means no."""
    sys.stderr.write(f"{question} [y/N] ")
    sys.stderr.flush()
    answer = sys.stdin.readline().strip().lower()
    return answer in ("y", "yes")


def _select_one(slug: str, matches: list[Project]) -> Project:
    """The single match for ``slug``; anything else is a usage error."""
    if not matches:
        raise ConfigurationError(f'No project found for slug "{slug}".')
    if len(matches) > 1:
        lines = [f'Slug "{slug}" is ambiguous. Matches:']
        lines.extend(f"  {views.project_label(p)} {p.path}" for p in matches)
        raise ConfigurationError("\n".join(lines))
    return matches[0]


def _load_projects(settings: Settings) -> list[Project]:
    _, indexed = IndexStore(settings.paths).load()
    return views.list_projects(indexed)


def cmd_update(args: argparse.Namespace, settings: Settings) -> int:
    store = IndexStore(settings.paths)
    provided = _parse_roots(args.roots)
    if provided is not None:
        config = store.read_config()
        provided_roots = resolve_roots(provided)
        if will_override_roots(provided_roots, config.roots):
            sys.stderr.write(
                "Warning: --roots will override your configured roots.\n"
                f"  Configured: {', '.join(r.path for r in config.roots)}\n"
                f"  Provided:   {', '.join(r.path for r in provided_roots)}\n"
            )
            if not sys.stdin.isatty():
                if not args.force:
                    raise ConfigurationError(
                        "Refusing to override without confirmation. "
                        "Run interactively or use --force."
                    )
            elif not _confirm("Continue?"):
                sys.stderr.write("Aborted.\n")
                return 0

    indexer = Indexer(
        store,
        GitCli(timeout=settings.git_timeout),
        workers=settings.scan_workers,
    )
    report = indexer.update(provided)

    for warning in report.warnings:
        sys.stderr.write(f"Warning: {warning}\n")
    sys.stdout.write(
        f"Indexed {report.project_count} projects from {report.root_count} root(s).\n"
    )

    if args.cron:
        install_hourly_update_cron(settings.config_dir)
        sys.stdout.write("Installed hourly cron job for bet update.\n")
    return 0


def cmd_ignore(args: argparse.Namespace, settings: Settings) -> int:
    ignores = IgnoreList(IndexStore(settings.paths))
    if args.ignore_command == "add":
        path = "." if args.this else args.path
        if not path:
            raise ConfigurationError("Provide a path or use --this to ignore the current folder.")
        normalized = normalize_absolute(path)
        if ignores.add(path):
            sys.stdout.write(f"Ignored: {normalized}\n")
        else:
            sys.stdout.write(f"Already ignored: {normalized}\n")
    elif args.ignore_command == "rm":
        normalized = normalize_absolute(args.path)
        if ignores.remove(args.path):
            sys.stdout.write(f"Removed from ignore list: {normalized}\n")
        else:
            sys.stdout.write(f"Not in ignore list: {normalized}\n")
    else:
        for path in ignores.list():
            sys.stdout.write(f"{path}\n")
    return 0


def cmd_list(args: argparse.Namespace, settings: Settings) -> int:
    store = IndexStore(settings.paths)
    config, indexed = store.load()
    items = views.list_projects(indexed)

    if args.json:
        sys.stdout.write(json.dumps([p.to_dict() for p in items], indent=2) + "\n")
        return 0
    if not items:
        sys.stdout.write("No projects indexed. Run bet update.\n")
        return 0
    for root_name, group in views.group_by_roots(items, config.roots):
        sys.stdout.write(f"[{root_name}]\n")
        for project in group:
            sys.stdout.write(f"  {views.format_row(project)}\n")
    return 0


def cmd_search(args: argparse.Namespace, settings: Settings) -> int:
    results = views.search_projects(_load_projects(settings), args.query)
    if args.limit is not None:
        results = results[: args.limit]

    if args.json:
        sys.stdout.write(json.dumps([p.to_dict() for p in results], indent=2) + "\n")
        return 0
    if not results:
        sys.stdout.write("No matches.\n")
        return 0
    for project in results:
        sys.stdout.write(f"{views.format_row(project)}\n")
    return 0


def cmd_path(args: argparse.Namespace, settings: Settings) -> int:
    project = _select_one(args.slug, views.find_by_slug(_load_projects(settings), args.slug))
    sys.stdout.write(f"{project.path}\n")
    return 0


def cmd_go(args: argparse.Namespace, settings: Settings) -> int:
    project = _select_one(args.slug, views.find_by_slug(_load_projects(settings), args.slug))
    sys.stdout.write(format_selection(project, print_only=args.print, no_enter=args.no_enter))
    return 0


def cmd_info(args: argparse.Namespace, settings: Settings) -> int:
    project = _select_one(args.slug, views.find_by_slug(_load_projects(settings), args.slug))
    auto = project.auto
    rows = [
        ("Slug", project.slug),
        ("Path", project.path),
        ("Root", f"{project.root_name} ({project.root})"),
        ("Description", project.description),
        ("Git", "yes" if project.has_git else "no"),
        ("Dirty", {None: "unknown", True: "yes", False: "no"}[auto.dirty]),
        ("Started", auto.started_at),
        ("Last modified", auto.last_modified_at),
        ("Last indexed", auto.last_indexed_at),
    ]
    if project.user is not None:
        if project.user.tags:
            rows.append(("Tags", ", ".join(project.user.tags)))
        if project.user.on_enter:
            rows.append(("On enter", project.user.on_enter))
    for label, value in rows:
        if value:
            sys.stdout.write(f"{label + ':':<15}{value}\n")

    excerpt = read_readme_excerpt(project.path)
    if excerpt:
        sys.stdout.write(f"\n{excerpt.rstrip()}\n")
    return 0


def cmd_shell(args: argparse.Namespace, settings: Settings) -> int:
    sys.stdout.write(f"{SHELL_SNIPPET}\n")
    return 0


def cmd_completion(args: argparse.Namespace, settings: Settings) -> int:
    if args.list:
        slugs = views.project_slugs(IndexStore(settings.paths))
        for slug in filter_slugs(slugs, args.prefix):
            sys.stdout.write(f"{slug}\n")
        return 0
    if args.shell is None:
        sys.stderr.write('Usage: bet completion [bash|zsh]\n  eval "$(bet completion zsh)"\n')
        return 1
    sys.stdout.write(completion_script(args.shell))
    return 0


def cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    mcp = create_server(settings)
    logger.info("Starting MCP server on stdio...")
    mcp.run()
    return 0


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: '{value}'") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bet", description="bet - jump between your projects"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    update = sub.add_parser("update", help="Scan roots and update the project index")
    update.add_argument("--roots", help="Comma-separated list of roots to scan")
    update.add_argument(
        "--force", action="store_true", help="Allow overriding configured roots when not in a TTY"
    )
    update.add_argument("--cron", action="store_true", help="Install an hourly cron job")
    update.set_defaults(handler=cmd_update)

    ignore = sub.add_parser("ignore", help="Manage ignored project paths")
    ignore_sub = ignore.add_subparsers(dest="ignore_command", required=True)
    ignore_add = ignore_sub.add_parser("add", help="Ignore a path (must be under a root)")
    ignore_add.add_argument("path", nargs="?")
    ignore_add.add_argument("--this", action="store_true", help="Ignore the current folder")
    ignore_rm = ignore_sub.add_parser("rm", help="Remove a path from the ignore list")
    ignore_rm.add_argument("path")
    ignore_sub.add_parser("list", help="List ignored paths")
    ignore.set_defaults(handler=cmd_ignore)

    list_cmd = sub.add_parser("list", help="List projects")
    list_cmd.add_argument("--json", action="store_true", help="Print JSON output")
    list_cmd.set_defaults(handler=cmd_list)

    search = sub.add_parser("search", help="Search projects")
    search.add_argument("query", nargs="?", default="")
    search.add_argument("--json", action="store_true", help="Print JSON output")
    search.add_argument("--limit", type=_non_negative_int, default=50, help="Limit results")
    search.set_defaults(handler=cmd_search)

    path = sub.add_parser("path", help="Print the absolute path of a project")
    path.add_argument("slug")
    path.set_defaults(handler=cmd_path)

    go = sub.add_parser("go", help="Change into a project (with the shell integration)")
    go.add_argument("slug")
    go.add_argument("--print", action="store_true", help="Print the path only")
    go.add_argument("--no-enter", action="store_true", help="Do not run the on-enter command")
    go.set_defaults(handler=cmd_go)

    info = sub.add_parser("info", help="Show a project's metadata")
    info.add_argument("slug")
    info.set_defaults(handler=cmd_info)

    shell = sub.add_parser("shell", help="Print shell integration for cd support")
    shell.set_defaults(handler=cmd_shell)

    completion = sub.add_parser("completion", help="Print a shell completion script")
    completion.add_argument("shell", nargs="?", help="bash or zsh")
    completion.add_argument(
        "--list", action="store_true", help="Print project slugs only (used by the scripts)"
    )
    completion.add_argument("--prefix", help="Only slugs starting with this prefix")
    completion.set_defaults(handler=cmd_completion)

    serve = sub.add_parser("serve", help="Serve the index to MCP clients over stdio")
    serve.set_defaults(handler=cmd_serve)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main function - runs one bet command and returns its exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env()
    except ValueError as e:
        sys.stderr.write(f"Error: {e}\n")
        return 1

    # Configure logging here to avoid side effects on import
    configure_logging(settings, verbose=args.verbose)

    try:
        return args.handler(args, settings)
    except BetError as e:
        sys.stderr.write(f"Error: {e}\n")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception:
        logger.exception("Unexpected error running %s", args.command)
        return 1


if __name__ == "__main__":
    sys.exit(main())
