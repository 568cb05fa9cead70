"""CLI entrypoints for docgraph commands."""

from __future__ import annotations

import argparse
import json
import math
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import ConfigurationError, LintConfig, load_config, parse_depth
from .content import ORDERS, ContentOutputter, unescape_separator
from .deps import DependencyAnalyzer
from .diagnostics import EXIT_OK, EXIT_USAGE
from .linter import DocLinter
from .logging import configure_logging, get_logger
from .query import filter_by_frontmatter
from .reporting import SORT_KEYS, format_deps, format_files, format_lint_json, format_lint_text, sort_files

logger = get_logger("cli")


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_graph_options(parser: argparse.ArgumentParser, *, depth: bool = True) -> None:
    parser.add_argument(
        "--entrypoint",
        action="append",
        dest="entrypoints",
        metavar="FILE",
        help="Document to start traversal from (repeatable; defaults to README.md).",
    )
    if depth:
        parser.add_argument(
            "--depth",
            metavar="N",
            help="Maximum traversal depth: a non-negative integer or 'unlimited'.",
        )
    parser.add_argument(
        "--exclude",
        action="extend",
        nargs="+",
        metavar="PATTERN",
        help="Gitignore-style pattern to exclude (repeatable).",
    )
    parser.add_argument(
        "--respect-ignore-file",
        action="store_true",
        default=None,
        help="Also apply the project's .gitignore patterns.",
    )
    parser.add_argument(
        "--no-exclude-hidden",
        action="store_false",
        dest="exclude_hidden",
        default=None,
        help="Do not exclude hidden files and directories.",
    )
    parser.add_argument(
        "--scope-root",
        metavar="DIR",
        help="Only traverse documents below DIR (relative to the project root).",
    )
    parser.add_argument(
        "--no-scope-limit",
        action="store_false",
        dest="scope_limit",
        default=None,
        help="Follow links to documents outside the scope root.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docgraph",
        description="Lint the link graph of a Markdown documentation tree.",
    )
    _add_verbose_option(parser)
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors.")
    parser.add_argument("--config", metavar="FILE", help="Project config file (defaults to .docgraph.yml).")
    parser.add_argument(
        "--root",
        metavar="DIR",
        default=".",
        help="Project root containing the documentation (defaults to current directory).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    lint_parser = subparsers.add_parser("lint", help="Report orphans, dead links and dead anchors.")
    _add_verbose_option(lint_parser, suppress_default=True)
    lint_parser.add_argument(
        "paths",
        nargs="*",
        help="A project directory, or documents to use as entrypoints.",
    )
    lint_parser.add_argument("--format", choices=("text", "json"), default="text")
    _add_graph_options(lint_parser)

    files_parser = subparsers.add_parser("files", help="List documents in the documentation graph.")
    _add_verbose_option(files_parser, suppress_default=True)
    _add_graph_options(files_parser, depth=False)
    files_parser.add_argument(
        "--depth",
        metavar="N",
        help="Only list files at depth N or less.",
    )
    files_parser.add_argument("--orphans", action="store_true", help="List orphaned files instead.")
    files_parser.add_argument("--absolute", action="store_true", help="Print absolute paths.")
    files_parser.add_argument("--frontmatter", metavar="EXPR", help="JMESPath filter over front-matter.")
    files_parser.add_argument("--format", choices=("list", "json"), default="list")
    files_parser.add_argument("--with-depth", action="store_true", help="Prefix each file with its depth.")
    files_parser.add_argument("--print0", action="store_true", help="Separate entries with NUL.")
    files_parser.add_argument("--sort", choices=SORT_KEYS, default="alpha")

    cat_parser = subparsers.add_parser("cat", help="Print document contents in graph order.")
    _add_verbose_option(cat_parser, suppress_default=True)
    cat_parser.add_argument("files", nargs="*", help="Only output these graph documents.")
    cat_parser.add_argument("--order", choices=ORDERS, default="deps")
    cat_parser.add_argument(
        "--separator",
        default="\\n\\n",
        help="Text placed between documents; \\n, \\t and \\r escapes are expanded.",
    )
    cat_parser.add_argument("--format", choices=("markdown", "json"), default="markdown")
    _add_graph_options(cat_parser)

    deps_parser = subparsers.add_parser("deps", help="Show what links to a document and what it links to.")
    _add_verbose_option(deps_parser, suppress_default=True)
    deps_parser.add_argument("file", help="Document to analyze.")
    deps_parser.add_argument("--incoming", action="store_true", help="Only show incoming references.")
    deps_parser.add_argument("--outgoing", action="store_true", help="Only show outgoing references.")
    deps_parser.add_argument("--depth", metavar="N", help="Limit the tree depth.")
    deps_parser.add_argument("--format", choices=("tree", "list", "json"), default="tree")
    _add_graph_options(deps_parser, depth=False)

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint for docgraph commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=bool(args.quiet))

    handlers = {
        "lint": _run_lint,
        "files": _run_files,
        "cat": _run_cat,
        "deps": _run_deps,
    }
    try:
        return handlers[args.command](args)
    except ConfigurationError as exc:
        parser.exit(EXIT_USAGE, f"docgraph: error: {exc}\n")
    except OSError as exc:
        parser.exit(EXIT_USAGE, f"docgraph {args.command} failed: {exc}\nRun with --verbose for more details.\n")
    return EXIT_USAGE  # pragma: no cover - parser.exit raises


def _run_lint(args: argparse.Namespace) -> int:
    root = Path(args.root)
    entrypoints: List[str] = list(args.entrypoints or [])
    directories = [Path(item) for item in args.paths if Path(item).is_dir()]
    files = [item for item in args.paths if not Path(item).is_dir()]
    if len(directories) > 1:
        raise ConfigurationError("Only one project directory may be linted at a time")
    if directories:
        root = directories[0]
    entrypoints.extend(str(Path(item).resolve()) for item in files)

    config = _load(args, root, entrypoints=entrypoints, depth=args.depth)
    report = DocLinter(config).lint()
    if args.format == "json":
        sys.stdout.write(format_lint_json(report))
    else:
        sys.stdout.write(format_lint_text(report))
    return report.exit_code


def _run_files(args: argparse.Namespace) -> int:
    config = _load(args, Path(args.root), entrypoints=args.entrypoints)
    linter = DocLinter(config)
    graph = linter.graph()

    if args.orphans:
        paths = linter.orphans()
    else:
        paths = graph.files()
        max_depth = parse_depth(args.depth)
        if max_depth is not None:
            paths = [path for path in paths if graph.depth_of(path) <= max_depth]

    if args.frontmatter:
        paths = filter_by_frontmatter(graph, args.frontmatter, paths, load=linter.document)

    paths = sort_files(paths, graph, args.sort)
    logger.debug("Found %d file(s)", len(paths))
    sys.stdout.write(
        format_files(
            paths,
            graph,
            fmt=args.format,
            absolute=args.absolute,
            with_depth=args.with_depth,
            print0=args.print0,
            orphans=args.orphans,
        )
    )
    return EXIT_OK


def _run_cat(args: argparse.Namespace) -> int:
    config = _load(args, Path(args.root), entrypoints=args.entrypoints, depth=args.depth)
    linter = DocLinter(config)
    outputter = ContentOutputter(linter.graph())
    selected = [linter.resolver.canonical(Path(item).resolve()) for item in args.files]
    paths = outputter.ordered(args.order, selected)
    if not paths:
        logger.info("No files to output")
        return EXIT_OK

    if args.format == "json":
        sys.stdout.write(json.dumps(outputter.render_json(paths), indent=2) + "\n")
    else:
        sys.stdout.write(outputter.render_markdown(paths, unescape_separator(args.separator)))
    return EXIT_OK


def _run_deps(args: argparse.Namespace) -> int:
    config = _load(args, Path(args.root), entrypoints=args.entrypoints)
    linter = DocLinter(config)
    graph = linter.graph()

    target = linter.resolver.canonical(Path(args.file).resolve())
    show_incoming = args.incoming or not args.outgoing
    show_outgoing = args.outgoing or not args.incoming
    tree_depth = parse_depth(args.depth)
    report = DependencyAnalyzer(graph).analyze(
        target,
        include_incoming=show_incoming,
        include_outgoing=show_outgoing,
        max_depth=math.inf if tree_depth is None else tree_depth,
    )
    sys.stdout.write(
        format_deps(
            report,
            graph,
            fmt=args.format,
            show_incoming=show_incoming,
            show_outgoing=show_outgoing,
        )
    )
    return EXIT_OK


def _load(
    args: argparse.Namespace,
    root: Path,
    *,
    entrypoints: Optional[List[str]] = None,
    depth: Optional[str] = None,
) -> LintConfig:
    overrides: Dict[str, Any] = {}
    if entrypoints:
        overrides["entrypoints"] = entrypoints
    if depth is not None:
        overrides["depth"] = depth
    if args.exclude:
        overrides["cli_exclude"] = list(args.exclude)
    if args.respect_ignore_file is not None:
        overrides["respect_ignore_file"] = args.respect_ignore_file
    if args.exclude_hidden is not None:
        overrides["exclude_hidden"] = args.exclude_hidden
    if args.scope_root is not None:
        overrides["scope_root"] = args.scope_root
    if args.scope_limit is not None:
        overrides["scope_limit"] = args.scope_limit

    root = root.expanduser().resolve()
    if not root.is_dir():
        raise ConfigurationError(f"Project root is not a directory: {root}")
    config_path = Path(args.config) if args.config else None
    return load_config(root, config_path=config_path, overrides=overrides)


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
