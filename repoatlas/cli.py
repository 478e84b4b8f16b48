"""CLI entrypoints for repoatlas commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import SENSITIVITY_LEVELS, ConfigError, load_settings
from .engine import AtlasEngine
from .logging import configure_logging, get_logger
from .models import GenerateResult, ScanProgress
from .repo_scanner import resolve_root


def _add_logging_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    # Subparsers suppress their defaults so flags given before the command survive.
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=argparse.SUPPRESS if suppress_default else None,
        metavar="PATH",
        help="Also write log records to PATH.",
    )


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repoatlas",
        description="Generate navigation documents and inline entrypoint tags for a repository.",
    )
    _add_logging_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Scan the project and render CLAUDE.md and docs/repo-index.md.",
    )
    _add_logging_options(generate_parser, suppress_default=True)
    _add_path_argument(generate_parser)
    generate_parser.add_argument(
        "--sensitivity",
        choices=SENSITIVITY_LEVELS,
        default=None,
        help="Domain inference sensitivity (overrides .atlas.yml).",
    )
    generate_parser.add_argument(
        "--max-tags",
        type=int,
        default=None,
        help="Maximum number of inline tags to propose (overrides .atlas.yml).",
    )
    generate_parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="NAME",
        help="Additional directory or file name to exclude; may be repeated.",
    )
    generate_parser.add_argument(
        "--write",
        action="store_true",
        help="Write the documents and auto-selected inline tags to disk.",
    )
    generate_parser.add_argument(
        "--no-tags",
        action="store_true",
        help="With --write, skip inline tag updates.",
    )

    status_parser = subparsers.add_parser(
        "status",
        help="Report whether atlas documents exist for the project.",
    )
    _add_logging_options(status_parser, suppress_default=True)
    _add_path_argument(status_parser)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service exposing generate, write, and status.",
    )
    _add_logging_options(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for repoatlas commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    if args.command == "generate":
        _run_generate(parser, args)
    elif args.command == "status":
        _run_status(parser, args)
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_generate(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    engine = AtlasEngine()
    progress_logger = get_logger("progress")

    def _report(event: ScanProgress) -> None:
        progress_logger.debug("[%s %d/%d] %s", event.phase, event.current, event.total, event.message)

    try:
        settings = load_settings(resolve_root(args.path)).with_overrides(
            max_inline_tags=args.max_tags,
            domain_inference_sensitivity=args.sensitivity,
            exclude_patterns=args.exclude,
        )
        result = engine.generate(args.path, settings, progress=_report)
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")
    except (ConfigError, ValueError) as exc:
        parser.exit(1, f"repoatlas generate failed: {exc}\n")

    _print_summary(result)

    if not args.write:
        print("Dry run: nothing written. Re-run with --write to persist the atlas.")
        return

    content = result.generated_content
    tags = [] if args.no_tags else content.inline_tags
    outcome = engine.write(args.path, content.claude_md, content.repo_index, tags)
    print(
        "Wrote overview: {overview}, repo index: {index}, inline tags: {tags}".format(
            overview="yes" if outcome.claude_md_written else "no",
            index="yes" if outcome.repo_index_written else "no",
            tags=outcome.inline_tags_written,
        )
    )
    if not (outcome.claude_md_written and outcome.repo_index_written):
        parser.exit(1, "Some atlas documents could not be written. Run with --verbose for details.\n")


def _run_status(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    try:
        status = AtlasEngine().status(args.path)
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")

    if not status.has_atlas:
        print("No atlas found. Run `repoatlas generate --write` to create one.")
        return
    print(f"Overview:    {status.claude_md_path or '(missing)'}")
    print(f"Repo index:  {status.repo_index_path or '(missing)'}")
    if status.last_generated is not None:
        print(f"Updated:     {status.last_generated.isoformat(timespec='seconds')}")
    print(f"Inline tags: {status.inline_tag_count}")


def _print_summary(result: GenerateResult) -> None:
    scan = result.scan_result
    print(
        f"Scanned {scan.total_files} files ({scan.total_lines:,} lines) "
        f"in {scan.scan_duration_ms} ms"
    )
    print(f"Dependencies: {len(scan.dependencies)}")
    print(f"Domains ({len(scan.domains)}):")
    for domain in scan.domains:
        prefix = f" [{domain.ipc_prefix}]" if domain.ipc_prefix else ""
        print(f"  - {domain.name}: {len(domain.files)} files{prefix}")
    if scan.inline_tags:
        print("Inline tag candidates:")
        for tag in scan.inline_tags:
            marker = "x" if tag.selected else " "
            print(f"  [{marker}] {tag.relative_path} ({tag.reason})")


if __name__ == "__main__":
    main(sys.argv[1:])
