"""CLI entrypoints for reportgen commands."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .errors import ReportError
from .failsafe import build_report_document
from .logging import configure_logging
from .models import ReportRequest
from .orchestrator import ReportOrchestrator


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


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reportgen",
        description="Generate HTML progress reports from local git history.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("."),
        help="Directory containing .reportgen.yml (defaults to current directory).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log records to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the report web service and browser form.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default=None, help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=None, help="Port to listen on.")

    discover_parser = subparsers.add_parser(
        "discover",
        help="List git repositories under a search root.",
    )
    _add_verbose_option(discover_parser, suppress_default=True)
    discover_parser.add_argument(
        "root",
        nargs="?",
        default=None,
        help="Directory to search (defaults to the configured search_root).",
    )

    report_parser = subparsers.add_parser(
        "report",
        help="Generate a progress report for one or more repositories.",
    )
    _add_verbose_option(report_parser, suppress_default=True)
    report_parser.add_argument("repos", nargs="+", help="Repository paths to include.")
    report_parser.add_argument("--since", required=True, help="Start date (passed to git log --since).")
    report_parser.add_argument("--until", required=True, help="End date (passed to git log --until).")
    report_parser.add_argument("--next-steps", default=None, help="Upcoming work to mention in the report.")
    report_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Write the HTML report to this file instead of stdout.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for reportgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "serve":
        from .service import run_service

        run_service(
            host=args.host or config.server.host,
            port=args.port or config.server.port,
        )
    elif args.command == "discover":
        orchestrator = ReportOrchestrator(config)
        repos = orchestrator.discover(args.root)
        if not repos:
            print("No repositories found")
        for repo in repos:
            print(f"{repo.name}\t{repo.path}")
    elif args.command == "report":
        orchestrator = ReportOrchestrator(config)
        request = ReportRequest(
            repo_paths=list(args.repos),
            start_date=args.since,
            end_date=args.until,
            next_steps=args.next_steps,
        )
        try:
            response = asyncio.run(orchestrator.generate(request))
        except ReportError as exc:
            parser.exit(1, f"reportgen report failed: {exc}\nRun with --verbose for more details.\n")
        document = build_report_document(response, args.since, args.until)
        if args.output is None:
            sys.stdout.write(document)
        else:
            args.output.write_text(document, encoding="utf-8")
            print(
                f"Report for {response.repo_count} repositories "
                f"({response.total_commits} commits) written to {_relativize(args.output)}"
            )
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
