"""CLI entrypoints for permabundle commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError
from .errors import BundleError
from .logging import configure_logging
from .orchestrator import Orchestrator


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


def _add_source_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "source",
        help="Local .zip/.html/.mhtml file, GitHub owner/repo identifier, or http(s) URL.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="permabundle",
        description="Bundle web projects into one self-contained HTML file and deploy it.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        default=None,
        help="Path to .permabundle.yml or the directory holding it (defaults to current directory).",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write DEBUG-level logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    bundle_parser = subparsers.add_parser(
        "bundle",
        help="Produce a single HTML file from a project source.",
    )
    _add_verbose_option(bundle_parser, suppress_default=True)
    _add_source_argument(bundle_parser)
    bundle_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Write the document to this path instead of stdout.",
    )

    deploy_parser = subparsers.add_parser(
        "deploy",
        help="Bundle a project source and submit it to the deploy endpoint.",
    )
    _add_verbose_option(deploy_parser, suppress_default=True)
    _add_source_argument(deploy_parser)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for permabundle commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if args.log_file else None
    configure_logging(verbose=bool(args.verbose), log_file=log_file)

    if args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port, config_path=args.config)
        return

    try:
        orchestrator = Orchestrator.from_config_path(args.config)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "bundle":
        try:
            result = orchestrator.bundle_source(args.source)
        except FileNotFoundError as exc:
            parser.exit(1, f"{exc}\n")
        except BundleError as exc:
            parser.exit(1, f"permabundle bundle failed: {exc}\nRun with --verbose for more details.\n")
        if args.output:
            output = Path(args.output).expanduser()
            output.write_text(result.html, encoding="utf-8")
            print(f"Wrote {result.size_kb:.2f}KB to {_relativize(output)}")
        else:
            sys.stdout.write(result.html)
            sys.stdout.write("\n")
    elif args.command == "deploy":
        try:
            outcome = orchestrator.deploy_bundle(orchestrator.bundle_source(args.source))
        except FileNotFoundError as exc:
            parser.exit(1, f"{exc}\n")
        except BundleError as exc:
            parser.exit(1, f"permabundle deploy failed: {exc}\nRun with --verbose for more details.\n")
        print(f"Deployed {outcome.bundle.size_kb:.2f}KB")
        for link in outcome.links:
            print(link)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
