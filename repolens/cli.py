"""CLI entrypoints for repolens commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .errors import AnalysisError
from .logging import configure_logging, get_logger
from .models import AnalysisResult
from .orchestrator import Orchestrator
from .sinks import StatusLog


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


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a .repolens.yml file or its directory (defaults to the current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repolens",
        description="Measure size, complexity, DIA metrics and UML relations of Java sources on GitHub.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze every .java file beneath a GitHub folder URL.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    _add_config_option(analyze_parser)
    analyze_parser.add_argument("url", help="GitHub folder URL, e.g. https://github.com/o/r/tree/main/src.")
    analyze_parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format for the grid and DIA datasets.",
    )
    analyze_parser.add_argument(
        "--uml-out",
        type=Path,
        default=None,
        help="Write the PlantUML diagram to this file.",
    )
    analyze_parser.add_argument(
        "--folder",
        default=None,
        help="Only report files beneath this folder prefix.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_config_option(serve_parser)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for repolens commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    try:
        config = load_config(Path(args.config)) if args.config else load_config(Path.cwd())
    except ConfigError as exc:
        parser.exit(1, f"Invalid configuration: {exc}\n")

    if args.command == "analyze":
        status = StatusLog()
        logger = get_logger("cli")
        status.subscribe(lambda message: logger.info("%s", message))
        orchestrator = Orchestrator(config=config, status_sink=status)
        try:
            result = orchestrator.analyze(args.url)
        except AnalysisError as exc:
            parser.exit(1, f"repolens analyze failed: {exc}\n")
        except Exception as exc:  # pragma: no cover - unexpected failure
            parser.exit(1, f"repolens analyze failed: {exc}\nRun with --verbose for more details.\n")

        if args.uml_out is not None:
            args.uml_out.parent.mkdir(parents=True, exist_ok=True)
            args.uml_out.write_text(result.uml.text, encoding="utf-8")

        view = result.for_folder(args.folder)
        if args.format == "json":
            print(json.dumps(view.to_dict(), indent=2))
        else:
            print(render_text(view))
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port, config=config)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def render_text(result: AnalysisResult) -> str:
    """Render grid and DIA datasets as aligned plain-text tables."""
    if not result.grid:
        return "No files analyzed."

    width = max(len(datum.path) for datum in result.grid)
    lines_width = max(len("Lines"), len(str(result.max_line_count)))
    lines = [f"{'File'.ljust(width)}  {'Lines':>{lines_width}}  {'Complexity':>10}"]
    for datum in result.grid:
        lines.append(
            f"{datum.path.ljust(width)}  {datum.line_count:>{lines_width}}  {datum.complexity:>10}"
        )

    lines.append("")
    lines.append(
        f"{'Class'.ljust(width)}  {'A':>4}  {'I':>5}  {'D':>5}  {'In':>4}  {'Out':>4}"
    )
    for metric in result.dia:
        lines.append(
            f"{metric.simple_name.ljust(width)}  {metric.abstractness:>4.1f}  "
            f"{metric.instability:>5.2f}  {metric.distance:>5.2f}  "
            f"{metric.incoming:>4}  {metric.outgoing:>4}"
        )

    lines.append("")
    lines.append(result.summary())
    return "\n".join(lines)


if __name__ == "__main__":
    main(sys.argv[1:])
