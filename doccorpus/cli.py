"""CLI entrypoints for doccorpus commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .builder import CorpusBuild
from .config import ConfigError, load_config
from .corpus import BuildResult
from .export import dump_corpus
from .logging import configure_logging
from .models import EntityKind
from .parsing.signature import format_parameters


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


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Directory holding documentation sources (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="doccorpus",
        description="Parse PDoc-style comment blocks into a queryable documentation corpus.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Parse all sources and print the build report.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    _add_path_argument(build_parser)
    build_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Write the corpus as JSON Lines to this file.",
    )
    build_parser.add_argument(
        "--workers",
        type=_positive_int,
        default=None,
        help="Number of parallel parse workers.",
    )

    show_parser = subparsers.add_parser(
        "show",
        help="Print one entity and its members.",
    )
    _add_verbose_option(show_parser, suppress_default=True)
    show_parser.add_argument("name", help="Fully-qualified entity name, e.g. tty.isatty.")
    _add_path_argument(show_parser)

    refs_parser = subparsers.add_parser(
        "refs",
        help="List cross-references whose target is not in the corpus.",
    )
    _add_verbose_option(refs_parser, suppress_default=True)
    _add_path_argument(refs_parser)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve the corpus over a read-only HTTP API.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_path_argument(serve_parser)
    serve_parser.add_argument("--host", default=None, help="Bind address.")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for doccorpus commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    if args.command == "serve":
        _serve(parser, args)
        return

    result = _run_build(parser, args.path, getattr(args, "workers", None))

    if args.command == "build":
        report = result.report
        print(f"Parsed {len(report.files)} files into {report.entity_count} entities")
        for warning in report.warnings:
            location = f"{warning.path}:{warning.line} " if warning.path and warning.line else ""
            print(f"  [{warning.kind.value}] {location}{warning.message}")
        if args.output is not None:
            count = dump_corpus(result.corpus, args.output)
            print(f"Wrote {count} records to {_relativize(args.output)}")
    elif args.command == "show":
        entity = result.corpus.lookup(args.name)
        if entity is None:
            parser.exit(1, f"No entity named {args.name!r}\n")
        print(f"{entity.kind.value} {entity.fqn}")
        if entity.kind in (EntityKind.METHOD, EntityKind.CONSTRUCTOR):
            signature = f"({format_parameters(entity.parameters)})"
            if entity.returns:
                signature = f"{signature} -> {entity.returns}"
            print(f"  signature: {signature}")
        for param in entity.parameters:
            hint = f" ({param.type_hint})" if param.type_hint else ""
            print(f"  - {param.name}{hint}: {param.description}".rstrip())
        if entity.summary:
            print()
            print(entity.summary)
        for member in result.corpus.children(entity.fqn):
            print(f"  * {member.kind.value} {member.fqn}")
    elif args.command == "refs":
        dangling = result.corpus.dangling_references()
        for reference in dangling:
            print(f"{reference.source} -> {reference.target}")
        if not dangling:
            print("No dangling references")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_build(parser: argparse.ArgumentParser, path: str, workers: int | None) -> BuildResult:
    try:
        return CorpusBuild(max_workers=workers).run(path)
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")
    except ConfigError as exc:
        parser.exit(1, f"Invalid configuration: {exc}\n")


def _serve(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    from .service import run_service

    try:
        config = load_config(Path(args.path))
    except ConfigError as exc:
        parser.exit(1, f"Invalid configuration: {exc}\n")
    result = _run_build(parser, args.path, None)
    run_service(
        result,
        host=args.host or config.service.host,
        port=args.port or config.service.port,
    )


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
