"""CLI entrypoints for nxquery commands."""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from .config import NXQueryConfig, load_config
from .engine import Engine
from .errors import NXQueryError
from .logging import configure_logging, get_logger
from .seeder import TemplateSeeder
from .watch import TreeWatcher


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


def _add_project_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Project directory containing .nxquery.yml (defaults to current directory).",
    )
    parser.add_argument(
        "--directory",
        default=None,
        help="Query directory relative to the project (overrides .nxquery.yml, default src/query).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nxquery",
        description="Generate query key tables and the NXQuery manifest from operation files.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync_parser = subparsers.add_parser(
        "sync",
        help="Regenerate every artifact once and exit.",
    )
    _add_verbose_option(sync_parser, suppress_default=True)
    _add_project_arguments(sync_parser)

    watch_parser = subparsers.add_parser(
        "watch",
        help="Regenerate artifacts whenever operation files change.",
    )
    _add_verbose_option(watch_parser, suppress_default=True)
    _add_project_arguments(watch_parser)

    seed_parser = subparsers.add_parser(
        "seed",
        help="Fill an empty operation file with query or mutation boilerplate.",
    )
    _add_verbose_option(seed_parser, suppress_default=True)
    seed_parser.add_argument("file", help="Operation file, e.g. src/query/users/queries/list.ts")
    seed_parser.add_argument(
        "--project",
        default=".",
        help="Project directory containing .nxquery.yml (defaults to current directory).",
    )
    seed_parser.add_argument("--directory", default=None, help="Query directory override.")

    return parser


def _load(project: str, directory: str | None) -> NXQueryConfig:
    config = load_config(Path(project))
    if directory:
        config.directory = directory
    return config


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for nxquery commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    project = args.project if args.command == "seed" else args.path
    try:
        config = _load(project, args.directory)
    except NXQueryError as exc:
        parser.exit(1, f"{exc}\n")
    configure_logging(verbose=bool(args.verbose), log_file=config.log_file)

    if args.command == "sync":
        engine = Engine.from_config(config)
        try:
            written = engine.initialize()
        except (NXQueryError, OSError) as exc:
            parser.exit(1, f"nxquery sync failed: {exc}\nRun with --verbose for more details.\n")
        finally:
            engine.close()
        if written:
            print(f"Updated {len(written)} file(s) under {_relativize(config.root)}")
        else:
            print("Generated files already up to date")
    elif args.command == "watch":
        _run_watch(config)
    elif args.command == "seed":
        seeder = TemplateSeeder(config.root)
        target = Path(args.file).expanduser().resolve()
        if seeder.maybe_seed(target):
            print(f"Seeded {_relativize(target)}")
        else:
            print(f"Left {_relativize(target)} unchanged (not empty or not an operation file)")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_watch(config: NXQueryConfig) -> None:
    logger = get_logger("cli")
    engine = Engine.from_config(config)
    engine.on_reload(lambda: logger.info("Generated files refreshed; full reload requested"))
    try:
        engine.initialize()
    except (NXQueryError, OSError) as exc:
        # Keep watching so the next save can repair the tree.
        logger.error("Initial sync failed: %s", exc)
    watcher = TreeWatcher(engine, recursive=config.watch.recursive)
    try:
        with watcher:
            while True:
                time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Stopping watcher")
    finally:
        engine.flush(timeout=5)
        engine.close()


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
