from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .app import build_catalog, build_router
from .core.errors import ConfigurationError
from .core.settings import Settings, load_settings
from .gateway import AssistantBot

logger = logging.getLogger(__name__)


def _add_run_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--env-file", type=Path, default=None, help="Load settings from this .env file first")
    p.add_argument("--log-level", type=str, default=None, help="Override COURSETA_LOG_LEVEL (e.g. DEBUG)")
    p.add_argument(
        "--check",
        action="store_true",
        help="Validate configuration, print the course catalog and exit without connecting",
    )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _print_catalog(settings: Settings, console: Console) -> None:
    catalog = build_catalog(settings)
    table = Table(title="Courses")
    table.add_column("id")
    table.add_column("label")
    table.add_column("knowledge scope")
    for course in catalog.courses():
        table.add_row(course.key, course.label, course.scope_id)
    console.print(table)
    console.print(f"channel lock: {settings.channel_id}  guild: {settings.guild_id}  model: {settings.model}")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="courseta", description="Course teaching-assistant bot for Discord")
    _add_run_args(parser)
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])
    if args.log_level is not None and args.log_level.upper() not in logging.getLevelNamesMapping():
        parser.error(f"unknown log level: {args.log_level}")

    if args.env_file is not None:
        if not args.env_file.is_file():
            parser.error(f"env file not found: {args.env_file}")
        load_dotenv(args.env_file, override=False)
    else:
        load_dotenv(override=False)

    console = Console(stderr=True)
    try:
        settings = load_settings()
        configure_logging(args.log_level.upper() if args.log_level else settings.log_level)
        if args.check:
            _print_catalog(settings, Console())
            return
        catalog = build_catalog(settings)
        router = build_router(settings, catalog=catalog)
    except ConfigurationError as exc:
        console.print(f"[bold red]configuration error:[/] {exc}")
        raise SystemExit(2) from exc

    bot = AssistantBot(router, catalog, guild_id=settings.guild_id, channel_id=settings.channel_id)
    logger.info("starting assistant", extra={"courses": len(catalog), "model": settings.model})
    bot.run(settings.discord_token, log_handler=None)


if __name__ == "__main__":
    main()
