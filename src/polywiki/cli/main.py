"""Command-line interface for polywiki."""

import argparse
import asyncio
import logging
from typing import Optional

from rich.console import Console

from polywiki.config import LOG_FILE, LOG_LEVEL
from polywiki.config.settings import load_settings
from polywiki.core.exceptions import FavoriteError
from polywiki.logger import setup_logging
from polywiki.providers.base import ModelChoice

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="polywiki",
        description="Visual dictionary terminal: streamed, tabbed explanations of any term.",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "query",
        nargs="*",
        help="Term to look up first (optional; the session stays interactive).",
    )
    parser.add_argument(
        "-m",
        "--model",
        choices=[choice.value for choice in ModelChoice],
        help="Model for this run only (settings.toml keeps the saved choice).",
    )
    parser.add_argument(
        "-i",
        "--image",
        metavar="PATH",
        help="Start by analysing an image.",
    )
    parser.add_argument(
        "-r",
        "--random",
        action="store_true",
        help="Start with a random concept.",
    )
    parser.add_argument(
        "--settings",
        action="store_true",
        help="Edit API keys and the default model, then exit.",
    )
    parser.add_argument(
        "--favorites",
        action="store_true",
        help="List saved favorites and exit.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Write DEBUG-level logs.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    log_path = setup_logging("DEBUG" if args.verbose else LOG_LEVEL, LOG_FILE)
    logger.debug(f"polywiki starting, log file {log_path}")

    if args.settings:
        from polywiki.cli.settings_editor import edit_settings_command

        edit_settings_command()
        return

    if args.favorites:
        from polywiki.cli.favorites import show_favorites_command

        try:
            show_favorites_command()
        except FavoriteError as e:
            logger.error(f"Listing favorites failed: {e}")
            Console(stderr=True).print(f"[red]Error loading favorites: {e}[/red]")
        return

    from polywiki.cli.browser import BrowserSession
    from polywiki.providers.router import ProviderRouter

    settings = load_settings()
    if args.model:
        settings = settings.with_changes(selected_model=args.model)
    router = ProviderRouter(settings)
    session = BrowserSession(router, console=Console())
    query = " ".join(args.query).strip() or None
    try:
        asyncio.run(session.run(query=query, image=args.image, random_pick=args.random))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")


if __name__ == "__main__":
    main()
