#!/usr/bin/env python3
"""Process entry point: configure logging, build the container, run the bot."""

from __future__ import annotations

import json
import logging
import logging.config
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from discord_jukebox.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from discord_jukebox.config.settings import Settings

LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"
FALLBACK_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def _load_logging_config(path: Path) -> dict[str, Any] | None:
    try:
        with open(path) as f:
            return json.load(f)
    except (FileNotFoundError, json.JSONDecodeError):
        return None


def setup_logging(log_level: str = "INFO", config_path: Path = LOGGING_CONFIG_PATH) -> bool:
    """Apply the JSON logging config; returns False when basicConfig was used instead.

    ``log_level`` always wins over the root level written in the file.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    config = _load_logging_config(config_path)
    applied = False
    if config is not None:
        try:
            logging.config.dictConfig(config)
            applied = True
        except ValueError:
            pass

    if not applied:
        logging.basicConfig(level=level, format=FALLBACK_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        logging.warning("Could not load %s, fell back to basic config", config_path)

    logging.getLogger().setLevel(level)
    return applied


def _run(settings: Settings, token: str) -> int:
    from discord_jukebox.config.container import create_container
    from discord_jukebox.infrastructure.discord.bot import create_bot

    logger = logging.getLogger(__name__)
    container = create_container(settings)
    bot = create_bot(container, settings)

    logger.info(LogTemplates.BOT_STARTING_RUN)
    bot.run_with_graceful_shutdown(token)
    logger.info(LogTemplates.BOT_STOPPED)
    return 0


def main() -> int:
    from discord_jukebox.config.settings import get_settings

    settings = get_settings()
    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)

    token = settings.discord.token.get_secret_value()
    if not token:
        logger.error(ErrorMessages.DISCORD_TOKEN_REQUIRED)
        return 1

    logger.info(LogTemplates.BOT_STARTING.format(environment=settings.environment))
    try:
        return _run(settings, token)
    except KeyboardInterrupt:
        logger.info(LogTemplates.BOT_KEYBOARD_INTERRUPT)
        return 0
    except Exception as e:
        logger.exception(LogTemplates.BOT_FATAL_ERROR, e)
        return 1


def cli() -> None:
    """Console script entry point (``discord-jukebox``)."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
