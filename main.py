"""
OllamaChat - Discord chatbot backed by Ollama

Entry point for running the bot.
"""

import os
import sys
import logging

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from OllamaChat import OllamaChat, __version__
from OllamaChat import config

# Configure logging
log_level = logging.DEBUG if config.debug.enabled else logging.INFO
logging.basicConfig(
    level=log_level,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

# Suppress noisy loggers
logging.getLogger("discord").setLevel(logging.WARNING)
logging.getLogger("aiohttp").setLevel(logging.WARNING)
logging.getLogger("websockets").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


def main() -> int:
    """Main entry point."""
    logger.info(f"Starting OllamaChat v{__version__} (Debug: {config.debug.enabled})")

    # Validate configuration
    try:
        config.validate_all()
    except ValueError as e:
        logger.critical(f"Configuration Error: {e}")
        return 1

    token = os.getenv('DISCORD_TOKEN')
    if not token:
        logger.critical("DISCORD_TOKEN is missing from environment variables!")
        return 1

    try:
        bot = OllamaChat()
        bot.run(token, log_handler=None)
        return 0
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
        return 0
    except Exception as e:
        logger.critical(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
