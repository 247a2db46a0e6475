import sys
from loguru import logger
import os

CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"


def setup_logging(debug_mode: bool = True, log_dir: str = "logs", to_file: bool = True):
    """
    Configures Loguru logger.

    Tab and pane transitions log at DEBUG, so ``debug_mode=False`` keeps the
    console to opens, saves, closes and failures.
    """
    # Remove default handler
    logger.remove()

    level = "DEBUG" if debug_mode else "INFO"
    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT)

    if not to_file:
        logger.info("Logging initialized (console only).")
        return

    os.makedirs(log_dir, exist_ok=True)
    logger.add(os.path.join(log_dir, "tabdesk_{time}.log"), rotation="10 MB", retention="1 week", level="DEBUG")

    logger.info(f"Logging initialized (files in {log_dir}).")


def setup_logging_from_config(config, to_file: bool = True):
    """Apply ``general.debug_mode`` / ``general.log_dir`` from a ConfigManager."""
    general = config.data.general
    setup_logging(debug_mode=general.debug_mode, log_dir=general.log_dir, to_file=to_file)
