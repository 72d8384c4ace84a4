import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .config import get_settings


def setup_logging():
    """Configure logging for the session store API."""
    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    log_dir = Path(settings.data_path) / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    # Root logger
    logger = logging.getLogger()
    logger.setLevel(level)

    # File handler
    file_handler = RotatingFileHandler(
        log_dir / "fasting_api.log", maxBytes=5 * 1024 * 1024, backupCount=3
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(
        logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    )

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    # Request lines are already covered by route logging
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
