"""Logging configuration for the API."""

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path


def setup_logging(
    base_dir: str = "logs",
    level: int = logging.INFO,
    console: bool = True,
    backup_count: int = 2
) -> Path:
    """
    Configure logging with a daily rotating file.

    Creates: logs/groundtruth.log (rotated at midnight, two old files kept)

    Args:
        base_dir: Base directory for logs (default: "logs")
        level: Logging level (default: INFO)
        console: Whether to also log to console (default: True)
        backup_count: Number of rotated files to keep

    Returns:
        Path to the log file
    """
    log_dir = Path(base_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    log_file = log_dir / "groundtruth.log"

    handlers = [
        TimedRotatingFileHandler(
            log_file, when="midnight", backupCount=backup_count, encoding='utf-8'
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=handlers,
        force=True  # Override any existing config
    )

    # Quiet noisy third-party loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return log_file


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger by name.

    Usage:
        from groundtruth.api.logging import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)
