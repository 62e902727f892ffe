"""Loguru sinks for workout generation.

Generation code logs structured events (`logger.info("event", key=value)`);
the keyword fields land in `extra`, which both sink formats render.
"""

import sys
from pathlib import Path

from loguru import logger

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level> | {extra}"
)
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message} | {extra}"


def setup_logger(
    level: str = "INFO",
    log_file: str | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
    json_file: bool = False,
) -> None:
    """Replace existing sinks with a stderr sink and an optional file sink.

    Args:
        level: Minimum level for every sink
        log_file: File sink path; parent directories are created
        rotation: When the file sink rolls over (size or interval)
        retention: How long rolled-over files are kept
        json_file: Write the file sink as JSON lines instead of text
    """
    logger.remove()
    logger.add(sys.stderr, format=_CONSOLE_FORMAT, level=level, colorize=True)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            format="{message}" if json_file else _FILE_FORMAT,
            serialize=json_file,
            level=level,
            rotation=rotation,
            retention=retention,
            compression="zip",
            backtrace=True,
            diagnose=False,
        )

    logger.info("logger_configured", log_level=level, log_file=log_file, json_file=json_file)
