"""
Logging setup built on loguru.
"""
import os
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{module}</cyan>:<cyan>{function}</cyan> | "
    "<level>{message}</level>"
)


def setup_logging(
    level: str = "INFO",
    format_type: str = "text",
    logs_dir: Optional[str] = None,
    rotation: str = "1 day",
    retention: str = "30 days",
) -> None:
    """
    Replace loguru's default handler with a console sink and, optionally,
    rotating file sinks.

    Args:
        level: Console logging level
        format_type: "json" or "text"
        logs_dir: Directory for runtime.log / errors.log; no files when empty
        rotation: When to rotate log files (e.g., "1 day", "500 MB")
        retention: How long to keep rotated files
    """
    logger.remove()
    serialize = format_type == "json"

    # json: one serialized record per line
    logger.add(
        sys.stdout,
        format=TEXT_FORMAT,
        level=level.upper(),
        colorize=not serialize,
        serialize=serialize,
    )

    if logs_dir:
        Path(logs_dir).mkdir(parents=True, exist_ok=True)
        logger.add(
            os.path.join(logs_dir, "runtime.log"),
            level="INFO",
            rotation=rotation,
            retention=retention,
            enqueue=True,
            serialize=serialize,
        )
        # errors kept longer
        logger.add(
            os.path.join(logs_dir, "errors.log"),
            level="ERROR",
            rotation=rotation,
            retention="60 days",
            enqueue=True,
            serialize=serialize,
        )

    logger.info("Logging initialized: level={}, dir={}, format={}", level, logs_dir or "-", format_type)
