import sys
from pathlib import Path
from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def setup_logger(settings) -> None:
    """Install the stderr sink (and an optional rotating file sink)"""
    logger.remove()
    logger.add(sys.stderr, level=settings.LOG_LEVEL, format=LOG_FORMAT, colorize=True)

    if settings.LOG_FILE:
        log_path = Path(settings.LOG_FILE)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_path),
            level=settings.LOG_LEVEL,
            format=LOG_FORMAT,
            rotation="10 MB",
            retention="14 days",
            enqueue=True,
        )
    logger.info(f"Logging configured at {settings.LOG_LEVEL}")
