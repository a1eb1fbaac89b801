import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

# Chatty third-party loggers kept at WARNING
QUIET_LOGGERS = ('aiohttp', 'aiohttp.access', 'redis', 'asyncio')


def setup_logging(
    debug_mode: bool = False,
    log_level: str = "INFO",
    log_dir: Optional[str] = "data/logs"
):
    """Console logging plus a rotating ``wisdom.log`` under ``log_dir``.

    Pass ``log_dir=None`` to log to the console only.
    """
    level = logging.DEBUG if debug_mode else getattr(logging, log_level.upper(), logging.INFO)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s | %(levelname)-8s | %(name)-30s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_path / 'wisdom.log',
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s | %(levelname)-8s | %(name)-30s | %(funcName)-24s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Logging configured (level={logging.getLevelName(level)}, "
        f"file={'on' if log_dir else 'off'})"
    )
