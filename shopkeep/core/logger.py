"""
Centralized logging configuration for the shopkeep service
"""
import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler


# Log format configuration
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Default log directory
LOG_DIR = Path("logs")


def get_logger(name: str) -> logging.Logger:
    """
    Get or create a logger instance.

    Handlers are attached to the root logger by configure_app_logging(),
    so module loggers only need a name.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def configure_app_logging(
    level: int | str = logging.INFO,
    log_to_file: bool = True,
    log_file: str = "shopkeep.log",
    log_dir: Path = LOG_DIR,
) -> None:
    """
    Configure application-wide logging settings.

    This should be called once at application startup.

    Args:
        level: Root logging level, as a number or a level name (default: INFO)
        log_to_file: Whether to enable file logging (default: True)
        log_file: Log file name (default: "shopkeep.log")
        log_dir: Directory the log file is written to (default: ./logs)
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level}")

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_to_file:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_dir / log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
