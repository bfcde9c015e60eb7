"""Shared errors, console and logging helpers for GitConfusion."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

# Diagnostics go to stderr so the report on stdout stays clean
console = Console(stderr=True)


class GitConfusionError(Exception):
    """Base class for GitConfusion errors."""
    pass


class ConfigError(GitConfusionError, ValueError):
    """Raised when configuration is invalid."""
    pass


class TransportError(GitConfusionError):
    """Raised when a request fails before an HTTP status is received."""
    pass


class GitHubAPIError(GitConfusionError):
    """Raised when GitHub API returns an unexpected status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ManifestDecodeError(GitConfusionError):
    """Raised when a manifest cannot be deserialized."""
    pass


class RegistryProbeError(GitConfusionError):
    """Raised when a registry probe gives no usable verdict."""
    pass


class RateLimitError(GitConfusionError):
    """Raised when retries for a throttled request are exhausted."""

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


class JSONFormatter(logging.Formatter):
    """JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False)


def setup_logging(config, level: Optional[str] = None) -> logging.Logger:
    """Set up logging configuration.

    Args:
        config: Configuration object with logging settings.
        level: Optional level overriding the configured one.

    Returns:
        Configured logger instance.
    """
    log_level = getattr(logging, (level or config.logging.level).upper())

    logging.basicConfig(
        level=log_level,
        format=config.logging.format,
        handlers=[
            RichHandler(
                console=console,
                rich_tracebacks=True,
                show_path=False,
                show_time=False
            )
        ]
    )

    # JSON log file is opt-in
    if config.logging.file_path:
        log_path = Path(config.logging.file_path.format(
            date=datetime.now().strftime("%Y%m%d")
        ))
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setFormatter(JSONFormatter())
        file_handler.setLevel(log_level)
        logging.getLogger().addHandler(file_handler)

    return logging.getLogger("gitconfusion")
