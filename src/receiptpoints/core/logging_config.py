"""Logging configuration for the service and its diagnostics channel."""

import json
import logging
import logging.handlers
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DIAGNOSTICS_LOGGER = "receiptpoints.diagnostics"

# Attributes every LogRecord carries; anything else came in through `extra`.
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "stack_info",
        "exc_info",
        "exc_text",
        "message",
    }
)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_level: str = Field(default="INFO", description="Root log level")
    log_format: str = Field(default="text", description="Log format (json or text)")
    log_file: Path | None = Field(
        default=None, description="Rotating log file, disabled when unset"
    )
    max_file_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(default=5, description="Number of rotated files to keep")
    enable_console_output: bool = Field(
        default=True, description="Enable console logging"
    )

    def setup_directories(self) -> None:
        """Create the log file directory if it doesn't exist."""
        if self.log_file is not None:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName if record.funcName else "<unknown>",
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        log_entry.update(
            {
                key: value
                for key, value in record.__dict__.items()
                if key not in _RESERVED_ATTRS
            }
        )

        return json.dumps(log_entry, default=self._json_serializer, ensure_ascii=False)

    def _json_serializer(self, obj: Any) -> str:  # noqa: ANN401
        """JSON serializer for non-standard types."""
        if isinstance(obj, datetime):
            return obj.isoformat()
        return str(obj)


def _build_formatter(config: LoggingConfig) -> logging.Formatter:
    if config.log_format.lower() == "json":
        return StructuredFormatter()
    return logging.Formatter(TEXT_FORMAT)


def setup_logging(config: LoggingConfig) -> logging.Logger:
    """Configure the ``receiptpoints`` logger hierarchy.

    Handlers are attached to the package logger rather than the root logger so
    that uvicorn's own logging setup is left alone. Calling this again replaces
    the handlers instead of stacking duplicates.
    """
    config.setup_directories()

    app_logger = logging.getLogger("receiptpoints")
    app_logger.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))
    app_logger.handlers.clear()

    formatter = _build_formatter(config)

    if config.log_file is not None:
        file_handler = logging.handlers.RotatingFileHandler(
            filename=config.log_file,
            maxBytes=config.max_file_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        app_logger.addHandler(file_handler)

    if config.enable_console_output:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        app_logger.addHandler(console_handler)

    app_logger.propagate = False

    return app_logger


def get_diagnostics_logger() -> logging.Logger:
    """Logger that records field parse failures met while scoring."""
    return logging.getLogger(DIAGNOSTICS_LOGGER)
