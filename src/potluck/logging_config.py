"""Structured logging configuration for potluck."""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

# Context variables for command/recipe tracking
command_ctx: ContextVar[str | None] = ContextVar("command", default=None)
recipe_ctx: ContextVar[str | None] = ContextVar("recipe", default=None)


class StructuredJsonFormatter(logging.Formatter):
    """JSON formatter for machine-readable logs."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if command := command_ctx.get():
            log_data["command"] = command
        if recipe := recipe_ctx.get():
            log_data["recipe"] = recipe

        # Add extra fields from the record
        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data["location"] = {
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName,
        }

        return json.dumps(log_data)


class ContextualFormatter(logging.Formatter):
    """Human-readable formatter with command context."""

    def format(self, record: logging.LogRecord) -> str:
        context_parts = []
        if command := command_ctx.get():
            context_parts.append(f"cmd={command}")
        if recipe := recipe_ctx.get():
            context_parts.append(f"recipe={recipe}")

        context_str = f" [{', '.join(context_parts)}]" if context_parts else ""

        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname.ljust(8)
        message = record.getMessage()

        formatted = f"{timestamp} | {level} | {record.name}{context_str} | {message}"

        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        return formatted


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that automatically includes context variables."""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        extra = kwargs.get("extra", {})

        if command := command_ctx.get():
            extra["command"] = command
        if recipe := recipe_ctx.get():
            extra["recipe"] = recipe

        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str) -> ContextLogger:
    """Get a context-aware logger for the given module name."""
    logger = logging.getLogger(name)
    return ContextLogger(logger, {})


def configure_logging(log_level: str = "WARNING", json_format: bool = False) -> None:
    """
    Configure logging for the command line tool and the gallery server.

    Logs are written to stderr so command output on stdout stays pipeable.
    Callers resolve the level and format from the command line and
    ``POTLUCK_LOG_LEVEL``/``POTLUCK_LOG_FORMAT`` before calling.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON format for logs.
    """
    level_str = log_level.upper()
    level = getattr(logging, level_str, logging.WARNING)

    if json_format:
        formatter = StructuredJsonFormatter()
    else:
        formatter = ContextualFormatter()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    module_levels = {
        "potluck": level,
        "uvicorn": logging.INFO,
        "uvicorn.access": logging.WARNING,
    }

    for module_name, module_level in module_levels.items():
        logging.getLogger(module_name).setLevel(module_level)

    logger = get_logger(__name__)
    logger.debug(
        f"Logging configured: level={level_str}, format={'json' if json_format else 'text'}"
    )


class LoggingContext:
    """Context manager for setting logging context."""

    def __init__(self, command: str | None = None, recipe: str | None = None):
        self.command = command
        self.recipe = recipe
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> "LoggingContext":
        if self.command is not None:
            self._tokens["command"] = command_ctx.set(self.command)
        if self.recipe is not None:
            self._tokens["recipe"] = recipe_ctx.set(self.recipe)
        return self

    def __exit__(self, *args: Any) -> None:
        for name, token in self._tokens.items():
            ctx_var = {
                "command": command_ctx,
                "recipe": recipe_ctx,
            }[name]
            ctx_var.reset(token)
