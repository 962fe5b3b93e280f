"""
Application Logger

One ``talentflow`` logger, configured from LOG_LEVEL, LOG_JSON and LOG_FILE,
with a child per module (``app_logger.getChild("assessments.runtime")``).

Context such as the share link a respondent opened or the assessment being
edited is attached through LoggerAdapter. The JSON formatter lifts the
well-known context fields to the top level so log lines can be filtered by
assessment or share link; any other context stays under ``data``.
"""

import os
import sys
import json
import time
import logging
import datetime
import functools
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar, Union

DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-30s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Context keys promoted to top-level JSON fields
CONTEXT_FIELDS = ("assessment_id", "share_link", "candidate_id")

F = TypeVar('F', bound=Callable[..., Awaitable[Any]])

__all__ = [
    'CONTEXT_FIELDS',
    'JsonFormatter',
    'LoggerAdapter',
    'app_logger',
    'configure_logger',
    'log_execution_time',
    'with_context',
]


def _record_context(record: logging.LogRecord) -> Dict[str, Any]:
    data = getattr(record, 'data', None)
    return dict(data) if isinstance(data, dict) else {}


class TextFormatter(logging.Formatter):
    """Plain formatter that appends adapter context as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _record_context(record)
        if context:
            pairs = " ".join(f"{key}={value}" for key, value in sorted(context.items()))
            line = f"{line} [{pairs}]"
        return line


class JsonFormatter(logging.Formatter):
    """
    Formatter that outputs one JSON object per log record.

    Every object carries the CONTEXT_FIELDS keys (null when the record has
    no such context) and a ``data`` object with the remaining context.
    """

    def format(self, record: logging.LogRecord) -> str:
        context = _record_context(record)
        log_object = {
            "timestamp": datetime.datetime.fromtimestamp(
                record.created, datetime.timezone.utc
            ).isoformat(),
            "name": record.name,
            "level": record.levelname,
            "message": record.getMessage(),
        }
        for field_name in CONTEXT_FIELDS:
            log_object[field_name] = context.pop(field_name, None)
        log_object["data"] = context

        if record.exc_info:
            log_object["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
            }

        return json.dumps(log_object, default=str)


def configure_logger(
    name: str = "talentflow",
    level: Union[str, int] = logging.INFO,
    use_json: bool = False,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure a logger with a stdout handler and an optional file handler.

    Args:
        name: Logger name
        level: Log level name or number
        use_json: Emit JSON lines instead of plain text
        log_file: Path of a log file to append to

    Returns:
        Configured logger
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers = []

    formatter = JsonFormatter() if use_json else TextFormatter(DEFAULT_LOG_FORMAT, DEFAULT_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


class LoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that attaches context to every record as ``extra['data']``.

    Used to tag every message from one runtime session or service call with
    the assessment id or share link it concerns.
    """

    def __init__(self, logger: logging.Logger, context: Optional[Dict[str, Any]] = None):
        super().__init__(logger, context or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        kwargs = kwargs.copy()
        extra = dict(kwargs.get('extra') or {})
        data = dict(self.extra)
        data.update(extra.get('data') or {})
        extra['data'] = data
        kwargs['extra'] = extra
        return msg, kwargs

    def with_context(self, **context) -> 'LoggerAdapter':
        """Return a new adapter with ``context`` added to this one's."""
        return LoggerAdapter(self.logger, {**self.extra, **context})


def with_context(name: Optional[str] = None, **context) -> LoggerAdapter:
    """
    Adapter over ``app_logger`` (or its ``name`` child) carrying ``context``.

    Args:
        name: Child logger name, relative to the application logger
        context: Context fields to attach
    """
    logger = app_logger.getChild(name) if name else app_logger
    return LoggerAdapter(logger, context)


app_logger = configure_logger(
    name="talentflow",
    level=os.environ.get("LOG_LEVEL", "INFO"),
    use_json=os.environ.get("LOG_JSON", "false").lower() == "true",
    log_file=os.environ.get("LOG_FILE"),
)


def log_execution_time(logger: Optional[logging.Logger] = None) -> Callable[[F], F]:
    """
    Decorator logging how long a coroutine function took.

    Successful calls are logged at DEBUG, failures at ERROR before the
    exception is re-raised.
    """
    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            target = logger or app_logger
            start_time = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                target.error(
                    f"{func.__name__} failed after {time.perf_counter() - start_time:.3f} seconds: {e}"
                )
                raise
            target.debug(f"{func.__name__} executed in {time.perf_counter() - start_time:.3f} seconds")
            return result

        return wrapper

    return decorator
