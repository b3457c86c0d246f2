import logging
import logging.config
import os
import sys
import time
import uuid
from typing import Optional, Sequence

import structlog


def configure_logging(log_level: str = "INFO", log_file: Optional[str] = None):
    """
    Set up structlog and the root handlers for the planning service.

    Events are rendered as JSON lines. Anything logged while a plan operation
    is running picks up its plan_id, operation_type and operation_id.

    Args:
        log_level: Level name for the root logger and every handler
        log_file: Rotating log file to write besides stdout, if any
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "level": log_level,
            "formatter": "plain",
            "stream": sys.stdout,
        }
    }
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": log_level,
            "formatter": "plain",
            "filename": log_file,
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
        }

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        # structlog has already rendered the event to a JSON string
        "formatters": {"plain": {"format": "%(message)s"}},
        "handlers": handlers,
        "root": {"level": log_level, "handlers": list(handlers)},
    })

    logger = structlog.get_logger("planview")
    logger.info("Logging configured", level=log_level, file=log_file)
    return logger


def get_logger(name: str) -> structlog.BoundLogger:
    """Named structlog logger; picks up any plan operation context bound at call time."""
    return structlog.get_logger(name)


class OperationContext:
    """
    Context manager around one plan mutation.

    Binds the plan and a short operation id into the logging context so the
    operator's own events can be correlated, then logs how the operation
    ended: completed, rejected (a SchedulingError the user can correct) or
    failed (anything else). Exceptions are never suppressed.
    """

    def __init__(self, operation_type: str, plan_id: Optional[str] = None, operation_id: Optional[str] = None):
        self.operation_type = operation_type
        self.plan_id = plan_id
        self.operation_id = operation_id or uuid.uuid4().hex[:8]
        self.task_ids: Sequence[str] = ()
        self.logger = get_logger("planview.operations")
        self._started = None
        self._bound_tokens = None

    def record(self, task_ids: Sequence[str]) -> None:
        """Remember the task ids the operation produced, for the completion event."""
        self.task_ids = tuple(task_ids)

    def __enter__(self):
        self._bound_tokens = structlog.contextvars.bind_contextvars(
            plan_id=self.plan_id,
            operation_type=self.operation_type,
            operation_id=self.operation_id,
        )
        self._started = time.monotonic()
        self.logger.info("Plan operation started")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        from planview.scheduling.errors import SchedulingError

        duration = round(time.monotonic() - self._started, 4)
        try:
            if exc_type is None:
                self.logger.info(
                    "Plan operation completed",
                    duration_seconds=duration,
                    task_ids=list(self.task_ids),
                )
            elif issubclass(exc_type, SchedulingError):
                self.logger.warning(
                    "Plan operation rejected",
                    duration_seconds=duration,
                    error_type=exc_type.__name__,
                    error_message=str(exc_val),
                )
            else:
                self.logger.error(
                    "Plan operation failed",
                    duration_seconds=duration,
                    error_type=exc_type.__name__,
                    error_message=str(exc_val),
                )
        finally:
            structlog.contextvars.reset_contextvars(**self._bound_tokens)
        return False
