import contextvars
import logging
import os
import sys
from contextlib import contextmanager
from typing import Iterator, Optional

_current_job: contextvars.ContextVar[str] = contextvars.ContextVar("redsplit_job", default="-")

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(job)s] - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class JobNameFilter(logging.Filter):
    """Tag log records with the file currently being split or restored."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, 'job'):
            record.job = _current_job.get()
        return True


@contextmanager
def job_context(job_name: str) -> Iterator[None]:
    """
    Bind a job name to log records emitted in the current thread/context.

    Args:
        job_name: Usually the base name of the file being processed
    """
    token = _current_job.set(job_name)
    try:
        yield
    finally:
        _current_job.reset(token)


def setup_logging(
    component_name: str,
    log_level: Optional[str] = None,
) -> logging.Logger:
    """
    Set up logging configuration for a component.

    Handlers are attached to the root logger so that module loggers
    (``core.splitter``, ``core.restorer``...) share the same output.

    Args:
        component_name: Name of the component (e.g., 'cli')
        log_level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to LOG_LEVEL env var or INFO

    Returns:
        Configured logger instance for the component
    """
    if log_level is None:
        log_level = os.getenv('LOG_LEVEL', 'INFO')

    level = getattr(logging, log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    if not any(getattr(h, '_redsplit', False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler._redsplit = True
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        handler.addFilter(JobNameFilter())
        root.addHandler(handler)

    for handler in root.handlers:
        if getattr(handler, '_redsplit', False):
            handler.setLevel(level)

    return logging.getLogger(component_name)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
