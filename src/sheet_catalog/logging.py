"""
Structured logging for the sheet catalog build.

Console output for interactive runs, JSON lines for CI. Everything goes to
stderr; stdout carries only the one-line run summary. Run-scoped fields
(run_id, table) are bound with structlog's contextvars so concurrent table
loads each log their own table name.
"""

import logging
import sys
import time
from contextlib import contextmanager
from typing import Any, Generator

import structlog
from structlog.types import Processor


def configure_logging(json_output: bool = False, log_level: str = 'INFO') -> None:
    """
    Configure structlog for a build run.

    Args:
        json_output: Emit one JSON object per line instead of console output
        log_level: Minimum level to emit
    """
    level_num = getattr(logging, log_level.upper(), logging.INFO)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt='iso'),
    ]
    if json_output:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


@contextmanager
def logging_context(**fields: Any) -> Generator[None, None, None]:
    """
    Bind fields (e.g. run_id, table) to every log event inside the block.

    None values are ignored. Fields passed explicitly to a log call win
    over bound ones.
    """
    bound = {k: v for k, v in fields.items() if v is not None}
    with structlog.contextvars.bound_contextvars(**bound):
        yield


class PipelineTimer:
    """
    Wall-clock durations of named pipeline stages, in milliseconds.

    Usage:
        timer = PipelineTimer()
        with timer.stage("fetch"):
            ...
        timer.summary()  # {"total_ms": ..., "stages": {"fetch": ...}}
    """

    def __init__(self):
        self.stages: dict[str, float] = {}
        self._started = time.perf_counter()

    @contextmanager
    def stage(self, name: str) -> Generator[None, None, None]:
        began = time.perf_counter()
        try:
            yield
        finally:
            self.stages[name] = (time.perf_counter() - began) * 1000

    def summary(self) -> dict[str, Any]:
        total = (time.perf_counter() - self._started) * 1000
        return {
            'total_ms': round(total, 2),
            'stages': {k: round(v, 2) for k, v in self.stages.items()},
        }
