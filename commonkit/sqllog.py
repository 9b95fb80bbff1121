"""SQL query logging that routes through the global logger."""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Any, Callable

from commonkit import logger


class LogLevel(IntEnum):
    SILENT = 1
    ERROR = 2
    WARN = 3
    INFO = 4


class RecordNotFoundError(Exception):
    """Raised when a query finds no record."""

    def __init__(self, message: str = "record not found") -> None:
        super().__init__(message)


def _duration(seconds: float) -> str:
    if seconds >= 1:
        return f"{seconds:.6g}s"
    if seconds >= 1e-3:
        return f"{seconds * 1e3:.6g}ms"
    return f"{seconds * 1e6:.6g}µs"


@dataclass
class SqlLogger:
    """Query logger; ``slow_threshold`` is in seconds, 0 disables slow detection."""

    log_level: int = LogLevel.WARN
    ignore_record_not_found_error: bool = False
    slow_threshold: float = 0.0

    def log_mode(self, level: int) -> SqlLogger:
        return replace(self, log_level=level)

    def info(self, ctx: Any, msg: str, *args: Any) -> None:
        if self.log_level >= LogLevel.INFO:
            logger.infof(ctx, msg, *args)

    def warn(self, ctx: Any, msg: str, *args: Any) -> None:
        if self.log_level >= LogLevel.WARN:
            logger.warnf(ctx, msg, *args)

    def error(self, ctx: Any, msg: str, *args: Any) -> None:
        if self.log_level >= LogLevel.ERROR:
            logger.errorf(ctx, msg, *args)

    def trace(
        self,
        ctx: Any,
        begin: float,
        fc: Callable[[], tuple[str, int]],
        err: BaseException | None,
    ) -> None:
        """Log a finished query; ``begin`` is a ``time.monotonic()`` reading."""
        if self.log_level <= 0:
            return
        elapsed = time.monotonic() - begin
        template = "err=%s elapsed=%s rows=%d sql=%s"
        text = str(err) if err is not None else ""
        if (
            err is not None
            and self.log_level >= LogLevel.ERROR
            and not (self.ignore_record_not_found_error and isinstance(err, RecordNotFoundError))
        ):
            sql, rows = fc()
            logger.errorf(ctx, template, text, _duration(elapsed), rows, sql)
        elif self.slow_threshold and elapsed > self.slow_threshold and self.log_level >= LogLevel.WARN:
            sql, rows = fc()
            logger.warnf(ctx, template, text, _duration(elapsed), rows, sql)
        elif self.log_level >= LogLevel.INFO:
            sql, rows = fc()
            logger.infof(ctx, template, text, _duration(elapsed), rows, sql)