"""Structured JSON logging with context fields and daily rotating files."""

from __future__ import annotations

import glob
import json
import logging
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "PANIC": logging.CRITICAL,
    "FATAL": logging.CRITICAL,
}


@dataclass
class Options:
    """Logger configuration."""

    ctx_fields: list[str] = field(default_factory=list)
    filename: str = "app.log"
    max_count: int = 0
    caller_enable: bool = False
    log_level: int = logging.INFO
    close_console: bool = False


class _DailyFileHandler(logging.Handler):
    """Writes to ``<base>.YYYYMMDD.log``, links ``<base>`` to it, keeps ``max_count`` files."""

    def __init__(self, base: str, max_count: int) -> None:
        super().__init__()
        self._base = base
        self._max_count = max_count
        self._day: str | None = None
        self._stream = None

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = self.format(record)
            day = datetime.now().strftime("%Y%m%d")
            if day != self._day:
                self._rotate(day)
            self._stream.write(line + "\n")
        except Exception:
            self.handleError(record)

    def _rotate(self, day: str) -> None:
        if self._stream is not None:
            self._stream.close()
        path = f"{self._base}.{day}.log"
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self._stream = open(path, "a", encoding="utf-8")
        self._day = day
        try:
            if os.path.islink(self._base):
                os.remove(self._base)
            if not os.path.lexists(self._base):
                os.symlink(os.path.abspath(path), self._base)
        except OSError:
            pass
        if self._max_count > 0:
            files = sorted(glob.glob(glob.escape(self._base) + ".*.log"))
            for old in files[: -self._max_count]:
                try:
                    os.remove(old)
                except OSError:
                    pass

    def flush(self) -> None:
        if self._stream is not None:
            self._stream.flush()

    def close(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None
        super().close()


def _entry(record: logging.LogRecord, caller: bool) -> tuple[dict[str, Any], dict[str, Any]]:
    head: dict[str, Any] = {
        "level": getattr(record, "zap_level", record.levelname),
        "timestamp": datetime.fromtimestamp(record.created).strftime(TIME_FORMAT),
    }
    if caller:
        head["file"] = f"{os.path.basename(record.pathname)}:{record.lineno}"
    head["message"] = record.getMessage()
    return head, dict(getattr(record, "fields", {}))


class _JsonFormatter(logging.Formatter):
    def __init__(self, caller: bool) -> None:
        super().__init__()
        self._caller = caller

    def format(self, record: logging.LogRecord) -> str:
        head, fields = _entry(record, self._caller)
        return json.dumps({**head, **fields}, ensure_ascii=False, default=str)


class _ConsoleFormatter(_JsonFormatter):
    def format(self, record: logging.LogRecord) -> str:
        head, fields = _entry(record, self._caller)
        text = "\t".join(str(v) for v in head.values())
        if fields:
            text += "\t" + json.dumps(fields, ensure_ascii=False, default=str)
        return text


_log = logging.getLogger("commonkit")
_log.propagate = False
_state: dict[str, Any] = {"ctx_fields": [], "fields": {}, "ready": False}


def init_log(options: Options, **kwargs: Any) -> None:
    """Configure the global logger; keyword arguments become fields on every entry."""
    for handler in list(_log.handlers):
        _log.removeHandler(handler)
        handler.close()
    _log.setLevel(options.log_level)
    handlers: list[logging.Handler] = []
    if not options.close_console:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(_ConsoleFormatter(options.caller_enable))
        handlers.append(console)
    file_handler = _DailyFileHandler(options.filename, options.max_count)
    file_handler.setFormatter(_JsonFormatter(options.caller_enable))
    handlers.append(file_handler)
    for handler in handlers:
        handler.setLevel(options.log_level)
        _log.addHandler(handler)
    _state.update(ctx_fields=list(options.ctx_fields), fields=dict(kwargs), ready=True)


def _ctx_fields(ctx: Mapping[str, Any] | None) -> dict[str, Any]:
    if not ctx:
        return {}
    return {k: str(ctx[k]) for k in _state["ctx_fields"] if ctx.get(k) is not None}


def _pairs(args: tuple[Any, ...]) -> dict[str, Any]:
    fields = {str(k): v for k, v in zip(args[0::2], args[1::2])}
    if len(args) % 2:
        fields["ignored"] = args[-1]
    return fields


def _format(template: str, args: tuple[Any, ...]) -> str:
    return template % args if args else template


def _emit(level: str, msg: str, fields: dict[str, Any]) -> None:
    if not _state["ready"]:
        raise RuntimeError("logger is not initialised; call init_log first")
    _log.log(
        _LEVELS[level],
        msg,
        extra={"zap_level": level, "fields": {**_state["fields"], **fields}},
        stacklevel=3,
    )
    if level == "PANIC":
        raise RuntimeError(msg)
    if level == "FATAL":
        sync()
        raise SystemExit(1)


class BoundLogger:
    """A logger that adds fixed fields to every entry."""

    def __init__(self, fields: Mapping[str, Any]) -> None:
        self._fields = dict(fields)

    def bind(self, **kwargs: Any) -> BoundLogger:
        return BoundLogger({**self._fields, **kwargs})

    def debug(self, msg: str, **kwargs: Any) -> None:
        _emit("DEBUG", msg, {**self._fields, **kwargs})

    def info(self, msg: str, **kwargs: Any) -> None:
        _emit("INFO", msg, {**self._fields, **kwargs})

    def warn(self, msg: str, **kwargs: Any) -> None:
        _emit("WARN", msg, {**self._fields, **kwargs})

    def error(self, msg: str, **kwargs: Any) -> None:
        _emit("ERROR", msg, {**self._fields, **kwargs})


def bind(**kwargs: Any) -> BoundLogger:
    """Return a logger carrying the given fields."""
    return BoundLogger(kwargs)


def sync() -> None:
    """Flush all outputs."""
    for handler in _log.handlers:
        handler.flush()


def debug(ctx, msg, **kwargs):
    _emit("DEBUG", msg, {**_ctx_fields(ctx), **kwargs})


def debugw(ctx, msg, *args):
    _emit("DEBUG", msg, {**_ctx_fields(ctx), **_pairs(args)})


def debugf(ctx, template, *args):
    _emit("DEBUG", _format(template, args), _ctx_fields(ctx))


def info(ctx, msg, **kwargs):
    _emit("INFO", msg, {**_ctx_fields(ctx), **kwargs})


def infow(ctx, msg, *args):
    _emit("INFO", msg, {**_ctx_fields(ctx), **_pairs(args)})


def infof(ctx, template, *args):
    _emit("INFO", _format(template, args), _ctx_fields(ctx))


def with_infof(ctx, field, template, *args):
    _emit("INFO", _format(template, args), {**_ctx_fields(ctx), **dict(field)})


def warn(ctx, msg, **kwargs):
    _emit("WARN", msg, {**_ctx_fields(ctx), **kwargs})


def warnw(ctx, msg, *args):
    _emit("WARN", msg, {**_ctx_fields(ctx), **_pairs(args)})


def warnf(ctx, template, *args):
    _emit("WARN", _format(template, args), _ctx_fields(ctx))


def error(ctx, msg, **kwargs):
    _emit("ERROR", msg, {**_ctx_fields(ctx), **kwargs})


def errorw(ctx, msg, *args):
    _emit("ERROR", msg, {**_ctx_fields(ctx), **_pairs(args)})


def errorf(ctx, template, *args):
    _emit("ERROR", _format(template, args), _ctx_fields(ctx))


def fatal(ctx, msg, **kwargs):
    _emit("FATAL", msg, {**_ctx_fields(ctx), **kwargs})


def fatalf(ctx, template, *args):
    _emit("FATAL", _format(template, args), _ctx_fields(ctx))


def panic(ctx, msg, **kwargs):
    _emit("PANIC", msg, {**_ctx_fields(ctx), **kwargs})


def panicf(ctx, template, *args):
    _emit("PANIC", _format(template, args), _ctx_fields(ctx))