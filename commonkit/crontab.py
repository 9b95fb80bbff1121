"""Command-line front end for scheduled jobs."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable

_root: argparse.ArgumentParser | None = None
_subparsers: Any = None


class ArgType(IntEnum):
    STRING = 1
    INT = 2
    SLICE = 3


@dataclass
class Flag:
    name: str
    short_name: str = ""
    type: ArgType = ArgType.STRING
    remark: str = ""


@dataclass
class Runner:
    """A job command; ``run`` receives the parsed options and positional arguments."""

    cmd: str
    remark: str = ""
    run: Callable[[argparse.Namespace, list[str]], Any] | None = None
    flags: list[Flag] = field(default_factory=list)


class _SliceAction(argparse.Action):
    def __call__(self, parser, namespace, values, option_string=None):
        current = getattr(namespace, self.dest, None)
        items = list(current) if isinstance(current, list) else []
        items.extend(v for v in values.split(",") if v != "")
        setattr(namespace, self.dest, items)


def _uint8(text: str) -> int:
    try:
        value = int(text, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid uint8 value: {text!r}") from None
    if not 0 <= value <= 255:
        raise argparse.ArgumentTypeError(f"value out of range: {text!r}")
    return value


def _names(long: str, short: str) -> list[str]:
    return [f"-{short}", f"--{long}"] if short else [f"--{long}"]


def _add_global(parser: argparse.ArgumentParser, suppress: bool) -> None:
    def default(value: Any) -> Any:
        return argparse.SUPPRESS if suppress else value

    parser.add_argument("-d", "--date", default=default(""), help="日期,格式为YYYY-MM-DD")
    parser.add_argument("-f", "--date-flag", type=_uint8, default=default(0),
                        help="日期标志, -1 昨天, 0 当天, 1 指定日期")
    parser.add_argument("-a", "--app-list", action=_SliceAction, default=default([]), help="应用列表")
    parser.add_argument("-c", "--conf", default=default("config.yaml"), help="配置文件")


def new() -> argparse.ArgumentParser:
    """Return the root parser, creating it on first use."""
    global _root, _subparsers
    if _root is None:
        _root = argparse.ArgumentParser(prog="crontab", description="定时任务系统")
        _add_global(_root, suppress=False)
        _subparsers = _root.add_subparsers(dest="command")
    return _root


def add_command(runner: Runner) -> None:
    """Register a job command with its own flags."""
    new()
    sub = _subparsers.add_parser(runner.cmd, help=runner.remark, description=runner.remark)
    _add_global(sub, suppress=True)
    for flag in runner.flags:
        names = _names(flag.name, flag.short_name)
        if flag.type == ArgType.INT:
            sub.add_argument(*names, type=int, default=0, help=flag.remark)
        elif flag.type == ArgType.STRING:
            sub.add_argument(*names, default="", help=flag.remark)
        elif flag.type == ArgType.SLICE:
            sub.add_argument(*names, action=_SliceAction, default=[], help=flag.remark)
    sub.add_argument("args", nargs="*")
    sub.set_defaults(_runner=runner)


def execute(argv: list[str] | None = None) -> None:
    """Parse ``argv`` and run the selected command; print help if none is given."""
    parser = new()
    namespace = parser.parse_args(argv)
    runner = getattr(namespace, "_runner", None)
    if runner is None:
        parser.print_help()
        return
    del namespace._runner
    args = list(getattr(namespace, "args", []))
    if runner.run is not None:
        runner.run(namespace, args)