"""Request logging for search-engine HTTP round trips."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from commonkit import logger


def _read_body(request: Any) -> str | None:
    get_body = getattr(request, "get_body", None)
    body = get_body() if callable(get_body) else getattr(request, "body", None)
    if body is None:
        return None
    if hasattr(body, "read"):
        body = body.read()
    if isinstance(body, (bytes, bytearray)):
        body = bytes(body).decode("utf-8", errors="replace")
    return str(body)


@dataclass
class EsLogger:
    request_enabled: bool = False
    response_enabled: bool = False

    def log_round_trip(self, request: Any, response: Any, err: Any, start: Any, elapsed: Any) -> None:
        """Log each non-empty line of the request body."""
        if not self.request_body_enabled() or request is None:
            return None
        try:
            body = _read_body(request)
        except Exception as exc:
            logger.errorf(None, "ES日志error: %s", exc)
            return None
        if not body:
            return None
        for line in body.split("\n"):
            line = line.rstrip("\r")
            if line:
                logger.infof(None, "ES日志: 请求参数: %s; 时间: %s; 消耗：%s", line, start, elapsed)
        return None

    def request_body_enabled(self) -> bool:
        return self.request_enabled

    def response_body_enabled(self) -> bool:
        return self.response_enabled