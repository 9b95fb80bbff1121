"""A writable stream that logs every line written to it."""

from __future__ import annotations

import threading
from typing import Any

from commonkit import logger

MAX_TOKEN_LENGTH = 64 * 1024 // 2


class SafeWriter:
    """File-like sink: each complete line (or chunk of ``MAX_TOKEN_LENGTH`` bytes) is logged at info level."""

    def __init__(self, ctx: Any = None) -> None:
        self._ctx = ctx
        self._buf = bytearray()
        self._closed = False
        self._lock = threading.Lock()

    def write(self, data: bytes | str) -> int:
        if isinstance(data, str):
            data = data.encode("utf-8")
        with self._lock:
            if self._closed:
                raise ValueError("write to closed writer")
            self._buf.extend(data)
            self._drain(at_eof=False)
        return len(data)

    def flush(self) -> None:
        """Lines are logged as they complete; nothing is held back but a partial line."""

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._drain(at_eof=True)

    def _drain(self, at_eof: bool) -> None:
        while self._buf:
            idx = self._buf.find(b"\n")
            if idx >= 0:
                token = bytes(self._buf[:idx])
                del self._buf[: idx + 1]
                if token.endswith(b"\r"):
                    token = token[:-1]
            elif len(self._buf) >= MAX_TOKEN_LENGTH:
                token = bytes(self._buf[:MAX_TOKEN_LENGTH])
                del self._buf[:MAX_TOKEN_LENGTH]
            elif at_eof:
                token = bytes(self._buf)
                self._buf.clear()
            else:
                break
            self._emit(token.decode("utf-8", errors="replace"))

    def _emit(self, text: str) -> None:
        if text.replace(" ", "") == "":
            return
        logger.infof(self._ctx, text)

    def __enter__(self) -> SafeWriter:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __del__(self) -> None:
        try:
            self.close()
        except Exception:
            pass


def safe_writer(ctx: Any) -> SafeWriter:
    """Return a writer that logs what is written to it."""
    return SafeWriter(ctx)