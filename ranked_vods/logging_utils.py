"""Logging helpers for rate limiting repeated warnings."""
from __future__ import annotations

import logging
import threading
import time
from typing import Any, Dict, Iterable, Tuple


class RateLimitedLogger:
    """Wrapper that rate-limits log messages by an arbitrary key."""

    def __init__(
        self,
        logger: logging.Logger,
        window_seconds: float = 60.0,
    ) -> None:
        self._logger = logger
        self._window = float(max(window_seconds, 0))
        self._last_logged: Dict[Tuple[Any, ...], float] = {}
        self._lock = threading.Lock()

    def _should_emit(self, key: Tuple[Any, ...]) -> bool:
        now = time.monotonic()
        with self._lock:
            last = self._last_logged.get(key)
            if last is not None and (now - last) < self._window:
                return False
            self._last_logged[key] = now
            return True

    def log(self, level: int, key: Iterable[Any], msg: str, *args: Any, **kwargs: Any) -> bool:
        key_tuple = tuple(key)
        if not self._should_emit(key_tuple):
            return False
        self._logger.log(level, msg, *args, **kwargs)
        return True

    def warning(self, key: Iterable[Any], msg: str, *args: Any, **kwargs: Any) -> bool:
        return self.log(logging.WARNING, key, msg, *args, **kwargs)

    def reset(self) -> None:
        """Test helper to forget previously emitted keys."""

        with self._lock:
            self._last_logged.clear()
