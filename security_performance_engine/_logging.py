"""Logging helpers.

Package logger plus the instrumentation decorators used on the public
calculation entrypoints.
"""

from __future__ import annotations

import functools
import logging
import time
from typing import Any, Callable


performance_logger = logging.getLogger("security_performance_engine")


def log_operation(name: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Log start and completion of a named operation at debug level."""

    def deco(fn: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            performance_logger.debug("[%s] started", name)
            result = fn(*args, **kwargs)
            performance_logger.debug("[%s] completed", name)
            return result

        return wrapper

    return deco


def log_timing(threshold: float = 0.0) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Warn when the wrapped call takes longer than ``threshold`` seconds."""

    def deco(fn: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            started = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                elapsed = time.perf_counter() - started
                if elapsed > threshold:
                    performance_logger.warning(
                        "slow_operation: %s took %.3fs (threshold %.3fs)",
                        fn.__qualname__,
                        elapsed,
                        threshold,
                    )

        return wrapper

    return deco


def log_errors(severity: str = "medium") -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Log exceptions raised by the wrapped call, then re-raise them."""

    def deco(fn: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return fn(*args, **kwargs)
            except Exception as exc:
                performance_logger.error(
                    "error[%s] in %s: %s: %s",
                    severity,
                    fn.__qualname__,
                    type(exc).__name__,
                    exc,
                )
                raise

        return wrapper

    return deco


def log_performance_operation(
    event: str,
    details: dict[str, Any] | None = None,
    execution_time: float | None = None,
) -> dict[str, Any]:
    if details:
        performance_logger.info("[%s] %s", event, details)
    else:
        performance_logger.info("[%s]", event)
    return {"event": event, "details": details or {}, "execution_time": execution_time}
