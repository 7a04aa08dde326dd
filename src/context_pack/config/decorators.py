"""Logging decorators for context-pack entry points.

``log_call`` traces a call (entry, completion, failure) and ``timed``
reports its duration. Both attach their details as ``extra=`` fields so
the structured log format in ``settings.setup_logging`` can pick them up.
"""

import functools
import logging
import time
from typing import Any, Callable, Optional, TypeVar

T = TypeVar("T")
Decorator = Callable[[Callable[..., T]], Callable[..., T]]


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def log_call(logger_name: Optional[str] = None) -> Decorator:
    """Trace calls of the wrapped function at DEBUG, failures at ERROR.

    Exceptions are logged with their type and always re-raised.

    Args:
        logger_name: Logger to write to; defaults to the function's module
    """

    def wrap(func: Callable[..., T]) -> Callable[..., T]:
        log = logging.getLogger(logger_name or func.__module__)
        label = func.__qualname__

        @functools.wraps(func)
        def traced(*args: Any, **kwargs: Any) -> T:
            fields = {"function": func.__name__}
            log.debug(
                f"Calling {label}",
                extra={**fields, "args_count": len(args), "kwargs_keys": sorted(kwargs)},
            )
            try:
                outcome = func(*args, **kwargs)
            except Exception as exc:
                log.error(
                    f"{label} raised {type(exc).__name__}: {exc}",
                    extra={**fields, "error": str(exc), "error_type": type(exc).__name__},
                )
                raise
            log.debug(f"Completed {label}", extra={**fields, "success": True})
            return outcome

        return traced

    return wrap


def timed(metric_name: Optional[str] = None) -> Decorator:
    """Log one INFO "Timer" record per call with its duration and outcome.

    Args:
        metric_name: Name reported in the ``metric`` field; defaults to
            the function name
    """

    def wrap(func: Callable[..., T]) -> Callable[..., T]:
        metric = metric_name or func.__name__
        log = logging.getLogger(func.__module__)

        @functools.wraps(func)
        def measured(*args: Any, **kwargs: Any) -> T:
            started = time.perf_counter()
            succeeded = False
            try:
                outcome = func(*args, **kwargs)
                succeeded = True
                return outcome
            finally:
                log.info(
                    f"Timer: {metric}",
                    extra={
                        "metric": metric,
                        "duration_ms": _elapsed_ms(started),
                        "success": succeeded,
                    },
                )

        return measured

    return wrap
