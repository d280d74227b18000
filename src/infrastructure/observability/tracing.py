"""Tracing helpers for instrumenting service operations with OpenTelemetry."""

import asyncio
from collections.abc import Callable
from functools import wraps
from typing import Any, ParamSpec, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode, Tracer

P = ParamSpec("P")
R = TypeVar("R")

Attributes = dict[str, str | int | float | bool]


def get_tracer(name: str) -> Tracer:
    """Get a tracer for the given module name."""
    return trace.get_tracer(name)


def add_span_attributes(attributes: Attributes) -> None:
    """Add attributes to the current span, if one is recording."""
    span = trace.get_current_span()
    if span.is_recording():
        for key, value in attributes.items():
            span.set_attribute(key, value)


def get_current_trace_id() -> str | None:
    """Get the current trace ID as a 32-character hex string, or None."""
    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        return format(span_context.trace_id, "032x")
    return None


def traced(
    *,
    span_name: str | None = None,
    attributes: Attributes | None = None,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Decorator running a function inside an OpenTelemetry span.

    Works with both sync and async functions. The tracer is looked up on
    each call, so spans go to whichever provider is current.

    Args:
        span_name: Name for the span (defaults to the function name).
        attributes: Static attributes to add to the span.

    Examples:
        @traced(span_name="auth.login_user")
        async def login_user(...):
            ...
    """

    def decorator(fn: Callable[P, R]) -> Callable[P, R]:
        name = span_name or fn.__name__

        def start_span() -> Any:
            # Exceptions are recorded by finish(), not by the context manager.
            return get_tracer(fn.__module__).start_as_current_span(
                name, record_exception=False, set_status_on_exception=False
            )

        def finish(span: trace.Span, error: Exception | None) -> None:
            if error is None:
                span.set_status(Status(StatusCode.OK))
                return
            span.record_exception(error)
            span.set_status(Status(StatusCode.ERROR, str(error)))

        if asyncio.iscoroutinefunction(fn):

            @wraps(fn)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> Any:
                with start_span() as span:
                    if attributes:
                        span.set_attributes(attributes)
                    try:
                        result = await fn(*args, **kwargs)
                    except Exception as e:
                        finish(span, e)
                        raise
                    finish(span, None)
                    return result

            return async_wrapper  # type: ignore[return-value]

        @wraps(fn)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            with start_span() as span:
                if attributes:
                    span.set_attributes(attributes)
                try:
                    result = fn(*args, **kwargs)
                except Exception as e:
                    finish(span, e)
                    raise
                finish(span, None)
                return result

        return sync_wrapper

    return decorator
