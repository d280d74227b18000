"""Structlog processor for OpenTelemetry trace context injection."""

from typing import Any

from opentelemetry import trace


def add_trace_context(
    logger: Any,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add trace_id and span_id of the active span to a log event.

    Lets an auth failure logged inside ``auth.login_user`` be matched with
    its span. Events logged outside any span are returned unchanged.
    """
    span_context = trace.get_current_span().get_span_context()

    if span_context.is_valid:
        event_dict["trace_id"] = format(span_context.trace_id, "032x")
        event_dict["span_id"] = format(span_context.span_id, "016x")

    return event_dict
