"""Span decorator and helpers for the outbound calls (lookups, status emails)."""

import inspect
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, ParamSpec, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

P = ParamSpec("P")
R = TypeVar("R")

# Only these argument names become span attributes; emails and names are never recorded.
SAFE_ARGUMENT_NAMES = frozenset(
    {"order_id", "client_id", "engineer_id", "status", "entity", "event_type", "topic", "channel"}
)


def _argument_attributes(
    signature: inspect.Signature, args: tuple[Any, ...], kwargs: dict[str, Any]
) -> dict[str, str]:
    try:
        bound = signature.bind_partial(*args, **kwargs)
    except TypeError:
        return {}
    return {
        f"arg.{name}": str(value)
        for name, value in bound.arguments.items()
        if name in SAFE_ARGUMENT_NAMES and value is not None
    }


def traced(
    operation_name: str | None = None,
    attributes: dict[str, str | int | float | bool] | None = None,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Wrap a coroutine function in a span.

    Allowlisted arguments (positional or keyword) are recorded as
    ``arg.<name>``. Exceptions mark the span as error and propagate.

    Args:
        operation_name: Span name (defaults to module.funcname).
        attributes: Static attributes set on every span.

    Returns:
        Decorator for async callables.
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        tracer = trace.get_tracer(func.__module__)
        span_name = operation_name or f"{func.__module__}.{func.__qualname__}"
        signature = inspect.signature(func)

        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            with tracer.start_as_current_span(span_name, record_exception=False) as span:
                for key, value in {**(attributes or {}), **_argument_attributes(signature, args, kwargs)}.items():
                    span.set_attribute(key, value)
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    span.set_status(Status(StatusCode.ERROR, str(e)))
                    span.record_exception(e)
                    raise
                span.set_status(Status(StatusCode.OK))
                return result

        return wrapper

    return decorator


def add_span_attributes(**attributes: str | int | float | bool) -> None:
    """Add attributes to the current span (no-op outside a recording span)."""
    span = trace.get_current_span()
    if span.is_recording():
        for key, value in attributes.items():
            span.set_attribute(key, value)
