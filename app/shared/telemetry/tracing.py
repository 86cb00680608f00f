"""Span helpers for the multi-step account operations (deletion, provisioning)."""

import inspect
from collections.abc import Awaitable, Callable, Iterable
from functools import wraps
from typing import Any, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from app.domain.value_objects.core import DocumentRef

T = TypeVar("T")

_tracer = trace.get_tracer("adalert.settings")


def _attribute_value(value: Any) -> str | int | float | bool:
    if isinstance(value, DocumentRef):
        return value.path
    if isinstance(value, (bool, int, float, str)):
        return value
    return str(value)


def traced(
    operation_name: str,
    record_args: Iterable[str] = ("company_admin",),
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Run a coroutine method inside a span named ``operation_name``.

    Only the arguments named in ``record_args`` become span attributes
    (``arg.<name>``); card data and emails never reach the exporter.
    Exceptions mark the span as failed and propagate unchanged.
    """
    recorded = tuple(record_args)

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        signature = inspect.signature(func)

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            bound = signature.bind_partial(*args, **kwargs)
            with _tracer.start_as_current_span(operation_name) as span:
                for name in recorded:
                    if bound.arguments.get(name) is not None:
                        span.set_attribute(f"arg.{name}", _attribute_value(bound.arguments[name]))
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


def add_span_event(name: str, attributes: dict[str, Any] | None = None) -> None:
    """Mark a completed step on the current span (no-op when not recording)."""
    span = trace.get_current_span()
    if span.is_recording():
        span.add_event(
            name,
            attributes={k: _attribute_value(v) for k, v in (attributes or {}).items()},
        )
