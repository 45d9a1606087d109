"""OpenTelemetry tracing decorators."""

import functools
import inspect
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

F = TypeVar("F", bound=Callable[..., Any])

AttributeValue = str | bool | int | float


def traced(
    span_name: str | None = None,
    attributes: Mapping[str, AttributeValue] | None = None,
    service_name: str = "walkin-pos",
) -> Callable[[F], F]:
    """Decorator to add OpenTelemetry tracing to a function.

    Creates a span around each call, tagged with ``attributes``. A falsy
    return value (a failed sync, a refused order) marks the span ``success=False``
    without an error status; exceptions are recorded and re-raised.

    Args:
        span_name: Name for the span (defaults to the function name)
        attributes: Static attributes set on every span
        service_name: Tracer name

    Returns:
        Decorated function with tracing

    Example:
        @traced("catalog.sync_items", attributes={"catalog.kind": "items"})
        async def sync_items(self) -> bool:
            ...
    """

    def decorator(func: F) -> F:
        name = span_name or func.__name__
        tracer = trace.get_tracer(service_name)
        static_attributes = dict(attributes or {})

        def _begin(span: Span) -> None:
            span.set_attribute("code.function", func.__qualname__)
            for key, value in static_attributes.items():
                span.set_attribute(key, value)

        def _finish(span: Span, result: Any) -> None:
            span.set_attribute("success", result is None or bool(result))

        def _fail(span: Span, e: Exception) -> None:
            span.set_attribute("success", False)
            span.set_attribute("error.type", type(e).__name__)
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            with tracer.start_as_current_span(name, record_exception=False) as span:
                _begin(span)
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _fail(span, e)
                    raise
                _finish(span, result)
                return result

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with tracer.start_as_current_span(name, record_exception=False) as span:
                _begin(span)
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    _fail(span, e)
                    raise
                _finish(span, result)
                return result

        if inspect.iscoroutinefunction(func):
            return async_wrapper  # type: ignore
        return sync_wrapper  # type: ignore

    return decorator
