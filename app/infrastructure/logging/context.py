"""Dispatch context binding for structured logging.

Binds dispatch-scoped context (correlation ID, provider, destination) so
every log entry emitted while a notification is being delivered can be
tied back to the same dispatch.

Usage:
    from infrastructure.logging import bind_request_context

    with bind_request_context(provider="slack", channel="C123"):
        logger.info("dispatching_notification")

Dependencies:
    - structlog.contextvars
"""

import uuid
from contextlib import contextmanager
from typing import Optional, Any, Generator
import structlog


@contextmanager
def bind_request_context(
    correlation_id: Optional[str] = None,
    **extra_context: Any,
) -> Generator[str, None, None]:
    """Bind dispatch-scoped context to all logs within the context manager.

    Args:
        correlation_id: Unique dispatch identifier. Auto-generated if not provided.
        **extra_context: Additional key-value pairs to include in logs.
            ``None`` values are skipped.

    Yields:
        The correlation ID bound for the block.

    Example:
        with bind_request_context(provider="messaging_api") as correlation_id:
            outcome = dispatcher.deliver(...)
    """
    context: dict[str, Any] = {
        "correlation_id": correlation_id or str(uuid.uuid4()),
    }
    context.update({k: v for k, v in extra_context.items() if v is not None})

    structlog.contextvars.bind_contextvars(**context)
    try:
        yield context["correlation_id"]
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from the logging context."""
    ctx = structlog.contextvars.get_contextvars()
    return ctx.get("correlation_id")


def clear_request_context() -> None:
    """Clear all dispatch-scoped context from the logging context."""
    structlog.contextvars.clear_contextvars()
