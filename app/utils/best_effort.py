"""Try, log, continue: run side effects whose failure must not escalate."""

from collections.abc import Awaitable, Callable
from logging import getLogger

from app.configs import file_logger

logger = file_logger(getLogger(__name__))


async def best_effort[T, D](
    operation: str,
    action: Callable[..., Awaitable[T]],
    *args: object,
    default: D = None,
    **kwargs: object,
) -> T | D:
    """
    Await a fallible sub-operation, logging and swallowing its failure.

    Args:
        operation: Human readable name used in the log line.
        action: Coroutine function to call.
        *args: Positional arguments for ``action``.
        default: Value returned when ``action`` raises.
        **kwargs: Keyword arguments for ``action``.

    Returns:
        The result of ``action``, or ``default`` if it raised.
    """
    try:
        return await action(*args, **kwargs)
    except Exception as e:
        logger.warning("Best-effort operation '%s' failed: %s", operation, e, exc_info=True)
        return default
