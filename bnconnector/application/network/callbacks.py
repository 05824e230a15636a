"""
Calling conventions for connector operations.

Every connector operation is implemented once, as a coroutine. Callers
either await it (errors are raised) or pass a node-style callback
``callback(error, result)`` (errors are delivered, nothing is raised).
The adaptation happens here and nowhere else.
"""

import inspect
from typing import Any, Awaitable, Callable, Optional, TypeVar

T = TypeVar("T")

Callback = Callable[[Optional[BaseException], Any], Any]


async def maybe_await(value: Any) -> Any:
    """Return the value, awaiting it first if it is awaitable.

    Collaborators may be synchronous or asynchronous.
    """
    if inspect.isawaitable(value):
        return await value
    return value


async def _notify(callback: Callback, error: Optional[BaseException], result: Any) -> None:
    await maybe_await(callback(error, result))


async def complete(operation: Awaitable[T], callback: Optional[Callback] = None) -> Optional[T]:
    """Run an operation and report its outcome through the caller's channel.

    Args:
        operation: The coroutine implementing the operation.
        callback: Optional ``callback(error, result)``.

    Returns:
        The operation's result. With a callback, None on failure.

    Raises:
        Exception: The operation's error, unchanged, when no callback is given.
    """
    try:
        result = await operation
    except Exception as exc:
        if callback is None:
            raise
        await _notify(callback, exc, None)
        return None

    if callback is not None:
        await _notify(callback, None, result)
    return result
