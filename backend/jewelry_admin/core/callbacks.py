"""Helpers for view callbacks that may be plain functions or coroutines."""

import inspect
from typing import Any, Callable, Optional


async def invoke(callback: Optional[Callable[..., Any]], *args: Any) -> Any:
    """Call callback with args, awaiting the result when it is awaitable."""
    if callback is None:
        return None
    result = callback(*args)
    if inspect.isawaitable(result):
        return await result
    return result
