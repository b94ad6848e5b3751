"""Invoke helpers — call sync or async callables uniformly.

Handlers, validators, and validator hooks can each be ``def`` or
``async def``. This module keeps the sync/async check in one place.

Usage::

    from finch._internal.invoke import invoke

    result = await invoke(handler, **arguments)
"""

import inspect
from typing import Any


async def invoke(fn: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *fn* and await the result if it's awaitable."""
    result = fn(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
