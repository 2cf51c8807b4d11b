"""
Callback-style completion for the store's coroutine methods.

Session middlewares written against callback APIs pass a completion
function receiving ``(error, result)``. Methods decorated with
:func:`optional_callback` accept such a function through the ``callback``
keyword; without it they return the result or raise as usual.
"""

import functools
import inspect
from typing import Any, Awaitable, Callable, Optional, TypeVar

T = TypeVar("T")

Callback = Callable[[Optional[BaseException], Any], Any]


async def complete(
    callback: Optional[Callback],
    error: Optional[Exception],
    result: Any = None,
) -> Any:
    """
    Deliver an outcome either to ``callback`` or to the awaiting caller.

    With a callback, it is invoked as ``callback(error, result)`` and its
    return value (awaited if needed) is returned. Without one, ``error``
    is raised if set, otherwise ``result`` is returned.
    """
    if callback is not None:
        outcome = callback(error, result)
        if inspect.isawaitable(outcome):
            outcome = await outcome
        return outcome
    if error is not None:
        raise error
    return result


def optional_callback(
    func: Callable[..., Awaitable[T]]
) -> Callable[..., Awaitable[Any]]:
    """
    Decorator adding the ``callback`` keyword argument to a coroutine method.

    Example usage:
        @optional_callback
        async def length(self) -> int:
            ...

        count = await store.length()
        await store.length(callback=lambda err, count: ...)
    """
    @functools.wraps(func)
    async def wrapper(*args: Any, callback: Optional[Callback] = None, **kwargs: Any) -> Any:
        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            if callback is None:
                raise
            return await complete(callback, e)
        return await complete(callback, None, result)

    return wrapper
