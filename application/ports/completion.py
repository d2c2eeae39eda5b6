"""
Completion handler contract shared by the cloud services.

A handler receives ``(response, None)`` on success and ``(None, error)`` on
failure. Plain callables and coroutine functions are both accepted.
"""
from __future__ import annotations

import inspect
from typing import Any, Callable, Optional


CompletionHandler = Callable[[Optional[Any], Optional[BaseException]], Any]


async def deliver(
    completion: Optional[CompletionHandler],
    response: Optional[Any],
    error: Optional[BaseException],
) -> None:
    if completion is None:
        return
    result = completion(response, error)
    if inspect.isawaitable(result):
        await result


__all__ = ["CompletionHandler", "deliver"]
