"""Blocking calls bridged onto the event loop through daemon threads."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _call_soon(loop: asyncio.AbstractEventLoop, callback: Callable[..., Any], *args: Any) -> bool:
    try:
        loop.call_soon_threadsafe(callback, *args)
    except RuntimeError:
        # The loop is closed: the session already ended.
        logger.debug("Dropping result of %r, event loop is closed", callback)
        return False
    return True


async def run_in_daemon_thread(func: Callable[..., T], *args: Any) -> T:
    """Await a blocking call without tying interpreter shutdown to it.

    Unlike ``asyncio.to_thread`` the worker is a daemon thread, so a stream
    or prompt that is still blocked when ``asyncio.run`` returns is simply
    abandoned instead of stalling the default executor shutdown.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future = loop.create_future()

    def _settle(result: Any, error: BaseException | None) -> None:
        if future.done():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(result)

    def _target() -> None:
        try:
            result = func(*args)
        except Exception as e:
            _call_soon(loop, _settle, None, e)
            return
        _call_soon(loop, _settle, result, None)

    threading.Thread(target=_target, name="polywiki-blocking", daemon=True).start()
    return await future
