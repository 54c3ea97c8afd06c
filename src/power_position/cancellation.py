"""Cancellable waits on the shared stop signal."""

import asyncio


async def wait_or_stop(stop_event: asyncio.Event | None, seconds: float) -> bool:
    """Sleep for ``seconds`` unless ``stop_event`` is set first.

    Returns:
        True if the stop signal fired during (or before) the wait.
    """
    if stop_event is None:
        await asyncio.sleep(seconds)
        return False
    if stop_event.is_set():
        return True
    try:
        await asyncio.wait_for(stop_event.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        return False
    return True
