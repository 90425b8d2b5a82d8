"""Callback dispatchers.

A dispatcher delivers validation callbacks on the host's callback context,
typically a UI or event-loop thread. Validation may run on a worker thread;
callbacks raised there are posted through the dispatcher.
"""

import asyncio
from typing import Callable, Protocol


class CallbackDispatcher(Protocol):
    """Protocol for delivering callbacks on the host's callback context."""

    def in_context(self) -> bool:
        """True if the current thread is the callback context."""
        ...

    def post(self, callback: Callable[[], None]) -> None:
        """Schedule `callback` to run on the callback context."""
        ...


class InlineDispatcher:
    """Runs callbacks immediately on whichever thread posts them.

    Suitable for hosts without a dedicated callback thread.
    """

    def in_context(self) -> bool:
        return True

    def post(self, callback: Callable[[], None]) -> None:
        callback()


class AsyncioDispatcher:
    """Delivers callbacks on an asyncio event loop.

    Example:
        validator = Validator(form, registry,
                              dispatcher=AsyncioDispatcher(asyncio.get_running_loop()))
    """

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self.loop = loop

    def in_context(self) -> bool:
        try:
            return asyncio.get_running_loop() is self.loop
        except RuntimeError:
            return False

    def post(self, callback: Callable[[], None]) -> None:
        self.loop.call_soon_threadsafe(callback)
