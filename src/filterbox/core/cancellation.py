"""Cooperative cancellation for suggestion fetches.

An :class:`AbortController` owns one :class:`AbortSignal`. Fetch functions
receive the signal and either poll ``signal.aborted`` or call
``signal.throw_if_aborted()`` after each await. Aborting is idempotent.
"""

import asyncio
from typing import Callable

from filterbox.domain.errors import AbortError
from filterbox.logger import get_logger

logger = get_logger("cancellation")

__all__ = ["AbortController", "AbortSignal", "AbortError"]


class AbortSignal:
    """Read side of a cancellation token."""

    def __init__(self) -> None:
        self._aborted = False
        self._callbacks: list[Callable[[], None]] = []
        self._event: asyncio.Event | None = None

    @property
    def aborted(self) -> bool:
        return self._aborted

    def add_listener(self, callback: Callable[[], None]) -> None:
        """Call ``callback`` once when the signal aborts (immediately if it already has)."""
        if self._aborted:
            callback()
        else:
            self._callbacks.append(callback)

    def throw_if_aborted(self) -> None:
        if self._aborted:
            raise AbortError()

    async def wait(self) -> None:
        """Suspend until the signal aborts."""
        if self._aborted:
            return
        if self._event is None:
            self._event = asyncio.Event()
        await self._event.wait()

    def _abort(self) -> None:
        if self._aborted:
            return
        self._aborted = True
        if self._event is not None:
            self._event.set()
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.opt(exception=e).error(f"Abort listener failed: {e}")


class AbortController:
    """Write side of a cancellation token."""

    def __init__(self) -> None:
        self.signal = AbortSignal()

    def abort(self) -> None:
        self.signal._abort()
