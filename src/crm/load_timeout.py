# src/crm/load_timeout.py
"""Restartable one-shot load timer on the running event loop."""

from __future__ import annotations

import asyncio


class LoadTimeout:
    """Flags ``timed_out`` once ``timeout_ms`` passes after :meth:`start`.

    ``start`` re-arms the timer, ``stop`` disarms it without touching the
    flag, ``reset`` disarms and clears the flag.
    """

    def __init__(self, timeout_ms: int = 15_000) -> None:
        self.timeout_ms = timeout_ms
        self._handle: asyncio.TimerHandle | None = None
        self._expired = asyncio.Event()

    @property
    def timed_out(self) -> bool:
        return self._expired.is_set()

    @property
    def running(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        self.stop()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.timeout_ms / 1000, self._expire)

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def reset(self) -> None:
        self.stop()
        self._expired.clear()

    async def wait(self) -> None:
        """Block until the timer fires."""
        await self._expired.wait()

    def _expire(self) -> None:
        self._handle = None
        self._expired.set()
