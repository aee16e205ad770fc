"""One-shot manual-selection channel between the resolver and a UI."""

import asyncio
import threading
from typing import Optional

from ..exceptions import ManualSelectionTimeout
from ..utils.logging import get_logger
from .models import CandidateSong

logger = get_logger(__name__)


class ManualSelection:
    """Carries at most one user choice per resolution.

    ``open()`` arms the channel on the running loop, ``select()`` may be
    called from any thread, and ``wait()`` returns the choice or raises
    ``ManualSelectionTimeout``. Exactly one of the two happens: the first
    ``select()`` wins, later calls and calls after a timeout are ignored.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._future: Optional["asyncio.Future[CandidateSong]"] = None
        self._selected: Optional[CandidateSong] = None
        self._resolved = False

    @property
    def is_open(self) -> bool:
        with self._lock:
            return self._future is not None and not self._resolved

    def open(self) -> None:
        loop = asyncio.get_running_loop()
        with self._lock:
            self._loop = loop
            self._future = loop.create_future()
            self._selected = None
            self._resolved = False

    def select(self, candidate: CandidateSong) -> bool:
        """Deliver a choice. Returns False when the channel is not waiting."""
        with self._lock:
            if self._future is None or self._resolved:
                logger.debug(f"Ignoring selection of {candidate.id}: nothing is waiting")
                return False
            self._resolved = True
            self._selected = candidate
            future, loop = self._future, self._loop
        loop.call_soon_threadsafe(_deliver, future, candidate)
        return True

    async def wait(self, timeout: float) -> CandidateSong:
        with self._lock:
            future = self._future
        if future is None:
            raise RuntimeError("Selection channel is not open")
        try:
            return await asyncio.wait_for(future, timeout)
        except asyncio.TimeoutError:
            with self._lock:
                if self._selected is not None:
                    # select() won the race; its delivery was still queued
                    return self._selected
                self._resolved = True
            raise ManualSelectionTimeout(f"No selection within {timeout:g}s") from None
        finally:
            self.close()

    def close(self) -> None:
        """Disarm the channel; pending waiters are cancelled."""
        with self._lock:
            future = self._future
            self._future = None
            self._resolved = True
        if future is not None and not future.done():
            future.cancel()


def _deliver(future: "asyncio.Future[CandidateSong]", candidate: CandidateSong) -> None:
    if not future.done():
        future.set_result(candidate)
