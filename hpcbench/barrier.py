"""A reusable thread barrier that can be explicitly torn down."""

from __future__ import annotations

import threading


class BarrierError(RuntimeError):
    """Raised when a barrier is used after it was destroyed, or destroyed while in use."""


class Barrier:
    """Blocks callers of wait() until a fixed number of threads have arrived."""

    def __init__(self, parties: int) -> None:
        if parties < 1:
            raise ValueError("a barrier needs at least one party")
        self._parties = parties
        self._left = parties
        self._cycle = 0
        self._valid = True
        self._cond = threading.Condition()

    @property
    def parties(self) -> int:
        """Number of threads required to release the barrier."""
        return self._parties

    @property
    def n_waiting(self) -> int:
        """Number of threads currently blocked in wait()."""
        with self._cond:
            return self._parties - self._left

    def wait(self) -> bool:
        """Block until all parties arrive; return True in the one thread that released them."""
        if not self._valid:
            raise BarrierError("barrier has been destroyed")
        with self._cond:
            cycle = self._cycle
            self._left -= 1
            if self._left == 0:
                self._left = self._parties
                self._cycle ^= 1
                self._cond.notify_all()
                return True
            self._cond.wait_for(lambda: self._cycle != cycle)
            return False

    def destroy(self) -> None:
        """Invalidate the barrier; fails if threads are waiting or it is already destroyed."""
        if not self._cond.acquire(blocking=False):
            raise BarrierError("barrier is busy")
        try:
            if self._left != self._parties:
                raise BarrierError("barrier is busy")
            if not self._valid:
                raise BarrierError("barrier has been destroyed")
            self._valid = False
        finally:
            self._cond.release()