"""Cooperative cancellation for tracker operations.

Every public ``Tracker`` method accepts an optional :class:`CancelToken`.
Operations call :meth:`CancelToken.check` before touching the store and
once per entry file in loops; a read already in progress is never
interrupted.
"""

from __future__ import annotations

import threading
import time
from typing import Optional

from ..exceptions import OperationCancelledError


class CancelToken:
    """Cancellation flag with an optional monotonic deadline.

    Usage::

        token = CancelToken(timeout=30)
        tracker.get_trend(branch="main", ctx=token)

        # from another thread
        token.cancel()
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self._event = threading.Event()
        self._deadline: Optional[float] = (
            time.monotonic() + timeout if timeout is not None else None
        )

    def cancel(self) -> None:
        """Request cancellation. Idempotent."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def check(self) -> None:
        """Raise if the token was cancelled or its deadline passed."""
        if self._event.is_set():
            raise OperationCancelledError("cancelled")
        if self.expired:
            raise OperationCancelledError("deadline exceeded")


def check_cancelled(ctx: Optional[CancelToken]) -> None:
    """No-op for ``None``, otherwise :meth:`CancelToken.check`."""
    if ctx is not None:
        ctx.check()
