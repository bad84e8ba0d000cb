"""Single-slot change signal between watch threads and the UI."""

from __future__ import annotations

import contextlib
import queue


class ChangeChannel:
    """Receive side of a ChangeNotifier.

    Receiving consumes the pending marker, so one receive covers every
    change signalled since the previous receive.
    """

    def __init__(self, slot: queue.Queue[None]) -> None:
        self._slot = slot

    def wait(self, timeout: float | None = None) -> bool:
        """Block until a change is pending or ``timeout`` elapses.

        Returns:
            True if a change marker was consumed.
        """
        try:
            self._slot.get(timeout=timeout)
        except queue.Empty:
            return False
        return True

    def poll(self) -> bool:
        """Consume a pending change marker without blocking."""
        try:
            self._slot.get_nowait()
        except queue.Empty:
            return False
        return True


class ChangeNotifier:
    """Coalescing "something changed" signal with capacity one.

    ``signal`` never blocks: while a marker is pending further signals are
    dropped, so a burst of watch events costs the consumer a single wake-up.
    """

    def __init__(self) -> None:
        self._slot: queue.Queue[None] = queue.Queue(maxsize=1)
        self._channel = ChangeChannel(self._slot)

    def signal(self) -> None:
        with contextlib.suppress(queue.Full):
            self._slot.put_nowait(None)

    def channel(self) -> ChangeChannel:
        """Receive-only handle for the consumer."""
        return self._channel

    @property
    def pending(self) -> bool:
        """Whether a marker is waiting to be received."""
        return self._slot.full()
