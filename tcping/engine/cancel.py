# tcping/engine/cancel.py
import socket
import threading
from typing import Optional


class CancelToken:
    """
    One-shot cancellation shared by the loop, the prober and the coordinator.

    Besides the Event, the token owns a socket pair whose read end becomes
    readable on cancel, so a connect blocked in select() wakes up at once.
    """

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._rsock, self._wsock = socket.socketpair()
        self._rsock.setblocking(False)
        self._wsock.setblocking(False)

    def cancel(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            if self._wsock is not None:
                self._wsock.send(b"\0")

    def is_set(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Sleep up to timeout seconds; True if cancelled before it elapsed."""
        return self._event.wait(timeout)

    def fileno(self) -> int:
        return self._rsock.fileno()

    def close(self) -> None:
        with self._lock:
            for s in (self._rsock, self._wsock):
                if s is not None:
                    s.close()
            self._wsock = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
