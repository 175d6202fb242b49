# tcping/engine/state.py
import threading
from dataclasses import dataclass


@dataclass(frozen=True)
class StatsSnapshot:
    sent: int
    responded: int
    min_ms: float
    max_ms: float
    avg_ms: float

    @property
    def lost(self) -> int:
        return self.sent - self.responded

    @property
    def loss_pct(self) -> float:
        if self.sent == 0:
            return 0.0
        return self.lost / self.sent * 100


class Statistics:
    """Running totals for one run. Safe to update from several threads."""

    def __init__(self):
        self._lock = threading.Lock()
        self.sent = 0
        self.responded = 0
        self.min_ms = 0.0
        self.max_ms = 0.0
        self.total_ms = 0.0

    def update(self, elapsed_ms: float, success: bool) -> None:
        with self._lock:
            self.sent += 1
            if not success:
                return

            self.responded += 1
            self.total_ms += elapsed_ms

            # first reply seeds the range; min stays meaningless until then
            if self.responded == 1:
                self.min_ms = elapsed_ms
                self.max_ms = elapsed_ms
                return

            if elapsed_ms < self.min_ms:
                self.min_ms = elapsed_ms
            if elapsed_ms > self.max_ms:
                self.max_ms = elapsed_ms

    def snapshot(self) -> StatsSnapshot:
        with self._lock:
            avg = self.total_ms / self.responded if self.responded else 0.0
            return StatsSnapshot(
                sent=self.sent,
                responded=self.responded,
                min_ms=self.min_ms,
                max_ms=self.max_ms,
                avg_ms=avg,
            )
